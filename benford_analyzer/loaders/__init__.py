"""Dataset loaders for CSV, Excel and JSON files."""

from benford_analyzer.loaders.dataset import Dataset, find_numeric_columns
from benford_analyzer.loaders.factory import LoaderFactory, load_dataset

__all__ = ['Dataset', 'find_numeric_columns', 'LoaderFactory', 'load_dataset']
