"""Loader selection by format or file extension."""

from pathlib import Path
from typing import Dict, Optional, Type

from benford_analyzer.core.constants import FILE_EXTENSION_MAP, SUPPORTED_FORMATS
from benford_analyzer.core.exceptions import UnsupportedFormatError
from benford_analyzer.loaders.base import DataLoader
from benford_analyzer.loaders.csv_loader import CSVLoader
from benford_analyzer.loaders.dataset import Dataset
from benford_analyzer.loaders.excel_loader import ExcelLoader
from benford_analyzer.loaders.json_loader import JSONLoader


class LoaderFactory:
    """Create the loader matching a file."""

    _loaders: Dict[str, Type[DataLoader]] = {
        'csv': CSVLoader,
        'excel': ExcelLoader,
        'json': JSONLoader,
    }

    @staticmethod
    def infer_format(file_path: str) -> str:
        """
        Map a file extension to a loader format.

        Raises:
            UnsupportedFormatError: If the extension is not supported
        """
        suffix = Path(file_path).suffix.lower()
        try:
            return FILE_EXTENSION_MAP[suffix]
        except KeyError:
            raise UnsupportedFormatError(
                file_path,
                format=suffix or None,
                supported_formats=sorted(FILE_EXTENSION_MAP)
            )

    @classmethod
    def create_loader(cls, file_path: str, format: Optional[str] = None, **kwargs) -> DataLoader:
        """
        Create a loader for ``file_path``.

        Args:
            file_path: Data file
            format: 'csv', 'excel' or 'json'; inferred from the extension when None
            **kwargs: Loader options (delimiter, encoding, sheet)

        Returns:
            DataLoader instance

        Raises:
            UnsupportedFormatError: Unknown format or extension
            DataFileNotFoundError: File does not exist
        """
        format_type = (format or cls.infer_format(file_path)).lower()
        loader_class = cls._loaders.get(format_type)
        if loader_class is None:
            raise UnsupportedFormatError(file_path, format=format_type, supported_formats=list(SUPPORTED_FORMATS))

        options = {key: value for key, value in kwargs.items() if value is not None}
        return loader_class(file_path, **options)


def load_dataset(file_path: str, format: Optional[str] = None, name: Optional[str] = None, **kwargs) -> Dataset:
    """Load ``file_path`` into a Dataset with the matching loader."""
    return LoaderFactory.create_loader(file_path, format=format, **kwargs).load_dataset(name)
