"""Abstract base class for dataset loaders."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

import pandas as pd

from benford_analyzer.core.constants import DEFAULT_CHUNK_SIZE
from benford_analyzer.core.exceptions import DataFileNotFoundError
from benford_analyzer.loaders.dataset import Dataset


class DataLoader(ABC):
    """
    Base class for file loaders.

    Subclasses implement ``load`` to yield DataFrame chunks; ``load_dataset``
    collects them into a Dataset for the analysis engine.
    """

    def __init__(self, file_path: str, chunk_size: int = DEFAULT_CHUNK_SIZE, **kwargs):
        """
        Args:
            file_path: Path to the data file
            chunk_size: Rows per chunk for formats that support chunked reads
            **kwargs: Format specific options

        Raises:
            DataFileNotFoundError: If the file does not exist
        """
        self.file_path = Path(file_path)
        self.chunk_size = chunk_size
        self.kwargs = kwargs

        if not self.file_path.is_file():
            raise DataFileNotFoundError(str(file_path))

    @abstractmethod
    def load(self) -> Iterator[pd.DataFrame]:
        """Yield the file contents as DataFrame chunks."""

    def load_dataset(self, name: Optional[str] = None) -> Dataset:
        """
        Load the whole file into a Dataset.

        Args:
            name: Dataset name; defaults to the file name

        Returns:
            Dataset
        """
        chunks = list(self.load())
        if len(chunks) > 1:
            frame = pd.concat(chunks, ignore_index=True)
        elif chunks:
            frame = chunks[0]
        else:
            frame = pd.DataFrame()
        return Dataset.from_dataframe(name or self.file_path.name, frame, source_path=str(self.file_path))

    def get_file_size(self) -> int:
        return self.file_path.stat().st_size

    def is_empty(self) -> bool:
        return self.get_file_size() == 0

    def get_metadata(self) -> Dict[str, Any]:
        """Basic file metadata for reports."""
        size = self.get_file_size()
        return {
            'file_path': str(self.file_path),
            'file_size_bytes': size,
            'file_size_mb': round(size / (1024 * 1024), 2),
            'is_empty': size == 0,
        }
