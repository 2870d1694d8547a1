"""JSON loader for arrays of records."""

import json
import logging
from typing import Any, Dict, Iterator, List, Optional

import pandas as pd

from benford_analyzer.core.exceptions import DataLoadError
from benford_analyzer.loaders.base import DataLoader
from benford_analyzer.loaders.dataset import Dataset

logger = logging.getLogger(__name__)


class JSONLoader(DataLoader):
    """
    Loader for JSON documents.

    The document must be an array of objects, or a single object which is
    treated as a one-row dataset. Values are kept exactly as decoded so that
    numeric strings stay strings.
    """

    def read_records(self) -> List[Dict[str, Any]]:
        """
        Decode the file into row dictionaries.

        Raises:
            DataLoadError: If the file is not valid JSON or not record shaped
        """
        encoding = self.kwargs.get('encoding') or 'utf-8'
        try:
            with open(self.file_path, 'r', encoding=encoding) as f:
                document = json.load(f)
        except json.JSONDecodeError as e:
            raise DataLoadError(
                f"Invalid JSON in {self.file_path}: {e.msg}",
                file_path=str(self.file_path),
                line_number=e.lineno,
                original_exception=e
            )
        except UnicodeDecodeError as e:
            raise DataLoadError(
                f"Encoding error in {self.file_path}: cannot decode file as {encoding}",
                file_path=str(self.file_path),
                original_exception=e
            )

        if isinstance(document, dict):
            return [document]
        if isinstance(document, list):
            if not all(isinstance(item, dict) for item in document):
                raise DataLoadError(
                    f"JSON array in {self.file_path} must contain only objects",
                    file_path=str(self.file_path)
                )
            return document

        raise DataLoadError(
            f"JSON document in {self.file_path} must be an object or an array of objects",
            file_path=str(self.file_path)
        )

    def load(self) -> Iterator[pd.DataFrame]:
        yield pd.DataFrame(self.read_records())

    def load_dataset(self, name: Optional[str] = None) -> Dataset:
        records = self.read_records()
        logger.debug(f"Read {len(records)} records from {self.file_path}")
        return Dataset.from_records(name or self.file_path.name, records, source_path=str(self.file_path))
