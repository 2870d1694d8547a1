"""Excel workbook loader (first sheet by default)."""

import logging
from typing import Iterator

import pandas as pd

from benford_analyzer.core.exceptions import DataLoadError
from benford_analyzer.loaders.base import DataLoader

logger = logging.getLogger(__name__)


class ExcelLoader(DataLoader):
    """
    Loader for .xlsx and .xls workbooks.

    Options:
        sheet: Sheet name or zero-based index (default: 0, the first sheet)
    """

    def load(self) -> Iterator[pd.DataFrame]:
        sheet = self.kwargs.get('sheet')
        if sheet is None:
            sheet = 0

        try:
            frame = pd.read_excel(self.file_path, sheet_name=sheet, header=0)
        except (ValueError, KeyError, OSError) as e:
            raise DataLoadError(
                f"Could not read sheet {sheet!r} of workbook {self.file_path}: {e}",
                file_path=str(self.file_path),
                original_exception=e
            )
        except ImportError as e:
            raise DataLoadError(
                f"Missing Excel engine for {self.file_path.suffix} files: {e}",
                file_path=str(self.file_path),
                original_exception=e
            )

        logger.debug(f"Read {len(frame)} rows from sheet {sheet!r} of {self.file_path}")
        yield frame.dropna(how='all')
