"""CSV loader with delimiter and encoding detection."""

import csv
import logging
from typing import Iterator

import pandas as pd

from benford_analyzer.core.exceptions import DataLoadError
from benford_analyzer.loaders.base import DataLoader

logger = logging.getLogger(__name__)

CANDIDATE_ENCODINGS = ['utf-8', 'utf-8-sig', 'cp1252', 'latin-1']
CANDIDATE_DELIMITERS = ',\t|;:'


def detect_delimiter(file_path: str, sample_size: int = 8192) -> str:
    """
    Guess the delimiter of a delimited text file.

    Args:
        file_path: Path to the file
        sample_size: Number of characters sampled

    Returns:
        Detected delimiter, ',' when detection fails
    """
    for encoding in CANDIDATE_ENCODINGS:
        try:
            with open(file_path, 'r', newline='', encoding=encoding) as f:
                sample = f.read(sample_size)
        except UnicodeDecodeError:
            continue

        try:
            return csv.Sniffer().sniff(sample, delimiters=CANDIDATE_DELIMITERS).delimiter
        except csv.Error:
            # Single-column files and tiny samples cannot be sniffed
            return ','

    return ','


def detect_encoding(file_path: str) -> str:
    """Return the first candidate encoding that decodes the file's first 8KB."""
    for encoding in CANDIDATE_ENCODINGS:
        try:
            with open(file_path, 'r', encoding=encoding) as f:
                f.read(8192)
            return encoding
        except UnicodeDecodeError:
            continue
    return 'utf-8'


class CSVLoader(DataLoader):
    """
    Loader for CSV and other delimited text files.

    The first row is the header, blank lines are skipped and pandas infers
    column types, so numeric cells arrive as numbers and everything else as
    text.
    """

    def __init__(self, file_path: str, chunk_size: int = 50_000, **kwargs):
        super().__init__(file_path, chunk_size, **kwargs)

        if self.kwargs.get('delimiter') is None:
            self.kwargs['delimiter'] = detect_delimiter(file_path)
            if self.kwargs['delimiter'] != ',':
                logger.info(f"Auto-detected delimiter: {repr(self.kwargs['delimiter'])}")

        if self.kwargs.get('encoding') is None:
            self.kwargs['encoding'] = detect_encoding(file_path)
            if self.kwargs['encoding'] != 'utf-8':
                logger.info(f"Auto-detected encoding: {self.kwargs['encoding']}")

    def load(self) -> Iterator[pd.DataFrame]:
        """
        Read the file in chunks.

        Yields:
            DataFrame chunks; a single empty DataFrame for an empty file

        Raises:
            DataLoadError: On parse or decode failures
        """
        delimiter = self.kwargs['delimiter']
        encoding = self.kwargs['encoding']

        try:
            for chunk in pd.read_csv(
                self.file_path,
                delimiter=delimiter,
                encoding=encoding,
                header=0,
                skip_blank_lines=True,
                chunksize=self.chunk_size,
                low_memory=False,
            ):
                yield chunk

        except pd.errors.EmptyDataError:
            logger.warning(f"Empty CSV file: {self.file_path}")
            yield pd.DataFrame()

        except pd.errors.ParserError as e:
            error_msg = str(e)
            if "Expected" in error_msg and "fields" in error_msg:
                raise DataLoadError(
                    f"CSV parsing error in {self.file_path}: row has an inconsistent number of columns. "
                    f"The delimiter may be wrong (current: {repr(delimiter)}); "
                    f"try specifying --delimiter.",
                    file_path=str(self.file_path),
                    original_exception=e
                )
            raise DataLoadError(
                f"CSV parsing error in {self.file_path}: {error_msg}",
                file_path=str(self.file_path),
                original_exception=e
            )

        except UnicodeDecodeError as e:
            raise DataLoadError(
                f"Encoding error in {self.file_path}: cannot decode file as {encoding}. "
                f"Try specifying a different encoding (e.g. cp1252, latin-1).",
                file_path=str(self.file_path),
                original_exception=e
            )
