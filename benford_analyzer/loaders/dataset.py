"""
In-memory dataset handed to the analysis engine.

A Dataset is a list of row dictionaries plus the column list and the columns
that look numeric. Missing cells are stored as None.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

import pandas as pd

from benford_analyzer.core.constants import NUMERIC_DETECTION_SAMPLE_ROWS
from benford_analyzer.core.engine import parse_number_prefix


def find_numeric_columns(
    rows: Sequence[Mapping[str, Any]],
    columns: Iterable[str],
    sample_rows: int = NUMERIC_DETECTION_SAMPLE_ROWS
) -> List[str]:
    """
    Return the columns holding at least one number-like value.

    Only the first ``sample_rows`` rows are inspected. A value is number-like
    when it is not None and its text starts with a number.

    Args:
        rows: Dataset rows
        columns: Candidate column names, order preserved in the result
        sample_rows: Number of leading rows to inspect

    Returns:
        Numeric column names
    """
    sample = rows[:sample_rows]
    numeric = []
    for column in columns:
        for row in sample:
            value = row.get(column)
            if value is None or isinstance(value, bool):
                continue
            if parse_number_prefix(str(value)) is not None:
                numeric.append(column)
                break
    return numeric


def dataframe_to_rows(frame: pd.DataFrame) -> List[Dict[str, Any]]:
    """Convert a DataFrame to row dictionaries with None for missing cells."""
    if frame.empty:
        return []
    cleaned = frame.astype(object).where(pd.notna(frame), None)
    return cleaned.to_dict(orient='records')


@dataclass
class Dataset:
    """
    Parsed tabular data.

    Attributes:
        name: Display name (defaults to the file name)
        rows: Row dictionaries
        columns: Column names in file order
        numeric_columns: Columns detected as numeric
        source_path: File the rows were read from, if any
    """
    name: str
    rows: List[Dict[str, Any]]
    columns: List[str]
    numeric_columns: List[str] = field(default_factory=list)
    source_path: Optional[str] = None

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @classmethod
    def from_records(
        cls,
        name: str,
        records: List[Dict[str, Any]],
        columns: Optional[List[str]] = None,
        source_path: Optional[str] = None
    ) -> "Dataset":
        """
        Build a Dataset from row dictionaries.

        When ``columns`` is not given, the keys of the first record are used.
        """
        if columns is None:
            columns = [str(key) for key in records[0].keys()] if records else []
        return cls(
            name=name,
            rows=records,
            columns=columns,
            numeric_columns=find_numeric_columns(records, columns),
            source_path=source_path,
        )

    @classmethod
    def from_dataframe(cls, name: str, frame: pd.DataFrame, source_path: Optional[str] = None) -> "Dataset":
        """Build a Dataset from a DataFrame with string column labels."""
        frame = frame.rename(columns=str)
        return cls.from_records(
            name,
            dataframe_to_rows(frame),
            columns=list(frame.columns),
            source_path=source_path,
        )

    def column_values(self, column: str) -> List[Any]:
        return [row.get(column) for row in self.rows]
