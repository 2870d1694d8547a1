"""
Result classes for Benford analyses.

An ``AnalysisSummary`` is created once per analysis and never mutated. The
dictionary form produced by ``to_dict`` is what the history store persists and
what JSON exports embed, so ``from_dict(to_dict(s)) == s`` must hold.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

from benford_analyzer.core.constants import DEFAULT_NEGATIVE_HANDLING
from benford_analyzer.core.exceptions import ParameterValidationError


class RiskLevel(Enum):
    """Categorical anomaly risk of an analysis."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _RISK_RANK[self]

    @classmethod
    def parse(cls, value: Union[str, "RiskLevel"]) -> "RiskLevel":
        """Coerce a string such as ``'HIGH'`` or ``'high'`` to a RiskLevel."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ParameterValidationError(
                f"Invalid risk level: {value}. Must be one of: low, medium, high",
                parameter='risk',
                value=value
            )


_RISK_RANK = {RiskLevel.LOW: 0, RiskLevel.MEDIUM: 1, RiskLevel.HIGH: 2}


class NegativeHandling(Enum):
    """How negative values enter the digit tally."""
    ABSOLUTE = "absolute"
    EXCLUDE = "exclude"

    @property
    def description(self) -> str:
        if self is NegativeHandling.ABSOLUTE:
            return 'Convert to absolute value (recommended for returns and losses)'
        return 'Exclude negative values from the analysis'

    @classmethod
    def parse(cls, value: Union[str, "NegativeHandling"]) -> "NegativeHandling":
        """Coerce ``'absolute'`` / ``'exclude'`` to a NegativeHandling member."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ParameterValidationError(
                f"Invalid negative value handling: {value}. Must be 'absolute' or 'exclude'",
                parameter='negative_handling',
                value=value
            )


@dataclass(frozen=True)
class AnalysisOptions:
    """
    Options controlling value normalization.

    Attributes:
        ignore_zeros: Zeros never carry a leading digit and are always
            excluded; the flag is kept for configuration compatibility.
        negative_handling: Convert negatives to absolute values or drop them.
    """
    ignore_zeros: bool = True
    negative_handling: NegativeHandling = NegativeHandling(DEFAULT_NEGATIVE_HANDLING)

    def __post_init__(self):
        object.__setattr__(self, 'negative_handling', NegativeHandling.parse(self.negative_handling))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'ignore_zeros': self.ignore_zeros,
            'negative_handling': self.negative_handling.value,
        }


@dataclass(frozen=True)
class BenfordResult:
    """
    Observed versus expected frequency of one leading digit.

    Attributes:
        digit: Leading digit, 1-9
        observed_count: Valid values whose leading digit is ``digit``
        observed_freq: observed_count / valid count (0 when nothing was counted)
        theoretical_freq: log10(1 + 1/digit)
        difference: observed_freq - theoretical_freq
    """
    digit: int
    observed_count: int
    observed_freq: float
    theoretical_freq: float
    difference: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            'digit': self.digit,
            'observed_count': self.observed_count,
            'observed_freq': self.observed_freq,
            'theoretical_freq': self.theoretical_freq,
            'difference': self.difference,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BenfordResult":
        return cls(
            digit=int(data['digit']),
            observed_count=int(data['observed_count']),
            observed_freq=float(data['observed_freq']),
            theoretical_freq=float(data['theoretical_freq']),
            difference=float(data['difference']),
        )


@dataclass(frozen=True)
class AnalysisSummary:
    """
    Outcome of one Benford analysis of one column.

    ``total_count`` is the number of valid observations that produced a
    leading digit, not the number of rows in the dataset.
    """
    id: str
    name: str
    timestamp: int
    column_name: str
    total_count: int
    chi_square: float
    deviation_score: float
    risk: RiskLevel
    results: Tuple[BenfordResult, ...] = field(default_factory=tuple)

    @property
    def created_at(self) -> datetime:
        """Creation time as an aware UTC datetime."""
        return datetime.fromtimestamp(self.timestamp / 1000, tz=timezone.utc)

    def result_for(self, digit: int) -> Optional[BenfordResult]:
        for result in self.results:
            if result.digit == digit:
                return result
        return None

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert summary to a JSON-compatible dictionary.

        Returns:
            Dictionary with scalar fields, the risk value and nine digit results
        """
        return {
            'id': self.id,
            'name': self.name,
            'timestamp': self.timestamp,
            'column_name': self.column_name,
            'total_count': self.total_count,
            'chi_square': self.chi_square,
            'deviation_score': self.deviation_score,
            'risk': self.risk.value,
            'results': [result.to_dict() for result in self.results],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnalysisSummary":
        """
        Rebuild a summary from ``to_dict`` output.

        Raises:
            KeyError: If a required field is missing
            ValueError: If a field has the wrong type
            ParameterValidationError: If the risk value is unknown
        """
        return cls(
            id=str(data['id']),
            name=str(data['name']),
            timestamp=int(data['timestamp']),
            column_name=str(data['column_name']),
            total_count=int(data['total_count']),
            chi_square=float(data['chi_square']),
            deviation_score=float(data['deviation_score']),
            risk=RiskLevel.parse(data['risk']),
            results=tuple(BenfordResult.from_dict(item) for item in data['results']),
        )
