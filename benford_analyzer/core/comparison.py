"""Side-by-side comparison of two analyses."""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from benford_analyzer.core.constants import BENFORD_DIGITS, COMPARISON_HIGH_DELTA, COMPARISON_MEDIUM_DELTA
from benford_analyzer.core.engine import theoretical_frequency
from benford_analyzer.core.results import AnalysisSummary


@dataclass(frozen=True)
class DigitDelta:
    """Observed percentages of one digit in both analyses."""
    digit: int
    left_percent: float
    right_percent: float
    expected_percent: float
    delta: float
    level: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'digit': self.digit,
            'left_percent': self.left_percent,
            'right_percent': self.right_percent,
            'expected_percent': self.expected_percent,
            'delta': self.delta,
            'level': self.level,
        }


@dataclass(frozen=True)
class SummaryComparison:
    """
    Comparison of two analyses.

    Attributes:
        left: First analysis
        right: Second analysis
        deviation_delta: |left.deviation_score - right.deviation_score|
        higher_anomaly: 'left', 'right', or None when both scores are equal
        risk_consistent: True when both analyses share a risk level
        digit_deltas: Per-digit observed percentage gaps, digits 1-9
    """
    left: AnalysisSummary
    right: AnalysisSummary
    deviation_delta: float
    higher_anomaly: Optional[str]
    risk_consistent: bool
    digit_deltas: List[DigitDelta]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'left_id': self.left.id,
            'right_id': self.right.id,
            'deviation_delta': self.deviation_delta,
            'higher_anomaly': self.higher_anomaly,
            'risk_consistent': self.risk_consistent,
            'digit_deltas': [delta.to_dict() for delta in self.digit_deltas],
        }


def classify_percent_delta(delta: float) -> str:
    """Label a percentage-point gap as 'high' (> 5), 'medium' (> 2) or 'low'."""
    if delta > COMPARISON_HIGH_DELTA:
        return 'high'
    if delta > COMPARISON_MEDIUM_DELTA:
        return 'medium'
    return 'low'


def _observed_percent(summary: AnalysisSummary, digit: int) -> float:
    result = summary.result_for(digit)
    return result.observed_freq * 100 if result else 0.0


def compare_summaries(left: AnalysisSummary, right: AnalysisSummary) -> SummaryComparison:
    """
    Compare two analyses digit by digit.

    Args:
        left: First analysis
        right: Second analysis

    Returns:
        SummaryComparison
    """
    digit_deltas = []
    for digit in BENFORD_DIGITS:
        left_percent = _observed_percent(left, digit)
        right_percent = _observed_percent(right, digit)
        delta = abs(left_percent - right_percent)
        digit_deltas.append(DigitDelta(
            digit=digit,
            left_percent=left_percent,
            right_percent=right_percent,
            expected_percent=theoretical_frequency(digit) * 100,
            delta=delta,
            level=classify_percent_delta(delta),
        ))

    if left.deviation_score > right.deviation_score:
        higher_anomaly = 'left'
    elif right.deviation_score > left.deviation_score:
        higher_anomaly = 'right'
    else:
        higher_anomaly = None

    return SummaryComparison(
        left=left,
        right=right,
        deviation_delta=abs(left.deviation_score - right.deviation_score),
        higher_anomaly=higher_anomaly,
        risk_consistent=left.risk is right.risk,
        digit_deltas=digit_deltas,
    )
