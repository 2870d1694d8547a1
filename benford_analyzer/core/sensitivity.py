"""
Sensitivity levels and per-digit deviation flags.

Sensitivity only decides how individual digit deviations are highlighted in
reports and terminal output. Risk classification of a summary never depends
on it.
"""

from enum import Enum
from typing import Dict, Iterable, Union

from benford_analyzer.core.constants import (
    SENSITIVITY_THRESHOLDS,
    MEDIUM_DEVIATION_RATIO,
    INFO_DEVIATION_RATIO,
)
from benford_analyzer.core.exceptions import ParameterValidationError
from benford_analyzer.core.results import BenfordResult


class SensitivityLevel(Enum):
    """Threshold presets for per-digit deviation flags."""
    STRICT = "strict"
    STANDARD = "standard"
    LOOSE = "loose"

    @property
    def threshold(self) -> float:
        """Absolute frequency difference above which a digit is flagged high."""
        return SENSITIVITY_THRESHOLDS[self.value]

    @property
    def label(self) -> str:
        return f"{self.value.title()} ({self.threshold:.0%})"

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]

    @classmethod
    def parse(cls, value: Union[str, "SensitivityLevel"]) -> "SensitivityLevel":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ParameterValidationError(
                f"Invalid sensitivity level: {value}. Must be one of: "
                f"{', '.join(level.value for level in cls)}",
                parameter='sensitivity',
                value=value
            )


_DESCRIPTIONS = {
    SensitivityLevel.STRICT: 'Flags even minor inconsistencies.',
    SensitivityLevel.STANDARD: 'Recommended for most datasets.',
    SensitivityLevel.LOOSE: 'Only flags major outliers.',
}


class DeviationLevel(Enum):
    """Highlight level of a single digit deviation."""
    HIGH = "high"
    MEDIUM = "medium"
    INFO = "info"
    NORMAL = "normal"


def classify_deviation(difference: float, level: Union[SensitivityLevel, str]) -> DeviationLevel:
    """
    Classify an observed-minus-expected frequency difference.

    Args:
        difference: Signed frequency difference of one digit
        level: Sensitivity preset

    Returns:
        HIGH above the threshold, MEDIUM above 70% of it, INFO above 40%,
        otherwise NORMAL
    """
    threshold = SensitivityLevel.parse(level).threshold
    magnitude = abs(difference)

    if magnitude > threshold:
        return DeviationLevel.HIGH
    if magnitude > threshold * MEDIUM_DEVIATION_RATIO:
        return DeviationLevel.MEDIUM
    if magnitude > threshold * INFO_DEVIATION_RATIO:
        return DeviationLevel.INFO
    return DeviationLevel.NORMAL


def flag_deviations(
    results: Iterable[BenfordResult],
    level: Union[SensitivityLevel, str]
) -> Dict[int, DeviationLevel]:
    """Map each digit of ``results`` to its deviation level."""
    sensitivity = SensitivityLevel.parse(level)
    return {result.digit: classify_deviation(result.difference, sensitivity) for result in results}
