"""
Benford first-digit analysis engine.

Takes a sequence of rows, extracts the leading significant digit of one
column, compares the empirical digit distribution with Benford's law and
classifies the result into a risk level.

Pipeline per row:
    raw cell -> parse_numeric_value -> extract_leading_digit -> tally

The engine is stateless. Id and clock sources are injected so results are
reproducible in tests.
"""

import logging
import math
import numbers
import re
import time
import uuid
from typing import Any, Callable, Dict, Iterable, List, Mapping, NamedTuple, Optional, Sequence, Tuple, Union

from scipy import stats

from benford_analyzer.core.constants import (
    BENFORD_DIGITS,
    CHI_SQUARE_DEGREES_OF_FREEDOM,
    DEVIATION_SCALE_FACTOR,
    MAX_DEVIATION_SCORE,
    LARGE_SAMPLE_THRESHOLD,
    MEDIUM_SAMPLE_THRESHOLD,
    LARGE_SAMPLE_HIGH_RISK,
    LARGE_SAMPLE_MEDIUM_RISK,
    MEDIUM_SAMPLE_HIGH_RISK,
    MEDIUM_SAMPLE_MEDIUM_RISK,
    CHI_SQUARE_HIGH_RISK,
    CHI_SQUARE_MEDIUM_RISK,
)
from benford_analyzer.core.exceptions import ColumnNotFoundError, ParameterValidationError
from benford_analyzer.core.results import (
    AnalysisOptions,
    AnalysisSummary,
    BenfordResult,
    NegativeHandling,
    RiskLevel,
)

logger = logging.getLogger(__name__)

Number = Union[int, float]
Row = Mapping[str, Any]

# Leading numeric prefix: optional sign, digits with optional fraction, optional exponent
_NUMERIC_PREFIX = re.compile(r'[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?')
_NON_DIGIT_CHARS = re.compile(r'[^0-9.]')
_SIGNIFICANT_DIGIT = re.compile(r'[1-9]')


class DigitTally(NamedTuple):
    """Leading-digit counts for one column."""
    counts: Dict[int, int]
    valid_count: int
    rows_scanned: int


def parse_number_prefix(text: str) -> Optional[float]:
    """
    Parse the leading numeric prefix of a string.

    Leading whitespace is ignored and trailing garbage is tolerated, so
    ``"12abc"`` parses to 12.0 while ``"$100"`` and ``"abc"`` do not parse.

    Args:
        text: Raw cell text

    Returns:
        Parsed float, or None when the text does not start with a number
    """
    match = _NUMERIC_PREFIX.match(text.lstrip())
    if match is None:
        return None
    try:
        return float(match.group())
    except (OverflowError, ValueError):
        return None


def extract_leading_digit(value: Any) -> Optional[int]:
    """
    Return the first significant digit (1-9) of a value.

    Every character other than ``0-9`` and ``.`` is stripped first, which
    removes signs, currency symbols and thousands separators.

    Examples:
        >>> extract_leading_digit(0.0045)
        4
        >>> extract_leading_digit("$1,234")
        1
        >>> extract_leading_digit(0) is None
        True
    """
    digits = _NON_DIGIT_CHARS.sub('', str(value))
    match = _SIGNIFICANT_DIGIT.search(digits)
    return int(match.group()) if match else None


def parse_numeric_value(
    raw: Any,
    negative_handling: Union[NegativeHandling, str] = NegativeHandling.ABSOLUTE
) -> Optional[Number]:
    """
    Normalize a raw cell to a positive number or None.

    Args:
        raw: Cell value (number, text or None)
        negative_handling: ``absolute`` keeps |x| for negatives, ``exclude`` drops them

    Returns:
        Positive finite number, or None when the cell cannot contribute a
        leading digit (missing, boolean, unparsable, NaN, infinite, zero,
        or negative under ``exclude``)
    """
    handling = NegativeHandling.parse(negative_handling)

    if raw is None or isinstance(raw, bool):
        return None

    if isinstance(raw, numbers.Integral):
        number = int(raw)
    elif isinstance(raw, numbers.Real):
        number = float(raw)
    else:
        number = parse_number_prefix(str(raw))
        if number is None:
            return None

    if isinstance(number, float) and (math.isnan(number) or math.isinf(number)):
        return None
    if number == 0:
        return None
    if number < 0:
        if handling is NegativeHandling.EXCLUDE:
            return None
        return abs(number)
    return number


def tally_leading_digits(
    rows: Iterable[Row],
    column_name: str,
    negative_handling: Union[NegativeHandling, str] = NegativeHandling.ABSOLUTE
) -> DigitTally:
    """
    Count leading digits of one column across all rows.

    Rows that lack the column, or whose value normalizes to None, are skipped
    without error.
    """
    handling = NegativeHandling.parse(negative_handling)
    counts = {digit: 0 for digit in BENFORD_DIGITS}
    valid_count = 0
    rows_scanned = 0

    for row in rows:
        rows_scanned += 1
        number = parse_numeric_value(row.get(column_name), handling)
        if number is None:
            continue
        digit = extract_leading_digit(number)
        if digit is None:
            continue
        counts[digit] += 1
        valid_count += 1

    return DigitTally(counts=counts, valid_count=valid_count, rows_scanned=rows_scanned)


def theoretical_frequency(digit: int) -> float:
    """Benford probability of ``digit`` as the leading digit: log10(1 + 1/d)."""
    if digit not in BENFORD_DIGITS:
        raise ParameterValidationError(
            f"Leading digit must be between 1 and 9, got {digit}",
            parameter='digit',
            value=digit
        )
    return math.log10(1 + 1 / digit)


def build_results(counts: Mapping[int, int], valid_count: int) -> Tuple[BenfordResult, ...]:
    """Build the nine per-digit results in ascending digit order."""
    results = []
    for digit in BENFORD_DIGITS:
        observed_count = counts.get(digit, 0)
        observed_freq = observed_count / valid_count if valid_count > 0 else 0.0
        expected = theoretical_frequency(digit)
        results.append(BenfordResult(
            digit=digit,
            observed_count=observed_count,
            observed_freq=observed_freq,
            theoretical_freq=expected,
            difference=observed_freq - expected,
        ))
    return tuple(results)


def compute_chi_square(results: Sequence[BenfordResult], sample_size: int) -> float:
    """
    Pearson chi-square statistic computed from frequencies.

    sum(difference^2 / theoretical_freq) * sample_size, which equals the
    count-based statistic sum((O - E)^2 / E).
    """
    total = 0.0
    for result in results:
        if result.theoretical_freq == 0:
            continue
        total += result.difference ** 2 / result.theoretical_freq
    return total * sample_size


def compute_deviation_score(results: Sequence[BenfordResult]) -> float:
    """
    Mean absolute frequency difference scaled to 0-100.

    Returns 0 when nothing was counted.
    """
    if not results or sum(result.observed_count for result in results) == 0:
        return 0.0
    mean_abs_difference = sum(abs(result.difference) for result in results) / len(results)
    return min(float(MAX_DEVIATION_SCORE), mean_abs_difference * DEVIATION_SCALE_FACTOR)


def classify_risk(chi_square: float, sample_size: int) -> RiskLevel:
    """
    Classify anomaly risk with sample-size aware thresholds.

    - n > 10,000: chi_square / n against 0.003 (high) and 0.002 (medium)
    - 1,000 < n <= 10,000: chi_square / n against 0.025 and 0.020
    - n <= 1,000: raw chi_square against 20.09 and 15.51

    Args:
        chi_square: Goodness-of-fit statistic
        sample_size: Number of valid observations

    Returns:
        RiskLevel
    """
    if sample_size > LARGE_SAMPLE_THRESHOLD:
        normalized = chi_square / sample_size
        if normalized > LARGE_SAMPLE_HIGH_RISK:
            return RiskLevel.HIGH
        if normalized > LARGE_SAMPLE_MEDIUM_RISK:
            return RiskLevel.MEDIUM
        return RiskLevel.LOW

    if sample_size > MEDIUM_SAMPLE_THRESHOLD:
        normalized = chi_square / sample_size
        if normalized > MEDIUM_SAMPLE_HIGH_RISK:
            return RiskLevel.HIGH
        if normalized > MEDIUM_SAMPLE_MEDIUM_RISK:
            return RiskLevel.MEDIUM
        return RiskLevel.LOW

    if chi_square > CHI_SQUARE_HIGH_RISK:
        return RiskLevel.HIGH
    if chi_square > CHI_SQUARE_MEDIUM_RISK:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def chi_square_p_value(chi_square: float) -> float:
    """
    Survival probability of the statistic under 8 degrees of freedom.

    Reported alongside results for reference; risk classification does not
    use it.
    """
    return float(stats.chi2.sf(chi_square, CHI_SQUARE_DEGREES_OF_FREEDOM))


def filter_rows_by_leading_digit(
    rows: Iterable[Row],
    column_name: str,
    digit: int,
    negative_handling: Union[NegativeHandling, str] = NegativeHandling.ABSOLUTE
) -> List[Row]:
    """
    Return the rows whose value in ``column_name`` leads with ``digit``.

    Uses the same normalization as the tally, so the number of rows returned
    always equals the observed count reported for that digit.
    """
    if digit not in BENFORD_DIGITS:
        raise ParameterValidationError(
            f"Leading digit must be between 1 and 9, got {digit}",
            parameter='digit',
            value=digit
        )
    handling = NegativeHandling.parse(negative_handling)
    matches = []
    for row in rows:
        number = parse_numeric_value(row.get(column_name), handling)
        if number is not None and extract_leading_digit(number) == digit:
            matches.append(row)
    return matches


def _epoch_millis() -> int:
    return int(time.time() * 1000)


def _new_analysis_id() -> str:
    return str(uuid.uuid4())


class BenfordAnalyzer:
    """
    Run first-digit analyses with a fixed set of options.

    Example:
        >>> analyzer = BenfordAnalyzer(AnalysisOptions(negative_handling='exclude'))
        >>> summary = analyzer.analyze(rows, 'amount', 'Q3 expenses')
        >>> summary.risk
        <RiskLevel.LOW: 'low'>
    """

    def __init__(
        self,
        options: Optional[AnalysisOptions] = None,
        clock: Optional[Callable[[], int]] = None,
        id_factory: Optional[Callable[[], str]] = None
    ):
        """
        Initialize analyzer.

        Args:
            options: Normalization options (default: absolute negatives)
            clock: Callable returning epoch milliseconds
            id_factory: Callable returning a unique analysis id
        """
        self.options = options or AnalysisOptions()
        self._clock = clock or _epoch_millis
        self._id_factory = id_factory or _new_analysis_id

    def analyze(self, rows: Iterable[Row], column_name: str, dataset_name: str) -> AnalysisSummary:
        """
        Analyze one column of a row collection.

        A column that is absent from every row produces an empty, low-risk
        summary rather than an error.

        Args:
            rows: Row mappings, consumed once
            column_name: Column whose leading digits are analyzed
            dataset_name: Label stored on the summary

        Returns:
            AnalysisSummary
        """
        tally = tally_leading_digits(rows, column_name, self.options.negative_handling)
        results = build_results(tally.counts, tally.valid_count)
        chi_square = compute_chi_square(results, tally.valid_count)
        deviation_score = compute_deviation_score(results)
        risk = classify_risk(chi_square, tally.valid_count)

        logger.debug(
            f"Analyzed '{column_name}' of '{dataset_name}': {tally.valid_count} of "
            f"{tally.rows_scanned} rows valid, chi-square={chi_square:.4f}, risk={risk.value}"
        )

        return AnalysisSummary(
            id=self._id_factory(),
            name=dataset_name,
            timestamp=self._clock(),
            column_name=column_name,
            total_count=tally.valid_count,
            chi_square=chi_square,
            deviation_score=deviation_score,
            risk=risk,
            results=results,
        )

    def analyze_dataset(self, dataset, column_name: Optional[str] = None) -> AnalysisSummary:
        """
        Analyze a column of a loaded Dataset.

        Args:
            dataset: ``benford_analyzer.loaders.dataset.Dataset``
            column_name: Column to analyze; defaults to the first numeric column

        Raises:
            ColumnNotFoundError: If the column is not part of the dataset, or
                no column was given and none looks numeric
        """
        if column_name is None:
            if not dataset.numeric_columns:
                raise ColumnNotFoundError(
                    '<numeric>',
                    available_columns=dataset.columns,
                    details={'reason': 'dataset has no numeric columns'}
                )
            column_name = dataset.numeric_columns[0]
            logger.info(f"No column given, using first numeric column '{column_name}'")
        elif column_name not in dataset.columns:
            raise ColumnNotFoundError(column_name, available_columns=dataset.columns)

        return self.analyze(dataset.rows, column_name, dataset.name)


def analyze(
    rows: Iterable[Row],
    column_name: str,
    dataset_name: str,
    options: Optional[AnalysisOptions] = None,
    *,
    clock: Optional[Callable[[], int]] = None,
    id_factory: Optional[Callable[[], str]] = None
) -> AnalysisSummary:
    """Convenience wrapper around ``BenfordAnalyzer(...).analyze``."""
    analyzer = BenfordAnalyzer(options, clock=clock, id_factory=id_factory)
    return analyzer.analyze(rows, column_name, dataset_name)
