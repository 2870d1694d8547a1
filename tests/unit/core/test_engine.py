"""
Unit tests for the Benford analysis engine.

Covers value normalization, digit extraction, the tally, chi-square and
deviation scoring, risk classification and the analyzer entry points.
"""

import math
from decimal import Decimal

import numpy as np
import pytest

from benford_analyzer.core.engine import (
    BenfordAnalyzer,
    analyze,
    build_results,
    chi_square_p_value,
    classify_risk,
    compute_chi_square,
    compute_deviation_score,
    extract_leading_digit,
    filter_rows_by_leading_digit,
    parse_number_prefix,
    parse_numeric_value,
    tally_leading_digits,
    theoretical_frequency,
)
from benford_analyzer.core.exceptions import ColumnNotFoundError, ParameterValidationError
from benford_analyzer.core.results import AnalysisOptions, NegativeHandling, RiskLevel
from benford_analyzer.loaders.dataset import Dataset


def _rows(values, column='amount'):
    return [{column: value} for value in values]


# ============================================================================
# VALUE NORMALIZATION
# ============================================================================

@pytest.mark.unit
class TestParseNumberPrefix:
    """Test leading-prefix parsing of text cells."""

    def test_plain_numbers(self):
        """Test integers, decimals and exponents."""
        assert parse_number_prefix("42") == 42.0
        assert parse_number_prefix("3.25") == 3.25
        assert parse_number_prefix(".5") == 0.5
        assert parse_number_prefix("1e3") == 1000.0
        assert parse_number_prefix("-7.5") == -7.5

    def test_trailing_garbage_is_ignored(self):
        """Test that text after the numeric prefix is dropped."""
        assert parse_number_prefix("12abc") == 12.0
        assert parse_number_prefix("  8 units") == 8.0

    def test_non_numeric_prefix(self):
        """Test that text not starting with a number does not parse."""
        assert parse_number_prefix("$100") is None
        assert parse_number_prefix("abc") is None
        assert parse_number_prefix("") is None
        assert parse_number_prefix("1,234") == 1.0

    @pytest.mark.parametrize("text", ["١٢٣", "١٢٣.٤", "１２３", "١e5"])
    def test_non_ascii_digits_do_not_parse(self, text):
        """Test only ASCII digits form a number."""
        assert parse_number_prefix(text) is None


@pytest.mark.unit
class TestParseNumericValue:
    """Test normalization of raw cells."""

    def test_missing_and_boolean_values(self):
        """Test None and booleans are not numeric."""
        assert parse_numeric_value(None) is None
        assert parse_numeric_value(True) is None
        assert parse_numeric_value(False) is None

    def test_numbers_pass_through(self):
        """Test positive numbers are returned unchanged."""
        assert parse_numeric_value(150) == 150
        assert parse_numeric_value(0.0045) == 0.0045
        assert parse_numeric_value(np.int64(7)) == 7
        assert parse_numeric_value(np.float64(2.5)) == 2.5

    def test_text_values(self):
        """Test numeric text is parsed with the prefix rule."""
        assert parse_numeric_value("250.75") == 250.75
        assert parse_numeric_value("12abc") == 12.0
        assert parse_numeric_value("abc") is None
        assert parse_numeric_value(Decimal("12.5")) == 12.5

    def test_zero_nan_and_infinity_are_rejected(self):
        """Test values that cannot carry a leading digit."""
        assert parse_numeric_value(0) is None
        assert parse_numeric_value("0") is None
        assert parse_numeric_value(-0.0) is None
        assert parse_numeric_value(float('nan')) is None
        assert parse_numeric_value(float('inf')) is None
        assert parse_numeric_value(np.nan) is None

    def test_negative_absolute(self):
        """Test negatives become absolute values by default."""
        assert parse_numeric_value(-130) == 130
        assert parse_numeric_value("-2.5", 'absolute') == 2.5

    def test_negative_exclude(self):
        """Test negatives are dropped with exclude handling."""
        assert parse_numeric_value(-130, NegativeHandling.EXCLUDE) is None
        assert parse_numeric_value("-2.5", 'exclude') is None
        assert parse_numeric_value(130, 'exclude') == 130

    def test_invalid_handling(self):
        """Test unknown negative handling values are rejected."""
        with pytest.raises(ParameterValidationError):
            parse_numeric_value(5, 'mirror')

    def test_non_ascii_digits_are_excluded(self):
        """Test text in other digit scripts is not counted."""
        assert parse_numeric_value("١٢٣") is None
        assert parse_numeric_value("-١٢٣") is None
        assert tally_leading_digits(_rows(["١٢٣", "123"]), 'amount').valid_count == 1


@pytest.mark.unit
class TestExtractLeadingDigit:
    """Test leading significant digit extraction."""

    @pytest.mark.parametrize("value,expected", [
        (0.0045, 4),
        (1234, 1),
        ("$1,234", 1),
        (-987, 9),
        ("0007", 7),
        (9.99, 9),
        (1e-07, 1),
        (2.5e20, 2),
    ])
    def test_leading_digit(self, value, expected):
        """Test first non-zero digit is returned."""
        assert extract_leading_digit(value) == expected

    @pytest.mark.parametrize("value", [0, "0.000", "abc", "", None])
    def test_no_digit(self, value):
        """Test values without a non-zero digit."""
        assert extract_leading_digit(value) is None

    @pytest.mark.parametrize("number", [1, 9, 10, 42, 1000, 7_000_001, 1234567890, 10 ** 20 + 7])
    def test_integer_and_text_agree(self, number):
        """Test a positive integer and its decimal text share a leading digit."""
        assert extract_leading_digit(number) == extract_leading_digit(str(number))

    def test_result_is_always_significant(self):
        """Test extracted digits are always between 1 and 9."""
        for value in [0.1, 10, 0.00099, 123456789, 5e-12, "7.0"]:
            assert 1 <= extract_leading_digit(value) <= 9


# ============================================================================
# TALLY AND RESULTS
# ============================================================================

@pytest.mark.unit
class TestTally:
    """Test leading-digit counting."""

    def test_reference_absolute(self, reference_rows):
        """Test the mixed-sign reference input with absolute handling."""
        tally = tally_leading_digits(reference_rows, 'amount', 'absolute')

        assert tally.valid_count == 5
        assert tally.counts[1] == 4
        assert tally.counts[2] == 1
        assert sum(tally.counts.values()) == 5

    def test_reference_exclude(self, reference_rows):
        """Test the reference input drops the negative value with exclude."""
        tally = tally_leading_digits(reference_rows, 'amount', 'exclude')

        assert tally.valid_count == 4
        assert tally.counts[1] == 3
        assert tally.counts[2] == 1

    def test_all_digits_present(self):
        """Test every digit has a counter even when unused."""
        tally = tally_leading_digits(_rows([5]), 'amount')
        assert sorted(tally.counts) == list(range(1, 10))

    def test_skips_bad_rows(self):
        """Test missing, empty and unparsable cells are skipped."""
        rows = [{'amount': 10}, {'other': 5}, {'amount': None}, {'amount': 'n/a'}, {'amount': 0}, {'amount': '30'}]
        tally = tally_leading_digits(rows, 'amount')

        assert tally.valid_count == 2
        assert tally.rows_scanned == 6
        assert tally.counts[1] == 1
        assert tally.counts[3] == 1

    def test_accepts_generators(self):
        """Test rows are consumed in a single pass."""
        tally = tally_leading_digits(({'amount': n} for n in range(1, 10)), 'amount')
        assert tally.valid_count == 9
        assert all(count == 1 for count in tally.counts.values())

    def test_exclude_removes_exactly_negative_values(self):
        """Test switching to exclude drops only the negative observations."""
        values = [12, -34, 56, -78, 91, 23, -45]
        absolute = tally_leading_digits(_rows(values), 'amount', 'absolute')
        excluded = tally_leading_digits(_rows(values), 'amount', 'exclude')

        assert absolute.valid_count - excluded.valid_count == 3


@pytest.mark.unit
class TestTheoreticalFrequency:
    """Test Benford probabilities."""

    def test_known_values(self):
        """Test published Benford probabilities."""
        assert theoretical_frequency(1) == pytest.approx(0.30103, abs=1e-5)
        assert theoretical_frequency(9) == pytest.approx(0.04576, abs=1e-5)

    def test_distribution_sums_to_one(self):
        """Test the nine probabilities sum to one."""
        assert sum(theoretical_frequency(d) for d in range(1, 10)) == pytest.approx(1.0)

    @pytest.mark.parametrize("digit", [0, 10, -1])
    def test_invalid_digit(self, digit):
        """Test digits outside 1-9 are rejected."""
        with pytest.raises(ParameterValidationError):
            theoretical_frequency(digit)


@pytest.mark.unit
class TestBuildResults:
    """Test per-digit result construction."""

    def test_nine_results_in_order(self):
        """Test results cover digits 1-9 ascending."""
        results = build_results({1: 3, 2: 1}, 4)
        assert [r.digit for r in results] == list(range(1, 10))

    def test_frequencies(self):
        """Test observed frequencies sum to one when data exists."""
        results = build_results({1: 3, 2: 1}, 4)

        assert results[0].observed_freq == 0.75
        assert results[1].observed_freq == 0.25
        assert sum(r.observed_freq for r in results) == pytest.approx(1.0)
        for result in results:
            assert result.difference == pytest.approx(result.observed_freq - result.theoretical_freq)

    def test_zero_valid_count(self):
        """Test frequencies are zero when nothing was counted."""
        results = build_results({}, 0)
        assert all(r.observed_freq == 0 and r.observed_count == 0 for r in results)


# ============================================================================
# STATISTICS
# ============================================================================

@pytest.mark.unit
class TestChiSquare:
    """Test chi-square computation."""

    def test_matches_count_based_formula(self):
        """Test the frequency form equals sum((O - E)^2 / E)."""
        counts = {1: 40, 2: 10, 3: 15, 4: 5, 5: 12, 6: 3, 7: 8, 8: 4, 9: 3}
        n = sum(counts.values())
        results = build_results(counts, n)

        expected = sum(
            (counts[d] - n * math.log10(1 + 1 / d)) ** 2 / (n * math.log10(1 + 1 / d))
            for d in range(1, 10)
        )
        assert compute_chi_square(results, n) == pytest.approx(expected)

    def test_zero_sample(self):
        """Test an empty sample gives zero."""
        assert compute_chi_square(build_results({}, 0), 0) == 0

    def test_p_value_range(self):
        """Test the reference p-value is a probability that falls with the statistic."""
        assert chi_square_p_value(0.0) == pytest.approx(1.0)
        assert chi_square_p_value(20.09) == pytest.approx(0.01, abs=1e-3)
        assert chi_square_p_value(5.0) > chi_square_p_value(15.0)


@pytest.mark.unit
class TestDeviationScore:
    """Test the bounded deviation score."""

    def test_scaled_mean_absolute_difference(self):
        """Test score is mean |difference| times 1000."""
        counts = {d: 0 for d in range(1, 10)}
        counts.update({1: 31, 2: 17, 3: 13, 4: 10, 5: 8, 6: 7, 7: 6, 8: 5, 9: 3})
        results = build_results(counts, 100)

        expected = sum(abs(r.difference) for r in results) / 9 * 1000
        assert compute_deviation_score(results) == pytest.approx(expected)

    def test_capped_at_100(self):
        """Test extreme deviations are capped."""
        results = build_results({5: 1000}, 1000)
        assert compute_deviation_score(results) == 100

    def test_zero_when_nothing_counted(self):
        """Test degenerate input scores zero."""
        assert compute_deviation_score(build_results({}, 0)) == 0
        assert compute_deviation_score(()) == 0


@pytest.mark.unit
class TestClassifyRisk:
    """Test sample-size aware risk thresholds."""

    @pytest.mark.parametrize("chi_square,expected", [
        (25.0, RiskLevel.HIGH),
        (20.1, RiskLevel.HIGH),
        (20.09, RiskLevel.MEDIUM),
        (16.0, RiskLevel.MEDIUM),
        (15.51, RiskLevel.LOW),
        (3.0, RiskLevel.LOW),
    ])
    def test_small_samples_use_raw_critical_values(self, chi_square, expected):
        """Test n <= 1,000 compares the raw statistic."""
        assert classify_risk(chi_square, 500) is expected
        assert classify_risk(chi_square, 1000) is expected

    @pytest.mark.parametrize("normalized,expected", [
        (0.030, RiskLevel.HIGH),
        (0.022, RiskLevel.MEDIUM),
        (0.010, RiskLevel.LOW),
    ])
    def test_medium_samples_use_normalized_values(self, normalized, expected):
        """Test 1,000 < n <= 10,000 normalizes by sample size."""
        for n in (1001, 5000, 10_000):
            assert classify_risk(normalized * n, n) is expected

    @pytest.mark.parametrize("normalized,expected", [
        (0.0040, RiskLevel.HIGH),
        (0.0025, RiskLevel.MEDIUM),
        (0.0010, RiskLevel.LOW),
    ])
    def test_large_samples_use_tighter_thresholds(self, normalized, expected):
        """Test n > 10,000 uses the large-sample thresholds."""
        for n in (10_001, 250_000):
            assert classify_risk(normalized * n, n) is expected

    def test_empty_sample_is_low(self):
        """Test zero observations never divide by zero."""
        assert classify_risk(0.0, 0) is RiskLevel.LOW


# ============================================================================
# ANALYZER
# ============================================================================

@pytest.mark.unit
class TestAnalyze:
    """Test full analyses."""

    def test_reference_summary(self, analyzer, reference_rows):
        """Test the reference input end to end."""
        summary = analyzer.analyze(reference_rows, 'amount', 'Reference')

        assert summary.id == 'analysis-0001'
        assert summary.timestamp == 1_732_286_245_000
        assert summary.name == 'Reference'
        assert summary.column_name == 'amount'
        assert summary.total_count == 5
        assert summary.result_for(1).observed_count == 4
        assert summary.result_for(2).observed_count == 1
        assert summary.deviation_score == 100
        assert summary.risk is RiskLevel.LOW

    def test_default_ids_are_unique(self, reference_rows):
        """Test analyses get distinct ids without an injected id factory."""
        analyzer = BenfordAnalyzer()
        first = analyzer.analyze(reference_rows, 'amount', 'Reference')
        second = analyzer.analyze(reference_rows, 'amount', 'Reference')

        assert first.id != second.id
        assert analyze(reference_rows, 'amount', 'Reference').id not in (first.id, second.id)

    def test_summary_invariants(self, analyzer, reference_rows):
        """Test structural invariants of every summary."""
        summary = analyzer.analyze(reference_rows, 'amount', 'Reference')

        assert len(summary.results) == 9
        assert sum(r.observed_count for r in summary.results) == summary.total_count
        assert 0 <= summary.deviation_score <= 100
        assert summary.chi_square >= 0

    def test_conforming_data_is_low_risk(self, analyzer, benford_rows):
        """Test Benford-conforming input scores near zero."""
        summary = analyzer.analyze(benford_rows, 'amount', 'Conforming')

        assert summary.risk is RiskLevel.LOW
        assert summary.deviation_score < 0.1
        assert summary.chi_square / summary.total_count < 0.001

    def test_single_digit_data_is_high_risk(self, analyzer):
        """Test 1,000 values all led by 5 are flagged."""
        rows = _rows([5000 + i for i in range(1000)])
        summary = analyzer.analyze(rows, 'amount', 'Fives')

        assert summary.total_count == 1000
        assert summary.risk is RiskLevel.HIGH
        assert summary.deviation_score == 100

    def test_missing_column_gives_empty_summary(self, analyzer, reference_rows):
        """Test an absent column is not an error."""
        summary = analyzer.analyze(reference_rows, 'missing', 'Reference')

        assert summary.total_count == 0
        assert summary.chi_square == 0
        assert summary.deviation_score == 0
        assert summary.risk is RiskLevel.LOW
        assert all(r.observed_count == 0 for r in summary.results)

    def test_empty_rows(self, analyzer):
        """Test an empty dataset."""
        summary = analyzer.analyze([], 'amount', 'Empty')
        assert summary.total_count == 0
        assert summary.risk is RiskLevel.LOW

    def test_exclude_option(self, fixed_clock, sequential_ids, reference_rows):
        """Test analyzer options reach the tally."""
        analyzer = BenfordAnalyzer(AnalysisOptions(negative_handling='exclude'), fixed_clock, sequential_ids)
        assert analyzer.analyze(reference_rows, 'amount', 'Reference').total_count == 4

    def test_module_level_analyze(self, reference_rows):
        """Test the convenience function generates ids and timestamps."""
        first = analyze(reference_rows, 'amount', 'Reference')
        second = analyze(reference_rows, 'amount', 'Reference')

        assert first.id != second.id
        assert first.timestamp > 1_600_000_000_000
        assert first.results == second.results


@pytest.mark.unit
class TestAnalyzeDataset:
    """Test analyses of loaded datasets."""

    def test_explicit_column(self, analyzer):
        """Test a named column is analyzed."""
        dataset = Dataset.from_records('Ledger', [{'id': 'a', 'amount': 120}, {'id': 'b', 'amount': 340}])
        summary = analyzer.analyze_dataset(dataset, 'amount')
        assert summary.total_count == 2
        assert summary.name == 'Ledger'

    def test_default_column_is_first_numeric(self, analyzer):
        """Test the first numeric column is chosen when none is given."""
        dataset = Dataset.from_records('Ledger', [{'label': 'x', 'qty': 3, 'amount': 120}])
        assert analyzer.analyze_dataset(dataset).column_name == 'qty'

    def test_unknown_column(self, analyzer):
        """Test unknown columns raise with the available columns listed."""
        dataset = Dataset.from_records('Ledger', [{'amount': 120}])
        with pytest.raises(ColumnNotFoundError) as exc_info:
            analyzer.analyze_dataset(dataset, 'total')
        assert exc_info.value.details['available_columns'] == ['amount']

    def test_no_numeric_columns(self, analyzer):
        """Test a dataset without numeric columns needs an explicit column."""
        dataset = Dataset.from_records('Names', [{'name': 'Ada'}])
        with pytest.raises(ColumnNotFoundError):
            analyzer.analyze_dataset(dataset)


@pytest.mark.unit
class TestDrilldown:
    """Test row filtering by leading digit."""

    def test_matches_observed_counts(self, analyzer, reference_rows):
        """Test drilldown rows agree with the tally for every digit."""
        summary = analyzer.analyze(reference_rows, 'amount', 'Reference')
        for result in summary.results:
            rows = filter_rows_by_leading_digit(reference_rows, 'amount', result.digit)
            assert len(rows) == result.observed_count

    def test_respects_negative_handling(self, reference_rows):
        """Test excluded negatives never appear in a drilldown."""
        rows = filter_rows_by_leading_digit(reference_rows, 'amount', 1, 'exclude')
        assert {'amount': -130} not in rows
        assert len(rows) == 3

    def test_invalid_digit(self, reference_rows):
        """Test digit must be 1-9."""
        with pytest.raises(ParameterValidationError):
            filter_rows_by_leading_digit(reference_rows, 'amount', 0)
