"""
Tests for the result model: enums, options and summary serialization.
"""

import dataclasses
from datetime import timezone

import pytest

from benford_analyzer.core.exceptions import ParameterValidationError
from benford_analyzer.core.results import (
    AnalysisOptions,
    AnalysisSummary,
    BenfordResult,
    NegativeHandling,
    RiskLevel,
)


@pytest.mark.unit
class TestRiskLevel:
    """Test RiskLevel parsing and ordering."""

    def test_values(self):
        assert [level.value for level in RiskLevel] == ['low', 'medium', 'high']

    def test_parse_is_case_insensitive(self):
        """Test strings in any case are accepted."""
        assert RiskLevel.parse('HIGH') is RiskLevel.HIGH
        assert RiskLevel.parse(' medium ') is RiskLevel.MEDIUM
        assert RiskLevel.parse(RiskLevel.LOW) is RiskLevel.LOW

    def test_parse_rejects_unknown(self):
        with pytest.raises(ParameterValidationError):
            RiskLevel.parse('critical')

    def test_rank_orders_levels(self):
        assert RiskLevel.LOW.rank < RiskLevel.MEDIUM.rank < RiskLevel.HIGH.rank


@pytest.mark.unit
class TestAnalysisOptions:
    """Test AnalysisOptions defaults and coercion."""

    def test_defaults(self):
        """Test zeros are ignored and negatives made absolute by default."""
        options = AnalysisOptions()
        assert options.ignore_zeros is True
        assert options.negative_handling is NegativeHandling.ABSOLUTE

    def test_string_coercion(self):
        """Test handling given as text is converted to the enum."""
        assert AnalysisOptions(negative_handling='exclude').negative_handling is NegativeHandling.EXCLUDE

    def test_invalid_handling(self):
        with pytest.raises(ParameterValidationError) as exc_info:
            AnalysisOptions(negative_handling='flip')
        assert exc_info.value.details['parameter'] == 'negative_handling'

    def test_frozen(self):
        """Test options cannot be mutated after creation."""
        options = AnalysisOptions()
        with pytest.raises(dataclasses.FrozenInstanceError):
            options.ignore_zeros = False

    def test_to_dict(self):
        assert AnalysisOptions(negative_handling='exclude').to_dict() == {
            'ignore_zeros': True,
            'negative_handling': 'exclude',
        }


def _summary(**overrides):
    results = tuple(
        BenfordResult(digit=d, observed_count=1 if d == 1 else 0, observed_freq=1.0 if d == 1 else 0.0,
                      theoretical_freq=0.1, difference=0.9 if d == 1 else -0.1)
        for d in range(1, 10)
    )
    fields = dict(
        id='abc-123',
        name='Ledger',
        timestamp=1_700_000_000_000,
        column_name='amount',
        total_count=1,
        chi_square=12.5,
        deviation_score=42.0,
        risk=RiskLevel.MEDIUM,
        results=results,
    )
    fields.update(overrides)
    return AnalysisSummary(**fields)


@pytest.mark.unit
class TestAnalysisSummary:
    """Test AnalysisSummary helpers and serialization."""

    def test_to_dict_layout(self):
        """Test dictionary keys and enum conversion."""
        data = _summary().to_dict()

        assert data['risk'] == 'medium'
        assert data['column_name'] == 'amount'
        assert len(data['results']) == 9
        assert data['results'][0] == {
            'digit': 1,
            'observed_count': 1,
            'observed_freq': 1.0,
            'theoretical_freq': 0.1,
            'difference': 0.9,
        }

    def test_from_dict_restores_summary(self):
        """Test a persisted summary is rebuilt identically."""
        summary = _summary()
        assert AnalysisSummary.from_dict(summary.to_dict()) == summary

    def test_from_dict_missing_field(self):
        data = _summary().to_dict()
        del data['chi_square']
        with pytest.raises(KeyError):
            AnalysisSummary.from_dict(data)

    def test_from_dict_bad_risk(self):
        data = _summary().to_dict()
        data['risk'] = 'extreme'
        with pytest.raises(ParameterValidationError):
            AnalysisSummary.from_dict(data)

    def test_result_for(self):
        summary = _summary()
        assert summary.result_for(1).observed_count == 1
        assert summary.result_for(0) is None

    def test_created_at(self):
        """Test the millisecond timestamp converts to UTC."""
        created = _summary().created_at
        assert created.tzinfo == timezone.utc
        assert created.year == 2023
