"""
Tests for JSON export documents.
"""

import json
from datetime import datetime, timezone

import pytest

from benford_analyzer.core.exceptions import ReporterError
from benford_analyzer.loaders.dataset import Dataset
from benford_analyzer.reporters import JSONReporter, default_export_filename

EXPORT_TIME = datetime(2025, 11, 22, 14, 30, 45, tzinfo=timezone.utc)


@pytest.fixture
def reporter():
    return JSONReporter(sensitivity='strict', negative_handling='exclude', clock=lambda: EXPORT_TIME)


@pytest.mark.unit
class TestDefaultExportFilename:
    """Test export file naming."""

    @pytest.mark.parametrize("name,expected", [
        ('World Cities', 'benford-analysis-world-cities.json'),
        ('  Q3   expenses ', 'benford-analysis-q3-expenses.json'),
        ('ledger.csv', 'benford-analysis-ledger.csv.json'),
        ('', 'benford-analysis-dataset.json'),
    ])
    def test_slug(self, name, expected):
        assert default_export_filename(name) == expected


@pytest.mark.unit
class TestBuildExport:
    """Test the export document."""

    def test_document_layout(self, reporter, analyzer, reference_rows):
        summary = analyzer.analyze(reference_rows, 'amount', 'Reference')
        document = reporter.build_export(summary)

        assert document['version'] == '1.0.0'
        assert document['export_date'] == '2025-11-22T14:30:45+00:00'
        assert document['analysis'] == summary.to_dict()
        assert document['settings'] == {
            'sensitivity_level': 'strict',
            'negative_value_handling': 'exclude',
        }
        assert document['statistics']['degrees_of_freedom'] == 8
        assert 0.0 <= document['statistics']['p_value'] <= 1.0
        assert sorted(document['deviation_flags']) == [str(d) for d in range(1, 10)]

    def test_dataset_block_without_dataset(self, reporter, analyzer, reference_rows):
        summary = analyzer.analyze(reference_rows, 'amount', 'Reference')
        assert reporter.build_export(summary)['dataset'] == {
            'name': 'Reference',
            'total_records': 5,
            'columns': [],
            'numeric_columns': [],
            'analyzed_column': 'amount',
        }

    def test_dataset_block_with_dataset(self, reporter, analyzer):
        dataset = Dataset.from_records('Ledger', [
            {'account': 'A', 'amount': 120},
            {'account': 'B', 'amount': None},
        ])
        summary = analyzer.analyze_dataset(dataset, 'amount')
        block = reporter.build_export(summary, dataset)['dataset']

        assert block['total_records'] == 2
        assert block['columns'] == ['account', 'amount']
        assert block['numeric_columns'] == ['amount']

    def test_empty_analysis_has_no_p_value(self, reporter, analyzer):
        summary = analyzer.analyze([{'amount': 'n/a'}], 'amount', 'Empty')
        assert reporter.build_export(summary)['statistics']['p_value'] is None

    def test_flags_follow_sensitivity(self, analyzer):
        summary = analyzer.analyze([{'amount': 5000 + i} for i in range(100)], 'amount', 'Fives')
        flags = JSONReporter(clock=lambda: EXPORT_TIME).build_export(summary)['deviation_flags']
        assert flags['5'] == 'high'

    def test_job_export(self, reporter, analyzer, reference_rows):
        summary = analyzer.analyze(reference_rows, 'amount', 'Reference')
        document = reporter.build_job_export('Audit', [reporter.build_export(summary)])
        assert document['job_name'] == 'Audit'
        assert document['analysis_count'] == 1


@pytest.mark.unit
class TestWriteExport:
    """Test writing export files."""

    def test_export_to_path(self, reporter, analyzer, reference_rows, tmp_path):
        summary = analyzer.analyze(reference_rows, 'amount', 'Reference')
        path = reporter.export(summary, tmp_path / 'out' / 'report.json')

        document = json.loads(path.read_text(encoding='utf-8'))
        assert document['analysis']['id'] == summary.id
        assert document['analysis']['risk'] == summary.risk.value

    def test_export_default_name(self, reporter, analyzer, reference_rows, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        summary = analyzer.analyze(reference_rows, 'amount', 'World Cities')
        path = reporter.export(summary)
        assert path.name == 'benford-analysis-world-cities.json'
        assert (tmp_path / path.name).exists()

    def test_write_failure(self, reporter, tmp_path):
        blocker = tmp_path / 'blocker'
        blocker.write_text('', encoding='utf-8')
        with pytest.raises(ReporterError):
            reporter.write({'a': 1}, blocker / 'report.json')
