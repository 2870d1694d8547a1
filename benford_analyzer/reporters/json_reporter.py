"""
JSON export of analyses.

Export document layout::

    {
      "version": "1.0.0",
      "export_date": "2025-11-22T14:30:45+00:00",
      "analysis": {...AnalysisSummary.to_dict()...},
      "statistics": {"p_value": 0.42, "degrees_of_freedom": 8},
      "deviation_flags": {"1": "normal", ...},
      "settings": {"sensitivity_level": "standard", "negative_value_handling": "absolute"},
      "dataset": {"name": ..., "total_records": ..., "columns": [...],
                  "numeric_columns": [...], "analyzed_column": ...}
    }
"""

import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from benford_analyzer.core.constants import (
    CHI_SQUARE_DEGREES_OF_FREEDOM,
    DEFAULT_EXPORT_FILENAME,
    EXPORT_FORMAT_VERSION,
)
from benford_analyzer.core.engine import chi_square_p_value
from benford_analyzer.core.exceptions import ReporterError
from benford_analyzer.core.results import AnalysisSummary, NegativeHandling
from benford_analyzer.core.sensitivity import SensitivityLevel, flag_deviations
from benford_analyzer.loaders.dataset import Dataset
from benford_analyzer.utils.json_utils import safe_json_dump

logger = logging.getLogger(__name__)


def default_export_filename(dataset_name: str) -> str:
    """
    File name used when no output path is given.

    Examples:
        >>> default_export_filename('World Cities')
        'benford-analysis-world-cities.json'
    """
    slug = re.sub(r'\s+', '-', dataset_name.strip().lower()) or 'dataset'
    return DEFAULT_EXPORT_FILENAME.format(slug=slug)


class JSONReporter:
    """
    Build and write JSON export documents.

    Args:
        sensitivity: Level used for the per-digit deviation flags
        negative_handling: Setting recorded in the export
        clock: Callable returning the export time (aware datetime)
    """

    def __init__(
        self,
        sensitivity: Union[SensitivityLevel, str] = SensitivityLevel.STANDARD,
        negative_handling: Union[NegativeHandling, str] = NegativeHandling.ABSOLUTE,
        clock: Optional[Callable[[], datetime]] = None
    ):
        self.sensitivity = SensitivityLevel.parse(sensitivity)
        self.negative_handling = NegativeHandling.parse(negative_handling)
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def build_export(self, summary: AnalysisSummary, dataset: Optional[Dataset] = None) -> Dict[str, Any]:
        """
        Build the export document for one analysis.

        Args:
            summary: Analysis to export
            dataset: Source dataset; when omitted the dataset block is derived
                from the summary alone

        Returns:
            JSON-compatible dictionary
        """
        flags = flag_deviations(summary.results, self.sensitivity)
        return {
            'version': EXPORT_FORMAT_VERSION,
            'export_date': self._clock().isoformat(),
            'analysis': summary.to_dict(),
            'statistics': {
                'p_value': chi_square_p_value(summary.chi_square) if summary.total_count else None,
                'degrees_of_freedom': CHI_SQUARE_DEGREES_OF_FREEDOM,
            },
            'deviation_flags': {str(digit): level.value for digit, level in flags.items()},
            'settings': {
                'sensitivity_level': self.sensitivity.value,
                'negative_value_handling': self.negative_handling.value,
            },
            'dataset': self._dataset_block(summary, dataset),
        }

    @staticmethod
    def _dataset_block(summary: AnalysisSummary, dataset: Optional[Dataset]) -> Dict[str, Any]:
        if dataset is None:
            return {
                'name': summary.name,
                'total_records': summary.total_count,
                'columns': [],
                'numeric_columns': [],
                'analyzed_column': summary.column_name,
            }
        return {
            'name': dataset.name,
            'total_records': dataset.row_count,
            'columns': list(dataset.columns),
            'numeric_columns': list(dataset.numeric_columns),
            'analyzed_column': summary.column_name,
        }

    def build_job_export(self, job_name: str, exports: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Wrap several export documents produced by one job run."""
        return {
            'version': EXPORT_FORMAT_VERSION,
            'export_date': self._clock().isoformat(),
            'job_name': job_name,
            'analysis_count': len(exports),
            'analyses': exports,
        }

    def write(self, document: Any, output_path: Union[str, Path]) -> Path:
        """
        Write a document as indented JSON.

        Raises:
            ReporterError: If the file cannot be written
        """
        path = Path(output_path)
        try:
            safe_json_dump(document, path)
        except (OSError, TypeError, ValueError) as e:
            raise ReporterError(
                f"Failed to write JSON report {path}: {e}",
                report_path=str(path),
                original_exception=e
            )
        logger.info(f"JSON report written to {path}")
        return path

    def export(
        self,
        summary: AnalysisSummary,
        output_path: Optional[Union[str, Path]] = None,
        dataset: Optional[Dataset] = None
    ) -> Path:
        """Build and write the export for one analysis; returns the written path."""
        path = output_path or default_export_filename(summary.name)
        return self.write(self.build_export(summary, dataset), path)
