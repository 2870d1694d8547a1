"""
Benford Analyzer - first-digit anomaly detection for tabular data.

Example:
    >>> from benford_analyzer import analyze
    >>> summary = analyze(rows, 'amount', 'Q3 expenses')
    >>> summary.risk.value
    'low'
"""

__version__ = "0.1.0"

from benford_analyzer.core.engine import BenfordAnalyzer, analyze
from benford_analyzer.core.results import (
    AnalysisOptions,
    AnalysisSummary,
    BenfordResult,
    NegativeHandling,
    RiskLevel,
)

__all__ = [
    '__version__',
    'BenfordAnalyzer',
    'analyze',
    'AnalysisOptions',
    'AnalysisSummary',
    'BenfordResult',
    'NegativeHandling',
    'RiskLevel',
]
