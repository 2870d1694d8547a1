"""
Shared fixtures for the Benford Analyzer test suite.
"""

import itertools
import logging
import math

import pytest

from benford_analyzer.core.engine import BenfordAnalyzer
from benford_analyzer.core.logging_config import PACKAGE_LOGGER_NAME

FIXED_TIMESTAMP = 1_732_286_245_000  # 2024-11-22 14:37:25 UTC


def benford_counts(total):
    """Digit counts that follow Benford's law as closely as integers allow."""
    return {digit: round(total * math.log10(1 + 1 / digit)) for digit in range(1, 10)}


def make_rows(values, column='amount'):
    return [{column: value} for value in values]


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_TIMESTAMP


@pytest.fixture
def sequential_ids():
    counter = itertools.count(1)
    return lambda: f"analysis-{next(counter):04d}"


@pytest.fixture
def analyzer(fixed_clock, sequential_ids):
    """Analyzer with deterministic ids and timestamps."""
    return BenfordAnalyzer(clock=fixed_clock, id_factory=sequential_ids)


@pytest.fixture
def benford_rows():
    """10,000 rows whose leading digits follow Benford's law."""
    rows = []
    for digit, count in benford_counts(10_000).items():
        for i in range(count):
            # Spread magnitudes so values are not all identical
            rows.append({'amount': digit * 10 ** (i % 5) + (i % 7) / 10})
    return rows


@pytest.fixture
def reference_rows():
    """Small mixed-sign example used across tests."""
    return make_rows([100, 150, 200, 120, -130])


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers installed by CLI invocations so later tests log nowhere stale."""
    yield
    package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()
    package_logger.propagate = True
    package_logger.setLevel(logging.NOTSET)
