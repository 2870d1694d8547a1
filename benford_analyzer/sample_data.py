"""
Synthetic sample datasets.

Each generator returns a Dataset that illustrates one Benford scenario:
naturally occurring magnitudes, business amounts, fabricated figures and a
mathematical sequence that follows the law exactly in the limit.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Optional

import numpy as np

from benford_analyzer.loaders.dataset import Dataset


def world_cities(seed: Optional[int] = None, rows: int = 5000) -> Dataset:
    """City populations spread log-uniformly between 100 and 100,000,000."""
    rng = np.random.default_rng(seed)
    populations = np.floor(10 ** (rng.random(rows) * 6 + 2)).astype(np.int64)
    records = [
        {'city_id': i + 1, 'name': f'City {i + 1}', 'population': int(populations[i])}
        for i in range(rows)
    ]
    return Dataset.from_records('World Cities Population (Sample)', records)


def accounting_expenses(seed: Optional[int] = None, rows: int = 2500) -> Dataset:
    """Invoice amounts from the product of two uniform draws."""
    rng = np.random.default_rng(seed)
    amounts = np.round((rng.random(rows) * rng.random(rows) * 5000 + 10) * 100) / 100
    records = [
        {'invoice_no': f'INV-{1000 + i}', 'amount': float(amounts[i])}
        for i in range(rows)
    ]
    return Dataset.from_records('Corporate Expenses (Sample)', records)


def manipulated_data(seed: Optional[int] = None, rows: int = 1500) -> Dataset:
    """
    Transactions with digits 5 and 7 over-represented.

    Half of the values lead with 5 or 7, the rest with a uniformly chosen
    digit; uniform leading digits alone already violate Benford's law.
    """
    rng = np.random.default_rng(seed)
    records = []
    for i in range(rows):
        if rng.random() > 0.5:
            first_digit = 5 if rng.random() > 0.5 else 7
        else:
            first_digit = int(rng.integers(1, 10))
        mantissa = first_digit + int(rng.integers(0, 10_000)) / 10_000
        amount = mantissa * 10 ** int(rng.integers(0, 4))
        records.append({'id': i + 1, 'transaction_value': round(amount * 100) / 100})
    return Dataset.from_records('Suspicious Transactions (Sample)', records)


def fibonacci_sequence(seed: Optional[int] = None, terms: int = 300) -> Dataset:
    """
    The first Fibonacci numbers starting 1, 1, 2, stored as text.

    Later terms exceed float precision; only their leading digit matters.
    """
    records = []
    a, b = 1, 1
    for i in range(terms):
        records.append({'term': i + 1, 'value': str(a)})
        a, b = b, a + b
    return Dataset.from_records('Fibonacci Sequence (First 300)', records)


@dataclass(frozen=True)
class SampleDefinition:
    """A named sample dataset and the column worth analyzing."""
    id: str
    title: str
    description: str
    category: str
    column: str
    generate: Callable[..., Dataset]


SAMPLE_DATASETS: Dict[str, SampleDefinition] = {
    sample.id: sample for sample in (
        SampleDefinition(
            'world_cities', 'World Cities Population',
            'Natural populations typically follow Benford\'s Law closely.',
            'Demographics', 'population', world_cities,
        ),
        SampleDefinition(
            'accounting_expenses', 'Corporate Expenses (Normal)',
            'Typical invoices and operating expenses without interference.',
            'Finance', 'amount', accounting_expenses,
        ),
        SampleDefinition(
            'manipulated_data', 'Manipulated Data (Anomaly)',
            'Over-representation of digits 5 and 7. High anomaly risk.',
            'Fraud Detection', 'transaction_value', manipulated_data,
        ),
        SampleDefinition(
            'fibonacci_sequence', 'Fibonacci Sequence',
            'Pure mathematics aligned with the expected distribution.',
            'Mathematics', 'value', fibonacci_sequence,
        ),
    )
}


def load_sample(sample_id: str, seed: Optional[int] = None) -> Dataset:
    """
    Generate a sample dataset by id.

    Raises:
        KeyError: Unknown sample id
    """
    return SAMPLE_DATASETS[sample_id].generate(seed=seed)
