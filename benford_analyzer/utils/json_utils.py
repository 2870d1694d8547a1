"""
JSON serialization helpers.

Dataset rows loaded through pandas carry numpy scalars and Timestamps, and
analysis objects carry Enums; the encoder below turns all of them into plain
JSON values.
"""

import json
import math
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Any, Union

import numpy as np
import pandas as pd


class NumpyJSONEncoder(json.JSONEncoder):
    """
    JSON encoder for numpy, pandas and Enum values.

    Converts:
    - numpy integers -> int
    - numpy floats -> float (NaN/inf -> null)
    - numpy bool -> bool
    - numpy arrays -> lists
    - pandas Timestamp, datetime, date -> ISO format string
    - Enum -> its value
    - objects with ``to_dict`` -> that dictionary
    """

    def default(self, obj: Any) -> Any:
        if isinstance(obj, np.integer):
            return int(obj)

        if isinstance(obj, np.floating):
            if np.isnan(obj) or np.isinf(obj):
                return None
            return float(obj)

        if isinstance(obj, np.bool_):
            return bool(obj)

        if isinstance(obj, np.ndarray):
            return obj.tolist()

        if isinstance(obj, (pd.Timestamp, datetime, date)):
            return obj.isoformat()

        if isinstance(obj, Enum):
            return obj.value

        if isinstance(obj, set):
            return sorted(obj)

        if hasattr(obj, 'to_dict'):
            return obj.to_dict()

        return super().default(obj)


def _replace_non_finite(obj: Any) -> Any:
    """Replace NaN/inf Python floats, which json would emit as invalid tokens."""
    if isinstance(obj, float) and (math.isnan(obj) or math.isinf(obj)):
        return None
    if isinstance(obj, dict):
        return {key: _replace_non_finite(value) for key, value in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_replace_non_finite(item) for item in obj]
    return obj


def safe_json_dumps(obj: Any, **kwargs) -> str:
    """Serialize to a JSON string using NumpyJSONEncoder."""
    kwargs.setdefault('cls', NumpyJSONEncoder)
    return json.dumps(_replace_non_finite(obj), **kwargs)


def safe_json_dump(obj: Any, path: Union[str, Path], indent: int = 2) -> None:
    """
    Write ``obj`` as JSON to ``path``.

    The document is written to a sibling temporary file first and then moved
    into place, so readers never observe a half-written file.
    """
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = target.with_name(target.name + '.tmp')
    with open(tmp_path, 'w', encoding='utf-8') as f:
        f.write(safe_json_dumps(obj, indent=indent))
    tmp_path.replace(target)
