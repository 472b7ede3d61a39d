from __future__ import annotations

from typing import Iterable

import numpy as np


def safe_mean(values: Iterable[float]) -> float:
    """
    Arithmetic mean, or 0.0 when there is nothing to average.
    """
    arr = np.fromiter(values, dtype=float)
    if arr.size == 0:
        return 0.0
    return float(arr.mean())
