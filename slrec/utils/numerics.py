"""Small numeric helpers shared by the pipeline stages."""

import numpy as np


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(np.sign(value) * np.floor(abs(value) + 0.5))


def sample_std(values: np.ndarray, axis: int = 0) -> np.ndarray:
    """NaN-ignoring sample standard deviation (ddof=1)."""
    values = np.asarray(values, dtype=float)
    counts = np.sum(~np.isnan(values), axis=axis)
    if np.any(counts < 2):
        raise ValueError("At least two observed values are needed for a standard deviation")
    return np.nanstd(values, axis=axis, ddof=1)
