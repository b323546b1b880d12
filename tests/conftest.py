"""Pytest configuration and shared fixtures."""

import os
# Keras 3 runs on JAX in the test environment
os.environ.setdefault("KERAS_BACKEND", "jax")

import pytest
import pandas as pd
import numpy as np

from slrec.data.calendar import to_day_numbers


def _month_days(start: str, end: str, months: int = 1, day: int = 1) -> np.ndarray:
    """Day numbers of every `months`-th month between start and end, on `day`."""
    starts = pd.date_range(start=start, end=end, freq=f"{months}MS")
    return to_day_numbers(starts + pd.Timedelta(days=day - 1))


@pytest.fixture
def proxy_series():
    """Monthly proxy 1950-2018 (828 values) stamped at month start."""
    time_pred = _month_days("1950-01-01", "2018-12-31")
    rng = np.random.default_rng(42)
    t = np.arange(len(time_pred))
    values = 30.0 * np.sin(2 * np.pi * t / 12.0) + 0.05 * t + rng.normal(0, 2.0, len(t))
    return values.reshape(-1, 1), time_pred


@pytest.fixture
def tide_gauge_series(proxy_series):
    """Mid-month tide gauge record 1980-2005 (312 values) tracking the proxy."""
    x, time_pred = proxy_series
    time_resp = _month_days("1980-01-01", "2005-12-31", day=15)
    rng = np.random.default_rng(7)
    start = (1980 - 1950) * 12
    y = 0.8 * x[start:start + len(time_resp), 0] + 5.0 + rng.normal(0, 1.0, len(time_resp))
    return y, time_resp


@pytest.fixture
def small_gapped_data():
    """Short two-feature series with a gap, for fast model tests."""
    n = 60
    t = np.arange(n, dtype=float)
    X = np.column_stack([np.sin(t / 4.0), np.cos(t / 7.0)])
    y = 2.0 * X[:, 0] - X[:, 1] + 0.1 * np.sin(t)
    y[20:30] = np.nan
    return X, y


@pytest.fixture
def month_days():
    """Factory for month-stamped day numbers."""
    return _month_days
