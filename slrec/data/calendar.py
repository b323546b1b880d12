"""Monthly calendar grid and index windows for aligning two series."""

from dataclasses import dataclass
from datetime import date
from typing import Any

import logging
import numpy as np
import pandas as pd

from ..utils.error_handling import InvalidRangeError, ShapeMismatchError
from .structs import DEFAULT_HORIZON_END

logger = logging.getLogger(__name__)

# datenum scale: day 1 is 0000-01-01, so 1970-01-01 is 719529
UNIX_EPOCH_DAY_NUMBER = date(1970, 1, 1).toordinal() + 366


def to_day_numbers(values: Any) -> np.ndarray:
    """
    Convert timestamps to day numbers.

    Numeric input is assumed to already be on the day-number scale and is
    returned as floats. Dates, datetimes, datetime64 arrays and
    DatetimeIndex values are converted.
    """
    if isinstance(values, (pd.DatetimeIndex, pd.Series)) and pd.api.types.is_datetime64_any_dtype(values):
        stamps = pd.DatetimeIndex(values)
    else:
        arr = np.asarray(values)
        if arr.dtype.kind in "iuf":
            return arr.astype(float).ravel()
        stamps = pd.DatetimeIndex(pd.to_datetime(arr.ravel()))
    days = (stamps - pd.Timestamp("1970-01-01")) / pd.Timedelta(days=1)
    return np.asarray(days, dtype=float) + UNIX_EPOCH_DAY_NUMBER


def day_numbers_to_dates(day_numbers: np.ndarray) -> pd.DatetimeIndex:
    """Inverse of to_day_numbers."""
    offsets = np.asarray(day_numbers, dtype=float) - UNIX_EPOCH_DAY_NUMBER
    return pd.DatetimeIndex(pd.to_datetime(offsets, unit="D", origin="unix"))


@dataclass(frozen=True)
class CalendarGrid:
    """
    Month-start dates from initial_year-01-01 up to the horizon.

    Attributes:
        initial_year: First year on the grid
        horizon_end: Last admissible day
        months: Spacing between grid entries in months
        dates: The grid itself
    """
    initial_year: int
    horizon_end: date
    months: int
    dates: pd.DatetimeIndex

    def __len__(self) -> int:
        return len(self.dates)

    @property
    def day_numbers(self) -> np.ndarray:
        return to_day_numbers(self.dates)

    @property
    def initial_day(self) -> float:
        return float(to_day_numbers([date(self.initial_year, 1, 1)])[0])

    @property
    def end_day(self) -> float:
        return float(to_day_numbers([self.horizon_end])[0])


@dataclass(frozen=True)
class AlignmentWindow:
    """
    Overlap of the predictor and response with a monthly grid.

    Attributes:
        index_missing_beg: Grid months before the first response timestamp
        index_missing_end: Grid months after the last response timestamp
        pred_rows: Predictor rows inside [initial_day, end_day]
        resp_rows: Response rows inside [initial_day, end_day]
    """
    index_missing_beg: int
    index_missing_end: int
    pred_rows: np.ndarray
    resp_rows: np.ndarray


def build_calendar_grid(
    initial_year: int,
    horizon_end: date = DEFAULT_HORIZON_END,
    months: int = 1
) -> CalendarGrid:
    """
    Build the canonical grid of month starts.

    Args:
        initial_year: First year of the grid
        horizon_end: Last admissible day of the grid
        months: Spacing in months

    Returns:
        CalendarGrid

    Raises:
        InvalidRangeError: If the window is empty or inverted
    """
    if months < 1:
        raise InvalidRangeError(f"Grid spacing must be at least one month, got {months}")
    if initial_year > horizon_end.year:
        raise InvalidRangeError(
            f"Initial year {initial_year} is after the horizon {horizon_end.isoformat()}"
        )

    dates = pd.date_range(
        start=pd.Timestamp(year=int(initial_year), month=1, day=1),
        end=pd.Timestamp(horizon_end),
        freq=f"{months}MS",
    )
    if len(dates) == 0:
        raise InvalidRangeError(
            f"No calendar months between {initial_year}-01-01 and {horizon_end.isoformat()}"
        )

    return CalendarGrid(
        initial_year=int(initial_year),
        horizon_end=horizon_end,
        months=months,
        dates=dates,
    )


def compute_alignment_window(
    grid: CalendarGrid,
    time_pred: np.ndarray,
    time_resp: np.ndarray
) -> AlignmentWindow:
    """
    Locate both series relative to the monthly grid.

    The leading/trailing counts are taken against the full response span,
    before it is restricted to the grid window.
    """
    time_pred = np.asarray(time_pred, dtype=float)
    time_resp = np.asarray(time_resp, dtype=float)
    if len(time_resp) == 0 or len(time_pred) == 0:
        raise ShapeMismatchError("Predictor and response need at least one timestamp each")

    grid_days = grid.day_numbers
    index_missing_beg = int(np.sum(grid_days < np.nanmin(time_resp)))
    index_missing_end = int(np.sum(grid_days > np.nanmax(time_resp)))

    initial_day, end_day = grid.initial_day, grid.end_day
    pred_rows = (time_pred >= initial_day) & (time_pred <= end_day)
    resp_rows = (time_resp >= initial_day) & (time_resp <= end_day)

    logger.debug(
        f"Alignment window: {index_missing_beg} months before, "
        f"{index_missing_end} months after the response span"
    )

    return AlignmentWindow(
        index_missing_beg=index_missing_beg,
        index_missing_end=index_missing_end,
        pred_rows=pred_rows,
        resp_rows=resp_rows,
    )
