"""Resampling of a gapped response onto the predictor's monthly grid."""

from dataclasses import dataclass
from typing import Optional

import logging
import numpy as np
import pandas as pd

from ..utils.error_handling import ShapeMismatchError
from ..utils.numerics import round_half_up
from .calendar import AlignmentWindow, CalendarGrid, compute_alignment_window

logger = logging.getLogger(__name__)

DAYS_PER_MONTH = 30


@dataclass
class ResampledSeries:
    """
    Predictor and response on a shared grid.

    Attributes:
        x: Predictor (observations x features)
        y: Response, NaN where unobserved
        time_step: Months per predictor sample
        window: Alignment window used, None for a pass-through
    """
    x: np.ndarray
    y: np.ndarray
    time_step: int
    window: Optional[AlignmentWindow] = None

    @property
    def passed_through(self) -> bool:
        return self.window is None


def compute_time_step(time_pred: np.ndarray) -> int:
    """Months between consecutive predictor samples."""
    time_pred = np.asarray(time_pred, dtype=float)
    if len(time_pred) < 2:
        raise ShapeMismatchError(
            f"At least two predictor timestamps are needed, got {len(time_pred)}"
        )
    time_step = round_half_up((time_pred[1] - time_pred[0]) / DAYS_PER_MONTH)
    if time_step <= 0:
        raise ShapeMismatchError(
            f"Predictor sampling step must be at least one month, got {time_step}"
        )
    return time_step


def same_timestamps(time_pred: np.ndarray, time_resp: np.ndarray) -> bool:
    """True when both series are stamped identically."""
    if len(time_pred) != len(time_resp):
        return False
    return np.array_equal(np.asarray(time_pred, dtype=float), np.asarray(time_resp, dtype=float))


class Resampler:
    """Aligns a response series with a predictor on a monthly calendar."""

    def resample(
        self,
        x: np.ndarray,
        y: np.ndarray,
        time_pred: np.ndarray,
        time_resp: np.ndarray,
        grid: CalendarGrid
    ) -> ResampledSeries:
        """
        Put the response on the predictor's grid.

        Both series are restricted to the grid window, the response is padded
        with NaN for the grid months outside its observed span and then
        averaged (ignoring NaN) over groups of `time_step` samples, one group
        per predictor row. Identically stamped inputs are returned unchanged.

        Args:
            x: Predictor values (observations x features, or 1-D)
            y: Response values
            time_pred: Predictor day numbers
            time_resp: Response day numbers
            grid: Monthly calendar grid

        Returns:
            ResampledSeries

        Raises:
            ShapeMismatchError: If the padded response cannot be grouped
                onto the predictor rows
        """
        x = np.asarray(x, dtype=float)
        if x.ndim == 1:
            x = x.reshape(-1, 1)
        y = np.asarray(y, dtype=float).ravel()
        time_pred = np.asarray(time_pred, dtype=float).ravel()
        time_resp = np.asarray(time_resp, dtype=float).ravel()

        if len(x) != len(time_pred):
            raise ShapeMismatchError(
                f"Predictor has {len(x)} rows but {len(time_pred)} timestamps"
            )
        if len(y) != len(time_resp):
            raise ShapeMismatchError(
                f"Response has {len(y)} values but {len(time_resp)} timestamps"
            )

        if same_timestamps(time_pred, time_resp):
            logger.debug("Predictor and response share timestamps; skipping resampling")
            return ResampledSeries(x=x, y=y, time_step=compute_time_step(time_pred))

        window = compute_alignment_window(grid, time_pred, time_resp)

        x = x[window.pred_rows]
        y = y[window.resp_rows]
        time_step = compute_time_step(time_pred[window.pred_rows])

        lead = max(window.index_missing_beg - 1, 0)
        padded = np.concatenate([
            np.full(lead, np.nan),
            y,
            np.full(window.index_missing_end, np.nan),
        ])

        expected = time_step * len(x)
        if len(padded) != expected:
            raise ShapeMismatchError(
                f"Padded response has {len(padded)} samples, expected "
                f"{expected} ({len(x)} predictor rows x time_step {time_step})"
            )

        groups = pd.DataFrame(padded.reshape(len(x), time_step))
        y_monthly = groups.mean(axis=1, skipna=True).to_numpy(dtype=float)

        logger.debug(
            f"Resampled response: {len(y)} observations -> {len(y_monthly)} "
            f"samples ({int(np.isnan(y_monthly).sum())} missing)"
        )

        return ResampledSeries(x=x, y=y_monthly, time_step=time_step, window=window)
