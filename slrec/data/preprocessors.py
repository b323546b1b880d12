"""Response preprocessing: linear detrending and 1-year moving mean."""

from typing import Union
import logging

import numpy as np
import pandas as pd

from ..utils.numerics import round_half_up
from .structs import parse_pre_proc

logger = logging.getLogger(__name__)

MONTHS_PER_YEAR = 12


class Preprocessor:
    """Detrends and smooths a gapped response, keeping its gaps in place."""

    def preprocess(
        self,
        y: np.ndarray,
        time_step: int,
        enabled: Union[bool, str] = True
    ) -> np.ndarray:
        """
        Detrend and apply a one-year moving mean.

        Args:
            y: Response with NaN marking missing samples
            time_step: Months per sample
            enabled: Toggle (bool or 'yes'/'no'); identity when off

        Returns:
            Array of the same length with NaN exactly where `y` had NaN
        """
        y = np.asarray(y, dtype=float).ravel()
        if not parse_pre_proc(enabled):
            return y

        nan_position = np.isnan(y)
        if nan_position.all():
            logger.warning("Response has no observed values; nothing to preprocess")
            return y.copy()

        result = self.detrend(y)
        result = self.moving_mean(result, self.smoothing_window(time_step))
        result[nan_position] = np.nan
        return result

    @staticmethod
    def smoothing_window(time_step: int) -> int:
        """Samples spanning one year."""
        return max(round_half_up(MONTHS_PER_YEAR / time_step), 1)

    def detrend(self, y: np.ndarray) -> np.ndarray:
        """
        Remove the least-squares line through the observed samples.

        The line is fitted over (sample index, value) ignoring NaN; NaN
        samples stay NaN.
        """
        y = np.asarray(y, dtype=float)
        observed = ~np.isnan(y)
        n_observed = int(observed.sum())
        if n_observed == 0:
            return y.copy()

        index = np.arange(len(y), dtype=float)
        if n_observed == 1:
            return y - y[observed][0]

        slope, intercept = np.polyfit(index[observed], y[observed], 1)
        return y - (slope * index + intercept)

    def moving_mean(self, y: np.ndarray, window: int) -> np.ndarray:
        """
        Centred moving mean ignoring NaN.

        An even window reaches one sample further back than forward. The
        window shrinks at both ends and a window without observed samples
        yields NaN.
        """
        forward = (window - 1) // 2
        extended = pd.Series(np.concatenate([y, np.full(forward, np.nan)]))
        smoothed = extended.rolling(window=window, min_periods=1).mean()
        return smoothed.to_numpy(dtype=float)[forward:forward + len(y)]
