"""Unit tests for response detrending and smoothing."""

import numpy as np
import pytest
from hypothesis import given, settings, strategies as st

from slrec.data.preprocessors import Preprocessor
from slrec.utils.error_handling import ConfigurationError

maybe_missing = st.one_of(
    st.floats(min_value=-500, max_value=500, allow_nan=False, allow_infinity=False),
    st.just(np.nan),
)


class TestPreprocessor:
    """Tests for Preprocessor class."""

    def test_disabled_is_identity(self):
        y = np.array([1.0, np.nan, 3.0, 10.0, np.nan])
        result = Preprocessor().preprocess(y, time_step=1, enabled="no")
        np.testing.assert_array_equal(result, y)

    def test_toggle_is_case_insensitive(self):
        y = np.arange(24, dtype=float)
        np.testing.assert_array_equal(Preprocessor().preprocess(y, 1, enabled="NO"), y)
        assert not np.array_equal(Preprocessor().preprocess(y, 1, enabled="Yes"), y)

    def test_invalid_toggle_raises(self):
        with pytest.raises(ConfigurationError):
            Preprocessor().preprocess(np.ones(3), 1, enabled="maybe")

    def test_all_missing_stays_missing(self):
        y = np.full(36, np.nan)
        result = Preprocessor().preprocess(y, time_step=1, enabled="yes")
        assert len(result) == 36
        assert np.isnan(result).all()

    def test_detrend_removes_line_ignoring_gaps(self):
        y = 3.0 + 0.5 * np.arange(40, dtype=float)
        y[10:15] = np.nan
        result = Preprocessor().detrend(y)
        np.testing.assert_allclose(result[~np.isnan(y)], 0.0, atol=1e-9)
        assert np.isnan(result[10:15]).all()

    def test_detrend_single_observation(self):
        y = np.array([np.nan, 4.0, np.nan])
        result = Preprocessor().detrend(y)
        assert result[1] == 0.0
        assert np.isnan(result[[0, 2]]).all()

    def test_moving_mean_odd_window(self):
        result = Preprocessor().moving_mean(np.array([1.0, 2.0, 3.0, 4.0]), 3)
        np.testing.assert_allclose(result, [1.5, 2.0, 3.0, 3.5])

    def test_moving_mean_even_window_reaches_back(self):
        """A 12-sample window spans 6 samples back and 5 forward."""
        y = np.arange(24, dtype=float)
        result = Preprocessor().moving_mean(y, 12)
        assert result[0] == pytest.approx(np.mean(y[0:6]))
        assert result[10] == pytest.approx(np.mean(y[4:16]))
        assert result[23] == pytest.approx(np.mean(y[17:24]))

    def test_moving_mean_ignores_nan(self):
        result = Preprocessor().moving_mean(np.array([1.0, np.nan, 3.0]), 3)
        np.testing.assert_allclose(result, [1.0, 2.0, 3.0])

    def test_moving_mean_all_missing_window(self):
        y = np.array([1.0, np.nan, np.nan, np.nan, 5.0])
        result = Preprocessor().moving_mean(y, 3)
        assert np.isnan(result[2])
        assert result[1] == 1.0

    def test_smoothing_window(self):
        assert Preprocessor.smoothing_window(1) == 12
        assert Preprocessor.smoothing_window(3) == 4
        assert Preprocessor.smoothing_window(12) == 1
        assert Preprocessor.smoothing_window(24) == 1

    def test_window_of_one_only_detrends(self):
        y = np.array([1.0, 5.0, 2.0, 8.0])
        result = Preprocessor().preprocess(y, time_step=12, enabled=True)
        np.testing.assert_allclose(result, Preprocessor().detrend(y))

    @given(
        values=st.lists(maybe_missing, min_size=1, max_size=120),
        time_step=st.sampled_from([1, 2, 3, 6, 12]),
    )
    @settings(max_examples=100, deadline=None)
    def test_missing_mask_preserved(self, values, time_step):
        """
        Property: output is missing exactly where input is missing, and
        lengths match.
        """
        y = np.array(values, dtype=float)
        result = Preprocessor().preprocess(y, time_step=time_step, enabled="yes")

        assert len(result) == len(y)
        np.testing.assert_array_equal(np.isnan(result), np.isnan(y))
