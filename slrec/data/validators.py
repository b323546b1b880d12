"""Input validation for predictor and response series."""

from typing import Any, List
from dataclasses import dataclass, field
import logging

import numpy as np

from ..utils.error_handling import ShapeMismatchError
from .calendar import to_day_numbers

logger = logging.getLogger(__name__)


@dataclass
class QualityMetrics:
    """Coverage summary of a response series."""
    row_count: int
    observed_count: int
    missing_count: int
    issues: List[str] = field(default_factory=list)

    @property
    def coverage(self) -> float:
        return self.observed_count / self.row_count if self.row_count else 0.0

    def to_dict(self) -> dict:
        """Convert to dictionary for logging."""
        return {
            "row_count": self.row_count,
            "observed_count": self.observed_count,
            "missing_count": self.missing_count,
            "coverage": self.coverage,
            "issues": self.issues,
        }


class DataValidator:
    """Validates the numeric inputs of a reconstruction."""

    def validate_inputs(
        self,
        x: Any,
        y: Any,
        time_pred: Any,
        time_resp: Any
    ) -> tuple:
        """
        Coerce inputs to float arrays and check their shapes.

        Returns:
            (x, y, time_pred, time_resp) with x 2-D and the rest 1-D, times
            as day numbers

        Raises:
            ShapeMismatchError: On inconsistent lengths or unordered timestamps
        """
        x = np.asarray(x, dtype=float)
        if x.ndim == 1:
            x = x.reshape(-1, 1)
        elif x.ndim != 2:
            raise ShapeMismatchError(f"Predictor must be 1-D or 2-D, got {x.ndim} dimensions")

        y = np.asarray(y, dtype=float)
        if y.ndim == 2 and 1 in y.shape:
            y = y.ravel()
        if y.ndim != 1:
            raise ShapeMismatchError(f"Response must be a vector, got shape {y.shape}")

        time_pred = to_day_numbers(time_pred)
        time_resp = to_day_numbers(time_resp)

        if len(x) != len(time_pred):
            raise ShapeMismatchError(
                f"Length mismatch: predictor ({len(x)}) vs time_pred ({len(time_pred)})"
            )
        if len(y) != len(time_resp):
            raise ShapeMismatchError(
                f"Length mismatch: response ({len(y)}) vs time_resp ({len(time_resp)})"
            )
        for name, times in (("time_pred", time_pred), ("time_resp", time_resp)):
            if np.isnan(times).any():
                raise ShapeMismatchError(f"{name} contains missing timestamps")
            if np.any(np.diff(times) <= 0):
                raise ShapeMismatchError(f"{name} must be strictly increasing")

        if np.isnan(x).any():
            logger.warning("Predictor contains NaN values")

        return x, y, time_pred, time_resp

    def calculate_quality_metrics(self, y: np.ndarray) -> QualityMetrics:
        """Summarise how much of the response is observed."""
        y = np.asarray(y, dtype=float).ravel()
        missing = int(np.isnan(y).sum())
        metrics = QualityMetrics(
            row_count=len(y),
            observed_count=len(y) - missing,
            missing_count=missing,
        )
        if metrics.observed_count == 0:
            metrics.issues.append("Response has no observed values")
        return metrics
