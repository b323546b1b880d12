"""Missing-value driven train/validation/gap splitting."""

from typing import List, Dict, Any, Tuple
from dataclasses import dataclass, field
import logging

import numpy as np

from ..utils.numerics import round_half_up

logger = logging.getLogger(__name__)


@dataclass
class SplitIndices:
    """
    Row indices of a gapped series.

    Attributes:
        train_indices: Observed rows used to fit, chronological
        validation_indices: Earliest observed rows held out for early stopping
        test_indices: Missing rows, reconstructed after training
    """
    train_indices: List[int]
    validation_indices: List[int]
    test_indices: List[int]
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def observed_indices(self) -> List[int]:
        """Validation followed by train rows, i.e. all observed rows in order."""
        return self.validation_indices + self.train_indices

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "train_indices": self.train_indices,
            "validation_indices": self.validation_indices,
            "test_indices": self.test_indices,
            "metadata": self.metadata,
        }


class GapSplitter:
    """Splits a series by observation status rather than by position."""

    def split(self, y: np.ndarray, val_fraction: float = 0.1) -> SplitIndices:
        """
        Split observed rows into validation/train and missing rows into test.

        The validation slice is the first round(val_fraction * n_observed)
        observed rows in chronological order; it is never shuffled.

        Args:
            y: Response with NaN marking missing samples
            val_fraction: Share of observed rows held out

        Returns:
            SplitIndices
        """
        if not 0.0 <= val_fraction < 1.0:
            raise ValueError(f"val_fraction must be in [0, 1), got {val_fraction}")

        y = np.asarray(y, dtype=float).ravel()
        missing = np.isnan(y)
        observed = np.flatnonzero(~missing).tolist()
        test_indices = np.flatnonzero(missing).tolist()

        n_val = round_half_up(val_fraction * len(observed))
        metadata = {
            "split_type": "missing_value",
            "val_fraction": val_fraction,
            "total_samples": len(y),
            "observed_samples": len(observed),
            "val_samples": n_val,
            "train_samples": len(observed) - n_val,
            "test_samples": len(test_indices),
        }
        logger.debug(f"Gap split: {metadata}")

        return SplitIndices(
            train_indices=observed[n_val:],
            validation_indices=observed[:n_val],
            test_indices=test_indices,
            metadata=metadata,
        )

    def apply_split(
        self,
        x: np.ndarray,
        y: np.ndarray,
        split: SplitIndices
    ) -> Tuple[Tuple[np.ndarray, np.ndarray], Tuple[np.ndarray, np.ndarray]]:
        """
        Select the (x, y) rows of the train and validation slices.

        Returns:
            ((x_train, y_train), (x_val, y_val))
        """
        x = np.asarray(x)
        y = np.asarray(y)
        train = (x[split.train_indices], y[split.train_indices])
        val = (x[split.validation_indices], y[split.validation_indices])
        return train, val
