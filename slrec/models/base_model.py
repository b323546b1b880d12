"""Base model interface for the reconstruction regressors."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional, Tuple
import logging

import numpy as np

logger = logging.getLogger(__name__)


@dataclass
class ModelArtifact:
    """Metadata describing a fitted model."""
    model_id: str
    model_type: str
    hyperparameters: Dict[str, Any]
    training_metrics: Dict[str, float] = field(default_factory=dict)
    validation_metrics: Dict[str, float] = field(default_factory=dict)
    n_features: int = 0
    training_time: float = 0.0
    created_at: datetime = field(default_factory=datetime.now)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert artifact metadata to dictionary."""
        return {
            "model_id": self.model_id,
            "model_type": self.model_type,
            "hyperparameters": self.hyperparameters,
            "training_metrics": self.training_metrics,
            "validation_metrics": self.validation_metrics,
            "n_features": self.n_features,
            "training_time": self.training_time,
            "created_at": self.created_at.isoformat(),
            "metadata": self.metadata,
        }


class BaseModel(ABC):
    """Abstract base class for the GP and RNN reconstruction models."""

    # Subclasses fill missing hyperparameters from these
    defaults: Dict[str, Any] = {}

    def __init__(
        self,
        model_id: Optional[str] = None,
        hyperparameters: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize base model.

        Args:
            model_id: Unique identifier for the model
            hyperparameters: Model hyperparameters
        """
        self.hyperparameters = dict(self.defaults)
        self.hyperparameters.update(hyperparameters or {})
        self.model_id = model_id or self._generate_model_id()
        self.model_object: Any = None
        self.is_fitted: bool = False
        self.n_features: int = 0
        self.training_metrics: Dict[str, float] = {}
        self.validation_metrics: Dict[str, float] = {}
        self.training_time: float = 0.0
        self._created_at: datetime = datetime.now()

    @property
    @abstractmethod
    def model_type(self) -> str:
        """Return the model type identifier."""
        pass

    @abstractmethod
    def fit(self, X: np.ndarray, y: np.ndarray, **kwargs) -> "BaseModel":
        """
        Fit the model on a gapped response.

        Args:
            X: Predictor matrix (observations x features)
            y: Response with NaN marking rows to reconstruct

        Returns:
            Self for method chaining
        """
        pass

    @abstractmethod
    def predict(self, X: np.ndarray) -> np.ndarray:
        """
        Reconstruct the response for every row of X.

        Args:
            X: Predictor matrix

        Returns:
            Array of predictions, one per row
        """
        pass

    def predict_interval(self, X: np.ndarray) -> Tuple[np.ndarray, Optional[np.ndarray]]:
        """
        Predictions with an (n x 2) lower/upper interval.

        Models without a predictive distribution return None for the interval.
        """
        return self.predict(X), None

    def get_artifact(self) -> ModelArtifact:
        """
        Get model artifact containing all metadata.

        Returns:
            ModelArtifact instance
        """
        return ModelArtifact(
            model_id=self.model_id,
            model_type=self.model_type,
            hyperparameters=self.hyperparameters,
            training_metrics=self.training_metrics,
            validation_metrics=self.validation_metrics,
            n_features=self.n_features,
            training_time=self.training_time,
            created_at=self._created_at,
        )

    def _generate_model_id(self) -> str:
        """Generate a unique model ID."""
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        return f"{self.model_type}_{timestamp}"

    def _validate_input(self, X: np.ndarray) -> np.ndarray:
        """Validate the predictor matrix and return it as 2-D floats."""
        X = np.asarray(X, dtype=float)
        if X.ndim == 1:
            X = X.reshape(-1, 1)
        if X.ndim != 2:
            raise TypeError("X must be a 1-D or 2-D array")
        if X.size == 0:
            raise ValueError("X cannot be empty")
        if np.isnan(X).any():
            logger.warning("Input contains NaN values")
        return X

    def _check_fitted(self) -> None:
        if not self.is_fitted:
            raise RuntimeError("Model not fitted")

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"model_id='{self.model_id}', "
            f"is_fitted={self.is_fitted})"
        )
