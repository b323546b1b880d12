import os
# Keras 3 backend; JAX unless the caller already chose one
os.environ.setdefault("KERAS_BACKEND", "jax")

from typing import Any, Dict, Optional
import threading
import time

import numpy as np
import keras
from keras import layers, callbacks

from ..data.splitters import GapSplitter, SplitIndices
from ..utils.error_handling import ModelFitError, convert_fit_errors
from ..utils.numerics import sample_std
from .base_model import BaseModel, logger


class TrainingDeadline(callbacks.Callback):
    """Stops training once a wall-clock budget is spent or a cancel event is set."""

    def __init__(
        self,
        deadline_seconds: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None,
    ):
        super().__init__()
        self.deadline_seconds = deadline_seconds
        self.cancel_event = cancel_event
        self.stopped_reason: Optional[str] = None
        self._start: float = 0.0

    def on_train_begin(self, logs=None):
        self._start = time.monotonic()
        self.stopped_reason = None

    def on_epoch_end(self, epoch, logs=None):
        if self.cancel_event is not None and self.cancel_event.is_set():
            self.stopped_reason = "cancelled"
        elif (
            self.deadline_seconds is not None
            and time.monotonic() - self._start >= self.deadline_seconds
        ):
            self.stopped_reason = "deadline"

        if self.stopped_reason:
            logger.warning(f"RNN training stopped at epoch {epoch + 1}: {self.stopped_reason}")
            self.model.stop_training = True


class ValidationEarlyStopping(callbacks.EarlyStopping):
    """
    EarlyStopping that skips epochs without the monitored metric.

    With `validation_freq > 1` most epochs carry no `val_loss`; patience then
    counts validation checks, not epochs.
    """

    def on_epoch_end(self, epoch, logs=None):
        if not logs or self.monitor not in logs:
            return
        super().on_epoch_end(epoch, logs)


class RecurrentModel(BaseModel):
    """
    GRU reconstruction of the response from the predictor sequence.

    The whole predictor record is consumed as one sequence and the network
    emits one value per time step. Observed rows are split by GapSplitter:
    the earliest `val_fraction` of them drive early stopping, the rest are
    fitted. Missing rows are only ever predicted.
    """

    defaults = {
        "neurons": 20,
        "dropout": 0.3,
        "val_fraction": 0.1,
        "max_epochs": 3000,
        "validation_frequency": 2,
        "patience": 10,
        "learning_rate": 0.001,
        "seed": None,
        "deadline_seconds": None,
    }

    def __init__(
        self,
        model_id: Optional[str] = None,
        hyperparameters: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize the recurrent model.

        Hyperparameters:
            neurons: Hidden units of the GRU layer
            dropout: Dropout rate after the GRU layer
            val_fraction: Share of the earliest observed rows used for validation
            max_epochs: Max training epochs
            validation_frequency: Validate every this many epochs
            patience: Early stopping patience, in validation checks
            learning_rate: Adam learning rate
            seed: Seed for weight init and dropout; None for non-deterministic runs
            deadline_seconds: Wall-clock training budget, None for no limit
        """
        super().__init__(model_id, hyperparameters)
        self.model_object: Optional[keras.Model] = None
        self.split: Optional[SplitIndices] = None
        self.stopped_reason: Optional[str] = None
        self._y_mean = 0.0
        self._y_std = 1.0
        self._x_mean: Optional[np.ndarray] = None
        self._x_std: Optional[np.ndarray] = None

    @property
    def model_type(self) -> str:
        return "rnn_gru"

    def _build_model(self, n_features: int) -> keras.Model:
        """Build the sequence-to-sequence GRU network."""
        model = keras.Sequential([
            layers.Input(shape=(None, n_features)),
            layers.GRU(self.hyperparameters["neurons"], return_sequences=True),
            layers.Dropout(self.hyperparameters["dropout"]),
            layers.Dense(1),
        ])

        optimizer = keras.optimizers.Adam(learning_rate=self.hyperparameters["learning_rate"])
        model.compile(optimizer=optimizer, loss="mse")
        return model

    def _standardize(self, X: np.ndarray, y: np.ndarray, observed: list) -> None:
        """Store mean/std of the observed rows; gap rows never contribute."""
        y_obs = y[observed]
        self._y_mean = float(np.mean(y_obs))
        self._y_std = float(sample_std(y_obs))
        if not self._y_std > 0:
            raise ModelFitError("RNN", "Observed response has zero variance")

        self._x_mean = np.nanmean(X[observed], axis=0)
        self._x_std = sample_std(X[observed], axis=0)
        if np.any(self._x_std == 0):
            raise ModelFitError("RNN", "A predictor feature has zero variance on observed rows")

    def _normalize_x(self, X: np.ndarray) -> np.ndarray:
        return (X - self._x_mean) / self._x_std

    @staticmethod
    def _as_sequence(values: np.ndarray) -> np.ndarray:
        """Add the batch axis (and a feature axis for targets)."""
        values = np.asarray(values, dtype=np.float32)
        if values.ndim == 1:
            values = values.reshape(-1, 1)
        return values[np.newaxis, ...]

    @convert_fit_errors("RNN")
    def fit(
        self,
        X: np.ndarray,
        y: np.ndarray,
        cancel_event: Optional[threading.Event] = None,
        **kwargs
    ) -> "RecurrentModel":
        """
        Fit on the observed rows of y.

        Args:
            X: Predictor matrix (observations x features)
            y: Response with NaN marking rows to reconstruct
            cancel_event: Optional event that stops training when set
            **kwargs: Additional args passed to keras fit
        """
        X = self._validate_input(X)
        y = np.asarray(y, dtype=float).ravel()
        if len(y) != len(X):
            raise ModelFitError("RNN", f"X has {len(X)} rows but y has {len(y)}")

        seed = self.hyperparameters["seed"]
        if seed is not None:
            keras.utils.set_random_seed(int(seed))

        splitter = GapSplitter()
        self.split = splitter.split(y, val_fraction=self.hyperparameters["val_fraction"])
        if not self.split.train_indices:
            raise ModelFitError("RNN", "No observed rows left to train on")

        self.n_features = X.shape[1]
        self._standardize(X, y, self.split.observed_indices)

        X_norm = self._normalize_x(X)
        y_norm = (y - self._y_mean) / self._y_std
        (x_train, y_train), (x_val, y_val) = splitter.apply_split(X_norm, y_norm, self.split)

        validation_data = None
        if len(x_val) > 0:
            validation_data = (self._as_sequence(x_val), self._as_sequence(y_val))

        self.model_object = self._build_model(self.n_features)

        early_stopping = ValidationEarlyStopping(
            monitor="val_loss" if validation_data else "loss",
            mode="min",
            patience=self.hyperparameters["patience"],
            restore_best_weights=False,
        )
        deadline = TrainingDeadline(
            deadline_seconds=self.hyperparameters["deadline_seconds"],
            cancel_event=cancel_event,
        )

        logger.info(
            f"Training GRU({self.hyperparameters['neurons']}) on {len(x_train)} rows, "
            f"validating on {len(x_val)}"
        )
        start = time.perf_counter()
        history = self.model_object.fit(
            self._as_sequence(x_train),
            self._as_sequence(y_train),
            validation_data=validation_data,
            validation_freq=self.hyperparameters["validation_frequency"],
            epochs=self.hyperparameters["max_epochs"],
            batch_size=1,
            shuffle=False,
            callbacks=[early_stopping, deadline, callbacks.TerminateOnNaN()],
            verbose=0,
            **kwargs
        )
        self.training_time = time.perf_counter() - start
        self.stopped_reason = deadline.stopped_reason

        hist = history.history
        if not np.all(np.isfinite(hist["loss"])):
            raise ModelFitError("RNN", "Training loss became non-finite")

        self.training_metrics["loss"] = float(hist["loss"][-1])
        self.training_metrics["epochs"] = len(hist["loss"])
        if hist.get("val_loss"):
            self.validation_metrics["loss"] = float(hist["val_loss"][-1])

        self.is_fitted = True
        return self

    @convert_fit_errors("RNN")
    def predict(self, X: np.ndarray) -> np.ndarray:
        """Run the network over the full predictor record, in response units."""
        self._check_fitted()
        X = self._validate_input(X)

        preds = self.model_object.predict(self._as_sequence(self._normalize_x(X)), verbose=0)
        y_pred = self._y_std * np.asarray(preds, dtype=float).reshape(-1) + self._y_mean

        if not np.isfinite(y_pred).all():
            raise ModelFitError("RNN", "Prediction contains non-finite values")
        return y_pred
