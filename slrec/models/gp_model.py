"""
Gaussian Process reconstruction with a fixed exponential kernel.
"""

from typing import Any, Dict, Optional, Tuple
import time

import numpy as np
from scipy.stats import norm
from sklearn.gaussian_process import GaussianProcessRegressor
from sklearn.gaussian_process.kernels import ConstantKernel, Matern, WhiteKernel
from sklearn.metrics import mean_squared_error

from ..utils.error_handling import ModelFitError, convert_fit_errors
from ..utils.numerics import sample_std
from .base_model import BaseModel, logger


class GaussianProcessModel(BaseModel):
    """
    Zero-mean GP regressor of the response on the predictor.

    The kernel is sigma_f^2 * exp(-r / sigma_l) plus white noise sigma_n^2.
    Hyperparameters are set from the data once and never optimised:
    sigma_l is the mean predictor standard deviation and
    sigma_f = sigma_n = std(y) / sqrt(2). Inference is exact.
    """

    defaults = {
        "interval_level": 0.95,
    }

    def __init__(
        self,
        model_id: Optional[str] = None,
        hyperparameters: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(model_id, hyperparameters)
        self.model_object: Optional[GaussianProcessRegressor] = None

    @property
    def model_type(self) -> str:
        return "gp_exponential"

    def _build_kernel(self, X: np.ndarray, y: np.ndarray):
        sigma_l = float(np.mean(sample_std(X, axis=0)))
        sigma_f = float(sample_std(y)) / np.sqrt(2.0)
        if not (np.isfinite(sigma_l) and sigma_l > 0):
            raise ModelFitError("GP", f"Degenerate kernel length scale {sigma_l}")
        if not (np.isfinite(sigma_f) and sigma_f > 0):
            raise ModelFitError("GP", f"Degenerate signal standard deviation {sigma_f}")

        self.hyperparameters.update({
            "sigma_l": sigma_l,
            "sigma_f": sigma_f,
            "sigma_n": sigma_f,
        })

        return (
            ConstantKernel(sigma_f ** 2, constant_value_bounds="fixed")
            * Matern(length_scale=sigma_l, length_scale_bounds="fixed", nu=0.5)
            + WhiteKernel(noise_level=sigma_f ** 2, noise_level_bounds="fixed")
        )

    @convert_fit_errors("GP")
    def fit(self, X: np.ndarray, y: np.ndarray, **kwargs) -> "GaussianProcessModel":
        """
        Fit on the observed rows of y.

        Rows where y is NaN are left out of the fit; they are reconstructed
        by predict.
        """
        X = self._validate_input(X)
        y = np.asarray(y, dtype=float).ravel()
        if len(y) != len(X):
            raise ModelFitError("GP", f"X has {len(X)} rows but y has {len(y)}")

        observed = ~np.isnan(y)
        if observed.sum() < 2:
            raise ModelFitError("GP", "At least two observed response values are required")

        X_obs, y_obs = X[observed], y[observed]
        if not np.isfinite(X_obs).all():
            raise ModelFitError("GP", "Predictor is not finite on observed rows")

        self.n_features = X.shape[1]
        kernel = self._build_kernel(X_obs, y_obs)

        start = time.perf_counter()
        self.model_object = GaussianProcessRegressor(
            kernel=kernel,
            optimizer=None,
            normalize_y=False,
        )
        self.model_object.fit(X_obs, y_obs)
        self.training_time = time.perf_counter() - start

        fitted = self.model_object.predict(X_obs)
        self.training_metrics["rmse"] = float(np.sqrt(mean_squared_error(y_obs, fitted)))
        self.training_metrics["n_observed"] = int(observed.sum())

        self.is_fitted = True
        logger.info(
            f"GP fitted on {int(observed.sum())} of {len(y)} rows "
            f"(sigma_l={self.hyperparameters['sigma_l']:.4g}, "
            f"sigma_f={self.hyperparameters['sigma_f']:.4g})"
        )
        return self

    def predict(self, X: np.ndarray) -> np.ndarray:
        """Posterior mean at every row of X."""
        y_pred, _ = self.predict_interval(X)
        return y_pred

    @convert_fit_errors("GP")
    def predict_interval(self, X: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """
        Posterior mean and two-sided prediction interval.

        The interval includes the noise variance, so it bounds new
        observations rather than the latent mean.

        Returns:
            (y_pred of shape (n,), interval of shape (n, 2) as lower/upper)
        """
        self._check_fitted()
        X = self._validate_input(X)

        y_pred, y_std = self.model_object.predict(X, return_std=True)
        z = norm.ppf(0.5 + self.hyperparameters["interval_level"] / 2.0)
        interval = np.column_stack([y_pred - z * y_std, y_pred + z * y_std])

        if not np.isfinite(y_pred).all():
            raise ModelFitError("GP", "Prediction contains non-finite values")
        return y_pred, interval
