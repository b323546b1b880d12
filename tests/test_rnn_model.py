"""
Tests for the recurrent reconstruction model (Keras version).
"""

import os
# We use JAX for testing in this environment
os.environ.setdefault("KERAS_BACKEND", "jax")

import threading
import warnings

import numpy as np
import pytest

from slrec.models.rnn_model import RecurrentModel
from slrec.utils.error_handling import ModelFitError

FAST = {"neurons": 4, "max_epochs": 4, "validation_frequency": 2, "patience": 10}


def test_rnn_fit_predict_full_length(small_gapped_data):
    X, y = small_gapped_data
    model = RecurrentModel(hyperparameters={**FAST, "seed": 1})

    model.fit(X, y)
    preds = model.predict(X)

    assert model.is_fitted
    assert preds.shape == (60,)
    assert np.isfinite(preds).all()
    assert model.training_metrics["epochs"] == 4
    assert "loss" in model.validation_metrics


def test_rnn_validation_is_earliest_observed_rows(small_gapped_data):
    X, y = small_gapped_data
    model = RecurrentModel(hyperparameters={**FAST, "max_epochs": 1})
    model.fit(X, y)

    # 50 observed rows -> 5 validation rows, taken from the start
    assert model.split.validation_indices == [0, 1, 2, 3, 4]
    assert model.split.train_indices[0] == 5
    assert model.split.test_indices == list(range(20, 30))


def test_rnn_standardizes_with_observed_rows_only(small_gapped_data):
    X, y = small_gapped_data
    model = RecurrentModel(hyperparameters={**FAST, "max_epochs": 1}).fit(X, y)

    observed = ~np.isnan(y)
    assert model._y_mean == pytest.approx(np.mean(y[observed]))
    assert model._y_std == pytest.approx(np.std(y[observed], ddof=1))
    np.testing.assert_allclose(model._x_mean, X[observed].mean(axis=0))


def test_rnn_seed_makes_runs_repeatable(small_gapped_data):
    X, y = small_gapped_data
    p1 = RecurrentModel(hyperparameters={**FAST, "seed": 123}).fit(X, y).predict(X)
    p2 = RecurrentModel(hyperparameters={**FAST, "seed": 123}).fit(X, y).predict(X)
    np.testing.assert_allclose(p1, p2, atol=1e-5)


def test_rnn_cancel_event_stops_training(small_gapped_data):
    X, y = small_gapped_data
    cancel = threading.Event()
    cancel.set()
    model = RecurrentModel(hyperparameters={**FAST, "max_epochs": 50})

    model.fit(X, y, cancel_event=cancel)

    assert model.stopped_reason == "cancelled"
    assert model.training_metrics["epochs"] == 1
    assert np.isfinite(model.predict(X)).all()


def test_rnn_deadline_stops_training(small_gapped_data):
    X, y = small_gapped_data
    model = RecurrentModel(hyperparameters={**FAST, "max_epochs": 50, "deadline_seconds": 1e-9})

    model.fit(X, y)

    assert model.stopped_reason == "deadline"
    assert model.training_metrics["epochs"] == 1


def test_rnn_constant_feature_raises(small_gapped_data):
    X, y = small_gapped_data
    X = X.copy()
    X[:, 1] = 3.0
    with pytest.raises(ModelFitError) as excinfo:
        RecurrentModel(hyperparameters=FAST).fit(X, y)
    assert excinfo.value.branch == "RNN"


def test_rnn_without_observations_raises():
    X = np.linspace(0, 1, 10).reshape(-1, 1)
    y = np.full(10, np.nan)
    with pytest.raises(ModelFitError):
        RecurrentModel(hyperparameters=FAST).fit(X, y)


def test_rnn_defaults():
    model = RecurrentModel()
    assert model.hyperparameters["dropout"] == 0.3
    assert model.hyperparameters["max_epochs"] == 3000
    assert model.hyperparameters["patience"] == 10
    assert model.hyperparameters["val_fraction"] == 0.1
    assert model.model_type == "rnn_gru"


def test_rnn_patience_counts_validation_checks(small_gapped_data):
    """A frozen network never improves: first check at epoch 2, then 2 more."""
    X, y = small_gapped_data
    model = RecurrentModel(hyperparameters={
        **FAST, "max_epochs": 50, "patience": 2, "learning_rate": 0.0, "seed": 5,
    })

    model.fit(X, y)

    assert model.training_metrics["epochs"] == 6
    assert model.stopped_reason is None


def test_rnn_skips_epochs_without_validation_quietly(small_gapped_data):
    X, y = small_gapped_data
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        RecurrentModel(hyperparameters=FAST).fit(X, y)

    messages = [str(w.message) for w in caught]
    assert not any("Early stopping conditioned" in m for m in messages)
