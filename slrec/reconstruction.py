"""
Sea level reconstruction entry point.

Aligns a proxy (predictor) and a tide gauge record (response) on a monthly
calendar, optionally detrends and smooths the response, then reconstructs
the response over the whole calendar with a Gaussian Process or a
recurrent network.
"""

from dataclasses import replace
from typing import Any, Dict, Optional, Type, Union
import logging
import threading

import numpy as np

from .data.calendar import build_calendar_grid
from .data.preprocessors import Preprocessor
from .data.resampler import Resampler
from .data.structs import (
    Method,
    ReconstructionConfig,
    ReconstructionResult,
    RegionDataset,
    parse_pre_proc,
)
from .data.validators import DataValidator
from .models.base_model import BaseModel
from .models.gp_model import GaussianProcessModel
from .models.rnn_model import RecurrentModel
from .utils.error_handling import UnsupportedMethod, UnsupportedMethodError

logger = logging.getLogger(__name__)

MODEL_REGISTRY: Dict[Method, Type[BaseModel]] = {
    Method.GP: GaussianProcessModel,
    Method.RNN: RecurrentModel,
}


class Reconstructor:
    """Runs one reconstruction for a fixed configuration."""

    def __init__(self, config: ReconstructionConfig):
        self.config = config
        self.validator = DataValidator()
        self.resampler = Resampler()
        self.preprocessor = Preprocessor()

    def _model_hyperparameters(self, method: Method) -> Dict[str, Any]:
        if method is Method.GP:
            return {"interval_level": self.config.interval_level}
        return {
            "neurons": self.config.neurons,
            "dropout": self.config.dropout,
            "val_fraction": self.config.val_fraction,
            "max_epochs": self.config.max_epochs,
            "validation_frequency": self.config.validation_frequency,
            "patience": self.config.patience,
            "learning_rate": self.config.learning_rate,
            "seed": self.config.seed,
            "deadline_seconds": self.config.deadline_seconds,
        }

    def create_model(self, method: Method) -> BaseModel:
        """Instantiate the regressor for a method."""
        return MODEL_REGISTRY[method](hyperparameters=self._model_hyperparameters(method))

    def run(
        self,
        X: Any,
        Y: Any,
        time_pred: Any,
        time_resp: Any,
        cancel_event: Optional[threading.Event] = None
    ) -> ReconstructionResult:
        """
        Reconstruct the response over the calendar.

        Args:
            X: Predictor (observations x features, or 1-D)
            Y: Response
            time_pred: Predictor timestamps (day numbers or dates)
            time_resp: Response timestamps (day numbers or dates)
            cancel_event: Optional event stopping RNN training when set

        Returns:
            ReconstructionResult; for an unknown method, `error` is set and
            no prediction is attached

        Raises:
            InvalidRangeError: If the calendar window is empty
            ShapeMismatchError: If the series cannot be aligned
            ModelFitError: If the selected model fails
        """
        config = self.config
        x, y, time_pred, time_resp = self.validator.validate_inputs(X, Y, time_pred, time_resp)

        monthly_grid = build_calendar_grid(config.initial_year, config.horizon_end)
        resampled = self.resampler.resample(x, y, time_pred, time_resp, monthly_grid)

        y = self.preprocessor.preprocess(resampled.y, resampled.time_step, config.pre_proc)
        x = resampled.x

        grid = build_calendar_grid(
            config.initial_year, config.horizon_end, months=resampled.time_step
        )
        time = grid.day_numbers
        if len(time) != len(y):
            logger.warning(
                f"Calendar has {len(time)} entries but the response has {len(y)} samples"
            )

        quality = self.validator.calculate_quality_metrics(y)
        logger.info(
            f"Aligned {len(y)} samples, {quality.observed_count} observed "
            f"({quality.coverage:.0%})",
            extra={"props": quality.to_dict()},
        )

        try:
            method = Method.parse(config.analysis)
        except UnsupportedMethodError as e:
            logger.error("Unknown learning paradigm.", extra={"props": {"analysis": e.name}})
            return ReconstructionResult(
                time=time,
                x=x,
                y=y,
                time_step=resampled.time_step,
                error=UnsupportedMethod(e.name),
            )

        logger.info(f"Running {method.value} method...")
        model = self.create_model(method)
        if method is Method.RNN:
            model.fit(x, y, cancel_event=cancel_event)
        else:
            model.fit(x, y)
        y_pred, interval = model.predict_interval(x)

        return ReconstructionResult(
            time=time,
            x=x,
            y=y,
            y_pred=np.asarray(y_pred, dtype=float),
            interval=interval,
            method=method,
            time_step=resampled.time_step,
            artifact=model.get_artifact().to_dict(),
        )


def reconstruct(
    X: Any,
    Y: Any,
    time_pred: Any,
    time_resp: Any,
    initial_year: int,
    pre_proc: Union[str, bool] = "yes",
    analysis: str = "GP",
    neurons: int = 20,
    cancel_event: Optional[threading.Event] = None,
    **options
) -> ReconstructionResult:
    """
    Reconstruct regional sea level from a proxy.

    Args:
        X: Predictor for each time step (observations x features)
        Y: Response for each time step
        time_pred: Predictor timestamps as day numbers or dates
        time_resp: Response timestamps as day numbers or dates
        initial_year: First year of the reconstruction
        pre_proc: 'yes' to detrend and smooth the response, 'no' otherwise
        analysis: 'GP' or 'RNN', case-insensitive
        neurons: Hidden units of the recurrent layer (RNN only)
        cancel_event: Optional event stopping RNN training when set
        **options: Further ReconstructionConfig fields (seed, max_epochs, ...)

    Returns:
        ReconstructionResult
    """
    config = ReconstructionConfig(
        initial_year=int(initial_year),
        analysis=analysis,
        pre_proc=parse_pre_proc(pre_proc),
        neurons=int(neurons),
        **options
    )
    return Reconstructor(config).run(X, Y, time_pred, time_resp, cancel_event=cancel_event)


def run_station(
    dataset: RegionDataset,
    station_index: int,
    config: ReconstructionConfig,
    cancel_event: Optional[threading.Event] = None
) -> ReconstructionResult:
    """
    Reconstruct one tide gauge station of a region from the region's proxy.

    The region's initial year and neuron count take precedence over the
    configuration's.
    """
    station = dataset.stations[station_index]
    config = replace(config, initial_year=dataset.initial_year, neurons=dataset.neurons)
    logger.info(
        f"Reconstructing station {station.name_id} ({dataset.region_title})",
        extra={"props": {"station_id": station.id, "analysis": config.analysis}},
    )
    return Reconstructor(config).run(
        dataset.slproxy,
        station.tg,
        dataset.time_proxy,
        station.time_tg,
        cancel_event=cancel_event,
    )
