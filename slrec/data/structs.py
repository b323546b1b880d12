"""Core data structures for the reconstruction pipeline."""

from dataclasses import dataclass, field, fields
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional, Union

import numpy as np
import pandas as pd

from ..utils.error_handling import (
    ConfigurationError,
    ShapeMismatchError,
    UnsupportedMethod,
    UnsupportedMethodError,
)

DEFAULT_HORIZON_END = date(2018, 12, 31)


class Method(str, Enum):
    """Regression strategy used to reconstruct the response."""
    GP = "GP"
    RNN = "RNN"

    @classmethod
    def parse(cls, name: Union[str, "Method"]) -> "Method":
        """Case-insensitive lookup; raises UnsupportedMethodError otherwise."""
        if isinstance(name, Method):
            return name
        try:
            return cls(str(name).strip().upper())
        except ValueError:
            raise UnsupportedMethodError(str(name)) from None


def parse_pre_proc(value: Union[str, bool]) -> bool:
    """Accept the 'yes'/'no' toggle (any case) or a bool."""
    if isinstance(value, bool):
        return value
    normalized = str(value).strip().lower()
    if normalized == "yes":
        return True
    if normalized == "no":
        return False
    raise ConfigurationError(f"pre_proc must be 'yes' or 'no', got {value!r}")


@dataclass
class TimeSeries:
    """
    Time-stamped values with NaN marking missing observations.

    Attributes:
        time: Day numbers (datenum scale), one per row
        values: 1-D values or a 2-D (observations x features) matrix
    """
    time: np.ndarray
    values: np.ndarray

    def __post_init__(self):
        self.time = np.asarray(self.time, dtype=float).ravel()
        self.values = np.asarray(self.values, dtype=float)
        if len(self.time) != len(self.values):
            raise ValueError(
                f"Length mismatch: time ({len(self.time)}) vs values ({len(self.values)})"
            )

    def __len__(self) -> int:
        return len(self.time)

    @property
    def missing_mask(self) -> np.ndarray:
        """Boolean mask, True where an observation is missing."""
        if self.values.ndim == 1:
            return np.isnan(self.values)
        return np.isnan(self.values).all(axis=1)


@dataclass(frozen=True)
class ReconstructionConfig:
    """
    Immutable run configuration for one reconstruction.

    Attributes:
        initial_year: First year of the reconstruction
        analysis: Requested method name (validated at dispatch time)
        pre_proc: Detrend and 1-year smoothing of the response
        neurons: Hidden units of the recurrent layer (RNN only)
        horizon_end: Last day of the reconstruction calendar
        seed: Random seed for the RNN branch; None leaves runs non-deterministic
        dropout: Dropout rate after the recurrent layer
        val_fraction: Share of the earliest training rows held out for validation
        max_epochs: Maximum training epochs
        validation_frequency: Validate every this many epochs
        patience: Non-improving validation checks before stopping
        learning_rate: Adam learning rate
        deadline_seconds: Wall-clock budget for RNN training, None for no limit
        interval_level: Coverage of the GP prediction interval
    """
    initial_year: int
    analysis: str = "GP"
    pre_proc: bool = True
    neurons: int = 20
    horizon_end: date = DEFAULT_HORIZON_END
    seed: Optional[int] = None
    dropout: float = 0.3
    val_fraction: float = 0.1
    max_epochs: int = 3000
    validation_frequency: int = 2
    patience: int = 10
    learning_rate: float = 0.001
    deadline_seconds: Optional[float] = None
    interval_level: float = 0.95

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReconstructionConfig":
        """Create from a (validated) configuration mapping; unknown keys are ignored."""
        known = {f.name for f in fields(cls)}
        kwargs = {k: v for k, v in data.items() if k in known}
        if "pre_proc" in kwargs:
            kwargs["pre_proc"] = parse_pre_proc(kwargs["pre_proc"])
        if isinstance(kwargs.get("horizon_end"), str):
            kwargs["horizon_end"] = date.fromisoformat(kwargs["horizon_end"])
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {f.name: getattr(self, f.name) for f in fields(self)}
        result["horizon_end"] = self.horizon_end.isoformat()
        return result


@dataclass
class ReconstructionResult:
    """
    Output of one reconstruction run.

    Attributes:
        time: Calendar grid as day numbers
        x: Aligned predictor (observations x features)
        y: Aligned, optionally preprocessed response with NaN gaps
        y_pred: Reconstruction aligned to `time`, None for an unknown method
        interval: (n x 2) lower/upper prediction interval, GP only
        method: Method that produced y_pred
        time_step: Months between consecutive grid entries
        error: UnsupportedMethod when the analysis name was not recognised
        artifact: Model metadata (hyperparameters, training metrics)
    """
    time: np.ndarray
    x: np.ndarray
    y: np.ndarray
    y_pred: Optional[np.ndarray] = None
    interval: Optional[np.ndarray] = None
    method: Optional[Method] = None
    time_step: int = 1
    error: Optional[UnsupportedMethod] = None
    artifact: Dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def dates(self) -> pd.DatetimeIndex:
        """`time` as calendar dates."""
        from .calendar import day_numbers_to_dates
        return day_numbers_to_dates(self.time)

    def to_frame(self) -> pd.DataFrame:
        """
        Tabular view for plotting collaborators.

        Returns:
            DataFrame indexed by date with 'observed', 'reconstructed' and,
            for GP, 'lower'/'upper' columns

        Raises:
            ShapeMismatchError: If the samples do not line up with the calendar,
                e.g. a pass-through record starting before the initial year
        """
        if len(self.time) != len(self.y):
            raise ShapeMismatchError(
                f"Calendar has {len(self.time)} entries but the response has "
                f"{len(self.y)} samples; cannot date the samples"
            )
        frame = pd.DataFrame(
            {"observed": np.asarray(self.y, dtype=float)},
            index=self.dates,
        )
        frame.index.name = "time"
        if self.y_pred is not None:
            frame["reconstructed"] = np.asarray(self.y_pred, dtype=float)
        if self.interval is not None:
            frame["lower"] = self.interval[:, 0]
            frame["upper"] = self.interval[:, 1]
        return frame


@dataclass
class StationRecord:
    """Tide gauge record of a single station."""
    id: int
    name_id: str
    tg: np.ndarray
    time_tg: np.ndarray


@dataclass
class RegionDataset:
    """
    Regional proxy plus the tide gauge stations it is compared against.

    `sl`/`time_sl` hold the regional altimetry series when the dataset ships
    one; it is only carried along for plotting.
    """
    name: str
    region_title: str
    initial_year: int
    neurons: int
    slproxy: np.ndarray
    time_proxy: np.ndarray
    stations: List[StationRecord] = field(default_factory=list)
    sl: Optional[np.ndarray] = None
    time_sl: Optional[np.ndarray] = None

    def __post_init__(self):
        if len(self.time_proxy) != len(self.slproxy):
            raise ValueError(
                f"Length mismatch: time_proxy ({len(self.time_proxy)}) vs slproxy ({len(self.slproxy)})"
            )
        if (self.sl is None) != (self.time_sl is None):
            raise ValueError("sl and time_sl must be given together")
        if self.sl is not None and len(self.sl) != len(self.time_sl):
            raise ValueError(
                f"Length mismatch: time_sl ({len(self.time_sl)}) vs sl ({len(self.sl)})"
            )
