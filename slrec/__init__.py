"""Regional sea level reconstruction from proxy data with GP or RNN regression."""

from slrec.data.structs import (
    Method,
    ReconstructionConfig,
    ReconstructionResult,
    RegionDataset,
    StationRecord,
    TimeSeries,
)
from slrec.reconstruction import Reconstructor, reconstruct, run_station
from slrec.utils.error_handling import (
    ConfigurationError,
    InvalidRangeError,
    ModelFitError,
    ReconstructionError,
    ShapeMismatchError,
    UnsupportedMethod,
)

__version__ = "0.1.0"

__all__ = [
    "Method",
    "ReconstructionConfig",
    "ReconstructionResult",
    "RegionDataset",
    "StationRecord",
    "TimeSeries",
    "Reconstructor",
    "reconstruct",
    "run_station",
    "ConfigurationError",
    "InvalidRangeError",
    "ModelFitError",
    "ReconstructionError",
    "ShapeMismatchError",
    "UnsupportedMethod",
]
