"""Calendar alignment, resampling, preprocessing and loading of sea level series."""

from .calendar import AlignmentWindow, CalendarGrid, build_calendar_grid, compute_alignment_window
from .loaders import DataLoader, load_region_dataset
from .preprocessors import Preprocessor
from .resampler import ResampledSeries, Resampler
from .splitters import GapSplitter, SplitIndices
from .validators import DataValidator, QualityMetrics

__all__ = [
    "AlignmentWindow",
    "CalendarGrid",
    "build_calendar_grid",
    "compute_alignment_window",
    "DataLoader",
    "load_region_dataset",
    "Preprocessor",
    "ResampledSeries",
    "Resampler",
    "GapSplitter",
    "SplitIndices",
    "DataValidator",
    "QualityMetrics",
]
