"""Loading of regional proxy / tide gauge datasets from MATLAB files."""

from pathlib import Path
from typing import Any, List, Optional, Union
import logging

import numpy as np
from scipy.io import loadmat

from .structs import RegionDataset, StationRecord

logger = logging.getLogger(__name__)

REGION_FIELDS = ("initial_year", "neurons", "slproxy", "time_proxy", "stations")


def _as_list(value: Any) -> List[Any]:
    """squeeze_me collapses one-element struct arrays to a bare struct."""
    if isinstance(value, np.ndarray):
        return list(value.ravel())
    return [value]


def _as_text(value: Any) -> str:
    if isinstance(value, np.ndarray):
        return "".join(str(v) for v in value.ravel())
    return str(value)


class DataLoader:
    """Reads the region structs written by the reconstruction demo datasets."""

    def load_region(
        self,
        path: Union[str, Path],
        key: Optional[str] = None
    ) -> RegionDataset:
        """
        Load one region from a .mat file.

        Args:
            path: Path to the .mat file
            key: Variable holding the region struct; the first struct-like
                variable when omitted

        Returns:
            RegionDataset

        Raises:
            FileNotFoundError: If the file doesn't exist
            KeyError: If the variable or one of its fields is missing
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Dataset not found: {path}")

        contents = loadmat(str(path), squeeze_me=True, struct_as_record=False)
        variables = {k: v for k, v in contents.items() if not k.startswith("__")}

        if key is None:
            candidates = [k for k, v in variables.items() if hasattr(v, "_fieldnames")]
            if not candidates:
                raise KeyError(f"No region struct found in {path}")
            key = candidates[0]
        if key not in variables:
            raise KeyError(f"Variable {key!r} not found in {path}")

        region = variables[key]
        missing = [f for f in REGION_FIELDS if f not in getattr(region, "_fieldnames", [])]
        if missing:
            raise KeyError(f"Region {key!r} is missing fields: {missing}")

        stations = [
            StationRecord(
                id=int(station.id),
                name_id=_as_text(station.name_id),
                tg=np.asarray(station.tg, dtype=float).ravel(),
                time_tg=np.asarray(station.time_tg, dtype=float).ravel(),
            )
            for station in _as_list(region.stations)
        ]

        sl = time_sl = None
        fieldnames = region._fieldnames
        if "sl" in fieldnames and "time_sl" in fieldnames:
            sl = np.asarray(region.sl, dtype=float).ravel()
            time_sl = np.asarray(region.time_sl, dtype=float).ravel()

        dataset = RegionDataset(
            name=_as_text(getattr(region, "name", key)),
            region_title=_as_text(getattr(region, "region_title", key)),
            initial_year=int(region.initial_year),
            neurons=int(region.neurons),
            slproxy=np.asarray(region.slproxy, dtype=float),
            time_proxy=np.asarray(region.time_proxy, dtype=float).ravel(),
            stations=stations,
            sl=sl,
            time_sl=time_sl,
        )
        logger.info(f"Loaded region {dataset.region_title!r} with {len(stations)} stations from {path}")
        return dataset


def load_region_dataset(path: Union[str, Path], key: Optional[str] = None) -> RegionDataset:
    """Shortcut for DataLoader().load_region."""
    return DataLoader().load_region(path, key=key)
