"""Tests for loading region datasets from MATLAB files."""

import numpy as np
import pytest
from scipy.io import savemat

from slrec.data.loaders import DataLoader, load_region_dataset
from slrec.data.structs import ReconstructionConfig
from slrec.reconstruction import run_station


@pytest.fixture
def region_file(tmp_path, proxy_series, tide_gauge_series):
    """A region struct with two stations, laid out like the demo datasets."""
    x, time_pred = proxy_series
    y, time_resp = tide_gauge_series

    stations = np.empty(2, dtype=object)
    stations[0] = {"id": 24, "name_id": "BREST", "tg": y, "time_tg": time_resp}
    stations[1] = {"id": 7, "name_id": "CUXHAVEN", "tg": y[:120], "time_tg": time_resp[:120]}

    path = tmp_path / "north_atlantic.mat"
    savemat(str(path), {"NA": {
        "name": "NA",
        "region_title": "North Atlantic",
        "initial_year": 1950,
        "neurons": 6,
        "slproxy": x,
        "time_proxy": time_pred,
        "stations": stations,
        "sl": x[(1993 - 1950) * 12:, 0],
        "time_sl": time_pred[(1993 - 1950) * 12:],
    }})
    return path


def test_load_region(region_file, tide_gauge_series):
    dataset = DataLoader().load_region(region_file)

    assert dataset.region_title == "North Atlantic"
    assert dataset.initial_year == 1950
    assert dataset.neurons == 6
    assert len(dataset.time_proxy) == 828
    assert [s.name_id for s in dataset.stations] == ["BREST", "CUXHAVEN"]
    assert dataset.stations[0].id == 24
    np.testing.assert_allclose(dataset.stations[0].tg, tide_gauge_series[0])
    assert len(dataset.stations[1].time_tg) == 120


def test_load_region_by_key(region_file):
    assert load_region_dataset(region_file, key="NA").name == "NA"


def test_missing_key_raises(region_file):
    with pytest.raises(KeyError):
        DataLoader().load_region(region_file, key="MED")


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        DataLoader().load_region(tmp_path / "absent.mat")


def test_incomplete_struct_raises(tmp_path):
    path = tmp_path / "broken.mat"
    savemat(str(path), {"R": {"initial_year": 1950, "neurons": 20}})
    with pytest.raises(KeyError, match="missing fields"):
        DataLoader().load_region(path)


def test_run_station_uses_region_settings(region_file):
    dataset = DataLoader().load_region(region_file)
    config = ReconstructionConfig(initial_year=1900, analysis="GP", neurons=99)

    result = run_station(dataset, 1, config)

    assert result.ok
    assert len(result.y_pred) == 828
    assert len(result.time) == 828
    # CUXHAVEN covers 1980-1989 only
    assert np.isnan(result.y[(1990 - 1950) * 12:]).all()


def test_altimetry_series_is_carried(region_file):
    dataset = DataLoader().load_region(region_file)

    assert len(dataset.sl) == len(dataset.time_sl) == (2019 - 1993) * 12
    np.testing.assert_allclose(dataset.time_sl, dataset.time_proxy[(1993 - 1950) * 12:])


def test_altimetry_series_is_optional(tmp_path, proxy_series):
    x, time_pred = proxy_series
    path = tmp_path / "mediterranean.mat"
    savemat(str(path), {"MED": {
        "initial_year": 1950,
        "neurons": 20,
        "slproxy": x,
        "time_proxy": time_pred,
        "stations": {"id": 1, "name_id": "TRIESTE", "tg": x[:24, 0], "time_tg": time_pred[:24]},
    }})

    dataset = DataLoader().load_region(path)

    assert dataset.sl is None
    assert dataset.time_sl is None
    assert dataset.region_title == "MED"
    assert [s.name_id for s in dataset.stations] == ["TRIESTE"]
