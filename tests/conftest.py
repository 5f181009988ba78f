import numpy as np
import pytest
import xarray as xr

from monet_idw import SamplePoint, SampleSet


def _make_samples(points, field="value"):
    return SampleSet(SamplePoint(lon, lat, {field: value}) for lon, lat, value in points)


@pytest.fixture
def make_samples():
    """Factory creating a SampleSet from (longitude, latitude, value) tuples."""
    return _make_samples


@pytest.fixture
def random_samples():
    """Factory creating ``n`` random samples inside an extent."""

    def factory(n, seed=0, extent=(0.0, 0.0, 2.0, 2.0), field="value"):
        rng = np.random.default_rng(seed)
        west, south, east, north = extent
        lons = rng.uniform(west, east, n)
        lats = rng.uniform(south, north, n)
        values = rng.uniform(0.0, 100.0, n)
        return _make_samples(zip(lons, lats, values), field=field)

    return factory


@pytest.fixture
def station_dataset():
    """A point dataset with one sample per station, the last one missing."""
    return xr.Dataset(
        {"rain": ("station", np.array([10.0, 20.0, 30.0, np.nan]))},
        coords={
            "lat": ("station", np.array([0.0, 1.0, 0.0, 0.5])),
            "lon": ("station", np.array([0.0, 1.0, 1.0, 0.5])),
        },
    )
