"""
Tests for the sample point data model.
"""

import numpy as np
import pandas as pd
import pytest
import xarray as xr

from monet_idw import SamplePoint, SampleSet
from monet_idw.errors import InvalidArgumentError


def test_sample_point_fields():
    """Test field presence and values of a sample point."""
    point = SamplePoint(1, 2, {"rain": 3, "temp": None, "wind": float("nan"), "name": "gauge"})

    assert point.location == (1.0, 2.0)
    assert point.has_field("rain")
    assert point.has_field("name")
    assert not point.has_field("temp")
    assert not point.has_field("wind")
    assert not point.has_field("pressure")
    assert point.value("rain") == 3.0
    with pytest.raises(InvalidArgumentError):
        point.value("name")
    with pytest.raises(KeyError):
        point.value("pressure")


def test_sample_point_is_immutable():
    """Test that sample points cannot be modified."""
    properties = {"rain": 1.0}
    point = SamplePoint(0.0, 0.0, properties)
    properties["rain"] = 2.0

    assert point.value("rain") == 1.0
    with pytest.raises(TypeError):
        point.properties["rain"] = 5.0  # type: ignore[index]


def test_sample_point_rejects_booleans():
    """Test that booleans do not count as numeric values."""
    point = SamplePoint(0.0, 0.0, {"flag": True})
    with pytest.raises(InvalidArgumentError):
        point.value("flag")


@pytest.mark.parametrize("lon, lat", [(float("nan"), 0.0), (0.0, float("inf")), (-np.inf, 1.0)])
def test_sample_point_rejects_non_finite_coordinates(lon, lat):
    """Test that NaN or infinite coordinates are rejected."""
    with pytest.raises(InvalidArgumentError, match="finite"):
        SamplePoint(lon, lat, {"rain": 1.0})


def test_from_dataframe_names_non_finite_record():
    """Test that the offending row is named for a non-finite coordinate."""
    df = pd.DataFrame({"longitude": [0.0, np.nan], "latitude": [1.0, 2.0], "rain": [1.0, 2.0]})
    with pytest.raises(InvalidArgumentError, match="Record 1"):
        SampleSet.from_dataframe(df)


def test_sample_set_sequence():
    """Test the sequence protocol of a sample set."""
    points = [SamplePoint(i, i, {"v": i}) for i in range(4)]
    samples = SampleSet(points)

    assert len(samples) == 4
    assert list(samples) == points
    assert samples[1] is points[1]
    assert isinstance(samples[1:3], SampleSet)
    assert len(samples[1:3]) == 2
    assert samples == SampleSet(points)


def test_sample_set_rejects_other_items():
    """Test that only sample points are accepted."""
    with pytest.raises(TypeError):
        SampleSet([(0.0, 0.0)])  # type: ignore[list-item]


def test_sample_set_filter_and_values():
    """Test filtering by field and extracting values in order."""
    samples = SampleSet(
        [
            SamplePoint(0.0, 0.0, {"rain": 1.5}),
            SamplePoint(1.0, 0.0, {"temp": 20.0}),
            SamplePoint(2.0, 0.0, {"rain": np.float32(2.5)}),
            SamplePoint(3.0, 0.0, {"rain": np.nan}),
        ]
    )

    filtered = samples.filter_by_field("rain")

    assert len(filtered) == 2
    np.testing.assert_array_equal(filtered.values("rain"), [1.5, 2.5])
    np.testing.assert_array_equal(filtered.longitudes(), [0.0, 2.0])
    np.testing.assert_array_equal(filtered.latitudes(), [0.0, 0.0])
    with pytest.raises(InvalidArgumentError, match="Sample 1"):
        samples.values("rain")


def test_from_records():
    """Test building a sample set from mappings."""
    samples = SampleSet.from_records(
        [
            {"x": 1.0, "y": 2.0, "rain": 3.0},
            {"x": 4.0, "y": 5.0, "rain": 6.0, "station": "B"},
        ],
        x="x",
        y="y",
    )

    assert samples[0].location == (1.0, 2.0)
    assert dict(samples[1].properties) == {"rain": 6.0, "station": "B"}


def test_from_records_missing_coordinate():
    """Test that records without coordinates are rejected."""
    with pytest.raises(InvalidArgumentError, match="Record 0"):
        SampleSet.from_records([{"longitude": 1.0, "rain": 2.0}])


def test_from_dataframe():
    """Test building a sample set from a DataFrame."""
    df = pd.DataFrame(
        {
            "longitude": [0.0, 1.0, 2.0],
            "latitude": [10.0, 11.0, 12.0],
            "rain": [1.0, np.nan, 3.0],
        }
    )
    samples = SampleSet.from_dataframe(df)

    assert len(samples) == 3
    assert len(samples.filter_by_field("rain")) == 2
    assert samples[2].location == (2.0, 12.0)


def test_from_dataframe_missing_columns():
    """Test that coordinate columns are required."""
    df = pd.DataFrame({"lon": [0.0], "lat": [0.0]})
    with pytest.raises(InvalidArgumentError):
        SampleSet.from_dataframe(df)


def test_from_dataset(station_dataset):
    """Test building a sample set from a point dataset."""
    samples = SampleSet.from_dataset(station_dataset)

    assert len(samples) == 4
    assert samples[1].location == (1.0, 1.0)
    assert samples[0].value("rain") == 10.0
    assert len(samples.filter_by_field("rain")) == 3


def test_from_dataset_cf_attributes():
    """Test that CF attributes identify the coordinates."""
    ds = xr.Dataset(
        {
            "rain": ("obs", [1.0, 2.0]),
            "yc": ("obs", [5.0, 6.0], {"standard_name": "latitude", "units": "degrees_north"}),
            "xc": ("obs", [7.0, 8.0], {"standard_name": "longitude", "units": "degrees_east"}),
        }
    )
    samples = SampleSet.from_dataset(ds)
    assert samples[0].location == (7.0, 5.0)
    assert samples[1].value("rain") == 2.0


def test_from_dataset_requires_single_dimension():
    """Test that gridded datasets are rejected."""
    ds = xr.Dataset({"rain": (("y", "x"), np.ones((2, 2)))})
    with pytest.raises(InvalidArgumentError):
        SampleSet.from_dataset(ds)
