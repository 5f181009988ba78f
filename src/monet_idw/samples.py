"""
Sample point data model for monet-idw.

This file is part of monet-idw.

Copyright (c) 2025 monet-idw Developers.

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at

    http://www.apache.org/licenses/LICENSE-2.0

Unless required by applicable law or agreed to in writing, software
distributed under the License is distributed on an "AS IS" BASIS,
WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
See the License for the specific language governing permissions and
limitations under the License.
"""

from __future__ import annotations

import math
import numbers
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, overload

import numpy as np
import pandas as pd
import xarray as xr

from monet_idw.errors import InvalidArgumentError
from monet_idw.utils import identify_cf_coordinates


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, (bool, np.bool_))


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    return _is_number(value) and math.isnan(value)


@dataclass(frozen=True)
class SamplePoint:
    """A georeferenced sample with a mapping of field name to value."""

    longitude: float
    latitude: float
    properties: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "longitude", float(self.longitude))
        object.__setattr__(self, "latitude", float(self.latitude))
        if not (math.isfinite(self.longitude) and math.isfinite(self.latitude)):
            msg = f"Sample coordinates must be finite, got ({self.longitude}, {self.latitude})"
            raise InvalidArgumentError(msg)
        object.__setattr__(self, "properties", MappingProxyType(dict(self.properties)))

    @property
    def location(self) -> tuple[float, float]:
        """The (longitude, latitude) pair of the sample."""
        return (self.longitude, self.latitude)

    def has_field(self, name: str) -> bool:
        """Whether the sample carries a non-missing value for ``name``."""
        return name in self.properties and not _is_missing(self.properties[name])

    def value(self, name: str) -> float:
        """Numeric value of ``name``.

        Raises:
            KeyError: If the field is absent.
            InvalidArgumentError: If the value is not a real number.
        """
        raw = self.properties[name]
        if not _is_number(raw):
            msg = f"Field '{name}' must be numeric, got {type(raw).__name__} ({raw!r})"
            raise InvalidArgumentError(msg)
        return float(raw)


class SampleSet(Sequence[SamplePoint]):
    """Ordered, immutable collection of sample points."""

    def __init__(self, points: Iterable[SamplePoint] = ()):
        self._points: tuple[SamplePoint, ...] = tuple(points)
        for point in self._points:
            if not isinstance(point, SamplePoint):
                msg = f"SampleSet items must be SamplePoint instances, got {type(point).__name__}"
                raise TypeError(msg)

    @overload
    def __getitem__(self, index: int) -> SamplePoint: ...

    @overload
    def __getitem__(self, index: slice) -> SampleSet: ...

    def __getitem__(self, index: int | slice) -> SamplePoint | SampleSet:
        if isinstance(index, slice):
            return SampleSet(self._points[index])
        return self._points[index]

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[SamplePoint]:
        return iter(self._points)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SampleSet):
            return NotImplemented
        return self._points == other._points

    def __repr__(self) -> str:
        return f"SampleSet(n={len(self)})"

    def filter_by_field(self, name: str) -> SampleSet:
        """Samples carrying a non-missing value for ``name``, in order."""
        return SampleSet(point for point in self._points if point.has_field(name))

    def values(self, name: str) -> np.ndarray:
        """Values of ``name`` as a float64 array.

        Every sample must carry the field; filter first with `filter_by_field`.
        """
        result = np.empty(len(self), dtype=np.float64)
        for i, point in enumerate(self._points):
            try:
                result[i] = point.value(name)
            except KeyError:
                msg = f"Sample {i} does not carry the field '{name}'"
                raise InvalidArgumentError(msg) from None
            except InvalidArgumentError as e:
                msg = f"Sample {i}: {e}"
                raise InvalidArgumentError(msg) from e
        return result

    def longitudes(self) -> np.ndarray:
        return np.array([point.longitude for point in self._points], dtype=np.float64)

    def latitudes(self) -> np.ndarray:
        return np.array([point.latitude for point in self._points], dtype=np.float64)

    @classmethod
    def from_records(
        cls,
        records: Iterable[Mapping[str, Any]],
        x: str = "longitude",
        y: str = "latitude",
    ) -> SampleSet:
        """Build a sample set from mappings holding coordinates and fields.

        Args:
            records: Iterable of mappings. The ``x`` and ``y`` keys hold the
                coordinates, every other key becomes a property.
            x: Key of the longitude.
            y: Key of the latitude.
        """
        points = []
        for i, record in enumerate(records):
            try:
                lon = record[x]
                lat = record[y]
            except KeyError as e:
                msg = f"Record {i} is missing coordinate {e}"
                raise InvalidArgumentError(msg) from e
            properties = {key: value for key, value in record.items() if key not in (x, y)}
            try:
                points.append(SamplePoint(lon, lat, properties))
            except InvalidArgumentError as e:
                msg = f"Record {i}: {e}"
                raise InvalidArgumentError(msg) from e
        return cls(points)

    @classmethod
    def from_dataframe(cls, df: pd.DataFrame, x: str = "longitude", y: str = "latitude") -> SampleSet:
        """Build a sample set from a DataFrame with one row per sample."""
        missing = [name for name in (x, y) if name not in df.columns]
        if missing:
            msg = f"DataFrame is missing coordinate column(s) {missing}"
            raise InvalidArgumentError(msg)
        return cls.from_records(df.to_dict("records"), x=x, y=y)

    @classmethod
    def from_dataset(cls, ds: xr.Dataset) -> SampleSet:
        """Build a sample set from a Dataset with a single sample dimension.

        Latitude and longitude coordinates are identified with cf-xarray,
        falling back to common coordinate names.
        """
        if len(ds.dims) != 1:
            msg = f"Sample dataset must have exactly one dimension, got {list(ds.dims)}"
            raise InvalidArgumentError(msg)
        try:
            lat_name, lon_name = identify_cf_coordinates(ds)
        except ValueError as e:
            raise InvalidArgumentError(f"Sample dataset validation failed: {e}") from e

        df = ds.reset_coords().to_dataframe().reset_index()
        return cls.from_dataframe(df, x=lon_name, y=lat_name)
