from __future__ import annotations

import math
from collections.abc import Hashable
from dataclasses import dataclass

import cf_xarray  # noqa: F401
import xarray as xr

from monet_idw.constants import CELL_DIM, Units, unit_name
from monet_idw.errors import InvalidArgumentError

"""
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


@dataclass
class IDWParameters:
    """Object storing the parameters of one interpolation call."""

    field: str
    b: float
    cell_width: float
    units: Units | str = Units.KILOMETERS

    def __post_init__(self) -> None:
        """Validate the initialized IDWParameters class."""
        msg = None
        if not isinstance(self.field, str) or not self.field:
            msg = f"Field name must be a non-empty string, got {self.field!r}"
        elif not _is_finite(self.b):
            msg = f"Exponent b must be a finite real number, got {self.b!r}"
        elif not _is_finite(self.cell_width) or self.cell_width <= 0:
            msg = f"Cell width must be a positive finite distance, got {self.cell_width!r}"
        if msg is not None:
            raise InvalidArgumentError(msg)
        self.b = float(self.b)
        self.cell_width = float(self.cell_width)
        self.units = unit_name(self.units)


def _is_finite(value: object) -> bool:
    try:
        return math.isfinite(value)  # type: ignore[arg-type]
    except TypeError:
        return False


def identify_cf_coordinates(ds: xr.Dataset) -> tuple[str, str]:
    """Identify latitude and longitude variables using a fallback strategy.

    1.  **CF-xarray:** First, it tries to use the `cf-xarray` accessor to
        identify coordinates based on CF (Climate and Forecast) conventions.
    2.  **Fallback:** If `cf-xarray` fails, it falls back to a predefined
        list of common, non-standard names (e.g., 'lat', 'lon', 'y', 'x').
        Data variables are searched as well as coordinates, since sample
        tables often store positions as plain columns.

    Parameters
    ----------
    ds : xr.Dataset
        The dataset to inspect.

    Returns
    -------
    tuple[str, str]
        The identified names for the latitude and longitude variables.

    Raises
    ------
    ValueError
        If either variable cannot be identified.
    """
    lat_name = _find_variable(ds, ("latitude", "lat"), ("latitude", "lat", "y"))
    if lat_name is None:
        msg = "Could not identify latitude coordinate"
        raise ValueError(msg)

    lon_name = _find_variable(ds, ("longitude", "lon"), ("longitude", "lon", "x"))
    if lon_name is None:
        msg = "Could not identify longitude coordinate"
        raise ValueError(msg)

    return str(lat_name), str(lon_name)


def _find_variable(ds: xr.Dataset, cf_keys: tuple[str, ...], keywords: tuple[str, ...]) -> Hashable | None:
    for key in cf_keys:
        try:
            return ds.cf[key].name
        except KeyError:
            continue

    names = list(ds.coords) + [name for name in ds.data_vars if name not in ds.coords]
    for name in names:
        if ds[name].attrs.get("standard_name") == cf_keys[0]:
            return name

    # Exact names first, then substring matches
    for keyword in keywords:
        for name in names:
            if str(name).lower() == keyword:
                return name
    for keyword in keywords[:-1]:
        for name in names:
            if keyword in str(name).lower():
                return name
    return None


def to_raster(result: xr.Dataset, name: str) -> xr.DataArray:
    """Reshape an interpolation result into a 2-D (latitude, longitude) array.

    Args:
        result: Grid returned by the interpolation engine.
        name: Name of the interpolated variable.

    Returns:
        DataArray indexed by the centroid latitude and longitude, with the
        southernmost row first.
    """
    if name not in result:
        msg = f"Variable '{name}' not found in result"
        raise KeyError(msg)

    da = result[name]
    raster = (
        da.drop_vars(list(da.coords))
        .assign_coords(
            latitude=(CELL_DIM, result["latitude"].values),
            longitude=(CELL_DIM, result["longitude"].values),
        )
        .set_index({CELL_DIM: ["latitude", "longitude"]})
        .unstack(CELL_DIM)
    )
    raster.attrs = dict(da.attrs)
    return raster.sortby("latitude").sortby("longitude")
