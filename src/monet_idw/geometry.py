"""
Geometry helpers used by the interpolation engine.

Extent, square grid generation, cell centroids and spherical distances. The
earth is treated as a sphere; distances are great-circle (haversine)
distances expressed in the requested unit system.

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

import logging
import math
from typing import Any

import numpy as np
import xarray as xr

from monet_idw.constants import BOUNDS_DIM, CELL_DIM, Units, earth_radius, unit_name
from monet_idw.errors import InvalidArgumentError
from monet_idw.samples import SampleSet

logger = logging.getLogger(__name__)

Extent = tuple[float, float, float, float]


def compute_extent(samples: SampleSet) -> Extent:
    """Bounding box of a sample set as (west, south, east, north)."""
    if len(samples) == 0:
        msg = "Cannot compute the extent of an empty sample set"
        raise InvalidArgumentError(msg)
    lons = samples.longitudes()
    lats = samples.latitudes()
    return (float(lons.min()), float(lats.min()), float(lons.max()), float(lats.max()))


def compute_distance(a: Any, b: Any, units: Units | str = Units.KILOMETERS) -> Any:
    """Great-circle distance between two (longitude, latitude) locations.

    Both locations may hold numpy arrays, in which case the distance is
    computed element-wise with broadcasting.

    Args:
        a: (longitude, latitude) of the first location, in degrees.
        b: (longitude, latitude) of the second location, in degrees.
        units: Unit system of the returned distance.

    Returns:
        The distance as a float, or an array for array inputs.
    """
    radius = earth_radius(units)
    lon1, lat1 = a
    lon2, lat2 = b

    d_lat = np.radians(np.subtract(lat2, lat1))
    d_lon = np.radians(np.subtract(lon2, lon1))
    lat1_rad = np.radians(lat1)
    lat2_rad = np.radians(lat2)

    h = np.sin(d_lat / 2) ** 2 + np.sin(d_lon / 2) ** 2 * np.cos(lat1_rad) * np.cos(lat2_rad)
    h = np.clip(h, 0.0, 1.0)
    distance = 2 * np.arctan2(np.sqrt(h), np.sqrt(1 - h)) * radius

    if np.ndim(distance) == 0:
        return float(distance)
    return distance


def planar_distance(a: Any, b: Any, units: Units | str | None = None) -> Any:
    """Euclidean distance for locations in a projected coordinate system.

    ``units`` is accepted for signature compatibility and ignored; the
    distance is in the units of the coordinates.
    """
    distance = np.hypot(np.subtract(b[0], a[0]), np.subtract(b[1], a[1]))
    if np.ndim(distance) == 0:
        return float(distance)
    return distance


def compute_centroid(longitude_bounds: np.ndarray, latitude_bounds: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Centroids of axis-aligned cells from their (west, east) and (south, north) bounds."""
    longitude_bounds = np.asarray(longitude_bounds, dtype=np.float64)
    latitude_bounds = np.asarray(latitude_bounds, dtype=np.float64)
    lon = (longitude_bounds[..., 0] + longitude_bounds[..., 1]) / 2
    lat = (latitude_bounds[..., 0] + latitude_bounds[..., 1]) / 2
    return lon, lat


def _degree_length(units: Units | str, latitude: float | None = None) -> float:
    """Length of one degree of latitude, or of longitude at ``latitude``."""
    length = earth_radius(units) * math.radians(1.0)
    if latitude is not None:
        scaled = length * math.cos(math.radians(latitude))
        # A parallel at the pole has no length, keep the meridional value
        if scaled > length * 1e-6:
            return scaled
    return length


def generate_square_grid(extent: Extent, cell_width: float, units: Units | str = Units.KILOMETERS) -> xr.Dataset:
    """Create a grid of square cells covering an extent.

    The cell width in degrees is derived from the great-circle length of
    the southern edge (longitude) and of the western edge (latitude) of the
    extent, so cells are ``cell_width`` wide in ``units`` along those edges.
    Cells are emitted column by column, west to east, and south to north
    within a column. A column or row is added as long as its lower-left
    corner lies within the extent.

    Args:
        extent: (west, south, east, north) in degrees.
        cell_width: Width of a cell in ``units``.
        units: Unit system of ``cell_width``.

    Returns:
        A Dataset with a single ``cell`` dimension holding the cell bounds,
        column/row indices and centroid coordinates. Contains no data
        variables.
    """
    if not math.isfinite(cell_width) or cell_width <= 0:
        msg = f"Cell width must be a positive finite distance, got {cell_width!r}"
        raise InvalidArgumentError(msg)
    units = unit_name(units)

    west, south, east, north = (float(v) for v in extent)
    if west > east or south > north:
        msg = f"Invalid extent {extent}: expected (west, south, east, north)"
        raise InvalidArgumentError(msg)

    x_span = compute_distance((west, south), (east, south), units)
    if x_span > 0:
        width_deg = cell_width / x_span * (east - west)
    else:
        width_deg = cell_width / _degree_length(units, latitude=south)

    y_span = compute_distance((west, south), (west, north), units)
    if y_span > 0:
        height_deg = cell_width / y_span * (north - south)
    else:
        height_deg = cell_width / _degree_length(units)

    # Tolerance keeps a corner that lands exactly on the edge
    n_columns = math.floor((east - west) / width_deg + 1e-9) + 1
    n_rows = math.floor((north - south) / height_deg + 1e-9) + 1

    column, row = np.meshgrid(np.arange(n_columns), np.arange(n_rows), indexing="ij")
    column = column.ravel()
    row = row.ravel()

    lon_lower = west + column * width_deg
    lat_lower = south + row * height_deg
    longitude_bounds = np.stack([lon_lower, lon_lower + width_deg], axis=-1)
    latitude_bounds = np.stack([lat_lower, lat_lower + height_deg], axis=-1)
    lon_centroid, lat_centroid = compute_centroid(longitude_bounds, latitude_bounds)

    logger.debug(
        "Generated %d x %d square grid (%.6g x %.6g degrees) over extent %s",
        n_columns,
        n_rows,
        width_deg,
        height_deg,
        (west, south, east, north),
    )

    return xr.Dataset(
        coords={
            CELL_DIM: np.arange(n_columns * n_rows),
            "column": (CELL_DIM, column),
            "row": (CELL_DIM, row),
            "longitude": (
                CELL_DIM,
                lon_centroid,
                {"standard_name": "longitude", "units": "degrees_east", "bounds": "longitude_bounds"},
            ),
            "latitude": (
                CELL_DIM,
                lat_centroid,
                {"standard_name": "latitude", "units": "degrees_north", "bounds": "latitude_bounds"},
            ),
            "longitude_bounds": ((CELL_DIM, BOUNDS_DIM), longitude_bounds),
            "latitude_bounds": ((CELL_DIM, BOUNDS_DIM), latitude_bounds),
        },
        attrs={
            "grid_type": "square",
            "cell_width": float(cell_width),
            "units": units,
            "cell_width_degrees": float(width_deg),
            "cell_height_degrees": float(height_deg),
            "extent": [west, south, east, north],
        },
    )
