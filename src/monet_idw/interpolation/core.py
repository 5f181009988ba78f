"""
Inverse distance weighting engine.

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
import warnings
from collections.abc import Callable, Iterable
from typing import Any, Literal, NamedTuple, Protocol

import dask
import dask.array as da
import numpy as np
import xarray as xr

from monet_idw.constants import (
    BOUNDS_DIM,
    CELL_DIM,
    DEFAULT_BLOCK_SIZE,
    DEFAULT_OUTPUT_NAME,
    DEFAULT_UNITS,
    Units,
    earth_radius,
)
from monet_idw.errors import (
    DegenerateAggregationError,
    InterpolationCancelledError,
    InvalidArgumentError,
    MissingFieldError,
)
from monet_idw.geometry import compute_centroid, compute_distance, compute_extent, generate_square_grid
from monet_idw.interpolation.weights import weight
from monet_idw.methods._numba_kernels import idw_cells
from monet_idw.samples import SamplePoint, SampleSet
from monet_idw.utils import IDWParameters

logger = logging.getLogger(__name__)

DistanceMetric = Callable[[Any, Any, str], float]

_GRID_VARIABLES = frozenset(
    {CELL_DIM, BOUNDS_DIM, "column", "row", "longitude", "latitude", "longitude_bounds", "latitude_bounds"}
)


class CancelToken(Protocol):
    def is_set(self) -> bool: ...


class _Accumulator(NamedTuple):
    """Running weighted sum and weight total of one cell."""

    weighted_sum: float = 0.0
    weight_total: float = 0.0

    def add(self, w: float, value: float) -> _Accumulator:
        return _Accumulator(self.weighted_sum + w * value, self.weight_total + w)

    def resolve(self, cell: int | None = None, field: str | None = None) -> float:
        if self.weight_total == 0 or not (np.isfinite(self.weight_total) and np.isfinite(self.weighted_sum)):
            raise DegenerateAggregationError(cell=cell, field=field)
        return self.weighted_sum / self.weight_total


def aggregate(
    centroid: tuple[float, float],
    samples: Iterable[SamplePoint],
    field: str,
    b: float,
    units: Units | str = DEFAULT_UNITS,
    distance: DistanceMetric = compute_distance,
    cell: int | None = None,
) -> float:
    """Interpolated value of a single cell.

    Samples are visited in iteration order. The first sample located exactly
    on the centroid, or whose weight is infinite, defines the value and the
    remaining samples are ignored.

    Args:
        centroid: (longitude, latitude) of the cell centroid.
        samples: Samples carrying ``field``.
        field: Name of the field to interpolate.
        b: Decay exponent.
        units: Unit system passed to ``distance``.
        distance: Distance metric ``distance(a, b, units)``.
        cell: Index of the cell, used in error messages.

    Returns:
        The inverse distance weighted average of the sample values.

    Raises:
        InvalidArgumentError: If there are no samples or a distance is negative.
        DegenerateAggregationError: If the total weight is zero or the weighted
            average is not finite.
    """
    acc = _Accumulator()
    empty = True
    for point in samples:
        empty = False
        d = distance(centroid, point.location, units)
        if d == 0:
            return point.value(field)
        try:
            w = weight(d, b)
        except InvalidArgumentError as e:
            msg = f"Invalid distance for cell {cell}: {e}"
            raise InvalidArgumentError(msg) from e
        if np.isinf(w):
            # d**b underflowed: the sample coincides with the centroid at float precision
            return point.value(field)
        acc = acc.add(w, point.value(field))

    if empty:
        msg = "Cannot aggregate an empty sample set"
        raise InvalidArgumentError(msg)
    return acc.resolve(cell=cell, field=field)


def _check_cancelled(cancel: CancelToken | None) -> None:
    if cancel is not None and cancel.is_set():
        msg = "Interpolation was cancelled"
        raise InterpolationCancelledError(msg)


def _warn_degenerate(n_degenerate, stacklevel=2):
    """Report cells set to NaN. Returns zero so it can be chained into a dask graph."""
    n_degenerate = int(n_degenerate)
    if n_degenerate:
        warnings.warn(
            f"{n_degenerate} cell(s) have a zero or non-finite total weight and were set to NaN.",
            RuntimeWarning,
            stacklevel=stacklevel,
        )
    return np.float64(0.0)


def _apply_idw_wrapper(cell_lon, cell_lat, cell_index, engine, samples, values, params, cancel):
    """Wrapper for interpolation to be used with apply_ufunc (picklable)."""
    return engine._interpolate_block(cell_lon, cell_lat, cell_index, samples, values, params, cancel)


class InterpolationEngine:
    """Inverse distance weighting of scattered samples onto a square grid."""

    def __init__(
        self,
        distance: DistanceMetric | None = None,
        use_numba: bool = True,
        on_degenerate: Literal["raise", "nan"] = "raise",
        output_name: str = DEFAULT_OUTPUT_NAME,
        chunks: int | None = None,
        block_size: int = DEFAULT_BLOCK_SIZE,
    ):
        """Initialize the interpolation engine.

        Args:
            distance: Distance metric ``distance(a, b, units)`` between two
                (longitude, latitude) locations. Defaults to the haversine
                distance.
            use_numba: Whether to use the compiled kernel. Only effective with
                the default distance metric.
            on_degenerate: What to do with cells whose total weight is zero or not finite:
                raise a DegenerateAggregationError ('raise') or set them to NaN ('nan')
            output_name: Name of the variable holding the interpolated values
            chunks: Number of cells per dask chunk. None evaluates eagerly.
            block_size: Number of cells processed between cancellation checks
                in eager mode
        """
        if on_degenerate not in ("raise", "nan"):
            msg = f"on_degenerate must be 'raise' or 'nan', got {on_degenerate!r}"
            raise InvalidArgumentError(msg)
        if not output_name or output_name in _GRID_VARIABLES:
            msg = f"Invalid output name {output_name!r}"
            raise InvalidArgumentError(msg)
        if chunks is not None and chunks <= 0:
            msg = f"chunks must be a positive integer, got {chunks!r}"
            raise InvalidArgumentError(msg)
        if block_size <= 0:
            msg = f"block_size must be a positive integer, got {block_size!r}"
            raise InvalidArgumentError(msg)

        self.distance = distance if distance is not None else compute_distance
        self.use_numba = use_numba and self.distance is compute_distance
        self.on_degenerate = on_degenerate
        self.output_name = output_name
        self.chunks = chunks
        self.block_size = block_size

    def interpolate(
        self,
        samples: SampleSet | Iterable[SamplePoint],
        field: str,
        b: float,
        cell_width: float,
        units: Units | str = DEFAULT_UNITS,
        cancel: CancelToken | None = None,
    ) -> xr.Dataset:
        """Interpolate a sample field onto a square grid covering the samples.

        Args:
            samples: Samples with known values.
            field: Name of the field holding the values to interpolate.
            b: Exponent regulating the distance-decay weighting.
            cell_width: The distance across each cell.
            units: Unit system of ``cell_width`` and of the distances.
            cancel: Optional token with an ``is_set()`` method, e.g. a
                threading.Event, checked between cells or blocks of cells.

        Returns:
            The grid, with the interpolated values in ``output_name``.

        Raises:
            InvalidArgumentError: For an empty sample set or invalid parameters.
            MissingFieldError: If no sample carries ``field``.
            DegenerateAggregationError: If a cell has a zero or non-finite total
                weight and ``on_degenerate`` is 'raise'.
            InterpolationCancelledError: If ``cancel`` is set.
        """
        if not isinstance(samples, SampleSet):
            samples = SampleSet(samples)
        if len(samples) == 0:
            msg = "Cannot interpolate an empty sample set"
            raise InvalidArgumentError(msg)

        params = IDWParameters(field=field, b=b, cell_width=cell_width, units=units)

        valid = samples.filter_by_field(params.field)
        if len(valid) == 0:
            raise MissingFieldError(params.field)
        if len(valid) < len(samples):
            logger.debug("Ignoring %d sample(s) without field '%s'", len(samples) - len(valid), params.field)
        values = valid.values(params.field)

        grid = generate_square_grid(compute_extent(valid), params.cell_width, params.units)
        cell_lon, cell_lat = compute_centroid(grid["longitude_bounds"].values, grid["latitude_bounds"].values)
        cell_index = grid[CELL_DIM].values

        logger.debug(
            "Interpolating '%s' from %d samples onto %d cells (b=%s, numba=%s, chunks=%s)",
            params.field,
            len(valid),
            cell_index.size,
            params.b,
            self.use_numba,
            self.chunks,
        )

        if self.chunks is None:
            interpolated = self._interpolate_eager(cell_lon, cell_lat, cell_index, valid, values, params, cancel)
        else:
            interpolated = self._interpolate_lazy(cell_lon, cell_lat, cell_index, valid, values, params, cancel)

        result = grid.copy()
        result[self.output_name] = interpolated
        result[self.output_name].attrs.update(
            {
                "long_name": f"IDW interpolation of {params.field}",
                "source_field": params.field,
                "idw_exponent": params.b,
            }
        )
        return result

    def _interpolate_eager(self, cell_lon, cell_lat, cell_index, samples, values, params, cancel) -> xr.DataArray:
        """Interpolate all cells now, block by block."""
        n_cells = cell_index.size
        result = np.empty(n_cells, dtype=np.float64)
        n_degenerate = 0

        for start in range(0, n_cells, self.block_size):
            stop = min(start + self.block_size, n_cells)
            result[start:stop], degenerate = self._interpolate_block(
                cell_lon[start:stop], cell_lat[start:stop], cell_index[start:stop], samples, values, params, cancel
            )
            n_degenerate += int(np.count_nonzero(degenerate))

        _warn_degenerate(n_degenerate, stacklevel=4)
        return xr.DataArray(result, dims=CELL_DIM)

    def _interpolate_lazy(self, cell_lon, cell_lat, cell_index, samples, values, params, cancel) -> xr.DataArray:
        """Build a dask-backed interpolation, one task per chunk of cells."""
        chunks = {CELL_DIM: self.chunks}
        lon = xr.DataArray(cell_lon, dims=CELL_DIM).chunk(chunks)
        lat = xr.DataArray(cell_lat, dims=CELL_DIM).chunk(chunks)
        index = xr.DataArray(cell_index, dims=CELL_DIM).chunk(chunks)

        interpolated, degenerate = xr.apply_ufunc(
            _apply_idw_wrapper,
            lon,
            lat,
            index,
            kwargs={
                "engine": self,
                "samples": samples,
                "values": values,
                "params": params,
                "cancel": cancel,
            },
            dask="parallelized",
            output_core_dims=[[], []],
            output_dtypes=[np.float64, np.bool_],
        )
        if self.on_degenerate == "raise":
            return interpolated

        # Single reporting task for the whole graph, every chunk depends on it
        reported = dask.delayed(_warn_degenerate)(degenerate.data.sum())
        return interpolated.copy(data=interpolated.data + da.from_delayed(reported, shape=(), dtype=np.float64))

    def _interpolate_block(
        self, cell_lon, cell_lat, cell_index, samples, values, params, cancel
    ) -> tuple[np.ndarray, np.ndarray]:
        """Interpolate one block of cells.

        Returns:
            The interpolated values and a boolean mask of the degenerate cells set to NaN.
        """
        _check_cancelled(cancel)
        if self.use_numba:
            result, degenerate = idw_cells(
                np.ascontiguousarray(cell_lon, dtype=np.float64),
                np.ascontiguousarray(cell_lat, dtype=np.float64),
                samples.longitudes(),
                samples.latitudes(),
                values,
                params.b,
                earth_radius(params.units),
            )
            if degenerate.any() and self.on_degenerate == "raise":
                first = int(cell_index[np.argmax(degenerate)])
                raise DegenerateAggregationError(cell=first, field=params.field)
            return result, degenerate

        result = np.empty(len(cell_index), dtype=np.float64)
        degenerate = np.zeros(len(cell_index), dtype=np.bool_)
        for i, (lon, lat, cell) in enumerate(zip(cell_lon, cell_lat, cell_index, strict=True)):
            _check_cancelled(cancel)
            try:
                result[i] = aggregate(
                    (float(lon), float(lat)),
                    samples,
                    params.field,
                    params.b,
                    params.units,
                    distance=self.distance,
                    cell=int(cell),
                )
            except DegenerateAggregationError:
                if self.on_degenerate == "raise":
                    raise
                result[i] = np.nan
                degenerate[i] = True
        return result, degenerate


def idw(
    samples: SampleSet | Iterable[SamplePoint],
    field: str,
    b: float,
    cell_width: float,
    units: Units | str = DEFAULT_UNITS,
    **kwargs: Any,
) -> xr.Dataset:
    """Interpolate ``field`` onto a square grid with inverse distance weighting.

    Args:
        samples: Sampled points with known value.
        field: Field containing the known value to interpolate on.
        b: Exponent regulating the distance-decay weighting.
        cell_width: The distance across each cell.
        units: Units of ``cell_width``, e.g. 'miles' or 'kilometers'.
        **kwargs: Additional keyword arguments passed to InterpolationEngine.
            ``cancel`` is forwarded to InterpolationEngine.interpolate.

    Returns:
        A grid of square cells with the interpolated value of each cell.
    """
    cancel = kwargs.pop("cancel", None)
    engine = InterpolationEngine(**kwargs)
    return engine.interpolate(samples, field, b, cell_width, units=units, cancel=cancel)
