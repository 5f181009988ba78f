"""
Numba-optimized kernels for inverse distance weighting.

This module provides JIT-compiled functions for performing the per-cell
aggregation loops. These functions are designed to be used inside
xr.apply_ufunc.
"""

import numpy as np
from numba import jit, prange


@jit(nopython=True, nogil=True)
def haversine(lon1, lat1, lon2, lat2, radius):
    """
    Great-circle distance between two points given in degrees.

    Args:
        lon1, lat1: First location
        lon2, lat2: Second location
        radius: Earth radius in the output unit system

    Returns:
        Distance in the units of ``radius``
    """
    d_lat = np.radians(lat2 - lat1)
    d_lon = np.radians(lon2 - lon1)
    lat1_rad = np.radians(lat1)
    lat2_rad = np.radians(lat2)

    h = np.sin(d_lat / 2) ** 2 + np.sin(d_lon / 2) ** 2 * np.cos(lat1_rad) * np.cos(lat2_rad)
    h = min(max(h, 0.0), 1.0)
    return 2 * np.arctan2(np.sqrt(h), np.sqrt(1 - h)) * radius


@jit(nopython=True, nogil=True, parallel=True)
def idw_cells(
    cell_lon,  # (n_cells,)
    cell_lat,  # (n_cells,)
    sample_lon,  # (n_samples,)
    sample_lat,  # (n_samples,)
    values,  # (n_samples,)
    b,
    radius,
):
    """
    Interpolate sample values onto cell centroids.

    Samples are visited in order for every cell. The first sample at a
    distance of exactly zero, or whose weight is infinite, defines the
    value of the cell.

    Args:
        cell_lon: Centroid longitudes of the target cells
        cell_lat: Centroid latitudes of the target cells
        sample_lon: Longitudes of the samples
        sample_lat: Latitudes of the samples
        values: Sample values
        b: Decay exponent
        radius: Earth radius in the distance unit system

    Returns:
        Tuple of the interpolated values (n_cells,) and a boolean mask of
        cells whose total weight is zero or not finite (their value is NaN)
    """
    n_cells = cell_lon.shape[0]
    n_samples = sample_lon.shape[0]

    result = np.empty(n_cells, dtype=np.float64)
    degenerate = np.zeros(n_cells, dtype=np.bool_)

    # Iterate over target cells (parallel)
    for i in prange(n_cells):
        weighted_sum = 0.0
        weight_total = 0.0
        exact = False

        for k in range(n_samples):
            d = haversine(cell_lon[i], cell_lat[i], sample_lon[k], sample_lat[k], radius)
            if d == 0.0:
                result[i] = values[k]
                exact = True
                break
            p = d**b
            # d**b underflowed: the sample coincides with the centroid at float precision
            if p == 0.0 or np.isinf(1.0 / p):
                result[i] = values[k]
                exact = True
                break
            w = 1.0 / p
            weighted_sum += w * values[k]
            weight_total += w

        if not exact:
            if weight_total == 0.0 or not (np.isfinite(weight_total) and np.isfinite(weighted_sum)):
                result[i] = np.nan
                degenerate[i] = True
            else:
                result[i] = weighted_sum / weight_total

    return result, degenerate
