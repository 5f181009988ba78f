"""
Tests for the Numba-optimized kernels.
"""

import numpy as np

from monet_idw.geometry import compute_distance
from monet_idw.methods import _numba_kernels


def test_haversine_matches_numpy():
    """Test the compiled haversine against the numpy implementation."""
    expected = compute_distance((10.0, 45.0), (11.5, 46.25), "kilometers")
    result = _numba_kernels.haversine(10.0, 45.0, 11.5, 46.25, 6373.0)
    np.testing.assert_allclose(result, expected, rtol=1e-12)


def test_haversine_identical_points_is_zero():
    """Test that identical points are exactly zero apart."""
    assert _numba_kernels.haversine(3.3, -12.7, 3.3, -12.7, 6373.0) == 0.0


def test_idw_cells_equidistant():
    """Test that equidistant samples average their values."""
    cell_lon = np.array([0.0])
    cell_lat = np.array([0.0])
    sample_lon = np.array([0.0, 0.0])
    sample_lat = np.array([-5.0, 5.0])
    values = np.array([10.0, 20.0])

    result, degenerate = _numba_kernels.idw_cells(cell_lon, cell_lat, sample_lon, sample_lat, values, 2.0, 6373.0)

    np.testing.assert_allclose(result, [15.0])
    assert not degenerate.any()


def test_idw_cells_exact_match_first_sample_wins():
    """Test that the first coincident sample defines the cell value."""
    cell_lon = np.array([1.0, 0.5])
    cell_lat = np.array([1.0, 0.5])
    sample_lon = np.array([0.0, 1.0, 1.0])
    sample_lat = np.array([0.0, 1.0, 1.0])
    values = np.array([10.0, 20.0, 99.0])

    result, degenerate = _numba_kernels.idw_cells(cell_lon, cell_lat, sample_lon, sample_lat, values, 2.0, 6373.0)

    assert result[0] == 20.0
    assert 10.0 < result[1] < 99.0
    assert not degenerate.any()


def test_idw_cells_degenerate():
    """Test that cells with zero total weight are flagged and NaN."""
    cell_lon = np.array([0.5])
    cell_lat = np.array([0.5])
    sample_lon = np.array([0.0, 1.0])
    sample_lat = np.array([0.0, 1.0])
    values = np.array([10.0, 20.0])

    result, degenerate = _numba_kernels.idw_cells(
        cell_lon, cell_lat, sample_lon, sample_lat, values, 1000.0, 6373000.0
    )

    assert np.isnan(result[0])
    assert degenerate[0]


def test_idw_cells_underflowing_power_is_coincident():
    """Test that a sample whose weight is infinite defines the cell value."""
    cell_lon = np.array([0.0])
    cell_lat = np.array([0.0])
    # 0.011 km ** 200 underflows to zero, 111 km ** 200 overflows
    sample_lon = np.array([0.0, 0.0, 0.0])
    sample_lat = np.array([1.0, 1e-4, -1e-4])
    values = np.array([20.0, 10.0, 30.0])

    result, degenerate = _numba_kernels.idw_cells(cell_lon, cell_lat, sample_lon, sample_lat, values, 200.0, 6373.0)

    assert result[0] == 10.0
    assert not degenerate.any()


def test_idw_cells_overflowing_sum_is_degenerate():
    """Test that a non-finite weighted sum is flagged instead of returned."""
    cell_lon = np.array([0.0])
    cell_lat = np.array([0.0])
    sample_lon = np.array([0.0, 0.0])
    sample_lat = np.array([-1.0, 1.0])
    values = np.array([1e300, 1e300])

    result, degenerate = _numba_kernels.idw_cells(cell_lon, cell_lat, sample_lon, sample_lat, values, -70.0, 6373.0)

    assert np.isnan(result[0])
    assert degenerate[0]
