"""
Tests for the inverse distance weights.
"""

import numpy as np
import pytest

from monet_idw.errors import InvalidArgumentError
from monet_idw.interpolation.weights import weight


def test_weight_value():
    """Test that the weight is the inverse of the distance to the power b."""
    assert weight(2.0, 2) == pytest.approx(0.25)
    assert weight(4.0, 0.5) == pytest.approx(0.5)
    assert weight(3.0, 0) == 1.0


def test_weight_monotonic():
    """Test that the weight strictly decreases with distance for b > 0."""
    distances = np.linspace(0.1, 100.0, 50)
    for b in (0.5, 1.0, 2.0, 3.5):
        result = [weight(d, b) for d in distances]
        assert np.all(np.diff(result) < 0)


def test_weight_negative_distance():
    """Test that a negative distance raises an InvalidArgumentError."""
    with pytest.raises(InvalidArgumentError):
        weight(-1.0, 2)


def test_weight_nan_distance():
    """Test that a NaN distance is rejected."""
    with pytest.raises(InvalidArgumentError):
        weight(float("nan"), 2)


def test_weight_overflow_is_zero():
    """Test that overflowing powers give a zero weight instead of raising."""
    assert weight(1e300, 2) == 0.0
    assert weight(1e200, 3) == 0.0


def test_weight_underflow_is_infinite():
    """Test that a power underflowing to zero gives an infinite weight."""
    assert np.isinf(weight(1e-200, 2))
