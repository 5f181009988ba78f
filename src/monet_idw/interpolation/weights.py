"""
Inverse distance weights.
"""

from __future__ import annotations

import numpy as np

from monet_idw.errors import InvalidArgumentError


def weight(distance: float, b: float) -> float:
    """Inverse distance weight ``1 / distance**b``.

    A zero distance is the caller's responsibility: the weight of an exactly
    coincident sample is not defined here and evaluates to ``inf`` for
    positive ``b``. Overflow of ``distance**b`` yields a weight of zero.

    Args:
        distance: Non-negative distance between a sample and the target.
        b: Decay exponent.

    Raises:
        InvalidArgumentError: If the distance is negative or NaN.
    """
    if not distance >= 0:
        msg = f"Distance must be non-negative, got {distance!r}"
        raise InvalidArgumentError(msg)
    with np.errstate(over="ignore", divide="ignore"):
        return float(1.0 / np.power(np.float64(distance), b))

