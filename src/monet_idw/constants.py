"""
Constants for monet-idw.

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

from enum import Enum

from monet_idw.errors import InvalidArgumentError


class Units(str, Enum):
    """Unit systems shared by grid generation and distance computation."""

    MILES = "miles"
    KILOMETERS = "kilometers"
    METERS = "meters"
    DEGREES = "degrees"
    RADIANS = "radians"


# Earth radius expressed in each unit system (spherical earth)
EARTH_RADIUS: dict[str, float] = {
    Units.MILES.value: 3960.0,
    Units.KILOMETERS.value: 6373.0,
    Units.METERS.value: 6373000.0,
    Units.DEGREES.value: 57.2957795,
    Units.RADIANS.value: 1.0,
}

DEFAULT_UNITS = Units.KILOMETERS
DEFAULT_OUTPUT_NAME = "z"
DEFAULT_BLOCK_SIZE = 4096

CELL_DIM = "cell"
BOUNDS_DIM = "nv"


def register_unit(name: str, earth_radius: float) -> None:
    """Register an additional unit system.

    Args:
        name: Name used to refer to the unit, e.g. "nauticalmiles".
        earth_radius: Radius of the earth expressed in the new unit.
    """
    if not name:
        msg = "Unit name must be a non-empty string"
        raise InvalidArgumentError(msg)
    if not earth_radius > 0:
        msg = f"Earth radius for unit '{name}' must be positive, got {earth_radius}"
        raise InvalidArgumentError(msg)
    EARTH_RADIUS[str(name)] = float(earth_radius)


def unit_name(units: Units | str) -> str:
    """Normalise a unit given as enum member or string."""
    name = units.value if isinstance(units, Units) else str(units)
    if name not in EARTH_RADIUS:
        msg = f"Unknown units '{name}'. Expected one of {sorted(EARTH_RADIUS)}"
        raise InvalidArgumentError(msg)
    return name


def earth_radius(units: Units | str) -> float:
    """Radius of the earth in the given units."""
    return EARTH_RADIUS[unit_name(units)]
