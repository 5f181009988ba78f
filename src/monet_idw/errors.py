"""
Exceptions raised by monet-idw.
"""

from __future__ import annotations


class IDWError(Exception):
    """Base class for all monet-idw errors."""


class InvalidArgumentError(IDWError, ValueError):
    """Raised for invalid inputs such as negative distances or empty sample sets."""


class MissingFieldError(IDWError, KeyError):
    """Raised when no sample point carries the requested field."""

    def __init__(self, field: str):
        self.field = field
        super().__init__(field)

    def __str__(self) -> str:
        return f"No sample point carries the field '{self.field}'"


class DegenerateAggregationError(IDWError, ArithmeticError):
    """Raised when the total weight of a cell is zero."""

    def __init__(self, cell: int | None = None, field: str | None = None):
        self.cell = cell
        self.field = field
        location = f" for cell {cell}" if cell is not None else ""
        subject = f" of field '{field}'" if field is not None else ""
        msg = f"Total interpolation weight{subject} is zero{location}"
        super().__init__(msg)


class InterpolationCancelledError(IDWError):
    """Raised when an interpolation is cancelled by the caller."""
