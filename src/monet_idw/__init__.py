from importlib.metadata import PackageNotFoundError, version

from monet_idw import accessor  # noqa: F401
from monet_idw.constants import Units, register_unit
from monet_idw.errors import (
    DegenerateAggregationError,
    IDWError,
    InterpolationCancelledError,
    InvalidArgumentError,
    MissingFieldError,
)
from monet_idw.geometry import (
    compute_centroid,
    compute_distance,
    compute_extent,
    generate_square_grid,
    planar_distance,
)
from monet_idw.interpolation import InterpolationEngine, aggregate, idw, weight
from monet_idw.samples import SamplePoint, SampleSet
from monet_idw.utils import IDWParameters, to_raster

try:
    __version__ = version("monet-idw")
except PackageNotFoundError:
    __version__ = "unknown"

__all__ = [
    "DegenerateAggregationError",
    "IDWError",
    "IDWParameters",
    "InterpolationCancelledError",
    "InterpolationEngine",
    "InvalidArgumentError",
    "MissingFieldError",
    "SamplePoint",
    "SampleSet",
    "Units",
    "__version__",
    "aggregate",
    "compute_centroid",
    "compute_distance",
    "compute_extent",
    "generate_square_grid",
    "idw",
    "planar_distance",
    "register_unit",
    "to_raster",
    "weight",
]
