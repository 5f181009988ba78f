from monet_idw.interpolation.core import InterpolationEngine, aggregate, idw
from monet_idw.interpolation.weights import weight

__all__ = ["InterpolationEngine", "aggregate", "idw", "weight"]
