from __future__ import annotations

from typing import Any

import xarray as xr

"""
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
from monet_idw.constants import DEFAULT_UNITS, Units
from monet_idw.interpolation.core import InterpolationEngine
from monet_idw.samples import SampleSet


@xr.register_dataset_accessor("idw")
class IDWAccessor:
    """Inverse distance weighting of point datasets.

    The dataset holds one sample per element of its single dimension, with
    latitude and longitude stored as coordinates or variables.

    Available methods:
        interpolate: interpolate a variable onto a square grid
        samples: the dataset as a SampleSet
    """

    def __init__(self, xarray_obj: xr.Dataset):
        self._obj = xarray_obj

    def samples(self) -> SampleSet:
        """The samples held by the dataset."""
        return SampleSet.from_dataset(self._obj)

    def build_engine(self, **kwargs: Any) -> InterpolationEngine:
        """Factory method for the interpolation engine.

        Args:
            **kwargs: Keyword arguments passed to InterpolationEngine.
        """
        return InterpolationEngine(**kwargs)

    def interpolate(
        self,
        field: str,
        b: float = 2.0,
        cell_width: float = 1.0,
        units: Units | str = DEFAULT_UNITS,
        **kwargs: Any,
    ) -> xr.Dataset:
        """Interpolate a variable onto a square grid covering the samples.

        Args:
            field: Name of the variable to interpolate.
            b: Exponent regulating the distance-decay weighting.
            cell_width: The distance across each cell.
            units: Units of ``cell_width``.
            **kwargs: Additional keyword arguments to pass to the engine.
                ``cancel`` is forwarded to the interpolation call.

        Returns:
            The grid with the interpolated values.
        """
        cancel = kwargs.pop("cancel", None)
        kwargs.setdefault("output_name", field)
        engine = self.build_engine(**kwargs)
        return engine.interpolate(self.samples(), field, b, cell_width, units=units, cancel=cancel)
