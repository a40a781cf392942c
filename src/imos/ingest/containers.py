from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from logging import getLogger
from types import MappingProxyType
from typing import Any

import numpy as np
import numpy.typing as npt
import xarray as xr

from .consts import TIME, TIME_ENCODING

log = getLogger(__name__)


def _frozen(arr: npt.ArrayLike) -> np.ndarray:
    arr = np.array(arr)
    arr.flags.writeable = False
    return arr


class DataTable(Mapping[str, np.ndarray]):
    """Decoded data columns of one file, all of the same length.

    Date/time columns hold text or datetime64, everything else is numeric.
    """

    def __init__(
        self,
        columns: Mapping[str, npt.ArrayLike],
        comments: Mapping[str, str] | None = None,
    ):
        self._columns = {name: np.asarray(arr) for name, arr in columns.items()}
        self.comments = MappingProxyType(dict(comments or {}))

        lengths = {name: len(arr) for name, arr in self._columns.items()}
        if len(set(lengths.values())) > 1:
            raise ValueError(f"Data columns differ in length: {lengths}")

    def __getitem__(self, key: str) -> np.ndarray:
        return self._columns[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._columns)

    def __len__(self) -> int:
        return len(self._columns)

    @property
    def n_samples(self) -> int:
        for arr in self._columns.values():
            return len(arr)
        return 0

    def comment(self, name: str) -> str:
        return self.comments.get(name, "")

    def __repr__(self):
        return f"DataTable({list(self._columns)}, n_samples={self.n_samples})"


@dataclass(frozen=True)
class Dimension:
    name: str
    data: np.ndarray
    axis: str | None = None
    comment: str | None = None

    def __post_init__(self):
        object.__setattr__(self, "data", _frozen(self.data))

    def __len__(self):
        return len(self.data)


@dataclass(frozen=True)
class Variable:
    """A named array laid out over some of the dataset dimensions.

    ``dimensions`` holds indices into :attr:`SampleDataset.dimensions`, an
    empty tuple is a scalar.
    """

    name: str
    dimensions: tuple[int, ...]
    data: np.ndarray
    comment: str | None = None
    coordinates: str | None = None
    applied_offset: float | None = None
    axis: str | None = None

    def __post_init__(self):
        object.__setattr__(self, "dimensions", tuple(self.dimensions))
        object.__setattr__(self, "data", _frozen(self.data))

    @property
    def attrs(self) -> dict[str, Any]:
        attrs: dict[str, Any] = {}
        if self.comment:
            attrs["comment"] = self.comment
        if self.coordinates:
            attrs["coordinates"] = self.coordinates
        if self.applied_offset is not None:
            attrs["applied_offset"] = self.data.dtype.type(self.applied_offset)
        if self.axis:
            attrs["axis"] = self.axis
        return attrs


def _attr_value(value):
    """Turn a metadata value into something netCDF can store, or None"""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (str, int, float)):
        return value
    if isinstance(value, np.datetime64):
        if np.isnat(value):
            return None
        return str(np.datetime_as_string(value, unit="s"))
    if isinstance(value, np.generic):
        return value.item()
    return None


@dataclass(frozen=True)
class SampleDataset:
    """The normalized contents of one instrument file.

    Dimensions are kept in CF order, T then Z then Y/X or profile then the
    rest. Nothing in a dataset is changed after it has been built.
    """

    dimensions: tuple[Dimension, ...]
    variables: tuple[Variable, ...]
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "dimensions", tuple(self.dimensions))
        object.__setattr__(self, "variables", tuple(self.variables))
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    def __getitem__(self, name: str) -> Variable | Dimension:
        for var in self.variables:
            if var.name == name:
                return var
        for dim in self.dimensions:
            if dim.name == name:
                return dim
        raise KeyError(name)

    def __contains__(self, name) -> bool:
        try:
            self[name]
        except KeyError:
            return False
        return True

    @property
    def dimension_names(self) -> tuple[str, ...]:
        return tuple(dim.name for dim in self.dimensions)

    @property
    def variable_names(self) -> tuple[str, ...]:
        return tuple(var.name for var in self.variables)

    def dims_of(self, var: Variable) -> tuple[str, ...]:
        return tuple(self.dimensions[i].name for i in var.dimensions)

    def to_xarray(self) -> xr.Dataset:
        """Render as an :class:`xarray.Dataset` ready for ``to_netcdf``"""
        coords = {}
        for dim in self.dimensions:
            attrs = {}
            if dim.axis:
                attrs["axis"] = dim.axis
            if dim.comment:
                attrs["comment"] = dim.comment
            coords[dim.name] = xr.DataArray(
                dim.data, dims=dim.name, name=dim.name, attrs=attrs
            )

        data_vars = {}
        for var in self.variables:
            data_vars[var.name] = xr.DataArray(
                var.data, dims=self.dims_of(var), name=var.name, attrs=var.attrs
            )

        attrs = {}
        for key, value in self.metadata.items():
            if (value := _attr_value(value)) is not None:
                attrs[key] = value

        ds = xr.Dataset(data_vars, coords=coords, attrs=attrs)

        if TIME in ds.variables and np.issubdtype(ds[TIME].dtype, np.datetime64):
            ds[TIME].encoding.update(TIME_ENCODING)
        if "DIRECTION" in ds.variables:
            ds["DIRECTION"].encoding["dtype"] = "S1"
        return ds
