"""Build the normalized dimension/variable layout of one instrument file."""

from collections.abc import Mapping
from logging import getLogger
from typing import Any

import numpy as np
import numpy.typing as npt

from .checks import check_dataset
from .consts import (
    BOT_DEPTH_COMMENT,
    DEPTH,
    DEPTH_FROM_PRES_REL_COMMENT,
    MAXZ,
    PRES_REL_APPLIED_OFFSET,
    PRES_REL_PREFIX,
    PROFILE,
    PROFILE_COORDINATES,
    PROFILE_TIME_COMMENT,
    TIME,
    TIMESERIES_COORDINATES,
)
from .containers import DataTable, Dimension, SampleDataset, Variable
from .dt import TimeAxis
from .exceptions import MissingVerticalCoordinateError
from .header import HeaderRecord
from .params import param_dtype
from .types import Mode, ModeType

log = getLogger(__name__)


def cast(name: str, values: npt.ArrayLike) -> np.ndarray:
    """Cast some values to the catalog type of the variable ``name``

    Text and datetime values are left alone. Integer types are widened to
    float64 when there are missing values to keep.
    """
    arr = np.asarray(values)
    if arr.dtype.kind in "OUSMm":
        return arr
    dtype = param_dtype(name)
    if dtype.kind in "iu" and arr.dtype.kind == "f" and np.isnan(arr).any():
        return arr.astype("float64")
    return arr.astype(dtype)


def _fill_value(dtype: np.dtype):
    if dtype.kind in "Mm":
        return np.datetime64("NaT") if dtype.kind == "M" else np.timedelta64("NaT")
    if dtype.kind in "US":
        return ""
    return np.nan


def _is_time_column(name: str) -> bool:
    return name == TIME


def _applied_offset(name: str) -> float | None:
    # documents the atmosphere SBE software removed from the absolute pressure
    if name.startswith(PRES_REL_PREFIX):
        return PRES_REL_APPLIED_OFFSET
    return None


def find_vertical(data: Mapping[str, Any]) -> tuple[str, bool]:
    """Name of the column to use as the vertical coordinate.

    ``DEPTH`` is preferred, ``PRES_REL`` is used as a proxy for depth.
    Returns the name and whether it is a real depth.

    :raises MissingVerticalCoordinateError: if neither column is present
    """
    by_upper = {name.upper(): name for name in data}
    if DEPTH in by_upper:
        return by_upper[DEPTH], True
    if PRES_REL_PREFIX in by_upper:
        return by_upper[PRES_REL_PREFIX], False
    raise MissingVerticalCoordinateError(
        "There is no pressure or depth information to use in profile mode, "
        f"columns are {list(data)}"
    )


def turning_point(z: npt.ArrayLike) -> int:
    """Index of the last sample at the global maximum of ``z``.

    This is the bottom of the cast, the last sample of the descending leg.
    NaN values are ignored.
    """
    z = np.asarray(z, dtype=float)
    if z.size == 0 or np.all(np.isnan(z)):
        raise MissingVerticalCoordinateError("The vertical coordinate has no values")
    return int(np.flatnonzero(z == np.nanmax(z))[-1])


def split_legs(z: npt.ArrayLike) -> tuple[np.ndarray, np.ndarray]:
    """Split a cast into its descending and ascending legs"""
    z = np.asarray(z)
    boundary = turning_point(z) + 1
    return z[:boundary], z[boundary:]


def pad_legs(name: str, values: npt.ArrayLike, boundary: int, maxz: int) -> np.ndarray:
    """Lay the two legs of a cast out as the columns of a (maxz, 2) array.

    The shorter leg is padded at the end with missing values.
    """
    values = cast(name, values)
    dtype = values.dtype
    if dtype.kind in "iub":
        dtype = np.dtype("float64")
    out = np.full((maxz, 2), _fill_value(dtype), dtype=dtype)
    descending, ascending = values[:boundary], values[boundary:]
    out[: len(descending), 0] = descending
    out[: len(ascending), 1] = ascending
    return out


def _placeholder(
    name: str,
    dims: tuple[int, ...] = (),
    shape: tuple[int, ...] = (),
    comment: str | None = None,
) -> Variable:
    # filled in later from deployment metadata
    return Variable(name, dims, cast(name, np.full(shape, np.nan)), comment=comment)


def _time_series(data: DataTable, time: np.ndarray):
    dimensions = [Dimension(TIME, time, axis="T")]
    variables = [
        Variable("TIMESERIES", (), cast("TIMESERIES", 1)),
        _placeholder("LATITUDE"),
        _placeholder("LONGITUDE"),
        _placeholder("NOMINAL_DEPTH"),
    ]

    # dimensions must stay in the order T, Z, Y, X, others to be CF compliant
    for name, values in data.items():
        if _is_time_column(name):
            continue
        variables.append(
            Variable(
                name,
                (0,),
                cast(name, values),
                comment=data.comment(name),
                coordinates=TIMESERIES_COORDINATES,
                applied_offset=_applied_offset(name),
            )
        )
    return dimensions, variables


def _profile(data: DataTable, header: HeaderRecord, time: np.ndarray, source: str):
    if header.bin_size is None:
        log.warning(f"{source} has not been vertically binned")

    z_name, is_depth = find_vertical(data)
    depth_data = data[z_name]
    depth_comment = None if is_depth else DEPTH_FROM_PRES_REL_COMMENT

    n = data.n_samples
    boundary = turning_point(depth_data) + 1
    n_descending = boundary
    n_ascending = n - boundary
    single_leg = n_ascending == 0

    dimensions: list[Dimension] = []
    variables: list[Variable] = []

    if single_leg:
        dimensions.append(
            Dimension(DEPTH, cast(DEPTH, depth_data), axis="Z", comment=depth_comment)
        )
        variables.append(Variable(PROFILE, (), cast(PROFILE, 1)))
        profile_dims: tuple[int, ...] = ()
        times = time[0]
        directions = np.array("D")
        legs: tuple[int, ...] = ()
    else:
        maxz = max(n_descending, n_ascending)
        dimensions.append(Dimension(MAXZ, cast(MAXZ, np.arange(1, maxz + 1))))
        dimensions.append(Dimension(PROFILE, cast(PROFILE, [1, 2])))
        profile_dims = (1,)
        times = np.array([time[0], time[boundary]])
        directions = np.array(["D", "A"])
        legs = (2,)
        log.warning(
            f"{source} has both a descending and an ascending leg, "
            "they are kept as two profiles"
        )

    variables.append(
        Variable(TIME, profile_dims, times, comment=PROFILE_TIME_COMMENT)
    )
    variables.append(Variable("DIRECTION", profile_dims, directions))
    variables.append(_placeholder("LATITUDE", profile_dims, legs))
    variables.append(_placeholder("LONGITUDE", profile_dims, legs))
    variables.append(
        _placeholder("BOT_DEPTH", profile_dims, legs, comment=BOT_DEPTH_COMMENT)
    )

    if not single_leg and not is_depth:
        variables.append(
            Variable(
                DEPTH,
                (0, 1),
                pad_legs(DEPTH, depth_data, boundary, maxz),
                comment=depth_comment,
                axis="Z",
            )
        )

    for name, values in data.items():
        if _is_time_column(name):
            continue
        if single_leg and name == z_name and is_depth:
            continue

        if single_leg:
            var_dims: tuple[int, ...] = (0,)
            arr = cast(name, values)
        else:
            var_dims = (0, 1)
            arr = pad_legs(name, values, boundary, maxz)

        variables.append(
            Variable(
                name,
                var_dims,
                arr,
                comment=data.comment(name),
                coordinates=None if name.upper() == DEPTH else PROFILE_COORDINATES,
                applied_offset=_applied_offset(name),
            )
        )
    return dimensions, variables


def build_dataset(
    data: DataTable,
    header: HeaderRecord,
    time: TimeAxis,
    mode: ModeType,
    metadata: Mapping[str, Any] | None = None,
) -> SampleDataset:
    """Lay out the decoded columns of one file as dimensions and variables.

    In time series mode every column is a variable over ``TIME``. In profile
    mode the cast is split at its deepest point, a cast with only a
    descending leg is a single profile over ``DEPTH``, otherwise each leg
    becomes a column of a (``MAXZ``, ``PROFILE``) grid padded with missing
    values.

    :param data: The decoded data columns
    :param header: The merged header record of the file
    :param time: One timestamp per sample, see :func:`~imos.ingest.dt.reconstruct_time`
    :param mode: ``"profile"`` or ``"timeSeries"``
    :param metadata: Extra metadata to record on the dataset, e.g. the input file name
    :raises MissingVerticalCoordinateError: in profile mode without a ``DEPTH`` or ``PRES_REL`` column
    """
    mode = Mode(mode)
    metadata = dict(metadata or {})
    source = metadata.get("toolbox_input_file", "input")

    if not isinstance(data, DataTable):
        data = DataTable(data)

    n = data.n_samples
    times = time.values[:n]
    if len(time) > n:
        log.debug(f"Time axis has {len(time)} entries for {n} samples, truncating")

    if mode is Mode.PROFILE:
        dimensions, variables = _profile(data, header, times, source)
    else:
        dimensions, variables = _time_series(data, times)

    ds = SampleDataset(
        dimensions=tuple(dimensions),
        variables=tuple(variables),
        metadata={
            **header.as_dict(),
            **metadata,
            "featureType": mode.value,
            "time_source": time.source.value,
            "time_low_confidence": time.low_confidence,
        },
    )
    check_dataset(ds)
    return ds
