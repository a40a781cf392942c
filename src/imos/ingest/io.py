"""Reading instrument files from disk, the network or open file objects."""

import io
import re
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from logging import getLogger
from pathlib import Path

import numpy as np
import pandas as pd
import requests

from .classify import split_sections
from .containers import DataTable, SampleDataset
from .core import build_dataset
from .dt import TimeAxis, reconstruct_time
from .exceptions import DataTableError
from .formats import ColumnDef, FormatProfile, get_format
from .header import HeaderRecord, parse_header
from .types import CastPolicy, ModeType, Section

log = getLogger(__name__)

__all__ = ["read_instrument", "read_sbe", "read_vemco", "read_lines", "read_table"]

FilenameOrObj = str | Path | io.BufferedIOBase


def _source_name(filename_or_obj: FilenameOrObj) -> str:
    if isinstance(filename_or_obj, (str, Path)):
        return str(filename_or_obj)
    return getattr(filename_or_obj, "name", "<stream>")


def read_lines(filename_or_obj: FilenameOrObj) -> list[str]:
    """Load the raw lines of a file from a path, http(s) url or binary file object"""
    if isinstance(filename_or_obj, str) and filename_or_obj.startswith("http"):
        log.info("Loading object over http")
        response = requests.get(filename_or_obj)
        response.raise_for_status()
        data_raw = response.content

    elif isinstance(filename_or_obj, (str, Path)):
        log.info("Loading object from local file path")
        with open(filename_or_obj, "rb") as f:
            data_raw = f.read()

    elif isinstance(filename_or_obj, io.IOBase):
        log.info("Loading object open file object")
        data_raw = filename_or_obj.read()

    else:
        raise TypeError(f"Cannot read from {type(filename_or_obj)}")

    try:
        data = data_raw.decode("utf8")
    except UnicodeDecodeError:
        # Logger Vue writes its degree sign in latin-1
        log.debug("File is not utf8, decoding as latin-1")
        data = data_raw.decode("latin-1")

    return data.removeprefix("\ufeff").splitlines()


def _unique(name: str, seen: set[str]) -> str:
    """Number a repeated output column as NAME_2, NAME_3, ..."""
    if name not in seen:
        return name
    n = 2
    while f"{name}_{n}" in seen:
        n += 1
    return f"{name}_{n}"


def _raw_columns(profile: FormatProfile, header: HeaderRecord, boundary: str | None):
    if boundary is not None and profile.delimiter == ",":
        return [col.strip() for col in boundary.split(",")]
    return list(header.columns)


def read_table(
    rows: Sequence[str],
    columns: Sequence[str],
    profile: FormatProfile,
    bad_flag: float | None = None,
) -> DataTable:
    """Tokenize the data rows of a file into a :class:`DataTable`

    Raw vendor column names are renamed with the column table of the format,
    names it does not know are kept as they are. Values equal to
    ``bad_flag`` become NaN.

    :raises DataTableError: if the rows do not have one value per column
    """
    if len(columns) == 0:
        raise DataTableError("No column names found in the header")

    for row_no, row in enumerate(rows, start=1):
        n_fields = len(re.split(profile.delimiter, row.strip()))
        if n_fields != len(columns):
            raise DataTableError(
                f"Data row {row_no} has {n_fields} values but the header names "
                f"{len(columns)} columns"
            )

    keys = [profile.column_key(col) for col in columns]
    text_keys = {profile.date_column, profile.time_column} - {None}
    text_columns = {
        idx: str for idx, key in enumerate(keys) if key in text_keys
    }

    try:
        frame = pd.read_csv(
            io.StringIO("\n".join(row.strip() for row in rows)),
            sep=profile.delimiter,
            header=None,
            names=list(range(len(columns))),
            dtype=text_columns,
        )
    except (pd.errors.ParserError, ValueError) as error:
        raise DataTableError(f"Could not tokenize data rows: {error}") from error

    table: dict[str, np.ndarray] = {}
    comments: dict[str, str] = {}
    seen: set[str] = set()

    if text_keys and text_keys <= set(keys):
        date = frame[keys.index(profile.date_column)]
        time = frame[keys.index(profile.time_column)]
        table["TIME"] = pd.to_datetime(
            date.str.strip() + " " + time.str.strip()
        ).to_numpy("datetime64[ns]")
        seen.add("TIME")

    for idx, key in enumerate(keys):
        if key in text_keys:
            continue
        column_def = profile.columns.get(key, ColumnDef(key))
        if column_def is None:
            log.debug(f"Dropping column {columns[idx]}")
            continue

        values = frame[idx].to_numpy()
        if bad_flag is not None and np.issubdtype(values.dtype, np.number):
            values = np.where(values == bad_flag, np.nan, values)

        name = _unique(column_def.name, seen)
        seen.add(name)
        table[name] = values
        comments[name] = column_def.comment

    return DataTable(table, comments)


def instrument_sample_interval(header: HeaderRecord, time: TimeAxis) -> float:
    """Sample interval in seconds, from the header or else the time axis"""
    if header.sample_interval is not None:
        return header.sample_interval
    if len(time) < 2:
        return np.nan
    diffs = np.diff(time.values) / np.timedelta64(1, "s")
    diffs = diffs[~np.isnan(diffs)]
    if diffs.size == 0:
        return np.nan
    return float(np.median(diffs))


@contextmanager
def _stage(source: str, stage: str) -> Iterator[None]:
    try:
        yield
    except Exception as error:
        error.add_note(f"while {stage} {source}")
        raise


def read_instrument(
    filename_or_obj: FilenameOrObj,
    mode: ModeType,
    fmt: str | FormatProfile = "sbe",
) -> SampleDataset:
    """Read one instrument file into a :class:`~imos.ingest.containers.SampleDataset`

    :param filename_or_obj: A path, an http(s) url or an open binary file
    :param mode: ``"profile"`` or ``"timeSeries"``
    :param fmt: Name of a supported format, see :data:`imos.ingest.formats.FORMATS`
    :raises MalformedHeaderError: if the file has no header/data boundary
    :raises MissingVerticalCoordinateError: in profile mode without depth or pressure
    """
    profile = get_format(fmt)
    source = _source_name(filename_or_obj)
    policy = CastPolicy.for_mode(mode)

    with _stage(source, "reading"):
        lines = read_lines(filename_or_obj)

    with _stage(source, "classifying"):
        sections = split_sections(lines, profile)

    with _stage(source, "parsing header"):
        header = parse_header(
            sections.instrument, profile.rules(Section.INSTRUMENT), policy
        )
        header.update(
            parse_header(sections.processed, profile.rules(Section.PROCESSED), policy)
        )

    with _stage(source, "tokenizing"):
        columns = _raw_columns(profile, header, sections.boundary)
        data = read_table(sections.data, columns, profile, header.bad_flag)

    with _stage(source, "reconstructing time"):
        time = reconstruct_time(header, data, data.n_samples)

    metadata = {
        "toolbox_input_file": source,
        "instrument_make": profile.make,
        "instrument_model": header.instrument_model or profile.default_model,
        "instrument_firmware": header.instrument_firmware or "",
        "instrument_serial_no": header.instrument_serial_no or "",
        "instrument_sample_interval": instrument_sample_interval(header, time),
    }

    with _stage(source, "normalizing"):
        ds = build_dataset(data, header, time, mode, metadata)

    log.info(
        f"Read {data.n_samples} samples of {len(data)} columns from {source} "
        f"(time from {time.source})"
    )
    return ds


def read_sbe(filename_or_obj: FilenameOrObj, mode: ModeType) -> SampleDataset:
    """Read a Sea-Bird ``.cnv`` file"""
    return read_instrument(filename_or_obj, mode, fmt="sbe")


def read_vemco(filename_or_obj: FilenameOrObj, mode: ModeType) -> SampleDataset:
    """Read a Vemco Minilog ``.csv`` export"""
    return read_instrument(filename_or_obj, mode, fmt="vemco")
