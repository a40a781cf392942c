"""Table driven extraction of instrument header metadata.

Instrument header vocabularies are open ended and differ between vendors and
firmware versions, there is no schema to validate against. Each supported
format instead supplies an ordered table of :class:`PatternRule`. For every
header line the first rule whose pattern matches is applied and no other rule
is tried for that line. Lines no rule matches are ignored.
"""

from __future__ import annotations

import dataclasses
import re
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from logging import getLogger
from typing import Any, NamedTuple

import numpy as np

from .types import CastPolicy

log = getLogger(__name__)

Handler = Callable[["HeaderRecord", re.Match[str], CastPolicy], None]


@dataclass(frozen=True)
class CastRecord:
    """One cast summary line.

    ``start`` and ``end`` are 1-based and inclusive sample indices,
    ``interval`` is the averaging interval of the cast in seconds.
    """

    number: int
    date: np.datetime64
    start: int
    end: int
    interval: float

    @property
    def size(self) -> int:
        return self.end - self.start + 1


@dataclass
class HeaderRecord:
    instrument_model: str | None = None
    instrument_firmware: str | None = None
    instrument_serial_no: str | None = None

    scan_avg: int | None = None
    cast_avg: int | None = None
    sample_interval: float | None = None
    measurements_per_sample: int | None = None
    num_samples: int | None = None
    free_mem: int | None = None
    num_casts: int | None = None
    cast_date: np.datetime64 | None = None
    casts: list[CastRecord] = field(default_factory=list)

    mode: str | None = None
    min_cond_freq: float | None = None
    pump_delay: float | None = None
    pressure_sensor: str | None = None
    output_format: str | None = None
    resolution: str | None = None
    interval: float | None = None
    sbe38: str | None = None
    gtd: str | None = None
    optode: str | None = None
    ext_volts: dict[str, str] = field(default_factory=dict)
    volt_calibrations: dict[str, tuple[float, float]] = field(default_factory=dict)
    sensor_ids: list[str] = field(default_factory=list)
    sensor_types: list[str] = field(default_factory=list)

    # processed header
    columns: list[str] = field(default_factory=list)
    n_values: int | None = None
    bad_flag: float | None = None
    start_time: np.datetime64 | None = None
    stop_time: np.datetime64 | None = None
    bin_size: float | None = None
    volt_sensors: dict[str, str] = field(default_factory=dict)

    extra: dict[str, str] = field(default_factory=dict)

    def set_once(self, name: str, value: Any) -> bool:
        """Set the field ``name`` only if nothing has set it yet.

        Returns True if the value was taken.
        """
        if getattr(self, name) is not None:
            log.debug(f"{name} already set, ignoring {value!r}")
            return False
        setattr(self, name, value)
        return True

    def update(self, other: HeaderRecord) -> HeaderRecord:
        """Fill in the fields of ``self`` from ``other``.

        Scalar fields already set on ``self`` are kept, repeatable fields are
        concatenated and mappings are merged with ``self`` winning.
        """
        for f in dataclasses.fields(self):
            mine = getattr(self, f.name)
            theirs = getattr(other, f.name)
            if isinstance(mine, list):
                mine.extend(theirs)
            elif isinstance(mine, dict):
                setattr(self, f.name, {**theirs, **mine})
            elif mine is None:
                setattr(self, f.name, theirs)
        return self

    def as_dict(self) -> dict[str, Any]:
        """Shallow mapping of every populated field."""
        values = {}
        for f in dataclasses.fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            if isinstance(value, (list, dict)) and len(value) == 0:
                continue
            values[f.name] = value
        return values


class PatternRule(NamedTuple):
    name: str
    pattern: re.Pattern[str]
    handler: Handler


def rule(name: str, pattern: str, flags: int = 0):
    """Decorator to build a :class:`PatternRule` from a handler function"""

    def decorator(handler: Handler) -> PatternRule:
        return PatternRule(name, re.compile(pattern, flags), handler)

    return decorator


def parse_header(
    lines: Iterable[str],
    rules: Sequence[PatternRule],
    policy: CastPolicy = CastPolicy.ALL,
) -> HeaderRecord:
    """Apply an ordered rule table to some header lines.

    :param lines: Header lines of one section, markers included
    :param rules: The rule table for that section, in priority order
    :param policy: How cast lines accumulate, see :class:`~imos.ingest.types.CastPolicy`
    :returns: A new :class:`HeaderRecord`
    """
    record = HeaderRecord()
    for line in lines:
        for r in rules:
            match = r.pattern.search(line)
            if match is None:
                continue
            r.handler(record, match, policy)
            break
    return record


def append_cast(record: HeaderRecord, cast: CastRecord, policy: CastPolicy):
    """Add a cast record honouring the accumulation policy.

    Repeats of a cast already recorded are dropped in every mode.
    """
    if cast in record.casts:
        return
    if policy is CastPolicy.FIRST and record.casts:
        log.debug(f"Ignoring cast {cast.number}, only the first cast is kept")
        return
    record.casts.append(cast)


def parse_datetime(value: str, fmt: str) -> np.datetime64:
    return np.datetime64(datetime.strptime(value.strip(), fmt), "ns")


def hms_to_seconds(hours: str, minutes: str, seconds: str) -> float:
    return int(hours) * 3600 + int(minutes) * 60 + float(seconds)


UNIT_SECONDS = {
    "s": 1,
    "sec": 1,
    "second": 1,
    "seconds": 1,
    "m": 60,
    "min": 60,
    "minute": 60,
    "minutes": 60,
    "h": 3600,
    "hour": 3600,
    "hours": 3600,
}


def to_seconds(value: str, unit: str) -> float:
    """Convert a value in some time unit into seconds, unknown units are taken as seconds"""
    return float(value) * UNIT_SECONDS.get(unit.lower(), 1)
