"""Vemco Minilog-II-T ``.csv`` exports from the Logger Vue software.

The header carries no markers, it simply runs until the column header line
which starts with ``Date``. An example header::

    Source File: C:\\Field\\Trip5934\\Minilog-II-T_354314_20140213_1.vld
    Source Device: Minilog-II-T-354314
    Study Description: TAN100
    Minilog Initialized: 2013-08-04 05:03:50 (UTC+10)
    Study Start Time: 2013-08-05 00:00:00
    Study Stop Time: 2014-02-13 11:44:00
    Sample Interval: 00:01:00
    Date(yyyy-mm-dd),Time(hh:mm:ss),Temperature (°C)
"""

import re
from types import MappingProxyType

from ..header import hms_to_seconds, parse_datetime, rule
from ..types import LineKind
from .base import ColumnDef, FormatProfile

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


@rule("source", r"^Source Device: ([\w-]+)-(\d+)$")
def _source(record, match, policy):
    record.set_once("instrument_model", match[1])
    record.set_once("instrument_serial_no", match[2])


@rule("start", r"^Study Start Time: (\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2})")
def _start(record, match, policy):
    record.set_once("start_time", parse_datetime(match[1], DATE_FORMAT))


@rule("stop", r"^Study Stop Time: (\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2})")
def _stop(record, match, policy):
    record.set_once("stop_time", parse_datetime(match[1], DATE_FORMAT))


@rule("sample", r"^Sample Interval: (\d+):(\d+):(\d+)")
def _sample(record, match, policy):
    record.set_once("sample_interval", hms_to_seconds(match[1], match[2], match[3]))


@rule("other", r"^([^:]+):\s*(.+)$")
def _other(record, match, policy):
    record.extra.setdefault(match[1].strip(), match[2].strip())


PROCESSED_RULES = (_source, _start, _stop, _sample, _other)

COLUMNS = MappingProxyType(
    {
        "Temperature": ColumnDef("TEMP"),
        "Depth": ColumnDef("DEPTH"),
    }
)

VEMCO = FormatProfile(
    name="vemco",
    make="Vemco",
    default_model="Vemco Unknown",
    processed_rules=PROCESSED_RULES,
    terminator=re.compile(r"^Date"),
    unmarked=LineKind.PROCESSED,
    delimiter=",",
    columns=COLUMNS,
    date_column="Date",
    time_column="Time",
)
