"""Builders for small synthetic instrument files, mostly for testing."""

from collections.abc import Sequence

SIMPLE_INSTRUMENT_HEADER = (
    "* Sea-Bird SBE19plus Data File:",
    "* FileName = C:\\data\\test.hex",
    "* Software version 2.1.1",
    "* SBE 19plus V 2.3 SERIAL NO. 1234",
    "* vbatt = 13.1, vlith = 8.4, ioper = 59.5 ma, ipump = 43.2 ma,",
    "* number of scans to average = 4",
)


def simple_cnv(
    columns: Sequence[str] = ("prDM", "t090C"),
    data: Sequence[Sequence[float]] = ((1.0, 20.5), (2.0, 20.25), (3.0, 20.0)),
    instrument_header: Sequence[str] | None = SIMPLE_INSTRUMENT_HEADER,
    processed_header: Sequence[str] = (),
    bad_flag: float | None = -9.99e-29,
    terminator: bool = True,
) -> bytes:
    """A minimal SBE ``.cnv`` file.

    ``columns`` are raw SBE short names, each written as a ``# name N`` line
    before any extra ``processed_header`` lines.
    """
    lines = list(instrument_header or ())
    lines.append(f"# nquan = {len(columns)}")
    lines.append(f"# nvalues = {len(data)}")
    for idx, column in enumerate(columns):
        lines.append(f"# name {idx} = {column}: {column}")
    lines.extend(processed_header)
    if bad_flag is not None:
        lines.append(f"# bad_flag = {bad_flag:.3e}")
    if terminator:
        lines.append("*END*")
    for row in data:
        lines.append("".join(f"{value:11.4f}" for value in row))
    return "\n".join(lines).encode("utf8")


SIMPLE_VEMCO_HEADER = (
    "Source File: C:\\Field\\Trip5934\\Minilog-II-T_354314_20140213_1.vld",
    "Source Device: Minilog-II-T-354314",
    "Study Description: TAN100",
    "Minilog Initialized: 2013-08-04 05:03:50 (UTC+10)",
    "Study Start Time: 2013-08-05 00:00:00",
    "Study Stop Time: 2014-02-13 11:44:00",
    "Sample Interval: 00:01:00",
)


def simple_vemco(
    data: Sequence[tuple[str, str, float]] = (
        ("2013-08-05", "00:00:00", 21.5),
        ("2013-08-05", "00:01:00", 21.25),
        ("2013-08-05", "00:02:00", 21.0),
    ),
    header: Sequence[str] = SIMPLE_VEMCO_HEADER,
    encoding: str = "latin-1",
) -> bytes:
    """A minimal Logger Vue ``.csv`` export"""
    lines = list(header)
    lines.append("Date(yyyy-mm-dd),Time(hh:mm:ss),Temperature (°C)")
    for date, time, temp in data:
        lines.append(f"{date},{time},{temp}")
    return "\n".join(lines).encode(encoding)
