from collections.abc import Mapping
from dataclasses import dataclass
from logging import getLogger
from warnings import warn

import numpy as np
import numpy.typing as npt

from .consts import BASE_SCAN_INTERVAL, DEFAULT_INTERVAL, DEFAULT_START, TIME
from .header import HeaderRecord
from .types import TimeSource

log = getLogger(__name__)


@dataclass(frozen=True)
class TimeAxis:
    """One timestamp per sample, missing timestamps are NaT."""

    values: npt.NDArray[np.datetime64]
    source: TimeSource

    @property
    def low_confidence(self) -> bool:
        return self.source is TimeSource.DEFAULT

    def __len__(self):
        return len(self.values)


def _seconds(value: float) -> np.timedelta64:
    return np.timedelta64(int(round(value * 1e9)), "ns")


def _uniform(start: np.datetime64, interval: float, count: int) -> np.ndarray:
    return np.datetime64(start, "ns") + np.arange(count) * _seconds(interval)


def cast_times(header: HeaderRecord, sample_count: int = 0) -> np.ndarray:
    """Timestamps rebuilt from the cast records of a header.

    The result covers the largest cast end index, or ``sample_count`` if that
    is larger. Indices outside every cast stay NaT.
    """
    size = max([sample_count, *(cast.end for cast in header.casts)])
    time = np.full(size, np.datetime64("NaT", "ns"))
    for cast in header.casts:
        offsets = np.arange(cast.size)
        time[cast.start - 1 : cast.end] = cast.date + offsets * _seconds(
            cast.interval
        )
    return time


def reconstruct_time(
    header: HeaderRecord,
    data: Mapping[str, np.ndarray],
    sample_count: int | None = None,
    *,
    default_start: np.datetime64 = DEFAULT_START,
    default_interval: float = DEFAULT_INTERVAL,
    base_interval: float = BASE_SCAN_INTERVAL,
) -> TimeAxis:
    """Find or make a timestamp for every sample.

    The richest source available wins:

    1. an explicit ``TIME`` column, returned as is
    2. the cast records of the header, one linear run per cast
    3. a start time and a sampling interval, the interval is the scan
       average count times ``base_interval``, or failing that the header
       sample interval
    4. ``default_start`` and/or ``default_interval`` for whatever is missing
       from 3, the result is flagged as low confidence and a warning issued

    :param sample_count: Number of samples, defaults to the length of the
        first column in ``data``
    """
    if TIME in data:
        return TimeAxis(data[TIME], TimeSource.COLUMN)

    if sample_count is None:
        sample_count = len(next(iter(data.values()), []))

    if header.casts:
        log.debug(f"Generating timestamps from {len(header.casts)} cast records")
        return TimeAxis(cast_times(header, sample_count), TimeSource.CASTS)

    start = header.cast_date
    if start is None:
        start = header.start_time

    interval = None
    if header.scan_avg is not None:
        interval = base_interval * header.scan_avg
    elif header.sample_interval is not None:
        interval = header.sample_interval

    if start is not None and interval is not None:
        log.debug(f"Generating timestamps from {start} every {interval}s")
        return TimeAxis(_uniform(start, interval, sample_count), TimeSource.UNIFORM)

    warn(
        "No usable timing information in header, timestamps are generated "
        "from default values and should not be trusted",
        stacklevel=2,
    )
    if start is None:
        start = default_start
    if interval is None:
        interval = default_interval
    return TimeAxis(_uniform(start, interval, sample_count), TimeSource.DEFAULT)
