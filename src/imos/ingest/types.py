from enum import StrEnum, auto
from typing import Literal

Modes = Literal["profile", "timeSeries"]


class Mode(StrEnum):
    PROFILE = "profile"
    TIMESERIES = "timeSeries"


ModeType = Modes | Mode


class Section(StrEnum):
    INSTRUMENT = auto()
    PROCESSED = auto()


class LineKind(StrEnum):
    INSTRUMENT = auto()
    PROCESSED = auto()
    DATA_BOUNDARY = auto()
    DATA_ROW = auto()


class CastPolicy(StrEnum):
    """How repeated cast lines accumulate on a header record.

    Time series files only need the first cast, profile files need every
    cast so that per cast timestamps can be rebuilt.
    """

    FIRST = auto()
    ALL = auto()

    @classmethod
    def for_mode(cls, mode: ModeType) -> "CastPolicy":
        if Mode(mode) is Mode.PROFILE:
            return cls.ALL
        return cls.FIRST


class TimeSource(StrEnum):
    COLUMN = auto()
    CASTS = auto()
    UNIFORM = auto()
    DEFAULT = auto()
