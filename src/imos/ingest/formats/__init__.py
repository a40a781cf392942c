"""Supported instrument file layouts."""

from .base import ColumnDef, FormatProfile
from .sbe import SBE
from .vemco import VEMCO

__all__ = ["ColumnDef", "FormatProfile", "FORMATS", "get_format"]

FORMATS: dict[str, FormatProfile] = {fmt.name: fmt for fmt in (SBE, VEMCO)}


def get_format(name: str | FormatProfile) -> FormatProfile:
    if isinstance(name, FormatProfile):
        return name
    try:
        return FORMATS[name.lower()]
    except KeyError:
        raise KeyError(
            f"Unknown format {name!r}, known formats are {sorted(FORMATS)}"
        ) from None
