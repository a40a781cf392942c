import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from ..header import PatternRule
from ..types import LineKind, Section


@dataclass(frozen=True)
class ColumnDef:
    name: str
    comment: str = ""


@dataclass(frozen=True)
class FormatProfile:
    """Everything needed to take apart one vendor's text file layout.

    Profiles are module level constants shared between all readers, they must
    never be modified.
    """

    name: str
    make: str
    default_model: str
    instrument_rules: tuple[PatternRule, ...] = ()
    processed_rules: tuple[PatternRule, ...] = ()
    instrument_marker: str | None = None
    processed_marker: str | None = None
    terminator: re.Pattern[str] | None = None
    # what a header line carrying neither marker is
    unmarked: LineKind = LineKind.DATA_ROW
    delimiter: str = r"\s+"
    # raw vendor column name -> output column, None drops the column
    columns: Mapping[str, ColumnDef | None] = field(
        default_factory=lambda: MappingProxyType({})
    )
    # text columns combined into an explicit TIME column
    date_column: str | None = None
    time_column: str | None = None

    def rules(self, section: Section) -> tuple[PatternRule, ...]:
        if Section(section) is Section.INSTRUMENT:
            return self.instrument_rules
        return self.processed_rules

    def column_key(self, raw: str) -> str:
        """The lookup key of a raw column name, any ``(unit)`` suffix is dropped"""
        return raw.split("(")[0].strip()
