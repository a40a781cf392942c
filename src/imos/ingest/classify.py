"""Split a raw instrument file into its header sections and data rows."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from logging import getLogger

from .exceptions import MalformedHeaderError
from .formats import FormatProfile
from .types import LineKind

log = getLogger(__name__)


@dataclass
class Sections:
    instrument: list[str] = field(default_factory=list)
    processed: list[str] = field(default_factory=list)
    # the terminator line itself, for csv style formats this is the column header
    boundary: str | None = None
    data: list[str] = field(default_factory=list)


def classify(line: str, profile: FormatProfile) -> LineKind | None:
    """Decide which part of a file a line that precedes the data belongs to.

    Blank lines are not classified and give None.
    A line that carries neither header marker is classified as whatever the
    format says unmarked lines are, for marker based formats this is
    :attr:`LineKind.DATA_ROW`, the first data row.
    """
    if line.strip() == "":
        return None
    if profile.terminator is not None and profile.terminator.search(line):
        return LineKind.DATA_BOUNDARY
    if profile.instrument_marker and line.startswith(profile.instrument_marker):
        return LineKind.INSTRUMENT
    if profile.processed_marker and line.startswith(profile.processed_marker):
        return LineKind.PROCESSED
    return profile.unmarked


def split_sections(lines: Iterable[str], profile: FormatProfile) -> Sections:
    """Sort the lines of a file into :class:`Sections`

    :raises MalformedHeaderError: if the input ends before the data boundary
    """
    sections = Sections()
    found_boundary = False
    for line in lines:
        line = line.rstrip()
        if found_boundary:
            if line.strip() != "":
                sections.data.append(line)
            continue

        kind = classify(line, profile)
        if kind is None:
            continue
        if kind is LineKind.INSTRUMENT:
            sections.instrument.append(line)
        elif kind is LineKind.PROCESSED:
            sections.processed.append(line)
        elif kind is LineKind.DATA_BOUNDARY:
            sections.boundary = line
            found_boundary = True
        elif kind is LineKind.DATA_ROW:
            sections.data.append(line)
            found_boundary = True

    if not found_boundary:
        raise MalformedHeaderError(
            f"No {profile.name} header/data boundary found "
            f"after {len(sections.instrument) + len(sections.processed)} header lines"
        )

    log.debug(
        f"Found {len(sections.instrument)} instrument header lines, "
        f"{len(sections.processed)} processed header lines and "
        f"{len(sections.data)} data lines"
    )
    return sections
