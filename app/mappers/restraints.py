"""Cell layout shared by the restraint consent and observation forms.

Each restraint item occupies two rows: the first carries the item checkbox,
usage options, day period and all-day box; the second carries the night
period and the free-text "other time".
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from app.core.records import RestraintUsage
from app.engine.marks import checkbox
from app.mappers.common import write

if TYPE_CHECKING:
    from openpyxl.worksheet.worksheet import Worksheet

SIT = "坐在椅上"
LIE = "躺在床上"
SIT_AND_LIE = "坐在椅上及躺在床上"
SIT_OR_WHEELCHAIR = "坐在椅上/輪椅上"


@dataclass(frozen=True)
class RestraintCells:
    """Addresses of one restraint item on a form."""

    checked: str
    usage: dict[str, str]
    day: str
    day_start: str
    day_end: str
    night: str
    night_start: str
    night_end: str
    all_day: str
    other: str
    other_time: str


def write_restraint(ws: "Worksheet", cells: RestraintCells, usage: RestraintUsage) -> None:
    """Write one restraint item.

    Usage glyphs and time boxes are only written for a ticked item; an
    unticked item leaves the template's boxes untouched.
    """
    write(ws, cells.checked, checkbox(usage.checked))
    if not usage.checked:
        return

    for condition, address in cells.usage.items():
        write(ws, address, checkbox(usage.usage_conditions == condition))

    write(ws, cells.day, checkbox(usage.day_time))
    if usage.day_start_time:
        write(ws, cells.day_start, usage.day_start_time)
    if usage.day_end_time:
        write(ws, cells.day_end, usage.day_end_time)

    write(ws, cells.night, checkbox(usage.night_time))
    if usage.night_start_time:
        write(ws, cells.night_start, usage.night_start_time)
    if usage.night_end_time:
        write(ws, cells.night_end, usage.night_end_time)

    write(ws, cells.all_day, checkbox(usage.all_day))
    write(ws, cells.other, checkbox(bool(usage.other_time)))
    if usage.other_time:
        write(ws, cells.other_time, usage.other_time)
