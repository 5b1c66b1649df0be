"""Bed layout (床位表): one sheet per station with occupant names and counts."""

from __future__ import annotations

import logging
import re

from app.core.records import BedOccupancy, DocumentType, StationRecord
from app.mappers.base import FieldMapper
from app.mappers.common import write, zh_date

logger = logging.getLogger(__name__)

STATISTICS_STATION = "C站"

BED_CELLS = {
    "C202-1": "C3", "C202-2": "C4",
    "C205-1": "F3",
    "C206-1": "I3", "C206-2": "I4", "C206-3": "I5",
    "C208-1": "L3", "C208-2": "L4", "C208-3": "L5", "C208-4": "L6",
    "C209-1": "O3", "C209-2": "O4",
    "C210-1": "R3", "C210-2": "R4",
    "C211-1": "C8", "C211-2": "C9",
    "C212-1": "F8", "C212-2": "F9",
    "C213-1": "I8", "C213-2": "I9",
    "C215-1": "L8", "C215-2": "L9",
    "C216-1": "O8", "C216-2": "O9",
    "C217-1": "R8", "C217-2": "R9",
    "C218-1": "C11", "C218-2": "C12",
    "C219-1": "F11", "C219-2": "F12", "C219-3": "F13", "C219-4": "F14", "C219-5": "F15",
    "C220-1": "I11", "C220-2": "I12",
    "C221-1": "L11", "C221-2": "L12", "C221-3": "L13", "C221-4": "L14", "C221-5": "L15",
    "C222-1": "O11", "C222-2": "O12",
    "C223-1": "R11", "C223-2": "R12",
    "C225-1": "C17", "C225-2": "C18",
    "C226-1": "F17", "C226-2": "F18", "C226-3": "F19",
    "C227-1": "I17",
    "C228-1": "L17",
    "C229-1": "O17", "C229-2": "O18",
    "C230-1": "R17", "C230-2": "R18",
    "C231-1": "C21", "C231-2": "C22",
    "C232-1": "F21", "C232-2": "F22",
    "C233-1": "I21", "C233-2": "I22", "C233-3": "I23", "C233-4": "I24",
    "C235-1": "L21", "C235-2": "L22", "C235-3": "L23", "C235-4": "L24",
    "C236-1": "O21", "C236-2": "O22", "C236-3": "O23", "C236-4": "O24",
    "C237-1": "R21", "C237-2": "R22", "C237-3": "R23", "C237-4": "R24",
}

STATISTICS_CELLS = {
    "male_half_care": "D26",
    "female_half_care": "F26",
    "male_full_care": "D27",
    "female_full_care": "F27",
    "total_beds": "L26",
    "occupied": "O26",
    "male": "L27",
    "female": "O27",
    "vacant": "R26",
}
PRINT_DATE_CELL = "Q28"


def natural_key(bed_number: str) -> list[object]:
    """Sort key treating digit runs as numbers: C202-2 < C202-10."""
    return [int(part) if part.isdigit() else part for part in re.split(r"(\d+)", bed_number)]


def station_statistics(beds: tuple[BedOccupancy, ...]) -> dict[str, int]:
    occupants = [bed.resident for bed in beds if bed.resident is not None]

    def count(sex: str, care_level: str | None = None) -> int:
        return sum(
            1
            for r in occupants
            if r.sex == sex and (care_level is None or r.care_level == care_level)
        )

    return {
        "male_half_care": count("男", "半護理"),
        "female_half_care": count("女", "半護理"),
        "male_full_care": count("男", "全護理"),
        "female_full_care": count("女", "全護理"),
        "total_beds": len(beds),
        "occupied": len(occupants),
        "male": count("男"),
        "female": count("女"),
        "vacant": len(beds) - len(occupants),
    }


class BedLayoutMapper(FieldMapper):
    doc_type = DocumentType.BED_LAYOUT
    record_type = StationRecord

    def sheet_name(self, record: StationRecord) -> str:
        return f"{record.station}{self.form.label}"

    def apply(self, ws, template, record: StationRecord, options) -> None:
        for bed in sorted(record.beds, key=lambda b: natural_key(b.bed_number)):
            address = BED_CELLS.get(bed.bed_number)
            if address is None:
                logger.warning("No cell mapped for bed %s", bed.bed_number)
                continue
            write(ws, address, bed.resident.full_name if bed.resident else "")

        if record.station != STATISTICS_STATION:
            return
        for key, value in station_statistics(record.beds).items():
            write(ws, STATISTICS_CELLS[key], value)
        write(ws, PRINT_DATE_CELL, zh_date(options.today))

    def filename(self, records, options, label=None) -> str:
        if len(records) == 1:
            return f"{records[0].station}_{self.form.label}.xlsx"
        return f"{self.form.label}({len(records)}個站點).xlsx"
