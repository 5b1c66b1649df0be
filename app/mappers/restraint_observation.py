"""Restraint observation chart (約束物品觀察表) for a date range."""

from __future__ import annotations

from datetime import date

from app.core.records import DocumentType, RestraintRecord
from app.engine.emitter import single_record_filename
from app.engine.errors import InvalidExportOptions
from app.mappers.base import FieldMapper
from app.mappers.common import write
from app.mappers.restraints import LIE, SIT, SIT_AND_LIE, SIT_OR_WHEELCHAIR, RestraintCells, write_restraint

TITLE_CELL = "A1"
TITLE = "身體約束物品觀察記錄表"

HEADER_CELLS = {
    "name": "J3",
    "bed_number": "R3",
    "signature_month": "C25",
}

RESTRAINT_CELLS = {
    "restraint_vest": RestraintCells(
        checked="B6", usage={SIT: "D6", LIE: "H6", SIT_AND_LIE: "D7"},
        day="J6", day_start="M6", day_end="O6",
        night="J7", night_start="M7", night_end="O7",
        all_day="Q6", other="Q7", other_time="S7",
    ),
    "restraint_belt": RestraintCells(
        checked="B8", usage={SIT: "D8", LIE: "H8", SIT_AND_LIE: "D9"},
        day="J8", day_start="M8", day_end="O8",
        night="J9", night_start="M9", night_end="O9",
        all_day="Q8", other="Q9", other_time="S9",
    ),
    "wrist_strap": RestraintCells(
        checked="B10", usage={SIT: "D10", LIE: "H10", SIT_AND_LIE: "D11"},
        day="J10", day_start="M10", day_end="O10",
        night="J11", night_start="M11", night_end="O11",
        all_day="Q10", other="Q11", other_time="S11",
    ),
    "mittens": RestraintCells(
        checked="B12", usage={SIT: "D12", LIE: "H12", SIT_AND_LIE: "D13"},
        day="J12", day_start="M12", day_end="O12",
        night="J13", night_start="M13", night_end="O13",
        all_day="Q12", other="Q13", other_time="S13",
    ),
    "anti_slip_pants": RestraintCells(
        checked="B14", usage={SIT: "D14", LIE: "H14", SIT_AND_LIE: "D15"},
        day="J14", day_start="M14", day_end="O14",
        night="J15", night_start="M15", night_end="O15",
        all_day="Q14", other="Q15", other_time="S15",
    ),
    "table_board": RestraintCells(
        checked="B16", usage={SIT_OR_WHEELCHAIR: "D16"},
        day="J16", day_start="M16", day_end="O16",
        night="J17", night_start="M17", night_end="O17",
        all_day="Q16", other="Q17", other_time="S17",
    ),
}


def period_caption(start: date, end: date) -> str:
    """``身體約束物品觀察記錄表 ( 2024年 01月 01日 至 2024年 01月 31日 )``"""
    return f"{TITLE} ( {_spaced_date(start)} 至 {_spaced_date(end)} )"


def _spaced_date(value: date) -> str:
    return f"{value.year}年 {value.month:02d}月 {value.day:02d}日"


class RestraintObservationMapper(FieldMapper):
    doc_type = DocumentType.RESTRAINT_OBSERVATION
    record_type = RestraintRecord

    def validate_options(self, options):
        if options.start_date is None or options.end_date is None:
            raise InvalidExportOptions(
                message="Missing export option",
                detail="start_date and end_date are required for restraint observation charts",
            )
        if options.end_date < options.start_date:
            raise InvalidExportOptions(
                message="Invalid export option",
                detail="end_date is before start_date",
            )

    def sheet_name(self, record: RestraintRecord) -> str:
        resident = record.resident
        return f"{resident.bed_number}_{resident.full_name}"

    def apply(self, ws, template, record: RestraintRecord, options) -> None:
        resident = record.resident
        start = options.start_date

        write(ws, TITLE_CELL, period_caption(start, options.end_date))
        write(ws, HEADER_CELLS["name"], resident.full_name)
        write(ws, HEADER_CELLS["bed_number"], resident.bed_number)
        write(ws, HEADER_CELLS["signature_month"], f"{start.year}年{start.month:02d}月          日")

        restraints = record.assessment.suggested_restraints
        for field_name, cells in RESTRAINT_CELLS.items():
            write_restraint(ws, cells, getattr(restraints, field_name))

    def filename(self, records, options, label=None) -> str:
        if len(records) == 1:
            resident = records[0].resident
            return single_record_filename(resident.bed_number, resident.full_name, self.form.label)
        period = f"{options.start_date.isoformat()}_{options.end_date.isoformat()}"
        return f"{self.form.label}({len(records)}名院友)_{period}.xlsx"
