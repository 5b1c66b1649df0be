"""Diaper-change record: one monthly sheet per resident."""

from __future__ import annotations

from app.core.records import DocumentType, ResidentRecord
from app.engine.errors import InvalidExportOptions
from app.mappers.base import FieldMapper
from app.mappers.common import write

HEADER_CELLS = {
    "name": "D3",
    "bed_number": "L3",
    "year_month": "AB3",
}


class DiaperChangeMapper(FieldMapper):
    doc_type = DocumentType.DIAPER_CHANGE
    record_type = ResidentRecord
    named_after_template = True

    def validate_options(self, options):
        if not options.year_month:
            raise InvalidExportOptions(
                message="Missing export option",
                detail="year_month is required for diaper-change records",
            )

    def sheet_name(self, record: ResidentRecord) -> str:
        resident = record.resident
        return f"{resident.bed_number}{resident.full_name}"

    def apply(self, ws, template, record: ResidentRecord, options) -> None:
        resident = record.resident
        write(ws, HEADER_CELLS["name"], resident.full_name)
        write(ws, HEADER_CELLS["bed_number"], resident.bed_number)
        write(ws, HEADER_CELLS["year_month"], options.year_month)

    def date_part(self, options) -> str | None:
        return options.year_month
