"""Personal-hygiene record covering two consecutive months side by side."""

from __future__ import annotations

from app.core.records import DocumentType, ResidentRecord
from app.engine.errors import InvalidExportOptions
from app.mappers.base import FieldMapper
from app.mappers.common import age_label, split_year_month, write

# (year cell, month cell) for each half of the sheet
MONTH_CELLS = {
    "first_month": ("A2", "A3"),
    "second_month": ("T2", "T3"),
}

HEADER_CELLS = {
    "name": "D4",
    "age": "I4",
    "sex": "N4",
    "bed_number": "R4",
}


class PersonalHygieneMapper(FieldMapper):
    doc_type = DocumentType.PERSONAL_HYGIENE
    record_type = ResidentRecord
    named_after_template = True

    def validate_options(self, options):
        missing = [name for name in MONTH_CELLS if not getattr(options, name)]
        if missing:
            raise InvalidExportOptions(
                message="Missing export option",
                detail=f"{', '.join(missing)} required for personal-hygiene records",
            )

    def sheet_name(self, record: ResidentRecord) -> str:
        resident = record.resident
        return f"{resident.bed_number}{resident.full_name}"

    def apply(self, ws, template, record: ResidentRecord, options) -> None:
        for option_name, (year_cell, month_cell) in MONTH_CELLS.items():
            year_text, month_text = split_year_month(getattr(options, option_name))
            write(ws, year_cell, year_text)
            write(ws, month_cell, month_text)

        resident = record.resident
        write(ws, HEADER_CELLS["name"], resident.full_name)
        write(ws, HEADER_CELLS["age"], age_label(resident.birth_date, options.today))
        write(ws, HEADER_CELLS["sex"], resident.sex or "")
        write(ws, HEADER_CELLS["bed_number"], resident.bed_number)

    def date_part(self, options) -> str | None:
        return f"{options.first_month}_{options.second_month}"
