"""Personal medication list (個人藥物記錄).

Prescriptions are listed below a seven-row identity header. When a resident
has more items than fit on a page, the header block is copied to the top of
the next page block and the identity fields are stamped again.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import date

from openpyxl.styles import Font

from app.core.records import DocumentType, MedicationListRecord, Prescription, Resident
from app.engine.marks import bold_heading
from app.engine.synthesizer import copy_row_block
from app.mappers.base import FieldMapper
from app.mappers.common import shift_address, tw_date, write

logger = logging.getLogger(__name__)

FONT_NAME = "MingLiU"
ITEMS_PER_PAGE = 15
HEADER_ROWS = 7
ITEM_TEMPLATE_ROW = 8

# Addresses on the first page; later pages shift them by the page offset.
HEADER_CELLS = {
    "name": "B3",
    "english_name": "C3",
    "id_number": "F3",
    "bed_number": "I3",
    "allergies": "C4",
    "adverse_reactions": "C5",
}
UPDATE_DATE_CELLS = ("C6", "F6")

ITEM_COLUMNS = {
    "index": "A",
    "medication": "B",
    "prn": "C",
    "start_date": "D",
    "end_date": "E",
    "source": "F",
    "notes": "G",
    "modified_by": "I",
}

ABBREVIATIONS = {1: "QD", 2: "BD", 3: "TDS", 4: "QID"}
WEEKDAY_NAMES = {1: "週一", 2: "週二", 3: "週三", 4: "週四", 5: "週五", 6: "週六", 7: "週日"}


def frequency_description(prescription: Prescription) -> str:
    """Chinese frequency wording for a prescription."""
    kind = prescription.frequency_type
    value = prescription.frequency_value
    if kind == "every_x_days":
        return f"隔{value}日服"
    if kind == "every_x_months":
        return f"隔{value}月服"
    if kind == "weekly_days":
        days = "、".join(WEEKDAY_NAMES[d] for d in prescription.specific_weekdays if d in WEEKDAY_NAMES)
        return f"逢{days}服"
    if kind == "odd_even_days":
        return {"odd": "單日服", "even": "雙日服"}.get(prescription.is_odd_even_day or "", "單雙日服")
    if kind == "hourly":
        return f"每{value}小時服用"
    # daily and unspecified frequencies are described by time-slot count
    count = len(prescription.medication_time_slots)
    if count == 0:
        return ""
    return ABBREVIATIONS.get(count, f"{count}次/日")


def dosage_text(prescription: Prescription) -> str:
    if prescription.dosage_amount and prescription.dosage_unit:
        return f"{prescription.dosage_amount}{prescription.dosage_unit}"
    return prescription.special_dosage_instruction or ""


def medication_details(prescription: Prescription) -> list[str]:
    """Dosage form, dosage, frequency and route, skipping blanks."""
    details = [
        prescription.dosage_form or "",
        dosage_text(prescription),
        frequency_description(prescription),
        prescription.administration_route or "",
    ]
    return [d for d in details if d]


def active_prescriptions(prescriptions: Sequence[Prescription]) -> list[Prescription]:
    return [p for p in prescriptions if p.status == "active"]


def sort_prescriptions(prescriptions: Sequence[Prescription], sort_by: str) -> list[Prescription]:
    """Order prescriptions; dates sort newest first with undated items last."""
    items = list(prescriptions)
    if sort_by == "medication_name":
        items.sort(key=lambda p: p.medication_name or "")
    elif sort_by == "medication_source":
        items.sort(key=lambda p: p.medication_source or "")
    elif sort_by in ("prescription_date", "start_date"):
        items.sort(key=lambda p: getattr(p, sort_by) or date.min, reverse=True)
    return items


def page_start_row(page_index: int, header_rows: int = HEADER_ROWS, items_per_page: int = ITEMS_PER_PAGE) -> int:
    """First row of a page block: ``1 + page_index * (header_rows + items_per_page)``."""
    return 1 + page_index * (header_rows + items_per_page)


class PersonalMedicationListMapper(FieldMapper):
    doc_type = DocumentType.PERSONAL_MEDICATION_LIST
    record_type = MedicationListRecord
    named_after_template = True

    def __init__(self, items_per_page: int = ITEMS_PER_PAGE, header_rows: int = HEADER_ROWS):
        self.items_per_page = items_per_page
        self.header_rows = header_rows

    def eligible(self, record: MedicationListRecord) -> MedicationListRecord | None:
        active = active_prescriptions(record.prescriptions)
        if not active:
            logger.info("No active prescriptions for bed=%s", record.resident.bed_number)
            return None
        return record.model_copy(update={"prescriptions": tuple(active)})

    def sheet_name(self, record: MedicationListRecord) -> str:
        resident = record.resident
        return f"{resident.bed_number}{resident.full_name}"

    def apply(self, ws, template, record: MedicationListRecord, options) -> None:
        resident = record.resident
        items = sort_prescriptions(record.prescriptions, options.sort_by)

        self._stamp_identity(ws, template, resident, options.today, row_offset=0)
        for index, prescription in enumerate(items):
            page_index, slot = divmod(index, self.items_per_page)
            start = page_start_row(page_index, self.header_rows, self.items_per_page)
            if page_index > 0 and slot == 0:
                copy_row_block(ws, template, 1, self.header_rows, start, font_name=FONT_NAME)
                self._stamp_identity(ws, template, resident, options.today, row_offset=start - 1)

            row = start + self.header_rows + slot
            if row != ITEM_TEMPLATE_ROW:
                copy_row_block(ws, template, ITEM_TEMPLATE_ROW, ITEM_TEMPLATE_ROW, row)
            self._write_item(ws, row, index, prescription)

    def _stamp_identity(self, ws, template, resident: Resident, today: date, row_offset: int) -> None:
        values = {
            "name": resident.full_name,
            "english_name": resident.english_name,
            "id_number": resident.id_number or "",
            "bed_number": resident.bed_number,
            "allergies": "、".join(resident.drug_allergies) or "NKDA",
            "adverse_reactions": "、".join(resident.adverse_reactions) or "NKADR",
        }
        for field_name, address in HEADER_CELLS.items():
            write(ws, shift_address(address, row_offset), values[field_name], font_name=FONT_NAME)

        # The update date goes wherever the template reserves it.
        for address in UPDATE_DATE_CELLS:
            if template.value_at(address) is not None:
                write(ws, shift_address(address, row_offset), tw_date(today), font_name=FONT_NAME)
                break

    def _write_item(self, ws, row: int, index: int, prescription: Prescription) -> None:
        columns = ITEM_COLUMNS
        write(ws, f"{columns['index']}{row}", f"{index + 1}.", font_name=FONT_NAME)

        details = medication_details(prescription)
        if details:
            write(ws, f"{columns['medication']}{row}", bold_heading(prescription.medication_name, ", ".join(details), FONT_NAME))
        else:
            cell = write(ws, f"{columns['medication']}{row}", prescription.medication_name)
            cell.font = Font(name=FONT_NAME, bold=True)

        write(ws, f"{columns['prn']}{row}", "需要時" if prescription.is_prn else "", font_name=FONT_NAME)
        write(ws, f"{columns['start_date']}{row}", tw_date(prescription.start_date), font_name=FONT_NAME)
        write(ws, f"{columns['end_date']}{row}", tw_date(prescription.end_date), font_name=FONT_NAME)
        write(ws, f"{columns['source']}{row}", prescription.medication_source or "", font_name=FONT_NAME)
        notes = prescription.notes or prescription.special_instructions or ""
        write(ws, f"{columns['notes']}{row}", notes, font_name=FONT_NAME)
        modified_by = prescription.last_modified_by or prescription.created_by or ""
        write(ws, f"{columns['modified_by']}{row}", modified_by, font_name=FONT_NAME)

    def filename(self, records, options, label=None) -> str:
        label = label or self.form.label
        if len(records) == 1:
            resident = records[0].resident
            return f"{resident.bed_number}_{resident.full_name}_{label}.xlsx"
        return f"{label}_{len(records)}名院友.xlsx"
