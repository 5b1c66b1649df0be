"""Annual health checkup report (安老院住客體格檢驗報告書), a five-sheet form.

Sheets: 1 particulars and medical history, 2 physical examination,
3 functional assessment, 4 recommendation and signature, 5 medication summary.
"""

from __future__ import annotations

import logging

from app.core.records import AnnualCheckupRecord, DocumentType
from app.engine.marks import fan_out, strike_fragment
from app.mappers.base import FieldMapper
from app.mappers.common import add_months, age_label, tw_date, write
from app.mappers.personal_medication_list import (
    active_prescriptions,
    dosage_text,
    frequency_description,
    sort_prescriptions,
)

logger = logging.getLogger(__name__)

YES_NO_LABEL = "有 / 無"
SEX_LABEL = "男 / 女"
NEXT_DUE_MONTHS = 12

VISION_OPTIONS = ("正常", "不能閱讀報紙字體", "不能觀看電視", "只能見光影")
HEARING_OPTIONS = ("正常", "難以正常聲浪溝通", "難以話語的情況下也難以溝通", "大聲話語情況下也不能溝通")
SPEECH_OPTIONS = ("能正常表達", "需慢慢表達", "需靠提示表達", "不能以語言表達")
MENTAL_STATE_OPTIONS = (
    "正常警覺穩定",
    "輕度受困擾",
    "中度受困擾",
    "嚴重受困擾",
    "早期認知障礙症",
    "中期認知障礙症",
    "後期認知障礙症",
)
MOBILITY_OPTIONS = ("獨立行動", "可自行用助行器或輪椅移動", "經常需要別人幫助", "長期臥床")
CONTINENCE_OPTIONS = ("正常", "偶然大小便失禁", "頻繁大小便失禁", "大小便完全失禁")
ADL_OPTIONS = ("完全獨立", "偶爾需要協助", "經常需要協助", "完全需要協助")
RECOMMENDATION_OPTIONS = ("低度照顧安老院", "中度照顧安老院", "高度照顧安老院", "護養院")

# Sheet 1
PARTICULAR_CELLS = {
    "name": "C4",
    "english_name": "C5",
    "id_number": "H4",
    "birth_date": "H5",
    "bed_number": "L4",
    "age": "L5",
    "sex": "E5",
}

# flag field -> (有/無 label cell, details field, details cell)
HISTORY_CELLS = {
    "has_serious_illness": ("H8", "serious_illness_details", "C9"),
    "has_allergy": ("H10", "allergy_details", "C11"),
    "has_infectious_disease": ("H12", "infectious_disease_details", "C13"),
    "needs_followup_treatment": ("H14", "followup_treatment_details", "C15"),
    "has_swallowing_difficulty": ("H16", "swallowing_difficulty_details", "C17"),
    "has_special_diet": ("H18", "special_diet_details", "C19"),
}
MENTAL_ILLNESS_CELL = "C21"

# Sheet 2
VITALS_CELLS = {
    "blood_pressure": "C4",
    "pulse": "G4",
    "body_weight": "J4",
}
EXAMINATION_CELLS = {
    "cardiovascular_notes": "C6",
    "respiratory_notes": "C7",
    "central_nervous_notes": "C8",
    "musculo_skeletal_notes": "C9",
    "abdomen_urogenital_notes": "C10",
    "lymphatic_notes": "C11",
    "thyroid_notes": "C12",
    "skin_condition_notes": "C13",
    "foot_notes": "C14",
    "eye_ear_nose_throat_notes": "C15",
    "oral_dental_notes": "C16",
    "physical_exam_others": "C17",
}

# Sheet 3: assessment field -> (options, glyph cells)
ASSESSMENT_CELLS = {
    "vision_assessment": (VISION_OPTIONS, ("B5", "E5", "H5", "K5")),
    "hearing_assessment": (HEARING_OPTIONS, ("B7", "E7", "H7", "K7")),
    "speech_assessment": (SPEECH_OPTIONS, ("B9", "E9", "H9", "K9")),
    "mental_state_assessment": (MENTAL_STATE_OPTIONS, ("B11", "E11", "H11", "K11", "B12", "E12", "H12")),
    "mobility_assessment": (MOBILITY_OPTIONS, ("B14", "E14", "H14", "K14")),
    "continence_assessment": (CONTINENCE_OPTIONS, ("B16", "E16", "H16", "K16")),
    "adl_assessment": (ADL_OPTIONS, ("B18", "E18", "H18", "K18")),
}

# Sheet 4
RECOMMENDATION_SHEET_CELLS = {
    "name": "D3",
    "bed_number": "J3",
    "signature_date": "D12",
    "next_due": "D13",
}
RECOMMENDATION_CELLS = ("B5", "B6", "B7", "B8")

# Sheet 5
MEDICATION_SHEET_CELLS = {
    "name": "C3",
    "bed_number": "J3",
}
MEDICATION_FIRST_ROW = 6
MEDICATION_MAX_ROWS = 20
MEDICATION_COLUMNS = {
    "index": "A",
    "medication": "B",
    "dosage": "E",
    "frequency": "H",
    "route": "J",
}


def label_text(template, address: str, default: str) -> str:
    value = template.value_at(address)
    return value if isinstance(value, str) and value else default


class AnnualCheckupMapper(FieldMapper):
    doc_type = DocumentType.ANNUAL_CHECKUP
    record_type = AnnualCheckupRecord

    def sheet_name(self, record: AnnualCheckupRecord) -> str:
        resident = record.resident
        return f"{resident.bed_number}{resident.full_name}"

    def sheet_titles(self, record: AnnualCheckupRecord, descriptor) -> list[str]:
        base = self.sheet_name(record)
        return [f"{base}_{sheet.index + 1}" for sheet in descriptor.sheets]

    def apply(self, ws, template, record: AnnualCheckupRecord, options) -> None:
        writers = (
            self._write_particulars,
            self._write_examination,
            self._write_assessment,
            self._write_recommendation,
            self._write_medications,
        )
        writers[template.index](ws, template, record, options)

    def _write_particulars(self, ws, template, record: AnnualCheckupRecord, options) -> None:
        resident = record.resident
        checkup = record.checkup
        cells = PARTICULAR_CELLS

        write(ws, cells["name"], resident.full_name)
        write(ws, cells["english_name"], resident.english_name)
        write(ws, cells["id_number"], resident.id_number or "")
        write(ws, cells["birth_date"], tw_date(resident.birth_date))
        write(ws, cells["bed_number"], resident.bed_number)
        write(ws, cells["age"], age_label(resident.birth_date, options.today))

        sex_label = label_text(template, cells["sex"], SEX_LABEL)
        unselected = {"男": "女", "女": "男"}.get(resident.sex or "", "")
        write(ws, cells["sex"], strike_fragment(sex_label, unselected))

        for flag, (label_cell, details_field, details_cell) in HISTORY_CELLS.items():
            label = label_text(template, label_cell, YES_NO_LABEL)
            write(ws, label_cell, strike_fragment(label, "無" if getattr(checkup, flag) else "有"))
            details = getattr(checkup, details_field)
            if details:
                write(ws, details_cell, details)

        if checkup.mental_illness_record:
            write(ws, MENTAL_ILLNESS_CELL, checkup.mental_illness_record)

    def _write_examination(self, ws, template, record: AnnualCheckupRecord, options) -> None:
        checkup = record.checkup
        if checkup.blood_pressure_systolic is not None and checkup.blood_pressure_diastolic is not None:
            write(
                ws,
                VITALS_CELLS["blood_pressure"],
                f"{checkup.blood_pressure_systolic}/{checkup.blood_pressure_diastolic} mmHg",
            )
        if checkup.pulse is not None:
            write(ws, VITALS_CELLS["pulse"], f"{checkup.pulse} /min")
        if checkup.body_weight is not None:
            write(ws, VITALS_CELLS["body_weight"], f"{checkup.body_weight:g} kg")

        for field_name, address in EXAMINATION_CELLS.items():
            notes = getattr(checkup, field_name)
            if notes:
                write(ws, address, notes)

    def _write_assessment(self, ws, template, record: AnnualCheckupRecord, options) -> None:
        checkup = record.checkup
        for field_name, (choices, cells) in ASSESSMENT_CELLS.items():
            for address, glyph in fan_out(choices, cells, getattr(checkup, field_name)).items():
                write(ws, address, glyph)

    def _write_recommendation(self, ws, template, record: AnnualCheckupRecord, options) -> None:
        resident = record.resident
        checkup = record.checkup
        cells = RECOMMENDATION_SHEET_CELLS

        write(ws, cells["name"], resident.full_name)
        write(ws, cells["bed_number"], resident.bed_number)
        for address, glyph in fan_out(RECOMMENDATION_OPTIONS, RECOMMENDATION_CELLS, checkup.recommendation).items():
            write(ws, address, glyph)

        signed = checkup.last_doctor_signature_date
        next_due = checkup.next_due_date
        if next_due is None and signed is not None:
            next_due = add_months(signed, NEXT_DUE_MONTHS)
        write(ws, cells["signature_date"], tw_date(signed))
        write(ws, cells["next_due"], tw_date(next_due))

    def _write_medications(self, ws, template, record: AnnualCheckupRecord, options) -> None:
        resident = record.resident
        write(ws, MEDICATION_SHEET_CELLS["name"], resident.full_name)
        write(ws, MEDICATION_SHEET_CELLS["bed_number"], resident.bed_number)

        items = sort_prescriptions(active_prescriptions(record.prescriptions), options.sort_by)
        if len(items) > MEDICATION_MAX_ROWS:
            logger.warning(
                "Medication summary for bed=%s truncated to %d of %d items",
                resident.bed_number,
                MEDICATION_MAX_ROWS,
                len(items),
            )
        columns = MEDICATION_COLUMNS
        for offset, prescription in enumerate(items[:MEDICATION_MAX_ROWS]):
            row = MEDICATION_FIRST_ROW + offset
            write(ws, f"{columns['index']}{row}", f"{offset + 1}.")
            write(ws, f"{columns['medication']}{row}", prescription.medication_name)
            write(ws, f"{columns['dosage']}{row}", dosage_text(prescription))
            write(ws, f"{columns['frequency']}{row}", frequency_description(prescription))
            write(ws, f"{columns['route']}{row}", prescription.administration_route or "")
