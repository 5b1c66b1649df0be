"""Restraint consent form (約束物品同意書)."""

from __future__ import annotations

from app.core.records import DocumentType, RestraintRecord
from app.engine.marks import checkbox
from app.mappers.base import FieldMapper
from app.mappers.common import add_months, age_on, tw_date, write
from app.mappers.restraints import LIE, SIT, SIT_AND_LIE, SIT_OR_WHEELCHAIR, RestraintCells, write_restraint

NAME_CELLS = ("F4", "F80", "O82", "I91")

HEADER_CELLS = {
    "bed_number": "F5",
    "sex": "N4",
    "age": "O4",
    "id_number": "U4",
    "last_assessment": "P5",
    "next_due": "U5",
}

NEXT_DUE_MONTHS = 6

RISK_FACTOR_CELLS = {
    "abnormal_behaviour": "C11",
    "emotional_or_confused": "D12",
    "wandering": "I12",
    "self_harm": "K12",
    "harming_others": "D13",
    "poor_posture": "C14",
    "weak_back_muscles": "D15",
    "paralysis": "I15",
    "joint_degeneration": "K15",
    "other_posture": "N15",
    "fall_risk": "C16",
    "unsteady_gait": "D17",
    "fell_in_hospital": "H17",
    "sensory_decline": "M17",
    "medication_effects": "D18",
    "other_fall_risk": "H18",
    "removed_devices": "C19",
    "feeding_tube": "D20",
    "oxygen_tube": "G20",
    "diaper_or_clothes": "K20",
    "stoma_device": "O20",
    "urinary_catheter": "D21",
    "other_device": "G21",
}

RISK_FACTOR_NOTE_CELLS = {
    "self_harm_note": "R12",
    "harming_others_note": "L13",
    "other_posture_note": "S15",
    "other_fall_risk_note": "O18",
    "other_device_note": "K21",
}

# Each alternative is ticked in both the assessment and the review column.
ALTERNATIVE_CELLS = {
    "medical_treatment": ("C27", "T27"),
    "adjust_medication": ("C28", "T28"),
    "allied_health": ("C29", "T29"),
    "improve_furniture": ("C30", "T30"),
    "improve_environment": ("C31", "T31"),
    "leisure_activities": ("C32", "T32"),
    "build_rapport": ("C33", "T33"),
    "regular_rounds": ("C34", "T34"),
    "adjust_care_routine": ("C35", "T35"),
    "family_visits": ("C36", "T36"),
    "other": ("C37", "T37"),
}

RESTRAINT_CELLS = {
    "restraint_vest": RestraintCells(
        checked="C42", usage={SIT: "F42", LIE: "I42", SIT_AND_LIE: "F43"},
        day="L42", day_start="O42", day_end="Q42",
        night="L43", night_start="O43", night_end="Q43",
        all_day="S42", other="S43", other_time="U43",
    ),
    "restraint_belt": RestraintCells(
        checked="C45", usage={SIT: "F45", LIE: "I45", SIT_AND_LIE: "F46"},
        day="L45", day_start="O45", day_end="Q45",
        night="L46", night_start="O46", night_end="Q46",
        all_day="S45", other="S46", other_time="U46",
    ),
    "wrist_strap": RestraintCells(
        checked="C53", usage={SIT: "F53", LIE: "I53", SIT_AND_LIE: "F54"},
        day="L53", day_start="O53", day_end="Q53",
        night="L54", night_start="O54", night_end="Q54",
        all_day="S53", other="S54", other_time="U54",
    ),
    "mittens": RestraintCells(
        checked="C56", usage={SIT: "F56", LIE: "I56", SIT_AND_LIE: "F57"},
        day="L56", day_start="O56", day_end="Q56",
        night="L57", night_start="O57", night_end="Q57",
        all_day="S56", other="S57", other_time="U57",
    ),
    "anti_slip_pants": RestraintCells(
        checked="C59", usage={SIT: "F59", LIE: "I59", SIT_AND_LIE: "F60"},
        day="L59", day_start="O59", day_end="Q59",
        night="L60", night_start="O60", night_end="Q60",
        all_day="S59", other="S60", other_time="U60",
    ),
    "table_board": RestraintCells(
        checked="C62", usage={SIT_OR_WHEELCHAIR: "F62"},
        day="L62", day_start="O62", day_end="Q62",
        night="L63", night_start="O63", night_end="Q63",
        all_day="S62", other="S63", other_time="U63",
    ),
    "other": RestraintCells(
        checked="C65", usage={SIT: "F65", LIE: "I65", SIT_AND_LIE: "F66"},
        day="L65", day_start="O65", day_end="Q65",
        night="L66", night_start="O66", night_end="Q66",
        all_day="S65", other="S66", other_time="U66",
    ),
}


class RestraintConsentMapper(FieldMapper):
    doc_type = DocumentType.RESTRAINT_CONSENT
    record_type = RestraintRecord

    def sheet_name(self, record: RestraintRecord) -> str:
        resident = record.resident
        return f"{resident.bed_number}_{resident.full_name}_{self.form.label}"

    def apply(self, ws, template, record: RestraintRecord, options) -> None:
        resident = record.resident
        assessment = record.assessment

        for address in NAME_CELLS:
            write(ws, address, resident.full_name)
        write(ws, HEADER_CELLS["bed_number"], resident.bed_number)

        age = age_on(resident.birth_date, options.today)
        if resident.sex and age is not None:
            write(ws, HEADER_CELLS["sex"], f"{resident.sex}/")
            write(ws, HEADER_CELLS["age"], f"{age}歲")
        write(ws, HEADER_CELLS["id_number"], resident.id_number or "")

        signed = assessment.doctor_signature_date
        write(ws, HEADER_CELLS["last_assessment"], tw_date(signed) if signed else "首次")
        next_due = assessment.next_due_date
        if next_due is None and signed is not None:
            next_due = add_months(signed, NEXT_DUE_MONTHS)
        if next_due is not None:
            write(ws, HEADER_CELLS["next_due"], tw_date(next_due))

        risk_factors = assessment.risk_factors
        for field_name, address in RISK_FACTOR_CELLS.items():
            write(ws, address, checkbox(getattr(risk_factors, field_name)))
        for field_name, address in RISK_FACTOR_NOTE_CELLS.items():
            note = getattr(risk_factors, field_name)
            if note:
                write(ws, address, note)

        alternatives = assessment.alternatives
        for field_name, addresses in ALTERNATIVE_CELLS.items():
            glyph = checkbox(getattr(alternatives, field_name))
            if field_name == "other" and alternatives.other_note:
                glyph = f"{glyph} {alternatives.other_note}"
            for address in addresses:
                write(ws, address, glyph)

        restraints = assessment.suggested_restraints
        for field_name, cells in RESTRAINT_CELLS.items():
            write_restraint(ws, cells, getattr(restraints, field_name))
