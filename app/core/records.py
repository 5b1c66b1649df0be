"""Domain records handed to the engine by the resident administration system.

Records are read-only inputs: the engine never mutates them. Each document type
consumes one tagged variant, discriminated by ``kind``. Field aliases accept the
Chinese keys used by the resident database so exported rows can be posted as-is.
"""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class DocumentType(str, Enum):
    """Supported clinical form types."""

    DIAPER_CHANGE = "diaper-change"
    PERSONAL_HYGIENE = "personal-hygiene"
    RESTRAINT_CONSENT = "restraint-consent"
    RESTRAINT_OBSERVATION = "restraint-observation"
    ANNUAL_CHECKUP = "annual-checkup"
    PERSONAL_MEDICATION_LIST = "personal-medication-list"
    BED_LAYOUT = "bed-layout"


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class Resident(_Record):
    """A resident as stored by the administration system."""

    bed_number: str = Field(default="", alias="床號")
    surname_zh: str = Field(default="", alias="中文姓氏")
    given_name_zh: str = Field(default="", alias="中文名字")
    surname_en: str | None = Field(default=None, alias="英文姓氏")
    given_name_en: str | None = Field(default=None, alias="英文名字")
    name_en: str | None = Field(default=None, alias="英文姓名")
    sex: str | None = Field(default=None, alias="性別")
    birth_date: date | None = Field(default=None, alias="出生日期")
    id_number: str | None = Field(default=None, alias="身份證號碼")
    drug_allergies: tuple[str, ...] = Field(default=(), alias="藥物敏感")
    adverse_reactions: tuple[str, ...] = Field(default=(), alias="不良藥物反應")
    care_level: str | None = Field(
        default=None,
        alias="護理等級",
        description="Care level, e.g. '全護理' or '半護理'",
    )

    @property
    def full_name(self) -> str:
        return f"{self.surname_zh}{self.given_name_zh}"

    @property
    def english_name(self) -> str:
        if self.surname_en and self.given_name_en:
            return f"{self.surname_en} {self.given_name_en}"
        return self.name_en or ""


# Restraint assessments

class RiskFactors(_Record):
    """Risk factors ticked on a restraint assessment."""

    abnormal_behaviour: bool = Field(default=False, alias="精神及/或行為異常的情況")
    emotional_or_confused: bool = Field(default=False, alias="情緒問題/神志昏亂")
    wandering: bool = Field(default=False, alias="遊走")
    self_harm: bool = Field(default=False, alias="傷害自己的行為，請註明：")
    self_harm_note: str | None = Field(default=None, alias="傷害自己的行為說明")
    harming_others: bool = Field(default=False, alias="傷害/騷擾他人的行為，請註明：")
    harming_others_note: str | None = Field(default=None, alias="傷害/騷擾他人的行為說明")
    poor_posture: bool = Field(default=False, alias="未能保持正確坐姿")
    weak_back_muscles: bool = Field(default=False, alias="背部及腰肢肌肉無力")
    paralysis: bool = Field(default=False, alias="癱瘓")
    joint_degeneration: bool = Field(default=False, alias="關節退化")
    other_posture: bool = Field(default=False, alias="其他，請註明：")
    other_posture_note: str | None = Field(default=None, alias="其他未能保持正確坐姿說明")
    fall_risk: bool = Field(default=False, alias="有跌倒風險")
    unsteady_gait: bool = Field(default=False, alias="步履失平衡")
    fell_in_hospital: bool = Field(default=False, alias="住院期間曾經跌倒")
    sensory_decline: bool = Field(default=False, alias="視/聽力衰退")
    medication_effects: bool = Field(default=False, alias="受藥物影響")
    other_fall_risk: bool = Field(default=False, alias="其他跌倒的風險，請註明：")
    other_fall_risk_note: str | None = Field(default=None, alias="其他跌倒的風險說明")
    removed_devices: bool = Field(default=False, alias="曾除去治療用之醫療器材及／或維護身體的用品")
    feeding_tube: bool = Field(default=False, alias="餵食管")
    oxygen_tube: bool = Field(default=False, alias="氧氣喉管或面罩")
    diaper_or_clothes: bool = Field(default=False, alias="尿片或衣服")
    stoma_device: bool = Field(default=False, alias="其他造口護理裝置")
    urinary_catheter: bool = Field(default=False, alias="導尿管")
    other_device: bool = Field(default=False, alias="其他醫療器材，請註明：")
    other_device_note: str | None = Field(default=None, alias="其他醫療器材說明")


class Alternatives(_Record):
    """Less restrictive alternatives tried before restraint."""

    medical_treatment: bool = Field(default=False, alias="延醫診治，找出影響情緒或神志昏亂的原因並處理")
    adjust_medication: bool = Field(default=False, alias="與註冊醫生/註冊中醫/表列中醫商討療程或調校藥物")
    allied_health: bool = Field(default=False, alias="尋求物理治療師/職業治療師/臨床心理學家/社工的介入")
    improve_furniture: bool = Field(default=False, alias="改善家具：使用更合適的座椅、座墊或其他配件")
    improve_environment: bool = Field(default=False, alias="改善環境：令住客對環境感安全、舒適及熟悉")
    leisure_activities: bool = Field(default=False, alias="提供消閒及分散注意力的活動")
    build_rapport: bool = Field(default=False, alias="多與住客傾談，建立融洽互信的關係")
    regular_rounds: bool = Field(default=False, alias="安老院員工定期觀察及巡視")
    adjust_care_routine: bool = Field(default=False, alias="調節日常護理程序以配合住客的特殊需要")
    family_visits: bool = Field(default=False, alias="請家人/親友探望協助")
    other: bool = Field(default=False, alias="其他，請註明：")
    other_note: str | None = Field(default=None, alias="其他說明")


class RestraintUsage(_Record):
    """How and when one restraint item is used."""

    checked: bool = False
    usage_conditions: str | None = Field(default=None, alias="usageConditions")
    day_time: bool = Field(default=False, alias="dayTime")
    day_start_time: str | None = Field(default=None, alias="dayStartTime")
    day_end_time: str | None = Field(default=None, alias="dayEndTime")
    night_time: bool = Field(default=False, alias="nightTime")
    night_start_time: str | None = Field(default=None, alias="nightStartTime")
    night_end_time: str | None = Field(default=None, alias="nightEndTime")
    all_day: bool = Field(default=False, alias="allDay")
    other_time: str | None = Field(default=None, alias="otherTime")


class SuggestedRestraints(_Record):
    """Restraint items proposed on the assessment, one entry per item."""

    restraint_vest: RestraintUsage = Field(default_factory=RestraintUsage, alias="約束衣")
    restraint_belt: RestraintUsage = Field(default_factory=RestraintUsage, alias="約束腰帶")
    wrist_strap: RestraintUsage = Field(default_factory=RestraintUsage, alias="手腕帶")
    mittens: RestraintUsage = Field(default_factory=RestraintUsage, alias="約束手套/連指手套")
    anti_slip_pants: RestraintUsage = Field(default_factory=RestraintUsage, alias="防滑褲/防滑褲帶")
    table_board: RestraintUsage = Field(default_factory=RestraintUsage, alias="枱板")
    other: RestraintUsage = Field(default_factory=RestraintUsage, alias="其他：")


class RestraintAssessment(_Record):
    doctor_signature_date: date | None = None
    next_due_date: date | None = None
    risk_factors: RiskFactors = Field(default_factory=RiskFactors)
    alternatives: Alternatives = Field(default_factory=Alternatives)
    suggested_restraints: SuggestedRestraints = Field(default_factory=SuggestedRestraints)


# Medication

class Prescription(_Record):
    medication_name: str = ""
    status: str = "active"
    dosage_form: str | None = None
    dosage_amount: str | None = None
    dosage_unit: str | None = None
    special_dosage_instruction: str | None = None
    frequency_type: str | None = None
    frequency_value: int | None = None
    specific_weekdays: tuple[int, ...] = ()
    is_odd_even_day: str | None = None
    medication_time_slots: tuple[str, ...] = ()
    administration_route: str | None = None
    is_prn: bool = False
    prescription_date: date | None = None
    start_date: date | None = None
    end_date: date | None = None
    medication_source: str | None = None
    notes: str | None = None
    special_instructions: str | None = None
    created_by: str | None = None
    last_modified_by: str | None = None


# Annual health checkup

class AnnualCheckup(_Record):
    last_doctor_signature_date: date | None = None
    next_due_date: date | None = None

    has_serious_illness: bool = False
    serious_illness_details: str | None = None
    has_allergy: bool = False
    allergy_details: str | None = None
    has_infectious_disease: bool = False
    infectious_disease_details: str | None = None
    needs_followup_treatment: bool = False
    followup_treatment_details: str | None = None
    has_swallowing_difficulty: bool = False
    swallowing_difficulty_details: str | None = None
    has_special_diet: bool = False
    special_diet_details: str | None = None
    mental_illness_record: str | None = None

    blood_pressure_systolic: int | None = None
    blood_pressure_diastolic: int | None = None
    pulse: int | None = None
    body_weight: float | None = None

    cardiovascular_notes: str | None = None
    respiratory_notes: str | None = None
    central_nervous_notes: str | None = None
    musculo_skeletal_notes: str | None = None
    abdomen_urogenital_notes: str | None = None
    lymphatic_notes: str | None = None
    thyroid_notes: str | None = None
    skin_condition_notes: str | None = None
    foot_notes: str | None = None
    eye_ear_nose_throat_notes: str | None = None
    oral_dental_notes: str | None = None
    physical_exam_others: str | None = None

    vision_assessment: str | None = None
    hearing_assessment: str | None = None
    speech_assessment: str | None = None
    mental_state_assessment: str | None = None
    mobility_assessment: str | None = None
    continence_assessment: str | None = None
    adl_assessment: str | None = None
    recommendation: str | None = None


# Beds and stations

class BedOccupancy(_Record):
    bed_number: str
    resident: Resident | None = None


# Tagged variants

class ResidentRecord(_Record):
    kind: Literal["resident"] = "resident"
    resident: Resident


class RestraintRecord(_Record):
    kind: Literal["restraint"] = "restraint"
    resident: Resident
    assessment: RestraintAssessment = Field(default_factory=RestraintAssessment)


class AnnualCheckupRecord(_Record):
    kind: Literal["annual-checkup"] = "annual-checkup"
    resident: Resident
    checkup: AnnualCheckup = Field(default_factory=AnnualCheckup)
    prescriptions: tuple[Prescription, ...] = ()


class MedicationListRecord(_Record):
    kind: Literal["medication-list"] = "medication-list"
    resident: Resident
    prescriptions: tuple[Prescription, ...] = ()


class StationRecord(_Record):
    kind: Literal["station"] = "station"
    station: str
    beds: tuple[BedOccupancy, ...] = ()


DomainRecord = Annotated[
    Union[ResidentRecord, RestraintRecord, AnnualCheckupRecord, MedicationListRecord, StationRecord],
    Field(discriminator="kind"),
]
