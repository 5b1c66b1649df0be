"""Lookup of the field mapper for each document type."""

from __future__ import annotations

from app.core.records import DocumentType
from app.mappers.annual_checkup import AnnualCheckupMapper
from app.mappers.base import FieldMapper
from app.mappers.bed_layout import BedLayoutMapper
from app.mappers.diaper_change import DiaperChangeMapper
from app.mappers.personal_hygiene import PersonalHygieneMapper
from app.mappers.personal_medication_list import PersonalMedicationListMapper
from app.mappers.restraint_consent import RestraintConsentMapper
from app.mappers.restraint_observation import RestraintObservationMapper

MAPPERS: dict[DocumentType, FieldMapper] = {
    mapper.doc_type: mapper
    for mapper in (
        DiaperChangeMapper(),
        PersonalHygieneMapper(),
        RestraintConsentMapper(),
        RestraintObservationMapper(),
        AnnualCheckupMapper(),
        PersonalMedicationListMapper(),
        BedLayoutMapper(),
    )
}


def get_mapper(doc_type: DocumentType | str) -> FieldMapper:
    return MAPPERS[DocumentType(doc_type)]
