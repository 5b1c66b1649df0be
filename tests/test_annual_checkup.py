"""Tests for the annual checkup field mapper (app/mappers/annual_checkup.py)."""

from datetime import date

import pytest
from openpyxl.cell.rich_text import CellRichText

from app.core.records import AnnualCheckup, AnnualCheckupRecord, DocumentType
from app.engine.extractor import extract
from app.engine.marks import CHECKED, UNCHECKED
from app.engine.synthesizer import DocumentSynthesizer
from app.mappers.annual_checkup import AnnualCheckupMapper
from tests.builders import annual_checkup_workbook, prescription, resident, workbook_bytes


@pytest.fixture()
def descriptor():
    return extract(workbook_bytes(annual_checkup_workbook()), DocumentType.ANNUAL_CHECKUP)


@pytest.fixture()
def record():
    return AnnualCheckupRecord(
        resident=resident(),
        checkup=AnnualCheckup(
            last_doctor_signature_date=date(2024, 1, 31),
            has_serious_illness=True,
            serious_illness_details="高血壓",
            has_allergy=False,
            blood_pressure_systolic=130,
            blood_pressure_diastolic=80,
            pulse=72,
            body_weight=55.0,
            cardiovascular_notes="正常",
            vision_assessment="不能觀看電視",
            mental_state_assessment="早期認知障礙症",
            recommendation="護養院",
        ),
        prescriptions=(
            prescription("Metformin", dosage_amount="500", dosage_unit="mg", administration_route="口服"),
            prescription("Old", status="inactive"),
        ),
    )


@pytest.fixture()
def sheets(descriptor, record, options):
    wb = DocumentSynthesizer().synthesize(descriptor, [record], AnnualCheckupMapper(), options)
    return wb.worksheets


def _struck_text(value):
    return [block.text for block in value if not isinstance(block, str) and block.font.strike]


class TestAnnualCheckupLayout:
    """Tests for the five-sheet structure."""

    def test_five_sheets_per_resident(self, sheets):
        """Test that each resident gets the five form sheets in order."""
        assert [ws.title for ws in sheets] == [f"C01陳大文_{n}" for n in range(1, 6)]

    def test_two_residents_ten_sheets(self, descriptor, record, options):
        """Test that sheet groups repeat per record."""
        other = record.model_copy(update={"resident": resident(bed_number="C02", given_name_zh="小文")})

        wb = DocumentSynthesizer().synthesize(descriptor, [record, other], AnnualCheckupMapper(), options)

        assert len(wb.worksheets) == 10
        assert wb.worksheets[5].title == "C02陳小文_1"


class TestParticulars:
    """Tests for sheet 1."""

    def test_identity(self, sheets):
        """Test the resident particulars."""
        ws = sheets[0]

        assert ws["C4"].value == "陳大文"
        assert ws["C5"].value == "CHAN Tai Man"
        assert ws["H4"].value == "A123456(7)"
        assert ws["H5"].value == "1940/5/1"
        assert ws["L4"].value == "C01"
        assert ws["L5"].value == "83歲"

    def test_sex_strikes_other_option(self, sheets):
        """Test that the unselected sex is struck through."""
        value = sheets[0]["E5"].value

        assert isinstance(value, CellRichText)
        assert str(value) == "男 / 女"
        assert _struck_text(value) == ["女"]

    def test_history_flags_strike(self, sheets):
        """Test that yes strikes 無 and no strikes 有."""
        assert _struck_text(sheets[0]["H8"].value) == ["無"]
        assert _struck_text(sheets[0]["H10"].value) == ["有"]
        assert sheets[0]["C9"].value == "高血壓"

    def test_unknown_sex_leaves_plain_label(self, descriptor, record, options):
        """Test that no strike is applied when sex is unknown."""
        unknown = record.model_copy(update={"resident": resident(sex=None)})

        wb = DocumentSynthesizer().synthesize(descriptor, [unknown], AnnualCheckupMapper(), options)

        assert wb.worksheets[0]["E5"].value == "男 / 女"


class TestExaminationAndAssessment:
    """Tests for sheets 2 and 3."""

    def test_vitals(self, sheets):
        """Test the vital sign captions."""
        ws = sheets[1]

        assert ws["C4"].value == "130/80 mmHg"
        assert ws["G4"].value == "72 /min"
        assert ws["J4"].value == "55 kg"
        assert ws["C6"].value == "正常"

    def test_assessment_fan_out(self, sheets):
        """Test that one option per assessment row is ticked."""
        ws = sheets[2]

        assert [ws[a].value for a in ("B5", "E5", "H5", "K5")] == [UNCHECKED, UNCHECKED, CHECKED, UNCHECKED]
        assert ws["B12"].value == CHECKED
        assert ws["B11"].value == UNCHECKED
        assert {ws[a].value for a in ("B7", "E7", "H7", "K7")} == {UNCHECKED}


class TestRecommendationAndMedication:
    """Tests for sheets 4 and 5."""

    def test_recommendation_and_dates(self, sheets):
        """Test the recommendation tick and the 12-month next due date."""
        ws = sheets[3]

        assert ws["B8"].value == CHECKED
        assert ws["B5"].value == UNCHECKED
        assert ws["D12"].value == "2024/1/31"
        assert ws["D13"].value == "2025/1/31"

    def test_active_medications_listed(self, sheets):
        """Test that only active prescriptions appear on the summary."""
        ws = sheets[4]

        assert ws["C3"].value == "陳大文"
        assert ws["A6"].value == "1."
        assert ws["B6"].value == "Metformin"
        assert ws["E6"].value == "500mg"
        assert ws["H6"].value == "QD"
        assert ws["J6"].value == "口服"
        assert ws["A7"].value is None
