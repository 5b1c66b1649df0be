"""Tests for the personal-hygiene field mapper (app/mappers/personal_hygiene.py)."""

import pytest

from app.core.models import ExportOptions
from app.core.records import DocumentType, ResidentRecord
from app.engine.errors import InvalidExportOptions
from app.engine.extractor import extract
from app.engine.synthesizer import DocumentSynthesizer
from app.mappers.personal_hygiene import PersonalHygieneMapper
from tests.builders import resident, simple_workbook, workbook_bytes


@pytest.fixture()
def descriptor():
    wb = simple_workbook("個人衛生記錄", {"A4": "姓名", "H4": "年齡", "M4": "性別", "Q4": "床號"})
    return extract(workbook_bytes(wb), DocumentType.PERSONAL_HYGIENE)


class TestPersonalHygieneMapper:
    """Tests for PersonalHygieneMapper."""

    def test_months_and_identity(self, descriptor, options):
        """Test that both month captions and the resident header are written."""
        wb = DocumentSynthesizer().synthesize(
            descriptor, [ResidentRecord(resident=resident())], PersonalHygieneMapper(), options
        )
        ws = wb.worksheets[0]

        assert (ws["A2"].value, ws["A3"].value) == ("2024年", "01月")
        assert (ws["T2"].value, ws["T3"].value) == ("2024年", "02月")
        assert ws["D4"].value == "陳大文"
        assert ws["I4"].value == "83歲"
        assert ws["N4"].value == "男"
        assert ws["R4"].value == "C01"

    def test_column_break_at_19(self, descriptor, options):
        """Test the canonical column break between the two months."""
        wb = DocumentSynthesizer().synthesize(
            descriptor, [ResidentRecord(resident=resident())], PersonalHygieneMapper(), options
        )
        ws = wb.worksheets[0]

        assert [brk.id for brk in ws.col_breaks.brk] == [19]
        assert [brk.id for brk in ws.row_breaks.brk] == []

    def test_both_months_required(self):
        """Test that a missing second month is rejected."""
        with pytest.raises(InvalidExportOptions) as exc_info:
            PersonalHygieneMapper().validate_options(ExportOptions(first_month="2024年01月"))

        assert "second_month" in exc_info.value.detail

    def test_filename_carries_both_months(self, options):
        """Test the date segment of the filename."""
        name = PersonalHygieneMapper().filename([ResidentRecord(resident=resident())], options)

        assert name == "C01_陳大文_個人衛生記錄_2024年01月_2024年02月.xlsx"
