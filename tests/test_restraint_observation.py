"""Tests for the restraint observation field mapper (app/mappers/restraint_observation.py)."""

from datetime import date

import pytest

from app.core.models import ExportOptions
from app.core.records import (
    DocumentType,
    RestraintAssessment,
    RestraintRecord,
    RestraintUsage,
    SuggestedRestraints,
)
from app.engine.errors import InvalidExportOptions
from app.engine.extractor import extract
from app.engine.marks import CHECKED, UNCHECKED
from app.engine.synthesizer import DocumentSynthesizer
from app.mappers.restraint_observation import RestraintObservationMapper, period_caption
from app.mappers.restraints import SIT_OR_WHEELCHAIR
from tests.builders import resident, simple_workbook, workbook_bytes


@pytest.fixture()
def descriptor():
    wb = simple_workbook("觀察表", {"A1": "身體約束物品觀察記錄表", "H3": "姓名"})
    return extract(workbook_bytes(wb), DocumentType.RESTRAINT_OBSERVATION)


@pytest.fixture()
def record():
    return RestraintRecord(
        resident=resident(),
        assessment=RestraintAssessment(
            suggested_restraints=SuggestedRestraints(
                table_board=RestraintUsage(
                    checked=True,
                    usage_conditions=SIT_OR_WHEELCHAIR,
                    night_time=True,
                    night_start_time="21:00",
                    night_end_time="06:00",
                    other_time="午睡時",
                ),
            ),
        ),
    )


class TestRestraintObservationMapper:
    """Tests for RestraintObservationMapper."""

    def test_caption_and_header(self, descriptor, record, options):
        """Test the period caption, identity and signature month."""
        wb = DocumentSynthesizer().synthesize(descriptor, [record], RestraintObservationMapper(), options)
        ws = wb.worksheets[0]

        assert ws["A1"].value == "身體約束物品觀察記錄表 ( 2024年 01月 01日 至 2024年 01月 31日 )"
        assert ws["J3"].value == "陳大文"
        assert ws["R3"].value == "C01"
        assert ws["C25"].value.startswith("2024年01月")

    def test_restraint_rows(self, descriptor, record, options):
        """Test a ticked table board with night period and other time."""
        wb = DocumentSynthesizer().synthesize(descriptor, [record], RestraintObservationMapper(), options)
        ws = wb.worksheets[0]

        assert ws["B16"].value == CHECKED
        assert ws["D16"].value == CHECKED
        assert ws["J17"].value == CHECKED
        assert (ws["M17"].value, ws["O17"].value) == ("21:00", "06:00")
        assert ws["Q17"].value == CHECKED
        assert ws["S17"].value == "午睡時"
        assert ws["B6"].value == UNCHECKED

    def test_breaks_and_grid_border(self, descriptor, record, options):
        """Test the canonical breaks and the base border painted over the grid."""
        wb = DocumentSynthesizer().synthesize(descriptor, [record], RestraintObservationMapper(), options)
        ws = wb.worksheets[0]

        assert [brk.id for brk in ws.row_breaks.brk] == [54]
        assert [brk.id for brk in ws.col_breaks.brk] == [19]
        assert ws["AL108"].border.left.style == "thin"

    def test_period_caption(self):
        """Test the spaced Chinese date range."""
        assert period_caption(date(2024, 2, 1), date(2024, 2, 29)) == (
            "身體約束物品觀察記錄表 ( 2024年 02月 01日 至 2024年 02月 29日 )"
        )

    def test_dates_required(self):
        """Test that both period dates are required."""
        with pytest.raises(InvalidExportOptions):
            RestraintObservationMapper().validate_options(ExportOptions(start_date=date(2024, 1, 1)))

    def test_reversed_period_rejected(self):
        """Test that an end date before the start date is rejected."""
        with pytest.raises(InvalidExportOptions):
            RestraintObservationMapper().validate_options(
                ExportOptions(start_date=date(2024, 1, 31), end_date=date(2024, 1, 1))
            )

    def test_filenames(self, record, options):
        """Test the single and batch filenames."""
        mapper = RestraintObservationMapper()
        other = RestraintRecord(resident=resident(bed_number="C02"))

        assert mapper.filename([record], options) == "C01_陳大文_約束物品觀察表.xlsx"
        assert mapper.filename([record, other], options) == "約束物品觀察表(2名院友)_2024-01-01_2024-01-31.xlsx"
