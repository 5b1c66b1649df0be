"""Unit tests for the TemplateEngine service (app/engine/service.py)."""

import io
from datetime import datetime, timezone

import pytest
from openpyxl import load_workbook

from app.core.models import ExportOptions
from app.core.records import DocumentType, MedicationListRecord, ResidentRecord, RestraintRecord
from app.engine.errors import InvalidExportOptions, MalformedTemplate, NoExportableData, TemplateNotFound
from app.engine.service import TemplateEngine, TemplateEngineConfig, sanitize_filename
from app.engine.workbook import WorkbookTooLarge
from app.mappers.diaper_change import DiaperChangeMapper
from app.mappers.restraint_consent import RestraintConsentMapper
from tests.builders import annual_checkup_workbook, prescription, resident, simple_workbook, workbook_bytes

UPLOADED_AT = datetime(2024, 1, 1, tzinfo=timezone.utc)


class TestSanitizeFilename:
    """Tests for sanitize_filename function."""

    def test_special_characters_replaced(self):
        """Test that spaces and punctuation become single underscores."""
        assert sanitize_filename("care plan#1.xlsx") == "care_plan_1.xlsx"

    def test_non_ascii_collapsed(self):
        """Test that non-ASCII runs collapse and leading underscores are trimmed."""
        assert sanitize_filename("換片記錄.xlsx") == ".xlsx"
        assert sanitize_filename("換片 v2.xlsx") == "v2.xlsx"


class TestUpload:
    """Tests for TemplateEngine.upload."""

    def test_record_fields(self, engine, diaper_template_bytes):
        """Test record naming, storage path and persistence."""
        record = engine.upload(
            diaper_template_bytes,
            DocumentType.DIAPER_CHANGE,
            "diaper form.xlsx",
            description="2024 version",
            now=UPLOADED_AT,
        )

        assert record.name == "換片記錄_1704067200000"
        assert record.storage_path == "diaper-change/1704067200000_diaper_form.xlsx"
        assert record.file_size == len(diaper_template_bytes)
        assert record.description == "2024 version"
        assert record.extracted_format.doc_type == DocumentType.DIAPER_CHANGE
        assert engine.store.get(record.id).id == record.id

    def test_accepts_string_doc_type(self, engine, diaper_template_bytes):
        """Test that the wire value of a document type is accepted."""
        record = engine.upload(diaper_template_bytes, "diaper-change", "a.xlsx")

        assert record.type == DocumentType.DIAPER_CHANGE

    def test_annual_checkup_sheet_count_enforced(self, engine):
        """Test that a three-sheet annual checkup is rejected and nothing is stored."""
        content = workbook_bytes(annual_checkup_workbook(sheet_count=3))

        with pytest.raises(MalformedTemplate):
            engine.upload(content, DocumentType.ANNUAL_CHECKUP, "annual.xlsx")

        assert engine.store.list() == []

    def test_size_cap(self, store, diaper_template_bytes):
        """Test that uploads above the configured cap are rejected."""
        engine = TemplateEngine(store, config=TemplateEngineConfig(max_upload_bytes=1024))

        with pytest.raises(WorkbookTooLarge):
            engine.upload(diaper_template_bytes, DocumentType.DIAPER_CHANGE, "a.xlsx")


class TestExport:
    """Tests for TemplateEngine.export."""

    def test_diaper_change_round_trip(self, engine, diaper_template_bytes, options):
        """Test that an exported workbook carries one filled sheet per resident."""
        engine.upload(diaper_template_bytes, DocumentType.DIAPER_CHANGE, "院友換片表.xlsx")
        records = [
            ResidentRecord(resident=resident()),
            ResidentRecord(resident=resident(bed_number="C02", given_name_zh="小明")),
        ]

        result = engine.export(DocumentType.DIAPER_CHANGE, records, options)

        assert result.record_count == 2
        assert result.filename == "院友換片表_2024年01月(2名院友).xlsx"
        wb = load_workbook(io.BytesIO(result.content))
        assert wb.sheetnames == ["C01陳大文", "C02陳小明"]
        assert wb["C01陳大文"]["D3"].value == "陳大文"
        assert wb["C01陳大文"]["A1"].value == "換片記錄表"

    def test_single_record_filename(self, engine, diaper_template_bytes, options):
        """Test the per-resident filename for a one-record export."""
        engine.upload(diaper_template_bytes, DocumentType.DIAPER_CHANGE, "換片記錄.xlsx")

        result = engine.export(DocumentType.DIAPER_CHANGE, [ResidentRecord(resident=resident())], options)

        assert result.filename == "C01_陳大文_換片記錄_2024年01月.xlsx"

    def test_filename_follows_template_name(self, engine, diaper_template_bytes, options):
        """Test that diaper downloads are named after the uploaded template file."""
        engine.upload(diaper_template_bytes, DocumentType.DIAPER_CHANGE, "二樓換片表.XLSX")

        result = engine.export(DocumentType.DIAPER_CHANGE, [ResidentRecord(resident=resident())], options)

        assert result.filename == "C01_陳大文_二樓換片表_2024年01月.xlsx"

    def test_fixed_label_forms_ignore_template_name(self):
        """Test that forms without template-named downloads keep their label."""
        assert RestraintConsentMapper().download_label("consent v2.xlsx") == "約束物品同意書"
        assert DiaperChangeMapper().download_label(".xlsx") == "換片記錄"

    def test_latest_template_used(self, engine, options):
        """Test that the newest upload for the type is replayed by default."""
        old = workbook_bytes(simple_workbook("換片記錄", {"A1": "舊表"}))
        new = workbook_bytes(simple_workbook("換片記錄", {"A1": "新表"}))
        engine.upload(old, DocumentType.DIAPER_CHANGE, "old.xlsx", now=UPLOADED_AT)
        engine.upload(new, DocumentType.DIAPER_CHANGE, "new.xlsx", now=datetime(2024, 2, 1, tzinfo=timezone.utc))

        result = engine.export(DocumentType.DIAPER_CHANGE, [ResidentRecord(resident=resident())], options)

        assert load_workbook(io.BytesIO(result.content)).active["A1"].value == "新表"

    def test_explicit_template_id(self, engine, options):
        """Test that template_id selects an older upload."""
        old = workbook_bytes(simple_workbook("換片記錄", {"A1": "舊表"}))
        new = workbook_bytes(simple_workbook("換片記錄", {"A1": "新表"}))
        kept = engine.upload(old, DocumentType.DIAPER_CHANGE, "old.xlsx", now=UPLOADED_AT)
        engine.upload(new, DocumentType.DIAPER_CHANGE, "new.xlsx", now=datetime(2024, 2, 1, tzinfo=timezone.utc))

        result = engine.export(
            DocumentType.DIAPER_CHANGE,
            [ResidentRecord(resident=resident())],
            options,
            template_id=kept.id,
        )

        assert load_workbook(io.BytesIO(result.content)).active["A1"].value == "舊表"

    def test_missing_template(self, engine, options):
        """Test that exporting before any upload raises TemplateNotFound."""
        with pytest.raises(TemplateNotFound):
            engine.export(DocumentType.DIAPER_CHANGE, [ResidentRecord(resident=resident())], options)

    def test_missing_option(self, engine, diaper_template_bytes):
        """Test that a diaper-change export without year_month is rejected."""
        engine.upload(diaper_template_bytes, DocumentType.DIAPER_CHANGE, "a.xlsx")

        with pytest.raises(InvalidExportOptions) as exc_info:
            engine.export(DocumentType.DIAPER_CHANGE, [ResidentRecord(resident=resident())], ExportOptions())

        assert "year_month" in exc_info.value.detail

    def test_record_kind_mismatch(self, engine, diaper_template_bytes, options):
        """Test that records of the wrong variant are rejected."""
        engine.upload(diaper_template_bytes, DocumentType.DIAPER_CHANGE, "a.xlsx")

        with pytest.raises(InvalidExportOptions) as exc_info:
            engine.export(DocumentType.DIAPER_CHANGE, [RestraintRecord(resident=resident())], options)

        assert "ResidentRecord" in exc_info.value.detail

    def test_template_of_other_type(self, engine, diaper_template_bytes, options):
        """Test that a template_id for a different document type is rejected."""
        diaper = engine.upload(diaper_template_bytes, DocumentType.DIAPER_CHANGE, "a.xlsx")
        options = options.model_copy(update={"first_month": "2024年01月", "second_month": "2024年02月"})

        with pytest.raises(InvalidExportOptions):
            engine.export(
                DocumentType.PERSONAL_HYGIENE,
                [ResidentRecord(resident=resident())],
                options,
                template_id=diaper.id,
            )

    def test_no_exportable_data(self, engine, options):
        """Test that a medication list with only stopped prescriptions has nothing to export."""
        stopped = prescription("Panadol", status="stopped")
        record = MedicationListRecord(resident=resident(), prescriptions=(stopped,))

        with pytest.raises(NoExportableData):
            engine.export(DocumentType.PERSONAL_MEDICATION_LIST, [record], options)

    def test_empty_records(self, engine, options):
        """Test that an empty record list has nothing to export."""
        with pytest.raises(NoExportableData):
            engine.export(DocumentType.DIAPER_CHANGE, [], options)
