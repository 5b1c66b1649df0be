"""Unit tests for safe workbook loading (app/engine/workbook.py)."""

import io
import zipfile

import pytest

from app.engine.workbook import WorkbookLoadError, WorkbookTooLarge, load_workbook_safe
from tests.builders import simple_workbook, workbook_bytes


class TestLoadWorkbookSafe:
    """Tests for load_workbook_safe function."""

    def test_loads_valid_workbook(self):
        """Test that a valid workbook loads with its sheets."""
        wb = load_workbook_safe(workbook_bytes(simple_workbook("換片記錄", {"A1": "標題"})))

        assert wb.sheetnames == ["換片記錄"]
        assert wb["換片記錄"]["A1"].value == "標題"

    def test_empty_bytes_rejected(self):
        """Test that empty uploads are rejected."""
        with pytest.raises(WorkbookLoadError) as exc_info:
            load_workbook_safe(b"")

        assert exc_info.value.message == "Empty file"

    def test_tiny_file_rejected(self):
        """Test that a file too small to be a workbook is rejected."""
        with pytest.raises(WorkbookLoadError) as exc_info:
            load_workbook_safe(b"PK\x03\x04")

        assert exc_info.value.message == "Invalid file"
        assert "too small" in exc_info.value.detail

    def test_size_cap_enforced(self):
        """Test that files above max_bytes raise WorkbookTooLarge."""
        data = workbook_bytes(simple_workbook())

        with pytest.raises(WorkbookTooLarge) as exc_info:
            load_workbook_safe(data, max_bytes=len(data) - 1)

        assert exc_info.value.message == "File too large"

    def test_size_cap_is_inclusive(self):
        """Test that a file exactly at the cap loads."""
        data = workbook_bytes(simple_workbook())

        wb = load_workbook_safe(data, max_bytes=len(data))

        assert len(wb.worksheets) == 1

    def test_non_zip_rejected(self):
        """Test that non-zip content (e.g. a legacy .xls or text) is rejected."""
        with pytest.raises(WorkbookLoadError) as exc_info:
            load_workbook_safe(b"not a spreadsheet " * 20)

        assert exc_info.value.message == "Invalid file format"

    def test_zip_without_workbook_parts_rejected(self):
        """Test that a zip archive that is not an Excel package is rejected."""
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as archive:
            archive.writestr("readme.txt", "hello " * 50)

        with pytest.raises(WorkbookLoadError):
            load_workbook_safe(buffer.getvalue())

    def test_error_string_includes_detail(self):
        """Test that str() joins message and detail."""
        with pytest.raises(WorkbookLoadError) as exc_info:
            load_workbook_safe(b"")

        assert str(exc_info.value) == "Empty file: The uploaded file contains no data"
