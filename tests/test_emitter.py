"""Unit tests for the workbook emitter (app/engine/emitter.py)."""

import io
from urllib.parse import unquote

import pytest
from openpyxl import Workbook, load_workbook

from app.engine.emitter import batch_filename, content_disposition, emit, single_record_filename
from app.engine.errors import SerializationFailure


class _UnsavableWorkbook:
    def save(self, buffer):
        raise ValueError("cannot write sheet")


class TestEmit:
    """Tests for emit function."""

    def test_returns_xlsx_bytes(self):
        """Test that the output is a loadable OOXML package."""
        wb = Workbook()
        wb.active["A1"] = "陳大文"

        content = emit(wb)

        assert content.startswith(b"PK")
        assert load_workbook(io.BytesIO(content)).active["A1"].value == "陳大文"

    def test_failure_raises_serialization_failure(self):
        """Test that save errors surface as SerializationFailure."""
        with pytest.raises(SerializationFailure) as exc_info:
            emit(_UnsavableWorkbook())

        assert "cannot write sheet" in exc_info.value.detail


class TestFilenames:
    """Tests for filename builders."""

    def test_single_record(self):
        """Test the bed_name_label_date pattern."""
        assert single_record_filename("C01", "陳大文", "換片記錄", "2024年01月") == "C01_陳大文_換片記錄_2024年01月.xlsx"

    def test_single_record_without_date(self):
        """Test that the date segment is dropped when empty."""
        assert single_record_filename("C01", "陳大文", "約束物品同意書") == "C01_陳大文_約束物品同意書.xlsx"

    def test_batch(self):
        """Test the label(count名院友) pattern."""
        assert batch_filename("約束物品同意書", 12) == "約束物品同意書(12名院友).xlsx"
        assert batch_filename("換片記錄", 3, "2024年01月") == "換片記錄_2024年01月(3名院友).xlsx"


class TestContentDisposition:
    """Tests for content_disposition function."""

    def test_non_ascii_filename_encoded(self):
        """Test that the header is ASCII-safe and carries the UTF-8 name."""
        header = content_disposition("C01_陳大文_換片記錄.xlsx")

        header.encode("latin-1")
        assert header.startswith("attachment; ")
        encoded = header.split("filename*=UTF-8''", 1)[1]
        assert unquote(encoded) == "C01_陳大文_換片記錄.xlsx"

    def test_ascii_fallback(self):
        """Test the plain filename parameter for clients without RFC 5987 support."""
        header = content_disposition("report.xlsx")

        assert 'filename="report.xlsx"' in header
