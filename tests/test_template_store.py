"""Unit tests for template stores (app/store/template_store.py)."""

from datetime import datetime, timedelta, timezone

import pytest

from app.core.models import TemplateRecord
from app.core.records import DocumentType
from app.engine.errors import TemplateNotFound
from app.engine.extractor import extract
from app.store.template_store import FileTemplateStore, InMemoryTemplateStore
from tests.builders import diaper_change_workbook, simple_workbook, workbook_bytes

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _record(template_id: str, doc_type: DocumentType, minutes: int, content: bytes) -> TemplateRecord:
    uploaded = BASE_TIME + timedelta(minutes=minutes)
    return TemplateRecord(
        id=template_id,
        name=f"{doc_type.value}_{minutes}",
        type=doc_type,
        original_name="form.xlsx",
        storage_path=f"{doc_type.value}/{minutes}_form.xlsx",
        upload_date=uploaded,
        file_size=len(content),
        extracted_format=extract(content, doc_type),
    )


@pytest.fixture()
def diaper_bytes():
    return workbook_bytes(diaper_change_workbook(with_image=True))


@pytest.fixture()
def hygiene_bytes():
    return workbook_bytes(simple_workbook(labels={"A1": "個人衛生記錄"}))


@pytest.fixture(params=["memory", "file"])
def any_store(request, tmp_path):
    if request.param == "memory":
        return InMemoryTemplateStore()
    return FileTemplateStore(tmp_path / "templates")


class TestTemplateStoreContract:
    """Tests shared by every store implementation."""

    def test_save_and_get(self, any_store, diaper_bytes):
        """Test that a saved record reads back equal, descriptor included."""
        record = _record("a1", DocumentType.DIAPER_CHANGE, 0, diaper_bytes)

        any_store.save(record, diaper_bytes)
        loaded = any_store.get("a1")

        assert loaded.model_dump() == record.model_dump()
        assert loaded.extracted_format.images[0].data == record.extracted_format.images[0].data

    def test_list_newest_first_and_filtered(self, any_store, diaper_bytes, hygiene_bytes):
        """Test ordering by upload date and filtering by type."""
        any_store.save(_record("old", DocumentType.DIAPER_CHANGE, 0, diaper_bytes), diaper_bytes)
        any_store.save(_record("new", DocumentType.DIAPER_CHANGE, 5, diaper_bytes), diaper_bytes)
        any_store.save(_record("hyg", DocumentType.PERSONAL_HYGIENE, 9, hygiene_bytes), hygiene_bytes)

        assert [r.id for r in any_store.list()] == ["hyg", "new", "old"]
        assert [r.id for r in any_store.list(DocumentType.DIAPER_CHANGE)] == ["new", "old"]

    def test_latest(self, any_store, diaper_bytes):
        """Test that latest returns the most recent upload for a type."""
        any_store.save(_record("old", DocumentType.DIAPER_CHANGE, 0, diaper_bytes), diaper_bytes)
        any_store.save(_record("new", DocumentType.DIAPER_CHANGE, 5, diaper_bytes), diaper_bytes)

        assert any_store.latest(DocumentType.DIAPER_CHANGE).id == "new"

    def test_latest_without_upload_raises(self, any_store):
        """Test that a type with no template raises TemplateNotFound."""
        with pytest.raises(TemplateNotFound) as exc_info:
            any_store.latest(DocumentType.BED_LAYOUT)

        assert "bed-layout" in exc_info.value.detail

    def test_delete(self, any_store, diaper_bytes):
        """Test that deleted records are gone and a second delete fails."""
        any_store.save(_record("a1", DocumentType.DIAPER_CHANGE, 0, diaper_bytes), diaper_bytes)

        any_store.delete("a1")

        with pytest.raises(TemplateNotFound):
            any_store.get("a1")
        with pytest.raises(TemplateNotFound):
            any_store.delete("a1")


class TestFileTemplateStore:
    """Tests specific to the on-disk store."""

    def test_layout_on_disk(self, tmp_path, diaper_bytes):
        """Test that the record JSON and the raw upload are written."""
        store = FileTemplateStore(tmp_path)
        record = _record("a1", DocumentType.DIAPER_CHANGE, 0, diaper_bytes)

        store.save(record, diaper_bytes)

        assert (tmp_path / "records" / "a1.json").is_file()
        assert (tmp_path / "files" / record.storage_path).read_bytes() == diaper_bytes

    def test_path_like_ids_rejected(self, tmp_path):
        """Test that ids cannot reach outside the store directory."""
        store = FileTemplateStore(tmp_path)

        with pytest.raises(TemplateNotFound):
            store.get("../secrets")

    def test_empty_store_lists_nothing(self, tmp_path):
        """Test that a store directory that does not exist yet is empty."""
        assert FileTemplateStore(tmp_path / "missing").list() == []
