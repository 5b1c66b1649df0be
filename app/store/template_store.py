"""Template Store: persistence contract for uploaded templates.

The resident database is external; only the read/write contract for template
records is implemented here, with an in-memory store (tests, single process)
and a JSON-on-disk store.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path

from app.core.models import TemplateRecord
from app.core.records import DocumentType
from app.engine.errors import TemplateNotFound

logger = logging.getLogger(__name__)


class TemplateStore(ABC):
    """Read/write contract for stored templates."""

    @abstractmethod
    def save(self, record: TemplateRecord, content: bytes) -> TemplateRecord:
        """Persist a record and its original file bytes."""

    @abstractmethod
    def get(self, template_id: str) -> TemplateRecord:
        """Return a record by id.

        Raises:
            TemplateNotFound: If no record has this id.
        """

    @abstractmethod
    def list(self, doc_type: DocumentType | None = None) -> list[TemplateRecord]:
        """Return records, newest first, optionally for one document type."""

    @abstractmethod
    def delete(self, template_id: str) -> None:
        """Remove a record and its file.

        Raises:
            TemplateNotFound: If no record has this id.
        """

    def latest(self, doc_type: DocumentType) -> TemplateRecord:
        """Return the most recent upload for a document type.

        Raises:
            TemplateNotFound: If no template was uploaded for the type.
        """
        records = self.list(doc_type)
        if not records:
            raise TemplateNotFound(
                message="Template not found",
                detail=f"No template uploaded for {DocumentType(doc_type).value}",
            )
        return records[0]


def _not_found(template_id: str) -> TemplateNotFound:
    return TemplateNotFound(message="Template not found", detail=f"No template with id {template_id}")


def _newest_first(records: list[TemplateRecord]) -> list[TemplateRecord]:
    return sorted(records, key=lambda r: r.upload_date, reverse=True)


class InMemoryTemplateStore(TemplateStore):
    def __init__(self) -> None:
        self._records: dict[str, TemplateRecord] = {}
        self._files: dict[str, bytes] = {}

    def save(self, record: TemplateRecord, content: bytes) -> TemplateRecord:
        self._records[record.id] = record
        self._files[record.storage_path] = content
        return record

    def get(self, template_id: str) -> TemplateRecord:
        try:
            return self._records[template_id]
        except KeyError:
            raise _not_found(template_id) from None

    def list(self, doc_type: DocumentType | None = None) -> list[TemplateRecord]:
        records = [r for r in self._records.values() if doc_type is None or r.type == doc_type]
        return _newest_first(records)

    def delete(self, template_id: str) -> None:
        record = self.get(template_id)
        del self._records[template_id]
        self._files.pop(record.storage_path, None)

    def file_bytes(self, template_id: str) -> bytes:
        return self._files[self.get(template_id).storage_path]


class FileTemplateStore(TemplateStore):
    """Stores each record as JSON and the uploaded file beside it.

    Layout under ``root``::

        records/{id}.json
        files/{storage_path}
    """

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)
        self._records_dir = self.root / "records"
        self._files_dir = self.root / "files"

    def save(self, record: TemplateRecord, content: bytes) -> TemplateRecord:
        file_path = self._files_dir / record.storage_path
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_bytes(content)

        self._records_dir.mkdir(parents=True, exist_ok=True)
        self._record_path(record.id).write_text(record.model_dump_json(), encoding="utf-8")
        logger.info("Stored template id=%s path=%s", record.id, file_path)
        return record

    def get(self, template_id: str) -> TemplateRecord:
        path = self._record_path(template_id)
        if not path.is_file():
            raise _not_found(template_id)
        return TemplateRecord.model_validate_json(path.read_text(encoding="utf-8"))

    def list(self, doc_type: DocumentType | None = None) -> list[TemplateRecord]:
        if not self._records_dir.is_dir():
            return []
        records = [
            TemplateRecord.model_validate_json(path.read_text(encoding="utf-8"))
            for path in self._records_dir.glob("*.json")
        ]
        if doc_type is not None:
            records = [r for r in records if r.type == doc_type]
        return _newest_first(records)

    def delete(self, template_id: str) -> None:
        record = self.get(template_id)
        (self._files_dir / record.storage_path).unlink(missing_ok=True)
        self._record_path(template_id).unlink()
        logger.info("Deleted template id=%s", template_id)

    def _record_path(self, template_id: str) -> Path:
        # ids are generated hex strings; reject anything that could escape the directory
        if not template_id.isalnum():
            raise _not_found(template_id)
        return self._records_dir / f"{template_id}.json"
