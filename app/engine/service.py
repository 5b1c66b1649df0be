"""Template engine service module.

Provides the ``TemplateEngine`` OOP service and ``TemplateEngineConfig``
dataclass: upload (extract and store) and export (synthesize and emit).
"""

from __future__ import annotations

import logging
import re
import uuid
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timezone

from app.core.models import ExportOptions, TemplateRecord
from app.core.records import DocumentType
from app.engine.emitter import emit
from app.engine.errors import InvalidExportOptions, NoExportableData
from app.engine.extractor import extract
from app.engine.forms import get_form
from app.engine.synthesizer import DocumentSynthesizer
from app.mappers.registry import get_mapper
from app.store.template_store import TemplateStore

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]")
_UNDERSCORE_RUNS = re.compile(r"_+")


def sanitize_filename(name: str) -> str:
    """Replace non-ASCII, whitespace and special characters with ``_``, collapse runs, trim."""
    cleaned = _UNSAFE_FILENAME_CHARS.sub("_", name)
    cleaned = _UNDERSCORE_RUNS.sub("_", cleaned)
    return cleaned.strip("_")


@dataclass
class TemplateEngineConfig:
    """Configuration for the TemplateEngine service."""

    max_upload_bytes: int = 50 * 1024 * 1024


@dataclass
class ExportResult:
    filename: str
    content: bytes
    record_count: int


class TemplateEngine:
    """Upload and export pipeline over a template store.

    Usage:
        engine = TemplateEngine(InMemoryTemplateStore())
        record = engine.upload(file_bytes, DocumentType.DIAPER_CHANGE, "換片記錄.xlsx")
        result = engine.export(DocumentType.DIAPER_CHANGE, records, ExportOptions(year_month="2024年01月"))
    """

    def __init__(
        self,
        store: TemplateStore,
        config: TemplateEngineConfig | None = None,
        synthesizer: DocumentSynthesizer | None = None,
    ):
        self.store = store
        self.config = config or TemplateEngineConfig()
        self.synthesizer = synthesizer or DocumentSynthesizer()

    def upload(
        self,
        file_bytes: bytes,
        doc_type: DocumentType | str,
        original_name: str,
        description: str | None = None,
        now: datetime | None = None,
    ) -> TemplateRecord:
        """Extract a template and persist it.

        Raises:
            WorkbookLoadError: If the file is unreadable or above the size cap.
            MalformedTemplate: If the workbook shape does not fit the type.
        """
        form = get_form(doc_type)
        descriptor = extract(file_bytes, form.doc_type, max_bytes=self.config.max_upload_bytes)

        now = now or datetime.now(timezone.utc)
        timestamp = int(now.timestamp() * 1000)
        record = TemplateRecord(
            id=uuid.uuid4().hex,
            name=f"{form.label}_{timestamp}",
            type=form.doc_type,
            original_name=original_name,
            storage_path=f"{form.doc_type.value}/{timestamp}_{sanitize_filename(original_name)}",
            upload_date=now,
            file_size=len(file_bytes),
            description=description,
            extracted_format=descriptor,
        )
        self.store.save(record, file_bytes)
        logger.info(
            "Uploaded template id=%s doc_type=%s original_name=%s size=%d",
            record.id,
            form.doc_type.value,
            original_name,
            len(file_bytes),
        )
        return record

    def export(
        self,
        doc_type: DocumentType | str,
        records: Sequence[object],
        options: ExportOptions | None = None,
        template_id: str | None = None,
    ) -> ExportResult:
        """Render records into a workbook using the stored template.

        Raises:
            InvalidExportOptions: If options or record kinds do not fit the type.
            NoExportableData: If no record passes the type's eligibility filter.
            TemplateNotFound: If no template is stored for the type or id.
            SerializationFailure: If the workbook cannot be written.
        """
        form = get_form(doc_type)
        mapper = get_mapper(form.doc_type)
        options = options or ExportOptions()
        mapper.validate_options(options)

        for record in records:
            if not isinstance(record, mapper.record_type):
                raise InvalidExportOptions(
                    message="Record kind mismatch",
                    detail=f"{form.doc_type.value} expects {mapper.record_type.__name__}, got {type(record).__name__}",
                )

        eligible = []
        for record in records:
            narrowed = mapper.eligible(record)
            if narrowed is not None:
                eligible.append(narrowed)
        if not eligible:
            raise NoExportableData(
                message="No exportable data",
                detail=f"None of {len(records)} records are eligible for {form.label}",
            )

        template = self.store.get(template_id) if template_id else self.store.latest(form.doc_type)
        if template.type != form.doc_type:
            raise InvalidExportOptions(
                message="Template type mismatch",
                detail=f"Template {template.id} is for {template.type.value}, not {form.doc_type.value}",
            )

        workbook = self.synthesizer.synthesize(template.extracted_format, eligible, mapper, options)
        content = emit(workbook)
        filename = mapper.filename(eligible, options, label=mapper.download_label(template.original_name))
        logger.info(
            "Exported doc_type=%s records=%d eligible=%d filename=%s bytes=%d",
            form.doc_type.value,
            len(records),
            len(eligible),
            filename,
            len(content),
        )
        return ExportResult(filename=filename, content=content, record_count=len(eligible))
