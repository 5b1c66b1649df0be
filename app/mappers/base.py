"""Field mapper interface.

A field mapper translates one domain record into cell writes on a worksheet
that the synthesizer has already filled with the replayed template. Mappers
hold no state between calls.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import TYPE_CHECKING, ClassVar

from app.core.records import DocumentType
from app.engine.emitter import batch_filename, single_record_filename
from app.engine.forms import FormSpec, get_form

if TYPE_CHECKING:
    from openpyxl.worksheet.worksheet import Worksheet

    from app.core.models import ExportOptions
    from app.engine.descriptor import SheetTemplate, TemplateDescriptor

TEMPLATE_EXTENSION = re.compile(r"\.(xlsx|xls)$", re.IGNORECASE)


class FieldMapper(ABC):
    """Base class for per-document-type field mappers."""

    doc_type: ClassVar[DocumentType]
    record_type: ClassVar[type]
    # Download names use the uploaded template's file name instead of the form label.
    named_after_template: ClassVar[bool] = False

    @property
    def form(self) -> FormSpec:
        return get_form(self.doc_type)

    def validate_options(self, options: "ExportOptions") -> None:
        """Raise ``InvalidExportOptions`` when a required context value is missing."""

    def eligible(self, record):
        """Return the record narrowed to its exportable content, or None to drop it."""
        return record

    def sheet_titles(self, record, descriptor: "TemplateDescriptor") -> list[str]:
        """Titles for the worksheets of one record, one per template sheet."""
        return [self.sheet_name(record)]

    @abstractmethod
    def sheet_name(self, record) -> str:
        """Worksheet title derived from the record (before truncation)."""

    @abstractmethod
    def apply(
        self,
        ws: "Worksheet",
        template: "SheetTemplate",
        record,
        options: "ExportOptions",
    ) -> None:
        """Write the record's fields onto the replayed worksheet."""

    def date_part(self, options: "ExportOptions") -> str | None:
        return None

    def download_label(self, original_name: str | None) -> str:
        """Label used in download names: the template's base name or the form label."""
        if self.named_after_template and original_name:
            base = TEMPLATE_EXTENSION.sub("", original_name).strip()
            if base:
                return base
        return self.form.label

    def filename(self, records: Sequence, options: "ExportOptions", label: str | None = None) -> str:
        """Download filename for the exported records.

        ``label`` replaces the form label, see ``download_label``.
        """
        label = label or self.form.label
        if len(records) == 1:
            resident = records[0].resident
            return single_record_filename(
                resident.bed_number,
                resident.full_name,
                label,
                self.date_part(options),
            )
        return batch_filename(label, len(records), self.date_part(options))
