"""Pydantic models for the care form template API.

This module defines the request/response models:
- TemplateSummary / TemplateRecord: Stored template metadata (and descriptor)
- ExportOptions / ExportRequest: Export-call context and records
- DocumentTypeInfo: Contract summary of a document type
- ErrorResponse: Error response for failed requests
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field

from app.core.config import settings
from app.core.records import DocumentType, DomainRecord
from app.engine.descriptor import TemplateDescriptor

SortOption = Literal["medication_name", "prescription_date", "start_date", "medication_source"]

YEAR_MONTH_PATTERN = r"^\d{4}年\d{2}月$"


class TemplateSummary(BaseModel):
    """Metadata of a stored template, as listed by the API."""

    id: str = Field(description="Template identifier")
    name: str = Field(description="Display name, '{label}_{timestamp}'")
    type: DocumentType = Field(description="Document type the template was uploaded for")
    original_name: str = Field(description="Filename as uploaded")
    storage_path: str = Field(description="'{type}/{timestamp}_{sanitized name}'")
    upload_date: datetime = Field(description="Upload time (UTC)")
    file_size: int = Field(description="Upload size in bytes", ge=0)
    description: str | None = Field(default=None, description="Free-text description")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "id": "0f9d3c1e6b0a4c5e9a1d2b3c4d5e6f70",
                    "name": "換片記錄_1704067200000",
                    "type": "diaper-change",
                    "original_name": "換片記錄.xlsx",
                    "storage_path": "diaper-change/1704067200000_.xlsx",
                    "upload_date": "2024-01-01T00:00:00Z",
                    "file_size": 24576,
                    "description": None,
                }
            ]
        }
    }


class TemplateRecord(TemplateSummary):
    """Persisted template record including its extracted descriptor."""

    extracted_format: TemplateDescriptor = Field(description="Captured template structure")


class ExportOptions(BaseModel):
    """Per-call context used by field mappers.

    Which fields are required depends on the document type.
    """

    today: date = Field(
        default_factory=date.today,
        description="Reference date for ages, update and print dates",
    )
    year_month: str | None = Field(
        default=None,
        pattern=YEAR_MONTH_PATTERN,
        description="Month of a diaper-change record, e.g. '2024年01月'",
    )
    first_month: str | None = Field(
        default=None,
        pattern=YEAR_MONTH_PATTERN,
        description="First month of a personal-hygiene record",
    )
    second_month: str | None = Field(
        default=None,
        pattern=YEAR_MONTH_PATTERN,
        description="Second month of a personal-hygiene record",
    )
    start_date: date | None = Field(default=None, description="Restraint observation period start")
    end_date: date | None = Field(default=None, description="Restraint observation period end")
    sort_by: SortOption = Field(
        default_factory=lambda: settings.default_sort,
        description="Ordering of medication list items",
    )


class ExportRequest(BaseModel):
    """Body of an export call."""

    records: list[DomainRecord] = Field(description="Records to render, one sheet (group) each")
    options: ExportOptions = Field(default_factory=ExportOptions)
    template_id: str | None = Field(
        default=None,
        description="Template to use; defaults to the latest upload for the type",
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "records": [
                        {
                            "kind": "resident",
                            "resident": {"床號": "C01", "中文姓氏": "陳", "中文名字": "大文"},
                        }
                    ],
                    "options": {"year_month": "2024年01月"},
                }
            ]
        }
    }


class DocumentTypeInfo(BaseModel):
    """Contract summary of one document type."""

    type: DocumentType
    label: str
    cols: int
    rows: int
    bounds_policy: str
    required_sheets: int
    page_break_rows: list[int] | None = Field(
        default=None,
        description="Canonical row breaks, or null when template breaks are kept",
    )
    page_break_cols: list[int] | None = None


class ErrorResponse(BaseModel):
    """Error response for failed requests.

    Returned with appropriate HTTP status codes (400, 404, 413, 422, 500).
    """

    error: str = Field(
        description="Brief error message describing what went wrong"
    )
    detail: str | None = Field(
        default=None,
        description="Additional error details (if available)",
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "error": "Invalid file format",
                    "detail": "Expected .xlsx file, got '.csv'",
                },
                {
                    "error": "Malformed template",
                    "detail": "expected 5 sheets, found 3",
                },
            ]
        }
    }
