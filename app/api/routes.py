"""API routes for the care form template engine.

This module defines the REST API endpoints:
- GET /health: Health check endpoint
- GET /document-types: Supported form types and their contracts
- POST /templates: Upload and extract a template
- GET /templates, GET /templates/{id}, DELETE /templates/{id}: Stored templates
- POST /exports/{doc_type}: Render records into a downloadable workbook
"""

import logging

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.models import DocumentTypeInfo, ErrorResponse, ExportRequest, TemplateRecord, TemplateSummary
from app.core.records import DocumentType
from app.engine.emitter import XLSX_MEDIA_TYPE, content_disposition
from app.engine.errors import (
    InvalidExportOptions,
    MalformedTemplate,
    NoExportableData,
    SerializationFailure,
    TemplateEngineError,
    TemplateNotFound,
)
from app.engine.forms import FORMS
from app.engine.service import TemplateEngine, TemplateEngineConfig
from app.engine.workbook import WorkbookLoadError, WorkbookTooLarge
from app.store.template_store import FileTemplateStore

# Create router instance
router = APIRouter()
logger = logging.getLogger(__name__)

# Create the engine at startup using app settings.
_engine = TemplateEngine(
    store=FileTemplateStore(settings.template_store_dir),
    config=TemplateEngineConfig(max_upload_bytes=settings.max_upload_bytes),
)


def get_engine() -> TemplateEngine:
    """Dependency returning the shared engine (overridden in tests)."""
    return _engine


def _status_for(error: TemplateEngineError) -> int:
    if isinstance(error, WorkbookTooLarge):
        return 413
    if isinstance(error, (WorkbookLoadError, MalformedTemplate, InvalidExportOptions)):
        return 400
    if isinstance(error, TemplateNotFound):
        return 404
    if isinstance(error, NoExportableData):
        return 422
    if isinstance(error, SerializationFailure):
        return 500
    return 400


def _error_response(error: TemplateEngineError) -> JSONResponse:
    return JSONResponse(
        status_code=_status_for(error),
        content=ErrorResponse(error=error.message, detail=error.detail).model_dump(),
    )


@router.get(
    "/health",
    summary="Health Check",
    description="Returns the health status of the API service.",
    response_description="Health status object",
    responses={
        200: {
            "description": "Service is healthy",
            "content": {
                "application/json": {
                    "example": {"status": "ok"}
                }
            }
        }
    }
)
async def health_check() -> dict:
    """Health check endpoint.

    Returns:
        dict: Health status with "status": "ok"
    """
    return {"status": "ok"}


@router.get(
    "/document-types",
    response_model=list[DocumentTypeInfo],
    summary="List Document Types",
    description="Supported form types with their grid bounds and page-break policy.",
)
async def list_document_types() -> list[DocumentTypeInfo]:
    infos = []
    for form in FORMS.values():
        breaks = form.canonical_breaks
        infos.append(
            DocumentTypeInfo(
                type=form.doc_type,
                label=form.label,
                cols=form.bounds.cols,
                rows=form.bounds.rows,
                bounds_policy=form.bounds_policy,
                required_sheets=form.required_sheets,
                page_break_rows=list(breaks.rows) if breaks is not None else None,
                page_break_cols=list(breaks.cols) if breaks is not None else None,
            )
        )
    return infos


@router.post(
    "/templates",
    status_code=201,
    response_model=TemplateSummary,
    summary="Upload Template",
    description=(
        "Upload an Excel (.xlsx) form template for a document type. The template's "
        "geometry, styles, merges, print setup and images are captured and stored."
    ),
    responses={
        201: {"description": "Template stored", "model": TemplateSummary},
        400: {"description": "Invalid file or malformed template", "model": ErrorResponse},
        413: {"description": "File above the upload size limit", "model": ErrorResponse},
        422: {"description": "Request validation error", "model": ErrorResponse},
    },
)
async def upload_template(
    file: UploadFile = File(..., description="Template workbook (.xlsx format)"),
    doc_type: DocumentType = Form(..., description="Document type of the template"),
    description: str | None = Form(None, description="Optional description"),
    engine: TemplateEngine = Depends(get_engine),
) -> TemplateSummary | JSONResponse:
    """Extract and store an uploaded template.

    Args:
        file: Uploaded Excel file (.xlsx format)
        doc_type: Document type the template is for
        description: Optional free-text description

    Returns:
        TemplateSummary: Metadata of the stored template
    """
    if not file.filename:
        return JSONResponse(
            status_code=400,
            content=ErrorResponse(error="Invalid file", detail="No filename provided").model_dump(),
        )

    if not file.filename.lower().endswith(".xlsx"):
        extension = file.filename[file.filename.rfind(".") :] if "." in file.filename else "no extension"
        return JSONResponse(
            status_code=400,
            content=ErrorResponse(
                error="Invalid file format",
                detail=f"Expected .xlsx file, got '{extension}'",
            ).model_dump(),
        )

    try:
        file_bytes = await file.read()
    except Exception as e:
        return JSONResponse(
            status_code=400,
            content=ErrorResponse(
                error="Failed to read upload",
                detail=f"{type(e).__name__}: {e}",
            ).model_dump(),
        )
    finally:
        await file.close()

    try:
        record = await run_in_threadpool(engine.upload, file_bytes, doc_type, file.filename, description)
    except TemplateEngineError as e:
        logger.info("Rejected template filename=%s doc_type=%s: %s", file.filename, doc_type.value, e)
        return _error_response(e)

    return TemplateSummary.model_validate(record.model_dump(exclude={"extracted_format"}))


@router.get(
    "/templates",
    response_model=list[TemplateSummary],
    summary="List Templates",
    description="Stored templates, newest first, optionally filtered by document type.",
)
def list_templates(
    doc_type: DocumentType | None = None,
    engine: TemplateEngine = Depends(get_engine),
) -> list[TemplateSummary]:
    return [
        TemplateSummary.model_validate(record.model_dump(exclude={"extracted_format"}))
        for record in engine.store.list(doc_type)
    ]


@router.get(
    "/templates/{template_id}",
    response_model=TemplateRecord,
    summary="Get Template",
    description="A stored template including its extracted structure.",
    responses={404: {"description": "Unknown template", "model": ErrorResponse}},
)
def get_template(
    template_id: str,
    engine: TemplateEngine = Depends(get_engine),
) -> TemplateRecord | JSONResponse:
    try:
        return engine.store.get(template_id)
    except TemplateNotFound as e:
        return _error_response(e)


@router.delete(
    "/templates/{template_id}",
    status_code=204,
    summary="Delete Template",
    responses={404: {"description": "Unknown template", "model": ErrorResponse}},
)
def delete_template(
    template_id: str,
    engine: TemplateEngine = Depends(get_engine),
) -> Response:
    try:
        engine.store.delete(template_id)
    except TemplateNotFound as e:
        return _error_response(e)
    logger.info("Deleted template id=%s", template_id)
    return Response(status_code=204)


@router.post(
    "/exports/{doc_type}",
    summary="Export Records",
    description=(
        "Render records into a workbook using the latest template for the document "
        "type (or the given template_id) and return it as an .xlsx download."
    ),
    responses={
        200: {"description": "Workbook download", "content": {XLSX_MEDIA_TYPE: {}}},
        400: {"description": "Invalid options or record kinds", "model": ErrorResponse},
        404: {"description": "No template stored", "model": ErrorResponse},
        422: {"description": "No exportable data", "model": ErrorResponse},
        500: {"description": "Workbook could not be written", "model": ErrorResponse},
    },
)
def export_records(
    doc_type: DocumentType,
    body: ExportRequest,
    engine: TemplateEngine = Depends(get_engine),
) -> Response:
    try:
        result = engine.export(doc_type, body.records, body.options, body.template_id)
    except TemplateEngineError as e:
        logger.info("Export failed doc_type=%s: %s", doc_type.value, e)
        return _error_response(e)

    return Response(
        content=result.content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": content_disposition(result.filename)},
    )
