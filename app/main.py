"""Care Form Template Engine - FastAPI Application Entry Point.

This module creates and configures the FastAPI application instance,
sets up logging and CORS middleware, and includes the API routes.
"""

import logging
from collections.abc import Sequence

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.routes import router
from app.core.config import settings
from app.core.models import ErrorResponse

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="Care Form Template Engine",
        description=(
            "REST API that captures nursing-home spreadsheet form templates (.xlsx) "
            "and renders resident records into print-ready workbooks."
        ),
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # Configure CORS middleware (allow all origins for development)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition"],
    )

    @app.exception_handler(RequestValidationError)
    async def request_validation_exception_handler(  # type: ignore[misc]
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        detail = _validation_detail(exc.errors())
        logger.info("Rejected %s %s: %s", request.method, request.url.path, detail)
        return JSONResponse(
            status_code=422,
            content=ErrorResponse(
                error="Validation error",
                detail=detail,
            ).model_dump(),
        )

    # Include API routes
    app.include_router(router)
    logger.info("Template store at %s", settings.template_store_dir)

    return app


def _validation_detail(errors: Sequence[dict]) -> str:
    """Summarize the first request error a client can act on."""
    for err in errors:
        loc = err.get("loc") or ()
        field = str(loc[-1]) if loc else ""
        if err.get("type") == "missing" and field in ("file", "doc_type"):
            return f"Missing required form field: {field}"
        if err.get("type") == "enum" and field == "doc_type":
            return f"Unknown document type: {err.get('input')}"
        if field == "year_month" or field.endswith("_month"):
            return f"{field} must look like 2024年01月"
    return "Request validation failed"


# Create the application instance
app = create_app()
