"""Workbook Emitter: serializes a synthesized workbook and names the download."""

from __future__ import annotations

import io
import logging
from typing import TYPE_CHECKING
from urllib.parse import quote

from app.engine.errors import SerializationFailure

if TYPE_CHECKING:
    from openpyxl import Workbook

logger = logging.getLogger(__name__)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def emit(workbook: "Workbook") -> bytes:
    """Serialize a workbook to .xlsx bytes.

    Raises:
        SerializationFailure: If openpyxl cannot write the workbook. No partial
            output is returned.
    """
    buffer = io.BytesIO()
    try:
        workbook.save(buffer)
    except Exception as e:
        logger.error("Workbook serialization failed: %s: %s", type(e).__name__, e)
        raise SerializationFailure(
            message="Failed to write workbook",
            detail=f"{type(e).__name__}: {e}",
        ) from e
    return buffer.getvalue()


def single_record_filename(bed: str, name: str, label: str, date_part: str | None = None) -> str:
    """``{bed}_{name}_{label}_{date}.xlsx``; the date segment is omitted when empty."""
    parts = [bed, name, label]
    if date_part:
        parts.append(date_part)
    return "_".join(parts) + ".xlsx"


def batch_filename(label: str, count: int, date_part: str | None = None, unit: str = "名院友") -> str:
    """``{label}({count}名院友).xlsx``, with ``_{date}`` after the label when given."""
    head = f"{label}_{date_part}" if date_part else label
    return f"{head}({count}{unit}).xlsx"


def content_disposition(filename: str) -> str:
    """Attachment header carrying a non-ASCII filename (RFC 5987)."""
    fallback = filename.encode("ascii", "replace").decode("ascii").replace("?", "_")
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"
