"""Workbook loading and validation utilities.

This module provides safe loading of uploaded template workbooks with proper
error handling for invalid, corrupt, oversized, or unsupported files.
"""

from __future__ import annotations

import io
import zipfile

import openpyxl
from openpyxl import Workbook
from openpyxl.utils.exceptions import InvalidFileException

from app.engine.errors import TemplateEngineError

# Smallest plausible OOXML package (an empty workbook zip is well above this).
MIN_WORKBOOK_BYTES = 100


class WorkbookLoadError(TemplateEngineError):
    """Exception raised when a workbook cannot be loaded.

    This exception is raised for various loading failures including:
    - Empty or truncated file data
    - Files above the configured size cap
    - Corrupt or invalid ZIP structure
    - Password-protected files
    """


class WorkbookTooLarge(WorkbookLoadError):
    """Raised when an upload exceeds the configured size cap."""


def load_workbook_safe(file_bytes: bytes, max_bytes: int | None = None) -> Workbook:
    """Safely load a template workbook from raw bytes.

    Formulas are kept as formula strings and images are loaded so the
    extractor can capture them.

    Args:
        file_bytes: Raw bytes of the .xlsx file
        max_bytes: Optional upper size limit in bytes

    Returns:
        Workbook: Loaded openpyxl Workbook object

    Raises:
        WorkbookLoadError: If the file is empty, too small or too large, not
            an OOXML workbook, password-protected, or otherwise unreadable.

    Example:
        >>> with open("diaper_change.xlsx", "rb") as f:
        ...     wb = load_workbook_safe(f.read())
        >>> wb.sheetnames
        ['換片記錄']
    """
    if not file_bytes:
        raise WorkbookLoadError(
            message="Empty file",
            detail="The uploaded file contains no data",
        )

    if len(file_bytes) < MIN_WORKBOOK_BYTES:
        raise WorkbookLoadError(
            message="Invalid file",
            detail=f"File too small ({len(file_bytes)} bytes) to be a valid Excel workbook",
        )

    if max_bytes is not None and len(file_bytes) > max_bytes:
        raise WorkbookTooLarge(
            message="File too large",
            detail=f"File is {len(file_bytes)} bytes, limit is {max_bytes} bytes",
        )

    try:
        return openpyxl.load_workbook(
            io.BytesIO(file_bytes),
            data_only=False,
            read_only=False,
        )

    except zipfile.BadZipFile as e:
        # xlsx files are ZIP archives; legacy .xls files land here too
        raise WorkbookLoadError(
            message="Invalid file format",
            detail="File is not a valid Excel workbook (corrupt or not .xlsx format)",
        ) from e

    except InvalidFileException as e:
        error_str = str(e).lower()
        if "password" in error_str or "encrypted" in error_str:
            raise WorkbookLoadError(
                message="Password-protected file",
                detail="Cannot open password-protected Excel files",
            ) from e
        raise WorkbookLoadError(message="Invalid Excel file", detail=str(e)) from e

    except MemoryError as e:
        raise WorkbookLoadError(
            message="File too large",
            detail="The file is too large to process",
        ) from e

    except KeyError as e:
        # Valid ZIP without the parts an Excel package needs
        raise WorkbookLoadError(
            message="Invalid Excel file",
            detail="File is a valid ZIP archive but not a valid Excel workbook (missing required components)",
        ) from e

    except Exception as e:
        raise WorkbookLoadError(
            message="Failed to load workbook",
            detail=f"Unexpected error ({type(e).__name__}): {e}",
        ) from e
