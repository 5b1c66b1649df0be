"""Helpers shared by the field mappers: cell writes and derived values."""

from __future__ import annotations

import calendar
import re
from copy import copy
from datetime import date
from typing import TYPE_CHECKING

from openpyxl.styles import Font
from openpyxl.utils.cell import coordinate_from_string, column_index_from_string

from app.engine.merged_cells import writable_cell

if TYPE_CHECKING:
    from openpyxl.cell.cell import Cell
    from openpyxl.worksheet.worksheet import Worksheet

_YEAR_MONTH = re.compile(r"^(\d{4})年(\d{2})月$")


def write(ws: "Worksheet", address: str, value: object, font_name: str | None = None) -> "Cell":
    """Write ``value`` at ``address``, redirecting to the top-left cell of a merge.

    Args:
        ws: Target worksheet.
        address: A1-style address.
        value: Value to store.
        font_name: Optional font family to set while keeping the cell's other
            font attributes.

    Returns:
        The cell that was written.
    """
    col_letter, row = coordinate_from_string(address)
    cell = writable_cell(ws, row, column_index_from_string(col_letter))
    cell.value = value
    if font_name:
        set_font_name(cell, font_name)
    return cell


def set_font_name(cell: "Cell", font_name: str) -> None:
    font = copy(cell.font) if cell.has_style else Font()
    font.name = font_name
    cell.font = font


def shift_address(address: str, row_offset: int) -> str:
    """Move an A1 address down by ``row_offset`` rows."""
    col_letter, row = coordinate_from_string(address)
    return f"{col_letter}{row + row_offset}"


def age_on(birth_date: date | None, today: date) -> int | None:
    """Whole years between ``birth_date`` and ``today``."""
    if birth_date is None:
        return None
    age = today.year - birth_date.year
    if (today.month, today.day) < (birth_date.month, birth_date.day):
        age -= 1
    return age


def age_label(birth_date: date | None, today: date) -> str:
    age = age_on(birth_date, today)
    return f"{age}歲" if age is not None else ""


def tw_date(value: date | None) -> str:
    """Taiwan locale short date, e.g. ``2024/1/5``."""
    if value is None:
        return ""
    return f"{value.year}/{value.month}/{value.day}"


def zh_date(value: date) -> str:
    """``2024年01月05日``"""
    return f"{value.year}年{value.month:02d}月{value.day:02d}日"


def add_months(value: date, months: int) -> date:
    """Shift a date by whole months, clamping to the last day of the target month."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def split_year_month(year_month: str) -> tuple[str, str]:
    """``"2024年01月"`` -> ``("2024年", "01月")``.

    Raises:
        ValueError: If the text is not in ``YYYY年MM月`` form.
    """
    match = _YEAR_MONTH.match(year_month)
    if not match:
        raise ValueError(f"Expected 'YYYY年MM月', got {year_month!r}")
    return f"{match.group(1)}年", f"{match.group(2)}月"
