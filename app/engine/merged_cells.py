"""Merged cell handling utilities.

Collects merge ranges from a template sheet, re-applies them on synthesized
sheets, and resolves writes that land inside a merged region.

openpyxl only stores a value in the top-left cell of a merged range; the other
cells are read-only ``MergedCell`` objects. Writers must therefore target the
top-left cell of any region an address falls into.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from app.engine.descriptor import GridBounds, RangeRef

if TYPE_CHECKING:
    from openpyxl.cell.cell import Cell
    from openpyxl.worksheet.worksheet import Worksheet

logger = logging.getLogger(__name__)


def collect_merged_ranges(ws: "Worksheet", bounds: GridBounds) -> tuple[RangeRef, ...]:
    """Read a sheet's merges, keeping only ranges fully inside the grid bounds.

    Args:
        ws: Source worksheet
        bounds: Grid bounds of the form

    Returns:
        Merge ranges ordered by top-left cell. Ranges extending past the bounds belong to
        a print area outside the form and are dropped.
    """
    ranges: list[RangeRef] = []
    for merged_range in ws.merged_cells.ranges:
        min_col, min_row, max_col, max_row = merged_range.bounds
        ref = RangeRef(start_col=min_col, start_row=min_row, end_col=max_col, end_row=max_row)
        if not ref.within(bounds):
            logger.debug("Dropping merge %s outside %dx%d bounds", ref.coord, bounds.cols, bounds.rows)
            continue
        ranges.append(ref)
    ranges.sort(key=lambda r: (r.start_row, r.start_col))
    return tuple(ranges)


def apply_merged_ranges(ws: "Worksheet", ranges: Iterable[RangeRef]) -> int:
    """Merge each range on the worksheet.

    A range that cannot be merged (for example, one overlapping a range already
    merged) is logged and skipped; the remaining ranges are still applied.

    Returns:
        Number of ranges merged.
    """
    merged = 0
    for ref in ranges:
        try:
            ws.merge_cells(
                start_row=ref.start_row,
                start_column=ref.start_col,
                end_row=ref.end_row,
                end_column=ref.end_col,
            )
            merged += 1
        except (ValueError, KeyError, AttributeError) as e:
            logger.warning("Failed to merge %s on %s: %s", ref.coord, ws.title, e)
    return merged


def ranges_in_rows(ranges: Iterable[RangeRef], first_row: int, last_row: int) -> list[RangeRef]:
    """Return the ranges lying entirely within ``first_row``..``last_row``."""
    return [r for r in ranges if r.start_row >= first_row and r.end_row <= last_row]


def _cell_in_range(row: int, column: int, merged_range) -> bool:
    """Check if a cell is within a merged range.

    Args:
        row: Row number (1-indexed)
        column: Column number (1-indexed)
        merged_range: openpyxl MergedCellRange object
    """
    min_col, min_row, max_col, max_row = merged_range.bounds
    return (min_row <= row <= max_row) and (min_col <= column <= max_col)


def get_merged_range_for_cell(ws: "Worksheet", row: int, column: int):
    """Get the merged range that contains a cell, if any.

    Returns:
        MergedCellRange object if cell is merged, None otherwise
    """
    for merged_range in ws.merged_cells.ranges:
        if _cell_in_range(row, column, merged_range):
            return merged_range
    return None


def writable_cell(ws: "Worksheet", row: int, column: int) -> "Cell":
    """Return the cell that holds the value for (row, column).

    For an address inside a merged region this is the region's top-left cell.
    """
    merged_range = get_merged_range_for_cell(ws, row, column)
    if merged_range is not None:
        min_col, min_row, _, _ = merged_range.bounds
        return ws.cell(row=min_row, column=min_col)
    return ws.cell(row=row, column=column)
