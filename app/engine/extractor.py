"""Template Extractor.

Scans the worksheets of an uploaded template over the form's grid bounds and
captures geometry, merges, print setup, page breaks, images and the sparse
cell style map into a ``TemplateDescriptor``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from openpyxl.utils.cell import column_index_from_string, get_column_letter
from openpyxl.utils.units import DEFAULT_COLUMN_WIDTH as OPENPYXL_COLUMN_WIDTH

from app.core.records import DocumentType
from app.engine.cells import capture_cell
from app.engine.descriptor import (
    CellStyle,
    GridBounds,
    ImageRef,
    PageBreaks,
    PageMargins,
    PrintSetup,
    RangeRef,
    SheetTemplate,
    TemplateDescriptor,
)
from app.engine.errors import MalformedTemplate, UnsupportedCellShape
from app.engine.forms import (
    DEFAULT_COLUMN_WIDTH,
    DEFAULT_ROW_HEIGHT,
    FONT_SUBSTITUTIONS,
    FormSpec,
    get_form,
)
from app.engine.merged_cells import collect_merged_ranges
from app.engine.workbook import load_workbook_safe

if TYPE_CHECKING:
    from openpyxl import Workbook
    from openpyxl.worksheet.worksheet import Worksheet

logger = logging.getLogger(__name__)


def extract(
    file_bytes: bytes,
    doc_type: DocumentType | str,
    grid_bounds: GridBounds | None = None,
    max_bytes: int | None = None,
) -> TemplateDescriptor:
    """Load an uploaded template and capture its structure.

    Args:
        file_bytes: Raw .xlsx bytes.
        doc_type: Document type the template is uploaded for.
        grid_bounds: Explicit bounds overriding the type's bounds policy.
        max_bytes: Optional upload size cap.

    Returns:
        The immutable descriptor for the template.

    Raises:
        WorkbookLoadError: If the bytes are not a readable workbook.
        MalformedTemplate: If the workbook has the wrong number of sheets.
    """
    wb = load_workbook_safe(file_bytes, max_bytes=max_bytes)
    return extract_workbook(wb, doc_type, grid_bounds)


def extract_workbook(
    wb: "Workbook",
    doc_type: DocumentType | str,
    grid_bounds: GridBounds | None = None,
) -> TemplateDescriptor:
    """Capture an already loaded workbook. See ``extract``."""
    form = get_form(doc_type)
    worksheets = wb.worksheets
    if form.required_sheets > 1 and len(worksheets) != form.required_sheets:
        raise MalformedTemplate(expected_sheets=form.required_sheets, found_sheets=len(worksheets))
    if not worksheets:
        raise MalformedTemplate(expected_sheets=form.required_sheets, found_sheets=0)

    sheets = tuple(
        extract_sheet(ws, form, index=index, grid_bounds=grid_bounds)
        for index, ws in enumerate(worksheets[: form.required_sheets])
    )
    descriptor = TemplateDescriptor(doc_type=form.doc_type, sheets=sheets)
    logger.info(
        "Extracted template doc_type=%s sheets=%d cells=%d merges=%d images=%d",
        form.doc_type.value,
        len(sheets),
        sum(len(s.cell_styles) for s in sheets),
        sum(len(s.merged_ranges) for s in sheets),
        sum(len(s.images) for s in sheets),
    )
    return descriptor


def extract_sheet(
    ws: "Worksheet",
    form: FormSpec,
    index: int = 0,
    grid_bounds: GridBounds | None = None,
) -> SheetTemplate:
    """Capture one worksheet within the form's bounds."""
    bounds = grid_bounds or form.resolve_bounds(ws.max_column, ws.max_row)
    return SheetTemplate(
        index=index,
        title=ws.title,
        bounds=bounds,
        column_widths=read_column_widths(ws, bounds.cols),
        row_heights=read_row_heights(ws, bounds.rows),
        merged_ranges=collect_merged_ranges(ws, bounds),
        cell_styles=read_cell_styles(ws, bounds),
        print_setup=read_print_setup(ws),
        page_breaks=read_page_breaks(ws),
        images=read_images(ws, bounds),
    )


def read_column_widths(ws: "Worksheet", cols: int) -> tuple[float, ...]:
    """Widths for columns 1..cols, defaulting where the sheet sets none.

    Hidden columns are captured with width 0.
    """
    explicit: dict[int, float] = {}
    # A single <col> element may span several columns via min/max.
    for dim in ws.column_dimensions.values():
        if dim.hidden:
            width = 0.0
        elif dim.width is None or dim.width == OPENPYXL_COLUMN_WIDTH:
            # openpyxl substitutes its own default for a <col> without a width
            continue
        else:
            width = dim.width
        first = dim.min or column_index_from_string(dim.index)
        last = dim.max or first
        for col in range(first, last + 1):
            explicit[col] = width
    return tuple(round(explicit.get(col, DEFAULT_COLUMN_WIDTH), 2) for col in range(1, cols + 1))


def read_row_heights(ws: "Worksheet", rows: int) -> tuple[float, ...]:
    """Heights for rows 1..rows, defaulting where the sheet sets none.

    Hidden rows are captured with height 0.
    """
    heights: list[float] = []
    for row in range(1, rows + 1):
        height = None
        if row in ws.row_dimensions:
            dim = ws.row_dimensions[row]
            height = 0.0 if dim.hidden else dim.height
        heights.append(round(height if height is not None else DEFAULT_ROW_HEIGHT, 2))
    return tuple(heights)


def read_cell_styles(ws: "Worksheet", bounds: GridBounds) -> dict[str, CellStyle]:
    """Build the sparse cell map.

    Only cells stored in the sheet are visited, so work scales with used
    cells rather than grid area.
    """
    styles: dict[str, CellStyle] = {}
    for (row, col), cell in sorted(ws._cells.items()):
        if not bounds.contains(col, row):
            continue
        try:
            style = capture_cell(cell, FONT_SUBSTITUTIONS)
        except (ValueError, TypeError) as e:
            logger.warning("Skipping cell %s on %s: %s", cell.coordinate, ws.title, e)
            continue
        if style is not None:
            styles[f"{get_column_letter(col)}{row}"] = style
    return styles


def read_print_setup(ws: "Worksheet") -> PrintSetup:
    page_setup = ws.page_setup
    setup_pr = ws.sheet_properties.pageSetUpPr
    margins = ws.page_margins
    return PrintSetup(
        orientation=page_setup.orientation,
        paper_size=_as_int(page_setup.paperSize),
        scale=_as_int(page_setup.scale),
        fit_to_page=bool(setup_pr is not None and setup_pr.fitToPage),
        fit_to_width=_as_int(page_setup.fitToWidth),
        fit_to_height=_as_int(page_setup.fitToHeight),
        horizontal_centered=bool(ws.print_options.horizontalCentered),
        vertical_centered=bool(ws.print_options.verticalCentered),
        margins=PageMargins(
            left=margins.left,
            right=margins.right,
            top=margins.top,
            bottom=margins.bottom,
            header=margins.header,
            footer=margins.footer,
        ),
        print_area=_local_reference(ws.print_area),
        print_title_rows=_local_reference(ws.print_title_rows),
    )


def read_page_breaks(ws: "Worksheet") -> PageBreaks:
    """Breaks as stored in the template.

    Most forms discard these at synthesis time in favour of canonical breaks.
    """
    return PageBreaks(
        rows=tuple(brk.id for brk in ws.row_breaks.brk),
        cols=tuple(brk.id for brk in ws.col_breaks.brk),
    )


def read_images(ws: "Worksheet", bounds: GridBounds) -> tuple[ImageRef, ...]:
    """Copy every embedded picture with its anchor.

    Pictures that cannot be read or whose anchor is not cell-based are
    logged and skipped.
    """
    images: list[ImageRef] = []
    for position, image in enumerate(ws._images):
        try:
            images.append(_capture_image(image, bounds))
        except (UnsupportedCellShape, ValueError, OSError, AttributeError) as e:
            logger.warning("Skipping image %d on %s: %s", position, ws.title, e)
    return tuple(images)


def _capture_image(image, bounds: GridBounds) -> ImageRef:
    anchor = _anchor_range(image.anchor)
    if not anchor.within(bounds):
        raise UnsupportedCellShape("Image outside form", f"anchored at {anchor.coord}")
    return ImageRef(
        data=image._data(),
        format=(image.format or "png").lower(),
        anchor=anchor,
        width=image.width,
        height=image.height,
    )


def _anchor_range(anchor) -> RangeRef:
    if isinstance(anchor, str):
        return RangeRef.from_coord(anchor)
    start = getattr(anchor, "_from", None)
    if start is None:
        raise UnsupportedCellShape("Unsupported image anchor", type(anchor).__name__)
    # Anchor markers are 0-indexed.
    end = getattr(anchor, "to", None) or start
    return RangeRef(
        start_col=start.col + 1,
        start_row=start.row + 1,
        end_col=end.col + 1,
        end_row=end.row + 1,
    )


def _as_int(value: object) -> int | None:
    if value is None or value == "":
        return None
    return int(value)


def _local_reference(reference: str | None) -> str | None:
    """Strip sheet qualifiers and absolute markers: ``'S'!$A$1:$B$2`` -> ``A1:B2``."""
    if not reference:
        return None
    parts = []
    for part in str(reference).split(","):
        part = part.rsplit("!", 1)[-1]
        parts.append(part.replace("$", "").strip())
    return ",".join(parts)
