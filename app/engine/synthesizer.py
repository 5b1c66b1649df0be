"""Document Synthesizer.

Builds a new workbook from a ``TemplateDescriptor`` and a list of domain
records: one worksheet (or one group of worksheets, for multi-sheet forms) per
record, with the template replayed and the record's fields written by the
document type's field mapper.
"""

from __future__ import annotations

import io
import logging
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from openpyxl import Workbook
from openpyxl.drawing.image import Image as XLImage
from openpyxl.drawing.spreadsheet_drawing import AnchorMarker, TwoCellAnchor
from openpyxl.styles import Border, Side
from openpyxl.utils.cell import coordinate_from_string, get_column_letter
from openpyxl.worksheet.pagebreak import Break, ColBreak, RowBreak
from openpyxl.worksheet.properties import PageSetupProperties

from app.engine.cells import apply_cell_style, spec_to_border
from app.engine.descriptor import (
    CellStyle,
    ImageRef,
    PageBreaks,
    PrintSetup,
    RangeRef,
    SheetTemplate,
    TemplateDescriptor,
)
from app.engine.forms import FormSpec, get_form
from app.engine.merged_cells import apply_merged_ranges, ranges_in_rows

if TYPE_CHECKING:
    from openpyxl.worksheet.worksheet import Worksheet

    from app.core.models import ExportOptions
    from app.mappers.base import FieldMapper

logger = logging.getLogger(__name__)

SHEET_TITLE_LIMIT = 31
_INVALID_TITLE_CHARS = re.compile(r"[\\*?:/\[\]]")
_THIN_BLACK = Side(style="thin", color="FF000000")


@dataclass
class SynthesizerConfig:
    """Runtime knobs for the synthesizer."""

    sheet_title_limit: int = SHEET_TITLE_LIMIT


class DocumentSynthesizer:
    """Replays a template once per record and lets a field mapper fill it in.

    Usage:
        synthesizer = DocumentSynthesizer()
        wb = synthesizer.synthesize(descriptor, records, get_mapper(doc_type), options)
    """

    def __init__(self, config: SynthesizerConfig | None = None):
        self.config = config or SynthesizerConfig()

    def synthesize(
        self,
        descriptor: TemplateDescriptor,
        records: Sequence[object],
        mapper: "FieldMapper",
        options: "ExportOptions",
    ) -> Workbook:
        """Build the output workbook.

        With no records the template sheets are replayed unfilled, which keeps
        the output a valid workbook.

        Args:
            descriptor: Template to replay.
            records: Domain records, already filtered for eligibility.
            mapper: Field mapper for the descriptor's document type.
            options: Export-call context passed through to the mapper.

        Returns:
            The in-memory workbook, ready for emission.
        """
        form = get_form(descriptor.doc_type)
        wb = Workbook()
        wb.remove(wb.active)

        if not records:
            for template in descriptor.sheets:
                ws = wb.create_sheet(self.sheet_title(wb, template.title or form.label))
                self.replay(ws, template, form)
                self.apply_page_layout(ws, template, form)
            return wb

        for record in records:
            titles = mapper.sheet_titles(record, descriptor)
            for template, title in zip(descriptor.sheets, titles):
                ws = wb.create_sheet(self.sheet_title(wb, title))
                self.replay(ws, template, form)
                mapper.apply(ws, template, record, options)
                self.apply_page_layout(ws, template, form)

        logger.info(
            "Synthesized doc_type=%s records=%d sheets=%d",
            form.doc_type.value,
            len(records),
            len(wb.sheetnames),
        )
        return wb

    def sheet_title(self, wb: Workbook, raw: str) -> str:
        """Make a legal, unique worksheet title within the length limit."""
        limit = self.config.sheet_title_limit
        title = _INVALID_TITLE_CHARS.sub("_", raw).strip() or "Sheet"
        title = title[:limit]
        taken = {name.lower() for name in wb.sheetnames}
        candidate = title
        counter = 2
        while candidate.lower() in taken:
            suffix = f"({counter})"
            candidate = title[: limit - len(suffix)] + suffix
            counter += 1
        return candidate

    def replay(self, ws: "Worksheet", template: SheetTemplate, form: FormSpec) -> None:
        """Write the template's geometry, styles, merges and images onto ``ws``.

        Order: widths, heights, base border, cell styles, merges, images.
        """
        for col, width in enumerate(template.column_widths, start=1):
            dim = ws.column_dimensions[get_column_letter(col)]
            dim.width = width
            if width == 0:
                dim.hidden = True
        for row, height in enumerate(template.row_heights, start=1):
            set_row_height(ws, row, height)

        if form.base_border:
            paint_grid_border(ws, template.bounds.cols, template.bounds.rows)

        for address, style in template.cell_styles.items():
            try:
                apply_cell_style(ws[address], style)
            except (ValueError, TypeError, AttributeError) as e:
                logger.warning("Failed to apply style to %s on %s: %s", address, ws.title, e)

        merge_with_borders(ws, template.merged_ranges, template.cell_styles)

        for image in template.images:
            try:
                draw_image(ws, image)
            except (OSError, ValueError) as e:
                logger.warning("Failed to draw image at %s on %s: %s", image.anchor.coord, ws.title, e)

    def apply_page_layout(self, ws: "Worksheet", template: SheetTemplate, form: FormSpec) -> None:
        """Install print setup and page breaks.

        Template breaks are discarded and the form's canonical set installed,
        unless the form keeps template breaks.
        """
        setup = form.print_setup or template.print_setup
        if form.print_title_rows:
            setup = setup.model_copy(update={"print_title_rows": form.print_title_rows})
        apply_print_setup(ws, setup)

        breaks = template.page_breaks if form.canonical_breaks is None else form.canonical_breaks
        install_page_breaks(ws, breaks)


def merge_with_borders(
    ws: "Worksheet",
    ranges: Iterable[RangeRef],
    styles: dict[str, CellStyle],
    row_offset: int = 0,
) -> None:
    """Merge ranges, then restore captured borders on the covered cells.

    Merging replaces covered cells with ``MergedCell`` objects that only carry
    the top-left cell's outer border.
    """
    ranges = list(ranges)
    apply_merged_ranges(ws, (r.shifted(row_offset) if row_offset else r for r in ranges))
    for ref in ranges:
        for row in range(ref.start_row, ref.end_row + 1):
            for col in range(ref.start_col, ref.end_col + 1):
                if row == ref.start_row and col == ref.start_col:
                    continue
                style = styles.get(f"{get_column_letter(col)}{row}")
                if style is None or style.border is None:
                    continue
                ws.cell(row=row + row_offset, column=col).border = spec_to_border(style.border)


def set_row_height(ws: "Worksheet", row: int, height: float) -> None:
    """Set a row height; a height of 0 marks the row hidden."""
    dim = ws.row_dimensions[row]
    dim.height = height
    if height == 0:
        dim.hidden = True


def copy_row_block(
    ws: "Worksheet",
    template: SheetTemplate,
    first_row: int,
    last_row: int,
    target_row: int,
    font_name: str | None = None,
) -> None:
    """Deep-copy template rows ``first_row``..``last_row`` so they start at ``target_row``.

    Copies values, styles, row heights and the merges lying inside the block.

    Args:
        ws: Worksheet being synthesized.
        template: Template the rows come from.
        first_row: First template row of the block.
        last_row: Last template row of the block.
        target_row: Row the copy starts at.
        font_name: Optional font family forced on every copied cell.
    """
    offset = target_row - first_row
    block_styles: dict[str, CellStyle] = {}
    for address, style in template.cell_styles.items():
        col_letter, row = coordinate_from_string(address)
        if first_row <= row <= last_row:
            block_styles[address] = style
            try:
                apply_cell_style(ws[f"{col_letter}{row + offset}"], style, font_name=font_name)
            except (ValueError, TypeError, AttributeError) as e:
                logger.warning("Failed to copy %s to row %d on %s: %s", address, row + offset, ws.title, e)

    for row in range(first_row, last_row + 1):
        if row <= len(template.row_heights):
            set_row_height(ws, row + offset, template.row_heights[row - 1])

    block_ranges = ranges_in_rows(template.merged_ranges, first_row, last_row)
    merge_with_borders(ws, block_ranges, block_styles, row_offset=offset)


def paint_grid_border(ws: "Worksheet", cols: int, rows: int) -> None:
    """Give every cell in A1..(cols, rows) a thin black border."""
    border = Border(left=_THIN_BLACK, right=_THIN_BLACK, top=_THIN_BLACK, bottom=_THIN_BLACK)
    for row in range(1, rows + 1):
        for col in range(1, cols + 1):
            ws.cell(row=row, column=col).border = border


def draw_image(ws: "Worksheet", image: ImageRef) -> None:
    """Re-create an image from its stored bytes at its anchor."""
    picture = XLImage(io.BytesIO(image.data))
    if image.width:
        picture.width = image.width
    if image.height:
        picture.height = image.height

    anchor = image.anchor
    if anchor.start_col == anchor.end_col and anchor.start_row == anchor.end_row:
        ws.add_image(picture, anchor.coord)
        return

    two_cell = TwoCellAnchor()
    two_cell._from = AnchorMarker(col=anchor.start_col - 1, row=anchor.start_row - 1)
    two_cell.to = AnchorMarker(col=anchor.end_col - 1, row=anchor.end_row - 1)
    picture.anchor = two_cell
    ws.add_image(picture)


def apply_print_setup(ws: "Worksheet", setup: PrintSetup) -> None:
    page_setup = ws.page_setup
    if setup.orientation:
        page_setup.orientation = setup.orientation
    if setup.paper_size is not None:
        page_setup.paperSize = setup.paper_size
    if setup.scale is not None:
        page_setup.scale = setup.scale
    if setup.fit_to_width is not None:
        page_setup.fitToWidth = setup.fit_to_width
    if setup.fit_to_height is not None:
        page_setup.fitToHeight = setup.fit_to_height

    if ws.sheet_properties.pageSetUpPr is None:
        ws.sheet_properties.pageSetUpPr = PageSetupProperties(fitToPage=setup.fit_to_page)
    else:
        ws.sheet_properties.pageSetUpPr.fitToPage = setup.fit_to_page

    ws.print_options.horizontalCentered = setup.horizontal_centered
    ws.print_options.verticalCentered = setup.vertical_centered

    if setup.margins is not None:
        margins = ws.page_margins
        margins.left = setup.margins.left
        margins.right = setup.margins.right
        margins.top = setup.margins.top
        margins.bottom = setup.margins.bottom
        margins.header = setup.margins.header
        margins.footer = setup.margins.footer

    if setup.print_area:
        ws.print_area = setup.print_area.split(",")
    if setup.print_title_rows:
        ws.print_title_rows = setup.print_title_rows


def install_page_breaks(ws: "Worksheet", breaks: PageBreaks) -> None:
    """Replace any existing breaks on ``ws`` with ``breaks``."""
    ws.row_breaks = RowBreak()
    ws.col_breaks = ColBreak()
    for row in breaks.rows:
        ws.row_breaks.append(Break(id=row))
    for col in breaks.cols:
        ws.col_breaks.append(Break(id=col))
