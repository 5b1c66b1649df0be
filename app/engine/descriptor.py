"""Serializable capture of a spreadsheet form.

A ``TemplateDescriptor`` is produced once on upload and read on every export.
All models are frozen; a new upload produces a new descriptor.
"""

from __future__ import annotations

import base64
from typing import Literal

from openpyxl.utils.cell import get_column_letter, range_boundaries
from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from app.core.records import DocumentType

ValueKind = Literal["text", "number", "bool", "formula", "datetime", "date", "time"]


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class GridBounds(_Frozen):
    """Column/row ceiling of a form, 1-indexed and inclusive."""

    cols: int = Field(ge=1)
    rows: int = Field(ge=1)

    def contains(self, col: int, row: int) -> bool:
        return 1 <= col <= self.cols and 1 <= row <= self.rows


class ColorSpec(_Frozen):
    rgb: str | None = None
    theme: int | None = None
    indexed: int | None = None
    tint: float = 0.0


class FontSpec(_Frozen):
    name: str | None = None
    size: float | None = None
    bold: bool = False
    italic: bool = False
    underline: str | None = None
    strike: bool = False
    vert_align: str | None = None
    color: ColorSpec | None = None


class AlignmentSpec(_Frozen):
    horizontal: str | None = None
    vertical: str | None = None
    wrap_text: bool | None = None
    shrink_to_fit: bool | None = None
    indent: float = 0
    text_rotation: int = 0


class SideSpec(_Frozen):
    style: str | None = None
    color: ColorSpec | None = None


class BorderSpec(_Frozen):
    left: SideSpec | None = None
    right: SideSpec | None = None
    top: SideSpec | None = None
    bottom: SideSpec | None = None
    diagonal: SideSpec | None = None
    diagonal_up: bool = False
    diagonal_down: bool = False


class FillSpec(_Frozen):
    pattern_type: str | None = None
    fg_color: ColorSpec | None = None
    bg_color: ColorSpec | None = None


class CellStyle(_Frozen):
    """Style components and literal value of one cell.

    Components left as ``None`` were the workbook default in the source and are
    not replayed.
    """

    value: str | bool | int | float | None = None
    value_kind: ValueKind | None = None
    font: FontSpec | None = None
    alignment: AlignmentSpec | None = None
    border: BorderSpec | None = None
    fill: FillSpec | None = None
    number_format: str | None = None

    def is_empty(self) -> bool:
        return (
            self.value is None
            and self.font is None
            and self.alignment is None
            and self.border is None
            and self.fill is None
            and self.number_format is None
        )


class RangeRef(_Frozen):
    """Rectangular cell range, 1-indexed and inclusive."""

    start_col: int = Field(ge=1)
    start_row: int = Field(ge=1)
    end_col: int = Field(ge=1)
    end_row: int = Field(ge=1)

    @classmethod
    def from_coord(cls, coord: str) -> "RangeRef":
        """Build a range from an A1-style reference such as ``"A1:C3"`` or ``"B2"``."""
        min_col, min_row, max_col, max_row = range_boundaries(coord)
        if None in (min_col, min_row, max_col, max_row):
            raise ValueError(f"Not a bounded cell range: {coord!r}")
        return cls(start_col=min_col, start_row=min_row, end_col=max_col, end_row=max_row)

    @property
    def coord(self) -> str:
        start = f"{get_column_letter(self.start_col)}{self.start_row}"
        end = f"{get_column_letter(self.end_col)}{self.end_row}"
        return start if start == end else f"{start}:{end}"

    def within(self, bounds: GridBounds) -> bool:
        return bounds.contains(self.start_col, self.start_row) and bounds.contains(
            self.end_col, self.end_row
        )

    def shifted(self, row_offset: int) -> "RangeRef":
        return self.model_copy(
            update={"start_row": self.start_row + row_offset, "end_row": self.end_row + row_offset}
        )


class PageMargins(_Frozen):
    left: float = 0.7
    right: float = 0.7
    top: float = 0.75
    bottom: float = 0.75
    header: float = 0.3
    footer: float = 0.3

    @classmethod
    def uniform(cls, value: float) -> "PageMargins":
        return cls(left=value, right=value, top=value, bottom=value, header=value, footer=value)


class PrintSetup(_Frozen):
    orientation: str | None = None
    paper_size: int | None = None
    scale: int | None = None
    fit_to_page: bool = False
    fit_to_width: int | None = None
    fit_to_height: int | None = None
    horizontal_centered: bool = False
    vertical_centered: bool = False
    margins: PageMargins | None = None
    print_area: str | None = None
    print_title_rows: str | None = None


class PageBreaks(_Frozen):
    rows: tuple[int, ...] = ()
    cols: tuple[int, ...] = ()


class ImageRef(_Frozen):
    """Embedded picture owned by the descriptor.

    ``data`` holds the raw media bytes and serializes as base64.
    """

    data: bytes
    format: str = "png"
    anchor: RangeRef
    width: float | None = None
    height: float | None = None

    @field_validator("data", mode="before")
    @classmethod
    def _decode_data(cls, value: object) -> object:
        if isinstance(value, str):
            return base64.b64decode(value)
        return value

    @field_serializer("data")
    def _encode_data(self, value: bytes) -> str:
        return base64.b64encode(value).decode("ascii")


class SheetTemplate(_Frozen):
    """Structure of one worksheet of a template."""

    index: int = 0
    title: str = ""
    bounds: GridBounds
    column_widths: tuple[float, ...] = ()
    row_heights: tuple[float, ...] = ()
    merged_ranges: tuple[RangeRef, ...] = ()
    cell_styles: dict[str, CellStyle] = Field(default_factory=dict)
    print_setup: PrintSetup = Field(default_factory=PrintSetup)
    page_breaks: PageBreaks = Field(default_factory=PageBreaks)
    images: tuple[ImageRef, ...] = ()

    def value_at(self, address: str) -> object:
        style = self.cell_styles.get(address)
        return style.value if style is not None else None


class TemplateDescriptor(_Frozen):
    """Structural capture of a form, keyed to exactly one document type.

    Single-sheet forms hold one ``SheetTemplate``; the annual checkup holds five.
    """

    doc_type: DocumentType
    sheets: tuple[SheetTemplate, ...] = Field(min_length=1)

    @property
    def primary(self) -> SheetTemplate:
        return self.sheets[0]

    # The single-sheet view used by most forms.
    @property
    def column_widths(self) -> tuple[float, ...]:
        return self.primary.column_widths

    @property
    def row_heights(self) -> tuple[float, ...]:
        return self.primary.row_heights

    @property
    def merged_ranges(self) -> tuple[RangeRef, ...]:
        return self.primary.merged_ranges

    @property
    def cell_styles(self) -> dict[str, CellStyle]:
        return self.primary.cell_styles

    @property
    def print_setup(self) -> PrintSetup:
        return self.primary.print_setup

    @property
    def page_breaks(self) -> PageBreaks:
        return self.primary.page_breaks

    @property
    def images(self) -> tuple[ImageRef, ...]:
        return self.primary.images
