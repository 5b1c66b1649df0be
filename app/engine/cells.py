"""Cell Model conversions between openpyxl objects and descriptor specs.

Capture functions read an openpyxl cell into a sparse ``CellStyle``; apply
functions write a ``CellStyle`` back onto a cell of a new worksheet.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time
from typing import TYPE_CHECKING

from openpyxl.styles import Alignment, Border, Color, Font, PatternFill, Side
from openpyxl.styles.fills import GradientFill

from app.engine.descriptor import (
    AlignmentSpec,
    BorderSpec,
    CellStyle,
    ColorSpec,
    FillSpec,
    FontSpec,
    SideSpec,
    ValueKind,
)
from app.engine.errors import UnsupportedCellShape

if TYPE_CHECKING:
    from openpyxl.cell.cell import Cell

logger = logging.getLogger(__name__)


# Colors

def color_to_spec(color: Color | None) -> ColorSpec | None:
    if color is None:
        return None
    if color.type == "rgb":
        return ColorSpec(rgb=color.rgb, tint=color.tint or 0.0)
    if color.type == "theme":
        return ColorSpec(theme=color.theme, tint=color.tint or 0.0)
    if color.type == "indexed":
        return ColorSpec(indexed=color.indexed, tint=color.tint or 0.0)
    # "auto" colors carry no value to replay.
    return None


def spec_to_color(spec: ColorSpec | None) -> Color | None:
    if spec is None:
        return None
    if spec.rgb is not None:
        return Color(rgb=spec.rgb, tint=spec.tint)
    if spec.theme is not None:
        return Color(theme=spec.theme, tint=spec.tint)
    if spec.indexed is not None:
        return Color(indexed=spec.indexed, tint=spec.tint)
    return None


# Fonts

def font_to_spec(font: Font, substitutions: dict[str, str] | None = None) -> FontSpec:
    name = font.name
    if substitutions and name in substitutions:
        name = substitutions[name]
    return FontSpec(
        name=name,
        size=float(font.sz) if font.sz is not None else None,
        bold=bool(font.b),
        italic=bool(font.i),
        underline=font.u,
        strike=bool(font.strike),
        vert_align=font.vertAlign,
        color=color_to_spec(font.color),
    )


def spec_to_font(spec: FontSpec, name_override: str | None = None) -> Font:
    return Font(
        name=name_override or spec.name,
        size=spec.size,
        bold=spec.bold,
        italic=spec.italic,
        underline=spec.underline,
        strike=spec.strike,
        vertAlign=spec.vert_align,
        color=spec_to_color(spec.color),
    )


# Alignment

def alignment_to_spec(alignment: Alignment) -> AlignmentSpec:
    return AlignmentSpec(
        horizontal=alignment.horizontal,
        vertical=alignment.vertical,
        wrap_text=alignment.wrap_text,
        shrink_to_fit=alignment.shrink_to_fit,
        indent=alignment.indent or 0,
        text_rotation=alignment.text_rotation or 0,
    )


def spec_to_alignment(spec: AlignmentSpec) -> Alignment:
    return Alignment(
        horizontal=spec.horizontal,
        vertical=spec.vertical,
        wrap_text=spec.wrap_text,
        shrink_to_fit=spec.shrink_to_fit,
        indent=spec.indent,
        text_rotation=spec.text_rotation,
    )


# Borders

def _side_to_spec(side: Side | None) -> SideSpec | None:
    if side is None or side.style is None:
        return None
    return SideSpec(style=side.style, color=color_to_spec(side.color))


def _spec_to_side(spec: SideSpec | None) -> Side:
    if spec is None:
        return Side()
    return Side(style=spec.style, color=spec_to_color(spec.color))


def border_to_spec(border: Border) -> BorderSpec:
    return BorderSpec(
        left=_side_to_spec(border.left),
        right=_side_to_spec(border.right),
        top=_side_to_spec(border.top),
        bottom=_side_to_spec(border.bottom),
        diagonal=_side_to_spec(border.diagonal),
        diagonal_up=bool(border.diagonalUp),
        diagonal_down=bool(border.diagonalDown),
    )


def spec_to_border(spec: BorderSpec) -> Border:
    return Border(
        left=_spec_to_side(spec.left),
        right=_spec_to_side(spec.right),
        top=_spec_to_side(spec.top),
        bottom=_spec_to_side(spec.bottom),
        diagonal=_spec_to_side(spec.diagonal),
        diagonalUp=spec.diagonal_up,
        diagonalDown=spec.diagonal_down,
    )


# Fills

def fill_to_spec(fill: PatternFill | GradientFill) -> FillSpec:
    """Convert a cell fill.

    Raises:
        UnsupportedCellShape: For gradient fills, which the cell model does not carry.
    """
    # cell.fill is a StyleProxy, so match on the element tag rather than the class
    if getattr(fill, "tagname", None) == GradientFill.tagname:
        raise UnsupportedCellShape("Unsupported fill", "gradient fills are not captured")
    return FillSpec(
        pattern_type=fill.fill_type,
        fg_color=color_to_spec(fill.fgColor),
        bg_color=color_to_spec(fill.bgColor),
    )


def spec_to_fill(spec: FillSpec) -> PatternFill:
    kwargs = {}
    fg = spec_to_color(spec.fg_color)
    bg = spec_to_color(spec.bg_color)
    if fg is not None:
        kwargs["fgColor"] = fg
    if bg is not None:
        kwargs["bgColor"] = bg
    return PatternFill(fill_type=spec.pattern_type, **kwargs)


# Values

def encode_value(value: object) -> tuple[str | bool | int | float | None, ValueKind | None]:
    """Turn a cell value into a JSON-friendly value and its kind."""
    if value is None:
        return None, None
    if isinstance(value, bool):
        return value, "bool"
    if isinstance(value, (int, float)):
        return value, "number"
    if isinstance(value, datetime):
        return value.isoformat(), "datetime"
    if isinstance(value, date):
        return value.isoformat(), "date"
    if isinstance(value, time):
        return value.isoformat(), "time"
    text = str(value)
    if not text:
        return None, None
    if text.startswith("="):
        return text, "formula"
    return text, "text"


def decode_value(value: str | bool | int | float | None, kind: ValueKind | None) -> object:
    if value is None:
        return None
    if kind == "datetime":
        return datetime.fromisoformat(str(value))
    if kind == "date":
        return date.fromisoformat(str(value))
    if kind == "time":
        return time.fromisoformat(str(value))
    return value


# Whole cells

def capture_cell(cell: "Cell", substitutions: dict[str, str] | None = None) -> CellStyle | None:
    """Capture the non-default parts of a cell.

    Style ids index the workbook's shared style tables, where id 0 is the
    workbook default. Only components with a non-zero id are recorded.

    Args:
        cell: Source cell.
        substitutions: Font names to replace while capturing.

    Returns:
        The captured style, or None when the cell has neither a value nor a
        non-default style component.
    """
    value, kind = encode_value(cell.value)
    font = alignment = border = fill = number_format = None

    if cell.has_style:
        ids = cell._style
        if ids.fontId:
            font = font_to_spec(cell.font, substitutions)
        if ids.alignmentId:
            alignment = alignment_to_spec(cell.alignment)
        if ids.borderId:
            border = border_to_spec(cell.border)
        if ids.fillId:
            try:
                fill = fill_to_spec(cell.fill)
            except UnsupportedCellShape as e:
                logger.warning("Skipping fill of %s: %s", cell.coordinate, e)
        if ids.numFmtId:
            number_format = cell.number_format

    style = CellStyle(
        value=value,
        value_kind=kind,
        font=font,
        alignment=alignment,
        border=border,
        fill=fill,
        number_format=number_format,
    )
    return None if style.is_empty() else style


def apply_cell_style(cell: "Cell", style: CellStyle, font_name: str | None = None) -> None:
    """Write a captured style and value onto a cell.

    Args:
        cell: Target cell.
        style: Captured style to replay.
        font_name: Optional font family forced onto the replayed font.
    """
    if style.value is not None:
        cell.value = decode_value(style.value, style.value_kind)
    if style.font is not None:
        cell.font = spec_to_font(style.font, name_override=font_name)
    elif font_name:
        cell.font = Font(name=font_name)
    if style.alignment is not None:
        cell.alignment = spec_to_alignment(style.alignment)
    if style.border is not None:
        cell.border = spec_to_border(style.border)
    if style.fill is not None:
        cell.fill = spec_to_fill(style.fill)
    if style.number_format is not None:
        cell.number_format = style.number_format
