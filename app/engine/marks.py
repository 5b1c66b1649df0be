"""Conditional marks written by field mappers: checkbox glyphs and struck labels."""

from __future__ import annotations

from collections.abc import Sequence

from openpyxl.cell.rich_text import CellRichText, TextBlock
from openpyxl.cell.text import InlineFont

CHECKED = "☑"
UNCHECKED = "☐"


def checkbox(value: object) -> str:
    """Render a boolean as a checkbox glyph."""
    return CHECKED if value else UNCHECKED


def fan_out(options: Sequence[str], cells: Sequence[str], selected: str | None) -> dict[str, str]:
    """Map one enum value onto a row of checkbox cells.

    The cell paired with ``selected`` gets the checked glyph, every other cell
    the unchecked one. An unknown or missing value leaves all cells unchecked.

    Raises:
        ValueError: If ``options`` and ``cells`` differ in length.
    """
    if len(options) != len(cells):
        raise ValueError(f"{len(options)} options for {len(cells)} cells")
    return {cell: checkbox(option == selected) for option, cell in zip(options, cells)}


def strike_fragment(
    label: str,
    fragment: str,
    font_name: str | None = None,
) -> CellRichText | str:
    """Strike the first occurrence of ``fragment`` inside ``label``.

    Text around the fragment keeps the cell's base style. When the fragment is
    empty or not present the plain label is returned unchanged.

    Example:
        >>> rich = strike_fragment("有 / 無", "無")
        >>> [isinstance(part, str) for part in rich]
        [True, False]
    """
    if not fragment:
        return label
    start = label.find(fragment)
    if start < 0:
        return label

    before = label[:start]
    after = label[start + len(fragment):]
    parts: list[str | TextBlock] = []
    if before:
        parts.append(_run(before, font_name))
    parts.append(TextBlock(InlineFont(rFont=font_name, strike=True), fragment))
    if after:
        parts.append(_run(after, font_name))
    return CellRichText(parts)


def _run(text: str, font_name: str | None) -> str | TextBlock:
    if font_name is None:
        return text
    return TextBlock(InlineFont(rFont=font_name), text)


def bold_heading(heading: str, body: str, font_name: str | None = None) -> CellRichText:
    """Bold first line followed by a plain body on the next line."""
    return CellRichText(
        [
            TextBlock(InlineFont(rFont=font_name, b=True), heading),
            TextBlock(InlineFont(rFont=font_name), "\n" + body),
        ]
    )
