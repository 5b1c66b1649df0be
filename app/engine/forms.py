"""Per-document-type contracts: grid bounds, canonical page breaks, print setup.

These values are fixed by the printed forms. They are not inferred from the
uploaded template.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from app.core.records import DocumentType
from app.engine.descriptor import GridBounds, PageBreaks, PageMargins, PrintSetup

BoundsPolicy = Literal["fixed", "at_least", "declared"]

DEFAULT_COLUMN_WIDTH = 8.43
DEFAULT_ROW_HEIGHT = 15.0
FALLBACK_BOUNDS = GridBounds(cols=50, rows=100)

# Excel paper size code for A4.
PAPER_A4 = 9

# Emoji-range fonts that many printers lack.
FONT_SUBSTITUTIONS = {
    "Segoe UI Symbol": "Arial Unicode MS",
    "Segoe UI Emoji": "Arial Unicode MS",
}


@dataclass(frozen=True)
class FormSpec:
    """Contract of one document type.

    Attributes:
        doc_type: Document type this contract applies to.
        label: Chinese form name used in record names and filenames.
        bounds: Grid ceiling (or floor, for ``at_least``).
        bounds_policy: How ``bounds`` combines with the sheet's declared dimension.
        required_sheets: Exact worksheet count the template must have.
        canonical_breaks: Breaks installed on every synthesized sheet, or None
            to keep the template's own breaks.
        print_setup: Print setup replacing the template's, or None to keep it.
        print_title_rows: Repeated print title rows added to the template's setup.
        base_border: Paint a thin black grid over the whole bounds before
            replaying template styles.
    """

    doc_type: DocumentType
    label: str
    bounds: GridBounds
    bounds_policy: BoundsPolicy = "fixed"
    required_sheets: int = 1
    canonical_breaks: PageBreaks | None = field(default_factory=PageBreaks)
    print_setup: PrintSetup | None = None
    print_title_rows: str | None = None
    base_border: bool = False

    def __post_init__(self) -> None:
        # Excel ignores manual breaks while Fit To scaling is on.
        breaks = self.canonical_breaks
        if self.print_setup is not None and self.print_setup.fit_to_page and breaks and (breaks.rows or breaks.cols):
            raise ValueError(f"{self.doc_type.value}: fit_to_page would override the canonical page breaks")

    def resolve_bounds(self, max_column: int, max_row: int) -> GridBounds:
        """Return the extraction bounds for a sheet with the given declared dimension."""
        if self.bounds_policy == "fixed":
            return self.bounds
        if self.bounds_policy == "at_least":
            return GridBounds(
                cols=max(max_column, self.bounds.cols),
                rows=max(max_row, self.bounds.rows),
            )
        if max_column > 1 or max_row > 1:
            return GridBounds(cols=max_column, rows=max_row)
        return self.bounds


FORMS: dict[DocumentType, FormSpec] = {
    DocumentType.DIAPER_CHANGE: FormSpec(
        doc_type=DocumentType.DIAPER_CHANGE,
        label="換片記錄",
        bounds=GridBounds(cols=31, rows=140),
        canonical_breaks=PageBreaks(rows=(35, 70, 105)),
        print_setup=PrintSetup(
            orientation="landscape",
            paper_size=PAPER_A4,
            fit_to_page=False,
            fit_to_width=1,
            fit_to_height=0,
            margins=PageMargins.uniform(0),
            print_area="A1:AE140",
        ),
    ),
    DocumentType.PERSONAL_HYGIENE: FormSpec(
        doc_type=DocumentType.PERSONAL_HYGIENE,
        label="個人衛生記錄",
        bounds=GridBounds(cols=38, rows=40),
        bounds_policy="at_least",
        canonical_breaks=PageBreaks(cols=(19,)),
        print_setup=PrintSetup(
            orientation="portrait",
            paper_size=PAPER_A4,
            scale=82,
            fit_to_width=0,
            fit_to_height=0,
            horizontal_centered=True,
            vertical_centered=True,
            margins=PageMargins.uniform(0),
            print_area="A1:AL40",
        ),
    ),
    DocumentType.RESTRAINT_CONSENT: FormSpec(
        doc_type=DocumentType.RESTRAINT_CONSENT,
        label="約束物品同意書",
        bounds=GridBounds(cols=24, rows=110),
        canonical_breaks=PageBreaks(rows=(49,)),
        print_setup=PrintSetup(
            orientation="portrait",
            paper_size=PAPER_A4,
            scale=100,
            fit_to_page=False,
            fit_to_width=1,
            fit_to_height=0,
            margins=PageMargins.uniform(0.3),
            print_area="A1:X110",
        ),
    ),
    DocumentType.RESTRAINT_OBSERVATION: FormSpec(
        doc_type=DocumentType.RESTRAINT_OBSERVATION,
        label="約束物品觀察表",
        bounds=GridBounds(cols=38, rows=108),
        canonical_breaks=PageBreaks(rows=(54,), cols=(19,)),
        print_setup=PrintSetup(
            orientation="portrait",
            paper_size=PAPER_A4,
            fit_to_page=False,
            fit_to_width=2,
            fit_to_height=0,
            margins=PageMargins.uniform(0.3),
            print_area="A1:AL108",
        ),
        base_border=True,
    ),
    DocumentType.ANNUAL_CHECKUP: FormSpec(
        doc_type=DocumentType.ANNUAL_CHECKUP,
        label="安老院住客體格檢驗報告書",
        bounds=FALLBACK_BOUNDS,
        bounds_policy="declared",
        required_sheets=5,
    ),
    DocumentType.PERSONAL_MEDICATION_LIST: FormSpec(
        doc_type=DocumentType.PERSONAL_MEDICATION_LIST,
        label="個人藥物記錄",
        bounds=GridBounds(cols=9, rows=8),
        print_title_rows="1:7",
    ),
    DocumentType.BED_LAYOUT: FormSpec(
        doc_type=DocumentType.BED_LAYOUT,
        label="床位表",
        bounds=FALLBACK_BOUNDS,
        bounds_policy="declared",
        canonical_breaks=None,
    ),
}


def get_form(doc_type: DocumentType | str) -> FormSpec:
    """Look up the contract for a document type.

    Raises:
        ValueError: If the document type is unknown.
    """
    return FORMS[DocumentType(doc_type)]
