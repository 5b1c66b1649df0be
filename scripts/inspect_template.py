#!/usr/bin/env python3
"""Print what the extractor captures from a template workbook.

Usage:
    python scripts/inspect_template.py 換片記錄.xlsx --doc-type diaper-change
    python scripts/inspect_template.py checkup.xlsx --doc-type annual-checkup --json > descriptor.json
    python scripts/inspect_template.py consent.xlsx --doc-type restraint-consent --replay blank.xlsx
"""

import argparse
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Optional

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from app.core.models import ExportOptions
from app.core.records import DocumentType
from app.engine.emitter import emit
from app.engine.errors import TemplateEngineError
from app.engine.extractor import extract
from app.engine.synthesizer import DocumentSynthesizer
from app.mappers.registry import get_mapper


def print_summary(descriptor) -> None:
    print("=" * 60)
    print(f"Document type: {descriptor.doc_type.value}")
    print("=" * 60)
    for sheet in descriptor.sheets:
        print(f"\nSheet {sheet.index + 1}: {sheet.title!r}")
        print(f"  Bounds:        {sheet.bounds.cols} cols x {sheet.bounds.rows} rows")
        print(f"  Styled cells:  {len(sheet.cell_styles)}")
        print(f"  Merges:        {len(sheet.merged_ranges)}")
        print(f"  Images:        {len(sheet.images)}")
        print(f"  Page breaks:   rows={list(sheet.page_breaks.rows)} cols={list(sheet.page_breaks.cols)}")
        setup = sheet.print_setup
        print(f"  Print setup:   {setup.orientation or '-'} paper={setup.paper_size} area={setup.print_area or '-'}")

        values = [(address, style.value) for address, style in sheet.cell_styles.items() if style.value is not None]
        if values:
            print("  Values:")
            for address, value in values[:20]:
                text = str(value).replace("\n", "\\n")
                print(f"    {address:>6}: {text[:60]}")
            if len(values) > 20:
                print(f"    ... {len(values) - 20} more")


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Inspect the structure captured from a form template.")
    p.add_argument("path", type=str, help="Template workbook (.xlsx).")
    p.add_argument(
        "--doc-type",
        required=True,
        choices=[t.value for t in DocumentType],
        help="Document type the template is for.",
    )
    p.add_argument("--json", action="store_true", help="Print the full descriptor as JSON.")
    p.add_argument(
        "--replay",
        type=str,
        default=None,
        help="Write the template replayed without records to this path.",
    )
    return p


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)
    path = Path(args.path)
    if not path.is_file():
        print(f"ERROR: file not found: {path}", file=sys.stderr)
        return 2

    try:
        descriptor = extract(path.read_bytes(), args.doc_type)
    except TemplateEngineError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(descriptor.model_dump_json(indent=2))
    else:
        print_summary(descriptor)

    if args.replay:
        workbook = DocumentSynthesizer().synthesize(descriptor, [], get_mapper(args.doc_type), ExportOptions())
        Path(args.replay).write_bytes(emit(workbook))
        print(f"\nReplayed template written to: {args.replay}", file=sys.stderr)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
