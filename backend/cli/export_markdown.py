from __future__ import annotations

import argparse
import logging
import sys

from backend.mdexport.config import OUTPUT_FILENAME
from backend.mdexport.discovery import ScratchArea, convert_to_pdf, process_input
from backend.mdexport.errors import ExportError
from backend.mdexport.logging_utils import configure_logging


def log(msg: str) -> None:
    print(msg, file=sys.stderr)


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Export markdown files, directories or zip archives to a single PDF.")
    ap.add_argument("inputs", nargs="+", help="Markdown file, directory or .zip archive (repeatable)")
    ap.add_argument("--output-name", type=str, default=OUTPUT_FILENAME, help="File name of the PDF written to the output root")
    ap.add_argument("--verbose", action="store_true", help="Log per-file progress")
    args = ap.parse_args(argv)

    configure_logging(logging.DEBUG if args.verbose else None)

    scratch = ScratchArea()
    try:
        processed = process_input(list(args.inputs), scratch)
        log(f"Found {len(processed.markdown_files)} markdown file(s) under {processed.root}")
        result = convert_to_pdf(processed, scratch, output_name=str(args.output_name))
    except ExportError as e:
        log(f"ERROR: {e}")
        return 2
    finally:
        with scratch.lock:
            scratch.clear()

    print(result.output_path)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
