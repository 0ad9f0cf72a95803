"""Command line entry point.

Usage:
    python -m pdfomator export report.pdf:2 photo.jpg -o out.pdf --grid 2x1
    python -m pdfomator inspect report.pdf
    python -m pdfomator gui [FILE ...]
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from pdfomator import __version__
from pdfomator.common.paper import DEFAULT_PAPER_SIZE, PAPER_SIZES, Orientation
from pdfomator.common.thresholds import RENDER_THRESHOLDS
from pdfomator.core.errors import DecodeFailure, ExportFailure, InvalidLayout
from pdfomator.core.models import FillMode, GridSpec, Padding, Sheet, SpacingConfig
from pdfomator.core.models.sheet import (
    DEFAULT_CELL_PADDING_MM,
    DEFAULT_GAP_MM,
    DEFAULT_SHEET_PADDING_MM,
)
from pdfomator.images.sources import load_file, open_source
from pdfomator.layout.context import LayoutContext
from pdfomator.layout.coordinates import raster_px_to_mm
from pdfomator.output.renderer import default_export_filename, render_to_pdf

logger = logging.getLogger("pdfomator")


def parse_file_spec(text: str) -> Tuple[Path, int]:
    """
    Split "FILE[:PAGE]" into a path and a 0-based page index.

    PAGE is 1-based on the command line. A colon not followed by digits
    is part of the path.
    """
    head, sep, tail = text.rpartition(":")
    if sep and head and tail.isdigit():
        page = int(tail)
        if page < 1:
            raise argparse.ArgumentTypeError(f"Page numbers start at 1: {text}")
        return Path(head), page - 1
    return Path(text), 0


def _grid_arg(text: str) -> GridSpec:
    try:
        return GridSpec.parse(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def _paper_arg(text: str) -> str:
    for name in PAPER_SIZES:
        if name.lower() == text.lower():
            return name
    raise argparse.ArgumentTypeError(f"Unknown paper size {text!r} (choose from {', '.join(PAPER_SIZES)})")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pdfomator",
        description="Lay out PDF pages and images on a sheet grid and export a print-ready PDF",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    export = sub.add_parser("export", help="Lay out files and write a PDF")
    export.add_argument("files", nargs="+", type=parse_file_spec, metavar="FILE[:PAGE]",
                        help="PDF or image; PAGE is 1-based (default 1). Files fill cells in order")
    export.add_argument("-o", "--output", type=Path, help="Output PDF (default: timestamped name)")
    export.add_argument("--paper", type=_paper_arg, default=DEFAULT_PAPER_SIZE)
    export.add_argument("--landscape", action="store_true")
    export.add_argument("--grid", type=_grid_arg, default=GridSpec(), metavar="ROWSxCOLS")
    export.add_argument("--fill", choices=[m.value for m in FillMode], default=FillMode.CONTAIN.value)
    export.add_argument("--padding", type=float, default=DEFAULT_SHEET_PADDING_MM, help="Sheet padding (mm)")
    export.add_argument("--gap", type=float, default=DEFAULT_GAP_MM, help="Row and column gap (mm)")
    export.add_argument("--cell-padding", type=float, default=DEFAULT_CELL_PADDING_MM, help="Cell padding (mm)")
    export.add_argument("--dpi", type=int, default=RENDER_THRESHOLDS.export_dpi,
                        help="Downsample images to this resolution (0 keeps full resolution)")

    inspect = sub.add_parser("inspect", help="Show pages and natural sizes of a file")
    inspect.add_argument("file", type=Path)

    gui = sub.add_parser("gui", help="Open the layout window")
    gui.add_argument("files", nargs="*", type=Path)
    return parser


def run_export(args: argparse.Namespace) -> int:
    orientation = Orientation.LANDSCAPE if args.landscape else Orientation.PORTRAIT
    try:
        spacing = SpacingConfig(
            sheet_padding=Padding.uniform(args.padding),
            column_gap=args.gap,
            row_gap=args.gap,
            cell_padding=args.cell_padding,
        )
        context = LayoutContext(Sheet.from_paper(args.paper, orientation), args.grid, spacing)
    except (InvalidLayout, ValueError) as e:
        logger.error(f"Invalid layout: {e}")
        return 1

    files: List[Tuple[Path, int]] = args.files
    if len(files) > context.grid.cell_count:
        logger.error(f"{len(files)} files given but grid {context.grid} has {context.grid.cell_count} cells")
        return 1

    mode = FillMode(args.fill)
    for index, (path, page_index) in enumerate(files):
        try:
            content = load_file(path, page_index)
        except (DecodeFailure, IndexError) as e:
            logger.error(f"Cannot load {path}: {e}")
            return 1
        context.attach_content(index, content, mode)

    output = args.output or Path(default_export_filename())
    try:
        result = render_to_pdf(context, output, export_dpi=args.dpi)
    except (ExportFailure, InvalidLayout) as e:
        logger.error(f"Export failed: {e}")
        return 1

    for failure in result.failures:
        print(f"  skipped cell {failure.index + 1} ({failure.title}): {failure.reason}")
    print(f"Wrote {result.output_path} ({result.drawn_count} cells, {context.sheet.label})")
    return 0


def run_inspect(args: argparse.Namespace) -> int:
    try:
        with open_source(args.file) as source:
            print(f"{source.name}: {source.page_count} page(s)")
            for index in range(source.page_count):
                image = source.render_page(index)
                print(
                    f"  {source.title_for(index)}: {image.width}×{image.height} px "
                    f"({raster_px_to_mm(image.width):.1f}×{raster_px_to_mm(image.height):.1f} mm)"
                )
    except DecodeFailure as e:
        logger.error(str(e))
        return 1
    return 0


def run_gui(args: argparse.Namespace) -> int:
    from pdfomator.gui.app import run

    return run(args.files)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
    )

    if args.command == "export":
        return run_export(args)
    if args.command == "inspect":
        return run_inspect(args)
    return run_gui(args)


if __name__ == "__main__":
    sys.exit(main())
