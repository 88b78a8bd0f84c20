"""Command-line interface for pdfprep."""

import argparse
import asyncio
import sys
from dataclasses import replace
from pathlib import Path

from pdfprep import __version__
from pdfprep.exceptions import PdfPrepError
from pdfprep.logging_config import get_logger

logger = get_logger(__name__)


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="pdfprep",
        description="Crop, rotate, scale and reorder PDF pages and export a print recipe.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  pdfprep -i flyer.pdf                             Print the recipe for an unedited document
  pdfprep -i flyer.pdf -e edits.yaml -o job.json   Apply edits and write the recipe
  pdfprep -i flyer.pdf -e edits.yaml --validate    Check edits without exporting
  pdfprep -i flyer.pdf -c session.yaml --previews ./previews
                                                   Also write transformed page previews
  pdfprep -i flyer.pdf --rasterizer mock --sheets ./sheets
                                                   Lay out sheets without poppler
""",
    )

    parser.add_argument(
        "-V",
        "--version",
        action="store_true",
        help="Show version information and exit",
    )

    parser.add_argument(
        "-i",
        "--input",
        type=Path,
        help="Input PDF file",
    )

    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        help="Path to YAML session configuration file",
    )

    parser.add_argument(
        "-e",
        "--edits",
        type=Path,
        help="Path to YAML edit script",
    )

    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        help="Write the recipe JSON here instead of stdout",
    )

    parser.add_argument(
        "--validate",
        action="store_true",
        help="Validate the edited document and exit without exporting",
    )

    parser.add_argument(
        "--previews",
        type=Path,
        metavar="DIR",
        help="Write a PNG preview of every included page to DIR",
    )

    parser.add_argument(
        "--thumbnails",
        type=Path,
        metavar="DIR",
        help="Write a JPEG thumbnail of every included page to DIR",
    )

    parser.add_argument(
        "--sheets",
        type=Path,
        metavar="DIR",
        help="Write a PNG of every N-up sheet to DIR",
    )

    parser.add_argument(
        "--shop-id",
        help="Destination shop identifier (overrides config)",
    )

    parser.add_argument(
        "--rasterizer",
        choices=["pdf", "mock"],
        default="pdf",
        help="Page renderer: pdf (poppler) or mock (blank pages, no poppler needed)",
    )

    # Logging options
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v for verbose, -vv for debug)",
    )

    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Suppress all output except errors",
    )

    parser.add_argument(
        "--log-file",
        type=Path,
        help="Write logs to file (includes all levels)",
    )

    return parser


def cmd_validate(parsed: argparse.Namespace, result) -> int:
    """Report a validation result. Returns the exit code."""
    validation = result.validation
    if validation.valid:
        logger.info("Edits are valid: %s", parsed.input)
        return 0
    for error in validation.errors:
        logger.error("  %s", error)
    logger.error("Validation failed with %d error(s)", len(validation.errors))
    return 1


def main(args: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    parsed = parser.parse_args(args)

    from pdfprep.logging_config import setup_logging

    setup_logging(
        verbosity=parsed.verbose,
        quiet=parsed.quiet,
        log_file=parsed.log_file,
    )

    if parsed.version:
        logger.info("pdfprep %s", __version__)
        return 0

    if not parsed.input:
        parser.print_help()
        return 1

    from pdfprep.batch import prepare
    from pdfprep.config import SessionConfig, load_config, load_edit_script
    from pdfprep.rendering import get_rasterizer

    try:
        config = load_config(parsed.config) if parsed.config else SessionConfig()
        if parsed.shop_id:
            config = replace(config, shop_id=parsed.shop_id)
        script = load_edit_script(parsed.edits) if parsed.edits else None

        export_images = not parsed.validate
        result = asyncio.run(prepare(
            parsed.input,
            get_rasterizer(parsed.rasterizer),
            config=config,
            script=script,
            preview_dir=parsed.previews if export_images else None,
            thumbnail_dir=parsed.thumbnails if export_images else None,
            sheet_dir=parsed.sheets if export_images else None,
        ))

        if parsed.validate or not result.validation.valid:
            return cmd_validate(parsed, result)

        recipe_json = result.recipe.to_json()
        if parsed.output:
            parsed.output.parent.mkdir(parents=True, exist_ok=True)
            parsed.output.write_text(recipe_json + "\n", encoding="utf-8")
            logger.info("Recipe written to %s (%d pages)", parsed.output, len(result.recipe.pages))
        else:
            sys.stdout.write(recipe_json + "\n")
        return 0
    except PdfPrepError as e:
        logger.error("%s", e)
        return 1
    except FileNotFoundError as e:
        logger.error("File not found: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
