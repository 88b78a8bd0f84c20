"""Non-interactive preparation: load, apply an edit script, export."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path

from pdfprep.config import BackgroundConfig, EditScript, SessionConfig
from pdfprep.constants import PAPER_SIZES
from pdfprep.exceptions import ConfigError
from pdfprep.logging_config import get_logger
from pdfprep.recipe import Recipe
from pdfprep.rendering.base import Rasterizer
from pdfprep.rendering.compose import encode_jpeg
from pdfprep.selector import select_pages
from pdfprep.session import EditorSession
from pdfprep.validation import ValidationResult

logger = get_logger(__name__)


@dataclass
class PrepareResult:
    """Outcome of a prepare() run."""

    validation: ValidationResult
    recipe: Recipe | None = None
    written: list[Path] = field(default_factory=list)


def apply_edit_script(session: EditorSession, script: EditScript) -> int:
    """Apply every step of an edit script to a loaded session.

    Steps run in order. After them come apply_to_all, then page order,
    then exclusions.

    Returns:
        Number of (page, step) pairs applied

    Raises:
        PageSelectionError: If a step names pages the document lacks
        ConfigError: If apply_to_all names an unknown page
    """
    total = session.total_pages
    applied = 0
    for index, step in enumerate(script.steps):
        page_numbers = select_pages(step.pages, total)
        logger.debug("Step %d: %d command(s) on pages %s", index + 1, len(step.commands), page_numbers)
        for page_number in page_numbers:
            session.apply_edits(page_number, step.commands)
            if step.fit_crop_to_page is not None:
                session.set_fit_crop_to_page(page_number, step.fit_crop_to_page)
            applied += 1

    if script.apply_to_all is not None:
        if not session.store.has_page(script.apply_to_all):
            raise ConfigError(
                f"Page {script.apply_to_all} is out of range for {total} page document",
                field="apply_to_all",
            )
        session.apply_to_all(script.apply_to_all)

    if script.order:
        session.set_order(script.order)

    if script.exclude is not None:
        session.exclude_pages(select_pages(script.exclude, total))

    return applied


async def prepare(
    input_path: Path,
    rasterizer: Rasterizer,
    config: SessionConfig | None = None,
    script: EditScript | None = None,
    preview_dir: Path | None = None,
    thumbnail_dir: Path | None = None,
    sheet_dir: Path | None = None,
) -> PrepareResult:
    """Load a document, apply edits and build its recipe.

    The recipe is only generated when validation passes. Image exports
    cover included pages in current order.
    """
    config = config or SessionConfig()
    # Only pages that get written are rendered
    session = EditorSession(rasterizer, replace(config, background=BackgroundConfig(enabled=False)))
    try:
        await session.load_document(input_path)
        if script is not None:
            count = apply_edit_script(session, script)
            logger.info("Applied %d edit step(s)", count)

        result = PrepareResult(validation=session.validate_recipe())
        for warning in result.validation.warnings:
            logger.warning("%s", warning)
        if not result.validation.valid:
            return result

        included = [p.page_number for p in session.pages.get_included()]
        stem = input_path.stem

        if preview_dir is not None:
            preview_dir.mkdir(parents=True, exist_ok=True)
            for page_number in included:
                image = await session.ensure_preview(page_number)
                path = preview_dir / f"{stem}_page{page_number:03d}.png"
                image.save(path)
                result.written.append(path)
                logger.debug("Wrote %s", path.name)

        if thumbnail_dir is not None:
            thumbnail_dir.mkdir(parents=True, exist_ok=True)
            for page_number in included:
                image = await session.get_thumbnail(page_number)
                path = thumbnail_dir / f"{stem}_thumb{page_number:03d}.jpg"
                path.write_bytes(encode_jpeg(image, config.thumbnails.quality))
                result.written.append(path)
                logger.debug("Wrote %s", path.name)

        if sheet_dir is not None:
            sheet_dir.mkdir(parents=True, exist_ok=True)
            width, height = PAPER_SIZES[session.recipe.options.paper_size]
            for sheet_number in range(1, session.sheets.sheet_count() + 1):
                image = await session.render_sheet(sheet_number, round(width), round(height))
                path = sheet_dir / f"{stem}_sheet{sheet_number:03d}.png"
                image.save(path)
                result.written.append(path)
                logger.debug("Wrote %s", path.name)

        result.recipe = session.export_recipe()
        return result
    finally:
        session.destroy()
