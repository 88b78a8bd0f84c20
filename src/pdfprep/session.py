"""Per-document editing session.

An EditorSession wires the metadata store, page state, edit services,
caches and recipe service together for a single document. Nothing is
shared between sessions, so two documents (or two tests) never see each
other's caches.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from PIL import Image

from pdfprep.cache.preview import PagePreviewCache
from pdfprep.cache.thumbnails import ThumbnailCache
from pdfprep.config import SessionConfig
from pdfprep.edits.commands import EditCommand
from pdfprep.edits.orchestrator import EditOrchestrator
from pdfprep.exceptions import PdfPrepError
from pdfprep.layout import SheetLayout
from pdfprep.logging_config import get_logger
from pdfprep.model import PageTransforms
from pdfprep.progress import ProgressBus, ProgressEventType, ProgressListener, Unsubscribe
from pdfprep.recipe import Recipe, RecipeService
from pdfprep.rendering.base import LoadResult, Rasterizer
from pdfprep.state.metadata import MetadataStore
from pdfprep.state.pages import PageState
from pdfprep.state.selection import SelectionState
from pdfprep.validation import ValidationResult

logger = get_logger(__name__)

BYTES_PER_MB = 1024 * 1024


class EditorSession:
    """Controller for one open document.

    Example:
        session = EditorSession(PdfRasterizer())
        await session.load_document(Path("flyer.pdf"))
        session.apply_edit(1, RotateEdit(90))
        recipe = session.export_recipe()
    """

    def __init__(self, rasterizer: Rasterizer, config: SessionConfig | None = None):
        self.config = config or SessionConfig()
        self.rasterizer = rasterizer
        self.bus = ProgressBus()
        self.store = MetadataStore()
        self.pages = PageState()
        self.selection = SelectionState()
        self.orchestrator = EditOrchestrator(self.store)
        self.previews = PagePreviewCache(
            rasterizer,
            self.store,
            self.bus,
            width=self.config.preview.width,
            height=self.config.preview.height,
            capacity=self.config.preview.cache_size,
        )
        self.thumbnails = ThumbnailCache(
            self.previews,
            capacity=self.config.thumbnails.cache_size,
            max_width=self.config.thumbnails.width,
            max_height=self.config.thumbnails.height,
        )
        self.sheets = SheetLayout(self.previews, self.pages, self.config.print.pages_per_sheet)
        self.recipe = RecipeService(self.store, self.pages, self.config.print, self.config.shop_id)
        self.path: Path | None = None
        self._background: set[asyncio.Task] = set()

    # === Loading ===

    @property
    def total_pages(self) -> int:
        return self.pages.total_pages

    def page_numbers(self) -> list[int]:
        return self.store.page_numbers()

    async def load_document(self, path: Path) -> LoadResult:
        """Open a document and render its first page.

        Remaining previews and all thumbnails are scheduled in the
        background unless the file is larger than the configured limit.

        Raises:
            DocumentError: If the document cannot be opened
            RenderError: If the first page cannot be rendered
        """
        path = Path(path)
        self.bus.emit_load_start()
        try:
            result = await self.rasterizer.load_file(path)
            self._reset_state()
            for info in result.pages:
                self.store.init_page(info.page_number, info.width, info.height)
            self.pages.init(result.pages, result.document_id)
            self.recipe.set_source_from_path(path, result.total_pages)
            self.path = path
            self.bus.emit_load_progress(50, total_pages=result.total_pages)

            if result.total_pages > 0:
                await self.previews.ensure_preview(1)
        except Exception as e:
            self.bus.emit_load_error(e)
            raise

        self.bus.emit_load_complete(result.total_pages)
        logger.info("Loaded %s (%d pages)", path.name, result.total_pages)

        if self._should_prerender(path):
            self._schedule(self._prerender_previews(range(2, result.total_pages + 1)))
            self._schedule(self.thumbnails.generate_all(range(1, result.total_pages + 1)))
        return result

    def _should_prerender(self, path: Path) -> bool:
        background = self.config.background
        if not background.enabled:
            return False
        size_mb = path.stat().st_size / BYTES_PER_MB
        if size_mb > background.max_file_size_mb:
            logger.info("Skipping background rendering for %.1f MB file", size_mb)
            return False
        return True

    async def _prerender_previews(self, page_numbers: Iterable[int]) -> None:
        page_numbers = list(page_numbers)
        for index, page_number in enumerate(page_numbers, start=1):
            try:
                await self.previews.ensure_preview(page_number)
            except PdfPrepError as e:
                logger.warning("Background preview for page %d failed: %s", page_number, e)
            self.bus.emit_render_progress(index * 100 / len(page_numbers), page_number, self.total_pages)

    def _schedule(self, coro) -> asyncio.Task:
        task = asyncio.ensure_future(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    async def drain_background(self) -> None:
        """Wait for all scheduled background work to finish."""
        while True:
            running = [task for task in self._background if not task.done()]
            if not running:
                return
            await asyncio.gather(*running, return_exceptions=True)

    # === Previews and thumbnails ===

    def get_page_preview(self, page_number: int) -> Image.Image | None:
        """Cached preview, or None after starting a background render."""
        cached = self.previews.get_cached(page_number)
        if cached is None and self.store.has_page(page_number) and not self.previews.is_pending_at(page_number):
            self._schedule(self._background_preview(page_number))
        return cached

    async def _background_preview(self, page_number: int) -> None:
        try:
            await self.previews.ensure_preview(page_number)
        except PdfPrepError as e:
            logger.warning("Preview for page %d failed: %s", page_number, e)

    async def ensure_preview(self, page_number: int) -> Image.Image:
        return await self.previews.ensure_preview(page_number)

    async def get_thumbnail(self, page_number: int) -> Image.Image:
        return await self.thumbnails.get_thumbnail(page_number)

    async def get_raw_thumbnail(self, page_number: int) -> Image.Image:
        return await self.thumbnails.get_raw_thumbnail(page_number)

    def get_cached_thumbnail(self, page_number: int) -> Image.Image | None:
        return self.thumbnails.get_cached(page_number)

    async def render_sheet(self, sheet_number: int, width: int, height: int) -> Image.Image:
        return await self.sheets.render_sheet(sheet_number, width, height)

    # === Edits ===

    def apply_edit(self, page_number: int, command: EditCommand) -> PageTransforms:
        """Apply an edit and invalidate everything rendered from the old state."""
        transforms = self.orchestrator.apply_edit(page_number, command)
        self._invalidate_page(page_number)
        return transforms

    def apply_edits(self, page_number: int, commands: Iterable[EditCommand]) -> PageTransforms:
        for command in commands:
            self.apply_edit(page_number, command)
        return self.get_transforms(page_number)

    def set_fit_crop_to_page(self, page_number: int, fit: bool) -> None:
        self.orchestrator.set_fit_crop_to_page(page_number, fit)
        self._invalidate_page(page_number)

    def apply_to_all(self, source_page: int) -> list[int]:
        """Copy one page's transforms to every other page, whatever is selected."""
        targets = self.orchestrator.apply_to_all(source_page)
        for page_number in targets:
            self._invalidate_page(page_number)
        return targets

    def reset_page(self, page_number: int) -> None:
        self.orchestrator.reset_page(page_number)
        self._invalidate_page(page_number)

    def reset_all(self) -> None:
        """Drop every edit. Every page's version moves on, cached or not."""
        self.orchestrator.reset_all()
        self.previews.invalidate_all(range(1, self.total_pages + 1))
        self.thumbnails.invalidate_all()
        self.sheets.clear()

    def get_transforms(self, page_number: int) -> PageTransforms:
        return self.orchestrator.get_transforms(page_number)

    def _invalidate_page(self, page_number: int) -> None:
        self.previews.invalidate(page_number)
        self.thumbnails.invalidate(page_number)
        self.sheets.invalidate_sheets_for_page(page_number)

    # === Page order and inclusion ===

    def reorder(self, from_index: int, to_index: int) -> None:
        self.pages.reorder(from_index, to_index)
        self.sheets.clear()

    def set_order(self, page_numbers: Iterable[int]) -> None:
        self.pages.set_order(page_numbers)
        self.sheets.clear()

    def exclude_pages(self, page_numbers: Iterable[int]) -> None:
        for page_number in page_numbers:
            self.pages.exclude_page(page_number)
        self.sheets.clear()

    def include_pages(self, page_numbers: Iterable[int]) -> None:
        for page_number in page_numbers:
            self.pages.include_page(page_number)
        self.sheets.clear()

    # === Recipe ===

    def set_print_options(self, **changes: Any) -> None:
        options = self.recipe.set_options(**changes)
        self.sheets.set_pages_per_sheet(options.pages_per_sheet)

    def validate_recipe(self) -> ValidationResult:
        return self.recipe.validate()

    def export_recipe(self) -> Recipe:
        """Generate the recipe, reporting progress on the bus.

        Raises:
            RecipeError: If no document has been loaded
        """
        self.bus.emit_export_start()
        try:
            recipe = self.recipe.generate()
        except PdfPrepError as e:
            self.bus.emit_export_error(e)
            raise
        self.bus.emit_export_complete()
        return recipe

    # === Events and teardown ===

    def subscribe(self, listener: ProgressListener, event_type: ProgressEventType | None = None) -> Unsubscribe:
        return self.bus.subscribe(listener, event_type)

    def _reset_state(self) -> None:
        self.previews.clear()
        self.thumbnails.invalidate_all()
        self.sheets.clear()
        self.store.clear()
        self.pages.clear()
        self.selection.clear_all()
        self.recipe.clear_source()

    def destroy(self) -> None:
        """Drop all cached, pending and version state and every listener.

        Background renders still running are not cancelled; they finish on
        their own and their results are discarded.
        """
        self._reset_state()
        self.bus.clear()
        self.rasterizer.close()
        self.path = None
        logger.debug("Session destroyed")
