"""Versioned asynchronous preview cache.

Every page carries a version counter that is bumped whenever its edits
change. A render remembers the version it started under and only writes
its result back if that version is still current, so a slow render that
finishes after an edit can never overwrite fresher state. Renders are not
cancelled; stale results are simply dropped.
"""

from __future__ import annotations

import asyncio
from collections import OrderedDict
from dataclasses import dataclass

from PIL import Image

from pdfprep.constants import DEFAULT_PREVIEW_SIZE, PREVIEW_CACHE_SIZE
from pdfprep.logging_config import get_logger
from pdfprep.model import PageTransforms
from pdfprep.progress import ProgressBus
from pdfprep.rendering.base import Rasterizer
from pdfprep.rendering.compose import apply_transforms
from pdfprep.state.metadata import MetadataStore

logger = get_logger(__name__)

PreviewKey = tuple[int, tuple, tuple[int, int]]


@dataclass
class PendingRender:
    """A render in flight, with the state it was started under."""

    version: int
    generation: int
    key: PreviewKey
    task: asyncio.Task


class PagePreviewCache:
    """Preview images for one document session.

    Holds the transformed-preview LRU, the raw (untransformed) preview LRU,
    the map of renders in flight and the per-page version counters. Each
    EditorSession owns its own instance.

    Args:
        rasterizer: Source of untransformed page images
        store: Where current page transforms are read from
        bus: Optional bus receiving renderStart / renderComplete events
        width: Default preview width in pixels
        height: Default preview height in pixels
        capacity: Maximum number of transformed previews kept
    """

    def __init__(
        self,
        rasterizer: Rasterizer,
        store: MetadataStore,
        bus: ProgressBus | None = None,
        width: int = DEFAULT_PREVIEW_SIZE[0],
        height: int = DEFAULT_PREVIEW_SIZE[1],
        capacity: int = PREVIEW_CACHE_SIZE,
    ):
        self.rasterizer = rasterizer
        self.store = store
        self.bus = bus
        self.width = width
        self.height = height
        self.capacity = capacity
        self._previews: OrderedDict[PreviewKey, Image.Image] = OrderedDict()
        self._raw: OrderedDict[tuple[int, float], Image.Image] = OrderedDict()
        self._pending: dict[tuple[int, tuple[int, int]], PendingRender] = {}
        self._versions: dict[int, int] = {}
        # Bumped by clear() so renders started before it never write back
        self._generation = 0

    # === Versions ===

    def version(self, page_number: int) -> int:
        return self._versions.get(page_number, 0)

    def is_current(self, page_number: int, version: int) -> bool:
        return self.version(page_number) == version

    @property
    def generation(self) -> int:
        return self._generation

    def token(self, page_number: int) -> tuple[int, int]:
        """Snapshot of (generation, version) to check a render against later."""
        return (self._generation, self.version(page_number))

    def is_current_token(self, page_number: int, token: tuple[int, int]) -> bool:
        """False once the page was edited or the cache cleared since the token."""
        return token == self.token(page_number)

    def invalidate(self, page_number: int) -> None:
        """Bump a page's version and forget its previews and pending render."""
        self._versions[page_number] = self.version(page_number) + 1
        for key in [k for k in self._previews if k[0] == page_number]:
            del self._previews[key]
        for key in [k for k in self._pending if k[0] == page_number]:
            del self._pending[key]
        logger.debug("Invalidated page %d (version %d)", page_number, self._versions[page_number])

    def invalidate_all(self, page_numbers=()) -> None:
        """Bump the version of every given page and every page seen so far.

        Pass the document's full page list so that renders started for pages
        that have never been cached are discarded too.
        """
        for page_number in set(page_numbers) | set(self._versions):
            self._versions[page_number] = self.version(page_number) + 1
        self._previews.clear()
        self._pending.clear()
        logger.debug("Invalidated all previews")

    # === Transformed previews ===

    @staticmethod
    def make_key(page_number: int, transforms: PageTransforms, width: float, height: float) -> PreviewKey:
        return (page_number, transforms.cache_key(), (round(width), round(height)))

    def get_cached(
        self,
        page_number: int,
        width: float | None = None,
        height: float | None = None,
    ) -> Image.Image | None:
        """The cached preview for the page's current transforms, if any."""
        key = self.make_key(
            page_number,
            self.store.get_transforms(page_number),
            self.width if width is None else width,
            self.height if height is None else height,
        )
        image = self._previews.get(key)
        if image is not None:
            self._previews.move_to_end(key)
        return image

    def is_pending(self, page_number: int) -> bool:
        return any(key[0] == page_number for key in self._pending)

    def is_pending_at(self, page_number: int, width: float | None = None, height: float | None = None) -> bool:
        """Whether a render of the page at this size (default: container size) is in flight."""
        size = (
            round(self.width if width is None else width),
            round(self.height if height is None else height),
        )
        return (page_number, size) in self._pending

    async def ensure_preview(self, page_number: int) -> Image.Image:
        """Preview at the session's container size, rendering if needed."""
        return await self.get_preview(page_number, self.width, self.height)

    async def get_preview(
        self,
        page_number: int,
        width: float,
        height: float,
        cache: bool = True,
    ) -> Image.Image:
        """Preview of the page's current transforms, fitted to width x height.

        Concurrent calls for the same page and size share one render. The
        result is returned to every caller even if it went stale, but it is
        only cached when the page version did not change meanwhile.

        Args:
            page_number: Page to render
            width: Target width in pixels
            height: Target height in pixels
            cache: Store the result in the preview LRU

        Raises:
            RenderError: If the rasterizer fails
        """
        transforms = self.store.get_transforms(page_number)
        key = self.make_key(page_number, transforms, width, height)

        cached = self._previews.get(key)
        if cached is not None:
            self._previews.move_to_end(key)
            logger.debug("Preview cache hit for page %d", page_number)
            return cached

        pending_key = (page_number, key[2])
        pending = self._pending.get(pending_key)
        if pending is None or pending.key != key:
            pending = self._start_render(pending_key, key, transforms, cache)

        # Shielded so one caller giving up does not cancel the shared render
        return await asyncio.shield(pending.task)

    def _start_render(
        self,
        pending_key: tuple[int, tuple[int, int]],
        key: PreviewKey,
        transforms: PageTransforms,
        cache: bool,
    ) -> PendingRender:
        page_number = key[0]
        version = self.version(page_number)
        generation = self._generation
        task = asyncio.ensure_future(
            self._render(key, transforms, version, generation, cache)
        )
        entry = PendingRender(version=version, generation=generation, key=key, task=task)
        self._pending[pending_key] = entry
        task.add_done_callback(lambda t: self._finish(pending_key, entry, t))
        return entry

    async def _render(
        self,
        key: PreviewKey,
        transforms: PageTransforms,
        version: int,
        generation: int,
        cache: bool,
    ) -> Image.Image:
        page_number = key[0]
        width, height = key[2]
        if self.bus:
            self.bus.emit_render_start(page_number)

        source = await self.rasterizer.get_preview(page_number, width, height)
        image = apply_transforms(source, transforms)

        if generation != self._generation or not self.is_current(page_number, version):
            logger.debug(
                "Discarding stale preview for page %d (version %d, now %d)",
                page_number, version, self.version(page_number),
            )
        elif cache:
            self._store(key, image)

        if self.bus:
            self.bus.emit_render_complete(page_number)
        return image

    def _finish(self, pending_key, entry: PendingRender, task: asyncio.Task) -> None:
        if self._pending.get(pending_key) is entry:
            del self._pending[pending_key]
        if not task.cancelled() and task.exception() is not None:
            logger.debug("Render failed for page %d: %s", entry.key[0], task.exception())

    def _store(self, key: PreviewKey, image: Image.Image) -> None:
        self._previews[key] = image
        self._previews.move_to_end(key)
        while len(self._previews) > self.capacity:
            evicted, _ = self._previews.popitem(last=False)
            logger.debug("Evicted preview for page %d", evicted[0])

    # === Raw previews ===

    async def get_raw_preview(self, page_number: int, scale: float = 1.0) -> Image.Image:
        """Untransformed render at a given scale.

        Raw previews do not depend on edits, so they survive invalidation.
        """
        key = (page_number, round(scale, 2))
        cached = self._raw.get(key)
        if cached is not None:
            self._raw.move_to_end(key)
            return cached

        generation = self._generation
        image = await self.rasterizer.get_raw_preview(page_number, key[1])
        if generation == self._generation:
            self._raw[key] = image
            while len(self._raw) > self.capacity * 2:
                self._raw.popitem(last=False)
        return image

    # === Housekeeping ===

    def clear(self) -> None:
        """Drop every cached image, pending render and version counter.

        Renders still running finish on their own but never write back.
        """
        self._generation += 1
        self._previews.clear()
        self._raw.clear()
        self._pending.clear()
        self._versions.clear()

    def __len__(self) -> int:
        return len(self._previews)
