"""Bounded thumbnail cache derived from the preview cache."""

from __future__ import annotations

from collections import OrderedDict
from collections.abc import Callable, Iterable

from PIL import Image

from pdfprep.cache.preview import PagePreviewCache
from pdfprep.constants import DEFAULT_THUMBNAIL_SIZE, RAW_THUMBNAIL_OVERSAMPLE, THUMBNAIL_CACHE_SIZE
from pdfprep.exceptions import PdfPrepError
from pdfprep.logging_config import get_logger
from pdfprep.rendering.compose import fit_within

logger = get_logger(__name__)

# (page, kind, transforms key, (max_width, max_height)); kind is "page" or "raw"
ThumbnailKey = tuple[int, str, tuple | None, tuple[int, int]]


def close_image(image: Image.Image) -> None:
    image.close()


class ThumbnailCache:
    """Fixed-capacity LRU of small page images.

    Thumbnails are owned by the cache: every entry is released through the
    release hook when it is evicted or invalidated, so memory stays bounded
    whatever the document size. Callers that need a thumbnail beyond that
    point should copy it.

    Args:
        previews: Preview cache thumbnails are derived from
        capacity: Maximum number of entries
        max_width: Default bounding box width in pixels
        max_height: Default bounding box height in pixels
        release: Called with each image leaving the cache
    """

    def __init__(
        self,
        previews: PagePreviewCache,
        capacity: int = THUMBNAIL_CACHE_SIZE,
        max_width: int = DEFAULT_THUMBNAIL_SIZE[0],
        max_height: int = DEFAULT_THUMBNAIL_SIZE[1],
        release: Callable[[Image.Image], None] = close_image,
    ):
        self.previews = previews
        self.capacity = capacity
        self.max_width = max_width
        self.max_height = max_height
        self.release = release
        self._entries: OrderedDict[ThumbnailKey, Image.Image] = OrderedDict()

    def _size(self, max_width: int | None, max_height: int | None) -> tuple[int, int]:
        return (max_width or self.max_width, max_height or self.max_height)

    def _key(self, page_number: int, size: tuple[int, int]) -> ThumbnailKey:
        transforms = self.previews.store.get_transforms(page_number)
        return (page_number, "page", transforms.cache_key(), size)

    def get_cached(
        self,
        page_number: int,
        max_width: int | None = None,
        max_height: int | None = None,
    ) -> Image.Image | None:
        key = self._key(page_number, self._size(max_width, max_height))
        image = self._entries.get(key)
        if image is not None:
            self._entries.move_to_end(key)
        return image

    async def get_thumbnail(
        self,
        page_number: int,
        max_width: int | None = None,
        max_height: int | None = None,
    ) -> Image.Image:
        """Thumbnail of the page with its current transforms applied.

        If the page is edited while the thumbnail renders, the result is
        returned but not cached.

        Raises:
            RenderError: If the rasterizer fails
        """
        size = self._size(max_width, max_height)
        key = self._key(page_number, size)
        cached = self._entries.get(key)
        if cached is not None:
            self._entries.move_to_end(key)
            return cached

        token = self.previews.token(page_number)
        preview = await self.previews.get_preview(page_number, size[0], size[1], cache=False)
        thumbnail = fit_within(preview, *size)

        if not self.previews.is_current_token(page_number, token):
            logger.debug("Not caching stale thumbnail for page %d", page_number)
            return thumbnail
        self._put(key, thumbnail)
        return thumbnail

    async def get_raw_thumbnail(
        self,
        page_number: int,
        max_width: int | None = None,
        max_height: int | None = None,
    ) -> Image.Image:
        """Thumbnail of the untransformed page, for callers that transform at display time."""
        size = self._size(max_width, max_height)
        key: ThumbnailKey = (page_number, "raw", None, size)
        cached = self._entries.get(key)
        if cached is not None:
            self._entries.move_to_end(key)
            return cached

        generation = self.previews.generation
        dims = self.previews.rasterizer.get_page_dimensions(page_number)
        scale = 1.0
        if dims is not None:
            scale = min(size[0] / dims[0], size[1] / dims[1]) * RAW_THUMBNAIL_OVERSAMPLE
        raw = await self.previews.get_raw_preview(page_number, scale)
        thumbnail = fit_within(raw, *size)
        if generation != self.previews.generation:
            logger.debug("Not caching raw thumbnail for page %d from a cleared session", page_number)
            return thumbnail
        self._put(key, thumbnail)
        return thumbnail

    async def generate_all(self, page_numbers: Iterable[int]) -> int:
        """Render thumbnails for many pages, skipping failures.

        Returns:
            Number of thumbnails produced
        """
        done = 0
        for page_number in page_numbers:
            try:
                await self.get_thumbnail(page_number)
            except PdfPrepError as e:
                logger.warning("Thumbnail for page %d failed: %s", page_number, e)
                continue
            done += 1
        return done

    def invalidate(self, page_number: int) -> None:
        """Release the page's transformed thumbnails. Raw thumbnails are kept."""
        for key in [k for k in self._entries if k[0] == page_number and k[1] == "page"]:
            self.release(self._entries.pop(key))

    def invalidate_all(self) -> None:
        while self._entries:
            _, image = self._entries.popitem(last=False)
            self.release(image)

    def _put(self, key: ThumbnailKey, image: Image.Image) -> None:
        previous = self._entries.pop(key, None)
        if previous is not None and previous is not image:
            self.release(previous)
        self._entries[key] = image
        while len(self._entries) > self.capacity:
            evicted, old = self._entries.popitem(last=False)
            logger.debug("Evicted thumbnail for page %d", evicted[0])
            self.release(old)

    def __len__(self) -> int:
        return len(self._entries)
