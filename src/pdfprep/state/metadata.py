"""Per-page transform storage."""

from __future__ import annotations

from pdfprep.logging_config import get_logger
from pdfprep.model import CropBox, PageMetadata, PageTransforms

logger = get_logger(__name__)


class MetadataStore:
    """Authoritative store of each page's transforms.

    The store records what it is given: crop validation lives in
    CropService and scale clamping in ScaleService. Reads for unknown pages
    return the identity transforms and writes to unknown pages are ignored.
    """

    def __init__(self):
        self._pages: dict[int, PageMetadata] = {}

    # === Lifecycle ===

    def init_page(self, page_number: int, width: float, height: float) -> None:
        self._pages[page_number] = PageMetadata(
            page_number=page_number,
            original_width=width,
            original_height=height,
        )

    def clear(self) -> None:
        self._pages.clear()

    def get(self, page_number: int) -> PageMetadata | None:
        return self._pages.get(page_number)

    def has_page(self, page_number: int) -> bool:
        return page_number in self._pages

    def page_numbers(self) -> list[int]:
        return sorted(self._pages)

    def page_count(self) -> int:
        return len(self._pages)

    def all_metadata(self) -> list[PageMetadata]:
        return [self._pages[n] for n in self.page_numbers()]

    # === Transforms ===

    def get_transforms(self, page_number: int) -> PageTransforms:
        meta = self._pages.get(page_number)
        return meta.transforms if meta else PageTransforms.identity()

    def set_transforms(self, page_number: int, transforms: PageTransforms) -> None:
        meta = self._lookup(page_number)
        if meta is not None:
            meta.transforms = transforms

    def _update(self, page_number: int, **changes) -> None:
        meta = self._lookup(page_number)
        if meta is not None:
            meta.transforms = meta.transforms.with_changes(**changes)

    def _lookup(self, page_number: int) -> PageMetadata | None:
        meta = self._pages.get(page_number)
        if meta is None:
            logger.debug("Ignoring update for unknown page %d", page_number)
        return meta

    def get_crop(self, page_number: int) -> CropBox | None:
        return self.get_transforms(page_number).crop

    def set_crop(self, page_number: int, crop: CropBox | None) -> None:
        self._update(page_number, crop=crop)

    def clear_crop(self, page_number: int) -> None:
        self._update(page_number, crop=None)

    def get_rotation(self, page_number: int) -> int:
        return self.get_transforms(page_number).rotation

    def set_rotation(self, page_number: int, rotation: int) -> None:
        self._update(page_number, rotation=rotation)

    def get_scale(self, page_number: int) -> float:
        return self.get_transforms(page_number).scale

    def set_scale(self, page_number: int, scale: float) -> None:
        self._update(page_number, scale=scale)

    def get_offset(self, page_number: int) -> tuple[float, float]:
        t = self.get_transforms(page_number)
        return (t.offset_x, t.offset_y)

    def set_offset(self, page_number: int, offset_x: float, offset_y: float) -> None:
        self._update(page_number, offset_x=offset_x, offset_y=offset_y)

    def add_offset(self, page_number: int, dx: float, dy: float) -> None:
        x, y = self.get_offset(page_number)
        self.set_offset(page_number, x + dx, y + dy)

    def get_fit_crop_to_page(self, page_number: int) -> bool:
        meta = self._pages.get(page_number)
        return meta.fit_crop_to_page if meta else False

    def set_fit_crop_to_page(self, page_number: int, fit: bool) -> None:
        meta = self._lookup(page_number)
        if meta is not None:
            meta.fit_crop_to_page = fit

    # === Queries and bulk operations ===

    def is_edited(self, page_number: int) -> bool:
        meta = self._pages.get(page_number)
        return meta.edited if meta else False

    def has_any_edits(self) -> bool:
        return any(meta.edited for meta in self._pages.values())

    def edited_pages(self) -> list[int]:
        return [n for n in self.page_numbers() if self._pages[n].edited]

    def reset_page(self, page_number: int) -> None:
        meta = self._lookup(page_number)
        if meta is not None:
            meta.transforms = PageTransforms.identity()
            meta.fit_crop_to_page = False

    def reset_all(self) -> None:
        for page_number in self._pages:
            self.reset_page(page_number)

    def clone_transforms(self, source: int, target: int) -> None:
        """Copy one page's transforms onto another."""
        src = self._pages.get(source)
        dst = self._lookup(target)
        if src is None or dst is None:
            return
        dst.transforms = src.transforms
        dst.fit_crop_to_page = src.fit_crop_to_page

    def apply_to_all(self, source: int) -> list[int]:
        """Copy a page's transforms to every other page.

        Returns:
            The page numbers that were overwritten
        """
        if source not in self._pages:
            logger.debug("Cannot apply transforms from unknown page %d", source)
            return []
        targets = [n for n in self.page_numbers() if n != source]
        for target in targets:
            self.clone_transforms(source, target)
        return targets
