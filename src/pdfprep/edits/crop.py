"""Crop editing for pdfprep."""

from __future__ import annotations

from enum import Enum

from pdfprep.constants import CROP_TOLERANCE, MIN_CENTERED_CROP, MIN_CROP_SIZE
from pdfprep.logging_config import get_logger
from pdfprep.model import Box, CropBox
from pdfprep.state.metadata import MetadataStore

logger = get_logger(__name__)


class CropHandle(str, Enum):
    """Resize handles on a crop rectangle."""

    NW = "nw"
    NE = "ne"
    SW = "sw"
    SE = "se"
    N = "n"
    S = "s"
    E = "e"
    W = "w"


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def normalize_crop(crop: CropBox) -> CropBox:
    """Clamp position into [0, 1] and size into [MIN_CROP_SIZE, 1]."""
    return Box(
        x=_clamp(crop.x, 0.0, 1.0),
        y=_clamp(crop.y, 0.0, 1.0),
        width=_clamp(crop.width, MIN_CROP_SIZE, 1.0),
        height=_clamp(crop.height, MIN_CROP_SIZE, 1.0),
    )


def validate_crop(crop: CropBox) -> bool:
    """True if the crop lies inside the page, allowing float slack."""
    if crop.x < 0 or crop.y < 0:
        return False
    if crop.width <= 0 or crop.height <= 0:
        return False
    limit = 1 + CROP_TOLERANCE
    return crop.right <= limit and crop.bottom <= limit


def remap_crop_for_rotation(crop: CropBox, from_rotation: int, to_rotation: int) -> CropBox:
    """Re-express a crop after the page rotation changes.

    The same visual region of the page stays selected. Remapping back with
    the arguments swapped returns the original box.
    """
    delta = (to_rotation - from_rotation) % 360
    x, y, w, h = crop.x, crop.y, crop.width, crop.height
    if delta == 90:
        return Box(1 - y - h, x, h, w)
    if delta == 180:
        return Box(1 - x - w, 1 - y - h, w, h)
    if delta == 270:
        return Box(y, 1 - x - w, h, w)
    return crop


class CropService:
    """Validated crop edits on top of a MetadataStore."""

    def __init__(self, store: MetadataStore):
        self.store = store

    def set_crop(self, page_number: int, crop: CropBox) -> bool:
        """Normalize and store a crop.

        Returns:
            False if the crop is still out of bounds after normalizing, in
            which case nothing is stored
        """
        normalized = normalize_crop(crop)
        if not validate_crop(normalized):
            logger.warning(
                "Rejected crop for page %d: x=%.3f y=%.3f w=%.3f h=%.3f",
                page_number, crop.x, crop.y, crop.width, crop.height,
            )
            return False
        self.store.set_crop(page_number, normalized)
        return True

    def get_crop(self, page_number: int) -> CropBox | None:
        return self.store.get_crop(page_number)

    def clear_crop(self, page_number: int) -> None:
        self.store.clear_crop(page_number)

    def has_crop(self, page_number: int) -> bool:
        return self.store.get_crop(page_number) is not None

    normalize_crop = staticmethod(normalize_crop)
    validate_crop = staticmethod(validate_crop)
    remap_crop_for_rotation = staticmethod(remap_crop_for_rotation)

    @staticmethod
    def create_full_crop() -> CropBox:
        return Box.full()

    @staticmethod
    def create_centered_crop(width_pct: float, height_pct: float) -> CropBox:
        """A centered crop; each fraction is clamped to [0.1, 1]."""
        w = _clamp(width_pct, MIN_CENTERED_CROP, 1.0)
        h = _clamp(height_pct, MIN_CENTERED_CROP, 1.0)
        return Box((1 - w) / 2, (1 - h) / 2, w, h)

    @staticmethod
    def adjust_crop_by_handle(
        crop: CropBox,
        handle: CropHandle | str,
        dx: float,
        dy: float,
    ) -> CropBox:
        """Drag one of the eight handles by a normalized delta."""
        handle = CropHandle(handle)
        x, y, w, h = crop.x, crop.y, crop.width, crop.height

        # Edges moved by the handle
        if handle in (CropHandle.NW, CropHandle.SW, CropHandle.W):
            x += dx
            w -= dx
        if handle in (CropHandle.NE, CropHandle.SE, CropHandle.E):
            w += dx
        if handle in (CropHandle.NW, CropHandle.NE, CropHandle.N):
            y += dy
            h -= dy
        if handle in (CropHandle.SW, CropHandle.SE, CropHandle.S):
            h += dy

        return normalize_crop(Box(x, y, w, h))

    @staticmethod
    def move_crop(crop: CropBox, dx: float, dy: float) -> CropBox:
        """Translate a crop without resizing it, keeping it on the page."""
        return normalize_crop(Box(
            x=_clamp(crop.x + dx, 0.0, max(0.0, 1 - crop.width)),
            y=_clamp(crop.y + dy, 0.0, max(0.0, 1 - crop.height)),
            width=crop.width,
            height=crop.height,
        ))

    def crop_to_pixels(
        self,
        page_number: int,
        display_width: float,
        display_height: float,
    ) -> tuple[float, float, float, float] | None:
        """The stored crop as (x, y, width, height) in display pixels."""
        crop = self.get_crop(page_number)
        if crop is None:
            return None
        return (
            crop.x * display_width,
            crop.y * display_height,
            crop.width * display_width,
            crop.height * display_height,
        )

    @staticmethod
    def pixels_to_crop(
        px: float,
        py: float,
        pw: float,
        ph: float,
        display_width: float,
        display_height: float,
    ) -> CropBox:
        return normalize_crop(Box(
            px / display_width,
            py / display_height,
            pw / display_width,
            ph / display_height,
        ))
