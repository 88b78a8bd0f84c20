"""Rotation editing for pdfprep."""

from __future__ import annotations

from pdfprep.edits.crop import CropService
from pdfprep.logging_config import get_logger
from pdfprep.state.metadata import MetadataStore

logger = get_logger(__name__)


def normalize_rotation(degrees: float) -> int:
    """Snap any angle to the nearest of 0, 90, 180 or 270."""
    angle = degrees % 360
    if angle < 45:
        return 0
    if angle < 135:
        return 90
    if angle < 225:
        return 180
    if angle < 315:
        return 270
    return 0


def is_rotation_swapped(rotation: int) -> bool:
    """True when the rotation exchanges width and height."""
    return normalize_rotation(rotation) in (90, 270)


def get_rotated_dimensions(width: float, height: float, rotation: int) -> tuple[float, float]:
    if is_rotation_swapped(rotation):
        return (height, width)
    return (width, height)


class RotationService:
    """Rotation edits that keep the crop on the same visual region.

    Any existing crop is remapped through CropService before the new
    rotation is stored.
    """

    def __init__(self, store: MetadataStore, crop_service: CropService):
        self.store = store
        self.crop_service = crop_service

    def get_rotation(self, page_number: int) -> int:
        return self.store.get_rotation(page_number)

    def is_rotated(self, page_number: int) -> bool:
        return self.get_rotation(page_number) != 0

    def rotate(self, page_number: int, delta: int) -> int:
        """Rotate clockwise by delta degrees.

        Returns:
            The new rotation
        """
        current = self.store.get_rotation(page_number)
        new_rotation = normalize_rotation(current + delta)
        self._commit(page_number, current, new_rotation)
        return new_rotation

    def set_rotation(self, page_number: int, rotation: int) -> int:
        current = self.store.get_rotation(page_number)
        new_rotation = normalize_rotation(rotation)
        if new_rotation != current:
            self._commit(page_number, current, new_rotation)
        return new_rotation

    def reset_rotation(self, page_number: int) -> None:
        self.set_rotation(page_number, 0)

    def rotate_clockwise(self, page_number: int) -> int:
        return self.rotate(page_number, 90)

    def rotate_counter_clockwise(self, page_number: int) -> int:
        return self.rotate(page_number, -90)

    def rotate_180(self, page_number: int) -> int:
        return self.rotate(page_number, 180)

    def is_landscape_after_rotation(self, page_number: int, width: float, height: float) -> bool:
        w, h = get_rotated_dimensions(width, height, self.get_rotation(page_number))
        return w > h

    normalize_rotation = staticmethod(normalize_rotation)
    is_rotation_swapped = staticmethod(is_rotation_swapped)
    get_rotated_dimensions = staticmethod(get_rotated_dimensions)

    def _commit(self, page_number: int, current: int, new_rotation: int) -> None:
        crop = self.crop_service.get_crop(page_number)
        if crop is not None:
            remapped = self.crop_service.remap_crop_for_rotation(crop, current, new_rotation)
            self.crop_service.set_crop(page_number, remapped)
        self.store.set_rotation(page_number, new_rotation)
        logger.debug("Page %d rotation %d -> %d", page_number, current, new_rotation)
