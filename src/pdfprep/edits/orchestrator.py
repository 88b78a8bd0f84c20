"""Single entry point for page edits."""

from __future__ import annotations

from collections.abc import Iterable
from typing import assert_never

from pdfprep.edits.commands import (
    CropEdit,
    EditCommand,
    ResetEdit,
    RotateEdit,
    ScaleEdit,
    TranslateEdit,
)
from pdfprep.edits.crop import CropService
from pdfprep.edits.rotate import RotationService, get_rotated_dimensions, is_rotation_swapped
from pdfprep.edits.scale import ScaleService
from pdfprep.logging_config import get_logger
from pdfprep.model import PageTransforms
from pdfprep.state.metadata import MetadataStore

logger = get_logger(__name__)


class EditOrchestrator:
    """Dispatches edit commands to the crop, rotation and scale services.

    Edits are applied in the order given and never reordered. The final
    crop -> rotate -> scale -> translate composition happens at render
    time, so rotate-then-scale and scale-then-rotate give the same result.

    Example:
        orchestrator = EditOrchestrator(store)
        orchestrator.apply_edit(3, RotateEdit(90))
    """

    def __init__(self, store: MetadataStore):
        self.store = store
        self.crop = CropService(store)
        self.rotation = RotationService(store, self.crop)
        self.scale = ScaleService(store)

    def apply_edit(self, page_number: int, command: EditCommand) -> PageTransforms:
        """Apply one command and return the page's resulting transforms."""
        match command:
            case CropEdit(box=None):
                self.crop.clear_crop(page_number)
            case CropEdit(box=box):
                self.crop.set_crop(page_number, box)
            case RotateEdit(delta=delta):
                self.rotation.rotate(page_number, delta)
            case ScaleEdit(percent=percent):
                self.scale.set_scale(page_number, percent)
            case TranslateEdit(dx=dx, dy=dy):
                self.store.add_offset(page_number, dx, dy)
            case ResetEdit():
                self.store.reset_page(page_number)
            case _:
                assert_never(command)
        logger.debug("Applied %s to page %d", type(command).__name__, page_number)
        return self.get_transforms(page_number)

    def apply_edits(self, page_number: int, commands: Iterable[EditCommand]) -> PageTransforms:
        for command in commands:
            self.apply_edit(page_number, command)
        return self.get_transforms(page_number)

    def apply_to_all(self, source_page: int) -> list[int]:
        return self.store.apply_to_all(source_page)

    def reset_page(self, page_number: int) -> None:
        self.store.reset_page(page_number)

    def reset_all(self) -> None:
        self.store.reset_all()

    def set_fit_crop_to_page(self, page_number: int, fit: bool) -> None:
        self.store.set_fit_crop_to_page(page_number, fit)

    def get_transforms(self, page_number: int) -> PageTransforms:
        return self.store.get_transforms(page_number)

    def has_edits(self, page_number: int) -> bool:
        return self.store.is_edited(page_number)

    def has_any_edits(self) -> bool:
        return self.store.has_any_edits()

    def are_dimensions_swapped(self, page_number: int) -> bool:
        return is_rotation_swapped(self.rotation.get_rotation(page_number))

    def get_effective_dimensions(self, page_number: int, width: float, height: float) -> tuple[float, float]:
        """Page dimensions after rotation."""
        return get_rotated_dimensions(width, height, self.rotation.get_rotation(page_number))
