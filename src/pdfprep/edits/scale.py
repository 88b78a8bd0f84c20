"""Scale editing for pdfprep."""

from __future__ import annotations

from pdfprep.constants import DEFAULT_SCALE, FIT_MODES, MAX_SCALE, MIN_SCALE, SCALE_STEP, FitMode
from pdfprep.state.metadata import MetadataStore


def clamp_scale(scale: float) -> float:
    return max(MIN_SCALE, min(MAX_SCALE, scale))


def is_valid_scale(scale: float) -> bool:
    return MIN_SCALE <= scale <= MAX_SCALE


def calculate_fit_scale(
    source_width: float,
    source_height: float,
    target_width: float,
    target_height: float,
    mode: FitMode = "contain",
) -> float:
    """Percentage that fits (contain) or fills (cover) the target, clamped.

    Example:
        calculate_fit_scale(800, 600, 400, 400, "contain") == 50
    """
    scale_x = target_width / source_width
    scale_y = target_height / source_height
    if mode not in FIT_MODES:
        raise ValueError(f"Unknown fit mode: {mode}")
    if mode == "cover":
        scale = max(scale_x, scale_y)
    else:
        scale = min(scale_x, scale_y)
    return clamp_scale(scale * 100)


class ScaleService:
    """Scale edits. Every setter clamps to [MIN_SCALE, MAX_SCALE]."""

    MIN_SCALE = MIN_SCALE
    MAX_SCALE = MAX_SCALE
    DEFAULT_SCALE = DEFAULT_SCALE

    def __init__(self, store: MetadataStore):
        self.store = store

    def get_scale(self, page_number: int) -> float:
        return self.store.get_scale(page_number)

    def set_scale(self, page_number: int, scale: float) -> float:
        """Store a clamped scale.

        Returns:
            The value actually stored
        """
        clamped = clamp_scale(scale)
        self.store.set_scale(page_number, clamped)
        return clamped

    def adjust_scale(self, page_number: int, delta: float) -> float:
        return self.set_scale(page_number, self.get_scale(page_number) + delta)

    def multiply_scale(self, page_number: int, factor: float) -> float:
        return self.set_scale(page_number, self.get_scale(page_number) * factor)

    def zoom_in(self, page_number: int) -> float:
        return self.adjust_scale(page_number, SCALE_STEP)

    def zoom_out(self, page_number: int) -> float:
        return self.adjust_scale(page_number, -SCALE_STEP)

    def reset_scale(self, page_number: int) -> None:
        self.store.set_scale(page_number, DEFAULT_SCALE)

    def get_scale_decimal(self, page_number: int) -> float:
        return self.get_scale(page_number) / 100

    def set_scale_from_decimal(self, page_number: int, decimal: float) -> float:
        return self.set_scale(page_number, decimal * 100)

    def is_scaled(self, page_number: int) -> bool:
        return self.get_scale(page_number) != DEFAULT_SCALE

    def get_scaled_dimensions(self, page_number: int, width: float, height: float) -> tuple[float, float]:
        factor = self.get_scale_decimal(page_number)
        return (width * factor, height * factor)

    clamp_scale = staticmethod(clamp_scale)
    is_valid_scale = staticmethod(is_valid_scale)
    calculate_fit_scale = staticmethod(calculate_fit_scale)
