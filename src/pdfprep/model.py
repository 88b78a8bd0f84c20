"""Value types shared across pdfprep.

All rectangles are normalized to the page: ``0`` is the left/top edge and
``1`` the right/bottom edge, whatever the page's point size.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, NamedTuple

from pdfprep.constants import DEFAULT_SCALE


class Point(NamedTuple):
    """A normalized point."""

    x: float
    y: float


@dataclass(frozen=True)
class Box:
    """A normalized rectangle.

    Attributes:
        x: Left edge
        y: Top edge
        width: Horizontal extent
        height: Vertical extent
    """

    x: float
    y: float
    width: float
    height: float

    @classmethod
    def full(cls) -> Box:
        return cls(0.0, 0.0, 1.0, 1.0)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Box:
        return cls(
            x=float(data.get("x", 0.0)),
            y=float(data.get("y", 0.0)),
            width=float(data.get("width", 1.0)),
            height=float(data.get("height", 1.0)),
        )

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center(self) -> Point:
        return Point(self.x + self.width / 2, self.y + self.height / 2)

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}

    def is_close(self, other: Box, tolerance: float = 1e-9) -> bool:
        """Compare coordinates within an absolute tolerance."""
        return (
            abs(self.x - other.x) <= tolerance
            and abs(self.y - other.y) <= tolerance
            and abs(self.width - other.width) <= tolerance
            and abs(self.height - other.height) <= tolerance
        )


# A crop is a Box relative to the original, unrotated page
CropBox = Box


@dataclass(frozen=True)
class PageTransforms:
    """The full edit description of a single page.

    Applied in a fixed order at render time: crop, rotate, scale, translate.

    Attributes:
        crop: Visible region of the unrotated page, None for the whole page
        rotation: Clockwise rotation in degrees (0, 90, 180 or 270)
        scale: Output scale in percent
        offset_x: Horizontal translation, normalized
        offset_y: Vertical translation, normalized
    """

    crop: CropBox | None = None
    rotation: int = 0
    scale: float = DEFAULT_SCALE
    offset_x: float = 0.0
    offset_y: float = 0.0

    @classmethod
    def identity(cls) -> PageTransforms:
        return cls()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PageTransforms:
        crop = data.get("crop")
        return cls(
            crop=Box.from_dict(crop) if crop else None,
            rotation=int(data.get("rotation", 0)),
            scale=float(data.get("scale", DEFAULT_SCALE)),
            offset_x=float(data.get("offsetX", 0.0)),
            offset_y=float(data.get("offsetY", 0.0)),
        )

    @property
    def is_identity(self) -> bool:
        return self == PageTransforms()

    def with_changes(self, **changes: Any) -> PageTransforms:
        return replace(self, **changes)

    def cache_key(self) -> tuple:
        """Hashable form used to key rendered images."""
        crop = None
        if self.crop is not None:
            crop = (self.crop.x, self.crop.y, self.crop.width, self.crop.height)
        return (crop, self.rotation, self.scale, self.offset_x, self.offset_y)

    def to_dict(self) -> dict[str, Any]:
        """Serialize in the recipe's field naming."""
        return {
            "crop": self.crop.to_dict() if self.crop is not None else None,
            "rotation": self.rotation,
            "scale": self.scale,
            "offsetX": self.offset_x,
            "offsetY": self.offset_y,
        }


@dataclass(frozen=True)
class PageInfo:
    """Immutable facts about a page, captured at load time.

    Dimensions are in PDF points.
    """

    page_number: int
    width: float
    height: float

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height if self.height else 1.0


@dataclass
class PageMetadata:
    """Mutable per-page record owned by the metadata store."""

    page_number: int
    original_width: float
    original_height: float
    transforms: PageTransforms = field(default_factory=PageTransforms)
    fit_crop_to_page: bool = False

    @property
    def original_dimensions(self) -> tuple[float, float]:
        return (self.original_width, self.original_height)

    @property
    def edited(self) -> bool:
        return not self.transforms.is_identity

    @property
    def is_cropped(self) -> bool:
        return self.transforms.crop is not None
