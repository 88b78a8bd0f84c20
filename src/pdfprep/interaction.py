"""Pointer-driven crop resizing.

Turns raw pointer positions into crop rectangles in canvas pixels. The math
is zoom-independent: pointer positions are divided by the zoom factor, and
the resulting distances are converted to canvas pixels using the ratio
between the canvas' displayed size and its pixel size.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from pdfprep.model import Box, CropBox

MIN_DRAG_SIZE = 50
EDGE_MARGIN = 10


class DragHandle(str, Enum):
    """Handles that can be dragged on the crop overlay."""

    NW = "nw"
    NE = "ne"
    SW = "sw"
    SE = "se"
    CENTER = "center"


@dataclass(frozen=True)
class PixelRect:
    """A rectangle in canvas pixels."""

    x: float
    y: float
    width: float
    height: float

    def to_crop(self, canvas_width: float, canvas_height: float) -> CropBox:
        """Normalize against the canvas size."""
        return Box(
            self.x / canvas_width,
            self.y / canvas_height,
            self.width / canvas_width,
            self.height / canvas_height,
        )


@dataclass(frozen=True)
class DragGeometry:
    """Where the canvas currently sits on screen.

    Attributes:
        zoom: Current zoom factor of the container
        container_left: Container's left edge in client coordinates
        container_top: Container's top edge in client coordinates
        canvas_rect_width: Canvas width as displayed, in client pixels
        canvas_rect_height: Canvas height as displayed, in client pixels
        canvas_width: Canvas width in its own pixels
        canvas_height: Canvas height in its own pixels
    """

    zoom: float
    container_left: float
    container_top: float
    canvas_rect_width: float
    canvas_rect_height: float
    canvas_width: float
    canvas_height: float


def clamp_value(value: float, low: float, high: float) -> float:
    return max(low, min(value, high))


def enforce_boundaries(
    rect: PixelRect,
    canvas_width: float,
    canvas_height: float,
    margin: float = EDGE_MARGIN,
    min_size: float = MIN_DRAG_SIZE,
) -> PixelRect:
    """Keep a crop rectangle inside the canvas, minus a margin.

    Width and height never come out negative, even on a canvas smaller
    than the minimum size.
    """
    x = max(margin, min(rect.x, canvas_width - min_size - margin))
    y = max(margin, min(rect.y, canvas_height - min_size - margin))
    width = max(min_size, min(rect.width, canvas_width - x - margin))
    height = max(min_size, min(rect.height, canvas_height - y - margin))

    if x + width > canvas_width - margin:
        width = max(0.0, canvas_width - x - margin)
    if y + height > canvas_height - margin:
        height = max(0.0, canvas_height - y - margin)
    return PixelRect(x, y, width, height)


@dataclass(frozen=True)
class _DragStart:
    dom_x: float
    dom_y: float
    rect: PixelRect


class CropDragController:
    """Tracks one crop drag from pointer-down to pointer-up.

    Args:
        geometry: Called on every pointer event to read the current layout
        min_size: Smallest crop edge, in canvas pixels
        margin: Gap kept between the crop and the canvas edge
    """

    def __init__(
        self,
        geometry: Callable[[], DragGeometry | None],
        min_size: float = MIN_DRAG_SIZE,
        margin: float = EDGE_MARGIN,
    ):
        self.geometry = geometry
        self.min_size = min_size
        self.margin = margin
        self._start: _DragStart | None = None
        self._handle: DragHandle | None = None

    @property
    def is_dragging(self) -> bool:
        return self._start is not None

    @property
    def current_handle(self) -> DragHandle | None:
        return self._handle

    def start_drag(self, client_x: float, client_y: float, handle: DragHandle | str, crop: PixelRect) -> None:
        geo = self.geometry()
        if geo is None:
            return
        self._handle = DragHandle(handle)
        self._start = _DragStart(
            dom_x=(client_x - geo.container_left) / geo.zoom,
            dom_y=(client_y - geo.container_top) / geo.zoom,
            rect=crop,
        )

    def continue_drag(self, client_x: float, client_y: float) -> PixelRect | None:
        """The crop rectangle for the pointer's current position.

        Returns None when no drag is active or the layout is unavailable.
        """
        if self._start is None or self._handle is None:
            return None
        geo = self.geometry()
        if geo is None or geo.canvas_width <= 0 or geo.canvas_height <= 0:
            return None

        dom_dx = (client_x - geo.container_left) / geo.zoom - self._start.dom_x
        dom_dy = (client_y - geo.container_top) / geo.zoom - self._start.dom_y

        # Displayed size per canvas pixel
        ratio_x = (geo.canvas_rect_width / geo.zoom) / geo.canvas_width
        ratio_y = (geo.canvas_rect_height / geo.zoom) / geo.canvas_height
        dx = dom_dx / ratio_x if ratio_x else 0.0
        dy = dom_dy / ratio_y if ratio_y else 0.0

        rect = self._resize(self._start.rect, dx, dy, geo.canvas_width, geo.canvas_height)
        return enforce_boundaries(rect, geo.canvas_width, geo.canvas_height, self.margin, self.min_size)

    def end_drag(self) -> None:
        self._start = None
        self._handle = None

    def _resize(self, start: PixelRect, dx: float, dy: float, cw: float, ch: float) -> PixelRect:
        m, size = self.margin, self.min_size
        x, y, w, h = start.x, start.y, start.width, start.height

        if self._handle is DragHandle.CENTER:
            x = clamp_value(start.x + dx, m, cw - start.width - m)
            y = clamp_value(start.y + dy, m, ch - start.height - m)
            return PixelRect(x, y, w, h)

        # Left edge
        if self._handle in (DragHandle.NW, DragHandle.SW):
            x = clamp_value(start.x + dx, m, start.x + start.width - size)
            w = start.width - (x - start.x)
        # Right edge
        if self._handle in (DragHandle.NE, DragHandle.SE):
            w = clamp_value(start.width + dx, size, cw - start.x - m)
        # Top edge
        if self._handle in (DragHandle.NW, DragHandle.NE):
            y = clamp_value(start.y + dy, m, start.y + start.height - size)
            h = start.height - (y - start.y)
        # Bottom edge
        if self._handle in (DragHandle.SW, DragHandle.SE):
            h = clamp_value(start.height + dy, size, ch - start.y - m)

        return PixelRect(x, y, w, h)
