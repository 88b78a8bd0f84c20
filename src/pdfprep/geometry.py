"""Coordinate mapping between content space and canvas space.

Content space is the normalized frame of the unrotated page. Canvas space
is the normalized frame of the slot the page is drawn into, after rotation,
scaling and translation. Everything here is pure: no state, no I/O.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass

from pdfprep.constants import SAFE_MARGIN
from pdfprep.model import Box, Point

CENTER = Point(0.5, 0.5)
ORIGIN = Point(0.0, 0.0)


def normalize_degrees(degrees: int) -> int:
    """Map any multiple of 90 into [0, 360)."""
    return int(degrees) % 360


def _valid_ratio(value: float) -> float:
    if isinstance(value, (int, float)) and math.isfinite(value) and value > 0:
        return float(value)
    return 1.0


def get_content_bounds(
    rotation: int,
    scale_factor: float,
    content_aspect: float = 1.0,
    slot_aspect: float = 1.0,
) -> Box:
    """Where the rotated, scaled content sits inside the canvas.

    The box is centered on the canvas and may extend past it when the
    scale factor exceeds 1; it is not clamped.

    Args:
        rotation: Clockwise rotation in degrees
        scale_factor: Scale as a fraction (1.0 = 100%)
        content_aspect: width / height of the content, 1 if invalid
        slot_aspect: width / height of the canvas slot, 1 if invalid

    Returns:
        Content bounds in canvas coordinates
    """
    ar = _valid_ratio(content_aspect)
    sar = _valid_ratio(slot_aspect)

    if normalize_degrees(rotation) in (90, 270):
        width = scale_factor / ar
        height = scale_factor * ar
    else:
        width = scale_factor
        height = scale_factor * sar / ar

    return Box((1 - width) / 2, (1 - height) / 2, width, height)


def get_visible_content_window(
    rotation: int,
    scale_factor: float,
    content_aspect: float = 1.0,
    slot_aspect: float = 1.0,
) -> Box:
    """The part of the rotated content that lands on the canvas, clamped to [0, 1]."""
    bounds = get_content_bounds(rotation, scale_factor, content_aspect, slot_aspect)
    cx = -bounds.x / bounds.width if bounds.width > 0 else 0.0
    cy = -bounds.y / bounds.height if bounds.height > 0 else 0.0
    cw = 1 / bounds.width if bounds.width > 0 else 1.0
    ch = 1 / bounds.height if bounds.height > 0 else 1.0
    return Box(
        x=_clamp(cx, 0.0, 1.0),
        y=_clamp(cy, 0.0, 1.0),
        width=max(0.0, min(1 - max(0.0, cx), cw)),
        height=max(0.0, min(1 - max(0.0, cy), ch)),
    )


def rotate_point(point: Point, degrees: int) -> Point:
    """Rotate a normalized point clockwise about the page center."""
    angle = normalize_degrees(degrees)
    if angle == 90:
        return Point(1 - point.y, point.x)
    if angle == 180:
        return Point(1 - point.x, 1 - point.y)
    if angle == 270:
        return Point(point.y, 1 - point.x)
    return Point(point.x, point.y)


def unrotate_point(point: Point, degrees: int) -> Point:
    return rotate_point(point, (360 - normalize_degrees(degrees)) % 360)


def scale_point(point: Point, scale_factor: float) -> Point:
    return Point(
        CENTER.x + scale_factor * (point.x - CENTER.x),
        CENTER.y + scale_factor * (point.y - CENTER.y),
    )


def unscale_point(point: Point, scale_factor: float) -> Point:
    if scale_factor == 0:
        return point
    return Point(
        CENTER.x + (point.x - CENTER.x) / scale_factor,
        CENTER.y + (point.y - CENTER.y) / scale_factor,
    )


def box_corners(box: Box) -> list[Point]:
    return [
        Point(box.x, box.y),
        Point(box.right, box.y),
        Point(box.x, box.bottom),
        Point(box.right, box.bottom),
    ]


def bounding_box(points: Iterable[Point]) -> Box:
    """Smallest axis-aligned box containing every point."""
    pts = list(points)
    xs = [p.x for p in pts]
    ys = [p.y for p in pts]
    return Box(min(xs), min(ys), max(xs) - min(xs), max(ys) - min(ys))


def forward_transform_box(
    box: Box,
    rotation: int,
    scale_factor: float,
    content_aspect: float = 1.0,
    slot_aspect: float = 1.0,
    offset: Point = ORIGIN,
) -> Box:
    """Map a content-space box onto the canvas."""
    bounds = get_content_bounds(rotation, scale_factor, content_aspect, slot_aspect)
    rotated = bounding_box(rotate_point(c, rotation) for c in box_corners(box))
    return Box(
        x=bounds.x + rotated.x * bounds.width + offset.x,
        y=bounds.y + rotated.y * bounds.height + offset.y,
        width=rotated.width * bounds.width,
        height=rotated.height * bounds.height,
    )


def inverse_transform_box(
    box: Box,
    rotation: int,
    scale_factor: float,
    content_aspect: float = 1.0,
    slot_aspect: float = 1.0,
    offset: Point = ORIGIN,
) -> Box:
    """Map a canvas box back into content space.

    Inverse of forward_transform_box for any positive scale factor.
    """
    bounds = get_content_bounds(rotation, scale_factor, content_aspect, slot_aspect)
    x = box.x - offset.x
    y = box.y - offset.y
    rotated = Box(
        x=(x - bounds.x) / bounds.width if bounds.width > 0 else 0.0,
        y=(y - bounds.y) / bounds.height if bounds.height > 0 else 0.0,
        width=box.width / bounds.width if bounds.width > 0 else 0.0,
        height=box.height / bounds.height if bounds.height > 0 else 0.0,
    )
    return bounding_box(unrotate_point(c, rotation) for c in box_corners(rotated))


def forward_transform_point(
    point: Point,
    rotation: int,
    scale_factor: float,
    offset: Point = ORIGIN,
) -> Point:
    p = scale_point(rotate_point(point, rotation), scale_factor)
    return Point(p.x + offset.x, p.y + offset.y)


def inverse_transform_point(
    point: Point,
    rotation: int,
    scale_factor: float,
    offset: Point = ORIGIN,
) -> Point:
    p = Point(point.x - offset.x, point.y - offset.y)
    return unrotate_point(unscale_point(p, scale_factor), rotation)


def compose_crop(base: Box | None, child: Box) -> Box:
    """Express a crop drawn inside an already-cropped view in page coordinates."""
    base = base or Box.full()
    return Box(
        x=base.x + child.x * base.width,
        y=base.y + child.y * base.height,
        width=child.width * base.width,
        height=child.height * base.height,
    )


def decompose_crop(base: Box | None, absolute: Box) -> Box:
    """Express a page-space crop relative to a base crop.

    A zero-size base yields the full box.
    """
    base = base or Box.full()
    if base.width == 0 or base.height == 0:
        return Box.full()
    return Box(
        x=(absolute.x - base.x) / base.width,
        y=(absolute.y - base.y) / base.height,
        width=absolute.width / base.width,
        height=absolute.height / base.height,
    )


def clamp_box(box: Box, min_size: float = 0.05) -> Box:
    """Force a box inside the unit square with a minimum size."""
    x = _clamp(box.x, 0.0, 1 - min_size)
    y = _clamp(box.y, 0.0, 1 - min_size)
    width = min(1 - x, max(min_size, box.width))
    height = min(1 - y, max(min_size, box.height))
    return Box(x, y, width, height)


@dataclass(frozen=True)
class Placement:
    """Where a cropped region is drawn on an output page, in page units."""

    x: float
    y: float
    width: float
    height: float


def centered_crop_placement(
    page_width: float,
    page_height: float,
    crop_width: float,
    crop_height: float,
    fit_to_page: bool = False,
    margin: float = SAFE_MARGIN,
) -> Placement:
    """Center a crop on the output page inside a safe margin.

    With fit_to_page the crop is scaled up or down to fill the safe area.
    Otherwise it keeps its size unless it overflows the safe area, in which
    case it is scaled down.
    """
    safe_w = page_width * (1 - 2 * margin)
    safe_h = page_height * (1 - 2 * margin)
    if crop_width <= 0 or crop_height <= 0:
        return Placement(page_width / 2, page_height / 2, 0.0, 0.0)

    scale = min(safe_w / crop_width, safe_h / crop_height)
    if not fit_to_page:
        scale = min(1.0, scale)

    draw_w = crop_width * scale
    draw_h = crop_height * scale
    return Placement(
        x=(page_width - draw_w) / 2,
        y=(page_height - draw_h) / 2,
        width=draw_w,
        height=draw_h,
    )


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))
