"""Apply page transforms to rendered images with Pillow."""

from __future__ import annotations

import io

from PIL import Image

from pdfprep.constants import DEFAULT_SCALE
from pdfprep.geometry import centered_crop_placement
from pdfprep.model import PageTransforms

# Clockwise rotation expressed as Pillow transposes (which turn counter-clockwise)
_CLOCKWISE = {
    90: Image.Transpose.ROTATE_270,
    180: Image.Transpose.ROTATE_180,
    270: Image.Transpose.ROTATE_90,
}


def crop_image(image: Image.Image, transforms: PageTransforms) -> Image.Image:
    crop = transforms.crop
    if crop is None:
        return image
    w, h = image.size
    left = round(crop.x * w)
    top = round(crop.y * h)
    right = min(w, max(left + 1, round(crop.right * w)))
    bottom = min(h, max(top + 1, round(crop.bottom * h)))
    return image.crop((left, top, right, bottom))


def rotate_image(image: Image.Image, rotation: int) -> Image.Image:
    method = _CLOCKWISE.get(rotation % 360)
    return image.transpose(method) if method is not None else image


def scale_image(image: Image.Image, scale: float) -> Image.Image:
    if scale == DEFAULT_SCALE:
        return image
    factor = scale / 100
    size = (max(1, round(image.width * factor)), max(1, round(image.height * factor)))
    return image.resize(size, Image.Resampling.LANCZOS)


def apply_transforms(image: Image.Image, transforms: PageTransforms) -> Image.Image:
    """Crop, then rotate, then scale.

    Translation is not baked into a standalone preview; it only matters
    once the page is placed on a sheet (see place_on_page).
    """
    result = crop_image(image, transforms)
    result = rotate_image(result, transforms.rotation)
    return scale_image(result, transforms.scale)


def fit_within(image: Image.Image, max_width: int, max_height: int) -> Image.Image:
    """Downsize to fit a bounding box, keeping aspect ratio. Never upscales."""
    ratio = min(max_width / image.width, max_height / image.height, 1.0)
    if ratio >= 1.0:
        return image.copy()
    size = (max(1, round(image.width * ratio)), max(1, round(image.height * ratio)))
    return image.resize(size, Image.Resampling.LANCZOS)


def place_on_page(
    content: Image.Image,
    transforms: PageTransforms,
    width: int,
    height: int,
    background: str = "white",
    fit_crop_to_page: bool = False,
) -> Image.Image:
    """Draw an already-transformed page centered on a blank page, then translate it.

    Offsets are fractions of the page size. Content falling outside the
    page is clipped. With fit_crop_to_page, a cropped page is resized to
    fill the page's safe area first.
    """
    page = Image.new("RGB", (width, height), background)
    if fit_crop_to_page and transforms.crop is not None:
        placement = centered_crop_placement(width, height, content.width, content.height, fit_to_page=True)
        size = (max(1, round(placement.width)), max(1, round(placement.height)))
        if size != content.size:
            content = content.resize(size, Image.Resampling.LANCZOS)
    x = round((width - content.width) / 2 + transforms.offset_x * width)
    y = round((height - content.height) / 2 + transforms.offset_y * height)
    page.paste(content.convert("RGB"), (x, y))
    return page


def encode_jpeg(image: Image.Image, quality: int) -> bytes:
    buffer = io.BytesIO()
    image.convert("RGB").save(buffer, format="JPEG", quality=quality)
    return buffer.getvalue()
