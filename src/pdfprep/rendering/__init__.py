"""Rasterizer backends and image composition."""

from pdfprep.rendering.base import LoadResult, Rasterizer
from pdfprep.rendering.factory import get_rasterizer
from pdfprep.rendering.mock import MockRasterizer
from pdfprep.rendering.pdf import PdfRasterizer

__all__ = [
    "LoadResult",
    "MockRasterizer",
    "PdfRasterizer",
    "Rasterizer",
    "get_rasterizer",
]
