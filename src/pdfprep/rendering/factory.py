"""Factory for rasterizer backends."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pdfprep.rendering.base import Rasterizer

RASTERIZERS = ("pdf", "mock")


def get_rasterizer(name: str) -> "Rasterizer":
    """Get a rasterizer by name.

    Args:
        name: 'pdf' renders through poppler, 'mock' draws placeholder pages
            with the document's real page sizes

    Raises:
        ValueError: If the name is not recognized
    """
    if name == "pdf":
        from pdfprep.rendering.pdf import PdfRasterizer
        return PdfRasterizer()
    if name == "mock":
        from pdfprep.rendering.mock import MockRasterizer
        return MockRasterizer()
    available = ", ".join(sorted(RASTERIZERS))
    raise ValueError(f"Unknown rasterizer: '{name}'. Available: {available}")
