"""Abstract base class for page rasterizers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path

from PIL import Image

from pdfprep.model import PageInfo


@dataclass(frozen=True)
class LoadResult:
    """What a rasterizer reports after opening a document."""

    document_id: str
    total_pages: int
    pages: list[PageInfo] = field(default_factory=list)


class Rasterizer(ABC):
    """Turns document pages into Pillow images.

    A rasterizer knows nothing about edits: every image it returns is the
    untransformed page. Transforms are applied on top by the preview cache.

    Example:
        rasterizer = PdfRasterizer()
        result = await rasterizer.load_file(path)
        image = await rasterizer.get_preview(1, 800, 1000)
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Rasterizer identifier (e.g., 'pdf', 'mock')."""

    @abstractmethod
    async def load_file(self, path: Path) -> LoadResult:
        """Open a document and read its page count and page sizes.

        Raises:
            DocumentError: If the file cannot be opened
        """

    @abstractmethod
    async def get_preview(self, page_number: int, width: int, height: int) -> Image.Image:
        """Render a page to fit inside width x height pixels.

        Raises:
            RenderError: If rendering fails
        """

    @abstractmethod
    async def get_raw_preview(self, page_number: int, scale: float = 1.0) -> Image.Image:
        """Render a page at scale x its point size.

        Raises:
            RenderError: If rendering fails
        """

    @abstractmethod
    def get_page_dimensions(self, page_number: int) -> tuple[float, float] | None:
        """Page size in points, or None for an unknown page."""

    def close(self) -> None:
        """Release the loaded document. Safe to call more than once."""
