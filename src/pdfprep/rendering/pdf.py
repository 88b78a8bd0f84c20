"""Rasterizer backed by pypdf and pdf2image."""

from __future__ import annotations

import asyncio
import hashlib
from pathlib import Path

from pdf2image import convert_from_path
from PIL import Image
from pypdf import PdfReader
from pypdf.errors import PdfReadError

from pdfprep.constants import MAX_RENDER_SCALE
from pdfprep.exceptions import DocumentError, RenderError
from pdfprep.logging_config import get_logger
from pdfprep.model import PageInfo
from pdfprep.rendering.base import LoadResult, Rasterizer

logger = get_logger(__name__)

POINTS_PER_INCH = 72


def _document_id(path: Path) -> str:
    digest = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(1 << 20), b""):
            digest.update(chunk)
    return digest.hexdigest()[:16]


def read_page_infos(path: Path) -> list[PageInfo]:
    """Page sizes in points, honoring each page's /Rotate entry.

    Raises:
        DocumentError: If the file is not a readable PDF
    """
    try:
        reader = PdfReader(path)
        infos = []
        for index, page in enumerate(reader.pages):
            width = float(page.mediabox.width)
            height = float(page.mediabox.height)
            if page.rotation % 180 == 90:
                width, height = height, width
            infos.append(PageInfo(page_number=index + 1, width=width, height=height))
        return infos
    except (PdfReadError, OSError, ValueError) as e:
        raise DocumentError(f"Cannot read PDF: {e}", {"file": str(path)}) from e


class PdfRasterizer(Rasterizer):
    """Renders PDF pages through poppler (via pdf2image).

    Page counts and sizes come from pypdf so loading does not need poppler.
    Rendering runs in a worker thread so the event loop stays responsive.
    """

    name = "pdf"

    def __init__(self, max_render_scale: float = MAX_RENDER_SCALE):
        self.max_render_scale = max_render_scale
        self._path: Path | None = None
        self._pages: dict[int, PageInfo] = {}

    async def load_file(self, path: Path) -> LoadResult:
        path = Path(path)
        if not path.exists():
            raise DocumentError("File not found", {"file": str(path)})

        infos = await asyncio.to_thread(read_page_infos, path)
        document_id = await asyncio.to_thread(_document_id, path)

        self._path = path
        self._pages = {info.page_number: info for info in infos}
        logger.debug("Loaded %s: %d pages", path.name, len(infos))
        return LoadResult(document_id=document_id, total_pages=len(infos), pages=infos)

    def get_page_dimensions(self, page_number: int) -> tuple[float, float] | None:
        info = self._pages.get(page_number)
        return (info.width, info.height) if info else None

    def fit_scale(self, page_number: int, width: int, height: int) -> float:
        """Scale that fits the page in width x height, capped at max_render_scale."""
        dims = self.get_page_dimensions(page_number)
        if dims is None:
            return 1.0
        return min(width / dims[0], height / dims[1], self.max_render_scale)

    async def get_preview(self, page_number: int, width: int, height: int) -> Image.Image:
        return await self.get_raw_preview(page_number, self.fit_scale(page_number, width, height))

    async def get_raw_preview(self, page_number: int, scale: float = 1.0) -> Image.Image:
        if self._path is None:
            raise RenderError("No document loaded", {"page": page_number})
        if page_number not in self._pages:
            raise RenderError("Page out of range", {"page": page_number})
        return await asyncio.to_thread(self._render, self._path, page_number, scale)

    def _render(self, path: Path, page_number: int, scale: float) -> Image.Image:
        dpi = max(1, round(POINTS_PER_INCH * scale))
        try:
            images = convert_from_path(
                path,
                dpi=dpi,
                first_page=page_number,
                last_page=page_number,
            )
        except Exception as e:
            raise RenderError(f"Failed to render page: {e}", {"page": page_number, "dpi": dpi}) from e

        if not images:
            raise RenderError("Renderer returned no image", {"page": page_number})
        return images[0].convert("RGB")

    def close(self) -> None:
        self._path = None
        self._pages.clear()
