"""In-memory rasterizer for tests and poppler-free runs."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from pathlib import Path

from PIL import Image, ImageDraw

from pdfprep.exceptions import DocumentError, RenderError
from pdfprep.model import PageInfo
from pdfprep.rendering.base import LoadResult, Rasterizer
from pdfprep.rendering.pdf import read_page_infos

MARKER_FRACTION = 0.2


class MockRasterizer(Rasterizer):
    """Rasterizer that draws plain images instead of rendering a document.

    Each page is white with a black square in its top-left corner, so
    rotation and crop effects are visible in tests. All calls are recorded.

    Example:
        rasterizer = MockRasterizer(pages=[(612, 792)] * 3)
        await rasterizer.load_file(Path("doc.pdf"))
        assert rasterizer.calls[0]["method"] == "load_file"
    """

    name = "mock"

    def __init__(
        self,
        pages: Sequence[tuple[float, float]] | None = None,
        fail_pages: set[int] | None = None,
        gate: asyncio.Event | None = None,
        document_id: str = "mock-document",
    ):
        """Initialize the mock.

        Args:
            pages: Page sizes in points. None reads them from the PDF given to load_file.
            fail_pages: Pages whose renders raise RenderError
            gate: If given, every render waits for this event before finishing
            document_id: Identifier reported by load_file
        """
        self.page_sizes = list(pages) if pages is not None else None
        self.fail_pages = set(fail_pages or ())
        self.gate = gate
        self.document_id = document_id
        self.calls: list[dict] = []
        self._pages: dict[int, PageInfo] = {}

    async def load_file(self, path: Path) -> LoadResult:
        self.calls.append({"method": "load_file", "path": path})
        if self.page_sizes is None:
            if not Path(path).exists():
                raise DocumentError("File not found", {"file": str(path)})
            infos = read_page_infos(Path(path))
        else:
            infos = [
                PageInfo(page_number=i + 1, width=float(w), height=float(h))
                for i, (w, h) in enumerate(self.page_sizes)
            ]
        self._pages = {info.page_number: info for info in infos}
        return LoadResult(document_id=self.document_id, total_pages=len(infos), pages=infos)

    def get_page_dimensions(self, page_number: int) -> tuple[float, float] | None:
        info = self._pages.get(page_number)
        return (info.width, info.height) if info else None

    async def get_preview(self, page_number: int, width: int, height: int) -> Image.Image:
        self.calls.append({"method": "get_preview", "page": page_number, "width": width, "height": height})
        dims = self._require(page_number)
        scale = min(width / dims[0], height / dims[1], 2.0)
        return await self._draw(page_number, dims, scale)

    async def get_raw_preview(self, page_number: int, scale: float = 1.0) -> Image.Image:
        self.calls.append({"method": "get_raw_preview", "page": page_number, "scale": scale})
        return await self._draw(page_number, self._require(page_number), scale)

    def render_count(self, page_number: int | None = None) -> int:
        """Number of preview renders requested, optionally for one page."""
        return sum(
            1 for call in self.calls
            if call["method"] in ("get_preview", "get_raw_preview")
            and (page_number is None or call["page"] == page_number)
        )

    def reset(self) -> None:
        """Clear recorded calls."""
        self.calls.clear()

    def _require(self, page_number: int) -> tuple[float, float]:
        dims = self.get_page_dimensions(page_number)
        if dims is None:
            raise RenderError("Page out of range", {"page": page_number})
        return dims

    async def _draw(self, page_number: int, dims: tuple[float, float], scale: float) -> Image.Image:
        if self.gate is not None:
            await self.gate.wait()
        else:
            await asyncio.sleep(0)
        if page_number in self.fail_pages:
            raise RenderError("Simulated render failure", {"page": page_number})

        size = (max(1, round(dims[0] * scale)), max(1, round(dims[1] * scale)))
        image = Image.new("RGB", size, "white")
        marker = (round(size[0] * MARKER_FRACTION) - 1, round(size[1] * MARKER_FRACTION) - 1)
        if marker[0] >= 0 and marker[1] >= 0:
            ImageDraw.Draw(image).rectangle([(0, 0), marker], fill="black")
        return image
