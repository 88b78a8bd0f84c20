"""N-up sheet layout: several pages printed on one sheet."""

from __future__ import annotations

import math
from dataclasses import dataclass

from PIL import Image

from pdfprep.cache.preview import PagePreviewCache
from pdfprep.constants import PAGES_PER_SHEET
from pdfprep.logging_config import get_logger
from pdfprep.rendering.compose import place_on_page
from pdfprep.state.pages import PageState

logger = get_logger(__name__)


@dataclass(frozen=True)
class GridLayout:
    """Rows and columns of a sheet, with the gap between cells in pixels."""

    rows: int
    cols: int
    gap: int


LAYOUTS = {
    1: GridLayout(rows=1, cols=1, gap=0),
    2: GridLayout(rows=1, cols=2, gap=10),
    4: GridLayout(rows=2, cols=2, gap=10),
}


@dataclass
class _CachedSheet:
    pages: tuple[int, ...]
    size: tuple[int, int]
    image: Image.Image


class SheetLayout:
    """Groups included pages into sheets and renders them.

    Sheets are numbered from 1. Rendered sheets are cached until one of
    their pages is edited or the grouping changes.
    """

    def __init__(self, previews: PagePreviewCache, pages: PageState, pages_per_sheet: int = 1):
        self.previews = previews
        self.pages = pages
        self._pages_per_sheet = 1
        self._sheets: dict[int, _CachedSheet] = {}
        self.set_pages_per_sheet(pages_per_sheet)

    @property
    def pages_per_sheet(self) -> int:
        return self._pages_per_sheet

    @property
    def layout(self) -> GridLayout:
        return LAYOUTS[self._pages_per_sheet]

    def set_pages_per_sheet(self, pages_per_sheet: int) -> None:
        if pages_per_sheet not in LAYOUTS:
            raise ValueError(
                f"Invalid pages per sheet: {pages_per_sheet}. "
                f"Valid values: {', '.join(str(n) for n in PAGES_PER_SHEET)}"
            )
        if pages_per_sheet != self._pages_per_sheet:
            self._pages_per_sheet = pages_per_sheet
            self._sheets.clear()

    def sheet_count(self) -> int:
        return math.ceil(self.pages.included_count / self._pages_per_sheet)

    def sheet_pages(self, sheet_number: int) -> list[int]:
        start = (sheet_number - 1) * self._pages_per_sheet
        included = self.pages.get_included()[start:start + self._pages_per_sheet]
        return [p.page_number for p in included]

    def all_sheets(self) -> list[list[int]]:
        return [self.sheet_pages(n) for n in range(1, self.sheet_count() + 1)]

    def sheet_of(self, page_number: int) -> int | None:
        for index, page in enumerate(self.pages.get_included()):
            if page.page_number == page_number:
                return index // self._pages_per_sheet + 1
        return None

    def cell_size(self, sheet_width: float, sheet_height: float) -> tuple[float, float]:
        """Size of one cell on a sheet of the given size."""
        layout = self.layout
        return (
            (sheet_width - (layout.cols - 1) * layout.gap) / layout.cols,
            (sheet_height - (layout.rows - 1) * layout.gap) / layout.rows,
        )

    def effective_dimensions(self, paper_width: float, paper_height: float) -> tuple[float, float]:
        """Space available to each page on a sheet of paper."""
        return self.cell_size(paper_width, paper_height)

    async def render_sheet(self, sheet_number: int, width: int, height: int) -> Image.Image:
        """Composite a sheet's pages into a width x height image.

        Each page is rendered to fit its cell, then placed centered in the
        cell and shifted by its offset.
        """
        pages = tuple(self.sheet_pages(sheet_number))
        cached = self._sheets.get(sheet_number)
        if cached is not None and cached.pages == pages and cached.size == (width, height):
            return cached.image

        tokens = {p: self.previews.token(p) for p in pages}
        sheet = Image.new("RGB", (width, height), "white")
        layout = self.layout
        cell_w, cell_h = self.cell_size(width, height)
        cell_size = (max(1, math.floor(cell_w)), max(1, math.floor(cell_h)))

        for index, page_number in enumerate(pages):
            row, col = divmod(index, layout.cols)
            preview = await self.previews.get_preview(page_number, cell_size[0], cell_size[1], cache=False)
            store = self.previews.store
            cell = place_on_page(
                preview,
                store.get_transforms(page_number),
                *cell_size,
                fit_crop_to_page=store.get_fit_crop_to_page(page_number),
            )
            sheet.paste(cell, (round(col * (cell_w + layout.gap)), round(row * (cell_h + layout.gap))))

        if all(self.previews.is_current_token(p, t) for p, t in tokens.items()):
            self._sheets[sheet_number] = _CachedSheet(pages, (width, height), sheet)
        else:
            logger.debug("Not caching stale sheet %d", sheet_number)
        return sheet

    def invalidate_sheet(self, sheet_number: int) -> None:
        self._sheets.pop(sheet_number, None)

    def invalidate_sheets_for_page(self, page_number: int) -> None:
        sheet_number = self.sheet_of(page_number)
        if sheet_number is not None:
            self.invalidate_sheet(sheet_number)

    def clear(self) -> None:
        self._sheets.clear()

    def cached_sheets(self) -> list[int]:
        return sorted(self._sheets)
