"""Page ordering and inclusion."""

from __future__ import annotations

from collections.abc import Iterable

from pdfprep.model import PageInfo


class PageState:
    """Ordered list of a document's pages plus the set excluded from output.

    Excluding a page keeps its metadata; it only drops out of
    get_included() and therefore out of the recipe.
    """

    def __init__(self):
        self._pages: list[PageInfo] = []
        self._excluded: set[int] = set()
        self._total_pages = 0
        self._document_id = ""

    def init(self, pages: Iterable[PageInfo], document_id: str) -> None:
        self._pages = list(pages)
        self._total_pages = len(self._pages)
        self._document_id = document_id
        self._excluded.clear()

    def clear(self) -> None:
        self.init([], "")

    # === Queries ===

    @property
    def document_id(self) -> str:
        return self._document_id

    @property
    def total_pages(self) -> int:
        return self._total_pages

    @property
    def included_count(self) -> int:
        return self._total_pages - len(self._excluded)

    def is_empty(self) -> bool:
        return not self._pages

    def get_all(self) -> list[PageInfo]:
        return list(self._pages)

    def get_included(self) -> list[PageInfo]:
        """Included pages in current order."""
        return [p for p in self._pages if p.page_number not in self._excluded]

    def get_excluded(self) -> list[int]:
        return sorted(self._excluded)

    def get_page(self, page_number: int) -> PageInfo | None:
        for page in self._pages:
            if page.page_number == page_number:
                return page
        return None

    def get_page_by_index(self, index: int) -> PageInfo | None:
        if 0 <= index < len(self._pages):
            return self._pages[index]
        return None

    def has_page(self, page_number: int) -> bool:
        return self.get_page(page_number) is not None

    def index_of(self, page_number: int) -> int:
        """Position of a page in the current order, -1 if absent."""
        for index, page in enumerate(self._pages):
            if page.page_number == page_number:
                return index
        return -1

    def get_dimensions(self, page_number: int) -> tuple[float, float] | None:
        page = self.get_page(page_number)
        return (page.width, page.height) if page else None

    def get_range(self, start: int, end: int) -> list[PageInfo]:
        return [p for p in self._pages if start <= p.page_number <= end]

    def get_odd_pages(self) -> list[PageInfo]:
        return [p for p in self._pages if p.page_number % 2 == 1]

    def get_even_pages(self) -> list[PageInfo]:
        return [p for p in self._pages if p.page_number % 2 == 0]

    # === Ordering ===

    @property
    def order(self) -> list[int]:
        return [p.page_number for p in self._pages]

    def reorder(self, from_index: int, to_index: int) -> None:
        """Move the page at from_index to to_index. Out-of-range indices are ignored."""
        size = len(self._pages)
        if not (0 <= from_index < size and 0 <= to_index < size) or from_index == to_index:
            return
        page = self._pages.pop(from_index)
        self._pages.insert(to_index, page)

    def set_order(self, page_numbers: Iterable[int]) -> None:
        """Reorder to the given page numbers.

        Unknown numbers are skipped. Known pages missing from the list keep
        their relative order after the listed ones.
        """
        by_number = {p.page_number: p for p in self._pages}
        ordered = []
        for number in page_numbers:
            page = by_number.pop(number, None)
            if page is not None:
                ordered.append(page)
        ordered.extend(p for p in self._pages if p.page_number in by_number)
        self._pages = ordered

    def reset_order(self) -> None:
        self._pages.sort(key=lambda p: p.page_number)

    # === Inclusion ===

    def exclude_page(self, page_number: int) -> None:
        if self.has_page(page_number):
            self._excluded.add(page_number)

    def include_page(self, page_number: int) -> None:
        self._excluded.discard(page_number)

    def toggle_page(self, page_number: int) -> bool:
        """Flip inclusion. Returns True if the page is now included."""
        if page_number in self._excluded:
            self._excluded.discard(page_number)
            return True
        self.exclude_page(page_number)
        return not self.is_excluded(page_number)

    def is_included(self, page_number: int) -> bool:
        return page_number not in self._excluded

    def is_excluded(self, page_number: int) -> bool:
        return page_number in self._excluded

    def include_all(self) -> None:
        self._excluded.clear()

    def exclude_all(self) -> None:
        self._excluded = {p.page_number for p in self._pages}

    def include_only(self, page_numbers: Iterable[int]) -> None:
        keep = set(page_numbers)
        self._excluded = {p.page_number for p in self._pages if p.page_number not in keep}
