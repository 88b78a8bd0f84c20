"""Multi-page selection."""

from __future__ import annotations

from collections.abc import Callable

from pdfprep.selector import PageSpec, select_pages


class SelectionState:
    """Ephemeral set of selected page numbers.

    Remembers the last page selected so a shift-click can extend a range
    from it. Never part of the recipe.
    """

    def __init__(self):
        self._selected: set[int] = set()
        self._last: int | None = None

    def select(self, page_number: int) -> None:
        self._selected.add(page_number)
        self._last = page_number

    def deselect(self, page_number: int) -> None:
        self._selected.discard(page_number)
        if self._last == page_number:
            self._last = None

    def toggle(self, page_number: int) -> bool:
        """Flip a page's selection. Returns True if it is now selected."""
        if page_number in self._selected:
            self.deselect(page_number)
            return False
        self.select(page_number)
        return True

    def select_only(self, page_number: int) -> None:
        self._selected = {page_number}
        self._last = page_number

    def select_range(self, start: int, end: int) -> None:
        low, high = sorted((start, end))
        self._selected.update(range(low, high + 1))
        self._last = end

    def extend_selection(self, page_number: int) -> None:
        """Shift-click: select from the last selected page through this one."""
        if self._last is None:
            self.select(page_number)
        else:
            self.select_range(self._last, page_number)

    def select_all(self, total_pages: int) -> None:
        self._selected.update(range(1, total_pages + 1))
        self._last = total_pages if total_pages > 0 else None

    def select_odd(self, total_pages: int) -> None:
        self._selected = set(range(1, total_pages + 1, 2))
        self._last = None

    def select_even(self, total_pages: int) -> None:
        self._selected = set(range(2, total_pages + 1, 2))
        self._last = None

    def select_spec(self, spec: PageSpec, total_pages: int) -> None:
        """Replace the selection with the pages a spec such as "1-3" names."""
        pages = select_pages(spec, total_pages)
        self._selected = set(pages)
        self._last = pages[-1] if pages else None

    def invert(self, total_pages: int) -> None:
        self._selected = set(range(1, total_pages + 1)) - self._selected
        self._last = None

    def filter(self, predicate: Callable[[int], bool]) -> None:
        self._selected = {p for p in self._selected if predicate(p)}
        if self._last is not None and self._last not in self._selected:
            self._last = None

    def clear_all(self) -> None:
        self._selected.clear()
        self._last = None

    def is_selected(self, page_number: int) -> bool:
        return page_number in self._selected

    def get_selected(self) -> list[int]:
        return sorted(self._selected)

    @property
    def count(self) -> int:
        return len(self._selected)

    def has_selection(self) -> bool:
        return bool(self._selected)

    def has_multiple_selections(self) -> bool:
        return len(self._selected) > 1

    @property
    def first(self) -> int | None:
        return min(self._selected) if self._selected else None

    @property
    def last(self) -> int | None:
        """The most recently selected page, not the highest."""
        return self._last
