"""Page specification parsing for pdfprep.

Edit scripts and selection helpers address pages with short specs such as
``"1-3"``, ``"odd"`` or ``[1, 4]``. Results are 1-based page numbers, the
same numbering used everywhere else in the package.
"""

import re
from collections.abc import Sequence

from pdfprep.exceptions import PageSelectionError

KEYWORDS = ("first", "last", "all", "odd", "even")

_RANGE = re.compile(r"^(\d*)-(\d*)$")
_OFFSET_RANGE = re.compile(r"^(\d*)--(\d+)$")

PageSpec = str | int | Sequence[int]


def select_pages(spec: PageSpec, total_pages: int) -> list[int]:
    """Convert a page specification to a list of page numbers.

    Supports:
    - Integers and lists of integers: 2, [1, 3] (negative counts from the end)
    - Ranges: "1-3", open range "3-", last N pages "-2"
    - Offset from end: "1--1" is page 1 through the second-to-last page
    - Keywords: "first", "last", "odd", "even", "all"

    Args:
        spec: Page selection specification
        total_pages: Number of pages in the document

    Returns:
        Page numbers (1-based) in the order the spec names them

    Raises:
        PageSelectionError: If the spec is malformed or names missing pages
    """
    if total_pages <= 0:
        raise PageSelectionError("Document has no pages")

    if isinstance(spec, bool):
        raise PageSelectionError(f"Invalid page specification: {spec!r}")
    if isinstance(spec, int):
        return _select_from_list([spec], total_pages)
    if not isinstance(spec, str):
        return _select_from_list(list(spec), total_pages)

    text = spec.strip().lower()
    every = range(1, total_pages + 1)

    if text == "first":
        return [1]
    if text == "last":
        return [total_pages]
    if text == "all":
        return list(every)
    if text == "odd":
        return [p for p in every if p % 2 == 1]
    if text == "even":
        return [p for p in every if p % 2 == 0]

    match = _OFFSET_RANGE.match(text)
    if match:
        start = int(match.group(1)) if match.group(1) else 1
        end = total_pages - int(match.group(2))
        if start < 1 or end < 1 or start > end:
            raise PageSelectionError(
                f"Invalid range: {spec} for {total_pages} page document",
                {"spec": spec},
            )
        return list(range(start, end + 1))

    match = _RANGE.match(text)
    if match:
        start_str, end_str = match.groups()
        if not start_str and not end_str:
            raise PageSelectionError(f"Invalid range specification: {spec}")
        if not start_str:
            n = int(end_str)
            if n > total_pages:
                raise PageSelectionError(
                    f"Cannot select last {n} pages from {total_pages} page document"
                )
            return list(range(total_pages - n + 1, total_pages + 1))
        start = int(start_str)
        end = int(end_str) if end_str else total_pages
        if start < 1 or start > total_pages:
            raise PageSelectionError(
                f"Invalid range: {spec} for {total_pages} page document",
                {"spec": spec},
            )
        end = min(end, total_pages)
        if start > end:
            raise PageSelectionError(f"Start page {start} is after end page {end}")
        return list(range(start, end + 1))

    if text.isdigit():
        return _select_from_list([int(text)], total_pages)

    raise PageSelectionError(
        f"Unknown page specification: {spec!r}",
        {"valid": "first, last, all, odd, even, 1-3, 3-, -2, 1--1, 5"},
    )


def _select_from_list(pages: Sequence[int], total_pages: int) -> list[int]:
    result = []
    for page in pages:
        if isinstance(page, bool) or not isinstance(page, int):
            raise PageSelectionError(f"Page list must contain integers, got {page!r}")
        number = total_pages + page + 1 if page < 0 else page
        if number < 1 or number > total_pages:
            raise PageSelectionError(f"Page {page} is out of range for {total_pages} page document")
        result.append(number)
    return result
