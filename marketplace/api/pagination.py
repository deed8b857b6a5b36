"""Pagination metadata and page-number windows for listing endpoints.

All functions are pure: the same inputs always give the same output, and no
state survives a call.
"""

from __future__ import annotations

import math
from collections.abc import Callable

from marketplace.exceptions import ContractViolationException
from marketplace.schemas.responses import PaginationMetadata

ELLIPSIS = "…"
DEFAULT_MAX_VISIBLE = 5

PageNumber = int | str


def compute_metadata(total_results: int, page_size: int, current_page: int) -> PaginationMetadata:
    """Build :class:`PaginationMetadata` for a listing.

    ``current_page`` is not clamped; callers that must reject out-of-range
    pages clamp with :func:`clamp_page` first.
    """
    if total_results < 0:
        raise ContractViolationException(f"total_results must be >= 0, got {total_results}")
    if page_size < 1:
        raise ContractViolationException(f"page_size must be >= 1, got {page_size}")
    if current_page < 1:
        raise ContractViolationException(f"current_page must be >= 1, got {current_page}")

    last_page = max(1, math.ceil(total_results / page_size))
    has_previous = current_page > 1
    has_next = current_page < last_page

    return PaginationMetadata(
        current_page=current_page,
        last_page=last_page,
        total_results=total_results,
        has_previous_page=has_previous,
        has_next_page=has_next,
        previous_page=current_page - 1 if has_previous else None,
        next_page=current_page + 1 if has_next else None,
        has_to_paginate=last_page > 1,
    )


def last_page_for(total_results: int, page_size: int) -> int:
    return compute_metadata(total_results, page_size, 1).last_page


def clamp_page(page: int, last_page: int) -> int:
    return min(max(page, 1), max(last_page, 1))


def visible_page_numbers(
    current_page: int,
    last_page: int,
    max_visible: int = DEFAULT_MAX_VISIBLE,
) -> list[PageNumber]:
    """Page numbers to render, collapsing gaps to :data:`ELLIPSIS`.

    The window of ``max_visible`` pages is centred on ``current_page`` and
    re-anchored against the last page when it would run past it.

    >>> visible_page_numbers(3, 10)
    [1, 2, 3, 4, 5, '…', 10]
    >>> visible_page_numbers(10, 10)
    [1, '…', 6, 7, 8, 9, 10]
    """
    if max_visible < 1:
        raise ContractViolationException(f"max_visible must be >= 1, got {max_visible}")
    if last_page < 1:
        raise ContractViolationException(f"last_page must be >= 1, got {last_page}")
    if current_page < 1:
        raise ContractViolationException(f"current_page must be >= 1, got {current_page}")

    if last_page <= max_visible:
        return list(range(1, last_page + 1))

    half = max_visible // 2
    start_page = max(1, current_page - half)
    end_page = min(last_page, start_page + max_visible - 1)
    if end_page - start_page < max_visible - 1:
        start_page = max(1, end_page - max_visible + 1)

    pages: list[PageNumber] = []
    if start_page > 1:
        pages.append(1)
        if start_page > 2:
            pages.append(ELLIPSIS)

    pages.extend(range(start_page, end_page + 1))

    if end_page < last_page:
        if end_page < last_page - 1:
            pages.append(ELLIPSIS)
        pages.append(last_page)

    return pages


def accepts_page_change(page: int, current_page: int, last_page: int) -> bool:
    """Whether navigating from ``current_page`` to ``page`` is a real move."""
    return 1 <= page <= last_page and page != current_page


def request_page_change(
    metadata: PaginationMetadata,
    page: int,
    on_page_change: Callable[[int], None],
) -> bool:
    """Forward ``page`` to ``on_page_change`` if it is a valid move.

    Out-of-range and same-page requests are silently ignored. Returns whether
    the callback fired.
    """
    if not accepts_page_change(page, metadata.current_page, metadata.last_page):
        return False
    on_page_change(page)
    return True


def build_listing(
    items: list,
    total_results: int,
    page_size: int,
    current_page: int,
    max_visible: int = DEFAULT_MAX_VISIBLE,
    items_key: str = "items",
) -> dict:
    """Bundle a page of items with its metadata and visible page numbers."""
    metadata = compute_metadata(total_results, page_size, current_page)
    return {
        items_key: items,
        "pagination": metadata.model_dump(by_alias=True),
        "pages": visible_page_numbers(metadata.current_page, metadata.last_page, max_visible),
    }
