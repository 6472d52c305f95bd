from __future__ import annotations

from typing import Sequence, TypeVar

from ..domain import InvalidArgument

T = TypeVar("T")

INVOICE_PAGE_SIZE = 12
SLIP_PAGE_SIZE = 2


def paginate(items: Sequence[T], page_size: int) -> list[list[T]]:
    """Split ``items`` into consecutive chunks of at most ``page_size``; empty input gives no pages."""
    if isinstance(page_size, bool) or not isinstance(page_size, int) or page_size <= 0:
        raise InvalidArgument(f"page_size must be a positive integer, got {page_size!r}")
    seq = list(items)
    return [seq[i : i + page_size] for i in range(0, len(seq), page_size)]
