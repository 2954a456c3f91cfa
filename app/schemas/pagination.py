"""
Pagination schemas - page parameters and the generic page envelope.

Page parameters are lenient: a missing, non-numeric or out-of-range value
falls back to the default instead of failing the request.
"""

from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

T = TypeVar("T")


def parse_page(value: Optional[str]) -> int:
    """Page number >= 1, else DEFAULT_PAGE."""
    try:
        page = int(value)
    except (TypeError, ValueError):
        return DEFAULT_PAGE
    return page if page >= 1 else DEFAULT_PAGE


def parse_page_size(value: Optional[str]) -> int:
    """Page size in 1..MAX_PAGE_SIZE, else DEFAULT_PAGE_SIZE."""
    try:
        size = int(value)
    except (TypeError, ValueError):
        return DEFAULT_PAGE_SIZE
    return size if 1 <= size <= MAX_PAGE_SIZE else DEFAULT_PAGE_SIZE


class Pagination(BaseModel):
    page: int = DEFAULT_PAGE
    page_size: int = DEFAULT_PAGE_SIZE


class Page(BaseModel, Generic[T]):
    """
    One page of results.

    Example response:
    {"items": [...], "total": 42, "page": 2, "page_size": 20}
    """
    items: List[T]
    total: int
    page: int
    page_size: int
