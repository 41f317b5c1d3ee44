"""
Page/page_size query handling for list endpoints.

`page_request` is a FastAPI dependency; the resulting `PageRequest` slices an
ordered query and reports the page back in the body and X-Total-Count,
X-Page and X-Page-Size headers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Optional

from fastapi import Query, Response


DEFAULT_PAGE_SIZE = 50
DEFAULT_MAX_PAGE_SIZE = 200


def max_page_size() -> int:
    """API_MAX_PAGE_SIZE, or the default when unset or not a positive integer."""
    try:
        value = int(os.getenv("API_MAX_PAGE_SIZE", str(DEFAULT_MAX_PAGE_SIZE)))
    except ValueError:
        return DEFAULT_MAX_PAGE_SIZE
    return value if value >= 1 else DEFAULT_MAX_PAGE_SIZE


@dataclass(frozen=True)
class PageRequest:
    page: int = 1
    size: int = DEFAULT_PAGE_SIZE

    @classmethod
    def bounded(cls, page: int, size: int) -> "PageRequest":
        return cls(page=max(page, 1), size=min(max(size, 1), max_page_size()))

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.size

    def fetch(self, query, response: Optional[Response] = None) -> tuple[int, list[Any]]:
        """Count `query`, return (total, rows of this page) and set the page headers."""
        total = query.count()
        rows = query.offset(self.offset).limit(self.size).all()
        if response is not None:
            response.headers["X-Total-Count"] = str(total)
            response.headers["X-Page"] = str(self.page)
            response.headers["X-Page-Size"] = str(self.size)
        return total, rows

    def body(self, total: int) -> dict:
        return {"total": total, "page": self.page, "page_size": self.size}


def page_request(
    page: int = Query(1, ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1),
) -> PageRequest:
    return PageRequest.bounded(page, page_size)
