"""
List-endpoint helpers: free-text search, "All" filters and page windows.
"""
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Query

# Filter values the clients send to mean "no filter"
ALL_VALUES = {"", "all", "all regions"}


@dataclass
class PageParams:
    page: int = 1
    limit: int = 10

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def search_clause(search: Optional[str], *columns):
    """
    Case-insensitive substring match of ``search`` against any of ``columns``.

    Returns None when there is nothing to search for.
    """
    term = (search or "").strip()
    if not term or not columns:
        return None
    pattern = f"%{_escape_like(term)}%"
    return or_(*[col.ilike(pattern, escape="\\") for col in columns])


def is_filter_set(value: Optional[str]) -> bool:
    """True unless the value is empty or one of the "All" sentinels"""
    return value is not None and value.strip().lower() not in ALL_VALUES


def paginate(query: Query, params: PageParams) -> tuple[List[Any], Dict[str, int]]:
    """
    Apply the page window to an already-filtered, already-ordered query.

    ``total`` is counted on the same filtered query so it never depends on the page.
    """
    total = query.order_by(None).count()
    items = query.offset(params.offset).limit(params.limit).all()
    return items, {
        "total": total,
        "page": params.page,
        "limit": params.limit,
        "totalPages": math.ceil(total / params.limit) if params.limit else 0,
    }
