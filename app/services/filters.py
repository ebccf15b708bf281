"""Store-neutral query helpers: case-insensitive partial match and pagination."""

import math
from collections.abc import Sequence
from dataclasses import dataclass

from sqlalchemy import ColumnElement, or_
from sqlalchemy.orm import Query

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20
MAX_LIMIT = 100
SEARCH_MAX_LEN = 100


@dataclass(slots=True)
class PageParams:
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    @classmethod
    def clamp(cls, page: int | None, limit: int | None) -> "PageParams":
        """Coerce page to >= 1 and limit to 1..MAX_LIMIT."""
        page = max(1, page or DEFAULT_PAGE)
        limit = min(max(1, limit or DEFAULT_LIMIT), MAX_LIMIT)
        return cls(page=page, limit=limit)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def pagination(self, total: int) -> dict[str, int]:
        return {
            "page": self.page,
            "limit": self.limit,
            "total": total,
            "pages": math.ceil(total / self.limit) if total else 0,
        }


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def contains_any(columns: Sequence[ColumnElement], term: str | None) -> ColumnElement | None:
    """Predicate: any column contains term, case-insensitively. None when term is blank."""
    term = (term or "").strip()[:SEARCH_MAX_LEN]
    if not term:
        return None
    pattern = f"%{_escape_like(term)}%"
    return or_(*(col.ilike(pattern, escape="\\") for col in columns))


def paginate(query: Query, params: PageParams) -> tuple[list, int]:
    """Return (rows for the page, total matching rows)."""
    total = query.order_by(None).count()
    rows = query.offset(params.offset).limit(params.limit).all()
    return rows, total
