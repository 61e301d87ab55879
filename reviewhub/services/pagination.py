"""Bounded pagination and the list-result envelope shared by every list read."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

T = TypeVar("T")

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100
DEFAULT_SORT_BY = "createdAt"
DEFAULT_SORT_ORDER = "desc"


@dataclass(frozen=True)
class PaginationParams:
    page: int
    limit: int
    skip: int
    sort_by: str
    sort_order: str


@dataclass
class PageMeta:
    page: int
    limit: int
    total: int


@dataclass
class Page(Generic[T]):
    meta: PageMeta
    data: list[T] = field(default_factory=list)


class PaginationPolicy:
    """Turn raw page/limit/sort input into a bounded window.

    Missing or non-positive values fall back to the defaults, ``limit`` is
    capped at ``max_limit`` and the sort order is normalised to asc/desc.
    Never raises.
    """

    def __init__(self, max_limit: int = MAX_LIMIT) -> None:
        self.max_limit = max_limit

    def resolve(
        self,
        page: int | None = None,
        limit: int | None = None,
        sort_by: str | None = None,
        sort_order: str | None = None,
    ) -> PaginationParams:
        page = page if page and page > 0 else DEFAULT_PAGE
        limit = limit if limit and limit > 0 else DEFAULT_LIMIT
        limit = min(limit, self.max_limit)
        order = (sort_order or DEFAULT_SORT_ORDER).lower()
        if order not in ("asc", "desc"):
            order = DEFAULT_SORT_ORDER
        return PaginationParams(
            page=page,
            limit=limit,
            skip=max((page - 1) * limit, 0),
            sort_by=sort_by or DEFAULT_SORT_BY,
            sort_order=order,
        )


def resolve_pagination(
    page: int | None = None,
    limit: int | None = None,
    sort_by: str | None = None,
    sort_order: str | None = None,
) -> PaginationParams:
    return PaginationPolicy().resolve(page, limit, sort_by, sort_order)


def count_rows(session: Session, stmt: Select[Any]) -> int:
    """Count the rows ``stmt`` would return, ignoring ordering and windowing."""
    subquery = stmt.order_by(None).limit(None).offset(None).subquery()
    return session.scalar(select(func.count()).select_from(subquery)) or 0


def paginate(session: Session, stmt: Select[Any], params: PaginationParams) -> tuple[list[Any], PageMeta]:
    """Run ``stmt`` for one page and an independent count over the same filter."""
    rows = list(session.scalars(stmt.offset(params.skip).limit(params.limit)).all())
    meta = PageMeta(page=params.page, limit=params.limit, total=count_rows(session, stmt))
    return rows, meta
