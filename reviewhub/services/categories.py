from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import case, func, select
from sqlalchemy.orm import Session

from reviewhub.db.crud import CategoryCRUD
from reviewhub.db.models import Category, Review, ReviewStatus
from reviewhub.errors import BadRequestError, ConflictError, NotFoundError

from .pagination import Page, PaginationParams, paginate

logger = logging.getLogger(__name__)

MIN_NAME_LENGTH = 2


@dataclass
class CategoryEntry:
    category: Category
    review_count: int | None = None
    published_count: int | None = None


def _validate_name(session: Session, name: str | None, exclude_id: int | None = None) -> str:
    name = (name or "").strip()
    if len(name) < MIN_NAME_LENGTH:
        raise BadRequestError(
            f"Category name must be at least {MIN_NAME_LENGTH} characters", path="name"
        )
    if CategoryCRUD.get_by_name_ci(session, name, exclude_id=exclude_id) is not None:
        raise ConflictError("Category with this name already exists", path="name")
    return name


def create_category(session: Session, name: str) -> Category:
    category = CategoryCRUD.create(session, _validate_name(session, name))
    logger.info(f"Category {category.id} created: {category.name!r}")
    return category


def get_category(session: Session, category_id: int) -> Category:
    category = CategoryCRUD.get_by_id(session, category_id)
    if category is None:
        raise NotFoundError("Category not found")
    return category


def rename_category(session: Session, category_id: int, name: str) -> Category:
    category = get_category(session, category_id)
    category.name = _validate_name(session, name, exclude_id=category_id)
    session.flush()
    return category


def delete_category(session: Session, category_id: int) -> int:
    """Remove an unused category. Reviews must be reassigned before their category goes."""
    category = get_category(session, category_id)
    review_count = CategoryCRUD.count_reviews(session, category_id)
    if review_count > 0:
        raise BadRequestError(
            f"Cannot delete category with {review_count} reviews. Reassign reviews first.",
            path="categoryId",
        )
    CategoryCRUD.delete(session, category)
    logger.info(f"Category {category_id} deleted")
    return category_id


def list_categories(
    session: Session, pagination: PaginationParams, include_stats: bool = False
) -> Page[CategoryEntry]:
    stmt = select(Category).order_by(Category.name.asc(), Category.id.asc())
    categories, meta = paginate(session, stmt, pagination)
    entries = [CategoryEntry(category) for category in categories]
    if include_stats and entries:
        ids = [entry.category.id for entry in entries]
        stats_stmt = (
            select(
                Review.category_id,
                func.count(Review.id),
                func.sum(case((Review.status == ReviewStatus.PUBLISHED, 1), else_=0)),
            )
            .where(Review.category_id.in_(ids))
            .group_by(Review.category_id)
        )
        stats = {row[0]: (row[1], row[2] or 0) for row in session.execute(stats_stmt)}
        for entry in entries:
            entry.review_count, entry.published_count = stats.get(entry.category.id, (0, 0))
    return Page(meta=meta, data=entries)
