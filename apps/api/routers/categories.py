from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from reviewhub.services import Actor, PaginationParams, categories as category_catalog

from ..core.deps import get_db, get_pagination, require_admin
from ..core.serialize import envelope, page_envelope, serialize_category, serialize_category_entry
from ..schemas.category import CategoryRequest

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("")
def list_categories(
    includeStats: bool = False,
    pagination: PaginationParams = Depends(get_pagination),
    db: Session = Depends(get_db),
):
    page = category_catalog.list_categories(db, pagination, include_stats=includeStats)
    return page_envelope("Categories retrieved successfully", page, serialize_category_entry)


@router.get("/{category_id}")
def get_category(category_id: int, db: Session = Depends(get_db)):
    category = category_catalog.get_category(db, category_id)
    return envelope("Category retrieved successfully", serialize_category(category))


@router.post("", status_code=status.HTTP_201_CREATED)
def create_category(
    body: CategoryRequest,
    _admin: Actor = Depends(require_admin),
    db: Session = Depends(get_db),
):
    category = category_catalog.create_category(db, body.name)
    db.commit()
    return envelope("Category created successfully", serialize_category(category))


@router.patch("/{category_id}")
def rename_category(
    category_id: int,
    body: CategoryRequest,
    _admin: Actor = Depends(require_admin),
    db: Session = Depends(get_db),
):
    category = category_catalog.rename_category(db, category_id, body.name)
    db.commit()
    return envelope("Category updated successfully", serialize_category(category))


@router.delete("/{category_id}")
def delete_category(
    category_id: int,
    _admin: Actor = Depends(require_admin),
    db: Session = Depends(get_db),
):
    deleted_id = category_catalog.delete_category(db, category_id)
    db.commit()
    return envelope("Category deleted successfully", {"id": str(deleted_id)})
