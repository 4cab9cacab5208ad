# backend/routes/categories.py
from typing import List

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database import get_db
from models.category import Category
from models.product import Product
from models.users import User
from schemas.category import CategoryCreate, CategoryUpdate, CategoryOut
from utils.audit import write_log
from utils.errors import ConflictError, NotFoundError
from utils.tokenJWT import role_required

router = APIRouter(prefix="/categories", tags=["Categories"])


def _get_category(db: Session, category_id: int) -> Category:
    category = db.query(Category).filter(Category.id == category_id).first()
    if not category:
        raise NotFoundError("Category not found")
    return category


def _ensure_unique_name(db: Session, name: str, exclude_id: int = None):
    q = db.query(Category).filter(Category.name == name)
    if exclude_id is not None:
        q = q.filter(Category.id != exclude_id)
    if q.first():
        raise ConflictError("Category name already exists")


def _flush_unique(db: Session):
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Category name already exists")


@router.get("", response_model=List[CategoryOut])
def list_categories(db: Session = Depends(get_db)):
    return db.query(Category).order_by(Category.id).all()


@router.get("/{category_id}", response_model=CategoryOut)
def get_category(category_id: int, db: Session = Depends(get_db)):
    return _get_category(db, category_id)


@router.post("", response_model=CategoryOut, status_code=status.HTTP_201_CREATED)
def create_category(
    payload: CategoryCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("admin")),
):
    _ensure_unique_name(db, payload.name)

    category = Category(name=payload.name, description=payload.description)
    db.add(category)
    _flush_unique(db)

    write_log(db, user_id=current_user.id, action="CATEGORY_CREATE", resource="categories",
              request=request, meta={"id": category.id, "name": category.name})
    db.commit()
    db.refresh(category)
    return category


@router.put("/{category_id}", response_model=CategoryOut)
def update_category(
    category_id: int,
    payload: CategoryUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("admin")),
):
    category = _get_category(db, category_id)

    if payload.name is not None and payload.name != category.name:
        _ensure_unique_name(db, payload.name, exclude_id=category.id)
        category.name = payload.name
    if payload.description is not None:
        category.description = payload.description

    _flush_unique(db)

    write_log(db, user_id=current_user.id, action="CATEGORY_UPDATE", resource="categories",
              request=request, meta={"id": category.id})
    db.commit()
    db.refresh(category)
    return category


@router.delete("/{category_id}")
def delete_category(
    category_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("admin")),
):
    category = _get_category(db, category_id)

    # Products must point at an existing category
    in_use = db.query(Product.id).filter(Product.category_id == category.id).first()
    if in_use:
        raise ConflictError("Category still has products")

    db.delete(category)
    write_log(db, user_id=current_user.id, action="CATEGORY_DELETE", resource="categories",
              request=request, meta={"id": category_id})
    db.commit()
    return {"message": "Category deleted successfully"}
