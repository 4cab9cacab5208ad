# backend/routes/products.py
import math
from typing import Optional, List

import anyio
from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session, Query as SAQuery

from database import get_db
from models.cart import CartItem
from models.category import Category
from models.product import Product
from models.users import User
import schemas.product as product_schemas
from utils.audit import write_log
from utils.errors import NotFoundError, ValidationError
from utils.image_storage import CloudinaryUploader, get_image_uploader
from utils.tokenJWT import role_required

router = APIRouter(prefix="/products", tags=["Products"])


# ---- HELPERS ----
def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _filtered_query(
    db: Session,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    category_id: Optional[int] = None,
    search: Optional[str] = None,
) -> SAQuery:
    """Single predicate shared by the page query and the count query."""
    query = db.query(Product)

    if min_price is not None:
        query = query.filter(Product.price >= min_price)
    if max_price is not None:
        query = query.filter(Product.price <= max_price)
    if category_id is not None:
        query = query.filter(Product.category_id == category_id)
    if search:
        query = query.filter(Product.name.ilike(f"%{_escape_like(search)}%", escape="\\"))

    return query


def _get_product(db: Session, product_id: int) -> Product:
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise NotFoundError("Product not found")
    return product


def _ensure_category(db: Session, category_id: int):
    if not db.query(Category.id).filter(Category.id == category_id).first():
        raise ValidationError.for_field("category_id", "Category does not exist")


# =========================
# FILTERED LISTING
# =========================
@router.get("/list", response_model=product_schemas.ProductListPage)
def list_products(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1),
    min_price: Optional[float] = Query(None, ge=0),
    max_price: Optional[float] = Query(None, ge=0),
    category_id: Optional[int] = Query(None),
    search: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    query = _filtered_query(db, min_price, max_price, category_id, search)

    total = query.count()
    offset = (page - 1) * limit

    # Past the last row there is nothing to fetch, and the bounds never reach the driver
    items: List[Product] = []
    if offset < total:
        items = query.order_by(Product.id).offset(offset).limit(min(limit, total - offset)).all()

    return {
        "products": items,
        "total_count": total,
        "current_page": page,
        "total_pages": math.ceil(total / limit),
    }


@router.get("", response_model=List[product_schemas.ProductOut])
def get_products(db: Session = Depends(get_db)):
    return db.query(Product).order_by(Product.id).all()


@router.get("/{product_id}", response_model=product_schemas.ProductOut)
def get_product(product_id: int, db: Session = Depends(get_db)):
    return _get_product(db, product_id)


# =========================
# ADMIN MUTATIONS
# =========================
@router.post("", response_model=product_schemas.ProductOut, status_code=status.HTTP_201_CREATED)
def create_product(
    payload: product_schemas.ProductCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("admin")),
    uploader: CloudinaryUploader = Depends(get_image_uploader),
):
    _ensure_category(db, payload.category_id)

    # A failed upload aborts the request before anything is written
    image_url = anyio.from_thread.run(uploader.upload, payload.image) if payload.image else None

    product = Product(
        name=payload.name,
        description=payload.description,
        price=payload.price,
        stock=payload.stock,
        category_id=payload.category_id,
        image_url=image_url,
    )
    db.add(product)
    db.flush()

    write_log(db, user_id=current_user.id, action="PRODUCT_CREATE", resource="products",
              request=request, meta={"id": product.id, "price": product.price})
    db.commit()
    db.refresh(product)
    return product


@router.put("/{product_id}", response_model=product_schemas.ProductOut)
def update_product(
    product_id: int,
    payload: product_schemas.ProductCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("admin")),
    uploader: CloudinaryUploader = Depends(get_image_uploader),
):
    product = _get_product(db, product_id)
    _ensure_category(db, payload.category_id)

    if payload.image:
        product.image_url = anyio.from_thread.run(uploader.upload, payload.image)

    # Cart lines and orders keep their captured prices, only the catalog changes
    old_price = product.price
    product.name = payload.name
    product.description = payload.description
    product.price = payload.price
    product.stock = payload.stock
    product.category_id = payload.category_id

    write_log(db, user_id=current_user.id, action="PRODUCT_UPDATE", resource="products",
              request=request, meta={"id": product.id, "old_price": old_price, "price": product.price})
    db.commit()
    db.refresh(product)
    return product


@router.delete("/{product_id}", response_model=product_schemas.ProductDeleted)
def delete_product(
    product_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("admin")),
):
    product = _get_product(db, product_id)
    deleted = product_schemas.ProductOut.model_validate(product)

    db.query(CartItem).filter(CartItem.product_id == product.id).delete(synchronize_session=False)
    db.delete(product)
    write_log(db, user_id=current_user.id, action="PRODUCT_DELETE", resource="products",
              request=request, meta={"id": product_id})
    db.commit()
    return {"message": "Product deleted", "product": deleted}
