# backend/routes/cart.py
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from database import get_db
from models.cart import Cart, CartItem
from models.product import Product
from models.users import User
from schemas.cart import MAX_LINE_QUANTITY, CartAddItem, CartOut, CartItemOut
from utils.audit import write_log
from utils.errors import ConflictError, NotFoundError, ValidationError
from utils.tokenJWT import get_current_user

router = APIRouter(prefix="/cart", tags=["Cart"])


def get_or_create_cart(db: Session, user_id: int, for_update: bool = False) -> Cart:
    # Retrieve the user's cart, creating an empty one on first access
    query = db.query(Cart).filter(Cart.user_id == user_id)
    if for_update:
        query = query.with_for_update()

    cart = query.first()
    if cart is None:
        db.add(Cart(user_id=user_id))
        try:
            db.commit()
        except IntegrityError:
            # Created by a concurrent request, the unique user_id keeps it single
            db.rollback()
        cart = query.first()
    return cart


def cart_total(cart: Cart) -> float:
    return round(sum(it.price for it in cart.items), 2)


def _cart_to_out(cart: Cart) -> CartOut:
    items_out = [
        CartItemOut(
            product_id=it.product_id,
            name=it.product.name if it.product else None,
            quantity=it.quantity,
            price=round(it.price, 2),
        )
        for it in cart.items
    ]
    return CartOut(id=cart.id, user_id=cart.user_id, items=items_out, total_price=cart_total(cart))


def flush_cart(db: Session, cart: Cart):
    # Touch the cart row so the version check covers changes made only to its lines
    cart.updated_at = datetime.now(timezone.utc)
    try:
        db.flush()
    except (StaleDataError, IntegrityError):
        db.rollback()
        raise ConflictError("Cart was modified by another request, please retry")


@router.get("", response_model=CartOut)
def get_cart(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    cart = get_or_create_cart(db, current_user.id)
    out = _cart_to_out(cart)

    write_log(db, user_id=current_user.id, action="CART_VIEW", resource="cart",
              request=request, meta={"items": len(out.items), "total": out.total_price})
    db.commit()
    return out


@router.post("", response_model=CartOut)
def add_to_cart(
    payload: CartAddItem,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    product = db.query(Product).filter(Product.id == payload.product_id).first()
    if not product:
        raise NotFoundError("Product not found")

    cart = get_or_create_cart(db, current_user.id, for_update=True)

    # Price is captured now and never recomputed for this line
    item_price = round(product.price * payload.quantity, 2)

    item = next((it for it in cart.items if it.product_id == product.id), None)
    if item:
        if item.quantity + payload.quantity > MAX_LINE_QUANTITY:
            raise ValidationError.for_field(
                "quantity", f"Quantity per product cannot exceed {MAX_LINE_QUANTITY} (already {item.quantity} in cart)"
            )
        item.quantity += payload.quantity
    else:
        cart.items.append(CartItem(product_id=product.id, quantity=payload.quantity, price=item_price))

    flush_cart(db, cart)

    write_log(db, user_id=current_user.id, action="CART_ADD", resource="cart", request=request,
              meta={"product_id": product.id, "quantity": payload.quantity, "total": cart_total(cart)})
    db.commit()
    db.refresh(cart)
    return _cart_to_out(cart)


@router.delete("/{product_id}", response_model=CartOut)
def remove_from_cart(
    product_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    cart = get_or_create_cart(db, current_user.id, for_update=True)

    doomed = [it for it in cart.items if it.product_id == product_id]
    if doomed:
        for it in doomed:
            cart.items.remove(it)
        flush_cart(db, cart)

    write_log(db, user_id=current_user.id, action="CART_REMOVE", resource="cart", request=request,
              meta={"product_id": product_id, "removed": len(doomed), "total": cart_total(cart)})
    db.commit()
    db.refresh(cart)
    return _cart_to_out(cart)
