# backend/routes/orders.py
import logging
import math
from typing import List

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session, joinedload

from database import get_db
from models.order import Order, OrderItem
from models.users import User
from routes.cart import cart_total, flush_cart, get_or_create_cart
from schemas.order import OrderCreate, OrderResponse
from utils.audit import write_log
from utils.errors import NotFoundError, ValidationError
from utils.tokenJWT import get_current_user

router = APIRouter(prefix="/orders", tags=["Orders"])
logger = logging.getLogger(__name__)


def _persist_order(db: Session, user_id: int, items, total_price: float) -> Order:
    # Prices and total are stored as given; the catalog is never consulted here
    order = Order(
        user_id=user_id,
        total_price=total_price,
        items=[OrderItem(product_id=it.product_id, quantity=it.quantity, price=it.price) for it in items],
    )
    db.add(order)
    return order


# Place an order from line items that already carry their captured prices
@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
def place_order(
    payload: OrderCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    items_sum = math.fsum(it.price for it in payload.items)
    if not math.isclose(items_sum, payload.total_price, rel_tol=1e-9, abs_tol=1e-9):
        raise ValidationError.for_field(
            "total_price", f"Total price {payload.total_price} does not match item prices {items_sum}"
        )

    order = _persist_order(db, current_user.id, payload.items, payload.total_price)
    db.flush()

    write_log(db, user_id=current_user.id, action="ORDER_CREATE", resource="orders", request=request,
              meta={"order_id": order.id, "total": order.total_price, "items": len(order.items)})
    db.commit()
    db.refresh(order)
    return order


# Snapshot the caller's cart into an order and empty the cart
@router.post("/checkout", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
def checkout(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    cart = get_or_create_cart(db, current_user.id, for_update=True)
    if not cart.items:
        raise ValidationError.for_field("cart", "Cart is empty")

    order = _persist_order(db, current_user.id, cart.items, cart_total(cart))
    cart.items.clear()
    flush_cart(db, cart)

    logger.info("Checkout of cart %s produced order %s", cart.id, order.id)
    write_log(db, user_id=current_user.id, action="ORDER_CHECKOUT", resource="orders", request=request,
              meta={"order_id": order.id, "total": order.total_price})
    db.commit()
    db.refresh(order)
    return order


# Order history, most recent first
@router.get("", response_model=List[OrderResponse])
def list_orders(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return (
        db.query(Order)
        .options(joinedload(Order.items))
        .filter(Order.user_id == current_user.id)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .all()
    )


# Get details of a specific order
@router.get("/{order_id}", response_model=OrderResponse)
def get_order_detail(
    order_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    order = db.query(Order).options(joinedload(Order.items)).filter(Order.id == order_id).first()
    if not order or (order.user_id != current_user.id and current_user.role != "admin"):
        raise NotFoundError("Order not found")
    return order
