# backend/routes/orders.py
from typing import List
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from database import get_db
from utils.tokenJWT import get_current_user
from utils.audit import AuditAction, write_log, client_ip
from models.users import User
from models.order import Order
from services.checkout import CheckoutService
from schemas.order import OrderCreatePayload, OrderCreatedResponse, OrderItemOut, OrderResponse

router = APIRouter(prefix="/orders", tags=["Orders"])


# Map Order model to OrderResponse schema
def _order_to_out(order: Order) -> OrderResponse:
    return OrderResponse(
        id=order.id,
        order_date=order.order_date,
        status=order.status,
        transaction_id=order.transaction_id,
        total=order.total,
        items=[OrderItemOut.model_validate(it) for it in order.items],
    )


# Check out the storefront cart as a new order
@router.post("", response_model=OrderCreatedResponse)
def create_order(
    payload: OrderCreatePayload,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    order = CheckoutService(db).place_order(current_user, payload.items)

    out = OrderCreatedResponse(
        order_id=order.id,
        total=order.total,
        status=order.status,
        date=order.order_date,
        transaction_id=order.transaction_id,
    )

    # The order is already durable; a failed audit commit must not turn it into an error
    write_log(
        db, user_id=current_user.id, action=AuditAction.ORDER_CREATE, resource="orders", status="SUCCESS",
        ip=client_ip(request), meta={"order_id": out.order_id, "total": str(out.total)}, best_effort=True,
    )
    return out


# List the caller's own orders, newest first
@router.get("", response_model=List[OrderResponse])
def list_my_orders(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    orders = CheckoutService(db).list_orders(current_user)
    return [_order_to_out(o) for o in orders]
