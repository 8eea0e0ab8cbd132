# services/checkout.py
import logging
import uuid
from datetime import datetime, timezone
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from models.order import ORDER_STATUS_PENDING, Order, OrderItem
from models.product import Product
from models.users import User
from schemas.order import OrderItemIn
from utils.errors import ValidationFailed

logger = logging.getLogger(__name__)


class CheckoutService:
    """
    Turns a client-side cart into an order.

    1. stage the order header (owner, now, "Pending", fresh transaction id)
    2. stage one line per requested product, copying the current price
    3. commit header and lines in a single transaction
    Any unknown product id aborts before anything is written.
    """

    def __init__(self, db: Session):
        self.db = db

    def place_order(self, user: User, items: List[OrderItemIn]) -> Order:
        order = Order(
            user_id=user.id,
            order_date=datetime.now(timezone.utc),
            status=ORDER_STATUS_PENDING,
            transaction_id=str(uuid.uuid4()),
        )

        lines: List[OrderItem] = []
        for item in items:
            product = self.db.get(Product, item.product_id)
            if product is None:
                logger.info(f"Checkout for user {user.id} rejected: product {item.product_id} does not exist")
                raise ValidationFailed(f"Product with id {item.product_id} does not exist")

            # Price snapshot: later catalog changes must not touch this line
            lines.append(OrderItem(
                product_id=product.id,
                quantity=item.quantity,
                unit_price=product.price,
            ))

        order.items = lines
        self.db.add(order)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.info(f"Checkout for user {user.id} rolled back: {e.orig}")
            raise ValidationFailed("Order could not be saved: one of the items violates a store constraint")
        self.db.refresh(order)

        logger.info(f"Order {order.id} created for user {user.id}, total {order.total}")
        return order

    def list_orders(self, user: User) -> List[Order]:
        return (
            self.db.query(Order)
            .options(selectinload(Order.items))
            .filter(Order.user_id == user.id)
            .order_by(Order.order_date.desc(), Order.id.desc())
            .all()
        )
