from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from datetime import datetime

from schemas.product import MAX_ID


# One requested line of a checkout
class OrderItemIn(BaseModel):
    product_id: int = Field(..., ge=1, le=MAX_ID)
    quantity: int = Field(..., ge=1, le=100)


# Checkout request: the storefront sends its client-side cart
class OrderCreatePayload(BaseModel):
    items: List[OrderItemIn] = Field(..., min_length=1)


# Result of a successful checkout
class OrderCreatedResponse(BaseModel):
    message: str = "Order created successfully"
    order_id: int
    total: Decimal
    status: str
    date: datetime
    transaction_id: Optional[str] = None


# Output schema for an individual order line item
class OrderItemOut(BaseModel):
    product_id: int
    quantity: int
    unit_price: Decimal

    model_config = ConfigDict(from_attributes=True)


# One of the caller's orders
class OrderResponse(BaseModel):
    id: int
    order_date: datetime
    status: str
    transaction_id: Optional[str] = None
    total: Decimal
    items: List[OrderItemOut]

    model_config = ConfigDict(from_attributes=True)
