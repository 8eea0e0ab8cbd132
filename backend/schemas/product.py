# backend/schemas/product.py
from decimal import Decimal
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional

# Largest id the INTEGER primary key columns can hold
MAX_ID = 2**31 - 1


# Base configuration for ORM compatibility
class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# Shared base attributes for product entities
class ProductBase(ORMBase):
    sku: str = Field(..., min_length=1, max_length=100)
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)


# Schema for creating a new product
class ProductCreate(ProductBase):
    pass


# Schema for full product replacement (PUT); the body repeats the id from the URL
class ProductUpdate(ProductBase):
    id: int = Field(..., le=MAX_ID)


# Full product representation including ID; also the cached list element
class ProductOut(ProductBase):
    id: int


# Stock record returned by the supplier's inventory service (camelCase on the wire)
class SupplierStock(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    sku: str = ""
    stock_quantity: int = Field(0, alias="stockQuantity")
    expected_shipping: str = Field("", alias="expectedShipping")
    supplier: str = ""


# Local product merged with the supplier's live stock
class ProductStockOut(BaseModel):
    product: str
    description: Optional[str] = None
    sku: str
    store_price: Decimal
    supplier_stock: int
    expected_shipping: str
    supplier: str
