# services/catalog.py
import logging
from typing import List

import httpx
from pydantic import TypeAdapter, ValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from config import settings
from models.order import OrderItem
from models.product import Product
from schemas.product import ProductCreate, ProductOut, ProductStockOut, ProductUpdate
from utils.cache import CacheClient
from utils.errors import Conflict, NotFound, SupplierUnavailable, ValidationFailed
from utils.supplier_client import SupplierClient

logger = logging.getLogger(__name__)

_product_list = TypeAdapter(List[ProductOut])


class CatalogService:
    """
    Catalog use cases.

    Reads of the full product list go through the cache (cache-aside, fixed key,
    absolute TTL). Every write commits to the database first and only then drops
    the cached list, so a failed write never touches the cache.
    """

    def __init__(self, db: Session, cache: CacheClient, supplier: SupplierClient | None = None):
        self.db = db
        self.cache = cache
        self.supplier = supplier
        self.cache_key = settings.PRODUCTS_CACHE_KEY
        self.cache_ttl = settings.PRODUCTS_CACHE_TTL_SECONDS

    # queries
    def list_products(self) -> List[ProductOut]:
        cached = self.cache.get(self.cache_key)
        if cached:
            try:
                products = _product_list.validate_json(cached)
                logger.debug(f"Cache hit for {self.cache_key}")
                return products
            except ValidationError as e:
                logger.warning(f"Discarding unreadable cache entry {self.cache_key}: {e}")

        logger.debug(f"Cache miss for {self.cache_key}, reading products from the database")
        products = self._read_all_products()
        self.cache.set(self.cache_key, _product_list.dump_json(products).decode(), self.cache_ttl)
        return products

    def _read_all_products(self) -> List[ProductOut]:
        rows = self.db.query(Product).order_by(Product.id.asc()).all()
        return [ProductOut.model_validate(p) for p in rows]

    def get_product(self, product_id: int) -> Product:
        product = self.db.get(Product, product_id)
        if product is None:
            raise NotFound("Product not found")
        return product

    def get_stock(self, product_id: int) -> ProductStockOut:
        product = self.get_product(product_id)

        try:
            stock = self.supplier.get_stock(product.sku)
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Supplier lookup for SKU {product.sku} failed: {e}")
            detail = "Could not reach the supplier"
            if settings.SUPPLIER_EXPOSE_ERRORS:
                detail = f"{detail}: {e}"
            raise SupplierUnavailable(detail)

        if stock is None:
            raise NotFound("Supplier returned no data")

        return ProductStockOut(
            product=product.name,
            description=product.description,
            sku=product.sku,
            store_price=product.price,
            supplier_stock=stock.stock_quantity,
            expected_shipping=stock.expected_shipping,
            supplier=stock.supplier,
        )

    # commands
    def create_product(self, payload: ProductCreate) -> Product:
        if self.db.query(Product).filter(Product.sku == payload.sku).first():
            raise ValidationFailed(f"Product with SKU {payload.sku} already exists")

        product = Product(**payload.model_dump())
        self.db.add(product)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ValidationFailed(f"Product with SKU {payload.sku} already exists")
        self.db.refresh(product)

        self._invalidate()
        logger.info(f"Product {product.id} ({product.sku}) created")
        return product

    def update_product(self, product_id: int, payload: ProductUpdate) -> Product:
        if payload.id != product_id:
            raise ValidationFailed("Product id in the URL does not match the body")

        product = self.db.get(Product, product_id)
        if product is None:
            raise NotFound("Product not found")

        for field, value in payload.model_dump(exclude={"id"}).items():
            setattr(product, field, value)

        try:
            self.db.commit()
        except StaleDataError:
            # Row vanished between the read and the UPDATE
            self.db.rollback()
            if self.db.get(Product, product_id) is None:
                raise NotFound("Product not found")
            raise
        except IntegrityError:
            self.db.rollback()
            raise ValidationFailed(f"Product with SKU {payload.sku} already exists")

        self._invalidate()
        logger.info(f"Product {product_id} updated")
        return product

    def delete_product(self, product_id: int) -> None:
        product = self.db.get(Product, product_id)
        if product is None:
            raise NotFound("Product not found")

        if self.db.query(OrderItem.id).filter(OrderItem.product_id == product_id).first():
            raise Conflict("Product is referenced by existing orders")

        self.db.delete(product)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise Conflict("Product is referenced by existing orders")

        self._invalidate()
        logger.info(f"Product {product_id} deleted")

    def _invalidate(self) -> None:
        # Idempotent; repeated deletes of the key are harmless
        self.cache.delete(self.cache_key)
        logger.info(f"Cache key {self.cache_key} invalidated")
