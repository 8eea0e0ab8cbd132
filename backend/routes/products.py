# backend/routes/products.py
from typing import List
from fastapi import APIRouter, Depends, Path, Request, Response, status
from sqlalchemy.orm import Session

from database import get_db
from utils.tokenJWT import get_current_user
from utils.audit import AuditAction, write_log, client_ip
from utils.cache import CacheClient, get_cache
from utils.supplier_client import SupplierClient, get_supplier_client
from models.users import User
from services.catalog import CatalogService
import schemas.product as product_schemas

router = APIRouter(prefix="/products", tags=["Products"])


def get_catalog(
    db: Session = Depends(get_db),
    cache: CacheClient = Depends(get_cache),
    supplier: SupplierClient = Depends(get_supplier_client),
) -> CatalogService:
    return CatalogService(db=db, cache=cache, supplier=supplier)


# =========================
# QUERIES
# =========================
@router.get("", response_model=List[product_schemas.ProductOut])
def list_products(
    catalog: CatalogService = Depends(get_catalog),
    current_user: User = Depends(get_current_user),
):
    """Full product list, served from the cache when it is warm."""
    return catalog.list_products()


@router.get("/{product_id}", response_model=product_schemas.ProductOut)
def get_product(
    product_id: int = Path(..., le=product_schemas.MAX_ID),
    catalog: CatalogService = Depends(get_catalog),
    current_user: User = Depends(get_current_user),
):
    return product_schemas.ProductOut.model_validate(catalog.get_product(product_id))


@router.get("/{product_id}/stock", response_model=product_schemas.ProductStockOut)
def get_product_stock(
    product_id: int = Path(..., le=product_schemas.MAX_ID),
    catalog: CatalogService = Depends(get_catalog),
    current_user: User = Depends(get_current_user),
):
    """Local product data merged with the supplier's live stock for its SKU."""
    return catalog.get_stock(product_id)


# =========================
# COMMANDS
# =========================
@router.post("", response_model=product_schemas.ProductOut, status_code=status.HTTP_201_CREATED)
def create_product(
    payload: product_schemas.ProductCreate,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    catalog: CatalogService = Depends(get_catalog),
    current_user: User = Depends(get_current_user),
):
    product = catalog.create_product(payload)
    response.headers["Location"] = str(request.url_for("get_product", product_id=product.id))

    write_log(
        db, user_id=current_user.id, action=AuditAction.PRODUCT_CREATE, resource="products",
        status="SUCCESS", ip=client_ip(request), meta={"product_id": product.id, "sku": product.sku}, best_effort=True,
    )
    return product_schemas.ProductOut.model_validate(product)


@router.put("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def update_product(
    payload: product_schemas.ProductUpdate,
    request: Request,
    product_id: int = Path(..., le=product_schemas.MAX_ID),
    db: Session = Depends(get_db),
    catalog: CatalogService = Depends(get_catalog),
    current_user: User = Depends(get_current_user),
):
    catalog.update_product(product_id, payload)
    write_log(
        db, user_id=current_user.id, action=AuditAction.PRODUCT_UPDATE, resource="products",
        status="SUCCESS", ip=client_ip(request), meta={"product_id": product_id}, best_effort=True,
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product(
    request: Request,
    product_id: int = Path(..., le=product_schemas.MAX_ID),
    db: Session = Depends(get_db),
    catalog: CatalogService = Depends(get_catalog),
    current_user: User = Depends(get_current_user),
):
    catalog.delete_product(product_id)
    write_log(
        db, user_id=current_user.id, action=AuditAction.PRODUCT_DELETE, resource="products",
        status="SUCCESS", ip=client_ip(request), meta={"product_id": product_id}, best_effort=True,
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
