"""Catalog endpoints and the cache-aside policy in front of the product list."""

from decimal import Decimal

import pytest
import redis

from config import settings
from models.product import Product
from services.catalog import CatalogService
from utils.cache import RedisCache, get_cache
from main import app


@pytest.fixture()
def store_reads(monkeypatch):
    """Count how often the product list is read from the database."""
    calls = []
    original = CatalogService._read_all_products

    def counting(self):
        calls.append(1)
        return original(self)

    monkeypatch.setattr(CatalogService, "_read_all_products", counting)
    return calls


def test_products_require_a_token(client):
    assert client.get("/products").status_code == 401
    assert client.post("/products", json={"sku": "A", "name": "A", "price": "1.00"}).status_code == 401


def test_create_product_returns_201_with_location(client, auth_headers):
    response = client.post(
        "/products",
        json={"sku": "KB-01", "name": "Keyboard", "description": "Mechanical", "price": "49.90"},
        headers=auth_headers,
    )

    assert response.status_code == 201
    body = response.json()
    assert body["sku"] == "KB-01"
    assert Decimal(body["price"]) == Decimal("49.90")
    assert response.headers["location"].endswith(f"/products/{body['id']}")


def test_get_product(client, auth_headers, make_product):
    created = make_product(price="5.50", name="Mouse")

    response = client.get(f"/products/{created['id']}", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["name"] == "Mouse"


def test_get_missing_product_is_404(client, auth_headers):
    assert client.get("/products/404", headers=auth_headers).status_code == 404


@pytest.mark.parametrize("method", ["get", "put", "delete"])
def test_out_of_range_product_id_is_400(client, auth_headers, method):
    huge = 10**20
    kwargs = {"json": {"id": huge, "sku": "X", "name": "X", "price": "1.00"}} if method == "put" else {}

    response = getattr(client, method)(f"/products/{huge}", headers=auth_headers, **kwargs)

    assert response.status_code == 400


def test_duplicate_sku_is_rejected(client, auth_headers, make_product):
    make_product(sku="DUP-1")

    response = client.post(
        "/products", json={"sku": "DUP-1", "name": "Other", "price": "1.00"}, headers=auth_headers
    )

    assert response.status_code == 400


@pytest.mark.parametrize("price", ["-0.01", "1.234", "abc"])
def test_invalid_price_is_rejected(client, auth_headers, db, price):
    response = client.post(
        "/products", json={"sku": "P-1", "name": "Thing", "price": price}, headers=auth_headers
    )

    assert response.status_code == 400
    assert db.query(Product).count() == 0


def test_update_product(client, auth_headers, make_product, db):
    created = make_product(price="10.00")

    response = client.put(
        f"/products/{created['id']}",
        json={"id": created["id"], "sku": created["sku"], "name": "Renamed", "price": "12.00"},
        headers=auth_headers,
    )

    assert response.status_code == 204
    product = db.get(Product, created["id"])
    assert product.name == "Renamed"
    assert product.price == Decimal("12.00")


def test_update_with_mismatched_id_is_400(client, auth_headers, make_product):
    created = make_product()

    response = client.put(
        f"/products/{created['id']}",
        json={"id": created["id"] + 1, "sku": created["sku"], "name": "X", "price": "1.00"},
        headers=auth_headers,
    )

    assert response.status_code == 400


def test_update_missing_product_is_404(client, auth_headers):
    response = client.put(
        "/products/77", json={"id": 77, "sku": "GONE", "name": "Gone", "price": "1.00"}, headers=auth_headers
    )

    assert response.status_code == 404


def test_delete_product(client, auth_headers, make_product, db):
    created = make_product()

    response = client.delete(f"/products/{created['id']}", headers=auth_headers)

    assert response.status_code == 204
    assert db.get(Product, created["id"]) is None
    assert client.delete(f"/products/{created['id']}", headers=auth_headers).status_code == 404


def test_product_referenced_by_an_order_cannot_be_deleted(client, auth_headers, make_product, db):
    created = make_product()
    client.post("/orders", json={"items": [{"product_id": created["id"], "quantity": 1}]}, headers=auth_headers)

    response = client.delete(f"/products/{created['id']}", headers=auth_headers)

    assert response.status_code == 409
    assert db.get(Product, created["id"]) is not None


# ---------------------------------------------------------------------------
# cache behaviour
# ---------------------------------------------------------------------------


def test_miss_populates_cache_with_two_minute_ttl(client, auth_headers, make_product, cache):
    make_product()

    client.get("/products", headers=auth_headers)

    assert settings.PRODUCTS_CACHE_KEY in cache.store
    assert cache.ttls[settings.PRODUCTS_CACHE_KEY] == 120


def test_second_read_is_served_from_cache(client, auth_headers, make_product, store_reads):
    make_product(price="3.10", description="first")
    make_product(price="7.25")

    first = client.get("/products", headers=auth_headers)
    second = client.get("/products", headers=auth_headers)

    assert first.status_code == second.status_code == 200
    assert len(store_reads) == 1
    assert second.content == first.content
    assert [Decimal(p["price"]) for p in second.json()] == [Decimal("3.10"), Decimal("7.25")]


def test_cache_hit_does_not_see_out_of_band_changes(client, auth_headers, make_product, db):
    created = make_product(name="Original")
    client.get("/products", headers=auth_headers)

    # change made behind the catalog's back: no invalidation
    db.get(Product, created["id"]).name = "Changed elsewhere"
    db.commit()

    names = [p["name"] for p in client.get("/products", headers=auth_headers).json()]
    assert names == ["Original"]


def test_create_invalidates_cached_list(client, auth_headers, make_product, store_reads):
    make_product()
    client.get("/products", headers=auth_headers)

    make_product()
    listing = client.get("/products", headers=auth_headers).json()

    assert len(store_reads) == 2
    assert len(listing) == 2


def test_update_invalidates_cached_list(client, auth_headers, make_product, store_reads):
    created = make_product(price="1.00")
    client.get("/products", headers=auth_headers)

    client.put(
        f"/products/{created['id']}",
        json={"id": created["id"], "sku": created["sku"], "name": created["name"], "price": "2.00"},
        headers=auth_headers,
    )
    listing = client.get("/products", headers=auth_headers).json()

    assert len(store_reads) == 2
    assert Decimal(listing[0]["price"]) == Decimal("2.00")


def test_delete_invalidates_cached_list(client, auth_headers, make_product, store_reads):
    created = make_product()
    client.get("/products", headers=auth_headers)

    client.delete(f"/products/{created['id']}", headers=auth_headers)
    listing = client.get("/products", headers=auth_headers).json()

    assert len(store_reads) == 2
    assert listing == []


def test_failed_write_does_not_invalidate(client, auth_headers, make_product, cache):
    make_product(sku="SAME")
    client.get("/products", headers=auth_headers)
    deletes_before = cache.deletes

    duplicate = client.post("/products", json={"sku": "SAME", "name": "x", "price": "1.00"}, headers=auth_headers)
    missing = client.delete("/products/999", headers=auth_headers)

    assert duplicate.status_code == 400
    assert missing.status_code == 404
    assert cache.deletes == deletes_before
    assert settings.PRODUCTS_CACHE_KEY in cache.store


def test_unreadable_cache_entry_falls_back_to_store(client, auth_headers, make_product, cache, store_reads):
    make_product()
    cache.set(settings.PRODUCTS_CACHE_KEY, "{not json", 120)

    response = client.get("/products", headers=auth_headers)

    assert response.status_code == 200
    assert len(response.json()) == 1
    assert len(store_reads) == 1


class BrokenRedis:
    """Redis client whose every call fails as if the server were down."""

    def __init__(self):
        self.calls = 0

    def _fail(self, *args, **kwargs):
        self.calls += 1
        raise redis.ConnectionError("Connection refused")

    get = set = delete = _fail


def test_cache_outage_degrades_to_store_reads(client, auth_headers, make_product, store_reads):
    broken = BrokenRedis()
    app.dependency_overrides[get_cache] = lambda: RedisCache(broken, prefix="test:")

    created = make_product(price="4.00")
    first = client.get("/products", headers=auth_headers)
    second = client.get("/products", headers=auth_headers)
    updated = client.put(
        f"/products/{created['id']}",
        json={"id": created["id"], "sku": created["sku"], "name": "Still works", "price": "4.50"},
        headers=auth_headers,
    )

    assert first.status_code == second.status_code == 200
    assert updated.status_code == 204
    assert len(store_reads) == 2
    assert broken.calls > 0
