import os
import time

# Settings are read at import time; configure them before the app is imported
os.environ["JWT_KEY"] = "test-signing-key-with-enough-length-0123456789"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["REDIS_URL"] = ""
os.environ["SUPPLIER_RETRY_WAIT_SECONDS"] = "0"
os.environ["SUPPLIER_EXPOSE_ERRORS"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base, get_db
from main import app
from utils.cache import CacheClient, get_cache


class InMemoryCache(CacheClient):
    """Dict-backed stand-in for Redis that honours TTLs and counts calls."""

    def __init__(self):
        self.store = {}
        self.ttls = {}
        self.gets = 0
        self.deletes = 0

    def get(self, key):
        self.gets += 1
        entry = self.store.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at <= time.monotonic():
            del self.store[key]
            return None
        return value

    def set(self, key, value, ttl_seconds):
        self.store[key] = (value, time.monotonic() + ttl_seconds)
        self.ttls[key] = ttl_seconds

    def delete(self, key):
        self.deletes += 1
        self.store.pop(key, None)


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def cache():
    return InMemoryCache()


@pytest.fixture()
def client(session_factory, cache):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_cache] = lambda: cache
    yield TestClient(app)
    app.dependency_overrides.clear()


def register(client, email="a@x.com", password="secret1"):
    return client.post(
        "/auth/register",
        json={"email": email, "password": password, "confirm_password": password},
    )


def login(client, email="a@x.com", password="secret1"):
    return client.post("/auth/login", json={"email": email, "password": password})


@pytest.fixture()
def auth_headers(client):
    register(client)
    token = login(client).json()["token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def make_product(client, auth_headers):
    counter = {"n": 0}

    def _make(price="10.00", sku=None, name=None, description=None):
        counter["n"] += 1
        response = client.post(
            "/products",
            json={
                "sku": sku or f"SKU-{counter['n']:03d}",
                "name": name or f"Product {counter['n']}",
                "description": description,
                "price": price,
            },
            headers=auth_headers,
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _make
