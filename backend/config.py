# backend/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional
from pathlib import Path

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./storefront.db"

    # Token signing. JWT_KEY has no default: the app refuses to start without it.
    JWT_KEY: str
    JWT_ISSUER: str = "storefront-api"
    JWT_AUDIENCE: str = "storefront-web"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 120

    # Catalog cache. Empty REDIS_URL turns caching off (every read goes to the DB).
    REDIS_URL: str = ""
    CACHE_PREFIX: str = "storefront:"
    PRODUCTS_CACHE_KEY: str = "products:all"
    PRODUCTS_CACHE_TTL_SECONDS: int = 120

    # External supplier inventory service
    SUPPLIER_API_URL: str = "http://localhost:9090/"
    SUPPLIER_TIMEOUT_SECONDS: float = 5.0
    SUPPLIER_RETRY_ATTEMPTS: int = 3
    SUPPLIER_RETRY_WAIT_SECONDS: float = 0.5
    SUPPLIER_EXPOSE_ERRORS: bool = False

    FRONTEND_URL: Optional[str] = None
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=str(env_path), extra="ignore")

settings = Settings()
