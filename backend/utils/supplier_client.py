# utils/supplier_client.py
import logging
from typing import Optional
from urllib.parse import quote, urljoin

import httpx
from tenacity import Retrying, before_sleep_log, retry_if_exception, stop_after_attempt, wait_fixed

from config import settings
from schemas.product import SupplierStock

logger = logging.getLogger(__name__)


def is_transient(exc: BaseException) -> bool:
    """Network failures, request timeouts (408) and 5xx answers are worth retrying."""
    if isinstance(exc, httpx.TransportError):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        code = exc.response.status_code
        return code == 408 or code >= 500
    return False


class SupplierClient:
    """Client for the supplier's inventory service.

    GET {base_url}/inventory/{sku} with a bounded retry: SUPPLIER_RETRY_ATTEMPTS
    attempts in total, a fixed SUPPLIER_RETRY_WAIT_SECONDS pause between them.
    After the last attempt the original httpx error is re-raised.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        attempts: Optional[int] = None,
        wait_seconds: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        # urljoin drops the last path segment without a trailing slash
        self.base_url = (base_url or settings.SUPPLIER_API_URL).rstrip("/") + "/"
        self.timeout = settings.SUPPLIER_TIMEOUT_SECONDS if timeout is None else timeout
        self.attempts = settings.SUPPLIER_RETRY_ATTEMPTS if attempts is None else attempts
        self.wait_seconds = settings.SUPPLIER_RETRY_WAIT_SECONDS if wait_seconds is None else wait_seconds
        self.transport = transport

    def _retrying(self) -> Retrying:
        return Retrying(
            reraise=True,
            stop=stop_after_attempt(self.attempts),
            wait=wait_fixed(self.wait_seconds),
            retry=retry_if_exception(is_transient),
            before_sleep=before_sleep_log(logger, logging.WARNING),
        )

    def _fetch(self, url: str):
        logger.info(f"SupplierClient GET {url}")
        with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
            response = client.get(url)
            response.raise_for_status()
            return response.json()

    def get_stock(self, sku: str) -> Optional[SupplierStock]:
        """Return the supplier's stock record for a SKU, or None for an empty answer."""
        url = urljoin(self.base_url, f"inventory/{quote(sku, safe='')}")
        data = self._retrying()(self._fetch, url)
        if data is None:
            return None
        return SupplierStock.model_validate(data)


def get_supplier_client() -> SupplierClient:
    return SupplierClient()
