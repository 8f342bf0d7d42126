# backend/catalog_service/catalog/client.py

import logging
import os
from typing import List, Optional

import httpx

from .schemas import ProductResponse

logger = logging.getLogger(__name__)

CATALOG_API_URL = os.getenv("CATALOG_API_URL", "http://localhost:8000")
REQUEST_TIMEOUT_SECONDS = float(os.getenv("CATALOG_API_TIMEOUT_SECONDS", "10"))


class CatalogAPIError(Exception):
    """A Catalog API call failed: non-2xx status or transport error."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class CatalogClient:
    """
    Thin HTTP client for the Catalog API.

    Pass ``http_client`` to reuse an existing ``httpx.Client`` (for example
    FastAPI's ``TestClient``); otherwise one is created for ``base_url``.
    """

    def __init__(self, base_url: str = CATALOG_API_URL, http_client: Optional[httpx.Client] = None):
        self._client = http_client or httpx.Client(
            base_url=base_url, timeout=REQUEST_TIMEOUT_SECONDS
        )
        self._owns_client = http_client is None

    def close(self):
        if self._owns_client:
            self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            response = self._client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            try:
                message = e.response.json().get("error", e.response.text)
            except ValueError:
                message = e.response.text
            logger.warning(
                f"Catalog Client: {method} {path} failed with {e.response.status_code}: {message}"
            )
            raise CatalogAPIError(message, status_code=e.response.status_code) from e
        except httpx.RequestError as e:
            logger.error(f"Catalog Client: Could not reach Catalog API for {method} {path}: {e}")
            raise CatalogAPIError(f"Could not reach Catalog API: {e}") from e
        return response

    def list_products(self) -> List[ProductResponse]:
        response = self._request("GET", "/products")
        return [ProductResponse.model_validate(item) for item in response.json()]

    def get_product(self, product_id: str) -> ProductResponse:
        response = self._request("GET", f"/products/{product_id}")
        return ProductResponse.model_validate(response.json())

    def create_product(self, payload: dict) -> ProductResponse:
        response = self._request("POST", "/products", json=payload)
        return ProductResponse.model_validate(response.json())

    def update_product(self, product_id: str, payload: dict) -> ProductResponse:
        response = self._request("PUT", f"/products/{product_id}", json=payload)
        return ProductResponse.model_validate(response.json())

    def delete_product(self, product_id: str) -> str:
        response = self._request("DELETE", f"/products/{product_id}")
        return response.json()["message"]
