"""
HTTP client for the storefront cart API.

Calls are made with requests in a worker thread so the event loop running
the cart store stays responsive. Every failure is raised as RemoteCartError;
there is no retry.
"""
import asyncio
import logging
from typing import Any, Dict, List, Optional

import requests

from storefront.client.storage import KeyValueStorage
from storefront.core.config import settings

logger = logging.getLogger(__name__)


class RemoteCartError(Exception):
    """A cart API call failed (transport error, non-2xx response or bad JSON)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class RemoteCartService:
    """Cart, checkout and login endpoints, authenticated with the stored bearer token."""

    def __init__(
        self,
        token_storage: KeyValueStorage,
        base_url: str = settings.CART_API_BASE_URL,
        session: Optional[requests.Session] = None,
        token_key: str = settings.TOKEN_STORAGE_KEY,
        timeout: int = settings.REQUEST_TIMEOUT_SECONDS
    ):
        self.token_storage = token_storage
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.token_key = token_key
        self.timeout = timeout

    def get_token(self) -> Optional[str]:
        return self.token_storage.get_item(self.token_key)

    @property
    def is_authenticated(self) -> bool:
        return bool(self.get_token())

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        token = self.get_token()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"

        try:
            response = self.session.request(
                method,
                url,
                headers=self._headers(),
                timeout=self.timeout,
                **kwargs
            )
            logger.debug(f"{method} {path} -> {response.status_code}")
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            status_code = e.response.status_code if e.response is not None else None
            raise RemoteCartError(f"{method} {path} failed: {e}", status_code=status_code) from e
        except requests.exceptions.RequestException as e:
            raise RemoteCartError(f"{method} {path} failed: {e}") from e

        if not response.content:
            return {}

        try:
            return response.json()
        except ValueError as e:
            raise RemoteCartError(
                f"{method} {path} returned invalid JSON",
                status_code=response.status_code
            ) from e

    async def _call(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        return await asyncio.to_thread(self._request, method, path, **kwargs)

    async def fetch_cart(self) -> List[Dict[str, Any]]:
        """Raw cart lines for the authenticated user."""
        data = await self._call("GET", "/api/cart")
        return data.get("items") or []

    async def add_item(self, product_id: str, quantity: int = 1) -> Dict[str, Any]:
        return await self._call(
            "POST", "/api/cart", json={"productId": product_id, "quantity": quantity}
        )

    async def remove_item(self, product_id: str) -> Dict[str, Any]:
        return await self._call("DELETE", "/api/cart/remove", params={"productId": product_id})

    async def update_quantity(self, product_id: str, quantity: int) -> Dict[str, Any]:
        return await self._call(
            "PUT", "/api/cart/update", json={"productId": product_id, "quantity": quantity}
        )

    async def clear(self) -> Dict[str, Any]:
        return await self._call("DELETE", "/api/cart")

    async def validate(self) -> List[str]:
        """Server-side availability errors for the stored cart."""
        data = await self._call("POST", "/api/cart/validate")
        return list(data.get("errors") or [])

    async def checkout(self, order: Dict[str, Any]) -> Dict[str, Any]:
        return await self._call("POST", "/api/checkout", json=order)

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        """
        Authenticate and keep the bearer token in durable storage.

        Returns:
            The user returned by the API
        """
        data = await self._call(
            "POST", "/api/auth/login", json={"email": email, "password": password}
        )

        token = data.get("token")
        if not token:
            raise RemoteCartError("Login response did not include a token")

        self.token_storage.set_item(self.token_key, token)
        logger.info("Logged in, token stored")
        return data.get("user") or {}

    def logout(self) -> None:
        self.token_storage.remove_item(self.token_key)
