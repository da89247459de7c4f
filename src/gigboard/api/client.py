"""Async HTTP client for the Gigboard marketplace API.

Usage:
    client = ApiClient(base_url="http://localhost:3005/api/v1", token="...")
    active = await client.get("/user/notifications/active")
    await client.aclose()
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from gigboard.configuration.settings import DEFAULT_API_URL, ApiSettings
from gigboard.errors import ApiConnectionError, ApiError

logger = logging.getLogger(__name__)


class ApiClient:
    """Thin JSON wrapper over ``httpx.AsyncClient``.

    Every request carries ``Content-Type: application/json`` and, when a
    token is set, ``Authorization: Bearer <token>``. Non-2xx responses raise
    ``ApiError``; transport failures raise ``ApiConnectionError``.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        token: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize API client.

        Args:
            base_url: API root, e.g. ``http://localhost:3005/api/v1``
            token: Optional bearer token
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests use ``httpx.MockTransport``)
        """
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @classmethod
    def from_settings(
        cls,
        settings: ApiSettings,
        token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "ApiClient":
        return cls(
            base_url=settings.base_url,
            token=token,
            timeout=settings.timeout_seconds,
            transport=transport,
        )

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def set_token(self, token: Optional[str]) -> None:
        self.token = token

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def request(
        self,
        method: str,
        path: str,
        json_body: Any = None,
    ) -> Any:
        """Send a request and return the decoded JSON body.

        Returns:
            Decoded JSON, or None when the response body is empty
        """
        client = self._get_client()
        logger.debug(
            f"API request {method} {path} "
            f"(token={'present' if self.token else 'missing'})"
        )

        try:
            response = await client.request(
                method,
                path,
                json=json_body,
                headers=self._headers(),
            )
        except httpx.TimeoutException as e:
            raise ApiConnectionError(
                f"{method} {path} timed out after {self.timeout}s",
                details={"path": path},
            ) from e
        except httpx.RequestError as e:
            raise ApiConnectionError(
                f"{method} {path} failed: {e}",
                details={"path": path},
            ) from e

        logger.debug(f"API response {response.status_code} for {method} {path}")

        if response.is_error:
            body = _decode_body(response)
            logger.warning(
                f"API error {response.status_code} for {method} {path}: {body}"
            )
            raise ApiError(
                response.status_code,
                method=method,
                path=path,
                body=body,
            )

        return _decode_body(response)

    async def get(self, path: str) -> Any:
        return await self.request("GET", path)

    async def post(self, path: str, data: Any = None) -> Any:
        return await self.request("POST", path, json_body=data)

    async def put(self, path: str, data: Any = None) -> Any:
        return await self.request("PUT", path, json_body=data)

    async def aclose(self) -> None:
        """Close the underlying connection pool."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()


def _decode_body(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text
