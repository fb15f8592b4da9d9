"""Authenticated fetch capability.

Thin wrapper around ``httpx.AsyncClient`` that attaches the bearer token when
one is available, turns transport failures into ``NetworkError`` and a 401
into ``LoginRequiredError``. It never retries.
"""

from collections.abc import Callable
from typing import Any

import httpx

from tripforum.config.settings import Settings
from tripforum.core.errors import LoginRequiredError, NetworkError
from tripforum.core.logging import get_logger


logger = get_logger(__name__)

TokenProvider = Callable[[], str | None]


class ApiClient:
    """Async HTTP client bound to the forum API base URL."""

    def __init__(
        self,
        settings: Settings,
        token_provider: TokenProvider | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            settings: Client settings (base URL, timeout)
            token_provider: Returns the current bearer token, or None
            transport: Optional transport override (used by tests)
        """
        self._token_provider = token_provider
        self._client = httpx.AsyncClient(
            base_url=settings.api_root,
            timeout=settings.request_timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    def _auth_headers(self, extra: dict[str, str] | None = None) -> dict[str, str]:
        headers = dict(extra or {})
        token = self._token_provider() if self._token_provider else None
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def request(
        self,
        method: str,
        url: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Send a request and return the raw response.

        Raises:
            NetworkError: Timeout or connection failure
            LoginRequiredError: Server answered 401
        """
        try:
            response = await self._client.request(
                method,
                url,
                json=json,
                params=params,
                headers=self._auth_headers(headers),
            )
        except httpx.TimeoutException as e:
            logger.warning("api_timeout", method=method, url=url, error=str(e))
            raise NetworkError("Forum API timeout") from e
        except httpx.RequestError as e:
            logger.warning("api_request_error", method=method, url=url, error=str(e))
            raise NetworkError(f"Forum API request error: {e}") from e

        if response.status_code == httpx.codes.UNAUTHORIZED:
            logger.info("api_unauthorized", method=method, url=url)
            raise LoginRequiredError

        logger.debug(
            "api_response", method=method, url=url, status_code=response.status_code
        )
        return response

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("POST", url, **kwargs)

    async def put(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("PUT", url, **kwargs)

    async def delete(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("DELETE", url, **kwargs)

    async def aclose(self) -> None:
        """Close the underlying connection pool."""
        await self._client.aclose()
