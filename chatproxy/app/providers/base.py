from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

import httpx


class ProviderError(Exception):
    """Raised when an upstream answers with a non-success status.

    Attributes:
        status_code: HTTP status returned by the upstream
        body: Parsed JSON error body, or the raw text when it is not JSON
    """

    def __init__(self, status_code: int, body: Any, message: str | None = None):
        self.status_code = status_code
        self.body = body
        super().__init__(message or f"Upstream returned HTTP {status_code}")


class BaseProvider:
    """Base class for upstream HTTP services.

    Accepts an external httpx.AsyncClient for connection pooling, or creates
    a short-lived client per call when none is provided.
    """

    name = "base"

    def __init__(
        self,
        base_url: str,
        api_key: str,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 120.0
    ):
        """Initialize the provider.

        Args:
            base_url: The API base URL
            api_key: The bearer token for authentication
            http_client: Optional shared HTTP client for connection pooling
            timeout: Request timeout in seconds for per-call clients
        """
        self._http_client = http_client
        self.base_url = base_url.rstrip('/')
        self.api_key = api_key
        self.timeout = timeout
        self.headers = self._build_headers()

    @property
    def http_client(self) -> Optional[httpx.AsyncClient]:
        return self._http_client

    def _build_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json"
        }

    def _get_client(self) -> httpx.AsyncClient:
        if self._http_client is not None:
            return self._http_client
        return httpx.AsyncClient(timeout=self.timeout)

    @asynccontextmanager
    async def _client_context(self) -> AsyncIterator[httpx.AsyncClient]:
        """Yield the shared client, or a per-call client that is closed after use."""
        client = self._get_client()
        is_shared = self._http_client is not None
        try:
            yield client
        finally:
            if not is_shared:
                await client.aclose()

    def _get_endpoint_url(self, endpoint: str) -> str:
        return f"{self.base_url}{endpoint}"

    @staticmethod
    def _error_body(resp: httpx.Response) -> Any:
        try:
            return resp.json()
        except ValueError:
            return resp.text

    def _raise_for_status(self, resp: httpx.Response) -> None:
        if not resp.is_success:
            raise ProviderError(
                resp.status_code,
                self._error_body(resp),
                f"{self.name} returned HTTP {resp.status_code}",
            )
