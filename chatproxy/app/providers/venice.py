"""Venice.ai API provider.

Covers the endpoints chatproxy relies on: model and trait listings, image
style presets, image generation and OpenAI-compatible chat completions.
"""

from typing import Any, AsyncGenerator, Dict, Optional

import httpx

from chatproxy.app.providers.base import BaseProvider


class VeniceProvider(BaseProvider):
    """Venice.ai provider with shared HTTP client support.

    Non-success responses raise ProviderError carrying the decoded error
    body; transport failures surface as httpx.HTTPError.
    """

    name = "venice"

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def _get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> httpx.Response:
        url = self._get_endpoint_url(endpoint)
        async with self._client_context() as client:
            return await client.get(url, headers=self.headers, params=params)

    async def list_models(self, model_type: Optional[str] = None) -> httpx.Response:
        """Fetch ``/models``; callers decide how to treat non-success status.

        Args:
            model_type: Optional ``type`` filter ("text", "image", ...)
        """
        params = {"type": model_type} if model_type else None
        return await self._get("/models", params=params)

    async def list_traits(self) -> httpx.Response:
        return await self._get("/models/traits")

    async def list_image_styles(self) -> httpx.Response:
        return await self._get("/image/styles")

    async def generate_image(self, payload: Dict[str, Any]) -> bytes:
        """Generate an image and return the binary body.

        Args:
            payload: Venice image generation parameters; ``return_binary``
                must be true

        Raises:
            ProviderError: If Venice rejects the request
            httpx.HTTPError: If Venice cannot be reached
        """
        url = self._get_endpoint_url("/image/generate")
        async with self._client_context() as client:
            resp = await client.post(url, headers=self.headers, json=payload)
            self._raise_for_status(resp)
            return resp.content

    async def chat_completion(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Send a non-streaming chat completion request."""
        url = self._get_endpoint_url("/chat/completions")
        async with self._client_context() as client:
            resp = await client.post(url, headers=self.headers, json=payload)
            self._raise_for_status(resp)
            return resp.json()

    async def stream_chat(self, payload: Dict[str, Any]) -> AsyncGenerator[str, None]:
        """Send a streaming chat completion request, yielding SSE lines."""
        url = self._get_endpoint_url("/chat/completions")
        payload = {**payload, "stream": True}

        client = self._get_client()
        is_shared = self._http_client is not None

        try:
            async with client.stream("POST", url, headers=self.headers, json=payload) as resp:
                if not resp.is_success:
                    await resp.aread()
                    self._raise_for_status(resp)
                async for line in resp.aiter_lines():
                    yield line
        finally:
            if not is_shared:
                await client.aclose()

    async def health_check(self, timeout: float = 2.0) -> bool:
        if not self.is_configured:
            return False
        try:
            url = self._get_endpoint_url("/models")
            async with self._client_context() as client:
                resp = await client.get(url, headers=self.headers, timeout=timeout)
                return resp.status_code == 200
        except httpx.HTTPError:
            return False
