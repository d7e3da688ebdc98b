"""Blob storage provider used to publish generated images."""

from dataclasses import dataclass
from typing import Dict
from urllib.parse import quote

from chatproxy.app.providers.base import BaseProvider


BLOB_API_VERSION = "7"


@dataclass
class BlobObject:
    url: str
    pathname: str
    content_type: str
    download_url: str | None = None


class BlobStorage(BaseProvider):
    """Uploads objects through the blob store's HTTP API.

    The upload is a ``PUT /<pathname>`` with the raw body; the response
    carries the public URL of the stored object.
    """

    name = "blob"

    def _build_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "x-api-version": BLOB_API_VERSION,
        }

    async def put(
        self,
        pathname: str,
        data: bytes,
        content_type: str,
        access: str = "public",
    ) -> BlobObject:
        """Upload ``data`` under ``pathname``.

        Raises:
            ProviderError: If the store rejects the upload
            httpx.HTTPError: If the store cannot be reached
        """
        url = self._get_endpoint_url(f"/{quote(pathname)}")
        headers = {
            **self.headers,
            "x-content-type": content_type,
            "x-access": access,
        }
        async with self._client_context() as client:
            resp = await client.put(url, headers=headers, content=data)
            self._raise_for_status(resp)
            body = resp.json()

        return BlobObject(
            url=body["url"],
            pathname=body.get("pathname", pathname),
            content_type=body.get("contentType", content_type),
            download_url=body.get("downloadUrl"),
        )
