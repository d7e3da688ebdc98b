"""Provider construction and FastAPI dependencies."""

from typing import Optional

import httpx

from chatproxy.app.core.config import settings
from chatproxy.app.core.http_client import get_http_client
from chatproxy.app.providers.blob import BlobStorage
from chatproxy.app.providers.venice import VeniceProvider


def _shared_client() -> Optional[httpx.AsyncClient]:
    try:
        return get_http_client()
    except RuntimeError:
        # Outside the lifespan (scripts, tests) providers use per-call clients
        return None


def create_venice_provider(
    http_client: Optional[httpx.AsyncClient] = None,
) -> VeniceProvider:
    return VeniceProvider(
        base_url=settings.venice_base_url,
        api_key=settings.venice_api_key,
        http_client=http_client,
        timeout=settings.httpx_read_timeout,
    )


def create_blob_storage(
    http_client: Optional[httpx.AsyncClient] = None,
) -> BlobStorage:
    return BlobStorage(
        base_url=settings.blob_base_url,
        api_key=settings.blob_read_write_token,
        http_client=http_client,
        timeout=settings.httpx_read_timeout,
    )


def get_venice_provider() -> VeniceProvider:
    """FastAPI dependency returning a Venice provider on the shared client."""
    return create_venice_provider(_shared_client())


def get_blob_storage() -> BlobStorage:
    """FastAPI dependency returning the blob store on the shared client."""
    return create_blob_storage(_shared_client())
