"""Upstream providers for chatproxy.

This package provides:
- Base provider plumbing (BaseProvider, ProviderError)
- The Venice.ai provider (VeniceProvider)
- Blob storage uploads (BlobStorage)
- The chat model registry
"""

from chatproxy.app.providers.base import BaseProvider, ProviderError
from chatproxy.app.providers.blob import BlobObject, BlobStorage
from chatproxy.app.providers.factory import (
    create_blob_storage,
    create_venice_provider,
    get_blob_storage,
    get_venice_provider,
)
from chatproxy.app.providers.registry import (
    LANGUAGE_MODELS,
    LanguageModel,
    extract_reasoning,
    get_language_model,
    model_supports_tools,
)
from chatproxy.app.providers.venice import VeniceProvider

__all__ = [
    "BaseProvider",
    "ProviderError",
    "BlobObject",
    "BlobStorage",
    "create_blob_storage",
    "create_venice_provider",
    "get_blob_storage",
    "get_venice_provider",
    "LANGUAGE_MODELS",
    "LanguageModel",
    "extract_reasoning",
    "get_language_model",
    "model_supports_tools",
    "VeniceProvider",
]
