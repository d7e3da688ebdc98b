"""Core utilities for the chatproxy application."""

from chatproxy.app.core.cache import (
    CacheBackend,
    InMemoryCache,
    RedisCache,
    get_cache,
    reset_cache,
    revalidating,
)
from chatproxy.app.core.config import settings
from chatproxy.app.core.logging import get_logger, setup_logging

__all__ = [
    "CacheBackend",
    "InMemoryCache",
    "RedisCache",
    "get_cache",
    "reset_cache",
    "revalidating",
    "settings",
    "get_logger",
    "setup_logging",
]
