"""API endpoints package for chatproxy."""

from chatproxy.app.api.auth import router as auth_router
from chatproxy.app.api.chat import router as chat_router
from chatproxy.app.api.image import router as image_router

__all__ = [
    "auth_router",
    "chat_router",
    "image_router",
]
