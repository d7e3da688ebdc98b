"""Image generation through Venice, published to blob storage."""

import json
import time
from dataclasses import dataclass
from typing import Any, Optional

import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from chatproxy.app.core.config import settings
from chatproxy.app.core.logging import get_logger, get_log_context
from chatproxy.app.exceptions import BadRequestError, OfflineError
from chatproxy.app.middleware.auth import SessionUser
from chatproxy.app.providers.base import ProviderError
from chatproxy.app.providers.blob import BlobStorage
from chatproxy.app.providers.venice import VeniceProvider
from chatproxy.app.services.quota import check_daily_quota, record_usage

logger = get_logger(__name__)


@dataclass(frozen=True)
class ImageParams:
    model: str
    style_preset: Optional[str]


def resolve_image_params(
    user: SessionUser,
    model: Optional[str],
    style_preset: Optional[str],
) -> ImageParams:
    """Pick the model and style actually sent to Venice.

    Guests are pinned to the configured guest model and style whatever they
    asked for.
    """
    if user.is_guest:
        return ImageParams(settings.guest_image_model, settings.guest_image_style)
    return ImageParams(model or settings.default_image_model, style_preset)


def build_generation_payload(prompt: str, params: ImageParams) -> dict[str, Any]:
    return {
        "model": params.model,
        "prompt": prompt,
        "width": settings.image_width,
        "height": settings.image_height,
        "return_binary": True,
        "format": "png",
        "style_preset": params.style_preset,
        "hide_watermark": True,
        "safe_mode": False,
    }


def extract_provider_error_message(body: Any) -> str:
    """First structured issue message if present, else the serialized body."""
    if isinstance(body, dict):
        issues = body.get("issues")
        if isinstance(issues, list) and issues:
            first = issues[0]
            if isinstance(first, dict) and first.get("message"):
                return str(first["message"])
    if isinstance(body, str):
        return body
    return json.dumps(body, separators=(",", ":"), ensure_ascii=False)


async def generate_image(
    session: AsyncSession,
    user: SessionUser,
    prompt: Optional[str],
    venice: VeniceProvider,
    blob_storage: BlobStorage,
    model: Optional[str] = None,
    style_preset: Optional[str] = None,
) -> str:
    """Generate an image for ``user`` and return its public URL.

    The usage counter is incremented only once the image is stored.

    Raises:
        BadRequestError: If the prompt is empty or Venice rejects the request
        UnauthorizedError: If the user class is unknown
        RateLimitError: If the daily quota is exhausted
        OfflineError: If Venice or the blob store cannot be reached
    """
    if not prompt or not prompt.strip():
        raise BadRequestError("api", "Prompt is required.")

    await check_daily_quota(session, user)

    params = resolve_image_params(user, model, style_preset)
    payload = build_generation_payload(prompt, params)
    log_context = get_log_context(
        user_id=user.id, user_type=user.type, provider="venice", model=params.model
    )

    try:
        image = await venice.generate_image(payload)
    except ProviderError as e:
        message = extract_provider_error_message(e.body)
        logger.warning(f"Venice rejected image request: {message}", extra=log_context)
        raise BadRequestError("api", f"Venice API error: {message}") from e
    except httpx.HTTPError as e:
        logger.error(f"Error generating image: {e}", extra=log_context)
        raise OfflineError("chat", "Failed to generate image.") from e

    filename = f"generated-image-{int(time.time() * 1000)}.png"
    try:
        blob = await blob_storage.put(filename, image, content_type="image/png")
    except (ProviderError, httpx.HTTPError) as e:
        logger.error(f"Error storing generated image: {e}", extra=log_context)
        raise OfflineError("chat", "Failed to generate image.") from e

    await record_usage(session, user)
    logger.info("Image generated", extra={**log_context, "url": blob.url})
    return blob.url
