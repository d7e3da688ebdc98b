"""Chat completions proxied to Venice under the user's entitlement."""

import json
from dataclasses import dataclass
from typing import Annotated, Any, AsyncGenerator, Literal, Optional, Union

import httpx
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from chatproxy.app.core.logging import get_logger, get_log_context
from chatproxy.app.db.async_session import get_async_session
from chatproxy.app.exceptions import BadRequestError, ChatProxyException, OfflineError
from chatproxy.app.middleware.auth import SessionUser
from chatproxy.app.providers.base import ProviderError
from chatproxy.app.providers.registry import LanguageModel, extract_reasoning, get_language_model
from chatproxy.app.providers.venice import VeniceProvider
from chatproxy.app.services.entitlements import is_model_available
from chatproxy.app.services.image_generation import extract_provider_error_message
from chatproxy.app.services.model_catalog import DEFAULT_CHAT_MODEL
from chatproxy.app.services.quota import check_daily_quota, record_usage

logger = get_logger(__name__)


class TextPart(BaseModel):
    type: Literal["text"]
    text: str = Field(..., min_length=1)


class ImageURL(BaseModel):
    url: str = Field(..., min_length=1)


class ImagePart(BaseModel):
    type: Literal["image_url"]
    image_url: ImageURL


ContentPart = Annotated[Union[TextPart, ImagePart], Field(discriminator="type")]


class ChatMessage(BaseModel):
    """Message in a chat conversation.

    ``content`` is plain text, or a list of OpenAI-style parts for models
    that accept images.
    """
    role: Literal["system", "user", "assistant"]
    content: Union[
        Annotated[str, Field(min_length=1)],
        Annotated[list[ContentPart], Field(min_length=1)],
    ]

    @property
    def has_images(self) -> bool:
        return isinstance(self.content, list) and any(
            isinstance(part, ImagePart) for part in self.content
        )


class ChatRequest(BaseModel):
    messages: list[ChatMessage] = Field(..., min_length=1)
    model: str = Field(default=DEFAULT_CHAT_MODEL, min_length=1)
    temperature: Optional[float] = Field(default=None, ge=0.0, le=2.0)
    max_tokens: Optional[int] = Field(default=None, ge=1, le=32000)
    stream: bool = False


@dataclass(frozen=True)
class PreparedChat:
    language_model: LanguageModel
    payload: dict[str, Any]


def build_chat_payload(chat_request: ChatRequest, language_model: LanguageModel) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "model": language_model.provider_model_id,
        "messages": [m.model_dump() for m in chat_request.messages],
    }
    if chat_request.temperature is not None:
        payload["temperature"] = chat_request.temperature
    if chat_request.max_tokens is not None:
        payload["max_tokens"] = chat_request.max_tokens
    return payload


async def prepare_chat(
    session: AsyncSession,
    user: SessionUser,
    chat_request: ChatRequest,
) -> PreparedChat:
    """Validate the model against the user's entitlement and check quota.

    Raises:
        BadRequestError: If the model is unknown, not entitled, or is sent
            images it cannot read
        UnauthorizedError: If the user class is unknown
        RateLimitError: If the daily quota is exhausted
    """
    language_model = get_language_model(chat_request.model)
    if language_model is None or not is_model_available(user.type, chat_request.model):
        raise BadRequestError("chat", f"Model not available: {chat_request.model}")
    if not language_model.supports_vision and any(m.has_images for m in chat_request.messages):
        raise BadRequestError("chat", f"Model does not accept images: {chat_request.model}")

    await check_daily_quota(session, user)
    return PreparedChat(language_model, build_chat_payload(chat_request, language_model))


def _provider_failure(e: Exception) -> ChatProxyException:
    if isinstance(e, ProviderError):
        message = extract_provider_error_message(e.body)
        return BadRequestError("chat", f"Venice API error: {message}")
    return OfflineError("chat", "Failed to reach the chat provider.")


def _attach_reasoning(response: dict[str, Any], tag_name: str) -> dict[str, Any]:
    for choice in response.get("choices", []):
        message = choice.get("message") or {}
        content = message.get("content")
        if isinstance(content, str):
            reasoning, text = extract_reasoning(content, tag_name)
            if reasoning is not None:
                message["reasoning"] = reasoning
                message["content"] = text
    return response


async def complete_chat(
    session: AsyncSession,
    user: SessionUser,
    chat_request: ChatRequest,
    venice: VeniceProvider,
) -> dict[str, Any]:
    """Run a non-streaming completion and count it against the quota."""
    prepared = await prepare_chat(session, user, chat_request)
    log_context = get_log_context(
        user_id=user.id, user_type=user.type, provider="venice",
        model=prepared.language_model.provider_model_id,
    )

    try:
        response = await venice.chat_completion(prepared.payload)
    except (ProviderError, httpx.HTTPError) as e:
        logger.warning(f"Chat completion failed: {e}", extra=log_context)
        raise _provider_failure(e) from e

    if prepared.language_model.reasoning_tag:
        response = _attach_reasoning(response, prepared.language_model.reasoning_tag)

    await record_usage(session, user)
    logger.info("Chat completion served", extra=log_context)
    return response


async def stream_chat(
    user: SessionUser,
    prepared: PreparedChat,
    venice: VeniceProvider,
) -> AsyncGenerator[str, None]:
    """Relay provider SSE lines; usage is recorded once the stream ends cleanly.

    Failures after the response has started are reported as a final SSE
    ``error`` event since the status code is already sent.
    """
    log_context = get_log_context(user_id=user.id, user_type=user.type, provider="venice")
    try:
        async for line in venice.stream_chat(prepared.payload):
            yield f"{line}\n"
    except (ProviderError, httpx.HTTPError) as e:
        logger.warning(f"Chat stream failed: {e}", extra=log_context)
        error = _provider_failure(e)
        yield f"event: error\ndata: {json.dumps(error.to_response())}\n\n"
        return

    async with get_async_session() as session:
        await record_usage(session, user)
    logger.info("Chat stream completed", extra=log_context)
