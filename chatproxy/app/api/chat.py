"""Chat API endpoints: model listing, traits, completions and usage."""

from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import ValidationError

from chatproxy.app.core.logging import get_logger
from chatproxy.app.db.async_session import SessionDep
from chatproxy.app.exceptions import BadRequestError
from chatproxy.app.middleware.auth import SessionUser, require_user
from chatproxy.app.providers.factory import get_venice_provider
from chatproxy.app.providers.venice import VeniceProvider
from chatproxy.app.services.chat import ChatRequest, complete_chat, prepare_chat, stream_chat
from chatproxy.app.services.model_catalog import fetch_chat_models, fetch_model_traits
from chatproxy.app.services.quota import get_usage_summary

router = APIRouter(prefix="/api")
logger = get_logger(__name__)


@router.get("/chat/models", response_model=None)
async def list_chat_models(
    venice: VeniceProvider = Depends(get_venice_provider),
) -> Any:
    try:
        models = await fetch_chat_models(venice)
        return [model.to_dict() for model in models]
    except Exception as error:
        logger.error(f"Error fetching chat models: {error}")
        return JSONResponse({"error": str(error)}, status_code=500)


@router.get("/chat/traits", response_model=None)
async def list_model_traits(
    venice: VeniceProvider = Depends(get_venice_provider),
) -> Any:
    try:
        return await fetch_model_traits(venice)
    except Exception as error:
        logger.error(f"Error fetching model traits: {error}")
        return JSONResponse({"error": str(error)}, status_code=500)


@router.post("/chat", response_model=None)
async def chat(
    request: Request,
    session: SessionDep,
    user: SessionUser = Depends(require_user),
    venice: VeniceProvider = Depends(get_venice_provider),
) -> StreamingResponse | dict[str, Any]:
    """Proxy a chat completion to Venice.

    Non-streaming requests return the provider's completion JSON (with a
    ``reasoning`` field split out for reasoning models). Streaming requests
    relay the provider's server-sent events.
    """
    try:
        body = await request.json()
        chat_request = ChatRequest.model_validate(body)
    except (ValueError, ValidationError) as e:
        # Malformed JSON or a body that is not UTF-8
        raise BadRequestError("chat", f"Invalid chat request: {e}") from e

    if not chat_request.stream:
        return await complete_chat(session, user, chat_request, venice)

    prepared = await prepare_chat(session, user, chat_request)
    return StreamingResponse(
        stream_chat(user, prepared, venice),
        media_type="text/event-stream",
    )


@router.get("/usage")
async def usage(
    session: SessionDep,
    user: SessionUser = Depends(require_user),
) -> dict[str, Any]:
    """Remaining daily actions for the current session."""
    return await get_usage_summary(session, user)
