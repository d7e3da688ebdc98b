"""Image API endpoints: model and style catalogs, generation."""

from typing import Any, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from chatproxy.app.core.logging import get_logger
from chatproxy.app.db.async_session import SessionDep
from chatproxy.app.exceptions import BadRequestError
from chatproxy.app.middleware.auth import SessionUser, require_user
from chatproxy.app.providers.blob import BlobStorage
from chatproxy.app.providers.factory import get_blob_storage, get_venice_provider
from chatproxy.app.providers.venice import VeniceProvider
from chatproxy.app.services.image_generation import generate_image
from chatproxy.app.services.model_catalog import fetch_image_models, fetch_image_styles

router = APIRouter(prefix="/api/image")
logger = get_logger(__name__)


@router.get("/models", response_model=None)
async def list_image_models(
    venice: VeniceProvider = Depends(get_venice_provider),
) -> Any:
    try:
        return await fetch_image_models(venice)
    except Exception as error:
        logger.error(f"Error fetching image models: {error}")
        return JSONResponse({"error": str(error)}, status_code=500)


@router.get("/styles", response_model=None)
async def list_image_styles(
    venice: VeniceProvider = Depends(get_venice_provider),
) -> Any:
    try:
        return await fetch_image_styles(venice)
    except Exception as error:
        logger.error(f"Error fetching image styles: {error}")
        return JSONResponse({"error": str(error)}, status_code=500)


def _optional_str(body: dict[str, Any], key: str) -> Optional[str]:
    value = body.get(key)
    return value if isinstance(value, str) and value else None


@router.post("/generate")
async def generate(
    request: Request,
    session: SessionDep,
    user: SessionUser = Depends(require_user),
    venice: VeniceProvider = Depends(get_venice_provider),
    blob_storage: BlobStorage = Depends(get_blob_storage),
) -> dict[str, str]:
    """Generate an image and return its public blob URL."""
    try:
        body = await request.json()
    except ValueError as e:
        # Malformed JSON or a body that is not UTF-8
        raise BadRequestError("api", "Invalid JSON in request body") from e
    if not isinstance(body, dict):
        raise BadRequestError("api", "Request body must be a JSON object")

    prompt = body.get("prompt")
    url = await generate_image(
        session,
        user,
        prompt if isinstance(prompt, str) else None,
        venice,
        blob_storage,
        model=_optional_str(body, "model"),
        style_preset=_optional_str(body, "style_preset"),
    )
    return {"url": url}
