"""Venice model catalog: chat models, traits, image models and styles.

The chat model list and traits prefer availability and fall back to static
data on any failure. The image model and style fetchers are strict and
raise CatalogError so the listing routes report the failure.
"""

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from chatproxy.app.core.cache import revalidating
from chatproxy.app.core.logging import get_logger, get_log_context
from chatproxy.app.exceptions import CatalogError
from chatproxy.app.providers.factory import create_venice_provider
from chatproxy.app.providers.venice import VeniceProvider

logger = get_logger(__name__)

DEFAULT_CHAT_MODEL = "chat-model"


@dataclass(frozen=True)
class ChatModel:
    id: str
    name: str
    description: str
    model_id: str | None = None
    trait: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
        }
        if self.model_id is not None:
            data["modelId"] = self.model_id
        if self.trait is not None:
            data["trait"] = self.trait
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ChatModel":
        return cls(
            id=data["id"],
            name=data["name"],
            description=data["description"],
            model_id=data.get("modelId"),
            trait=data.get("trait"),
        )


STATIC_CHAT_MODELS: tuple[ChatModel, ...] = (
    ChatModel(
        id="chat-model",
        name="Default",
        description="Llama 3.3 70B - Balanced performance for general tasks",
        model_id="llama-3.3-70b",
        trait="default",
    ),
    ChatModel(
        id="fastest-model",
        name="Fastest",
        description="Llama 3.2 3B - Ultra-fast responses for simple queries",
        model_id="llama-3.2-3b",
        trait="fastest",
    ),
    ChatModel(
        id="code-model",
        name="Code",
        description="Qwen 3 Coder 235B - Optimized for programming tasks",
        model_id="qwen-3-235b",
        trait="default_code",
    ),
    ChatModel(
        id="vision-model",
        name="Vision",
        description="Mistral 3.1 24B - Advanced vision and multimodal capabilities",
        model_id="mistral-31-24b",
        trait="default_vision",
    ),
    ChatModel(
        id="uncensored-model",
        name="Uncensored",
        description="Venice Uncensored - Unrestricted content generation",
        model_id="venice-uncensored",
    ),
    ChatModel(
        id="chat-model-reasoning",
        name="Reasoning",
        description="DeepSeek R1 671B - Advanced reasoning with chain-of-thought",
        model_id="deepseek-r1-671b",
        trait="default_reasoning",
    ),
)

STATIC_MODEL_TRAITS: dict[str, str] = {
    "default": "llama-3.3-70b",
    "fastest": "llama-3.2-3b",
    "default_code": "qwen-2.5-coder-32b",
    "default_vision": "mistral-31-24b",
    "default_reasoning": "deepseek-r1-671b",
}


class VeniceCapabilities(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    optimized_for_code: bool = Field(False, alias="optimizedForCode")
    supports_vision: bool = Field(False, alias="supportsVision")
    supports_reasoning: bool = Field(False, alias="supportsReasoning")
    supports_function_calling: bool = Field(False, alias="supportsFunctionCalling")
    supports_web_search: bool = Field(False, alias="supportsWebSearch")
    quantization: str | None = None


class VeniceModelSpec(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: str | None = None
    offline: bool = False
    traits: list[str] = Field(default_factory=list)
    capabilities: VeniceCapabilities = Field(default_factory=VeniceCapabilities)
    available_context_tokens: int | None = Field(None, alias="availableContextTokens")
    model_source: str | None = Field(None, alias="modelSource")


class VeniceModel(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    type: str
    model_spec: VeniceModelSpec = Field(default_factory=VeniceModelSpec)

    @property
    def display_name(self) -> str:
        return self.model_spec.name or self.id


class VeniceModelsResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    data: list[VeniceModel] = Field(default_factory=list)


# Ordered category rules; the first match wins.
_CATEGORY_RULES = (
    ("Fastest", "Ultra-fast responses",
     lambda traits, caps: "fastest" in traits),
    ("Code", "Optimized for programming",
     lambda traits, caps: "default_code" in traits or caps.optimized_for_code),
    ("Vision", "Vision and multimodal",
     lambda traits, caps: caps.supports_vision),
    ("Uncensored", "Unrestricted generation",
     lambda traits, caps: "most_uncensored" in traits),
    ("Reasoning", "Advanced reasoning",
     lambda traits, caps: "default_reasoning" in traits or caps.supports_reasoning),
    ("Default", "Balanced performance",
     lambda traits, caps: "default" in traits),
)


def classify_model(model: VeniceModel) -> tuple[str, str]:
    """Return the display category and description for a text model."""
    traits = model.model_spec.traits
    caps = model.model_spec.capabilities
    for category, blurb, matches in _CATEGORY_RULES:
        if matches(traits, caps):
            return category, f"{model.display_name} - {blurb}"
    return "General", model.display_name


def to_chat_model(model: VeniceModel) -> ChatModel:
    category, description = classify_model(model)
    traits = model.model_spec.traits
    return ChatModel(
        id=model.id,
        name=category,
        description=description,
        model_id=model.id,
        trait=traits[0] if traits else None,
    )


@revalidating("venice-chat-models")
async def _fetch_provider_chat_models(provider: VeniceProvider) -> list[dict[str, Any]]:
    resp = await provider.list_models()
    if not resp.is_success:
        raise CatalogError(f"Failed to fetch Venice models: {resp.status_code}")

    parsed = VeniceModelsResponse.model_validate(resp.json())
    models = [
        to_chat_model(model).to_dict()
        for model in parsed.data
        if model.type == "text" and not model.model_spec.offline
    ]
    if not models:
        raise CatalogError("Venice returned no text models")
    return models


async def fetch_chat_models(provider: VeniceProvider | None = None) -> list[ChatModel]:
    """Fetch available chat models, falling back to the static list."""
    provider = provider or create_venice_provider()
    if not provider.is_configured:
        logger.warning("VENICE_API_KEY not set, using static models")
        return list(STATIC_CHAT_MODELS)

    try:
        models = await _fetch_provider_chat_models(provider)
    except Exception as e:
        logger.warning(
            f"Failed to fetch Venice models, using static models: {e}",
            extra=get_log_context(provider="venice"),
        )
        return list(STATIC_CHAT_MODELS)
    return [ChatModel.from_dict(m) for m in models]


@revalidating("venice-model-traits")
async def _fetch_provider_traits(provider: VeniceProvider) -> dict[str, str]:
    resp = await provider.list_traits()
    if not resp.is_success:
        raise CatalogError(f"Failed to fetch Venice traits: {resp.status_code}")
    data = resp.json().get("data")
    if not isinstance(data, dict):
        raise CatalogError("Malformed Venice traits response")
    return data


async def fetch_model_traits(provider: VeniceProvider | None = None) -> dict[str, str]:
    """Fetch the trait -> model id mapping, falling back to static traits."""
    provider = provider or create_venice_provider()
    if not provider.is_configured:
        return dict(STATIC_MODEL_TRAITS)

    try:
        return await _fetch_provider_traits(provider)
    except Exception as e:
        logger.error(f"Error fetching Venice traits: {e}")
        return dict(STATIC_MODEL_TRAITS)


@revalidating("venice-image-models")
async def _fetch_image_models(provider: VeniceProvider) -> list[dict[str, str]]:
    resp = await provider.list_models(model_type="image")
    if not resp.is_success:
        raise CatalogError(
            f"Failed to fetch Venice models: {resp.status_code} {resp.text}"
        )

    parsed = VeniceModelsResponse.model_validate(resp.json())
    logger.debug(f"Venice returned {len(parsed.data)} image model entries")
    return [
        {"id": model.id, "name": model.display_name, "description": ""}
        for model in parsed.data
        if model.type == "image" and not model.model_spec.offline
    ]


async def fetch_image_models(provider: VeniceProvider | None = None) -> list[dict[str, str]]:
    """Fetch available image models.

    Raises:
        CatalogError: If the API key is missing or Venice answers non-2xx
    """
    provider = provider or create_venice_provider()
    if not provider.is_configured:
        raise CatalogError("VENICE_API_KEY not set")
    return await _fetch_image_models(provider)


@revalidating("venice-image-styles")
async def _fetch_image_styles(provider: VeniceProvider) -> list[str]:
    resp = await provider.list_image_styles()
    if not resp.is_success:
        raise CatalogError(
            f"Failed to fetch Venice image styles: {resp.status_code} {resp.text}"
        )
    return resp.json()["data"]


async def fetch_image_styles(provider: VeniceProvider | None = None) -> list[str]:
    """Fetch image style presets.

    Raises:
        CatalogError: If the API key is missing or Venice answers non-2xx
    """
    provider = provider or create_venice_provider()
    if not provider.is_configured:
        raise CatalogError("VENICE_API_KEY not set")
    return await _fetch_image_styles(provider)
