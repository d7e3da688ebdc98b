"""Chat model registry: application model ids mapped to Venice models."""

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping


@dataclass(frozen=True)
class LanguageModel:
    provider_model_id: str
    supports_tools: bool = False
    supports_vision: bool = False
    # Tag wrapping chain-of-thought output, split out of the answer text
    reasoning_tag: str | None = None


LANGUAGE_MODELS: Mapping[str, LanguageModel] = MappingProxyType({
    "chat-model": LanguageModel("llama-3.3-70b", supports_tools=True),
    "chat-model-reasoning": LanguageModel("deepseek-r1-671b", reasoning_tag="think"),
    "title-model": LanguageModel("llama-3.2-3b"),
    "artifact-model": LanguageModel("llama-3.3-70b", supports_tools=True),
    "fastest-model": LanguageModel("llama-3.2-3b", supports_tools=True),
    "code-model": LanguageModel("qwen3-235b", supports_tools=True),
    "vision-model": LanguageModel("mistral-31-24b", supports_tools=True, supports_vision=True),
    # No tool support
    "uncensored-model": LanguageModel("venice-uncensored"),
})


def get_language_model(chat_model_id: str) -> LanguageModel | None:
    return LANGUAGE_MODELS.get(chat_model_id)


def model_supports_tools(chat_model_id: str) -> bool:
    model = LANGUAGE_MODELS.get(chat_model_id)
    return model is not None and model.supports_tools


def extract_reasoning(text: str, tag_name: str) -> tuple[str | None, str]:
    """Split ``<tag>...</tag>`` sections out of a completion.

    Returns:
        ``(reasoning, text)``; reasoning is None when the tag is absent
    """
    pattern = re.compile(rf"<{tag_name}>(.*?)</{tag_name}>", re.DOTALL)
    sections = [m.strip() for m in pattern.findall(text)]
    if not sections:
        return None, text
    remaining = pattern.sub("", text).strip()
    return "\n".join(sections), remaining
