# utils/gemini_client.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence, Union

from openai import OpenAI

import config
from scanners.errors import ConfigurationError

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationConfig:
    temperature: float = 0.3
    top_p: float = 0.9
    top_k: int = 40  # kept for reference; the OpenAI-compatible endpoint has no top_k knob
    max_output_tokens: int = 2000


@dataclass(frozen=True)
class ImagePart:
    """Inline image: base64 payload (no data: prefix) + mime type."""
    data: str
    mime_type: str = "image/jpeg"

    def to_data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"


ContentPart = Union[str, ImagePart]


@dataclass
class GenerateContentResponse:
    text: str
    raw: Any = field(default=None, repr=False)


def build_messages(contents: Sequence[ContentPart]) -> list[dict]:
    """
    Mixed text/image parts → a single user chat message, parts kept in order.
    """
    parts: list[dict] = []
    for part in contents:
        if isinstance(part, ImagePart):
            parts.append({"type": "image_url", "image_url": {"url": part.to_data_url()}})
        else:
            parts.append({"type": "text", "text": str(part)})
    return [{"role": "user", "content": parts}]


class GenerativeModel:
    """One Gemini model + generation settings, called through the OpenAI SDK."""

    def __init__(self, client: OpenAI, model_name: str, generation_config: Optional[GenerationConfig] = None):
        self.client = client
        self.model_name = model_name
        self.generation_config = generation_config or GenerationConfig()

    def generate_content(self, contents: Sequence[ContentPart]) -> GenerateContentResponse:
        cfg = self.generation_config
        resp = self.client.chat.completions.create(
            model=self.model_name,
            messages=build_messages(contents),
            temperature=cfg.temperature,
            top_p=cfg.top_p,
            max_tokens=cfg.max_output_tokens,
        )
        return GenerateContentResponse(text=(resp.choices[0].message.content or "").strip(), raw=resp)

    def __repr__(self) -> str:
        return f"GenerativeModel({self.model_name!r})"


def build_client(api_key: Optional[str] = None, base_url: Optional[str] = None) -> OpenAI:
    key = api_key or config.GEMINI_API_KEY
    if not key:
        raise ConfigurationError()
    return OpenAI(api_key=key, base_url=base_url or config.GEMINI_BASE_URL)


def get_model(
    client: Optional[OpenAI],
    model_name: Optional[str] = None,
    generation_config: Optional[GenerationConfig] = None,
) -> GenerativeModel:
    if client is None:
        raise ConfigurationError()
    name = model_name or config.GEMINI_MODEL or config.MODEL_CANDIDATES[0]
    log.debug("Using model %s", name)
    return GenerativeModel(client, name, generation_config)


def model_candidates() -> list[str]:
    """Configured model first, then the remaining known candidates in order."""
    names = [config.GEMINI_MODEL] if config.GEMINI_MODEL else []
    return names + [m for m in config.MODEL_CANDIDATES if m not in names]


def generate_with_fallback(
    client: Optional[OpenAI],
    contents: Sequence[ContentPart],
    candidates: Optional[Sequence[str]] = None,
    generation_config: Optional[GenerationConfig] = None,
) -> GenerateContentResponse:
    """
    Try each candidate model in turn until one answers.
    The last candidate's error is re-raised when every model fails.
    """
    if client is None:
        raise ConfigurationError()
    names = list(candidates or model_candidates())
    for i, name in enumerate(names):
        try:
            return get_model(client, name, generation_config).generate_content(contents)
        except Exception as e:
            if i == len(names) - 1:
                raise
            log.warning("Model %s not available (%s), trying %s", name, e, names[i + 1])
    raise ConfigurationError("No Gemini model candidates configured")
