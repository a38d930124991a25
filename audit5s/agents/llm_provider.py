"""Abstract vision LLM provider with Anthropic and OpenAI adapters."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from audit5s.config import Settings, get_settings
from audit5s.exceptions import ProviderNotConfiguredError


class LLMProvider(ABC):
    """Abstract interface for vision-capable LLM calls."""

    model: str

    @abstractmethod
    async def analyze_image(self, image_b64: str, prompt: str, media_type: str = "image/jpeg") -> str:
        """Send a base64 image + prompt to the LLM, return the text response."""
        ...


def build_vision_request(
    image_b64: str,
    prompt: str,
    model: str,
    max_tokens: int = 1500,
    media_type: str = "image/jpeg",
) -> dict[str, Any]:
    """Single-message request: rubric text followed by the base64 image."""
    return {
        "model": model,
        "max_tokens": max_tokens,
        "temperature": 0,
        "messages": [{
            "role": "user",
            "content": [
                {"type": "text", "text": prompt},
                {"type": "image", "source": {"type": "base64", "media_type": media_type, "data": image_b64}},
            ],
        }],
    }


class AnthropicProvider(LLMProvider):
    """Anthropic Claude vision provider."""

    def __init__(self, api_key: str, model: str = "claude-3-5-sonnet-20241022", max_tokens: int = 1500):
        from anthropic import AsyncAnthropic
        self.client = AsyncAnthropic(api_key=api_key)
        self.model = model
        self.max_tokens = max_tokens

    async def analyze_image(self, image_b64: str, prompt: str, media_type: str = "image/jpeg") -> str:
        request = build_vision_request(image_b64, prompt, self.model, self.max_tokens, media_type)
        resp = await self.client.messages.create(**request)
        return resp.content[0].text


class OpenAIProvider(LLMProvider):
    """OpenAI GPT-4o vision provider."""

    def __init__(self, api_key: str, model: str = "gpt-4o", max_tokens: int = 1500):
        from openai import AsyncOpenAI
        self.client = AsyncOpenAI(api_key=api_key)
        self.model = model
        self.max_tokens = max_tokens

    async def analyze_image(self, image_b64: str, prompt: str, media_type: str = "image/jpeg") -> str:
        resp = await self.client.chat.completions.create(
            model=self.model,
            messages=[{
                "role": "user",
                "content": [
                    {"type": "text", "text": prompt},
                    {"type": "image_url", "image_url": {"url": f"data:{media_type};base64,{image_b64}"}},
                ],
            }],
            max_tokens=self.max_tokens,
            temperature=0,
            response_format={"type": "json_object"},
        )
        return resp.choices[0].message.content or ""


def get_llm_provider(settings: Settings | None = None) -> LLMProvider:
    """Factory: the configured provider, falling back to whichever key is set."""
    settings = settings or get_settings()
    cfg = settings.analyzer
    if cfg.provider == "anthropic" and settings.anthropic_api_key:
        return AnthropicProvider(settings.anthropic_api_key, cfg.model, cfg.max_tokens)
    if cfg.provider == "openai" and settings.openai_api_key:
        return OpenAIProvider(settings.openai_api_key, cfg.model, cfg.max_tokens)
    if settings.anthropic_api_key:
        return AnthropicProvider(settings.anthropic_api_key, max_tokens=cfg.max_tokens)
    if settings.openai_api_key:
        return OpenAIProvider(settings.openai_api_key, max_tokens=cfg.max_tokens)
    raise ProviderNotConfiguredError("No LLM API key configured. Set ANTHROPIC_API_KEY or OPENAI_API_KEY.")
