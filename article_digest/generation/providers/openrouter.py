from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Sequence

import httpx
from pydantic import SecretStr

from ...errors import ConfigurationError, EmptyResponseError
from ..types import Backend, GenerationConfig, GenerationResult, Message
from .base import ChatProvider

logger = logging.getLogger(__name__)

OPENROUTER_BASE_URL = "https://openrouter.ai/api"


class OpenRouterProvider(ChatProvider):
    """OpenRouter provider speaking the OpenAI-compatible chat API."""

    def __init__(
        self,
        api_key: Optional[SecretStr] = None,
        model: str = "deepseek/deepseek-chat",
        app_url: str = "http://localhost:3000",
        *,
        base_url: str = OPENROUTER_BASE_URL,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(timeout=timeout, transport=transport)
        self._api_key = api_key
        self._model = model
        self.app_url = app_url
        self.base_url = base_url.rstrip("/")

    @classmethod
    def from_settings(cls, settings, *, timeout: float = 60.0) -> "OpenRouterProvider":
        return cls(
            api_key=settings.api_key,
            model=settings.model,
            app_url=settings.app_url,
            timeout=timeout,
        )

    @property
    def name(self) -> str:
        return Backend.OPENROUTER.value

    @property
    def default_model(self) -> str:
        return self._model

    async def complete(
        self, messages: Sequence[Message], config: GenerationConfig
    ) -> GenerationResult:
        api_key = self._api_key.get_secret_value() if self._api_key else ""
        if not api_key:
            raise ConfigurationError(
                "OpenRouter API key is not configured. Set OPENROUTER_API_KEY."
            )

        model = self.resolve_model(config)
        body = await self._post_json(
            f"{self.base_url}/v1/chat/completions",
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {api_key}",
                "HTTP-Referer": self.app_url,
            },
            payload={
                "model": model,
                "messages": [{"role": m.role, "content": m.content} for m in messages],
                "temperature": config.temperature,
                "max_tokens": config.max_output_tokens,
            },
        )

        content = _extract_content(body)
        if not content:
            raise EmptyResponseError("OpenRouter returned no generated text.")

        logger.debug(
            "OpenRouter completion received",
            extra={"model": model, "length": len(content)},
        )
        return GenerationResult(content=content, backend=self.name, model=model)

    def extract_error_message(self, body: Any) -> str:
        if isinstance(body, dict):
            error = body.get("error")
            if isinstance(error, dict) and isinstance(error.get("message"), str):
                return error["message"]
        return super().extract_error_message(body)


def _extract_content(body: Dict[str, Any]) -> Optional[str]:
    """Read choices[0].message.content."""
    try:
        content = body["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return None
    return content if isinstance(content, str) else None
