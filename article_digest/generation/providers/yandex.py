from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Sequence

import httpx
from pydantic import SecretStr

from ...errors import ConfigurationError, EmptyResponseError
from ..types import Backend, GenerationConfig, GenerationResult, Message
from .base import ChatProvider

logger = logging.getLogger(__name__)

YANDEX_COMPLETION_URL = "https://llm.api.cloud.yandex.net/foundationModels/v1/completion"


class YandexGPTProvider(ChatProvider):
    """YandexGPT Foundation Models completion API.

    Authenticates with an API key and addresses models inside a cloud
    folder, so both credentials are required.
    """

    def __init__(
        self,
        api_key: Optional[SecretStr] = None,
        folder_id: Optional[str] = None,
        model: str = "yandexgpt/latest",
        *,
        url: str = YANDEX_COMPLETION_URL,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(timeout=timeout, transport=transport)
        self._api_key = api_key
        self._folder_id = folder_id
        self._model = model
        self.url = url

    @classmethod
    def from_settings(cls, settings, *, timeout: float = 60.0) -> "YandexGPTProvider":
        return cls(
            api_key=settings.api_key,
            folder_id=settings.folder_id,
            model=settings.model,
            timeout=timeout,
        )

    @property
    def name(self) -> str:
        return Backend.YANDEX.value

    @property
    def default_model(self) -> str:
        return self._model

    async def complete(
        self, messages: Sequence[Message], config: GenerationConfig
    ) -> GenerationResult:
        api_key = self._api_key.get_secret_value() if self._api_key else ""
        if not api_key or not self._folder_id:
            raise ConfigurationError(
                "YandexGPT API key or folder ID is not configured. "
                "Set YANDEX_GPT_API_KEY and YANDEX_FOLDER_ID."
            )

        model = self.resolve_model(config)
        body = await self._post_json(
            self.url,
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Api-Key {api_key}",
                "x-folder-id": self._folder_id,
            },
            payload=self._build_payload(messages, config, model),
        )

        content = _extract_text(body)
        if not content:
            raise EmptyResponseError("YandexGPT returned no generated text.")

        logger.debug(
            "YandexGPT completion received",
            extra={"model": model, "length": len(content)},
        )
        return GenerationResult(content=content, backend=self.name, model=model)

    def _build_payload(
        self, messages: Sequence[Message], config: GenerationConfig, model: str
    ) -> Dict[str, Any]:
        return {
            "modelUri": f"gpt://{self._folder_id}/{model}",
            "completionOptions": {
                "stream": False,
                "temperature": config.temperature,
                "maxTokens": config.max_output_tokens,
            },
            "messages": [{"role": m.role, "text": m.content} for m in messages],
        }


def _extract_text(body: Dict[str, Any]) -> Optional[str]:
    """Read result.alternatives[0].message.text."""
    try:
        text = body["result"]["alternatives"][0]["message"]["text"]
    except (KeyError, IndexError, TypeError):
        return None
    return text if isinstance(text, str) else None
