from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Sequence

import httpx

from ...errors import BackendError, NetworkError
from ..types import GenerationConfig, GenerationResult, Message

logger = logging.getLogger(__name__)


class ChatProvider(ABC):
    """Base class for chat completion backends.

    Providers handle one remote call (messages in -> text out) and raise a
    classified GenerationError on failure. Retries and fallback belong to
    ProviderChain.
    """

    def __init__(
        self,
        *,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize provider.

        Args:
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests pass a MockTransport)
        """
        self.timeout = timeout
        self._transport = transport

    @property
    @abstractmethod
    def name(self) -> str:
        """Backend identifier (e.g., 'yandex', 'openrouter')"""
        pass

    @property
    @abstractmethod
    def default_model(self) -> str:
        pass

    @abstractmethod
    async def complete(
        self, messages: Sequence[Message], config: GenerationConfig
    ) -> GenerationResult:
        """Run one chat completion.

        Raises:
            ConfigurationError: Credentials are missing (no request is sent)
            NetworkError: Transport failure or timeout
            BackendError: Non-2xx status or unreadable body
            EmptyResponseError: 2xx without generated text
        """
        pass

    def resolve_model(self, config: GenerationConfig) -> str:
        return config.model or self.default_model

    async def _post_json(
        self,
        url: str,
        *,
        headers: Dict[str, str],
        payload: Dict[str, Any],
    ) -> Dict[str, Any]:
        """POST a JSON payload and return the decoded 2xx body."""
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.post(url, headers=headers, json=payload)
        except httpx.TimeoutException as e:
            raise NetworkError(f"{self.name} request timed out: {e}", timeout=True) from e
        except httpx.HTTPError as e:
            raise NetworkError(f"{self.name} request failed: {e}") from e

        if not response.is_success:
            raise BackendError(
                response.status_code,
                self.extract_error_message(_safe_json(response)),
                backend=self.name,
            )

        body = _safe_json(response)
        if not isinstance(body, dict):
            raise BackendError(
                response.status_code, "Response body is not a JSON object", backend=self.name
            )
        return body

    def extract_error_message(self, body: Any) -> str:
        """Pull a human-readable error out of a failed response body."""
        if isinstance(body, dict):
            message = body.get("message")
            if isinstance(message, str):
                return message
        return "Check the API key and account balance."


def _safe_json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        logger.debug(
            "Response body is not JSON",
            extra={"status_code": response.status_code},
        )
        return None
