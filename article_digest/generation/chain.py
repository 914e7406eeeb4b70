from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, List, Mapping, Optional, Sequence

from ..errors import AllBackendsExhaustedError, ConfigurationError
from .providers.base import ChatProvider
from .types import GenerationConfig, GenerationResult, Message

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class AttemptCursor:
    """Position in the (backend, attempt) grid walked by ProviderChain."""

    backend_index: int = 0
    attempt_index: int = 0

    @property
    def attempt_number(self) -> int:
        return self.attempt_index + 1

    def retry(self) -> "AttemptCursor":
        return AttemptCursor(self.backend_index, self.attempt_index + 1)

    def fallback(self) -> "AttemptCursor":
        return AttemptCursor(self.backend_index + 1, 0)


class ProviderChain:
    """Runs a chat completion against an ordered list of backends.

    Each backend gets ``retries + 1`` attempts with linear backoff between
    them (``base_delay * attempt_number``). When a backend is spent the
    chain moves to the next one immediately. Every error kind is retried
    the same way; the last one is attached to AllBackendsExhaustedError.
    """

    def __init__(
        self,
        providers: Mapping[str, ChatProvider] | Sequence[ChatProvider],
        *,
        base_delay: float = 1.0,
        sleep: Optional[Sleep] = None,
    ):
        """Initialize provider chain.

        Args:
            providers: Providers keyed by backend name, or a list in priority order
            base_delay: Backoff unit in seconds
            sleep: Awaitable sleep; tests pass a recorder instead of asyncio.sleep
        """
        if not isinstance(providers, Mapping):
            providers = {p.name: p for p in providers}
        if not providers:
            raise ValueError("Provider chain requires at least one provider")

        self.providers: Dict[str, ChatProvider] = dict(providers)
        self.base_delay = base_delay
        self._sleep: Sleep = sleep or asyncio.sleep

    def default_order(self, primary: str) -> List[str]:
        """Primary backend first, then every other registered backend."""
        return [primary] + [name for name in self.providers if name != primary]

    async def run(
        self,
        messages: Sequence[Message],
        config: GenerationConfig,
        backend_order: Optional[Sequence[str]] = None,
        retries: int = 2,
    ) -> GenerationResult:
        """Generate with retry and fallback.

        Args:
            messages: Ordered chat prompt
            config: Generation parameters; ``config.backend`` leads the default order
            backend_order: Explicit backend order; defaults to ``default_order(config.backend)``
            retries: Extra attempts per backend after the first

        Returns:
            The first successful result

        Raises:
            AllBackendsExhaustedError: Every backend/attempt combination failed
        """
        if retries < 0:
            raise ValueError("retries must be non-negative")

        order = list(backend_order) if backend_order is not None else self.default_order(config.backend)
        if not order:
            raise AllBackendsExhaustedError(
                ConfigurationError("No backends configured for generation"), attempts=0
            )

        cursor = AttemptCursor()
        last_error: Optional[Exception] = None
        attempts = 0

        while cursor.backend_index < len(order):
            backend = order[cursor.backend_index]
            attempts += 1
            try:
                result = await self._attempt(backend, messages, config)
            except Exception as e:
                last_error = e
                logger.warning(
                    f"Backend {backend} attempt {cursor.attempt_number} failed: {e}",
                    extra={
                        "provider": backend,
                        "attempt": cursor.attempt_number,
                        "error_type": type(e).__name__,
                    },
                )
                if cursor.attempt_index < retries:
                    await self._sleep(self.base_delay * cursor.attempt_number)
                    cursor = cursor.retry()
                else:
                    cursor = cursor.fallback()
                    if cursor.backend_index < len(order):
                        logger.info(
                            "Backend exhausted, falling back",
                            extra={"provider": backend, "next_provider": order[cursor.backend_index]},
                        )
                continue

            if cursor.backend_index > 0 or cursor.attempt_index > 0:
                logger.info(
                    "Provider succeeded after failures",
                    extra={"provider": backend, "attempts": attempts},
                )
            return result

        logger.error(
            "All providers failed for generation",
            extra={"backends": order, "attempts": attempts},
        )
        raise AllBackendsExhaustedError(last_error, attempts=attempts)

    async def _attempt(
        self, backend: str, messages: Sequence[Message], config: GenerationConfig
    ) -> GenerationResult:
        provider = self.providers.get(backend)
        if provider is None:
            raise ConfigurationError(f"Unknown backend: {backend}")
        return await provider.complete(messages, config.for_backend(backend))
