"""Provider factory for creating chat providers from configuration."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Dict

from ...errors import ConfigurationError
from ..types import Backend
from .base import ChatProvider
from .openrouter import OpenRouterProvider
from .yandex import YandexGPTProvider

if TYPE_CHECKING:
    from ...config import DigestSettings

logger = logging.getLogger(__name__)


class ProviderFactory:
    """Factory for creating chat providers from configuration.

    Providers are built even when their credentials are missing: the
    provider raises ConfigurationError on its first call, which the chain
    treats like any other failed attempt.
    """

    def __init__(self, settings: "DigestSettings"):
        """Initialize factory with application settings.

        Args:
            settings: Settings containing provider credentials and timeouts
        """
        self.settings = settings
        self._builders: Dict[str, Callable[[], ChatProvider]] = {
            Backend.YANDEX.value: self.create_yandex,
            Backend.OPENROUTER.value: self.create_openrouter,
        }

    def create_yandex(self) -> ChatProvider:
        """Create YandexGPT provider from configuration."""
        if not self.settings.yandex.is_configured():
            logger.warning(
                "YandexGPT credentials missing; calls will fail until configured",
                extra={"provider": Backend.YANDEX.value},
            )
        return YandexGPTProvider.from_settings(
            self.settings.yandex, timeout=self.settings.generation.request_timeout
        )

    def create_openrouter(self) -> ChatProvider:
        """Create OpenRouter provider from configuration."""
        if not self.settings.openrouter.is_configured():
            logger.warning(
                "OpenRouter credentials missing; calls will fail until configured",
                extra={"provider": Backend.OPENROUTER.value},
            )
        return OpenRouterProvider.from_settings(
            self.settings.openrouter, timeout=self.settings.generation.request_timeout
        )

    def create_provider(self, provider_name: str) -> ChatProvider:
        """Create provider by name.

        Raises:
            ConfigurationError: Unknown provider name
        """
        builder = self._builders.get(provider_name)
        if builder is None:
            logger.error("Unknown provider requested", extra={"provider": provider_name})
            raise ConfigurationError(f"Unknown provider: {provider_name}")
        return builder()

    def create_all(self) -> Dict[str, ChatProvider]:
        """Create every known provider keyed by backend name, in fallback order."""
        providers = {name: self.create_provider(name) for name in self._builders}
        logger.info(
            "Created providers",
            extra={"providers": list(providers)},
        )
        return providers
