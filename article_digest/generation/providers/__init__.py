from .base import ChatProvider
from .factory import ProviderFactory
from .openrouter import OpenRouterProvider
from .yandex import YandexGPTProvider

__all__ = [
    "ChatProvider",
    "ProviderFactory",
    "OpenRouterProvider",
    "YandexGPTProvider",
]
