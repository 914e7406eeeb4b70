"""Shared value types for chat-style generation."""
from __future__ import annotations

from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class Backend(str, Enum):
    """Known generation backends, in default fallback order."""

    YANDEX = "yandex"
    OPENROUTER = "openrouter"


class Message(BaseModel):
    """One turn of a chat prompt."""

    model_config = ConfigDict(frozen=True)

    role: Literal["system", "user", "assistant"]
    content: str

    @classmethod
    def system(cls, content: str) -> "Message":
        return cls(role="system", content=content)

    @classmethod
    def user(cls, content: str) -> "Message":
        return cls(role="user", content=content)


class GenerationConfig(BaseModel):
    """Per-call generation parameters.

    ``backend`` names the preferred backend; ``model`` applies to that
    backend only, fallbacks use their own default model.
    """

    model_config = ConfigDict(frozen=True)

    backend: str = Backend.YANDEX.value
    model: Optional[str] = None
    temperature: float = Field(default=0.6, ge=0.0, le=2.0)
    max_output_tokens: int = Field(default=2000, gt=0)

    def for_backend(self, backend: str) -> "GenerationConfig":
        """Return the config to send to ``backend``."""
        if backend == self.backend:
            return self
        return self.model_copy(update={"backend": backend, "model": None})


class GenerationResult(BaseModel):
    """Successful completion from one backend."""

    content: str
    backend: str
    model: Optional[str] = None
