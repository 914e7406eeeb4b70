"""
Error taxonomy for article digest generation.

Backend clients raise the specific kinds below; the orchestrator wraps the
last one in AllBackendsExhaustedError once every backend is spent. The
ErrorCategory enum is the coarse classification used when reporting a
failure to a human.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class GenerationError(Exception):
    """Base class for every generation pipeline failure."""


class ConfigurationError(GenerationError):
    """Credentials or backend settings are missing or invalid."""


class InputError(GenerationError):
    """Input text or operation is unusable; raised before any network call."""


class NetworkError(GenerationError):
    """Transport failure talking to a backend."""

    def __init__(self, message: str, *, timeout: bool = False):
        super().__init__(message)
        self.timeout = timeout


class BackendError(GenerationError):
    """Backend answered with a non-2xx status or an unreadable body."""

    def __init__(self, status_code: int, backend_message: str = "", *, backend: str = ""):
        self.status_code = status_code
        self.backend_message = backend_message
        self.backend = backend
        label = backend or "backend"
        super().__init__(f"{label} API error: {status_code}. {backend_message}".strip())


class EmptyResponseError(GenerationError):
    """Backend answered 2xx but returned no usable generated text."""


class AllBackendsExhaustedError(GenerationError):
    """Every backend/attempt combination failed."""

    def __init__(self, last_error: Optional[BaseException], attempts: int = 0):
        self.last_error = last_error
        self.attempts = attempts
        detail = str(last_error) if last_error else "unknown error"
        super().__init__(
            f"All backends exhausted after {attempts} attempts. Last error: {detail}"
        )


class ErrorCategory(str, Enum):
    """Human-facing failure categories."""

    TIMEOUT = "timeout"
    NETWORK = "network"
    NOT_FOUND = "not_found"
    SERVER = "server"
    CONFIGURATION = "configuration"
    QUOTA = "quota"
    UNKNOWN = "unknown"

    @property
    def message(self) -> str:
        return _CATEGORY_MESSAGES[self]


_CATEGORY_MESSAGES = {
    ErrorCategory.TIMEOUT: "The language model took too long to respond. Try again later.",
    ErrorCategory.NETWORK: "Could not reach the language model service. Check your connection.",
    ErrorCategory.NOT_FOUND: "The requested model or endpoint was not found.",
    ErrorCategory.SERVER: "The language model service returned a server error. Try again later.",
    ErrorCategory.CONFIGURATION: "The language model service is not configured. Check API keys.",
    ErrorCategory.QUOTA: "The language model quota or account balance is exhausted.",
    ErrorCategory.UNKNOWN: "Something went wrong while generating the result.",
}

_QUOTA_MARKERS = ("balance", "quota", "insufficient", "rate limit")


def classify_error(exc: BaseException) -> ErrorCategory:
    """Map an exception to a display category.

    AllBackendsExhaustedError is classified by the error it wraps.
    """
    if isinstance(exc, AllBackendsExhaustedError):
        if exc.last_error is None:
            return ErrorCategory.UNKNOWN
        return classify_error(exc.last_error)

    if isinstance(exc, ConfigurationError):
        return ErrorCategory.CONFIGURATION
    if isinstance(exc, NetworkError):
        return ErrorCategory.TIMEOUT if exc.timeout else ErrorCategory.NETWORK
    if isinstance(exc, BackendError):
        return _classify_backend_error(exc)
    if isinstance(exc, TimeoutError):
        return ErrorCategory.TIMEOUT
    if isinstance(exc, ConnectionError):
        return ErrorCategory.NETWORK
    return ErrorCategory.UNKNOWN


def _classify_backend_error(exc: BackendError) -> ErrorCategory:
    message = (exc.backend_message or "").lower()
    if exc.status_code in (402, 429) or any(m in message for m in _QUOTA_MARKERS):
        return ErrorCategory.QUOTA
    if exc.status_code == 404:
        return ErrorCategory.NOT_FOUND
    if exc.status_code in (401, 403):
        return ErrorCategory.CONFIGURATION
    if exc.status_code >= 500:
        return ErrorCategory.SERVER
    return ErrorCategory.UNKNOWN
