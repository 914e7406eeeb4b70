"""
Article digest: summaries, key points, posts and translations of article
text produced by remote language models, with retry, fallback, chunking
and result caching.
"""

from .cache import CacheKey, CacheStats, ResultCache
from .errors import (
    AllBackendsExhaustedError,
    BackendError,
    ConfigurationError,
    EmptyResponseError,
    ErrorCategory,
    GenerationError,
    InputError,
    NetworkError,
    classify_error,
)
from .service import AnalysisResult, AnalysisService, create_analysis_service

__all__ = [
    "CacheKey",
    "CacheStats",
    "ResultCache",
    "AllBackendsExhaustedError",
    "BackendError",
    "ConfigurationError",
    "EmptyResponseError",
    "ErrorCategory",
    "GenerationError",
    "InputError",
    "NetworkError",
    "classify_error",
    "AnalysisResult",
    "AnalysisService",
    "create_analysis_service",
]
