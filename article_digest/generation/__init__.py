"""
Resilient text generation for article digests.

Provides sentence-aware chunking, chat provider abstraction, retry and
fallback across providers, and the chunked document pipeline.
"""

from .chain import AttemptCursor, ProviderChain
from .chunker import ArticleChunker, Chunk, split_sentences
from .operations import OPERATIONS, Operation, get_operation
from .pipeline import DocumentPipeline, PacedTaskRunner, ReduceStrategy
from .providers import (
    ChatProvider,
    OpenRouterProvider,
    ProviderFactory,
    YandexGPTProvider,
)
from .types import Backend, GenerationConfig, GenerationResult, Message

__all__ = [
    "AttemptCursor",
    "ProviderChain",
    "ArticleChunker",
    "Chunk",
    "split_sentences",
    "OPERATIONS",
    "Operation",
    "get_operation",
    "DocumentPipeline",
    "PacedTaskRunner",
    "ReduceStrategy",
    "ChatProvider",
    "OpenRouterProvider",
    "ProviderFactory",
    "YandexGPTProvider",
    "Backend",
    "GenerationConfig",
    "GenerationResult",
    "Message",
]
