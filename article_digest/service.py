"""AnalysisService - cached article analysis entry point."""
from __future__ import annotations

import logging
from typing import Optional

from pydantic import BaseModel

from .cache import ResultCache
from .config import DigestSettings, get_settings
from .generation.chain import ProviderChain, Sleep
from .generation.chunker import ArticleChunker
from .generation.operations import get_operation
from .generation.pipeline import DocumentPipeline
from .generation.providers import ProviderFactory
from .generation.types import GenerationConfig

logger = logging.getLogger(__name__)


class AnalysisResult(BaseModel):
    resource_id: str
    operation: str
    content: str
    cached: bool = False


class AnalysisService:
    """Runs an operation over article text, reusing cached results.

    Only successful results are cached; a failed run leaves the cache
    untouched so the next request tries again.
    """

    def __init__(
        self,
        pipeline: DocumentPipeline,
        cache: ResultCache,
        default_config: Optional[GenerationConfig] = None,
    ):
        self.pipeline = pipeline
        self.cache = cache
        self.default_config = default_config or GenerationConfig()

    async def analyze(
        self,
        resource_id: str,
        text: str,
        operation: str,
        config: Optional[GenerationConfig] = None,
        *,
        language: Optional[str] = None,
    ) -> AnalysisResult:
        """Produce the artifact for ``operation`` over ``text``.

        Args:
            resource_id: Stable identifier of the source (usually its URL)
            text: Extracted article text
            operation: Operation name ("about", "thesis", "telegram", "translate")
            config: Generation parameters; defaults to the service config
            language: Target language for "translate"

        Raises:
            InputError: Unknown operation or empty text
            AllBackendsExhaustedError: Generation failed on every backend
        """
        op = get_operation(operation, language=language)
        cache_operation = op.cache_key

        cached = self.cache.get(resource_id, cache_operation)
        if cached is not None:
            logger.info(
                "Cache hit",
                extra={"resource_id": resource_id, "operation": cache_operation},
            )
            return AnalysisResult(
                resource_id=resource_id, operation=op.name, content=cached, cached=True
            )

        logger.info(
            "Starting analysis run",
            extra={"resource_id": resource_id, "operation": cache_operation},
        )
        content = await self.pipeline.process(
            text,
            op.system_prompt,
            op.user_template,
            config or self.default_config,
            reduce=op.reduce,
        )
        self.cache.set(resource_id, cache_operation, content)

        logger.info(
            "Completed analysis run",
            extra={
                "resource_id": resource_id,
                "operation": cache_operation,
                "result_length": len(content),
            },
        )
        return AnalysisResult(resource_id=resource_id, operation=op.name, content=content)


def create_analysis_service(
    settings: Optional[DigestSettings] = None,
    cache: Optional[ResultCache] = None,
    *,
    chain: Optional[ProviderChain] = None,
    sleep: Optional[Sleep] = None,
) -> AnalysisService:
    """Factory function to create a configured AnalysisService.

    Args:
        settings: Settings; uses cached settings if not provided
        cache: Result cache; a new one is built from settings if not provided
        chain: Provider chain; built from settings if not provided
        sleep: Awaitable sleep for backoff and pacing

    Returns:
        Configured AnalysisService (the cache sweeper is not started)
    """
    settings = settings or get_settings()
    gen = settings.generation

    if chain is None:
        providers = ProviderFactory(settings).create_all()
        chain = ProviderChain(providers, base_delay=gen.retry_base_delay, sleep=sleep)

    pipeline = DocumentPipeline(
        chain,
        ArticleChunker(max_length=gen.chunk_max_length),
        retries=gen.retries,
        backend_order=gen.backend_order or None,
        pacing_delay=gen.pacing_delay,
        sleep=sleep,
    )

    if cache is None:
        cache = ResultCache(
            default_ttl=settings.cache.ttl_seconds,
            sweep_interval=settings.cache.sweep_interval,
        )

    default_config = GenerationConfig(
        backend=gen.default_backend,
        temperature=gen.temperature,
        max_output_tokens=gen.max_output_tokens,
    )
    return AnalysisService(pipeline, cache, default_config)
