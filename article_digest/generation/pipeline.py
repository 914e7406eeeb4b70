"""DocumentPipeline - chunked generation over long article text."""
from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable, Generic, List, Optional, Sequence, TypeVar

from ..errors import InputError
from .chain import ProviderChain, Sleep
from .chunker import ArticleChunker, Chunk
from .types import GenerationConfig, Message

logger = logging.getLogger(__name__)

T = TypeVar("T")

TEXT_PLACEHOLDER = "{text}"
CHUNK_SEPARATOR = "\n\n"

PARTIAL_SUFFIX = "\n\nProcess only this part and do not draw conclusions about the whole text."

COMPOSE_SYSTEM_PROMPT = (
    "You condense one part of a longer article. Keep every fact, name, number "
    "and claim that matters; drop filler. Answer in the language of the text."
)
COMPOSE_USER_TEMPLATE = "Summarize this part of the article:\n\n{text}"


class ReduceStrategy(str, Enum):
    """How per-chunk outputs become one result."""

    # Ordered join of per-chunk outputs
    CONCATENATE = "concatenate"
    # Condense each chunk, then run the real prompt once over the condensed text
    COMPOSE = "compose"


class PacedTaskRunner(Generic[T]):
    """Runs async tasks one after another with a fixed gap between them.

    Task ``i + 1`` never starts before task ``i`` finishes. The first
    failure propagates and the remaining tasks are not started.
    """

    def __init__(self, delay: float = 0.5, sleep: Optional[Sleep] = None):
        self.delay = delay
        self._sleep: Sleep = sleep or asyncio.sleep

    async def pause(self) -> None:
        """Wait out the gap that separates two consecutive tasks."""
        if self.delay > 0:
            await self._sleep(self.delay)

    async def run(self, tasks: Sequence[Callable[[], Awaitable[T]]]) -> List[T]:
        results: List[T] = []
        for position, task in enumerate(tasks):
            if position:
                await self.pause()
            results.append(await task())
        return results


def frame_chunk(prompt: str, chunk: Chunk) -> str:
    """Add positional framing to a chunk prompt in a multi-chunk run."""
    if chunk.total == 1:
        return prompt
    if not chunk.is_first:
        prompt = f"This is part {chunk.index} of {chunk.total} of the article. {prompt}"
    if not chunk.is_last:
        prompt += PARTIAL_SUFFIX
    return prompt


class DocumentPipeline:
    """Turns article text into one generated artifact.

    Text that fits in one chunk is a single chain call. Longer text is
    chunked on sentence boundaries and each chunk goes through the chain in
    order; the outputs are reduced according to the ReduceStrategy.
    """

    def __init__(
        self,
        chain: ProviderChain,
        chunker: Optional[ArticleChunker] = None,
        *,
        retries: int = 2,
        backend_order: Optional[Sequence[str]] = None,
        pacing_delay: float = 0.5,
        sleep: Optional[Sleep] = None,
    ):
        """Initialize pipeline.

        Args:
            chain: Provider chain that performs each generation call
            chunker: Chunker; defaults to an 8000-character limit
            retries: Extra attempts per backend, passed to the chain
            backend_order: Fallback order tried after the requested backend
            pacing_delay: Seconds between consecutive chunk calls
            sleep: Awaitable sleep used for pacing
        """
        self.chain = chain
        self.chunker = chunker or ArticleChunker()
        self.retries = retries
        self.backend_order = list(backend_order) if backend_order else None
        self.runner: PacedTaskRunner[str] = PacedTaskRunner(pacing_delay, sleep=sleep)

    async def process(
        self,
        text: str,
        system_prompt: str,
        user_template: str,
        config: Optional[GenerationConfig] = None,
        reduce: ReduceStrategy = ReduceStrategy.CONCATENATE,
    ) -> str:
        """Generate an artifact for ``text``.

        Args:
            text: Extracted article text
            system_prompt: System message for every call
            user_template: User message template containing ``{text}``
            config: Generation parameters
            reduce: How to combine outputs of a multi-chunk run

        Returns:
            Generated text

        Raises:
            InputError: Empty text or template without a placeholder
            AllBackendsExhaustedError: A generation call failed on every backend
        """
        if not text or not text.strip():
            raise InputError("Text to process is empty.")
        if TEXT_PLACEHOLDER not in user_template:
            raise InputError(f"User template must contain the {TEXT_PLACEHOLDER} placeholder.")

        config = config or GenerationConfig()
        chunks = self.chunker.chunk(text)

        logger.info(
            "Prepared article text",
            extra={
                "chunk_count": len(chunks),
                "text_length": len(text),
                "reduce": reduce.value,
                "backend": config.backend,
            },
        )

        if len(chunks) == 1:
            return await self._generate(chunks[0], system_prompt, user_template, config)

        if reduce is ReduceStrategy.COMPOSE:
            return await self._compose(chunks, system_prompt, user_template, config)

        outputs = await self._map(chunks, system_prompt, user_template, config)
        return CHUNK_SEPARATOR.join(outputs)

    async def _map(
        self,
        chunks: Sequence[Chunk],
        system_prompt: str,
        user_template: str,
        config: GenerationConfig,
    ) -> List[str]:
        """Generate one output per chunk, sequentially and in order."""

        def make_task(chunk: Chunk) -> Callable[[], Awaitable[str]]:
            return lambda: self._generate(chunk, system_prompt, user_template, config)

        return await self.runner.run([make_task(chunk) for chunk in chunks])

    async def _compose(
        self,
        chunks: Sequence[Chunk],
        system_prompt: str,
        user_template: str,
        config: GenerationConfig,
    ) -> str:
        """Condense every chunk, then run the real prompt once over the condensed text.

        The condensed text is sent as a single unframed chunk even when it is
        longer than the chunk limit, so the result is always one artifact.
        """
        condensed = await self._map(chunks, COMPOSE_SYSTEM_PROMPT, COMPOSE_USER_TEMPLATE, config)
        joined = CHUNK_SEPARATOR.join(condensed)
        logger.info(
            "Composing from condensed chunks",
            extra={"chunk_count": len(condensed), "condensed_length": len(joined)},
        )
        await self.runner.pause()
        return await self._generate(
            Chunk(text=joined, index=1, total=1), system_prompt, user_template, config
        )

    async def _generate(
        self,
        chunk: Chunk,
        system_prompt: str,
        user_template: str,
        config: GenerationConfig,
    ) -> str:
        prompt = frame_chunk(user_template.replace(TEXT_PLACEHOLDER, chunk.text, 1), chunk)
        messages = [Message.system(system_prompt), Message.user(prompt)]

        logger.debug(
            "Generating chunk",
            extra={"chunk_index": chunk.index, "chunk_total": chunk.total, "chunk_length": len(chunk.text)},
        )
        result = await self.chain.run(
            messages, config, backend_order=self._backend_order(config), retries=self.retries
        )
        return result.content

    def _backend_order(self, config: GenerationConfig) -> Optional[List[str]]:
        """Requested backend first, then the configured fallbacks."""
        if not self.backend_order:
            return None
        return [config.backend] + [b for b in self.backend_order if b != config.backend]
