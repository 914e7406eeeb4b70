"""Sentence-bounded chunking of article text."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import List

logger = logging.getLogger(__name__)

# A run of terminators followed by whitespace or the end of text, plus that
# whitespace. Matching only from the start of a run keeps the scan linear.
_SENTENCE_END_RE = re.compile(r"(?<![.!?])[.!?]+(?:\s+|\Z)")


@dataclass(frozen=True)
class Chunk:
    """One segment of the source text and its 1-based position."""

    text: str
    index: int
    total: int

    @property
    def is_first(self) -> bool:
        return self.index == 1

    @property
    def is_last(self) -> bool:
        return self.index == self.total


def split_sentences(text: str) -> List[str]:
    """Split text into sentences whose concatenation is the original text.

    A sentence owns its trailing whitespace; unterminated trailing text is
    the last sentence.
    """
    sentences: List[str] = []
    start = 0
    for match in _SENTENCE_END_RE.finditer(text):
        sentences.append(text[start:match.end()])
        start = match.end()
    if start < len(text):
        sentences.append(text[start:])
    return sentences


class ArticleChunker:
    """Chunks article text for processing by an LLM.

    Sentences are packed greedily up to ``max_length`` characters. A
    sentence longer than the limit becomes its own oversized chunk rather
    than being cut. Joining the chunk texts reproduces the input exactly.
    """

    def __init__(self, max_length: int = 8000):
        """Initialize chunker.

        Args:
            max_length: Target maximum characters per chunk
        """
        if max_length <= 0:
            raise ValueError("max_length must be positive")
        self.max_length = max_length

    def chunk(self, text: str) -> List[Chunk]:
        """Chunk article text into ordered segments.

        Args:
            text: Article text to chunk

        Returns:
            List of chunks (a single chunk if the text fits; empty for empty text)
        """
        if not text:
            return []

        if len(text) <= self.max_length:
            return [Chunk(text=text, index=1, total=1)]

        pieces: List[str] = []
        buffer = ""
        for sentence in split_sentences(text):
            if buffer and len(buffer) + len(sentence) > self.max_length:
                pieces.append(buffer)
                buffer = sentence
            else:
                buffer += sentence

        if buffer:
            pieces.append(buffer)

        total = len(pieces)
        logger.debug(
            "Segmented article",
            extra={"chunk_count": total, "text_length": len(text), "max_length": self.max_length},
        )
        return [Chunk(text=piece, index=i, total=total) for i, piece in enumerate(pieces, start=1)]
