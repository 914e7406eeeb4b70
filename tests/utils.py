"""
Test utilities and factories.

Provides helper functions for creating article text and scripted replies.
"""

from __future__ import annotations

from typing import Callable, Sequence


# ==================== Factories ====================

def build_document(sentence_count: int, sentence_length: int = 50) -> str:
    """
    Build article text of equally sized sentences.

    Each sentence is exactly ``sentence_length`` characters including its
    terminating ". ", so the total length is ``sentence_count * sentence_length``.
    """
    sentences = []
    for i in range(sentence_count):
        body = f"Sentence {i:03d} ".ljust(sentence_length - 2, "x")
        sentences.append(body + ". ")
    return "".join(sentences)


def numbered_replies(prefix: str = "result") -> Callable[[Sequence], str]:
    """Reply function for ScriptedProvider returning prefix-1, prefix-2, ..."""
    counter = {"n": 0}

    def reply(messages) -> str:
        counter["n"] += 1
        return f"{prefix}-{counter['n']}"

    return reply
