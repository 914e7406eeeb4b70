"""Prompt templates for the supported article operations."""
from __future__ import annotations

from dataclasses import dataclass
from textwrap import dedent
from typing import Dict, Optional

from ..errors import InputError
from .pipeline import ReduceStrategy


@dataclass(frozen=True)
class Operation:
    """Prompts and reduce policy for one kind of artifact."""

    name: str
    system_prompt: str
    user_template: str
    reduce: ReduceStrategy = ReduceStrategy.CONCATENATE
    # Parameter that changes the output, e.g. the target language
    variant: Optional[str] = None

    @property
    def cache_key(self) -> str:
        """Name under which results of this operation are cached."""
        return f"{self.name}:{self.variant}" if self.variant else self.name


ABOUT = Operation(
    name="about",
    system_prompt=dedent(
        """
        You are an editor who explains what an article is about.
        Answer in 2-3 plain sentences in the language of the article.
        Do not invent facts that are not in the text.
        """
    ).strip(),
    user_template="Explain what this article is about:\n\n{text}",
)

THESIS = Operation(
    name="thesis",
    system_prompt=dedent(
        """
        You extract the key points of an article.
        Return a bulleted list, one thesis per line, starting each line with "- ".
        Keep each point short and factual. Use the language of the article.
        """
    ).strip(),
    user_template="List the key points of this article:\n\n{text}",
)

TELEGRAM = Operation(
    name="telegram",
    system_prompt=dedent(
        """
        You write posts for a Telegram news channel.
        Write one engaging post of at most 1000 characters with a short hook,
        the essential facts and a closing line. Emoji are allowed but sparing.
        Use the language of the article.
        """
    ).strip(),
    user_template="Write a Telegram post based on this article:\n\n{text}",
    reduce=ReduceStrategy.COMPOSE,
)

_TRANSLATE_SYSTEM_PROMPT = dedent(
    """
    You are a professional translator. Translate the text into {language},
    preserving meaning, tone and paragraph breaks. Output only the translation.
    """
).strip()


DEFAULT_TRANSLATION_LANGUAGE = "English"


def translate(language: str = DEFAULT_TRANSLATION_LANGUAGE) -> Operation:
    """Translation operation into ``language``."""
    return Operation(
        name="translate",
        system_prompt=_TRANSLATE_SYSTEM_PROMPT.format(language=language),
        user_template="Translate the following text:\n\n{text}",
        variant=language,
    )


OPERATIONS: Dict[str, Operation] = {
    op.name: op for op in (ABOUT, THESIS, TELEGRAM, translate())
}


def get_operation(name: str, *, language: Optional[str] = None) -> Operation:
    """Look up an operation by name.

    Raises:
        InputError: Unknown operation name
    """
    if name == "translate" and language:
        return translate(language)
    try:
        return OPERATIONS[name]
    except KeyError:
        supported = ", ".join(sorted(OPERATIONS))
        raise InputError(f"Unknown operation '{name}'. Supported: {supported}") from None
