# typeahead/workflow/generation.py

import asyncio
import logging
import time
from typing import Optional, Sequence

from typeahead.config import (
    GENERATION_TIMEOUT_SECONDS,
    PHRASE_MAX_TOKENS,
    PHRASE_TEMPERATURE,
    WORD_MAX_TOKENS,
    WORD_TEMPERATURE,
)
from typeahead.models import RetrievedChunk
from typeahead.prompts.prompt_builder import build_phrase_prompt, build_word_prompt
from typeahead.prompts.system_prompts import (
    PHRASE_FALLBACK_SYSTEM_PROMPT,
    PHRASE_SUGGESTION_SYSTEM_PROMPT,
    WORD_COMPLETION_SYSTEM_PROMPT,
    WORD_FALLBACK_SYSTEM_PROMPT,
)
from typeahead.workflow.scripts import strategy_for

logger = logging.getLogger(__name__)

MAX_CONTEXT_CHUNKS = 5

_QUOTES = "\"'`“”‘’"


def clean_generated_text(text: Optional[str],
                         incomplete_token: Optional[str] = None) -> str:
    """
    Normalize raw generator output into a suggestion.

    • surrounding whitespace trimmed
    • one layer of surrounding quotes removed
    • in word mode, a repeated partial word is cut so only the new
      suffix remains
    """

    if not text:
        return ""

    text = text.strip()

    if len(text) >= 2 and text[0] in _QUOTES and text[-1] in _QUOTES:
        text = text[1:-1].strip()

    # a reply starting with the partial word is read as the whole word
    # ("coa" for "co" gives "a"), even when it was already a bare suffix
    if incomplete_token and strategy_for(incomplete_token).starts_with(
        text, incomplete_token
    ):
        text = text[len(incomplete_token):]

    return text


class GenerativeCompletionAdapter:
    """
    Invocation contract around the text generator.

    Guarantees:
    • at most MAX_CONTEXT_CHUNKS chunks ever reach the prompt
    • every call bounded by a timeout
    • never raises: generator errors, timeouts and empty output all
      come back as ""
    """

    def __init__(self, llm_client, timeout: float = GENERATION_TIMEOUT_SECONDS):
        self._llm = llm_client
        self._timeout = timeout

    async def generate(
        self,
        full_text: str,
        incomplete_token: Optional[str] = None,
        context_chunks: Optional[Sequence[RetrievedChunk]] = None,
    ) -> str:
        """
        Generate one completion.

        incomplete_token given → word mode, otherwise phrase mode.
        context_chunks None or empty → no-context fallback prompt.
        """

        mode = "word" if incomplete_token else "phrase"

        context = self._select_context(context_chunks)

        if mode == "word":
            system_prompt = (
                WORD_COMPLETION_SYSTEM_PROMPT if context
                else WORD_FALLBACK_SYSTEM_PROMPT
            )
            user_prompt = build_word_prompt(
                full_text, incomplete_token, context or None
            )
            max_tokens, temperature = WORD_MAX_TOKENS, WORD_TEMPERATURE

        else:
            system_prompt = (
                PHRASE_SUGGESTION_SYSTEM_PROMPT if context
                else PHRASE_FALLBACK_SYSTEM_PROMPT
            )
            user_prompt = build_phrase_prompt(full_text, context or None)
            max_tokens, temperature = PHRASE_MAX_TOKENS, PHRASE_TEMPERATURE

        start = time.time()

        try:

            raw = await asyncio.wait_for(
                self._llm.complete(
                    system_prompt=system_prompt.strip(),
                    user_prompt=user_prompt,
                    max_tokens=max_tokens,
                    temperature=temperature,
                ),
                timeout=self._timeout,
            )

        except asyncio.TimeoutError:

            logger.warning(
                "Generation timed out",
                extra={"mode": mode, "timeout_seconds": self._timeout},
            )

            return ""

        except Exception as e:

            logger.warning(
                "Generation failed",
                extra={
                    "mode": mode,
                    "error": str(e),
                    "error_type": type(e).__name__,
                },
            )

            return ""

        suggestion = clean_generated_text(raw, incomplete_token)

        logger.info(
            "Generation completed",
            extra={
                "mode": mode,
                "context_chunks": len(context),
                "latency_seconds": round(time.time() - start, 3),
                "empty": not suggestion,
            },
        )

        return suggestion

    def _select_context(self, context_chunks) -> list:

        if not context_chunks:
            return []

        ranked = sorted(
            context_chunks,
            key=lambda chunk: chunk.raw_similarity,
            reverse=True,
        )

        return [chunk.content for chunk in ranked[:MAX_CONTEXT_CHUNKS]]
