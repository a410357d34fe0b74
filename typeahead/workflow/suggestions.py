# typeahead/workflow/suggestions.py
"""
Hybrid suggestion ranking.

Per request:

START → RETRIEVE
    → no chunks / retrieval error → FALLBACK_GENERATE → DONE
    → chunks → CLASSIFY → EXTRACT_LITERALS → GATE_CHECK
             → [GENERATE] → MERGE → DONE

Nothing is kept between requests.
"""

import functools
import logging
import time
from typing import Awaitable, Callable, List, Optional

from typeahead.config import (
    FAST_PATH_MIN_LITERAL_MATCHES,
    MATCH_PREVIEW_COUNT,
    MAX_PHRASE_COMPLETION_LENGTH,
    MAX_SUGGESTIONS,
    MAX_WORD_COMPLETION_LENGTH,
    MIN_PHRASE_INPUT_LENGTH,
    PHRASE_CONTEXT_CHUNKS,
    PHRASE_EXTRACTION_CHUNKS,
    PHRASE_MATCH_COUNT,
    PHRASE_MATCH_THRESHOLD,
    WORD_CONTEXT_CHUNKS,
    WORD_MATCH_COUNT,
    WORD_MATCH_THRESHOLD,
)
from typeahead.models import (
    CompletionRequest,
    MatchPreview,
    RetrievedChunk,
    Suggestion,
    SuggestionResult,
)
from typeahead.workflow.classifier import classify
from typeahead.workflow.extractor import (
    extract_phrase_continuation,
    extract_word_completion,
)
from typeahead.workflow.fallback import RetrievalFallbackController
from typeahead.workflow.fast_path import should_skip_generation
from typeahead.workflow.generation import GenerativeCompletionAdapter
from typeahead.workflow.merger import merge_suggestions
from typeahead.workflow.scripts import detect_script

logger = logging.getLogger(__name__)


RetrieveFn = Callable[..., Awaitable[List[RetrievedChunk]]]


def validate_request(request: CompletionRequest) -> Optional[str]:
    """Return an error message for unusable input, None otherwise."""

    if not isinstance(request.full_text, str) or not request.full_text.strip():
        return "Invalid text provided"

    if request.mode == "word" and not request.incomplete_token:
        return "Invalid incomplete word provided"

    return None


class SuggestionEngine:
    """
    Turns retrieved chunks and generator output into a ranked,
    deduplicated suggestion list.

    retrieve_fn(text, similarity_threshold, max_count, literal_query=None)
    is the retrieval collaborator; llm_client is the text generator.
    """

    def __init__(
        self,
        retrieve_fn: RetrieveFn,
        llm_client,
        max_suggestions: int = MAX_SUGGESTIONS,
        fast_path_min_literals: int = FAST_PATH_MIN_LITERAL_MATCHES,
    ):
        self._retrieve = retrieve_fn
        self._adapter = GenerativeCompletionAdapter(llm_client)
        self._fallback = RetrievalFallbackController(self._adapter)
        self._max_suggestions = max_suggestions
        self._fast_path_min_literals = fast_path_min_literals

    # ============================================================
    # PUBLIC API
    # ============================================================

    async def get_suggestions(self, request: CompletionRequest) -> SuggestionResult:

        error = validate_request(request)

        if error:

            logger.info(
                "Suggestion request rejected",
                extra={"mode": request.mode, "reason": error},
            )

            return SuggestionResult.invalid(request.mode, error)

        start = time.time()

        if request.mode == "word":
            result = await self._complete_word(request)
        else:
            result = await self._suggest_phrase(request)

        logger.info(
            "Suggestions ready",
            extra={
                "mode": request.mode,
                "script": detect_script(request.full_text),
                "suggestions": len(result.suggestions),
                "used_fallback": result.used_fallback,
                "generation_skipped": result.generation_skipped,
                "latency_seconds": round(time.time() - start, 3),
            },
        )

        return result

    # ============================================================
    # WORD MODE
    # ============================================================

    async def _complete_word(self, request: CompletionRequest) -> SuggestionResult:

        text = request.full_text
        token = request.incomplete_token

        outcome = await self._fallback.resolve(
            functools.partial(
                self._retrieve,
                text,
                WORD_MATCH_THRESHOLD,
                WORD_MATCH_COUNT,
                literal_query=token,
            )
        )

        if outcome.mode == "fallback":
            return await self._fallback_result(request, MAX_WORD_COMPLETION_LENGTH)

        chunks = outcome.chunks
        classifications = [classify(chunk) for chunk in chunks]

        extracted: List[Suggestion] = []

        for chunk, label in zip(chunks, classifications):

            completion = extract_word_completion(text, token, chunk.content)

            if not completion.strip() or len(completion) >= MAX_WORD_COMPLETION_LENGTH:
                continue

            extracted.append(
                Suggestion(
                    text=completion,
                    source="trained-data",
                    similarity=label.display_similarity,
                    is_literal=label.is_literal,
                )
            )

        skip = should_skip_generation(extracted, self._fast_path_min_literals)

        generated = None

        if skip:

            logger.info(
                "Fast path: generation skipped",
                extra={"literal_matches": len([s for s in extracted if s.is_literal])},
            )

        else:

            generated = await self._generate(
                text, token, chunks[:WORD_CONTEXT_CHUNKS], classifications[0].display_similarity
            )

        return SuggestionResult(
            mode="word",
            suggestions=merge_suggestions(
                generated,
                extracted,
                self._max_suggestions,
                MAX_WORD_COMPLETION_LENGTH,
            ),
            matches=self._previews(chunks, classifications),
            generation_skipped=skip,
        )

    # ============================================================
    # PHRASE MODE
    # ============================================================

    async def _suggest_phrase(self, request: CompletionRequest) -> SuggestionResult:

        text = request.full_text

        if len(text.strip()) < MIN_PHRASE_INPUT_LENGTH:
            return SuggestionResult(mode="phrase")

        outcome = await self._fallback.resolve(
            functools.partial(
                self._retrieve,
                text,
                PHRASE_MATCH_THRESHOLD,
                PHRASE_MATCH_COUNT,
            )
        )

        if outcome.mode == "fallback":
            return await self._fallback_result(request, MAX_PHRASE_COMPLETION_LENGTH)

        chunks = outcome.chunks
        classifications = [classify(chunk) for chunk in chunks]

        extracted: List[Suggestion] = []

        for chunk, label in zip(
            chunks[:PHRASE_EXTRACTION_CHUNKS],
            classifications[:PHRASE_EXTRACTION_CHUNKS],
        ):

            continuation = extract_phrase_continuation(text, chunk.content)

            if not continuation.strip() or len(continuation) >= MAX_PHRASE_COMPLETION_LENGTH:
                continue

            extracted.append(
                Suggestion(
                    text=continuation,
                    source="trained-data",
                    similarity=label.display_similarity,
                    is_literal=label.is_literal,
                )
            )

        generated = await self._generate(
            text, None, chunks[:PHRASE_CONTEXT_CHUNKS], classifications[0].display_similarity
        )

        return SuggestionResult(
            mode="phrase",
            suggestions=merge_suggestions(
                generated,
                extracted,
                self._max_suggestions,
                MAX_PHRASE_COMPLETION_LENGTH,
            ),
            matches=self._previews(chunks, classifications),
        )

    # ============================================================
    # HELPERS
    # ============================================================

    async def _generate(self, text, token, context, top_similarity) -> Optional[Suggestion]:

        completion = await self._adapter.generate(text, token, context)

        if not completion.strip():
            return None

        return Suggestion(
            text=completion,
            source="ai-with-context",
            similarity=top_similarity,
        )

    async def _fallback_result(self, request, max_length) -> SuggestionResult:

        suggestions = await self._fallback.generate_fallback(request, max_length)

        return SuggestionResult(
            mode=request.mode,
            suggestions=suggestions[: self._max_suggestions],
            used_fallback=True,
        )

    def _previews(self, chunks, classifications) -> List[MatchPreview]:

        return [
            MatchPreview.from_chunk(chunk, label.display_similarity)
            for chunk, label in list(zip(chunks, classifications))[:MATCH_PREVIEW_COUNT]
        ]
