# typeahead/workflow/fallback.py

import logging
from typing import Awaitable, Callable, List, Literal, Optional

from pydantic import BaseModel, Field

from typeahead.models import CompletionRequest, RetrievedChunk, Suggestion

logger = logging.getLogger(__name__)


class RetrievalOutcome(BaseModel):
    mode: Literal["retrieved", "fallback"]
    chunks: List[RetrievedChunk] = Field(default_factory=list)
    error: Optional[str] = None


class RetrievalFallbackController:
    """
    Switches a request to pure generation when retrieval has nothing.

    Zero chunks and a failed retrieval (embedding or vector search error)
    are treated the same: the request continues in fallback mode.
    """

    def __init__(self, adapter):
        self._adapter = adapter

    async def resolve(
        self,
        retrieve: Callable[[], Awaitable[List[RetrievedChunk]]],
    ) -> RetrievalOutcome:

        try:

            chunks = await retrieve()

        except Exception as e:

            logger.warning(
                "Retrieval failed, switching to fallback",
                extra={
                    "error": str(e),
                    "error_type": type(e).__name__,
                },
            )

            return RetrievalOutcome(mode="fallback", error=str(e))

        if not chunks:

            logger.info("No chunks retrieved, switching to fallback")

            return RetrievalOutcome(mode="fallback")

        return RetrievalOutcome(mode="retrieved", chunks=list(chunks))

    async def generate_fallback(
        self,
        request: CompletionRequest,
        max_length: int,
    ) -> List[Suggestion]:
        """Single-shot generation with no context chunks."""

        token = request.incomplete_token if request.mode == "word" else None

        text = await self._adapter.generate(request.full_text, token, None)

        if not text.strip() or len(text) >= max_length:
            return []

        return [Suggestion(text=text, source="openai-fallback", similarity=0.0)]
