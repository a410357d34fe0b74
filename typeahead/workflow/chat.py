# typeahead/workflow/chat.py

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, Sequence

from typeahead.config import (
    CHAT_HISTORY_LIMIT,
    CHAT_MATCH_COUNT,
    CHAT_MATCH_THRESHOLD,
    CHAT_MAX_TOKENS,
    CHAT_PREVIEW_CHARS,
    CHAT_TEMPERATURE,
    GENERATION_TIMEOUT_SECONDS,
    MATCH_PREVIEW_COUNT,
)
from typeahead.models import ChatMessage, ChatResult, MatchPreview, RetrievedChunk
from typeahead.prompts.prompt_builder import build_chat_system_prompt
from typeahead.workflow.classifier import display_similarity

logger = logging.getLogger(__name__)


async def answer_chat(
    message: Optional[str],
    history: Sequence[ChatMessage],
    retrieve_fn: Callable[..., Awaitable[List[RetrievedChunk]]],
    llm_client,
    timeout: float = GENERATION_TIMEOUT_SECONDS,
) -> ChatResult:
    """
    Answer a chat message, grounded in trained content when any matches.

    Retrieval problems only remove the knowledge-base context; generation
    problems produce an empty answer with an error message.
    """

    if not isinstance(message, str) or not message.strip():
        return ChatResult(valid=False, error="Invalid message provided")

    chunks: List[RetrievedChunk] = []

    try:

        chunks = await retrieve_fn(message, CHAT_MATCH_THRESHOLD, CHAT_MATCH_COUNT) or []

    except Exception as e:

        logger.warning(
            "Knowledge base search failed, answering without context",
            extra={"error": str(e), "error_type": type(e).__name__},
        )

    system_prompt = build_chat_system_prompt([chunk.content for chunk in chunks])

    messages = [
        {"role": turn.role, "content": turn.content}
        for turn in list(history)[-CHAT_HISTORY_LIMIT:]
    ]
    messages.append({"role": "user", "content": message})

    matches = [
        MatchPreview.from_chunk(chunk, display_similarity(chunk), CHAT_PREVIEW_CHARS)
        for chunk in chunks[:MATCH_PREVIEW_COUNT]
    ]

    result = ChatResult(
        used_knowledge_base=bool(chunks),
        context_chunks=len(chunks),
        matches=matches,
    )

    try:

        answer = await asyncio.wait_for(
            llm_client.chat(
                system_prompt=system_prompt,
                messages=messages,
                max_tokens=CHAT_MAX_TOKENS,
                temperature=CHAT_TEMPERATURE,
            ),
            timeout=timeout,
        )

    except asyncio.TimeoutError:

        logger.warning("Chat generation timed out", extra={"timeout_seconds": timeout})

        result.error = "Failed to generate response"
        return result

    except Exception as e:

        logger.warning(
            "Chat generation failed",
            extra={"error": str(e), "error_type": type(e).__name__},
        )

        result.error = "Failed to generate response"
        return result

    result.answer = (answer or "").strip()

    logger.info(
        "Chat answered",
        extra={
            "used_knowledge_base": result.used_knowledge_base,
            "context_chunks": result.context_chunks,
            "history_messages": len(messages) - 1,
        },
    )

    return result
