# typeahead/observability/posthog_client.py

"""
PostHog product analytics.

Architecture contract:
- Does NOT replace logging
- Uses request_id as distinct_id
- Never blocks or breaks a request
"""

import os
import logging
from typing import Optional, Dict, Any

from posthog import Posthog


logger = logging.getLogger(__name__)


class PostHogClient:
    """
    Safe PostHog wrapper.

    Every public method is a no-op when POSTHOG_API_KEY is unset and
    swallows tracking errors after logging them.
    """

    def __init__(self):

        self._enabled = False
        self._client: Optional[Posthog] = None

        api_key = os.getenv("POSTHOG_API_KEY")
        host = os.getenv("POSTHOG_HOST", "https://app.posthog.com")

        if not api_key:
            logger.info("PostHog disabled: POSTHOG_API_KEY not set")
            return

        try:

            self._client = Posthog(
                project_api_key=api_key,
                host=host,
                timeout=5,
                flush_interval=1,
            )

            self._enabled = True

            logger.info("PostHog client initialized", extra={"host": host})

        except Exception as e:

            logger.error(
                "PostHog initialization failed",
                extra={"error": str(e)}
            )

    def _track(
        self,
        distinct_id: str,
        event: str,
        properties: Optional[Dict[str, Any]] = None,
    ):

        if not self._enabled or not self._client:
            return

        try:

            self._client.capture(
                distinct_id=distinct_id,
                event=event,
                properties=properties or {},
            )

        except Exception as e:

            logger.warning(
                "PostHog tracking failed",
                extra={"event": event, "error": str(e)}
            )

    # ==========================================================
    # EVENTS
    # ==========================================================

    def track_suggestions(
        self,
        distinct_id: str,
        mode: str,
        suggestions: int,
        used_fallback: bool,
        generation_skipped: bool,
        latency: float,
    ):

        self._track(
            distinct_id,
            "suggestions_served",
            {
                "mode": mode,
                "suggestions": suggestions,
                "used_fallback": used_fallback,
                "generation_skipped": generation_skipped,
                "latency_seconds": latency,
            },
        )

    def track_chat(
        self,
        distinct_id: str,
        used_knowledge_base: bool,
        context_chunks: int,
        latency: float,
        success: bool,
    ):

        self._track(
            distinct_id,
            "chat_answered",
            {
                "used_knowledge_base": used_knowledge_base,
                "context_chunks": context_chunks,
                "latency_seconds": latency,
                "success": success,
            },
        )

    def track_training(
        self,
        distinct_id: str,
        document_id: str,
        chunks: int,
        latency: float,
    ):

        self._track(
            distinct_id,
            "document_trained",
            {
                "document_id": document_id,
                "chunks": chunks,
                "latency_seconds": latency,
            },
        )

    def track_error(
        self,
        distinct_id: str,
        error_type: str,
        error_message: str,
        endpoint: str,
    ):

        self._track(
            distinct_id,
            "system_error",
            {
                "error_type": error_type,
                "error_message": error_message,
                "endpoint": endpoint,
            },
        )


posthog_client = PostHogClient()
