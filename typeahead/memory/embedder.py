# typeahead/memory/embedder.py

"""
Async embedding wrapper with batching.

Architecture contract:
chunker → embedder → vector_store (training)
query text → embedder → hybrid search (suggestions)

Guarantees:
• Always returns numpy float32 arrays
• Always normalized (cosine-ready)
• Batched processing for training text
• Raises RuntimeError on provider failure (callers decide how to degrade)
"""

import logging
from typing import List

import numpy as np
from openai import AsyncOpenAI

from typeahead.config import (
    EMBEDDING_MODEL,
    MAX_CHUNKS_PER_DOCUMENT,
)

logger = logging.getLogger(__name__)

DEFAULT_EMBED_BATCH_SIZE = 32

_DIMENSIONS = {
    "text-embedding-3-small": 1536,
    "text-embedding-3-large": 3072,
}


def _normalize(vectors: np.ndarray) -> np.ndarray:

    norms = np.linalg.norm(vectors, axis=1, keepdims=True)

    return vectors / np.clip(norms, 1e-10, None)


class Embedder:
    """
    Responsibilities:
    • Call OpenAI embedding API
    • Generate normalized embeddings
    • Enforce system limits
    """

    def __init__(self, model: str = EMBEDDING_MODEL):

        logger.info(
            "Initializing embedding model",
            extra={"model": model}
        )

        if model not in _DIMENSIONS:
            raise ValueError(f"Unsupported embedding model: {model}")

        try:

            self._client = AsyncOpenAI()

        except Exception as e:

            logger.critical(
                "Embedding model initialization failed",
                extra={"error": str(e)}
            )

            raise RuntimeError(
                f"Failed to initialize embedding model: {e}"
            )

        self._model = model
        self._dimension = _DIMENSIONS[model]

    # ============================================================
    # PUBLIC API
    # ============================================================

    async def embed(self, text: str) -> np.ndarray:
        """Embed one query text into a normalized 1-D vector."""

        embeddings = await self.embed_batch([text])

        return embeddings[0]

    async def embed_batch(
        self,
        texts: List[str],
        batch_size: int = DEFAULT_EMBED_BATCH_SIZE
    ) -> np.ndarray:

        if not texts:

            logger.warning("Empty embedding request")

            return np.empty((0, self._dimension), dtype="float32")

        if len(texts) > MAX_CHUNKS_PER_DOCUMENT:

            raise ValueError(
                f"Chunk count exceeds MAX_CHUNKS_PER_DOCUMENT "
                f"({MAX_CHUNKS_PER_DOCUMENT})"
            )

        try:

            all_embeddings = []

            for start in range(0, len(texts), batch_size):

                batch = texts[start:start + batch_size]

                response = await self._client.embeddings.create(
                    model=self._model,
                    input=batch,
                )

                batch_embeddings = np.array(
                    [item.embedding for item in response.data],
                    dtype="float32"
                )

                all_embeddings.append(_normalize(batch_embeddings))

            embeddings = np.vstack(all_embeddings)

            logger.debug(
                "Embedding completed",
                extra={
                    "texts": len(texts),
                    "dimension": self._dimension,
                }
            )

            return embeddings

        except Exception as e:

            logger.error(
                "Embedding generation failed",
                extra={"error": str(e)}
            )

            raise RuntimeError(
                f"Embedding generation failed: {e}"
            )

    # ============================================================
    # ACCESSORS
    # ============================================================

    def get_dimension(self) -> int:
        return self._dimension
