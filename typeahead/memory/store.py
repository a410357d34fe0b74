import logging
import uuid

import numpy as np

from typing import List, Optional

from qdrant_client.http.models import (
    FieldCondition,
    Filter,
    FilterSelector,
    MatchText,
    MatchValue,
    PointStruct,
)

from typeahead.config import LITERAL_SCORE_OFFSET
from typeahead.memory.qdrant_client import QdrantVectorDB
from typeahead.models import RetrievedChunk


logger = logging.getLogger(__name__)

# Literal hits always score strictly above LITERAL_SCORE_OFFSET
_MIN_LITERAL_SIMILARITY = 0.01


class VectorStore:
    """
    Hybrid chunk store on Qdrant.

    search() merges two hit lists:
    • semantic: cosine similarity against the query vector
    • literal: chunks whose text contains the literal query, scored
      cosine + LITERAL_SCORE_OFFSET so callers can tell them apart
    """

    def __init__(self, db: QdrantVectorDB):
        self._db = db

    # ============================================================
    # WRITE
    # ============================================================

    async def add(self, embeddings, chunks: List[str], doc_id: str, filename: str):

        await self._db.ensure_collection()

        embeddings = self._ensure_numpy(embeddings)

        if len(embeddings) != len(chunks):
            raise ValueError("Embeddings and chunks length mismatch")

        points = [
            PointStruct(
                id=str(uuid.uuid4()),
                vector=vector.tolist(),
                payload={
                    "text": chunks[i],
                    "doc_id": doc_id,
                    "chunk_idx": i,
                    "filename": filename,
                },
            )
            for i, vector in enumerate(embeddings)
        ]

        await self._db.client.upsert(
            collection_name=self._db.collection,
            points=points,
        )

        logger.info(
            "Chunks stored",
            extra={"doc_id": doc_id, "chunks": len(points)},
        )

    async def delete_document(self, doc_id: str):

        await self._db.ensure_collection()

        result = await self._db.client.delete(
            collection_name=self._db.collection,
            points_selector=FilterSelector(
                filter=Filter(
                    must=[
                        FieldCondition(
                            key="doc_id",
                            match=MatchValue(value=doc_id),
                        )
                    ]
                )
            ),
        )

        logger.info(
            "Deleted vectors from Qdrant",
            extra={"doc_id": doc_id, "delete_result": str(result)},
        )

    # ============================================================
    # READ
    # ============================================================

    async def search(
        self,
        vector,
        similarity_threshold: float,
        max_count: int,
        literal_query: Optional[str] = None,
    ) -> List[RetrievedChunk]:
        """
        Top max_count chunks by descending score.

        Literal hits ignore similarity_threshold and win over the
        semantic hit for the same point.
        """

        await self._db.ensure_collection()

        query = self._normalize(self._ensure_numpy(vector))[0]

        hits = {}

        if literal_query and literal_query.strip():

            for chunk in await self._literal_hits(query, literal_query, max_count):
                hits[chunk.chunk_id] = chunk

        response = await self._db.client.query_points(
            collection_name=self._db.collection,
            query=query.tolist(),
            limit=max_count,
            score_threshold=similarity_threshold,
            with_payload=True,
        )

        for point in response.points:

            chunk = self._to_chunk(point, float(point.score))

            if chunk is not None and chunk.chunk_id not in hits:
                hits[chunk.chunk_id] = chunk

        ranked = sorted(hits.values(), key=lambda c: c.raw_similarity, reverse=True)

        return ranked[:max_count]

    async def _literal_hits(self, query: np.ndarray, literal_query: str,
                            max_count: int) -> List[RetrievedChunk]:

        points, _ = await self._db.client.scroll(
            collection_name=self._db.collection,
            scroll_filter=Filter(
                must=[
                    FieldCondition(
                        key="text",
                        match=MatchText(text=literal_query.strip()),
                    )
                ]
            ),
            limit=max_count,
            with_payload=True,
            with_vectors=True,
        )

        chunks = []

        for point in points:

            vector = self._normalize(np.array([point.vector], dtype="float32"))[0]

            similarity = float(np.dot(vector, query))
            similarity = min(max(similarity, _MIN_LITERAL_SIMILARITY), 1.0)

            chunk = self._to_chunk(point, similarity + LITERAL_SCORE_OFFSET)

            if chunk is not None:
                chunks.append(chunk)

        return chunks

    # ============================================================
    # HELPERS
    # ============================================================

    def _to_chunk(self, point, score: float) -> Optional[RetrievedChunk]:

        payload = point.payload or {}

        text = payload.get("text")

        if text is None:
            return None

        return RetrievedChunk(
            content=text,
            raw_similarity=score,
            chunk_id=str(point.id),
            doc_id=payload.get("doc_id"),
        )

    def _ensure_numpy(self, embeddings) -> np.ndarray:

        if not isinstance(embeddings, np.ndarray):
            embeddings = np.array(embeddings, dtype="float32")

        if embeddings.ndim == 1:
            embeddings = embeddings.reshape(1, -1)

        return embeddings

    def _normalize(self, vectors: np.ndarray) -> np.ndarray:

        norms = np.linalg.norm(vectors, axis=1, keepdims=True)

        return vectors / np.clip(norms, 1e-10, None)
