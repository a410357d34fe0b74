# tests/test_store.py
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from typeahead.memory.qdrant_client import QdrantVectorDB
from typeahead.memory.store import VectorStore


def _point(point_id, text, score=None, vector=None):
    return SimpleNamespace(
        id=point_id,
        score=score,
        vector=vector,
        payload={"text": text, "doc_id": "doc_1"},
    )


@pytest.fixture
def qdrant():
    client = AsyncMock()
    client.collection_exists.return_value = True
    client.query_points.return_value = SimpleNamespace(points=[])
    client.scroll.return_value = ([], None)
    return client


class TestHybridSearch:
    """Semantic and literal hits from Qdrant."""

    @pytest.mark.asyncio
    async def test_literal_hits_offset(self, qdrant):
        """Literal hits score cosine + 1 and win over semantic duplicates."""
        qdrant.scroll.return_value = (
            [_point("a", "scheduled a call", vector=[1.0, 0.0, 0.0])],
            None,
        )
        qdrant.query_points.return_value = SimpleNamespace(points=[
            _point("a", "scheduled a call", score=0.9),
            _point("b", "weekly planning", score=0.5),
        ])

        store = VectorStore(QdrantVectorDB(dim=3, client=qdrant))

        chunks = await store.search([1.0, 0.0, 0.0], 0.2, 5, literal_query="sched")

        assert [c.chunk_id for c in chunks] == ["a", "b"]
        assert chunks[0].raw_similarity == pytest.approx(2.0)
        assert chunks[1].raw_similarity == pytest.approx(0.5)

    @pytest.mark.asyncio
    async def test_literal_floor(self, qdrant):
        """An orthogonal literal hit still scores above the offset."""
        qdrant.scroll.return_value = (
            [_point("a", "scheduled", vector=[0.0, 1.0, 0.0])],
            None,
        )

        store = VectorStore(QdrantVectorDB(dim=3, client=qdrant))

        chunks = await store.search([1.0, 0.0, 0.0], 0.2, 5, literal_query="sched")

        assert chunks[0].raw_similarity > 1.0

    @pytest.mark.asyncio
    async def test_semantic_only(self, qdrant):
        """Without a literal query no text scan happens."""
        qdrant.query_points.return_value = SimpleNamespace(points=[
            _point("b", "weekly planning", score=0.5),
        ])

        store = VectorStore(QdrantVectorDB(dim=3, client=qdrant))

        chunks = await store.search([0.5, 0.5, 0.0], 0.15, 10)

        qdrant.scroll.assert_not_called()
        assert chunks[0].content == "weekly planning"
        assert qdrant.query_points.call_args.kwargs["score_threshold"] == 0.15

    @pytest.mark.asyncio
    async def test_results_truncated(self, qdrant):
        """At most max_count chunks come back."""
        qdrant.query_points.return_value = SimpleNamespace(points=[
            _point(str(i), f"text {i}", score=0.9 - i / 10) for i in range(5)
        ])

        store = VectorStore(QdrantVectorDB(dim=3, client=qdrant))

        chunks = await store.search([1.0, 0.0, 0.0], 0.0, 2)

        assert len(chunks) == 2


class TestWrites:
    """Upserts and deletions."""

    @pytest.mark.asyncio
    async def test_add_upserts_points(self, qdrant):
        """One point per chunk with its payload."""
        store = VectorStore(QdrantVectorDB(dim=3, client=qdrant))

        await store.add([[1.0, 0.0, 0.0], [0.0, 1.0, 0.0]], ["one", "two"], "doc_1", "f.txt")

        points = qdrant.upsert.call_args.kwargs["points"]

        assert [p.payload["text"] for p in points] == ["one", "two"]
        assert points[1].payload["chunk_idx"] == 1

    @pytest.mark.asyncio
    async def test_add_length_mismatch(self, qdrant):
        """Embeddings must line up with chunks."""
        store = VectorStore(QdrantVectorDB(dim=3, client=qdrant))

        with pytest.raises(ValueError):
            await store.add([[1.0, 0.0, 0.0]], ["one", "two"], "doc_1", "f.txt")

    @pytest.mark.asyncio
    async def test_collection_created_once(self, qdrant):
        """A missing collection is created with its indexes a single time."""
        qdrant.collection_exists.return_value = False

        db = QdrantVectorDB(dim=3, client=qdrant)

        await db.ensure_collection()
        await db.ensure_collection()

        assert qdrant.create_collection.await_count == 1
        assert qdrant.create_payload_index.await_count == 2

    @pytest.mark.asyncio
    async def test_lock_created_on_first_use(self, qdrant):
        """The bootstrap lock is built inside the running loop."""
        db = QdrantVectorDB(dim=3, client=qdrant)

        assert db._lock is None

        await db.ensure_collection()

        assert db._lock is not None
