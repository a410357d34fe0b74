# tests/conftest.py
import asyncio
import os
import sys

import pytest
from fastapi.testclient import TestClient

# Add project root to Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from typeahead.models import RetrievedChunk


class FakeLLM:
    """
    Stand-in text generator.

    Records every call so tests can assert whether generation ran.
    """

    def __init__(self, reply="", error=None, delay=0.0):
        self.reply = reply
        self.error = error
        self.delay = delay
        self.calls = []

    async def _respond(self, **kwargs):

        self.calls.append(kwargs)

        if self.delay:
            await asyncio.sleep(self.delay)

        if self.error is not None:
            raise self.error

        return self.reply

    async def complete(self, system_prompt, user_prompt, max_tokens=150, temperature=0.3):
        return await self._respond(
            system_prompt=system_prompt,
            user_prompt=user_prompt,
            max_tokens=max_tokens,
            temperature=temperature,
        )

    async def chat(self, system_prompt, messages, max_tokens=500, temperature=0.7):
        return await self._respond(
            system_prompt=system_prompt,
            messages=messages,
            max_tokens=max_tokens,
            temperature=temperature,
        )

    def get_usage_stats(self):
        return {"providers": {}, "available": ["fake"]}


class FakeRetriever:
    """Async retrieval collaborator returning canned chunks or raising."""

    def __init__(self, chunks=None, error=None):
        self.chunks = chunks or []
        self.error = error
        self.calls = []

    async def __call__(self, text, similarity_threshold, max_count, literal_query=None):

        self.calls.append(
            {
                "text": text,
                "similarity_threshold": similarity_threshold,
                "max_count": max_count,
                "literal_query": literal_query,
            }
        )

        if self.error is not None:
            raise self.error

        return list(self.chunks)


def make_chunk(content, raw_similarity, chunk_id=None):
    return RetrievedChunk(content=content, raw_similarity=raw_similarity, chunk_id=chunk_id)


@pytest.fixture
def fake_llm():
    """Factory for FakeLLM instances."""
    return FakeLLM


@pytest.fixture
def fake_retriever():
    """Factory for FakeRetriever instances."""
    return FakeRetriever


class FakeEmbedder:

    async def embed_batch(self, texts, batch_size=32):
        return [[0.1, 0.2, 0.3] for _ in texts]


class FakeStore:

    def __init__(self):
        self.added = []
        self.deleted = []

    async def add(self, embeddings, chunks, doc_id, filename):
        self.added.append((doc_id, filename, list(chunks)))

    async def delete_document(self, doc_id):
        self.deleted.append(doc_id)


@pytest.fixture
def api(tmp_path, monkeypatch):
    """
    FastAPI test client wired to fake collaborators.

    Returns a small namespace so tests can swap the retriever or the
    generator before making requests.
    """

    from typeahead.api import routes
    from typeahead.main import app
    from typeahead.memory.registry import TrainingRegistry
    from typeahead.observability.metrics import metrics_tracker
    from typeahead.security.api_keys import ApiKeyRegistry
    from typeahead.security.rate_limit import RateLimiter
    from typeahead.workflow.suggestions import SuggestionEngine

    monkeypatch.setattr(metrics_tracker, "_path", str(tmp_path / "metrics.json"))
    monkeypatch.setattr(routes, "registry", TrainingRegistry(str(tmp_path / "registry.json")))
    monkeypatch.setattr(routes, "api_keys", ApiKeyRegistry(seed_keys=[]))
    monkeypatch.setattr(routes, "rate_limiter", RateLimiter())

    class Wiring:
        retriever = FakeRetriever()
        llm = FakeLLM()
        embedder = FakeEmbedder()
        store = FakeStore()

    wiring = Wiring()

    app.dependency_overrides[routes.get_suggestion_engine] = (
        lambda: SuggestionEngine(retrieve_fn=wiring.retriever, llm_client=wiring.llm)
    )
    app.dependency_overrides[routes.get_retrieve_fn] = lambda: wiring.retriever
    app.dependency_overrides[routes.get_llm_client] = lambda: wiring.llm
    app.dependency_overrides[routes.get_embedder] = lambda: wiring.embedder
    app.dependency_overrides[routes.get_store] = lambda: wiring.store

    wiring.client = TestClient(app)
    wiring.routes = routes

    yield wiring

    app.dependency_overrides.clear()
