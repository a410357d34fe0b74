import logging
import time
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Request, Response
from fastapi.responses import JSONResponse

from typeahead.config import AI_PROVIDER, MAX_SUGGESTIONS, RATE_LIMIT_DEFAULT
from typeahead.llm.multi_model_client import MultiModelLLMClient
from typeahead.memory.chunker import chunk_text
from typeahead.memory.embedder import Embedder
from typeahead.memory.qdrant_client import QdrantVectorDB
from typeahead.memory.registry import TrainingRegistry
from typeahead.memory.retriever import retrieve
from typeahead.memory.store import VectorStore
from typeahead.models import (
    ApiKeyResponse,
    ChatRequest,
    ChatResponse,
    CompletionRequest,
    ForgetResponse,
    HealthResponse,
    PhraseSuggestionRequest,
    PublicPhraseSuggestionRequest,
    SuggestionResponse,
    SuggestionResult,
    TrainedFileInfo,
    TrainedFilesResponse,
    TrainingStatsResponse,
    TrainRequest,
    TrainResponse,
    WordCompletionRequest,
)
from typeahead.observability.metrics import metrics_tracker
from typeahead.observability.posthog_client import posthog_client
from typeahead.security.api_keys import ApiKeyRegistry
from typeahead.security.rate_limit import RateLimiter, RateLimitResult
from typeahead.workflow.chat import answer_chat
from typeahead.workflow.suggestions import SuggestionEngine


# ============================================================
# LOGGER
# ============================================================

logger = logging.getLogger(__name__)

router = APIRouter()


# ============================================================
# COLLABORATORS (built on first use, overridable in tests)
# ============================================================

_llm_client: Optional[MultiModelLLMClient] = None
_embedder: Optional[Embedder] = None
_store: Optional[VectorStore] = None
_engine: Optional[SuggestionEngine] = None

registry = TrainingRegistry()
api_keys = ApiKeyRegistry()
rate_limiter = RateLimiter()


def get_llm_client() -> MultiModelLLMClient:

    global _llm_client

    if _llm_client is None:
        _llm_client = MultiModelLLMClient()

    return _llm_client


def _build_embedder() -> Embedder:

    global _embedder

    if _embedder is None:
        _embedder = Embedder()

    return _embedder


def _build_store() -> VectorStore:

    global _store

    if _store is None:
        _store = VectorStore(QdrantVectorDB(dim=_build_embedder().get_dimension()))

    return _store


def get_embedder() -> Embedder:

    try:
        return _build_embedder()
    except (RuntimeError, ValueError) as e:
        raise HTTPException(status_code=503, detail=f"Embedding unavailable: {e}")


def get_store() -> VectorStore:

    try:
        return _build_store()
    except (RuntimeError, ValueError) as e:
        raise HTTPException(status_code=503, detail=f"Vector store unavailable: {e}")


def get_registry() -> TrainingRegistry:
    return registry


async def retrieve_chunks(text, similarity_threshold, max_count, literal_query=None):
    """
    Retrieval collaborator for the workflow.

    Collaborators are built inside the call so a missing key or an
    unreachable store surfaces as a retrieval failure, which the
    workflow degrades on.
    """

    return await retrieve(
        text,
        similarity_threshold,
        max_count,
        literal_query,
        embedder=_build_embedder(),
        store=_build_store(),
    )


def get_retrieve_fn():
    return retrieve_chunks


def get_suggestion_engine() -> SuggestionEngine:

    global _engine

    if _engine is None:
        _engine = SuggestionEngine(retrieve_fn=retrieve_chunks, llm_client=get_llm_client())

    return _engine


# ============================================================
# HELPERS
# ============================================================

def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "unknown")


def _suggestion_response(request: Request, result: SuggestionResult, started: float,
                         limit: int = MAX_SUGGESTIONS):

    if not result.valid:
        return JSONResponse(status_code=400, content={"error": result.error})

    latency = time.time() - started

    metrics_tracker.record_suggestions(
        count=len(result.suggestions),
        used_fallback=result.used_fallback,
        generation_skipped=result.generation_skipped,
    )

    posthog_client.track_suggestions(
        distinct_id=_request_id(request),
        mode=result.mode,
        suggestions=len(result.suggestions),
        used_fallback=result.used_fallback,
        generation_skipped=result.generation_skipped,
        latency=latency,
    )

    return SuggestionResponse(
        suggestions=result.suggestions[:limit],
        matches=result.matches,
        type=result.mode,
        used_fallback=result.used_fallback,
        generation_skipped=result.generation_skipped,
    )


def _set_rate_limit_headers(response: Response, limit: int, result: RateLimitResult):

    response.headers["X-RateLimit-Limit"] = str(limit)
    response.headers["X-RateLimit-Remaining"] = str(result.remaining)
    response.headers["X-RateLimit-Reset"] = result.reset_at_iso


def authorize_public_request(
    response: Response,
    authorization: Optional[str] = Header(None),
) -> str:
    """Bearer key check plus per-key rate limit for /public routes."""

    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=401,
            detail="Missing or invalid Authorization header. Use: Authorization: Bearer YOUR_API_KEY",
        )

    key_hash = api_keys.authenticate(authorization[len("Bearer "):].strip())

    if key_hash is None:
        raise HTTPException(status_code=401, detail="Invalid API key")

    result = rate_limiter.check(key_hash, RATE_LIMIT_DEFAULT)

    if not result.allowed:

        retry_after = max(0, int(result.reset_at - time.time()) + 1)

        raise HTTPException(
            status_code=429,
            detail="Rate limit exceeded",
            headers={
                "X-RateLimit-Limit": str(RATE_LIMIT_DEFAULT),
                "X-RateLimit-Remaining": "0",
                "X-RateLimit-Reset": result.reset_at_iso,
                "Retry-After": str(retry_after),
            },
        )

    _set_rate_limit_headers(response, RATE_LIMIT_DEFAULT, result)

    return key_hash


# ============================================================
# HEALTH / STATUS
# ============================================================

@router.get("/health", response_model=HealthResponse)
def health_check():

    stats = registry.stats()

    return HealthResponse(
        status="healthy",
        total_documents=stats["total_documents"],
        total_chunks=stats["total_chunks"],
        ai_provider=AI_PROVIDER,
    )


@router.get("/provider-status")
def provider_status(llm_client=Depends(get_llm_client)):

    return llm_client.get_usage_stats()


@router.get("/metrics")
def get_metrics():

    return metrics_tracker.get_metrics()


# ============================================================
# SUGGESTIONS
# ============================================================

@router.post("/complete-word", response_model=SuggestionResponse)
async def complete_word(
    payload: WordCompletionRequest,
    request: Request,
    engine: SuggestionEngine = Depends(get_suggestion_engine),
):

    started = time.time()

    result = await engine.get_suggestions(
        CompletionRequest(
            full_text=payload.text,
            incomplete_token=payload.incomplete_word or "",
            mode="word",
        )
    )

    return _suggestion_response(request, result, started)


@router.post("/suggest-phrase", response_model=SuggestionResponse)
async def suggest_phrase(
    payload: PhraseSuggestionRequest,
    request: Request,
    engine: SuggestionEngine = Depends(get_suggestion_engine),
):

    started = time.time()

    result = await engine.get_suggestions(
        CompletionRequest(full_text=payload.text, mode="phrase")
    )

    return _suggestion_response(request, result, started)


# ============================================================
# CHAT
# ============================================================

@router.post("/chat", response_model=ChatResponse)
async def chat(
    payload: ChatRequest,
    request: Request,
    retrieve_fn=Depends(get_retrieve_fn),
    llm_client=Depends(get_llm_client),
):

    started = time.time()

    result = await answer_chat(
        payload.message,
        payload.conversation_history,
        retrieve_fn=retrieve_fn,
        llm_client=llm_client,
    )

    if not result.valid:
        return JSONResponse(status_code=400, content={"error": result.error})

    posthog_client.track_chat(
        distinct_id=_request_id(request),
        used_knowledge_base=result.used_knowledge_base,
        context_chunks=result.context_chunks,
        latency=time.time() - started,
        success=result.error is None,
    )

    return ChatResponse(
        response=result.answer,
        used_knowledge_base=result.used_knowledge_base,
        context_chunks=result.context_chunks,
        matches=result.matches,
        error=result.error,
    )


# ============================================================
# PUBLIC API (API key + rate limit)
# ============================================================

@router.post("/keys/generate", response_model=ApiKeyResponse)
def generate_key():

    key = api_keys.issue()

    logger.info("API key issued", extra={"key_prefix": key[:12]})

    return ApiKeyResponse(
        api_key=key,
        key_prefix=key[:12],
        rate_limit=RATE_LIMIT_DEFAULT,
    )


@router.post("/public/suggest-phrase", response_model=SuggestionResponse)
async def public_suggest_phrase(
    payload: PublicPhraseSuggestionRequest,
    request: Request,
    key_hash: str = Depends(authorize_public_request),
    engine: SuggestionEngine = Depends(get_suggestion_engine),
):

    started = time.time()

    result = await engine.get_suggestions(
        CompletionRequest(full_text=payload.text, mode="phrase")
    )

    return _suggestion_response(request, result, started, limit=payload.limit)


@router.post("/public/chat", response_model=ChatResponse)
async def public_chat(
    payload: ChatRequest,
    request: Request,
    key_hash: str = Depends(authorize_public_request),
    retrieve_fn=Depends(get_retrieve_fn),
    llm_client=Depends(get_llm_client),
):

    return await chat(payload, request, retrieve_fn=retrieve_fn, llm_client=llm_client)


# ============================================================
# TRAINING
# ============================================================

def generate_document_id() -> str:
    return f"doc_{uuid.uuid4().hex[:12]}"


@router.post("/train", response_model=TrainResponse)
async def train(
    payload: TrainRequest,
    request: Request,
    embedder: Embedder = Depends(get_embedder),
    store: VectorStore = Depends(get_store),
    training_registry: TrainingRegistry = Depends(get_registry),
):

    started = time.time()

    chunks = chunk_text(payload.text)

    if not chunks:
        raise HTTPException(status_code=400, detail="No text to train on")

    document_id = generate_document_id()
    filename = payload.filename or f"{document_id}.txt"

    try:
        embeddings = await embedder.embed_batch(chunks)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except RuntimeError as e:
        raise HTTPException(status_code=503, detail=str(e))

    await store.add(embeddings=embeddings, chunks=chunks, doc_id=document_id, filename=filename)

    training_registry.register(document_id, filename, len(chunks))

    latency = time.time() - started

    logger.info(
        "Training complete",
        extra={"doc_id": document_id, "chunks": len(chunks), "latency_seconds": round(latency, 3)},
    )

    posthog_client.track_training(
        distinct_id=_request_id(request),
        document_id=document_id,
        chunks=len(chunks),
        latency=latency,
    )

    return TrainResponse(
        document_id=document_id,
        filename=filename,
        chunks_created=len(chunks),
    )


@router.get("/trained-files", response_model=TrainedFilesResponse)
def list_trained_files(training_registry: TrainingRegistry = Depends(get_registry)):

    documents = [
        TrainedFileInfo(
            document_id=entry["document_id"],
            filename=entry.get("filename") or entry["document_id"],
            chunks_count=entry.get("chunks_count", 0),
            upload_timestamp=entry.get("upload_timestamp"),
        )
        for entry in training_registry.list()
    ]

    return TrainedFilesResponse(
        documents=documents,
        total_documents=len(documents),
        total_chunks=sum(d.chunks_count for d in documents),
    )


@router.get("/training-stats", response_model=TrainingStatsResponse)
def training_stats(training_registry: TrainingRegistry = Depends(get_registry)):

    return TrainingStatsResponse(**training_registry.stats())


@router.delete("/trained-files/{document_id}", response_model=ForgetResponse)
async def forget(
    document_id: str,
    store: VectorStore = Depends(get_store),
    training_registry: TrainingRegistry = Depends(get_registry),
):

    if training_registry.get(document_id) is None:
        raise HTTPException(status_code=404, detail="Document not found")

    await store.delete_document(document_id)

    training_registry.remove(document_id)

    return ForgetResponse(
        document_id=document_id,
        message="Forgotten",
        success=True,
    )
