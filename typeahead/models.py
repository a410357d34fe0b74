# typeahead/models.py
from pydantic import BaseModel, ConfigDict, Field, validator
from typing import List, Literal, Optional

from typeahead.config import MATCH_PREVIEW_CHARS, PUBLIC_SUGGESTION_LIMIT_MAX


SuggestionSource = Literal["trained-data", "ai-with-context", "openai-fallback"]
CompletionMode = Literal["word", "phrase"]


# ============================================================
# CORE VALUES
# ============================================================

class RetrievedChunk(BaseModel):
    """A trained text block returned by the store for one query."""
    content: str
    raw_similarity: float
    chunk_id: Optional[str] = None
    doc_id: Optional[str] = None


class MatchClassification(BaseModel):
    """Literal/semantic label and caller-facing score of one chunk."""
    is_literal: bool
    display_similarity: float = Field(..., ge=0.0, le=0.99)


class Suggestion(BaseModel):
    text: str = Field(..., min_length=1)
    source: SuggestionSource
    similarity: float = 0.0
    is_literal: bool = False


class MatchPreview(BaseModel):
    content: str
    similarity: float

    @classmethod
    def from_chunk(cls, chunk: RetrievedChunk, similarity: float,
                   length: int = MATCH_PREVIEW_CHARS) -> "MatchPreview":
        return cls(content=chunk.content[:length] + "...", similarity=similarity)


class CompletionRequest(BaseModel):
    """
    One completion request.

    incomplete_token is the trailing partial word in word mode and is
    empty in phrase mode.
    """
    full_text: Optional[str] = None
    incomplete_token: str = ""
    mode: CompletionMode = "word"


class SuggestionResult(BaseModel):
    mode: CompletionMode
    suggestions: List[Suggestion] = Field(default_factory=list)
    matches: List[MatchPreview] = Field(default_factory=list)
    used_fallback: bool = False
    generation_skipped: bool = False
    valid: bool = True
    error: Optional[str] = None

    @classmethod
    def invalid(cls, mode: CompletionMode, error: str) -> "SuggestionResult":
        return cls(mode=mode, valid=False, error=error)


class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class ChatResult(BaseModel):
    answer: str = ""
    used_knowledge_base: bool = False
    context_chunks: int = 0
    matches: List[MatchPreview] = Field(default_factory=list)
    valid: bool = True
    error: Optional[str] = None


# ============================================================
# HTTP REQUESTS
# ============================================================

class WordCompletionRequest(BaseModel):
    """Request to complete the word currently being typed."""
    model_config = ConfigDict(populate_by_name=True)

    text: Optional[str] = None
    incomplete_word: Optional[str] = Field(None, alias="incompleteWord")


class PhraseSuggestionRequest(BaseModel):
    """Request to continue the text typed so far."""
    text: Optional[str] = None


class PublicPhraseSuggestionRequest(PhraseSuggestionRequest):
    limit: int = 5

    @validator("limit")
    def clamp_limit(cls, v):
        """Keep limit within 1..PUBLIC_SUGGESTION_LIMIT_MAX."""
        return max(1, min(v, PUBLIC_SUGGESTION_LIMIT_MAX))


class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: Optional[str] = None
    conversation_history: List[ChatMessage] = Field(
        default_factory=list, alias="conversationHistory"
    )


class TrainRequest(BaseModel):
    """Plain text to add to the trained corpus."""
    text: str = Field(..., min_length=1)
    filename: Optional[str] = Field(None, max_length=255)

    @validator("text")
    def validate_text(cls, v):
        """Ensure training text is not just whitespace."""
        if not v.strip():
            raise ValueError("Training text cannot be empty or only whitespace")
        return v


# ============================================================
# HTTP RESPONSES
# ============================================================

class SuggestionResponse(BaseModel):
    suggestions: List[Suggestion]
    matches: List[MatchPreview]
    type: CompletionMode
    used_fallback: bool
    generation_skipped: bool = False
    error: Optional[str] = None


class ChatResponse(BaseModel):
    response: str
    used_knowledge_base: bool
    context_chunks: int
    matches: List[MatchPreview]
    error: Optional[str] = None


class TrainResponse(BaseModel):
    document_id: str
    filename: str
    chunks_created: int
    message: str = "Text trained and indexed successfully"


class TrainedFileInfo(BaseModel):
    document_id: str
    filename: str
    chunks_count: int
    upload_timestamp: Optional[str] = None


class TrainedFilesResponse(BaseModel):
    documents: List[TrainedFileInfo]
    total_documents: int
    total_chunks: int


class ForgetResponse(BaseModel):
    document_id: str
    message: str
    success: bool


class TrainingStatsResponse(BaseModel):
    total_documents: int
    total_chunks: int
    last_trained_at: Optional[str] = None


class ApiKeyResponse(BaseModel):
    api_key: str
    key_prefix: str
    rate_limit: int
    message: str = "Store this key now; it cannot be shown again"


class HealthResponse(BaseModel):
    status: str
    total_documents: int
    total_chunks: int
    ai_provider: str
