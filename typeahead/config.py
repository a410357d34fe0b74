# typeahead/config.py
"""
Configuration for the Typeahead suggestion service.

This file centralizes all tunable parameters for retrieval, ranking and
generation. Changes here affect system behavior without code modifications.
"""

import os


# ========== TRAINING / CHUNKING ==========

CHUNK_SIZE = 200  # words per chunk
CHUNK_OVERLAP = 40  # overlap between chunks to preserve context

MAX_TRAINING_CHARACTERS = 500_000
MAX_CHUNKS_PER_DOCUMENT = 1000


# ========== EMBEDDING CONFIGURATION ==========

EMBEDDING_MODEL = "text-embedding-3-small"  # 1536 dimensions


# ========== VECTOR STORE ==========

QDRANT_URL = os.getenv("QDRANT_URL", "http://localhost:6333")
QDRANT_API_KEY = os.getenv("QDRANT_API_KEY")
QDRANT_COLLECTION = os.getenv("QDRANT_COLLECTION", "typeahead_chunks")


# ========== MATCH SCORING ==========

# The store adds this to the cosine score of exact-text hits, so any
# score above it marks a literal match.
LITERAL_SCORE_OFFSET = 1.0

# displaySimilarity is clamped into [0, DISPLAY_SIMILARITY_CAP]
DISPLAY_SIMILARITY_CAP = 0.99


# ========== RETRIEVAL DEPTH PER MODE ==========

WORD_MATCH_THRESHOLD = 0.2
WORD_MATCH_COUNT = 5

PHRASE_MATCH_THRESHOLD = 0.15  # lower threshold for more context
PHRASE_MATCH_COUNT = 10

CHAT_MATCH_THRESHOLD = 0.3
CHAT_MATCH_COUNT = 5


# ========== SUGGESTION RANKING ==========

WORD_CONTEXT_CHUNKS = 3  # chunks handed to the generator in word mode
PHRASE_CONTEXT_CHUNKS = 5
PHRASE_EXTRACTION_CHUNKS = 4  # chunks mined for literal phrase continuations

MAX_SUGGESTIONS = 5

# Exclusive upper bounds on suggestion length
MAX_WORD_COMPLETION_LENGTH = 50
MAX_PHRASE_COMPLETION_LENGTH = 200

# Skip generation once this many literal completions exist
FAST_PATH_MIN_LITERAL_MATCHES = 2

MIN_PHRASE_INPUT_LENGTH = 2
PHRASE_CONTINUATION_MAX_WORDS = 15

MATCH_PREVIEW_COUNT = 3
MATCH_PREVIEW_CHARS = 100
CHAT_PREVIEW_CHARS = 150


# ========== LLM CONFIGURATION ==========

AI_PROVIDER = os.getenv("AI_PROVIDER", "openai").lower()

OPENAI_CHAT_MODEL = "gpt-4o-mini"
GEMINI_CHAT_MODEL = "gemini-1.5-flash"

# Per-mode generation parameters
WORD_MAX_TOKENS = 20
WORD_TEMPERATURE = 0.2

PHRASE_MAX_TOKENS = 50
PHRASE_TEMPERATURE = 0.3

CHAT_MAX_TOKENS = 500
CHAT_TEMPERATURE = 0.7

CHAT_HISTORY_LIMIT = 10  # last N conversation messages forwarded

# Bound on a single generator call; a timeout degrades like any failure
GENERATION_TIMEOUT_SECONDS = 8.0


# ========== PUBLIC API ==========

API_KEY_PREFIX = "tk_live_"
PUBLIC_API_KEYS = [
    key.strip()
    for key in os.getenv("PUBLIC_API_KEYS", "").split(",")
    if key.strip()
]

RATE_LIMIT_DEFAULT = 100  # requests per window per key
RATE_LIMIT_WINDOW_SECONDS = 3600
RATE_LIMIT_CLEANUP_INTERVAL_SECONDS = 60

PUBLIC_SUGGESTION_LIMIT_MAX = 10


# ========== DESIGN TRADE-OFFS (DOCUMENTED) ==========

"""
TRADE-OFF DECISIONS:

1. FAST_PATH_MIN_LITERAL_MATCHES = 2:
   - Generation dominates response time (~1.5s of a typical request)
   - Two independent literal hits are enough signal to answer without it
   - One hit alone is often a coincidental substring, so generation still runs

2. WORD_CONTEXT_CHUNKS = 3, PHRASE_CONTEXT_CHUNKS = 5:
   - A single word needs little context; phrases benefit from patterns
   - Never the full retrieved set: bounds prompt size and cost

3. GENERATION_TIMEOUT_SECONDS = 8.0:
   - Autocomplete that arrives late is useless
   - On timeout the request still returns the literal suggestions

4. In-memory rate limiting:
   - Single-instance deployment, counters reset on restart
"""
