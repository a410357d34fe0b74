# typeahead/memory/chunker.py

import logging
import re
from typing import List

from typeahead.config import (
    CHUNK_SIZE,
    CHUNK_OVERLAP,
    MAX_TRAINING_CHARACTERS,
)

logger = logging.getLogger(__name__)

_BLOCK_SEPARATOR = re.compile(r"\n\s*\n|\r\n\s*\r\n")


def _windows(words: List[str], size: int, overlap: int) -> List[str]:

    step = size - overlap

    return [
        " ".join(words[start:start + size])
        for start in range(0, max(len(words) - overlap, 1), step)
    ]


def chunk_text(
    text: str,
    size: int = CHUNK_SIZE,
    overlap: int = CHUNK_OVERLAP,
) -> List[str]:
    """
    Split training text into chunks.

    Blank-line separated blocks (paragraphs, templates, stock phrases)
    stay whole so a phrase is never cut from its own continuation.
    Blocks longer than size words become overlapping word windows.

    Guarantees:
    • deterministic
    • no empty chunks
    • input bounded by MAX_TRAINING_CHARACTERS
    """

    if size <= 0:
        raise ValueError(f"Invalid chunk size: {size}")

    if overlap < 0 or overlap >= size:
        raise ValueError(
            f"Overlap must be in [0, size) (overlap={overlap}, size={size})"
        )

    if not text or not text.strip():
        logger.warning("Chunking skipped: empty text")
        return []

    if len(text) > MAX_TRAINING_CHARACTERS:
        logger.warning(
            "Text exceeds max character limit, truncating",
            extra={
                "original_length": len(text),
                "max_allowed": MAX_TRAINING_CHARACTERS,
            },
        )
        text = text[:MAX_TRAINING_CHARACTERS]

    chunks: List[str] = []

    for block in _BLOCK_SEPARATOR.split(text):

        words = block.split()

        if not words:
            continue

        if len(words) <= size:
            chunks.append(" ".join(words))
        else:
            chunks.extend(_windows(words, size, overlap))

    logger.info(
        "Chunking completed",
        extra={
            "characters": len(text),
            "chunk_size": size,
            "overlap": overlap,
            "chunks_created": len(chunks),
        },
    )

    return chunks
