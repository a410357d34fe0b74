# typeahead/workflow/merger.py
import logging
from typing import List, Optional, Sequence

from typeahead.config import MAX_SUGGESTIONS
from typeahead.models import Suggestion

logger = logging.getLogger(__name__)


def merge_suggestions(
    generated: Optional[Suggestion],
    literal_extractions: Sequence[Suggestion],
    max_suggestions: int = MAX_SUGGESTIONS,
    max_length: Optional[int] = None,
) -> List[Suggestion]:
    """
    Build the final suggestion list.

    Ordering:
    • generated suggestion first (when present)
    • literal extractions in retrieval rank order

    Filtering:
    • empty / whitespace-only text dropped
    • text of max_length characters or more dropped
    • later duplicates dropped (trimmed exact match, first one kept)
    """

    candidates: List[Suggestion] = []

    if generated is not None:
        candidates.append(generated)

    candidates.extend(literal_extractions)

    merged: List[Suggestion] = []
    seen = set()

    for suggestion in candidates:

        key = suggestion.text.strip()

        if not key or key in seen:
            continue

        if max_length is not None and len(suggestion.text) >= max_length:
            continue

        seen.add(key)
        merged.append(suggestion)

        if len(merged) >= max_suggestions:
            break

    logger.debug(
        "Suggestions merged",
        extra={
            "candidates": len(candidates),
            "merged": len(merged),
        },
    )

    return merged
