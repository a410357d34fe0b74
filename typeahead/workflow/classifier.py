# typeahead/workflow/classifier.py
from typeahead.config import DISPLAY_SIMILARITY_CAP, LITERAL_SCORE_OFFSET
from typeahead.models import MatchClassification, RetrievedChunk


def classify(chunk: RetrievedChunk) -> MatchClassification:
    """
    Label a retrieved chunk as literal or semantic and normalize its score.

    The store flags exact-text hits by adding LITERAL_SCORE_OFFSET to their
    similarity, so a raw score above the offset is a literal match. The
    display score removes the offset and is clamped into
    [0, DISPLAY_SIMILARITY_CAP] whatever the raw value.
    """

    raw = chunk.raw_similarity

    is_literal = raw > LITERAL_SCORE_OFFSET

    score = raw - LITERAL_SCORE_OFFSET if is_literal else raw

    return MatchClassification(
        is_literal=is_literal,
        display_similarity=max(0.0, min(DISPLAY_SIMILARITY_CAP, score)),
    )


def display_similarity(chunk: RetrievedChunk) -> float:
    return classify(chunk).display_similarity
