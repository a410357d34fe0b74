# typeahead/workflow/fast_path.py
from typing import Iterable

from typeahead.config import FAST_PATH_MIN_LITERAL_MATCHES
from typeahead.models import Suggestion


def count_literal_matches(completions: Iterable[Suggestion]) -> int:
    return sum(1 for completion in completions if completion.is_literal)


def should_skip_generation(
    literal_matches: Iterable[Suggestion],
    min_literal_matches: int = FAST_PATH_MIN_LITERAL_MATCHES,
) -> bool:
    """
    Decide whether the generator call can be skipped in word mode.

    literal_matches are the usable completions extracted from retrieved
    chunks; once enough of them come from literal (exact-text) hits the
    extra generation round-trip is not worth its latency.
    """
    return count_literal_matches(literal_matches) >= min_literal_matches
