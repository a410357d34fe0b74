# typeahead/workflow/scripts.py
"""
Script-aware text comparison.

Completion matching depends on the script of the partial word: plain
ASCII words compare case-insensitively, anything else (Hangul, Han,
Kana, accented Latin, mixed tokens) compares exactly.

Strategies are looked up through a registry of (predicate, strategy)
pairs, so another script can get its own rule with register_strategy()
without touching the extraction code.
"""

import re
from typing import Callable, List, Tuple


_ASCII_WORD = re.compile(r"^[a-zA-Z]+$")

_SCRIPT_PATTERNS = [
    ("han", re.compile(r"[\u4e00-\u9fff\u3400-\u4dbf\uf900-\ufaff]")),
    ("kana", re.compile(r"[\u3040-\u309f\u30a0-\u30ff]")),
    ("hangul", re.compile(r"[\uac00-\ud7af\u1100-\u11ff\u3130-\u318f]")),
    ("thai", re.compile(r"[\u0e00-\u0e7f]")),
    ("arabic", re.compile(r"[\u0600-\u06ff\u0750-\u077f]")),
    ("cyrillic", re.compile(r"[\u0400-\u04ff]")),
]


class MatchStrategy:
    """Equality and prefix tests under one normalization rule."""

    def __init__(self, name: str, normalize: Callable[[str], str]):
        self.name = name
        self._normalize = normalize

    def equals(self, a: str, b: str) -> bool:
        return self._normalize(a) == self._normalize(b)

    def starts_with(self, text: str, prefix: str) -> bool:
        return self._normalize(text).startswith(self._normalize(prefix))

    def __repr__(self) -> str:
        return f"MatchStrategy({self.name!r})"


CASE_INSENSITIVE = MatchStrategy("case-insensitive", str.lower)
EXACT = MatchStrategy("exact", lambda text: text)


def is_ascii_word(token: str) -> bool:
    return bool(_ASCII_WORD.match(token))


_registry: List[Tuple[Callable[[str], bool], MatchStrategy]] = [
    (is_ascii_word, CASE_INSENSITIVE),
]


def register_strategy(predicate: Callable[[str], bool], strategy: MatchStrategy):
    """Add a strategy; later registrations take precedence."""
    _registry.insert(0, (predicate, strategy))


def strategy_for(token: str) -> MatchStrategy:
    for predicate, strategy in _registry:
        if predicate(token):
            return strategy
    return EXACT


def detect_script(text: str) -> str:
    """Coarse script label for the tail of text, used in log records."""

    if not text or not text.strip():
        return "unknown"

    tail = " ".join(text.split()[-5:])

    for name, pattern in _SCRIPT_PATTERNS:
        if pattern.search(tail):
            return name

    if tail.isascii():
        return "latin"

    return "other"
