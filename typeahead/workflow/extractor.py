# typeahead/workflow/extractor.py
"""
Literal completion extraction.

Pulls a continuation for the user's input straight out of a trained text
block by string search, no model involved.

extract_word_completion   → suffix that finishes the word being typed
extract_phrase_continuation → next words that follow what was typed
"""

import re

from typeahead.config import PHRASE_CONTINUATION_MAX_WORDS
from typeahead.workflow.scripts import strategy_for


_TOKEN_PUNCTUATION = ".,!?;:'\""

_LEADING_PUNCTUATION = re.compile(r"^[.,;:!?]\s*")
_SENTENCE = re.compile(r"^[^.!?]*[.!?]")
_NEXT_RUN = re.compile(r"^\S+")

_MIN_CONTINUATION_LENGTH = 4


# ============================================================
# WORD COMPLETION
# ============================================================

def extract_word_completion(full_text: str, incomplete_token: str,
                            chunk_content: str) -> str:
    """
    Return the characters that complete incomplete_token, or "".

    Order, first success wins:
    1. a whitespace token of the chunk (surrounding punctuation stripped)
       that starts with the partial word and is longer → its suffix
    2. the whole chunk is just the partial word → ""
    3. the text right after the first case-insensitive occurrence of the
       partial word, up to the next whitespace
    """

    if not incomplete_token or not chunk_content:
        return ""

    strategy = strategy_for(incomplete_token)

    for raw_token in chunk_content.split():

        token = raw_token.strip(_TOKEN_PUNCTUATION)

        if strategy.equals(token, incomplete_token):
            continue

        if (
            len(token) > len(incomplete_token)
            and strategy.starts_with(token, incomplete_token)
        ):
            return token[len(incomplete_token):]

    if strategy.equals(chunk_content.strip(), incomplete_token):
        return ""

    found = re.search(re.escape(incomplete_token), chunk_content, re.IGNORECASE)

    if found:

        following = _NEXT_RUN.match(chunk_content[found.end():])

        if following:
            return following.group(0)

    return ""


# ============================================================
# PHRASE CONTINUATION
# ============================================================

def _clean(continuation: str, max_words: int) -> str:

    continuation = _LEADING_PUNCTUATION.sub("", continuation.strip(), count=1)

    return " ".join(continuation.split()[:max_words])


def extract_phrase_continuation(
    user_input: str,
    chunk_content: str,
    max_words: int = PHRASE_CONTINUATION_MAX_WORDS,
) -> str:
    """
    Predict what the user is likely to type next from one trained chunk.

    Tries, in order: the last 4/3/2/1 typed words found verbatim in the
    chunk, a loose word-window match, the chunk starting with the input,
    and finally a short chunk offered as a whole.
    """

    text = user_input.strip()
    content = chunk_content.strip()

    if not text or not content:
        return ""

    input_words = text.split()

    # Strategy 1: exact tail phrase, longest first
    for size in (4, 3, 2, 1):

        search_phrase = " ".join(input_words[-size:])

        if len(search_phrase) < 2:
            continue

        found = re.search(re.escape(search_phrase), content, re.IGNORECASE)

        if not found:
            continue

        result = _clean(content[found.end():], max_words)

        sentence = _SENTENCE.match(result)
        if sentence:
            result = sentence.group(0)

        if len(result) >= _MIN_CONTINUATION_LENGTH:
            return result

    # Strategy 2: half or more of the typed words line up with the chunk
    content_words = content.lower().split()
    lowered_input = [word.lower() for word in input_words]
    window = len(lowered_input)
    required = max(2, window * 0.5)

    for start in range(len(content_words) - window):

        matched = sum(
            1 for offset, word in enumerate(lowered_input)
            if content_words[start + offset] == word
        )

        if matched < required:
            continue

        pattern = r"\s+".join(
            re.escape(word) for word in content_words[start:start + window]
        )

        found = re.search(pattern, content, re.IGNORECASE)

        if found:

            result = _clean(content[found.end():], max_words)

            if len(result) >= _MIN_CONTINUATION_LENGTH:
                return result

    lowered_content = content.lower()
    lowered_text = text.lower()

    # Strategy 3: the chunk extends the input
    if len(content) > len(text) and lowered_content.startswith(lowered_text):

        result = _clean(content[len(text):], max_words)

        if len(result) >= _MIN_CONTINUATION_LENGTH:
            return result

    # Strategy 4: short chunk that does not merely repeat the input
    if 5 < len(content) < 100:

        position = lowered_content.find(lowered_text)

        if position == -1 or position > 5:
            return content

    return ""
