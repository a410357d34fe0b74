# tests/test_extractor.py
from typeahead.workflow.extractor import (
    extract_phrase_continuation,
    extract_word_completion,
)


class TestWordCompletion:
    """Suffix extraction for the word being typed."""

    def test_suffix_of_longer_token(self):
        """A longer token with the same prefix yields its remainder."""
        assert extract_word_completion("I love prog", "prog", "I love programming daily") == "ramming"

    def test_whole_chunk_longer_word(self):
        """prog + 'program' → 'ram'."""
        assert extract_word_completion("prog", "prog", "program") == "ram"

    def test_chunk_equal_to_token(self):
        """A chunk that is just the typed word gives nothing."""
        assert extract_word_completion("cat", "cat", "cat") == ""

    def test_scheduled_example(self):
        """sched inside 'scheduled a call' yields 'uled'."""
        result = extract_word_completion(
            "I would like to sched", "sched", "We scheduled a call for Monday."
        )

        assert result == "uled"

    def test_ascii_match_ignores_case(self):
        """ASCII words compare case-insensitively."""
        assert extract_word_completion("Prog", "Prog", "PROGRAM starts now") == "RAM"

    def test_punctuation_stripped_from_tokens(self):
        """Trailing punctuation on the chunk token is not part of the suffix."""
        assert extract_word_completion("see you tomo", "tomo", "See you tomorrow!") == "rrow"

    def test_equal_tokens_skipped(self):
        """Tokens equal to the typed word are skipped in favor of longer ones."""
        assert extract_word_completion("the cat", "cat", "cat catalog") == "alog"

    def test_non_ascii_substring_fallback(self):
        """Unsegmented scripts fall through to the substring search."""
        assert extract_word_completion("東京", "東京", "私は東京タワーに行きました") == "タワーに行きました"

    def test_no_match(self):
        """No occurrence of the typed word → empty string."""
        assert extract_word_completion("xyz", "xyz", "nothing relevant here") == ""

    def test_empty_inputs(self):
        """Empty token or chunk gives nothing."""
        assert extract_word_completion("text", "", "program") == ""
        assert extract_word_completion("text", "prog", "") == ""


class TestPhraseContinuation:
    """Next-words prediction from a single chunk."""

    def test_tail_phrase_continuation(self):
        """The text after the typed tail is returned up to the sentence end."""
        result = extract_phrase_continuation(
            "Thank you for your",
            "Thank you for your patience. We will get back to you soon.",
        )

        assert result == "patience."

    def test_continuation_limited_in_words(self):
        """Continuations are cut to max_words."""
        result = extract_phrase_continuation(
            "please find",
            "Please find attached the quarterly report with all regional numbers included",
            max_words=3,
        )

        assert result == "attached the quarterly"

    def test_chunk_extends_input(self):
        """A chunk that starts with the input continues it."""
        result = extract_phrase_continuation(
            "Best",
            "Best regards, the support team",
        )

        assert result.startswith("regards")

    def test_short_chunk_offered_whole(self):
        """A short unrelated chunk is offered as-is."""
        result = extract_phrase_continuation("zz", "Looking forward to hearing from you")

        assert result == "Looking forward to hearing from you"

    def test_short_results_rejected(self):
        """Continuations under four characters are not accepted."""
        result = extract_phrase_continuation("hello there", "hello there ok")

        assert result == ""

    def test_empty_inputs(self):
        """Blank input or chunk yields nothing."""
        assert extract_phrase_continuation("   ", "some text") == ""
        assert extract_phrase_continuation("text", "  ") == ""
