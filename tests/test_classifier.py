# tests/test_classifier.py
import pytest

from typeahead.models import RetrievedChunk
from typeahead.workflow.classifier import classify, display_similarity


def _chunk(raw):
    return RetrievedChunk(content="some trained text", raw_similarity=raw)


class TestLiteralDetection:
    """Raw scores above the offset mark exact-text hits."""

    def test_offset_score_is_literal(self):
        """1.95 is a literal hit shown as 0.95."""
        result = classify(_chunk(1.95))

        assert result.is_literal is True
        assert result.display_similarity == pytest.approx(0.95)

    def test_plain_score_is_semantic(self):
        """A score below 1 is semantic and shown unchanged."""
        result = classify(_chunk(0.42))

        assert result.is_literal is False
        assert result.display_similarity == pytest.approx(0.42)

    def test_exactly_one_is_not_literal(self):
        """The boundary itself is not above the offset."""
        result = classify(_chunk(1.0))

        assert result.is_literal is False
        assert result.display_similarity == pytest.approx(0.99)


class TestDisplayClamping:
    """Displayed similarity always stays within [0, 0.99]."""

    @pytest.mark.parametrize("raw", [-0.5, 0.0, 0.3, 0.99, 1.0, 1.001, 1.5, 2.0, 3.7])
    def test_display_within_bounds(self, raw):
        """Any raw score maps into the display range."""
        value = display_similarity(_chunk(raw))

        assert 0.0 <= value <= 0.99

    def test_perfect_literal_capped(self):
        """A perfect literal hit (2.0) is capped at 0.99."""
        assert display_similarity(_chunk(2.0)) == pytest.approx(0.99)

    def test_negative_semantic_floored(self):
        """Negative cosine scores are shown as zero."""
        assert display_similarity(_chunk(-0.2)) == 0.0
