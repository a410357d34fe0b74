# tests/test_suggestions.py
import pytest

from typeahead.models import CompletionRequest, RetrievedChunk
from typeahead.workflow.suggestions import SuggestionEngine, validate_request


def _chunk(content, raw):
    return RetrievedChunk(content=content, raw_similarity=raw)


class TestValidation:
    """Unusable input is refused without touching collaborators."""

    def test_missing_text(self):
        """None text is invalid."""
        assert validate_request(CompletionRequest(full_text=None)) == "Invalid text provided"

    def test_blank_text(self):
        """Whitespace-only text is invalid."""
        assert validate_request(CompletionRequest(full_text="   ", mode="phrase")) == "Invalid text provided"

    def test_word_mode_needs_token(self):
        """Word mode without a partial word is invalid."""
        request = CompletionRequest(full_text="hello", incomplete_token="", mode="word")

        assert validate_request(request) == "Invalid incomplete word provided"

    @pytest.mark.asyncio
    async def test_invalid_result_signal(self, fake_llm, fake_retriever):
        """The engine returns an invalid result instead of raising."""
        retriever = fake_retriever()
        llm = fake_llm(reply="x")
        engine = SuggestionEngine(retriever, llm)

        result = await engine.get_suggestions(CompletionRequest(full_text="", mode="phrase"))

        assert result.valid is False
        assert result.error == "Invalid text provided"
        assert retriever.calls == []
        assert llm.calls == []


class TestWordMode:
    """Word completion end to end."""

    @pytest.mark.asyncio
    async def test_literal_chunk_end_to_end(self, fake_llm, fake_retriever):
        """One literal hit: generation runs, generated first then 'uled'."""
        retriever = fake_retriever([_chunk("scheduled a call", 1.95)])
        llm = fake_llm(reply="scheduling")
        engine = SuggestionEngine(retriever, llm)

        result = await engine.get_suggestions(
            CompletionRequest(full_text="I would like to sched", incomplete_token="sched")
        )

        assert result.valid is True
        assert result.used_fallback is False
        assert result.generation_skipped is False
        assert len(llm.calls) == 1

        assert [s.text for s in result.suggestions] == ["uling", "uled"]
        assert result.suggestions[0].source == "ai-with-context"
        assert result.suggestions[1].source == "trained-data"
        assert result.suggestions[1].is_literal is True
        assert result.suggestions[1].similarity == pytest.approx(0.95)

        assert result.matches[0].similarity == pytest.approx(0.95)

    @pytest.mark.asyncio
    async def test_retrieval_parameters(self, fake_llm, fake_retriever):
        """Word mode searches with its own threshold, count and literal query."""
        retriever = fake_retriever([_chunk("scheduled a call", 1.95)])
        engine = SuggestionEngine(retriever, fake_llm(reply=""))

        await engine.get_suggestions(
            CompletionRequest(full_text="I would like to sched", incomplete_token="sched")
        )

        call = retriever.calls[0]

        assert call["similarity_threshold"] == 0.2
        assert call["max_count"] == 5
        assert call["literal_query"] == "sched"

    @pytest.mark.asyncio
    async def test_generated_duplicate_deduplicated(self, fake_llm, fake_retriever):
        """A generated suffix equal to the literal one appears once."""
        retriever = fake_retriever([_chunk("scheduled a call", 1.95)])
        engine = SuggestionEngine(retriever, fake_llm(reply="uled"))

        result = await engine.get_suggestions(
            CompletionRequest(full_text="I would like to sched", incomplete_token="sched")
        )

        assert [s.text for s in result.suggestions] == ["uled"]
        assert result.suggestions[0].source == "ai-with-context"

    @pytest.mark.asyncio
    async def test_fast_path_skips_generation(self, fake_llm, fake_retriever):
        """Two literal completions mean the generator is never called."""
        retriever = fake_retriever([
            _chunk("scheduled a call", 1.95),
            _chunk("please schedule it", 1.9),
        ])
        llm = fake_llm(reply="should not appear")
        engine = SuggestionEngine(retriever, llm)

        result = await engine.get_suggestions(
            CompletionRequest(full_text="I would like to sched", incomplete_token="sched")
        )

        assert llm.calls == []
        assert result.generation_skipped is True
        assert [s.text for s in result.suggestions] == ["uled", "ule"]

    @pytest.mark.asyncio
    async def test_semantic_hits_do_not_skip(self, fake_llm, fake_retriever):
        """Semantic matches never trigger the fast path."""
        retriever = fake_retriever([
            _chunk("scheduled a call", 0.8),
            _chunk("please schedule it", 0.7),
        ])
        llm = fake_llm(reply="")
        engine = SuggestionEngine(retriever, llm)

        result = await engine.get_suggestions(
            CompletionRequest(full_text="I would like to sched", incomplete_token="sched")
        )

        assert len(llm.calls) == 1
        assert result.generation_skipped is False
        assert [s.text for s in result.suggestions] == ["uled", "ule"]

    @pytest.mark.asyncio
    async def test_generation_failure_keeps_literals(self, fake_llm, fake_retriever):
        """A failing generator leaves the literal suggestions."""
        retriever = fake_retriever([_chunk("scheduled a call", 1.95)])
        engine = SuggestionEngine(retriever, fake_llm(error=RuntimeError("provider down")))

        result = await engine.get_suggestions(
            CompletionRequest(full_text="I would like to sched", incomplete_token="sched")
        )

        assert [s.text for s in result.suggestions] == ["uled"]
        assert result.used_fallback is False

    @pytest.mark.asyncio
    async def test_no_chunks_fallback(self, fake_llm, fake_retriever):
        """Empty retrieval produces one openai-fallback suggestion."""
        llm = fake_llm(reply="uled")
        engine = SuggestionEngine(fake_retriever([]), llm)

        result = await engine.get_suggestions(
            CompletionRequest(full_text="I would like to sched", incomplete_token="sched")
        )

        assert result.used_fallback is True
        assert [s.source for s in result.suggestions] == ["openai-fallback"]
        assert result.suggestions[0].similarity == 0.0
        assert result.matches == []

    @pytest.mark.asyncio
    async def test_retrieval_error_fallback(self, fake_llm, fake_retriever):
        """Embedding failure degrades like the zero-chunk case."""
        engine = SuggestionEngine(
            fake_retriever(error=RuntimeError("embedding failed")),
            fake_llm(reply="uled"),
        )

        result = await engine.get_suggestions(
            CompletionRequest(full_text="I would like to sched", incomplete_token="sched")
        )

        assert result.valid is True
        assert result.used_fallback is True
        assert result.suggestions[0].text == "uled"

    @pytest.mark.asyncio
    async def test_nothing_available(self, fake_llm, fake_retriever):
        """No chunks and no generation is an empty, valid result."""
        engine = SuggestionEngine(fake_retriever([]), fake_llm(reply=""))

        result = await engine.get_suggestions(
            CompletionRequest(full_text="I would like to sched", incomplete_token="sched")
        )

        assert result.valid is True
        assert result.suggestions == []


class TestPhraseMode:
    """Phrase continuation end to end."""

    @pytest.mark.asyncio
    async def test_generated_then_literal(self, fake_llm, fake_retriever):
        """Phrase mode always generates and puts it first."""
        retriever = fake_retriever([
            _chunk("Thank you for your patience. We will get back to you soon.", 0.82),
        ])
        llm = fake_llm(reply="continued support")
        engine = SuggestionEngine(retriever, llm)

        result = await engine.get_suggestions(
            CompletionRequest(full_text="Thank you for your", mode="phrase")
        )

        assert [s.text for s in result.suggestions] == ["continued support", "patience."]
        assert result.suggestions[1].similarity == pytest.approx(0.82)
        assert result.generation_skipped is False

        call = retriever.calls[0]
        assert call["similarity_threshold"] == 0.15
        assert call["max_count"] == 10
        assert call["literal_query"] is None

    @pytest.mark.asyncio
    async def test_short_input_returns_nothing(self, fake_llm, fake_retriever):
        """One character of input is not enough to suggest a phrase."""
        retriever = fake_retriever([_chunk("anything", 0.9)])
        engine = SuggestionEngine(retriever, fake_llm(reply="x"))

        result = await engine.get_suggestions(CompletionRequest(full_text=" a ", mode="phrase"))

        assert result.valid is True
        assert result.suggestions == []
        assert retriever.calls == []

    @pytest.mark.asyncio
    async def test_previews_capped(self, fake_llm, fake_retriever):
        """At most three match previews are returned."""
        retriever = fake_retriever([_chunk(f"chunk number {i}", 0.5) for i in range(6)])
        engine = SuggestionEngine(retriever, fake_llm(reply=""))

        result = await engine.get_suggestions(CompletionRequest(full_text="chunk", mode="phrase"))

        assert len(result.matches) == 3
        assert result.matches[0].content.endswith("...")
