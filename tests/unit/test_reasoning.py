"""Tests for inline reasoning extraction."""

from t3chat.utils.providers.base import StreamPartType
from t3chat.utils.reasoning import ReasoningExtractor, extract_reasoning


def _collect(parts):
    text = "".join(p.text for p in parts if p.type == StreamPartType.TEXT)
    reasoning = "".join(p.text for p in parts if p.type == StreamPartType.REASONING)
    return text, reasoning


class TestReasoningExtractor:
    """Tests for ReasoningExtractor."""

    def test_single_chunk(self):
        extractor = ReasoningExtractor()
        parts = extractor.feed("<think>plan</think>Answer") + extractor.flush()
        assert _collect(parts) == ("Answer", "plan")

    def test_tags_split_across_chunks(self):
        """A tag broken over chunk boundaries is still recognized."""
        extractor = ReasoningExtractor()
        parts = []
        for chunk in ["<th", "ink>let me ", "see</th", "ink>", "Paris", "."]:
            parts.extend(extractor.feed(chunk))
        parts.extend(extractor.flush())

        assert _collect(parts) == ("Paris.", "let me see")

    def test_text_without_tags_passes_through(self):
        extractor = ReasoningExtractor()
        parts = extractor.feed("a < b") + extractor.feed(" and c") + extractor.flush()
        assert _collect(parts) == ("a < b and c", "")

    def test_held_back_prefix_is_flushed(self):
        extractor = ReasoningExtractor()
        parts = extractor.feed("value <thi")
        assert _collect(parts) == ("value ", "")
        assert _collect(extractor.flush()) == ("<thi", "")


class TestExtractReasoning:
    def test_complete_text(self):
        assert extract_reasoning("<think> hmm </think> Title") == ("Title", "hmm")

    def test_no_reasoning(self):
        assert extract_reasoning("Just text") == ("Just text", "")
