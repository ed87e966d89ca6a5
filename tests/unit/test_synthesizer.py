"""Tests for the synthesis stage."""

import pytest

from t3chat.core.synthesizer import Synthesizer
from t3chat.events import EventType
from t3chat.tools.results import QueryResults, SearchItem

from conftest import synthesis_json


def _searches(count: int = 3, content: str = "text") -> list[QueryResults]:
    return [
        QueryResults(
            query="q",
            results=[
                SearchItem(url=f"https://s{i}.com", title=f"Title {i}", content=content)
                for i in range(count)
            ],
        )
    ]


class TestSynthesizer:
    """Tests for Synthesizer."""

    @pytest.fixture
    def synthesizer(self, provider_registry, settings) -> Synthesizer:
        return Synthesizer(provider_registry, settings)

    def test_prompt_is_bounded(self, synthesizer, settings):
        """At most 12 items, each cut to 800 characters."""
        prompt = synthesizer.build_prompt(_searches(20, "x" * 2000), ["q"])

        assert prompt.count("**Title ") == settings.synthesis_max_items
        assert "x" * 800 in prompt
        assert "x" * 801 not in prompt

    def test_nothing_to_synthesize(self, synthesizer):
        assert synthesizer.build_prompt([QueryResults(query="q")], ["q"]) is None

    @pytest.mark.asyncio
    async def test_success(self, synthesizer, fake_provider, response_stream):
        fake_provider.complete_handler = lambda prompt, system: synthesis_json("Report")

        summary = await synthesizer.synthesize(_searches(), ["q"], "t3-4o", stream=response_stream)

        assert summary.synthesized_report == "Report"
        statuses = [e.data["status"] for e in response_stream.events]
        assert statuses == ["starting", "completed"]
        assert response_stream.events[-1].data["keyPoints"] == summary.key_points

    @pytest.mark.asyncio
    async def test_failure_returns_none(self, synthesizer, fake_provider, response_stream):
        """A malformed model answer degrades to no report."""
        fake_provider.complete_handler = lambda prompt, system: "not json at all"

        summary = await synthesizer.synthesize(_searches(), ["q"], "t3-4o", stream=response_stream)

        assert summary is None
        assert [e.data["status"] for e in response_stream.events] == ["starting", "error"]
        assert all(e.event_type == EventType.SYNTHESIS for e in response_stream.events)
        assert len(fake_provider.complete_calls) == 1

    @pytest.mark.asyncio
    async def test_unknown_model_returns_none(self, synthesizer):
        assert await synthesizer.synthesize(_searches(), ["q"], "t3-missing") is None
