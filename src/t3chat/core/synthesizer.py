"""Synthesis stage: one narrative report from raw web-search results.

The stage is best effort. It issues a single structured-output call over
a bounded prompt, and any failure yields None so the raw search results
still reach the model.
"""

from pydantic import BaseModel, Field

from t3chat.config.prompts import (
    SYNTHESIS_ITEM_SEPARATOR,
    SYNTHESIS_ITEM_TEMPLATE,
    SYNTHESIS_PROMPT,
    SYNTHESIS_SYSTEM_PROMPT,
)
from t3chat.config.settings import Settings
from t3chat.events.models import SynthesisEvent
from t3chat.events.stream import ResponseStream
from t3chat.tools.results import QueryResults
from t3chat.utils.llm import ProviderRegistry
from t3chat.utils.logging import get_logger
from t3chat.utils.structured_llm import StructuredLLMCaller


logger = get_logger(__name__)

SYNTHESIS_MAX_TOKENS = 2000


class SynthesizedSummary(BaseModel):
    """Structured output of the synthesis call."""

    synthesized_report: str = Field(
        description=(
            "A comprehensive, well-structured report that synthesizes all the collected "
            "information into a cohesive analysis with insights, context, and key findings"
        )
    )
    key_points: list[str] = Field(
        description="3-5 key insights or findings from the synthesis",
    )
    summary: str = Field(description="A concise summary of the main conclusions")


class Synthesizer:
    """Builds a SynthesizedSummary from search results."""

    def __init__(self, registry: ProviderRegistry, settings: Settings):
        self._registry = registry
        self._max_items = settings.synthesis_max_items
        self._item_chars = settings.synthesis_item_chars

    def build_prompt(self, searches: list[QueryResults], queries: list[str]) -> str | None:
        """
        Render the synthesis prompt.

        Returns:
            The prompt, or None when there is nothing to synthesize
        """
        items = [item for search in searches for item in search.results]
        if not items:
            return None

        content = SYNTHESIS_ITEM_SEPARATOR.join(
            SYNTHESIS_ITEM_TEMPLATE.format(
                title=item.title,
                content=item.content[: self._item_chars],
            )
            for item in items[: self._max_items]
        )
        return SYNTHESIS_PROMPT.format(queries=", ".join(queries), content=content)

    async def synthesize(
        self,
        searches: list[QueryResults],
        queries: list[str],
        model_id: str,
        stream: ResponseStream | None = None,
    ) -> SynthesizedSummary | None:
        """
        Synthesize a report.

        Args:
            searches: Per-query search results
            queries: The queries that produced them
            model_id: Model to synthesize with
            stream: Where to report progress, if anywhere

        Returns:
            SynthesizedSummary, or None if there was nothing to
            synthesize or the call failed
        """
        prompt = self.build_prompt(searches, queries)
        if prompt is None:
            return None

        if stream is not None:
            await stream.emit(
                SynthesisEvent.create(
                    status="starting",
                    message="Compiling and analyzing collected information...",
                )
            )

        try:
            caller = StructuredLLMCaller(self._registry.resolve(model_id))
            summary = await caller.call(
                prompt,
                SynthesizedSummary,
                system=SYNTHESIS_SYSTEM_PROMPT,
                max_tokens=SYNTHESIS_MAX_TOKENS,
            )
        except Exception as e:
            logger.warning("Synthesis failed", model=model_id, error=str(e), exc_info=True)
            if stream is not None:
                await stream.emit(
                    SynthesisEvent.create(
                        status="error",
                        message="Failed to synthesize information, showing raw results",
                    )
                )
            return None

        logger.info("Synthesis completed", model=model_id, key_points=len(summary.key_points))
        if stream is not None:
            await stream.emit(
                SynthesisEvent.create(
                    status="completed",
                    message="Information synthesis completed",
                    key_points=summary.key_points,
                    summary=summary.summary,
                )
            )
        return summary
