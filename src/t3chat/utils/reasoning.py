"""Reasoning extraction for models that think inline.

Some hosted open models emit their chain of thought inside
``<think>...</think>`` in the ordinary text stream. ReasoningExtractor
moves those spans onto the reasoning channel. Tags may be split across
chunk boundaries, so a possible tag prefix at the end of a chunk is held
back until the next chunk decides it.
"""

from t3chat.utils.providers.base import StreamPart, StreamPartType


class ReasoningExtractor:
    """Stateful text-to-(text, reasoning) splitter for one stream."""

    def __init__(self, tag: str = "think"):
        self._open = f"<{tag}>"
        self._close = f"</{tag}>"
        self._buffer = ""
        self._in_reasoning = False

    def feed(self, chunk: str) -> list[StreamPart]:
        """
        Consume a text chunk.

        Args:
            chunk: Raw text delta from the model

        Returns:
            Parts ready to emit, in order
        """
        self._buffer += chunk
        parts: list[StreamPart] = []

        while self._buffer:
            marker = self._close if self._in_reasoning else self._open
            index = self._buffer.find(marker)

            if index != -1:
                self._emit(parts, self._buffer[:index])
                self._buffer = self._buffer[index + len(marker) :]
                self._in_reasoning = not self._in_reasoning
                continue

            held = _partial_suffix(self._buffer, marker)
            self._emit(parts, self._buffer[: len(self._buffer) - held])
            self._buffer = self._buffer[len(self._buffer) - held :]
            break

        return parts

    def flush(self) -> list[StreamPart]:
        """Emit whatever is still held back at end of stream."""
        parts: list[StreamPart] = []
        self._emit(parts, self._buffer)
        self._buffer = ""
        return parts

    def _emit(self, parts: list[StreamPart], text: str) -> None:
        if not text:
            return
        if self._in_reasoning:
            parts.append(StreamPart.reasoning_delta(text))
        else:
            parts.append(StreamPart.text_delta(text))


def _partial_suffix(text: str, marker: str) -> int:
    """Length of the longest suffix of text that is a proper prefix of marker."""
    for length in range(min(len(text), len(marker) - 1), 0, -1):
        if marker.startswith(text[-length:]):
            return length
    return 0


def extract_reasoning(text: str, tag: str = "think") -> tuple[str, str]:
    """Split a complete response into (text, reasoning)."""
    extractor = ReasoningExtractor(tag)
    parts = extractor.feed(text) + extractor.flush()
    answer = "".join(p.text for p in parts if p.type == StreamPartType.TEXT)
    reasoning = "".join(p.text for p in parts if p.type == StreamPartType.REASONING)
    return answer.strip(), reasoning.strip()
