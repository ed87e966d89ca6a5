"""Stream orchestrator: bounded tool-augmented generation.

One request runs as a sequence of model rounds. Each round streams the
model's text into the response stream and collects the tool calls it
requests. The calls run concurrently, their results are appended to the
conversation, and the next round starts. The loop ends when a round asks
for no tools or the route's round ceiling is reached.

    round 1: model -> text + tool calls -> execute tools
    round 2: model (sees tool results) -> text
    ...
    response.done
"""

import asyncio
import json
import uuid
from dataclasses import dataclass, field
from typing import Protocol, Sequence

import httpx

from t3chat.config.settings import Settings
from t3chat.core.completion import CompletionHook
from t3chat.core.exceptions import T3ChatError, ToolError, UnknownToolError
from t3chat.core.resilience import RateLimitError, TransientError
from t3chat.core.router import RouteDecision
from t3chat.core.synthesizer import Synthesizer
from t3chat.events.models import (
    ErrorEvent,
    ReasoningChunkEvent,
    ResponseChunkEvent,
    ResponseDoneEvent,
    ToolCompleteEvent,
    ToolErrorEvent,
    ToolStartEvent,
)
from t3chat.events.stream import ResponseStream
from t3chat.tools.base import Tool, ToolContext
from t3chat.tools.registry import ToolRegistry
from t3chat.utils.llm import ModelHandle
from t3chat.utils.logging import get_logger
from t3chat.utils.providers.base import ChatMessage, StreamPartType, ToolCall


logger = get_logger(__name__)


class _MessageLike(Protocol):
    role: str
    content: str


@dataclass
class RequestContext:
    """Everything known about a request once it has been admitted and routed."""

    request_id: str
    messages: Sequence[_MessageLike]
    decision: RouteDecision
    model: ModelHandle
    chat_id: str | None = None
    user_id: str | None = None


@dataclass
class OrchestrationResult:
    """Outcome of one orchestrated response, shared by duplicate requests."""

    request_id: str
    stream: ResponseStream
    rounds: int = 0
    tool_calls: int = 0
    finish_reason: str = "stop"
    error: str | None = None

    @property
    def text(self) -> str:
        return self.stream.text


@dataclass
class _Round:
    text: str = ""
    tool_calls: list[ToolCall] = field(default_factory=list)
    finish_reason: str = "stop"


def to_conversation(
    system_prompt: str,
    messages: Sequence[_MessageLike],
) -> tuple[str, list[ChatMessage]]:
    """
    Split client messages into a system prompt and model turns.

    Client ``system`` messages are appended to the route's system prompt
    in order; ``user`` and ``assistant`` messages become turns.
    """
    system_parts = [system_prompt] if system_prompt else []
    conversation: list[ChatMessage] = []
    for message in messages:
        if message.role == "system":
            if message.content:
                system_parts.append(message.content)
        elif message.role == "assistant":
            conversation.append(ChatMessage(role="assistant", content=message.content))
        else:
            conversation.append(ChatMessage(role="user", content=message.content))
    return "\n\n".join(system_parts), conversation


def _error_type(error: Exception) -> str:
    if isinstance(error, RateLimitError):
        return "rate_limit"
    if isinstance(error, TransientError):
        return "transient"
    if isinstance(error, T3ChatError):
        return type(error).__name__
    return "internal_error"


class StreamOrchestrator:
    """
    Runs routed requests against their model and tools.

    Usage:
        orchestrator = StreamOrchestrator(http, settings, synthesizer, hook)
        result = await orchestrator.run(context, stream)
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        settings: Settings,
        synthesizer: Synthesizer | None = None,
        completion_hook: CompletionHook | None = None,
    ):
        self._http = http
        self._settings = settings
        self._synthesizer = synthesizer
        self._completion_hook = completion_hook

    async def run(self, ctx: RequestContext, stream: ResponseStream) -> OrchestrationResult:
        """
        Produce the full response for a request.

        Never raises for model or tool failures: those end up in the
        stream as ``error`` or ``tool.error`` events. The stream always
        ends with ``response.done`` and is closed on return.

        Args:
            ctx: Routed request
            stream: Where events are emitted

        Returns:
            OrchestrationResult
        """
        decision = ctx.decision
        result = OrchestrationResult(request_id=ctx.request_id, stream=stream)

        try:
            system, conversation = to_conversation(decision.system_prompt, ctx.messages)
            tools = {name: ToolRegistry.create(name) for name in decision.tools}
            specs = [tool.spec() for tool in tools.values()] or None
            tool_context = ToolContext(
                http=self._http,
                settings=self._settings,
                model_id=ctx.model.model_id,
                request_id=ctx.request_id,
                synthesizer=self._synthesizer,
                stream=stream,
            )

            logger.info(
                "Orchestration started",
                request_id=ctx.request_id,
                group=decision.group,
                model=ctx.model.model_id,
                tools=list(tools),
                max_rounds=decision.max_tool_rounds,
            )

            for index in range(decision.max_tool_rounds):
                result.rounds += 1
                current = await self._stream_round(
                    ctx,
                    stream,
                    system,
                    conversation,
                    specs,
                    tool_choice=decision.tool_choice if index == 0 else "auto",
                )
                result.finish_reason = current.finish_reason

                if not current.tool_calls:
                    break

                if result.rounds >= decision.max_tool_rounds:
                    logger.info(
                        "Round ceiling reached, tool calls not executed",
                        request_id=ctx.request_id,
                        skipped=[call.name for call in current.tool_calls],
                    )
                    result.finish_reason = "max_rounds"
                    break

                result.tool_calls += len(current.tool_calls)
                tool_messages = await asyncio.gather(
                    *(self._invoke(call, tools, tool_context, stream) for call in current.tool_calls)
                )
                conversation.append(
                    ChatMessage(
                        role="assistant",
                        content=current.text,
                        tool_calls=current.tool_calls,
                    )
                )
                conversation.extend(tool_messages)
        except Exception as e:
            logger.error(
                "Orchestration failed",
                request_id=ctx.request_id,
                round=result.rounds,
                error=str(e),
                exc_info=True,
            )
            result.finish_reason = "error"
            result.error = str(e)
            await stream.emit(
                ErrorEvent.create(
                    error=str(e),
                    error_type=_error_type(e),
                    recoverable=getattr(e, "recoverable", False),
                )
            )
        finally:
            await stream.emit(
                ResponseDoneEvent.create(
                    finish_reason=result.finish_reason,
                    rounds=result.rounds,
                )
            )
            await stream.close()

        logger.info(
            "Orchestration finished",
            request_id=ctx.request_id,
            rounds=result.rounds,
            tool_calls=result.tool_calls,
            finish_reason=result.finish_reason,
            chars=len(result.text),
        )

        if self._completion_hook is not None and result.finish_reason != "error":
            self._completion_hook.schedule(
                ctx.messages,
                chat_id=ctx.chat_id,
                assistant_response=result.text,
                user_id=ctx.user_id,
            )
        return result

    async def _stream_round(
        self,
        ctx: RequestContext,
        stream: ResponseStream,
        system: str,
        conversation: list[ChatMessage],
        specs,
        tool_choice,
    ) -> _Round:
        """Stream one model call into the response stream."""
        current = _Round()
        chunks: list[str] = []

        async for part in ctx.model.stream(
            messages=conversation,
            system=system,
            max_tokens=ctx.decision.max_tokens,
            temperature=ctx.decision.temperature,
            tools=specs,
            tool_choice=tool_choice,
        ):
            if part.type == StreamPartType.TEXT:
                if part.text:
                    chunks.append(part.text)
                    await stream.emit(ResponseChunkEvent.create(part.text))
            elif part.type == StreamPartType.REASONING:
                if part.text:
                    await stream.emit(ReasoningChunkEvent.create(part.text))
            elif part.type == StreamPartType.TOOL_CALL and part.tool_call is not None:
                call = part.tool_call
                if not call.id:
                    call.id = f"call_{uuid.uuid4().hex[:12]}"
                current.tool_calls.append(call)
            elif part.type == StreamPartType.FINISH:
                current.finish_reason = part.finish_reason or "stop"

        current.text = "".join(chunks)
        return current

    async def _invoke(
        self,
        call: ToolCall,
        tools: dict[str, Tool],
        tool_context: ToolContext,
        stream: ResponseStream,
    ) -> ChatMessage:
        """
        Execute one tool call and fold its outcome into a tool message.

        A failing tool fails only its own invocation.
        """
        await stream.emit(ToolStartEvent.create(call.name, call.id, call.arguments))

        try:
            tool = tools.get(call.name)
            if tool is None:
                raise UnknownToolError(f"Tool not available: {call.name}", tool_name=call.name)
            payload = (await tool.run(call.arguments, tool_context)).to_payload()
        except ToolError as e:
            logger.warning("Tool failed", tool=call.name, call_id=call.id, error=e.message)
            await stream.emit(
                ToolErrorEvent.create(call.name, call.id, e.message, error_type=type(e).__name__)
            )
            content = json.dumps({"error": e.message})
        except Exception as e:
            logger.error("Tool crashed", tool=call.name, call_id=call.id, error=str(e), exc_info=True)
            await stream.emit(
                ToolErrorEvent.create(call.name, call.id, str(e), error_type="internal_error")
            )
            content = json.dumps({"error": f"{call.name} failed unexpectedly"})
        else:
            await stream.emit(ToolCompleteEvent.create(call.name, call.id, payload))
            content = json.dumps(payload, ensure_ascii=False)

        return ChatMessage(role="tool", content=content, tool_call_id=call.id, name=call.name)
