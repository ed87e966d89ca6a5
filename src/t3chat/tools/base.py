"""Base class for tools the model can call mid-generation.

Tools are DATA FETCHERS: each validates its arguments against a pydantic
model, calls one external service (or none), and returns a normalized
result payload. Failures surface as ToolError subclasses, which the
orchestrator folds back into the conversation instead of aborting the
response.
"""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError

from t3chat.config.settings import Settings
from t3chat.core.exceptions import ToolArgumentError, ToolError, ToolExecutionError
from t3chat.tools.results import ResultModel
from t3chat.utils.logging import get_logger
from t3chat.utils.providers.base import ToolSpec

if TYPE_CHECKING:
    from t3chat.core.synthesizer import Synthesizer
    from t3chat.events.stream import ResponseStream


logger = get_logger(__name__)


class ToolArgs(BaseModel):
    """Base for tool argument models. Values are validated, never coerced."""

    model_config = ConfigDict(strict=True, extra="ignore")


@dataclass
class ToolContext:
    """Per-request collaborators handed to a tool."""

    http: httpx.AsyncClient
    settings: Settings
    model_id: str
    request_id: str | None = None
    synthesizer: "Synthesizer | None" = None
    stream: "ResponseStream | None" = None


class Tool(ABC):
    """
    Base class for tools.

    Example:
        @ToolRegistry.register
        class EchoTool(Tool):
            name = "echo"
            description = "Echo the input"
            args_model = EchoArgs

            async def execute(self, args, context):
                ...
    """

    name: ClassVar[str]
    description: ClassVar[str]
    args_model: ClassVar[type[ToolArgs]]

    # Settings attributes that must be non-empty for the tool to work
    required_settings: ClassVar[tuple[str, ...]] = ()

    def spec(self) -> ToolSpec:
        """Declaration handed to the model."""
        schema = self.args_model.model_json_schema()
        schema.pop("title", None)
        return ToolSpec(
            name=self.name,
            description=self.description,
            input_schema=schema,
        )

    def missing_settings(self, settings: Settings) -> list[str]:
        """Required settings that are not configured."""
        return [attr for attr in self.required_settings if not getattr(settings, attr, None)]

    async def run(self, arguments: dict[str, Any], context: ToolContext) -> ResultModel:
        """
        Validate arguments and execute.

        Args:
            arguments: Raw arguments from the model
            context: Per-request collaborators

        Returns:
            Normalized result payload

        Raises:
            ToolArgumentError: Arguments failed validation
            ToolExecutionError: The external call failed
        """
        try:
            args = self.args_model.model_validate(arguments)
        except ValidationError as e:
            raise ToolArgumentError(
                f"Invalid arguments for {self.name}: {_format_errors(e)}",
                tool_name=self.name,
            ) from e

        try:
            return await self.execute(args, context)
        except ToolError:
            raise
        except httpx.HTTPStatusError as e:
            raise ToolExecutionError(
                f"{self.name} failed: HTTP {e.response.status_code}",
                tool_name=self.name,
            ) from e
        except httpx.TimeoutException as e:
            raise ToolExecutionError(
                f"{self.name} timed out", tool_name=self.name
            ) from e
        except (httpx.HTTPError, asyncio.TimeoutError, ValueError, KeyError, TypeError) as e:
            raise ToolExecutionError(
                f"{self.name} failed: {e}", tool_name=self.name
            ) from e

    @abstractmethod
    async def execute(self, args: Any, context: ToolContext) -> ResultModel:
        """Run the tool with validated arguments."""
        ...


def _format_errors(error: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(x) for x in e['loc']) or 'arguments'}: {e['msg']}"
        for e in error.errors()
    )
