"""Current date and time, optionally in a named timezone."""

from datetime import datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field

from t3chat.core.exceptions import ToolArgumentError
from t3chat.tools.base import Tool, ToolArgs, ToolContext
from t3chat.tools.registry import ToolRegistry
from t3chat.tools.results import DateTimeResult


class DateTimeArgs(ToolArgs):
    timezone: str = Field(
        default="UTC", description="IANA timezone name, e.g. Europe/Paris. Default is UTC."
    )


@ToolRegistry.register
class DateTimeTool(Tool):
    name = "datetime"
    description = "Get the current date and time in a timezone."
    args_model = DateTimeArgs

    async def execute(self, args: DateTimeArgs, context: ToolContext) -> DateTimeResult:
        try:
            zone = ZoneInfo(args.timezone)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ToolArgumentError(
                f"Unknown timezone: {args.timezone}", tool_name=self.name
            ) from e

        now = datetime.now(zone)
        return DateTimeResult(
            timezone=args.timezone,
            iso=now.isoformat(),
            date=now.strftime("%Y-%m-%d"),
            time=now.strftime("%H:%M:%S"),
            weekday=now.strftime("%A"),
        )
