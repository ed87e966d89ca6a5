"""Currency conversion from Yahoo Finance FX quotes."""

import asyncio

import yfinance as yf
from pydantic import Field

from t3chat.core.exceptions import ToolExecutionError
from t3chat.tools.base import Tool, ToolArgs, ToolContext
from t3chat.tools.registry import ToolRegistry
from t3chat.tools.results import CurrencyConversionResult
from t3chat.utils.logging import get_logger


logger = get_logger(__name__)


class CurrencyArgs(ToolArgs):
    from_currency: str = Field(
        alias="from", min_length=3, max_length=3, description="The source currency code."
    )
    to_currency: str = Field(
        alias="to", min_length=3, max_length=3, description="The target currency code."
    )
    amount: float = Field(default=1.0, gt=0, description="The amount to convert.")


def _last_close(pair: str) -> float | None:
    """Latest close for a Yahoo FX pair such as EURUSD=X."""
    frame = yf.Ticker(pair).history(period="1d")
    if frame.empty:
        return None
    return float(frame["Close"].iloc[-1])


@ToolRegistry.register
class CurrencyConverterTool(Tool):
    name = "currency_converter"
    description = "Convert an amount from one currency to another at the latest exchange rate."
    args_model = CurrencyArgs

    async def execute(
        self, args: CurrencyArgs, context: ToolContext
    ) -> CurrencyConversionResult:
        source, target = args.from_currency.upper(), args.to_currency.upper()
        logger.info("Currency conversion", source=source, target=target, request_id=context.request_id)

        rate, reverse = await asyncio.wait_for(
            asyncio.gather(
                asyncio.to_thread(_last_close, f"{source}{target}=X"),
                asyncio.to_thread(_last_close, f"{target}{source}=X"),
            ),
            timeout=context.settings.search_timeout_seconds,
        )
        if rate is None:
            raise ToolExecutionError(f"No exchange rate for {source}/{target}", tool_name=self.name)

        return CurrencyConversionResult(
            from_currency=source,
            to_currency=target,
            amount=args.amount,
            rate=round(rate, 6),
            reverse_rate=round(reverse, 6) if reverse is not None else None,
            converted_amount=round(rate * args.amount, 4),
        )
