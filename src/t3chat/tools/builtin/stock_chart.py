"""Stock price history with technical indicators, via yfinance."""

import asyncio
from typing import Any, Literal

import pandas as pd
import yfinance as yf
from pydantic import Field

from t3chat.core.exceptions import ToolExecutionError
from t3chat.tools.base import Tool, ToolArgs, ToolContext
from t3chat.tools.registry import ToolRegistry
from t3chat.tools.results import ChartData, StockChartResult
from t3chat.utils.logging import get_logger


logger = get_logger(__name__)

Timeframe = Literal["1d", "5d", "1mo", "3mo", "6mo", "1y", "2y", "5y", "10y", "ytd", "max"]
Indicator = Literal["sma", "ema", "rsi", "macd", "bb", "volume"]

INTERVALS: dict[str, str] = {"1d": "5m", "5d": "30m"}
WINDOW = 20
RSI_WINDOW = 14


class StockChartArgs(ToolArgs):
    symbol: str = Field(min_length=1, description="Stock symbol (e.g., AAPL, TSLA)")
    timeframe: Timeframe = Field(default="1mo", description="Time period for the chart")
    indicators: list[Indicator] = Field(
        default_factory=list, description="Technical indicators to include"
    )


def _values(series: pd.Series) -> list[float | None]:
    """Series to a JSON-safe list, NaN as None."""
    return [None if pd.isna(v) else round(float(v), 4) for v in series.tolist()]


def compute_indicators(frame: pd.DataFrame, indicators: list[str]) -> dict[str, Any]:
    """
    Compute the requested indicators over a price history.

    Args:
        frame: yfinance history with Close and Volume columns
        indicators: Indicator names

    Returns:
        Indicator name to values (or to named value lists)
    """
    close = frame["Close"]
    computed: dict[str, Any] = {}

    for indicator in indicators:
        if indicator == "sma":
            computed["sma"] = _values(close.rolling(WINDOW).mean())
        elif indicator == "ema":
            computed["ema"] = _values(close.ewm(span=WINDOW, adjust=False).mean())
        elif indicator == "rsi":
            delta = close.diff()
            gain = delta.clip(lower=0).rolling(RSI_WINDOW).mean()
            loss = (-delta.clip(upper=0)).rolling(RSI_WINDOW).mean()
            rsi = 100 - 100 / (1 + gain / loss)
            computed["rsi"] = _values(rsi)
        elif indicator == "macd":
            macd = (
                close.ewm(span=12, adjust=False).mean()
                - close.ewm(span=26, adjust=False).mean()
            )
            signal = macd.ewm(span=9, adjust=False).mean()
            computed["macd"] = {
                "macd": _values(macd),
                "signal": _values(signal),
                "histogram": _values(macd - signal),
            }
        elif indicator == "bb":
            middle = close.rolling(WINDOW).mean()
            std = close.rolling(WINDOW).std()
            computed["bb"] = {
                "upper": _values(middle + 2 * std),
                "middle": _values(middle),
                "lower": _values(middle - 2 * std),
            }
        elif indicator == "volume":
            computed["volume"] = _values(frame["Volume"].rolling(WINDOW).mean())

    return computed


def _fetch_history(symbol: str, timeframe: str) -> tuple[pd.DataFrame, dict[str, Any]]:
    ticker = yf.Ticker(symbol)
    frame = ticker.history(period=timeframe, interval=INTERVALS.get(timeframe, "1d"))
    metadata = getattr(ticker, "history_metadata", None) or {}
    return frame, metadata


@ToolRegistry.register
class StockChartTool(Tool):
    name = "stock_chart"
    description = "Generate and analyze stock price charts with technical indicators."
    args_model = StockChartArgs

    async def execute(self, args: StockChartArgs, context: ToolContext) -> StockChartResult:
        symbol = args.symbol.upper()
        logger.info(
            "Stock chart",
            symbol=symbol,
            timeframe=args.timeframe,
            indicators=args.indicators,
            request_id=context.request_id,
        )

        frame, metadata = await asyncio.wait_for(
            asyncio.to_thread(_fetch_history, symbol, args.timeframe),
            timeout=context.settings.search_timeout_seconds,
        )
        if frame.empty:
            raise ToolExecutionError(f"No price data for {symbol}", tool_name=self.name)

        close = frame["Close"]
        first, last = float(close.iloc[0]), float(close.iloc[-1])

        return StockChartResult(
            symbol=symbol,
            timeframe=args.timeframe,
            indicators=list(args.indicators),
            currency=metadata.get("currency"),
            last_price=round(last, 4),
            change_percent=round((last - first) / first * 100, 2) if first else None,
            message=f"Stock chart analysis for {symbol} over {args.timeframe} timeframe",
            chart_data=ChartData(
                timestamps=[ts.isoformat() for ts in frame.index],
                prices=[round(float(v), 4) for v in close.tolist()],
                volume=[float(v) for v in frame["Volume"].tolist()],
                technical_indicators=compute_indicators(frame, list(args.indicators)),
            ),
        )
