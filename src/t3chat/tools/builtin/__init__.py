"""Built-in tools that need no search provider."""

from t3chat.tools.builtin.currency import CurrencyConverterTool
from t3chat.tools.builtin.datetime_tool import DateTimeTool
from t3chat.tools.builtin.stock_chart import StockChartTool

__all__ = [
    "CurrencyConverterTool",
    "DateTimeTool",
    "StockChartTool",
]
