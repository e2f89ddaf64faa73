"""데이터 모델"""

from stock_bot.models.schemas import (
    Index,
    IndexQuote,
    IndexQuotePage,
    MarketState,
    SearchResult,
    Stock,
    StockQuote,
    StockQuotePage,
)

__all__ = [
    "MarketState",
    "Index",
    "Stock",
    "SearchResult",
    "IndexQuote",
    "StockQuote",
    "IndexQuotePage",
    "StockQuotePage",
]
