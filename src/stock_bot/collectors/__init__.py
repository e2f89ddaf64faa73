"""데이터 수집기"""

from stock_bot.collectors.naver import (
    NaverApiError,
    NaverFinanceCollector,
    StockNotFoundError,
)

__all__ = [
    "NaverFinanceCollector",
    "NaverApiError",
    "StockNotFoundError",
]
