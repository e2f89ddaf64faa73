"""관심 종목 시장 상태"""

from stock_bot.market.graph import Graph, Quote
from stock_bot.market.market import Market, Share, ShareKind

__all__ = [
    "Market",
    "Share",
    "ShareKind",
    "Graph",
    "Quote",
]
