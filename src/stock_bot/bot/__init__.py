"""디스코드 봇"""

from stock_bot.bot.client import StockBot, create_bot

__all__ = ["StockBot", "create_bot"]
