"""시세 표시 형식"""

import discord

from stock_bot.models import MarketState

UP_COLOUR = discord.Colour.from_rgb(217, 4, 0)
DOWN_COLOUR = discord.Colour.from_rgb(0, 93, 222)
FLAT_COLOUR = discord.Colour.from_rgb(51, 51, 51)
ALARM_COLOUR = discord.Colour.from_rgb(245, 127, 23)

STATE_COLOURS = {
    MarketState.PRE_OPEN: discord.Colour.from_rgb(25, 118, 210),
    MarketState.OPEN: discord.Colour.from_rgb(67, 160, 71),
    MarketState.CLOSE: discord.Colour.from_rgb(97, 97, 97),
}


def format_value(value: int, decimals: int = 0) -> str:
    """10^-decimals 단위 정수를 천 단위 구분 문자열로 변환

    예: (234526, 2) → "2,345.26", (58500, 0) → "58,500"
    """
    sign = "-" if value < 0 else ""
    value = abs(value)

    if decimals <= 0:
        return f"{sign}{value:,}"

    scale = 10**decimals
    return f"{sign}{value // scale:,}.{value % scale:0{decimals}d}"


def change_sign(value: float) -> str:
    """등락 기호"""
    if value > 0:
        return "▲"
    if value < 0:
        return "▼"
    return "="


def change_colour(value: float) -> discord.Colour:
    """등락 색상 (상승 빨강, 하락 파랑)"""
    if value > 0:
        return UP_COLOUR
    if value < 0:
        return DOWN_COLOUR
    return FLAT_COLOUR


def state_colour(state: MarketState) -> discord.Colour:
    """장 상태 색상"""
    return STATE_COLOURS[state]


def format_quote_line(value: int, change_value: int, change_rate: float, decimals: int) -> str:
    """'현재가　▲등락폭　+등락률%' 한 줄"""
    return (
        f"{format_value(value, decimals)}　"
        f"{change_sign(change_value)}{format_value(abs(change_value), decimals)}　"
        f"{change_rate:+.2f}%"
    )
