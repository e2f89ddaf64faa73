"""디스코드 Embed 생성"""

import time
from datetime import datetime, timezone

import discord

from stock_bot.alerts import VolumeSpike
from stock_bot.formatting import (
    ALARM_COLOUR,
    change_colour,
    format_quote_line,
    format_value,
    state_colour,
)
from stock_bot.market import Share, ShareKind
from stock_bot.models import Index, MarketState, Stock

CANDLE_CHART_URL = "https://ssl.pstatic.net/imgfinance/chart/mobile/candle/day/{code}_end.png"
INDEX_CHART_URL = "https://ssl.pstatic.net/imgstock/chart3/day/{code}.png?sidcode={sidcode}"
STOCK_CHART_URL = "https://ssl.pstatic.net/imgfinance/chart/mobile/day/{code}_end.png?sidcode={sidcode}"

WATCHLIST_TITLES = {
    ShareKind.INDEX: "관심 지수",
    ShareKind.STOCK: "관심 종목",
}


def value_decimals(kind: ShareKind) -> int:
    """표시 소수 자릿수 (지수는 0.01포인트 단위)"""
    return 2 if kind is ShareKind.INDEX else 0


def value_unit(kind: ShareKind) -> str:
    return "" if kind is ShareKind.INDEX else "원"


def format_target(kind: ShareKind, target: float) -> str:
    """가격 알람 목표값 표시"""
    return format_value(int(target), value_decimals(kind)) + value_unit(kind)


def _sidcode() -> int:
    """차트 이미지 캐시 방지용 타임스탬프 (ms)"""
    return int(time.time() * 1000)


def index_embed(name: str, index: Index) -> discord.Embed:
    """지수 시세"""
    embed = discord.Embed(
        title=name,
        description=format_quote_line(index.now_value, index.change_value, index.change_rate, 2),
        colour=change_colour(index.change_value),
    )
    embed.set_thumbnail(url=CANDLE_CHART_URL.format(code=name))
    embed.set_image(url=INDEX_CHART_URL.format(code=name, sidcode=_sidcode()))
    embed.add_field(name="거래량(천주)", value=format_value(index.trading_volume), inline=True)
    embed.add_field(name="거래대금(백만)", value=format_value(index.trading_value), inline=True)
    embed.add_field(name="장중최고", value=format_value(index.high_value, 2), inline=True)
    embed.add_field(name="장중최저", value=format_value(index.low_value, 2), inline=True)
    embed.set_footer(text=index.state.label)
    return embed


def stock_embed(code: str, stock: Stock) -> discord.Embed:
    """종목 시세"""
    embed = discord.Embed(
        title=stock.name,
        description=format_quote_line(
            stock.now_value,
            stock.signed_change_value,
            stock.signed_change_rate,
            0,
        ),
        colour=change_colour(stock.signed_change_value),
    )
    embed.set_thumbnail(url=CANDLE_CHART_URL.format(code=code))
    embed.set_image(url=STOCK_CHART_URL.format(code=code, sidcode=_sidcode()))
    embed.add_field(name="거래량", value=format_value(stock.trading_volume), inline=True)
    embed.add_field(name="거래대금(백만)", value=format_value(stock.trading_value // 1_000_000), inline=True)
    embed.add_field(name="장중최고", value=format_value(stock.high_value), inline=True)
    embed.add_field(name="장중최저", value=format_value(stock.low_value), inline=True)
    embed.set_footer(text=f"{code} · {stock.state.label}")
    return embed


def watchlist_embed(kind: ShareKind, shares: list[Share]) -> discord.Embed:
    """관심 지수/종목 목록 (마지막 항목의 장 상태로 색상 결정)"""
    decimals = value_decimals(kind)
    lines = [
        f"{share.name}　{format_quote_line(share.value, share.change_value, share.change_rate, decimals)}"
        for share in shares
    ]
    state = shares[-1].state if shares else MarketState.CLOSE

    return discord.Embed(
        title=WATCHLIST_TITLES[kind],
        description="\n".join(lines),
        colour=state_colour(state),
        timestamp=datetime.now(timezone.utc),
    )


def market_state_embed(code: str, share: Share) -> discord.Embed:
    """장 상태 변경 알림"""
    return discord.Embed(
        title=f"{code} {share.state.label}",
        description=format_quote_line(
            share.value,
            share.change_value,
            share.change_rate,
            value_decimals(share.kind),
        ),
        colour=change_colour(share.change_value),
    )


def alarm_list_embed(name: str, lines: list[str]) -> discord.Embed:
    """알람 목록"""
    return discord.Embed(
        title=f"알람 - {name}",
        description="\n".join(lines),
        colour=ALARM_COLOUR,
    )


def price_alarm_embed(share: Share, target: float) -> discord.Embed:
    """가격 알람 도달"""
    decimals = value_decimals(share.kind)
    return discord.Embed(
        title=f"🔔 {share.name} {format_target(share.kind, target)} 도달",
        description=format_quote_line(share.value, share.change_value, share.change_rate, decimals),
        colour=change_colour(share.change_value),
        timestamp=datetime.now(timezone.utc),
    )


def rate_alarm_embed(share: Share, threshold: float) -> discord.Embed:
    """등락률 알람 도달"""
    decimals = value_decimals(share.kind)
    return discord.Embed(
        title=f"🔔 {share.name} 등락률 {threshold:+.2f}% 도달",
        description=format_quote_line(share.value, share.change_value, share.change_rate, decimals),
        colour=change_colour(share.change_value),
        timestamp=datetime.now(timezone.utc),
    )


def volume_spike_embed(share: Share, spike: VolumeSpike) -> discord.Embed:
    """거래량 급증 알림"""
    decimals = value_decimals(share.kind)
    embed = discord.Embed(
        title=f"📈 {share.name} 거래량 급증 ({spike.ratio:.1f}배)",
        description=format_quote_line(share.value, share.change_value, share.change_rate, decimals),
        colour=change_colour(share.change_value),
    )
    embed.add_field(name="체결시각", value=spike.time.strftime("%H:%M"), inline=True)
    embed.add_field(name="최근 평균", value=format_value(round(spike.recent_avg)), inline=True)
    embed.add_field(name="기준 평균", value=format_value(round(spike.baseline_avg)), inline=True)
    return embed
