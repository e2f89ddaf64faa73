"""디스코드 명령어 (시세 조회, 관심 목록, 알람)"""

import asyncio
import logging
from typing import TYPE_CHECKING, Callable

import discord
from discord.ext import commands

from stock_bot.alerts import AlarmBook
from stock_bot.bot.embeds import (
    alarm_list_embed,
    format_target,
    index_embed,
    stock_embed,
    watchlist_embed,
)
from stock_bot.collectors import NaverApiError
from stock_bot.market import Market, ShareKind

if TYPE_CHECKING:
    from stock_bot.bot.client import StockBot

logger = logging.getLogger(__name__)

EMOJI_ADD = "⭐"
EMOJI_DEL = "❌"
EMOJI_STOP = "🚫"

DEFAULT_INDEX = "KOSPI"


def parse_price_target(kind: ShareKind, value: float) -> int:
    """입력 가격을 저장 단위로 변환 (지수는 0.01포인트)"""
    if kind is ShareKind.INDEX:
        return round(value * 100)
    return round(value)


def format_rate(threshold: float) -> str:
    return f"{threshold:+.2f}%"


def alarm_lines(
    book: AlarmBook,
    market: Market,
    format_one: Callable[[str, float], str],
) -> list[str]:
    """전체 알람 목록 ('종목명 : 값 | 값')"""
    lines = []
    for code in book.codes():
        share = market.get_share(code)
        name = share.name if share else code
        values = " | ".join(format_one(code, v) for v in book.get_alarms(code) or [])
        lines.append(f"{name} : {values}")
    return lines


class GeneralCog(commands.Cog, name="General"):
    """일반 명령어"""

    def __init__(self, bot: "StockBot") -> None:
        self.bot = bot

    @commands.command()
    async def ping(self, ctx: commands.Context) -> None:
        """응답 확인"""
        await ctx.reply("Pong!")

    @commands.command()
    @commands.is_owner()
    async def quit(self, ctx: commands.Context) -> None:
        """봇 종료 (관심 목록/알람 저장)"""
        await ctx.reply("종료합니다.")
        await self.bot.close()

    @commands.Cog.listener()
    async def on_command_error(self, ctx: commands.Context, error: commands.CommandError) -> None:
        if isinstance(error, commands.CommandNotFound):
            return

        if isinstance(error, commands.CheckFailure):
            logger.warning("권한 없는 명령 시도: %s (%s)", ctx.author, ctx.message.content)
            await ctx.reply("권한이 없습니다.")
            return

        if isinstance(error, (commands.MissingRequiredArgument, commands.BadArgument)):
            await ctx.reply(f"사용법: `{ctx.prefix}{ctx.command.qualified_name} {ctx.command.signature}`")
            return

        original = getattr(error, "original", error)
        if isinstance(original, NaverApiError):
            logger.warning("%s 실패: %s", ctx.command, original)
            await ctx.reply(str(original))
            return

        logger.error("명령 처리 오류 (%s)", ctx.command, exc_info=original)
        await ctx.reply(f"오류가 발생했습니다: {original}")


class FinanceCog(commands.Cog, name="Finance"):
    """시세/관심 목록/알람 명령어 (봇 소유자 전용)"""

    def __init__(self, bot: "StockBot") -> None:
        self.bot = bot

    async def cog_check(self, ctx: commands.Context) -> bool:
        return await self.bot.is_owner(ctx.author)

    # 시세 조회

    @commands.command(aliases=["index"])
    async def show_index(self, ctx: commands.Context, *, name: str = DEFAULT_INDEX) -> None:
        """지수 조회 (⭐ 관심 추가 / ❌ 관심 삭제)"""
        name = name.strip() or DEFAULT_INDEX
        index = await asyncio.to_thread(self.bot.collector.get_index, name)

        message = await ctx.send(embed=index_embed(name, index))
        choice = await self._ask_watch(ctx, message)
        if choice == EMOJI_ADD:
            self.bot.market.add_or_update_index(name, index)
            logger.info("관심 지수 추가: %s", name)
        elif choice == EMOJI_DEL:
            self._remove_share(name)

    @commands.command(aliases=["stock"])
    async def show_stock(self, ctx: commands.Context, *, code_or_name: str) -> None:
        """종목 조회 (종목코드 또는 종목명)"""
        code = await asyncio.to_thread(self.bot.collector.resolve_code, code_or_name)
        stock = await asyncio.to_thread(self.bot.collector.get_stock, code)

        message = await ctx.send(embed=stock_embed(code, stock))
        choice = await self._ask_watch(ctx, message)
        if choice == EMOJI_ADD:
            self.bot.market.add_or_update_stock(code, stock)
            logger.info("관심 종목 추가: %s (%s)", stock.name, code)
        elif choice == EMOJI_DEL:
            self._remove_share(code)

    # 관심 목록

    @commands.command(aliases=["indices"])
    async def show_my_indices(self, ctx: commands.Context) -> None:
        """관심 지수 (주기적으로 갱신, 🚫 중지)"""
        await self._show_my_shares(ctx, ShareKind.INDEX)

    @commands.command(aliases=["stocks"])
    async def show_my_stocks(self, ctx: commands.Context) -> None:
        """관심 종목 (주기적으로 갱신, 🚫 중지)"""
        await self._show_my_shares(ctx, ShareKind.STOCK)

    # 가격 알람

    @commands.command(aliases=["alarm"])
    async def set_alarm(self, ctx: commands.Context, code_or_name: str, value: float) -> None:
        """가격 알람 설정 (관심 종목만)"""
        code = await self._resolve(code_or_name)
        share = self.bot.market.get_share(code)
        if share is None:
            await ctx.reply("관심 종목만 알람을 설정할 수 있습니다.")
            return

        target = parse_price_target(share.kind, value)
        self.bot.price_alarms.set_alarm(code, target)
        await ctx.reply(f"{share.name} 종목에 {format_target(share.kind, target)} 알람이 설정되었습니다.")

    @commands.command(aliases=["off"])
    async def off_alarm(self, ctx: commands.Context, code_or_name: str, value: float) -> None:
        """가격 알람 제거"""
        code = await self._resolve(code_or_name)
        share = self.bot.market.get_share(code)
        kind = share.kind if share else ShareKind.STOCK
        name = share.name if share else code

        target = parse_price_target(kind, value)
        if self.bot.price_alarms.remove_alarm(code, target):
            await ctx.reply(f"{name} 종목의 {format_target(kind, target)} 알람이 제거되었습니다.")
        else:
            await ctx.reply(f"{name} 종목에 {format_target(kind, target)} 알람이 없습니다.")

    @commands.command(aliases=["alarms"])
    async def show_alarms(self, ctx: commands.Context, *, code_or_name: str = "") -> None:
        """가격 알람 목록 (전체 또는 종목별)"""
        await self._show_book(ctx, self.bot.price_alarms, code_or_name, self._format_price)

    # 등락률 알람

    @commands.command(aliases=["rate"])
    async def set_rate_alarm(self, ctx: commands.Context, code_or_name: str, threshold: float) -> None:
        """등락률 알람 설정 (%, 관심 종목만)"""
        code = await self._resolve(code_or_name)
        share = self.bot.market.get_share(code)
        if share is None:
            await ctx.reply("관심 종목만 알람을 설정할 수 있습니다.")
            return

        self.bot.rate_alarms.set_alarm(code, threshold)
        await ctx.reply(f"{share.name} 종목에 등락률 {format_rate(threshold)} 알람이 설정되었습니다.")

    @commands.command(aliases=["rateoff"])
    async def off_rate_alarm(self, ctx: commands.Context, code_or_name: str, threshold: float) -> None:
        """등락률 알람 제거"""
        code = await self._resolve(code_or_name)
        share = self.bot.market.get_share(code)
        name = share.name if share else code

        if self.bot.rate_alarms.remove_alarm(code, threshold):
            await ctx.reply(f"{name} 종목의 등락률 {format_rate(threshold)} 알람이 제거되었습니다.")
        else:
            await ctx.reply(f"{name} 종목에 등락률 {format_rate(threshold)} 알람이 없습니다.")

    @commands.command(aliases=["rates"])
    async def show_rate_alarms(self, ctx: commands.Context, *, code_or_name: str = "") -> None:
        """등락률 알람 목록 (전체 또는 종목별)"""
        await self._show_book(ctx, self.bot.rate_alarms, code_or_name, lambda _code, v: format_rate(v))

    # 내부

    def _format_price(self, code: str, target: float) -> str:
        share = self.bot.market.get_share(code)
        return format_target(share.kind if share else ShareKind.STOCK, target)

    async def _resolve(self, code_or_name: str) -> str:
        """관심 목록/알람에 있는 코드는 그대로, 아니면 종목 검색으로 변환"""
        code_or_name = code_or_name.strip()
        if (
            self.bot.market.contains(code_or_name)
            or self.bot.price_alarms.get_alarms(code_or_name)
            or self.bot.rate_alarms.get_alarms(code_or_name)
        ):
            return code_or_name
        return await asyncio.to_thread(self.bot.collector.resolve_code, code_or_name)

    def _remove_share(self, code: str) -> None:
        """관심 목록에서 삭제 (해당 종목의 가격/등락률 알람도 삭제)"""
        if self.bot.market.remove_share(code) is None:
            return

        self.bot.tracker.forget(code)
        self.bot.price_alarms.remove_code(code)
        self.bot.rate_alarms.remove_code(code)
        logger.info("관심 목록 삭제: %s", code)

    async def _show_book(
        self,
        ctx: commands.Context,
        book: AlarmBook,
        code_or_name: str,
        format_one: Callable[[str, float], str],
    ) -> None:
        code_or_name = code_or_name.strip()
        if not code_or_name:
            lines = alarm_lines(book, self.bot.market, format_one)
            name = "모두"
        else:
            code = await self._resolve(code_or_name)
            share = self.bot.market.get_share(code)
            name = share.name if share else code
            targets = book.get_alarms(code) or []
            lines = [format_one(code, v) for v in targets]

        if not lines:
            await ctx.reply(f"{name} 종목에 설정된 알람이 없습니다.")
            return

        await ctx.send(embed=alarm_list_embed(name, lines))

    async def _ask_watch(self, ctx: commands.Context, message: discord.Message) -> str | None:
        """⭐/❌ 반응을 달고 작성자의 선택 대기 (시간 초과 시 None)"""
        for emoji in (EMOJI_ADD, EMOJI_DEL):
            await message.add_reaction(emoji)

        def check(reaction: discord.Reaction, user: discord.abc.User) -> bool:
            return (
                user.id == ctx.author.id
                and reaction.message.id == message.id
                and str(reaction.emoji) in (EMOJI_ADD, EMOJI_DEL)
            )

        try:
            reaction, _ = await self.bot.wait_for(
                "reaction_add",
                timeout=self.bot.settings.reaction_timeout,
                check=check,
            )
            choice = str(reaction.emoji)
        except asyncio.TimeoutError:
            choice = None

        await _clear_reactions(message, EMOJI_ADD, EMOJI_DEL)
        return choice

    async def _show_my_shares(self, ctx: commands.Context, kind: ShareKind) -> None:
        settings = self.bot.settings
        max_edit = max(1, int(settings.refresh_duration // settings.refresh_interval))
        message: discord.Message | None = None

        def check(reaction: discord.Reaction, user: discord.abc.User) -> bool:
            return (
                message is not None
                and user.id == ctx.author.id
                and reaction.message.id == message.id
                and str(reaction.emoji) == EMOJI_STOP
            )

        for count in range(1, max_edit + 1):
            shares = self.bot.market.shares_of_kind(kind)
            if not shares:
                if message is None:
                    await ctx.reply("관심 지수가 없습니다." if kind is ShareKind.INDEX else "관심 종목이 없습니다.")
                break

            embed = watchlist_embed(kind, shares)
            if message is None:
                # 수정할 새 메시지 생성 + 중지 버튼
                message = await ctx.send(embed=embed)
                await message.add_reaction(EMOJI_STOP)
            else:
                await message.edit(embed=embed)

            if count == max_edit:
                break

            # 다음 데이터가 준비될 때까지 중지 반응 대기
            try:
                await self.bot.wait_for("reaction_add", timeout=settings.refresh_interval, check=check)
                break
            except asyncio.TimeoutError:
                continue

        if message is not None:
            await _clear_reactions(message, EMOJI_STOP)


async def _clear_reactions(message: discord.Message, *emojis: str) -> None:
    """선택용 반응 삭제 (권한이 없으면 봇 자신의 반응만 삭제)"""
    for emoji in emojis:
        try:
            await message.clear_reaction(emoji)
            continue
        except discord.Forbidden:
            pass
        except discord.HTTPException as e:
            logger.debug("반응 삭제 실패 (%s): %s", emoji, e)
            continue

        try:
            await message.remove_reaction(emoji, message.author)
        except discord.HTTPException as e:
            logger.debug("반응 삭제 실패 (%s): %s", emoji, e)
