"""디스코드 봇 (관심 목록 상태 + 백그라운드 추적 작업)"""

import asyncio
import logging

import discord
from discord.ext import commands, tasks

from stock_bot.alerts import AlarmBook
from stock_bot.bot.commands import FinanceCog, GeneralCog
from stock_bot.bot.tracker import MarketTracker
from stock_bot.collectors import NaverFinanceCollector
from stock_bot.config import Settings
from stock_bot.market import Market, ShareKind
from stock_bot.storage import WatchlistStorage

logger = logging.getLogger(__name__)


class StockBot(commands.Bot):
    """관심 종목 디스코드 봇"""

    def __init__(
        self,
        settings: Settings,
        collector: NaverFinanceCollector | None = None,
        storage: WatchlistStorage | None = None,
    ) -> None:
        intents = discord.Intents.default()
        intents.message_content = True
        super().__init__(command_prefix=settings.command_prefix, intents=intents)

        self.settings = settings
        self.collector = collector or NaverFinanceCollector(timeout=settings.request_timeout)
        self.storage = storage or WatchlistStorage(settings.data_dir)
        self.market = Market()
        self.price_alarms = AlarmBook()
        self.rate_alarms = AlarmBook()
        self.tracker = MarketTracker(
            settings,
            self.collector,
            self.market,
            self.price_alarms,
            self.rate_alarms,
            notify=self.send_notice,
        )
        self._state_loaded = False

    async def setup_hook(self) -> None:
        await self.load_state()
        await self.tracker.ensure_main_indices()

        await self.add_cog(GeneralCog(self))
        await self.add_cog(FinanceCog(self))

        self.update_market.change_interval(seconds=self.settings.poll_interval)
        self.notify_market_state.change_interval(seconds=self.settings.poll_interval)
        self.update_market.start()
        self.notify_market_state.start()

    async def on_ready(self) -> None:
        logger.info("Connected as %s (id=%s)", self.user, self.user.id if self.user else "?")

    async def on_resumed(self) -> None:
        logger.info("Resumed")

    async def load_state(self) -> None:
        """저장된 관심 목록/알람 로드 (각 항목의 현재 시세를 다시 조회)"""
        self.storage.ensure_dirs()

        for code in self.storage.load_codes(ShareKind.INDEX):
            logger.info("Load index %s", code)
            index = await asyncio.to_thread(self.collector.get_index, code)
            self.market.add_or_update_index(code, index)

        for code in self.storage.load_codes(ShareKind.STOCK):
            logger.info("Load stock %s", code)
            stock = await asyncio.to_thread(self.collector.get_stock, code)
            self.market.add_or_update_stock(code, stock)

        self.storage.load_price_alarms(self.price_alarms)
        self.storage.load_rate_alarms(self.rate_alarms)

        self._state_loaded = True

    def save_state(self) -> None:
        """관심 목록/알람 저장"""
        if not self._state_loaded:
            return
        self.storage.save_market(self.market)
        self.storage.save_price_alarms(self.price_alarms)
        self.storage.save_rate_alarms(self.rate_alarms)
        logger.info("관심 목록/알람 저장 완료")

    async def close(self) -> None:
        self.update_market.cancel()
        self.notify_market_state.cancel()
        self.save_state()
        await super().close()

    async def send_notice(self, embed: discord.Embed) -> None:
        """메인 채널로 알림 전송"""
        channel_id = self.settings.discord_channel
        if channel_id is None:
            return

        try:
            channel = self.get_channel(channel_id) or await self.fetch_channel(channel_id)
            await channel.send(embed=embed)
        except discord.HTTPException as e:
            logger.error("알림 전송 실패: %s", e)

    @tasks.loop(seconds=3)
    async def update_market(self) -> None:
        try:
            await self.tracker.update_market()
        except Exception:
            logger.exception("시장 추적 작업 오류")

    @update_market.before_loop
    async def before_update_market(self) -> None:
        await self.wait_until_ready()

    @tasks.loop(seconds=3)
    async def notify_market_state(self) -> None:
        try:
            await self.tracker.notify_market_state()
        except Exception:
            logger.exception("장 상태 알림 작업 오류")

    @notify_market_state.before_loop
    async def before_notify_market_state(self) -> None:
        await self.wait_until_ready()


def create_bot(settings: Settings) -> StockBot:
    """봇 인스턴스 생성"""
    return StockBot(settings)
