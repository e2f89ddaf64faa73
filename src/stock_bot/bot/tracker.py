"""시장 추적 (관심 목록 갱신, 장 상태/알람/거래량 급증 알림)"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import date, datetime, time, timedelta, timezone

import discord

from stock_bot.alerts import AlarmBook, VolumeSpikeDetector, crossed_targets
from stock_bot.bot.embeds import (
    market_state_embed,
    price_alarm_embed,
    rate_alarm_embed,
    volume_spike_embed,
)
from stock_bot.collectors import NaverApiError, NaverFinanceCollector
from stock_bot.config import Settings
from stock_bot.market import Market, Share, ShareKind
from stock_bot.models import MarketState

logger = logging.getLogger(__name__)

KST = timezone(timedelta(hours=9), "KST")

# 시간별 시세 조회 실패 시 채운 것으로 치는 분봉 수
FAILED_PAGE_WEIGHT = 6

Notifier = Callable[[discord.Embed], Awaitable[None]]


def now_kst() -> datetime:
    """현재 한국 시각 (tz 없는 datetime)"""
    return datetime.now(KST).replace(tzinfo=None)


def is_market_hours(now: datetime, open_hour: int = 8, close_hour: int = 17) -> bool:
    """평일 open_hour <= 시 < close_hour"""
    return now.weekday() < 5 and open_hour <= now.hour < close_hour


def is_new_session(prev_state: MarketState, state: MarketState) -> bool:
    """장 마감 이후 다음 거래일로 넘어갔는지 (장 시작 전 진입 또는 마감에서 벗어남)"""
    if prev_state is state:
        return False
    return state is MarketState.PRE_OPEN or prev_state is MarketState.CLOSE


class MarketTracker:
    """관심 목록 시세 갱신 및 알림"""

    def __init__(
        self,
        settings: Settings,
        collector: NaverFinanceCollector,
        market: Market,
        price_alarms: AlarmBook,
        rate_alarms: AlarmBook,
        notify: Notifier,
    ) -> None:
        self.settings = settings
        self.collector = collector
        self.market = market
        self.price_alarms = price_alarms
        self.rate_alarms = rate_alarms
        self.notify = notify
        self.spike_detector = VolumeSpikeDetector(
            recent=settings.spike_recent,
            baseline=settings.spike_baseline,
            ratio=settings.spike_ratio,
            cooldown=timedelta(minutes=settings.spike_cooldown_minutes),
        )
        self._on_work = False
        self._prev_states: dict[str, MarketState] = {}

    async def ensure_main_indices(self) -> None:
        """주요 지수는 항상 관심 목록에 유지"""
        for code in self.settings.tracked_indices:
            if self.market.contains(code):
                continue
            index = await asyncio.to_thread(self.collector.get_index, code)
            self.market.add_or_update_index(code, index)

    async def update_market(self, now: datetime | None = None) -> bool:
        """장 시간이면 관심 목록 전체 갱신 (갱신했으면 True)"""
        now = now or now_kst()
        on_work = is_market_hours(now, self.settings.market_open_hour, self.settings.market_close_hour)

        if on_work and not self._on_work:
            logger.info("시장 추적 시작.")
        elif self._on_work and not on_work:
            logger.info("시장 추적 종료.")
        self._on_work = on_work

        if not on_work:
            return False

        for code in self.market.share_codes():
            try:
                await self.refresh_share(code, now.date())
            except NaverApiError as e:
                logger.error("%s 시세 갱신 실패: %s", code, e)

        return True

    async def refresh_share(self, code: str, today: date) -> None:
        """한 항목의 시세/그래프 갱신 후 알람 평가"""
        share = self.market.get_share(code)
        if share is None:
            return

        prev_state, prev_value, prev_rate = share.state, share.value, share.change_rate

        if share.kind is ShareKind.INDEX:
            index = await asyncio.to_thread(self.collector.get_index, code)
            if not self.market.contains(code):
                return
            share = self.market.add_or_update_index(code, index)
        else:
            stock = await asyncio.to_thread(self.collector.get_stock, code)
            if not self.market.contains(code):
                return
            share = self.market.add_or_update_stock(code, stock)

        # 새 거래일 시작 시 등락률은 0부터 다시 계산되므로 전일 등락률과 비교하지 않음
        if is_new_session(prev_state, share.state):
            prev_rate = None

        await self.refresh_graph(code, share.kind, today)

        for embed in self.evaluate_alerts(code, share, prev_value, prev_rate):
            await self.notify(embed)

    async def refresh_graph(self, code: str, kind: ShareKind, today: date) -> None:
        """시간별 시세 조회

        첫 페이지는 항상 조회하고, 그래프가 graph_min_quotes보다 작으면
        다음 페이지/이전 거래일까지 이어서 채운다.
        """
        if kind is ShareKind.INDEX:
            fetch = self.collector.get_index_quotes
            update = self.market.update_index_graph
        else:
            fetch = self.collector.get_stock_quotes
            update = self.market.update_stock_graph

        day = today
        page_num = 1
        day_jumps = 0
        graph_len = 0
        first = True

        while first or (
            graph_len < self.settings.graph_min_quotes and day_jumps <= self.settings.max_day_jumps
        ):
            # 추가 요청시 딜레이
            if not first:
                await asyncio.sleep(self.settings.page_delay)
            first = False

            logger.debug("시간별 시세 조회 (%s, %s, %d)", code, day, page_num)
            try:
                page = await asyncio.to_thread(
                    fetch, code, datetime.combine(day, time(23, 59, 59)), page_num
                )
            except NaverApiError as e:
                logger.error("%s 시간별 시세 조회 실패: %s", code, e)
                graph_len += FAILED_PAGE_WEIGHT
                continue

            update(code, page, day)

            share = self.market.get_share(code)
            if share is None:
                return
            graph_len = len(share.graph)

            if page.is_last:
                page_num = 1
                day -= timedelta(days=1)
                day_jumps += 1
            else:
                page_num += 1

    def evaluate_alerts(
        self,
        code: str,
        share: Share,
        prev_value: int | None,
        prev_rate: float | None,
    ) -> list[discord.Embed]:
        """가격/등락률 알람 도달 및 거래량 급증 확인"""
        alerts = []

        for target in crossed_targets(self.price_alarms.get_alarms(code) or [], prev_value, share.value):
            logger.info("%s 가격 알람 도달: %s", share.name, target)
            alerts.append(price_alarm_embed(share, target))

        for threshold in crossed_targets(
            self.rate_alarms.get_alarms(code) or [], prev_rate, share.change_rate
        ):
            logger.info("%s 등락률 알람 도달: %s%%", share.name, threshold)
            alerts.append(rate_alarm_embed(share, threshold))

        if share.state is MarketState.OPEN:
            spike = self.spike_detector.check(code, share.graph)
            if spike is not None:
                logger.info("%s 거래량 급증 (%.1f배)", share.name, spike.ratio)
                alerts.append(volume_spike_embed(share, spike))

        return alerts

    async def notify_market_state(self) -> None:
        """주요 지수의 장 상태가 바뀌면 알림"""
        for code in self.settings.tracked_indices:
            share = self.market.get_share(code)
            if share is None:
                continue

            prev_state = self._prev_states.get(code)
            if prev_state is not None and prev_state != share.state:
                logger.info("%s 장 상태 변경: %s → %s", code, prev_state.value, share.state.value)
                await self.notify(market_state_embed(code, share))
            self._prev_states[code] = share.state

    def forget(self, code: str) -> None:
        """관심 목록에서 빠진 항목의 추적 기록 삭제"""
        self.spike_detector.forget(code)
