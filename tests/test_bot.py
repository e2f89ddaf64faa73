"""디스코드 봇 테스트"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from discord.ext import commands


class TestCommandHelpers:
    """명령어 보조 함수 테스트"""

    def test_parse_price_target(self):
        from stock_bot.bot.commands import parse_price_target
        from stock_bot.market import ShareKind

        assert parse_price_target(ShareKind.INDEX, 2500.5) == 250050
        assert parse_price_target(ShareKind.STOCK, 60000) == 60000

    def test_format_rate(self):
        from stock_bot.bot.commands import format_rate

        assert format_rate(3) == "+3.00%"
        assert format_rate(-2.5) == "-2.50%"

    def test_alarm_lines(self, stock_data):
        from stock_bot.alerts import AlarmBook
        from stock_bot.bot.commands import alarm_lines
        from stock_bot.market import Market
        from stock_bot.models import Stock

        market = Market()
        market.add_or_update_stock("005930", Stock.model_validate(stock_data))
        book = AlarmBook()
        book.set_alarm("005930", 60000)
        book.set_alarm("005930", 55000)
        book.set_alarm("000660", 100000)

        lines = alarm_lines(book, market, lambda _code, v: str(v))

        assert lines == ["삼성전자 : 55000 | 60000", "000660 : 100000"]


class TestCommandErrors:
    """명령 오류 처리 테스트"""

    @pytest.fixture
    def ctx(self):
        ctx = MagicMock()
        ctx.reply = AsyncMock()
        ctx.prefix = "!"
        ctx.command.qualified_name = "set_alarm"
        ctx.command.signature = "<code_or_name> <value>"
        return ctx

    def test_naver_error_replied(self, ctx):
        """시세 조회 오류는 메시지 그대로 응답"""
        from stock_bot.bot.commands import GeneralCog
        from stock_bot.collectors import StockNotFoundError

        cog = GeneralCog(MagicMock())
        error = commands.CommandInvokeError(StockNotFoundError("종목코드 999999를 찾을 수 없습니다."))

        asyncio.run(cog.on_command_error(ctx, error))

        ctx.reply.assert_awaited_once_with("종목코드 999999를 찾을 수 없습니다.")

    def test_bad_argument_shows_usage(self, ctx):
        from stock_bot.bot.commands import GeneralCog

        cog = GeneralCog(MagicMock())

        asyncio.run(cog.on_command_error(ctx, commands.BadArgument("value")))

        ctx.reply.assert_awaited_once_with("사용법: `!set_alarm <code_or_name> <value>`")

    def test_unknown_command_ignored(self, ctx):
        from stock_bot.bot.commands import GeneralCog

        cog = GeneralCog(MagicMock())

        asyncio.run(cog.on_command_error(ctx, commands.CommandNotFound("nope")))

        ctx.reply.assert_not_awaited()

    def test_check_failure(self, ctx):
        from stock_bot.bot.commands import GeneralCog

        cog = GeneralCog(MagicMock())

        asyncio.run(cog.on_command_error(ctx, commands.NotOwner()))

        ctx.reply.assert_awaited_once_with("권한이 없습니다.")


class TestStockBotState:
    """관심 목록/알람 저장 및 복원 테스트"""

    def test_save_and_load_state(self, settings, index_data, stock_data):
        from stock_bot.bot import StockBot
        from stock_bot.models import Index, Stock

        collector = MagicMock()
        collector.get_index.return_value = Index.model_validate(index_data)
        collector.get_stock.return_value = Stock.model_validate(stock_data)

        bot = StockBot(settings, collector=collector)
        asyncio.run(bot.load_state())
        bot.market.add_or_update_index("KOSPI", collector.get_index.return_value)
        bot.market.add_or_update_stock("005930", collector.get_stock.return_value)
        bot.price_alarms.set_alarm("005930", 60000)
        bot.rate_alarms.set_alarm("005930", -3.0)
        bot.save_state()

        restored = StockBot(settings, collector=collector)
        asyncio.run(restored.load_state())

        assert restored.market.share_codes() == ["KOSPI", "005930"]
        assert restored.market.get_share("005930").name == "삼성전자"
        assert restored.price_alarms.get_alarms("005930") == [60000]
        assert restored.rate_alarms.get_alarms("005930") == [-3.0]
        collector.get_stock.assert_called_with("005930")

    def test_save_before_load_does_nothing(self, settings):
        """로드 전에 종료하면 저장된 목록을 덮어쓰지 않음"""
        from stock_bot.bot import StockBot

        settings.data_dir.mkdir(parents=True)
        (settings.data_dir / "my_stock.txt").write_text("005930\n", encoding="utf-8")

        StockBot(settings, collector=MagicMock()).save_state()

        assert (settings.data_dir / "my_stock.txt").read_text(encoding="utf-8") == "005930\n"


def _reaction(emoji):
    """wait_for("reaction_add") 결과 (reaction, user)"""
    reaction = MagicMock()
    reaction.emoji = emoji
    return reaction, MagicMock()


class TestFinanceCog:
    """시세/관심 목록/알람 명령 흐름 테스트"""

    @pytest.fixture
    def bot(self, settings):
        from stock_bot.alerts import AlarmBook
        from stock_bot.market import Market

        bot = MagicMock()
        bot.settings = settings.model_copy(
            update={"refresh_interval": 3, "refresh_duration": 9, "reaction_timeout": 1}
        )
        bot.market = Market()
        bot.price_alarms = AlarmBook()
        bot.rate_alarms = AlarmBook()
        bot.wait_for = AsyncMock(side_effect=asyncio.TimeoutError)
        return bot

    @pytest.fixture
    def message(self):
        message = MagicMock()
        message.add_reaction = AsyncMock()
        message.edit = AsyncMock()
        message.clear_reaction = AsyncMock()
        message.remove_reaction = AsyncMock()
        return message

    @pytest.fixture
    def ctx(self, message):
        ctx = MagicMock()
        ctx.reply = AsyncMock()
        ctx.send = AsyncMock(return_value=message)
        return ctx

    @pytest.fixture
    def cog(self, bot):
        from stock_bot.bot.commands import FinanceCog

        return FinanceCog(bot)

    def test_set_alarm_outside_watchlist(self, cog, bot, ctx):
        """관심 목록에 없는 종목은 알람 설정 거부"""
        bot.collector.resolve_code.return_value = "000660"

        asyncio.run(cog.set_alarm.callback(cog, ctx, "SK하이닉스", 100000.0))

        ctx.reply.assert_awaited_once_with("관심 종목만 알람을 설정할 수 있습니다.")
        assert len(bot.price_alarms) == 0

    def test_set_alarm_on_watched_index(self, cog, bot, ctx, index_data):
        """관심 지수 이름은 종목 검색 없이 그대로 사용 (0.01포인트 단위 저장)"""
        from stock_bot.models import Index

        bot.market.add_or_update_index("KOSPI", Index.model_validate(index_data))
        bot.collector.resolve_code.return_value = "123456"

        asyncio.run(cog.set_alarm.callback(cog, ctx, "KOSPI", 2500.0))

        bot.collector.resolve_code.assert_not_called()
        assert bot.price_alarms.get_alarms("KOSPI") == [250000]
        ctx.reply.assert_awaited_once_with("KOSPI 종목에 2,500.00 알람이 설정되었습니다.")

    def test_show_alarms_for_watched_index(self, cog, bot, ctx, index_data):
        from stock_bot.models import Index

        bot.market.add_or_update_index("KOSPI", Index.model_validate(index_data))
        bot.price_alarms.set_alarm("KOSPI", 250000)
        bot.collector.resolve_code.return_value = "123456"

        asyncio.run(cog.show_alarms.callback(cog, ctx, code_or_name="KOSPI"))

        embed = ctx.send.call_args.kwargs["embed"]
        assert embed.title == "알람 - KOSPI"
        assert embed.description == "2,500.00"

    def test_off_rate_alarm(self, cog, bot, ctx, stock_data):
        from stock_bot.models import Stock

        bot.market.add_or_update_stock("005930", Stock.model_validate(stock_data))
        bot.rate_alarms.set_alarm("005930", -3.0)

        asyncio.run(cog.off_rate_alarm.callback(cog, ctx, "005930", -3.0))

        assert bot.rate_alarms.get_alarms("005930") is None
        ctx.reply.assert_awaited_once_with("삼성전자 종목의 등락률 -3.00% 알람이 제거되었습니다.")

    def test_empty_watchlist_reply(self, cog, ctx):
        """관심 지수가 없으면 갱신 메시지 없이 응답만"""
        asyncio.run(cog.show_my_indices.callback(cog, ctx))

        ctx.reply.assert_awaited_once_with("관심 지수가 없습니다.")
        ctx.send.assert_not_awaited()

    def test_watchlist_edited_until_duration(self, cog, bot, ctx, message, stock_data):
        """refresh_duration 동안 refresh_interval마다 메시지 수정"""
        from stock_bot.bot.commands import EMOJI_STOP
        from stock_bot.models import Stock

        bot.market.add_or_update_stock("005930", Stock.model_validate(stock_data))

        asyncio.run(cog.show_my_stocks.callback(cog, ctx))

        ctx.send.assert_awaited_once()
        message.add_reaction.assert_awaited_once_with(EMOJI_STOP)
        assert message.edit.await_count == 2
        assert bot.wait_for.await_count == 2
        message.clear_reaction.assert_awaited_once_with(EMOJI_STOP)

    def test_watchlist_stopped_by_reaction(self, cog, bot, ctx, message, stock_data):
        """🚫 반응이면 수정 중지"""
        from stock_bot.bot.commands import EMOJI_STOP
        from stock_bot.models import Stock

        bot.market.add_or_update_stock("005930", Stock.model_validate(stock_data))
        bot.wait_for = AsyncMock(return_value=_reaction(EMOJI_STOP))

        asyncio.run(cog.show_my_stocks.callback(cog, ctx))

        ctx.send.assert_awaited_once()
        message.edit.assert_not_awaited()

    def test_add_index_with_star(self, cog, bot, ctx, message, index_data):
        """⭐ 선택 시 관심 지수 추가"""
        from stock_bot.bot.commands import EMOJI_ADD, EMOJI_DEL
        from stock_bot.models import Index

        bot.collector.get_index.return_value = Index.model_validate(index_data)
        bot.wait_for = AsyncMock(return_value=_reaction(EMOJI_ADD))

        asyncio.run(cog.show_index.callback(cog, ctx, name="KOSPI"))

        assert bot.market.contains("KOSPI")
        assert [c.args[0] for c in message.add_reaction.await_args_list] == [EMOJI_ADD, EMOJI_DEL]

    def test_remove_stock_with_cross_drops_alarms(self, cog, bot, ctx, stock_data):
        """❌ 선택 시 관심 종목과 그 종목의 알람 삭제"""
        from stock_bot.bot.commands import EMOJI_DEL
        from stock_bot.models import Stock

        stock = Stock.model_validate(stock_data)
        bot.market.add_or_update_stock("005930", stock)
        bot.price_alarms.set_alarm("005930", 60000)
        bot.rate_alarms.set_alarm("005930", 3.0)
        bot.collector.resolve_code.return_value = "005930"
        bot.collector.get_stock.return_value = stock
        bot.wait_for = AsyncMock(return_value=_reaction(EMOJI_DEL))

        asyncio.run(cog.show_stock.callback(cog, ctx, code_or_name="삼성전자"))

        assert not bot.market.contains("005930")
        assert bot.price_alarms.get_alarms("005930") is None
        assert bot.rate_alarms.get_alarms("005930") is None
        bot.tracker.forget.assert_called_once_with("005930")

    def test_no_choice_keeps_watchlist(self, cog, bot, ctx, index_data):
        """선택 시간 초과면 변경 없음"""
        from stock_bot.models import Index

        bot.collector.get_index.return_value = Index.model_validate(index_data)

        asyncio.run(cog.show_index.callback(cog, ctx, name="KOSPI"))

        assert not bot.market.contains("KOSPI")
