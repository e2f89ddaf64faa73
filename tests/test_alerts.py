"""알람 테스트"""

from datetime import datetime, timedelta

import pytest


class TestAlarmBook:
    """알람 목록 테스트"""

    def test_set_alarm_sorted_unique(self):
        from stock_bot.alerts import AlarmBook

        book = AlarmBook()
        for target in (60000, 55000, 60000, 57000):
            book.set_alarm("005930", target)

        assert book.get_alarms("005930") == [55000, 57000, 60000]
        assert book.codes() == ["005930"]

    def test_remove_last_alarm_removes_code(self):
        from stock_bot.alerts import AlarmBook

        book = AlarmBook()
        book.set_alarm("005930", 60000)

        assert book.remove_alarm("005930", 60000) is True
        assert book.get_alarms("005930") is None
        assert len(book) == 0

    def test_remove_code(self):
        """종목의 알람 전체 제거"""
        from stock_bot.alerts import AlarmBook

        book = AlarmBook()
        book.set_alarm("005930", 55000)
        book.set_alarm("005930", 60000)
        book.set_alarm("000660", 100000)

        assert book.remove_code("005930") == [55000, 60000]
        assert book.remove_code("005930") == []
        assert book.codes() == ["000660"]

    def test_remove_missing_alarm(self):
        from stock_bot.alerts import AlarmBook

        book = AlarmBook()
        book.set_alarm("005930", 60000)

        assert book.remove_alarm("005930", 61000) is False
        assert book.remove_alarm("000660", 60000) is False
        assert book.get_alarms("005930") == [60000]


class TestCrossedTargets:
    """목표값 도달 판단 테스트"""

    def test_crossing_up(self):
        from stock_bot.alerts import crossed_targets

        assert crossed_targets([100, 105, 110], 99, 105) == [100, 105]

    def test_crossing_down(self):
        from stock_bot.alerts import crossed_targets

        assert crossed_targets([90, 95, 100], 101, 95) == [95, 100]

    def test_no_previous_value(self):
        """첫 시세는 알리지 않음"""
        from stock_bot.alerts import crossed_targets

        assert crossed_targets([100], None, 100) == []

    def test_no_movement(self):
        """같은 값에 머무르면 다시 알리지 않음"""
        from stock_bot.alerts import crossed_targets

        assert crossed_targets([100], 100, 100) == []

    def test_leaving_target_does_not_fire(self):
        """목표값에서 벗어나는 이동은 도달이 아님"""
        from stock_bot.alerts import crossed_targets

        assert crossed_targets([100], 100, 101) == []
        assert crossed_targets([100], 100, 99) == []

    def test_negative_rates(self):
        """등락률 알람 (음수)"""
        from stock_bot.alerts import crossed_targets

        assert crossed_targets([-3.0, 3.0], -2.5, -3.1) == [-3.0]


class TestVolumeSpikeDetector:
    """거래량 급증 감지 테스트"""

    @staticmethod
    def _graph(moves, start=datetime(2024, 3, 4, 9, 0)):
        from stock_bot.market import Graph, Quote

        graph = Graph()
        for i, move in enumerate(moves):
            graph.update(
                Quote(
                    time=start + timedelta(minutes=i),
                    value=58500,
                    trading_volume=0,
                    trading_vol_move=move,
                )
            )
        return graph

    def test_spike_detected(self):
        from stock_bot.alerts import VolumeSpikeDetector

        detector = VolumeSpikeDetector(recent=2, baseline=4, ratio=5.0)
        spike = detector.check("005930", self._graph([10, 10, 10, 10, 60, 40]))

        assert spike is not None
        assert spike.recent_avg == pytest.approx(50)
        assert spike.baseline_avg == pytest.approx(10)
        assert spike.ratio == pytest.approx(5.0)
        assert spike.time == datetime(2024, 3, 4, 9, 5)

    def test_no_spike(self):
        from stock_bot.alerts import VolumeSpikeDetector

        detector = VolumeSpikeDetector(recent=2, baseline=4, ratio=5.0)

        assert detector.check("005930", self._graph([10, 10, 10, 10, 20, 30])) is None

    def test_not_enough_quotes(self):
        from stock_bot.alerts import VolumeSpikeDetector

        detector = VolumeSpikeDetector(recent=2, baseline=4)

        assert detector.check("005930", self._graph([10, 100, 100])) is None

    def test_zero_baseline(self):
        """기준 구간 거래가 없으면 판단하지 않음"""
        from stock_bot.alerts import VolumeSpikeDetector

        detector = VolumeSpikeDetector(recent=1, baseline=2)

        assert detector.check("005930", self._graph([0, 0, 100])) is None

    def test_cooldown(self):
        """쿨다운 동안 재알림 없음"""
        from stock_bot.alerts import VolumeSpikeDetector

        detector = VolumeSpikeDetector(recent=1, baseline=2, ratio=5.0, cooldown=timedelta(minutes=10))
        moves = [10, 10, 100]

        assert detector.check("005930", self._graph(moves)) is not None
        # 같은 체결 시각
        assert detector.check("005930", self._graph(moves)) is None
        # 5분 뒤 (쿨다운 안)
        later = datetime(2024, 3, 4, 9, 5)
        assert detector.check("005930", self._graph(moves, start=later)) is None
        # 15분 뒤
        much_later = datetime(2024, 3, 4, 9, 15)
        assert detector.check("005930", self._graph(moves, start=much_later)) is not None

    def test_forget(self):
        from stock_bot.alerts import VolumeSpikeDetector

        detector = VolumeSpikeDetector(recent=1, baseline=2, ratio=5.0)
        graph = self._graph([10, 10, 100])

        assert detector.check("005930", graph) is not None
        detector.forget("005930")
        assert detector.check("005930", graph) is not None
