"""거래량 급증 감지"""

from datetime import datetime, timedelta

from pydantic import BaseModel

from stock_bot.market import Graph


class VolumeSpike(BaseModel):
    """거래량 급증 감지 결과"""

    code: str
    time: datetime
    recent_avg: float
    baseline_avg: float

    @property
    def ratio(self) -> float:
        return self.recent_avg / self.baseline_avg


class VolumeSpikeDetector:
    """최근 구간 평균 거래량 변동이 기준 구간의 ratio배 이상이면 급증으로 판단"""

    def __init__(
        self,
        recent: int = 3,
        baseline: int = 30,
        ratio: float = 5.0,
        cooldown: timedelta = timedelta(minutes=10),
    ) -> None:
        self.recent = recent
        self.baseline = baseline
        self.ratio = ratio
        self.cooldown = cooldown
        self._last_fired: dict[str, datetime] = {}

    def check(self, code: str, graph: Graph) -> VolumeSpike | None:
        """급증이면 결과 반환 (같은 체결 시각 중복/쿨다운 내 재알림 없음)"""
        latest = graph.latest_time()
        if latest is None:
            return None

        last_fired = self._last_fired.get(code)
        if last_fired is not None and (latest <= last_fired or latest - last_fired < self.cooldown):
            return None

        recent_avg = graph.avg_trading_vol_move(0, self.recent)
        baseline_avg = graph.avg_trading_vol_move(self.recent, self.baseline)
        if recent_avg is None or baseline_avg is None or baseline_avg <= 0:
            return None

        if recent_avg < self.ratio * baseline_avg:
            return None

        self._last_fired[code] = latest
        return VolumeSpike(
            code=code,
            time=latest,
            recent_avg=recent_avg,
            baseline_avg=baseline_avg,
        )

    def forget(self, code: str) -> None:
        """관심 목록에서 빠진 종목의 알림 기록 삭제"""
        self._last_fired.pop(code, None)
