"""가격/등락률 알람"""

from bisect import bisect_left, insort
from collections.abc import Iterable


class AlarmBook:
    """종목코드별 목표값 목록 (정렬, 중복 없음)"""

    def __init__(self) -> None:
        self._alarms: dict[str, list[float]] = {}

    def set_alarm(self, code: str, target: float) -> None:
        """알람 추가 (이미 있으면 무시)"""
        targets = self._alarms.setdefault(code, [])
        pos = bisect_left(targets, target)
        if pos == len(targets) or targets[pos] != target:
            insort(targets, target)

    def remove_alarm(self, code: str, target: float) -> bool:
        """알람 제거 (제거했으면 True)"""
        targets = self._alarms.get(code)
        if not targets:
            return False

        pos = bisect_left(targets, target)
        if pos == len(targets) or targets[pos] != target:
            return False

        del targets[pos]
        if not targets:
            del self._alarms[code]
        return True

    def remove_code(self, code: str) -> list[float]:
        """종목의 알람 전체 제거 (제거된 목표값 반환)"""
        return self._alarms.pop(code, [])

    def codes(self) -> list[str]:
        return list(self._alarms)

    def get_alarms(self, code: str) -> list[float] | None:
        return self._alarms.get(code)

    def __len__(self) -> int:
        return len(self._alarms)


def crossed_targets(
    targets: Iterable[float],
    previous: float | None,
    current: float,
) -> list[float]:
    """previous → current 이동 중 도달한 목표값

    상승: previous < t <= current, 하락: previous > t >= current.
    이전 값이 없으면 알리지 않는다.
    """
    if previous is None or previous == current:
        return []

    if previous < current:
        return [t for t in targets if previous < t <= current]
    return [t for t in targets if current <= t < previous]
