"""관심 종목/알람 파일 저장소

data_dir/
    my_index.txt            지수 코드 (한 줄에 하나)
    my_stock.txt            종목 코드
    my_alarms/{code}.txt    가격 알람 (정수)
    my_rate_alarms/{code}.txt  등락률 알람 (실수)
"""

import logging
from pathlib import Path
from typing import Callable

from stock_bot.alerts import AlarmBook
from stock_bot.market import Market, ShareKind

logger = logging.getLogger(__name__)

CODE_FILES = {
    ShareKind.INDEX: "my_index.txt",
    ShareKind.STOCK: "my_stock.txt",
}


class WatchlistStorage:
    """관심 종목/알람 텍스트 파일 저장소"""

    def __init__(self, data_dir: Path) -> None:
        self.data_dir = data_dir
        self.alarm_dir = data_dir / "my_alarms"
        self.rate_alarm_dir = data_dir / "my_rate_alarms"

    def ensure_dirs(self) -> None:
        """저장 디렉토리 생성"""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.alarm_dir.mkdir(exist_ok=True)
        self.rate_alarm_dir.mkdir(exist_ok=True)

    def load_codes(self, kind: ShareKind) -> list[str]:
        """저장된 관심 코드 목록 (빈 줄 제외)"""
        path = self.data_dir / CODE_FILES[kind]
        if not path.exists():
            return []

        lines = path.read_text(encoding="utf-8").splitlines()
        return [line.strip() for line in lines if line.strip()]

    def save_market(self, market: Market) -> None:
        """관심 코드 목록 저장 (종류별 파일)"""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        for kind, filename in CODE_FILES.items():
            codes = [code for code, k in market.share_codes_with_kind() if k == kind]
            _write_lines(self.data_dir / filename, codes)

    def load_price_alarms(self, book: AlarmBook | None = None) -> AlarmBook:
        return self._load_book(self.alarm_dir, int, book if book is not None else AlarmBook())

    def load_rate_alarms(self, book: AlarmBook | None = None) -> AlarmBook:
        return self._load_book(self.rate_alarm_dir, float, book if book is not None else AlarmBook())

    def save_price_alarms(self, book: AlarmBook) -> None:
        self._save_book(self.alarm_dir, book)

    def save_rate_alarms(self, book: AlarmBook) -> None:
        self._save_book(self.rate_alarm_dir, book)

    def _load_book(self, folder: Path, parse: Callable[[str], float], book: AlarmBook) -> AlarmBook:
        if not folder.exists():
            folder.mkdir(parents=True)
            return book

        for path in sorted(folder.glob("*.txt")):
            code = path.stem
            loaded = 0
            for line in path.read_text(encoding="utf-8").splitlines():
                try:
                    book.set_alarm(code, parse(line.strip()))
                    loaded += 1
                except ValueError:
                    continue
            logger.info("%s 알람 %d개 로드", code, loaded)

        return book

    def _save_book(self, folder: Path, book: AlarmBook) -> None:
        folder.mkdir(parents=True, exist_ok=True)
        codes = set(book.codes())

        for code in codes:
            _write_lines(folder / f"{code}.txt", [str(v) for v in book.get_alarms(code) or []])

        # 알람이 없는 종목의 파일은 삭제
        for path in folder.glob("*.txt"):
            if path.stem in codes:
                continue
            try:
                path.unlink()
            except OSError as e:
                logger.error("알람 파일 삭제 실패 (%s): %s", path, e)


def _write_lines(path: Path, lines: list[str]) -> None:
    path.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")
