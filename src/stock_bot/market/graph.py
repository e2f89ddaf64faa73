"""분봉 시세 그래프"""

from bisect import bisect_left
from datetime import datetime
from typing import ClassVar

import pandas as pd
from pydantic import BaseModel, Field

QUOTE_COLUMNS = ["time", "value", "trading_volume", "trading_vol_move"]


class Quote(BaseModel):
    """시각별 체결 정보"""

    time: datetime
    value: int = Field(..., description="체결가 (지수는 0.01포인트)")
    trading_volume: int = Field(..., description="누적 거래량")
    trading_vol_move: int | None = Field(None, description="직전 체결 대비 거래량 (없으면 누적 거래량에서 계산)")


class Graph(BaseModel):
    """시각순으로 정렬된 체결 목록 (시각 중복 없음)"""

    MAX_QUOTES: ClassVar[int] = 1024

    quotes: list[Quote] = Field(default_factory=list)

    def __len__(self) -> int:
        return len(self.quotes)

    def update(self, quote: Quote) -> None:
        """체결 추가 (같은 시각이면 교체)"""
        pos = bisect_left(self.quotes, quote.time, key=lambda q: q.time)
        if pos < len(self.quotes) and self.quotes[pos].time == quote.time:
            self.quotes[pos] = quote
        else:
            self.quotes.insert(pos, quote)

        if len(self.quotes) > self.MAX_QUOTES:
            del self.quotes[0]

    def latest_time(self) -> datetime | None:
        """가장 최근 체결 시각"""
        return self.quotes[-1].time if self.quotes else None

    def to_frame(self) -> pd.DataFrame:
        """시각 인덱스 DataFrame 변환

        거래량 변동이 없는 체결(지수)은 같은 날 직전 체결과의 누적 거래량 차이로 채운다.
        """
        df = pd.DataFrame([q.model_dump() for q in self.quotes], columns=QUOTE_COLUMNS)
        df["time"] = pd.to_datetime(df["time"])
        df = df.set_index("time")

        if df.empty:
            return df

        volume = df["trading_volume"]
        derived = volume.groupby(df.index.normalize()).diff().fillna(volume)
        df["trading_vol_move"] = pd.to_numeric(df["trading_vol_move"]).fillna(derived).astype("int64")

        return df

    def avg_trading_vol_move(self, offset: int, count: int) -> float | None:
        """최근 offset개를 건너뛴 count개 체결의 평균 거래량 변동"""
        if count <= 0 or len(self.quotes) < offset + count:
            return None

        moves = self.to_frame()["trading_vol_move"]
        end = len(moves) - offset
        return float(moves.iloc[end - count : end].mean())
