"""관심 종목/지수 시장 상태"""

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, Field

from stock_bot.market.graph import Graph, Quote
from stock_bot.models import Index, IndexQuotePage, MarketState, Stock, StockQuotePage


class ShareKind(str, Enum):
    """관심 항목 종류"""

    INDEX = "INDEX"
    STOCK = "STOCK"


class Share(BaseModel):
    """관심 항목 (지수 또는 종목)"""

    kind: ShareKind
    name: str = Field(..., description="표시명 (지수는 코드, 종목은 종목명)")
    state: MarketState
    value: int = Field(..., description="현재가 (지수는 0.01포인트)")
    change_value: int = Field(..., description="부호 있는 등락폭")
    change_rate: float = Field(..., description="부호 있는 등락률 (%)")
    trading_volume: int
    graph: Graph = Field(default_factory=Graph)


class Market:
    """관심 항목 모음 (코드 → Share)"""

    def __init__(self) -> None:
        self._shares: dict[str, Share] = {}

    def share_codes(self) -> list[str]:
        return list(self._shares)

    def share_codes_with_kind(self) -> list[tuple[str, ShareKind]]:
        return [(code, share.kind) for code, share in self._shares.items()]

    def shares_of_kind(self, kind: ShareKind) -> list[Share]:
        """종류별 관심 항목 (추가 순서)"""
        return [share for share in self._shares.values() if share.kind is kind]

    def add_or_update_index(self, code: str, index: Index) -> Share:
        """지수 추가 또는 시세 갱신 (그래프 유지)"""
        return self._upsert(
            code,
            kind=ShareKind.INDEX,
            name=code,
            state=index.state,
            value=index.now_value,
            change_value=index.change_value,
            change_rate=index.change_rate,
            trading_volume=index.trading_volume,
        )

    def add_or_update_stock(self, code: str, stock: Stock) -> Share:
        """종목 추가 또는 시세 갱신 (그래프 유지)"""
        return self._upsert(
            code,
            kind=ShareKind.STOCK,
            name=stock.name,
            state=stock.state,
            value=stock.now_value,
            change_value=stock.signed_change_value,
            change_rate=stock.signed_change_rate,
            trading_volume=stock.trading_volume,
        )

    def update_index_graph(self, code: str, page: IndexQuotePage, day: date) -> None:
        """지수 시간별 시세를 그래프에 반영"""
        share = self._shares.get(code)
        if share is None:
            return

        for quote in page.quotes:
            time = _combine(day, quote.time)
            if time is None:
                continue
            share.graph.update(
                Quote(
                    time=time,
                    value=round(quote.value * 100),
                    trading_volume=quote.trading_volume,
                )
            )

    def update_stock_graph(self, code: str, page: StockQuotePage, day: date) -> None:
        """종목 시간별 시세를 그래프에 반영"""
        share = self._shares.get(code)
        if share is None:
            return

        for quote in page.quotes:
            time = _combine(day, quote.time)
            if time is None:
                continue
            share.graph.update(
                Quote(
                    time=time,
                    value=quote.value,
                    trading_volume=quote.trading_volume,
                    trading_vol_move=quote.trading_vol_move,
                )
            )

    def get_share(self, code: str) -> Share | None:
        return self._shares.get(code)

    def remove_share(self, code: str) -> Share | None:
        return self._shares.pop(code, None)

    def contains(self, code: str) -> bool:
        return code in self._shares

    def _upsert(self, code: str, **fields) -> Share:
        share = self._shares.get(code)
        if share is None:
            share = Share(**fields)
            self._shares[code] = share
        else:
            for key, value in fields.items():
                setattr(share, key, value)
        return share


def _combine(day: date, time_text: str) -> datetime | None:
    """'HH:MM' 체결시각을 날짜와 결합"""
    try:
        time = datetime.strptime(time_text, "%H:%M").time()
    except ValueError:
        return None
    return datetime.combine(day, time)
