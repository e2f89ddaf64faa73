"""Pydantic 데이터 모델 (네이버 금융 응답)"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

# 등락 구분 코드 중 하락 (하한, 하락)
FALLING_CHANGE_TYPES = {"4", "5"}


class MarketState(str, Enum):
    """장 상태"""

    PRE_OPEN = "PREOPEN"
    OPEN = "OPEN"
    CLOSE = "CLOSE"

    @property
    def label(self) -> str:
        """한글 표시명"""
        return {
            MarketState.PRE_OPEN: "장 시작 전",
            MarketState.OPEN: "장중",
            MarketState.CLOSE: "장 마감",
        }[self]


class _WireModel(BaseModel):
    """축약 키를 쓰는 응답 모델 공통 설정"""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class Index(_WireModel):
    """지수 실시간 시세"""

    state: MarketState = Field(..., alias="ms", description="장 상태")
    now_value: int = Field(..., alias="nv", description="현재가 (0.01포인트)")
    high_value: int = Field(..., alias="hv", description="장중최고 (0.01포인트)")
    low_value: int = Field(..., alias="lv", description="장중최저 (0.01포인트)")
    change_value: int = Field(..., alias="cv", description="등락폭 (0.01포인트)")
    change_rate: float = Field(..., alias="cr", description="등락률 (%)")
    trading_volume: int = Field(..., alias="aq", description="거래량 (천주)")
    trading_value: int = Field(..., alias="aa", description="거래대금 (백만원)")


class Stock(_WireModel):
    """종목 실시간 시세"""

    name: str = Field(..., alias="nm", description="종목명")
    state: MarketState = Field(..., alias="ms", description="장 상태")
    now_value: int = Field(..., alias="nv", description="현재가 (원)")
    high_value: int = Field(..., alias="hv", description="장중최고 (원)")
    low_value: int = Field(..., alias="lv", description="장중최저 (원)")
    change_type: str = Field(..., alias="rf", description="등락 구분 (1 상한, 2 상승, 3 보합, 4 하한, 5 하락)")
    change_value: int = Field(..., alias="cv", description="등락폭 (부호 없음)")
    change_rate: float = Field(..., alias="cr", description="등락률 (부호 없음)")
    trading_volume: int = Field(..., alias="aq", description="거래량 (주)")
    trading_value: int = Field(..., alias="aa", description="거래대금 (원)")

    @property
    def is_falling(self) -> bool:
        """하락 여부"""
        return self.change_type in FALLING_CHANGE_TYPES

    @property
    def signed_change_value(self) -> int:
        """부호 있는 등락폭"""
        return -self.change_value if self.is_falling else self.change_value

    @property
    def signed_change_rate(self) -> float:
        """부호 있는 등락률"""
        return -self.change_rate if self.is_falling else self.change_rate


class SearchResult(_WireModel):
    """종목 검색 결과"""

    code: str = Field(..., alias="cd", description="종목코드")
    name: str = Field(..., alias="nm", description="종목명")


class IndexQuote(BaseModel):
    """지수 시간별 시세 한 줄"""

    time: str = Field(..., description="체결시각 (HH:MM)")
    value: float = Field(..., description="체결가 (포인트)")
    trading_volume: int = Field(..., description="누적 거래량 (천주)")


class StockQuote(BaseModel):
    """종목 시간별 시세 한 줄"""

    time: str = Field(..., description="체결시각 (HH:MM)")
    value: int = Field(..., description="체결가 (원)")
    trading_volume: int = Field(..., description="누적 거래량 (주)")
    trading_vol_move: int = Field(..., description="직전 체결 대비 거래량 변동")


class IndexQuotePage(BaseModel):
    """지수 시간별 시세 한 페이지"""

    quotes: list[IndexQuote] = Field(default_factory=list)
    is_last: bool = Field(..., description="마지막 페이지 여부")


class StockQuotePage(BaseModel):
    """종목 시간별 시세 한 페이지"""

    quotes: list[StockQuote] = Field(default_factory=list)
    is_last: bool = Field(..., description="마지막 페이지 여부")
