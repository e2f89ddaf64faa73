"""네이버 금융 시세 수집기 (실시간 폴링 + 시간별 시세 + 종목 검색)"""

import json
import logging
import re
from datetime import datetime
from typing import Any, Callable, TypeVar

import requests
from bs4 import BeautifulSoup
from pydantic import TypeAdapter, ValidationError

from stock_bot.config import get_settings
from stock_bot.models import (
    Index,
    IndexQuote,
    IndexQuotePage,
    SearchResult,
    Stock,
    StockQuote,
    StockQuotePage,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

HOST_POLL = "https://polling.finance.naver.com/"
HOST_FINANCE = "https://finance.naver.com/"
HOST_M_STOCK = "https://m.stock.naver.com/"

USER_AGENT = "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_3)"

# 시간별 시세 페이지의 "맨뒤" 링크 클래스 (없으면 마지막 페이지)
LAST_PAGE_MARKER = "pgRR"

TIME_PATTERN = re.compile(r"^\d{1,2}:\d{2}$")

# 응답에 경로가 없음을 나타내는 표식 (null 값과 구분)
MISSING = object()


class NaverApiError(Exception):
    """네이버 금융 API 오류"""

    pass


class StockNotFoundError(NaverApiError):
    """존재하지 않는 종목/지수"""

    pass


def path_poll(result: Any) -> Any:
    """실시간 폴링 응답의 데이터 경로 (result.areas[0].datas[0])"""
    try:
        return result["areas"][0]["datas"][0]
    except (KeyError, IndexError, TypeError):
        return MISSING


def path_mobile_stock(result: Any) -> Any:
    """모바일 검색 응답의 데이터 경로 (result.d)"""
    try:
        return result["d"]
    except (KeyError, TypeError):
        return MISSING


def parse_response(
    payload: dict,
    path: Callable[[Any], Any],
    model_type: type[T],
) -> T:
    """공통 응답 포맷 검증 후 데이터 경로를 모델로 변환"""
    result_code = payload.get("resultCode")
    if result_code != "success":
        raise NaverApiError(str(result_code))

    data = path(payload.get("result"))
    if data is MISSING:
        raise StockNotFoundError("data path not exists")
    if data is None:
        raise NaverApiError(str(result_code))

    try:
        return TypeAdapter(model_type).validate_python(data)
    except ValidationError as e:
        raise NaverApiError(f"응답 형식 오류: {e.error_count()}개 필드") from e


def is_last_page(html: str) -> bool:
    """시간별 시세 마지막 페이지 여부"""
    return LAST_PAGE_MARKER not in html


def _to_number(text: str) -> float:
    """'1,234.56' / '0.62%' 형태 숫자 변환"""
    return float(text.replace(",", "").replace("%", "").strip())


def _time_rows(html: str) -> list[list[str]]:
    """체결시각으로 시작하는 표 행만 추출"""
    soup = BeautifulSoup(html, "html.parser")
    rows = []
    for tr in soup.find_all("tr"):
        cells = [td.get_text(strip=True) for td in tr.find_all("td")]
        if cells and TIME_PATTERN.match(cells[0]):
            rows.append(cells)
    return rows


def parse_index_quote_page(html: str) -> IndexQuotePage:
    """지수 시간별 시세 페이지 파싱

    컬럼: 체결시각, 체결가, 전일비, 등락률, 거래량(천주), 거래대금(백만)
    """
    quotes = []
    for cells in _time_rows(html):
        if len(cells) < 5:
            continue
        try:
            quotes.append(
                IndexQuote(
                    time=cells[0],
                    value=_to_number(cells[1]),
                    trading_volume=int(_to_number(cells[4])),
                )
            )
        except ValueError:
            continue

    return IndexQuotePage(quotes=quotes, is_last=is_last_page(html))


def parse_stock_quote_page(html: str) -> StockQuotePage:
    """종목 시간별 시세 페이지 파싱

    컬럼: 체결시각, 체결가, 전일비, 매도, 매수, 거래량, 변동량
    """
    quotes = []
    for cells in _time_rows(html):
        if len(cells) < 7:
            continue
        try:
            quotes.append(
                StockQuote(
                    time=cells[0],
                    value=int(_to_number(cells[1])),
                    trading_volume=int(_to_number(cells[5])),
                    trading_vol_move=int(_to_number(cells[6])),
                )
            )
        except ValueError:
            continue

    return StockQuotePage(quotes=quotes, is_last=is_last_page(html))


class NaverFinanceCollector:
    """네이버 금융 시세 수집기"""

    def __init__(self, timeout: float | None = None) -> None:
        self._timeout = timeout if timeout is not None else get_settings().request_timeout
        self._session = requests.Session()
        self._session.headers.update({"User-Agent": USER_AGENT})

    def get_index(self, name: str) -> Index:
        """지수 실시간 시세 (예: KOSPI, KOSDAQ, KPI200)"""
        payload = self._get_json(f"{HOST_POLL}api/realtime", {"query": f"SERVICE_INDEX:{name}"})
        try:
            return parse_response(payload, path_poll, Index)
        except StockNotFoundError as e:
            raise StockNotFoundError(f"지수 {name}을(를) 찾을 수 없습니다.") from e

    def get_stock(self, code: str) -> Stock:
        """종목 실시간 시세"""
        payload = self._get_json(
            f"{HOST_POLL}api/realtime",
            {"query": f"SERVICE_ITEM:{code}"},
            encoding="euc-kr",
        )
        try:
            return parse_response(payload, path_poll, Stock)
        except StockNotFoundError as e:
            raise StockNotFoundError(f"종목코드 {code}를 찾을 수 없습니다.") from e

    def get_index_quotes(
        self,
        name: str,
        date_and_max_time: datetime,
        page: int,
    ) -> IndexQuotePage:
        """지수 시간별 시세 (date_and_max_time 이전 체결, 최신순)"""
        html = self._get_text(
            f"{HOST_FINANCE}sise/sise_index_time.nhn",
            {
                "code": name,
                "thistime": date_and_max_time.strftime("%Y%m%d%H%M%S"),
                "page": page,
            },
            encoding="euc-kr",
        )
        return parse_index_quote_page(html)

    def get_stock_quotes(
        self,
        code: str,
        date_and_max_time: datetime,
        page: int,
    ) -> StockQuotePage:
        """종목 시간별 시세 (date_and_max_time 이전 체결, 최신순)"""
        html = self._get_text(
            f"{HOST_FINANCE}item/sise_time.nhn",
            {
                "code": code,
                "thistime": date_and_max_time.strftime("%Y%m%d%H%M%S"),
                "page": page,
            },
            encoding="euc-kr",
        )
        return parse_stock_quote_page(html)

    def search(self, keyword: str) -> list[SearchResult]:
        """종목명 검색"""
        payload = self._get_json(
            f"{HOST_M_STOCK}api/json/search/searchListJson.nhn",
            {"keyword": keyword},
            encoding="euc-kr",
        )
        return parse_response(payload, path_mobile_stock, list[SearchResult])

    def resolve_code(self, code_or_name: str) -> str:
        """종목코드 또는 종목명을 종목코드로 변환

        숫자면 그대로, 아니면 검색 결과 첫 번째 종목코드.
        검색 결과가 없거나 실패하면 입력값을 그대로 반환한다.
        """
        code_or_name = code_or_name.strip()
        if code_or_name.isdigit():
            return code_or_name

        try:
            results = self.search(code_or_name)
        except NaverApiError as e:
            logger.debug("종목 검색 실패 (%s): %s", code_or_name, e)
            return code_or_name

        if results:
            return results[0].code
        return code_or_name

    def _get_text(self, url: str, params: dict, encoding: str | None = None) -> str:
        try:
            response = self._session.get(url, params=params, timeout=self._timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise NaverApiError(f"요청 실패: {e}") from e

        if encoding:
            response.encoding = encoding
        return response.text

    def _get_json(self, url: str, params: dict, encoding: str | None = None) -> dict:
        text = self._get_text(url, params, encoding)
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise NaverApiError("JSON 응답이 아닙니다.") from e
