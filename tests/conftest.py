"""pytest 설정"""

import pytest


def pytest_configure(config):
    """pytest 설정"""
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests (deselect with '-m \"not integration\"')",
    )


@pytest.fixture
def sample_stock_code():
    """테스트용 종목코드"""
    return "005930"  # 삼성전자


@pytest.fixture
def sample_stock_name():
    """테스트용 종목명"""
    return "삼성전자"


@pytest.fixture
def index_data():
    """실시간 폴링 지수 데이터 (KOSPI)"""
    return {
        "cd": "KOSPI",
        "ms": "OPEN",
        "nv": 234526,
        "hv": 235010,
        "lv": 233100,
        "cv": 1453,
        "cr": 0.62,
        "aq": 512345,
        "aa": 9876543,
    }


@pytest.fixture
def stock_data():
    """실시간 폴링 종목 데이터 (삼성전자, 하락)"""
    return {
        "cd": "005930",
        "nm": "삼성전자",
        "ms": "OPEN",
        "nv": 58500,
        "hv": 59400,
        "lv": 58200,
        "rf": "5",
        "cv": 700,
        "cr": 1.18,
        "aq": 12345678,
        "aa": 725000000000,
    }


@pytest.fixture
def poll_payload():
    """실시간 폴링 응답 생성"""

    def _make(data):
        return {
            "resultCode": "success",
            "result": {"areas": [{"name": "SERVICE_ITEM", "datas": [data]}]},
        }

    return _make


@pytest.fixture
def settings(tmp_path):
    """.env를 읽지 않는 테스트용 설정"""
    from stock_bot.config import Settings

    return Settings(
        _env_file=None,
        discord_token="token",
        discord_channel=1234,
        data_dir=tmp_path / "data",
        log_dir=tmp_path / "logs",
        page_delay=0,
    )
