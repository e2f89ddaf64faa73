"""환경 설정 모듈"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """애플리케이션 설정"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # 디스코드 (필수)
    discord_token: str = Field(default="", description="디스코드 봇 토큰")
    discord_channel: int | None = Field(default=None, description="알림을 보낼 메인 채널 ID")
    command_prefix: str = Field(default="!", description="명령어 접두사")

    # 저장 경로
    data_dir: Path = Field(
        default=Path("./data"),
        description="관심 종목/알람 저장 디렉토리",
    )
    log_dir: Path = Field(
        default=Path("./logs"),
        description="로그 디렉토리",
    )
    log_level: str = Field(default="INFO", description="콘솔 로그 레벨")

    # 시장 추적
    poll_interval: float = Field(default=3.0, description="시세 갱신 주기 (초)")
    market_open_hour: int = Field(default=8, ge=0, le=23, description="추적 시작 시각 (KST)")
    market_close_hour: int = Field(default=17, ge=1, le=24, description="추적 종료 시각 (KST)")
    tracked_indices: list[str] = Field(
        default_factory=lambda: ["KOSPI", "KOSDAQ"],
        description="항상 추적하는 지수",
    )
    graph_min_quotes: int = Field(default=60, description="채워둘 최소 분봉 수")
    max_day_jumps: int = Field(default=10, description="이전 거래일 탐색 최대 횟수")
    page_delay: float = Field(default=0.2, description="추가 페이지 요청 간격 (초)")
    request_timeout: float = Field(default=10.0, description="HTTP 요청 타임아웃 (초)")

    # 메시지 반응
    reaction_timeout: float = Field(default=30, description="이모지 선택 대기 시간 (초)")
    refresh_interval: float = Field(default=3, description="관심 목록 메시지 수정 주기 (초)")
    refresh_duration: float = Field(default=180, description="관심 목록 메시지 수정 시간 (초)")

    # 거래량 급증 알림
    spike_recent: int = Field(default=3, ge=1, description="최근 구간 분봉 수")
    spike_baseline: int = Field(default=30, ge=1, description="기준 구간 분봉 수")
    spike_ratio: float = Field(default=5.0, gt=0, description="급증 판단 배수")
    spike_cooldown_minutes: int = Field(default=10, ge=0, description="같은 종목 재알림 간격 (분)")

    @property
    def has_discord(self) -> bool:
        """디스코드 접속 정보 설정 여부"""
        return bool(self.discord_token and self.discord_channel)

    def ensure_dirs(self) -> None:
        """필요한 디렉토리 생성"""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.log_dir.mkdir(parents=True, exist_ok=True)


# 싱글톤 설정 인스턴스
_settings: Settings | None = None


def get_settings() -> Settings:
    """설정 인스턴스 반환"""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
