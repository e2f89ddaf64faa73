"""로깅 설정 모듈

- 콘솔: rich 핸들러
- 파일: 자정마다 교체되는 일별 로그 (30일 보관)
"""

import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from rich.logging import RichHandler

FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s (%(filename)s:%(lineno)d): %(message)s"


def setup_logging(
    log_level: str = "INFO",
    log_dir: Path | None = None,
) -> logging.Logger:
    """로깅 설정

    Args:
        log_level: 콘솔 로그 레벨 (DEBUG, INFO, WARNING, ERROR)
        log_dir: 파일 로그 디렉토리. None이면 파일 로그 없음

    Returns:
        루트 로거
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # 기존 핸들러 제거
    root_logger.handlers.clear()

    console_handler = RichHandler(rich_tracebacks=True, show_path=False)
    console_handler.setLevel(getattr(logging, log_level.upper(), logging.INFO))
    console_handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    root_logger.addHandler(console_handler)

    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = TimedRotatingFileHandler(
            log_dir / "stock-bot.log",
            when="midnight",
            backupCount=30,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        root_logger.addHandler(file_handler)

    # 외부 라이브러리 로깅 레벨 조정
    for name in ("discord", "urllib3", "requests"):
        logging.getLogger(name).setLevel(logging.WARNING)

    return root_logger
