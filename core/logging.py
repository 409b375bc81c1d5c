"""
로깅 초기화

Admin API(`python -m web`)와 scripts/ 진입점이 시작할 때 한 번 호출.
콘솔과 일별 롤링 파일 두 곳으로 같은 포맷의 로그를 남김.

    from core.logging import setup_logging
    setup_logging("api")
"""

import logging
import sys
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from core.constants import Paths


LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_BACKUP_COUNT = 7

# WARNING 미만은 버리는 외부 라이브러리 로거
NOISY_LOGGERS = [
    "aiosqlite",       # 쿼리 단위 executing/completed
    "httpcore",
    "httpx",           # TestClient
    "asyncio",
    "uvicorn.access",  # 요청 단위 access 로그
]


def get_log_file_path(process_name: str, log_dir: Path | None = None) -> Path:
    """프로세스별 로그 파일 위치 (기본: logs/<process_name>/<process_name>.log)"""
    directory = log_dir if log_dir is not None else Paths.LOGS_DIR / process_name
    return directory / f"{process_name}.log"


def _console_handler(level: int, formatter: logging.Formatter) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def _daily_file_handler(
    log_file: Path, level: int, formatter: logging.Formatter
) -> logging.Handler:
    handler = TimedRotatingFileHandler(
        filename=log_file,
        when="midnight",
        backupCount=LOG_FILE_BACKUP_COUNT,
        encoding="utf-8",
    )
    # 롤링된 파일명: api.log.2025-01-10
    handler.suffix = "%Y-%m-%d"
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    process_name: str,
    console_level: int = logging.INFO,
    file_level: int = logging.INFO,
    log_dir: Path | None = None,
) -> logging.Logger:
    """루트 로거 구성

    다시 호출하면 이전 핸들러를 교체함 (중복 출력 없음).

    Args:
        process_name: "api" 또는 "cli"
        console_level: 콘솔 출력 레벨
        file_level: 파일 출력 레벨
        log_dir: 로그 디렉토리 (테스트용 override)

    Returns:
        루트 Logger
    """
    log_file = get_log_file_path(process_name, log_dir)
    log_file.parent.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    root_logger = logging.getLogger()
    # 레벨 필터링은 핸들러에서
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers.clear()
    root_logger.addHandler(_console_handler(console_level, formatter))
    root_logger.addHandler(_daily_file_handler(log_file, file_level, formatter))

    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    root_logger.info(
        f"Logging ready: {process_name}",
        extra={"log_file": str(log_file), "file_level": logging.getLevelName(file_level)},
    )
    return root_logger
