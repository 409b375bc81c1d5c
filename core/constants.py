"""
하드코딩 상수 - 변경될 일이 거의 없는 고정값

중요: 경로는 반드시 pathlib.Path 사용 (Windows/Linux 크로스 플랫폼)
"""

from pathlib import Path


# 프로젝트 루트 (이 파일 기준 2단계 상위: core/constants.py → 프로젝트 루트)
PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent


class Defaults:
    """기본값 상수 (settings.yaml에 값이 없을 때 사용)"""

    # 커넥션 풀
    POOL_MAX_SIZE: int = 10
    POOL_ACQUIRE_TIMEOUT_SEC: float = 10.0
    BUSY_TIMEOUT_MS: int = 30000

    # 재시도 (지수 백오프)
    RETRY_MAX_ATTEMPTS: int = 3
    RETRY_BASE_DELAY_MS: int = 1000

    # 일시적 연결 끊김으로 분류할 에러 메시지 (소문자 비교)
    TRANSIENT_SIGNATURES: tuple[str, ...] = (
        "endpoint is disabled",
        "connection terminated",
        "database is locked",
        "unable to open database file",
    )

    WEB_HOST: str = "127.0.0.1"
    WEB_PORT: int = 8000

    RECENT_LIMIT: int = 10


class Paths:
    """프로젝트 경로 상수 (pathlib 사용 - OS 독립적)"""

    # 디렉토리
    CONFIG_DIR: Path = PROJECT_ROOT / "config"
    DATA_DIR: Path = PROJECT_ROOT / "data"
    LOGS_DIR: Path = PROJECT_ROOT / "logs"

    # 설정 파일
    SETTINGS_FILE: Path = CONFIG_DIR / "settings.yaml"

    # DB 파일
    LEDGER_DB: Path = DATA_DIR / "ledger.db"
