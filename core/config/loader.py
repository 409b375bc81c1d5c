"""
설정 로더

settings.yaml 로드 및 DB/재시도/Web 설정 생성.
파일이 없으면 core.constants.Defaults 기본값 사용.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from core.constants import Defaults, Paths, PROJECT_ROOT


@dataclass(frozen=True)
class DatabaseConfig:
    """DB 커넥션 풀 설정"""

    path: Path = Paths.LEDGER_DB
    pool_max_size: int = Defaults.POOL_MAX_SIZE
    acquire_timeout_sec: float = Defaults.POOL_ACQUIRE_TIMEOUT_SEC
    busy_timeout_ms: int = Defaults.BUSY_TIMEOUT_MS
    transient_signatures: tuple[str, ...] = Defaults.TRANSIENT_SIGNATURES


@dataclass(frozen=True)
class RetryConfig:
    """Resilient wrapper 재시도 설정"""

    max_attempts: int = Defaults.RETRY_MAX_ATTEMPTS
    base_delay_ms: int = Defaults.RETRY_BASE_DELAY_MS


@dataclass(frozen=True)
class WebConfig:
    """Admin API 서버 설정"""

    host: str = Defaults.WEB_HOST
    port: int = Defaults.WEB_PORT


@dataclass(frozen=True)
class AppSettings:
    """애플리케이션 설정 (settings.yaml에서 로드)

    불변 데이터 구조로 설정 변경 방지
    """

    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    retry: RetryConfig = field(default_factory=RetryConfig)
    web: WebConfig = field(default_factory=WebConfig)


class SettingsLoadError(Exception):
    """Settings 로드 실패 예외"""

    pass


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise SettingsLoadError(f"settings.yaml의 '{name}' 섹션은 매핑이어야 합니다")
    return section


def _positive_int(section: dict[str, Any], key: str, default: int, label: str) -> int:
    value = section.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise SettingsLoadError(f"{label}.{key}는 1 이상의 정수여야 합니다: {value!r}")
    return value


def _positive_number(section: dict[str, Any], key: str, default: float, label: str) -> float:
    value = section.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise SettingsLoadError(f"{label}.{key}는 0보다 큰 숫자여야 합니다: {value!r}")
    return float(value)


def _load_database(section: dict[str, Any]) -> DatabaseConfig:
    path_value = section.get("path")
    if path_value is None:
        db_path = Paths.LEDGER_DB
    else:
        db_path = Path(path_value)
        if not db_path.is_absolute():
            # 상대 경로는 프로젝트 루트 기준
            db_path = PROJECT_ROOT / db_path

    signatures = section.get("transient_signatures", list(Defaults.TRANSIENT_SIGNATURES))
    if not isinstance(signatures, list) or not all(isinstance(s, str) for s in signatures):
        raise SettingsLoadError("database.transient_signatures는 문자열 목록이어야 합니다")

    return DatabaseConfig(
        path=db_path,
        pool_max_size=_positive_int(section, "pool_max_size", Defaults.POOL_MAX_SIZE, "database"),
        acquire_timeout_sec=_positive_number(
            section, "acquire_timeout_sec", Defaults.POOL_ACQUIRE_TIMEOUT_SEC, "database"
        ),
        busy_timeout_ms=_positive_int(section, "busy_timeout_ms", Defaults.BUSY_TIMEOUT_MS, "database"),
        transient_signatures=tuple(s.lower() for s in signatures),
    )


def load_settings(path: Path | None = None) -> AppSettings:
    """settings.yaml 파일 로드

    Args:
        path: settings.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        AppSettings 인스턴스 (파일이 없으면 기본값)

    Raises:
        SettingsLoadError: 형식이 잘못되었거나 값이 유효하지 않은 경우
    """
    if path is None:
        path = Paths.SETTINGS_FILE

    if not path.exists():
        return AppSettings()

    try:
        content = path.read_text(encoding="utf-8")
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise SettingsLoadError(f"settings.yaml 파싱 실패: {e}") from e

    if data is None:
        return AppSettings()
    if not isinstance(data, dict):
        raise SettingsLoadError("settings.yaml 최상위는 매핑이어야 합니다")

    retry = _section(data, "retry")
    web = _section(data, "web")

    host = web.get("host", Defaults.WEB_HOST)
    if not isinstance(host, str) or not host:
        raise SettingsLoadError(f"web.host가 올바르지 않습니다: {host!r}")

    base_delay_ms = retry.get("base_delay_ms", Defaults.RETRY_BASE_DELAY_MS)
    if isinstance(base_delay_ms, bool) or not isinstance(base_delay_ms, int) or base_delay_ms < 0:
        raise SettingsLoadError(f"retry.base_delay_ms는 0 이상의 정수여야 합니다: {base_delay_ms!r}")

    return AppSettings(
        database=_load_database(_section(data, "database")),
        retry=RetryConfig(
            max_attempts=_positive_int(retry, "max_attempts", Defaults.RETRY_MAX_ATTEMPTS, "retry"),
            base_delay_ms=base_delay_ms,
        ),
        web=WebConfig(
            host=host,
            port=_positive_int(web, "port", Defaults.WEB_PORT, "web"),
        ),
    )


class Settings:
    """설정 캐시

    최초 접근 시 한 번만 로드. 테스트에서는 reset()으로 초기화.
    """

    _instance: AppSettings | None = None

    @classmethod
    def get(cls) -> AppSettings:
        if cls._instance is None:
            cls._instance = load_settings()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        cls._instance = None


def get_settings() -> AppSettings:
    """캐시된 애플리케이션 설정 반환"""
    return Settings.get()
