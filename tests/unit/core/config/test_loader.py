"""
core/config/loader.py 테스트

settings.yaml 로드, 검증, 기본값 테스트
"""

from pathlib import Path

import pytest

from core.config.loader import (
    AppSettings,
    DatabaseConfig,
    RetryConfig,
    Settings,
    SettingsLoadError,
    WebConfig,
    get_settings,
    load_settings,
)
from core.constants import PROJECT_ROOT, Defaults, Paths


class TestDataclasses:
    """설정 데이터클래스 테스트"""

    def test_defaults(self) -> None:
        """기본값은 Defaults 상수"""
        settings = AppSettings()

        assert settings.database.path == Paths.LEDGER_DB
        assert settings.database.pool_max_size == Defaults.POOL_MAX_SIZE
        assert settings.retry.max_attempts == Defaults.RETRY_MAX_ATTEMPTS
        assert settings.retry.base_delay_ms == Defaults.RETRY_BASE_DELAY_MS
        assert settings.web.port == Defaults.WEB_PORT

    def test_frozen(self) -> None:
        """불변성 확인"""
        config = RetryConfig()

        with pytest.raises(AttributeError):
            config.max_attempts = 10  # type: ignore


class TestLoadSettings:
    """load_settings 함수 테스트"""

    def test_load_valid_file(self, temp_settings_file: Path, temp_dir: Path) -> None:
        """정상 파일 로드"""
        settings = load_settings(temp_settings_file)

        assert settings.database == DatabaseConfig(
            path=temp_dir / "ledger.db",
            pool_max_size=4,
            acquire_timeout_sec=2.5,
            busy_timeout_ms=5000,
            transient_signatures=("endpoint is disabled", "connection terminated"),
        )
        assert settings.retry == RetryConfig(max_attempts=5, base_delay_ms=250)
        assert settings.web == WebConfig(host="0.0.0.0", port=9000)

    def test_missing_file_uses_defaults(self, temp_dir: Path) -> None:
        """파일이 없으면 기본값"""
        settings = load_settings(temp_dir / "nonexistent.yaml")

        assert settings == AppSettings()

    def test_empty_file_uses_defaults(self, temp_dir: Path) -> None:
        """빈 파일은 기본값"""
        empty_file = temp_dir / "empty.yaml"
        empty_file.write_text("", encoding="utf-8")

        assert load_settings(empty_file) == AppSettings()

    def test_partial_file(self, temp_dir: Path) -> None:
        """일부 섹션만 있으면 나머지는 기본값"""
        partial = temp_dir / "partial.yaml"
        partial.write_text("retry:\n  max_attempts: 1\n", encoding="utf-8")

        settings = load_settings(partial)

        assert settings.retry.max_attempts == 1
        assert settings.retry.base_delay_ms == Defaults.RETRY_BASE_DELAY_MS
        assert settings.database == DatabaseConfig()

    def test_relative_db_path_from_project_root(self, temp_dir: Path) -> None:
        """상대 경로는 프로젝트 루트 기준"""
        config_file = temp_dir / "relative.yaml"
        config_file.write_text("database:\n  path: data/other.db\n", encoding="utf-8")

        settings = load_settings(config_file)

        assert settings.database.path == PROJECT_ROOT / "data" / "other.db"

    def test_invalid_values(self, temp_settings_file_invalid: Path) -> None:
        """잘못된 값"""
        with pytest.raises(SettingsLoadError, match="pool_max_size"):
            load_settings(temp_settings_file_invalid)

    def test_invalid_yaml(self, temp_dir: Path) -> None:
        """YAML 파싱 실패"""
        invalid_file = temp_dir / "invalid.yaml"
        invalid_file.write_text("database: [unclosed", encoding="utf-8")

        with pytest.raises(SettingsLoadError, match="파싱 실패"):
            load_settings(invalid_file)

    def test_section_must_be_mapping(self, temp_dir: Path) -> None:
        """섹션이 매핑이 아님"""
        bad_file = temp_dir / "bad.yaml"
        bad_file.write_text("web: 8000\n", encoding="utf-8")

        with pytest.raises(SettingsLoadError, match="web"):
            load_settings(bad_file)

    def test_signatures_must_be_strings(self, temp_dir: Path) -> None:
        bad_file = temp_dir / "signatures.yaml"
        bad_file.write_text("database:\n  transient_signatures: 5\n", encoding="utf-8")

        with pytest.raises(SettingsLoadError, match="transient_signatures"):
            load_settings(bad_file)


class TestSettingsCache:
    """Settings 캐시 테스트"""

    def test_cached_instance(self) -> None:
        Settings.reset()
        try:
            assert get_settings() is get_settings()
        finally:
            Settings.reset()

    def test_reset(self) -> None:
        Settings.reset()
        try:
            first = get_settings()
            Settings.reset()
            assert Settings._instance is None
            assert get_settings() == first
        finally:
            Settings.reset()
