"""
core/constants.py 테스트

모든 경로가 pathlib.Path 타입이고, 상수가 정상적으로 접근 가능한지 확인
"""

from pathlib import Path

from core.constants import PROJECT_ROOT, Defaults, Paths


class TestProjectRoot:
    """PROJECT_ROOT 테스트"""

    def test_project_root_is_absolute(self) -> None:
        """PROJECT_ROOT가 절대 경로인지 확인"""
        assert isinstance(PROJECT_ROOT, Path)
        assert PROJECT_ROOT.is_absolute()

    def test_project_root_contains_core_directory(self) -> None:
        """PROJECT_ROOT에 core 디렉토리가 있는지 확인"""
        assert (PROJECT_ROOT / "core").exists()


class TestPaths:
    """Paths 테스트"""

    def test_all_paths_are_path(self) -> None:
        for value in (Paths.CONFIG_DIR, Paths.DATA_DIR, Paths.LOGS_DIR, Paths.SETTINGS_FILE, Paths.LEDGER_DB):
            assert isinstance(value, Path)

    def test_settings_file_location(self) -> None:
        assert Paths.SETTINGS_FILE == PROJECT_ROOT / "config" / "settings.yaml"

    def test_ledger_db_in_data_dir(self) -> None:
        assert Paths.LEDGER_DB.parent == Paths.DATA_DIR


class TestDefaults:
    """Defaults 테스트"""

    def test_pool(self) -> None:
        assert Defaults.POOL_MAX_SIZE == 10
        assert Defaults.POOL_ACQUIRE_TIMEOUT_SEC == 10.0

    def test_retry(self) -> None:
        assert Defaults.RETRY_MAX_ATTEMPTS == 3
        assert Defaults.RETRY_BASE_DELAY_MS == 1000

    def test_transient_signatures_lowercase(self) -> None:
        """소문자 비교를 위해 소문자로 정의"""
        assert "endpoint is disabled" in Defaults.TRANSIENT_SIGNATURES
        assert all(s == s.lower() for s in Defaults.TRANSIENT_SIGNATURES)
