"""
pytest 공통 fixture 정의
"""

import tempfile
from pathlib import Path

import pytest


@pytest.fixture
def temp_dir() -> Path:
    """OS 독립적인 임시 디렉토리 생성"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_settings_file(temp_dir: Path) -> Path:
    """테스트용 settings.yaml 파일 생성"""
    settings_content = f"""# 테스트용 settings.yaml
database:
  path: "{(temp_dir / 'ledger.db').as_posix()}"
  pool_max_size: 4
  acquire_timeout_sec: 2.5
  busy_timeout_ms: 5000
  transient_signatures:
    - Endpoint Is Disabled
    - connection terminated

retry:
  max_attempts: 5
  base_delay_ms: 250

web:
  host: 0.0.0.0
  port: 9000
"""
    settings_path = temp_dir / "settings.yaml"
    settings_path.write_text(settings_content, encoding="utf-8")
    return settings_path


@pytest.fixture
def temp_settings_file_invalid(temp_dir: Path) -> Path:
    """잘못된 값의 settings.yaml 파일 생성"""
    settings_content = """database:
  pool_max_size: 0

retry:
  max_attempts: three
"""
    settings_path = temp_dir / "settings_invalid.yaml"
    settings_path.write_text(settings_content, encoding="utf-8")
    return settings_path
