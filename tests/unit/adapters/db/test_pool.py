"""
SQLite 커넥션 풀 테스트

ConnectionPool 및 에러 분류 테스트.
"""

import sqlite3
from pathlib import Path

import pytest
import pytest_asyncio

from adapters.db.pool import ConnectionPool, classify_error, create_connection
from core.errors import StorageError, TransientStorageError, ValidationError


class TestClassifyError:
    """classify_error 테스트"""

    @pytest.mark.parametrize(
        "message",
        [
            "database is locked",
            "Connection terminated unexpectedly",
            "ERROR: The endpoint is disabled (XX000)",
            "unable to open database file",
        ],
    )
    def test_transient_signatures(self, message: str) -> None:
        error = classify_error(sqlite3.OperationalError(message))

        assert isinstance(error, TransientStorageError)
        assert error.message == message

    def test_genuine_fault(self) -> None:
        error = classify_error(sqlite3.OperationalError("no such table: foo"))

        assert type(error) is StorageError

    def test_integrity_error(self) -> None:
        error = classify_error(sqlite3.IntegrityError("UNIQUE constraint failed"))

        assert type(error) is StorageError

    def test_custom_signatures(self) -> None:
        error = classify_error(sqlite3.OperationalError("server went away"), ("went away",))

        assert isinstance(error, TransientStorageError)

    def test_storage_error_passthrough(self) -> None:
        original = TransientStorageError("already classified")

        assert classify_error(original) is original


class TestCreateConnection:
    """create_connection 테스트"""

    @pytest.mark.asyncio
    async def test_wal_mode(self, tmp_path: Path) -> None:
        """WAL 모드 확인"""
        conn = await create_connection(tmp_path / "test.db")

        cursor = await conn.execute("PRAGMA journal_mode")
        row = await cursor.fetchone()
        assert row[0].upper() == "WAL"

        await conn.close()

    @pytest.mark.asyncio
    async def test_foreign_keys_enabled(self, tmp_path: Path) -> None:
        conn = await create_connection(tmp_path / "test.db")

        cursor = await conn.execute("PRAGMA foreign_keys")
        row = await cursor.fetchone()
        assert row[0] == 1

        await conn.close()

    @pytest.mark.asyncio
    async def test_creates_parent_directory(self, tmp_path: Path) -> None:
        """부모 디렉토리 생성"""
        db_path = tmp_path / "subdir" / "test.db"

        conn = await create_connection(db_path)

        assert db_path.parent.exists()

        await conn.close()


@pytest_asyncio.fixture
async def pool(tmp_path: Path) -> ConnectionPool:
    """테스트용 풀 (최대 2개 연결)"""
    pool = ConnectionPool(tmp_path / "pool.db", max_size=2, acquire_timeout=0.1)
    await pool.connect()
    async with pool.transaction() as conn:
        await conn.execute("CREATE TABLE item (id INTEGER PRIMARY KEY, name TEXT NOT NULL)")
    yield pool
    await pool.close()


class TestConnectionPool:
    """ConnectionPool 테스트"""

    def test_invalid_max_size(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError):
            ConnectionPool(tmp_path / "x.db", max_size=0)

    @pytest.mark.asyncio
    async def test_connect_opens_first_connection(self, pool: ConnectionPool) -> None:
        assert pool.is_connected
        assert pool.size == 1

    @pytest.mark.asyncio
    async def test_close(self, tmp_path: Path) -> None:
        pool = ConnectionPool(tmp_path / "close.db")
        await pool.connect()

        await pool.close()

        assert not pool.is_connected
        assert pool.size == 0

    @pytest.mark.asyncio
    async def test_acquire_on_closed_pool(self, tmp_path: Path) -> None:
        pool = ConnectionPool(tmp_path / "closed.db")

        with pytest.raises(StorageError, match="closed"):
            async with pool.acquire():
                pass

    @pytest.mark.asyncio
    async def test_context_manager(self, tmp_path: Path) -> None:
        async with ConnectionPool(tmp_path / "ctx.db") as pool:
            assert pool.is_connected
            assert await pool.table_exists("missing") is False

        assert not pool.is_connected

    @pytest.mark.asyncio
    async def test_transaction_commit(self, pool: ConnectionPool) -> None:
        """성공 시 커밋"""
        async with pool.transaction() as conn:
            await conn.execute("INSERT INTO item (name) VALUES (?)", ("a",))

        row = await pool.fetchone("SELECT COUNT(*) AS n FROM item")
        assert row["n"] == 1

    @pytest.mark.asyncio
    async def test_transaction_rollback(self, pool: ConnectionPool) -> None:
        """예외 시 롤백"""
        with pytest.raises(ValidationError):
            async with pool.transaction() as conn:
                await conn.execute("INSERT INTO item (name) VALUES (?)", ("a",))
                raise ValidationError("abort")

        row = await pool.fetchone("SELECT COUNT(*) AS n FROM item")
        assert row["n"] == 0

    @pytest.mark.asyncio
    async def test_driver_error_classified(self, pool: ConnectionPool) -> None:
        """드라이버 예외는 StorageError로 변환, 원본은 __cause__"""
        with pytest.raises(StorageError) as exc_info:
            await pool.fetchall("SELECT * FROM no_such_table")

        assert not isinstance(exc_info.value, TransientStorageError)
        assert isinstance(exc_info.value.__cause__, sqlite3.OperationalError)
        # 일시적 끊김이 아니면 연결 유지
        assert pool.size == 1

    @pytest.mark.asyncio
    async def test_transient_error_discards_connection(self, pool: ConnectionPool) -> None:
        """일시적 끊김이면 연결 폐기 후 재생성"""
        with pytest.raises(TransientStorageError):
            async with pool.acquire():
                raise sqlite3.OperationalError("Connection terminated unexpectedly")

        assert pool.size == 0

        assert await pool.ping() is True
        assert pool.size == 1

    @pytest.mark.asyncio
    async def test_pool_exhausted(self, pool: ConnectionPool) -> None:
        """최대 연결 수 초과 시 대기 후 StorageError"""
        async with pool.acquire():
            async with pool.acquire():
                assert pool.size == 2
                with pytest.raises(StorageError, match="exhausted"):
                    async with pool.acquire():
                        pass

    @pytest.mark.asyncio
    async def test_connections_reused(self, pool: ConnectionPool) -> None:
        for _ in range(5):
            await pool.fetchone("SELECT 1")

        assert pool.size == 1

    @pytest.mark.asyncio
    async def test_ping(self, pool: ConnectionPool) -> None:
        assert await pool.ping() is True

    @pytest.mark.asyncio
    async def test_ping_on_closed_pool(self, tmp_path: Path) -> None:
        """ping은 예외 대신 False"""
        pool = ConnectionPool(tmp_path / "closed.db")

        assert await pool.ping() is False

    @pytest.mark.asyncio
    async def test_table_exists(self, pool: ConnectionPool) -> None:
        assert await pool.table_exists("item") is True
        assert await pool.table_exists("missing") is False
