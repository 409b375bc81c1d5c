"""
SQLite 커넥션 풀

WAL 모드 aiosqlite 연결을 최대 max_size개까지 관리.
앱 시작 시 명시적으로 생성하여 Ledger 컴포넌트에 주입하고, 종료 시 close().

드라이버 예외(sqlite3.Error)는 풀 경계에서 분류하여
TransientStorageError / StorageError로 변환 (원본은 __cause__로 보존).
"""

import asyncio
import logging
import sqlite3
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Iterable

import aiosqlite

from core.constants import Defaults
from core.errors import StorageError, TransientStorageError

logger = logging.getLogger(__name__)


def classify_error(
    error: BaseException,
    transient_signatures: Iterable[str] = Defaults.TRANSIENT_SIGNATURES,
) -> StorageError:
    """드라이버 예외를 저장소 예외로 분류

    에러 메시지에 일시적 연결 끊김 시그니처가 포함되면 TransientStorageError,
    그 외에는 StorageError.

    Args:
        error: 원본 예외
        transient_signatures: 일시적 끊김 판별 문자열 (소문자 비교)

    Returns:
        분류된 저장소 예외 (raise는 호출자가 수행)
    """
    if isinstance(error, StorageError):
        return error

    message = str(error) or error.__class__.__name__
    lowered = message.lower()
    if any(signature in lowered for signature in transient_signatures):
        return TransientStorageError(message)
    return StorageError(message)


async def create_connection(
    db_path: Path | str,
    busy_timeout_ms: int = Defaults.BUSY_TIMEOUT_MS,
) -> aiosqlite.Connection:
    """SQLite 연결 생성 (WAL 모드)

    트랜잭션은 풀에서 BEGIN IMMEDIATE로 직접 관리하므로 autocommit 모드로 연결.

    Args:
        db_path: DB 파일 경로
        busy_timeout_ms: 잠금 대기 시간 (밀리초)

    Returns:
        aiosqlite 연결 객체
    """
    db_path_str = str(db_path)

    # 디렉토리가 없으면 생성
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    conn = await aiosqlite.connect(db_path_str, isolation_level=None)
    conn.row_factory = aiosqlite.Row

    # WAL 모드 설정
    await conn.execute("PRAGMA journal_mode=WAL")

    # 동시 접근 설정
    await conn.execute(f"PRAGMA busy_timeout={int(busy_timeout_ms)}")

    # 외래 키 제약 활성화
    await conn.execute("PRAGMA foreign_keys=ON")

    logger.debug("SQLite 연결 생성", extra={"db_path": db_path_str})

    return conn


class ConnectionPool:
    """SQLite 커넥션 풀

    최대 max_size개의 연결을 지연 생성하여 재사용.
    일시적 끊김으로 실패한 연결은 폐기하고 다음 acquire 시 새로 생성.

    Args:
        db_path: DB 파일 경로
        max_size: 최대 연결 수
        acquire_timeout: 연결 대기 시간 (초)
        busy_timeout_ms: SQLite busy_timeout (밀리초)
        transient_signatures: 일시적 끊김 판별 문자열

    사용 예시:
    ```python
    pool = ConnectionPool(db_path, max_size=5)
    await pool.connect()

    async with pool.transaction() as conn:
        await conn.execute("INSERT INTO ...")

    await pool.close()
    ```
    """

    def __init__(
        self,
        db_path: Path | str,
        max_size: int = Defaults.POOL_MAX_SIZE,
        acquire_timeout: float = Defaults.POOL_ACQUIRE_TIMEOUT_SEC,
        busy_timeout_ms: int = Defaults.BUSY_TIMEOUT_MS,
        transient_signatures: Iterable[str] = Defaults.TRANSIENT_SIGNATURES,
    ):
        if max_size < 1:
            raise ValueError("max_size must be >= 1")

        self.db_path = Path(db_path)
        self.max_size = max_size
        self.acquire_timeout = acquire_timeout
        self.busy_timeout_ms = busy_timeout_ms
        self.transient_signatures = tuple(s.lower() for s in transient_signatures)

        self._idle: asyncio.Queue[aiosqlite.Connection] = asyncio.Queue()
        self._created = 0
        self._lock = asyncio.Lock()
        self._closed = True

    @property
    def is_connected(self) -> bool:
        """연결 상태 확인"""
        return not self._closed

    @property
    def size(self) -> int:
        """현재 생성된 연결 수"""
        return self._created

    async def connect(self) -> None:
        """풀 열기

        첫 연결을 즉시 생성하여 설정 오류를 시작 시점에 노출.
        """
        if not self._closed:
            return

        self._closed = False
        async with self.acquire():
            pass

        logger.info(
            "커넥션 풀 시작",
            extra={"db_path": str(self.db_path), "max_size": self.max_size},
        )

    async def close(self) -> None:
        """풀 종료 (유휴 연결 모두 닫기)

        사용 중인 연결은 반환 시점에 닫힘.
        """
        if self._closed:
            return

        self._closed = True
        while not self._idle.empty():
            conn = self._idle.get_nowait()
            await self._discard(conn)

        logger.info("커넥션 풀 종료")

    async def _open(self) -> aiosqlite.Connection:
        """새 연결 생성 (생성 수 카운트 포함)"""
        self._created += 1
        try:
            return await create_connection(self.db_path, self.busy_timeout_ms)
        except sqlite3.Error as e:
            self._created -= 1
            raise classify_error(e, self.transient_signatures) from e

    async def _discard(self, conn: aiosqlite.Connection) -> None:
        """연결 폐기"""
        self._created -= 1
        try:
            await conn.close()
        except sqlite3.Error as e:
            logger.warning("연결 종료 실패", extra={"error": str(e)})

    async def _get(self) -> aiosqlite.Connection:
        """유휴 연결 반환, 없으면 생성 또는 대기"""
        async with self._lock:
            if self._idle.empty() and self._created < self.max_size:
                return await self._open()

        try:
            return await asyncio.wait_for(self._idle.get(), timeout=self.acquire_timeout)
        except asyncio.TimeoutError as e:
            raise StorageError(
                f"Connection pool exhausted (max_size={self.max_size}, "
                f"timeout={self.acquire_timeout}s)"
            ) from e

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[aiosqlite.Connection]:
        """연결 대여 컨텍스트 매니저

        블록 내 sqlite3.Error는 분류된 저장소 예외로 변환.
        일시적 끊김이면 해당 연결을 폐기.
        """
        if self._closed:
            raise StorageError("Connection pool is closed")

        conn = await self._get()
        broken = False
        try:
            yield conn
        except sqlite3.Error as e:
            error = classify_error(e, self.transient_signatures)
            broken = isinstance(error, TransientStorageError)
            raise error from e
        except TransientStorageError:
            broken = True
            raise
        finally:
            if broken or self._closed:
                await self._discard(conn)
            else:
                self._idle.put_nowait(conn)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """쓰기 트랜잭션 컨텍스트 매니저

        BEGIN IMMEDIATE로 쓰기 잠금을 먼저 확보하여
        조회-검증-삽입 사이에 다른 writer가 끼어들지 않도록 함.
        성공 시 자동 커밋, 예외 시 자동 롤백.

        사용 예시:
        ```python
        async with pool.transaction() as conn:
            await conn.execute("INSERT INTO ...")
            # 성공 시 자동 커밋
        ```
        """
        async with self.acquire() as conn:
            await conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
            except BaseException:
                try:
                    await conn.rollback()
                except sqlite3.Error as rollback_error:
                    logger.warning(
                        "롤백 실패",
                        extra={"error": str(rollback_error)},
                    )
                raise
            await conn.commit()

    async def fetchone(
        self,
        sql: str,
        parameters: tuple[Any, ...] = (),
    ) -> aiosqlite.Row | None:
        """단일 행 조회"""
        async with self.acquire() as conn:
            cursor = await conn.execute(sql, parameters)
            return await cursor.fetchone()

    async def fetchall(
        self,
        sql: str,
        parameters: tuple[Any, ...] = (),
    ) -> list[aiosqlite.Row]:
        """전체 행 조회"""
        async with self.acquire() as conn:
            cursor = await conn.execute(sql, parameters)
            return list(await cursor.fetchall())

    async def ping(self) -> bool:
        """Wake probe (읽기 전용 SELECT 1)

        유휴 상태에서 중단된 DB를 깨우기 위한 사소한 쿼리.
        실패해도 예외를 던지지 않고 False 반환.

        Returns:
            True: 연결 확인 성공
        """
        try:
            row = await self.fetchone("SELECT 1 AS wake_test")
        except StorageError as e:
            logger.warning("DB wake probe 실패", extra={"error": e.message})
            return False

        logger.debug("DB 연결 확인 완료")
        return row is not None

    async def table_exists(self, table_name: str) -> bool:
        """테이블 존재 여부 확인"""
        result = await self.fetchone(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?",
            (table_name,),
        )
        return result is not None

    # -------------------------------------------------------------------------
    # 컨텍스트 매니저
    # -------------------------------------------------------------------------

    async def __aenter__(self) -> "ConnectionPool":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
