"""
Resilient persistence wrapper 테스트

실제 대기 없이 sleep을 주입하여 백오프 검증.
"""

from unittest.mock import AsyncMock

import pytest

from adapters.db.retry import ResilientExecutor, wake_database
from core.errors import StorageError, TransientStorageError, ValidationError


@pytest.fixture
def probe() -> AsyncMock:
    """wake probe mock (항상 성공)"""
    pool = AsyncMock()
    pool.ping.return_value = True
    return pool


@pytest.fixture
def sleep() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def executor(probe: AsyncMock, sleep: AsyncMock) -> ResilientExecutor:
    return ResilientExecutor(probe, max_retries=3, base_delay_ms=1000, sleep=sleep)


class TestBackoff:
    """backoff_ms 테스트"""

    def test_exponential(self, executor: ResilientExecutor) -> None:
        assert executor.backoff_ms(1) == 1000
        assert executor.backoff_ms(2) == 2000
        assert executor.backoff_ms(3) == 4000

    def test_custom_base(self, executor: ResilientExecutor) -> None:
        assert executor.backoff_ms(2, base_delay_ms=50) == 100


class TestWrap:
    """wrap 테스트"""

    @pytest.mark.asyncio
    async def test_success_first_attempt(
        self, executor: ResilientExecutor, probe: AsyncMock, sleep: AsyncMock
    ) -> None:
        operation = AsyncMock(return_value="ok")

        assert await executor.wrap(operation) == "ok"

        operation.assert_awaited_once()
        probe.ping.assert_awaited_once()
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_transient_disconnect_retried_once(
        self, executor: ResilientExecutor, probe: AsyncMock, sleep: AsyncMock
    ) -> None:
        """첫 호출이 일시적 끊김 → 1000ms 대기 후 재시도 성공"""
        operation = AsyncMock(side_effect=[TransientStorageError("endpoint is disabled"), "ok"])

        assert await executor.wrap(operation) == "ok"

        assert operation.await_count == 2
        sleep.assert_awaited_once()
        delay_sec = sleep.await_args.args[0]
        assert delay_sec >= 1.0
        # 첫 시도 전 1회 + 재시도 전 1회, 부수효과 없는 읽기 전용 probe
        assert probe.ping.await_count == 2

    @pytest.mark.asyncio
    async def test_delays_grow(
        self, executor: ResilientExecutor, sleep: AsyncMock
    ) -> None:
        operation = AsyncMock(
            side_effect=[
                TransientStorageError("connection terminated"),
                TransientStorageError("connection terminated"),
                "ok",
            ]
        )

        assert await executor.wrap(operation) == "ok"

        assert [c.args[0] for c in sleep.await_args_list] == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_exhausted_raises_original(
        self, executor: ResilientExecutor, sleep: AsyncMock
    ) -> None:
        """재시도 소진 시 마지막 예외 그대로 전파"""
        last = TransientStorageError("endpoint is disabled (3)")
        operation = AsyncMock(
            side_effect=[
                TransientStorageError("endpoint is disabled (1)"),
                TransientStorageError("endpoint is disabled (2)"),
                last,
            ]
        )

        with pytest.raises(TransientStorageError) as exc_info:
            await executor.wrap(operation)

        assert exc_info.value is last
        assert operation.await_count == 3
        assert sleep.await_count == 2

    @pytest.mark.asyncio
    async def test_non_transient_not_retried(
        self, executor: ResilientExecutor, sleep: AsyncMock
    ) -> None:
        operation = AsyncMock(side_effect=StorageError("disk I/O error"))

        with pytest.raises(StorageError):
            await executor.wrap(operation)

        operation.assert_awaited_once()
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_validation_error_not_retried(self, executor: ResilientExecutor) -> None:
        operation = AsyncMock(side_effect=ValidationError("bad amount"))

        with pytest.raises(ValidationError):
            await executor.wrap(operation)

        operation.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_mutating_without_key_single_attempt(
        self, executor: ResilientExecutor, sleep: AsyncMock
    ) -> None:
        """키 없는 쓰기 작업은 재시도하지 않음"""
        operation = AsyncMock(side_effect=[TransientStorageError("connection terminated"), "ok"])

        with pytest.raises(TransientStorageError):
            await executor.wrap(operation, mutating=True)

        operation.assert_awaited_once()
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_mutating_with_key_retried(self, executor: ResilientExecutor) -> None:
        operation = AsyncMock(side_effect=[TransientStorageError("connection terminated"), "ok"])

        result = await executor.wrap(operation, mutating=True, idempotency_key="req-1")

        assert result == "ok"
        assert operation.await_count == 2

    @pytest.mark.asyncio
    async def test_override_max_retries(self, executor: ResilientExecutor) -> None:
        operation = AsyncMock(side_effect=TransientStorageError("database is locked"))

        with pytest.raises(TransientStorageError):
            await executor.wrap(operation, max_retries=1)

        operation.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failed_probe_does_not_abort(
        self, executor: ResilientExecutor, probe: AsyncMock
    ) -> None:
        """probe 실패는 작업 시도를 막지 않음"""
        probe.ping.return_value = False
        operation = AsyncMock(return_value=42)

        assert await executor.wrap(operation) == 42


class TestWakeDatabase:
    """wake_database 테스트"""

    @pytest.mark.asyncio
    async def test_immediate_success(self, probe: AsyncMock, sleep: AsyncMock) -> None:
        assert await wake_database(probe, sleep=sleep) is True

        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_success_after_failures(self, probe: AsyncMock, sleep: AsyncMock) -> None:
        probe.ping.side_effect = [False, False, True]

        assert await wake_database(probe, sleep=sleep) is True

        assert [c.args[0] for c in sleep.await_args_list] == [2.0, 4.0]

    @pytest.mark.asyncio
    async def test_all_attempts_fail(self, probe: AsyncMock, sleep: AsyncMock) -> None:
        probe.ping.return_value = False

        assert await wake_database(probe, attempts=5, sleep=sleep) is False

        assert probe.ping.await_count == 5
        # 대기 시간 상한 10초
        assert [c.args[0] for c in sleep.await_args_list] == [2.0, 4.0, 6.0, 8.0]
