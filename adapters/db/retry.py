"""
Resilient persistence wrapper

유휴 시 자동 중단되는 DB를 대상으로 작업을 재시도.
- 첫 시도 전 wake probe (읽기 전용 SELECT 1)
- TransientStorageError면 지수 백오프 후 재-probe, 작업 전체 재시도
- 그 외 예외 또는 재시도 소진 시 원본 예외를 그대로 전파

변경 작업(mutating)은 이전 시도가 이미 커밋되었을 수 있으므로
idempotency_key가 있을 때만 자동 재시도.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Protocol, TypeVar

from core.constants import Defaults
from core.errors import TransientStorageError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class WakeProbe(Protocol):
    """wake probe를 제공하는 대상 (ConnectionPool)"""

    async def ping(self) -> bool: ...


class ResilientExecutor:
    """DB 작업 재시도 실행기

    Args:
        pool: ping()을 제공하는 커넥션 풀
        max_retries: 최대 시도 횟수 (첫 시도 포함)
        base_delay_ms: 백오프 기본 대기 (밀리초)
        sleep: 대기 함수 (테스트에서 주입)
    """

    def __init__(
        self,
        pool: WakeProbe,
        max_retries: int = Defaults.RETRY_MAX_ATTEMPTS,
        base_delay_ms: int = Defaults.RETRY_BASE_DELAY_MS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.pool = pool
        self.max_retries = max_retries
        self.base_delay_ms = base_delay_ms
        self._sleep = sleep

    def backoff_ms(self, attempt: int, base_delay_ms: int | None = None) -> int:
        """attempt번째 실패 후 대기 시간

        base × 2^(attempt-1): 1000, 2000, 4000, ...
        """
        base = self.base_delay_ms if base_delay_ms is None else base_delay_ms
        return base * 2 ** (attempt - 1)

    async def wrap(
        self,
        operation: Callable[[], Awaitable[T]],
        max_retries: int | None = None,
        base_delay_ms: int | None = None,
        mutating: bool = False,
        idempotency_key: str | None = None,
    ) -> T:
        """작업 실행 (재시도 포함)

        Args:
            operation: 인자 없는 코루틴 함수 (재시도마다 새로 호출)
            max_retries: 최대 시도 횟수 (None이면 기본값)
            base_delay_ms: 백오프 기본 대기 (None이면 기본값)
            mutating: 쓰기 작업 여부
            idempotency_key: 쓰기 작업 재시도 허용 키

        Returns:
            operation 결과

        Raises:
            TransientStorageError: 재시도 소진 (또는 키 없는 쓰기 작업)
            Exception: 일시적 끊김이 아닌 모든 예외는 즉시 전파
        """
        attempts = self.max_retries if max_retries is None else max_retries
        if mutating and idempotency_key is None:
            # 이전 시도의 커밋 여부를 알 수 없으므로 1회만 시도
            attempts = 1

        await self.pool.ping()

        attempt = 1
        while True:
            try:
                return await operation()
            except TransientStorageError as e:
                if attempt >= attempts:
                    logger.error(
                        "DB 재시도 소진",
                        extra={
                            "attempt": attempt,
                            "max_retries": attempts,
                            "mutating": mutating,
                            "error": e.message,
                        },
                    )
                    raise

                delay_ms = self.backoff_ms(attempt, base_delay_ms)
                logger.warning(
                    f"DB retry {attempt}/{attempts} after {delay_ms}ms",
                    extra={"error": e.message, "idempotency_key": idempotency_key},
                )
                await self._sleep(delay_ms / 1000)

                # 재시도 전 DB 깨우기
                await self.pool.ping()
                attempt += 1


async def wake_database(
    pool: WakeProbe,
    attempts: int = 5,
    step_delay_ms: int = 2000,
    max_delay_ms: int = 10000,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> bool:
    """DB 깨우기 (운영 스크립트용)

    ping이 성공할 때까지 최대 attempts회 시도.
    n번째 실패 후 min(step × n, max) 밀리초 대기.

    Returns:
        True: 연결 확인 성공
    """
    for attempt in range(1, attempts + 1):
        if await pool.ping():
            logger.info(f"DB wake 성공 ({attempt}/{attempts})")
            return True

        if attempt < attempts:
            delay_ms = min(step_delay_ms * attempt, max_delay_ms)
            logger.warning(f"DB wake 실패 ({attempt}/{attempts}), {delay_ms}ms 후 재시도")
            await sleep(delay_ms / 1000)

    logger.error(f"DB wake 실패: {attempts}회 시도 모두 실패")
    return False
