#!/usr/bin/env python3
"""DB 깨우기 스크립트

유휴 상태에서 중단된 DB를 wake probe로 활성화하고 Ledger 테이블 존재 여부 출력.
성공 시 exit 0, 실패 시 exit 1.

실행 방법:
    python scripts/wake_db.py
"""

import asyncio
import logging
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from adapters.db.pool import ConnectionPool
from adapters.db.retry import wake_database
from core.config.loader import get_settings
from core.errors import StorageError
from core.logging import setup_logging

LEDGER_TABLES = ("current_account", "account_transaction", "project")

logger = logging.getLogger("scripts.wake_db")


async def main() -> int:
    setup_logging("cli")
    db_config = get_settings().database

    pool = ConnectionPool(
        db_config.path,
        max_size=1,
        acquire_timeout=db_config.acquire_timeout_sec,
        busy_timeout_ms=db_config.busy_timeout_ms,
        transient_signatures=db_config.transient_signatures,
    )
    try:
        await pool.connect()
    except StorageError as e:
        logger.error(f"DB 연결 실패: {e.message}")
        return 1

    try:
        if not await wake_database(pool):
            return 1

        print(f"DB Path: {db_config.path}")
        for table in LEDGER_TABLES:
            exists = await pool.table_exists(table)
            print(f"  - {table}: {'ok' if exists else 'missing (start the API to create it)'}")
        return 0
    finally:
        await pool.close()


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
