"""
데이터베이스 어댑터

SQLite WAL 모드 커넥션 풀과 일시적 끊김 재시도 래퍼.
"""

from adapters.db.pool import ConnectionPool, classify_error, create_connection
from adapters.db.retry import ResilientExecutor, wake_database

__all__ = [
    "ConnectionPool",
    "ResilientExecutor",
    "classify_error",
    "create_connection",
    "wake_database",
]
