"""
Ledger 스키마 초기화

API/스크립트 시작 시 자동으로 Ledger 테이블과 View 생성.
CREATE IF NOT EXISTS / DROP VIEW IF EXISTS 패턴으로 안전하게 동작.

금액은 최소 단위 정수(amount_minor)로 저장 (SUM 정확도 보장).
"""

import logging
from typing import TYPE_CHECKING

from core.ledger.types import OBLIGATION_TYPES, sql_in

if TYPE_CHECKING:
    from adapters.db.pool import ConnectionPool

logger = logging.getLogger(__name__)


async def init_ledger_schema(pool: "ConnectionPool") -> None:
    """Ledger 스키마 초기화 (테이블 + View)

    이미 존재하는 경우 안전하게 건너뜀 (IF NOT EXISTS).

    Args:
        pool: 연결된 ConnectionPool
    """
    async with pool.transaction() as conn:
        # current_account 테이블 (거래 상대방)
        await conn.execute("""
            CREATE TABLE IF NOT EXISTS current_account (
                id               INTEGER PRIMARY KEY AUTOINCREMENT,
                name             TEXT NOT NULL,
                phone            TEXT,
                email            TEXT,
                address          TEXT,
                account_type     TEXT NOT NULL
                                 CHECK (account_type IN ('customer', 'supplier', 'other')),
                total_debt_minor   INTEGER NOT NULL DEFAULT 0,
                total_credit_minor INTEGER NOT NULL DEFAULT 0,
                balance_minor      INTEGER NOT NULL DEFAULT 0,
                created_at       TEXT NOT NULL DEFAULT (datetime('now')),
                updated_at       TEXT NOT NULL DEFAULT (datetime('now'))
            )
        """)

        # project 테이블
        await conn.execute("""
            CREATE TABLE IF NOT EXISTS project (
                id               INTEGER PRIMARY KEY AUTOINCREMENT,
                name             TEXT NOT NULL,
                description      TEXT,
                client_name      TEXT NOT NULL,
                project_type     TEXT NOT NULL,
                status           TEXT NOT NULL DEFAULT 'planned',
                total_amount_minor INTEGER,
                created_at       TEXT NOT NULL DEFAULT (datetime('now')),
                updated_at       TEXT NOT NULL DEFAULT (datetime('now'))
            )
        """)

        # account_transaction 테이블 (Ledger entry)
        # parent_id: 정산 거래 → 채무 거래 (자기 참조 FK)
        await conn.execute("""
            CREATE TABLE IF NOT EXISTS account_transaction (
                id               INTEGER PRIMARY KEY AUTOINCREMENT,
                account_id       INTEGER REFERENCES current_account(id),
                project_id       INTEGER REFERENCES project(id),
                parent_id        INTEGER REFERENCES account_transaction(id),
                type             TEXT NOT NULL
                                 CHECK (type IN ('debt', 'credit', 'payment_made', 'payment_received')),
                amount_minor     INTEGER NOT NULL CHECK (amount_minor > 0),
                description      TEXT NOT NULL,
                transaction_date TEXT NOT NULL,
                idempotency_key  TEXT UNIQUE,
                created_at       TEXT NOT NULL DEFAULT (datetime('now'))
            )
        """)

        # 인덱스 생성
        await conn.execute("CREATE INDEX IF NOT EXISTS idx_tx_account ON account_transaction(account_id)")
        await conn.execute("CREATE INDEX IF NOT EXISTS idx_tx_parent ON account_transaction(parent_id)")
        await conn.execute("CREATE INDEX IF NOT EXISTS idx_tx_date ON account_transaction(transaction_date)")
        await conn.execute("CREATE INDEX IF NOT EXISTS idx_tx_type ON account_transaction(type)")

        # 채무별 정산 현황 View (v_obligation_balance)
        # remaining은 저장하지 않고 항상 여기서 파생
        await conn.execute("DROP VIEW IF EXISTS v_obligation_balance")
        await conn.execute(f"""
            CREATE VIEW v_obligation_balance AS
            SELECT
                o.id,
                o.type,
                o.amount_minor,
                COALESCE(SUM(s.amount_minor), 0) AS paid_minor,
                o.amount_minor - COALESCE(SUM(s.amount_minor), 0) AS remaining_minor,
                o.description,
                o.transaction_date,
                o.account_id,
                o.project_id
            FROM account_transaction o
            LEFT JOIN account_transaction s ON s.parent_id = o.id
            WHERE o.type IN {sql_in(OBLIGATION_TYPES)}
            GROUP BY o.id
        """)

    logger.info("Ledger 스키마 초기화 완료")
