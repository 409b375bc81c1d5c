"""
Ledger 저장소

거래 상대방 계정, 프로젝트, 거래(Ledger entry)의 저장 및 조회.
거래 내역이 유일한 원천 데이터이며, 계정 잔액은 BalanceAggregator가 재계산.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any

import aiosqlite

from core.errors import NotFoundError, ValidationError
from core.ledger.balance import BalanceAggregator
from core.ledger.models import Account, NewTransaction, Project, Transaction
from core.ledger.types import AccountType, ProjectStatus, TransactionType
from core.utils.money import from_minor, parse_amount, to_minor
from core.utils.timezone import format_db_ts, now_utc, parse_db_ts

if TYPE_CHECKING:
    from adapters.db.pool import ConnectionPool

logger = logging.getLogger(__name__)


_TX_COLUMNS = """
    id, account_id, project_id, parent_id, type, amount_minor,
    description, transaction_date, idempotency_key, created_at
"""

_ACCOUNT_COLUMNS = """
    id, name, phone, email, address, account_type,
    total_debt_minor, total_credit_minor, balance_minor, created_at, updated_at
"""

_PROJECT_COLUMNS = """
    id, name, description, client_name, project_type, status,
    total_amount_minor, created_at, updated_at
"""

# update_account로 변경 가능한 필드
ACCOUNT_MUTABLE_FIELDS = ("name", "phone", "email", "address", "account_type")

# update_project로 변경 가능한 필드
PROJECT_MUTABLE_FIELDS = (
    "name", "description", "client_name", "project_type", "status", "total_amount",
)


def _parse_enum(enum_cls: type, value: Any, label: str) -> Any:
    try:
        return enum_cls(value)
    except ValueError as e:
        valid = [m.value for m in enum_cls]
        raise ValidationError(f"Invalid {label}: {value!r} (valid: {valid})") from e


def _require_text(value: str | None, label: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{label} must not be empty")
    return str(value).strip()


def row_to_transaction(row: aiosqlite.Row) -> Transaction:
    """DB 행 → Transaction"""
    return Transaction(
        id=row["id"],
        type=TransactionType(row["type"]),
        amount=from_minor(row["amount_minor"]),
        description=row["description"],
        transaction_date=parse_db_ts(row["transaction_date"]),
        account_id=row["account_id"],
        project_id=row["project_id"],
        parent_id=row["parent_id"],
        idempotency_key=row["idempotency_key"],
        created_at=row["created_at"],
    )


def row_to_account(row: aiosqlite.Row) -> Account:
    """DB 행 → Account"""
    return Account(
        id=row["id"],
        name=row["name"],
        account_type=AccountType(row["account_type"]),
        phone=row["phone"],
        email=row["email"],
        address=row["address"],
        total_debt=from_minor(row["total_debt_minor"]),
        total_credit=from_minor(row["total_credit_minor"]),
        balance=from_minor(row["balance_minor"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def row_to_project(row: aiosqlite.Row) -> Project:
    """DB 행 → Project"""
    total = row["total_amount_minor"]
    return Project(
        id=row["id"],
        name=row["name"],
        client_name=row["client_name"],
        project_type=row["project_type"],
        status=ProjectStatus(row["status"]),
        description=row["description"],
        total_amount=from_minor(total) if total is not None else None,
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class LedgerStore:
    """Ledger 저장소

    계정 잔액은 거래 변경 시 같은 트랜잭션 안에서 재계산됨.

    Args:
        pool: 커넥션 풀
        aggregator: 잔액 재계산기 (None이면 생성)
    """

    def __init__(self, pool: ConnectionPool, aggregator: BalanceAggregator | None = None):
        self.pool = pool
        self.aggregator = aggregator or BalanceAggregator(pool)

    # =====================================
    # 계정 (Current Account)
    # =====================================

    async def create_account(
        self,
        name: str,
        account_type: AccountType | str,
        phone: str | None = None,
        email: str | None = None,
        address: str | None = None,
    ) -> Account:
        """계정 생성

        합계/잔액은 0으로 시작하며 입력으로 받지 않음.

        Raises:
            ValidationError: 이름이 비었거나 계정 유형이 잘못된 경우
        """
        name = _require_text(name, "name")
        kind = _parse_enum(AccountType, account_type, "account_type")
        ts = format_db_ts(now_utc())

        async with self.pool.transaction() as conn:
            cursor = await conn.execute(
                """
                INSERT INTO current_account (
                    name, phone, email, address, account_type, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (name, phone, email, address, kind.value, ts, ts),
            )
            account = await self._get_account(conn, cursor.lastrowid)

        logger.info(f"Created account: {account.id}", extra={"account_type": kind.value})
        return account

    async def get_account(self, account_id: int) -> Account | None:
        """계정 단건 조회 (없으면 None)"""
        row = await self.pool.fetchone(
            f"SELECT {_ACCOUNT_COLUMNS} FROM current_account WHERE id = ?",
            (account_id,),
        )
        return row_to_account(row) if row else None

    async def require_account(self, account_id: int) -> Account:
        """계정 단건 조회

        Raises:
            NotFoundError: 계정이 없는 경우
        """
        account = await self.get_account(account_id)
        if account is None:
            raise NotFoundError("account", account_id)
        return account

    async def list_accounts(self) -> list[Account]:
        """계정 목록 (이름순)"""
        rows = await self.pool.fetchall(
            f"SELECT {_ACCOUNT_COLUMNS} FROM current_account ORDER BY name, id"
        )
        return [row_to_account(row) for row in rows]

    async def update_account(self, account_id: int, **changes: Any) -> Account:
        """계정 정보 수정

        연락처/이름/유형만 수정 가능. 합계/잔액은 재계산으로만 변경.

        Raises:
            ValidationError: 수정 불가 필드 또는 잘못된 값
            NotFoundError: 계정이 없는 경우
        """
        unknown = set(changes) - set(ACCOUNT_MUTABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Fields cannot be updated: {sorted(unknown)}")

        if "name" in changes:
            changes["name"] = _require_text(changes["name"], "name")
        if "account_type" in changes:
            changes["account_type"] = _parse_enum(
                AccountType, changes["account_type"], "account_type"
            ).value

        async with self.pool.transaction() as conn:
            if changes:
                assignments = ", ".join(f"{field} = ?" for field in changes)
                cursor = await conn.execute(
                    f"UPDATE current_account SET {assignments}, updated_at = ? WHERE id = ?",
                    (*changes.values(), format_db_ts(now_utc()), account_id),
                )
                if cursor.rowcount == 0:
                    raise NotFoundError("account", account_id)
            return await self._get_account(conn, account_id)

    async def delete_account(self, account_id: int) -> None:
        """계정 삭제

        Raises:
            NotFoundError: 계정이 없는 경우
            ValidationError: 계정을 참조하는 거래가 남아 있는 경우
        """
        async with self.pool.transaction() as conn:
            await self._get_account(conn, account_id)

            cursor = await conn.execute(
                "SELECT COUNT(*) FROM account_transaction WHERE account_id = ?",
                (account_id,),
            )
            (count,) = await cursor.fetchone()
            if count:
                raise ValidationError(
                    f"Account {account_id} still has {count} transaction(s)"
                )

            await conn.execute("DELETE FROM current_account WHERE id = ?", (account_id,))

        logger.info(f"Deleted account: {account_id}")

    async def _get_account(self, conn: aiosqlite.Connection, account_id: int) -> Account:
        cursor = await conn.execute(
            f"SELECT {_ACCOUNT_COLUMNS} FROM current_account WHERE id = ?",
            (account_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            raise NotFoundError("account", account_id)
        return row_to_account(row)

    # =====================================
    # 프로젝트
    # =====================================

    async def create_project(
        self,
        name: str,
        client_name: str,
        project_type: str,
        status: ProjectStatus | str = ProjectStatus.PLANNED,
        description: str | None = None,
        total_amount: Decimal | str | None = None,
    ) -> Project:
        """프로젝트 생성

        Raises:
            ValidationError: 필수값 누락, 잘못된 상태/금액
        """
        name = _require_text(name, "name")
        client_name = _require_text(client_name, "client_name")
        project_type = _require_text(project_type, "project_type")
        state = _parse_enum(ProjectStatus, status, "status")
        total_minor = to_minor(parse_amount(total_amount)) if total_amount is not None else None
        ts = format_db_ts(now_utc())

        async with self.pool.transaction() as conn:
            cursor = await conn.execute(
                """
                INSERT INTO project (
                    name, description, client_name, project_type, status,
                    total_amount_minor, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (name, description, client_name, project_type, state.value, total_minor, ts, ts),
            )
            project_id = cursor.lastrowid
            cursor = await conn.execute(
                f"SELECT {_PROJECT_COLUMNS} FROM project WHERE id = ?",
                (project_id,),
            )
            row = await cursor.fetchone()

        logger.info(f"Created project: {project_id}")
        return row_to_project(row)

    async def get_project(self, project_id: int) -> Project | None:
        """프로젝트 단건 조회 (없으면 None)"""
        row = await self.pool.fetchone(
            f"SELECT {_PROJECT_COLUMNS} FROM project WHERE id = ?",
            (project_id,),
        )
        return row_to_project(row) if row else None

    async def list_projects(self) -> list[Project]:
        """프로젝트 목록 (최신순)"""
        rows = await self.pool.fetchall(
            f"SELECT {_PROJECT_COLUMNS} FROM project ORDER BY created_at DESC, id DESC"
        )
        return [row_to_project(row) for row in rows]

    async def update_project(self, project_id: int, **changes: Any) -> Project:
        """프로젝트 정보 수정

        Raises:
            ValidationError: 수정 불가 필드 또는 잘못된 값
            NotFoundError: 프로젝트가 없는 경우
        """
        unknown = set(changes) - set(PROJECT_MUTABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Fields cannot be updated: {sorted(unknown)}")

        columns: dict[str, Any] = {}
        for field, value in changes.items():
            if field in ("name", "client_name", "project_type"):
                columns[field] = _require_text(value, field)
            elif field == "status":
                columns["status"] = _parse_enum(ProjectStatus, value, "status").value
            elif field == "total_amount":
                columns["total_amount_minor"] = (
                    to_minor(parse_amount(value)) if value is not None else None
                )
            else:
                columns[field] = value

        async with self.pool.transaction() as conn:
            if columns:
                assignments = ", ".join(f"{column} = ?" for column in columns)
                cursor = await conn.execute(
                    f"UPDATE project SET {assignments}, updated_at = ? WHERE id = ?",
                    (*columns.values(), format_db_ts(now_utc()), project_id),
                )
                if cursor.rowcount == 0:
                    raise NotFoundError("project", project_id)
            return await self._get_project(conn, project_id)

    async def delete_project(self, project_id: int) -> None:
        """프로젝트 삭제

        Raises:
            NotFoundError: 프로젝트가 없는 경우
            ValidationError: 프로젝트를 참조하는 거래가 남아 있는 경우
        """
        async with self.pool.transaction() as conn:
            await self._get_project(conn, project_id)

            cursor = await conn.execute(
                "SELECT COUNT(*) FROM account_transaction WHERE project_id = ?",
                (project_id,),
            )
            (count,) = await cursor.fetchone()
            if count:
                raise ValidationError(
                    f"Project {project_id} still has {count} transaction(s)"
                )

            await conn.execute("DELETE FROM project WHERE id = ?", (project_id,))

        logger.info(f"Deleted project: {project_id}")

    async def _get_project(self, conn: aiosqlite.Connection, project_id: int) -> Project:
        cursor = await conn.execute(
            f"SELECT {_PROJECT_COLUMNS} FROM project WHERE id = ?",
            (project_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            raise NotFoundError("project", project_id)
        return row_to_project(row)

    # =====================================
    # 거래 (Ledger entry)
    # =====================================

    async def append(
        self,
        new: NewTransaction,
        idempotency_key: str | None = None,
    ) -> Transaction:
        """거래 저장

        하나의 쓰기 트랜잭션 안에서 검증 → 삽입 → 잔액 재계산.
        모든 검증은 삽입 전에 수행.

        Args:
            new: 저장할 거래
            idempotency_key: 재시도 중복 방지 키 (이미 있으면 기존 행 반환)

        Returns:
            저장된 거래 (생성된 id 포함)

        Raises:
            ValidationError: 금액 0 이하, 잘못된 유형, 빈 설명, 초과 정산 등
            NotFoundError: 계정/프로젝트/채무 참조가 없는 경우
        """
        tx_type = _parse_enum(TransactionType, new.type, "type")
        amount = parse_amount(new.amount)
        description = _require_text(new.description, "description")
        if not isinstance(new.transaction_date, (date, datetime)):
            raise ValidationError(f"Invalid transaction_date: {new.transaction_date!r}")
        if new.parent_id is not None and not tx_type.is_settlement:
            raise ValidationError(
                f"Only payment_made/payment_received may reference an obligation, got {tx_type.value}"
            )

        async with self.pool.transaction() as conn:
            if idempotency_key is not None:
                existing = await self._find_by_idempotency_key(conn, idempotency_key)
                if existing is not None:
                    logger.info(
                        f"Idempotent replay: transaction {existing.id}",
                        extra={"idempotency_key": idempotency_key},
                    )
                    return existing

            if new.account_id is not None:
                await self._get_account(conn, new.account_id)

            if new.project_id is not None:
                cursor = await conn.execute("SELECT 1 FROM project WHERE id = ?", (new.project_id,))
                if await cursor.fetchone() is None:
                    raise NotFoundError("project", new.project_id)

            if new.parent_id is not None:
                await self._check_settlement_capacity(conn, new.parent_id, amount)

            cursor = await conn.execute(
                """
                INSERT INTO account_transaction (
                    account_id, project_id, parent_id, type, amount_minor,
                    description, transaction_date, idempotency_key, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    new.account_id,
                    new.project_id,
                    new.parent_id,
                    tx_type.value,
                    to_minor(amount),
                    description,
                    format_db_ts(new.transaction_date),
                    idempotency_key,
                    format_db_ts(now_utc()),
                ),
            )
            tx_id = cursor.lastrowid

            if new.account_id is not None:
                await self.aggregator.recompute(new.account_id, conn)

            transaction = await self._get_transaction(conn, tx_id)

        logger.info(
            f"Saved transaction: {transaction.id}",
            extra={
                "type": tx_type.value,
                "account_id": new.account_id,
                "parent_id": new.parent_id,
            },
        )
        return transaction

    async def _check_settlement_capacity(
        self,
        conn: aiosqlite.Connection,
        parent_id: int,
        amount: Decimal,
    ) -> None:
        """정산 한도 검증 (연결된 정산 합계 + amount ≤ 채무 금액)"""
        parent = await self._get_transaction(conn, parent_id)
        if not parent.is_obligation:
            raise ValidationError(
                f"Transaction {parent_id} is not a debt/credit obligation ({parent.type.value})"
            )

        paid = await self._settled_amount(conn, parent_id)
        remaining = parent.amount - paid
        if amount > remaining:
            raise ValidationError(
                f"Settlement {amount} exceeds remaining {remaining} of obligation {parent_id}"
            )

    async def get_transaction(self, transaction_id: int) -> Transaction | None:
        """거래 단건 조회 (없으면 None)"""
        row = await self.pool.fetchone(
            f"SELECT {_TX_COLUMNS} FROM account_transaction WHERE id = ?",
            (transaction_id,),
        )
        return row_to_transaction(row) if row else None

    async def list_transactions(self, account_id: int | None = None) -> list[Transaction]:
        """거래 목록 (거래일 최신순)

        Args:
            account_id: 계정 ID (None이면 전체)
        """
        sql = f"SELECT {_TX_COLUMNS} FROM account_transaction"
        params: list[Any] = []

        if account_id is not None:
            sql += " WHERE account_id = ?"
            params.append(account_id)

        sql += " ORDER BY transaction_date DESC, id DESC"

        rows = await self.pool.fetchall(sql, tuple(params))
        return [row_to_transaction(row) for row in rows]

    async def list_for_period(
        self,
        start: datetime | None,
        end: datetime | None,
        limit: int | None = None,
    ) -> list[Transaction]:
        """기간 내 거래 목록 (start ≤ transaction_date ≤ end, 최신순)

        Args:
            start: 시작 (None이면 제한 없음)
            end: 종료 (None이면 제한 없음)
            limit: 조회 개수 제한
        """
        sql = f"SELECT {_TX_COLUMNS} FROM account_transaction WHERE 1 = 1"
        params: list[Any] = []

        if start is not None:
            sql += " AND transaction_date >= ?"
            params.append(format_db_ts(start))

        if end is not None:
            sql += " AND transaction_date <= ?"
            params.append(format_db_ts(end))

        sql += " ORDER BY transaction_date DESC, id DESC"

        if limit is not None:
            sql += " LIMIT ?"
            params.append(limit)

        rows = await self.pool.fetchall(sql, tuple(params))
        return [row_to_transaction(row) for row in rows]

    async def list_settlements(self, obligation_id: int) -> list[Transaction]:
        """채무에 연결된 정산 거래 목록 (거래일 순)"""
        rows = await self.pool.fetchall(
            f"""
            SELECT {_TX_COLUMNS} FROM account_transaction
            WHERE parent_id = ?
            ORDER BY transaction_date, id
            """,
            (obligation_id,),
        )
        return [row_to_transaction(row) for row in rows]

    async def delete_transaction(self, transaction_id: int) -> Transaction:
        """거래 삭제

        계정이 있으면 같은 트랜잭션에서 잔액 재계산.

        Returns:
            삭제된 거래

        Raises:
            NotFoundError: 거래가 없는 경우
            ValidationError: 연결된 정산이 남아 있는 채무인 경우
        """
        async with self.pool.transaction() as conn:
            transaction = await self._get_transaction(conn, transaction_id)

            cursor = await conn.execute(
                "SELECT COUNT(*) FROM account_transaction WHERE parent_id = ?",
                (transaction_id,),
            )
            (linked,) = await cursor.fetchone()
            if linked:
                raise ValidationError(
                    f"Obligation {transaction_id} has {linked} linked settlement(s); delete them first"
                )

            await conn.execute("DELETE FROM account_transaction WHERE id = ?", (transaction_id,))

            if transaction.account_id is not None:
                await self.aggregator.recompute(transaction.account_id, conn)

        logger.info(
            f"Deleted transaction: {transaction_id}",
            extra={"account_id": transaction.account_id},
        )
        return transaction

    async def settled_amount(self, obligation_id: int) -> Decimal:
        """채무에 연결된 정산 금액 합계"""
        async with self.pool.acquire() as conn:
            return await self._settled_amount(conn, obligation_id)

    async def _settled_amount(self, conn: aiosqlite.Connection, obligation_id: int) -> Decimal:
        cursor = await conn.execute(
            "SELECT COALESCE(SUM(amount_minor), 0) FROM account_transaction WHERE parent_id = ?",
            (obligation_id,),
        )
        (paid_minor,) = await cursor.fetchone()
        return from_minor(paid_minor)

    async def _get_transaction(self, conn: aiosqlite.Connection, transaction_id: int) -> Transaction:
        cursor = await conn.execute(
            f"SELECT {_TX_COLUMNS} FROM account_transaction WHERE id = ?",
            (transaction_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            raise NotFoundError("transaction", transaction_id)
        return row_to_transaction(row)

    async def get_by_idempotency_key(self, idempotency_key: str) -> Transaction | None:
        """멱등 키로 거래 조회 (없으면 None)"""
        async with self.pool.acquire() as conn:
            return await self._find_by_idempotency_key(conn, idempotency_key)

    async def _find_by_idempotency_key(
        self,
        conn: aiosqlite.Connection,
        idempotency_key: str,
    ) -> Transaction | None:
        cursor = await conn.execute(
            f"SELECT {_TX_COLUMNS} FROM account_transaction WHERE idempotency_key = ?",
            (idempotency_key,),
        )
        row = await cursor.fetchone()
        return row_to_transaction(row) if row else None
