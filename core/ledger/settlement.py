"""
정산 엔진 (Settlement Engine)

채무(debt/credit)에 연결된 정산 거래를 생성.
- partial_settle: 잔여 금액 이하의 분할 정산
- settle: 잔여 금액 전체 정산 (partial_settle의 축약형)

채무 행의 type은 절대 변경하지 않음.
잔여 금액은 저장하지 않고 항상 연결된 정산 합계에서 파생.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import Decimal

from core.errors import NotFoundError, ValidationError
from core.ledger.models import NewTransaction, Transaction
from core.ledger.store import LedgerStore
from core.ledger.types import SETTLEMENT_COUNTERPART
from core.utils.money import from_minor, parse_amount
from core.utils.timezone import now_utc

logger = logging.getLogger(__name__)


class SettlementEngine:
    """정산 엔진

    Args:
        store: Ledger 저장소
    """

    def __init__(self, store: LedgerStore):
        self.store = store

    async def _get_obligation(self, obligation_id: int) -> Transaction:
        transaction = await self.store.get_transaction(obligation_id)
        if transaction is None or not transaction.is_obligation:
            raise NotFoundError("obligation", obligation_id)
        return transaction

    async def _replay(self, idempotency_key: str | None) -> Transaction | None:
        """같은 멱등 키로 이미 저장된 정산 (재시도 시 잔여 금액 재검사 방지)"""
        if idempotency_key is None:
            return None
        return await self.store.get_by_idempotency_key(idempotency_key)

    async def remaining(self, obligation_id: int) -> Decimal:
        """채무 잔여 금액 (amount - 연결된 정산 합계)

        Raises:
            NotFoundError: debt/credit 거래가 아닌 경우
        """
        row = await self.store.pool.fetchone(
            "SELECT remaining_minor FROM v_obligation_balance WHERE id = ?",
            (obligation_id,),
        )
        if row is None:
            raise NotFoundError("obligation", obligation_id)
        return from_minor(row["remaining_minor"])

    async def partial_settle(
        self,
        obligation_id: int,
        amount: Decimal | int | float | str,
        description: str,
        settled_at: date | datetime,
        idempotency_key: str | None = None,
    ) -> Transaction:
        """분할 정산

        debt → payment_made, credit → payment_received 거래를 생성하고
        account_id/project_id는 채무에서 복사.

        Args:
            obligation_id: 채무 거래 ID
            amount: 정산 금액 (잔여 금액 이하)
            description: 정산 설명
            settled_at: 정산 일자
            idempotency_key: 재시도 중복 방지 키

        Returns:
            생성된 정산 거래

        Raises:
            NotFoundError: debt/credit 거래가 아닌 경우
            ValidationError: 금액이 잔여 금액을 초과하는 경우
        """
        replay = await self._replay(idempotency_key)
        if replay is not None:
            return replay

        obligation = await self._get_obligation(obligation_id)
        value = parse_amount(amount)

        # 사전 검사 (삽입 트랜잭션 안에서 한 번 더 검증됨)
        remaining = await self.remaining(obligation_id)
        if value > remaining:
            raise ValidationError(
                f"Settlement {value} exceeds remaining {remaining} of obligation {obligation_id}"
            )

        settlement = await self.store.append(
            NewTransaction(
                type=SETTLEMENT_COUNTERPART[obligation.type],
                amount=value,
                description=description,
                transaction_date=settled_at,
                account_id=obligation.account_id,
                project_id=obligation.project_id,
                parent_id=obligation.id,
            ),
            idempotency_key=idempotency_key,
        )

        logger.info(
            f"Partial settle: obligation={obligation_id} amount={value}",
            extra={"settlement_id": settlement.id, "remaining_before": str(remaining)},
        )
        return settlement

    async def settle(
        self,
        obligation_id: int,
        description: str | None = None,
        settled_at: date | datetime | None = None,
        idempotency_key: str | None = None,
    ) -> Transaction | None:
        """잔여 금액 전체 정산

        partial_settle(id, remaining)과 동일.
        이미 전액 정산된 채무이거나 id가 정산 거래면 아무것도 하지 않음.

        Args:
            obligation_id: 채무 거래 ID
            description: 정산 설명 (None이면 채무 설명에서 생성)
            settled_at: 정산 일자 (None이면 현재 UTC)
            idempotency_key: 재시도 중복 방지 키

        Returns:
            생성된 정산 거래 (no-op이면 None)

        Raises:
            NotFoundError: 거래가 없는 경우
        """
        replay = await self._replay(idempotency_key)
        if replay is not None:
            return replay

        transaction = await self.store.get_transaction(obligation_id)
        if transaction is None:
            raise NotFoundError("transaction", obligation_id)

        if transaction.type.is_settlement:
            logger.info(f"Settle skipped: {obligation_id} is already a settlement")
            return None

        remaining = await self.remaining(obligation_id)
        if remaining <= 0:
            logger.info(f"Settle skipped: obligation {obligation_id} fully settled")
            return None

        return await self.partial_settle(
            obligation_id,
            remaining,
            description or f"Settlement: {transaction.description}",
            settled_at or now_utc(),
            idempotency_key=idempotency_key,
        )
