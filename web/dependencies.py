"""
의존성 주입

FastAPI의 Depends를 사용한 의존성 관리.
LedgerService는 lifespan에서 생성되어 app.state에 보관됨.
"""

from fastapi import Header, Request

from core.ledger.service import LedgerService


def get_service(request: Request) -> LedgerService:
    """Ledger 서비스 반환"""
    return request.app.state.ledger_service


def get_idempotency_key(
    idempotency_key: str | None = Header(default=None, alias="Idempotency-Key"),
) -> str | None:
    """Idempotency-Key 헤더 (빈 값은 None)"""
    if idempotency_key is None or not idempotency_key.strip():
        return None
    return idempotency_key.strip()
