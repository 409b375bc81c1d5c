"""
Ledger 예외 정의

검증/조회/저장소 오류를 구분하는 예외 계층.
HTTP 상태 코드 매핑은 web 레이어에서만 수행.
"""


class LedgerError(Exception):
    """Ledger 예외 기본 클래스"""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(LedgerError):
    """입력 검증 실패

    금액 0 이하, 초과 정산, 잘못된 기간 토큰 등.
    항상 쓰기 전에 발생.
    """
    pass


class NotFoundError(LedgerError):
    """참조 대상 없음 (계정/채무/프로젝트)"""

    def __init__(self, kind: str, ref: object):
        self.kind = kind
        self.ref = ref
        super().__init__(f"{kind} not found: {ref}")


class StorageError(LedgerError):
    """저장소 오류 (재시도 대상 아님)"""
    pass


class TransientStorageError(StorageError):
    """일시적 연결 끊김

    유휴 상태에서 DB가 일시 중단된 경우 등.
    Resilient wrapper가 내부적으로 재시도하고, 재시도 소진 시에만 노출.
    """
    pass
