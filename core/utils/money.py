"""
금액 유틸리티

금액은 Python에서 Decimal(소수점 2자리 이하),
DB에는 최소 단위 정수(amount_minor)로 저장하여 SQL 합계를 정확하게 유지.
"""

from decimal import Decimal, InvalidOperation

from core.errors import ValidationError

# 소수점 자리수 (decimal(12,2))
MINOR_UNITS = 100
CENT = Decimal("0.01")
# decimal(12,2) 최대값 (SQLite INTEGER 범위 안쪽)
MAX_AMOUNT = Decimal("9999999999.99")


def parse_amount(value: Decimal | int | float | str) -> Decimal:
    """입력 금액을 Decimal로 검증/변환

    Args:
        value: 금액 (Decimal, int, float, 문자열)

    Returns:
        소수점 2자리로 정규화된 Decimal

    Raises:
        ValidationError: 숫자가 아니거나, 0 이하, 최대값 초과, 소수점 2자리 초과
    """
    if isinstance(value, float):
        # float는 이진 오차가 있으므로 문자열 경유
        value = str(value)
    try:
        amount = Decimal(value)
    except (InvalidOperation, TypeError, ValueError) as e:
        raise ValidationError(f"Invalid amount: {value!r}") from e

    if not amount.is_finite():
        raise ValidationError(f"Invalid amount: {value!r}")
    if amount <= 0:
        raise ValidationError(f"Amount must be positive: {amount}")
    if amount > MAX_AMOUNT:
        raise ValidationError(f"Amount exceeds maximum {MAX_AMOUNT}: {amount}")

    try:
        normalized = amount.quantize(CENT)
    except InvalidOperation as e:
        raise ValidationError(f"Invalid amount: {value!r}") from e
    if amount != normalized:
        raise ValidationError(f"Amount has more than 2 decimal places: {amount}")

    return normalized


def to_minor(amount: Decimal) -> int:
    """Decimal 금액 → 최소 단위 정수

    Example:
        >>> to_minor(Decimal("12.34"))
        1234
    """
    return int(amount.quantize(CENT) * MINOR_UNITS)


def from_minor(value: int | None) -> Decimal:
    """최소 단위 정수 → Decimal 금액 (None은 0)"""
    return (Decimal(value or 0) / MINOR_UNITS).quantize(CENT)
