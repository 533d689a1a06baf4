"""
Identity / Dedup Key 생성 유틸리티

원장 항목 중복 제거를 위한 identity key 및
결정적(deterministic) 항목 ID 생성 함수 제공
"""

import uuid
from datetime import datetime
from decimal import Decimal

# 발주서에서 파생된 항목 ID 접두사
PURCHASE_ORDER_PREFIX: str = "po"

# 로컬 Pending 항목 ID 접두사
LOCAL_ENTRY_PREFIX: str = "local"

# Pending 큐 상태 키 접두사
PENDING_STATE_PREFIX: str = "ledger_pending"

_CENT = Decimal("0.01")


def make_purchase_order_entry_id(order_id: int | str) -> str:
    """발주서 파생 항목의 결정적 ID 생성

    같은 발주서를 여러 번 투영해도 같은 ID가 나오므로 중복이 생기지 않음.

    Args:
        order_id: 발주서 ID

    Returns:
        entry_id: po-{order_id}

    Example:
        >>> make_purchase_order_entry_id(77)
        'po-77'
    """
    if order_id is None or str(order_id).strip() == "":
        raise ValueError("order_id는 비어 있을 수 없습니다")

    return f"{PURCHASE_ORDER_PREFIX}-{str(order_id).strip()}"


def make_local_entry_id() -> str:
    """로컬 Pending 항목 ID 생성

    Returns:
        entry_id: local-{uuid4}
    """
    return f"{LOCAL_ENTRY_PREFIX}-{uuid.uuid4()}"


def is_local_entry_id(entry_id: str) -> bool:
    """로컬에서 생성한 항목 ID인지 확인

    Example:
        >>> is_local_entry_id("local-550e8400-e29b-41d4-a716-446655440000")
        True
        >>> is_local_entry_id("42")
        False
    """
    if not entry_id:
        return False

    return entry_id.startswith(f"{LOCAL_ENTRY_PREFIX}-")


def format_amount_key(amount: Decimal) -> str:
    """금액을 key용 문자열로 정규화 (소수점 2자리)

    Example:
        >>> format_amount_key(Decimal("500"))
        '500.00'
    """
    return format(amount.quantize(_CENT), "f")


def make_id_identity_key(entry_id: str) -> str:
    """서버/소스가 부여한 ID 기반 identity key

    출처(remote/pending/derived)와 무관하게 같은 ID면 같은 key.

    Example:
        >>> make_id_identity_key("po-77")
        'id:po-77'
    """
    return f"id:{entry_id}"


def make_composite_identity_key(
    account_id: str,
    reference: str,
    amount: Decimal,
    occurred_at: datetime,
) -> str:
    """ID가 없는 항목용 복합 identity key

    Args:
        account_id: 계정 ID
        reference: 참조 문자열
        amount: 금액 (절대값)
        occurred_at: 거래일시

    Returns:
        dedup_key: {account_id}:composite:{reference}:{amount}:{occurred_at}

    Example:
        >>> make_composite_identity_key(
        ...     "12", "INV-1", Decimal("500"),
        ...     datetime(2026, 3, 1, tzinfo=timezone.utc),
        ... )
        '12:composite:INV-1:500.00:2026-03-01T00:00:00+00:00'
    """
    return (
        f"{account_id}:composite:{reference.strip()}:"
        f"{format_amount_key(amount)}:{occurred_at.isoformat()}"
    )


def make_pending_state_key(ledger_kind: str) -> str:
    """Pending 큐의 네임스페이스 상태 키

    Example:
        >>> make_pending_state_key("customer")
        'ledger_pending:customer'
    """
    return f"{PENDING_STATE_PREFIX}:{ledger_kind}"


def make_view_key(ledger_kind: str, account_id: str | None = None) -> str:
    """원장 화면(view) 키 - stale 응답 판별용

    Example:
        >>> make_view_key("distributor", "5")
        'distributor:5'
        >>> make_view_key("customer")
        'customer:*'
    """
    return f"{ledger_kind}:{account_id if account_id else '*'}"
