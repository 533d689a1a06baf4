"""
원장 항목 모델

LedgerEntry(정규화된 원장 항목)와 부호 규칙, 정렬 키,
고객/거래처 원장을 하나의 모듈로 다루기 위한 LedgerProfile 정의.
모든 금액은 Decimal 사용.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Callable

from core.ledger.types import (
    DEFAULT_DEBIT_TYPES,
    EntryOrigin,
    LedgerEntryType,
)
from core.types import LedgerKind
from core.utils.dedup import make_composite_identity_key, make_id_identity_key

# 날짜가 유효하지 않은 항목의 정렬용 고정 시각
_INVALID_DATE_SORT_TS = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class LedgerEntry:
    """정규화된 원장 항목

    Attributes:
        id: 소스 내 고유 ID (파생 항목은 po-{order_id}, 로컬 항목은 local-{uuid})
        account_id: 고객 또는 거래처 ID (문자열)
        type: 항목 유형 (GIVEN/PAYMENT)
        amount: 금액 절대값 (부호는 type에서 결정)
        occurred_at: 거래일시 (UTC)
        date_valid: 날짜 파싱 성공 여부 (False면 정렬 맨 뒤)
        reference: 참조 (잔액 계산에 미사용)
        description: 설명 (잔액 계산에 미사용)
        origin: 출처 (remote/local-pending/derived)
        server_id: id가 소스에서 부여된 안정적인 값인지 여부
        computed_balance: 이 항목 적용 직후의 누적 잔액 (출력 전용)
        warnings: 정규화 경고 코드
        created_by: 작성자 ID (선택)
        raw: 원본 레코드
    """

    id: str
    account_id: str
    type: LedgerEntryType
    amount: Decimal
    occurred_at: datetime
    origin: EntryOrigin
    date_valid: bool = True
    reference: str = ""
    description: str = ""
    server_id: bool = True
    computed_balance: Decimal | None = None
    warnings: tuple[str, ...] = ()
    created_by: str | None = None
    raw: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def is_pending(self) -> bool:
        """로컬 Pending 항목 여부"""
        return self.origin == EntryOrigin.LOCAL_PENDING

    @property
    def is_derived(self) -> bool:
        """파생 항목 여부"""
        return self.origin == EntryOrigin.DERIVED

    def to_dict(self) -> dict[str, Any]:
        """영속화용 딕셔너리 (computed_balance 제외)"""
        return {
            "id": self.id,
            "account_id": self.account_id,
            "type": self.type.value,
            "amount": str(self.amount),
            "occurred_at": self.occurred_at.isoformat(),
            "date_valid": self.date_valid,
            "reference": self.reference,
            "description": self.description,
            "origin": self.origin.value,
            "server_id": self.server_id,
            "warnings": list(self.warnings),
            "created_by": self.created_by,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LedgerEntry":
        """to_dict() 결과에서 복원

        Raises:
            KeyError, ValueError, ArithmeticError: 형식이 잘못된 경우
        """
        occurred_at = datetime.fromisoformat(data["occurred_at"])
        if occurred_at.tzinfo is None:
            occurred_at = occurred_at.replace(tzinfo=timezone.utc)

        return cls(
            id=str(data["id"]),
            account_id=str(data["account_id"]),
            type=LedgerEntryType(data["type"]),
            amount=abs(Decimal(str(data["amount"]))),
            occurred_at=occurred_at,
            origin=EntryOrigin(data.get("origin", EntryOrigin.LOCAL_PENDING.value)),
            date_valid=bool(data.get("date_valid", True)),
            reference=str(data.get("reference") or ""),
            description=str(data.get("description") or ""),
            server_id=bool(data.get("server_id", True)),
            warnings=tuple(data.get("warnings") or ()),
            created_by=data.get("created_by"),
        )


def signed_amount(
    entry: LedgerEntry,
    debit_types: frozenset[LedgerEntryType] = DEFAULT_DEBIT_TYPES,
) -> Decimal:
    """부호 있는 금액

    debit 유형이면 -|amount|, 그 외는 +|amount|.

    Example:
        >>> signed_amount(payment_entry_of_200)
        Decimal('-200')
    """
    amount = abs(entry.amount)
    return -amount if entry.type in debit_types else amount


def entry_identity_key(entry: LedgerEntry) -> str:
    """기본 identity key

    소스가 부여한 안정적인 ID가 있으면 ID 기반,
    없으면 (account_id, reference, amount, occurred_at) 복합 key.
    날짜가 유효하지 않은 항목의 occurred_at은 정규화 시각이므로 고정값으로 대체.
    """
    if entry.server_id and entry.id:
        return make_id_identity_key(entry.id)

    return make_composite_identity_key(
        entry.account_id,
        entry.reference,
        entry.amount,
        entry.occurred_at if entry.date_valid else _INVALID_DATE_SORT_TS,
    )


def _id_sort_key(entry_id: str) -> tuple[int, int, str]:
    """ID 정렬 키 (숫자 ID는 숫자 순서, 그 외는 문자열 순서)"""
    if entry_id.isdigit():
        return (0, int(entry_id), "")
    return (1, 0, entry_id)


def chronological_key(entry: LedgerEntry) -> tuple[int, datetime, tuple[int, int, str]]:
    """시간순 정렬 키 (오름차순)

    (날짜 유효 여부, occurred_at, id). 날짜가 유효하지 않은 항목은
    유효한 항목 뒤에 오며, 그 안에서는 id 순서.
    """
    if entry.date_valid:
        return (0, entry.occurred_at, _id_sort_key(entry.id))
    return (1, _INVALID_DATE_SORT_TS, _id_sort_key(entry.id))


@dataclass(frozen=True)
class LedgerProfile:
    """원장 프로파일

    고객 외상 원장과 거래처 원장의 차이를 파라미터로 표현.
    동일한 병합/잔액 계산 로직을 두 원장에서 공유.

    Attributes:
        kind: 원장 종류
        account_fields: 원본 레코드에서 계정 ID를 찾을 필드 (우선순위 순)
        debit_types: 잔액을 감소시키는 유형
        identity_key: identity key 함수
        account_label: 단일 계정 요약 라벨
        total_label: 전체 계정 요약 라벨
        uses_derived_entries: 발주서 파생 항목 사용 여부
    """

    kind: LedgerKind
    account_fields: tuple[str, ...]
    debit_types: frozenset[LedgerEntryType] = DEFAULT_DEBIT_TYPES
    identity_key: Callable[[LedgerEntry], str] = entry_identity_key
    account_label: str = "Account Balance"
    total_label: str = "Total Balance"
    uses_derived_entries: bool = False

    def signed(self, entry: LedgerEntry) -> Decimal:
        """프로파일의 debit 유형 기준 부호 있는 금액"""
        return signed_amount(entry, self.debit_types)


CUSTOMER_PROFILE = LedgerProfile(
    kind=LedgerKind.CUSTOMER,
    account_fields=("user_id", "customer_id"),
    account_label="Customer Balance",
    total_label="Total Balance (All Customers)",
)

DISTRIBUTOR_PROFILE = LedgerProfile(
    kind=LedgerKind.DISTRIBUTOR,
    account_fields=("distributor_id", "user_id"),
    account_label="Distributor Balance",
    total_label="Total Payable (All Distributors)",
    uses_derived_entries=True,
)


def get_profile(kind: LedgerKind | str) -> LedgerProfile:
    """원장 종류에 해당하는 프로파일 반환

    Raises:
        ValueError: 알 수 없는 원장 종류
    """
    kind = LedgerKind(kind)
    if kind == LedgerKind.CUSTOMER:
        return CUSTOMER_PROFILE
    return DISTRIBUTOR_PROFILE
