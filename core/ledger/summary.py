"""
원장 요약 집계

- summarize: 단일 계정 잔액 또는 전체 계정 잔액 합계
- compute_aging: 외상(GIVEN) 금액의 경과일 구간별 집계
- check_credit_limit: 외상 한도 검사
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal

from core.ledger.balance import group_by_account, latest_balances
from core.ledger.entry import CUSTOMER_PROFILE, LedgerEntry, LedgerProfile
from core.ledger.types import LedgerEntryType
from core.utils.timezone import now_utc

_ZERO = Decimal("0")

# 경과일 구간 (라벨, 최대일). 경과 시간이 최대일 이하면 해당 구간, None은 상한 없음
AGING_BUCKETS: tuple[tuple[str, int | None], ...] = (
    ("0-30", 30),
    ("31-60", 60),
    ("61-90", 90),
    ("90+", None),
)


@dataclass(frozen=True)
class LedgerSummary:
    """원장 요약 (헤드라인 잔액)

    Attributes:
        label: 표시 라벨
        value: 잔액
        account_id: 단일 계정 요약이면 계정 ID, 전체 요약이면 None
    """

    label: str
    value: Decimal
    account_id: str | None = None


def summarize(
    entries: Iterable[LedgerEntry],
    profile: LedgerProfile = CUSTOMER_PROFILE,
    account_id: str | int | None = None,
) -> LedgerSummary:
    """요약 잔액 계산

    Args:
        entries: compute_balances()로 잔액이 기록된 항목
        profile: 원장 프로파일 (라벨)
        account_id: 지정 시 해당 계정의 최종 잔액, 미지정 시 계정별 최종 잔액의 합

    Returns:
        LedgerSummary

    Example:
        >>> summarize(annotated, account_id="12").value
        Decimal('400')
    """
    balances = latest_balances(entries)

    if account_id is not None:
        key = str(account_id)
        return LedgerSummary(
            label=profile.account_label,
            value=balances.get(key, _ZERO),
            account_id=key,
        )

    total = sum(balances.values(), _ZERO)
    return LedgerSummary(label=profile.total_label, value=total)


@dataclass
class AgingRow:
    """계정별 경과일 구간 금액"""

    account_id: str
    buckets: dict[str, Decimal] = field(
        default_factory=lambda: {label: _ZERO for label, _ in AGING_BUCKETS}
    )

    @property
    def total(self) -> Decimal:
        return sum(self.buckets.values(), _ZERO)


@dataclass
class AgingReport:
    """경과일 분석 결과

    Attributes:
        as_of: 기준 시각
        rows: 계정별 구간 금액 (계정 ID 순)
        totals: 전체 구간 합계
    """

    as_of: datetime
    rows: list[AgingRow] = field(default_factory=list)
    totals: dict[str, Decimal] = field(
        default_factory=lambda: {label: _ZERO for label, _ in AGING_BUCKETS}
    )

    @property
    def grand_total(self) -> Decimal:
        return sum(self.totals.values(), _ZERO)


def bucket_for_age(age: timedelta) -> str:
    """경과 시간에 해당하는 구간 라벨

    일 단위로 내림하지 않음. 30일 12시간은 31-60 구간.

    Example:
        >>> bucket_for_age(timedelta(days=30, hours=12))
        '31-60'
    """
    for label, max_days in AGING_BUCKETS:
        if max_days is None or age <= timedelta(days=max_days):
            return label
    return AGING_BUCKETS[-1][0]


def compute_aging(
    entries: Iterable[LedgerEntry],
    as_of: datetime | None = None,
) -> AgingReport:
    """외상(GIVEN) 금액 경과일 분석

    날짜가 유효하지 않은 항목은 제외. 결제(PAYMENT)는 구간 집계 대상 아님.

    Args:
        entries: 원장 항목
        as_of: 기준 시각 (None이면 현재)

    Returns:
        AgingReport
    """
    report = AgingReport(as_of=as_of or now_utc())

    for account_id, group in sorted(group_by_account(entries).items()):
        row = AgingRow(account_id=account_id)
        has_amount = False

        for entry in group:
            if entry.type != LedgerEntryType.GIVEN or not entry.date_valid:
                continue
            label = bucket_for_age(report.as_of - entry.occurred_at)
            row.buckets[label] += entry.amount
            report.totals[label] += entry.amount
            has_amount = True

        if has_amount:
            report.rows.append(row)

    return report


@dataclass(frozen=True)
class CreditLimitCheck:
    """외상 한도 검사 결과

    Attributes:
        allowed: 허용 여부
        current_balance: 현재 잔액
        projected_balance: 추가 후 예상 잔액
        credit_limit: 한도 (0 이하면 무제한)
    """

    allowed: bool
    current_balance: Decimal
    projected_balance: Decimal
    credit_limit: Decimal

    @property
    def available(self) -> Decimal | None:
        """남은 한도 (무제한이면 None)"""
        if self.credit_limit <= _ZERO:
            return None
        return self.credit_limit - self.current_balance


def check_credit_limit(
    current_balance: Decimal,
    additional_amount: Decimal,
    credit_limit: Decimal,
) -> CreditLimitCheck:
    """외상 한도 검사

    한도가 0 이하이면 무제한으로 간주하여 항상 허용.

    Example:
        >>> check_credit_limit(Decimal("800"), Decimal("300"), Decimal("1000")).allowed
        False
    """
    projected = current_balance + abs(additional_amount)
    allowed = credit_limit <= _ZERO or projected <= credit_limit

    return CreditLimitCheck(
        allowed=allowed,
        current_balance=current_balance,
        projected_balance=projected,
        credit_limit=credit_limit,
    )
