"""
잔액 계산기

계정별로 항목을 시간순(오름차순) 정렬한 뒤 누적 잔액을 계산하여
각 항목의 computed_balance에 기록.

표시 순서(최신 우선)는 계산과 무관하며, 계산은 항상 오름차순 순회 결과.
"""

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import replace
from decimal import Decimal

from core.ledger.entry import (
    CUSTOMER_PROFILE,
    LedgerEntry,
    LedgerProfile,
    chronological_key,
)


def group_by_account(entries: Iterable[LedgerEntry]) -> dict[str, list[LedgerEntry]]:
    """계정 ID별로 항목 그룹화 (각 그룹은 시간순 오름차순)"""
    groups: dict[str, list[LedgerEntry]] = defaultdict(list)
    for entry in entries:
        groups[entry.account_id].append(entry)

    for group in groups.values():
        group.sort(key=chronological_key)

    return dict(groups)


def display_sort_key(entry: LedgerEntry) -> tuple:
    """표시용 정렬 키 (reverse=True와 함께 사용)

    유효한 날짜의 항목이 먼저(최신 우선), 날짜가 유효하지 않은 항목은
    그 뒤에 id 내림차순.
    """
    valid_flag, occurred_at, id_key = chronological_key(entry)
    return (1 - valid_flag, occurred_at, id_key)


def compute_balances(
    entries: Iterable[LedgerEntry],
    profile: LedgerProfile = CUSTOMER_PROFILE,
) -> list[LedgerEntry]:
    """누적 잔액 계산

    Args:
        entries: 병합된 항목 (순서 무관)
        profile: 원장 프로파일 (debit 유형)

    Returns:
        computed_balance가 기록된 항목 복사본 (표시 순서: 최신 우선)

    Example:
        >>> annotated = compute_balances([given_500, payment_200, given_100])
        >>> [e.computed_balance for e in reversed(annotated)]
        [Decimal('500'), Decimal('300'), Decimal('400')]
    """
    annotated: list[LedgerEntry] = []

    for group in group_by_account(entries).values():
        running = Decimal("0")
        for entry in group:
            running += profile.signed(entry)
            annotated.append(replace(entry, computed_balance=running))

    annotated.sort(key=display_sort_key, reverse=True)
    return annotated


def latest_balances(entries: Iterable[LedgerEntry]) -> dict[str, Decimal]:
    """계정별 최종 잔액 (오름차순 기준 마지막 항목의 computed_balance)

    computed_balance가 없는 항목은 무시.
    """
    balances: dict[str, Decimal] = {}
    for account_id, group in group_by_account(entries).items():
        for entry in reversed(group):
            if entry.computed_balance is not None:
                balances[account_id] = entry.computed_balance
                break
    return balances
