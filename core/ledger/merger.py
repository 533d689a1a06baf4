"""
원장 병합 / 중복 제거

서버(remote), 로컬 Pending, 파생(derived) 항목을 하나의 집합으로 병합.

정책 (계정 단위):
- 해당 계정에 서버 항목이 하나라도 있으면: remote + pending (파생 항목 억제)
- 서버 항목이 없으면: pending + derived (최선의 재구성)

identity key 충돌 시 우선순위: remote > pending > derived.
같은 소스 안에서는 먼저 나온 항목이 유지됨.
"""

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field

from core.ledger.entry import CUSTOMER_PROFILE, LedgerEntry, LedgerProfile

logger = logging.getLogger(__name__)


# (서버 항목, Pending 항목) → 서버에 반영된 것으로 판단되는 Pending 항목 ID
PromotionMatcher = Callable[[Sequence[LedgerEntry], Sequence[LedgerEntry]], set[str]]


@dataclass
class MergeResult:
    """병합 결과

    Attributes:
        entries: 병합된 항목 (순서 무관, 잔액 미계산)
        promotable_pending_ids: 서버 항목과 일치하여 제외된 Pending 항목 ID
        suppressed_derived: 서버 항목이 있는 계정이라 억제된 파생 항목 수
        duplicates_dropped: identity key 충돌로 제외된 항목 수
    """

    entries: list[LedgerEntry] = field(default_factory=list)
    promotable_pending_ids: list[str] = field(default_factory=list)
    suppressed_derived: int = 0
    duplicates_dropped: int = 0


def _accounts_of(entries: Iterable[LedgerEntry]) -> set[str]:
    return {entry.account_id for entry in entries}


def merge_entries(
    remote: Sequence[LedgerEntry],
    pending: Sequence[LedgerEntry],
    derived: Sequence[LedgerEntry],
    profile: LedgerProfile = CUSTOMER_PROFILE,
    promotion_matcher: PromotionMatcher | None = None,
) -> MergeResult:
    """세 소스의 항목을 병합

    Args:
        remote: 서버 원장 항목
        pending: 로컬 Pending 항목
        derived: 발주서 파생 항목
        profile: 원장 프로파일 (identity key 함수)
        promotion_matcher: 서버에 반영된 Pending 항목을 찾는 함수 (None이면 미사용)

    Returns:
        MergeResult
    """
    result = MergeResult()
    remote_accounts = _accounts_of(remote)

    promotable: set[str] = set()
    if promotion_matcher is not None and remote and pending:
        promotable = promotion_matcher(remote, pending)

    seen: set[str] = set()

    def _add(entry: LedgerEntry) -> None:
        key = profile.identity_key(entry)
        if key in seen:
            result.duplicates_dropped += 1
            return
        seen.add(key)
        result.entries.append(entry)

    # 우선순위 순서대로 추가 (먼저 들어간 key가 이김)
    for entry in remote:
        _add(entry)

    for entry in pending:
        if entry.id in promotable:
            result.promotable_pending_ids.append(entry.id)
            continue
        _add(entry)

    for entry in derived:
        if entry.account_id in remote_accounts:
            result.suppressed_derived += 1
            continue
        _add(entry)

    if result.duplicates_dropped or result.suppressed_derived:
        logger.debug(
            "원장 병합 완료",
            extra={
                "profile": profile.kind.value,
                "entries": len(result.entries),
                "duplicates_dropped": result.duplicates_dropped,
                "suppressed_derived": result.suppressed_derived,
                "promotable": len(result.promotable_pending_ids),
            },
        )

    return result


def merge(
    remote: Sequence[LedgerEntry],
    pending: Sequence[LedgerEntry],
    derived: Sequence[LedgerEntry],
    profile: LedgerProfile = CUSTOMER_PROFILE,
) -> list[LedgerEntry]:
    """병합된 항목만 반환하는 축약형

    Example:
        >>> merged = merge(remote_entries, [], derived_entries)
    """
    return merge_entries(remote, pending, derived, profile).entries
