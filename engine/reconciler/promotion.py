"""
Pending Promoter

로컬 Pending 항목과 서버 항목을 비교하여
서버에 이미 반영된 Pending 항목(승격 대상)을 찾음.

매칭 규칙:
- 같은 계정, 같은 유형, 같은 금액
- 참조(reference)가 양쪽 모두 있으면 같아야 함
- 거래일 차이가 window_days 이내
- 서버 항목 하나는 최대 하나의 Pending 항목만 승격
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import timedelta

from core.constants import Defaults
from core.ledger.entry import LedgerEntry, chronological_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PromotionMatch:
    """승격 매칭 정보"""

    pending_id: str
    remote_id: str
    account_id: str


class PendingPromoter:
    """Pending 항목 승격 판정기

    Args:
        window_days: 거래일 허용 차이 (일)
    """

    def __init__(self, window_days: int = Defaults.PROMOTION_WINDOW_DAYS):
        self.window = timedelta(days=window_days)

    def is_match(self, remote: LedgerEntry, pending: LedgerEntry) -> bool:
        """서버 항목이 Pending 항목과 같은 거래인지 판정"""
        if remote.account_id != pending.account_id:
            return False
        if remote.type != pending.type or remote.amount != pending.amount:
            return False

        if remote.reference and pending.reference and remote.reference != pending.reference:
            return False

        # 날짜가 유효하지 않은 쪽이 있으면 날짜 비교 불가
        if not remote.date_valid or not pending.date_valid:
            return False

        return abs(remote.occurred_at - pending.occurred_at) <= self.window

    def find_matches(
        self,
        remote: Sequence[LedgerEntry],
        pending: Sequence[LedgerEntry],
    ) -> list[PromotionMatch]:
        """승격 매칭 목록

        Pending 항목을 오래된 순서로 처리하며,
        각 Pending 항목은 아직 사용되지 않은 가장 가까운 날짜의 서버 항목과 매칭.
        """
        matches: list[PromotionMatch] = []
        used_remote: set[int] = set()

        for candidate in sorted(pending, key=chronological_key):
            best_index: int | None = None
            best_gap: timedelta | None = None

            for index, entry in enumerate(remote):
                if index in used_remote or not self.is_match(entry, candidate):
                    continue
                gap = abs(entry.occurred_at - candidate.occurred_at)
                if best_gap is None or gap < best_gap:
                    best_index, best_gap = index, gap

            if best_index is None:
                continue

            used_remote.add(best_index)
            matches.append(
                PromotionMatch(
                    pending_id=candidate.id,
                    remote_id=remote[best_index].id,
                    account_id=candidate.account_id,
                )
            )

        if matches:
            logger.info(
                f"서버에 반영된 Pending 항목 {len(matches)}건 발견",
                extra={"pending_ids": [m.pending_id for m in matches]},
            )

        return matches

    def find_promotable(
        self,
        remote: Sequence[LedgerEntry],
        pending: Sequence[LedgerEntry],
    ) -> set[str]:
        """승격 대상 Pending 항목 ID (merge_entries의 promotion_matcher로 사용)"""
        return {match.pending_id for match in self.find_matches(remote, pending)}
