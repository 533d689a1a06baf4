"""
Ledger Reconciler

서버 원장, 로컬 Pending 큐, 확정 발주서를 동시에 조회한 뒤
병합 → 잔액 계산 → 요약까지 수행하여 LedgerView 생성.

- 서버 조회 실패(전송 오류, 5xx, 엔드포인트 없음)는 degraded 모드로 처리
- 401(AuthenticationError)만 호출자에게 전파
- 같은 view에 대해 더 새로운 refresh가 시작되면 이전 결과는 폐기 (last-request-wins)
- 서버 조회 성공 시 서버에 반영된 Pending 항목을 큐에서 삭제
"""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from adapters.interfaces import ILedgerApi, IPurchaseOrderSource
from adapters.models import PurchaseOrder
from adapters.store_api.errors import AuthenticationError, StoreApiError
from core.ledger.balance import compute_balances
from core.ledger.entry import LedgerEntry, LedgerProfile
from core.ledger.merger import merge_entries
from core.ledger.normalizer import normalize_many
from core.ledger.projector import project
from core.ledger.summary import LedgerSummary, summarize
from core.ledger.types import EntryOrigin
from core.storage.pending_store import PendingStore
from core.utils.dedup import make_view_key
from engine.reconciler.promotion import PendingPromoter

logger = logging.getLogger(__name__)


@dataclass
class LedgerView:
    """원장 화면 데이터

    Attributes:
        view_key: 화면 키 (예: customer:12, distributor:*)
        entries: 잔액이 기록된 항목 (최신 우선)
        summary: 헤드라인 잔액
        degraded: 서버 또는 발주서 조회 실패로 신뢰도가 낮은 결과인지 여부
        notices: 사용자 표시용 비치명적 안내
        warning_count: 정규화 경고가 있는 항목 수
        promoted: 이번 갱신에서 큐에서 삭제된 Pending 항목 ID
        suppressed_derived: 서버 항목이 있어 억제된 파생 항목 수
    """

    view_key: str
    entries: list[LedgerEntry]
    summary: LedgerSummary
    degraded: bool = False
    notices: list[str] = field(default_factory=list)
    warning_count: int = 0
    promoted: list[str] = field(default_factory=list)
    suppressed_derived: int = 0

    @property
    def pending_count(self) -> int:
        """화면에 포함된 Pending 항목 수"""
        return sum(1 for entry in self.entries if entry.is_pending)


@dataclass
class _RemoteFetch:
    """서버 원장 조회 결과 (실패 시 rows=None)"""

    rows: list[dict[str, Any]] | None
    notice: str | None = None


class LedgerReconciler:
    """Ledger Reconciler

    Args:
        profile: 원장 프로파일 (고객/거래처)
        ledger_api: 원장 API
        pending_store: 로컬 Pending 큐
        purchase_orders: 확정 발주서 소스 (거래처 원장에서만 사용)
        promoter: Pending 승격 판정기 (None이면 기본 window)

    사용 예시:
    ```python
    reconciler = LedgerReconciler(DISTRIBUTOR_PROFILE, api, store, po_api)
    view = await reconciler.refresh("5")
    if view is not None:
        print(view.summary.label, view.summary.value)
    ```
    """

    def __init__(
        self,
        profile: LedgerProfile,
        ledger_api: ILedgerApi,
        pending_store: PendingStore,
        purchase_orders: IPurchaseOrderSource | None = None,
        promoter: PendingPromoter | None = None,
    ):
        self.profile = profile
        self.ledger_api = ledger_api
        self.pending_store = pending_store
        self.purchase_orders = purchase_orders
        self.promoter = promoter or PendingPromoter()

        # view_key → 가장 최근에 발급된 ticket
        self._tickets: dict[str, int] = {}
        self._ticket_seq = 0

        # view_key → 마지막으로 공개된 view
        self._views: dict[str, LedgerView] = {}

    def _issue_ticket(self, view_key: str) -> int:
        self._ticket_seq += 1
        self._tickets[view_key] = self._ticket_seq
        return self._ticket_seq

    def is_current(self, view_key: str, ticket: int) -> bool:
        """ticket이 해당 view의 최신 요청인지 여부"""
        return self._tickets.get(view_key) == ticket

    def latest(self, account_id: str | int | None = None) -> LedgerView | None:
        """마지막으로 공개된 view"""
        key = make_view_key(self.profile.kind.value, _as_key(account_id))
        return self._views.get(key)

    async def refresh(self, account_id: str | int | None = None) -> LedgerView | None:
        """원장 view 갱신

        Args:
            account_id: 계정 ID (None이면 전체 계정)

        Returns:
            새 LedgerView. 처리 중 같은 view에 대한 더 새로운 refresh가 시작되었으면 None.

        Raises:
            AuthenticationError: 서버가 401 응답
        """
        account_key = _as_key(account_id)
        view_key = make_view_key(self.profile.kind.value, account_key)
        ticket = self._issue_ticket(view_key)

        view = await self._build_view(view_key, account_key)

        if not self.is_current(view_key, ticket):
            logger.debug(
                "오래된 원장 응답 폐기",
                extra={"view_key": view_key, "ticket": ticket},
            )
            return None

        self._views[view_key] = view
        return view

    async def _fetch_remote(self, account_id: str | None) -> _RemoteFetch:
        try:
            if account_id is None:
                rows = await self.ledger_api.get_ledger_for_all()
            else:
                rows = await self.ledger_api.get_ledger_history(account_id)
        except AuthenticationError:
            raise
        except StoreApiError as e:
            logger.warning(
                "서버 원장 조회 실패, 로컬 데이터로 대체",
                extra={"profile": self.profile.kind.value, "status": e.status, "error": e.message},
            )
            return _RemoteFetch(
                rows=None,
                notice=f"Server ledger unavailable ({e.message}); showing local and derived entries",
            )
        return _RemoteFetch(rows=rows)

    async def _fetch_orders(
        self,
        account_id: str | None,
    ) -> tuple[list[PurchaseOrder], str | None]:
        if self.purchase_orders is None or not self.profile.uses_derived_entries:
            return [], None

        try:
            orders = await self.purchase_orders.list_confirmed_purchase_orders(account_id)
        except AuthenticationError:
            raise
        except StoreApiError as e:
            logger.warning(
                "발주서 조회 실패, 파생 항목 없이 진행",
                extra={"status": e.status, "error": e.message},
            )
            return [], f"Purchase orders unavailable ({e.message})"
        return orders, None

    async def _build_view(self, view_key: str, account_id: str | None) -> LedgerView:
        remote_fetch, pending, (orders, orders_notice) = await asyncio.gather(
            self._fetch_remote(account_id),
            self.pending_store.list(account_id),
            self._fetch_orders(account_id),
        )

        notices: list[str] = []
        remote: list[LedgerEntry] = []
        warning_count = 0

        if remote_fetch.rows is not None:
            batch = normalize_many(remote_fetch.rows, EntryOrigin.REMOTE, self.profile, account_id)
            remote = _for_account(batch.entries, account_id)
            warning_count += batch.warning_count
        elif remote_fetch.notice:
            notices.append(remote_fetch.notice)

        if orders_notice:
            notices.append(orders_notice)

        existing_ids = {entry.id for entry in remote if entry.server_id}
        derived = _for_account(project(orders, existing_ids, self.profile), account_id)

        remote_ok = remote_fetch.rows is not None
        result = merge_entries(
            remote,
            pending,
            derived,
            self.profile,
            promotion_matcher=self.promoter.find_promotable if remote_ok else None,
        )

        promoted = await self._clear_promoted(result.promotable_pending_ids)

        warning_count += sum(
            1 for entry in result.entries if entry.warnings and entry.origin != EntryOrigin.REMOTE
        )

        annotated = compute_balances(result.entries, self.profile)
        summary = summarize(annotated, self.profile, account_id)

        view = LedgerView(
            view_key=view_key,
            entries=annotated,
            summary=summary,
            degraded=bool(notices),
            notices=notices,
            warning_count=warning_count,
            promoted=promoted,
            suppressed_derived=result.suppressed_derived,
        )

        logger.info(
            "원장 view 생성",
            extra={
                "view_key": view_key,
                "entries": len(annotated),
                "balance": str(summary.value),
                "degraded": view.degraded,
            },
        )
        return view

    async def _clear_promoted(self, entry_ids: Sequence[str]) -> list[str]:
        """승격된 Pending 항목 삭제 (실패해도 view 생성은 계속)"""
        if not entry_ids:
            return []

        try:
            await self.pending_store.clear_many(entry_ids)
        except Exception as e:
            logger.warning(
                f"승격된 Pending 항목 삭제 실패: {e}",
                extra={"entry_ids": list(entry_ids)},
            )
            return []

        return list(entry_ids)


def _as_key(account_id: str | int | None) -> str | None:
    if account_id is None or str(account_id).strip() == "":
        return None
    return str(account_id).strip()


def _for_account(entries: list[LedgerEntry], account_id: str | None) -> list[LedgerEntry]:
    if account_id is None:
        return entries
    return [entry for entry in entries if entry.account_id == account_id]
