"""
파생 항목 Projector

확정된 발주서(confirmed/shipped/received) 스냅샷에서
아직 원장 행이 없는 거래처 매입 항목을 생성.

- 항목 ID: po-{order_id}
- 이미 존재하는 ID는 건너뜀 (서버 항목이 파생 항목을 대체)
- 호출자가 명시적으로 전달한 스냅샷만 사용, 내부 상태 없음
"""

import logging
from collections.abc import Collection, Iterable
from typing import Any

from adapters.models import PurchaseOrder
from core.ledger.entry import DISTRIBUTOR_PROFILE, LedgerEntry, LedgerProfile
from core.ledger.types import EntryOrigin, LedgerEntryType, NormalizationWarning
from core.utils.dedup import make_purchase_order_entry_id
from core.utils.timezone import now_utc

logger = logging.getLogger(__name__)


def _coerce_event(event: PurchaseOrder | dict[str, Any]) -> PurchaseOrder | None:
    """dict 이벤트를 PurchaseOrder로 변환 (식별 불가 시 None)"""
    if isinstance(event, PurchaseOrder):
        return event

    try:
        return PurchaseOrder.from_api(event)
    except (TypeError, ValueError, AttributeError) as e:
        logger.warning(f"발주서 변환 실패, 건너뜀: {e}")
        return None


def project_purchase_order(
    order: PurchaseOrder,
    profile: LedgerProfile = DISTRIBUTOR_PROFILE,
) -> LedgerEntry:
    """단일 발주서를 파생 원장 항목으로 변환

    상태 검사는 하지 않음. 호출자가 is_financially_final 확인.

    Example:
        >>> entry = project_purchase_order(order_77)
        >>> entry.id
        'po-77'
    """
    occurred_at = order.occurred_at
    warnings: tuple[str, ...] = ()
    if occurred_at is None:
        occurred_at = now_utc()
        warnings = (NormalizationWarning.DATE_INVALID.value,)

    return LedgerEntry(
        id=make_purchase_order_entry_id(order.order_id),
        account_id=order.distributor_id,
        type=LedgerEntryType.GIVEN,
        amount=order.ledger_amount(),
        occurred_at=occurred_at,
        origin=EntryOrigin.DERIVED,
        date_valid=not warnings,
        reference=order.po_number,
        description=f"Purchase order {order.po_number}",
        server_id=True,
        warnings=warnings,
        raw={
            "id": make_purchase_order_entry_id(order.order_id),
            profile.account_fields[0]: order.distributor_id,
            "purchase_order_id": order.order_id,
            "invoice_number": order.invoice_number,
        },
    )


def project(
    events: Iterable[PurchaseOrder | dict[str, Any]],
    existing_ids: Collection[str] = (),
    profile: LedgerProfile = DISTRIBUTOR_PROFILE,
) -> list[LedgerEntry]:
    """발주서 스냅샷에서 파생 항목 목록 생성

    Args:
        events: 발주서 스냅샷 (PurchaseOrder 또는 API dict)
        existing_ids: 이미 존재하는 원장 항목 ID (해당 파생 항목은 생성하지 않음)
        profile: 원장 프로파일

    Returns:
        파생 항목 목록 (id 오름차순)
    """
    existing = {str(entry_id) for entry_id in existing_ids}
    derived: dict[str, LedgerEntry] = {}

    for event in events:
        order = _coerce_event(event)
        if order is None or not order.is_financially_final:
            continue

        entry_id = make_purchase_order_entry_id(order.order_id)
        if entry_id in existing or entry_id in derived:
            continue

        derived[entry_id] = project_purchase_order(order, profile)

    if derived:
        logger.debug(
            f"발주서 파생 항목 {len(derived)}건 생성",
            extra={"profile": profile.kind.value},
        )

    return [derived[entry_id] for entry_id in sorted(derived)]
