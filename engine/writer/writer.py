"""
Ledger Writer

원장 거래를 서버에 기록하고, 실패하면 로컬 Pending 큐에 보관.
어느 경로든 성공하면 Reconciler로 view를 다시 계산.

- 401: 항목은 큐에 보관한 뒤 AuthenticationError 재발생 (세션 재설정은 호출자 몫)
- 그 외 서버/전송 오류: 큐에 보관, WriteResult(status=QUEUED, degraded=True)
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from adapters.interfaces import ILedgerApi
from adapters.models import to_decimal
from adapters.store_api.errors import AuthenticationError, StoreApiError
from core.ledger.entry import LedgerEntry, LedgerProfile
from core.ledger.normalizer import normalize
from core.ledger.types import TYPE_SYNONYMS, EntryOrigin, LedgerEntryType
from core.storage.pending_store import PendingStore
from core.types import Actor, WriteStatus
from core.utils.timezone import now_utc, parse_strict_date
from engine.reconciler.reconciler import LedgerReconciler, LedgerView

logger = logging.getLogger(__name__)

_CENT = Decimal("0.01")


@dataclass
class LedgerDraft:
    """원장 거래 등록 요청

    Attributes:
        type: 유형 (given/credit/payment, 대소문자 무시)
        amount: 금액 (양수)
        transaction_date: 거래일 (YYYY-MM-DD, 없으면 서버 기준 오늘)
        reference: 참조
        description: 설명
        actor: 작성자 (선택)

    Raises:
        ValueError: 유형을 알 수 없거나, 금액이 0 이하이거나, 날짜 형식이 잘못된 경우
    """

    type: str
    amount: Decimal | str | int | float
    transaction_date: str | None = None
    reference: str = ""
    description: str = ""
    actor: Actor | None = None
    entry_type: LedgerEntryType = field(init=False)

    def __post_init__(self) -> None:
        """유효성 검증"""
        entry_type = TYPE_SYNONYMS.get(str(self.type).strip().lower())
        if entry_type is None:
            raise ValueError(f"invalid transaction type: {self.type!r}")
        self.entry_type = entry_type

        self.amount = to_decimal(self.amount)
        if self.amount <= 0:
            raise ValueError("amount must be positive")

        if self.transaction_date and parse_strict_date(self.transaction_date) is None:
            raise ValueError(
                f"transaction_date must be YYYY-MM-DD: {self.transaction_date!r}"
            )

    def to_payload(self) -> dict[str, Any]:
        """API 요청 본문

        구버전 서버 호환을 위해 transaction_type, transactionDate도 함께 전송.
        """
        payload: dict[str, Any] = {
            "type": self.entry_type.value,
            "transaction_type": self.entry_type.value,
            "amount": float(self.amount.quantize(_CENT)),
            "reference": self.reference,
            "description": self.description,
        }

        if self.transaction_date:
            payload["transaction_date"] = self.transaction_date
            payload["transactionDate"] = self.transaction_date

        if self.actor is not None and self.actor.user_id is not None:
            payload["created_by"] = self.actor.user_id

        return payload

    def to_raw_record(self, account_field: str, account_id: str) -> dict[str, Any]:
        """Pending 큐 적재용 원본 레코드

        거래일이 없으면 현재 시각을 created_at으로 기록.
        """
        record = self.to_payload()
        record["amount"] = str(self.amount)
        record[account_field] = account_id
        if not self.transaction_date:
            record["created_at"] = now_utc().isoformat()
        return record


@dataclass
class WriteResult:
    """원장 쓰기 결과

    Attributes:
        status: REMOTE(서버 기록) / QUEUED(로컬 큐 보관)
        entry: 기록된 항목
        degraded: 서버에 기록하지 못했는지 여부
        error: 서버 오류 메시지 (QUEUED일 때)
        view: 쓰기 후 재계산된 view (stale이면 None)
    """

    status: WriteStatus
    entry: LedgerEntry
    degraded: bool = False
    error: str | None = None
    view: LedgerView | None = None


class LedgerWriter:
    """Ledger Writer

    Args:
        profile: 원장 프로파일
        ledger_api: 원장 API
        pending_store: 로컬 Pending 큐
        reconciler: 쓰기 후 재계산에 사용할 Reconciler

    사용 예시:
    ```python
    writer = LedgerWriter(CUSTOMER_PROFILE, api, store, reconciler)
    result = await writer.write("12", LedgerDraft(type="payment", amount="200"))
    if result.degraded:
        print("서버 미반영, 로컬 큐에 보관됨")
    ```
    """

    def __init__(
        self,
        profile: LedgerProfile,
        ledger_api: ILedgerApi,
        pending_store: PendingStore,
        reconciler: LedgerReconciler,
    ):
        self.profile = profile
        self.ledger_api = ledger_api
        self.pending_store = pending_store
        self.reconciler = reconciler

    async def _queue(self, account_id: str, draft: LedgerDraft) -> LedgerEntry:
        record = draft.to_raw_record(self.profile.account_fields[0], account_id)
        entry = normalize(record, EntryOrigin.LOCAL_PENDING, self.profile, account_id)
        return await self.pending_store.append(entry)

    async def write(self, account_id: str | int, draft: LedgerDraft) -> WriteResult:
        """원장 거래 기록

        Args:
            account_id: 고객 또는 거래처 ID
            draft: 등록 요청 (생성 시점에 검증됨)

        Returns:
            WriteResult

        Raises:
            AuthenticationError: 서버가 401 응답 (항목은 큐에 보관된 상태)
        """
        account_key = str(account_id).strip()
        if not account_key:
            raise ValueError("account_id is required")

        payload = draft.to_payload()

        try:
            row = await self.ledger_api.add_ledger_transaction(account_key, payload)
        except AuthenticationError:
            queued = await self._queue(account_key, draft)
            logger.warning(
                "원장 쓰기 인증 실패, 로컬 큐에 보관",
                extra={"account_id": account_key, "entry_id": queued.id},
            )
            raise
        except StoreApiError as e:
            queued = await self._queue(account_key, draft)
            logger.warning(
                "원장 쓰기 실패, 로컬 큐에 보관",
                extra={
                    "account_id": account_key,
                    "entry_id": queued.id,
                    "status": e.status,
                    "error": e.message,
                },
            )
            result = WriteResult(
                status=WriteStatus.QUEUED,
                entry=queued,
                degraded=True,
                error=e.message,
            )
        else:
            record = {**draft.to_raw_record(self.profile.account_fields[0], account_key), **(row or {})}
            entry = normalize(record, EntryOrigin.REMOTE, self.profile, account_key)
            logger.info(
                "원장 거래 기록",
                extra={
                    "account_id": account_key,
                    "entry_id": entry.id,
                    "type": entry.type.value,
                    "amount": str(entry.amount),
                },
            )
            result = WriteResult(status=WriteStatus.REMOTE, entry=entry)

        result.view = await self.reconciler.refresh(account_key)
        return result
