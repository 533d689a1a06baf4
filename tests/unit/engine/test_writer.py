"""
LedgerWriter 테스트

서버 기록, 로컬 큐 fallback, 401 처리, 재계산 테스트
"""

from decimal import Decimal

import pytest

from adapters.store_api.errors import AuthenticationError
from core.ledger.entry import CUSTOMER_PROFILE, DISTRIBUTOR_PROFILE
from core.ledger.types import EntryOrigin, LedgerEntryType
from core.types import Actor, WriteStatus
from engine.reconciler.reconciler import LedgerReconciler
from engine.writer.writer import LedgerDraft, LedgerWriter


@pytest.fixture
def customer_writer(customer_api, customer_store) -> LedgerWriter:
    reconciler = LedgerReconciler(CUSTOMER_PROFILE, customer_api, customer_store)
    return LedgerWriter(CUSTOMER_PROFILE, customer_api, customer_store, reconciler)


class TestLedgerDraft:
    """LedgerDraft 검증 테스트"""

    def test_type_synonyms(self) -> None:
        assert LedgerDraft(type="Credit", amount="10").entry_type == LedgerEntryType.GIVEN
        assert LedgerDraft(type="PAYMENT", amount=10).entry_type == LedgerEntryType.PAYMENT

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"type": "refund", "amount": "10"},
            {"type": "given", "amount": "0"},
            {"type": "given", "amount": "-5"},
            {"type": "given", "amount": "abc"},
            {"type": "given", "amount": "10", "transaction_date": "01/03/2026"},
        ],
    )
    def test_invalid(self, kwargs: dict) -> None:
        with pytest.raises(ValueError):
            LedgerDraft(**kwargs)

    def test_payload(self) -> None:
        draft = LedgerDraft(
            type="credit",
            amount="1200.456",
            transaction_date="2026-03-01",
            reference="INV-1",
            actor=Actor.user(7),
        )

        payload = draft.to_payload()

        assert payload["type"] == payload["transaction_type"] == "given"
        assert payload["amount"] == 1200.46
        assert payload["transaction_date"] == payload["transactionDate"] == "2026-03-01"
        assert payload["reference"] == "INV-1"
        assert payload["created_by"] == "7"

    def test_payload_without_date(self) -> None:
        payload = LedgerDraft(type="payment", amount="5", actor=Actor.system("cli")).to_payload()

        assert "transaction_date" not in payload
        assert "created_by" not in payload

    def test_raw_record(self) -> None:
        record = LedgerDraft(type="payment", amount="5").to_raw_record("user_id", "12")

        assert record["user_id"] == "12"
        assert record["amount"] == "5"
        assert "created_at" in record


class TestWrite:
    """write() 테스트"""

    @pytest.mark.asyncio
    async def test_remote_success(self, customer_writer, customer_api, customer_store) -> None:
        """서버 기록 성공 → REMOTE + 재계산된 view"""
        result = await customer_writer.write(
            12, LedgerDraft(type="given", amount="500", transaction_date="2026-03-01")
        )

        assert result.status == WriteStatus.REMOTE
        assert result.degraded is False
        assert result.entry.id == "1001"
        assert result.entry.origin == EntryOrigin.REMOTE
        assert result.entry.amount == Decimal("500")
        assert customer_api.state.write_payloads[0]["type"] == "given"
        assert await customer_store.count() == 0
        assert result.view is not None
        assert result.view.summary.value == Decimal("500")

    @pytest.mark.asyncio
    async def test_server_failure_queues(
        self, customer_writer, customer_api, customer_store
    ) -> None:
        """서버 실패 → 로컬 큐 + QUEUED, view에 Pending 항목 반영"""
        customer_api.fail_next_write(503)

        result = await customer_writer.write(
            "12", LedgerDraft(type="payment", amount="200", transaction_date="2026-03-02")
        )

        assert result.status == WriteStatus.QUEUED
        assert result.degraded is True
        assert result.error == "Mock error"
        assert result.entry.origin == EntryOrigin.LOCAL_PENDING
        assert result.entry.id.startswith("local-")
        assert await customer_store.count() == 1
        assert result.view.pending_count == 1
        assert result.view.summary.value == Decimal("-200")

    @pytest.mark.asyncio
    async def test_identical_queued_writes_both_counted(
        self, customer_writer, customer_api, customer_store
    ) -> None:
        """같은 금액/날짜의 결제를 두 번 큐에 보관하면 둘 다 잔액에 반영"""
        draft = LedgerDraft(type="payment", amount="100", transaction_date="2026-03-01")

        customer_api.fail_next_write(503)
        await customer_writer.write("12", draft)
        customer_api.fail_next_write(503)
        result = await customer_writer.write("12", draft)

        assert await customer_store.count() == 2
        assert result.view.pending_count == 2
        assert len(result.view.entries) == 2
        assert result.view.summary.value == Decimal("-200")

    @pytest.mark.asyncio
    async def test_transport_failure_queues(
        self, customer_writer, customer_api, customer_store
    ) -> None:
        """전송 오류(status 없음)도 큐에 보관"""
        customer_api.fail_next_write(None)

        result = await customer_writer.write("12", LedgerDraft(type="given", amount="1"))

        assert result.status == WriteStatus.QUEUED
        assert await customer_store.count() == 1

    @pytest.mark.asyncio
    async def test_authentication_error_queues_and_raises(
        self, customer_writer, customer_api, customer_store
    ) -> None:
        """401 → 큐에 보관한 뒤 AuthenticationError 재발생"""
        customer_api.fail_next_write(401)

        with pytest.raises(AuthenticationError):
            await customer_writer.write("12", LedgerDraft(type="given", amount="75"))

        pending = await customer_store.list()
        assert len(pending) == 1
        assert pending[0].amount == Decimal("75")

    @pytest.mark.asyncio
    async def test_queued_entry_promoted_later(
        self, customer_writer, customer_api, customer_store
    ) -> None:
        """큐에 보관된 항목이 나중에 서버에 나타나면 다음 refresh에서 삭제"""
        customer_api.fail_next_write(503)
        await customer_writer.write(
            "12", LedgerDraft(type="given", amount="300", transaction_date="2026-03-01")
        )
        customer_api.add_row({
            "id": 55,
            "user_id": 12,
            "type": "given",
            "amount": "300.00",
            "transaction_date": "2026-03-01",
        })

        view = await customer_writer.reconciler.refresh("12")

        assert len(view.promoted) == 1
        assert [e.id for e in view.entries] == ["55"]
        assert view.summary.value == Decimal("300")
        assert await customer_store.count() == 0

    @pytest.mark.asyncio
    async def test_empty_account_rejected(self, customer_writer) -> None:
        with pytest.raises(ValueError):
            await customer_writer.write(" ", LedgerDraft(type="given", amount="1"))

    @pytest.mark.asyncio
    async def test_distributor_write(
        self, distributor_api, distributor_store, order_source
    ) -> None:
        """거래처 결제 기록 후 파생 항목이 억제되고 서버 항목만 남음"""
        reconciler = LedgerReconciler(
            DISTRIBUTOR_PROFILE, distributor_api, distributor_store, order_source
        )
        writer = LedgerWriter(DISTRIBUTOR_PROFILE, distributor_api, distributor_store, reconciler)

        before = await reconciler.refresh(5)
        result = await writer.write(
            5, LedgerDraft(type="payment", amount="200", transaction_date="2026-03-05")
        )

        assert before.summary.value == Decimal("1200")
        assert result.entry.account_id == "5"
        assert distributor_api.state.rows[0]["distributor_id"] == "5"
        assert result.view.summary.value == Decimal("-200")
