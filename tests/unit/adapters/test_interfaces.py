"""
Protocol 인터페이스 테스트

Protocol 타입 검증 및 구현 확인.
"""

import pytest

from adapters.interfaces import ILedgerApi, IPurchaseOrderSource
from adapters.mock.ledger_api import MockLedgerApi, MockPurchaseOrderSource
from adapters.store_api.ledger_api import (
    CustomerLedgerApi,
    DistributorLedgerApi,
    PurchaseOrderApi,
)
from adapters.store_api.rest_client import StoreApiClient


class TestILedgerApi:
    """ILedgerApi Protocol 테스트"""

    def test_implementations(self) -> None:
        """Mock/실제 구현체가 Protocol을 구현하는지 확인"""
        client = StoreApiClient("http://store.test")

        assert isinstance(MockLedgerApi(), ILedgerApi)
        assert isinstance(CustomerLedgerApi(client), ILedgerApi)
        assert isinstance(DistributorLedgerApi(client), ILedgerApi)

    def test_protocol_has_required_methods(self) -> None:
        """Protocol에 필수 메서드가 정의되어 있는지 확인"""
        for method in (
            "get_ledger_history",
            "get_ledger_for_all",
            "get_balance",
            "add_ledger_transaction",
        ):
            assert hasattr(ILedgerApi, method)


class TestIPurchaseOrderSource:
    """IPurchaseOrderSource Protocol 테스트"""

    def test_implementations(self) -> None:
        assert isinstance(MockPurchaseOrderSource(), IPurchaseOrderSource)
        assert isinstance(
            PurchaseOrderApi(StoreApiClient("http://store.test")), IPurchaseOrderSource
        )

    def test_ledger_api_is_not_order_source(self) -> None:
        assert not isinstance(MockLedgerApi(), IPurchaseOrderSource)


class TestMockLedgerApi:
    """MockLedgerApi 동작 테스트"""

    @pytest.mark.asyncio
    async def test_history_filters_by_account(self) -> None:
        api = MockLedgerApi()
        api.add_row({"id": 1, "user_id": 12, "type": "given", "amount": 500})
        api.add_row({"id": 2, "user_id": 13, "type": "given", "amount": 100})

        rows = await api.get_ledger_history("12")

        assert [row["id"] for row in rows] == [1]
        assert api.state.read_calls == 1

    @pytest.mark.asyncio
    async def test_balance(self) -> None:
        api = MockLedgerApi()
        api.add_row({"id": 1, "user_id": 12, "type": "given", "amount": 500})
        api.add_row({"id": 2, "user_id": 12, "type": "payment", "amount": "200"})

        assert await api.get_balance(12) == 300

    @pytest.mark.asyncio
    async def test_fail_next_write_once(self) -> None:
        from adapters.store_api.errors import StoreApiError

        api = MockLedgerApi()
        api.fail_next_write(status=503)

        with pytest.raises(StoreApiError):
            await api.add_ledger_transaction(12, {"type": "given", "amount": 1})
        row = await api.add_ledger_transaction(12, {"type": "given", "amount": 1})

        assert row["id"] == 1001
        assert row["user_id"] == 12
        assert len(api.state.write_payloads) == 1

    @pytest.mark.asyncio
    async def test_order_source_filters(self) -> None:
        source = MockPurchaseOrderSource([
            {"id": 1, "distributor_id": 5, "status": "confirmed"},
            {"id": 2, "distributor_id": 6, "status": "confirmed"},
            {"id": 3, "distributor_id": 5, "status": "pending"},
        ])

        orders = await source.list_confirmed_purchase_orders(5)

        assert [order.order_id for order in orders] == ["1"]
