"""
Engine 테스트 픽스처

메모리 DB 기반 PendingStore와 Mock 원장 API 제공.
"""

import pytest
import pytest_asyncio

from adapters.db.sqlite_adapter import MEMORY_DB, SQLiteAdapter, init_schema
from adapters.mock.ledger_api import MockLedgerApi, MockLedgerState, MockPurchaseOrderSource
from core.storage.pending_store import PendingStore
from core.types import LedgerKind


@pytest_asyncio.fixture
async def db():
    """메모리 DB (스키마 초기화 완료)"""
    adapter = SQLiteAdapter(MEMORY_DB)
    await adapter.connect()
    await init_schema(adapter)
    yield adapter
    await adapter.close()


@pytest_asyncio.fixture
async def customer_store(db: SQLiteAdapter) -> PendingStore:
    return PendingStore(db, LedgerKind.CUSTOMER)


@pytest_asyncio.fixture
async def distributor_store(db: SQLiteAdapter) -> PendingStore:
    return PendingStore(db, LedgerKind.DISTRIBUTOR)


@pytest.fixture
def customer_api() -> MockLedgerApi:
    """고객 원장 Mock API (user_id 계정 필드)"""
    return MockLedgerApi()


@pytest.fixture
def distributor_api() -> MockLedgerApi:
    """거래처 원장 Mock API (distributor_id 계정 필드)"""
    return MockLedgerApi(MockLedgerState(account_field="distributor_id"))


@pytest.fixture
def order_source() -> MockPurchaseOrderSource:
    """발주서 Mock 소스 (po 77: 거래처 5, 1200 확정 / po 78: 거래처 6, 500 확정 / po 79: 미확정)"""
    return MockPurchaseOrderSource([
        {
            "id": 77,
            "po_number": "PO-77",
            "distributor_id": 5,
            "status": "confirmed",
            "total": "1200",
            "order_date": "2026-03-01",
        },
        {
            "id": 78,
            "po_number": "PO-78",
            "distributor_id": 6,
            "status": "received",
            "total": "500",
            "order_date": "2026-03-02",
        },
        {
            "id": 79,
            "po_number": "PO-79",
            "distributor_id": 5,
            "status": "pending",
            "total": "999",
            "order_date": "2026-03-03",
        },
    ])
