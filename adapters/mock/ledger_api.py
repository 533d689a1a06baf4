"""
Mock 원장 API

테스트용 Mock 원장/발주서 소스.
ILedgerApi, IPurchaseOrderSource Protocol 준수.
"""

import asyncio
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from adapters.models import PurchaseOrder, to_decimal
from adapters.store_api.errors import AuthenticationError, StoreApiError


@dataclass
class MockLedgerState:
    """Mock 상태 (메모리 내 저장)"""

    # 서버 원장 행
    rows: list[dict[str, Any]] = field(default_factory=list)

    # 계정 필드 이름 (user_id / distributor_id)
    account_field: str = "user_id"

    # 시뮬레이션 옵션
    fail_reads_status: int | None = None  # 설정 시 모든 조회가 해당 상태로 실패
    should_fail_next_write: bool = False
    next_write_error_status: int | None = 503
    read_delay_sec: float = 0.0  # 조회 지연 (stale 응답 테스트용)

    # 호출 기록
    read_calls: int = 0
    write_payloads: list[dict[str, Any]] = field(default_factory=list)

    # ID 카운터
    id_counter: int = 1000


def _raise_for(status: int | None) -> None:
    if status == 401:
        raise AuthenticationError()
    raise StoreApiError(status, "Mock error")


class MockLedgerApi:
    """Mock 원장 API

    사용 예시:
    ```python
    api = MockLedgerApi()
    api.add_row({"id": 1, "user_id": 12, "type": "given", "amount": 500})

    # 쓰기 실패 시뮬레이션
    api.fail_next_write(status=503)
    ```
    """

    def __init__(self, state: MockLedgerState | None = None):
        self.state = state or MockLedgerState()

    # -------------------------------------------------------------------------
    # 상태 조작 메서드 (테스트용)
    # -------------------------------------------------------------------------

    def add_row(self, row: dict[str, Any]) -> None:
        """서버 원장 행 추가"""
        self.state.rows.append(dict(row))

    def fail_reads(self, status: int | None = 503) -> None:
        """이후 모든 조회 실패"""
        self.state.fail_reads_status = status

    def fail_next_write(self, status: int | None = 503) -> None:
        """다음 쓰기 한 번 실패"""
        self.state.should_fail_next_write = True
        self.state.next_write_error_status = status

    # -------------------------------------------------------------------------
    # ILedgerApi 구현
    # -------------------------------------------------------------------------

    async def _read(self) -> None:
        self.state.read_calls += 1
        if self.state.read_delay_sec:
            await asyncio.sleep(self.state.read_delay_sec)
        if self.state.fail_reads_status is not None:
            _raise_for(self.state.fail_reads_status)

    async def get_ledger_history(self, account_id: str | int) -> list[dict[str, Any]]:
        await self._read()
        field_name = self.state.account_field
        return [
            dict(row) for row in self.state.rows
            if str(row.get(field_name)) == str(account_id)
        ]

    async def get_ledger_for_all(
        self,
        filters: dict[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        await self._read()
        return [dict(row) for row in self.state.rows]

    async def get_balance(self, account_id: str | int) -> Decimal:
        rows = await self.get_ledger_history(account_id)
        balance = Decimal("0")
        for row in rows:
            amount = abs(to_decimal(row.get("amount")))
            kind = str(row.get("type") or "").lower()
            balance += -amount if kind == "payment" else amount
        return balance

    async def add_ledger_transaction(
        self,
        account_id: str | int,
        payload: dict[str, Any],
    ) -> dict[str, Any]:
        if self.state.should_fail_next_write:
            self.state.should_fail_next_write = False
            _raise_for(self.state.next_write_error_status)

        self.state.id_counter += 1
        self.state.write_payloads.append(dict(payload))

        row = {
            **payload,
            "id": self.state.id_counter,
            self.state.account_field: account_id,
        }
        self.state.rows.append(row)
        return dict(row)


class MockPurchaseOrderSource:
    """Mock 확정 발주서 소스"""

    def __init__(self, orders: list[PurchaseOrder | dict[str, Any]] | None = None):
        self.orders: list[PurchaseOrder] = [
            order if isinstance(order, PurchaseOrder) else PurchaseOrder.from_api(order)
            for order in (orders or [])
        ]
        self.fail_status: int | None = None

    async def list_confirmed_purchase_orders(
        self,
        distributor_id: str | int | None = None,
    ) -> list[PurchaseOrder]:
        if self.fail_status is not None:
            _raise_for(self.fail_status)

        return [
            order for order in self.orders
            if order.is_financially_final
            and (distributor_id is None or order.distributor_id == str(distributor_id))
        ]
