"""
어댑터 인터페이스 정의

Protocol 기반으로 정의하여 의존성 주입 및 Mock 교체 가능.
모든 구현체는 이 Protocol을 준수해야 함.
"""

from decimal import Decimal
from typing import Any, Protocol, runtime_checkable

from adapters.models import PurchaseOrder


@runtime_checkable
class ILedgerApi(Protocol):
    """원장 API 인터페이스

    고객/거래처 원장 API가 공통으로 구현.
    응답 행은 정규화 전 원본 dict.
    """

    async def get_ledger_history(self, account_id: str | int) -> list[dict[str, Any]]:
        """단일 계정 원장 조회

        Args:
            account_id: 고객 또는 거래처 ID

        Returns:
            원장 행 목록 (계정 필드 포함)
        """
        ...

    async def get_ledger_for_all(
        self,
        filters: dict[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        """전체 계정 원장 조회

        Args:
            filters: 쿼리 필터 (선택)

        Returns:
            원장 행 목록
        """
        ...

    async def get_balance(self, account_id: str | int) -> Decimal:
        """서버 계산 잔액 조회"""
        ...

    async def add_ledger_transaction(
        self,
        account_id: str | int,
        payload: dict[str, Any],
    ) -> dict[str, Any]:
        """원장 거래 등록

        Args:
            account_id: 계정 ID
            payload: type, amount, transaction_date, reference, description

        Returns:
            서버가 생성한 원장 행

        Raises:
            AuthenticationError: 401
            StoreApiError: 그 외 실패
        """
        ...


@runtime_checkable
class IPurchaseOrderSource(Protocol):
    """확정 발주서 소스 인터페이스"""

    async def list_confirmed_purchase_orders(
        self,
        distributor_id: str | int | None = None,
    ) -> list[PurchaseOrder]:
        """재무적으로 확정된 발주서 목록

        Args:
            distributor_id: 거래처 ID (None이면 전체)
        """
        ...
