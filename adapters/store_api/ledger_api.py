"""
원장 API 어댑터

- CustomerLedgerApi: 고객 외상(khata) 원장
  /api/credit/ledger가 없는 구버전 서버는 고객별 credit-history로 fallback
- DistributorLedgerApi: 거래처 원장
  후보 엔드포인트를 순서대로 시도, 처음 404가 아닌 엔드포인트를 캐시
- PurchaseOrderApi: 발주서 조회 (파생 항목 원천)

ILedgerApi / IPurchaseOrderSource Protocol 준수.
응답 행은 정규화하지 않은 원본 dict로 반환 (정규화는 core.ledger.normalizer 담당).
"""

import asyncio
import logging
from collections.abc import Callable, Sequence
from decimal import Decimal
from typing import Any, Awaitable

from adapters.models import Customer, PurchaseOrder, to_decimal
from adapters.store_api.errors import EndpointUnavailableError, StoreApiError
from adapters.store_api.rest_client import StoreApiClient
from core.constants import LedgerEndpoints

logger = logging.getLogger(__name__)

# 목록 응답을 감싸는 것으로 알려진 키
_ROW_CONTAINER_KEYS: tuple[str, ...] = ("entries", "ledger", "transactions", "data")


def as_rows(data: Any) -> list[dict[str, Any]]:
    """목록 응답을 dict 행 목록으로 변환

    배열이면 그대로, {"entries": [...]} 형태면 내부 배열 사용.
    dict가 아닌 원소는 버림.
    """
    if isinstance(data, dict):
        for key in _ROW_CONTAINER_KEYS:
            if isinstance(data.get(key), list):
                data = data[key]
                break
        else:
            return []

    if not isinstance(data, list):
        return []

    return [row for row in data if isinstance(row, dict)]


def _with_account(
    rows: list[dict[str, Any]],
    field_name: str,
    account_id: str | int,
) -> list[dict[str, Any]]:
    """계정 필드가 없는 행에 계정 ID 부여 (원본 행은 변경하지 않음)"""
    tagged = []
    for row in rows:
        if row.get(field_name) in (None, ""):
            row = {**row, field_name: account_id}
        tagged.append(row)
    return tagged


class CustomerLedgerApi:
    """고객 외상 원장 API

    Args:
        client: StoreApiClient
    """

    def __init__(self, client: StoreApiClient):
        self.client = client
        self._ledger_disabled = False

    @property
    def ledger_endpoint_disabled(self) -> bool:
        """/api/credit/ledger가 없는 서버로 판정되었는지 여부"""
        return self._ledger_disabled

    async def list_customers(self) -> list[Customer]:
        """관리자를 제외한 고객 목록"""
        data = await self.client.get(LedgerEndpoints.USERS)
        customers = []
        for row in as_rows(data):
            if row.get("id") is None:
                continue
            customer = Customer.from_api(row)
            if customer.is_customer:
                customers.append(customer)
        return customers

    async def _get_ledger_endpoint(
        self,
        params: dict[str, Any] | None,
    ) -> list[dict[str, Any]] | None:
        """통합 원장 엔드포인트 조회 (없는 서버면 None)"""
        if self._ledger_disabled:
            return None

        try:
            data = await self.client.get(LedgerEndpoints.CUSTOMER_LEDGER, params=params)
        except StoreApiError as e:
            if not e.is_not_found:
                raise
            self._ledger_disabled = True
            logger.warning(
                "통합 원장 엔드포인트 없음, 고객별 이력으로 전환",
                extra={"path": LedgerEndpoints.CUSTOMER_LEDGER},
            )
            return None

        return as_rows(data)

    async def _get_history(self, account_id: str | int) -> list[dict[str, Any]]:
        path = LedgerEndpoints.CUSTOMER_HISTORY.format(id=account_id)
        rows = as_rows(await self.client.get(path))
        return _with_account(rows, "user_id", account_id)

    async def get_ledger_history(self, account_id: str | int) -> list[dict[str, Any]]:
        """단일 고객 원장 조회"""
        rows = await self._get_ledger_endpoint({"user_id": account_id})
        if rows is not None:
            return _with_account(rows, "user_id", account_id)
        return await self._get_history(account_id)

    async def get_ledger_for_all(
        self,
        filters: dict[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        """전체 고객 원장 조회

        fallback 시 고객 목록을 조회한 뒤 고객별 이력을 동시에 조회.
        """
        rows = await self._get_ledger_endpoint(filters)
        if rows is not None:
            return rows

        customers = await self.list_customers()
        histories = await asyncio.gather(
            *(self._get_history(customer.customer_id) for customer in customers)
        )
        return [row for history in histories for row in history]

    async def get_balance(self, account_id: str | int) -> Decimal:
        """고객 외상 잔액 (서버 계산값)"""
        data = await self.client.get(
            LedgerEndpoints.CUSTOMER_BALANCE.format(id=account_id)
        )
        if isinstance(data, dict):
            return to_decimal(data.get("balance"))
        return to_decimal(data)

    async def add_ledger_transaction(
        self,
        account_id: str | int,
        payload: dict[str, Any],
    ) -> dict[str, Any]:
        """고객 외상/결제 등록

        Returns:
            서버가 생성한 원장 행
        """
        data = await self.client.post(
            LedgerEndpoints.CUSTOMER_ADD.format(id=account_id),
            payload,
        )
        return data if isinstance(data, dict) else {}


def normalize_distributor_payload(
    payload: dict[str, Any],
    distributor_id: str | int,
) -> tuple[dict[str, Any], dict[str, Any]]:
    """거래처 원장 등록 본문 생성

    credit은 given으로 변환, transaction_date와 transactionDate를 모두 포함.

    Returns:
        (계정 경로용 본문, 공용 경로용 본문 - distributor_id/user_id 포함)
    """
    raw_type = str(payload.get("type") or payload.get("transaction_type") or "").lower()
    entry_type = "given" if raw_type in ("", "credit") else raw_type

    body = {
        **payload,
        "amount": float(to_decimal(payload.get("amount"))),
        "type": entry_type,
        "transaction_type": entry_type,
    }
    transaction_date = payload.get("transaction_date") or payload.get("transactionDate")
    if transaction_date:
        body["transaction_date"] = transaction_date
        body["transactionDate"] = transaction_date

    shared_body = {
        "distributor_id": distributor_id,
        "user_id": distributor_id,
        **body,
    }
    return body, shared_body


class DistributorLedgerApi:
    """거래처 원장 API

    서버 버전마다 엔드포인트가 달라 후보 목록을 순서대로 시도.
    404가 아닌 응답을 받은 첫 후보를 캐시하고 이후에는 그 경로만 사용.
    모든 후보가 404면 사용 불가로 표시하고 EndpointUnavailableError 발생.
    404가 아닌 에러는 즉시 전파.

    Args:
        client: StoreApiClient
    """

    def __init__(self, client: StoreApiClient):
        self.client = client
        self._unavailable = False
        self._all_endpoint: str | None = None
        self._by_id_endpoint: str | None = None
        self._add_endpoint: str | None = None

    @property
    def unavailable(self) -> bool:
        """모든 후보 엔드포인트가 404였는지 여부"""
        return self._unavailable

    async def _try_candidates(
        self,
        candidates: Sequence[str],
        call: Callable[[str], Awaitable[Any]],
    ) -> tuple[str, Any]:
        """후보 경로를 순서대로 호출

        Returns:
            (성공한 후보 템플릿, 응답)

        Raises:
            EndpointUnavailableError: 모든 후보가 404
            StoreApiError: 404가 아닌 에러
        """
        if self._unavailable:
            raise EndpointUnavailableError()

        for template in candidates:
            try:
                return template, await call(template)
            except StoreApiError as e:
                if not e.is_not_found:
                    raise
                logger.debug("후보 엔드포인트 404", extra={"path": template})

        self._unavailable = True
        logger.warning(
            "거래처 원장 엔드포인트 없음",
            extra={"candidates": list(candidates)},
        )
        raise EndpointUnavailableError()

    async def get_ledger_for_all(
        self,
        filters: dict[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        """전체 거래처 원장 조회"""
        if self._all_endpoint is not None:
            return as_rows(await self.client.get(self._all_endpoint, params=filters))

        template, data = await self._try_candidates(
            LedgerEndpoints.DISTRIBUTOR_LEDGER_ALL,
            lambda path: self.client.get(path, params=filters),
        )
        self._all_endpoint = template
        return as_rows(data)

    async def get_ledger_history(self, account_id: str | int) -> list[dict[str, Any]]:
        """단일 거래처 원장 조회"""
        if self._by_id_endpoint is not None:
            data = await self.client.get(self._by_id_endpoint.format(id=account_id))
        else:
            template, data = await self._try_candidates(
                LedgerEndpoints.DISTRIBUTOR_LEDGER_BY_ID,
                lambda path: self.client.get(path.format(id=account_id)),
            )
            self._by_id_endpoint = template

        return _with_account(as_rows(data), "distributor_id", account_id)

    async def get_balance(self, account_id: str | int) -> Decimal:
        """거래처 미지급 잔액 (서버 계산값)"""
        data = await self.client.get(
            LedgerEndpoints.DISTRIBUTOR_BALANCE.format(id=account_id)
        )
        if isinstance(data, dict):
            return to_decimal(data.get("balance"))
        return to_decimal(data)

    async def add_ledger_transaction(
        self,
        account_id: str | int,
        payload: dict[str, Any],
    ) -> dict[str, Any]:
        """거래처 매입/결제 등록

        공용 경로(/api/distributor-ledger 등)에는 distributor_id가 포함된 본문 전송.
        """
        body, shared_body = normalize_distributor_payload(payload, account_id)

        def _post(template: str) -> Awaitable[Any]:
            path = template.format(id=account_id)
            is_shared = "{id}" not in template
            return self.client.post(path, shared_body if is_shared else body)

        if self._add_endpoint is not None:
            data = await _post(self._add_endpoint)
        else:
            template, data = await self._try_candidates(
                LedgerEndpoints.DISTRIBUTOR_LEDGER_ADD,
                _post,
            )
            self._add_endpoint = template

        return data if isinstance(data, dict) else {}


class PurchaseOrderApi:
    """발주서 API

    IPurchaseOrderSource Protocol 구현.

    Args:
        client: StoreApiClient
    """

    def __init__(self, client: StoreApiClient):
        self.client = client

    async def list_purchase_orders(
        self,
        filters: dict[str, Any] | None = None,
    ) -> list[PurchaseOrder]:
        """발주서 목록 조회 (식별 불가능한 행은 건너뜀)"""
        data = await self.client.get(LedgerEndpoints.PURCHASE_ORDERS, params=filters)

        orders = []
        for row in as_rows(data):
            try:
                orders.append(PurchaseOrder.from_api(row))
            except ValueError as e:
                logger.warning(f"발주서 파싱 실패, 건너뜀: {e}")
        return orders

    async def list_confirmed_purchase_orders(
        self,
        distributor_id: str | int | None = None,
    ) -> list[PurchaseOrder]:
        """재무적으로 확정된 발주서 목록 (confirmed/shipped/received)"""
        filters = {"distributor_id": distributor_id} if distributor_id is not None else None
        orders = await self.list_purchase_orders(filters)
        return [order for order in orders if order.is_financially_final]
