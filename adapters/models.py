"""
어댑터 공통 데이터 모델

스토어 서버 API 응답을 표준화한 도메인 모델.
모든 금액/수량은 Decimal 타입 사용.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from core.types import QUALIFYING_PURCHASE_ORDER_STATES
from core.utils.timezone import parse_strict_date, parse_timestamp

_ZERO = Decimal("0")


def to_decimal(value: Any) -> Decimal:
    """느슨한 숫자 값을 Decimal로 변환 (실패 시 0)

    Example:
        >>> to_decimal("1,200.50")
        Decimal('1200.50')
        >>> to_decimal("abc")
        Decimal('0')
    """
    if value is None or isinstance(value, bool):
        return _ZERO

    if isinstance(value, Decimal):
        return value if value.is_finite() else _ZERO

    text = str(value).strip().replace(",", "")
    if not text:
        return _ZERO
    try:
        result = Decimal(text)
    except InvalidOperation:
        return _ZERO
    return result if result.is_finite() else _ZERO


@dataclass(frozen=True)
class PurchaseOrderItem:
    """발주서 품목

    Attributes:
        product_name: 상품명
        quantity: 주문 수량
        unit_price: 단가
        total: 품목 합계 (서버 계산값, 없으면 0)
        tax_amount: 품목 세액 (없으면 0)
    """

    product_name: str
    quantity: Decimal
    unit_price: Decimal
    total: Decimal = _ZERO
    tax_amount: Decimal = _ZERO

    @property
    def line_value(self) -> Decimal:
        """수량 * 단가 + 세액"""
        return self.quantity * self.unit_price + self.tax_amount

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "PurchaseOrderItem":
        """API 응답에서 생성"""
        return cls(
            product_name=str(data.get("product_name") or ""),
            quantity=to_decimal(data.get("quantity")),
            unit_price=to_decimal(data.get("unit_price")),
            total=to_decimal(data.get("total")),
            tax_amount=to_decimal(data.get("tax_amount")),
        )


@dataclass(frozen=True)
class PurchaseOrder:
    """발주서 (거래처 원장 파생 항목의 원천 이벤트)

    Attributes:
        order_id: 발주서 ID
        po_number: 발주 번호
        distributor_id: 거래처 ID
        status: 상태 (pending/confirmed/shipped/received/cancelled)
        total: 헤더 합계
        taxable_value: 과세 금액
        tax_amount: 세액
        items: 품목 목록
        order_date: 발주일 (엄격한 YYYY-MM-DD에서 파싱)
        created_at: 생성 시각
        invoice_number: 거래처 송장 번호
    """

    order_id: str
    po_number: str
    distributor_id: str
    status: str
    total: Decimal = _ZERO
    taxable_value: Decimal = _ZERO
    tax_amount: Decimal = _ZERO
    items: tuple[PurchaseOrderItem, ...] = ()
    order_date: datetime | None = None
    created_at: datetime | None = None
    invoice_number: str | None = None

    @property
    def is_financially_final(self) -> bool:
        """재무적으로 확정된 상태인지 여부 (confirmed/shipped/received)"""
        return self.status.strip().lower() in QUALIFYING_PURCHASE_ORDER_STATES

    @property
    def occurred_at(self) -> datetime | None:
        """원장 거래일시 (발주일 → 생성 시각)"""
        return self.order_date or self.created_at

    def ledger_amount(self) -> Decimal:
        """원장에 기록할 금액 (결정적 fallback 체인)

        1. 과세 금액 + 세액
        2. 헤더 합계
        3. 품목 합계(total)의 합
        4. 품목 수량 * 단가 (+ 세액)의 합
        모두 0이면 0.
        """
        taxed = self.taxable_value + self.tax_amount
        if taxed > _ZERO:
            return taxed

        if self.total > _ZERO:
            return self.total

        item_totals = sum((item.total for item in self.items), _ZERO)
        if item_totals > _ZERO:
            return item_totals

        line_values = sum((item.line_value for item in self.items), _ZERO)
        if line_values > _ZERO:
            return line_values

        return _ZERO

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "PurchaseOrder":
        """API 응답에서 생성

        Raises:
            ValueError: id 또는 distributor_id가 없는 경우
        """
        order_id = data.get("id")
        distributor_id = data.get("distributor_id")
        if order_id is None or str(order_id).strip() == "":
            raise ValueError("purchase order id is required")
        if distributor_id is None or str(distributor_id).strip() == "":
            raise ValueError("purchase order distributor_id is required")

        header_total = _ZERO
        for total_field in ("total", "grand_total", "total_amount"):
            header_total = to_decimal(data.get(total_field))
            if header_total > _ZERO:
                break

        items = tuple(
            PurchaseOrderItem.from_api(item)
            for item in (data.get("items") or [])
            if isinstance(item, dict)
        )

        invoice_number = data.get("invoice_number")

        return cls(
            order_id=str(order_id).strip(),
            po_number=str(data.get("po_number") or ""),
            distributor_id=str(distributor_id).strip(),
            status=str(data.get("status") or ""),
            total=header_total,
            taxable_value=to_decimal(data.get("taxable_value")),
            tax_amount=to_decimal(data.get("tax_amount")),
            items=items,
            order_date=parse_strict_date(data.get("order_date")),
            created_at=parse_timestamp(data.get("created_at")),
            invoice_number=str(invoice_number) if invoice_number else None,
        )


@dataclass(frozen=True)
class Customer:
    """고객 (외상 원장 계정)

    Attributes:
        customer_id: 사용자 ID
        name: 이름
        role: 역할 (admin은 고객 아님)
        credit_limit: 외상 한도 (0이면 무제한)
    """

    customer_id: str
    name: str
    role: str = "customer"
    credit_limit: Decimal = _ZERO

    @property
    def is_customer(self) -> bool:
        """관리자가 아닌 사용자인지 여부"""
        return self.role != "admin"

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Customer":
        """API 응답에서 생성"""
        return cls(
            customer_id=str(data["id"]),
            name=str(data.get("name") or ""),
            role=str(data.get("role") or "customer"),
            credit_limit=to_decimal(data.get("credit_limit")),
        )

