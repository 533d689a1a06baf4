"""
어댑터 레이어

외부 서비스(스토어 서버 API, 로컬 DB)와의 연동을 담당.
Protocol 기반 인터페이스로 Mock 교체 가능.
"""

from adapters.interfaces import (
    ILedgerApi,
    IPurchaseOrderSource,
)
from adapters.models import (
    Customer,
    PurchaseOrder,
    PurchaseOrderItem,
)

__all__ = [
    # Interfaces
    "ILedgerApi",
    "IPurchaseOrderSource",
    # Models
    "Customer",
    "PurchaseOrder",
    "PurchaseOrderItem",
]
