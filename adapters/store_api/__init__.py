"""
스토어 서버 API 어댑터

httpx 기반 REST 클라이언트와 원장/발주서 API.
"""

from adapters.store_api.errors import (
    AuthenticationError,
    EndpointUnavailableError,
    StoreApiError,
)
from adapters.store_api.ledger_api import (
    CustomerLedgerApi,
    DistributorLedgerApi,
    PurchaseOrderApi,
)
from adapters.store_api.rest_client import StoreApiClient

__all__ = [
    "StoreApiClient",
    "CustomerLedgerApi",
    "DistributorLedgerApi",
    "PurchaseOrderApi",
    "StoreApiError",
    "AuthenticationError",
    "EndpointUnavailableError",
]
