"""
core/types.py 테스트

Enum 직렬화 및 Actor 테스트
"""

import pytest

from core.types import (
    QUALIFYING_PURCHASE_ORDER_STATES,
    Actor,
    ActorKind,
    LedgerKind,
    PurchaseOrderStatus,
    WriteStatus,
)


class TestLedgerKind:
    """LedgerKind 테스트"""

    def test_values(self) -> None:
        assert LedgerKind.CUSTOMER.value == "customer"
        assert LedgerKind.DISTRIBUTOR.value == "distributor"

    def test_from_string(self) -> None:
        assert LedgerKind("distributor") == LedgerKind.DISTRIBUTOR

    def test_string_serialization(self) -> None:
        """str 상속으로 문자열 비교 가능"""
        assert LedgerKind.CUSTOMER == "customer"

    def test_invalid(self) -> None:
        with pytest.raises(ValueError):
            LedgerKind("supplier")


class TestPurchaseOrderStatus:
    """PurchaseOrderStatus 테스트"""

    def test_qualifying_states(self) -> None:
        assert QUALIFYING_PURCHASE_ORDER_STATES == {"confirmed", "shipped", "received"}
        assert PurchaseOrderStatus.PENDING.value not in QUALIFYING_PURCHASE_ORDER_STATES
        assert PurchaseOrderStatus.CANCELLED.value not in QUALIFYING_PURCHASE_ORDER_STATES


class TestWriteStatus:
    def test_values(self) -> None:
        assert WriteStatus.REMOTE.value == "REMOTE"
        assert WriteStatus.QUEUED.value == "QUEUED"


class TestActor:
    """Actor 테스트"""

    def test_user(self) -> None:
        actor = Actor.user(7)

        assert actor.kind == ActorKind.USER.value
        assert actor.id == "user:7"
        assert actor.user_id == "7"

    def test_system(self) -> None:
        actor = Actor.system("cli")

        assert actor.id == "system:cli"
        assert actor.user_id is None

    def test_frozen(self) -> None:
        with pytest.raises(AttributeError):
            Actor.user(1).id = "x"  # type: ignore
