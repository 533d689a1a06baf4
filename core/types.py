"""
타입 정의 모듈

Enum, Dataclass 등 핵심 타입 정의
모든 Enum은 str을 상속하여 문자열 직렬화 가능
"""

from dataclasses import dataclass
from enum import Enum


class LedgerKind(str, Enum):
    """원장 종류 (고객 외상 / 거래처 미지급)"""

    CUSTOMER = "customer"
    DISTRIBUTOR = "distributor"


class PurchaseOrderStatus(str, Enum):
    """발주서 상태"""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    SHIPPED = "shipped"
    RECEIVED = "received"
    CANCELLED = "cancelled"


class WriteStatus(str, Enum):
    """원장 쓰기 결과 상태"""

    REMOTE = "REMOTE"  # 서버에 기록됨
    QUEUED = "QUEUED"  # 서버 실패 → 로컬 Pending 큐에 보관


class ActorKind(str, Enum):
    """행위자 종류"""

    USER = "USER"
    SYSTEM = "SYSTEM"


@dataclass(frozen=True)
class Actor:
    """행위자 (불변)

    원장 항목 작성자를 식별
    """

    kind: str
    id: str

    @classmethod
    def user(cls, user_id: str | int) -> "Actor":
        """사용자 Actor 생성"""
        return cls(kind=ActorKind.USER.value, id=f"user:{user_id}")

    @classmethod
    def system(cls, system_name: str) -> "Actor":
        """시스템 Actor 생성"""
        return cls(kind=ActorKind.SYSTEM.value, id=f"system:{system_name}")

    @property
    def user_id(self) -> str | None:
        """USER Actor의 원래 사용자 ID (없으면 None)"""
        if self.kind != ActorKind.USER.value:
            return None
        return self.id.split(":", 1)[1]


# 재무적으로 확정된 것으로 보는 발주서 상태
QUALIFYING_PURCHASE_ORDER_STATES: frozenset[str] = frozenset({
    PurchaseOrderStatus.CONFIRMED.value,
    PurchaseOrderStatus.SHIPPED.value,
    PurchaseOrderStatus.RECEIVED.value,
})
