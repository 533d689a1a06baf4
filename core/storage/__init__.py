"""
스토리지 모듈

로컬 Pending 원장 큐 등 로컬 상태 저장소 제공
"""

from core.storage.pending_store import PendingStore

__all__ = [
    "PendingStore",
]
