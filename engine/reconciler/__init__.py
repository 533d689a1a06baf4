"""
Reconciler 모듈

서버 원장 + 로컬 Pending + 발주서 파생 항목을 정합하여 원장 view 생성
"""

from engine.reconciler.promotion import PendingPromoter, PromotionMatch
from engine.reconciler.reconciler import LedgerReconciler, LedgerView

__all__ = [
    "LedgerReconciler",
    "LedgerView",
    "PendingPromoter",
    "PromotionMatch",
]
