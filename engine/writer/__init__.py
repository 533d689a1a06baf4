"""
Writer 모듈

원장 거래 기록 (서버 실패 시 로컬 Pending 큐 fallback)
"""

from engine.writer.writer import LedgerDraft, LedgerWriter, WriteResult

__all__ = [
    "LedgerDraft",
    "LedgerWriter",
    "WriteResult",
]
