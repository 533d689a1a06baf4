"""
원장 정합 (Ledger Reconciliation) 코어

서버 원장, 로컬 Pending 큐, 발주서 파생 항목을 병합하여
계정별 누적 잔액과 요약을 계산하는 순수 로직.

사용 예시:
```python
from core.ledger import (
    DISTRIBUTOR_PROFILE,
    EntryOrigin,
    compute_balances,
    merge,
    normalize_many,
    project,
    summarize,
)

remote = normalize_many(rows, EntryOrigin.REMOTE, DISTRIBUTOR_PROFILE).entries
derived = project(orders, existing_ids={e.id for e in remote})
merged = merge(remote, pending, derived, DISTRIBUTOR_PROFILE)
annotated = compute_balances(merged, DISTRIBUTOR_PROFILE)
summary = summarize(annotated, DISTRIBUTOR_PROFILE, account_id="5")
```
"""

from core.ledger.balance import compute_balances, latest_balances
from core.ledger.entry import (
    CUSTOMER_PROFILE,
    DISTRIBUTOR_PROFILE,
    LedgerEntry,
    LedgerProfile,
    chronological_key,
    entry_identity_key,
    get_profile,
    signed_amount,
)
from core.ledger.merger import MergeResult, merge, merge_entries
from core.ledger.normalizer import NormalizationBatch, normalize, normalize_many
from core.ledger.projector import project
from core.ledger.summary import (
    AgingReport,
    CreditLimitCheck,
    LedgerSummary,
    check_credit_limit,
    compute_aging,
    summarize,
)
from core.ledger.types import EntryOrigin, LedgerEntryType, NormalizationWarning

__all__ = [
    # 모델
    "LedgerEntry",
    "LedgerProfile",
    "CUSTOMER_PROFILE",
    "DISTRIBUTOR_PROFILE",
    "get_profile",
    # Enum
    "LedgerEntryType",
    "EntryOrigin",
    "NormalizationWarning",
    # 정규화 / 파생
    "normalize",
    "normalize_many",
    "NormalizationBatch",
    "project",
    # 병합 / 잔액
    "merge",
    "merge_entries",
    "MergeResult",
    "compute_balances",
    "latest_balances",
    "signed_amount",
    "entry_identity_key",
    "chronological_key",
    # 요약
    "summarize",
    "LedgerSummary",
    "compute_aging",
    "AgingReport",
    "check_credit_limit",
    "CreditLimitCheck",
]
