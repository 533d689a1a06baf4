"""
원장 타입 정의

LedgerEntryType 등 원장 정합(reconciliation) 엔진에서 사용하는 Enum 정의
"""

from enum import Enum


class LedgerEntryType(str, Enum):
    """원장 항목 유형

    입력 단계에서 정규화되는 닫힌 집합.
    str을 상속하여 JSON 직렬화 가능.
    """

    GIVEN = "given"  # 외상 제공 / 매입 (잔액 증가)
    PAYMENT = "payment"  # 결제 (잔액 감소)


class EntryOrigin(str, Enum):
    """원장 항목 출처

    병합/중복 제거 판단과 UI 배지에만 사용. 잔액 계산에는 사용하지 않음.
    """

    REMOTE = "remote"  # 서버 원장 (권위 있는 소스)
    LOCAL_PENDING = "local-pending"  # 서버 쓰기 실패로 로컬에 보관된 항목
    DERIVED = "derived"  # 확정 발주서에서 파생된 항목


class NormalizationWarning(str, Enum):
    """정규화 경고 코드"""

    AMOUNT_INVALID = "amount_invalid"  # 금액 파싱 실패 → 0
    DATE_INVALID = "date_invalid"  # 날짜 파싱 실패 → 현재 시각, 정렬 맨 뒤
    TYPE_UNKNOWN = "type_unknown"  # 알 수 없는 유형 → GIVEN
    ACCOUNT_MISSING = "account_missing"  # 계정 ID 없음


# 입력 유형 동의어 (소문자 기준)
TYPE_SYNONYMS: dict[str, LedgerEntryType] = {
    "given": LedgerEntryType.GIVEN,
    "credit": LedgerEntryType.GIVEN,
    "payment": LedgerEntryType.PAYMENT,
}

# 잔액을 감소시키는 유형 (기본값)
DEFAULT_DEBIT_TYPES: frozenset[LedgerEntryType] = frozenset({LedgerEntryType.PAYMENT})

# 계정 ID를 찾을 알 수 없는 경우의 계정 키
UNKNOWN_ACCOUNT_ID: str = "unknown"
