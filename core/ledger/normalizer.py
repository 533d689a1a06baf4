"""
원장 항목 정규화

어떤 소스(서버, 로컬 큐, 파생)에서 온 느슨한 형식의 레코드든
LedgerEntry 표준 형식과 부호 규칙으로 변환.

- type / transaction_type 필드 모두 허용, 대소문자 무시, 동의어 매핑
- amount는 문자열/숫자 모두 허용, 파싱 실패 시 0 + 경고
- 날짜 우선순위: 거래일(엄격 형식) → created_at → date → 현재 시각
- 어떤 입력에도 예외를 던지지 않음
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable

from core.ledger.entry import CUSTOMER_PROFILE, LedgerEntry, LedgerProfile
from core.ledger.types import (
    TYPE_SYNONYMS,
    UNKNOWN_ACCOUNT_ID,
    EntryOrigin,
    LedgerEntryType,
    NormalizationWarning,
)
from core.utils.timezone import now_utc, parse_strict_date, parse_timestamp

logger = logging.getLogger(__name__)


# 거래일 필드 (엄격한 YYYY-MM-DD 또는 ISO 8601)
TRANSACTION_DATE_FIELDS: tuple[str, ...] = ("transaction_date", "transactionDate")

# 거래일이 없을 때 사용하는 타임스탬프 필드 (우선순위 순)
TIMESTAMP_FIELDS: tuple[str, ...] = ("created_at", "date")


@dataclass
class NormalizationBatch:
    """일괄 정규화 결과

    Attributes:
        entries: 정규화된 항목
        warning_count: 경고가 하나 이상 있는 항목 수
    """

    entries: list[LedgerEntry] = field(default_factory=list)
    warning_count: int = 0


def resolve_entry_type(raw: dict[str, Any]) -> tuple[LedgerEntryType, bool]:
    """원본 레코드에서 항목 유형 결정

    Returns:
        (유형, 인식 성공 여부). 인식 실패 시 GIVEN.
    """
    value = raw.get("type") or raw.get("transaction_type") or ""
    if isinstance(value, LedgerEntryType):
        return value, True

    key = str(value).strip().lower()
    entry_type = TYPE_SYNONYMS.get(key)
    if entry_type is None:
        return LedgerEntryType.GIVEN, False
    return entry_type, True


def parse_amount(value: Any) -> Decimal | None:
    """금액 파싱 (절대값)

    Returns:
        Decimal 절대값, 파싱 불가/비유한 값이면 None
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, Decimal):
        amount = value
    else:
        text = str(value).strip().replace(",", "")
        if not text:
            return None
        try:
            amount = Decimal(text)
        except InvalidOperation:
            return None

    if not amount.is_finite():
        return None
    return abs(amount)


def resolve_occurred_at(raw: dict[str, Any]) -> tuple[datetime, bool]:
    """거래일시 결정

    1. 거래일 필드 (엄격한 YYYY-MM-DD 또는 ISO 8601 datetime)
    2. created_at → date 타임스탬프
    3. 현재 시각 (유효하지 않음으로 표시)

    Returns:
        (거래일시 UTC, 유효 여부)
    """
    for field_name in TRANSACTION_DATE_FIELDS:
        value = raw.get(field_name)
        if not value:
            continue
        parsed = parse_strict_date(value)
        if parsed is None and isinstance(value, str) and "T" in value:
            parsed = parse_timestamp(value)
        if parsed is not None:
            return parsed, True

    for field_name in TIMESTAMP_FIELDS:
        parsed = parse_timestamp(raw.get(field_name))
        if parsed is not None:
            return parsed, True

    return now_utc(), False


def resolve_account_id(
    raw: dict[str, Any],
    profile: LedgerProfile,
    account_id: str | int | None = None,
) -> str | None:
    """계정 ID 결정 (레코드 필드 우선, 없으면 호출자가 준 값)"""
    for field_name in profile.account_fields:
        value = raw.get(field_name)
        if value is not None and str(value).strip() != "":
            return str(value).strip()

    if account_id is not None and str(account_id).strip() != "":
        return str(account_id).strip()

    return None


def _text(value: Any) -> str:
    """None을 빈 문자열로, 그 외는 공백 제거 문자열"""
    if value is None:
        return ""
    return str(value).strip()


def normalize(
    raw: dict[str, Any],
    origin: EntryOrigin,
    profile: LedgerProfile = CUSTOMER_PROFILE,
    account_id: str | int | None = None,
) -> LedgerEntry:
    """원본 레코드를 LedgerEntry로 정규화

    예외를 던지지 않음. 파싱 실패는 기본값으로 대체하고 warnings에 기록.

    Args:
        raw: 원본 레코드 (서버 응답 행, 로컬 큐 항목 등)
        origin: 출처
        profile: 원장 프로파일 (계정 필드 결정)
        account_id: 레코드에 계정 필드가 없을 때 사용할 계정 ID

    Returns:
        정규화된 LedgerEntry
    """
    if not isinstance(raw, dict):
        raw = {}

    warnings: list[str] = []

    entry_type, type_known = resolve_entry_type(raw)
    if not type_known:
        warnings.append(NormalizationWarning.TYPE_UNKNOWN.value)

    amount = parse_amount(raw.get("amount"))
    if amount is None:
        amount = Decimal("0")
        warnings.append(NormalizationWarning.AMOUNT_INVALID.value)

    occurred_at, date_valid = resolve_occurred_at(raw)
    if not date_valid:
        warnings.append(NormalizationWarning.DATE_INVALID.value)

    resolved_account = resolve_account_id(raw, profile, account_id)
    if resolved_account is None:
        resolved_account = UNKNOWN_ACCOUNT_ID
        warnings.append(NormalizationWarning.ACCOUNT_MISSING.value)

    raw_id = _text(raw.get("id"))

    created_by = raw.get("created_by")

    entry = LedgerEntry(
        id=raw_id,
        account_id=resolved_account,
        type=entry_type,
        amount=amount,
        occurred_at=occurred_at,
        origin=origin,
        date_valid=date_valid,
        reference=_text(raw.get("reference")),
        description=_text(raw.get("description")),
        server_id=bool(raw_id),
        warnings=tuple(warnings),
        created_by=str(created_by) if created_by is not None else None,
        raw=dict(raw),
    )

    if warnings:
        logger.debug(
            "원장 항목 정규화 경고",
            extra={"entry_id": raw_id, "origin": origin.value, "warnings": warnings},
        )

    return entry


def normalize_many(
    raws: Iterable[dict[str, Any]] | None,
    origin: EntryOrigin,
    profile: LedgerProfile = CUSTOMER_PROFILE,
    account_id: str | int | None = None,
) -> NormalizationBatch:
    """여러 레코드 일괄 정규화

    Args:
        raws: 원본 레코드 목록 (None이면 빈 결과)
        origin: 출처
        profile: 원장 프로파일
        account_id: 계정 필드가 없는 레코드에 사용할 계정 ID

    Returns:
        NormalizationBatch (항목 + 경고 항목 수)
    """
    batch = NormalizationBatch()

    for raw in raws or []:
        entry = normalize(raw, origin, profile, account_id)
        batch.entries.append(entry)
        if entry.warnings:
            batch.warning_count += 1

    if batch.warning_count:
        logger.warning(
            f"정규화 경고 {batch.warning_count}건",
            extra={"origin": origin.value, "total": len(batch.entries)},
        )

    return batch
