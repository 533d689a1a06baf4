"""
응답 스키마 (Pydantic)

LedgerView / AgingReport 직렬화 (CLI --json 출력, UI 연동용)
금액은 정밀도 보존을 위해 문자열로 직렬화.
"""

from pydantic import BaseModel, Field

from core.ledger.entry import LedgerEntry
from core.ledger.summary import AgingReport, LedgerSummary
from engine.reconciler.reconciler import LedgerView


class LedgerEntryResponse(BaseModel):
    """원장 항목 응답"""

    id: str = Field(..., description="항목 ID (po-*: 파생, local-*: 로컬 큐)")
    account_id: str = Field(..., description="고객/거래처 ID")
    type: str = Field(..., description="유형 (given/payment)")
    amount: str = Field(..., description="금액 (절대값)")
    occurred_at: str = Field(..., description="거래일시 (UTC ISO 8601)")
    date_valid: bool = Field(default=True, description="날짜 파싱 성공 여부")
    reference: str = Field(default="", description="참조")
    description: str = Field(default="", description="설명")
    origin: str = Field(..., description="출처 (remote/local-pending/derived)")
    computed_balance: str | None = Field(default=None, description="누적 잔액")
    warnings: list[str] = Field(default_factory=list, description="정규화 경고")

    @classmethod
    def from_entry(cls, entry: LedgerEntry) -> "LedgerEntryResponse":
        return cls(
            id=entry.id,
            account_id=entry.account_id,
            type=entry.type.value,
            amount=str(entry.amount),
            occurred_at=entry.occurred_at.isoformat(),
            date_valid=entry.date_valid,
            reference=entry.reference,
            description=entry.description,
            origin=entry.origin.value,
            computed_balance=(
                str(entry.computed_balance) if entry.computed_balance is not None else None
            ),
            warnings=list(entry.warnings),
        )


class LedgerSummaryResponse(BaseModel):
    """요약 응답"""

    label: str = Field(..., description="표시 라벨")
    value: str = Field(..., description="잔액")
    account_id: str | None = Field(default=None, description="단일 계정 요약이면 계정 ID")

    @classmethod
    def from_summary(cls, summary: LedgerSummary) -> "LedgerSummaryResponse":
        return cls(
            label=summary.label,
            value=str(summary.value),
            account_id=summary.account_id,
        )


class LedgerViewResponse(BaseModel):
    """원장 view 응답

    entries는 최신 우선 순서.
    """

    view_key: str = Field(..., description="화면 키")
    summary: LedgerSummaryResponse = Field(..., description="헤드라인 잔액")
    entries: list[LedgerEntryResponse] = Field(default_factory=list, description="원장 항목")
    degraded: bool = Field(default=False, description="신뢰도 저하 여부")
    notices: list[str] = Field(default_factory=list, description="비치명적 안내")
    warning_count: int = Field(default=0, description="정규화 경고 항목 수")
    promoted: list[str] = Field(default_factory=list, description="큐에서 삭제된 Pending 항목 ID")

    @classmethod
    def from_view(cls, view: LedgerView) -> "LedgerViewResponse":
        return cls(
            view_key=view.view_key,
            summary=LedgerSummaryResponse.from_summary(view.summary),
            entries=[LedgerEntryResponse.from_entry(entry) for entry in view.entries],
            degraded=view.degraded,
            notices=list(view.notices),
            warning_count=view.warning_count,
            promoted=list(view.promoted),
        )


class AgingRowResponse(BaseModel):
    """계정별 경과일 구간 응답"""

    account_id: str = Field(..., description="계정 ID")
    buckets: dict[str, str] = Field(..., description="구간 라벨 → 금액")
    total: str = Field(..., description="합계")


class AgingReportResponse(BaseModel):
    """경과일 분석 응답"""

    as_of: str = Field(..., description="기준 시각")
    rows: list[AgingRowResponse] = Field(default_factory=list, description="계정별 구간")
    totals: dict[str, str] = Field(..., description="전체 구간 합계")
    grand_total: str = Field(..., description="전체 합계")

    @classmethod
    def from_report(cls, report: AgingReport) -> "AgingReportResponse":
        return cls(
            as_of=report.as_of.isoformat(),
            rows=[
                AgingRowResponse(
                    account_id=row.account_id,
                    buckets={label: str(value) for label, value in row.buckets.items()},
                    total=str(row.total),
                )
                for row in report.rows
            ],
            totals={label: str(value) for label, value in report.totals.items()},
            grand_total=str(report.grand_total),
        )
