"""
core/ledger/summary.py 테스트

요약 잔액, 경과일 분석, 외상 한도 검사 테스트
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

from core.ledger.balance import compute_balances
from core.ledger.entry import CUSTOMER_PROFILE, DISTRIBUTOR_PROFILE
from core.ledger.summary import (
    bucket_for_age,
    check_credit_limit,
    compute_aging,
    summarize,
)


class TestSummarize:
    """summarize() 테스트"""

    def test_single_account(self, make_entry) -> None:
        """단일 계정 요약은 마지막 누적 잔액"""
        annotated = compute_balances([
            make_entry("1", amount="500", date="2026-03-01"),
            make_entry("2", entry_type="payment", amount="200", date="2026-03-02"),
            make_entry("3", amount="100", date="2026-03-03"),
        ])

        summary = summarize(annotated, CUSTOMER_PROFILE, account_id="12")

        assert summary.value == Decimal("400")
        assert summary.label == "Customer Balance"
        assert summary.account_id == "12"

    def test_all_accounts_sum(self, make_entry) -> None:
        """전체 요약은 계정별 최종 잔액의 합 (300 + -50 = 250)"""
        annotated = compute_balances([
            make_entry("1", account_id="A", amount="300"),
            make_entry("2", account_id="B", entry_type="payment", amount="50"),
        ])

        summary = summarize(annotated)

        assert summary.value == Decimal("250")
        assert summary.label == "Total Balance (All Customers)"
        assert summary.account_id is None

    def test_unknown_account_is_zero(self, make_entry) -> None:
        """항목이 없는 계정은 0"""
        annotated = compute_balances([make_entry("1", account_id="A")])

        assert summarize(annotated, account_id=99).value == Decimal("0")

    def test_distributor_label(self) -> None:
        summary = summarize([], DISTRIBUTOR_PROFILE)

        assert summary.label == "Total Payable (All Distributors)"
        assert summary.value == Decimal("0")


class TestAging:
    """compute_aging() 테스트"""

    AS_OF = datetime(2026, 6, 1, tzinfo=timezone.utc)

    def test_bucket_boundaries(self) -> None:
        assert bucket_for_age(timedelta(0)) == "0-30"
        assert bucket_for_age(timedelta(days=30)) == "0-30"
        assert bucket_for_age(timedelta(days=31)) == "31-60"
        assert bucket_for_age(timedelta(days=90)) == "61-90"
        assert bucket_for_age(timedelta(days=91)) == "90+"

    def test_partial_day_past_boundary(self) -> None:
        """30일을 조금이라도 넘기면 31-60 구간"""
        assert bucket_for_age(timedelta(days=30, hours=12)) == "31-60"
        assert bucket_for_age(timedelta(days=60, seconds=1)) == "61-90"
        assert bucket_for_age(timedelta(days=-2)) == "0-30"

    def test_half_day_old_entry_bucketed_by_exact_age(self, make_entry) -> None:
        """기준 시각 12:00, 30일 전 00:00 거래 → 30.5일 경과"""
        as_of = datetime(2026, 5, 31, 12, tzinfo=timezone.utc)

        report = compute_aging([make_entry("1", amount="100", date="2026-05-01")], as_of)

        assert report.totals["31-60"] == Decimal("100")
        assert report.totals["0-30"] == Decimal("0")

    def test_given_entries_bucketed(self, make_entry) -> None:
        """GIVEN 금액만 경과일 구간에 집계"""
        entries = [
            make_entry("1", amount="100", date="2026-05-20"),
            make_entry("2", amount="200", date="2026-04-10"),
            make_entry("3", amount="300", date="2026-01-01"),
            make_entry("4", entry_type="payment", amount="999", date="2026-05-25"),
        ]

        report = compute_aging(entries, self.AS_OF)

        assert len(report.rows) == 1
        row = report.rows[0]
        assert row.buckets["0-30"] == Decimal("100")
        assert row.buckets["31-60"] == Decimal("200")
        assert row.buckets["90+"] == Decimal("300")
        assert row.total == Decimal("600")
        assert report.grand_total == Decimal("600")

    def test_invalid_dates_excluded(self, make_entry) -> None:
        report = compute_aging([make_entry("1", date=None)], self.AS_OF)

        assert report.rows == []
        assert report.grand_total == Decimal("0")

    def test_rows_sorted_by_account(self, make_entry) -> None:
        report = compute_aging(
            [
                make_entry("1", account_id="B", date="2026-05-01"),
                make_entry("2", account_id="A", date="2026-05-01"),
            ],
            self.AS_OF,
        )

        assert [row.account_id for row in report.rows] == ["A", "B"]
        assert report.totals["31-60"] == Decimal("200")


class TestCreditLimit:
    """check_credit_limit() 테스트"""

    def test_within_limit(self) -> None:
        check = check_credit_limit(Decimal("500"), Decimal("300"), Decimal("1000"))

        assert check.allowed is True
        assert check.projected_balance == Decimal("800")
        assert check.available == Decimal("500")

    def test_exceeds_limit(self) -> None:
        check = check_credit_limit(Decimal("800"), Decimal("300"), Decimal("1000"))

        assert check.allowed is False

    def test_exact_limit_allowed(self) -> None:
        check = check_credit_limit(Decimal("700"), Decimal("300"), Decimal("1000"))

        assert check.allowed is True

    def test_zero_limit_unlimited(self) -> None:
        check = check_credit_limit(Decimal("1000000"), Decimal("1"), Decimal("0"))

        assert check.allowed is True
        assert check.available is None
