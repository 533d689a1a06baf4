"""
PendingPromoter 테스트

서버에 반영된 로컬 Pending 항목 판정 테스트
"""

from core.ledger.types import EntryOrigin
from engine.reconciler.promotion import PendingPromoter


def _pending(make_entry, entry_id: str, **kwargs):
    return make_entry(entry_id, origin=EntryOrigin.LOCAL_PENDING, server_id=False, **kwargs)


class TestIsMatch:
    """is_match() 테스트"""

    def test_same_transaction(self, make_entry) -> None:
        promoter = PendingPromoter(window_days=1)

        assert promoter.is_match(
            make_entry("10", amount="300", date="2026-03-02"),
            _pending(make_entry, "local-a", amount="300", date="2026-03-01"),
        )

    def test_outside_window(self, make_entry) -> None:
        promoter = PendingPromoter(window_days=1)

        assert not promoter.is_match(
            make_entry("10", amount="300", date="2026-03-05"),
            _pending(make_entry, "local-a", amount="300", date="2026-03-01"),
        )

    def test_different_amount_type_or_account(self, make_entry) -> None:
        promoter = PendingPromoter()
        pending = _pending(make_entry, "local-a", amount="300")

        assert not promoter.is_match(make_entry("10", amount="301"), pending)
        assert not promoter.is_match(
            make_entry("10", entry_type="payment", amount="300"), pending
        )
        assert not promoter.is_match(
            make_entry("10", account_id="99", amount="300"), pending
        )

    def test_reference_must_agree_when_both_present(self, make_entry) -> None:
        promoter = PendingPromoter()
        pending = _pending(make_entry, "local-a", reference="INV-1")

        assert promoter.is_match(make_entry("10", reference="INV-1"), pending)
        assert promoter.is_match(make_entry("10", reference=""), pending)
        assert not promoter.is_match(make_entry("10", reference="INV-2"), pending)

    def test_invalid_date_never_matches(self, make_entry) -> None:
        promoter = PendingPromoter()

        assert not promoter.is_match(
            make_entry("10", date=None),
            _pending(make_entry, "local-a", date=None),
        )


class TestFindMatches:
    """find_matches() / find_promotable() 테스트"""

    def test_one_remote_per_pending(self, make_entry) -> None:
        """서버 항목 하나는 Pending 항목 하나만 승격"""
        promoter = PendingPromoter()
        remote = [make_entry("10", amount="100")]
        pending = [
            _pending(make_entry, "local-a", amount="100"),
            _pending(make_entry, "local-b", amount="100"),
        ]

        matches = promoter.find_matches(remote, pending)

        assert len(matches) == 1
        assert matches[0].remote_id == "10"

    def test_two_identical_writes_both_promoted(self, make_entry) -> None:
        """같은 금액 두 번 기록 → 서버 항목 둘이면 둘 다 승격"""
        promoter = PendingPromoter()
        remote = [make_entry("10", amount="100"), make_entry("11", amount="100")]
        pending = [
            _pending(make_entry, "local-a", amount="100"),
            _pending(make_entry, "local-b", amount="100"),
        ]

        assert promoter.find_promotable(remote, pending) == {"local-a", "local-b"}

    def test_closest_date_preferred(self, make_entry) -> None:
        promoter = PendingPromoter(window_days=3)
        remote = [
            make_entry("10", amount="100", date="2026-03-03"),
            make_entry("11", amount="100", date="2026-03-01"),
        ]
        pending = [_pending(make_entry, "local-a", amount="100", date="2026-03-01")]

        matches = promoter.find_matches(remote, pending)

        assert matches[0].remote_id == "11"

    def test_zero_window_requires_same_instant(self, make_entry) -> None:
        promoter = PendingPromoter(window_days=0)
        remote = [make_entry("10", date="2026-03-02")]
        pending = [_pending(make_entry, "local-a", date="2026-03-01")]

        assert promoter.find_promotable(remote, pending) == set()

    def test_no_candidates(self, make_entry) -> None:
        assert PendingPromoter().find_promotable([make_entry("10")], []) == set()
