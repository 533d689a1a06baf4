"""
pytest 공통 fixture 정의

설정 파일, 임시 디렉토리, 원장 항목 생성 헬퍼
"""

import tempfile
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import Callable, Iterator

import pytest

from core.ledger.entry import LedgerEntry
from core.ledger.types import EntryOrigin, LedgerEntryType


@pytest.fixture
def temp_dir() -> Iterator[Path]:
    """OS 독립적인 임시 디렉토리 생성"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_settings_file(temp_dir: Path) -> Path:
    """테스트용 settings.yaml 파일 생성"""
    settings_content = """# 테스트용 settings.yaml
api:
  base_url: "http://store.test/"
  token: "test_token_abc"
  timeout_sec: 5

storage:
  db_path: "local/test.db"

ledger:
  promotion_window_days: 2
"""
    settings_path = temp_dir / "settings.yaml"
    settings_path.write_text(settings_content, encoding="utf-8")
    return settings_path


@pytest.fixture
def temp_settings_file_minimal(temp_dir: Path) -> Path:
    """기본값만 사용하는 settings.yaml 파일 생성"""
    settings_path = temp_dir / "settings_minimal.yaml"
    settings_path.write_text("api: {}\n", encoding="utf-8")
    return settings_path


@pytest.fixture
def make_entry() -> Callable[..., LedgerEntry]:
    """LedgerEntry 생성 헬퍼

    사용 예시:
        entry = make_entry("1", "12", "given", "500", "2026-03-01")
    """

    def _make(
        entry_id: str,
        account_id: str = "12",
        entry_type: str = "given",
        amount: str = "100",
        date: str | None = "2026-03-01",
        origin: EntryOrigin = EntryOrigin.REMOTE,
        reference: str = "",
        server_id: bool = True,
    ) -> LedgerEntry:
        if date is None:
            occurred_at = datetime(2026, 10, 16, tzinfo=timezone.utc)
            date_valid = False
        else:
            occurred_at = datetime.fromisoformat(date).replace(tzinfo=timezone.utc)
            date_valid = True

        return LedgerEntry(
            id=entry_id,
            account_id=account_id,
            type=LedgerEntryType(entry_type),
            amount=Decimal(amount),
            occurred_at=occurred_at,
            origin=origin,
            date_valid=date_valid,
            reference=reference,
            server_id=server_id,
        )

    return _make
