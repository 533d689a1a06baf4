"""
PendingStore - 로컬 Pending 원장 큐

서버 쓰기에 실패한 원장 항목을 로컬 SQLite(local_state 테이블)에 보관.
원장 종류별 네임스페이스 키(ledger_pending:<kind>) 하나에 JSON 배열로 저장.

- append는 커밋 후 반환 (큐 적재 직후 프로세스가 죽어도 유실 없음)
- 값이 없거나, 비어 있거나, JSON이 깨져 있으면 빈 큐로 간주 (예외 없음)
- DB 조회 실패는 list에서만 빈 큐로 처리, append/clear_many는 전파
- 배열 안의 개별 항목이 깨져 있으면 해당 항목만 건너뜀
- 항목 삭제(clear)는 호출자가 결정 (서버 반영 확인 후 Reconciler가 호출)
"""

import json
import logging
from collections.abc import Iterable
from dataclasses import replace
from typing import Any

import aiosqlite

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.ledger.entry import LedgerEntry
from core.ledger.types import EntryOrigin
from core.types import LedgerKind
from core.utils.dedup import is_local_entry_id, make_local_entry_id, make_pending_state_key
from core.utils.timezone import now_utc

logger = logging.getLogger(__name__)


class PendingStore:
    """로컬 Pending 원장 큐

    단일 프로세스 내 단일 writer / 단일 reader 가정.

    Args:
        db: 연결된 SQLiteAdapter (init_schema 완료 상태)
        kind: 원장 종류 (customer/distributor)

    사용 예시:
    ```python
    async with SQLiteAdapter(db_path) as db:
        await init_schema(db)
        store = PendingStore(db, LedgerKind.CUSTOMER)

        queued = await store.append(entry)
        pending = await store.list(account_id="12")
        await store.clear(queued.id)
    ```
    """

    def __init__(self, db: SQLiteAdapter, kind: LedgerKind | str):
        self.db = db
        self.kind = LedgerKind(kind)
        self.state_key = make_pending_state_key(self.kind.value)

    async def _load_raw(self, strict: bool = False) -> list[dict[str, Any]]:
        """저장된 JSON 배열 로드 (손상 시 빈 배열)

        Args:
            strict: True면 DB 조회 실패를 전파 (읽은 뒤 다시 쓰는 경로용)
        """
        try:
            row = await self.db.fetchone(
                "SELECT value_json FROM local_state WHERE state_key = ?",
                (self.state_key,),
            )
        except aiosqlite.Error as e:
            if strict:
                raise
            logger.warning(
                f"Pending 큐 조회 실패, 빈 큐로 처리: {e}",
                extra={"state_key": self.state_key},
            )
            return []

        if row is None or not row[0]:
            return []

        try:
            data = json.loads(row[0])
        except (TypeError, ValueError) as e:
            logger.warning(
                f"Pending 큐 JSON 손상, 빈 큐로 처리: {e}",
                extra={"state_key": self.state_key},
            )
            return []

        if not isinstance(data, list):
            logger.warning(
                "Pending 큐 형식 오류(배열 아님), 빈 큐로 처리",
                extra={"state_key": self.state_key},
            )
            return []

        return [item for item in data if isinstance(item, dict)]

    async def _save_raw(self, items: list[dict[str, Any]]) -> None:
        """JSON 배열 저장 (UPSERT 후 커밋)"""
        value_json = json.dumps(items, ensure_ascii=False)
        now = now_utc().isoformat()

        async with self.db.transaction() as conn:
            await conn.execute(
                """
                INSERT INTO local_state (state_key, value_json, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(state_key) DO UPDATE SET
                    value_json = excluded.value_json,
                    updated_at = excluded.updated_at
                """,
                (self.state_key, value_json, now),
            )

    def _decode(self, item: dict[str, Any]) -> LedgerEntry | None:
        try:
            entry = LedgerEntry.from_dict(item)
        except (KeyError, TypeError, ValueError, ArithmeticError) as e:
            logger.warning(
                f"Pending 항목 손상, 건너뜀: {e}",
                extra={"state_key": self.state_key, "entry_id": item.get("id")},
            )
            return None

        if entry.origin != EntryOrigin.LOCAL_PENDING:
            entry = replace(entry, origin=EntryOrigin.LOCAL_PENDING)
        if not entry.server_id and is_local_entry_id(entry.id):
            entry = replace(entry, server_id=True)
        return entry

    async def append(self, entry: LedgerEntry) -> LedgerEntry:
        """Pending 항목 추가

        id가 없으면 local-{uuid} 부여. 출처는 LOCAL_PENDING으로 고정.
        local- ID는 항목마다 고유하므로 identity key로 사용 (내용이 같은
        두 번의 오프라인 기록도 별개 항목). computed_balance는 저장하지 않음.

        Args:
            entry: 큐에 넣을 항목

        Returns:
            실제 저장된 항목

        Raises:
            aiosqlite.Error: 조회/저장 실패 (기존 큐 덮어쓰기 방지를 위해 전파)
        """
        entry_id = entry.id or make_local_entry_id()
        queued = replace(
            entry,
            id=entry_id,
            origin=EntryOrigin.LOCAL_PENDING,
            server_id=entry.server_id or is_local_entry_id(entry_id),
            computed_balance=None,
        )

        items = await self._load_raw(strict=True)
        items.append(queued.to_dict())
        await self._save_raw(items)

        logger.info(
            "Pending 항목 적재",
            extra={
                "state_key": self.state_key,
                "entry_id": queued.id,
                "account_id": queued.account_id,
                "amount": str(queued.amount),
            },
        )
        return queued

    async def list(self, account_id: str | int | None = None) -> list[LedgerEntry]:
        """Pending 항목 조회

        Args:
            account_id: 지정 시 해당 계정 항목만

        Returns:
            저장 순서대로의 항목 목록
        """
        entries: list[LedgerEntry] = []
        for item in await self._load_raw():
            entry = self._decode(item)
            if entry is None:
                continue
            if account_id is not None and entry.account_id != str(account_id):
                continue
            entries.append(entry)
        return entries

    async def count(self) -> int:
        """Pending 항목 수"""
        return len(await self.list())

    async def clear(self, entry_id: str) -> bool:
        """Pending 항목 하나 삭제

        Returns:
            삭제 여부 (없는 ID면 False)
        """
        return await self.clear_many([entry_id]) > 0

    async def clear_many(self, entry_ids: Iterable[str]) -> int:
        """여러 Pending 항목 삭제

        Returns:
            삭제된 항목 수
        """
        targets = set(entry_ids)
        if not targets:
            return 0

        items = await self._load_raw(strict=True)
        remaining = [item for item in items if item.get("id") not in targets]
        removed = len(items) - len(remaining)

        if removed:
            await self._save_raw(remaining)
            logger.info(
                f"Pending 항목 {removed}건 삭제",
                extra={"state_key": self.state_key},
            )

        return removed
