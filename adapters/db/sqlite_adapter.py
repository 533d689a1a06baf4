"""
SQLite 어댑터

로컬 상태 저장소(Pending 큐 등)용 SQLite 연결 관리.
WAL 모드 + busy_timeout으로 CLI와 다른 프로세스가 동시에 열어도 대기 후 진행.

주의: SQLite alias로 time, count 사용 금지 (예약어)
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator

import aiosqlite

from core.constants import Paths

logger = logging.getLogger(__name__)

# 메모리 DB 경로 (테스트용)
MEMORY_DB = ":memory:"


def get_db_path(db_path: Path | str | None = None) -> Path:
    """로컬 DB 경로 반환

    Args:
        db_path: 설정에서 읽은 경로 (None이면 기본 경로)

    Returns:
        DB 파일 경로 (Path 타입)
    """
    if db_path is None or str(db_path) == "":
        return Paths.LOCAL_DB
    return Path(db_path)


async def create_connection(
    db_path: Path | str,
    readonly: bool = False,
) -> aiosqlite.Connection:
    """SQLite 연결 생성 (WAL 모드)

    Args:
        db_path: DB 파일 경로 (":memory:" 허용)
        readonly: 읽기 전용 여부

    Returns:
        aiosqlite 연결 객체
    """
    db_path_str = str(db_path)
    is_memory = db_path_str == MEMORY_DB

    if not is_memory:
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    if readonly and not is_memory:
        conn = await aiosqlite.connect(f"file:{db_path_str}?mode=ro", uri=True)
    else:
        conn = await aiosqlite.connect(db_path_str)

    if not is_memory:
        await conn.execute("PRAGMA journal_mode=WAL")

    await conn.execute("PRAGMA busy_timeout=30000")  # 30초 대기

    logger.info(
        "SQLite 연결 생성",
        extra={"db_path": db_path_str, "readonly": readonly},
    )

    return conn


class SQLiteAdapter:
    """SQLite 어댑터

    연결 수명 관리와 트랜잭션 컨텍스트 매니저 제공.

    Args:
        db_path: DB 파일 경로
        readonly: 읽기 전용 여부 (조회 전용 CLI 명령용)

    사용 예시:
    ```python
    async with SQLiteAdapter(db_path) as db:
        await init_schema(db)
        async with db.transaction() as conn:
            await conn.execute("INSERT INTO local_state ...")
    ```
    """

    def __init__(self, db_path: Path | str, readonly: bool = False):
        self.db_path = db_path if str(db_path) == MEMORY_DB else Path(db_path)
        self.readonly = readonly
        self._conn: aiosqlite.Connection | None = None

    @property
    def is_connected(self) -> bool:
        """연결 상태 확인"""
        return self._conn is not None

    def _require_conn(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise RuntimeError("Not connected to database")
        return self._conn

    async def connect(self) -> None:
        """연결 생성 (이미 연결되어 있으면 무시)"""
        if self._conn is not None:
            return

        self._conn = await create_connection(self.db_path, self.readonly)

    async def close(self) -> None:
        """연결 종료"""
        if self._conn is not None:
            await self._conn.close()
            self._conn = None
            logger.info("SQLite 연결 종료")

    async def execute(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> aiosqlite.Cursor:
        """SQL 실행"""
        conn = self._require_conn()
        if parameters:
            return await conn.execute(sql, parameters)
        return await conn.execute(sql)

    async def fetchone(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> tuple[Any, ...] | None:
        """단일 행 조회"""
        cursor = await self.execute(sql, parameters)
        return await cursor.fetchone()

    async def fetchall(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> list[tuple[Any, ...]]:
        """전체 행 조회"""
        cursor = await self.execute(sql, parameters)
        return list(await cursor.fetchall())

    async def commit(self) -> None:
        """커밋"""
        if self._conn is not None:
            await self._conn.commit()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """트랜잭션 컨텍스트 매니저

        성공 시 자동 커밋, 예외 시 자동 롤백.
        """
        conn = self._require_conn()
        try:
            yield conn
            await conn.commit()
        except Exception:
            await conn.rollback()
            raise

    async def table_exists(self, table_name: str) -> bool:
        """테이블 존재 여부 확인"""
        result = await self.fetchone(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?",
            (table_name,),
        )
        return result is not None

    async def __aenter__(self) -> "SQLiteAdapter":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()


async def init_schema(adapter: SQLiteAdapter) -> None:
    """스키마 초기화 (테이블 생성)

    local_state: 네임스페이스 키 하나에 JSON 값 하나를 저장하는 키-값 테이블.
    원장 Pending 큐는 ledger_pending:<kind> 키에 JSON 배열로 저장.

    Args:
        adapter: 연결된 SQLiteAdapter
    """
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS local_state (
            state_key    TEXT PRIMARY KEY,
            value_json   TEXT NOT NULL,
            updated_at   TEXT NOT NULL DEFAULT (datetime('now'))
        )
    """)

    await adapter.commit()

    logger.info("스키마 초기화 완료")
