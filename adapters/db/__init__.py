"""
데이터베이스 어댑터

로컬 상태 저장용 SQLite WAL 모드 연결 관리.
"""

from adapters.db.sqlite_adapter import (
    MEMORY_DB,
    SQLiteAdapter,
    create_connection,
    get_db_path,
    init_schema,
)

__all__ = [
    "MEMORY_DB",
    "SQLiteAdapter",
    "create_connection",
    "get_db_path",
    "init_schema",
]
