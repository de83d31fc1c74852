"""
데이터베이스 어댑터

SQLite WAL 모드 연결 관리 및 작업 단위(BEGIN IMMEDIATE) 제공.
"""

from adapters.db.sqlite_adapter import (
    SQLiteAdapter,
    create_connection,
    is_transient_error,
)

__all__ = [
    "SQLiteAdapter",
    "create_connection",
    "is_transient_error",
]
