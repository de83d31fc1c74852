"""
어댑터 레이어

외부 자원(DB)과의 연동을 담당.
저장소 오류는 이 경계에서 core.errors 예외로 변환됨.
"""

from adapters.db import SQLiteAdapter

__all__ = [
    "SQLiteAdapter",
]
