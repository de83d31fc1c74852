"""
타임존 유틸리티

내부 저장: UTC 원칙 준수를 위한 헬퍼 함수.
DB에는 마이크로초까지 고정 폭 ISO 문자열로 저장하여 문자열 비교 = 시간 비교가 되도록 함.
"""

from datetime import datetime, timedelta, timezone


def now_utc() -> datetime:
    """현재 UTC 시간 반환 (타임존 명시)

    datetime.now(timezone.utc)의 축약형.

    Returns:
        현재 UTC 시간 (tzinfo=timezone.utc)
    """
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """UTC datetime으로 정규화

    Args:
        dt: datetime 객체 (naive면 UTC로 간주)

    Returns:
        UTC 타임존의 datetime
    """
    if dt.tzinfo is None:
        # naive datetime은 UTC로 간주
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_db_timestamp(dt: datetime) -> str:
    """DB 저장용 문자열 변환

    Example:
        >>> to_db_timestamp(datetime(2026, 2, 20, 16, 0, 0, tzinfo=timezone.utc))
        '2026-02-20T16:00:00.000000+00:00'
    """
    return ensure_utc(dt).isoformat(timespec="microseconds")


def from_db_timestamp(value: str | None) -> datetime | None:
    """DB 문자열 → UTC datetime (NULL은 None)"""
    if value is None:
        return None
    return ensure_utc(datetime.fromisoformat(value))


def month_start(dt: datetime, offset: int = 0) -> datetime:
    """월 시작 시각 (UTC 00:00)

    Args:
        dt: 기준 시각
        offset: 월 오프셋 (-1이면 전월, 1이면 다음 달)

    Example:
        >>> month_start(datetime(2026, 1, 15, tzinfo=timezone.utc), -1)
        datetime(2025, 12, 1, 0, 0, tzinfo=timezone.utc)
    """
    dt = ensure_utc(dt)
    month_index = dt.year * 12 + (dt.month - 1) + offset
    year, month = divmod(month_index, 12)
    return datetime(year, month + 1, 1, tzinfo=timezone.utc)


def month_range(dt: datetime, offset: int = 0) -> tuple[datetime, datetime]:
    """월 구간 [시작, 다음 달 시작)

    Returns:
        (포함 시작, 제외 끝) 튜플
    """
    return month_start(dt, offset), month_start(dt, offset + 1)


def days_ago(dt: datetime, days: int) -> datetime:
    """N일 전 시각"""
    return ensure_utc(dt) - timedelta(days=days)
