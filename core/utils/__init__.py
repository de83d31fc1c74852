"""
유틸리티 패키지

금액(Decimal) 정규화, 타임존 처리 등 공통 유틸리티
"""

from core.utils.money import (
    to_money,
    from_minor_units,
    to_minor_units,
    format_money,
    parse_stored_money,
)
from core.utils.timezone import (
    now_utc,
    ensure_utc,
    to_db_timestamp,
    from_db_timestamp,
    month_start,
    month_range,
    days_ago,
)

__all__ = [
    "to_money",
    "from_minor_units",
    "to_minor_units",
    "format_money",
    "parse_stored_money",
    "now_utc",
    "ensure_utc",
    "to_db_timestamp",
    "from_db_timestamp",
    "month_start",
    "month_range",
    "days_ago",
]
