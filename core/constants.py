"""
하드코딩 상수 - 변경될 일이 거의 없는 고정값

중요: 경로는 반드시 pathlib.Path 사용 (Windows/Linux 크로스 플랫폼)
"""

from decimal import Decimal
from pathlib import Path


# 프로젝트 루트 (이 파일 기준 2단계 상위: core/constants.py → 프로젝트 루트)
PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent


class Defaults:
    """기본값 상수"""

    # 계좌 표시 정보
    ACCOUNT_COLOR: str = "#3b82f6"
    ACCOUNT_ICON: str = "wallet"

    # 카테고리 표시 정보
    CATEGORY_COLOR: str = "#6b7280"
    CATEGORY_ICON: str = "tag"

    # SQLite 잠금 대기 시간 (ms)
    BUSY_TIMEOUT_MS: int = 5000

    # 거래 목록 페이지 크기
    PAGE_LIMIT: int = 50
    MAX_PAGE_LIMIT: int = 200

    # 대시보드
    RECENT_TRANSACTIONS: int = 10
    HISTORY_MONTHS: int = 6

    LOG_LEVEL: str = "INFO"


class Money:
    """금액 관련 상수

    모든 금액은 소수점 2자리 고정 (Decimal)
    """

    QUANTUM: Decimal = Decimal("0.01")
    ZERO: Decimal = Decimal("0.00")
    MINOR_UNITS: int = 100


class Paths:
    """프로젝트 경로 상수 (pathlib 사용 - OS 독립적)"""

    # 디렉토리
    CONFIG_DIR: Path = PROJECT_ROOT / "config"
    DATA_DIR: Path = PROJECT_ROOT / "data"
    LOGS_DIR: Path = PROJECT_ROOT / "logs"

    # 설정 파일
    SETTINGS_FILE: Path = CONFIG_DIR / "settings.yaml"

    # DB 파일
    LEDGER_DB: Path = DATA_DIR / "ledger.db"
