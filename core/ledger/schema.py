"""
Ledger 스키마 초기화

호스트 프로세스 시작 시 Ledger 테이블, View, 기본 카테고리 생성.
CREATE IF NOT EXISTS / DROP VIEW IF EXISTS 패턴으로 여러 번 실행해도 안전.

금액 컬럼은 TEXT (Decimal 문자열) - REAL 사용 금지.
시간 컬럼은 UTC 고정 폭 ISO 문자열 (문자열 비교 = 시간 비교).
"""

import logging
from typing import TYPE_CHECKING

from core.ledger.types import DEFAULT_CATEGORIES
from core.utils.timezone import now_utc, to_db_timestamp

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)

LEDGER_TABLES: tuple[str, ...] = ("account", "category", "ledger_transaction")


async def init_ledger_schema(db: "SQLiteAdapter") -> None:
    """Ledger 스키마 초기화 (테이블 + View + 기본 카테고리)

    이미 존재하는 경우 안전하게 건너뜀 (IF NOT EXISTS).

    Args:
        db: SQLiteAdapter 인스턴스
    """
    await _create_ledger_tables(db)
    await _create_ledger_views(db)
    await _insert_default_categories(db)
    logger.info("Ledger 스키마 초기화 완료")


async def _create_ledger_tables(db: "SQLiteAdapter") -> None:
    """Ledger 테이블 생성"""

    # account 테이블 (current_balance는 재계산 엔진이 관리)
    await db.execute("""
        CREATE TABLE IF NOT EXISTS account (
            account_id       TEXT PRIMARY KEY,
            owner_id         TEXT NOT NULL,
            name             TEXT NOT NULL,
            kind             TEXT NOT NULL,
            initial_balance  TEXT NOT NULL DEFAULT '0.00',
            current_balance  TEXT NOT NULL DEFAULT '0.00',
            is_active        INTEGER NOT NULL DEFAULT 1,
            deleted_at       TEXT,
            color            TEXT NOT NULL,
            icon             TEXT NOT NULL,
            created_at       TEXT NOT NULL,
            updated_at       TEXT NOT NULL
        )
    """)

    # category 테이블 (owner_id NULL = 시스템 기본)
    await db.execute("""
        CREATE TABLE IF NOT EXISTS category (
            category_id      TEXT PRIMARY KEY,
            owner_id         TEXT,
            name             TEXT NOT NULL,
            kind             TEXT NOT NULL,
            color            TEXT NOT NULL,
            icon             TEXT NOT NULL,
            is_default       INTEGER NOT NULL DEFAULT 0,
            created_at       TEXT NOT NULL
        )
    """)

    # ledger_transaction 테이블
    await db.execute("""
        CREATE TABLE IF NOT EXISTS ledger_transaction (
            transaction_id    TEXT PRIMARY KEY,
            owner_id          TEXT NOT NULL,
            account_id        TEXT NOT NULL,
            category_id       TEXT NOT NULL,
            kind              TEXT NOT NULL,
            amount            TEXT NOT NULL,
            description       TEXT NOT NULL,
            occurred_at       TEXT NOT NULL,
            status            TEXT NOT NULL DEFAULT 'settled',
            is_installment    INTEGER NOT NULL DEFAULT 0,
            installment_count INTEGER,
            installment_index INTEGER,
            is_recurring      INTEGER NOT NULL DEFAULT 0,
            frequency         TEXT,
            receipt_url       TEXT,
            notes             TEXT,
            created_at        TEXT NOT NULL,
            updated_at        TEXT NOT NULL,
            FOREIGN KEY (account_id) REFERENCES account(account_id),
            FOREIGN KEY (category_id) REFERENCES category(category_id)
        )
    """)

    # 인덱스 생성
    await db.execute("CREATE INDEX IF NOT EXISTS idx_account_owner ON account(owner_id, deleted_at)")
    await db.execute("CREATE INDEX IF NOT EXISTS idx_category_owner ON category(owner_id, kind)")
    await db.execute("CREATE INDEX IF NOT EXISTS idx_transaction_account ON ledger_transaction(account_id, status)")
    await db.execute("CREATE INDEX IF NOT EXISTS idx_transaction_category ON ledger_transaction(category_id)")
    await db.execute("CREATE INDEX IF NOT EXISTS idx_transaction_owner_date ON ledger_transaction(owner_id, occurred_at)")

    await db.commit()
    logger.debug("Ledger 테이블 생성 완료")


async def _create_ledger_views(db: "SQLiteAdapter") -> None:
    """조회용 View 생성

    View는 항상 DROP 후 CREATE하여 스키마 변경 시에도 안전.
    """

    # 계좌 + 연결된 거래 수 (상태 무관)
    await db.execute("DROP VIEW IF EXISTS v_account_summary")
    await db.execute("""
        CREATE VIEW v_account_summary AS
        SELECT
            a.account_id,
            a.owner_id,
            a.name,
            a.kind,
            a.initial_balance,
            a.current_balance,
            a.is_active,
            a.deleted_at,
            a.color,
            a.icon,
            a.created_at,
            a.updated_at,
            (
                SELECT COUNT(*) FROM ledger_transaction t
                WHERE t.account_id = a.account_id
            ) AS transaction_count
        FROM account a
    """)

    await db.commit()
    logger.debug("Ledger View 생성 완료")


async def _insert_default_categories(db: "SQLiteAdapter") -> None:
    """시스템 기본 카테고리 삽입

    DEFAULT_CATEGORIES에 정의된 카테고리를 생성.
    이미 존재하는 카테고리는 무시 (INSERT OR IGNORE).
    """
    created_at = to_db_timestamp(now_utc())

    await db.executemany(
        """
        INSERT OR IGNORE INTO category (
            category_id, owner_id, name, kind, color, icon, is_default, created_at
        ) VALUES (?, NULL, ?, ?, ?, ?, 1, ?)
        """,
        [
            (category_id, name, kind, color, icon, created_at)
            for category_id, kind, name, color, icon in DEFAULT_CATEGORIES
        ],
    )

    await db.commit()
    logger.debug("기본 카테고리 삽입 완료")
