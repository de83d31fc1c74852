"""
서비스 부트스트랩

설정 로드, DB 연결, 스키마 초기화, 서비스 조립.
호스트(웹 계층, CLI, 테스트)가 연결 생명주기를 소유.

사용 예시:
```python
settings = get_settings()
async with open_services(settings.db_path, settings.busy_timeout_ms) as services:
    account = await services.coordinator.create_account("user-1", {...})
    summary = await services.dashboard.get_summary("user-1")
```
"""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterator

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.constants import Defaults
from core.ledger.coordinator import BalanceCoordinator
from core.ledger.lifecycle import AccountLifecycleManager
from core.ledger.schema import init_ledger_schema
from core.ledger.store import LedgerStore
from services.category_service import CategoryService
from services.dashboard_service import DashboardService
from services.transaction_service import TransactionService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LedgerServices:
    """조립된 서비스 묶음 (모두 같은 저장소 공유)"""

    db: SQLiteAdapter
    store: LedgerStore
    coordinator: BalanceCoordinator
    lifecycle: AccountLifecycleManager
    categories: CategoryService
    transactions: TransactionService
    dashboard: DashboardService


def build_services(db: SQLiteAdapter) -> LedgerServices:
    """연결된 어댑터로 서비스 조립 (스키마는 호출자가 준비)"""
    store = LedgerStore(db)
    return LedgerServices(
        db=db,
        store=store,
        coordinator=BalanceCoordinator(store),
        lifecycle=AccountLifecycleManager(store),
        categories=CategoryService(store),
        transactions=TransactionService(store),
        dashboard=DashboardService(store),
    )


@asynccontextmanager
async def open_services(
    db_path: Path | str,
    busy_timeout_ms: int = Defaults.BUSY_TIMEOUT_MS,
) -> AsyncIterator[LedgerServices]:
    """DB 연결 + 스키마 초기화 + 서비스 조립

    컨텍스트 종료 시 연결 닫음.

    Args:
        db_path: DB 파일 경로 (":memory:" 허용)
        busy_timeout_ms: 잠금 대기 시간 (ms)
    """
    db = SQLiteAdapter(db_path, busy_timeout_ms=busy_timeout_ms)
    await db.connect()
    try:
        await init_ledger_schema(db)
        logger.info(f"Ledger services ready: {db_path}")
        yield build_services(db)
    finally:
        await db.close()
