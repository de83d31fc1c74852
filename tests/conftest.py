"""
pytest 공통 fixture 정의

임시 DB 파일, 스키마가 준비된 어댑터, 조립된 서비스, 설정 파일 fixture.
"""

import logging
from pathlib import Path
from typing import AsyncIterator

import pytest
import pytest_asyncio

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.config.loader import Settings
from core.ledger.schema import init_ledger_schema
from services.bootstrap import LedgerServices, build_services


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    """임시 DB 파일 경로"""
    return tmp_path / "ledger.db"


@pytest_asyncio.fixture
async def db(db_path: Path) -> AsyncIterator[SQLiteAdapter]:
    """스키마가 초기화된 파일 DB 어댑터"""
    adapter = SQLiteAdapter(db_path)
    await adapter.connect()
    await init_ledger_schema(adapter)
    yield adapter
    await adapter.close()


@pytest_asyncio.fixture
async def services(db: SQLiteAdapter) -> LedgerServices:
    """조립된 서비스 묶음"""
    return build_services(db)


@pytest.fixture(autouse=True)
def reset_settings() -> None:
    """Settings 싱글턴 초기화"""
    Settings.reset()
    yield
    Settings.reset()


@pytest.fixture
def settings_file(tmp_path: Path) -> Path:
    """테스트용 settings.yaml 파일 생성"""
    content = f"""# 테스트용 settings.yaml
database:
  path: {tmp_path / "configured.db"}
  busy_timeout_ms: 250

logging:
  level: debug
"""
    path = tmp_path / "settings.yaml"
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def restore_root_logger() -> logging.Logger:
    """setup_logging이 교체한 루트 로거 핸들러/레벨 복원"""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)
