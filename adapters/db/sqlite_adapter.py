"""
SQLite 어댑터

WAL 모드로 SQLite 연결 관리.
여러 요청(코루틴/프로세스)이 같은 DB 파일에 동시에 접근 가능하도록 설정.

작업 단위(unit of work):
- 작업 단위마다 전용 연결을 열고 BEGIN IMMEDIATE로 쓰기 잠금을 먼저 획득
- 같은 계좌에 대한 "읽기 → 계산 → 쓰기"가 다른 작업 단위와 섞이지 않음
- 예외/취소(CancelledError 포함) 시 전체 롤백
- busy_timeout 내에 잠금을 얻지 못하면 StoreUnavailableError
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator

import aiosqlite

from core.constants import Defaults
from core.errors import ConflictError, StoreUnavailableError

logger = logging.getLogger(__name__)

MEMORY_DB = ":memory:"

# 재시도 가능한 SQLite 오류 메시지 (소문자)
TRANSIENT_ERROR_MARKERS: tuple[str, ...] = (
    "database is locked",
    "database table is locked",
    "busy",
    "disk i/o error",
    "unable to open database",
)


def is_transient_error(exc: BaseException) -> bool:
    """잠금/IO 계열 일시 오류 여부"""
    if not isinstance(exc, aiosqlite.OperationalError):
        return False
    message = str(exc).lower()
    return any(marker in message for marker in TRANSIENT_ERROR_MARKERS)


async def create_connection(
    db_path: Path | str,
    readonly: bool = False,
    busy_timeout_ms: int = Defaults.BUSY_TIMEOUT_MS,
) -> aiosqlite.Connection:
    """SQLite 연결 생성 (WAL 모드)

    Args:
        db_path: DB 파일 경로 (":memory:" 허용)
        readonly: 읽기 전용 여부
        busy_timeout_ms: 잠금 대기 시간 (ms)

    Returns:
        aiosqlite 연결 객체
    """
    db_path_str = str(db_path)
    is_memory = db_path_str == MEMORY_DB

    if not is_memory:
        # 디렉토리가 없으면 생성
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    if readonly and not is_memory:
        conn = await aiosqlite.connect(f"file:{db_path_str}?mode=ro", uri=True)
    else:
        conn = await aiosqlite.connect(db_path_str)

    # 잠금 대기 설정을 가장 먼저 (WAL 전환 중 잠금 충돌 대비)
    await conn.execute(f"PRAGMA busy_timeout={int(busy_timeout_ms)}")

    if not is_memory:
        await conn.execute("PRAGMA journal_mode=WAL")

    # 외래 키 제약 활성화
    await conn.execute("PRAGMA foreign_keys=ON")

    logger.debug(
        "SQLite 연결 생성",
        extra={"db_path": db_path_str, "readonly": readonly},
    )

    return conn


class SQLiteAdapter:
    """SQLite 어댑터

    WAL 모드로 SQLite 연결 관리.
    트랜잭션 / 작업 단위 컨텍스트 매니저 제공.

    Args:
        db_path: DB 파일 경로
        readonly: 읽기 전용 여부 (조회 전용 연결)
        busy_timeout_ms: 잠금 대기 시간 (ms)

    사용 예시:
    ```python
    adapter = SQLiteAdapter(db_path)
    await adapter.connect()

    async with adapter.unit_of_work() as unit:
        await unit.execute("UPDATE ...")

    await adapter.close()
    ```
    """

    def __init__(
        self,
        db_path: Path | str,
        readonly: bool = False,
        busy_timeout_ms: int = Defaults.BUSY_TIMEOUT_MS,
    ):
        self.db_path = db_path if str(db_path) == MEMORY_DB else Path(db_path)
        self.readonly = readonly
        self.busy_timeout_ms = busy_timeout_ms
        self._conn: aiosqlite.Connection | None = None
        # 연결 하나에는 트랜잭션 하나만 (인메모리 DB 작업 단위도 여기서 직렬화)
        self._tx_lock = asyncio.Lock()
        self._owner_task: asyncio.Task[Any] | None = None

    @property
    def is_connected(self) -> bool:
        """연결 상태 확인"""
        return self._conn is not None

    @property
    def is_memory(self) -> bool:
        """인메모리 DB 여부"""
        return str(self.db_path) == MEMORY_DB

    @property
    def in_transaction(self) -> bool:
        """작업 단위 진행 중 여부"""
        return self._owner_task is not None

    async def connect(self) -> None:
        """연결 생성"""
        if self._conn is not None:
            return

        try:
            self._conn = await create_connection(
                self.db_path, self.readonly, self.busy_timeout_ms
            )
        except aiosqlite.OperationalError as e:
            if is_transient_error(e):
                raise StoreUnavailableError(f"Cannot open database: {e}") from e
            raise

    async def close(self) -> None:
        """연결 종료"""
        if self._conn is not None:
            await self._conn.close()
            self._conn = None
            logger.debug("SQLite 연결 종료")

    async def execute(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> aiosqlite.Cursor:
        """SQL 실행"""
        async with self._read_guard():
            return await self._execute(sql, parameters)

    async def executemany(
        self,
        sql: str,
        parameters: list[tuple[Any, ...]],
    ) -> aiosqlite.Cursor:
        """SQL 다중 실행"""
        if self._conn is None:
            raise RuntimeError("Not connected to database")

        async with self._read_guard():
            return await self._conn.executemany(sql, parameters)

    async def fetchone(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> tuple[Any, ...] | None:
        """단일 행 조회"""
        async with self._read_guard():
            cursor = await self._execute(sql, parameters)
            return await cursor.fetchone()

    async def fetchall(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> list[tuple[Any, ...]]:
        """전체 행 조회"""
        async with self._read_guard():
            cursor = await self._execute(sql, parameters)
            return list(await cursor.fetchall())

    async def _execute(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> aiosqlite.Cursor:
        if self._conn is None:
            raise RuntimeError("Not connected to database")

        if parameters:
            return await self._conn.execute(sql, parameters)
        return await self._conn.execute(sql)

    @asynccontextmanager
    async def _read_guard(self) -> AsyncIterator[None]:
        """인메모리 DB: 다른 태스크의 작업 단위가 끝날 때까지 대기

        연결을 공유하므로 잠금 없이 읽으면 커밋 전 행이 보임.
        파일 DB는 WAL 격리로 충분하고, 트랜잭션 소유 태스크는 그대로 진행.
        """
        if not self.is_memory or self._owns_transaction():
            yield
            return

        async with self._tx_lock:
            yield

    async def commit(self) -> None:
        """커밋"""
        if self._conn is not None:
            await self._conn.commit()

    async def rollback(self) -> None:
        """롤백"""
        if self._conn is not None:
            await self._conn.rollback()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator["SQLiteAdapter"]:
        """트랜잭션 컨텍스트 매니저 (BEGIN IMMEDIATE)

        성공 시 자동 커밋, 예외/취소 시 자동 롤백.
        같은 태스크에서 중첩 호출하면 바깥 트랜잭션에 합류.
        연결 하나는 한 번에 하나의 트랜잭션만 가질 수 있으므로 다른 태스크는 대기.

        사용 예시:
        ```python
        async with adapter.transaction() as tx:
            await tx.execute("INSERT INTO ...")
            # 성공 시 자동 커밋
        ```

        Raises:
            StoreUnavailableError: 잠금 대기 초과, IO 오류
            ConflictError: 제약 조건 위반
        """
        if self._conn is None:
            raise RuntimeError("Not connected to database")

        if self._owns_transaction():
            yield self
            return

        async with self._tx_lock:
            try:
                await self._conn.execute("BEGIN IMMEDIATE")
            except aiosqlite.OperationalError as e:
                if is_transient_error(e):
                    raise StoreUnavailableError(f"Cannot acquire write lock: {e}") from e
                raise

            self._owner_task = asyncio.current_task()
            try:
                yield self
                await self._conn.commit()
            except BaseException as e:
                # CancelledError(타임아웃) 포함 모든 중단은 롤백
                await self._conn.rollback()
                if is_transient_error(e):
                    raise StoreUnavailableError(f"Store unavailable: {e}") from e
                if isinstance(e, aiosqlite.IntegrityError):
                    raise ConflictError(f"Constraint violation: {e}") from e
                raise
            finally:
                self._owner_task = None

    @asynccontextmanager
    async def unit_of_work(self) -> AsyncIterator["SQLiteAdapter"]:
        """작업 단위 컨텍스트 매니저

        파일 DB: 전용 형제 연결을 열어 트랜잭션 실행 후 닫음.
        인메모리 DB: 형제 연결을 열 수 없으므로 현재 연결에서 직렬화.
        같은 태스크가 이미 작업 단위 안이면 그대로 합류.
        """
        if self._owns_transaction():
            yield self
            return

        if self.is_memory:
            async with self.transaction() as tx:
                yield tx
            return

        unit = SQLiteAdapter(self.db_path, busy_timeout_ms=self.busy_timeout_ms)
        await unit.connect()
        try:
            async with unit.transaction() as tx:
                yield tx
        finally:
            await unit.close()

    def _owns_transaction(self) -> bool:
        """현재 태스크가 이 연결의 트랜잭션을 진행 중인지"""
        return self._owner_task is not None and self._owner_task is asyncio.current_task()

    async def table_exists(self, table_name: str) -> bool:
        """테이블 존재 여부 확인"""
        result = await self.fetchone(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?",
            (table_name,),
        )
        return result is not None

    async def get_table_info(self, table_name: str) -> list[dict[str, Any]]:
        """테이블 정보 조회"""
        rows = await self.fetchall(f"PRAGMA table_info({table_name})")

        columns = []
        for row in rows:
            columns.append({
                "cid": row[0],
                "name": row[1],
                "type": row[2],
                "notnull": bool(row[3]),
                "default_value": row[4],
                "pk": bool(row[5]),
            })

        return columns

    # -------------------------------------------------------------------------
    # 컨텍스트 매니저
    # -------------------------------------------------------------------------

    async def __aenter__(self) -> "SQLiteAdapter":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
