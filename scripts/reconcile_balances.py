"""
계좌 잔액 재조정

모든 계좌(보관 포함)의 잔액을 거래 내역으로 다시 계산하고,
저장된 값이 어긋난 계좌를 복구.

사용법:
    python -m scripts.reconcile_balances
    python -m scripts.reconcile_balances --settings config/settings.yaml
    python -m scripts.reconcile_balances --db data/ledger.db
"""

import argparse
import asyncio
import logging
from pathlib import Path

from core.config.loader import SettingsLoadError, get_settings
from core.constants import Defaults
from core.errors import StoreUnavailableError
from core.ledger.coordinator import BalanceDrift
from core.logging import setup_logging
from services.bootstrap import open_services

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_DRIFT = 1
EXIT_ERROR = 2


async def reconcile(
    db_path: Path | str,
    busy_timeout_ms: int = Defaults.BUSY_TIMEOUT_MS,
) -> list[BalanceDrift]:
    """전체 계좌 재조정

    Returns:
        복구된 계좌 목록
    """
    async with open_services(db_path, busy_timeout_ms) as services:
        return await services.coordinator.reconcile_all()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="계좌 잔액 재조정 (전체 재계산)"
    )
    parser.add_argument(
        "--settings",
        type=Path,
        default=None,
        help="settings.yaml 경로 (기본: config/settings.yaml)",
    )
    parser.add_argument(
        "--db",
        type=Path,
        default=None,
        help="DB 파일 경로 (settings.yaml 값보다 우선)",
    )
    parser.add_argument(
        "--no-file-log",
        action="store_true",
        help="파일 로그 없이 콘솔만 사용",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI 진입점

    Returns:
        0: 모두 일치, 1: 복구한 계좌 있음, 2: 실행 실패
    """
    args = build_parser().parse_args(argv)

    try:
        settings = get_settings(args.settings)
    except SettingsLoadError as e:
        setup_logging("cli", to_file=False)
        logger.error(f"설정 로드 실패: {e}")
        return EXIT_ERROR

    setup_logging("cli", level=settings.log_level, to_file=not args.no_file_log)

    db_path = args.db if args.db is not None else settings.db_path
    logger.info(f"재조정 시작: {db_path}")

    try:
        drifts = asyncio.run(reconcile(db_path, settings.busy_timeout_ms))
    except StoreUnavailableError as e:
        logger.error(f"저장소 사용 불가: {e}")
        return EXIT_ERROR

    for drift in drifts:
        print(
            f"{drift.account_id}\towner={drift.owner_id}\t"
            f"stored={drift.stored}\tcomputed={drift.computed}"
        )

    logger.info(f"재조정 완료: 복구 {len(drifts)}건")
    return EXIT_DRIFT if drifts else EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
