"""
로깅 설정 유틸리티

서비스 호스트와 reconcile CLI가 공유하는 루트 로거 설정.
콘솔은 항상, 파일(logs/<process>/<process>.log, 매일 자정 롤링)은 선택.

사용법:
    setup_logging("cli", level=settings.log_level)
    setup_logging("cli", to_file=False)  # 콘솔만
"""

import logging
import sys
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from core.constants import Paths


LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_BACKUP_COUNT = 7

# DEBUG에서 쿼리마다 로그를 남기는 드라이버
NOISY_LOGGERS = ["aiosqlite"]


def get_log_file_path(process_name: str, logs_dir: Path | None = None) -> Path:
    """logs/<process>/<process>.log"""
    root = logs_dir if logs_dir is not None else Paths.LOGS_DIR
    return root / process_name / f"{process_name}.log"


def setup_logging(
    process_name: str,
    level: int = logging.INFO,
    to_file: bool = True,
    logs_dir: Path | None = None,
) -> logging.Logger:
    """루트 로거 초기화

    기존 핸들러는 닫고 교체하므로 여러 번 호출해도 중복되지 않음.

    Args:
        process_name: 로그 디렉토리/파일 이름 ("service", "cli")
        level: 콘솔/파일 공통 레벨
        to_file: 파일 핸들러 추가 여부
        logs_dir: 로그 루트 디렉토리 (None이면 Paths.LOGS_DIR)

    Returns:
        설정된 루트 Logger
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    log_file = None
    if to_file:
        log_file = get_log_file_path(process_name, logs_dir)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = TimedRotatingFileHandler(
            filename=log_file,
            when="midnight",
            backupCount=LOG_FILE_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.suffix = "%Y-%m-%d"  # cli.log.2026-10-17
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    root_logger.debug(
        f"Logging ready: {process_name} level={logging.getLevelName(level)} file={log_file}"
    )
    return root_logger
