"""
설정 로더

settings.yaml 로드 및 DB / 로깅 설정 생성.
파일이 없으면 core.constants 기본값 사용.

settings.yaml 예시:
```yaml
database:
  path: data/ledger.db      # 상대 경로는 프로젝트 루트 기준, ":memory:" 허용
  busy_timeout_ms: 5000

logging:
  level: INFO
```
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from core.constants import PROJECT_ROOT, Defaults, Paths


@dataclass(frozen=True)
class DatabaseSettings:
    """DB 연결 설정"""

    path: Path | str = Paths.LEDGER_DB
    busy_timeout_ms: int = Defaults.BUSY_TIMEOUT_MS


@dataclass(frozen=True)
class LoggingSettings:
    """로깅 설정"""

    level: str = Defaults.LOG_LEVEL

    @property
    def level_number(self) -> int:
        """logging 모듈 레벨 값"""
        return logging.getLevelName(self.level)


@dataclass(frozen=True)
class AppSettings:
    """애플리케이션 설정 (settings.yaml에서 로드)

    불변 데이터 구조로 설정 변경 방지
    """

    database: DatabaseSettings = field(default_factory=DatabaseSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)


class SettingsLoadError(Exception):
    """Settings 로드 실패 예외"""

    pass


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise SettingsLoadError(f"settings.yaml의 '{name}' 섹션은 매핑이어야 합니다")
    return section


def _resolve_db_path(raw: Any) -> Path | str:
    if raw is None:
        return Paths.LEDGER_DB
    if str(raw) == ":memory:":
        return ":memory:"
    path = Path(str(raw))
    return path if path.is_absolute() else PROJECT_ROOT / path


def load_settings(path: Path | None = None) -> AppSettings:
    """settings.yaml 파일 로드

    Args:
        path: settings.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        AppSettings 인스턴스 (파일이 없으면 기본값)

    Raises:
        SettingsLoadError: 형식이 잘못된 경우
    """
    if path is None:
        path = Paths.SETTINGS_FILE

    if not path.exists():
        return AppSettings()

    try:
        content = path.read_text(encoding="utf-8")
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise SettingsLoadError(f"settings.yaml 파싱 실패: {e}") from e

    if data is None:
        return AppSettings()
    if not isinstance(data, dict):
        raise SettingsLoadError("settings.yaml 최상위는 매핑이어야 합니다")

    database = _section(data, "database")
    busy_timeout = database.get("busy_timeout_ms", Defaults.BUSY_TIMEOUT_MS)
    if isinstance(busy_timeout, bool) or not isinstance(busy_timeout, int) or busy_timeout < 0:
        raise SettingsLoadError(
            f"database.busy_timeout_ms는 0 이상의 정수여야 합니다: {busy_timeout!r}"
        )

    logging_section = _section(data, "logging")
    level = str(logging_section.get("level", Defaults.LOG_LEVEL)).upper()
    if not isinstance(logging.getLevelName(level), int):
        raise SettingsLoadError(f"유효하지 않은 logging.level입니다: '{level}'")

    return AppSettings(
        database=DatabaseSettings(
            path=_resolve_db_path(database.get("path")),
            busy_timeout_ms=busy_timeout,
        ),
        logging=LoggingSettings(level=level),
    )


class Settings:
    """애플리케이션 설정 (싱글턴 패턴)

    settings.yaml을 로드하고 관련 설정을 제공
    """

    _instance: "Settings | None" = None
    _settings: AppSettings | None = None

    def __new__(cls, settings_path: Path | None = None) -> "Settings":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, settings_path: Path | None = None) -> None:
        if self._settings is None:
            self._settings = load_settings(settings_path)

    @property
    def database(self) -> DatabaseSettings:
        """DB 설정"""
        assert self._settings is not None
        return self._settings.database

    @property
    def db_path(self) -> Path | str:
        """DB 경로"""
        return self.database.path

    @property
    def busy_timeout_ms(self) -> int:
        """잠금 대기 시간 (ms)"""
        return self.database.busy_timeout_ms

    @property
    def log_level(self) -> int:
        """로그 레벨"""
        assert self._settings is not None
        return self._settings.logging.level_number

    @classmethod
    def reset(cls) -> None:
        """싱글턴 인스턴스 초기화 (테스트용)"""
        cls._instance = None
        cls._settings = None


def get_settings(settings_path: Path | None = None) -> Settings:
    """Settings 인스턴스 반환

    Args:
        settings_path: settings.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        Settings 싱글턴 인스턴스
    """
    return Settings(settings_path)
