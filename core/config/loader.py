"""
설정 로더

settings.yaml 로드 및 API/로컬 저장소 설정 생성
"""

from dataclasses import dataclass
from pathlib import Path

import yaml

from core.constants import Defaults, Paths, PROJECT_ROOT


@dataclass(frozen=True)
class Settings:
    """애플리케이션 설정 (settings.yaml에서 로드)

    불변 데이터 구조로 설정 변경 방지
    """

    api_base_url: str
    api_token: str | None
    timeout_sec: float
    db_path: Path
    promotion_window_days: int


class SettingsLoadError(Exception):
    """Settings 로드 실패 예외"""

    pass


def _resolve_db_path(value: str | None) -> Path:
    """DB 경로 해석 (상대 경로는 프로젝트 루트 기준)"""
    if not value:
        return Paths.LOCAL_DB

    path = Path(value)
    if not path.is_absolute():
        path = PROJECT_ROOT / path
    return path


def load_settings(path: Path | None = None) -> Settings:
    """settings.yaml 파일 로드

    Args:
        path: settings.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        Settings 인스턴스

    Raises:
        SettingsLoadError: 파일이 없거나 형식이 잘못된 경우
    """
    if path is None:
        path = Paths.SETTINGS_FILE

    if not path.exists():
        raise SettingsLoadError(f"settings.yaml 파일을 찾을 수 없습니다: {path}")

    try:
        content = path.read_text(encoding="utf-8")
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise SettingsLoadError(f"settings.yaml 파싱 실패: {e}") from e

    if data is None:
        raise SettingsLoadError("settings.yaml이 비어 있습니다")

    if not isinstance(data, dict):
        raise SettingsLoadError("settings.yaml 최상위는 매핑이어야 합니다")

    api_config = data.get("api") or {}
    base_url = api_config.get("base_url") or Defaults.API_BASE_URL
    if not isinstance(base_url, str) or not base_url.startswith(("http://", "https://")):
        raise SettingsLoadError(
            f"api.base_url은 http(s) URL이어야 합니다: {base_url!r}"
        )

    token = api_config.get("token") or None

    try:
        timeout_sec = float(api_config.get("timeout_sec", Defaults.TIMEOUT_SEC))
    except (TypeError, ValueError) as e:
        raise SettingsLoadError("api.timeout_sec는 숫자여야 합니다") from e

    storage_config = data.get("storage") or {}
    db_path = _resolve_db_path(storage_config.get("db_path"))

    ledger_config = data.get("ledger") or {}
    try:
        window_days = int(
            ledger_config.get("promotion_window_days", Defaults.PROMOTION_WINDOW_DAYS)
        )
    except (TypeError, ValueError) as e:
        raise SettingsLoadError("ledger.promotion_window_days는 정수여야 합니다") from e

    if window_days < 0:
        raise SettingsLoadError("ledger.promotion_window_days는 0 이상이어야 합니다")

    return Settings(
        api_base_url=base_url.rstrip("/"),
        api_token=token,
        timeout_sec=timeout_sec,
        db_path=db_path,
        promotion_window_days=window_days,
    )


class AppSettings:
    """애플리케이션 설정 (싱글턴 패턴)

    settings.yaml을 로드하고 관련 설정을 제공
    """

    _instance: "AppSettings | None" = None
    _settings: Settings | None = None

    def __new__(cls, settings_path: Path | None = None) -> "AppSettings":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, settings_path: Path | None = None) -> None:
        if self._settings is None:
            self._settings = load_settings(settings_path)

    @property
    def settings(self) -> Settings:
        """로드된 Settings"""
        assert self._settings is not None
        return self._settings

    @property
    def api_base_url(self) -> str:
        """스토어 서버 API URL"""
        return self.settings.api_base_url

    @property
    def db_path(self) -> Path:
        """로컬 DB 경로"""
        return self.settings.db_path

    @classmethod
    def reset(cls) -> None:
        """싱글턴 인스턴스 초기화 (테스트용)"""
        cls._instance = None
        cls._settings = None


def get_settings(settings_path: Path | None = None) -> AppSettings:
    """AppSettings 인스턴스 반환

    Args:
        settings_path: settings.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        AppSettings 싱글턴 인스턴스
    """
    return AppSettings(settings_path)
