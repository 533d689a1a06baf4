"""
하드코딩 상수 - 변경될 일이 거의 없는 고정값

중요: 경로는 반드시 pathlib.Path 사용 (Windows/Linux 크로스 플랫폼)
"""

from pathlib import Path


# 프로젝트 루트 (이 파일 기준 2단계 상위: core/constants.py → storeledger/)
PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent


class LedgerEndpoints:
    """스토어 서버 API 엔드포인트 (고정값)

    구버전 서버는 일부 엔드포인트가 없으므로 후보 목록을 순서대로 시도.
    {id}는 계정 ID로 치환.
    """

    # 고객 외상(khata) 원장
    CUSTOMER_LEDGER: str = "/api/credit/ledger"
    CUSTOMER_HISTORY: str = "/api/users/{id}/credit-history"
    CUSTOMER_BALANCE: str = "/api/users/{id}/credit-balance"
    CUSTOMER_ADD: str = "/api/users/{id}/credit"
    USERS: str = "/api/users"

    # 거래처(distributor) 미지급 원장
    DISTRIBUTOR_LEDGER_ALL: tuple[str, ...] = (
        "/api/distributor-ledger",
        "/api/distributors/ledger",
    )
    DISTRIBUTOR_LEDGER_BY_ID: tuple[str, ...] = (
        "/api/distributors/{id}/ledger",
        "/api/distributors/{id}/credit-history",
    )
    DISTRIBUTOR_LEDGER_ADD: tuple[str, ...] = (
        "/api/distributors/{id}/ledger",
        "/api/distributors/{id}/transactions",
        "/api/distributors/{id}/credit",
        "/api/distributor-ledger",
        "/api/distributors/ledger",
    )
    DISTRIBUTOR_BALANCE: str = "/api/distributors/{id}/balance"

    # 발주서
    PURCHASE_ORDERS: str = "/api/purchase-orders"


class Defaults:
    """기본값 상수"""

    API_BASE_URL: str = "http://127.0.0.1:5000"
    TIMEOUT_SEC: float = 30.0

    # Pending 항목을 원격 항목과 매칭할 때 허용하는 날짜 차이 (일)
    PROMOTION_WINDOW_DAYS: int = 1


class Paths:
    """프로젝트 경로 상수 (pathlib 사용 - OS 독립적)"""

    # 디렉토리
    CONFIG_DIR: Path = PROJECT_ROOT / "config"
    DATA_DIR: Path = PROJECT_ROOT / "data"
    LOGS_DIR: Path = PROJECT_ROOT / "logs"
    ENGINE_LOGS_DIR: Path = LOGS_DIR / "engine"

    # 설정 파일
    SETTINGS_FILE: Path = CONFIG_DIR / "settings.yaml"

    # 로컬 DB 파일 (Pending 큐 등 클라이언트 상태)
    LOCAL_DB: Path = DATA_DIR / "storeledger_local.db"
