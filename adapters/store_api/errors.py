"""
스토어 서버 API 에러

HTTP 상태 코드를 담는 타입 에러.
401만 호출자(세션 재설정)까지 전파되고, 그 외는 Reconciler/Writer에서 degraded 처리.
"""

from typing import Any


class StoreApiError(Exception):
    """스토어 서버 API 에러

    비 2xx 응답, JSON이 아닌 응답, 재시도 소진 시 발생.

    Attributes:
        status: HTTP 상태 코드 (전송 오류 등 응답이 없으면 None)
        message: 에러 메시지 (응답 본문의 error/message 필드)
        payload: 에러 응답 본문 (JSON이 아니면 빈 dict)
    """

    def __init__(
        self,
        status: int | None,
        message: str,
        payload: dict[str, Any] | None = None,
    ):
        self.status = status
        self.message = message
        self.payload = payload or {}
        super().__init__(f"Store API Error [{status}]: {message}")

    @property
    def is_not_found(self) -> bool:
        """엔드포인트 없음(404) 여부"""
        return self.status == 404


class AuthenticationError(StoreApiError):
    """인증 실패 (401)

    재시도하지 않음. 호출자가 세션을 초기화해야 함.
    """

    def __init__(self, message: str = "Unauthorized", payload: dict[str, Any] | None = None):
        super().__init__(401, message, payload)


class EndpointUnavailableError(StoreApiError):
    """구버전 서버에 원장 엔드포인트가 없음

    후보 엔드포인트가 모두 404를 반환하면 발생하며,
    이후 같은 클라이언트에서는 요청 없이 바로 발생.
    """

    def __init__(self, message: str = "Ledger endpoint not available on server"):
        super().__init__(404, message)
