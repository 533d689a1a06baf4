"""
스토어 서버 REST API 클라이언트

Bearer 토큰 인증, JSON 요청/응답.
비 2xx 응답은 StoreApiError, 401은 AuthenticationError로 변환.
전송 오류(타임아웃, 연결 실패)는 재시도 후 StoreApiError(status=None).
"""

import asyncio
import logging
from typing import Any

import httpx

from adapters.store_api.errors import AuthenticationError, StoreApiError

logger = logging.getLogger(__name__)


def _error_payload(response: httpx.Response) -> dict[str, Any]:
    """에러 응답 본문 추출 (JSON이 아니면 기본 메시지)"""
    content_type = response.headers.get("content-type", "").lower()
    if "application/json" in content_type:
        try:
            data = response.json()
        except ValueError:
            return {"error": "Request failed"}
        if isinstance(data, dict):
            return data
    return {"error": "Request failed"}


class StoreApiClient:
    """스토어 서버 REST API 클라이언트

    Args:
        base_url: API 베이스 URL (예: http://127.0.0.1:5000)
        token: Bearer 토큰 (None이면 Authorization 헤더 생략)
        timeout: 요청 타임아웃 (초)
        max_retries: 전송 오류 시 최대 시도 횟수
        retry_backoff_sec: 재시도 대기 기본값 (시도 횟수만큼 곱함)
        transport: httpx 전송 계층 (테스트에서 MockTransport 주입)

    사용 예시:
    ```python
    client = StoreApiClient("http://127.0.0.1:5000", token="...")
    rows = await client.get("/api/credit/ledger", params={"user_id": "12"})
    await client.close()
    ```
    """

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float = 30.0,
        max_retries: int = 3,
        retry_backoff_sec: float = 1.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.retry_backoff_sec = retry_backoff_sec
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """HTTP 클라이언트 가져오기 (lazy initialization)"""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """HTTP 클라이언트 종료"""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _parse_response(self, response: httpx.Response, path: str) -> Any:
        """응답 상태 검사 및 JSON 파싱

        Raises:
            AuthenticationError: 401
            StoreApiError: 그 외 비 2xx, 또는 JSON이 아닌 응답
        """
        if response.status_code >= 400:
            payload = _error_payload(response)
            message = str(
                payload.get("error") or payload.get("message") or "Request failed"
            )

            if response.status_code == 401:
                logger.warning("인증 실패 (401)", extra={"path": path})
                raise AuthenticationError(message, payload)

            raise StoreApiError(response.status_code, message, payload)

        content_type = response.headers.get("content-type", "").lower()
        if "application/json" not in content_type:
            preview = " ".join(response.text[:120].split())
            raise StoreApiError(
                response.status_code,
                f"Expected JSON but received {content_type or 'unknown content-type'} "
                f"from {path}. Response starts with: {preview}",
            )

        try:
            return response.json()
        except ValueError as e:
            raise StoreApiError(response.status_code, f"Invalid JSON from {path}") from e

    async def request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json_body: dict[str, Any] | None = None,
    ) -> Any:
        """API 요청 실행

        Args:
            method: HTTP 메서드
            path: API 경로 (예: /api/credit/ledger)
            params: 쿼리 파라미터 (None 값은 제외)
            json_body: JSON 요청 본문

        Returns:
            JSON 응답

        Raises:
            AuthenticationError: 401 응답
            StoreApiError: 그 외 에러 응답 또는 재시도 소진
        """
        query = {k: v for k, v in (params or {}).items() if v is not None}
        client = await self._get_client()
        last_error: Exception | None = None

        for attempt in range(self.max_retries):
            try:
                response = await client.request(
                    method,
                    path,
                    params=query or None,
                    json=json_body,
                    headers=self._headers(),
                )
            except httpx.RequestError as e:
                last_error = e
                logger.warning(
                    "Request error",
                    extra={"path": path, "error": str(e), "attempt": attempt + 1},
                )
                if attempt < self.max_retries - 1:
                    await asyncio.sleep(self.retry_backoff_sec * (attempt + 1))
                    continue
                break

            return self._parse_response(response, path)

        raise StoreApiError(None, f"Request to {path} failed: {last_error}") from last_error

    async def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """GET 요청"""
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json_body: dict[str, Any]) -> Any:
        """POST 요청"""
        return await self.request("POST", path, json_body=json_body)
