"""
StoreApiClient 테스트

httpx.MockTransport로 서버 응답을 시뮬레이션.
"""

import json

import httpx
import pytest

from adapters.store_api.errors import AuthenticationError, StoreApiError
from adapters.store_api.rest_client import StoreApiClient


def _client(handler, **kwargs) -> StoreApiClient:
    return StoreApiClient(
        "http://store.test/",
        transport=httpx.MockTransport(handler),
        retry_backoff_sec=0,
        **kwargs,
    )


class TestRequest:
    """요청/응답 처리 테스트"""

    @pytest.mark.asyncio
    async def test_get_json(self) -> None:
        """JSON 응답 반환 + Bearer 헤더 + None 파라미터 제외"""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=[{"id": 1}])

        client = _client(handler, token="tok")
        data = await client.get("/api/credit/ledger", params={"user_id": "12", "x": None})
        await client.close()

        assert data == [{"id": 1}]
        assert seen[0].url.path == "/api/credit/ledger"
        assert seen[0].url.params["user_id"] == "12"
        assert "x" not in seen[0].url.params
        assert seen[0].headers["Authorization"] == "Bearer tok"

    @pytest.mark.asyncio
    async def test_no_token_no_auth_header(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert "Authorization" not in request.headers
            return httpx.Response(200, json={})

        client = _client(handler)
        assert await client.get("/api/users") == {}
        await client.close()

    @pytest.mark.asyncio
    async def test_post_body(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.method == "POST"
            assert json.loads(request.content) == {"amount": 100.0}
            return httpx.Response(201, json={"id": 5})

        client = _client(handler)
        assert await client.post("/api/users/1/credit", {"amount": 100.0}) == {"id": 5}
        await client.close()


class TestErrors:
    """에러 변환 테스트"""

    @pytest.mark.asyncio
    async def test_401_raises_authentication_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, json={"error": "Token expired"})

        client = _client(handler)
        with pytest.raises(AuthenticationError) as exc_info:
            await client.get("/api/credit/ledger")
        await client.close()

        assert exc_info.value.status == 401
        assert exc_info.value.message == "Token expired"

    @pytest.mark.asyncio
    async def test_error_message_from_payload(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, json={"message": "db down"})

        client = _client(handler)
        with pytest.raises(StoreApiError) as exc_info:
            await client.get("/api/users")
        await client.close()

        assert exc_info.value.status == 500
        assert exc_info.value.message == "db down"
        assert exc_info.value.payload == {"message": "db down"}

    @pytest.mark.asyncio
    async def test_404_is_not_found(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, text="Not Found")

        client = _client(handler)
        with pytest.raises(StoreApiError) as exc_info:
            await client.get("/api/distributor-ledger")
        await client.close()

        assert exc_info.value.is_not_found
        assert exc_info.value.message == "Request failed"

    @pytest.mark.asyncio
    async def test_html_response_rejected(self) -> None:
        """JSON이 아닌 2xx 응답은 에러"""
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                text="<!doctype html><html>login</html>",
                headers={"content-type": "text/html"},
            )

        client = _client(handler)
        with pytest.raises(StoreApiError, match="Expected JSON"):
            await client.get("/api/credit/ledger")
        await client.close()


class TestRetry:
    """전송 오류 재시도 테스트"""

    @pytest.mark.asyncio
    async def test_retries_then_succeeds(self) -> None:
        attempts = []

        def handler(request: httpx.Request) -> httpx.Response:
            attempts.append(1)
            if len(attempts) < 3:
                raise httpx.ConnectError("refused", request=request)
            return httpx.Response(200, json={"ok": True})

        client = _client(handler, max_retries=3)
        assert await client.get("/api/users") == {"ok": True}
        await client.close()

        assert len(attempts) == 3

    @pytest.mark.asyncio
    async def test_retries_exhausted(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        client = _client(handler, max_retries=2)
        with pytest.raises(StoreApiError) as exc_info:
            await client.get("/api/users")
        await client.close()

        assert exc_info.value.status is None

    @pytest.mark.asyncio
    async def test_http_errors_not_retried(self) -> None:
        attempts = []

        def handler(request: httpx.Request) -> httpx.Response:
            attempts.append(1)
            return httpx.Response(503, json={"error": "busy"})

        client = _client(handler, max_retries=3)
        with pytest.raises(StoreApiError):
            await client.get("/api/users")
        await client.close()

        assert len(attempts) == 1
