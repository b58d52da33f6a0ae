import asyncio
from decimal import Decimal

import httpx
import pytest

from loyaltyapi.core.exceptions import AccrualRateLimitError, AccrualServiceError
from loyaltyapi.providers.accrual.client import AccrualClient

ORDER_NUMBER = "79927398713"


def _client(handler, **kwargs) -> AccrualClient:
    return AccrualClient(
        "http://accrual.local/", transport=httpx.MockTransport(handler), **kwargs
    )


def _fetch(client: AccrualClient, number: str = ORDER_NUMBER):
    async def scenario():
        try:
            return await client.get_order_accrual(number)
        finally:
            await client.aclose()

    return asyncio.run(scenario())


class TestAccrualClient:
    """정산 시스템 클라이언트 테스트"""

    def test_processed_order(self):
        requested = []

        def handler(request: httpx.Request) -> httpx.Response:
            requested.append(str(request.url))
            return httpx.Response(
                200, json={"order": ORDER_NUMBER, "status": "PROCESSED", "accrual": 500}
            )

        result = _fetch(_client(handler))

        assert requested == [f"http://accrual.local/api/orders/{ORDER_NUMBER}"]
        assert result.order == ORDER_NUMBER
        assert result.status == "PROCESSED"
        assert result.accrual == Decimal("500")

    def test_accrual_is_optional(self):
        def handler(request):
            return httpx.Response(200, json={"order": ORDER_NUMBER, "status": "PROCESSING"})

        result = _fetch(_client(handler))

        assert result.status == "PROCESSING"
        assert result.accrual is None

    def test_unregistered_order_returns_none(self):
        result = _fetch(_client(lambda request: httpx.Response(204)))

        assert result is None

    def test_rate_limit_uses_retry_after_header(self):
        def handler(request):
            return httpx.Response(429, headers={"Retry-After": "30"}, text="No more than N requests per minute allowed")

        with pytest.raises(AccrualRateLimitError) as exc_info:
            _fetch(_client(handler))

        assert exc_info.value.retry_after == 30

    @pytest.mark.parametrize("headers", [{}, {"Retry-After": "soon"}])
    def test_rate_limit_falls_back_to_default(self, headers):
        def handler(request):
            return httpx.Response(429, headers=headers)

        with pytest.raises(AccrualRateLimitError) as exc_info:
            _fetch(_client(handler, rate_limit_default=45))

        assert exc_info.value.retry_after == 45

    def test_server_error_is_transient_failure(self):
        with pytest.raises(AccrualServiceError) as exc_info:
            _fetch(_client(lambda request: httpx.Response(500)))

        assert not isinstance(exc_info.value, AccrualRateLimitError)

    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(200, text="not json"),
            httpx.Response(200, json={"status": "PROCESSED"}),
            httpx.Response(200, json={"order": ORDER_NUMBER, "status": "PROCESSED", "accrual": -1}),
        ],
    )
    def test_malformed_body_is_transient_failure(self, response):
        with pytest.raises(AccrualServiceError):
            _fetch(_client(lambda request: response))

    def test_transport_error_is_transient_failure(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(AccrualServiceError):
            _fetch(_client(handler))
