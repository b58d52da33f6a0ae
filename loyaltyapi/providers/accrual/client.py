"""
정산 시스템(accrual system) API 클라이언트

GET {base_url}/api/orders/{number}
- 200: {"order": str, "status": str, "accrual": number?}
- 204: 아직 정산 시스템에 등록되지 않은 주문
- 429: Retry-After(초) 동안 모든 호출 중단
- 그 외: 주문 단위의 일시적 실패
"""

import asyncio
import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from loyaltyapi.core.exceptions import AccrualRateLimitError, AccrualServiceError
from loyaltyapi.schemas.accrual import AccrualResponse

logger = logging.getLogger(__name__)


class AccrualClient:
    """정산 시스템 비동기 HTTP 클라이언트"""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        rate_limit_default: int = 60,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            base_url: 정산 시스템 주소 (예: http://localhost:8081)
            timeout: 요청 타임아웃(초)
            rate_limit_default: Retry-After 헤더가 없거나 잘못된 경우 대기 시간(초)
            transport: 테스트용 httpx 트랜스포트
        """
        self.base_url = base_url.rstrip("/")
        self.rate_limit_default = rate_limit_default
        self._timeout = httpx.Timeout(timeout)
        self._transport = transport

        # HTTP 클라이언트 재사용 (연결 풀 유지)
        self._client: Optional[httpx.AsyncClient] = None
        self._client_lock = asyncio.Lock()

    async def _get_client(self) -> httpx.AsyncClient:
        async with self._client_lock:
            if self._client is None or self._client.is_closed:
                self._client = httpx.AsyncClient(
                    base_url=self.base_url,
                    timeout=self._timeout,
                    transport=self._transport,
                )
            return self._client

    async def aclose(self) -> None:
        async with self._client_lock:
            if self._client is not None and not self._client.is_closed:
                await self._client.aclose()
            self._client = None

    def _retry_after(self, response: httpx.Response) -> int:
        raw = response.headers.get("Retry-After", "")
        try:
            seconds = int(raw.strip())
        except ValueError:
            logger.warning(
                f"Missing or invalid Retry-After header {raw!r}, using {self.rate_limit_default}s"
            )
            return self.rate_limit_default
        return max(seconds, 0)

    async def get_order_accrual(self, number: str) -> Optional[AccrualResponse]:
        """주문 정산 상태 조회

        Returns:
            Optional[AccrualResponse]: 정산 결과, 아직 등록되지 않은 주문이면 None

        Raises:
            AccrualRateLimitError: 429 응답
            AccrualServiceError: 전송 오류, 예상하지 못한 상태 코드, 잘못된 응답 본문
        """
        client = await self._get_client()
        try:
            response = await client.get(f"/api/orders/{number}")
        except httpx.TimeoutException as exc:
            raise AccrualServiceError(f"Accrual system timeout for order {number}") from exc
        except httpx.RequestError as exc:
            raise AccrualServiceError(
                f"Accrual system request error for order {number}: {exc}"
            ) from exc

        if response.status_code == httpx.codes.NO_CONTENT:
            return None

        if response.status_code == httpx.codes.TOO_MANY_REQUESTS:
            raise AccrualRateLimitError(self._retry_after(response))

        if response.status_code != httpx.codes.OK:
            raise AccrualServiceError(
                f"Unexpected status code {response.status_code} for order {number}"
            )

        try:
            return AccrualResponse.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise AccrualServiceError(
                f"Malformed accrual response for order {number}: {exc}"
            ) from exc
