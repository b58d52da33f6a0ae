import logging
import time

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

logger = logging.getLogger("loyaltyapi")

# 헬스체크 프로브는 DEBUG 로만 기록
QUIET_PATHS = frozenset({"/health"})


class LoggingMiddleware(BaseHTTPMiddleware):
    """요청/응답 접근 로그 (상태 코드와 처리 시간)"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        started = time.perf_counter()
        target = f"{request.method} {request.url.path}"
        client = request.client.host if request.client else "-"

        try:
            response = await call_next(request)
        except Exception:
            logger.exception(f"[Unhandled Error] {target} from {client}")
            raise

        duration_ms = (time.perf_counter() - started) * 1000
        message = f"[Response] {target} from {client} -> {response.status_code} in {duration_ms:.1f}ms"
        if response.status_code >= 500:
            logger.error(message)
        elif request.url.path in QUIET_PATHS:
            logger.debug(message)
        else:
            logger.info(message)
        return response
