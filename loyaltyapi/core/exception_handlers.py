import logging
from typing import Any, Dict

from fastapi import Request
from fastapi.responses import JSONResponse

from .exceptions import BaseAPIException

logger = logging.getLogger("loyaltyapi")


def _request_context(request: Request) -> Dict[str, Any]:
    client = request.client.host if request.client else "-"
    return {
        "method": request.method,
        "url": str(request.url),
        "client": client,
    }


async def handle_base_api_exception(request: Request, exc: BaseAPIException):
    ctx = _request_context(request)
    message = (
        f"[BaseAPIException] {ctx['method']} {ctx['url']} from {ctx['client']} "
        f"-> {exc.status_code}: {exc.error_code} {exc.message}"
    )
    if exc.status_code >= 500:
        logger.error(message)
    else:
        # 검증/충돌 결과는 정상 흐름이므로 에러로 기록하지 않음
        logger.info(message)
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.detail,
        headers=getattr(exc, "headers", None),
    )
