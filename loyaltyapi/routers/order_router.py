"""
주문 API 라우터

- POST /api/user/orders: 주문 번호 업로드 (text/plain)
- GET  /api/user/orders: 내 주문 목록 (최근 업로드 순)
"""

from typing import List

from fastapi import APIRouter, Depends, Request, Response, status
from starlette.concurrency import run_in_threadpool

from loyaltyapi.core.exceptions import OrderAlreadyUploadedError, ValidationError
from loyaltyapi.core.security import get_current_user_id
from loyaltyapi.deps import get_order_service
from loyaltyapi.schemas.order import OrderResponse
from loyaltyapi.services.order_service import OrderService

router = APIRouter(prefix="/api/user", tags=["orders"])


@router.post(
    "/orders",
    status_code=status.HTTP_202_ACCEPTED,
    responses={200: {"description": "Order already uploaded by this user"}},
)
async def upload_order(
    request: Request,
    user_id: int = Depends(get_current_user_id),
    order_service: OrderService = Depends(get_order_service),
) -> Response:
    """
    주문 번호 업로드

    HTTP Status:
        202: 새 주문 접수
        200: 이미 내가 업로드한 주문
        400: 빈 요청 본문
        401: 인증 실패
        409: 다른 사용자가 업로드한 주문
        422: 주문 번호 형식 오류 (Luhn)
    """
    body = await request.body()
    number = body.decode("utf-8", errors="replace").strip()
    if not number:
        raise ValidationError("Order number is required")

    try:
        await run_in_threadpool(order_service.upload_order, number, user_id)
    except OrderAlreadyUploadedError:
        return Response(status_code=status.HTTP_200_OK)

    return Response(status_code=status.HTTP_202_ACCEPTED)


@router.get(
    "/orders",
    response_model=List[OrderResponse],
    response_model_exclude_none=True,
    responses={204: {"description": "No orders uploaded"}},
)
def list_orders(
    user_id: int = Depends(get_current_user_id),
    order_service: OrderService = Depends(get_order_service),
):
    """내 주문 목록 - 없으면 204"""
    orders = order_service.list_orders(user_id)
    if not orders:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return [OrderResponse.model_validate(order, from_attributes=True) for order in orders]
