"""
잔액/인출 API 라우터

- GET  /api/user/balance: 현재 잔액과 누적 인출액
- POST /api/user/balance/withdraw: 포인트 인출
- GET  /api/user/withdrawals: 인출 내역 (최근 순)
"""

from typing import List

from fastapi import APIRouter, Depends, Response, status

from loyaltyapi.core.security import get_current_user_id
from loyaltyapi.deps import get_balance_service, get_withdrawal_service
from loyaltyapi.schemas.balance import BalanceResponse
from loyaltyapi.schemas.withdrawal import WithdrawalRequest, WithdrawalResponse
from loyaltyapi.services.balance_service import BalanceService
from loyaltyapi.services.withdrawal_service import WithdrawalService

router = APIRouter(prefix="/api/user", tags=["balance"])


@router.get("/balance", response_model=BalanceResponse)
def get_balance(
    user_id: int = Depends(get_current_user_id),
    balance_service: BalanceService = Depends(get_balance_service),
) -> BalanceResponse:
    return balance_service.get_balance(user_id)


@router.post(
    "/balance/withdraw",
    responses={
        402: {"description": "Insufficient balance"},
        422: {"description": "Invalid order number or sum"},
    },
)
def withdraw(
    request: WithdrawalRequest,
    user_id: int = Depends(get_current_user_id),
    withdrawal_service: WithdrawalService = Depends(get_withdrawal_service),
) -> Response:
    """포인트 인출 - 잔액 부족 시 402"""
    withdrawal_service.withdraw(user_id, request.order, request.sum)
    return Response(status_code=status.HTTP_200_OK)


@router.get(
    "/withdrawals",
    response_model=List[WithdrawalResponse],
    responses={204: {"description": "No withdrawals"}},
)
def list_withdrawals(
    user_id: int = Depends(get_current_user_id),
    withdrawal_service: WithdrawalService = Depends(get_withdrawal_service),
):
    withdrawals = withdrawal_service.list_withdrawals(user_id)
    if not withdrawals:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return [
        WithdrawalResponse.model_validate(w, from_attributes=True) for w in withdrawals
    ]
