from decimal import Decimal
from typing import List

from loyaltyapi.core.exceptions import (
    InvalidAmountError,
    InvalidOrderNumberError,
    StorageError,
)
from loyaltyapi.repositories.interfaces import WithdrawalStore
from loyaltyapi.schemas.common import to_points
from loyaltyapi.schemas.withdrawal import Withdrawal
from loyaltyapi.services.balance_service import BalanceService
from loyaltyapi.utils.luhn import is_valid_luhn
import logging

logger = logging.getLogger(__name__)


class WithdrawalService:
    """포인트 인출 서비스

    차감과 인출 내역 기록은 같은 세션에서 처리되어,
    내역 기록이 실패하면 차감도 함께 롤백됩니다.
    """

    def __init__(self, balance_service: BalanceService, withdrawal_store: WithdrawalStore):
        self.balance_service = balance_service
        self.withdrawal_store = withdrawal_store

    def withdraw(self, user_id: int, order_number: str, sum: Decimal) -> Withdrawal:
        """포인트 인출

        Args:
            user_id: 사용자 ID
            order_number: 참조 주문 번호 (Luhn 검증, 주문 존재 여부는 보지 않음)
            sum: 인출 포인트 (소수 둘째 자리로 반올림)

        Raises:
            InvalidOrderNumberError: Luhn 검증 실패
            InvalidAmountError: 반올림한 sum <= 0
            InsufficientBalanceError: 잔액 부족
            StorageError: 저장소 오류
        """
        if not is_valid_luhn(order_number):
            raise InvalidOrderNumberError(order_number)
        sum = to_points(sum)
        if sum <= 0:
            raise InvalidAmountError(details={"sum": str(sum)})

        self.balance_service.debit(user_id, sum, commit=False)

        try:
            withdrawal = self.withdrawal_store.create_withdrawal(
                user_id=user_id, order_number=order_number, sum=sum
            )
        except Exception as e:
            logger.error(
                f"Failed to record withdrawal of {sum} for user {user_id}: {str(e)}"
            )
            raise StorageError(f"Failed to record withdrawal: {str(e)}") from e

        logger.info(f"User {user_id} withdrew {sum} points against order {order_number}")
        return withdrawal

    def list_withdrawals(self, user_id: int) -> List[Withdrawal]:
        """사용자 인출 내역 (최근 순)"""
        try:
            return self.withdrawal_store.list_by_user(user_id)
        except Exception as e:
            logger.error(f"Failed to list withdrawals for user {user_id}: {str(e)}")
            raise StorageError(f"Failed to list withdrawals: {str(e)}") from e
