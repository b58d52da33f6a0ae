from decimal import Decimal

from loyaltyapi.core.exceptions import (
    InsufficientBalanceError,
    InvalidAmountError,
    StorageError,
)
from loyaltyapi.repositories.interfaces import BalanceLedger
from loyaltyapi.schemas.balance import BalanceResponse
from loyaltyapi.schemas.common import to_points
import logging

logger = logging.getLogger(__name__)


class BalanceService:
    """포인트 잔액 조회/적립/차감 서비스"""

    def __init__(self, ledger: BalanceLedger):
        self.ledger = ledger

    def get_balance(self, user_id: int) -> BalanceResponse:
        """사용자 잔액 조회 - 기록이 없으면 0/0"""
        try:
            return self.ledger.get_balance(user_id)
        except Exception as e:
            logger.error(f"Failed to get balance for user {user_id}: {str(e)}")
            raise StorageError(f"Failed to retrieve balance: {str(e)}") from e

    def credit(self, user_id: int, amount: Decimal, commit: bool = True) -> None:
        """포인트 적립 (원자적 upsert)

        금액은 소수 둘째 자리로 반올림한 뒤 검증합니다.

        Raises:
            InvalidAmountError: 반올림한 amount <= 0
        """
        amount = to_points(amount)
        if amount <= 0:
            raise InvalidAmountError(details={"amount": str(amount)})

        try:
            self.ledger.credit(user_id, amount, commit=commit)
        except Exception as e:
            logger.error(f"Failed to credit {amount} to user {user_id}: {str(e)}")
            raise StorageError(f"Failed to credit balance: {str(e)}") from e

        logger.info(f"Credited {amount} points to user {user_id}")

    def debit(self, user_id: int, amount: Decimal, commit: bool = True) -> None:
        """포인트 차감 (current >= amount 조건부 원자적 update)

        Raises:
            InvalidAmountError: 반올림한 amount <= 0
            InsufficientBalanceError: 조건부 update 영향 행 0
        """
        amount = to_points(amount)
        if amount <= 0:
            raise InvalidAmountError(details={"amount": str(amount)})

        try:
            debited = self.ledger.debit(user_id, amount, commit=commit)
        except Exception as e:
            logger.error(f"Failed to debit {amount} from user {user_id}: {str(e)}")
            raise StorageError(f"Failed to debit balance: {str(e)}") from e

        if not debited:
            raise InsufficientBalanceError(
                details={"user_id": user_id, "requested": str(amount)}
            )

        logger.info(f"Debited {amount} points from user {user_id}")
