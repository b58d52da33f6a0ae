from decimal import Decimal
from typing import Collection, List, Optional

from loyaltyapi.core.exceptions import (
    BaseAPIException,
    InvalidOrderNumberError,
    OrderAlreadyUploadedError,
    OrderNumberTakenError,
    OrderOwnershipConflictError,
    StorageError,
)
from loyaltyapi.models.order import OrderStatus
from loyaltyapi.repositories.interfaces import OrderStore
from loyaltyapi.schemas.common import to_points
from loyaltyapi.schemas.order import Order
from loyaltyapi.utils.luhn import is_valid_luhn
import logging

logger = logging.getLogger(__name__)


class OrderService:
    """주문 업로드 및 상태 전이를 담당하는 서비스"""

    def __init__(self, order_store: OrderStore):
        self.order_store = order_store

    def upload_order(self, number: str, user_id: int) -> Order:
        """주문 번호 업로드

        Args:
            number: 주문 번호 (Luhn 검증 대상)
            user_id: 업로드 사용자 ID

        Returns:
            Order: 새로 생성된 주문 (status=NEW)

        Raises:
            InvalidOrderNumberError: Luhn 검증 실패
            OrderAlreadyUploadedError: 같은 사용자가 이미 업로드함 (멱등)
            OrderOwnershipConflictError: 다른 사용자가 이미 업로드함
            StorageError: 저장소 오류
        """
        if not is_valid_luhn(number):
            raise InvalidOrderNumberError(number)

        try:
            existing = self.order_store.get_by_number(number)
            if existing is not None:
                self._raise_for_existing(existing, user_id)

            try:
                order = self.order_store.create_order(
                    number=number, user_id=user_id, status=OrderStatus.NEW.value
                )
            except OrderNumberTakenError:
                # 조회와 삽입 사이에 다른 요청이 먼저 등록한 경우
                winner = self.order_store.get_by_number(number)
                if winner is None:
                    raise
                self._raise_for_existing(winner, user_id)

            logger.info(f"Order {number} uploaded by user {user_id}")
            return order
        except BaseAPIException:
            raise
        except Exception as e:
            logger.error(f"Failed to upload order {number} for user {user_id}: {str(e)}")
            raise StorageError(f"Failed to upload order: {str(e)}") from e

    @staticmethod
    def _raise_for_existing(existing: Order, user_id: int) -> None:
        if existing.user_id == user_id:
            raise OrderAlreadyUploadedError(existing.number)
        raise OrderOwnershipConflictError(existing.number)

    def list_orders(self, user_id: int) -> List[Order]:
        """사용자 주문 목록 (최근 업로드 순)"""
        try:
            return self.order_store.list_by_user(user_id)
        except Exception as e:
            logger.error(f"Failed to list orders for user {user_id}: {str(e)}")
            raise StorageError(f"Failed to list orders: {str(e)}") from e

    def list_pending(self) -> List[Order]:
        """NEW/PROCESSING 주문 목록 (오래된 업로드 순)"""
        try:
            return self.order_store.list_pending()
        except Exception as e:
            logger.error(f"Failed to list pending orders: {str(e)}")
            raise StorageError(f"Failed to list pending orders: {str(e)}") from e

    def advance_status(
        self,
        order_id: int,
        status: str,
        accrual: Optional[Decimal] = None,
        only_from: Optional[Collection[str]] = None,
        commit: bool = True,
    ) -> bool:
        """주문 상태/적립금 저장 (정산 워커 전용)

        only_from 이 없으면 현재 상태와 무관하게 덮어씁니다.
        적립금은 소수 둘째 자리로 반올림해 양수일 때만 기록됩니다.
        commit=False 면 commit()/rollback() 으로 확정 여부를 정합니다.

        Returns:
            bool: 행이 변경되었는지 여부
        """
        stored_accrual = to_points(accrual) if accrual is not None else None
        if stored_accrual is not None and stored_accrual <= 0:
            stored_accrual = None
        try:
            return self.order_store.update_status(
                order_id, status, stored_accrual, only_from=only_from, commit=commit
            )
        except Exception as e:
            logger.error(f"Failed to update order {order_id} to {status}: {str(e)}")
            raise StorageError(f"Failed to update order status: {str(e)}") from e

    def commit(self) -> None:
        """보류 중인 상태 변경 확정 (같은 세션의 잔액 적립 포함)"""
        try:
            self.order_store.commit()
        except Exception as e:
            logger.error(f"Failed to commit order status changes: {str(e)}")
            raise StorageError(f"Failed to commit order status: {str(e)}") from e

    def rollback(self) -> None:
        """보류 중인 상태 변경 취소"""
        self.order_store.rollback()
