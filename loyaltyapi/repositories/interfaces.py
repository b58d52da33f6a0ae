"""
저장소 역할 인터페이스

서비스 계층은 아래 Protocol 에만 의존합니다. 운영 환경에서는 SQLAlchemy 리포지토리가,
테스트에서는 인메모리 구현(repositories/memory.py)이 같은 역할을 수행합니다.
"""

from decimal import Decimal
from typing import Collection, List, Optional, Protocol

from loyaltyapi.schemas.balance import BalanceResponse
from loyaltyapi.schemas.order import Order
from loyaltyapi.schemas.withdrawal import Withdrawal


class OrderStore(Protocol):
    def create_order(self, number: str, user_id: int, status: str) -> Order:
        """주문 생성. 번호 중복 시 OrderNumberTakenError"""
        ...

    def get_by_number(self, number: str) -> Optional[Order]:
        ...

    def list_by_user(self, user_id: int) -> List[Order]:
        """최근 업로드 순"""
        ...

    def list_pending(self) -> List[Order]:
        """NEW/PROCESSING 주문, 오래된 업로드 순"""
        ...

    def update_status(
        self,
        order_id: int,
        status: str,
        accrual: Optional[Decimal],
        only_from: Optional[Collection[str]] = None,
        commit: bool = True,
    ) -> bool:
        """상태/적립금 저장. only_from 이 주어지면 현재 상태가 그 안에 있을 때만 변경

        commit=False 면 commit() 또는 rollback() 호출 전까지 확정되지 않음
        """
        ...

    def commit(self) -> None:
        ...

    def rollback(self) -> None:
        """보류 중인 상태 변경 취소"""
        ...


class BalanceLedger(Protocol):
    def get_balance(self, user_id: int) -> BalanceResponse:
        ...

    def credit(self, user_id: int, amount: Decimal, commit: bool = True) -> None:
        """current += amount (원자적 upsert)"""
        ...

    def debit(self, user_id: int, amount: Decimal, commit: bool = True) -> bool:
        """current >= amount 일 때만 차감, 성공 여부 반환 (원자적 조건부 update)"""
        ...


class WithdrawalStore(Protocol):
    def create_withdrawal(
        self, user_id: int, order_number: str, sum: Decimal, commit: bool = True
    ) -> Withdrawal:
        ...

    def list_by_user(self, user_id: int) -> List[Withdrawal]:
        """최근 인출 순"""
        ...
