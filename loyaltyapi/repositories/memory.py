"""
인메모리 저장소 구현

OrderStore / BalanceLedger / WithdrawalStore 역할을 데이터베이스 없이 수행합니다.
각 저장소는 하나의 Lock 으로 변경을 직렬화하므로, SQL 구현의 원자적 문장과
같은 보장을 스레드 환경에서 제공합니다.
주문 저장소의 commit=False 변경은 즉시 반영되고 되돌리기 기록이 남아 rollback() 으로 복구됩니다.
잔액/인출 저장소의 commit 인자는 호환을 위해서만 받습니다.
"""

import threading
from datetime import datetime, timezone
from decimal import Decimal
from typing import Collection, Dict, List, Optional

from loyaltyapi.core.exceptions import OrderNumberTakenError
from loyaltyapi.models.order import OrderStatus
from loyaltyapi.schemas.balance import BalanceResponse
from loyaltyapi.schemas.order import Order
from loyaltyapi.schemas.withdrawal import Withdrawal


class InMemoryOrderStore:
    def __init__(self):
        self._lock = threading.Lock()
        self._orders: Dict[int, Order] = {}
        self._by_number: Dict[str, int] = {}
        self._next_id = 1
        self._undo: List[Order] = []

    def create_order(self, number: str, user_id: int, status: str) -> Order:
        with self._lock:
            if number in self._by_number:
                raise OrderNumberTakenError(number)
            order = Order(
                id=self._next_id,
                number=number,
                user_id=user_id,
                status=status,
                accrual=None,
                uploaded_at=datetime.now(timezone.utc),
            )
            self._orders[order.id] = order
            self._by_number[number] = order.id
            self._next_id += 1
            return order.model_copy()

    def get_by_number(self, number: str) -> Optional[Order]:
        with self._lock:
            order_id = self._by_number.get(number)
            if order_id is None:
                return None
            return self._orders[order_id].model_copy()

    def list_by_user(self, user_id: int) -> List[Order]:
        with self._lock:
            orders = [o for o in self._orders.values() if o.user_id == user_id]
        orders.sort(key=lambda o: (o.uploaded_at, o.id), reverse=True)
        return [o.model_copy() for o in orders]

    def list_pending(self) -> List[Order]:
        pending = {s.value for s in OrderStatus.pending()}
        with self._lock:
            orders = [o for o in self._orders.values() if o.status in pending]
        orders.sort(key=lambda o: (o.uploaded_at, o.id))
        return [o.model_copy() for o in orders]

    def update_status(
        self,
        order_id: int,
        status: str,
        accrual: Optional[Decimal],
        only_from: Optional[Collection[str]] = None,
        commit: bool = True,
    ) -> bool:
        with self._lock:
            order = self._orders.get(order_id)
            if order is None:
                return False
            if only_from is not None and order.status not in only_from:
                return False
            if not commit:
                self._undo.append(order)
            self._orders[order_id] = order.model_copy(
                update={"status": status, "accrual": accrual}
            )
            return True

    def commit(self) -> None:
        with self._lock:
            self._undo.clear()

    def rollback(self) -> None:
        with self._lock:
            for previous in reversed(self._undo):
                self._orders[previous.id] = previous
            self._undo.clear()


class InMemoryBalanceLedger:
    def __init__(self):
        self._lock = threading.Lock()
        self._balances: Dict[int, BalanceResponse] = {}

    def get_balance(self, user_id: int) -> BalanceResponse:
        with self._lock:
            balance = self._balances.get(user_id)
            if balance is None:
                return BalanceResponse(current=Decimal("0"), withdrawn=Decimal("0"))
            return balance.model_copy()

    def credit(self, user_id: int, amount: Decimal, commit: bool = True) -> None:
        with self._lock:
            balance = self._balances.get(user_id) or BalanceResponse()
            self._balances[user_id] = BalanceResponse(
                current=balance.current + amount, withdrawn=balance.withdrawn
            )

    def debit(self, user_id: int, amount: Decimal, commit: bool = True) -> bool:
        with self._lock:
            balance = self._balances.get(user_id)
            if balance is None or balance.current < amount:
                return False
            self._balances[user_id] = BalanceResponse(
                current=balance.current - amount,
                withdrawn=balance.withdrawn + amount,
            )
            return True


class InMemoryWithdrawalStore:
    def __init__(self):
        self._lock = threading.Lock()
        self._withdrawals: List[Withdrawal] = []

    def create_withdrawal(
        self, user_id: int, order_number: str, sum: Decimal, commit: bool = True
    ) -> Withdrawal:
        with self._lock:
            withdrawal = Withdrawal(
                id=len(self._withdrawals) + 1,
                user_id=user_id,
                order_number=order_number,
                sum=sum,
                processed_at=datetime.now(timezone.utc),
            )
            self._withdrawals.append(withdrawal)
            return withdrawal.model_copy()

    def list_by_user(self, user_id: int) -> List[Withdrawal]:
        with self._lock:
            withdrawals = [w for w in self._withdrawals if w.user_id == user_id]
        withdrawals.sort(key=lambda w: (w.processed_at, w.id), reverse=True)
        return [w.model_copy() for w in withdrawals]
