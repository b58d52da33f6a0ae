from fastapi import Depends
from sqlalchemy.orm import Session

from loyaltyapi.database.session import get_db
from loyaltyapi.repositories.balance_repository import BalanceRepository
from loyaltyapi.repositories.order_repository import OrderRepository
from loyaltyapi.repositories.withdrawal_repository import WithdrawalRepository

# Services
from loyaltyapi.services.balance_service import BalanceService
from loyaltyapi.services.order_service import OrderService
from loyaltyapi.services.withdrawal_service import WithdrawalService


def get_order_service(db: Session = Depends(get_db)) -> OrderService:
    return OrderService(order_store=OrderRepository(db))


def get_balance_service(db: Session = Depends(get_db)) -> BalanceService:
    return BalanceService(ledger=BalanceRepository(db))


def get_withdrawal_service(db: Session = Depends(get_db)) -> WithdrawalService:
    # 차감과 인출 기록이 같은 세션(트랜잭션)을 공유
    return WithdrawalService(
        balance_service=BalanceService(ledger=BalanceRepository(db)),
        withdrawal_store=WithdrawalRepository(db),
    )
