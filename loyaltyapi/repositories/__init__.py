# Repository layer - Data access with Pydantic responses

from .base import BaseRepository
from .interfaces import BalanceLedger, OrderStore, WithdrawalStore
from .order_repository import OrderRepository
from .balance_repository import BalanceRepository
from .withdrawal_repository import WithdrawalRepository
from .memory import InMemoryBalanceLedger, InMemoryOrderStore, InMemoryWithdrawalStore

__all__ = [
    "BaseRepository",
    "OrderStore",
    "BalanceLedger",
    "WithdrawalStore",
    "OrderRepository",
    "BalanceRepository",
    "WithdrawalRepository",
    "InMemoryOrderStore",
    "InMemoryBalanceLedger",
    "InMemoryWithdrawalStore",
]
