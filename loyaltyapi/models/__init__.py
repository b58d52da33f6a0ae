from .base import Base
from .order import Order, OrderStatus
from .balance import Balance
from .withdrawal import Withdrawal

__all__ = ["Base", "Order", "OrderStatus", "Balance", "Withdrawal"]
