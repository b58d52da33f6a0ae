from .order import Order, OrderResponse
from .balance import BalanceResponse
from .withdrawal import Withdrawal, WithdrawalRequest, WithdrawalResponse
from .accrual import AccrualResponse
