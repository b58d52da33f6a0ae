import random
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal
from unittest.mock import Mock

import pytest

from loyaltyapi.core.exceptions import (
    InsufficientBalanceError,
    InvalidAmountError,
    StorageError,
)
from loyaltyapi.repositories.memory import InMemoryBalanceLedger
from loyaltyapi.services.balance_service import BalanceService


@pytest.fixture
def ledger():
    return InMemoryBalanceLedger()


@pytest.fixture
def balance_service(ledger):
    return BalanceService(ledger)


class TestBalanceService:
    """BalanceService 테스트"""

    def test_unknown_user_has_zero_balance(self, balance_service):
        balance = balance_service.get_balance(7)

        assert balance.current == 0
        assert balance.withdrawn == 0

    def test_credit_creates_and_accumulates(self, balance_service):
        balance_service.credit(1, Decimal("500"))
        balance_service.credit(1, Decimal("20.5"))

        balance = balance_service.get_balance(1)
        assert balance.current == Decimal("520.5")
        assert balance.withdrawn == 0

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-1")])
    def test_non_positive_credit_is_rejected(self, balance_service, amount):
        with pytest.raises(InvalidAmountError):
            balance_service.credit(1, amount)

        assert balance_service.get_balance(1).current == 0

    def test_debit_moves_current_to_withdrawn(self, balance_service):
        balance_service.credit(1, Decimal("100"))

        balance_service.debit(1, Decimal("40"))

        balance = balance_service.get_balance(1)
        assert balance.current == Decimal("60")
        assert balance.withdrawn == Decimal("40")

    def test_debit_exceeding_current_fails_and_leaves_balance(self, balance_service):
        balance_service.credit(1, Decimal("100"))

        with pytest.raises(InsufficientBalanceError):
            balance_service.debit(1, Decimal("150"))

        balance = balance_service.get_balance(1)
        assert balance.current == Decimal("100")
        assert balance.withdrawn == 0

    def test_debit_without_balance_row_fails(self, balance_service):
        with pytest.raises(InsufficientBalanceError):
            balance_service.debit(3, Decimal("1"))

    def test_ledger_failure_is_wrapped(self):
        ledger = Mock()
        ledger.credit.side_effect = RuntimeError("db down")

        with pytest.raises(StorageError):
            BalanceService(ledger).credit(1, Decimal("1"))

    def test_concurrent_credits_and_debits_conserve_points(self, balance_service):
        # Given
        rng = random.Random(7)
        operations = [
            ("credit" if rng.random() < 0.5 else "debit", Decimal(rng.randint(1, 50)))
            for _ in range(400)
        ]
        credited = []
        observed = []

        def apply(op):
            kind, amount = op
            if kind == "credit":
                balance_service.credit(1, amount)
                credited.append(amount)
            else:
                try:
                    balance_service.debit(1, amount)
                except InsufficientBalanceError:
                    pass
            observed.append(balance_service.get_balance(1).current)

        # When
        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(apply, operations))

        # Then
        balance = balance_service.get_balance(1)
        assert all(current >= 0 for current in observed)
        assert balance.current >= 0
        assert balance.current + balance.withdrawn == sum(credited)


class TestAmountPrecision:
    """금액은 소수 둘째 자리로 반올림한 뒤 검증"""

    def test_credit_rounding_to_zero_is_rejected(self, balance_service):
        with pytest.raises(InvalidAmountError):
            balance_service.credit(1, Decimal("0.004"))

        assert balance_service.get_balance(1).current == 0

    def test_credit_is_rounded_half_up(self, balance_service):
        balance_service.credit(1, Decimal("0.005"))

        assert balance_service.get_balance(1).current == Decimal("0.01")

    def test_debit_rounding_to_zero_is_rejected(self, balance_service):
        balance_service.credit(1, Decimal("1"))

        with pytest.raises(InvalidAmountError):
            balance_service.debit(1, Decimal("0.001"))

        balance = balance_service.get_balance(1)
        assert balance.current == Decimal("1")
        assert balance.withdrawn == 0
