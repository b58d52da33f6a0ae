from decimal import Decimal
from unittest.mock import Mock

import pytest

from loyaltyapi.core.exceptions import (
    InsufficientBalanceError,
    InvalidAmountError,
    InvalidOrderNumberError,
    StorageError,
)
from loyaltyapi.repositories.memory import InMemoryBalanceLedger, InMemoryWithdrawalStore
from loyaltyapi.services.balance_service import BalanceService
from loyaltyapi.services.withdrawal_service import WithdrawalService

ORDER_NUMBER = "2377225624"


@pytest.fixture
def balance_service():
    return BalanceService(InMemoryBalanceLedger())


@pytest.fixture
def withdrawal_store():
    return InMemoryWithdrawalStore()


@pytest.fixture
def withdrawal_service(balance_service, withdrawal_store):
    return WithdrawalService(balance_service, withdrawal_store)


class TestWithdraw:
    """WithdrawalService.withdraw 테스트"""

    def test_withdraw_debits_and_records(self, withdrawal_service, balance_service):
        # Given
        balance_service.credit(1, Decimal("729.98"))

        # When
        withdrawal = withdrawal_service.withdraw(1, ORDER_NUMBER, Decimal("500"))

        # Then
        assert withdrawal.order_number == ORDER_NUMBER
        assert withdrawal.sum == Decimal("500")
        balance = balance_service.get_balance(1)
        assert balance.current == Decimal("229.98")
        assert balance.withdrawn == Decimal("500")

    def test_insufficient_funds_changes_nothing(
        self, withdrawal_service, balance_service, withdrawal_store
    ):
        balance_service.credit(1, Decimal("100"))

        with pytest.raises(InsufficientBalanceError):
            withdrawal_service.withdraw(1, ORDER_NUMBER, Decimal("150"))

        balance = balance_service.get_balance(1)
        assert balance.current == Decimal("100")
        assert balance.withdrawn == 0
        assert withdrawal_store.list_by_user(1) == []

    def test_order_number_must_pass_luhn(self, withdrawal_service, balance_service):
        balance_service.credit(1, Decimal("100"))

        with pytest.raises(InvalidOrderNumberError):
            withdrawal_service.withdraw(1, "2377225625", Decimal("10"))

        assert balance_service.get_balance(1).current == Decimal("100")

    def test_unknown_order_number_is_accepted(self, withdrawal_service, balance_service):
        # 참조 주문이 주문 목록에 없어도 Luhn 만 통과하면 인출 가능
        balance_service.credit(1, Decimal("100"))

        withdrawal_service.withdraw(1, "79927398713", Decimal("10"))

        assert balance_service.get_balance(1).withdrawn == Decimal("10")

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-5")])
    def test_non_positive_sum_is_rejected(self, withdrawal_service, amount):
        with pytest.raises(InvalidAmountError):
            withdrawal_service.withdraw(1, ORDER_NUMBER, amount)

    def test_record_failure_raises_storage_error(self, balance_service):
        balance_service.credit(1, Decimal("100"))
        store = Mock()
        store.create_withdrawal.side_effect = RuntimeError("disk full")
        service = WithdrawalService(balance_service, store)

        with pytest.raises(StorageError):
            service.withdraw(1, ORDER_NUMBER, Decimal("10"))


class TestListWithdrawals:
    def test_empty_history(self, withdrawal_service):
        assert withdrawal_service.list_withdrawals(1) == []

    def test_history_is_newest_first_and_per_user(
        self, withdrawal_service, balance_service
    ):
        balance_service.credit(1, Decimal("100"))
        balance_service.credit(2, Decimal("100"))
        withdrawal_service.withdraw(1, ORDER_NUMBER, Decimal("10"))
        withdrawal_service.withdraw(1, "79927398713", Decimal("20"))
        withdrawal_service.withdraw(2, "12345678903", Decimal("30"))

        history = withdrawal_service.list_withdrawals(1)

        assert [w.order_number for w in history] == ["79927398713", ORDER_NUMBER]
        assert sum(w.sum for w in history) == balance_service.get_balance(1).withdrawn


def test_sub_cent_sum_is_rejected(withdrawal_service, balance_service, withdrawal_store):
    balance_service.credit(1, Decimal("100"))

    with pytest.raises(InvalidAmountError):
        withdrawal_service.withdraw(1, ORDER_NUMBER, Decimal("0.004"))

    assert balance_service.get_balance(1).withdrawn == 0
    assert withdrawal_store.list_by_user(1) == []
