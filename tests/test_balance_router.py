from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from loyaltyapi.core.security import create_access_token
from loyaltyapi.deps import get_balance_service, get_withdrawal_service
from loyaltyapi.main import create_app
from loyaltyapi.repositories.memory import InMemoryBalanceLedger, InMemoryWithdrawalStore
from loyaltyapi.services.balance_service import BalanceService
from loyaltyapi.services.withdrawal_service import WithdrawalService

ORDER_NUMBER = "2377225624"


def auth_headers(user_id: int = 1) -> dict:
    return {"Authorization": f"Bearer {create_access_token({'user_id': user_id})}"}


@pytest.fixture
def balance_service():
    return BalanceService(InMemoryBalanceLedger())


@pytest.fixture
def withdrawal_service(balance_service):
    return WithdrawalService(balance_service, InMemoryWithdrawalStore())


@pytest.fixture
def client(balance_service, withdrawal_service):
    app = create_app()
    app.dependency_overrides[get_balance_service] = lambda: balance_service
    app.dependency_overrides[get_withdrawal_service] = lambda: withdrawal_service
    return TestClient(app)


class TestBalanceRoutes:
    """잔액/인출 라우터 테스트"""

    def test_new_user_balance_is_zero(self, client):
        response = client.get("/api/user/balance", headers=auth_headers())

        assert response.status_code == 200
        assert response.json() == {"current": 0, "withdrawn": 0}

    def test_balance_reflects_credit(self, client, balance_service):
        balance_service.credit(1, Decimal("729.98"))

        response = client.get("/api/user/balance", headers=auth_headers())

        assert response.json() == {"current": 729.98, "withdrawn": 0}

    def test_withdraw(self, client, balance_service):
        # Given
        balance_service.credit(1, Decimal("729.98"))

        # When
        response = client.post(
            "/api/user/balance/withdraw",
            json={"order": ORDER_NUMBER, "sum": 500},
            headers=auth_headers(),
        )

        # Then
        assert response.status_code == 200
        balance = client.get("/api/user/balance", headers=auth_headers()).json()
        assert balance == {"current": 229.98, "withdrawn": 500}

    def test_withdraw_more_than_balance_returns_402(self, client, balance_service):
        balance_service.credit(1, Decimal("100"))

        response = client.post(
            "/api/user/balance/withdraw",
            json={"order": ORDER_NUMBER, "sum": 150},
            headers=auth_headers(),
        )

        assert response.status_code == 402
        assert response.json()["error"]["code"] == "BALANCE_001"
        assert balance_service.get_balance(1).current == Decimal("100")

    @pytest.mark.parametrize(
        "payload",
        [
            {"order": "2377225625", "sum": 10},
            {"order": ORDER_NUMBER, "sum": 0},
            {"order": ORDER_NUMBER, "sum": -10},
        ],
    )
    def test_withdraw_rejects_bad_input_with_422(self, client, balance_service, payload):
        balance_service.credit(1, Decimal("100"))

        response = client.post(
            "/api/user/balance/withdraw", json=payload, headers=auth_headers()
        )

        assert response.status_code == 422
        assert balance_service.get_balance(1).current == Decimal("100")

    def test_withdraw_requires_auth(self, client):
        response = client.post(
            "/api/user/balance/withdraw", json={"order": ORDER_NUMBER, "sum": 1}
        )

        assert response.status_code == 401


class TestWithdrawalsRoute:
    def test_no_withdrawals_returns_204(self, client):
        response = client.get("/api/user/withdrawals", headers=auth_headers())

        assert response.status_code == 204

    def test_lists_withdrawals(self, client, balance_service, withdrawal_service):
        balance_service.credit(1, Decimal("100"))
        withdrawal_service.withdraw(1, ORDER_NUMBER, Decimal("40"))

        response = client.get("/api/user/withdrawals", headers=auth_headers())

        assert response.status_code == 200
        data = response.json()
        assert len(data) == 1
        assert data[0]["order"] == ORDER_NUMBER
        assert data[0]["sum"] == 40
        assert "processed_at" in data[0]
