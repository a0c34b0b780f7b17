"""
Integration tests for the Ledger API
Tests end-to-end flows and the response envelope using FastAPI TestClient
"""

import pytest
from fastapi.testclient import TestClient

from ledger_service.api import create_app
from ledger_service.ledger import Ledger


@pytest.fixture
def ledger():
    """Fresh ledger per test"""
    return Ledger()


@pytest.fixture
def client(ledger):
    """Create a test client for an app wired to the test ledger"""
    app = create_app(ledger=ledger)
    return TestClient(app, raise_server_exceptions=False)


class TestHealthEndpoints:
    """Test health and unknown routes"""

    def test_health(self, client):
        """Test health endpoint"""
        r = client.get("/health")
        assert r.status_code == 200
        data = r.json()
        assert data["success"] is True
        assert data["message"] == "Ledger API is running"
        assert "timestamp" in data

    def test_unknown_route(self, client):
        """Test unknown routes return the 404 envelope"""
        r = client.get("/undefined-endpoint")
        assert r.status_code == 404
        assert r.json() == {"success": False, "error": "Endpoint not found"}

    def test_wrong_method(self, client):
        """Test unsupported methods on known paths also read as not found"""
        r = client.get("/deposit")
        assert r.status_code == 404
        assert r.json() == {"success": False, "error": "Endpoint not found"}

    def test_cors_headers(self, client):
        """Test CORS is enabled for any origin"""
        r = client.get("/health", headers={"Origin": "http://example.com"})
        assert r.headers["access-control-allow-origin"] == "*"


class TestBalanceAndDeposits:
    """Deposit flows"""

    def test_initial_balance(self, client):
        """Test balance starts at zero in USD"""
        r = client.get("/balance")
        assert r.status_code == 200
        assert r.json() == {"success": True, "balance": 0, "currency": "USD"}

    def test_deposit(self, client):
        """Test a deposit returns 201 with the transaction and new balance"""
        r = client.post("/deposit", json={"amount": 500, "description": "Salary payment"})
        assert r.status_code == 201
        data = r.json()
        assert data["success"] is True
        assert data["newBalance"] == 500
        assert data["transaction"]["type"] == "deposit"
        assert data["transaction"]["amount"] == 500
        assert data["transaction"]["description"] == "Salary payment"
        assert set(data["transaction"]) == {"id", "type", "amount", "description", "timestamp"}

        assert client.get("/balance").json()["balance"] == 500

    def test_deposit_default_description(self, client):
        """Test omitted description defaults to 'Deposit'"""
        r = client.post("/deposit", json={"amount": "25.5"})
        assert r.status_code == 201
        assert r.json()["transaction"]["description"] == "Deposit"
        assert r.json()["transaction"]["amount"] == 25.5

    @pytest.mark.parametrize("body", [
        {"amount": -100, "description": "Invalid deposit"},
        {"amount": 0},
        {"amount": "abc"},
        {"amount": None},
        {"description": "no amount"},
        {},
    ])
    def test_invalid_deposit(self, client, ledger, body):
        """Test invalid amounts are rejected with 400 and no state change"""
        r = client.post("/deposit", json=body)
        assert r.status_code == 400
        assert r.json() == {
            "success": False,
            "error": "Valid amount is required (must be a positive number)"
        }
        assert ledger.balance == 0
        assert len(ledger) == 0

    @pytest.mark.parametrize("description", [12, ["Salary"], {"text": "Salary"}])
    def test_non_string_description_rejected(self, client, ledger, description):
        """Test a description that is not a string is refused without recording"""
        r = client.post("/deposit", json={"amount": 5, "description": description})
        assert r.status_code == 400
        assert r.json() == {"success": False, "error": "Invalid request: body.description"}
        assert len(ledger) == 0

        r = client.post("/withdraw", json={"amount": 5, "description": description})
        assert r.status_code == 400
        assert len(ledger) == 0

    def test_null_description_uses_default(self, client):
        """Test an explicit null description falls back to the default"""
        r = client.post("/deposit", json={"amount": 5, "description": None})
        assert r.status_code == 201
        assert r.json()["transaction"]["description"] == "Deposit"

    def test_deposit_without_body(self, client):
        """Test a missing body is treated as a missing amount"""
        r = client.post("/deposit")
        assert r.status_code == 400
        assert r.json()["error"] == "Valid amount is required (must be a positive number)"

    def test_deposit_malformed_json(self, client, ledger):
        """Test a malformed body is rejected with 400"""
        r = client.post(
            "/deposit",
            content="{not json",
            headers={"Content-Type": "application/json"}
        )
        assert r.status_code == 400
        assert r.json()["success"] is False
        assert len(ledger) == 0


class TestWithdrawals:
    """Withdrawal flows"""

    def test_withdraw(self, client):
        """Test a withdrawal after a deposit"""
        client.post("/deposit", json={"amount": 500})
        r = client.post("/withdraw", json={"amount": 100, "description": "Grocery shopping"})
        assert r.status_code == 201
        data = r.json()
        assert data["success"] is True
        assert data["newBalance"] == 400
        assert data["transaction"]["type"] == "withdrawal"
        assert data["transaction"]["description"] == "Grocery shopping"

    def test_withdraw_default_description(self, client):
        """Test omitted description defaults to 'Withdrawal'"""
        client.post("/deposit", json={"amount": 50})
        r = client.post("/withdraw", json={"amount": 10})
        assert r.json()["transaction"]["description"] == "Withdrawal"

    def test_insufficient_funds(self, client, ledger):
        """Test overdraft returns 400 and leaves state unchanged"""
        client.post("/deposit", json={"amount": 100})
        r = client.post("/withdraw", json={"amount": 10000, "description": "Large withdrawal"})
        assert r.status_code == 400
        assert r.json() == {"success": False, "error": "Insufficient funds"}
        assert ledger.balance == 100
        assert len(ledger) == 1

    def test_invalid_withdrawal(self, client):
        """Test invalid amounts on withdraw"""
        r = client.post("/withdraw", json={"amount": -5})
        assert r.status_code == 400
        assert r.json()["error"] == "Valid amount is required (must be a positive number)"


class TestTransactionHistory:
    """Listing and lookup"""

    def _seed(self, client, count):
        ids = []
        for i in range(count):
            r = client.post("/deposit", json={"amount": i + 1, "description": f"Deposit {i + 1}"})
            ids.append(r.json()["transaction"]["id"])
        return ids

    def test_list_defaults(self, client):
        """Test default pagination values are echoed back"""
        ids = self._seed(client, 3)
        r = client.get("/transactions")
        assert r.status_code == 200
        data = r.json()
        assert data["success"] is True
        assert data["total"] == 3
        assert data["limit"] == 50
        assert data["offset"] == 0
        assert [t["id"] for t in data["transactions"]] == ids

    def test_list_window(self, client):
        """Test limit and offset query parameters"""
        ids = self._seed(client, 6)
        data = client.get("/transactions", params={"limit": 2, "offset": 3}).json()
        assert [t["id"] for t in data["transactions"]] == ids[3:5]
        assert data["total"] == 6
        assert data["limit"] == 2
        assert data["offset"] == 3

    def test_list_offset_past_end(self, client):
        """Test an out-of-range offset returns an empty page"""
        self._seed(client, 2)
        data = client.get("/transactions", params={"offset": 10}).json()
        assert data["transactions"] == []
        assert data["total"] == 2

    @pytest.mark.parametrize("params", [{"limit": "abc"}, {"limit": -1}, {"offset": -3}, {"offset": "1.5"}])
    def test_list_invalid_pagination(self, client, params):
        """Test non-numeric or negative pagination is rejected"""
        r = client.get("/transactions", params=params)
        assert r.status_code == 400
        assert r.json()["success"] is False
        assert r.json()["error"].startswith("Invalid request")

    def test_get_transaction(self, client):
        """Test lookup returns the transaction as created"""
        created = client.post("/deposit", json={"amount": 75, "description": "Gift"}).json()["transaction"]
        r = client.get(f"/transactions/{created['id']}")
        assert r.status_code == 200
        assert r.json() == {"success": True, "transaction": created}

    def test_get_transaction_not_found(self, client):
        """Test unknown IDs return 404"""
        r = client.get("/transactions/nonexistent")
        assert r.status_code == 404
        assert r.json() == {"success": False, "error": "Transaction not found"}

    def test_get_transaction_encoded_slash(self, client):
        """Test an ID holding an encoded slash is looked up, not routed elsewhere"""
        self._seed(client, 1)
        r = client.get("/transactions/a%2Fb")
        assert r.status_code == 404
        assert r.json() == {"success": False, "error": "Transaction not found"}

    def test_withdraw_full_fractional_balance(self, client, ledger):
        """Test the balance reported over HTTP can be withdrawn in full"""
        for amount in (93.22, 34.39, 88.24):
            client.post("/deposit", json={"amount": amount})
        client.post("/withdraw", json={"amount": 34.36})

        balance = client.get("/balance").json()["balance"]
        r = client.post("/withdraw", json={"amount": balance})
        assert r.status_code == 201
        assert r.json()["newBalance"] == 0
        assert len(ledger) == 5


class TestErrorHandling:
    """Unexpected failures"""

    def test_internal_error_is_generic(self, ledger):
        """Test unexpected exceptions map to a generic 500"""
        class BrokenLedger(Ledger):
            def get_balance(self):
                raise RuntimeError("secret internal detail")

        app = create_app(ledger=BrokenLedger())
        client = TestClient(app, raise_server_exceptions=False)

        r = client.get("/balance")
        assert r.status_code == 500
        assert r.json() == {"success": False, "error": "Internal server error"}
        assert "secret" not in r.text


class TestLedgerScenario:
    """End-to-end walkthrough over HTTP"""

    def test_full_scenario(self, client, ledger):
        """Test deposits, withdrawals, overdraft rejection and history"""
        assert client.post("/deposit", json={"amount": 500, "description": "Salary"}).json()["newBalance"] == 500
        assert client.post("/deposit", json={"amount": 200, "description": "Freelance"}).json()["newBalance"] == 700
        assert client.post("/withdraw", json={"amount": 100, "description": "Groceries"}).json()["newBalance"] == 600

        r = client.post("/withdraw", json={"amount": 1000})
        assert r.status_code == 400
        assert client.get("/balance").json()["balance"] == 600

        data = client.get("/transactions", params={"limit": 50, "offset": 0}).json()
        assert [(t["type"], t["amount"]) for t in data["transactions"]] == [
            ("deposit", 500),
            ("deposit", 200),
            ("withdrawal", 100),
        ]

        stats = ledger.get_stats()
        assert stats.total_deposits == 700
        assert stats.total_withdrawals == 100
        assert stats.net_flow == 600 == ledger.balance

    def test_apps_do_not_share_state(self):
        """Test two applications own independent ledgers"""
        first = TestClient(create_app())
        second = TestClient(create_app())

        first.post("/deposit", json={"amount": 10})

        assert first.get("/balance").json()["balance"] == 10
        assert second.get("/balance").json()["balance"] == 0
