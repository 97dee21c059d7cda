RECHARGE_URL = "/api/ledger/recharge-requests/"
PAYOUT_URL = "/api/ledger/payouts/"


class TestRechargeAPI:
    def test_request_and_approve(self, api_client, installed_container):
        created = api_client.post(RECHARGE_URL, {"cafeteria_id": "100101", "amount": 2500}, format="json")
        assert created.status_code == 201
        request_id = created.json()["id"]

        response = api_client.post(
            f"{RECHARGE_URL}{request_id}/process/", {"status": "approved", "notes": "ok"}, format="json"
        )
        assert response.status_code == 200
        assert response.json()["status"] == "approved"
        assert installed_container.cafeterias.get_cafeteria("100101").points == 102500

        again = api_client.post(f"{RECHARGE_URL}{request_id}/process/", {"status": "rejected"}, format="json")
        assert again.status_code == 400
        assert again.json()["code"] == "validation_error"

    def test_list_by_status(self, api_client):
        api_client.post(RECHARGE_URL, {"cafeteria_id": "100101", "amount": 100}, format="json")

        assert len(api_client.get(RECHARGE_URL, {"status": "pending"}).json()) == 1
        assert api_client.get(RECHARGE_URL, {"status": "approved"}).json() == []

    def test_unknown_cafeteria(self, api_client):
        response = api_client.post(RECHARGE_URL, {"cafeteria_id": "nope", "amount": 100}, format="json")
        assert response.status_code == 404

    def test_unknown_request(self, api_client):
        response = api_client.post(f"{RECHARGE_URL}rch-missing/process/", {"status": "approved"}, format="json")
        assert response.status_code == 404


class TestPayoutAPI:
    def test_payout_over_balance_is_conflict(self, api_client):
        response = api_client.post(PAYOUT_URL, {"marketer_id": "1001", "amount": 1}, format="json")

        assert response.status_code == 409
        assert response.json()["code"] == "insufficient_balance"

    def test_balance_and_entries(self, api_client, installed_container):
        installed_container.ledger.adjust_cafeteria_points("100101", 10, "bonus")

        balance = api_client.get("/api/ledger/marketers/1001/balance/").json()
        assert balance == {"marketer_id": "1001", "balance": 0, "commission_count": 0}

        entries = api_client.get("/api/ledger/entries/", {"type": "manual_adjustment"}).json()
        assert [(e["amount"], e["description"]) for e in entries] == [(10, "bonus")]

    def test_invalid_entry_type_filter(self, api_client):
        assert api_client.get("/api/ledger/entries/", {"type": "gift"}).status_code == 400
