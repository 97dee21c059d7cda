"""
Orders API Integration Tests

Domain errors surface as {"error", "code"} bodies with the matching HTTP
status; see core_backend.exception_handler.
"""
import pytest

ORDER_URL = "/api/orders/"


def order_payload(**overrides):
    payload = {
        "session_id": "guest-1",
        "cafeteria_id": "100101",
        "cafeteria_code": "1001AB",
        "table_code": "1001ABT01",
        "items": [{"menu_item_id": "item-005", "quantity": 2}],
    }
    payload.update(overrides)
    return payload


def move(api_client, order_id, status, **actor):
    return api_client.post(f"{ORDER_URL}{order_id}/status/", {"status": status, **actor}, format="json")


class TestOrdersAPI:
    def test_create_and_fetch(self, api_client):
        response = api_client.post(ORDER_URL, order_payload(), format="json")

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "pending"
        assert body["total"] == "5.9800"
        assert body["table_display"] == "A-01"
        assert body["allowed_next_statuses"] == ["confirmed", "cancelled"]
        assert body["is_immutable"] is False

        detail = api_client.get(f"{ORDER_URL}{body['id']}/")
        assert detail.status_code == 200
        assert detail.json()["items"][0]["name"] == "Coffee"

    def test_list_filters(self, api_client):
        created = api_client.post(ORDER_URL, order_payload(), format="json").json()

        assert [o["id"] for o in api_client.get(ORDER_URL).json()] == [created["id"]]
        assert api_client.get(ORDER_URL, {"cafeteria_id": "100102"}).json() == []
        assert [o["id"] for o in api_client.get(ORDER_URL, {"session_id": "guest-1"}).json()] == [created["id"]]

    def test_unknown_order(self, api_client):
        assert api_client.get(f"{ORDER_URL}order-missing/").status_code == 404

        response = move(api_client, "order-missing", "confirmed")
        assert response.status_code == 404
        assert response.json()["code"] == "not_found"

    def test_full_lifecycle_to_paid(self, api_client, installed_container):
        order_id = api_client.post(ORDER_URL, order_payload(), format="json").json()["id"]

        for status in ("confirmed", "preparing", "ready", "served", "paid"):
            response = move(api_client, order_id, status)
            assert response.status_code == 200, response.json()

        assert response.json()["is_immutable"] is True
        assert installed_container.cafeterias.get_cafeteria("100101").points == 100000 - 1993


class TestOrdersAPIErrors:
    @pytest.mark.parametrize(
        "overrides,status_code,code",
        [
            ({"cafeteria_id": "nope"}, 404, "not_found"),
            ({"cafeteria_code": "WRONG"}, 400, "validation_error"),
            ({"table_code": ""}, 400, "validation_error"),
            ({"items": []}, 400, "validation_error"),
        ],
    )
    def test_create_rejections(self, api_client, overrides, status_code, code):
        response = api_client.post(ORDER_URL, order_payload(**overrides), format="json")

        assert response.status_code == status_code
        assert response.json()["code"] == code
        assert response.json()["error"]

    def test_insufficient_points_is_conflict(self, api_client, installed_container):
        installed_container.repositories.cafeterias.update_points("100101", -100000)

        response = api_client.post(ORDER_URL, order_payload(), format="json")
        assert response.status_code == 409
        assert response.json()["code"] == "insufficient_balance"

    def test_trial_expired_is_forbidden(self, api_client, installed_container):
        installed_container.repositories.cafeterias.set_trial_expired("100101", True)

        response = api_client.post(ORDER_URL, order_payload(), format="json")
        assert response.status_code == 403
        assert response.json()["code"] == "trial_expired"

    def test_invalid_transition(self, api_client):
        order_id = api_client.post(ORDER_URL, order_payload(), format="json").json()["id"]

        response = move(api_client, order_id, "paid")
        assert response.status_code == 400
        assert response.json()["code"] == "invalid_transition"

    def test_guard_rejection_is_forbidden(self, api_client, installed_container):
        installed_container.staff.set_waiter_session("staff-002", "sec-002")
        order_id = api_client.post(ORDER_URL, order_payload(), format="json").json()["id"]

        response = move(api_client, order_id, "confirmed", actor_id="staff-002", actor_role="waiter")
        assert response.status_code == 403
        assert response.json()["code"] == "forbidden"

        events = api_client.get("/api/security/events/", {"actor_id": "staff-002"}).json()
        assert [e["target_id"] for e in events] == [order_id]

    def test_actor_requires_role(self, api_client):
        order_id = api_client.post(ORDER_URL, order_payload(), format="json").json()["id"]

        response = move(api_client, order_id, "confirmed", actor_id="staff-001")
        assert response.status_code == 400
        assert "actor_role" in response.json()

    def test_unknown_status_value(self, api_client):
        order_id = api_client.post(ORDER_URL, order_payload(), format="json").json()["id"]

        assert move(api_client, order_id, "teleported").status_code == 400


class TestHealth:
    def test_health_check(self, client):
        response = client.get("/api/health/")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"
