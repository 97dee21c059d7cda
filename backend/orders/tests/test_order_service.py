"""
Order Service Tests

Order creation against the table registry and the staff-guarded status
changes. Every test runs on both storage backends.
"""
from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from core_backend.exceptions import (
    ForbiddenError,
    InsufficientBalanceError,
    InvalidTransitionError,
    NotFoundError,
    TrialExpiredError,
    ValidationError,
)
from core_backend.infrastructure.events import ChangeKind


class TestCreateOrder:
    def test_create_order_at_table(self, container, place_order, change_log):
        """
        CRITICAL: A valid table order is created pending with the catalogue snapshot.
        """
        order = place_order()

        assert order.status == "pending"
        assert order.cafeteria_id == "100101"
        assert order.total == Decimal("5.98")
        assert order.table_code == "1001ABT01"
        assert order.table_display == "A-01"
        assert len(order.items) == 1
        assert order.items[0].name == "Coffee"
        assert order.items[0].price == Decimal("2.99")

        stored = container.orders.get_order(order.id)
        assert stored.status == "pending"
        assert stored.total == Decimal("5.98")
        assert (ChangeKind.ORDER_CREATED, order.id) in [(e.kind, e.entity_id) for e in change_log]

    def test_explicit_name_price_and_display(self, place_order):
        order = place_order(
            items=[
                {"menu_item_id": "custom", "name": "Chef Special", "price": "4.50", "quantity": 3},
                {"menu_item_id": "item-002", "quantity": 1, "notes": "no syrup"},
            ],
            table_display="Window seat",
        )

        assert order.total == Decimal("13.50") + Decimal("6.99")
        assert order.items[0].name == "Chef Special"
        assert order.items[1].notes == "no syrup"
        assert order.table_display == "Window seat"

    def test_no_rounding_of_total(self, place_order):
        order = place_order(items=[{"menu_item_id": "x", "name": "Mint", "price": "0.0015", "quantity": 3}])
        assert order.total == Decimal("0.0045")

    def test_unknown_cafeteria(self, place_order):
        with pytest.raises(NotFoundError):
            place_order(cafeteria_id="nope")

    def test_no_points(self, container, place_order):
        container.repositories.cafeterias.update_points("100101", -100000)

        with pytest.raises(InsufficientBalanceError, match="insufficient points to create orders"):
            place_order()

    def test_points_checked_before_trial(self, container, place_order):
        container.repositories.cafeterias.update_points("100101", -100000)
        container.repositories.cafeterias.set_trial_expired("100101", True)

        with pytest.raises(InsufficientBalanceError):
            place_order()

    def test_trial_flagged_expired(self, container, place_order):
        container.repositories.cafeterias.set_trial_expired("100101", True)

        with pytest.raises(TrialExpiredError, match="trial has expired"):
            place_order()

    def test_trial_elapsed(self, container):
        cafeteria = container.cafeterias.register_cafeteria(
            "Late Cafe", "LATE01", points=500, trial_started_at=timezone.now() - timedelta(days=31)
        )

        with pytest.raises(TrialExpiredError):
            container.orders.create_order(
                "s", cafeteria.id, [{"menu_item_id": "item-005"}], cafeteria_code="LATE01", table_code="T1"
            )

    def test_trial_override_extends(self, container):
        cafeteria = container.cafeterias.register_cafeteria(
            "Late Cafe", "LATE01", points=500, trial_started_at=timezone.now() - timedelta(days=31)
        )
        container.config.update_cafeteria_trial_override(cafeteria.id, 60)
        section = container.cafeterias.add_waiter_section(cafeteria.id, "Main")
        container.cafeterias.add_waiter_table(cafeteria.id, section.id, "1", "LATE01T1")

        order = container.orders.create_order(
            "s", cafeteria.id, [{"menu_item_id": "item-005"}], cafeteria_code="LATE01", table_code="LATE01T1"
        )
        assert order.status == "pending"

    def test_missing_table_code(self, place_order):
        with pytest.raises(ValidationError, match="without a valid table_code"):
            place_order(table_code="")

    def test_wrong_cafeteria_code(self, container, place_order, change_log):
        """
        CRITICAL: A mismatched cafeteria code saves nothing.
        """
        orders_before = len(container.orders.get_orders())
        entries_before = len(container.ledger.get_ledger_entries())

        with pytest.raises(ValidationError, match="Invalid cafeteria_code"):
            place_order(cafeteria_code="1001AC")

        assert len(container.orders.get_orders()) == orders_before
        assert len(container.ledger.get_ledger_entries()) == entries_before
        assert container.cafeterias.get_cafeteria("100101").points == 100000
        assert change_log == []

    def test_table_of_other_cafeteria(self, place_order):
        with pytest.raises(ValidationError, match="does not belong to this cafeteria"):
            place_order(table_code="UNKNOWN")

    def test_inactive_table(self, container, place_order):
        container.cafeterias.set_table_active("tbl-001", False)

        with pytest.raises(ValidationError, match="inactive"):
            place_order()

    @pytest.mark.parametrize(
        "items,message",
        [
            ([], "at least one item"),
            ([{"menu_item_id": "item-005", "quantity": 0}], "at least 1"),
            ([{"menu_item_id": "x", "name": "Bad", "price": "-1"}], "cannot be negative"),
            ([{"menu_item_id": "x", "name": "Fine", "price": "2.99999"}], "more than 4 decimal places"),
            ([{"menu_item_id": "x", "name": "Odd", "price": "NaN"}], "decimal places"),
            ([{"menu_item_id": "does-not-exist"}], "not found"),
            ([{"name": "Nameless", "price": "1"}], "menu_item_id"),
            ([{"menu_item_id": "item-005", "quantity": "many"}], "Invalid price or quantity"),
        ],
    )
    def test_invalid_items(self, container, place_order, items, message):
        with pytest.raises(ValidationError, match=message):
            place_order(items=items)
        assert container.orders.get_orders() == []

    def test_active_order_for_session(self, container, place_order):
        order = place_order(session_id="guest-42")

        assert container.orders.get_active_order_for_session("guest-42").id == order.id
        container.orders.update_order_status(order.id, "cancelled")
        assert container.orders.get_active_order_for_session("guest-42") is None

    def test_orders_by_cafeteria(self, container, place_order):
        order = place_order()

        assert [o.id for o in container.orders.get_orders_by_cafeteria("100101")] == [order.id]
        assert container.orders.get_orders_by_cafeteria("100102") == []


class TestUpdateOrderStatus:
    def test_happy_path(self, container, place_order, change_log):
        order = place_order()

        for status in ("confirmed", "preparing", "ready", "served"):
            updated = container.orders.update_order_status(order.id, status)
            assert updated.status == status

        assert container.orders.get_order(order.id).status == "served"
        kinds = [e.kind for e in change_log if e.entity_id == order.id]
        assert kinds.count(ChangeKind.ORDER_STATUS_CHANGED) == 4

    def test_unknown_order_returns_none(self, container):
        assert container.orders.update_order_status("order-missing", "confirmed") is None

    def test_invalid_transition(self, container, place_order):
        order = place_order()

        with pytest.raises(InvalidTransitionError, match="from pending to ready"):
            container.orders.update_order_status(order.id, "ready")
        assert container.orders.get_order(order.id).status == "pending"
        assert container.security.get_events() == []

    def test_invalid_transition_by_actor_is_logged(self, container, place_order):
        order = place_order()

        with pytest.raises(InvalidTransitionError):
            container.orders.update_order_status(order.id, "paid", actor_id="staff-001", actor_role="waiter")

        events = container.security.get_events(actor_id="staff-001")
        assert len(events) == 1
        assert events[0].attempted_action == "Invalid transition: pending -> paid"
        assert events[0].target_id == order.id
        assert events[0].blocked is True

    def test_terminal_orders_are_frozen(self, container, place_order):
        order = place_order()
        container.orders.update_order_status(order.id, "cancelled")

        for status in ("pending", "confirmed", "paid", "cancelled"):
            with pytest.raises(InvalidTransitionError):
                container.orders.update_order_status(order.id, status)

    def test_legacy_status_name_is_normalized(self, container, place_order):
        order = place_order()

        updated = container.orders.update_order_status(order.id, "sent_to_kitchen")
        assert updated.status == "confirmed"


class TestStaffGuards:
    def test_waiter_without_session_may_update(self, container, place_order):
        order = place_order()

        updated = container.orders.update_order_status(
            order.id, "confirmed", actor_id="staff-001", actor_role="waiter"
        )
        assert updated.status == "confirmed"

    def test_waiter_in_section_may_update(self, container, place_order):
        container.staff.set_waiter_session("staff-001", "sec-001")
        order = place_order(table_code="1001ABT02")

        updated = container.orders.update_order_status(
            order.id, "confirmed", actor_id="staff-001", actor_role="waiter"
        )
        assert updated.status == "confirmed"

    def test_waiter_outside_section_blocked(self, container, place_order):
        """
        HIGH: A waiter working Section B cannot touch an order at a Section A table.
        """
        container.staff.set_waiter_session("staff-002", "sec-002")
        order = place_order(table_code="1001ABT01")

        with pytest.raises(ForbiddenError, match="assigned section"):
            container.orders.update_order_status(
                order.id, "confirmed", actor_id="staff-002", actor_role="waiter"
            )

        assert container.orders.get_order(order.id).status == "pending"
        events = container.security.get_events(actor_id="staff-002")
        assert [e.attempted_action for e in events] == ["Update order status: pending -> confirmed"]
        assert events[0].role == "waiter"

    def test_disabled_staff_blocked(self, container, place_order):
        container.staff.update_staff_status("staff-001", False)
        order = place_order()

        with pytest.raises(ForbiddenError, match="disabled"):
            container.orders.update_order_status(
                order.id, "confirmed", actor_id="staff-001", actor_role="waiter"
            )
        assert container.security.get_events(blocked=True)[0].reason == "Staff account is disabled"

    def test_kitchen_category_match(self, container, place_order, advance_order):
        order = advance_order(place_order(items=[{"menu_item_id": "item-001"}]), "confirmed")

        updated = container.orders.update_order_status(
            order.id, "preparing", actor_id="staff-003", actor_role="kitchen"
        )
        assert updated.status == "preparing"

    def test_kitchen_category_mismatch_blocked(self, container, place_order, advance_order):
        order = advance_order(place_order(items=[{"menu_item_id": "item-001"}]), "confirmed")

        with pytest.raises(ForbiddenError, match="assigned category"):
            container.orders.update_order_status(
                order.id, "preparing", actor_id="staff-004", actor_role="kitchen"
            )
        assert container.orders.get_order(order.id).status == "confirmed"
        assert len(container.security.get_events(actor_id="staff-004")) == 1

    def test_non_staff_roles_skip_guards(self, container, place_order):
        container.staff.set_waiter_session("staff-002", "sec-002")
        order = place_order()

        updated = container.orders.update_order_status(
            order.id, "confirmed", actor_id="owner-1", actor_role="owner"
        )
        assert updated.status == "confirmed"
