from decimal import Decimal

import pytest

from core_backend.exceptions import NotFoundError, ValidationError
from core_backend.infrastructure.events import ChangeKind


class TestRegistration:
    def test_register_starts_trial(self, container):
        cafeteria = container.cafeterias.register_cafeteria("Harbor Cafe", "HARB01", points=250, marketer_id="1001")

        assert cafeteria.trial_started_at is not None
        assert container.cafeterias.get_cafeteria(cafeteria.id).points == 250
        assert container.cafeterias.get_cafeteria(cafeteria.id).marketer_id == "1001"

    def test_duplicate_code(self, container):
        with pytest.raises(ValidationError, match="already in use"):
            container.cafeterias.register_cafeteria("Copy", "1001AB")

    def test_unknown_marketer(self, container):
        with pytest.raises(NotFoundError):
            container.cafeterias.register_cafeteria("Harbor Cafe", "HARB01", marketer_id="9999")

    def test_negative_points(self, container):
        with pytest.raises(ValidationError):
            container.cafeterias.register_cafeteria("Harbor Cafe", "HARB01", points=-1)

    def test_demo_data_set(self, container):
        assert {c.id for c in container.cafeterias.get_cafeterias()} == {"100101", "100102"}


class TestTables:
    def test_add_table(self, container):
        table = container.cafeterias.add_waiter_table("100101", "sec-003", "C-02", "1001ABT06", capacity=8)

        assert table.capacity == 8
        assert container.repositories.cafeterias.get_waiter_table_by_reference("100101", "1001ABT06").id == table.id

    def test_duplicate_reference(self, container):
        with pytest.raises(ValidationError):
            container.cafeterias.add_waiter_table("100101", "sec-001", "A-09", "1001ABT01")

    def test_section_of_other_cafeteria(self, container):
        with pytest.raises(NotFoundError):
            container.cafeterias.add_waiter_table("100102", "sec-001", "1", "1001ACT01")

    def test_toggle_active(self, container, change_log):
        table = container.cafeterias.set_table_active("tbl-002", False)

        assert table.is_active is False
        assert (ChangeKind.CAFETERIA_UPDATED, "100101") in [(e.kind, e.entity_id) for e in change_log]
        assert container.cafeterias.set_table_active("tbl-002", True).is_active is True

    def test_unknown_table(self, container):
        with pytest.raises(NotFoundError):
            container.cafeterias.set_table_active("tbl-999", True)


class TestMenu:
    def test_add_item(self, container):
        item = container.cafeterias.add_menu_item("cat-003", "Iced Tea", "3.25", kitchen_category_id="kcat-003")

        assert item.price == Decimal("3.25")
        assert container.repositories.cafeterias.get_menu_item_by_id(item.id).name == "Iced Tea"

    def test_negative_price(self, container):
        with pytest.raises(ValidationError):
            container.cafeterias.add_menu_item("cat-003", "Refund Tea", "-1")

    def test_unknown_category(self, container):
        with pytest.raises(NotFoundError):
            container.cafeterias.add_menu_item("cat-999", "Ghost", "1")

    def test_assign_kitchen_category(self, container):
        item = container.cafeterias.assign_kitchen_category("item-006", "kcat-002")
        assert item.kitchen_category_id == "kcat-002"

        with pytest.raises(NotFoundError):
            container.cafeterias.assign_kitchen_category("item-999", "kcat-002")

    def test_overly_precise_price(self, container):
        with pytest.raises(ValidationError, match="more than 4 decimal places"):
            container.cafeterias.add_menu_item("cat-003", "Fractional Tea", "3.25001")

        names = {i.name for i in container.repositories.cafeterias.get_menu_items_by_category_id("cat-003")}
        assert "Fractional Tea" not in names


class TestCatalogueChanges:
    """Catalogue and floor-plan edits reach the change feed like balance changes do."""

    def published(self, change_log):
        return [(e.kind, e.entity_id) for e in change_log]

    def test_menu_edits_publish_menu_updates(self, container, change_log):
        category = container.cafeterias.add_menu_category("Smoothies")
        item = container.cafeterias.add_menu_item(category.id, "Mango", "4.00")
        container.cafeterias.assign_kitchen_category(item.id, "kcat-003")

        assert self.published(change_log) == [
            (ChangeKind.MENU_UPDATED, category.id),
            (ChangeKind.MENU_UPDATED, item.id),
            (ChangeKind.MENU_UPDATED, item.id),
        ]

    def test_floor_plan_edits_publish_cafeteria_updates(self, container, change_log):
        container.cafeterias.add_kitchen_category("100101", "Grill")
        section = container.cafeterias.add_waiter_section("100101", "Terrace")
        container.cafeterias.add_waiter_table("100101", section.id, "T-1", "1001ABT20")

        assert self.published(change_log) == [(ChangeKind.CAFETERIA_UPDATED, "100101")] * 3

    def test_rejected_edit_publishes_nothing(self, container, change_log):
        with pytest.raises(NotFoundError):
            container.cafeterias.assign_kitchen_category("item-999", "kcat-002")
        with pytest.raises(ValidationError):
            container.cafeterias.add_menu_item("cat-003", "Refund Tea", "-1")

        assert change_log == []
