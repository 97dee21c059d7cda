import logging
from decimal import Decimal
from typing import List, Optional

from django.utils import timezone

from core_backend.base import new_id
from core_backend.exceptions import NotFoundError, ValidationError
from core_backend.infrastructure.events import ChangeKind
from ledger.financial import PRICE_DECIMAL_PLACES, fits_price_precision, to_decimal

from .entities import (
    Cafeteria,
    KitchenCategory,
    MenuCategory,
    MenuItem,
    WaiterSection,
    WaiterTable,
)

logger = logging.getLogger(__name__)


class CafeteriaService:
    """
    Cafeterias, their menu, kitchen stations and table registry.
    """

    def __init__(self, repositories, feed):
        self.repos = repositories
        self.feed = feed

    def get_cafeterias(self) -> List[Cafeteria]:
        return self.repos.cafeterias.get_all()

    def get_cafeteria(self, cafeteria_id: str) -> Optional[Cafeteria]:
        return self.repos.cafeterias.get_by_id(cafeteria_id)

    def register_cafeteria(
        self,
        name: str,
        code: str,
        points: int = 0,
        marketer_id: Optional[str] = None,
        cafeteria_id: Optional[str] = None,
        **details,
    ) -> Cafeteria:
        if not name or not code:
            raise ValidationError("Cafeteria name and code are required.")
        if int(points) < 0:
            raise ValidationError("points cannot be negative.")
        if any(c.code == code for c in self.repos.cafeterias.get_all()):
            raise ValidationError(f"Cafeteria code {code} is already in use.")
        if marketer_id is not None and self.repos.ledger.get_marketer(marketer_id) is None:
            raise NotFoundError(f"Marketer {marketer_id} not found.")

        details.setdefault("trial_started_at", timezone.now())
        cafeteria = Cafeteria(
            id=cafeteria_id or new_id("cafe"),
            name=name,
            code=code,
            points=int(points),
            marketer_id=marketer_id,
            **details,
        )
        with self.repos.atomic():
            cafeteria = self.repos.cafeterias.create(cafeteria)
        logger.info(f"Registered cafeteria {cafeteria.id} ({code})")
        self.feed.publish(ChangeKind.CAFETERIA_UPDATED, cafeteria.id)
        return cafeteria

    def _require_cafeteria(self, cafeteria_id: str) -> Cafeteria:
        cafeteria = self.repos.cafeterias.get_by_id(cafeteria_id)
        if cafeteria is None:
            raise NotFoundError(f"Cafeteria {cafeteria_id} not found.")
        return cafeteria

    # Menu

    def add_menu_category(self, name: str, description: str = "", category_id=None) -> MenuCategory:
        category = MenuCategory(id=category_id or new_id("cat"), name=name, description=description)
        with self.repos.atomic():
            category = self.repos.cafeterias.add_menu_category(category)
        self.feed.publish(ChangeKind.MENU_UPDATED, category.id)
        return category

    def add_menu_item(
        self,
        category_id: str,
        name: str,
        price,
        description: str = "",
        kitchen_category_id: Optional[str] = None,
        item_id: Optional[str] = None,
        image_url: str = "",
    ) -> MenuItem:
        price = to_decimal(price)
        if not fits_price_precision(price):
            raise ValidationError(f"Menu item price has more than {PRICE_DECIMAL_PLACES} decimal places.")
        if price < Decimal("0"):
            raise ValidationError("Menu item price cannot be negative.")
        if not any(c.id == category_id for c in self.repos.cafeterias.get_menu_categories()):
            raise NotFoundError(f"Menu category {category_id} not found.")

        item = MenuItem(
            id=item_id or new_id("item"),
            category_id=category_id,
            name=name,
            price=price,
            description=description,
            image_url=image_url,
            kitchen_category_id=kitchen_category_id,
        )
        with self.repos.atomic():
            item = self.repos.cafeterias.add_menu_item(item)
        logger.info(f"Added menu item {item.id} ({name}) at {price}")
        self.feed.publish(ChangeKind.MENU_UPDATED, item.id)
        return item

    def assign_kitchen_category(self, item_id: str, kitchen_category_id: Optional[str]) -> MenuItem:
        with self.repos.atomic():
            item = self.repos.cafeterias.update_menu_item_kitchen_category(item_id, kitchen_category_id)
        if item is None:
            raise NotFoundError(f"Menu item {item_id} not found.")
        self.feed.publish(ChangeKind.MENU_UPDATED, item.id)
        return item

    # Kitchen stations, sections and tables

    def add_kitchen_category(
        self, cafeteria_id: str, name: str, description: str = "", category_id=None
    ) -> KitchenCategory:
        self._require_cafeteria(cafeteria_id)
        category = KitchenCategory(
            id=category_id or new_id("kcat"),
            cafeteria_id=cafeteria_id,
            name=name,
            description=description,
        )
        with self.repos.atomic():
            category = self.repos.cafeterias.add_kitchen_category(category)
        self.feed.publish(ChangeKind.CAFETERIA_UPDATED, cafeteria_id)
        return category

    def add_waiter_section(
        self, cafeteria_id: str, name: str, description: str = "", section_id=None
    ) -> WaiterSection:
        self._require_cafeteria(cafeteria_id)
        section = WaiterSection(
            id=section_id or new_id("sec"),
            cafeteria_id=cafeteria_id,
            name=name,
            description=description,
        )
        with self.repos.atomic():
            section = self.repos.cafeterias.add_waiter_section(section)
        self.feed.publish(ChangeKind.CAFETERIA_UPDATED, cafeteria_id)
        return section

    def add_waiter_table(
        self,
        cafeteria_id: str,
        section_id: str,
        table_number: str,
        reference_code: str,
        capacity: int = 2,
        table_id: Optional[str] = None,
    ) -> WaiterTable:
        self._require_cafeteria(cafeteria_id)
        if section_id not in {s.id for s in self.repos.cafeterias.get_waiter_sections(cafeteria_id)}:
            raise NotFoundError(f"Section {section_id} not found in cafeteria {cafeteria_id}.")
        if self.repos.cafeterias.get_waiter_table_by_reference(cafeteria_id, reference_code):
            raise ValidationError(f"Table reference {reference_code} is already in use.")

        table = WaiterTable(
            id=table_id or new_id("tbl"),
            cafeteria_id=cafeteria_id,
            section_id=section_id,
            table_number=str(table_number),
            reference_code=reference_code,
            capacity=int(capacity),
        )
        with self.repos.atomic():
            table = self.repos.cafeterias.add_waiter_table(table)
        self.feed.publish(ChangeKind.CAFETERIA_UPDATED, cafeteria_id)
        return table

    def set_table_active(self, table_id: str, is_active: bool) -> WaiterTable:
        with self.repos.atomic():
            table = self.repos.cafeterias.update_waiter_table_status(table_id, bool(is_active))
        if table is None:
            raise NotFoundError(f"Table {table_id} not found.")
        logger.info(f"Table {table_id} {'activated' if table.is_active else 'deactivated'}")
        self.feed.publish(ChangeKind.CAFETERIA_UPDATED, table.cafeteria_id)
        return table
