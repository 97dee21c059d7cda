"""
Cafeteria, menu and table-registry storage.

``CafeteriasRepository`` is the port the services depend on. Two adapters
implement it: ``InMemoryCafeteriasRepository`` for the process-local backend and
``DjangoCafeteriasRepository`` backed by the ORM. Both return immutable records
from ``cafeterias.entities`` and ``None`` for unknown identifiers.
"""
import dataclasses
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

from django.db import transaction
from django.db.models import F

from core_backend.base.memory import InMemoryRepository, matches
from core_backend.exceptions import InsufficientBalanceError

from . import models
from .entities import (
    Cafeteria,
    KitchenCategory,
    MenuCategory,
    MenuItem,
    WaiterSection,
    WaiterTable,
)


def _insufficient(cafeteria_id: str, balance: int, change: int) -> InsufficientBalanceError:
    return InsufficientBalanceError(
        f"Insufficient points in cafeteria {cafeteria_id}: "
        f"balance {balance}, required {-change}."
    )


class CafeteriasRepository(ABC):
    # Cafeterias

    @abstractmethod
    def get_all(self) -> List[Cafeteria]: ...

    @abstractmethod
    def get_by_id(self, cafeteria_id: str) -> Optional[Cafeteria]: ...

    @abstractmethod
    def create(self, cafeteria: Cafeteria) -> Cafeteria: ...

    @abstractmethod
    def update_points(self, cafeteria_id: str, points_change: int) -> Optional[Cafeteria]:
        """
        Apply a signed change to the points balance.

        The check and the write are a single step, so two concurrent debits can
        never both pass against the same balance. Raises
        ``InsufficientBalanceError`` when the result would be negative.
        """

    @abstractmethod
    def update_trial_override(
        self, cafeteria_id: str, trial_days: Optional[int]
    ) -> Optional[Cafeteria]: ...

    @abstractmethod
    def set_trial_expired(self, cafeteria_id: str, expired: bool) -> Optional[Cafeteria]: ...

    @abstractmethod
    def end_trial(self, cafeteria_id: str) -> Optional[Cafeteria]:
        """Clear the expiry flag and stop the trial clock."""

    # Menu

    @abstractmethod
    def get_menu_categories(self) -> List[MenuCategory]: ...

    @abstractmethod
    def add_menu_category(self, category: MenuCategory) -> MenuCategory: ...

    @abstractmethod
    def get_menu_items_by_category_id(self, category_id: str) -> List[MenuItem]: ...

    @abstractmethod
    def get_menu_item_by_id(self, item_id: str) -> Optional[MenuItem]: ...

    @abstractmethod
    def get_menu_items_by_ids(self, item_ids: Iterable[str]) -> List[MenuItem]: ...

    @abstractmethod
    def add_menu_item(self, item: MenuItem) -> MenuItem: ...

    @abstractmethod
    def update_menu_item_kitchen_category(
        self, item_id: str, kitchen_category_id: Optional[str]
    ) -> Optional[MenuItem]: ...

    @abstractmethod
    def get_menu_items_by_kitchen_category(self, kitchen_category_id: str) -> List[MenuItem]: ...

    # Sections and tables

    @abstractmethod
    def get_waiter_sections(self, cafeteria_id: str) -> List[WaiterSection]: ...

    @abstractmethod
    def add_waiter_section(self, section: WaiterSection) -> WaiterSection: ...

    @abstractmethod
    def get_waiter_tables(
        self, cafeteria_id: str, section_id: Optional[str] = None
    ) -> List[WaiterTable]: ...

    @abstractmethod
    def get_waiter_table_by_reference(
        self, cafeteria_id: str, reference_code: str
    ) -> Optional[WaiterTable]: ...

    @abstractmethod
    def add_waiter_table(self, table: WaiterTable) -> WaiterTable: ...

    @abstractmethod
    def update_waiter_table_status(self, table_id: str, is_active: bool) -> Optional[WaiterTable]: ...

    # Kitchen stations

    @abstractmethod
    def get_kitchen_categories(self, cafeteria_id: str) -> List[KitchenCategory]: ...

    @abstractmethod
    def add_kitchen_category(self, category: KitchenCategory) -> KitchenCategory: ...


class InMemoryCafeteriasRepository(InMemoryRepository, CafeteriasRepository):
    state_fields = {
        "_cafeterias": (Cafeteria, "id"),
        "_menu_categories": (MenuCategory, "id"),
        "_menu_items": (MenuItem, "id"),
        "_sections": (WaiterSection, "id"),
        "_tables": (WaiterTable, "id"),
        "_kitchen_categories": (KitchenCategory, "id"),
    }

    def __init__(self, lock=None):
        super().__init__(lock)
        self._cafeterias = {}
        self._menu_categories = {}
        self._menu_items = {}
        self._sections = {}
        self._tables = {}
        self._kitchen_categories = {}

    def _replace(self, store: dict, key: str, **changes):
        with self._lock:
            current = store.get(key)
            if current is None:
                return None
            updated = dataclasses.replace(current, **changes)
            store[key] = updated
            return updated

    def get_all(self):
        with self._lock:
            return list(self._cafeterias.values())

    def get_by_id(self, cafeteria_id):
        return self._cafeterias.get(cafeteria_id)

    def create(self, cafeteria):
        with self._lock:
            self._cafeterias[cafeteria.id] = cafeteria
            return cafeteria

    def update_points(self, cafeteria_id, points_change):
        with self._lock:
            current = self._cafeterias.get(cafeteria_id)
            if current is None:
                return None
            if current.points + points_change < 0:
                raise _insufficient(cafeteria_id, current.points, points_change)
            return self._replace(
                self._cafeterias, cafeteria_id, points=current.points + points_change
            )

    def update_trial_override(self, cafeteria_id, trial_days):
        return self._replace(self._cafeterias, cafeteria_id, trial_days_override=trial_days)

    def set_trial_expired(self, cafeteria_id, expired):
        return self._replace(self._cafeterias, cafeteria_id, is_trial_expired=expired)

    def end_trial(self, cafeteria_id):
        return self._replace(
            self._cafeterias, cafeteria_id, is_trial_expired=False, trial_started_at=None
        )

    def get_menu_categories(self):
        with self._lock:
            return list(self._menu_categories.values())

    def add_menu_category(self, category):
        with self._lock:
            self._menu_categories[category.id] = category
            return category

    def get_menu_items_by_category_id(self, category_id):
        with self._lock:
            return [i for i in self._menu_items.values() if i.category_id == category_id]

    def get_menu_item_by_id(self, item_id):
        return self._menu_items.get(item_id)

    def get_menu_items_by_ids(self, item_ids):
        with self._lock:
            return [self._menu_items[i] for i in dict.fromkeys(item_ids) if i in self._menu_items]

    def add_menu_item(self, item):
        with self._lock:
            self._menu_items[item.id] = item
            return item

    def update_menu_item_kitchen_category(self, item_id, kitchen_category_id):
        return self._replace(self._menu_items, item_id, kitchen_category_id=kitchen_category_id)

    def get_menu_items_by_kitchen_category(self, kitchen_category_id):
        with self._lock:
            return [
                i for i in self._menu_items.values()
                if i.kitchen_category_id == kitchen_category_id
            ]

    def get_waiter_sections(self, cafeteria_id):
        with self._lock:
            return [s for s in self._sections.values() if s.cafeteria_id == cafeteria_id]

    def add_waiter_section(self, section):
        with self._lock:
            self._sections[section.id] = section
            return section

    def get_waiter_tables(self, cafeteria_id, section_id=None):
        with self._lock:
            return [
                t for t in self._tables.values()
                if matches(t, cafeteria_id=cafeteria_id, section_id=section_id)
            ]

    def get_waiter_table_by_reference(self, cafeteria_id, reference_code):
        with self._lock:
            for table in self._tables.values():
                if table.cafeteria_id == cafeteria_id and table.reference_code == reference_code:
                    return table
            return None

    def add_waiter_table(self, table):
        with self._lock:
            self._tables[table.id] = table
            return table

    def update_waiter_table_status(self, table_id, is_active):
        return self._replace(self._tables, table_id, is_active=is_active)

    def get_kitchen_categories(self, cafeteria_id):
        with self._lock:
            return [
                c for c in self._kitchen_categories.values() if c.cafeteria_id == cafeteria_id
            ]

    def add_kitchen_category(self, category):
        with self._lock:
            self._kitchen_categories[category.id] = category
            return category


# ORM adapter


def cafeteria_from_model(row: models.Cafeteria) -> Cafeteria:
    return Cafeteria(
        id=row.id,
        name=row.name,
        code=row.code,
        points=row.points,
        description=row.description,
        address=row.address,
        phone=row.phone,
        latitude=row.latitude,
        longitude=row.longitude,
        is_open=row.is_open,
        opening_hours=row.opening_hours,
        marketer_id=row.marketer_id,
        is_trial_expired=row.is_trial_expired,
        trial_days_override=row.trial_days_override,
        trial_started_at=row.trial_started_at,
    )


def menu_item_from_model(row: models.MenuItem) -> MenuItem:
    return MenuItem(
        id=row.id,
        category_id=row.category_id,
        name=row.name,
        price=row.price,
        description=row.description,
        image_url=row.image_url,
        is_available=row.is_available,
        kitchen_category_id=row.kitchen_category_id,
    )


def table_from_model(row: models.WaiterTable) -> WaiterTable:
    return WaiterTable(
        id=row.id,
        cafeteria_id=row.cafeteria_id,
        section_id=row.section_id,
        table_number=row.table_number,
        reference_code=row.reference_code,
        capacity=row.capacity,
        is_active=row.is_active,
    )


def _section_from_model(row: models.WaiterSection) -> WaiterSection:
    return WaiterSection(
        id=row.id, cafeteria_id=row.cafeteria_id, name=row.name, description=row.description
    )


def _kitchen_category_from_model(row: models.KitchenCategory) -> KitchenCategory:
    return KitchenCategory(
        id=row.id, cafeteria_id=row.cafeteria_id, name=row.name, description=row.description
    )


def _menu_category_from_model(row: models.MenuCategory) -> MenuCategory:
    return MenuCategory(id=row.id, name=row.name, description=row.description)


class DjangoCafeteriasRepository(CafeteriasRepository):
    def get_all(self):
        return [cafeteria_from_model(row) for row in models.Cafeteria.objects.all()]

    def get_by_id(self, cafeteria_id):
        row = models.Cafeteria.objects.filter(pk=cafeteria_id).first()
        return cafeteria_from_model(row) if row else None

    def create(self, cafeteria):
        fields = cafeteria.to_dict()
        fields.update(
            latitude=cafeteria.latitude,
            longitude=cafeteria.longitude,
            trial_started_at=cafeteria.trial_started_at,
        )
        row = models.Cafeteria.objects.create(**fields)
        return cafeteria_from_model(row)

    def update_points(self, cafeteria_id, points_change):
        with transaction.atomic():
            queryset = models.Cafeteria.objects.filter(pk=cafeteria_id)
            if points_change < 0:
                # Conditional update: the balance check happens in the UPDATE itself
                updated = queryset.filter(points__gte=-points_change).update(
                    points=F("points") + points_change
                )
                if not updated:
                    current = queryset.values_list("points", flat=True).first()
                    if current is None:
                        return None
                    raise _insufficient(cafeteria_id, current, points_change)
            elif not queryset.update(points=F("points") + points_change):
                return None
        return self.get_by_id(cafeteria_id)

    def _update(self, cafeteria_id, **fields):
        if not models.Cafeteria.objects.filter(pk=cafeteria_id).update(**fields):
            return None
        return self.get_by_id(cafeteria_id)

    def update_trial_override(self, cafeteria_id, trial_days):
        return self._update(cafeteria_id, trial_days_override=trial_days)

    def set_trial_expired(self, cafeteria_id, expired):
        return self._update(cafeteria_id, is_trial_expired=expired)

    def end_trial(self, cafeteria_id):
        return self._update(cafeteria_id, is_trial_expired=False, trial_started_at=None)

    def get_menu_categories(self):
        return [_menu_category_from_model(row) for row in models.MenuCategory.objects.all()]

    def add_menu_category(self, category):
        row = models.MenuCategory.objects.create(**category.to_dict())
        return _menu_category_from_model(row)

    def get_menu_items_by_category_id(self, category_id):
        rows = models.MenuItem.objects.filter(category_id=category_id)
        return [menu_item_from_model(row) for row in rows]

    def get_menu_item_by_id(self, item_id):
        row = models.MenuItem.objects.filter(pk=item_id).first()
        return menu_item_from_model(row) if row else None

    def get_menu_items_by_ids(self, item_ids):
        rows = models.MenuItem.objects.in_bulk(list(dict.fromkeys(item_ids)))
        return [menu_item_from_model(rows[i]) for i in dict.fromkeys(item_ids) if i in rows]

    def add_menu_item(self, item):
        row = models.MenuItem.objects.create(
            id=item.id,
            category_id=item.category_id,
            name=item.name,
            price=item.price,
            description=item.description,
            image_url=item.image_url,
            is_available=item.is_available,
            kitchen_category_id=item.kitchen_category_id,
        )
        return menu_item_from_model(row)

    def update_menu_item_kitchen_category(self, item_id, kitchen_category_id):
        if not models.MenuItem.objects.filter(pk=item_id).update(
            kitchen_category_id=kitchen_category_id
        ):
            return None
        return self.get_menu_item_by_id(item_id)

    def get_menu_items_by_kitchen_category(self, kitchen_category_id):
        rows = models.MenuItem.objects.filter(kitchen_category_id=kitchen_category_id)
        return [menu_item_from_model(row) for row in rows]

    def get_waiter_sections(self, cafeteria_id):
        rows = models.WaiterSection.objects.filter(cafeteria_id=cafeteria_id)
        return [_section_from_model(row) for row in rows]

    def add_waiter_section(self, section):
        row = models.WaiterSection.objects.create(
            id=section.id,
            cafeteria_id=section.cafeteria_id,
            name=section.name,
            description=section.description,
        )
        return _section_from_model(row)

    def get_waiter_tables(self, cafeteria_id, section_id=None):
        rows = models.WaiterTable.objects.filter(cafeteria_id=cafeteria_id)
        if section_id is not None:
            rows = rows.filter(section_id=section_id)
        return [table_from_model(row) for row in rows]

    def get_waiter_table_by_reference(self, cafeteria_id, reference_code):
        row = models.WaiterTable.objects.filter(
            cafeteria_id=cafeteria_id, reference_code=reference_code
        ).first()
        return table_from_model(row) if row else None

    def add_waiter_table(self, table):
        row = models.WaiterTable.objects.create(
            id=table.id,
            cafeteria_id=table.cafeteria_id,
            section_id=table.section_id,
            table_number=table.table_number,
            reference_code=table.reference_code,
            capacity=table.capacity,
            is_active=table.is_active,
        )
        return table_from_model(row)

    def update_waiter_table_status(self, table_id, is_active):
        if not models.WaiterTable.objects.filter(pk=table_id).update(is_active=is_active):
            return None
        return table_from_model(models.WaiterTable.objects.get(pk=table_id))

    def get_kitchen_categories(self, cafeteria_id):
        rows = models.KitchenCategory.objects.filter(cafeteria_id=cafeteria_id)
        return [_kitchen_category_from_model(row) for row in rows]

    def add_kitchen_category(self, category):
        row = models.KitchenCategory.objects.create(
            id=category.id,
            cafeteria_id=category.cafeteria_id,
            name=category.name,
            description=category.description,
        )
        return _kitchen_category_from_model(row)
