"""
Order storage.

``OrdersRepository.update_status`` is the only mutation after creation. When an
``expected_status`` is given the write is conditional on the stored status still
matching it; a mismatch returns ``None`` and changes nothing.
"""
import dataclasses
from abc import ABC, abstractmethod
from typing import List, Optional

from django.db import transaction
from django.utils import timezone

from core_backend.base.memory import InMemoryRepository

from . import models
from .entities import Order, OrderItem
from .rules import TERMINAL_STATUSES, normalize_status


class OrdersRepository(ABC):
    @abstractmethod
    def get_all(self) -> List[Order]: ...

    @abstractmethod
    def get_by_id(self, order_id: str, for_update: bool = False) -> Optional[Order]:
        """``for_update`` locks the row until the enclosing unit of work ends."""

    @abstractmethod
    def get_by_cafeteria_id(self, cafeteria_id: str) -> List[Order]: ...

    @abstractmethod
    def get_active_by_session_id(self, session_id: str) -> Optional[Order]:
        """Most recent non-terminal order for a table session."""

    @abstractmethod
    def create(self, order: Order) -> Order: ...

    @abstractmethod
    def update_status(
        self, order_id: str, new_status: str, expected_status: Optional[str] = None
    ) -> Optional[Order]: ...


def _is_active(order: Order) -> bool:
    return normalize_status(order.status) not in TERMINAL_STATUSES


class InMemoryOrdersRepository(InMemoryRepository, OrdersRepository):
    state_fields = {"_orders": (Order, "id")}

    def __init__(self, lock=None):
        super().__init__(lock)
        self._orders = {}

    def get_all(self):
        with self._lock:
            return list(self._orders.values())

    def get_by_id(self, order_id, for_update=False):
        return self._orders.get(order_id)

    def get_by_cafeteria_id(self, cafeteria_id):
        with self._lock:
            return [o for o in self._orders.values() if o.cafeteria_id == cafeteria_id]

    def get_active_by_session_id(self, session_id):
        with self._lock:
            candidates = [
                o for o in self._orders.values()
                if o.session_id == session_id and _is_active(o)
            ]
        return candidates[-1] if candidates else None

    def create(self, order):
        with self._lock:
            self._orders[order.id] = order
            return order

    def update_status(self, order_id, new_status, expected_status=None):
        with self._lock:
            current = self._orders.get(order_id)
            if current is None:
                return None
            if expected_status is not None and current.status != expected_status:
                return None
            updated = dataclasses.replace(
                current, status=new_status, updated_at=timezone.now()
            )
            self._orders[order_id] = updated
            return updated


def order_from_model(row: models.Order) -> Order:
    items = tuple(
        OrderItem(
            menu_item_id=item.menu_item_id,
            name=item.name,
            price=item.price,
            quantity=item.quantity,
            notes=item.notes,
        )
        for item in row.items.all()
    )
    return Order(
        id=row.id,
        session_id=row.session_id,
        cafeteria_id=row.cafeteria_id,
        items=items,
        status=row.status,
        total=row.total,
        created_at=row.created_at,
        cafeteria_code=row.cafeteria_code,
        table_code=row.table_code,
        table_display=row.table_display,
        updated_at=row.updated_at,
    )


class DjangoOrdersRepository(OrdersRepository):
    def _queryset(self):
        return models.Order.objects.prefetch_related("items")

    def get_all(self):
        return [order_from_model(row) for row in self._queryset().order_by("created_at")]

    def get_by_id(self, order_id, for_update=False):
        queryset = self._queryset().filter(pk=order_id)
        if for_update:
            queryset = queryset.select_for_update()
        row = queryset.first()
        return order_from_model(row) if row else None

    def get_by_cafeteria_id(self, cafeteria_id):
        rows = self._queryset().filter(cafeteria_id=cafeteria_id).order_by("created_at")
        return [order_from_model(row) for row in rows]

    def get_active_by_session_id(self, session_id):
        row = (
            self._queryset()
            .filter(session_id=session_id)
            .exclude(status__in=TERMINAL_STATUSES)
            .order_by("-created_at")
            .first()
        )
        return order_from_model(row) if row else None

    def create(self, order):
        with transaction.atomic():
            row = models.Order.objects.create(
                id=order.id,
                session_id=order.session_id,
                cafeteria_id=order.cafeteria_id,
                status=order.status,
                total=order.total,
                cafeteria_code=order.cafeteria_code,
                table_code=order.table_code,
                table_display=order.table_display,
                created_at=order.created_at,
            )
            models.OrderItem.objects.bulk_create(
                [
                    models.OrderItem(
                        order=row,
                        position=position,
                        menu_item_id=item.menu_item_id,
                        name=item.name,
                        price=item.price,
                        quantity=item.quantity,
                        notes=item.notes,
                    )
                    for position, item in enumerate(order.items)
                ]
            )
        # Return the caller's record: the column rounds Decimal values
        return dataclasses.replace(order, updated_at=row.updated_at)

    def update_status(self, order_id, new_status, expected_status=None):
        queryset = models.Order.objects.filter(pk=order_id)
        if expected_status is not None:
            queryset = queryset.filter(status=expected_status)
        if not queryset.update(status=new_status, updated_at=timezone.now()):
            return None
        return self.get_by_id(order_id)
