from decimal import InvalidOperation
import logging
from typing import Iterable, List, Optional

from django.utils import timezone

from core_backend.base import new_id
from core_backend.exceptions import (
    ForbiddenError,
    InsufficientBalanceError,
    InvalidTransitionError,
    NotFoundError,
    TrialExpiredError,
    ValidationError,
)
from core_backend.infrastructure.events import ChangeKind
from ledger.financial import PRICE_DECIMAL_PLACES, fits_price_precision, order_total, to_decimal
from security.entities import ActorRole
from security.guards import check_kitchen_category, check_staff_active, check_waiter_section

from ..entities import Order, OrderItem, OrderStatus
from ..rules import is_valid_status_transition, normalize_status

logger = logging.getLogger(__name__)

STAFF_ROLES = (ActorRole.WAITER, ActorRole.KITCHEN)


class OrderService:
    """Order lifecycle: creation against the table registry and status changes."""

    def __init__(self, repositories, feed, settlement, config, security):
        self.repos = repositories
        self.feed = feed
        self.settlement = settlement
        self.config = config
        self.security = security

    # Queries

    def get_orders(self) -> List[Order]:
        return self.repos.orders.get_all()

    def get_order(self, order_id: str) -> Optional[Order]:
        return self.repos.orders.get_by_id(order_id)

    def get_orders_by_cafeteria(self, cafeteria_id: str) -> List[Order]:
        return self.repos.orders.get_by_cafeteria_id(cafeteria_id)

    def get_active_order_for_session(self, session_id: str) -> Optional[Order]:
        return self.repos.orders.get_active_by_session_id(session_id)

    # Creation

    def create_order(
        self,
        session_id: str,
        cafeteria_id: str,
        items: Iterable,
        *,
        cafeteria_code: str = "",
        table_code: str = "",
        table_display: str = "",
    ) -> Order:
        """
        Create a pending order for a table.

        Preconditions are checked in this order, each with its own error:
        cafeteria exists and has points, trial still running, table code given,
        cafeteria code matches, table registered, table active. Items must be
        non-empty with quantity >= 1 and price >= 0.

        Raises:
            NotFoundError, InsufficientBalanceError, TrialExpiredError, ValidationError
        """
        cafeteria = self.repos.cafeterias.get_by_id(cafeteria_id)
        if cafeteria is None:
            raise NotFoundError(f"Cafeteria {cafeteria_id} not found.")
        if cafeteria.points <= 0:
            raise InsufficientBalanceError("Cafeteria has insufficient points to create orders.")
        if self.config.is_trial_expired(cafeteria):
            raise TrialExpiredError("Cafeteria trial has expired. Cannot create orders.")

        if not table_code:
            raise ValidationError("Cannot create order without a valid table_code.")
        if cafeteria.code != cafeteria_code:
            raise ValidationError("Invalid cafeteria_code or cafeteria not found.")

        table = self.repos.cafeterias.get_waiter_table_by_reference(cafeteria_id, table_code)
        if table is None:
            raise ValidationError("Table not found or does not belong to this cafeteria.")
        if not table.is_active:
            raise ValidationError("Table is currently inactive.")

        if not session_id:
            raise ValidationError("session_id is required.")
        order_items = self._build_items(items)

        now = timezone.now()
        order = Order(
            id=new_id("order"),
            session_id=session_id,
            cafeteria_id=cafeteria_id,
            items=order_items,
            status=OrderStatus.PENDING.value,
            total=order_total(order_items),
            created_at=now,
            cafeteria_code=cafeteria_code,
            table_code=table_code,
            table_display=table_display or table.table_number,
            updated_at=now,
        )
        with self.repos.atomic():
            order = self.repos.orders.create(order)

        logger.info(
            f"Created order {order.id} for cafeteria {cafeteria_id} at table {table_code} "
            f"({len(order_items)} items, total {order.total})"
        )
        self.feed.publish(ChangeKind.ORDER_CREATED, order.id)
        return order

    def _build_items(self, items) -> tuple:
        items = list(items or [])
        if not items:
            raise ValidationError("Order must contain at least one item.")

        built = []
        for raw in items:
            if isinstance(raw, OrderItem):
                item = raw
            else:
                item = self._item_from_payload(raw)
            if item.quantity < 1:
                raise ValidationError(f"Quantity for {item.name or item.menu_item_id} must be at least 1.")
            if not fits_price_precision(item.price):
                raise ValidationError(
                    f"Price for {item.name or item.menu_item_id} has more than {PRICE_DECIMAL_PLACES} decimal places."
                )
            if item.price < 0:
                raise ValidationError(f"Price for {item.name or item.menu_item_id} cannot be negative.")
            built.append(item)
        return tuple(built)

    def _item_from_payload(self, data: dict) -> OrderItem:
        menu_item_id = data.get("menu_item_id")
        if not menu_item_id:
            raise ValidationError("Each item needs a menu_item_id.")

        name = data.get("name")
        price = data.get("price")
        if name is None or price is None:
            # Fill the snapshot from the catalogue when the caller sent only a reference
            menu_item = self.repos.cafeterias.get_menu_item_by_id(menu_item_id)
            if menu_item is None:
                raise ValidationError(f"Menu item {menu_item_id} not found.")
            name = menu_item.name if name is None else name
            price = menu_item.price if price is None else price

        try:
            price = to_decimal(price)
            quantity = int(data.get("quantity", 1))
        except (InvalidOperation, TypeError, ValueError):
            raise ValidationError(f"Invalid price or quantity for menu item {menu_item_id}.")

        return OrderItem(
            menu_item_id=menu_item_id,
            name=name,
            price=price,
            quantity=quantity,
            notes=data.get("notes") or "",
        )

    # Status changes

    def update_order_status(
        self,
        order_id: str,
        new_status: str,
        actor_id: Optional[str] = None,
        actor_role: Optional[str] = None,
    ) -> Optional[Order]:
        """
        Move an order to ``new_status``.

        Returns ``None`` for an unknown order. Staff actors pass through the
        active, section and kitchen-category guards first; blocked attempts are
        written to the security log. Moving to ``paid`` settles the order in the
        same unit of work as the status change.

        Raises:
            InvalidTransitionError: The state machine does not allow the change
            ForbiddenError: A guard rejected the staff actor
            InsufficientBalanceError: Settlement could not cover the order
            TrialExpiredError: Paying an order while the cafeteria trial is expired
        """
        order = self.repos.orders.get_by_id(order_id)
        if order is None:
            return None

        if not is_valid_status_transition(order.status, new_status):
            if actor_id and actor_role:
                self.security.log_event(
                    actor_id=actor_id,
                    role=actor_role,
                    attempted_action=f"Invalid transition: {order.status} -> {new_status}",
                    target_id=order_id,
                    reason="Invalid status transition",
                )
            raise InvalidTransitionError(
                f"Invalid status transition from {order.status} to {new_status}"
            )

        if actor_id and actor_role in STAFF_ROLES:
            self._enforce_staff_guards(order, actor_id, actor_role, new_status)

        target = normalize_status(new_status)
        with self.repos.atomic():
            current = self.repos.orders.get_by_id(order_id, for_update=True)
            if current is None or current.status != order.status:
                raise InvalidTransitionError(
                    f"Invalid status transition from "
                    f"{current.status if current else order.status} to {new_status}"
                )
            if target == OrderStatus.PAID:
                self.settlement.settle_order(current)
            updated = self.repos.orders.update_status(
                order_id, target, expected_status=current.status
            )
            if updated is None:
                raise InvalidTransitionError(
                    f"Order {order_id} changed while updating to {new_status}"
                )

        logger.info(f"Order {order_id} moved from {order.status} to {target}")
        self.feed.publish(ChangeKind.ORDER_STATUS_CHANGED, order_id)
        if target == OrderStatus.PAID:
            self.feed.publish(ChangeKind.ORDER_PAID, order_id)
            self.feed.publish(ChangeKind.CAFETERIA_UPDATED, order.cafeteria_id)
        return updated

    def _enforce_staff_guards(self, order, actor_id, actor_role, new_status):
        staff = self.repos.staff.get_by_id(actor_id)
        results = [check_staff_active(staff)]

        if actor_role == ActorRole.WAITER:
            session = self.repos.staff.get_waiter_session(actor_id)
            table_section_id = None
            if order.table_code:
                table = self.repos.cafeterias.get_waiter_table_by_reference(
                    order.cafeteria_id, order.table_code
                )
                table_section_id = table.section_id if table else None
            results.append(check_waiter_section(session, table_section_id))
        else:
            menu_items = self.repos.cafeterias.get_menu_items_by_ids(order.menu_item_ids)
            results.append(check_kitchen_category(staff, order, menu_items))

        for result in results:
            if not result:
                self.security.log_event(
                    actor_id=actor_id,
                    role=actor_role,
                    attempted_action=f"Update order status: {order.status} -> {new_status}",
                    target_id=order.id,
                    reason=result.reason,
                )
                raise ForbiddenError(result.reason)
