"""
Orders services package.

- OrderService: order creation and status changes
- SettlementService: point deduction and commission fan-out when an order is paid
"""

from .order_service import OrderService
from .settlement_service import SettlementService

__all__ = [
    "OrderService",
    "SettlementService",
]
