"""
Orders serializers package.

- order_serializers: order creation input and order output
- status_serializers: status change requests
"""

from .order_serializers import (
    OrderCreateSerializer,
    OrderItemInputSerializer,
    OrderItemSerializer,
    OrderSerializer,
)
from .status_serializers import UpdateOrderStatusSerializer

__all__ = [
    "OrderCreateSerializer",
    "OrderItemInputSerializer",
    "OrderItemSerializer",
    "OrderSerializer",
    "UpdateOrderStatusSerializer",
]
