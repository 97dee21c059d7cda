"""
Orders views package.
"""

from .order_views import order_detail, order_list, order_update_status

__all__ = [
    "order_detail",
    "order_list",
    "order_update_status",
]
