"""
Orders Catalog

Usage:
    from strokecode.core.orders import default_orders, order_label

    selected = default_orders(agent="alteplase")
"""
from .catalog import (
    CATEGORY_TITLES,
    ORDERS,
    ORDERS_BY_ID,
    Order,
    OrderCategory,
    default_orders,
    group_orders,
    order_label,
    orders_in,
)

__all__ = [
    "CATEGORY_TITLES",
    "ORDERS",
    "ORDERS_BY_ID",
    "Order",
    "OrderCategory",
    "default_orders",
    "group_orders",
    "order_label",
    "orders_in",
]
