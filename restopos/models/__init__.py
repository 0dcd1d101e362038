# restopos/models/__init__.py
from .menu import Category, MenuItem, Role, Table, TableStatus, User
from .order import Order, OrderItem, OrderStatus, Payment, PaymentMethod
from .notification import NotificationLogEntry, NotificationType

# Export all models
__all__ = [
    "Category",
    "MenuItem",
    "NotificationLogEntry",
    "NotificationType",
    "Order",
    "OrderItem",
    "OrderStatus",
    "Payment",
    "PaymentMethod",
    "Role",
    "Table",
    "TableStatus",
    "User",
]
