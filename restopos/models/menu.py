from enum import Enum
from tortoise import fields, models

from .base import new_id


class Role(str, Enum):
    ADMIN = "admin"
    CASHIER = "cashier"
    WAITER = "waiter"
    CHEF = "chef"


class TableStatus(str, Enum):
    AVAILABLE = "available"
    OCCUPIED = "occupied"
    RESERVED = "reserved"


class User(models.Model):
    id = fields.CharField(primary_key=True, max_length=36, default=new_id)
    name = fields.CharField(max_length=255)
    email = fields.CharField(max_length=255)
    role = fields.CharEnumField(Role)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "users"


class Category(models.Model):
    id = fields.CharField(primary_key=True, max_length=36, default=new_id)
    name = fields.CharField(max_length=255)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "categories"


class MenuItem(models.Model):
    id = fields.CharField(primary_key=True, max_length=36, default=new_id)
    name = fields.CharField(max_length=255)
    category_id = fields.CharField(max_length=36)
    price = fields.DecimalField(max_digits=12, decimal_places=2)
    description = fields.TextField(default="")
    modifiers = fields.JSONField(default=list) # Names of the optional variations, e.g. "Extra Spicy"
    stock = fields.IntField(default=0) # Only the Stock Ledger decrements this
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "menu_items"


class Table(models.Model):
    id = fields.CharField(primary_key=True, max_length=36, default=new_id)
    number = fields.IntField()
    status = fields.CharEnumField(TableStatus, default=TableStatus.AVAILABLE)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "tables"
