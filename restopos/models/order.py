from enum import Enum
from tortoise import fields, models

from .base import new_id


class OrderStatus(str, Enum):
    PENDING = "pending"  # Initial state, waiting for the kitchen
    IN_PROGRESS = "in-progress"
    READY = "ready"
    SERVED = "served"
    CANCELLED = "cancelled"


class PaymentMethod(str, Enum):
    CASH = "cash"
    CARD = "card"


# Cross-collection references are plain id columns; joins happen at read time.

class Order(models.Model):
    id = fields.CharField(primary_key=True, max_length=36, default=new_id)
    table_id = fields.CharField(max_length=36)
    creator_id = fields.CharField(max_length=36)
    status = fields.CharEnumField(OrderStatus, default=OrderStatus.PENDING)
    total = fields.DecimalField(max_digits=14, decimal_places=2, default=0)
    discount = fields.DecimalField(max_digits=14, decimal_places=2, default=0)
    # Rate products are kept exact so finalTotal is the only rounded figure
    tax = fields.DecimalField(max_digits=16, decimal_places=4, default=0)
    service_charge = fields.DecimalField(max_digits=16, decimal_places=4, default=0)
    final_total = fields.DecimalField(max_digits=14, decimal_places=2, default=0)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "orders"


class OrderItem(models.Model):
    id = fields.CharField(primary_key=True, max_length=36, default=new_id)
    order_id = fields.CharField(max_length=36)
    menu_item_id = fields.CharField(max_length=36)
    quantity = fields.IntField()
    unit_price = fields.DecimalField(max_digits=12, decimal_places=2) # Price snapshot at order time
    modifiers = fields.JSONField(default=list)
    total_price = fields.DecimalField(max_digits=14, decimal_places=2)

    class Meta:
        table = "order_items"


class Payment(models.Model):
    id = fields.CharField(primary_key=True, max_length=36, default=new_id)
    order_id = fields.CharField(max_length=36)
    method = fields.CharEnumField(PaymentMethod)
    amount = fields.DecimalField(max_digits=14, decimal_places=2)
    paid_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "payments"
