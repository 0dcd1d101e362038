from enum import Enum
from tortoise import fields, models

from .base import new_id


class NotificationType(str, Enum):
    ORDER_CREATED = "order_created"
    ORDER_READY = "order_ready"
    ORDER_SERVED = "order_served"


class NotificationLogEntry(models.Model):
    """
    One row of the durable shared notification log. Every open view reads
    the same table, so an append here is visible to all of them.
    """
    seq = fields.IntField(primary_key=True) # Append order
    event_id = fields.CharField(max_length=36, unique=True, default=new_id)
    type = fields.CharEnumField(NotificationType)
    order_id = fields.CharField(max_length=36)
    message = fields.TextField()
    target_role = fields.CharField(max_length=16)
    timestamp = fields.DatetimeField()

    class Meta:
        table = "notification_log"
