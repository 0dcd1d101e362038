from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict, Field

from restopos.models.base import new_id
from restopos.models.notification import NotificationType


class NotificationEvent(BaseModel):
    """A typed, role-targeted event as held in a view's in-memory list."""
    model_config = ConfigDict(from_attributes=True)

    event_id: str = Field(default_factory=new_id)
    type: NotificationType
    order_id: str
    message: str
    target_role: str
    timestamp: datetime


class NotificationListResponse(BaseModel):
    notifications: List[NotificationEvent]
