from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, model_validator


class NotificationResponse(BaseModel):
    id: UUID
    type: str
    title: str
    message: Optional[str] = None
    related_event_id: Optional[UUID] = None
    is_read: bool
    created_at: datetime

    class Config:
        from_attributes = True


class NotificationListResponse(BaseModel):
    notifications: List[NotificationResponse]


class NotificationUpdate(BaseModel):
    """Mark one notification (notification_id) or all of them (mark_all_read) as read."""

    notification_id: Optional[UUID] = None
    mark_all_read: bool = False

    @model_validator(mode="after")
    def require_target(self) -> "NotificationUpdate":
        if not self.mark_all_read and self.notification_id is None:
            raise ValueError("Notification ID is required")
        return self


class NotificationUpdateResponse(BaseModel):
    success: bool
    updated: int = 0


class NotificationCountResponse(BaseModel):
    count: int
