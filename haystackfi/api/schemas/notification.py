"""
Notification schemas.
"""

from datetime import datetime
from typing import Optional

from ...db.enums import NotificationType
from .common import CamelModel


class NotificationResponse(CamelModel):
    id: int
    user_id: int
    type: NotificationType
    title: str
    message: str
    is_read: bool
    action_url: Optional[str] = None
    created_at: datetime
