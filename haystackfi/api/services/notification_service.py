"""
Notification Service
Creates in-app notifications for marketplace events.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...db.enums import NotificationType
from ...db.models import Notification

logger = logging.getLogger(__name__)


def notify(
    db: Session,
    user_id: Optional[int],
    notification_type: NotificationType,
    title: str,
    message: str,
    action_url: Optional[str] = None,
) -> Optional[Notification]:
    """
    Queue a notification on the session; the caller commits.

    Returns None when there is nobody to notify (e.g. an unclaimed vendor).
    """
    if user_id is None:
        return None

    notification = Notification(
        user_id=user_id,
        type=notification_type.value,
        title=title,
        message=message,
        action_url=action_url,
    )
    db.add(notification)
    logger.debug(f"Notification queued for user {user_id}: {notification_type.value}")
    return notification
