from .errors import InvalidInputError, TaskStoreError
from .models import Notification, NotificationFeed, TaskSnapshot
from .notifications import build_feed, build_notifications, classify_urgency, days_until

__version__ = "0.1.0"

__all__ = [
    "InvalidInputError",
    "Notification",
    "NotificationFeed",
    "TaskSnapshot",
    "TaskStoreError",
    "build_feed",
    "build_notifications",
    "classify_urgency",
    "days_until",
]
