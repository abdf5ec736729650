from src.sync.broadcaster import ChangeNotification, NotificationChannel, PublishError
from src.sync.custom_lists import CustomListManager
from src.sync.draft_service import ActionResult, DraftService
from src.sync.replica import DraftReplica

__all__ = [
    "ActionResult",
    "ChangeNotification",
    "CustomListManager",
    "DraftReplica",
    "DraftService",
    "NotificationChannel",
    "PublishError",
]
