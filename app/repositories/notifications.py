import logging
from datetime import datetime, timezone
from typing import Any

from app.core.errors import IndexUnavailableError
from app.db.models import Notification
from app.db.store import DocumentStore, WriteOp, utcnow
from app.repositories.base import Repository

logger = logging.getLogger("agenda.store")

DEFAULT_NOTIFICATIONS_LIMIT = 50
_EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)


class NotificationRepository(Repository[Notification]):
    collection = "notifications"
    record = Notification

    def __init__(self, store: DocumentStore, limit: int = DEFAULT_NOTIFICATIONS_LIMIT) -> None:
        super().__init__(store)
        self.limit = limit

    def create(self, data: dict[str, Any]) -> int:
        return self._insert(
            {
                "user_id": data["user_id"],
                "title": data["title"],
                "message": data["message"],
                "type": data.get("type") or "info",
                "is_read": data.get("is_read") or False,
                "related_event_id": data.get("related_event_id"),
                "created_at": utcnow(),
            }
        )

    def list_for_user(self, user_id: int, only_unread: bool = False) -> list[Notification]:
        filters = [("userId", "==", user_id)]
        if only_unread:
            filters.append(("isRead", "==", False))
        try:
            docs = self.store.query(
                self.collection,
                filters,
                order_by=("createdAt", "desc"),
                limit=self.limit,
                index_fallback=True,
            )
        except IndexUnavailableError:
            logger.warning("notifications ordering unavailable, sorting in memory user_id=%s", user_id)
            docs = self.store.query(self.collection, filters)
        items = sorted(
            self._build_all(docs),
            key=lambda item: item.created_at or _EPOCH,
            reverse=True,
        )
        return items[: self.limit]

    def mark_as_read(self, notification_id: int) -> None:
        self.store.set(self.collection, str(notification_id), {"isRead": True}, merge=True)

    def mark_all_as_read(self, user_id: int) -> int:
        docs = self.store.query(self.collection, [("userId", "==", user_id), ("isRead", "==", False)])
        self.store.commit_batch(
            [
                WriteOp("set", self.collection, str(data["id"]), {"isRead": True}, merge=True)
                for data in docs
            ]
        )
        return len(docs)
