from typing import Any

from app.db.models import EventAttachment
from app.db.store import WriteOp, utcnow
from app.repositories.base import Repository

DEFAULT_ATTACHMENT_TYPE = "gerencial"


class EventAttachmentRepository(Repository[EventAttachment]):
    collection = "eventAttachments"
    record = EventAttachment

    def create(self, data: dict[str, Any]) -> int:
        return self._insert(
            {
                "event_id": data["event_id"],
                "type": data.get("type") or DEFAULT_ATTACHMENT_TYPE,
                "file_name": data["file_name"],
                "file_url": data["file_url"],
                "file_key": data.get("file_key"),
                "mime_type": data.get("mime_type"),
                "created_at": utcnow(),
            }
        )

    def list_for_event(self, event_id: int) -> list[EventAttachment]:
        docs = self.store.query(self.collection, [("eventId", "==", event_id)])
        return self._build_all(docs)

    def delete(self, attachment_id: int) -> None:
        self.store.delete(self.collection, str(attachment_id))

    def delete_for_event(self, event_id: int) -> int:
        attachments = self.list_for_event(event_id)
        self.store.commit_batch(
            [WriteOp("delete", self.collection, str(item.id)) for item in attachments]
        )
        return len(attachments)
