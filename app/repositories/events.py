import logging
from datetime import datetime
from typing import Any, List, Optional

from app.db.models import Event
from app.db.store import DocumentStore, as_utc, utcnow
from app.repositories.attachments import EventAttachmentRepository
from app.repositories.base import Repository

logger = logging.getLogger("agenda.events")

DEFAULT_SEARCH_SCAN_LIMIT = 1000
SEARCH_FIELDS = ("title", "city", "state", "location", "observations")


def _value(data: dict[str, Any], key: str, default: Any) -> Any:
    value = data.get(key)
    return default if value is None else value


def event_date_key(event: Event) -> float:
    return event.event_date.timestamp() if event.event_date else 0


class EventRepository(Repository[Event]):
    collection = "events"
    record = Event

    def __init__(self, store: DocumentStore, search_scan_limit: int = DEFAULT_SEARCH_SCAN_LIMIT) -> None:
        super().__init__(store)
        self.search_scan_limit = search_scan_limit

    def create(self, data: dict[str, Any], created_by: Optional[int] = None) -> int:
        now = utcnow()
        return self._insert(
            {
                "artist_id": data["artist_id"],
                "contractor_id": data.get("contractor_id"),
                "local_partner_id": data.get("local_partner_id"),
                "title": data["title"],
                "status": _value(data, "status", "reservado"),
                "event_type": _value(data, "event_type", "show"),
                "contract_type": _value(data, "contract_type", "publico"),
                "event_date": data["event_date"],
                "start_time": data.get("start_time"),
                "duration": _value(data, "duration", 60),
                "location": data.get("location"),
                "city": data.get("city"),
                "state": data.get("state"),
                "cache": _value(data, "cache", "0"),
                "has_production": _value(data, "has_production", False),
                "production_value": _value(data, "production_value", "0"),
                "production_percentage": _value(data, "production_percentage", "0"),
                "negotiation_type": _value(data, "negotiation_type", "cache"),
                "guarantee": _value(data, "guarantee", "0"),
                "ticket_percentage": _value(data, "ticket_percentage", "0"),
                "discount": _value(data, "discount", "0"),
                "observations": data.get("observations"),
                "payment_due_date": data.get("payment_due_date"),
                "is_paid": _value(data, "is_paid", False),
                "created_by": created_by,
                "created_at": now,
                "updated_at": now,
            }
        )

    def list(
        self,
        artist_id: Optional[int] = None,
        status: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> list[Event]:
        filters = []
        if artist_id:
            filters.append(("artistId", "==", artist_id))
        if status:
            filters.append(("status", "==", status))
        if start_date:
            filters.append(("eventDate", ">=", as_utc(start_date)))
        if end_date:
            filters.append(("eventDate", "<=", as_utc(end_date)))
        docs = self.store.query(self.collection, filters, order_by=("eventDate", "asc"))
        return self._build_all(docs)

    def delete(self, event_id: int) -> int:
        """Remove o evento e, em seguida, todos os seus anexos. Retorna quantos anexos sairam."""
        self.store.delete(self.collection, str(event_id))
        removed = EventAttachmentRepository(self.store).delete_for_event(event_id)
        logger.info("event deleted id=%s attachments=%s", event_id, removed)
        return removed

    def search(self, query: Optional[str]) -> List[Event]:
        needle = (query or "").strip().lower()
        if not needle:
            return []
        # sem indice de texto: varre apenas os eventos mais recentes
        docs = self.store.query(
            self.collection, order_by=("eventDate", "desc"), limit=self.search_scan_limit
        )
        matches = []
        for event in self._build_all(docs):
            haystack = " ".join(
                str(value) for value in (getattr(event, field) for field in SEARCH_FIELDS) if value
            ).lower()
            if needle in haystack:
                matches.append(event)
        return sorted(matches, key=event_date_key)
