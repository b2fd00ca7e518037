from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import Field

from app.api.v1.common import SUCCESS, IdPayload, Payload, reject_null
from app.core.config import settings
from app.core.security import get_current_user, require_admin
from app.db.models import User
from app.db.session import get_store
from app.db.store import DocumentStore
from app.repositories.notifications import NotificationRepository

router = APIRouter(prefix="/trpc", tags=["Notificacoes"])


class NotificationCreate(Payload):
    user_id: int
    title: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)
    type: Optional[str] = None
    related_event_id: Optional[int] = None


def _notifications(store: DocumentStore) -> NotificationRepository:
    return NotificationRepository(store, limit=settings.NOTIFICATIONS_LIMIT)


@router.get("/notifications.list")
def list_notifications(
    only_unread: bool = Query(False, alias="onlyUnread"),
    current_user: User = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    return _notifications(store).list_for_user(current_user.id, only_unread)


@router.post("/notifications.markAsRead")
def mark_as_read(
    payload: IdPayload,
    current_user: User = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    _notifications(store).mark_as_read(payload.id)
    return SUCCESS


@router.post("/notifications.markAllAsRead")
def mark_all_as_read(
    current_user: User = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    _notifications(store).mark_all_as_read(current_user.id)
    return SUCCESS


@router.post("/notifications.create")
def create_notification(
    payload: NotificationCreate,
    current_user: User = Depends(require_admin),
    store: DocumentStore = Depends(get_store),
):
    notification_id = _notifications(store).create(payload.model_dump(exclude_unset=True))
    return {"id": notification_id}
