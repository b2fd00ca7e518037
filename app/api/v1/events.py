import logging
import uuid
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from pydantic import Field, field_validator

from app.api.v1.common import SUCCESS, IdPayload, Payload, reject_null
from app.core.config import settings
from app.core.security import get_current_user
from app.db.models import ContractType, EventStatus, EventType, NegotiationType, User
from app.db.session import get_store
from app.db.store import DocumentStore
from app.repositories.attachments import DEFAULT_ATTACHMENT_TYPE, EventAttachmentRepository
from app.repositories.events import EventRepository
from app.services.storage import StorageClient, StorageError

logger = logging.getLogger("agenda.events")

router = APIRouter(prefix="/trpc", tags=["Eventos"])


class EventCreate(Payload):
    artist_id: int
    contractor_id: Optional[int] = None
    local_partner_id: Optional[int] = None
    title: str = Field(..., min_length=1)
    status: Optional[EventStatus] = None
    event_type: Optional[EventType] = None
    contract_type: Optional[ContractType] = None
    event_date: datetime
    start_time: Optional[str] = None
    duration: Optional[int] = None
    location: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    cache: Optional[str] = None
    has_production: Optional[bool] = None
    production_value: Optional[str] = None
    production_percentage: Optional[str] = None
    negotiation_type: Optional[NegotiationType] = None
    guarantee: Optional[str] = None
    ticket_percentage: Optional[str] = None
    discount: Optional[str] = None
    observations: Optional[str] = None
    payment_due_date: Optional[datetime] = None


class EventUpdate(Payload):
    id: int
    artist_id: Optional[int] = None
    contractor_id: Optional[int] = None
    local_partner_id: Optional[int] = None
    title: Optional[str] = Field(None, min_length=1)
    status: Optional[EventStatus] = None
    event_type: Optional[EventType] = None
    contract_type: Optional[ContractType] = None
    event_date: Optional[datetime] = None
    start_time: Optional[str] = None
    duration: Optional[int] = None
    location: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    cache: Optional[str] = None
    has_production: Optional[bool] = None
    production_value: Optional[str] = None
    production_percentage: Optional[str] = None
    negotiation_type: Optional[NegotiationType] = None
    guarantee: Optional[str] = None
    ticket_percentage: Optional[str] = None
    discount: Optional[str] = None
    observations: Optional[str] = None
    payment_due_date: Optional[datetime] = None
    is_paid: Optional[bool] = None

    @field_validator(
        "artist_id",
        "title",
        "status",
        "event_type",
        "contract_type",
        "event_date",
        "duration",
        "cache",
        "has_production",
        "production_value",
        "production_percentage",
        "negotiation_type",
        "guarantee",
        "ticket_percentage",
        "discount",
        "is_paid",
    )
    @classmethod
    def _not_null(cls, value):
        return reject_null(value)


class AttachmentCreate(Payload):
    event_id: int
    type: Optional[str] = None
    file_name: str = Field(..., min_length=1)
    file_url: str = Field(..., min_length=1)
    file_key: Optional[str] = None
    mime_type: Optional[str] = None


def _events(store: DocumentStore) -> EventRepository:
    return EventRepository(store, search_scan_limit=settings.SEARCH_SCAN_LIMIT)


@router.get("/events.list")
def list_events(
    artist_id: Optional[int] = Query(None, alias="artistId"),
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    event_status: Optional[str] = Query(None, alias="status"),
    current_user: User = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    return _events(store).list(
        artist_id=artist_id, status=event_status, start_date=start_date, end_date=end_date
    )


@router.get("/events.getById")
def get_event(
    id: int = Query(...),
    current_user: User = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    return _events(store).get_by_id(id)


@router.get("/events.search")
def search_events(
    query: str = Query(...),
    current_user: User = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    return _events(store).search(query)


@router.post("/events.create")
def create_event(
    payload: EventCreate,
    current_user: User = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    event_id = _events(store).create(payload.model_dump(exclude_unset=True), created_by=current_user.id)
    return {"id": event_id}


@router.post("/events.update")
def update_event(
    payload: EventUpdate,
    current_user: User = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    _events(store).update(payload.id, payload.model_dump(exclude_unset=True, exclude={"id"}))
    return SUCCESS


@router.post("/events.delete")
def delete_event(
    payload: IdPayload,
    current_user: User = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    _events(store).delete(payload.id)
    return SUCCESS


@router.get("/events.attachments")
def list_attachments(
    event_id: int = Query(..., alias="eventId"),
    current_user: User = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    return EventAttachmentRepository(store).list_for_event(event_id)


@router.post("/events.addAttachment")
def add_attachment(
    payload: AttachmentCreate,
    current_user: User = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    attachment_id = EventAttachmentRepository(store).create(payload.model_dump(exclude_unset=True))
    return {"id": attachment_id}


@router.post("/events.uploadAttachment")
def upload_attachment(
    event_id: int = Form(..., alias="eventId"),
    attachment_type: str = Form(DEFAULT_ATTACHMENT_TYPE, alias="type"),
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    if not file.filename:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Arquivo nao informado")
    if _events(store).get_by_id(event_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Evento nao encontrado")

    safe_name = file.filename.replace(" ", "_")
    object_name = f"events/{event_id}/{uuid.uuid4().hex}_{safe_name}"
    content_type = file.content_type or "application/octet-stream"
    try:
        file_url, file_size = StorageClient().upload_file(
            file.file,
            object_name,
            content_type,
            max_bytes=settings.ATTACHMENT_MAX_MB * 1024 * 1024,
        )
    except StorageError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    if file_size <= 0:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Arquivo vazio")

    attachment_id = EventAttachmentRepository(store).create(
        {
            "event_id": event_id,
            "type": attachment_type,
            "file_name": file.filename,
            "file_url": file_url,
            "file_key": object_name,
            "mime_type": content_type,
        }
    )
    logger.info("attachment uploaded event_id=%s attachment_id=%s size=%s", event_id, attachment_id, file_size)
    return {"id": attachment_id, "fileUrl": file_url, "fileKey": object_name}


@router.post("/events.deleteAttachment")
def delete_attachment(
    payload: IdPayload,
    current_user: User = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    attachments = EventAttachmentRepository(store)
    attachment = attachments.get_by_id(payload.id)
    if attachment and attachment.file_key:
        StorageClient().delete_object(attachment.file_key)
    attachments.delete(payload.id)
    return SUCCESS
