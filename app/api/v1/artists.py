from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import Field, field_validator

from app.api.v1.common import EMAIL_PATTERN, SUCCESS, IdPayload, Payload, reject_null
from app.core.security import get_current_user
from app.db.models import User
from app.db.session import get_store
from app.db.store import DocumentStore
from app.repositories.artists import ArtistRepository

router = APIRouter(prefix="/trpc", tags=["Artistas"])


class ArtistCreate(Payload):
    name: str = Field(..., min_length=1)
    email: Optional[str] = Field(None, pattern=EMAIL_PATTERN)
    contact_name: Optional[str] = None
    contact_phone: Optional[str] = None
    photo_url: Optional[str] = None
    banner_url: Optional[str] = None
    color: Optional[str] = None


class ArtistUpdate(Payload):
    id: int
    name: Optional[str] = Field(None, min_length=1)
    email: Optional[str] = Field(None, pattern=EMAIL_PATTERN)
    contact_name: Optional[str] = None
    contact_phone: Optional[str] = None
    photo_url: Optional[str] = None
    banner_url: Optional[str] = None
    color: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator("name", "color", "is_active")
    @classmethod
    def _not_null(cls, value):
        return reject_null(value)


@router.get("/artists.list")
def list_artists(
    include_inactive: bool = Query(False, alias="includeInactive"),
    current_user: User = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    return ArtistRepository(store).list(include_inactive)


@router.get("/artists.getById")
def get_artist(
    id: int = Query(...),
    current_user: User = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    return ArtistRepository(store).get_by_id(id)


@router.post("/artists.create")
def create_artist(
    payload: ArtistCreate,
    current_user: User = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    artist_id = ArtistRepository(store).create(payload.model_dump(exclude_unset=True), created_by=current_user.id)
    return {"id": artist_id}


@router.post("/artists.update")
def update_artist(
    payload: ArtistUpdate,
    current_user: User = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    ArtistRepository(store).update(payload.id, payload.model_dump(exclude_unset=True, exclude={"id"}))
    return SUCCESS


@router.post("/artists.delete")
def delete_artist(
    payload: IdPayload,
    current_user: User = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    ArtistRepository(store).delete(payload.id)
    return SUCCESS
