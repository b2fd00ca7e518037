from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import Field, field_validator

from app.api.v1.common import EMAIL_PATTERN, SUCCESS, IdPayload, Payload, reject_null
from app.core.security import get_current_user
from app.db.models import User
from app.db.session import get_store
from app.db.store import DocumentStore
from app.repositories.local_partners import LocalPartnerRepository

router = APIRouter(prefix="/trpc", tags=["Parceiros locais"])


class LocalPartnerCreate(Payload):
    name: str = Field(..., min_length=1)
    nickname: Optional[str] = None
    cpf: Optional[str] = None
    cnpj: Optional[str] = None
    email: Optional[str] = Field(None, pattern=EMAIL_PATTERN)
    whatsapp: Optional[str] = None


class LocalPartnerUpdate(Payload):
    id: int
    name: Optional[str] = Field(None, min_length=1)
    nickname: Optional[str] = None
    cpf: Optional[str] = None
    cnpj: Optional[str] = None
    email: Optional[str] = Field(None, pattern=EMAIL_PATTERN)
    whatsapp: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator("name", "is_active")
    @classmethod
    def _not_null(cls, value):
        return reject_null(value)


@router.get("/localPartners.list")
def list_local_partners(
    include_inactive: bool = Query(False, alias="includeInactive"),
    current_user: User = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    return LocalPartnerRepository(store).list(include_inactive)


@router.get("/localPartners.getById")
def get_local_partner(
    id: int = Query(...),
    current_user: User = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    return LocalPartnerRepository(store).get_by_id(id)


@router.post("/localPartners.create")
def create_local_partner(
    payload: LocalPartnerCreate,
    current_user: User = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    partner_id = LocalPartnerRepository(store).create(
        payload.model_dump(exclude_unset=True), created_by=current_user.id
    )
    return {"id": partner_id}


@router.post("/localPartners.update")
def update_local_partner(
    payload: LocalPartnerUpdate,
    current_user: User = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    LocalPartnerRepository(store).update(payload.id, payload.model_dump(exclude_unset=True, exclude={"id"}))
    return SUCCESS


@router.post("/localPartners.delete")
def delete_local_partner(
    payload: IdPayload,
    current_user: User = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    LocalPartnerRepository(store).delete(payload.id)
    return SUCCESS
