from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import Field, field_validator

from app.api.v1.common import EMAIL_PATTERN, SUCCESS, IdPayload, Payload, reject_null
from app.core.security import get_current_user
from app.db.models import User
from app.db.session import get_store
from app.db.store import DocumentStore
from app.repositories.contractors import ContractorRepository

router = APIRouter(prefix="/trpc", tags=["Contratantes"])


class ContractorCreate(Payload):
    name: str = Field(..., min_length=1)
    email: Optional[str] = Field(None, pattern=EMAIL_PATTERN)
    contact_name: Optional[str] = None
    contact_phone: Optional[str] = None


class ContractorUpdate(Payload):
    id: int
    name: Optional[str] = Field(None, min_length=1)
    email: Optional[str] = Field(None, pattern=EMAIL_PATTERN)
    contact_name: Optional[str] = None
    contact_phone: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator("name", "is_active")
    @classmethod
    def _not_null(cls, value):
        return reject_null(value)


@router.get("/contractors.list")
def list_contractors(
    include_inactive: bool = Query(False, alias="includeInactive"),
    current_user: User = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    return ContractorRepository(store).list(include_inactive)


@router.get("/contractors.getById")
def get_contractor(
    id: int = Query(...),
    current_user: User = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    return ContractorRepository(store).get_by_id(id)


@router.post("/contractors.create")
def create_contractor(
    payload: ContractorCreate,
    current_user: User = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    contractor_id = ContractorRepository(store).create(
        payload.model_dump(exclude_unset=True), created_by=current_user.id
    )
    return {"id": contractor_id}


@router.post("/contractors.update")
def update_contractor(
    payload: ContractorUpdate,
    current_user: User = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    ContractorRepository(store).update(payload.id, payload.model_dump(exclude_unset=True, exclude={"id"}))
    return SUCCESS


@router.post("/contractors.delete")
def delete_contractor(
    payload: IdPayload,
    current_user: User = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    ContractorRepository(store).delete(payload.id)
    return SUCCESS
