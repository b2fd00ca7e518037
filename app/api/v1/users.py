from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import Field, field_validator

from app.api.v1.common import EMAIL_PATTERN, SUCCESS, Payload, reject_null
from app.core.security import get_current_user
from app.db.models import User, UserRole
from app.db.session import get_store
from app.db.store import DocumentStore
from app.repositories.users import UserRepository

router = APIRouter(prefix="/trpc", tags=["Usuarios"])


class UserUpdate(Payload):
    id: int
    name: Optional[str] = None
    email: Optional[str] = Field(None, pattern=EMAIL_PATTERN)
    phone: Optional[str] = None
    photo_url: Optional[str] = None
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None

    @field_validator("name", "role", "is_active")
    @classmethod
    def _not_null(cls, value):
        return reject_null(value)


@router.get("/users.list")
def list_users(
    include_inactive: bool = Query(False, alias="includeInactive"),
    current_user: User = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    return UserRepository(store).list(include_inactive)


@router.post("/users.update")
def update_user(
    payload: UserUpdate,
    current_user: User = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    UserRepository(store).update(payload.id, payload.model_dump(exclude_unset=True, exclude={"id"}))
    return SUCCESS
