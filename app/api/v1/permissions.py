from fastapi import APIRouter, Depends, Query

from app.api.v1.common import Payload
from app.core.security import get_current_user, require_admin
from app.db.models import User
from app.db.session import get_store
from app.db.store import DocumentStore
from app.repositories.permissions import UserArtistPermissionRepository

router = APIRouter(prefix="/trpc", tags=["Permissoes"])


class PermissionUpsert(Payload):
    user_id: int
    artist_id: int
    can_manage: bool = False


@router.get("/permissions.listForUser")
def list_for_user(
    user_id: int = Query(..., alias="userId"),
    current_user: User = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    return UserArtistPermissionRepository(store).list_for_user(user_id)


@router.get("/permissions.listForArtist")
def list_for_artist(
    artist_id: int = Query(..., alias="artistId"),
    current_user: User = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    return UserArtistPermissionRepository(store).list_for_artist(artist_id)


@router.post("/permissions.upsert")
def upsert_permission(
    payload: PermissionUpsert,
    current_user: User = Depends(require_admin),
    store: DocumentStore = Depends(get_store),
):
    permission_id = UserArtistPermissionRepository(store).upsert(
        payload.user_id, payload.artist_id, payload.can_manage
    )
    return {"id": permission_id}
