import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from app.api.v1.common import SUCCESS, Payload
from app.core.config import settings
from app.core.firebase import verify_id_token
from app.core.security import (
    clear_session_cookie,
    create_session_token,
    get_optional_user,
    set_session_cookie,
)
from app.db.models import User
from app.db.session import get_store
from app.db.store import DocumentStore
from app.repositories.users import UserRepository

logger = logging.getLogger("agenda.auth")

router = APIRouter(prefix="/trpc", tags=["Auth"])


class SessionRequest(Payload):
    id_token: str


@router.get("/auth.me")
def me(current_user: Optional[User] = Depends(get_optional_user)):
    return current_user


@router.post("/auth.logout")
def logout(request: Request, response: Response):
    clear_session_cookie(response, request)
    return SUCCESS


@router.post("/auth.session", summary="Troca um ID token do Firebase por cookie de sessao")
def create_session(
    payload: SessionRequest,
    request: Request,
    response: Response,
    store: DocumentStore = Depends(get_store),
):
    """
    O login acontece no Firebase Auth (frontend). Aqui:
    - valida o ID token;
    - cria/atualiza o usuario pelo uid (openId);
    - grava o cookie de sessao.
    """
    try:
        claims = verify_id_token(payload.id_token)
    except Exception:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token invalido")

    open_id = claims.get("uid") or claims.get("sub")
    users = UserRepository(store, owner_open_id=settings.OWNER_OPEN_ID)
    data = {
        "open_id": open_id,
        "login_method": (claims.get("firebase") or {}).get("sign_in_provider"),
    }
    for field, claim in (("name", "name"), ("email", "email"), ("photo_url", "picture")):
        if claims.get(claim):
            data[field] = claims[claim]
    users.upsert(data)

    user = users.get_by_open_id(open_id)
    if not user or not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Usuario inativo")

    set_session_cookie(response, request, create_session_token(open_id, user.name))
    logger.info("session created user_id=%s", user.id)
    return user
