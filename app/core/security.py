import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, Request, Response, status
from jose import JWTError, jwt

from app.core.config import settings
from app.db.models import User
from app.db.session import get_store
from app.db.store import DocumentStore
from app.repositories.users import UserRepository

logger = logging.getLogger("agenda.auth")


def create_session_token(open_id: str, name: Optional[str] = None, expires_delta: Optional[timedelta] = None) -> str:
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(days=settings.SESSION_EXPIRE_DAYS))
    to_encode = {"sub": open_id, "name": name or "", "exp": expire}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def _is_secure_request(request: Request) -> bool:
    if request.url.scheme == "https":
        return True
    forwarded = request.headers.get("x-forwarded-proto", "")
    return forwarded.split(",")[0].strip().lower() == "https"


def session_cookie_options(request: Request) -> dict:
    secure = _is_secure_request(request)
    return {
        "path": "/",
        "httponly": True,
        "secure": secure,
        # SameSite=None exige Secure
        "samesite": "none" if secure else "lax",
    }


def set_session_cookie(response: Response, request: Request, token: str) -> None:
    response.set_cookie(
        settings.SESSION_COOKIE_NAME,
        token,
        max_age=settings.SESSION_EXPIRE_DAYS * 24 * 60 * 60,
        **session_cookie_options(request),
    )


def clear_session_cookie(response: Response, request: Request) -> None:
    response.delete_cookie(settings.SESSION_COOKIE_NAME, **session_cookie_options(request))


def _extract_session_token(request: Request) -> Optional[str]:
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if token:
        return token
    auth_header = request.headers.get("authorization", "")
    if auth_header.lower().startswith("bearer "):
        return auth_header.split(" ", 1)[1].strip()
    return None


def get_optional_user(request: Request, store: DocumentStore = Depends(get_store)) -> Optional[User]:
    token = _extract_session_token(request)
    if not token:
        return None
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        logger.info("invalid session token path=%s", request.url.path)
        return None
    open_id = payload.get("sub")
    if not open_id:
        return None
    user = UserRepository(store).get_by_open_id(open_id)
    if not user or not user.is_active:
        return None
    return user


def get_current_user(user: Optional[User] = Depends(get_optional_user)) -> User:
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Credenciais invalidas",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def require_admin(user: User = Depends(get_current_user)) -> User:
    if user.role != "admin":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Permissao negada")
    return user
