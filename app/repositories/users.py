import logging
from typing import Any, Optional

from app.core.errors import PreconditionError
from app.db.models import User
from app.db.store import DocumentStore, utcnow
from app.repositories.base import Repository, normalize_dates, order_by_name

logger = logging.getLogger("agenda.auth")

PROFILE_FIELDS = ("name", "email", "login_method", "phone", "photo_url")


class UserRepository(Repository[User]):
    collection = "users"
    record = User

    def __init__(self, store: DocumentStore, owner_open_id: str = "") -> None:
        super().__init__(store)
        self.owner_open_id = owner_open_id

    def _is_owner(self, open_id: str) -> bool:
        return bool(self.owner_open_id) and open_id == self.owner_open_id

    def upsert(self, data: dict[str, Any]) -> int:
        """Cria ou atualiza o usuario identificado por ``open_id``.

        A identidade do owner sem papel explicito vira ``admin`` tanto na
        criacao quanto em cada novo login.
        """
        open_id = data.get("open_id")
        if not open_id:
            raise PreconditionError("openId do usuario e obrigatorio para upsert")

        now = utcnow()
        signed_in = data.get("last_signed_in") or now

        update: dict[str, Any] = {"updated_at": now, "last_signed_in": signed_in}
        for field in PROFILE_FIELDS:
            if field in data:
                update[field] = data[field]
        if data.get("role") is not None:
            update["role"] = data["role"]
        if data.get("is_active") is not None:
            update["is_active"] = data["is_active"]
        if not data.get("role") and self._is_owner(open_id):
            update["role"] = "admin"

        insert = {
            "open_id": open_id,
            "name": data.get("name"),
            "email": data.get("email"),
            "phone": data.get("phone"),
            "photo_url": data.get("photo_url"),
            "login_method": data.get("login_method"),
            "role": data.get("role") or ("admin" if self._is_owner(open_id) else "user"),
            "is_active": data["is_active"] if data.get("is_active") is not None else True,
            "created_at": now,
            "updated_at": now,
            "last_signed_in": signed_in,
        }
        user_id, created = self.store.upsert_by_key(
            self.collection,
            {"openId": open_id},
            User.to_document(normalize_dates(update)),
            User.to_document(normalize_dates(insert)),
        )
        if created:
            logger.info("user created id=%s role=%s", user_id, insert["role"])
        return user_id

    def get_by_open_id(self, open_id: str) -> Optional[User]:
        docs = self.store.query(self.collection, [("openId", "==", open_id)], limit=1)
        return self._build(docs[0]) if docs else None

    def list(self, include_inactive: bool = False) -> list[User]:
        users = self.list_all()
        if not include_inactive:
            users = [user for user in users if user.is_active]
        return order_by_name(users)

    def delete(self, user_id: int) -> None:
        self.update(user_id, {"is_active": False})
