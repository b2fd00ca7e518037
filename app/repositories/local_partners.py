from typing import Any, Optional

from app.db.models import LocalPartner
from app.db.store import utcnow
from app.repositories.base import CatalogRepository


class LocalPartnerRepository(CatalogRepository[LocalPartner]):
    collection = "localPartners"
    record = LocalPartner

    def create(self, data: dict[str, Any], created_by: Optional[int] = None) -> int:
        now = utcnow()
        return self._insert(
            {
                "name": data["name"],
                "nickname": data.get("nickname"),
                "cpf": data.get("cpf"),
                "cnpj": data.get("cnpj"),
                "email": data.get("email"),
                "whatsapp": data.get("whatsapp"),
                "is_active": data.get("is_active", True),
                "created_by": created_by,
                "created_at": now,
                "updated_at": now,
            }
        )
