from typing import Any, Optional

from app.db.models import Contractor
from app.db.store import utcnow
from app.repositories.base import CatalogRepository


class ContractorRepository(CatalogRepository[Contractor]):
    collection = "contractors"
    record = Contractor

    def create(self, data: dict[str, Any], created_by: Optional[int] = None) -> int:
        now = utcnow()
        return self._insert(
            {
                "name": data["name"],
                "email": data.get("email"),
                "contact_name": data.get("contact_name"),
                "contact_phone": data.get("contact_phone"),
                "is_active": data.get("is_active", True),
                "created_by": created_by,
                "created_at": now,
                "updated_at": now,
            }
        )
