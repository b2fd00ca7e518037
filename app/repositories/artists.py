from typing import Any, Optional

from app.db.models import Artist
from app.db.store import utcnow
from app.repositories.base import CatalogRepository

DEFAULT_ARTIST_COLOR = "#10B981"


class ArtistRepository(CatalogRepository[Artist]):
    collection = "artists"
    record = Artist

    def create(self, data: dict[str, Any], created_by: Optional[int] = None) -> int:
        now = utcnow()
        return self._insert(
            {
                "name": data["name"],
                "email": data.get("email"),
                "contact_name": data.get("contact_name"),
                "contact_phone": data.get("contact_phone"),
                "photo_url": data.get("photo_url"),
                "banner_url": data.get("banner_url"),
                "color": data.get("color") or DEFAULT_ARTIST_COLOR,
                "is_active": data.get("is_active", True),
                "created_by": created_by,
                "created_at": now,
                "updated_at": now,
            }
        )
