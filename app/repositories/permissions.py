from app.db.models import UserArtistPermission
from app.db.store import utcnow
from app.repositories.base import Repository


class UserArtistPermissionRepository(Repository[UserArtistPermission]):
    collection = "userArtistPermissions"
    record = UserArtistPermission

    def upsert(self, user_id: int, artist_id: int, can_manage: bool = False) -> int:
        """Mantem no maximo um registro por par (usuario, artista)."""
        permission_id, _ = self.store.upsert_by_key(
            self.collection,
            {"userId": user_id, "artistId": artist_id},
            {"canManage": can_manage},
            {
                "userId": user_id,
                "artistId": artist_id,
                "canManage": can_manage,
                "createdAt": utcnow(),
            },
        )
        return permission_id

    def list_for_user(self, user_id: int) -> list[UserArtistPermission]:
        return self._build_all(self.store.query(self.collection, [("userId", "==", user_id)]))

    def list_for_artist(self, artist_id: int) -> list[UserArtistPermission]:
        return self._build_all(self.store.query(self.collection, [("artistId", "==", artist_id)]))
