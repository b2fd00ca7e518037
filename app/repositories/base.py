import unicodedata
from datetime import datetime
from typing import Any, Generic, Optional, TypeVar

from app.db.models import Record
from app.db.store import DocumentStore, as_utc, utcnow

R = TypeVar("R", bound=Record)


def collation_key(value: Optional[str]) -> tuple[str, str]:
    """Chave de ordenacao pt-BR: ignora acentos e caixa ("Álvaro" antes de "Bruno").

    No empate, minuscula antes de maiuscula ("ana" antes de "Ana").
    """
    raw = value or ""
    folded = unicodedata.normalize("NFKD", raw)
    folded = "".join(ch for ch in folded if not unicodedata.combining(ch))
    return folded.casefold(), raw.swapcase()


def order_by_name(items: list) -> list:
    return sorted(items, key=lambda item: collation_key(item.name))


def normalize_dates(data: dict[str, Any]) -> dict[str, Any]:
    return {key: as_utc(value) if isinstance(value, datetime) else value for key, value in data.items()}


class Repository(Generic[R]):
    collection: str
    record: type[R]

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    def _build(self, data: Optional[dict]) -> Optional[R]:
        if data is None:
            return None
        return self.record.model_validate(data)

    def _build_all(self, docs: list[dict]) -> list[R]:
        return [self.record.model_validate(data) for data in docs]

    def _insert(self, values: dict[str, Any]) -> int:
        record_id = self.store.allocate_id(self.collection)
        record = self.record(id=record_id, **normalize_dates(values))
        self.store.set(self.collection, str(record_id), record.document())
        return record_id

    def get_by_id(self, record_id: int) -> Optional[R]:
        return self._build(self.store.get(self.collection, str(record_id)))

    def list_all(self) -> list[R]:
        items = self._build_all(self.store.query(self.collection))
        return sorted(items, key=lambda item: item.id)

    def update(self, record_id: int, patch: dict[str, Any]) -> None:
        # merge sem checar existencia: um id inexistente gera um documento parcial
        values = {**normalize_dates(patch), "updated_at": utcnow()}
        self.store.set(self.collection, str(record_id), self.record.to_document(values), merge=True)


class CatalogRepository(Repository[R]):
    """Entidades com nome e exclusao logica (artistas, contratantes, parceiros)."""

    def list(self, include_inactive: bool = False) -> list[R]:
        items = self.list_all()
        if not include_inactive:
            items = [item for item in items if item.is_active]
        return order_by_name(items)

    def delete(self, record_id: int) -> None:
        self.update(record_id, {"is_active": False})
