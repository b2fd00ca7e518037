from datetime import datetime
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

EventStatus = Literal["reservado", "bloqueado", "confirmado", "cancelado"]
EventType = Literal["show", "casamento", "corporativo", "tv", "gravacao", "campanha", "participacao"]
ContractType = Literal["publico", "privado", "publico_privado"]
NegotiationType = Literal["cache", "garantia", "bilheteria", "permuta"]
UserRole = Literal["user", "admin", "empresario", "financeiro", "pre_producao", "contratos"]

# valores monetarios sao gravados como texto ("1.500,00"), mas dados antigos podem ser numericos
Money = Optional[Union[str, float]]


class Record(BaseModel):
    """Documento persistido. Campos em snake_case, chaves do documento em camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    id: int

    @classmethod
    def to_document(cls, data: dict[str, Any]) -> dict[str, Any]:
        out = {}
        for key, value in data.items():
            field = cls.model_fields.get(key)
            out[field.alias if field and field.alias else key] = value
        return out

    def document(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class User(Record):
    open_id: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    photo_url: Optional[str] = None
    login_method: Optional[str] = None
    role: str = "user"
    is_active: Optional[bool] = None
    last_signed_in: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Artist(Record):
    name: Optional[str] = None
    email: Optional[str] = None
    contact_name: Optional[str] = None
    contact_phone: Optional[str] = None
    photo_url: Optional[str] = None
    banner_url: Optional[str] = None
    color: Optional[str] = None
    is_active: Optional[bool] = None
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Contractor(Record):
    name: Optional[str] = None
    email: Optional[str] = None
    contact_name: Optional[str] = None
    contact_phone: Optional[str] = None
    is_active: Optional[bool] = None
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class LocalPartner(Record):
    name: Optional[str] = None
    nickname: Optional[str] = None
    cpf: Optional[str] = None
    cnpj: Optional[str] = None
    email: Optional[str] = None
    whatsapp: Optional[str] = None
    is_active: Optional[bool] = None
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Event(Record):
    artist_id: Optional[int] = None
    contractor_id: Optional[int] = None
    local_partner_id: Optional[int] = None
    title: Optional[str] = None
    status: Optional[str] = None
    event_type: Optional[str] = None
    contract_type: Optional[str] = None
    event_date: Optional[datetime] = None
    start_time: Optional[str] = None
    duration: Optional[int] = None
    location: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    cache: Money = None
    has_production: Optional[bool] = None
    production_value: Money = None
    production_percentage: Money = None
    negotiation_type: Optional[str] = None
    guarantee: Money = None
    ticket_percentage: Money = None
    discount: Money = None
    observations: Optional[str] = None
    payment_due_date: Optional[datetime] = None
    is_paid: Optional[bool] = None
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class EventAttachment(Record):
    event_id: Optional[int] = None
    type: Optional[str] = None
    file_name: Optional[str] = None
    file_url: Optional[str] = None
    file_key: Optional[str] = None
    mime_type: Optional[str] = None
    created_at: Optional[datetime] = None


class UserArtistPermission(Record):
    user_id: Optional[int] = None
    artist_id: Optional[int] = None
    can_manage: Optional[bool] = None
    created_at: Optional[datetime] = None


class Notification(Record):
    user_id: Optional[int] = None
    title: Optional[str] = None
    message: Optional[str] = None
    type: Optional[str] = None
    is_read: Optional[bool] = None
    related_event_id: Optional[int] = None
    created_at: Optional[datetime] = None
