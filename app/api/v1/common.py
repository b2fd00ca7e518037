from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


def reject_null(value: Any) -> Any:
    """Campos opcionais que, quando enviados, nao aceitam ``null``."""
    if value is None:
        raise ValueError("valor nulo nao permitido")
    return value


class Payload(BaseModel):
    """Corpo de mutation: chaves camelCase, campos desconhecidos sao rejeitados."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")


class IdPayload(Payload):
    id: int


SUCCESS = {"success": True}
