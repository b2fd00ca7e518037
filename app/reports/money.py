import math
from typing import Any, Optional, Union

Number = Union[int, float]


def parse_money(value: Any) -> Optional[Number]:
    """Interpreta valores no formato brasileiro ("1.234,56").

    Numeros passam direto. Em texto, pontos sao separadores de milhar e a
    virgula e o separador decimal. Retorna ``None`` quando o texto nao e um
    numero finito; ausente ou vazio vale zero.
    """
    if value is None:
        return 0
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    text = str(value).strip().replace(".", "").replace(",", ".")
    if not text:
        return 0
    if "_" in text:
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    if not math.isfinite(number):
        return None
    return number


def to_money(value: Any) -> Number:
    parsed = parse_money(value)
    return 0 if parsed is None else parsed


class MoneyTally:
    """``to_money`` que conta quantos valores malformados foram zerados."""

    def __init__(self) -> None:
        self.malformed = 0

    def __call__(self, value: Any) -> Number:
        parsed = parse_money(value)
        if parsed is None:
            self.malformed += 1
            return 0
        return parsed
