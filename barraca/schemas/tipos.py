"""Tipos compartilhados pelos schemas.

Os documentos guardados nos bancos usam chaves camelCase, dinheiro como
número JSON e instantes como epoch em milissegundos. Registros antigos podem
trazer preço/estoque/mesa como texto; os validadores abaixo normalizam tudo
na leitura.
"""
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Annotated, Any

from pydantic import BeforeValidator, PlainSerializer

from barraca.core.exceptions import ValidationError

CENTAVOS = Decimal("0.01")


def _to_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value.quantize(CENTAVOS)
    if isinstance(value, bool):
        raise ValueError("valor monetário inválido")
    if isinstance(value, str):
        value = value.strip().replace(",", ".") or "0"
    try:
        return Decimal(str(value)).quantize(CENTAVOS)
    except (InvalidOperation, ValueError):
        raise ValueError(f"valor monetário inválido: {value!r}")


def _to_epoch_ms(value: datetime) -> int:
    return int(value.timestamp() * 1000)


def _to_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        value = int(value.strip())
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    if isinstance(value, str):
        parsed = datetime.fromisoformat(value.strip())
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    raise ValueError(f"instante inválido: {value!r}")


def coerce_int(value: Any) -> int:
    """Converte estoque/quantidade gravados como texto; lixo vira 0."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    try:
        return int(float(str(value).strip()))
    except (TypeError, ValueError):
        return 0


def parse_mesa(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError("mesa inválida")
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, str):
        text = value.strip()
        if not text.isdigit():
            raise ValueError(f"mesa inválida: {value!r}")
        value = int(text)
    if not isinstance(value, int) or value <= 0:
        raise ValueError(f"mesa inválida: {value!r}")
    return value


def normalizar_mesa(value: Any) -> int:
    """Forma canônica do identificador de mesa: inteiro positivo."""
    try:
        return parse_mesa(value)
    except ValueError as e:
        raise ValidationError(str(e))


def chave_mesa(value: Any) -> str:
    """Chave textual para comparar mesas vindas do banco como texto ou número."""
    try:
        return str(parse_mesa(value))
    except ValueError:
        return str(value).strip()


def agora() -> datetime:
    return datetime.now(timezone.utc)


Dinheiro = Annotated[
    Decimal,
    BeforeValidator(_to_decimal),
    PlainSerializer(float, return_type=float, when_used="json"),
]

Instante = Annotated[
    datetime,
    BeforeValidator(_to_datetime),
    PlainSerializer(_to_epoch_ms, return_type=int, when_used="json"),
]

MesaId = Annotated[int, BeforeValidator(parse_mesa)]

Estoque = Annotated[int, BeforeValidator(lambda v: max(0, coerce_int(v)))]
