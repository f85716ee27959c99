from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from barraca.schemas.enums import StatusPedido
from barraca.schemas.tipos import Dinheiro, Instante, MesaId, coerce_int


# --- ItemPedido Schemas ---
class ItemPedidoSchemas(BaseModel):
    """Cópia do produto no momento do pedido; não acompanha edições posteriores."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    product_id: str = Field(alias="productId")
    name: str
    price: Dinheiro
    quantity: int

    @field_validator("quantity", mode="before")
    @classmethod
    def quantidade_numerica(cls, v):
        return coerce_int(v)


class ItemPedidoCreateSchemas(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: str = Field(alias="productId")
    quantity: int


# --- Pedido Schemas ---
class PedidoSchemas(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = ""
    table_id: MesaId = Field(alias="tableId")
    items: List[ItemPedidoSchemas] = []
    status: StatusPedido = StatusPedido.PENDING
    timestamp: Instante
    total: Dinheiro
    observation: str = ""
    # Só existem no histórico
    archived_at: Optional[Instante] = Field(None, alias="archivedAt")
    previous_status: Optional[StatusPedido] = Field(None, alias="previousStatus")

    @field_validator("observation", mode="before")
    @classmethod
    def observacao_opcional(cls, v):
        return "" if v is None else v


class PedidoCreateSchemas(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    table_id: int = Field(alias="tableId")
    items: List[ItemPedidoCreateSchemas]
    observation: Optional[str] = None


class PedidoStatusUpdateSchemas(BaseModel):
    status: StatusPedido
