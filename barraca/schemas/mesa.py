from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from barraca.schemas.enums import FormaPagamento, StatusMesa
from barraca.schemas.pedido import PedidoSchemas
from barraca.schemas.tipos import Dinheiro, MesaId


class SessaoMesaSchemas(BaseModel):
    """Estado da conta de uma mesa. Sem registro no banco = Aberta."""

    model_config = ConfigDict(populate_by_name=True)

    table_id: MesaId = Field(alias="tableId")
    status: StatusMesa = StatusMesa.OPEN
    payment_method: Optional[FormaPagamento] = Field(None, alias="paymentMethod")


class SolicitarFechamentoSchemas(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    payment_method: FormaPagamento = Field(FormaPagamento.PIX, alias="paymentMethod")


class ItemConsumoSchemas(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: str = Field(alias="productId")
    name: str
    qty: int
    total: Dinheiro


class ConsumoMesaSchemas(BaseModel):
    """Consumo ativo da mesa (exclui pedidos pagos e cancelados)."""

    model_config = ConfigDict(populate_by_name=True)

    table_id: int = Field(alias="tableId")
    orders: List[PedidoSchemas] = []
    items: List[ItemConsumoSchemas] = []
    total: Dinheiro = Decimal("0")


class ContaMesaSchemas(ConsumoMesaSchemas):
    session: SessaoMesaSchemas
    # Com fechamento solicitado o cliente só vê a tela de espera
    aguardando_atendimento: bool = False


class FechamentoResultadoSchemas(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    table_id: int = Field(alias="tableId")
    archived_count: int = Field(0, alias="archivedCount")
    archived_ids: List[str] = Field([], alias="archivedIds")
    warning: Optional[str] = None
    message: str = ""


class LimpezaResultadoSchemas(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    table_id: int = Field(alias="tableId")
    removed_count: int = Field(0, alias="removedCount")
    message: str = ""


class QrCodeMesaSchemas(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    table_id: int = Field(alias="tableId")
    link: str
    image_url: str = Field(alias="imageUrl")
