from decimal import Decimal
from typing import Annotated, List

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer

DecimalJson = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class ResumoFinanceiroSchemas(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_revenue: DecimalJson = Field(Decimal("0"), alias="totalRevenue")
    order_count: int = Field(0, alias="orderCount")
    average_ticket: DecimalJson = Field(Decimal("0"), alias="averageTicket")


class ItemVendaSchemas(BaseModel):
    name: str
    qty: int


class VendaResumoSchemas(BaseModel):
    """Formato enviado ao gerador de relatório."""

    items: List[ItemVendaSchemas]
    total: float
    date: str


class RelatorioIASchemas(BaseModel):
    report: str


class AlertaNovosPedidosSchemas(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    delta: int
    pending_count: int = Field(alias="pendingCount")
    message: str
