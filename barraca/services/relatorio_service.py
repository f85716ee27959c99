# barraca/services/relatorio_service.py
import logging
from collections import Counter
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from typing import Iterable, List, Tuple

from barraca.schemas.pedido import PedidoSchemas
from barraca.schemas.relatorio import ItemVendaSchemas, ResumoFinanceiroSchemas, VendaResumoSchemas
from barraca.schemas.tipos import CENTAVOS
from barraca.services.ia_service import IAService
from barraca.services.mesa_service import MesaService

logger = logging.getLogger(__name__)

MENSAGEM_SEM_VENDAS = "Não há dados de vendas no período selecionado para gerar o relatório."


class RelatorioService:
    def __init__(self, mesas: MesaService, ia: IAService, utc_offset_hours: int = -3):
        self.mesas = mesas
        self.ia = ia
        self.fuso = timezone(timedelta(hours=utc_offset_hours))

    def intervalo(self, inicio: date, fim: date) -> Tuple[datetime, datetime]:
        """Do começo do dia inicial ao último instante do dia final, no fuso local."""
        return (
            datetime.combine(inicio, time.min, tzinfo=self.fuso),
            datetime.combine(fim, time.max, tzinfo=self.fuso),
        )

    async def get_sales_history(self, inicio: date, fim: date) -> List[PedidoSchemas]:
        return await self.mesas.get_history(*self.intervalo(inicio, fim))

    @staticmethod
    def resumo_financeiro(pedidos: Iterable[PedidoSchemas]) -> ResumoFinanceiroSchemas:
        pedidos = list(pedidos)
        receita = sum((p.total for p in pedidos), Decimal("0"))
        quantidade = len(pedidos)
        ticket = (receita / quantidade).quantize(CENTAVOS) if quantidade else Decimal("0")
        return ResumoFinanceiroSchemas(total_revenue=receita, order_count=quantidade, average_ticket=ticket)

    def resumo_vendas(self, pedidos: Iterable[PedidoSchemas]) -> List[VendaResumoSchemas]:
        vendas = []
        for pedido in pedidos:
            itens = Counter()
            for item in pedido.items:
                itens[item.name] += item.quantity
            instante = (pedido.archived_at or pedido.timestamp).astimezone(self.fuso)
            vendas.append(
                VendaResumoSchemas(
                    items=[ItemVendaSchemas(name=nome, qty=qtd) for nome, qtd in itens.items()],
                    total=float(pedido.total),
                    date=instante.strftime("%d/%m/%Y"),
                )
            )
        return vendas

    async def financeiro(self, inicio: date, fim: date) -> ResumoFinanceiroSchemas:
        return self.resumo_financeiro(await self.get_sales_history(inicio, fim))

    async def relatorio_ia(self, inicio: date, fim: date) -> str:
        pedidos = await self.get_sales_history(inicio, fim)
        if not pedidos:
            logger.info(f"Sem vendas entre {inicio} e {fim}; relatório inteligente não gerado")
            return MENSAGEM_SEM_VENDAS
        return await self.ia.gerar_relatorio(self.resumo_vendas(pedidos))
