"""Visões derivadas dos fluxos de pedidos e mesas.

Alertas de pedidos novos, consumo por mesa e a lista de mesas aguardando
fechamento para o painel da equipe.
"""
import logging
from decimal import Decimal
from typing import Callable, Dict, Iterable, List, Optional

from barraca.backends.base import Subscription, chamar
from barraca.schemas.enums import StatusMesa, StatusPedido
from barraca.schemas.mesa import ConsumoMesaSchemas, ContaMesaSchemas, ItemConsumoSchemas, SessaoMesaSchemas
from barraca.schemas.pedido import PedidoSchemas
from barraca.schemas.relatorio import AlertaNovosPedidosSchemas
from barraca.schemas.tipos import normalizar_mesa
from barraca.services.mesa_service import MesaService
from barraca.services.pedido_service import PedidoService

logger = logging.getLogger(__name__)


class MonitorNovosPedidos:
    """Conta pedidos pendentes entre snapshots e avisa quando aumentam."""

    def __init__(self):
        self._anterior: Optional[int] = None

    def reiniciar(self) -> None:
        self._anterior = None

    def observar(self, pedidos: Iterable[PedidoSchemas]) -> Optional[AlertaNovosPedidosSchemas]:
        pendentes = sum(1 for p in pedidos if p.status == StatusPedido.PENDING)
        anterior, self._anterior = self._anterior, pendentes
        # O primeiro snapshot depois de assinar nunca gera alerta
        if anterior is None or pendentes <= anterior:
            return None
        delta = pendentes - anterior
        return AlertaNovosPedidosSchemas(
            delta=delta,
            pending_count=pendentes,
            message=f"🔔 {delta} Novo(s) Pedido(s)!",
        )


class NotificacaoService:
    def __init__(self, pedidos: PedidoService, mesas: MesaService):
        self.pedidos = pedidos
        self.mesas = mesas

    def subscribe_alerts(self, on_alert: Callable, on_orders: Optional[Callable] = None) -> Subscription:
        monitor = MonitorNovosPedidos()

        async def _ao_mudar(pedidos: List[PedidoSchemas]) -> None:
            if on_orders is not None:
                await chamar(on_orders, pedidos)
            alerta = monitor.observar(pedidos)
            if alerta is not None:
                logger.info(alerta.message)
                await chamar(on_alert, alerta)

        return self.pedidos.subscribe(_ao_mudar)

    @staticmethod
    def consumo(table_id: int, pedidos: Iterable[PedidoSchemas]) -> ConsumoMesaSchemas:
        """Total e itens agrupados por produto, sem pagos nem cancelados."""
        mesa = normalizar_mesa(table_id)
        ativos = PedidoService.ativos_da_mesa(mesa, pedidos)
        agrupados: Dict[str, ItemConsumoSchemas] = {}
        for pedido in ativos:
            for item in pedido.items:
                atual = agrupados.get(item.product_id)
                subtotal = item.price * item.quantity
                if atual is None:
                    agrupados[item.product_id] = ItemConsumoSchemas(
                        product_id=item.product_id, name=item.name, qty=item.quantity, total=subtotal
                    )
                else:
                    agrupados[item.product_id] = atual.model_copy(
                        update={"qty": atual.qty + item.quantity, "total": atual.total + subtotal}
                    )
        return ConsumoMesaSchemas(
            table_id=mesa,
            orders=ativos,
            items=list(agrupados.values()),
            total=sum((p.total for p in ativos), Decimal("0")),
        )

    @staticmethod
    def _conta(consumo: ConsumoMesaSchemas, sessao: SessaoMesaSchemas) -> ContaMesaSchemas:
        return ContaMesaSchemas(
            table_id=consumo.table_id,
            orders=consumo.orders,
            items=consumo.items,
            total=consumo.total,
            session=sessao,
            aguardando_atendimento=sessao.status == StatusMesa.CLOSING_REQUESTED,
        )

    async def conta_mesa(self, table_id: int) -> ContaMesaSchemas:
        sessao = await self.mesas.get_session(table_id)
        consumo = self.consumo(sessao.table_id, await self.pedidos.list_once())
        return self._conta(consumo, sessao)

    async def fechamentos_pendentes(self) -> List[ContaMesaSchemas]:
        """Mesas com conta pedida e o consumo de cada uma."""
        pedidos = await self.pedidos.list_once()
        contas = []
        for sessao in self.mesas.closing_requested(await self.mesas.list_sessions()):
            consumo = self.consumo(sessao.table_id, pedidos)
            contas.append(self._conta(consumo, sessao))
        return contas
