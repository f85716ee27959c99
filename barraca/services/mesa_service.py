# barraca/services/mesa_service.py
import asyncio
import logging
from collections import Counter
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, Callable, Dict, Iterable, List, Tuple

from pydantic import ValidationError as PydanticValidationError

from barraca.backends.base import ORDERS, ORDERS_HISTORY, TABLES, Backend, Subscription
from barraca.core.exceptions import ValidationError
from barraca.schemas.enums import FormaPagamento, StatusMesa, StatusPedido
from barraca.schemas.mesa import FechamentoResultadoSchemas, LimpezaResultadoSchemas, SessaoMesaSchemas
from barraca.schemas.pedido import PedidoSchemas
from barraca.schemas.tipos import agora, chave_mesa, normalizar_mesa
from barraca.services.pedido_service import PedidoService

logger = logging.getLogger(__name__)


class MesaService:
    """Estado da conta por mesa e o fluxo de fechamento."""

    def __init__(self, backend: Backend, pedidos: PedidoService):
        self.backend = backend
        self.pedidos = pedidos
        self._locks: Dict[int, asyncio.Lock] = {}
        self._uso: Counter = Counter()

    @asynccontextmanager
    async def _trava(self, mesa: int) -> AsyncIterator[None]:
        """Serializa fechamento e limpeza da mesma mesa; a trava some quando ninguém a usa."""
        lock = self._locks.setdefault(mesa, asyncio.Lock())
        self._uso[mesa] += 1
        try:
            async with lock:
                yield
        finally:
            self._uso[mesa] -= 1
            if not self._uso[mesa]:
                del self._uso[mesa]
                del self._locks[mesa]

    @staticmethod
    def parse_sessoes(docs: Iterable[dict]) -> Dict[int, SessaoMesaSchemas]:
        sessoes = {}
        for doc in docs:
            try:
                sessao = SessaoMesaSchemas.model_validate({**doc, "tableId": doc.get("tableId", doc.get("id"))})
            except PydanticValidationError as e:
                logger.warning(f"Sessão de mesa {doc.get('id')} malformada ignorada: {e}")
                continue
            sessoes[sessao.table_id] = sessao
        return sessoes

    @staticmethod
    def closing_requested(sessoes: Dict[int, SessaoMesaSchemas]) -> List[SessaoMesaSchemas]:
        return sorted(
            (s for s in sessoes.values() if s.status == StatusMesa.CLOSING_REQUESTED),
            key=lambda s: s.table_id,
        )

    async def get_session(self, table_id: int) -> SessaoMesaSchemas:
        mesa = normalizar_mesa(table_id)
        doc = await self.backend.get(TABLES, str(mesa))
        if doc is None:
            return SessaoMesaSchemas(table_id=mesa)
        return SessaoMesaSchemas.model_validate({**doc, "tableId": mesa})

    async def list_sessions(self) -> Dict[int, SessaoMesaSchemas]:
        return self.parse_sessoes(await self.backend.list(TABLES))

    def subscribe(self, callback: Callable) -> Subscription:
        return self.backend.subscribe(TABLES, lambda docs: callback(self.parse_sessoes(docs)))

    async def request_close(self, table_id: int, payment_method: FormaPagamento) -> SessaoMesaSchemas:
        mesa = normalizar_mesa(table_id)
        sessao = SessaoMesaSchemas(
            table_id=mesa,
            status=StatusMesa.CLOSING_REQUESTED,
            payment_method=payment_method,
        )
        await self.backend.set(TABLES, str(mesa), sessao.model_dump(mode="json", by_alias=True), merge=True)
        logger.info(f"Mesa {mesa} pediu a conta ({payment_method.value})")
        return sessao

    async def _pedidos_da_mesa(self, mesa: int) -> List[Tuple[str, dict]]:
        chave = chave_mesa(mesa)
        return [
            (doc["id"], doc)
            for doc in await self.backend.list(ORDERS)
            if chave_mesa(doc.get("tableId")) == chave
        ]

    async def finalize(self, table_id: int) -> FechamentoResultadoSchemas:
        """Libera a mesa e move os pedidos dela para o histórico.

        Pedidos ativos viram pagos; cancelados são arquivados como cancelados.
        """
        mesa = normalizar_mesa(table_id)
        async with self._trava(mesa):
            await self.backend.delete(TABLES, str(mesa))
            encontrados = await self._pedidos_da_mesa(mesa)

            if not encontrados:
                aviso = f"Nenhum pedido ativo encontrado para a mesa {mesa}"
                logger.warning(f"Fechamento da mesa {mesa}: {aviso}")
                return FechamentoResultadoSchemas(
                    table_id=mesa,
                    warning=aviso,
                    message=f"Mesa {mesa} liberada sem pedidos para arquivar",
                )

            arquivado_em = int(agora().timestamp() * 1000)
            batch = self.backend.batch()
            for id, doc in encontrados:
                historico = {k: v for k, v in doc.items() if k != "id"}
                cancelado = doc.get("status") == StatusPedido.CANCELED.value
                historico.update(
                    tableId=mesa,
                    status=(StatusPedido.CANCELED if cancelado else StatusPedido.PAID).value,
                    archivedAt=arquivado_em,
                    previousStatus=doc.get("status"),
                )
                batch.require(ORDERS, id).set(ORDERS_HISTORY, id, historico).delete(ORDERS, id)
            await self.backend.commit(batch)

        ids = [id for id, _ in encontrados]
        logger.info(f"Mesa {mesa} fechada: {len(ids)} pedido(s) arquivado(s)")
        return FechamentoResultadoSchemas(
            table_id=mesa,
            archived_count=len(ids),
            archived_ids=ids,
            message=f"Mesa {mesa} fechada com {len(ids)} pedido(s) arquivado(s)",
        )

    async def force_clear(self, table_id: int) -> LimpezaResultadoSchemas:
        """Apaga os pedidos ao vivo da mesa sem arquivar."""
        mesa = normalizar_mesa(table_id)
        async with self._trava(mesa):
            await self.backend.delete(TABLES, str(mesa))
            encontrados = await self._pedidos_da_mesa(mesa)

            if not encontrados:
                logger.warning(f"Limpeza forçada da mesa {mesa}: nenhum pedido encontrado")
                return LimpezaResultadoSchemas(
                    table_id=mesa,
                    message=f"Nenhum pedido encontrado para a mesa {mesa}",
                )

            batch = self.backend.batch()
            for id, _ in encontrados:
                batch.require(ORDERS, id).delete(ORDERS, id)
            await self.backend.commit(batch)

        logger.warning(f"Limpeza forçada da mesa {mesa}: {len(encontrados)} pedido(s) removido(s) sem arquivar")
        return LimpezaResultadoSchemas(
            table_id=mesa,
            removed_count=len(encontrados),
            message=f"{len(encontrados)} pedido(s) removido(s) da mesa {mesa}",
        )

    async def get_history(self, start: datetime, end: datetime) -> List[PedidoSchemas]:
        """Pedidos pagos arquivados entre ``start`` e ``end`` (inclusive)."""
        start, end = (d if d.tzinfo else d.replace(tzinfo=timezone.utc) for d in (start, end))
        if start > end:
            raise ValidationError("A data inicial deve ser anterior à final")
        historico = []
        for pedido in PedidoService.parse(await self.backend.list(ORDERS_HISTORY)):
            if pedido.status != StatusPedido.PAID or pedido.previous_status == StatusPedido.CANCELED:
                continue
            instante = pedido.archived_at or pedido.timestamp
            if start <= instante <= end:
                historico.append(pedido)
        return historico
