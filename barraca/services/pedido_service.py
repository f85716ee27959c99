# barraca/services/pedido_service.py
import logging
from collections import Counter
from decimal import Decimal
from typing import Callable, Iterable, List, Optional

from pydantic import ValidationError as PydanticValidationError

from barraca.backends.base import ORDERS, PRODUCTS, Backend, Subscription, novo_id
from barraca.core.exceptions import BackendError, NotFoundError, ValidationError
from barraca.schemas.enums import STATUS_FORA_DO_CONSUMO, StatusPedido
from barraca.schemas.pedido import ItemPedidoCreateSchemas, ItemPedidoSchemas, PedidoSchemas
from barraca.schemas.tipos import agora, chave_mesa, normalizar_mesa
from barraca.services.produto_service import ProdutoService

logger = logging.getLogger(__name__)

# Campos que só existem no histórico
_CAMPOS_HISTORICO = {"id", "archived_at", "previous_status"}


class PedidoService:
    def __init__(self, backend: Backend, produtos: ProdutoService):
        self.backend = backend
        self.produtos = produtos

    @staticmethod
    def parse(docs: Iterable[dict]) -> List[PedidoSchemas]:
        """Converte documentos do banco, do mais novo para o mais antigo."""
        pedidos = []
        for doc in docs:
            try:
                pedidos.append(PedidoSchemas.model_validate(doc))
            except PydanticValidationError as e:
                logger.warning(f"Pedido {doc.get('id')} malformado ignorado: {e}")
        return sorted(pedidos, key=lambda p: p.timestamp, reverse=True)

    async def list_once(self) -> List[PedidoSchemas]:
        return self.parse(await self.backend.list(ORDERS))

    async def get(self, id: str) -> Optional[PedidoSchemas]:
        doc = await self.backend.get(ORDERS, id)
        return None if doc is None else PedidoSchemas.model_validate(doc)

    def subscribe(self, callback: Callable) -> Subscription:
        return self.backend.subscribe(ORDERS, lambda docs: callback(self.parse(docs)))

    @staticmethod
    def ativos_da_mesa(table_id: int, pedidos: Iterable[PedidoSchemas]) -> List[PedidoSchemas]:
        chave = chave_mesa(table_id)
        return [
            p for p in pedidos
            if chave_mesa(p.table_id) == chave and p.status not in STATUS_FORA_DO_CONSUMO
        ]

    async def active_for_table(self, table_id: int) -> List[PedidoSchemas]:
        return self.ativos_da_mesa(normalizar_mesa(table_id), await self.list_once())

    async def create(
        self,
        table_id: int,
        itens: List[ItemPedidoCreateSchemas],
        observation: Optional[str] = None,
    ) -> PedidoSchemas:
        mesa = normalizar_mesa(table_id)
        if not itens:
            raise ValidationError("O pedido precisa de pelo menos um item")
        if any(item.quantity <= 0 for item in itens):
            raise ValidationError("A quantidade de cada item deve ser maior que zero")

        catalogo = {p.id: p for p in await self.produtos.list()}
        copias = []
        for item in itens:
            produto = catalogo.get(item.product_id)
            if produto is None:
                raise NotFoundError(PRODUCTS, item.product_id)
            copias.append(
                ItemPedidoSchemas(
                    product_id=produto.id,
                    name=produto.name,
                    price=produto.price,
                    quantity=item.quantity,
                )
            )

        pedido = PedidoSchemas(
            id=novo_id(),
            table_id=mesa,
            items=copias,
            status=StatusPedido.PENDING,
            timestamp=agora(),
            total=sum((i.price * i.quantity for i in copias), Decimal("0")),
            observation=(observation or "").strip(),
        )
        doc = pedido.model_dump(mode="json", by_alias=True, exclude=_CAMPOS_HISTORICO)
        baixas = Counter()
        for item in copias:
            baixas[item.product_id] += item.quantity

        if self.backend.supports_transactions:
            batch = self.backend.batch().set(ORDERS, pedido.id, doc)
            for product_id, qtd in baixas.items():
                batch.increment(PRODUCTS, product_id, "stock", -qtd, floor=0)
            await self.backend.commit(batch)
        else:
            await self.backend.create(ORDERS, doc, id=pedido.id)
            await self._baixar_estoque(baixas)

        logger.info(f"Pedido {pedido.id} criado para a mesa {mesa} (total {pedido.total})")
        return pedido

    async def _baixar_estoque(self, baixas: Counter) -> None:
        # Melhor esforço: o pedido já foi gravado e não é desfeito
        for product_id, qtd in baixas.items():
            try:
                await self.backend.commit(
                    self.backend.batch().increment(PRODUCTS, product_id, "stock", -qtd, floor=0)
                )
            except BackendError as e:
                logger.error(f"Falha ao baixar estoque do produto {product_id} (-{qtd}): {e.message}")

    async def set_status(self, order_id: str, status: StatusPedido) -> None:
        await self.backend.update(ORDERS, order_id, {"status": status.value})
        logger.info(f"Pedido {order_id} agora está {status.value}")
