# barraca/core/contexto.py
import asyncio
import logging
from dataclasses import dataclass, field

from barraca.backends import criar_backend
from barraca.backends.armazenamento import ArmazenamentoLocal
from barraca.backends.base import Backend
from barraca.core.config import Settings
from barraca.services.ia_service import IAService
from barraca.services.mesa_service import MesaService
from barraca.services.notificacao_service import NotificacaoService
from barraca.services.pedido_service import PedidoService
from barraca.services.produto_service import ProdutoService
from barraca.services.relatorio_service import RelatorioService

logger = logging.getLogger(__name__)


@dataclass
class Contexto:
    """Banco ativo e os serviços que dependem dele."""

    backend: Backend
    origem: str
    produtos: ProdutoService
    pedidos: PedidoService
    mesas: MesaService
    notificacoes: NotificacaoService
    relatorios: RelatorioService
    encerrado: asyncio.Event = field(default_factory=asyncio.Event)

    async def aclose(self) -> None:
        """Avisa as conexões abertas e fecha o banco."""
        self.encerrado.set()
        await self.backend.close()


def montar_contexto(backend: Backend, origem: str, settings: Settings, ia: IAService = None) -> Contexto:
    produtos = ProdutoService(backend)
    pedidos = PedidoService(backend, produtos)
    mesas = MesaService(backend, pedidos)
    ia = ia or IAService(settings.OPENAI_API_KEY, settings.OPENAI_MODEL)
    return Contexto(
        backend=backend,
        origem=origem,
        produtos=produtos,
        pedidos=pedidos,
        mesas=mesas,
        notificacoes=NotificacaoService(pedidos, mesas),
        relatorios=RelatorioService(mesas, ia, settings.UTC_OFFSET_HOURS),
    )


async def criar_contexto(settings: Settings, armazenamento: ArmazenamentoLocal) -> Contexto:
    backend, origem = await criar_backend(settings, armazenamento)
    modo = "remoto" if backend.is_remote() else "local"
    logger.info(f"Banco ativo: {modo} (configuração {origem})")
    return montar_contexto(backend, origem, settings)
