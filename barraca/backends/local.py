"""Banco local: coleções inteiras em JSON no armazenamento chave-valor.

Não há notificação de mudança; as assinaturas fazem polling a cada
``poll_interval`` segundos e só entregam quando o conteúdo mudou.
"""
import asyncio
import copy
import json
import logging
from typing import AsyncIterator, Dict

from barraca.backends.armazenamento import ArmazenamentoLocal
from barraca.backends.base import PRODUCTS, Backend, WriteBatch, aplicar_operacoes
from barraca.backends.seed import INITIAL_PRODUCTS

logger = logging.getLogger(__name__)

STORAGE_KEYS = {
    "products": "beach_app_products",
    "orders": "beach_app_orders",
    "orders_history": "beach_app_orders_history",
    "tables": "beach_app_tables",
}


def _como_dict(kind: str, valor) -> Dict[str, dict]:
    # Versões antigas gravavam listas de documentos com "id" embutido
    if isinstance(valor, list):
        docs = {}
        for doc in valor:
            if isinstance(doc, dict) and doc.get("id") not in (None, ""):
                docs[str(doc["id"])] = {k: v for k, v in doc.items() if k != "id"}
            else:
                logger.warning(f"Documento sem id ignorado em {kind}: {doc!r}")
        return docs
    if isinstance(valor, dict):
        return {str(k): v for k, v in valor.items() if isinstance(v, dict)}
    logger.warning(f"Conteúdo inesperado em {kind}, tratando como vazio")
    return {}


class LocalBackend(Backend):
    def __init__(self, armazenamento: ArmazenamentoLocal, poll_interval: float = 2.0):
        super().__init__()
        self.armazenamento = armazenamento
        self.poll_interval = poll_interval
        self._lock = asyncio.Lock()

    def is_remote(self) -> bool:
        return False

    async def ping(self) -> str:
        await self.carregar(PRODUCTS)
        return "Modo Local (Offline)"

    async def carregar(self, kind: str) -> Dict[str, dict]:
        bruto = await self.armazenamento.get_item(STORAGE_KEYS[kind])
        if bruto is None:
            if kind == PRODUCTS:
                return await self._semear()
            return {}
        try:
            return _como_dict(kind, json.loads(bruto))
        except json.JSONDecodeError as e:
            logger.error(f"JSON corrompido em {STORAGE_KEYS[kind]}, tratando como vazio: {e}")
            return {}

    async def _semear(self) -> Dict[str, dict]:
        docs = _como_dict(PRODUCTS, copy.deepcopy(INITIAL_PRODUCTS))
        await self.armazenamento.set_item(STORAGE_KEYS[PRODUCTS], json.dumps(docs, ensure_ascii=False))
        logger.info(f"Cardápio inicial gravado com {len(docs)} produtos")
        return docs

    async def commit(self, batch: WriteBatch) -> None:
        if not len(batch):
            return
        async with self._lock:
            colecoes = {kind: await self.carregar(kind) for kind in batch.kinds}
            aplicar_operacoes(colecoes, batch.operacoes)
            await self.armazenamento.set_items(
                {STORAGE_KEYS[kind]: json.dumps(docs, ensure_ascii=False) for kind, docs in colecoes.items()}
            )

    async def mudancas(self, kind: str) -> AsyncIterator[None]:
        yield None
        while True:
            await asyncio.sleep(self.poll_interval)
            yield None
