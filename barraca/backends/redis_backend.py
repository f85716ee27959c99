"""Banco remoto sobre Redis.

Cada coleção é um hash ``{project_id}:{kind}`` (id -> JSON do documento).
Toda escrita publica em ``{project_id}:changes:{kind}`` para que os outros
dispositivos recarreguem o snapshot.
"""
import asyncio
import json
import logging
from typing import AsyncIterator, Dict, List

import redis.asyncio as redis
from redis.exceptions import RedisError

from barraca.backends.base import Backend, WriteBatch, aplicar_operacoes
from barraca.core.exceptions import BackendError
from barraca.schemas.config import BackendConfigSchemas

logger = logging.getLogger(__name__)


class RedisBackend(Backend):
    def __init__(self, config: BackendConfigSchemas, coalesce_seconds: float = 0.2, client: redis.Redis = None):
        super().__init__()
        self.config = config
        self.coalesce_seconds = coalesce_seconds
        self.client = client or redis.Redis(
            host=config.host,
            port=config.port,
            db=config.database,
            password=config.api_key or None,
            ssl=config.ssl,
            decode_responses=True,
        )

    def is_remote(self) -> bool:
        return True

    def chave(self, kind: str) -> str:
        return f"{self.config.project_id}:{kind}"

    def canal(self, kind: str) -> str:
        return f"{self.config.project_id}:changes:{kind}"

    async def ping(self) -> str:
        try:
            await self.client.ping()
        except RedisError as e:
            raise BackendError(f"Falha ao conectar ao Redis em {self.config.host}:{self.config.port}: {e}") from e
        return f"Conectado ao Redis em {self.config.host}:{self.config.port}"

    @staticmethod
    def _decodificar(kind: str, bruto: Dict[str, str]) -> Dict[str, dict]:
        docs = {}
        for id, valor in bruto.items():
            try:
                doc = json.loads(valor)
            except json.JSONDecodeError:
                logger.warning(f"Documento {kind}/{id} com JSON inválido ignorado")
                continue
            if isinstance(doc, dict):
                docs[id] = doc
        return docs

    async def carregar(self, kind: str) -> Dict[str, dict]:
        try:
            bruto = await self.client.hgetall(self.chave(kind))
        except RedisError as e:
            raise BackendError(f"Erro lendo {kind} do Redis: {e}") from e
        return self._decodificar(kind, bruto)

    async def commit(self, batch: WriteBatch) -> None:
        if not len(batch):
            return
        kinds: List[str] = batch.kinds
        alvos = batch.alvos()

        async def _transacao(pipe) -> None:
            # Antes de multi() os comandos executam na hora, sob WATCH
            colecoes = {}
            for kind in kinds:
                colecoes[kind] = self._decodificar(kind, await pipe.hgetall(self.chave(kind)))
            aplicar_operacoes(colecoes, batch.operacoes)
            pipe.multi()
            for kind, id in alvos:
                doc = colecoes[kind].get(id)
                if doc is None:
                    pipe.hdel(self.chave(kind), id)
                else:
                    pipe.hset(self.chave(kind), id, json.dumps(doc, ensure_ascii=False))
            for kind in kinds:
                pipe.publish(self.canal(kind), "changed")

        try:
            await self.client.transaction(
                _transacao, *[self.chave(kind) for kind in kinds], value_from_callable=True
            )
        except RedisError as e:
            raise BackendError(f"Erro gravando no Redis: {e}") from e

    async def mudancas(self, kind: str) -> AsyncIterator[None]:
        pubsub = self.client.pubsub()
        try:
            await pubsub.subscribe(self.canal(kind))
            yield None
            while True:
                mensagem = await pubsub.get_message(ignore_subscribe_messages=True, timeout=1.0)
                if mensagem is None:
                    continue
                # Agrupa rajadas de escrita numa única entrega
                await asyncio.sleep(self.coalesce_seconds)
                while await pubsub.get_message(ignore_subscribe_messages=True, timeout=0) is not None:
                    pass
                yield None
        except RedisError as e:
            raise BackendError(f"Listener do Redis para {kind} falhou: {e}") from e
        finally:
            try:
                await pubsub.unsubscribe()
                await pubsub.aclose()
            except RedisError as e:
                logger.warning(f"Erro ao encerrar pubsub de {kind}: {e}")

    async def close(self) -> None:
        await super().close()
        await self.client.aclose()
