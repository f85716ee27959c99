"""Armazenamento chave-valor local (SQLite via SQLAlchemy).

Cada chave guarda o JSON de uma coleção inteira. Se o arquivo do banco não
puder ser lido ou gravado, os dados passam a viver só na memória do processo
até o próximo reinício.
"""
import logging
from typing import Dict, Optional

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError

from barraca.database import criar_engine, criar_session_factory
from barraca.db.base_class import Base
from barraca.db.models.item_armazenado import ItemArmazenado

logger = logging.getLogger(__name__)


class ArmazenamentoLocal:
    def __init__(self, url: str):
        self.url = url
        self.engine = criar_engine(url)
        self._sessions = criar_session_factory(self.engine)
        self._memoria: Dict[str, str] = {}
        self._persistente = False

    @property
    def persistente(self) -> bool:
        return self._persistente

    async def iniciar(self) -> None:
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            self._persistente = True
            logger.info(f"Armazenamento local pronto em {self.url}")
        except SQLAlchemyError as e:
            logger.warning(f"Armazenamento local indisponível, usando memória volátil: {e}")
            self._persistente = False

    async def get_item(self, chave: str) -> Optional[str]:
        if self._persistente:
            try:
                async with self._sessions() as session:
                    obj = await session.get(ItemArmazenado, chave)
                    if obj is not None:
                        return obj.valor
            except SQLAlchemyError as e:
                self._degradar(e)
        return self._memoria.get(chave)

    async def set_items(self, itens: Dict[str, str]) -> None:
        """Grava várias chaves numa única transação."""
        self._memoria.update(itens)
        if not self._persistente:
            return
        try:
            async with self._sessions() as session:
                async with session.begin():
                    for chave, valor in itens.items():
                        await session.merge(ItemArmazenado(chave=chave, valor=valor))
        except SQLAlchemyError as e:
            self._degradar(e)

    async def set_item(self, chave: str, valor: str) -> None:
        await self.set_items({chave: valor})

    async def remove_item(self, chave: str) -> None:
        self._memoria.pop(chave, None)
        if not self._persistente:
            return
        try:
            async with self._sessions() as session:
                async with session.begin():
                    await session.execute(delete(ItemArmazenado).where(ItemArmazenado.chave == chave))
        except SQLAlchemyError as e:
            self._degradar(e)

    async def close(self) -> None:
        await self.engine.dispose()

    def _degradar(self, erro: Exception) -> None:
        # Daqui em diante só a memória vale até reiniciar o processo
        if self._persistente:
            logger.warning(f"Storage local bloqueado, usando memória volátil: {erro}")
        self._persistente = False
