"""
Fixtures compartilhadas
=======================
Banco local em SQLite na memória e um banco falso sem transações.
"""
import asyncio
from decimal import Decimal
from typing import AsyncIterator, Dict

import pytest

from barraca.backends.armazenamento import ArmazenamentoLocal
from barraca.backends.base import Backend, WriteBatch, aplicar_operacoes
from barraca.backends.local import LocalBackend
from barraca.core.config import Settings
from barraca.core.contexto import montar_contexto
from barraca.core.exceptions import BackendError
from barraca.schemas.enums import Categoria
from barraca.schemas.produto import ProdutoSaveSchemas
from barraca.services.ia_service import IAService

MEMORIA = "sqlite+aiosqlite://"


class FakeBackend(Backend):
    """Banco em memória que grava cada operação separadamente."""

    supports_transactions = False

    def __init__(self, falhar_increment: bool = False):
        super().__init__()
        self.colecoes: Dict[str, Dict[str, dict]] = {}
        self.falhar_increment = falhar_increment
        self.commits = []

    def is_remote(self) -> bool:
        return False

    async def ping(self) -> str:
        return "fake"

    async def carregar(self, kind: str) -> Dict[str, dict]:
        return {id: dict(doc) for id, doc in self.colecoes.get(kind, {}).items()}

    async def commit(self, batch: WriteBatch) -> None:
        if self.falhar_increment and any(op.tipo == "increment" for op in batch.operacoes):
            raise BackendError("sem permissão para alterar estoque")
        self.commits.append(batch)
        aplicar_operacoes(self.colecoes, batch.operacoes)

    async def mudancas(self, kind: str) -> AsyncIterator[None]:
        yield None
        while True:
            await asyncio.sleep(0.01)
            yield None


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def test_settings():
    return Settings(
        LOCAL_DATABASE_URL=MEMORIA,
        POLL_INTERVAL_SECONDS=0.05,
        REMOTE_API_KEY="",
        OPENAI_API_KEY=None,
    )


@pytest.fixture
async def armazenamento(anyio_backend):
    armazenamento = ArmazenamentoLocal(MEMORIA)
    await armazenamento.iniciar()
    yield armazenamento
    await armazenamento.close()


@pytest.fixture
async def backend_local(armazenamento):
    backend = LocalBackend(armazenamento, poll_interval=0.05)
    yield backend
    await backend.close()


@pytest.fixture
def fake_backend():
    return FakeBackend()


@pytest.fixture
def ctx(backend_local, test_settings):
    """Contexto completo sobre o banco local."""
    return montar_contexto(backend_local, "local", test_settings, ia=IAService(None, "gpt-4o-mini"))


@pytest.fixture
def ctx_fake(fake_backend, test_settings):
    return montar_contexto(fake_backend, "local", test_settings, ia=IAService(None, "gpt-4o-mini"))


def produto_in(name="Cerveja", price="15.00", stock=10, **extra) -> ProdutoSaveSchemas:
    return ProdutoSaveSchemas(
        name=name,
        price=Decimal(price),
        category=extra.pop("category", Categoria.BEBIDAS),
        stock=stock,
        **extra,
    )
