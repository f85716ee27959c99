"""Interface comum dos bancos (remoto e local).

Os serviços só conhecem esta interface. Toda escrita passa por um
``WriteBatch`` aplicado de forma atômica pelo banco concreto; as operações
simples (create/update/set/delete) são lotes de uma operação só.
"""
import abc
import asyncio
import copy
import inspect
import json
import logging
import uuid
from contextlib import aclosing
from dataclasses import dataclass
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, List, Optional, Set, Tuple, Union

from barraca.core.exceptions import BackendError, NotFoundError

logger = logging.getLogger(__name__)

PRODUCTS = "products"
ORDERS = "orders"
ORDERS_HISTORY = "orders_history"
TABLES = "tables"
KINDS = (PRODUCTS, ORDERS, ORDERS_HISTORY, TABLES)

RECONNECT_DELAY_SECONDS = 5.0

Callback = Callable[[Any], Union[None, Awaitable[None]]]


def novo_id() -> str:
    return uuid.uuid4().hex


async def chamar(callback: Callable, *args) -> None:
    """Chama um callback síncrono ou assíncrono."""
    resultado = callback(*args)
    if inspect.isawaitable(resultado):
        await resultado


def _numero(valor: Any) -> float:
    if isinstance(valor, (int, float)) and not isinstance(valor, bool):
        return valor
    try:
        return float(str(valor).strip())
    except (TypeError, ValueError):
        return 0


@dataclass
class Operacao:
    tipo: str  # require | set | upsert | merge | delete | increment
    kind: str
    id: str
    data: Optional[dict] = None
    field: Optional[str] = None
    delta: float = 0
    floor: Optional[float] = None


class WriteBatch:
    """Lote de escritas aplicado tudo-ou-nada."""

    def __init__(self):
        self.operacoes: List[Operacao] = []

    def _add(self, op: Operacao) -> "WriteBatch":
        if op.kind not in KINDS:
            raise ValueError(f"coleção desconhecida: {op.kind}")
        self.operacoes.append(op)
        return self

    def require(self, kind: str, id: str) -> "WriteBatch":
        """Falha o lote inteiro com NotFoundError se o documento não existir."""
        return self._add(Operacao("require", kind, id))

    def set(self, kind: str, id: str, data: dict) -> "WriteBatch":
        return self._add(Operacao("set", kind, id, data=data))

    def upsert(self, kind: str, id: str, data: dict) -> "WriteBatch":
        return self._add(Operacao("upsert", kind, id, data=data))

    def merge(self, kind: str, id: str, data: dict) -> "WriteBatch":
        return self._add(Operacao("merge", kind, id, data=data))

    def delete(self, kind: str, id: str) -> "WriteBatch":
        return self._add(Operacao("delete", kind, id))

    def increment(self, kind: str, id: str, field: str, delta: float, floor: Optional[float] = 0) -> "WriteBatch":
        """Soma ``delta`` ao campo; ignora documentos que já não existem."""
        return self._add(Operacao("increment", kind, id, field=field, delta=delta, floor=floor))

    @property
    def kinds(self) -> List[str]:
        return sorted({op.kind for op in self.operacoes})

    def alvos(self) -> List[Tuple[str, str]]:
        vistos: Dict[Tuple[str, str], None] = {}
        for op in self.operacoes:
            vistos.setdefault((op.kind, op.id), None)
        return list(vistos)

    def __len__(self) -> int:
        return len(self.operacoes)


def aplicar_operacoes(colecoes: Dict[str, Dict[str, dict]], operacoes: List[Operacao]) -> None:
    """Aplica as operações sobre coleções em memória (id -> documento).

    Levanta NotFoundError antes de qualquer gravação real, pois quem chama só
    persiste o resultado depois que esta função retorna.
    """
    for op in operacoes:
        colecao = colecoes.setdefault(op.kind, {})
        if op.tipo == "require":
            if op.id not in colecao:
                raise NotFoundError(op.kind, op.id)
        elif op.tipo == "set":
            colecao[op.id] = copy.deepcopy(op.data)
        elif op.tipo == "upsert":
            colecao[op.id] = {**colecao.get(op.id, {}), **copy.deepcopy(op.data)}
        elif op.tipo == "merge":
            if op.id not in colecao:
                raise NotFoundError(op.kind, op.id)
            colecao[op.id] = {**colecao[op.id], **copy.deepcopy(op.data)}
        elif op.tipo == "delete":
            colecao.pop(op.id, None)
        elif op.tipo == "increment":
            doc = colecao.get(op.id)
            if doc is None:
                logger.debug(f"increment ignorado: {op.kind}/{op.id} não existe")
                continue
            novo = _numero(doc.get(op.field, 0)) + op.delta
            if op.floor is not None:
                novo = max(op.floor, novo)
            doc[op.field] = int(novo) if float(novo).is_integer() else novo
        else:
            raise ValueError(f"operação desconhecida: {op.tipo}")


def impressao_digital(docs: List[dict]) -> str:
    return json.dumps(docs, sort_keys=True, default=str)


class Subscription:
    """Entrega o snapshot completo de uma coleção a cada mudança.

    O primeiro snapshot sai assim que o listener está ativo; os seguintes só
    quando o conteúdo muda. ``unsubscribe()`` cancela a tarefa e libera o polling/listener.
    """

    def __init__(self, backend: "Backend", kind: str, callback: Callback):
        self.backend = backend
        self.kind = kind
        self.callback = callback
        self._ultimo: Optional[str] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def active(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> "Subscription":
        self._task = asyncio.get_running_loop().create_task(self._run(), name=f"assinatura-{self.kind}")
        return self

    def unsubscribe(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()

    async def aclose(self) -> None:
        self.unsubscribe()
        if self._task is not None:
            try:
                await self._task
            except asyncio.CancelledError:
                pass

    async def _entregar(self) -> None:
        try:
            docs = await self.backend.list(self.kind)
        except BackendError as e:
            logger.error(f"Erro lendo {self.kind} para assinatura: {e}")
            return
        impressao = impressao_digital(docs)
        if impressao == self._ultimo:
            return
        self._ultimo = impressao
        try:
            await chamar(self.callback, docs)
        except Exception:
            logger.exception(f"Callback da assinatura {self.kind} falhou")

    async def _run(self) -> None:
        # O primeiro item de mudancas() chega com o listener já ativo
        try:
            while True:
                try:
                    async with aclosing(self.backend.mudancas(self.kind)) as mudancas:
                        async for _ in mudancas:
                            await self._entregar()
                except BackendError as e:
                    logger.error(f"Listener de {self.kind} caiu, reconectando: {e}")
                    await asyncio.sleep(RECONNECT_DELAY_SECONDS)
        finally:
            self.backend._assinaturas.discard(self)


class Backend(abc.ABC):
    supports_transactions = True

    def __init__(self):
        self._assinaturas: Set[Subscription] = set()

    @abc.abstractmethod
    def is_remote(self) -> bool:
        """Só para exibição de status; a lógica de negócio não ramifica nisto."""

    @abc.abstractmethod
    async def carregar(self, kind: str) -> Dict[str, dict]:
        """Lê a coleção inteira como id -> documento."""

    @abc.abstractmethod
    async def commit(self, batch: WriteBatch) -> None:
        """Aplica o lote de forma atômica."""

    @abc.abstractmethod
    def mudancas(self, kind: str) -> AsyncIterator[None]:
        """Gera um item assim que passa a escutar e outro cada vez que a coleção pode ter mudado."""

    @abc.abstractmethod
    async def ping(self) -> str:
        """Testa o acesso ao banco; levanta BackendError se falhar."""

    async def close(self) -> None:
        for assinatura in list(self._assinaturas):
            await assinatura.aclose()

    def batch(self) -> WriteBatch:
        return WriteBatch()

    async def list(self, kind: str) -> List[dict]:
        docs = await self.carregar(kind)
        return [{**doc, "id": id} for id, doc in docs.items()]

    async def get(self, kind: str, id: str) -> Optional[dict]:
        doc = (await self.carregar(kind)).get(id)
        return None if doc is None else {**doc, "id": id}

    async def create(self, kind: str, data: dict, id: Optional[str] = None) -> str:
        id = id or novo_id()
        await self.commit(self.batch().set(kind, id, _sem_id(data)))
        return id

    async def update(self, kind: str, id: str, changes: dict) -> None:
        await self.commit(self.batch().merge(kind, id, _sem_id(changes)))

    async def set(self, kind: str, id: str, data: dict, merge: bool = False) -> None:
        batch = self.batch()
        if merge:
            batch.upsert(kind, id, _sem_id(data))
        else:
            batch.set(kind, id, _sem_id(data))
        await self.commit(batch)

    async def delete(self, kind: str, id: str) -> None:
        await self.commit(self.batch().delete(kind, id))

    def subscribe(self, kind: str, callback: Callback) -> Subscription:
        if kind not in KINDS:
            raise ValueError(f"coleção desconhecida: {kind}")
        assinatura = Subscription(self, kind, callback)
        self._assinaturas.add(assinatura)
        return assinatura.start()


def _sem_id(data: dict) -> dict:
    return {k: v for k, v in data.items() if k != "id"}
