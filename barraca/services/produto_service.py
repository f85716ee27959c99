# barraca/services/produto_service.py
import logging
from typing import Callable, Iterable, List, Optional

from pydantic import ValidationError as PydanticValidationError

from barraca.backends.base import PRODUCTS, Backend, Subscription, novo_id
from barraca.core.exceptions import NotFoundError, ValidationError
from barraca.schemas.produto import ProdutoSaveSchemas, ProdutoSchemas
from barraca.schemas.tipos import CENTAVOS

logger = logging.getLogger(__name__)

PLACEHOLDER_IMAGE = "https://placehold.co/200?text=Sem+Imagem"


class ProdutoService:
    """Cardápio: leitura, cadastro com soma por nome e remoção."""

    def __init__(self, backend: Backend):
        self.backend = backend

    @staticmethod
    def parse(docs: Iterable[dict]) -> List[ProdutoSchemas]:
        produtos = []
        for doc in docs:
            try:
                produtos.append(ProdutoSchemas.model_validate(doc))
            except PydanticValidationError as e:
                logger.warning(f"Produto {doc.get('id')} malformado ignorado: {e}")
        return sorted(produtos, key=lambda p: p.name.lower())

    @staticmethod
    def disponiveis(produtos: Iterable[ProdutoSchemas]) -> List[ProdutoSchemas]:
        """Só o que tem estoque, com imagem de reserva para URLs vazias ou curtas."""
        resultado = []
        for produto in produtos:
            if produto.stock <= 0:
                continue
            if len((produto.image_url or "").strip()) < 6:
                produto = produto.model_copy(update={"image_url": PLACEHOLDER_IMAGE})
            resultado.append(produto)
        return resultado

    async def list(self) -> List[ProdutoSchemas]:
        return self.parse(await self.backend.list(PRODUCTS))

    async def get(self, id: str) -> Optional[ProdutoSchemas]:
        doc = await self.backend.get(PRODUCTS, id)
        return None if doc is None else ProdutoSchemas.model_validate(doc)

    async def list_available(self) -> List[ProdutoSchemas]:
        return self.disponiveis(await self.list())

    def subscribe(self, callback: Callable) -> Subscription:
        return self.backend.subscribe(PRODUCTS, lambda docs: callback(self.parse(docs)))

    @staticmethod
    def _validar(produto: ProdutoSaveSchemas) -> None:
        if not produto.name.strip():
            raise ValidationError("O nome do produto é obrigatório")
        if produto.price < 0:
            raise ValidationError("O preço não pode ser negativo")
        if produto.stock < 0:
            raise ValidationError("O estoque não pode ser negativo")

    async def save(self, produto: ProdutoSaveSchemas) -> ProdutoSchemas:
        """Cria, soma ao produto de mesmo nome ou atualiza pelo id."""
        self._validar(produto)
        dados = {
            "name": produto.name.strip(),
            "description": produto.description or "",
            "price": float(produto.price.quantize(CENTAVOS)),
            "category": produto.category.value,
            "imageUrl": (produto.image_url or "").strip(),
            "stock": produto.stock,
        }

        if produto.id:
            await self.backend.update(PRODUCTS, produto.id, dados)
            logger.info(f"Produto {produto.id} atualizado")
            return ProdutoSchemas.model_validate({**dados, "id": produto.id})

        existente = next((p for p in await self.list() if p.name.strip() == dados["name"]), None)
        if existente is None:
            id = await self.backend.create(PRODUCTS, dados, id=novo_id())
            logger.info(f"Produto {dados['name']} criado com id {id}")
            return ProdutoSchemas.model_validate({**dados, "id": id})

        mudancas = {"price": dados["price"], "description": dados["description"]}
        if dados["imageUrl"]:
            mudancas["imageUrl"] = dados["imageUrl"]
        batch = (
            self.backend.batch()
            .merge(PRODUCTS, existente.id, mudancas)
            .increment(PRODUCTS, existente.id, "stock", dados["stock"], floor=0)
        )
        await self.backend.commit(batch)
        logger.info(f"Produto {existente.id} ({dados['name']}) recebeu +{dados['stock']} no estoque")
        atualizado = await self.get(existente.id)
        if atualizado is None:
            raise NotFoundError(PRODUCTS, existente.id)
        return atualizado

    async def delete(self, id: str) -> None:
        await self.backend.delete(PRODUCTS, id)
        logger.info(f"Produto {id} removido")
