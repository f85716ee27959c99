"""
Testes do Cardápio
==================
Cadastro com soma por nome, validação e lista de disponíveis
"""
from decimal import Decimal

import pytest

from barraca.backends.base import PRODUCTS
from barraca.core.exceptions import NotFoundError, ValidationError
from barraca.schemas.enums import Categoria
from barraca.schemas.produto import ProdutoSchemas
from barraca.services.produto_service import PLACEHOLDER_IMAGE, ProdutoService
from tests.conftest import produto_in


@pytest.mark.anyio
async def test_cardapio_inicial_e_gravado_no_primeiro_acesso(ctx):
    produtos = await ctx.produtos.list()

    assert {p.name for p in produtos} == {
        "Cerveja Gelada 600ml",
        "Água de Coco",
        "Isca de Peixe",
        "Batata Frita",
    }
    assert await ctx.backend.get(PRODUCTS, "1") is not None


@pytest.mark.anyio
async def test_cadastro_com_mesmo_nome_soma_estoque(ctx_fake):
    original = await ctx_fake.produtos.save(produto_in(stock=10, image_url="https://img/cerveja.png"))

    somado = await ctx_fake.produtos.save(produto_in(price="16.50", stock=5, description="Nova"))

    assert somado.id == original.id
    assert somado.stock == 15
    assert somado.price == Decimal("16.50")
    assert somado.description == "Nova"
    # Sem imagem nova, mantém a anterior
    assert somado.image_url == "https://img/cerveja.png"
    assert len(await ctx_fake.produtos.list()) == 1


@pytest.mark.anyio
async def test_soma_por_nome_e_um_lote_unico(ctx_fake, fake_backend):
    await ctx_fake.produtos.save(produto_in())
    fake_backend.commits.clear()

    await ctx_fake.produtos.save(produto_in(stock=3))

    assert len(fake_backend.commits) == 1
    assert [op.tipo for op in fake_backend.commits[0].operacoes] == ["merge", "increment"]


@pytest.mark.anyio
async def test_atualizar_por_id(ctx_fake):
    criado = await ctx_fake.produtos.save(produto_in())

    atualizado = await ctx_fake.produtos.save(produto_in(name="Cerveja Lata", stock=7, id=criado.id))

    assert atualizado.id == criado.id
    assert (await ctx_fake.produtos.get(criado.id)).name == "Cerveja Lata"


@pytest.mark.anyio
async def test_atualizar_produto_inexistente(ctx_fake):
    with pytest.raises(NotFoundError):
        await ctx_fake.produtos.save(produto_in(id="sumiu"))


@pytest.mark.anyio
@pytest.mark.parametrize(
    "entrada",
    [
        {"name": "   "},
        {"price": "-1"},
        {"stock": -2},
    ],
)
async def test_validacao_antes_do_banco(ctx_fake, fake_backend, entrada):
    with pytest.raises(ValidationError):
        await ctx_fake.produtos.save(produto_in(**entrada))
    assert fake_backend.commits == []


@pytest.mark.anyio
async def test_remover_e_idempotente(ctx_fake):
    criado = await ctx_fake.produtos.save(produto_in())

    await ctx_fake.produtos.delete(criado.id)
    await ctx_fake.produtos.delete(criado.id)

    assert await ctx_fake.produtos.list() == []


def test_disponiveis_filtra_estoque_e_troca_imagem():
    produtos = ProdutoService.parse(
        [
            {"id": "a", "name": "Agua", "price": "8,00", "category": "Bebidas", "imageUrl": "", "stock": "3"},
            {"id": "b", "name": "Batata", "price": 25, "category": "Tira Gostos", "imageUrl": "x.png", "stock": 0},
            {"id": "c", "name": "Cerveja", "price": 15, "category": "Bebidas", "imageUrl": "https://img/c.png", "stock": 4},
        ]
    )

    disponiveis = ProdutoService.disponiveis(produtos)

    assert [p.id for p in disponiveis] == ["a", "c"]
    assert disponiveis[0].image_url == PLACEHOLDER_IMAGE
    assert disponiveis[0].price == Decimal("8.00")
    assert disponiveis[0].stock == 3
    assert disponiveis[1].image_url == "https://img/c.png"


def test_documento_malformado_e_ignorado():
    produtos = ProdutoService.parse(
        [
            {"id": "ok", "name": "Agua", "price": 8, "category": "Bebidas", "stock": 1},
            {"id": "ruim", "name": "Sem preço", "category": "Bebidas"},
        ]
    )

    assert [p.id for p in produtos] == ["ok"]
    assert isinstance(produtos[0], ProdutoSchemas)
    assert produtos[0].category == Categoria.BEBIDAS
