# barraca/api/v1/endpoints/produtos.py
from typing import Any, List

from fastapi import APIRouter, Depends, HTTPException, status

from barraca import schemas
from barraca.api import deps
from barraca.core.contexto import Contexto
from barraca.core.exceptions import NotFoundError, ValidationError

router = APIRouter()


@router.get("/disponiveis", response_model=List[schemas.ProdutoSchemas])
async def read_produtos_disponiveis(ctx: Contexto = Depends(deps.get_contexto)) -> Any:
    """
    Cardápio do cliente: só produtos com estoque.
    """
    return await ctx.produtos.list_available()


@router.get("/", response_model=List[schemas.ProdutoSchemas])
async def read_produtos(
    ctx: Contexto = Depends(deps.get_contexto),
    admin: str = Depends(deps.get_current_admin),
) -> Any:
    return await ctx.produtos.list()


@router.post("/", response_model=schemas.ProdutoSchemas, status_code=status.HTTP_201_CREATED)
async def create_produto(
    *,
    ctx: Contexto = Depends(deps.get_contexto),
    produto_in: schemas.ProdutoSaveSchemas,
    admin: str = Depends(deps.get_current_admin),
) -> Any:
    """
    Cadastra um produto. Se já existir um com o mesmo nome, soma o estoque
    e atualiza preço, descrição e imagem.
    """
    try:
        return await ctx.produtos.save(produto_in.model_copy(update={"id": ""}))
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)


@router.put("/{produto_id}", response_model=schemas.ProdutoSchemas)
async def update_produto(
    *,
    ctx: Contexto = Depends(deps.get_contexto),
    produto_id: str,
    produto_in: schemas.ProdutoSaveSchemas,
    admin: str = Depends(deps.get_current_admin),
) -> Any:
    try:
        return await ctx.produtos.save(produto_in.model_copy(update={"id": produto_id}))
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Produto não encontrado")


@router.delete("/{produto_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_produto(
    produto_id: str,
    ctx: Contexto = Depends(deps.get_contexto),
    admin: str = Depends(deps.get_current_admin),
) -> None:
    await ctx.produtos.delete(produto_id)
