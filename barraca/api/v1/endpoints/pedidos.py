# barraca/api/v1/endpoints/pedidos.py
from typing import Any, List

from fastapi import APIRouter, Depends, HTTPException, Response, status

from barraca import schemas
from barraca.api import deps
from barraca.core.contexto import Contexto
from barraca.core.exceptions import NotFoundError, ValidationError
from barraca.schemas.enums import TRANSICOES_SUGERIDAS

router = APIRouter()


@router.post("/", response_model=schemas.PedidoSchemas, status_code=status.HTTP_201_CREATED)
async def create_pedido(
    *,
    ctx: Contexto = Depends(deps.get_contexto),
    pedido_in: schemas.PedidoCreateSchemas,
) -> Any:
    """
    Pedido feito pelo cliente a partir do QR Code da mesa.
    Baixa o estoque dos produtos pedidos.
    """
    try:
        return await ctx.pedidos.create(pedido_in.table_id, pedido_in.items, pedido_in.observation)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Produto {e.id} não encontrado")


@router.get("/", response_model=List[schemas.PedidoSchemas])
async def read_pedidos(
    ctx: Contexto = Depends(deps.get_contexto),
    admin: str = Depends(deps.get_current_admin),
) -> Any:
    """
    Pedidos ao vivo, do mais novo para o mais antigo.
    """
    return await ctx.pedidos.list_once()


@router.get("/transicoes")
async def read_transicoes(admin: str = Depends(deps.get_current_admin)) -> Any:
    """
    Próximos status sugeridos para cada status (a API não bloqueia os demais).
    """
    return {origem.value: [destino.value for destino in destinos] for origem, destinos in TRANSICOES_SUGERIDAS.items()}


@router.patch("/{pedido_id}/status", status_code=status.HTTP_204_NO_CONTENT)
async def update_pedido_status(
    *,
    ctx: Contexto = Depends(deps.get_contexto),
    pedido_id: str,
    status_in: schemas.PedidoStatusUpdateSchemas,
    admin: str = Depends(deps.get_current_admin),
) -> Response:
    try:
        await ctx.pedidos.set_status(pedido_id, status_in.status)
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Pedido não encontrado")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
