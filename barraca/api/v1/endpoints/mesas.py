# barraca/api/v1/endpoints/mesas.py
from typing import Any, List

from fastapi import APIRouter, Depends, HTTPException, Response, status

from barraca import schemas
from barraca.api import deps
from barraca.core.config import settings
from barraca.core.contexto import Contexto
from barraca.core.exceptions import NotFoundError, ValidationError
from barraca.services import qrcode_service

router = APIRouter()


@router.get("/fechamentos", response_model=List[schemas.ContaMesaSchemas])
async def read_fechamentos_pendentes(
    ctx: Contexto = Depends(deps.get_contexto),
    admin: str = Depends(deps.get_current_admin),
) -> Any:
    """
    Mesas que pediram a conta, com o consumo de cada uma.
    """
    return await ctx.notificacoes.fechamentos_pendentes()


@router.get("/{mesa_id}", response_model=schemas.ContaMesaSchemas)
async def read_conta_mesa(mesa_id: int, ctx: Contexto = Depends(deps.get_contexto)) -> Any:
    """
    Conta da mesa vista pelo cliente. Com o fechamento solicitado,
    `aguardando_atendimento` vem verdadeiro e a tela fica só de leitura.
    """
    try:
        return await ctx.notificacoes.conta_mesa(mesa_id)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)


@router.post("/{mesa_id}/solicitar-fechamento", response_model=schemas.SessaoMesaSchemas)
async def solicitar_fechamento(
    *,
    mesa_id: int,
    pedido_in: schemas.SolicitarFechamentoSchemas,
    ctx: Contexto = Depends(deps.get_contexto),
) -> Any:
    try:
        return await ctx.mesas.request_close(mesa_id, pedido_in.payment_method)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)


@router.post("/{mesa_id}/finalizar", response_model=schemas.FechamentoResultadoSchemas)
async def finalizar_mesa(
    mesa_id: int,
    ctx: Contexto = Depends(deps.get_contexto),
    admin: str = Depends(deps.get_current_admin),
) -> Any:
    """
    Fecha a conta: arquiva os pedidos da mesa como pagos e libera a mesa.
    """
    try:
        return await ctx.mesas.finalize(mesa_id)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except NotFoundError:
        # Outro dispositivo mexeu nos pedidos durante o fechamento
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Os pedidos da mesa mudaram durante o fechamento. Tente novamente.",
        )


@router.post("/{mesa_id}/limpar", response_model=schemas.LimpezaResultadoSchemas)
async def limpar_mesa(
    mesa_id: int,
    ctx: Contexto = Depends(deps.get_contexto),
    admin: str = Depends(deps.get_current_admin),
) -> Any:
    """
    Remove os pedidos ao vivo da mesa sem arquivar (recuperação manual).
    """
    try:
        return await ctx.mesas.force_clear(mesa_id)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except NotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Os pedidos da mesa mudaram durante a limpeza. Tente novamente.",
        )


@router.get("/{mesa_id}/qrcode", response_model=schemas.QrCodeMesaSchemas)
async def get_mesa_qrcode(mesa_id: int, admin: str = Depends(deps.get_current_admin)) -> Any:
    try:
        link = qrcode_service.link_cliente(settings.PUBLIC_BASE_URL, mesa_id)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    return schemas.QrCodeMesaSchemas(
        table_id=mesa_id,
        link=link,
        image_url=qrcode_service.url_imagem_qr(link, settings.QR_IMAGE_ENDPOINT),
    )


@router.get("/{mesa_id}/qrcode.png", responses={200: {"content": {"image/png": {}}}}, response_class=Response)
async def get_mesa_qrcode_png(mesa_id: int, admin: str = Depends(deps.get_current_admin)) -> Response:
    try:
        link = qrcode_service.link_cliente(settings.PUBLIC_BASE_URL, mesa_id)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    return Response(content=qrcode_service.gerar_qrcode_png(link), media_type="image/png")
