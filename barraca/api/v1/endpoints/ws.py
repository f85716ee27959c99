# barraca/api/v1/endpoints/ws.py
import asyncio
import logging
from typing import List, Optional

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect, status

from barraca.core import security
from barraca.core.contexto import Contexto
from barraca.schemas.pedido import PedidoSchemas
from barraca.schemas.relatorio import AlertaNovosPedidosSchemas

logger = logging.getLogger(__name__)

router = APIRouter()


@router.websocket("/pedidos")
async def pedidos_ws(websocket: WebSocket, token: Optional[str] = Query(None)) -> None:
    """Painel da equipe: snapshot dos pedidos a cada mudança e alertas de pedidos novos."""
    payload = security.decode_token(token) if token else None
    if payload is None or payload.get("sub") != security.ADMIN_SUBJECT:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    ctx: Contexto = websocket.app.state.contexto

    async def enviar_pedidos(pedidos: List[PedidoSchemas]) -> None:
        await websocket.send_json(
            {"type": "orders", "orders": [p.model_dump(mode="json", by_alias=True) for p in pedidos]}
        )

    async def enviar_alerta(alerta: AlertaNovosPedidosSchemas) -> None:
        await websocket.send_json({"type": "alert", **alerta.model_dump(mode="json", by_alias=True)})

    assinatura = ctx.notificacoes.subscribe_alerts(enviar_alerta, on_orders=enviar_pedidos)
    encerrado = asyncio.ensure_future(ctx.encerrado.wait())
    try:
        while True:
            recebido = asyncio.ensure_future(websocket.receive_text())  # só mantém a conexão viva
            prontos, _ = await asyncio.wait({recebido, encerrado}, return_when=asyncio.FIRST_COMPLETED)
            if encerrado in prontos:
                # Banco trocado: o painel reconecta e assina o novo
                recebido.cancel()
                logger.info("Banco ativo trocado, encerrando painel")
                await websocket.close(code=status.WS_1012_SERVICE_RESTART)
                break
            recebido.result()
    except WebSocketDisconnect:
        logger.info("Painel desconectado do fluxo de pedidos")
    finally:
        encerrado.cancel()
        await assinatura.aclose()
