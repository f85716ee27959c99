from fastapi import APIRouter

from barraca.api.v1.endpoints import (
    auth,
    config,
    mesas,
    pedidos,
    produtos,
    relatorios,
    ws,
)

api_router_v1 = APIRouter()

api_router_v1.include_router(auth.router, prefix="/auth", tags=["Autenticação"])
api_router_v1.include_router(produtos.router, prefix="/produtos", tags=["Produtos"])
api_router_v1.include_router(pedidos.router, prefix="/pedidos", tags=["Pedidos"])
api_router_v1.include_router(mesas.router, prefix="/mesas", tags=["Mesas"])
api_router_v1.include_router(relatorios.router, prefix="/relatorios", tags=["Relatórios"])
api_router_v1.include_router(config.router, prefix="/config", tags=["Configuração"])
api_router_v1.include_router(ws.router, prefix="/ws", tags=["Tempo real"])


@api_router_v1.get("/", tags=["Root V1"])
async def read_root_v1():
    return {"message": "API V1 Operacional"}
