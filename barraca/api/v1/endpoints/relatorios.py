# barraca/api/v1/endpoints/relatorios.py
from datetime import date, datetime
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, HTTPException, status

from barraca import schemas
from barraca.api import deps
from barraca.core.contexto import Contexto
from barraca.core.exceptions import ValidationError

router = APIRouter()


def _periodo(ctx: Contexto, inicio: Optional[date], fim: Optional[date]):
    # Sem datas, o relatório é do dia de hoje no fuso da barraca
    hoje = datetime.now(ctx.relatorios.fuso).date()
    return inicio or hoje, fim or inicio or hoje


@router.get("/financeiro", response_model=schemas.ResumoFinanceiroSchemas)
async def read_resumo_financeiro(
    inicio: Optional[date] = None,
    fim: Optional[date] = None,
    ctx: Contexto = Depends(deps.get_contexto),
    admin: str = Depends(deps.get_current_admin),
) -> Any:
    """
    Faturamento, número de pedidos e ticket médio dos pedidos pagos no período.
    """
    try:
        return await ctx.relatorios.financeiro(*_periodo(ctx, inicio, fim))
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)


@router.get("/historico", response_model=List[schemas.PedidoSchemas])
async def read_historico(
    inicio: Optional[date] = None,
    fim: Optional[date] = None,
    ctx: Contexto = Depends(deps.get_contexto),
    admin: str = Depends(deps.get_current_admin),
) -> Any:
    try:
        return await ctx.relatorios.get_sales_history(*_periodo(ctx, inicio, fim))
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)


@router.post("/ia", response_model=schemas.RelatorioIASchemas)
async def gerar_relatorio_ia(
    inicio: Optional[date] = None,
    fim: Optional[date] = None,
    ctx: Contexto = Depends(deps.get_contexto),
    admin: str = Depends(deps.get_current_admin),
) -> Any:
    """
    Relatório narrativo gerado por IA. Falhas da IA voltam como texto, nunca como erro.
    """
    try:
        report = await ctx.relatorios.relatorio_ia(*_periodo(ctx, inicio, fim))
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    return schemas.RelatorioIASchemas(report=report)
