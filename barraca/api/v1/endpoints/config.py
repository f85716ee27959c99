# barraca/api/v1/endpoints/config.py
import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request, status

from barraca import schemas
from barraca.api import deps
from barraca.backends import limpar_config, salvar_config
from barraca.backends.armazenamento import ArmazenamentoLocal
from barraca.core.contexto import Contexto, criar_contexto
from barraca.core.exceptions import BackendError

logger = logging.getLogger(__name__)

router = APIRouter()


def _status(ctx: Contexto) -> schemas.BackendStatusSchemas:
    remoto = ctx.backend.is_remote()
    config = getattr(ctx.backend, "config", None)
    return schemas.BackendStatusSchemas(
        remote=remoto,
        source=ctx.origem,
        project_id=config.project_id if remoto else None,
        host=config.host if remoto else None,
    )


async def _recriar_contexto(request: Request) -> Contexto:
    """Troca o banco ativo sem reiniciar o processo."""
    antigo: Contexto = request.app.state.contexto
    await antigo.aclose()
    novo = await criar_contexto(request.app.state.settings, request.app.state.armazenamento)
    request.app.state.contexto = novo
    return novo


@router.get("/backend", response_model=schemas.BackendStatusSchemas)
async def read_backend(
    ctx: Contexto = Depends(deps.get_contexto),
    admin: str = Depends(deps.get_current_admin),
) -> Any:
    return _status(ctx)


@router.put("/backend", response_model=schemas.BackendStatusSchemas)
async def save_backend(
    *,
    request: Request,
    config_in: schemas.BackendConfigSchemas,
    armazenamento: ArmazenamentoLocal = Depends(deps.get_armazenamento),
    admin: str = Depends(deps.get_current_admin),
) -> Any:
    """
    Salva as credenciais do banco remoto e reconecta.
    Configuração embarcada no ambiente continua tendo prioridade.
    """
    if not config_in.parece_valida():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Chave de acesso do banco remoto inválida")
    await salvar_config(armazenamento, config_in)
    logger.info(f"Configuração do banco remoto salva (projeto {config_in.project_id})")
    return _status(await _recriar_contexto(request))


@router.delete("/backend", response_model=schemas.BackendStatusSchemas)
async def clear_backend(
    request: Request,
    armazenamento: ArmazenamentoLocal = Depends(deps.get_armazenamento),
    admin: str = Depends(deps.get_current_admin),
) -> Any:
    await limpar_config(armazenamento)
    logger.info("Configuração salva do banco remoto removida")
    return _status(await _recriar_contexto(request))


@router.get("/diagnostico", response_model=schemas.DiagnosticoSchemas)
async def diagnostico(
    ctx: Contexto = Depends(deps.get_contexto),
    admin: str = Depends(deps.get_current_admin),
) -> Any:
    """
    Testa leitura no banco ativo.
    """
    try:
        message = await ctx.backend.ping()
    except BackendError as e:
        return schemas.DiagnosticoSchemas(remote=ctx.backend.is_remote(), ok=False, message=e.message)
    return schemas.DiagnosticoSchemas(remote=ctx.backend.is_remote(), ok=True, message=message)
