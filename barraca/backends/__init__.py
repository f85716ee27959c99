"""Seleção do banco ativo.

Configuração embarcada (ambiente / .env) tem prioridade sobre a salva pelo
painel administrativo; sem chave válida o sistema roda no modo local.
"""
import logging
from typing import Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from barraca.backends.armazenamento import ArmazenamentoLocal
from barraca.backends.base import (
    KINDS,
    ORDERS,
    ORDERS_HISTORY,
    PRODUCTS,
    TABLES,
    Backend,
    Subscription,
    WriteBatch,
)
from barraca.backends.local import LocalBackend
from barraca.backends.redis_backend import RedisBackend
from barraca.core.config import Settings
from barraca.core.exceptions import BackendError
from barraca.schemas.config import BackendConfigSchemas

logger = logging.getLogger(__name__)

CONFIG_KEY = "beach_app_db_config"

ORIGEM_EMBARCADA = "embarcada"
ORIGEM_SALVA = "salva"
ORIGEM_LOCAL = "local"


def config_embarcada(settings: Settings) -> Optional[BackendConfigSchemas]:
    config = BackendConfigSchemas(
        api_key=settings.REMOTE_API_KEY,
        project_id=settings.REMOTE_PROJECT_ID,
        host=settings.REMOTE_HOST,
        port=settings.REMOTE_PORT,
        database=settings.REMOTE_DATABASE,
        ssl=settings.REMOTE_SSL,
    )
    return config if config.parece_valida() else None


async def carregar_config_salva(armazenamento: ArmazenamentoLocal) -> Optional[BackendConfigSchemas]:
    bruto = await armazenamento.get_item(CONFIG_KEY)
    if not bruto:
        return None
    try:
        config = BackendConfigSchemas.model_validate_json(bruto)
    except PydanticValidationError as e:
        logger.warning(f"Configuração salva inválida, ignorando: {e}")
        return None
    return config if config.parece_valida() else None


async def salvar_config(armazenamento: ArmazenamentoLocal, config: BackendConfigSchemas) -> None:
    await armazenamento.set_item(CONFIG_KEY, config.model_dump_json(by_alias=True))


async def limpar_config(armazenamento: ArmazenamentoLocal) -> None:
    await armazenamento.remove_item(CONFIG_KEY)


async def resolver_config(
    settings: Settings, armazenamento: ArmazenamentoLocal
) -> Tuple[Optional[BackendConfigSchemas], str]:
    config = config_embarcada(settings)
    if config is not None:
        return config, ORIGEM_EMBARCADA
    config = await carregar_config_salva(armazenamento)
    if config is not None:
        return config, ORIGEM_SALVA
    return None, ORIGEM_LOCAL


async def criar_backend(settings: Settings, armazenamento: ArmazenamentoLocal) -> Tuple[Backend, str]:
    """Cria o banco ativo e informa de onde veio a configuração."""
    config, origem = await resolver_config(settings, armazenamento)
    if config is not None:
        backend = RedisBackend(config, coalesce_seconds=settings.REMOTE_COALESCE_SECONDS)
        try:
            logger.info(await backend.ping())
            return backend, origem
        except BackendError as e:
            logger.error(f"Banco remoto indisponível, usando modo local: {e.message}")
            await backend.close()
    return LocalBackend(armazenamento, poll_interval=settings.POLL_INTERVAL_SECONDS), ORIGEM_LOCAL


__all__ = [
    "KINDS",
    "ORDERS",
    "ORDERS_HISTORY",
    "PRODUCTS",
    "TABLES",
    "Backend",
    "LocalBackend",
    "RedisBackend",
    "Subscription",
    "WriteBatch",
    "criar_backend",
]
