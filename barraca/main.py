import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from barraca.api.v1.router import api_router_v1
from barraca.backends.armazenamento import ArmazenamentoLocal
from barraca.core.config import Settings, settings
from barraca.core.contexto import criar_contexto
from barraca.core.exceptions import BackendError

# Configuração básica de logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(config: Settings = settings) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        armazenamento = ArmazenamentoLocal(config.LOCAL_DATABASE_URL)
        await armazenamento.iniciar()
        app.state.settings = config
        app.state.armazenamento = armazenamento
        app.state.contexto = await criar_contexto(config, armazenamento)
        logger.info(f"{config.PROJECT_NAME} v{config.PROJECT_VERSION} pronta")
        yield
        await app.state.contexto.aclose()
        await armazenamento.close()
        logger.info("Aplicação encerrada")

    app = FastAPI(
        title=config.PROJECT_NAME,
        description="Pedidos por mesa, estoque e fechamento de conta para a barraca de praia",
        openapi_url=f"{config.API_V1_STR}/openapi.json",
        version=config.PROJECT_VERSION,
        lifespan=lifespan,
    )

    # Configuração de CORS
    if config.BACKEND_CORS_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=[str(origin) for origin in config.BACKEND_CORS_ORIGINS],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.exception_handler(BackendError)
    async def backend_error_handler(request: Request, exc: BackendError):
        logger.error(f"Erro no banco em {request.url.path}: {exc.message}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": "Banco de dados indisponível. Tente novamente em instantes."},
        )

    # Inclui todas as rotas da API V1
    app.include_router(api_router_v1, prefix=config.API_V1_STR)

    @app.get("/", tags=["Root"])
    async def read_root():
        return {
            "message": f"Bem-vindo à API {config.PROJECT_NAME} v{config.PROJECT_VERSION}",
            "docs": "/docs",
            "status": "operacional",
            "environment": config.ENVIRONMENT,
        }

    @app.get("/health", tags=["Health Check"])
    async def health_check(request: Request):
        """Endpoint para verificação de saúde da API"""
        ctx = request.app.state.contexto
        return {
            "status": "healthy",
            "database": "remoto" if ctx.backend.is_remote() else "local",
            "persistente": request.app.state.armazenamento.persistente,
            "environment": config.ENVIRONMENT,
        }

    return app


app = create_app()
