# barraca/database.py
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool


def _em_memoria(url: str) -> bool:
    return url.startswith("sqlite") and (":memory:" in url or url.rstrip("/").endswith(":"))


def criar_engine(url: str, echo: bool = False) -> AsyncEngine:
    """Cria o motor assíncrono do armazenamento local."""
    if _em_memoria(url):
        # Uma única conexão, senão cada sessão enxerga um banco vazio diferente
        return create_async_engine(
            url,
            echo=echo,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    return create_async_engine(url, echo=echo)


def criar_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    # Cria uma fábrica de sessões assíncronas
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,
    )
