from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Configurações básicas do projeto
    PROJECT_NAME: str = "Barraca de Praia entre Família"
    PROJECT_VERSION: str = "1.0.0"
    API_V1_STR: str = "/api/v1"
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Configurações de segurança (acesso administrativo por PIN)
    SECRET_KEY: str = "troque_esta_chave_em_producao"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 720
    ADMIN_PIN: str = "1234"

    # Armazenamento local (SQLite chave-valor)
    LOCAL_DATABASE_URL: str = "sqlite+aiosqlite:///./barraca_local.db"
    POLL_INTERVAL_SECONDS: float = 2.0

    # Banco remoto (Redis) - credenciais embarcadas no build / .env
    REMOTE_API_KEY: str = ""
    REMOTE_PROJECT_ID: str = "barraca"
    REMOTE_HOST: str = "localhost"
    REMOTE_PORT: int = 6379
    REMOTE_DATABASE: int = 0
    REMOTE_SSL: bool = False
    REMOTE_COALESCE_SECONDS: float = 0.2

    # Relatório inteligente
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_MODEL: str = "gpt-4o-mini"

    # Fuso usado para interpretar datas dos relatórios (Brasília)
    UTC_OFFSET_HOURS: int = -3

    # Links de QR Code
    PUBLIC_BASE_URL: str = "http://localhost:8000"
    QR_IMAGE_ENDPOINT: str = "https://api.qrserver.com/v1/create-qr-code/"

    # Configurações de CORS
    BACKEND_CORS_ORIGINS: List[str] = []

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",  # Ignora variáveis extras não declaradas
    )


settings = Settings()
