from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

PLACEHOLDER_PREFIX = "COLAR_"


class BackendConfigSchemas(BaseModel):
    """Credenciais do banco remoto (Redis)."""

    model_config = ConfigDict(populate_by_name=True)

    api_key: str = Field("", alias="apiKey")  # senha/ACL token do Redis
    project_id: str = Field("barraca", alias="projectId")  # prefixo das chaves
    host: str = "localhost"
    port: int = 6379
    database: int = 0
    ssl: bool = False

    def parece_valida(self) -> bool:
        key = (self.api_key or "").strip()
        return bool(key) and PLACEHOLDER_PREFIX not in key


class BackendStatusSchemas(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    remote: bool
    source: str  # "embarcada", "salva" ou "local"
    project_id: Optional[str] = Field(None, alias="projectId")
    host: Optional[str] = None


class DiagnosticoSchemas(BaseModel):
    remote: bool
    ok: bool
    message: str
