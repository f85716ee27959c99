# barraca/api/deps.py
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer

from barraca.backends.armazenamento import ArmazenamentoLocal
from barraca.core import security
from barraca.core.config import settings
from barraca.core.contexto import Contexto

reusable_oauth2 = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_V1_STR}/auth/token"
)


def get_contexto(request: Request) -> Contexto:
    return request.app.state.contexto


def get_armazenamento(request: Request) -> ArmazenamentoLocal:
    return request.app.state.armazenamento


def get_current_admin(token: str = Depends(reusable_oauth2)) -> str:
    payload = security.decode_token(token)
    if payload is None or payload.get("sub") != security.ADMIN_SUBJECT:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Não foi possível validar as credenciais",
        )
    return payload["sub"]
