# barraca/api/v1/endpoints/auth.py
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm

from barraca import schemas
from barraca.api import deps
from barraca.core import security

router = APIRouter()


def _emitir_token(pin: str) -> dict:
    if not security.verify_pin(pin):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="PIN incorreto")
    return {"access_token": security.create_access_token(), "token_type": "bearer"}


@router.post("/login", response_model=schemas.TokenSchemas)
async def login(login_in: schemas.LoginSchemas) -> Any:
    """
    Entrada do painel administrativo pelo PIN.
    """
    return _emitir_token(login_in.pin)


@router.post("/token", response_model=schemas.TokenSchemas)
async def login_access_token(form_data: OAuth2PasswordRequestForm = Depends()) -> Any:
    """
    Login compatível com OAuth2 (usado pela documentação interativa); a senha é o PIN.
    """
    return _emitir_token(form_data.password)


@router.get("/me")
async def test_token(admin: str = Depends(deps.get_current_admin)) -> Any:
    return {"sub": admin}
