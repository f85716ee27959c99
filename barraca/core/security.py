import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from barraca.core.config import settings

logger = logging.getLogger(__name__)

ADMIN_SUBJECT = "admin"


def verify_pin(pin: str) -> bool:
    """Compara o PIN informado com o PIN administrativo configurado."""
    return secrets.compare_digest(pin.encode(), settings.ADMIN_PIN.encode())


def create_access_token(subject: str = ADMIN_SUBJECT, expires_delta: Optional[timedelta] = None) -> str:
    """Cria um token JWT de acesso."""
    expire = datetime.now(timezone.utc) + (
        expires_delta if expires_delta else timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode = {"sub": subject, "exp": expire, "type": "access"}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> Optional[dict]:
    """Decodifica um token JWT; retorna None se inválido ou expirado."""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as e:
        logger.warning(f"Token inválido: {e}")
        return None
