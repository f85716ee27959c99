from pydantic import BaseModel


class LoginSchemas(BaseModel):
    pin: str


class TokenSchemas(BaseModel):
    access_token: str
    token_type: str = "bearer"
