from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from barraca.schemas.enums import Categoria
from barraca.schemas.tipos import Dinheiro, Estoque


class ProdutoBaseSchemas(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    description: str = ""
    price: Dinheiro
    category: Categoria
    image_url: str = Field("", alias="imageUrl")
    stock: Estoque = 0

    @field_validator("description", "image_url", mode="before")
    @classmethod
    def texto_opcional(cls, v):
        return "" if v is None else v


class ProdutoSchemas(ProdutoBaseSchemas):
    id: str


class ProdutoSaveSchemas(BaseModel):
    """Entrada de criação/edição. id vazio significa criar (ou somar ao de mesmo nome)."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = ""
    name: str = ""
    description: str = ""
    price: Decimal = Decimal("0")
    category: Categoria = Categoria.BEBIDAS
    image_url: str = Field("", alias="imageUrl")
    stock: int = 0
