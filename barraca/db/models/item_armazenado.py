# barraca/db/models/item_armazenado.py
from sqlalchemy import Column, String, Text

from barraca.db.base_class import Base


class ItemArmazenado(Base):
    __tablename__ = "armazenamento_local"

    # Ex: "beach_app_products", "beach_app_orders"
    chave = Column(String(120), primary_key=True)
    valor = Column(Text, nullable=False)  # Documento JSON da coleção inteira
