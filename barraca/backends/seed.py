# barraca/backends/seed.py
from barraca.schemas.enums import Categoria

# Cardápio inicial do modo local, gravado quando ainda não existe nenhum produto
INITIAL_PRODUCTS = [
    {
        "id": "1",
        "name": "Cerveja Gelada 600ml",
        "description": "Estupidamente gelada",
        "price": 15.0,
        "category": Categoria.BEBIDAS.value,
        "imageUrl": "https://picsum.photos/200/200?random=1",
        "stock": 48,
    },
    {
        "id": "2",
        "name": "Água de Coco",
        "description": "Natural da fruta",
        "price": 8.0,
        "category": Categoria.BEBIDAS.value,
        "imageUrl": "https://picsum.photos/200/200?random=2",
        "stock": 20,
    },
    {
        "id": "3",
        "name": "Isca de Peixe",
        "description": "Acompanha molho tártaro",
        "price": 45.0,
        "category": Categoria.TIRA_GOSTO.value,
        "imageUrl": "https://picsum.photos/200/200?random=3",
        "stock": 10,
    },
    {
        "id": "4",
        "name": "Batata Frita",
        "description": "Porção generosa",
        "price": 25.0,
        "category": Categoria.TIRA_GOSTO.value,
        "imageUrl": "https://picsum.photos/200/200?random=4",
        "stock": 15,
    },
]
