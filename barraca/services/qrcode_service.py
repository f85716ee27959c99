"""Links de mesa para o cliente e a imagem do QR Code."""
import io
from urllib.parse import urlencode

import qrcode

from barraca.schemas.tipos import normalizar_mesa


def link_cliente(base_url: str, table_id: int) -> str:
    """Deep link do cardápio da mesa: ``<base>/#/client?table=<id>``."""
    mesa = normalizar_mesa(table_id)
    return f"{base_url.strip().rstrip('/')}/#/client?table={mesa}"


def url_imagem_qr(link: str, endpoint: str, size: int = 400) -> str:
    return f"{endpoint}?{urlencode({'size': f'{size}x{size}', 'data': link})}"


def gerar_qrcode_png(link: str) -> bytes:
    img = qrcode.make(link)
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()
