"""
Testes da API
=============
Fluxo completo pelo TestClient: cardápio, pedido, conta e fechamento
"""
import pytest
from fastapi import status
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from barraca.core.config import settings
from barraca.main import create_app

API = settings.API_V1_STR


@pytest.fixture
def client(test_settings):
    with TestClient(create_app(test_settings)) as client:
        yield client


@pytest.fixture
def admin_headers(client):
    response = client.post(f"{API}/auth/login", json={"pin": settings.ADMIN_PIN})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["database"] == "local"


def test_login_com_pin_errado(client):
    response = client.post(f"{API}/auth/login", json={"pin": "0000"})

    assert response.status_code == 400


def test_login_pelo_formulario_oauth2(client):
    response = client.post(f"{API}/auth/token", data={"username": "admin", "password": settings.ADMIN_PIN})

    assert response.status_code == 200
    assert response.json()["token_type"] == "bearer"


def test_rotas_administrativas_exigem_token(client):
    assert client.get(f"{API}/pedidos/").status_code == 401
    response = client.get(f"{API}/pedidos/", headers={"Authorization": "Bearer invalido"})
    assert response.status_code == 403


def test_cardapio_publico(client):
    response = client.get(f"{API}/produtos/disponiveis")

    assert response.status_code == 200
    nomes = {p["name"] for p in response.json()}
    assert "Cerveja Gelada 600ml" in nomes
    assert all("imageUrl" in p for p in response.json())


def test_fluxo_completo_da_mesa(client, admin_headers):
    produto = client.post(
        f"{API}/produtos/",
        json={"name": "Cerveja", "price": 15, "category": "Bebidas", "stock": 10},
        headers=admin_headers,
    )
    assert produto.status_code == 201
    produto_id = produto.json()["id"]

    pedido = client.post(
        f"{API}/pedidos/",
        json={"tableId": 3, "items": [{"productId": produto_id, "quantity": 2}], "observation": "sem gelo"},
    )
    assert pedido.status_code == 201
    assert pedido.json()["total"] == 30.0
    assert pedido.json()["status"] == "Pendente"
    assert isinstance(pedido.json()["timestamp"], int)

    estoque = {p["id"]: p["stock"] for p in client.get(f"{API}/produtos/", headers=admin_headers).json()}
    assert estoque[produto_id] == 8

    conta = client.get(f"{API}/mesas/3").json()
    assert conta["total"] == 30.0
    assert conta["aguardando_atendimento"] is False

    sessao = client.post(f"{API}/mesas/3/solicitar-fechamento", json={"paymentMethod": "PIX"})
    assert sessao.status_code == 200
    assert sessao.json()["status"] == "Fechamento Solicitado"
    assert client.get(f"{API}/mesas/3").json()["aguardando_atendimento"] is True

    fechamentos = client.get(f"{API}/mesas/fechamentos", headers=admin_headers).json()
    assert [f["tableId"] for f in fechamentos] == [3]

    resultado = client.post(f"{API}/mesas/3/finalizar", headers=admin_headers)
    assert resultado.status_code == 200
    assert resultado.json()["archivedCount"] == 1

    assert client.get(f"{API}/pedidos/", headers=admin_headers).json() == []
    historico = client.get(f"{API}/relatorios/historico", headers=admin_headers).json()
    assert [h["status"] for h in historico] == ["Pago/Finalizado"]
    financeiro = client.get(f"{API}/relatorios/financeiro", headers=admin_headers).json()
    assert financeiro == {"totalRevenue": 30.0, "orderCount": 1, "averageTicket": 30.0}


def test_pedido_invalido(client):
    vazio = client.post(f"{API}/pedidos/", json={"tableId": 3, "items": []})
    assert vazio.status_code == 400

    sumido = client.post(f"{API}/pedidos/", json={"tableId": 3, "items": [{"productId": "nao-existe", "quantity": 1}]})
    assert sumido.status_code == 404


def test_status_do_pedido(client, admin_headers):
    pedido = client.post(f"{API}/pedidos/", json={"tableId": 1, "items": [{"productId": "2", "quantity": 1}]}).json()

    response = client.patch(f"{API}/pedidos/{pedido['id']}/status", json={"status": "Em Preparo"}, headers=admin_headers)
    assert response.status_code == 204

    inexistente = client.patch(f"{API}/pedidos/xyz/status", json={"status": "Entregue"}, headers=admin_headers)
    assert inexistente.status_code == 404

    transicoes = client.get(f"{API}/pedidos/transicoes", headers=admin_headers).json()
    assert transicoes["Pendente"] == ["Em Preparo", "Cancelado"]


def test_produto_com_preco_negativo(client, admin_headers):
    response = client.post(
        f"{API}/produtos/",
        json={"name": "Erro", "price": -1, "category": "Bebidas", "stock": 1},
        headers=admin_headers,
    )

    assert response.status_code == 400


def test_limpeza_forcada_sem_pedidos(client, admin_headers):
    response = client.post(f"{API}/mesas/9/limpar", headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["removedCount"] == 0


def test_mesa_invalida(client):
    assert client.get(f"{API}/mesas/0").status_code == 400


def test_qrcode_da_mesa(client, admin_headers):
    dados = client.get(f"{API}/mesas/5/qrcode", headers=admin_headers).json()
    assert dados["link"].endswith("/#/client?table=5")
    assert dados["imageUrl"].startswith(settings.QR_IMAGE_ENDPOINT)

    png = client.get(f"{API}/mesas/5/qrcode.png", headers=admin_headers)
    assert png.headers["content-type"] == "image/png"
    assert png.content.startswith(b"\x89PNG")


def test_relatorio_ia_sem_vendas(client, admin_headers):
    response = client.post(f"{API}/relatorios/ia", params={"inicio": "2025-01-01", "fim": "2025-01-02"}, headers=admin_headers)

    assert response.status_code == 200
    assert "Não há dados de vendas" in response.json()["report"]


def test_periodo_invertido(client, admin_headers):
    response = client.get(
        f"{API}/relatorios/financeiro", params={"inicio": "2025-02-01", "fim": "2025-01-01"}, headers=admin_headers
    )

    assert response.status_code == 400


def test_configuracao_do_banco(client, admin_headers):
    status_atual = client.get(f"{API}/config/backend", headers=admin_headers).json()
    assert status_atual == {"remote": False, "source": "local", "projectId": None, "host": None}

    invalida = client.put(f"{API}/config/backend", json={"apiKey": "COLAR_AQUI"}, headers=admin_headers)
    assert invalida.status_code == 400

    diagnostico = client.get(f"{API}/config/diagnostico", headers=admin_headers).json()
    assert diagnostico["ok"] is True

    limpa = client.delete(f"{API}/config/backend", headers=admin_headers)
    assert limpa.json()["source"] == "local"


def test_websocket_recusa_token_invalido(client):
    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect(f"{API}/ws/pedidos?token=invalido") as ws:
            ws.receive_json()


def test_websocket_envia_snapshot_de_pedidos(client, admin_headers):
    token = admin_headers["Authorization"].split()[1]

    with client.websocket_connect(f"{API}/ws/pedidos?token={token}") as ws:
        mensagem = ws.receive_json()

    assert mensagem == {"type": "orders", "orders": []}


def test_troca_de_banco_encerra_painel(client, admin_headers):
    token = admin_headers["Authorization"].split()[1]

    with client.websocket_connect(f"{API}/ws/pedidos?token={token}") as ws:
        ws.receive_json()
        assert client.delete(f"{API}/config/backend", headers=admin_headers).status_code == 200
        with pytest.raises(WebSocketDisconnect) as exc:
            ws.receive_json()

    assert exc.value.code == status.WS_1012_SERVICE_RESTART
