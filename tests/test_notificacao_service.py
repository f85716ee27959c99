"""
Testes de Notificações
======================
Alertas de pedidos novos e consumo por mesa
"""
from datetime import datetime, timezone
from decimal import Decimal

import anyio
import pytest

from barraca.schemas.enums import FormaPagamento, StatusPedido
from barraca.schemas.pedido import ItemPedidoCreateSchemas, PedidoSchemas
from barraca.services.notificacao_service import MonitorNovosPedidos, NotificacaoService
from tests.conftest import produto_in


def pedido(id, status=StatusPedido.PENDING, mesa=1, itens=(), total="0"):
    return PedidoSchemas(
        id=id,
        table_id=mesa,
        items=[{"productId": p, "name": n, "price": preco, "quantity": q} for p, n, preco, q in itens],
        status=status,
        timestamp=datetime(2025, 1, 10, tzinfo=timezone.utc),
        total=total,
    )


def test_primeiro_snapshot_nunca_alerta():
    monitor = MonitorNovosPedidos()

    assert monitor.observar([pedido("a"), pedido("b")]) is None


def test_alerta_com_delta_de_pendentes():
    monitor = MonitorNovosPedidos()
    monitor.observar([pedido("a")])

    alerta = monitor.observar([pedido("a"), pedido("b"), pedido("c"), pedido("d", StatusPedido.DELIVERED)])

    assert alerta.delta == 2
    assert alerta.pending_count == 3
    assert alerta.message == "🔔 2 Novo(s) Pedido(s)!"


def test_sem_alerta_quando_pendentes_diminuem():
    monitor = MonitorNovosPedidos()
    monitor.observar([pedido("a"), pedido("b")])

    assert monitor.observar([pedido("a"), pedido("b", StatusPedido.PREPARING)]) is None
    assert monitor.observar([pedido("a"), pedido("b", StatusPedido.PREPARING)]) is None


def test_reiniciar_volta_a_suprimir():
    monitor = MonitorNovosPedidos()
    monitor.observar([pedido("a")])
    monitor.reiniciar()

    assert monitor.observar([pedido("a"), pedido("b")]) is None


def test_consumo_agrupa_por_produto_e_ignora_cancelados():
    pedidos = [
        pedido("a", mesa=3, itens=[("p1", "Cerveja", 15, 2)], total="30"),
        pedido("b", StatusPedido.DELIVERED, mesa=3, itens=[("p1", "Cerveja", 15, 1), ("p2", "Batata", 25, 1)], total="40"),
        pedido("c", StatusPedido.CANCELED, mesa=3, itens=[("p2", "Batata", 25, 4)], total="100"),
        pedido("d", mesa=4, itens=[("p1", "Cerveja", 15, 9)], total="135"),
    ]

    consumo = NotificacaoService.consumo(3, pedidos)

    assert consumo.total == Decimal("70.00")
    assert [p.id for p in consumo.orders] == ["a", "b"]
    itens = {i.product_id: (i.qty, i.total) for i in consumo.items}
    assert itens == {"p1": (3, Decimal("45.00")), "p2": (1, Decimal("25.00"))}


@pytest.mark.anyio
async def test_conta_da_mesa_aguardando_atendimento(ctx):
    cerveja = await ctx.produtos.save(produto_in(stock=10))
    await ctx.pedidos.create(3, [ItemPedidoCreateSchemas(product_id=cerveja.id, quantity=2)])

    conta = await ctx.notificacoes.conta_mesa(3)
    assert conta.total == Decimal("30.00")
    assert conta.aguardando_atendimento is False

    await ctx.mesas.request_close(3, FormaPagamento.PIX)

    conta = await ctx.notificacoes.conta_mesa(3)
    assert conta.aguardando_atendimento is True
    pendentes = await ctx.notificacoes.fechamentos_pendentes()
    assert [(c.table_id, c.total) for c in pendentes] == [(3, Decimal("30.00"))]


@pytest.mark.anyio
async def test_assinatura_de_alertas(ctx):
    cerveja = await ctx.produtos.save(produto_in(stock=10))
    await ctx.pedidos.create(1, [ItemPedidoCreateSchemas(product_id=cerveja.id, quantity=1)])
    snapshots, alertas = [], []
    primeiro, alertou = anyio.Event(), anyio.Event()

    def ao_receber(pedidos):
        snapshots.append(pedidos)
        primeiro.set()

    def ao_alertar(alerta):
        alertas.append(alerta)
        alertou.set()

    assinatura = ctx.notificacoes.subscribe_alerts(ao_alertar, on_orders=ao_receber)
    try:
        with anyio.fail_after(2):
            await primeiro.wait()
        assert alertas == []

        await ctx.pedidos.create(2, [ItemPedidoCreateSchemas(product_id=cerveja.id, quantity=1)])
        with anyio.fail_after(2):
            await alertou.wait()
    finally:
        await assinatura.aclose()

    assert alertas[0].delta == 1
    assert len(snapshots[-1]) == 2
    assert not assinatura.active
