import enum


class Categoria(str, enum.Enum):
    BEBIDAS = "Bebidas"
    TIRA_GOSTO = "Tira Gostos"
    REFEICOES = "Refeições"
    SOBREMESAS = "Sobremesas"


class FormaPagamento(str, enum.Enum):
    DINHEIRO = "Dinheiro"
    CARTAO_CREDITO = "Cartão de Crédito"
    CARTAO_DEBITO = "Cartão de Débito"
    PIX = "PIX"


class StatusPedido(str, enum.Enum):
    PENDING = "Pendente"
    PREPARING = "Em Preparo"
    DELIVERED = "Entregue"
    CANCELED = "Cancelado"
    PAID = "Pago/Finalizado"  # Só o fechamento da mesa aplica este status


class StatusMesa(str, enum.Enum):
    OPEN = "Aberta"
    CLOSING_REQUESTED = "Fechamento Solicitado"
    CLOSED = "Fechada"


# Fluxo sugerido para a cozinha. O serviço não bloqueia outras transições;
# a interface só oferece estas.
TRANSICOES_SUGERIDAS = {
    StatusPedido.PENDING: (StatusPedido.PREPARING, StatusPedido.CANCELED),
    StatusPedido.PREPARING: (StatusPedido.DELIVERED, StatusPedido.CANCELED),
    StatusPedido.DELIVERED: (),
    StatusPedido.CANCELED: (),
    StatusPedido.PAID: (),
}

# Pedidos que já não entram no consumo ativo da mesa
STATUS_FORA_DO_CONSUMO = (StatusPedido.PAID, StatusPedido.CANCELED)
