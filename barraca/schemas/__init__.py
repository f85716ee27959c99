from .config import BackendConfigSchemas, BackendStatusSchemas, DiagnosticoSchemas
from .enums import Categoria, FormaPagamento, StatusMesa, StatusPedido
from .mesa import (
    ConsumoMesaSchemas,
    ContaMesaSchemas,
    FechamentoResultadoSchemas,
    ItemConsumoSchemas,
    LimpezaResultadoSchemas,
    QrCodeMesaSchemas,
    SessaoMesaSchemas,
    SolicitarFechamentoSchemas,
)
from .pedido import (
    ItemPedidoCreateSchemas,
    ItemPedidoSchemas,
    PedidoCreateSchemas,
    PedidoSchemas,
    PedidoStatusUpdateSchemas,
)
from .produto import ProdutoSaveSchemas, ProdutoSchemas
from .relatorio import (
    AlertaNovosPedidosSchemas,
    RelatorioIASchemas,
    ResumoFinanceiroSchemas,
    VendaResumoSchemas,
)
from .token import LoginSchemas, TokenSchemas
