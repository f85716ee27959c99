"""Erros de domínio da barraca.

Os serviços levantam estas exceções; os endpoints traduzem para HTTP.
"""


class BarracaError(Exception):
    """Base para todos os erros de domínio."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(BarracaError):
    """Entrada inválida detectada antes de qualquer chamada ao banco."""


class BackendError(BarracaError):
    """Falha de transporte ou permissão na camada de persistência."""


class NotFoundError(BarracaError):
    """Registro não existe mais (indica dessincronização)."""

    def __init__(self, kind: str, id: str):
        super().__init__(f"{kind}/{id} não encontrado")
        self.kind = kind
        self.id = id
