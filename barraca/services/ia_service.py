# barraca/services/ia_service.py
import json
import logging
from typing import List, Optional

import openai

from barraca.schemas.relatorio import VendaResumoSchemas

logger = logging.getLogger(__name__)

MENSAGEM_SEM_CONFIGURACAO = (
    "⚠️ Configuração de IA incompleta. Defina a variável de ambiente OPENAI_API_KEY "
    "para habilitar o relatório inteligente."
)
MENSAGEM_ERRO = "Erro ao gerar relatório inteligente. Verifique a conexão ou a chave de API."

PROMPT = """
Atue como um gerente de restaurante experiente. Analise os dados de vendas abaixo de uma barraca de praia e forneça um resumo executivo.

Dados de Vendas: {dados}

O relatório deve conter:
1. Resumo do faturamento total.
2. Item mais vendido.
3. Sugestão para melhorar o estoque ou vendas baseada nos dados.
4. Use formatação Markdown. Seja conciso e profissional.
"""


class IAService:
    """Gera o relatório narrativo de vendas. Nunca levanta exceção para quem chama."""

    def __init__(self, api_key: Optional[str], model: str, client: Optional[openai.AsyncOpenAI] = None):
        self.model = model
        self.client = client
        if self.client is None and api_key:
            self.client = openai.AsyncOpenAI(api_key=api_key)

    async def gerar_relatorio(self, vendas: List[VendaResumoSchemas]) -> str:
        if self.client is None:
            logger.warning("OPENAI_API_KEY não configurada; relatório inteligente indisponível")
            return MENSAGEM_SEM_CONFIGURACAO

        dados = json.dumps([v.model_dump() for v in vendas], ensure_ascii=False)
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": PROMPT.format(dados=dados)}],
            )
        except openai.OpenAIError as e:
            logger.error(f"Erro ao chamar a OpenAI: {e}")
            return MENSAGEM_ERRO
        return response.choices[0].message.content or ""
