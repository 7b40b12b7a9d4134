# ai_router.py
"""
Colaborador de linguagem natural (OpenAI). Usado só na conversa livre e como
último recurso quando a extração local não acha nenhuma despesa. A resposta
da IA é tratada como entrada não confiável: passa pelo schema abaixo e depois
pelo classificador de categoria / resolvedor de datas do próprio bot.
"""

import json
import logging
import os
import re
from typing import Literal, Optional

from openai import OpenAI
from pydantic import BaseModel, Field, ValidationError

from errors import MalformedCollaboratorResponse

logger = logging.getLogger(__name__)

MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")

_client = None


def get_client() -> OpenAI:
    # criado sob demanda: sem OPENAI_API_KEY o import não pode quebrar
    global _client
    if _client is None:
        _client = OpenAI(timeout=float(os.getenv("ORACULO_TIMEOUT_SECONDS", "15")))
    return _client


ORACLE_CONVERSATION_PROMPT = """
Você é o ORÁCULO FINANCEIRO 🔮

Você conversa sobre dinheiro de forma leve, humana e próxima,
como um bom amigo que escuta, acolhe e incentiva.

Regras:
- Respostas curtas (máx. 2 a 3 linhas), tom leve, positivo e animado.
- Use no máximo 1 emoji e faça no máximo UMA pergunta por resposta.
- Desabafo: valide o sentimento primeiro e faça uma pergunta leve.
- Pedido de orientação: sugira apenas UM pequeno passo possível.
- Nunca traga relatórios, números, julgamentos ou aulas.
- Responda sempre em português do Brasil.
"""

EXTRACTION_PROMPT = """
Você extrai UMA despesa de uma mensagem em português do Brasil.
Responda SOMENTE com JSON válido, sem texto extra, neste formato:
{"acao": "registrar" | "perguntar" | "conversar",
 "dados": {"descricao": str|null, "valor": number|null, "categoria": str|null, "data": "YYYY-MM-DD"|null},
 "mensagem_usuario": str|null}
- "registrar": a mensagem descreve um gasto (preencha o que souber, null no resto).
- "perguntar": falta algo essencial; escreva a pergunta em mensagem_usuario.
- "conversar": não é um gasto.
Nunca invente valores.
"""


class SuggestionData(BaseModel):
    descricao: Optional[str] = None
    valor: Optional[float] = Field(default=None, ge=0)
    categoria: Optional[str] = None
    data: Optional[str] = None


class OracleSuggestion(BaseModel):
    acao: Literal["registrar", "perguntar", "conversar"]
    dados: Optional[SuggestionData] = None
    mensagem_usuario: Optional[str] = None


def parse_suggestion(raw) -> OracleSuggestion:
    """
    Valida a resposta da IA. Aceita string JSON (com ou sem bloco ```json)
    ou dict. Qualquer coisa fora do schema vira MalformedCollaboratorResponse.
    """
    if raw is None:
        raise MalformedCollaboratorResponse("nl_extractor", None)

    if isinstance(raw, str):
        text = raw.strip()
        text = re.sub(r"^```(?:json)?\s*|\s*```$", "", text)
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as e:
            raise MalformedCollaboratorResponse("nl_extractor", e) from e

    if not isinstance(raw, dict):
        raise MalformedCollaboratorResponse("nl_extractor", None)

    try:
        return OracleSuggestion.model_validate(raw)
    except ValidationError as e:
        raise MalformedCollaboratorResponse("nl_extractor", e) from e


def conversa_livre(message: str, context: str = "") -> str | None:
    # se não tiver chave, não tenta IA
    if not os.getenv("OPENAI_API_KEY"):
        return None

    instructions = ORACLE_CONVERSATION_PROMPT
    if context:
        instructions += f"\nContexto do usuário (não cite números): {context}\n"

    resp = get_client().responses.create(
        model=MODEL,
        instructions=instructions,
        input=message,
        temperature=0.7,
        max_output_tokens=150,
    )
    return (getattr(resp, "output_text", None) or "").strip() or None


def extract_suggestion(message: str, context: str = "") -> str | None:
    if not os.getenv("OPENAI_API_KEY"):
        return None

    instructions = EXTRACTION_PROMPT
    if context:
        instructions += f"\nHoje é {context}.\n"

    resp = get_client().responses.create(
        model=MODEL,
        instructions=instructions,
        input=message,
        temperature=0,
    )
    raw = getattr(resp, "output_text", None)
    logger.debug("sugestão da IA: %r", raw)
    return raw
