# intents.py
"""
Classificador de intenção. As regras são avaliadas em cascata e a primeira
que bate decide: confirmação/rejeição vêm antes de tudo porque um "sim" solto
no preview não tem número nem verbo de gasto.
"""

import re

from memory import PREVIEW
from utils_date import MONTH_RE, month_index, previous_month, ref_date
from utils_text import normalize_text, contains_word, has_number

CONFIRM = "confirm"
REJECT = "reject"
REPORT_REQUEST = "report_request"
REPORT_FOLLOWUP = "report_followup"
EXPENSE_DECLARATION = "expense_declaration"
FREE_CHAT = "free_chat"

CONFIRM_WORDS = {"sim", "ok", "confirmar", "pode", "isso"}
REJECT_WORDS = {"nao", "cancelar", "corrigir"}  # "não" chega aqui sem acento

REPORT_TRIGGERS = ["relatorio", "diagnostico", "analise", "gastei com", "resumo"]

FOLLOWUP_PHRASES = [
    "o que voce acha", "oq vc acha", "isso e bom", "isso e ruim",
    "preocupante", "ok", "entendi",
]

EXPENSE_VERBS = ["gastei", "paguei", "comprei", "abasteci", "fatura", "cartao"]


def classify_intent(text: str, state: str, has_last_report: bool) -> str:
    t = normalize_text(text)

    if state == PREVIEW and t in CONFIRM_WORDS:
        return CONFIRM

    if state == PREVIEW and t in REJECT_WORDS:
        return REJECT

    if any(contains_word(t, p) for p in REPORT_TRIGGERS):
        return REPORT_REQUEST

    if has_last_report and any(contains_word(t, p) for p in FOLLOWUP_PHRASES):
        return REPORT_FOLLOWUP

    if has_number(text) or any(contains_word(t, v) for v in EXPENSE_VERBS):
        return EXPENSE_DECLARATION

    return FREE_CHAT


def detect_report_month(text: str, now=None) -> tuple[int, int] | None:
    """
    (ano, mês) pedido no relatório: nome do mês (no ano corrente) ou
    "mês passado". Sem menção -> None (mês atual).
    """
    today = ref_date(now)
    t = (text or "").lower()

    if re.search(r"\bm[eê]s\s+passado\b", t):
        return previous_month(today)

    m = re.search(rf"\b{MONTH_RE}\b", t)
    if m:
        return today.year, month_index(m.group(1))
    return None
