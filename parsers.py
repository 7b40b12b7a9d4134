# parsers.py
"""
Parsers naturais: quebram uma mensagem em despesas (segmentos com data,
descrição e valor).
"""

import re
from dataclasses import dataclass
from datetime import date

from utils_date import extract_date_from_text, ref_date
from utils_text import normalize_text, parse_amount_token, classify_category
from memory import DraftExpense

# vírgula entre dígitos é decimal ("12,50"), não separador
SEGMENT_SPLIT_RE = re.compile(r"(?<!\d),|,(?!\d)|;|\n|\s+e\s+", re.IGNORECASE)

# palavras que não descrevem a despesa
FILLER_WORDS = {
    "gastei", "gasto", "paguei", "comprei", "debitei", "foi", "era", "deu", "custou",
    "valor", "total", "reais", "real", "r",
    "no", "na", "nos", "nas", "em", "de", "do", "da", "dos", "das", "pra", "para", "por",
    "um", "uma", "com", "ao", "aos", "o", "a", "os", "as", "mais",
}


@dataclass
class Segment:
    text: str
    date: date


@dataclass
class Item:
    description: str
    amount: float | None


def _is_filler(token: str) -> bool:
    return normalize_text(token) in FILLER_WORDS or token.lower() == "r$"


def _trim_fillers(tokens: list[str]) -> list[str]:
    start, end = 0, len(tokens)
    while start < end and _is_filler(tokens[start]):
        start += 1
    while end > start and _is_filler(tokens[end - 1]):
        end -= 1
    return tokens[start:end]


def segment_by_time(text: str, now=None) -> list[Segment]:
    """
    Quebra a mensagem em vírgulas e "e". A data dita num segmento vale para
    os seguintes; os segmentos antes da primeira data usam essa primeira data.
    Sem nenhuma data na mensagem, tudo fica com hoje.
    """
    today = ref_date(now)
    parts = [p.strip() for p in SEGMENT_SPLIT_RE.split(text or "")]
    parts = [p for p in parts if p]

    found = []
    for p in parts:
        d, cleaned = extract_date_from_text(p, today)
        found.append((cleaned, d))

    first_date = next((d for _c, d in found if d is not None), None)
    current = first_date or today

    segments = []
    for cleaned, d in found:
        if d is not None:
            current = d
        segments.append(Segment(text=cleaned, date=current))
    return segments


def extract_item(segment_text: str) -> Item:
    """
    Primeiro número do segmento vira o valor; as palavras antes dele viram a
    descrição. Se antes do número só houver verbo/preposição ("gastei 45 no
    mercado"), usa as palavras depois dele, desde que tenham alguma letra
    ("99 15" não vira descrição "15").
    """
    tokens = (segment_text or "").split()

    for i, tok in enumerate(tokens):
        amount = parse_amount_token(tok.rstrip(".!?:"))
        if amount is None:
            continue
        desc = _trim_fillers(tokens[:i])
        if not desc:
            after = _trim_fillers(tokens[i + 1:])
            if any(c.isalpha() for t in after for c in t):
                desc = after
        return Item(description=" ".join(desc), amount=amount)

    return Item(description=" ".join(_trim_fillers(tokens)), amount=None)


def extract_expenses(text: str, now=None) -> list[DraftExpense]:
    expenses = []
    for seg in segment_by_time(text, now):
        item = extract_item(seg.text)
        if not item.description:
            continue
        expenses.append(DraftExpense(
            description=item.description,
            amount=item.amount,
            date=seg.date,
            category=classify_category(item.description),
        ))
    return expenses


def parse_clarification(text: str, now=None) -> dict | None:
    """
    Resposta curta que só completa campos ("45", "foi ontem", "R$ 30 hoje").
    Retorna {"amount": ..., "date": ...} ou None se a mensagem descreve algo.
    """
    d, rest = extract_date_from_text(text or "", ref_date(now))
    item = extract_item(rest)
    if item.description:
        return None
    if item.amount is None and d is None:
        return None
    return {"amount": item.amount, "date": d}
