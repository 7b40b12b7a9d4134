import os
import re
import calendar
from datetime import datetime, date, timedelta
from zoneinfo import ZoneInfo
from dateutil.relativedelta import relativedelta, MO, TU, WE, TH, FR, SA, SU


# ---------------- timezone helpers ----------------

def _tz():
    return ZoneInfo(os.getenv("REPORT_TIMEZONE", "America/Sao_Paulo"))

def now_tz() -> datetime:
    return datetime.now(_tz())

def today_tz() -> date:
    return now_tz().date()


# ---------------- vocabulário ----------------

MONTHS_PT = {
    "janeiro": 1, "fevereiro": 2, "marco": 3, "abril": 4,
    "maio": 5, "junho": 6, "julho": 7, "agosto": 8,
    "setembro": 9, "outubro": 10, "novembro": 11, "dezembro": 12,
}

# aceita com e sem acento
MONTH_RE = r"(janeiro|fevereiro|mar[cç]o|abril|maio|junho|julho|agosto|setembro|outubro|novembro|dezembro)"

WEEKDAYS_PT = [
    (r"segunda(?:-feira)?", MO),
    (r"ter[cç]a(?:-feira)?", TU),
    (r"quarta(?:-feira)?", WE),
    (r"quinta(?:-feira)?", TH),
    (r"sexta(?:-feira)?", FR),
    (r"s[aá]bado", SA),
    (r"domingo", SU),
]

# ordem importa: "anteontem" antes de "ontem"
_KEYWORDS = [
    (r"\banteontem\b", -2),
    (r"\bontem\b", -1),
    (r"\bhoje\b", 0),
    (r"\bamanh[ãa]\b", 1),
]

_NUMERIC_RE = re.compile(r"\b(\d{1,2})[\/\-](\d{1,2})(?:[\/\-](\d{2,4}))?\b")
_DIA_DE_MES_RE = re.compile(rf"\bdia\s+(\d{{1,2}})\s+de\s+{MONTH_RE}\b")
_SEMANA_PASSADA_RE = re.compile(r"\bsemana\s+passada\b")


def month_index(name: str) -> int | None:
    """Nome do mês em português (com ou sem acento) -> 1..12."""
    key = (name or "").strip().lower().replace("ç", "c")
    return MONTHS_PT.get(key)


def ref_date(now) -> date:
    if now is None:
        return today_tz()
    if isinstance(now, datetime):
        return now.date()
    return now


# ---------------- parsing ----------------

def _find_date(t: str, ref: date):
    """
    Procura uma expressão de data em `t` (já em minúsculas).
    Retorna (date, (inicio, fim)) do trecho reconhecido, ou (None, None).
    """
    # 1) hoje / ontem / amanhã
    for pattern, offset in _KEYWORDS:
        m = re.search(pattern, t)
        if m:
            return ref + timedelta(days=offset), m.span()

    # 2) dd/mm(/yyyy)?
    m = _NUMERIC_RE.search(t)
    if m:
        dd, mm, yy_raw = int(m.group(1)), int(m.group(2)), m.group(3)
        if yy_raw:
            yy = int(yy_raw)
            if yy < 100:
                yy += 2000
        else:
            yy = ref.year
        try:
            return date(yy, mm, dd), m.span()
        except ValueError:
            return None, None

    # 3) "dia 5 de março"
    m = _DIA_DE_MES_RE.search(t)
    if m:
        try:
            return date(ref.year, month_index(m.group(2)), int(m.group(1))), m.span()
        except ValueError:
            return None, None

    # 4) "sexta passada", "sábado passado"
    for pattern, weekday in WEEKDAYS_PT:
        m = re.search(rf"\b{pattern}\s+passad[ao]\b", t)
        if m:
            return ref + relativedelta(days=-1, weekday=weekday(-1)), m.span()

    m = _SEMANA_PASSADA_RE.search(t)
    if m:
        return ref - timedelta(days=7), m.span()

    return None, None


def resolve_date(text: str, now=None) -> date | None:
    """
    Converte uma expressão de data em uma data concreta, relativa a `now`.

    Aceita:
      - hoje, ontem, anteontem, amanhã
      - dd/mm, dd/mm/yyyy, dd-mm-yy
      - "dia 5 de março"
      - "<dia da semana> passada", "semana passada"

    Se nada for reconhecido retorna None (quem chama usa "hoje").
    """
    d, _span = _find_date((text or "").lower(), ref_date(now))
    return d


def extract_date_from_text(text: str, now=None) -> tuple[date | None, str]:
    """
    Procura uma data no texto e retorna (data, texto_sem_a_data).
    Se não achar data, retorna (None, texto_original).
    """
    original = text or ""
    d, span = _find_date(original.lower(), ref_date(now))
    if d is None:
        return None, original

    cleaned = original[:span[0]] + " " + original[span[1]:]
    return d, " ".join(cleaned.split())


def parse_date_str(s: str) -> date:
    s = (s or "").strip()
    for fmt in ("%Y-%m-%d", "%d/%m/%Y"):
        try:
            return datetime.strptime(s, fmt).date()
        except ValueError:
            pass
    raise ValueError("Data inválida. Use YYYY-MM-DD ou DD/MM/YYYY.")


def fmt_br(d) -> str:
    if not d:
        return ""
    # aceita date ou datetime
    if isinstance(d, datetime):
        d = d.date()
    return d.strftime("%d/%m/%y")


# ---------------- ranges ----------------

def month_range(year: int, month: int) -> tuple[date, date]:
    """(primeiro_dia, ultimo_dia) inclusivo do mês."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def previous_month(ref: date) -> tuple[int, int]:
    prev = ref.replace(day=1) - relativedelta(months=1)
    return prev.year, prev.month
