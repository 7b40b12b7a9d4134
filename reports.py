# reports.py
"""
Agregação do relatório mensal a partir dos lançamentos confirmados.
"""

from dataclasses import dataclass, field
from datetime import date

from errors import InsufficientData
from intents import detect_report_month
from utils_date import month_range, ref_date

MESES_PT = {
    1: "janeiro", 2: "fevereiro", 3: "março", 4: "abril",
    5: "maio", 6: "junho", 7: "julho", 8: "agosto",
    9: "setembro", 10: "outubro", 11: "novembro", 12: "dezembro",
}


@dataclass(frozen=True)
class Report:
    total: float
    by_category: dict = field(default_factory=dict)
    start: date | None = None
    end: date | None = None
    label: str = "do mês atual"

    def sorted_categories(self) -> list[tuple[str, float]]:
        return sorted(self.by_category.items(), key=lambda kv: kv[1], reverse=True)

    def top_category(self) -> tuple[str, float] | None:
        ranked = self.sorted_categories()
        return ranked[0] if ranked else None


def report_period(text: str, now=None) -> tuple[date, date, str]:
    """
    Retorna (start, end, label) inclusivo: o mês citado na mensagem
    ou o mês atual.
    """
    today = ref_date(now)
    asked = detect_report_month(text, today)
    if asked is None:
        start, end = month_range(today.year, today.month)
        return start, end, "do mês atual"

    year, month = asked
    start, end = month_range(year, month)
    return start, end, f"de {MESES_PT[month]}"


def _row_value(row, key):
    if isinstance(row, dict):
        return row.get(key)
    return getattr(row, key, None)


def build_report(rows, start: date | None = None, end: date | None = None, label: str = "do mês atual") -> Report:
    """
    Soma o total e agrupa por categoria. Valor ausente conta como zero.
    Sem nenhum registro levanta InsufficientData (não é um relatório zerado).
    """
    rows = list(rows or [])
    if not rows:
        raise InsufficientData(label)

    total = 0.0
    by_category = {}
    for r in rows:
        amount = float(_row_value(r, "amount") or 0)
        cat = _row_value(r, "category") or "Outros"
        total += amount
        by_category[cat] = by_category.get(cat, 0.0) + amount

    return Report(total=total, by_category=by_category, start=start, end=end, label=label)
