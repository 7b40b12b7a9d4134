# memory.py
"""
Memória em tempo de execução: uma sessão por usuário, criada no primeiro
contato e perdida quando o processo reinicia (os padrões de uso podem ser
recarregados do context store).
"""

import asyncio
import uuid
from dataclasses import dataclass, field
from datetime import date

IDLE = "idle"
PREVIEW = "preview"
POST_REPORT = "post_report"


@dataclass
class DraftExpense:
    description: str
    amount: float | None
    date: date
    category: str | None = None


@dataclass
class UsagePatterns:
    interactions: int = 0
    total_expenses: float = 0.0
    top_categories: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "interactions": self.interactions,
            "totalExpenses": self.total_expenses,
            "topCategories": dict(self.top_categories),
        }

    @classmethod
    def from_dict(cls, data: dict | None) -> "UsagePatterns":
        data = data or {}
        return cls(
            interactions=int(data.get("interactions") or 0),
            total_expenses=float(data.get("totalExpenses") or 0),
            top_categories={str(k): int(v) for k, v in (data.get("topCategories") or {}).items()},
        )


@dataclass
class UserSession:
    user_id: str
    state: str = IDLE
    pending_expenses: list = field(default_factory=list)
    last_report: object = None
    patterns: UsagePatterns = field(default_factory=UsagePatterns)
    batch_id: str | None = None

    def clear_pending(self):
        self.pending_expenses = []
        self.batch_id = None
        self.state = IDLE


# ---------------- acumulador de rascunhos ----------------

def merge_fields(draft: DraftExpense, fields: dict) -> DraftExpense:
    """
    Último valor não nulo vence: um campo presente sobrescreve, um campo
    ausente ou None nunca apaga o que já estava no rascunho.
    """
    for name in ("description", "amount", "category", "date"):
        value = fields.get(name)
        if value is None or value == "":
            continue
        setattr(draft, name, value)
    return draft


def replace_drafts(session: UserSession, drafts: list) -> None:
    """Extração completa (lote): substitui toda a lista pendente."""
    if not drafts:
        raise ValueError("lote vazio")
    session.pending_expenses = list(drafts)
    session.batch_id = uuid.uuid4().hex
    session.state = PREVIEW


def merge_clarification(session: UserSession, fields: dict) -> bool:
    """
    Esclarecimento de um campo em outro turno: funde no único rascunho
    pendente. Com zero ou vários rascunhos não faz nada e retorna False.
    """
    if session.state != PREVIEW or len(session.pending_expenses) != 1:
        return False
    if not any(v is not None for v in fields.values()):
        return False
    merge_fields(session.pending_expenses[0], fields)
    return True


# ---------------- padrões de uso ----------------

def register_interaction(session: UserSession) -> None:
    session.patterns.interactions += 1


def update_patterns(session: UserSession, expenses: list) -> None:
    """Chamar SOMENTE quando o usuário confirma os registros."""
    for e in expenses:
        session.patterns.total_expenses += e.amount or 0
        cat = e.category or "Outros"
        session.patterns.top_categories[cat] = session.patterns.top_categories.get(cat, 0) + 1


def infer_user_profile(patterns: UsagePatterns) -> str:
    categories_count = len(patterns.top_categories)

    if patterns.total_expenses < 500 and patterns.interactions > 5:
        return "economico"
    if categories_count >= 4 and patterns.interactions < 5:
        return "impulsivo"
    if patterns.interactions >= 6 and patterns.total_expenses < 1000:
        return "cauteloso"
    return "neutro"


# ---------------- store ----------------

class SessionStore:
    """
    Sessões por user_id, com um lock por usuário. Quem processa uma mensagem
    segura o lock do usuário do começo ao fim do turno.
    """

    def __init__(self):
        self._sessions: dict[str, UserSession] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def lock(self, user_id: str) -> asyncio.Lock:
        return self._locks.setdefault(user_id, asyncio.Lock())

    def get(self, user_id: str) -> UserSession | None:
        return self._sessions.get(user_id)

    def create(self, user_id: str, patterns: UsagePatterns | None = None) -> UserSession:
        session = UserSession(user_id=user_id, patterns=patterns or UsagePatterns())
        self._sessions[user_id] = session
        return session

    def __contains__(self, user_id) -> bool:
        return user_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
