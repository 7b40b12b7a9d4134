import os
import sys
import time
import uuid
from datetime import date

import pytest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))

from oraculo import Oraculo

TODAY = date(2026, 3, 20)


class FakeLedger:
    """Ledger em memória com a mesma interface do db.py."""

    def __init__(self, delay: float = 0.0, fail: bool = False):
        self.rows = []
        self.batches = set()
        self.insert_calls = 0
        self.delay = delay
        self.fail = fail

    def insert_expenses(self, user_id, batch_id, expenses):
        self.insert_calls += 1
        if self.delay:
            time.sleep(self.delay)
        if self.fail:
            raise RuntimeError("postgres fora do ar")
        if batch_id in self.batches:
            return 0
        self.batches.add(batch_id)
        for e in expenses:
            self.rows.append({
                "user_id": user_id,
                "description": e.description,
                "amount": e.amount,
                "category": e.category,
                "expense_date": e.date,
                "status": "pendente",
                "expense_type": "Variável",
            })
        return len(expenses)

    def get_expenses_by_period(self, user_id, start, end):
        if self.fail:
            raise RuntimeError("postgres fora do ar")
        return [
            r for r in self.rows
            if r["user_id"] == user_id and start <= r["expense_date"] <= end
        ]


class FakeNL:
    def __init__(self, chat_reply="Conta mais pra mim 🙂", suggestion=None, fail=False, delay=0.0):
        self.chat_reply = chat_reply
        self.suggestion = suggestion
        self.fail = fail
        self.delay = delay
        self.chat_calls = []
        self.extract_calls = []

    def conversa_livre(self, message, context=""):
        self.chat_calls.append((message, context))
        if self.delay:
            time.sleep(self.delay)
        if self.fail:
            raise RuntimeError("openai fora do ar")
        return self.chat_reply

    def extract_suggestion(self, message, context=""):
        self.extract_calls.append((message, context))
        if self.fail:
            raise RuntimeError("openai fora do ar")
        return self.suggestion


class FakeContextStore:
    def __init__(self, saved=None):
        self.saved = dict(saved or {})

    def load_user_context(self, user_id):
        return self.saved.get(user_id)

    def save_user_context(self, user_id, patterns):
        self.saved[user_id] = patterns


@pytest.fixture()
def ledger():
    return FakeLedger()


@pytest.fixture()
def nl():
    return FakeNL()


@pytest.fixture()
def context_store():
    return FakeContextStore()


@pytest.fixture()
def oraculo(ledger, nl, context_store):
    return Oraculo(ledger=ledger, nl=nl, context_store=context_store, today=lambda: TODAY, timeout=2)


# ---------------- banco real (opcional) ----------------

@pytest.fixture(scope="session")
def _db_schema():
    if not os.getenv("DATABASE_URL"):
        pytest.skip("DATABASE_URL não definido; pulando testes de banco.")
    from db import init_db
    init_db()


@pytest.fixture()
def user_id(_db_schema):
    from db import delete_user_data
    uid = f"test-{uuid.uuid4().hex[:12]}"
    yield uid
    # limpa somente dados deste user_id (seguro)
    delete_user_data(uid)
