from datetime import date

import pytest

from memory import (
    DraftExpense, UserSession, UsagePatterns, SessionStore,
    IDLE, PREVIEW,
    merge_fields, replace_drafts, merge_clarification,
    register_interaction, update_patterns, infer_user_profile,
)

D = date(2026, 3, 20)


def _draft(desc="mercado", amount=45.0, cat="Alimentação"):
    return DraftExpense(description=desc, amount=amount, date=D, category=cat)


def test_merge_fields_ultimo_nao_nulo_vence():
    d = _draft(amount=45.0)
    merge_fields(d, {"amount": None, "category": None, "description": ""})
    assert (d.description, d.amount, d.category) == ("mercado", 45.0, "Alimentação")

    merge_fields(d, {"amount": 50.0, "date": date(2026, 3, 1)})
    assert d.amount == 50.0
    assert d.date == date(2026, 3, 1)


def test_lote_substitui_lista_pendente():
    s = UserSession(user_id="u1")
    replace_drafts(s, [_draft("a"), _draft("b")])
    first_batch = s.batch_id
    assert s.state == PREVIEW

    replace_drafts(s, [_draft("c")])
    assert [d.description for d in s.pending_expenses] == ["c"]
    assert s.batch_id != first_batch


def test_lote_vazio_nao_e_aceito():
    with pytest.raises(ValueError):
        replace_drafts(UserSession(user_id="u1"), [])


def test_esclarecimento_funde_no_unico_rascunho():
    s = UserSession(user_id="u1")
    replace_drafts(s, [_draft("aluguel", None, "Moradia")])
    assert merge_clarification(s, {"amount": 1200.0, "date": None})
    assert s.pending_expenses[0].amount == 1200.0
    assert s.pending_expenses[0].date == D


def test_esclarecimento_recusado_com_varios_rascunhos():
    s = UserSession(user_id="u1")
    replace_drafts(s, [_draft("a", None), _draft("b", None)])
    assert not merge_clarification(s, {"amount": 10.0})
    assert all(d.amount is None for d in s.pending_expenses)


def test_esclarecimento_recusado_fora_do_preview():
    s = UserSession(user_id="u1")
    assert not merge_clarification(s, {"amount": 10.0})


def test_clear_pending_volta_para_idle():
    s = UserSession(user_id="u1")
    replace_drafts(s, [_draft()])
    s.clear_pending()
    assert s.state == IDLE
    assert s.pending_expenses == []
    assert s.batch_id is None


def test_padroes():
    s = UserSession(user_id="u1")
    register_interaction(s)
    update_patterns(s, [_draft("mercado", 45.0), _draft("uber", 30.0, "Transporte"), _draft("x", None, None)])
    assert s.patterns.interactions == 1
    assert s.patterns.total_expenses == 75.0
    assert s.patterns.top_categories == {"Alimentação": 1, "Transporte": 1, "Outros": 1}


def test_patterns_round_trip_do_contexto():
    p = UsagePatterns(interactions=7, total_expenses=300.0, top_categories={"Lazer": 2})
    assert UsagePatterns.from_dict(p.to_dict()) == p
    assert UsagePatterns.from_dict(None) == UsagePatterns()


@pytest.mark.parametrize("patterns, profile", [
    (UsagePatterns(interactions=6, total_expenses=100), "economico"),
    (UsagePatterns(interactions=2, total_expenses=900,
                   top_categories={"A": 1, "B": 1, "C": 1, "D": 1}), "impulsivo"),
    (UsagePatterns(interactions=8, total_expenses=800), "cauteloso"),
    (UsagePatterns(interactions=1, total_expenses=50), "neutro"),
])
def test_infer_user_profile(patterns, profile):
    assert infer_user_profile(patterns) == profile


def test_session_store_um_lock_por_usuario():
    store = SessionStore()
    assert store.lock("u1") is store.lock("u1")
    assert store.lock("u1") is not store.lock("u2")
    store.create("u1")
    assert "u1" in store and len(store) == 1
