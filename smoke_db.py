import os
import uuid
from datetime import date
from decimal import Decimal
from dotenv import load_dotenv
load_dotenv()


from db import (
    init_db, insert_expenses, get_expenses_by_period,
    load_user_context, save_user_context, delete_user_data,
)
from memory import DraftExpense
from reports import build_report

USER_ID = "smoke-999999"  # um id fake pra teste

def money(x):
    return Decimal(str(x))

def assert_eq(a, b, msg=""):
    if a != b:
        raise AssertionError(f"{msg} | esperado={b} obtido={a}")

def run():
    if not os.getenv("DATABASE_URL"):
        raise SystemExit("Faltou DATABASE_URL no ambiente.")

    init_db()
    delete_user_data(USER_ID)

    d = date(2026, 3, 10)
    batch = uuid.uuid4().hex
    drafts = [
        DraftExpense("mercado", 100.0, d, "Alimentação"),
        DraftExpense("uber", 50.0, d, "Transporte"),
    ]

    # grava o preview
    n = insert_expenses(USER_ID, batch, drafts)
    assert_eq(n, 2, "Linhas gravadas")

    # repetir a confirmação não duplica
    n = insert_expenses(USER_ID, batch, drafts)
    assert_eq(n, 0, "Reenvio do mesmo lote")

    rows = get_expenses_by_period(USER_ID, date(2026, 3, 1), date(2026, 3, 31))
    assert_eq(len(rows), 2, "Linhas no período")
    assert_eq(rows[0]["status"], "pendente", "Status")
    assert_eq(sum(r["amount"] for r in rows), money("150"), "Soma")

    report = build_report(rows)
    assert_eq(report.total, 150.0, "Total do relatório")

    # contexto
    save_user_context(USER_ID, {"interactions": 3, "totalExpenses": 150, "topCategories": {"Alimentação": 1}})
    ctx = load_user_context(USER_ID)
    assert_eq(ctx["interactions"], 3, "Contexto salvo")

    delete_user_data(USER_ID)
    print("✅ SMOKE DB OK")

if __name__ == "__main__":
    run()
