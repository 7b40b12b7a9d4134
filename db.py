# db.py
import os
import psycopg
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb
from datetime import date


def get_conn():
    database_url = os.getenv("DATABASE_URL")

    if not database_url:
        raise RuntimeError("DATABASE_URL não está definido.")
    return psycopg.connect(database_url, row_factory=dict_row)

def init_db():
    ddl = """
    create table if not exists despesas (
      id bigserial primary key,
      user_id text not null,
      description text not null,
      amount numeric,                     -- null quando o usuário não informou
      category text,
      expense_date date not null,
      data_vencimento date,
      status text not null default 'pendente',
      expense_type text not null default 'Variável',
      is_recurring boolean not null default false,
      batch_id text not null,             -- um por preview confirmado
      position int not null,              -- ordem dentro do preview
      created_at timestamptz not null default now(),
      unique (batch_id, position)
    );

    create index if not exists idx_despesas_user_date on despesas(user_id, expense_date);

    create table if not exists user_context (
      user_id text primary key,
      patterns jsonb not null,
      updated_at timestamptz not null default now()
    );
    """
    with get_conn() as conn:
        with conn.cursor() as cur:
            cur.execute(ddl)
        conn.commit()


def insert_expenses(user_id: str, batch_id: str, expenses: list) -> int:
    """
    Grava as despesas de um preview confirmado, na ordem, numa transação só.
    Repetir o mesmo batch_id não duplica nada (on conflict do nothing).
    Retorna quantas linhas novas entraram.
    """
    inserted = 0
    with get_conn() as conn:
        with conn.cursor() as cur:
            for position, e in enumerate(expenses):
                cur.execute(
                    """
                    insert into despesas (
                      user_id, description, amount, category, expense_date, data_vencimento,
                      status, expense_type, is_recurring, batch_id, position
                    )
                    values (%s, %s, %s, %s, %s, %s, 'pendente', 'Variável', false, %s, %s)
                    on conflict (batch_id, position) do nothing
                    """,
                    (user_id, e.description, e.amount, e.category, e.date, e.date, batch_id, position),
                )
                inserted += cur.rowcount
        conn.commit()
    return inserted


#pega as despesas por periodo (inclusivo)
def get_expenses_by_period(user_id: str, start_date: date, end_date: date):
    sql = """
        select id, description, amount, category, expense_date, status, expense_type
        from despesas
        where user_id=%s
          and expense_date >= %s
          and expense_date <= %s
        order by expense_date asc, id asc
    """

    with get_conn() as conn:
        with conn.cursor() as cur:
            cur.execute(sql, (user_id, start_date, end_date))
            return cur.fetchall()


def load_user_context(user_id: str) -> dict | None:
    with get_conn() as conn:
        with conn.cursor() as cur:
            cur.execute("select patterns from user_context where user_id = %s", (user_id,))
            row = cur.fetchone()
    return row["patterns"] if row else None


def save_user_context(user_id: str, patterns: dict) -> None:
    with get_conn() as conn:
        with conn.cursor() as cur:
            cur.execute(
                """
                insert into user_context (user_id, patterns)
                values (%s, %s)
                on conflict (user_id)
                do update set patterns = excluded.patterns,
                              updated_at = now()
                """,
                (user_id, Jsonb(patterns)),
            )
        conn.commit()


def delete_user_data(user_id: str) -> None:
    with get_conn() as conn:
        with conn.cursor() as cur:
            cur.execute("delete from despesas where user_id = %s", (user_id,))
            cur.execute("delete from user_context where user_id = %s", (user_id,))
        conn.commit()
