# replies.py
"""
Textos do oráculo. Só formata: não decide nada e não mexe na sessão.
"""

from memory import infer_user_profile
from utils_date import fmt_br
from utils_text import fmt_brl, fmt_pct

ORACLE = {
    "askClarify": "🔮 Minha visão ficou turva… pode me dar mais detalhes?",
    "askConfirm": "Se minha leitura estiver correta, diga **\"sim\"**.",
    "saved": "📜 As despesas foram seladas no livro financeiro.",
    "nothingFound": "🌫️ Não consegui enxergar nenhuma despesa nessa mensagem.",
    "rejected": "Tudo bem 🙂 Me diga novamente como foi que eu ajusto.",
    "insufficientData": "📭 Ainda não há registros suficientes para esse período.",
    "collaboratorFailure": "🌪️ As visões se romperam por um instante… tente de novo daqui a pouco.",
    "saveFailed": "🌪️ Não consegui selar as despesas agora. Elas continuam aqui: diga **\"sim\"** para tentar de novo.",
    "chatFallback": "🔮 Vamos olhar isso com calma. Pode me contar um pouco mais?",
}

PROFILE_INTRO = {
    "economico": "💡 Dá pra perceber que você costuma cuidar bem do dinheiro.",
    "impulsivo": "⚡ Parece que suas decisões são bem rápidas, e isso tem seu lado bom.",
    "cauteloso": "🧘 Você costuma pensar antes de agir, isso ajuda muito.",
}


def _fmt_amount(amount) -> str:
    if amount is None:
        return "Valor não informado"
    return fmt_brl(float(amount))


def render_preview(drafts: list) -> str:
    lines = ["🧾 Posso registrar assim?", ""]
    for i, e in enumerate(drafts, start=1):
        lines.append(
            f"{i}) {e.description} — {_fmt_amount(e.amount)} — {e.category or 'Outros'} — {fmt_br(e.date)}"
        )
    lines.append("")
    lines.append(ORACLE["askConfirm"])
    return "\n".join(lines)


def render_pending_reminder(drafts: list) -> str:
    return render_preview(drafts) + "\n\nOu diga **\"não\"** para cancelar."


def render_report(report) -> str:
    lines = [
        f"📊 **Relatório {report.label}**",
        "",
        f"💰 Total gasto: **{fmt_brl(report.total)}**",
        "",
    ]
    for cat, val in report.sorted_categories():
        lines.append(f"• {cat}: {fmt_pct(val, report.total)} ({fmt_brl(val)})")
    lines.append("")
    lines.append("🔮 Quer que eu analise isso com mais profundidade?")
    return "\n".join(lines)


def render_followup(report) -> str:
    top = report.top_category()
    if top is None:
        return ORACLE["insufficientData"]
    cat, val = top
    return (
        "🔮 Observando seus gastos...\n\n"
        f"📌 Você gastou mais em **{cat}** ({fmt_pct(val, report.total)} do total).\n"
        "💭 Isso representa uma parte significativa do seu orçamento.\n\n"
        "Se quiser, posso te ajudar a:\n"
        "• reduzir gastos\n• planejar o próximo mês\n• analisar outra categoria"
    )


def render_post_report(report) -> str:
    """Reflexão curta para uma conversa qualquer logo depois do relatório."""
    top = report.top_category()
    if top is None:
        return ORACLE["insufficientData"]
    cat, val = top
    return (
        f"🔍 Olhando para esse período, **{cat}** teve o maior peso ({fmt_pct(val, report.total)}).\n\n"
        "Quer conversar sobre isso ou prefere pensar em um pequeno ajuste?"
    )


def decorate_free_chat(reply: str, patterns) -> str:
    """Comentário comportamental em volta da resposta da conversa livre."""
    intro = PROFILE_INTRO.get(infer_user_profile(patterns))
    if intro:
        reply = f"{intro}\n\n{reply}"

    if patterns.interactions == 1:
        reply = f"🔮 Primeira vez por aqui? Fica à vontade.\n\n{reply}"
    if patterns.interactions > 3:
        reply = f"🙂 Bom te ver de novo por aqui.\n\n{reply}"
    if patterns.interactions > 10:
        reply = f"😄 Já virou hábito passar por aqui, né?\n\n{reply}"

    if patterns.top_categories and patterns.interactions > 5:
        cat = max(patterns.top_categories.items(), key=lambda kv: kv[1])[0]
        reply += f"\n\n🔎 Notei que você costuma falar bastante sobre **{cat}**."

    return reply


def context_summary(patterns) -> str:
    """Resumo curto que vai junto para a IA na conversa livre."""
    if not patterns.top_categories:
        return ""
    cats = ", ".join(
        f"{cat} ({n}x)"
        for cat, n in sorted(patterns.top_categories.items(), key=lambda kv: kv[1], reverse=True)[:3]
    )
    return f"Total já registrado: {fmt_brl(patterns.total_expenses)}. Categorias mais comuns: {cats}."
