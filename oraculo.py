# oraculo.py
"""
Pipeline do oráculo: recebe {message, user_id}, decide a intenção, conduz o
preview/confirmação e devolve sempre {"reply": ...}.

Estados: idle -> preview (despesas aguardando "sim") -> idle,
         idle -> post_report (relatório aguardando reflexão).
"""

import asyncio
import logging
import os

import ai_router
import db
from ai_router import parse_suggestion
from errors import (
    CollaboratorFailure,
    CollaboratorTimeout,
    ExtractionEmpty,
    InsufficientData,
    MissingInput,
)
from intents import (
    classify_intent,
    CONFIRM,
    REJECT,
    REPORT_REQUEST,
    REPORT_FOLLOWUP,
    EXPENSE_DECLARATION,
    FREE_CHAT,
)
from memory import (
    DraftExpense,
    SessionStore,
    UsagePatterns,
    IDLE,
    PREVIEW,
    POST_REPORT,
    merge_clarification,
    register_interaction,
    replace_drafts,
    update_patterns,
)
from parsers import extract_expenses, parse_clarification
from replies import (
    ORACLE,
    context_summary,
    decorate_free_chat,
    render_followup,
    render_pending_reminder,
    render_post_report,
    render_preview,
    render_report,
)
from reports import build_report, report_period
from utils_date import parse_date_str, resolve_date, today_tz
from utils_text import DEFAULT_CATEGORY, canonical_category, classify_category

logger = logging.getLogger(__name__)


def draft_from_suggestion(suggestion, today) -> DraftExpense | None:
    """
    Converte a sugestão da IA num rascunho. A categoria sai do nosso
    classificador (a da IA só vale se ele não reconhecer nada e ela for uma
    categoria conhecida) e a data passa pelo resolvedor de datas.
    """
    dados = suggestion.dados
    if suggestion.acao != "registrar" or dados is None:
        return None
    description = (dados.descricao or "").strip()
    if not description:
        return None

    category = classify_category(description)
    if category == DEFAULT_CATEGORY:
        category = canonical_category(dados.categoria) or DEFAULT_CATEGORY

    return DraftExpense(
        description=description,
        amount=dados.valor,
        date=suggestion_date(dados.data, today) or today,
        category=category,
    )


def suggestion_date(raw, today):
    if not raw:
        return None
    try:
        return parse_date_str(raw)
    except ValueError:
        return resolve_date(raw, today)


class Oraculo:
    def __init__(self, ledger, nl, context_store=None, today=today_tz,
                 timeout: float = 15.0, keep_preview: bool = False):
        self.ledger = ledger
        self.nl = nl
        self.context_store = context_store
        self.today = today
        self.timeout = timeout
        # True: mensagem não relacionada durante o preview mantém o lote
        # pendente e repete a pergunta, em vez de descartá-lo
        self.keep_preview = keep_preview
        self.sessions = SessionStore()

    # ---------------- entrada ----------------

    async def handle_message(self, message, user_id) -> dict:
        try:
            text = (message or "").strip() if isinstance(message, str) else ""
            uid = str(user_id).strip() if user_id is not None else ""
            if not text or not uid:
                raise MissingInput()

            async with self.sessions.lock(uid):
                session = await self._session(uid)
                register_interaction(session)
                reply = await self._dispatch(session, text)
            return {"reply": reply}

        except MissingInput:
            return {"reply": ORACLE["askClarify"]}
        except Exception:
            logger.exception("erro processando mensagem de %r", user_id)
            return {"reply": ORACLE["collaboratorFailure"]}

    # ---------------- colaboradores ----------------

    async def _call(self, name: str, fn, *args):
        try:
            return await asyncio.wait_for(asyncio.to_thread(fn, *args), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise CollaboratorTimeout(name, e) from e
        except Exception as e:
            raise CollaboratorFailure(name, e) from e

    async def _session(self, user_id: str):
        session = self.sessions.get(user_id)
        if session is not None:
            return session

        patterns = None
        if self.context_store is not None:
            try:
                saved = await self._call("context_store", self.context_store.load_user_context, user_id)
                patterns = UsagePatterns.from_dict(saved) if saved else None
            except CollaboratorFailure as e:
                logger.warning("não consegui carregar o contexto de %s: %s", user_id, e)
        return self.sessions.create(user_id, patterns)

    async def _save_context(self, session) -> None:
        if self.context_store is None:
            return
        try:
            await self._call("context_store", self.context_store.save_user_context,
                             session.user_id, session.patterns.to_dict())
        except CollaboratorFailure as e:
            logger.warning("não consegui salvar o contexto de %s: %s", session.user_id, e)

    # ---------------- máquina de estados ----------------

    async def _dispatch(self, session, text: str) -> str:
        intent = classify_intent(text, session.state, session.last_report is not None)
        logger.debug("user=%s state=%s intent=%s", session.user_id, session.state, intent)

        if intent == CONFIRM:
            return await self._confirm(session)

        if intent == REJECT:
            session.clear_pending()
            return ORACLE["rejected"]

        if session.state == PREVIEW:
            if intent in (EXPENSE_DECLARATION, FREE_CHAT):
                fields = parse_clarification(text, self.today())
                if fields and merge_clarification(session, fields):
                    return render_preview(session.pending_expenses)

            if intent != EXPENSE_DECLARATION:
                if self.keep_preview:
                    return render_pending_reminder(session.pending_expenses)
                logger.info("preview de %s abandonado (%d rascunhos)",
                            session.user_id, len(session.pending_expenses))
                session.clear_pending()

        if intent == REPORT_REQUEST:
            return await self._report(session, text)

        if intent == REPORT_FOLLOWUP:
            return render_followup(session.last_report)

        if intent == EXPENSE_DECLARATION:
            return await self._declare(session, text)

        if session.state == POST_REPORT and session.last_report is not None:
            # uma reflexão só; a próxima conversa volta para a IA
            session.state = IDLE
            return render_post_report(session.last_report)

        return await self._free_chat(session, text)

    async def _confirm(self, session) -> str:
        drafts = list(session.pending_expenses)
        try:
            await self._call("ledger", self.ledger.insert_expenses,
                             session.user_id, session.batch_id, drafts)
        except CollaboratorFailure as e:
            # rascunhos ficam pendentes: o usuário pode dizer "sim" de novo
            logger.error("falha gravando %d despesas de %s: %s", len(drafts), session.user_id, e)
            return ORACLE["saveFailed"]

        update_patterns(session, drafts)
        session.clear_pending()
        session.last_report = None
        await self._save_context(session)
        return ORACLE["saved"]

    async def _report(self, session, text: str) -> str:
        start, end, label = report_period(text, self.today())
        try:
            rows = await self._call("ledger", self.ledger.get_expenses_by_period,
                                    session.user_id, start, end)
        except CollaboratorFailure as e:
            logger.error("falha consultando relatório de %s: %s", session.user_id, e)
            return ORACLE["collaboratorFailure"]

        try:
            report = build_report(rows, start, end, label)
        except InsufficientData:
            return ORACLE["insufficientData"]

        session.last_report = report
        session.state = POST_REPORT
        return render_report(report)

    async def _declare(self, session, text: str) -> str:
        drafts = extract_expenses(text, self.today())
        if drafts:
            replace_drafts(session, drafts)
            return render_preview(session.pending_expenses)

        try:
            return await self._declare_with_nl(session, text)
        except ExtractionEmpty:
            return ORACLE["nothingFound"]
        except CollaboratorFailure as e:
            logger.error("falha na extração via IA: %s", e)
            return ORACLE["collaboratorFailure"]

    async def _declare_with_nl(self, session, text: str) -> str:
        today = self.today()
        raw = await self._call("nl_extractor", self.nl.extract_suggestion, text, today.isoformat())
        suggestion = parse_suggestion(raw)

        if suggestion.acao == "perguntar" and suggestion.mensagem_usuario:
            return suggestion.mensagem_usuario

        dados = suggestion.dados
        if session.state == PREVIEW and dados is not None:
            fields = {
                "amount": dados.valor,
                "date": suggestion_date(dados.data, today),
            }
            if merge_clarification(session, fields):
                return render_preview(session.pending_expenses)

        draft = draft_from_suggestion(suggestion, today)
        if draft is None:
            raise ExtractionEmpty()
        replace_drafts(session, [draft])
        return render_preview(session.pending_expenses)

    async def _free_chat(self, session, text: str) -> str:
        try:
            reply = await self._call("nl_extractor", self.nl.conversa_livre,
                                     text, context_summary(session.patterns))
        except CollaboratorFailure as e:
            logger.error("falha na conversa livre: %s", e)
            return ORACLE["collaboratorFailure"]

        return decorate_free_chat(reply or ORACLE["chatFallback"], session.patterns)


def build_default_oraculo() -> Oraculo:
    """Oráculo ligado ao Postgres e à OpenAI, configurado pelo ambiente."""
    return Oraculo(
        ledger=db,
        nl=ai_router,
        context_store=db if os.getenv("DATABASE_URL") else None,
        timeout=float(os.getenv("ORACULO_TIMEOUT_SECONDS", "15")),
        keep_preview=os.getenv("ORACULO_KEEP_PREVIEW", "").lower() in ("1", "true", "sim"),
    )
