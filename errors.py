# errors.py
"""
Erros do oráculo. Nenhum deles chega ao transporte: o handle_message
transforma cada um numa resposta para o usuário.
"""


class OraculoError(Exception):
    pass


class MissingInput(OraculoError):
    """Mensagem ou user_id ausente."""


class ExtractionEmpty(OraculoError):
    """Nenhuma despesa reconhecida na mensagem."""


class InsufficientData(OraculoError):
    """Relatório pedido para um período sem registros."""


class CollaboratorFailure(OraculoError):
    """Erro no ledger ou na IA."""

    def __init__(self, collaborator: str, cause: BaseException | None = None):
        self.collaborator = collaborator
        self.cause = cause
        super().__init__(f"{collaborator}: {cause!r}")


class CollaboratorTimeout(CollaboratorFailure):
    pass


class MalformedCollaboratorResponse(ExtractionEmpty):
    """Resposta da IA que não é JSON ou não segue o schema."""
