# apps/board/exceptions.py

"""
Erros do motor de ordenação e da camada de persistência do board

Forbidden não mora aqui: a verificação de acesso usa o PermissionDenied
do próprio Django, antes de qualquer operação do motor.
"""


class KanbanError(Exception):
    """Base para erros de operações no board"""

    status_code = 400
    retryable = False

    def __init__(self, message=''):
        super().__init__(message)
        self.message = message


class NotFound(KanbanError):
    """Item ou coleção referenciado não existe no agregado"""

    status_code = 404


class OrderMismatch(KanbanError):
    """Ordem completa enviada não corresponde aos itens atuais da coleção"""

    status_code = 400


class StorageError(KanbanError):
    """Falha ao persistir um resultado válido do motor"""

    status_code = 500


class BoardBusy(KanbanError):
    """
    Lock do board não foi obtido dentro do tempo limite

    Nada foi aplicado; o cliente pode repetir a operação.
    """

    status_code = 503
    retryable = True
