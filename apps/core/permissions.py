# apps/core/permissions.py

from functools import wraps

from django.core.exceptions import PermissionDenied
from django.http import JsonResponse


class KanbanPermissions:
    """
    Regras de acesso aos boards

    Consultadas antes de qualquer operação do motor de ordenação: uma
    verificação que falha interrompe a requisição antes de carregar o
    agregado para escrita.
    """

    @staticmethod
    def is_owner(board, user_id):
        """Verifica se o usuário é o dono do board"""
        return str(board.dono_id) == str(user_id)

    @staticmethod
    def is_member(board, user_id):
        """Verifica se o usuário é membro do board (dono incluso)"""
        if KanbanPermissions.is_owner(board, user_id):
            return True
        return str(user_id) in board.membro_ids()

    @staticmethod
    def exigir_membro(board, usuario):
        if not KanbanPermissions.is_member(board, usuario.id):
            raise PermissionDenied('Forbidden')

    @staticmethod
    def exigir_dono(board, usuario, mensagem='Only owner can perform this action'):
        if not KanbanPermissions.is_owner(board, usuario.id):
            raise PermissionDenied(mensagem)


# Decoradores para views

def api_login_required(view_func):
    """
    Decorador para endpoints da API

    Retorna 401 em JSON ao invés de redirecionar para o login.
    """

    @wraps(view_func)
    def wrapped_view(request, *args, **kwargs):
        if not request.user.is_authenticated:
            erro = getattr(request, 'auth_error', None) or 'No token provided'
            return JsonResponse({'error': erro}, status=401)
        return view_func(request, *args, **kwargs)

    return wrapped_view
