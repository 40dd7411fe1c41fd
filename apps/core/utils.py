# apps/core/utils.py

import hashlib
import json
import logging
from functools import wraps

from django.core.exceptions import PermissionDenied, ValidationError
from django.http import JsonResponse

from apps.board.exceptions import KanbanError

logger = logging.getLogger(__name__)


def gerar_cor_usuario(email: str) -> str:
    """
    Gera uma cor consistente baseada no email
    Útil para avatares quando não há foto
    """
    hash_hex = hashlib.md5(email.encode()).hexdigest()
    return f"#{hash_hex[:6]}"


def ler_json(request) -> dict:
    """Corpo JSON da requisição; corpo vazio vira dict vazio"""
    if not request.body:
        return {}
    try:
        dados = json.loads(request.body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise ValidationError('Invalid JSON body') from None
    if not isinstance(dados, dict):
        raise ValidationError('JSON body must be an object')
    return dados


def erro_json(mensagem, status=400, **extra):
    return JsonResponse({'error': mensagem, **extra}, status=status)


def _mensagem_validacao(exc: ValidationError) -> str:
    return '; '.join(exc.messages) if exc.messages else 'Invalid request'


def api_view(view_func):
    """
    Converte os erros de domínio em respostas JSON

    ValidationError -> 400, PermissionDenied -> 403, e os erros do board
    (NotFound, OrderMismatch, BoardBusy, StorageError) usam o status
    definido na própria exceção. BoardBusy inclui Retry-After.
    """

    @wraps(view_func)
    def wrapped_view(request, *args, **kwargs):
        try:
            return view_func(request, *args, **kwargs)
        except ValidationError as exc:
            return erro_json(_mensagem_validacao(exc), status=400)
        except PermissionDenied as exc:
            return erro_json(str(exc) or 'Forbidden', status=403)
        except KanbanError as exc:
            if exc.status_code >= 500:
                logger.error(f"❌ {request.method} {request.path}: {exc.message}")
            resposta = erro_json(exc.message or 'Server error', status=exc.status_code, retryable=exc.retryable)
            if exc.retryable:
                resposta['Retry-After'] = '1'
            return resposta

    return wrapped_view
