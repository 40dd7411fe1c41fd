# apps/core/middleware.py

from django.contrib.auth.models import AnonymousUser

from .auth_service import TokenInvalido, auth_service


class TokenAuthenticationMiddleware:
    """
    Autentica requisições da API via `Authorization: Bearer <token>`

    Fica depois do AuthenticationMiddleware: quando há token, ele tem
    precedência sobre a sessão. Token inválido deixa o usuário anônimo e
    registra o motivo em request.auth_error para a resposta 401.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request.auth_token = None
        request.auth_error = None

        token = self._extrair_token(request)
        if token:
            try:
                request.user = auth_service.validar_token(token)
                request.auth_token = token
            except TokenInvalido as exc:
                request.user = AnonymousUser()
                request.auth_error = str(exc)

        return self.get_response(request)

    def _extrair_token(self, request):
        cabecalho = request.META.get('HTTP_AUTHORIZATION', '')
        partes = cabecalho.split(' ')
        if len(partes) == 2 and partes[0].lower() == 'bearer':
            return partes[1].strip()
        return None
