# apps/core/auth_service.py

"""
Serviço de Autenticação - registro, login e tokens da API

Senhas usam os hashers do Django. Tokens são payloads assinados com
django.core.signing; tokens revogados no logout ficam no cache até
expirarem (Redis em produção, então todas as instâncias enxergam a
mesma lista).
"""

import hashlib
import logging
from typing import Optional, Tuple

from django.conf import settings
from django.contrib.auth import authenticate
from django.core import signing
from django.core.cache import cache
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction

from .models import Usuario

logger = logging.getLogger(__name__)


class EmailJaCadastrado(Exception):
    """Email já pertence a outro usuário"""


class TokenInvalido(Exception):
    """Token ausente, adulterado, expirado ou revogado"""


class AuthenticationService:

    _salt = 'kanban.auth.token'
    _prefixo_revogado = 'token-revogado:'

    def __init__(self):
        self._max_age = int(getattr(settings, 'KANBAN_TOKEN_MAX_AGE', 7 * 24 * 3600))

    def registrar(self, nome: str, email: str, senha: str) -> Tuple[Usuario, str]:
        """
        Cria usuário e já devolve um token de acesso

        Raises:
            ValidationError: campo obrigatório ausente
            EmailJaCadastrado: email já usado (sem diferenciar maiúsculas)
        """
        if not nome or not email or not senha:
            raise ValidationError('Name, email and password are required')

        email = self._normalizar_email(email)
        if Usuario.objects.filter(email__iexact=email).exists():
            raise EmailJaCadastrado('Email already registered')

        try:
            with transaction.atomic():
                usuario = Usuario.objects.create_user(
                    username=email,
                    email=email,
                    password=senha,
                    nome=nome,
                )
        except IntegrityError as exc:
            raise EmailJaCadastrado('Email already registered') from exc

        logger.info(f"👤 Usuário registrado: {usuario.email}")
        return usuario, self.emitir_token(usuario)

    def fazer_login(self, email: str, senha: str) -> Tuple[Optional[Usuario], Optional[str]]:
        """Retorna (usuario, token) ou (None, None) se as credenciais não conferem"""
        if not email or not senha:
            raise ValidationError('Email and password are required')

        usuario = authenticate(username=self._normalizar_email(email), password=senha)
        if usuario is None:
            logger.info(f"⚠️ Tentativa de login falhada para: {email}")
            return None, None

        return usuario, self.emitir_token(usuario)

    def emitir_token(self, usuario: Usuario) -> str:
        return signing.dumps({'sub': str(usuario.pk), 'email': usuario.email}, salt=self._salt)

    def validar_token(self, token: str) -> Usuario:
        """Resolve o usuário dono do token ou levanta TokenInvalido"""
        if not token:
            raise TokenInvalido('No token provided')

        if cache.get(self._chave_revogado(token)):
            raise TokenInvalido('Token revoked')

        try:
            payload = signing.loads(token, salt=self._salt, max_age=self._max_age)
        except signing.BadSignature:
            raise TokenInvalido('Invalid token') from None

        try:
            return Usuario.objects.get(pk=payload['sub'], is_active=True)
        except (Usuario.DoesNotExist, KeyError, ValidationError):
            raise TokenInvalido('Invalid token') from None

    def revogar_token(self, token: str):
        """Logout: o token deixa de valer até o fim da validade original"""
        cache.set(self._chave_revogado(token), True, timeout=self._max_age)

    # =================== MÉTODOS PRIVADOS ===================

    def _normalizar_email(self, email: str) -> str:
        return str(email).strip().lower()

    def _chave_revogado(self, token: str) -> str:
        return self._prefixo_revogado + hashlib.sha256(token.encode()).hexdigest()


# Instância global do serviço (Singleton pattern)
auth_service = AuthenticationService()
