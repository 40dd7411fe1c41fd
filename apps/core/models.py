# apps/core/models.py

import uuid

from django.conf import settings
from django.contrib.auth.models import AbstractUser
from django.db import models
from PIL import Image


class Usuario(AbstractUser):
    """
    Modelo de usuário customizado

    O login é feito pelo email (guardado em minúsculas também no username).
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # === INFORMAÇÕES PESSOAIS ===
    nome = models.CharField(max_length=150)
    email = models.EmailField(unique=True)
    avatar = models.ImageField(upload_to='avatares/', blank=True, null=True)

    # === METADADOS ===
    criado_em = models.DateTimeField(auto_now_add=True)
    atualizado_em = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'usuario'

    def save(self, *args, **kwargs):
        """
        Override do save para redimensionar o avatar automaticamente
        """
        super().save(*args, **kwargs)

        if self.avatar:
            limite = getattr(settings, 'KANBAN_AVATAR_MAX_SIZE', 300)
            with Image.open(self.avatar.path) as img:
                if img.height > limite or img.width > limite:
                    img.thumbnail((limite, limite))
                    img.save(self.avatar.path)

    def __str__(self):
        return f"{self.nome or self.username} <{self.email}>"


class Board(models.Model):
    """
    Quadro Kanban

    O dono é implicitamente membro e nunca aparece em `membros`.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    dono = models.ForeignKey(
        Usuario,
        on_delete=models.CASCADE,
        related_name='boards_proprios'
    )
    nome = models.CharField(max_length=200)
    membros = models.ManyToManyField(
        Usuario,
        related_name='boards_membro',
        blank=True
    )
    criado_em = models.DateTimeField(auto_now_add=True)
    atualizado_em = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'board'
        ordering = ['-criado_em']

    def __str__(self):
        return self.nome

    def membro_ids(self):
        """Ids (str) de todos que podem acessar o board, dono incluso"""
        ids = {str(membro.id) for membro in self.membros.all()}
        ids.add(str(self.dono_id))
        return ids

    def adicionar_membro(self, usuario):
        """Adiciona membro; retorna False se já era dono ou membro"""
        if usuario.id == self.dono_id or str(usuario.id) in self.membro_ids():
            return False
        self.membros.add(usuario)
        return True


class Lista(models.Model):
    """Lista (coluna) do board, ordenada por `posicao`"""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    board = models.ForeignKey(
        Board,
        on_delete=models.CASCADE,
        related_name='listas'
    )
    titulo = models.CharField(max_length=200)
    posicao = models.PositiveIntegerField(default=0)
    criado_em = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'lista'
        ordering = ['posicao']
        indexes = [
            models.Index(fields=['board', 'posicao'], name='lista_board_posicao_idx'),
        ]

    def __str__(self):
        return f"{self.titulo} - {self.board.nome}"


class Card(models.Model):
    """Card de uma lista, ordenado por `posicao` dentro dela"""

    STATUS_CHOICES = [
        ('todo', 'A fazer'),
        ('in-progress', 'Em progresso'),
        ('done', 'Concluído'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    lista = models.ForeignKey(
        Lista,
        on_delete=models.CASCADE,
        related_name='cards'
    )
    titulo = models.CharField(max_length=200)
    descricao = models.TextField(blank=True)
    posicao = models.PositiveIntegerField(default=0)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='todo')
    criado_por = models.ForeignKey(
        Usuario,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='cards_criados'
    )
    responsaveis = models.ManyToManyField(
        Usuario,
        related_name='cards_atribuidos',
        blank=True
    )
    criado_em = models.DateTimeField(auto_now_add=True)
    atualizado_em = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'card'
        ordering = ['posicao']
        indexes = [
            models.Index(fields=['lista', 'posicao'], name='card_lista_posicao_idx'),
        ]

    def __str__(self):
        return self.titulo

    @classmethod
    def status_validos(cls):
        return [valor for valor, _ in cls.STATUS_CHOICES]
