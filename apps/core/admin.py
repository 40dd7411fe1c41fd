# apps/core/admin.py

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.html import format_html
from .models import Usuario, Board, Lista, Card
from .utils import gerar_cor_usuario


@admin.register(Usuario)
class UsuarioAdmin(BaseUserAdmin):
    """Admin customizado para o modelo Usuario"""

    list_display = [
        'email', 'nome', 'cor_preview',
        'is_active', 'date_joined'
    ]
    list_filter = ['is_staff', 'is_active', 'date_joined']
    search_fields = ['email', 'nome', 'username']
    ordering = ['-date_joined']

    fieldsets = BaseUserAdmin.fieldsets + (
        ('Informações Adicionais', {
            'fields': ('nome', 'avatar')
        }),
    )

    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ('Informações Adicionais', {
            'fields': ('nome', 'email')
        }),
    )

    def cor_preview(self, obj):
        """Cor usada no avatar padrão do usuário"""
        return format_html(
            '<div style="width: 20px; height: 20px; background-color: {}; '
            'border: 1px solid #ccc; border-radius: 3px;"></div>',
            gerar_cor_usuario(obj.email)
        )

    cor_preview.short_description = 'Cor'


class ListaInline(admin.TabularInline):
    """Listas do board, na ordem"""
    model = Lista
    extra = 0
    fields = ['titulo', 'posicao']
    readonly_fields = ['posicao']
    ordering = ['posicao']

    def has_add_permission(self, request, obj=None):
        """Criação passa pela API, que define a posição"""
        return False


@admin.register(Board)
class BoardAdmin(admin.ModelAdmin):
    """Admin para boards Kanban"""

    list_display = [
        'nome', 'dono', 'membros_count', 'listas_count', 'criado_em'
    ]
    list_filter = ['criado_em']
    search_fields = ['nome', 'dono__email']
    filter_horizontal = ['membros']
    readonly_fields = ['criado_em', 'atualizado_em']

    inlines = [ListaInline]

    def membros_count(self, obj):
        """Conta membros (sem o dono)"""
        return obj.membros.count()

    membros_count.short_description = 'Membros'

    def listas_count(self, obj):
        return obj.listas.count()

    listas_count.short_description = 'Listas'


class CardInline(admin.TabularInline):
    """Cards da lista, na ordem"""
    model = Card
    extra = 0
    fields = ['titulo', 'status', 'posicao']
    readonly_fields = ['posicao']
    ordering = ['posicao']

    def has_add_permission(self, request, obj=None):
        """Criação passa pela API, que define a posição"""
        return False


@admin.register(Lista)
class ListaAdmin(admin.ModelAdmin):
    """Admin para listas do Kanban"""

    list_display = ['titulo', 'board', 'posicao', 'cards_count']
    list_filter = ['board']
    search_fields = ['titulo', 'board__nome']
    ordering = ['board', 'posicao']

    inlines = [CardInline]

    def cards_count(self, obj):
        return obj.cards.count()

    cards_count.short_description = 'Cards'


@admin.register(Card)
class CardAdmin(admin.ModelAdmin):
    """Admin para cards"""

    list_display = ['titulo', 'lista', 'posicao', 'status_badge', 'criado_por', 'criado_em']
    list_filter = ['status', 'criado_em']
    search_fields = ['titulo', 'descricao', 'lista__titulo']
    filter_horizontal = ['responsaveis']
    readonly_fields = ['criado_em', 'atualizado_em']

    def status_badge(self, obj):
        """Exibe o status com badge colorido"""
        cores = {
            'todo': '#6B7280',  # cinza
            'in-progress': '#F59E0B',  # amarelo
            'done': '#10B981'  # verde
        }
        return format_html(
            '<span style="background-color: {}; color: white; '
            'padding: 3px 8px; border-radius: 4px; font-size: 11px;">{}</span>',
            cores.get(obj.status, '#6B7280'), obj.get_status_display()
        )

    status_badge.short_description = 'Status'
