# apps/board/urls.py

from django.urls import path
from . import views

app_name = 'board'

urlpatterns = [
    # Boards
    path('boards', views.boards, name='boards'),
    path('boards/<uuid:board_id>', views.board_detalhe, name='board_detalhe'),

    # Membros
    path('boards/<uuid:board_id>/members', views.membros, name='membros'),

    # Listas
    path('boards/<uuid:board_id>/lists', views.criar_lista, name='criar_lista'),
    path('boards/<uuid:board_id>/lists/reorder', views.reordenar_listas, name='reordenar_listas'),
    path('boards/<uuid:board_id>/lists/<uuid:list_id>', views.lista_detalhe, name='lista_detalhe'),

    # Cards
    path('boards/<uuid:board_id>/lists/<uuid:list_id>/cards', views.criar_card, name='criar_card'),
    path('boards/<uuid:board_id>/lists/<uuid:list_id>/cards/reorder', views.reordenar_cards, name='reordenar_cards'),
    path('boards/<uuid:board_id>/lists/<uuid:list_id>/cards/<uuid:card_id>', views.card_detalhe, name='card_detalhe'),
    path('boards/<uuid:board_id>/cards/move', views.mover_card, name='mover_card'),

    # Responsáveis
    path(
        'boards/<uuid:board_id>/lists/<uuid:list_id>/cards/<uuid:card_id>/assignees',
        views.adicionar_responsavel,
        name='adicionar_responsavel'
    ),
    path(
        'boards/<uuid:board_id>/lists/<uuid:list_id>/cards/<uuid:card_id>/assignees/<uuid:user_id>',
        views.remover_responsavel,
        name='remover_responsavel'
    ),
]
