# apps/board/services.py

"""
Serviço do board - ponto de entrada de todas as mutações

Fluxo de cada operação:
1. verifica acesso (KanbanPermissions) antes de tocar no motor
2. empresta o agregado do repositório (transação + lock do board)
3. aplica a operação do motor de ordenação
4. o repositório grava a diferença ao sair do bloco
5. o evento é publicado depois do commit, com o delta aplicado
"""

import logging

from django.core.exceptions import ValidationError
from django.db.models import Q

from apps.core.models import Board, Card, Lista, Usuario
from apps.core.permissions import KanbanPermissions

from . import ordering
from .broadcast import publish_on_commit
from .exceptions import NotFound
from .repository import board_repository
from .serializers import serializar_board_resumo, serializar_card, serializar_lista, serializar_usuario

logger = logging.getLogger(__name__)


def _texto_obrigatorio(valor, mensagem):
    if not isinstance(valor, str) or not valor.strip():
        raise ValidationError(mensagem)
    return valor.strip()


def _indice_opcional(valor):
    if valor is None:
        return None
    if isinstance(valor, bool) or not isinstance(valor, int):
        raise ValidationError('toIndex must be an integer')
    return valor


def _ids(valores, campo):
    if not isinstance(valores, (list, tuple)):
        raise ValidationError(f'{campo} must be an array')
    return [str(valor) for valor in valores]


class BoardService:

    def __init__(self, repository=None, publisher=None):
        self.repository = repository or board_repository
        self.publisher = publisher or publish_on_commit

    # =================== BOARDS ===================

    def listar_boards(self, usuario):
        """Boards em que o usuário é dono ou membro"""
        return (
            Board.objects.filter(Q(dono=usuario) | Q(membros=usuario))
            .distinct()
            .prefetch_related('membros')
        )

    def criar_board(self, usuario, nome):
        nome = _texto_obrigatorio(nome, 'Name is required')
        board = Board.objects.create(dono=usuario, nome=nome)

        logger.info(f"📋 Board {board.id} criado por {usuario.email}")
        self._publicar(board.id, 'board-created', {'board': serializar_board_resumo(board)}, usuario)
        return board

    def obter_board(self, usuario, board_id):
        """Agregado completo para leitura"""
        aggregate = self.repository.load(board_id)
        KanbanPermissions.exigir_membro(aggregate.board, usuario)
        return aggregate

    def renomear_board(self, usuario, board_id, nome):
        with self.repository.checkout(board_id) as aggregate:
            KanbanPermissions.exigir_membro(aggregate.board, usuario)
            if isinstance(nome, str) and nome.strip():
                aggregate.board.nome = nome.strip()
                aggregate.board.save(update_fields=['nome', 'atualizado_em'])

        self._publicar(board_id, 'board-updated', {
            'boardId': aggregate.board_id,
            'name': aggregate.board.nome,
        }, usuario)
        return aggregate

    def excluir_board(self, usuario, board_id):
        with self.repository.checkout(board_id) as aggregate:
            KanbanPermissions.exigir_dono(aggregate.board, usuario, 'Only owner can delete board')
            aggregate.board.delete()

        logger.info(f"🗑️ Board {board_id} excluído por {usuario.email}")
        self._publicar(board_id, 'board-deleted', {'boardId': str(board_id)}, usuario)

    # =================== MEMBROS ===================

    def listar_membros(self, usuario, board_id):
        aggregate = self.obter_board(usuario, board_id)
        board = aggregate.board
        return [board.dono, *sorted(board.membros.all(), key=lambda membro: membro.email)]

    def adicionar_membro(self, usuario, board_id, email):
        email = _texto_obrigatorio(email, 'Email is required').lower()

        with self.repository.checkout(board_id) as aggregate:
            board = aggregate.board
            KanbanPermissions.exigir_dono(board, usuario, 'Only owner can add members')

            try:
                novo = Usuario.objects.get(email__iexact=email)
            except Usuario.DoesNotExist:
                raise NotFound('User not found') from None

            adicionado = board.adicionar_membro(novo)

        if adicionado:
            logger.info(f"👥 {novo.email} adicionado ao board {board_id}")
            self._publicar(board_id, 'member-added', {
                'boardId': aggregate.board_id,
                'user': serializar_usuario(novo),
            }, usuario)
        return aggregate

    # =================== LISTAS ===================

    def criar_lista(self, usuario, board_id, titulo):
        titulo = _texto_obrigatorio(titulo, 'Title is required')

        with self.repository.checkout(board_id) as aggregate:
            KanbanPermissions.exigir_membro(aggregate.board, usuario)
            delta = aggregate.add_list(Lista(titulo=titulo))

        lista = delta.item
        self._publicar(board_id, 'list-created', {'list': serializar_lista(lista)}, usuario)
        return lista

    def renomear_lista(self, usuario, board_id, list_id, titulo):
        with self.repository.checkout(board_id) as aggregate:
            KanbanPermissions.exigir_membro(aggregate.board, usuario)
            lista = aggregate.get_list(list_id)
            if isinstance(titulo, str):
                lista.titulo = titulo
                lista.save(update_fields=['titulo'])

        self._publicar(board_id, 'list-updated', {
            'listId': str(lista.id),
            'title': lista.titulo,
        }, usuario)
        return aggregate, lista

    def excluir_lista(self, usuario, board_id, list_id):
        with self.repository.checkout(board_id) as aggregate:
            KanbanPermissions.exigir_membro(aggregate.board, usuario)
            delta = aggregate.remove_list(list_id)

        self._publicar(board_id, 'list-deleted', {
            'listId': delta.item_id,
            'positions': delta.positions,
        }, usuario)
        return delta

    def reordenar_listas(self, usuario, board_id, ordered_ids):
        ordered_ids = _ids(ordered_ids, 'listOrder')

        with self.repository.checkout(board_id) as aggregate:
            KanbanPermissions.exigir_membro(aggregate.board, usuario)
            delta = ordering.reorder_all(aggregate.lists, ordered_ids)

        self._publicar(board_id, 'lists-reordered', {
            'orderedIds': aggregate.lists.ids(),
            'positions': delta.positions,
        }, usuario)
        return aggregate

    # =================== CARDS ===================

    def criar_card(self, usuario, board_id, list_id, titulo, descricao=''):
        titulo = _texto_obrigatorio(titulo, 'Title is required')
        descricao = descricao if isinstance(descricao, str) else ''

        with self.repository.checkout(board_id) as aggregate:
            KanbanPermissions.exigir_membro(aggregate.board, usuario)
            cards = aggregate.cards_of(list_id)
            delta = ordering.append(cards, Card(titulo=titulo, descricao=descricao, criado_por=usuario))

        card = delta.item
        self._publicar(board_id, 'card-created', {
            'listId': str(list_id),
            'card': serializar_card(card),
        }, usuario)
        return card

    def atualizar_card(self, usuario, board_id, list_id, card_id, titulo=None, descricao=None, status=None):
        """Edição sem efeito na ordem; status fora dos valores válidos é ignorado"""
        with self.repository.checkout(board_id) as aggregate:
            KanbanPermissions.exigir_membro(aggregate.board, usuario)
            card = aggregate.cards_of(list_id).get(card_id)

            campos = []
            if isinstance(titulo, str):
                card.titulo = titulo
                campos.append('titulo')
            if isinstance(descricao, str):
                card.descricao = descricao
                campos.append('descricao')
            if status in Card.status_validos():
                card.status = status
                campos.append('status')

            if campos:
                card.save(update_fields=campos + ['atualizado_em'])

        self._publicar(board_id, 'card-updated', {
            'listId': str(list_id),
            'card': serializar_card(card),
        }, usuario)
        return card

    def excluir_card(self, usuario, board_id, list_id, card_id):
        with self.repository.checkout(board_id) as aggregate:
            KanbanPermissions.exigir_membro(aggregate.board, usuario)
            delta = ordering.remove(aggregate.cards_of(list_id), card_id)

        self._publicar(board_id, 'card-deleted', {
            'listId': str(list_id),
            'cardId': delta.item_id,
            'positions': delta.positions,
        }, usuario)
        return delta

    def mover_card(self, usuario, board_id, card_id, to_list_id, to_index=None, from_list_id=None):
        """
        Move card para outra posição, na mesma lista ou em outra

        Sem from_list_id o card é procurado em todas as listas do board.
        """
        to_index = _indice_opcional(to_index)
        if not card_id or not to_list_id:
            raise ValidationError('cardId and toListId are required')

        with self.repository.checkout(board_id) as aggregate:
            KanbanPermissions.exigir_membro(aggregate.board, usuario)

            destino = aggregate.cards_of(to_list_id)
            if from_list_id:
                origem = aggregate.cards_of(from_list_id)
            else:
                origem, _ = aggregate.find_card(card_id)

            delta = ordering.move(card_id, origem, destino, to_index)

        logger.info(
            f"🔀 Card {delta.item_id} movido de {delta.from_parent_id} para "
            f"{delta.to_parent_id}[{delta.index}] no board {board_id}"
        )
        self._publicar(board_id, 'card-moved', {
            'cardId': delta.item_id,
            'fromListId': delta.from_parent_id,
            'toListId': delta.to_parent_id,
            'toIndex': delta.index,
            'positions': delta.positions,
        }, usuario)
        return delta

    def reordenar_cards(self, usuario, board_id, list_id, ordered_ids):
        ordered_ids = _ids(ordered_ids, 'orderedIds')

        with self.repository.checkout(board_id) as aggregate:
            KanbanPermissions.exigir_membro(aggregate.board, usuario)
            cards = aggregate.cards_of(list_id)
            delta = ordering.reorder_all(cards, ordered_ids)

        self._publicar(board_id, 'cards-reordered', {
            'listId': str(list_id),
            'orderedIds': cards.ids(),
            'positions': delta.positions,
        }, usuario)
        return cards

    # =================== RESPONSÁVEIS ===================

    def adicionar_responsavel(self, usuario, board_id, list_id, card_id, user_id):
        if not user_id:
            raise ValidationError('userId is required')

        with self.repository.checkout(board_id) as aggregate:
            KanbanPermissions.exigir_membro(aggregate.board, usuario)
            card = aggregate.cards_of(list_id).get(card_id)

            if not KanbanPermissions.is_member(aggregate.board, user_id):
                raise ValidationError('User not a member')

            card.responsaveis.add(user_id)

        self._publicar(board_id, 'card-assignee-added', {
            'listId': str(list_id),
            'cardId': str(card.id),
            'userId': str(user_id),
        }, usuario)
        return card

    def remover_responsavel(self, usuario, board_id, list_id, card_id, user_id):
        with self.repository.checkout(board_id) as aggregate:
            KanbanPermissions.exigir_membro(aggregate.board, usuario)
            card = aggregate.cards_of(list_id).get(card_id)
            card.responsaveis.remove(user_id)

        self._publicar(board_id, 'card-assignee-removed', {
            'listId': str(list_id),
            'cardId': str(card.id),
            'userId': str(user_id),
        }, usuario)
        return card

    # =================== AUXILIARES ===================

    def _publicar(self, board_id, evento, payload, usuario):
        self.publisher(str(board_id), evento, payload, usuario.id)


# Instância global do serviço
board_service = BoardService()
