# apps/board/repository.py

"""
Repositório do agregado do board

Carrega o grafo completo (board -> listas -> cards -> responsáveis) e
persiste o resultado das operações do motor. Toda mutação passa por
`checkout`, que abre uma única transação e trava a linha do board: duas
requisições no mesmo board são serializadas, boards diferentes não
compartilham nada.
"""

import logging
from collections import defaultdict
from contextlib import contextmanager

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import DatabaseError, OperationalError, connection, transaction

from apps.core.models import Board, Card, Lista

from .aggregate import BoardAggregate
from .exceptions import BoardBusy, NotFound, StorageError

logger = logging.getLogger(__name__)

# SQLSTATE lock_not_available do PostgreSQL
PG_LOCK_NOT_AVAILABLE = '55P03'


def _erro_de_lock(exc):
    causa = exc.__cause__
    if getattr(causa, 'pgcode', None) == PG_LOCK_NOT_AVAILABLE:
        return True
    return 'locked' in str(exc).lower()


class BoardRepository:

    def load(self, board_id, for_update=False) -> BoardAggregate:
        """Carrega o agregado completo ou levanta NotFound"""
        queryset = Board.objects.select_related('dono').prefetch_related('membros')
        if for_update:
            queryset = queryset.select_for_update(of=('self',))

        try:
            board = queryset.get(id=board_id)
        except (Board.DoesNotExist, ValidationError, ValueError):
            raise NotFound('Board não encontrado') from None

        listas = list(Lista.objects.filter(board=board).order_by('posicao', 'criado_em'))

        cards_por_lista = defaultdict(list)
        cards = (
            Card.objects.filter(lista__board=board)
            .prefetch_related('responsaveis')
            .order_by('posicao', 'criado_em')
        )
        for card in cards:
            cards_por_lista[str(card.lista_id)].append(card)

        # Reaproveita as instâncias já carregadas como pais
        for lista in listas:
            lista.board = board
            for card in cards_por_lista[str(lista.id)]:
                card.lista = lista

        return BoardAggregate(board, listas, cards_por_lista)

    def save(self, aggregate: BoardAggregate):
        """
        Persiste a diferença entre o agregado atual e o carregado

        Recusa persistir um agregado com posições não densas.
        """
        if not aggregate.is_dense():
            logger.error(f"❌ Agregado do board {aggregate.board_id} com posições inconsistentes")
            raise StorageError('Posições inconsistentes; operação descartada')

        mudancas = aggregate.pending_changes()

        try:
            with transaction.atomic():
                if mudancas['removed_cards']:
                    Card.objects.filter(id__in=mudancas['removed_cards']).delete()
                if mudancas['removed_lists']:
                    Lista.objects.filter(id__in=mudancas['removed_lists']).delete()

                for lista in mudancas['new_lists']:
                    lista.save(force_insert=True)
                if mudancas['changed_lists']:
                    Lista.objects.bulk_update(mudancas['changed_lists'], ['posicao'])

                for card in mudancas['new_cards']:
                    card.save(force_insert=True)
                if mudancas['changed_cards']:
                    Card.objects.bulk_update(mudancas['changed_cards'], ['lista', 'posicao'])

        except DatabaseError as exc:
            logger.exception(f"❌ Erro ao salvar board {aggregate.board_id}")
            raise StorageError('Erro ao salvar o board') from exc

        aggregate.mark_persisted()

    @contextmanager
    def checkout(self, board_id):
        """
        Empresta o agregado para exatamente uma mutação

        Tudo dentro do bloco roda na mesma transação; qualquer exceção
        desfaz a unidade inteira, e a saída normal salva o agregado.
        """
        try:
            with transaction.atomic():
                self._aplicar_lock_timeout()
                aggregate = self.load(board_id, for_update=True)
                yield aggregate
                self.save(aggregate)
        except OperationalError as exc:
            if _erro_de_lock(exc):
                logger.warning(f"⏳ Timeout aguardando lock do board {board_id}")
                raise BoardBusy('Board ocupado, tente novamente') from exc
            logger.exception(f"❌ Erro de banco no board {board_id}")
            raise StorageError('Erro ao acessar o board') from exc
        except DatabaseError as exc:
            logger.exception(f"❌ Erro de banco no board {board_id}")
            raise StorageError('Erro ao acessar o board') from exc

    def _aplicar_lock_timeout(self):
        if connection.vendor != 'postgresql':
            return
        timeout_ms = int(getattr(settings, 'KANBAN_LOCK_TIMEOUT_MS', 5000))
        with connection.cursor() as cursor:
            cursor.execute('SET LOCAL lock_timeout = %s', [f'{timeout_ms}ms'])


board_repository = BoardRepository()
