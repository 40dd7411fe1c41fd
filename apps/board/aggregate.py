# apps/board/aggregate.py

"""
Agregado do board: board + listas ordenadas + cards ordenados por lista

É a unidade de consistência sobre a qual o motor de ordenação opera.
Guarda uma fotografia (parent, posição) do que foi carregado para que o
repositório persista apenas a diferença.
"""

from . import ordering
from .exceptions import NotFound


class BoardAggregate:

    def __init__(self, board, listas, cards_por_lista):
        self.board = board
        self.lists = ordering.OrderedCollection(board, 'board', listas)
        self._cards = {
            str(lista.id): ordering.OrderedCollection(
                lista, 'lista', cards_por_lista.get(str(lista.id), [])
            )
            for lista in self.lists
        }
        self._snapshot = self._capturar()

    # === ACESSO ===

    @property
    def board_id(self) -> str:
        return str(self.board.id)

    def get_list(self, list_id):
        return self.lists.get(list_id)

    def cards_of(self, list_id) -> ordering.OrderedCollection:
        try:
            return self._cards[str(list_id)]
        except KeyError:
            raise NotFound(f'Lista {list_id} não encontrada') from None

    def collections(self):
        """Todas as coleções ordenadas do agregado"""
        return [self.lists, *self._cards.values()]

    def find_card(self, card_id):
        """Retorna (coleção, card) para o card em qualquer lista"""
        for colecao in self._cards.values():
            if card_id in colecao:
                return colecao, colecao.get(card_id)
        raise NotFound(f'Card {card_id} não encontrado')

    def all_cards(self):
        for lista in self.lists:
            yield from self._cards[str(lista.id)]

    def is_dense(self) -> bool:
        return all(colecao.is_dense() for colecao in self.collections())

    # === MUTAÇÕES ESTRUTURAIS ===

    def add_list(self, lista) -> ordering.Delta:
        delta = ordering.append(self.lists, lista)
        self._cards[str(lista.id)] = ordering.OrderedCollection(lista, 'lista')
        return delta

    def remove_list(self, list_id) -> ordering.Delta:
        delta = ordering.remove(self.lists, list_id)
        self._cards.pop(str(list_id), None)
        return delta

    # === DIFERENÇA PARA PERSISTÊNCIA ===

    def _capturar(self):
        listas = {str(lista.id): (str(lista.board_id), lista.posicao) for lista in self.lists}
        cards = {str(card.id): (str(card.lista_id), card.posicao) for card in self.all_cards()}
        return listas, cards

    def pending_changes(self):
        """
        Compara o estado atual com o carregado

        Retorna um dict com listas/cards novos, alterados (posição ou pai)
        e ids removidos.
        """
        listas_antes, cards_antes = self._snapshot
        listas_agora, cards_agora = self._capturar()

        todas_listas = {str(lista.id): lista for lista in self.lists}
        todos_cards = {str(card.id): card for card in self.all_cards()}

        return {
            'new_lists': [todas_listas[i] for i in listas_agora if i not in listas_antes],
            'changed_lists': [
                todas_listas[i] for i, estado in listas_agora.items()
                if i in listas_antes and listas_antes[i] != estado
            ],
            'removed_lists': [i for i in listas_antes if i not in listas_agora],
            'new_cards': [todos_cards[i] for i in cards_agora if i not in cards_antes],
            'changed_cards': [
                todos_cards[i] for i, estado in cards_agora.items()
                if i in cards_antes and cards_antes[i] != estado
            ],
            'removed_cards': [i for i in cards_antes if i not in cards_agora],
        }

    def mark_persisted(self):
        self._snapshot = self._capturar()
