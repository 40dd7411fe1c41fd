# apps/board/ordering.py

"""
Motor de ordenação das coleções do board

Mantém a posição das listas dentro do board e dos cards dentro de cada
lista. As posições são inteiros densos (0..N-1): toda inserção, remoção,
reordenação ou movimentação reescreve as posições dos irmãos afetados.

Nenhuma função aqui faz I/O. Cada operação valida tudo antes de tocar na
coleção, então uma operação rejeitada deixa o agregado exatamente como
estava, e devolve um Delta descrevendo o que mudou.
"""

import operator
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from .exceptions import NotFound, OrderMismatch


def positions_are_dense(items: Iterable) -> bool:
    """Posições ordenadas formam exatamente 0..len-1, sem buracos nem repetições"""
    posicoes = sorted(item.posicao for item in items)
    return posicoes == list(range(len(posicoes)))


@dataclass
class PositionChange:
    """Mudança de posição de um item (old é None para itens novos)"""

    item_id: str
    old: Optional[int]
    new: Optional[int]


@dataclass
class Delta:
    """Resultado de uma operação do motor"""

    kind: str
    item_id: Optional[str] = None
    from_parent_id: Optional[str] = None
    to_parent_id: Optional[str] = None
    index: Optional[int] = None
    changes: List[PositionChange] = field(default_factory=list)
    item: object = None

    @property
    def positions(self):
        """Mapa id -> nova posição dos itens que continuam na coleção"""
        return {
            change.item_id: change.new
            for change in self.changes
            if change.new is not None
        }


class OrderedCollection:
    """
    Sequência ordenada de filhos de um mesmo pai

    owner é o pai (Board para listas, Lista para cards) e parent_field o
    nome do atributo do filho que aponta para ele.
    """

    def __init__(self, owner, parent_field: str, items: Iterable = ()):
        self.owner = owner
        self.parent_field = parent_field
        self.items = list(items)

    def __len__(self):
        return len(self.items)

    def __iter__(self):
        return iter(self.items)

    def __contains__(self, item_id):
        return any(str(item.id) == str(item_id) for item in self.items)

    @property
    def owner_id(self) -> str:
        return str(self.owner.id)

    def ids(self) -> List[str]:
        return [str(item.id) for item in self.items]

    def index_of(self, item_id) -> int:
        alvo = str(item_id)
        for index, item in enumerate(self.items):
            if str(item.id) == alvo:
                return index
        raise NotFound(f'Item {item_id} não encontrado')

    def get(self, item_id):
        return self.items[self.index_of(item_id)]

    def is_dense(self) -> bool:
        return positions_are_dense(self.items)


def reindex(collection: OrderedCollection) -> List[PositionChange]:
    """Reescreve posicao = índice para toda a coleção, na ordem atual"""
    changes = []
    for index, item in enumerate(collection.items):
        if item.posicao != index:
            changes.append(PositionChange(str(item.id), item.posicao, index))
            item.posicao = index
    return changes


def _attach(collection: OrderedCollection, item):
    setattr(item, collection.parent_field, collection.owner)


def _clamp(to_index, length: int) -> int:
    if to_index is None:
        return length
    return max(0, min(operator.index(to_index), length))


def append(collection: OrderedCollection, item) -> Delta:
    """Adiciona item ao final da coleção"""
    item.posicao = len(collection)
    _attach(collection, item)
    collection.items.append(item)

    return Delta(
        kind='append',
        item_id=str(item.id),
        to_parent_id=collection.owner_id,
        index=item.posicao,
        changes=[PositionChange(str(item.id), None, item.posicao)],
        item=item,
    )


def remove(collection: OrderedCollection, item_id) -> Delta:
    """Remove item pelo id e restaura a densidade dos irmãos"""
    index = collection.index_of(item_id)
    item = collection.items.pop(index)

    changes = [PositionChange(str(item.id), item.posicao, None)]
    changes.extend(reindex(collection))

    return Delta(
        kind='remove',
        item_id=str(item.id),
        from_parent_id=collection.owner_id,
        index=index,
        changes=changes,
        item=item,
    )


def reorder_all(collection: OrderedCollection, ordered_ids) -> Delta:
    """
    Substitui a ordem inteira da coleção pela permutação informada

    A lista de ids precisa ter o mesmo tamanho e o mesmo conjunto de ids
    da coleção atual; caso contrário nada é alterado.
    """
    ordered_ids = [str(item_id) for item_id in ordered_ids]
    atuais = collection.ids()

    if len(ordered_ids) != len(atuais) or set(ordered_ids) != set(atuais):
        raise OrderMismatch('Ordem informada não corresponde aos itens atuais')

    por_id = {str(item.id): item for item in collection.items}
    collection.items = [por_id[item_id] for item_id in ordered_ids]

    return Delta(
        kind='reorder',
        from_parent_id=collection.owner_id,
        to_parent_id=collection.owner_id,
        changes=reindex(collection),
    )


def move(item_id, source: OrderedCollection, target: OrderedCollection, to_index=None) -> Delta:
    """
    Move um item, dentro da mesma coleção ou entre coleções irmãs

    to_index fora do intervalo é ajustado para o limite mais próximo (o
    índice calculado pelo cliente pode estar defasado por edições
    concorrentes). None coloca o item no final.
    """
    index = source.index_of(item_id)
    mesma_colecao = source is target

    # Na mesma coleção o limite é calculado já sem o item
    destino = _clamp(to_index, len(target) - 1 if mesma_colecao else len(target))

    item = source.items.pop(index)
    changes = [] if mesma_colecao else reindex(source)

    target.items.insert(destino, item)
    _attach(target, item)
    changes.extend(reindex(target))

    return Delta(
        kind='move',
        item_id=str(item.id),
        from_parent_id=source.owner_id,
        to_parent_id=target.owner_id,
        index=destino,
        changes=changes,
        item=item,
    )
