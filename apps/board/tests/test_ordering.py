import uuid
from types import SimpleNamespace

import pytest

from apps.board import ordering
from apps.board.exceptions import NotFound, OrderMismatch


def item(nome, posicao):
    return SimpleNamespace(id=nome, posicao=posicao, lista=None)


def colecao(owner_id, *nomes):
    owner = SimpleNamespace(id=owner_id)
    return ordering.OrderedCollection(owner, "lista", [item(nome, i) for i, nome in enumerate(nomes)])


def estado(c):
    return [(i.id, i.posicao) for i in c]


@pytest.fixture
def lista_a():
    return colecao("A", "a1", "a2", "a3")


@pytest.fixture
def lista_b():
    return colecao("B", "b1")


def test_positions_are_dense():
    assert ordering.positions_are_dense([item("x", 1), item("y", 0)])
    assert ordering.positions_are_dense([])
    assert not ordering.positions_are_dense([item("x", 0), item("y", 2)])
    assert not ordering.positions_are_dense([item("x", 0), item("y", 0)])


def test_append_vai_para_o_final(lista_b):
    novo = item("b2", None)
    delta = ordering.append(lista_b, novo)

    assert estado(lista_b) == [("b1", 0), ("b2", 1)]
    assert novo.lista is lista_b.owner
    assert delta.index == 1
    assert delta.to_parent_id == "B"
    assert delta.positions == {"b2": 1}


def test_remove_reindexa_os_irmaos(lista_a):
    delta = ordering.remove(lista_a, "a1")

    assert estado(lista_a) == [("a2", 0), ("a3", 1)]
    assert delta.item_id == "a1"
    assert delta.positions == {"a2": 0, "a3": 1}


def test_remove_inexistente(lista_a):
    with pytest.raises(NotFound):
        ordering.remove(lista_a, "zz")
    assert estado(lista_a) == [("a1", 0), ("a2", 1), ("a3", 2)]


def test_append_e_remove_restauram_a_colecao(lista_a):
    antes = estado(lista_a)
    ordering.append(lista_a, item("x", None))
    ordering.remove(lista_a, "x")
    assert estado(lista_a) == antes


def test_reorder_all_aplica_a_permutacao():
    listas = colecao("board", "L1", "L2", "L3")
    delta = ordering.reorder_all(listas, ["L3", "L1", "L2"])

    assert estado(listas) == [("L3", 0), ("L1", 1), ("L2", 2)]
    assert delta.positions == {"L3": 0, "L1": 1, "L2": 2}


@pytest.mark.parametrize("ordem", [
    ["a1", "a2"],
    ["a1", "a2", "a3", "a4"],
    ["a1", "a2", "zz"],
    ["a1", "a1", "a2"],
])
def test_reorder_all_rejeita_ordem_diferente(lista_a, ordem):
    with pytest.raises(OrderMismatch):
        ordering.reorder_all(lista_a, ordem)
    assert estado(lista_a) == [("a1", 0), ("a2", 1), ("a3", 2)]


def test_reorder_all_aceita_uuid():
    ids = [uuid.uuid4() for _ in range(2)]
    c = ordering.OrderedCollection(SimpleNamespace(id="o"), "lista", [item(i, n) for n, i in enumerate(ids)])
    ordering.reorder_all(c, [str(ids[1]), str(ids[0])])
    assert [i.id for i in c] == [ids[1], ids[0]]


def test_move_entre_listas(lista_a, lista_b):
    a2 = lista_a.get("a2")
    delta = ordering.move("a2", lista_a, lista_b, 0)

    assert estado(lista_a) == [("a1", 0), ("a3", 1)]
    assert estado(lista_b) == [("a2", 0), ("b1", 1)]
    assert a2.lista is lista_b.owner
    assert delta.from_parent_id == "A"
    assert delta.to_parent_id == "B"
    assert delta.index == 0
    assert delta.positions == {"a3": 1, "a2": 0, "b1": 1}


def test_move_ajusta_indice_fora_do_intervalo(lista_a):
    destino = colecao("C", "c1", "c2", "c3")
    delta = ordering.move("a1", lista_a, destino, 9999)

    assert delta.index == 3
    assert estado(destino)[-1] == ("a1", 3)


def test_move_indice_negativo_vai_para_o_inicio(lista_a, lista_b):
    ordering.move("a3", lista_a, lista_b, -5)
    assert estado(lista_b) == [("a3", 0), ("b1", 1)]


def test_move_sem_indice_vai_para_o_final(lista_a, lista_b):
    delta = ordering.move("a1", lista_a, lista_b)
    assert delta.index == 1
    assert estado(lista_b) == [("b1", 0), ("a1", 1)]


def test_move_na_mesma_lista(lista_a):
    ordering.move("a1", lista_a, lista_a, 2)
    assert estado(lista_a) == [("a2", 0), ("a3", 1), ("a1", 2)]


def test_move_mesma_lista_indice_limitado_apos_remocao(lista_a):
    delta = ordering.move("a1", lista_a, lista_a, 10)
    assert delta.index == 2
    assert lista_a.is_dense()


def test_move_para_a_propria_posicao_nao_muda_nada(lista_a):
    delta = ordering.move("a2", lista_a, lista_a, 1)

    assert estado(lista_a) == [("a1", 0), ("a2", 1), ("a3", 2)]
    assert delta.changes == []


def test_move_item_ausente_nao_altera_nada(lista_a, lista_b):
    with pytest.raises(NotFound):
        ordering.move("b1", lista_a, lista_b, 0)

    assert estado(lista_a) == [("a1", 0), ("a2", 1), ("a3", 2)]
    assert estado(lista_b) == [("b1", 0)]


@pytest.mark.parametrize("indice", ["x", "1", 1.5, 1.5j])
def test_move_indice_invalido_nao_altera_nada(lista_a, lista_b, indice):
    with pytest.raises(TypeError):
        ordering.move("a2", lista_a, lista_b, indice)

    assert estado(lista_a) == [("a1", 0), ("a2", 1), ("a3", 2)]
    assert estado(lista_b) == [("b1", 0)]


def test_move_indice_invalido_na_mesma_lista_nao_altera_nada(lista_a):
    with pytest.raises(TypeError):
        ordering.move("a1", lista_a, lista_a, "fim")

    assert estado(lista_a) == [("a1", 0), ("a2", 1), ("a3", 2)]


def test_reindex_corrige_buracos_e_repeticoes():
    c = ordering.OrderedCollection(SimpleNamespace(id="o"), "lista", [item("x", 0), item("y", 0), item("z", 7)])
    assert not c.is_dense()

    changes = ordering.reindex(c)

    assert c.is_dense()
    assert estado(c) == [("x", 0), ("y", 1), ("z", 2)]
    assert [(ch.item_id, ch.old, ch.new) for ch in changes] == [("y", 0, 1), ("z", 7, 2)]


def test_sequencia_de_operacoes_mantem_densidade(lista_a, lista_b):
    ordering.append(lista_a, item("a4", None))
    ordering.move("a1", lista_a, lista_b, 1)
    ordering.remove(lista_a, "a3")
    ordering.reorder_all(lista_b, list(reversed(lista_b.ids())))
    ordering.move("b1", lista_b, lista_a, 0)

    assert lista_a.is_dense()
    assert lista_b.is_dense()
    assert set(lista_a.ids()) | set(lista_b.ids()) == {"a1", "a2", "a4", "b1"}
