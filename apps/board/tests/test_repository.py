import pytest
from django.core.management import call_command
from django.db import DatabaseError, OperationalError

from apps.board import ordering
from apps.board.exceptions import BoardBusy, NotFound, StorageError
from apps.board.repository import board_repository
from apps.core.models import Card, Lista


@pytest.mark.django_db
def test_load_monta_o_agregado_em_ordem(populado):
    aggregate = board_repository.load(populado["board"].id)

    assert [lista.titulo for lista in aggregate.lists] == ["A", "B"]
    assert [card.titulo for card in aggregate.cards_of(populado["A"].id)] == ["a1", "a2", "a3"]
    assert aggregate.is_dense()
    assert aggregate.pending_changes() == {
        "new_lists": [], "changed_lists": [], "removed_lists": [],
        "new_cards": [], "changed_cards": [], "removed_cards": [],
    }


@pytest.mark.django_db
def test_load_board_inexistente():
    with pytest.raises(NotFound):
        board_repository.load("00000000-0000-0000-0000-000000000000")


@pytest.mark.django_db
def test_checkout_grava_apenas_a_diferenca(populado):
    with board_repository.checkout(populado["board"].id) as aggregate:
        ordering.move(
            str(populado["a1"].id),
            aggregate.cards_of(populado["A"].id),
            aggregate.cards_of(populado["B"].id),
            1,
        )
        mudancas = aggregate.pending_changes()
        assert {c.titulo for c in mudancas["changed_cards"]} == {"a1", "a2", "a3"}

    a1 = Card.objects.get(id=populado["a1"].id)
    assert (a1.lista_id, a1.posicao) == (populado["B"].id, 1)


@pytest.mark.django_db
def test_checkout_desfaz_tudo_em_erro(populado):
    with pytest.raises(RuntimeError):
        with board_repository.checkout(populado["board"].id) as aggregate:
            ordering.remove(aggregate.cards_of(populado["A"].id), populado["a1"].id)
            aggregate.add_list(Lista(titulo="C"))
            raise RuntimeError("falhou no meio")

    assert Card.objects.filter(lista=populado["A"]).count() == 3
    assert Lista.objects.count() == 2


@pytest.mark.django_db
def test_save_recusa_posicoes_nao_densas(populado):
    aggregate = board_repository.load(populado["board"].id)
    aggregate.cards_of(populado["A"].id).get(populado["a3"].id).posicao = 7

    with pytest.raises(StorageError):
        board_repository.save(aggregate)
    assert Card.objects.get(id=populado["a3"].id).posicao == 2


@pytest.mark.django_db
def test_save_converte_erro_de_banco(populado, monkeypatch):
    aggregate = board_repository.load(populado["board"].id)
    ordering.remove(aggregate.cards_of(populado["A"].id), populado["a1"].id)

    def quebra(*args, **kwargs):
        raise DatabaseError("disco cheio")

    monkeypatch.setattr(Card.objects, "bulk_update", quebra)

    with pytest.raises(StorageError):
        board_repository.save(aggregate)


@pytest.mark.django_db
def test_lock_ocupado_vira_board_busy(populado, monkeypatch):
    def travado(board_id, for_update=False):
        raise OperationalError("database is locked")

    monkeypatch.setattr(board_repository, "load", travado)

    with pytest.raises(BoardBusy) as exc:
        with board_repository.checkout(populado["board"].id):
            pass
    assert exc.value.retryable is True


# === COMANDO verificar_posicoes ===

@pytest.mark.django_db
def test_verificar_posicoes_sem_problemas(populado, capsys):
    call_command("verificar_posicoes")
    assert "consistentes" in capsys.readouterr().out


@pytest.mark.django_db
def test_verificar_posicoes_corrige(populado, capsys):
    Card.objects.filter(id=populado["a2"].id).update(posicao=5)
    Card.objects.filter(id=populado["a3"].id).update(posicao=5)
    Lista.objects.filter(id=populado["B"].id).update(posicao=0)

    call_command("verificar_posicoes")
    saida = capsys.readouterr().out
    assert "inconsistentes" in saida
    assert Card.objects.get(id=populado["a2"].id).posicao == 5

    call_command("verificar_posicoes", "--corrigir")

    aggregate = board_repository.load(populado["board"].id)
    assert aggregate.is_dense()
    assert [c.titulo for c in aggregate.cards_of(populado["A"].id)] == ["a1", "a2", "a3"]
