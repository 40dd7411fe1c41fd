import pytest
from django.test import Client

from apps.board.services import BoardService
from apps.core.auth_service import auth_service
from apps.core.models import Board, Card, Lista, Usuario


def criar_usuario(email, nome, senha="senha123"):
    return Usuario.objects.create_user(username=email, email=email, password=senha, nome=nome)


@pytest.fixture
def dono(db):
    return criar_usuario("dono@example.com", "Dona do Board")


@pytest.fixture
def membro(db):
    return criar_usuario("membro@example.com", "Membro")


@pytest.fixture
def outsider(db):
    return criar_usuario("outsider@example.com", "De Fora")


@pytest.fixture
def board(db, dono, membro):
    board = Board.objects.create(dono=dono, nome="Projeto")
    board.membros.add(membro)
    return board


@pytest.fixture
def populado(board, dono):
    """
    Board com duas listas:
      A: a1, a2, a3
      B: b1
    """
    lista_a = Lista.objects.create(board=board, titulo="A", posicao=0)
    lista_b = Lista.objects.create(board=board, titulo="B", posicao=1)

    cards = {}
    for posicao, nome in enumerate(["a1", "a2", "a3"]):
        cards[nome] = Card.objects.create(lista=lista_a, titulo=nome, posicao=posicao, criado_por=dono)
    cards["b1"] = Card.objects.create(lista=lista_b, titulo="b1", posicao=0, criado_por=dono)

    return {"board": board, "A": lista_a, "B": lista_b, **cards}


@pytest.fixture
def eventos():
    """Eventos publicados: (board_id, evento, payload, actor_id)"""
    return []


@pytest.fixture
def servico(eventos):
    return BoardService(publisher=lambda *args: eventos.append(args))


def cliente_com_token(usuario):
    return Client(HTTP_AUTHORIZATION=f"Bearer {auth_service.emitir_token(usuario)}")


@pytest.fixture
def api_dono(dono):
    return cliente_com_token(dono)


@pytest.fixture
def api_membro(membro):
    return cliente_com_token(membro)


@pytest.fixture
def api_outsider(outsider):
    return cliente_com_token(outsider)
