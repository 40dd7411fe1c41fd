import json

import pytest
from django.test import Client

from apps.board.exceptions import BoardBusy
from apps.board.repository import board_repository
from apps.core.auth_service import auth_service
from apps.core.models import Card, Lista


def patch(client, url, dados):
    return client.patch(url, json.dumps(dados), content_type="application/json")


def put(client, url, dados):
    return client.put(url, json.dumps(dados), content_type="application/json")


def titulos(lista):
    return list(Card.objects.filter(lista=lista).order_by("posicao").values_list("titulo", flat=True))


@pytest.mark.django_db
def test_sem_token_retorna_401(board):
    resp = Client().get("/api/boards")
    assert resp.status_code == 401
    assert resp.json() == {"error": "No token provided"}


@pytest.mark.django_db
def test_token_invalido_retorna_401(board):
    resp = Client(HTTP_AUTHORIZATION="Bearer lixo").get("/api/boards")
    assert resp.status_code == 401
    assert resp.json()["error"] == "Invalid token"


@pytest.mark.django_db
def test_criar_e_listar_boards(api_dono, dono):
    resp = api_dono.post("/api/boards", {"name": "Novo"}, content_type="application/json")
    assert resp.status_code == 201
    criado = resp.json()
    assert criado["name"] == "Novo"
    assert criado["ownerId"] == str(dono.id)
    assert criado["members"] == []

    resp = api_dono.get("/api/boards")
    assert [b["id"] for b in resp.json()] == [criado["id"]]


@pytest.mark.django_db
def test_criar_board_sem_nome(api_dono):
    resp = api_dono.post("/api/boards", {}, content_type="application/json")
    assert resp.status_code == 400
    assert resp.json()["error"] == "Name is required"


@pytest.mark.django_db
def test_json_invalido(api_dono):
    resp = api_dono.post("/api/boards", "{nope", content_type="application/json")
    assert resp.status_code == 400


@pytest.mark.django_db
def test_obter_board_completo(api_membro, populado):
    resp = api_membro.get(f"/api/boards/{populado['board'].id}")
    assert resp.status_code == 200
    dados = resp.json()
    assert [lista["title"] for lista in dados["lists"]] == ["A", "B"]
    assert [card["title"] for card in dados["lists"][0]["cards"]] == ["a1", "a2", "a3"]
    assert [card["position"] for card in dados["lists"][0]["cards"]] == [0, 1, 2]


@pytest.mark.django_db
def test_outsider_recebe_403(api_outsider, populado):
    resp = api_outsider.get(f"/api/boards/{populado['board'].id}")
    assert resp.status_code == 403
    assert resp.json() == {"error": "Forbidden"}


@pytest.mark.django_db
def test_board_inexistente_404(api_dono):
    resp = api_dono.get("/api/boards/00000000-0000-0000-0000-000000000000")
    assert resp.status_code == 404


@pytest.mark.django_db
def test_renomear_e_excluir_board(api_dono, api_membro, populado):
    url = f"/api/boards/{populado['board'].id}"

    resp = put(api_membro, url, {"name": "Renomeado"})
    assert resp.status_code == 200
    assert resp.json()["name"] == "Renomeado"

    assert api_membro.delete(url).status_code == 403
    assert api_dono.delete(url).json() == {"success": True}
    assert api_dono.get(url).status_code == 404


@pytest.mark.django_db
def test_membros(api_dono, api_membro, board, dono, membro, outsider):
    url = f"/api/boards/{board.id}/members"

    resp = api_membro.get(url)
    assert [u["email"] for u in resp.json()] == [dono.email, membro.email]
    assert all(u["color"].startswith("#") for u in resp.json())

    assert api_membro.post(url, {"email": outsider.email}, content_type="application/json").status_code == 403

    resp = api_dono.post(url, {"email": "nao@existe.com"}, content_type="application/json")
    assert resp.status_code == 404
    assert resp.json()["error"] == "User not found"

    resp = api_dono.post(url, {"email": outsider.email}, content_type="application/json")
    assert resp.status_code == 200
    assert str(outsider.id) in resp.json()["members"]


@pytest.mark.django_db
def test_criar_lista_e_card(api_membro, populado):
    board_id = populado["board"].id

    resp = api_membro.post(f"/api/boards/{board_id}/lists", {"title": "C"}, content_type="application/json")
    assert resp.status_code == 201
    lista = resp.json()
    assert lista["position"] == 2
    assert lista["cards"] == []

    resp = api_membro.post(
        f"/api/boards/{board_id}/lists/{lista['id']}/cards",
        {"title": "c1", "description": "primeiro"},
        content_type="application/json",
    )
    assert resp.status_code == 201
    card = resp.json()
    assert (card["title"], card["description"], card["position"], card["status"]) == ("c1", "primeiro", 0, "todo")
    assert card["listId"] == lista["id"]


@pytest.mark.django_db
def test_criar_card_sem_titulo(api_membro, populado):
    resp = api_membro.post(
        f"/api/boards/{populado['board'].id}/lists/{populado['A'].id}/cards", {}, content_type="application/json"
    )
    assert resp.status_code == 400
    assert titulos(populado["A"]) == ["a1", "a2", "a3"]


@pytest.mark.django_db
def test_mover_card(api_membro, populado):
    resp = patch(api_membro, f"/api/boards/{populado['board'].id}/cards/move", {
        "cardId": str(populado["a2"].id),
        "fromListId": str(populado["A"].id),
        "toListId": str(populado["B"].id),
        "toIndex": 0,
    })

    assert resp.status_code == 200
    dados = resp.json()
    assert dados["success"] is True
    assert dados["toIndex"] == 0
    assert dados["card"]["listId"] == str(populado["B"].id)
    assert titulos(populado["A"]) == ["a1", "a3"]
    assert titulos(populado["B"]) == ["a2", "b1"]


@pytest.mark.django_db
def test_mover_card_indice_acima_do_limite(api_membro, populado):
    resp = patch(api_membro, f"/api/boards/{populado['board'].id}/cards/move", {
        "cardId": str(populado["a1"].id),
        "toListId": str(populado["B"].id),
        "toIndex": 9999,
    })
    assert resp.status_code == 200
    assert resp.json()["toIndex"] == 1


@pytest.mark.django_db
def test_mover_card_campos_obrigatorios(api_membro, populado):
    resp = patch(api_membro, f"/api/boards/{populado['board'].id}/cards/move", {"toIndex": 0})
    assert resp.status_code == 400


@pytest.mark.django_db
def test_reordenar_listas(api_membro, populado):
    url = f"/api/boards/{populado['board'].id}/lists/reorder"

    resp = patch(api_membro, url, {"listOrder": [str(populado["A"].id)]})
    assert resp.status_code == 400

    resp = patch(api_membro, url, {"listOrder": [str(populado["B"].id), str(populado["A"].id)]})
    assert resp.status_code == 200
    assert [lista["title"] for lista in resp.json()] == ["B", "A"]
    assert Lista.objects.get(id=populado["B"].id).posicao == 0


@pytest.mark.django_db
def test_reordenar_cards(api_membro, populado):
    a = populado
    resp = patch(api_membro, f"/api/boards/{a['board'].id}/lists/{a['A'].id}/cards/reorder", {
        "orderedIds": [str(a["a2"].id), str(a["a3"].id), str(a["a1"].id)],
    })
    assert resp.status_code == 200
    assert [card["title"] for card in resp.json()] == ["a2", "a3", "a1"]
    assert titulos(a["A"]) == ["a2", "a3", "a1"]


@pytest.mark.django_db
def test_atualizar_e_excluir_card(api_membro, populado):
    a = populado
    url = f"/api/boards/{a['board'].id}/lists/{a['A'].id}/cards/{a['a2'].id}"

    resp = put(api_membro, url, {"title": "a2!", "status": "in-progress"})
    assert resp.status_code == 200
    assert (resp.json()["title"], resp.json()["status"], resp.json()["position"]) == ("a2!", "in-progress", 1)

    assert api_membro.delete(url).json() == {"success": True}
    assert titulos(a["A"]) == ["a1", "a3"]
    assert api_membro.delete(url).status_code == 404


@pytest.mark.django_db
def test_renomear_e_excluir_lista(api_dono, populado):
    url = f"/api/boards/{populado['board'].id}/lists/{populado['A'].id}"

    resp = put(api_dono, url, {"title": "Backlog"})
    assert resp.status_code == 200
    assert resp.json()["title"] == "Backlog"
    assert len(resp.json()["cards"]) == 3

    assert api_dono.delete(url).status_code == 200
    assert Lista.objects.get(id=populado["B"].id).posicao == 0


@pytest.mark.django_db
def test_responsaveis(api_dono, populado, membro, outsider):
    a = populado
    base = f"/api/boards/{a['board'].id}/lists/{a['A'].id}/cards/{a['a1'].id}/assignees"

    resp = api_dono.post(base, {"userId": str(outsider.id)}, content_type="application/json")
    assert resp.status_code == 400
    assert resp.json()["error"] == "User not a member"

    resp = api_dono.post(base, {"userId": str(membro.id)}, content_type="application/json")
    assert resp.json()["assignees"] == [str(membro.id)]

    resp = api_dono.delete(f"{base}/{membro.id}")
    assert resp.json()["assignees"] == []


@pytest.mark.django_db
def test_board_ocupado_retorna_503(api_membro, populado, monkeypatch):
    def ocupado(board_id):
        raise BoardBusy("Board ocupado, tente novamente")

    monkeypatch.setattr(board_repository, "checkout", ocupado)

    resp = api_membro.post(
        f"/api/boards/{populado['board'].id}/lists/{populado['A'].id}/cards",
        {"title": "x"},
        content_type="application/json",
    )
    assert resp.status_code == 503
    assert resp["Retry-After"] == "1"
    assert resp.json()["retryable"] is True
    assert titulos(populado["A"]) == ["a1", "a2", "a3"]


@pytest.mark.django_db
def test_metodo_nao_permitido(api_membro, populado):
    assert api_membro.get(f"/api/boards/{populado['board'].id}/cards/move").status_code == 405


@pytest.mark.django_db
def test_token_funciona_com_csrf_exigido(dono, populado):
    token = auth_service.emitir_token(dono)
    client = Client(enforce_csrf_checks=True, HTTP_AUTHORIZATION=f"Bearer {token}")

    resp = client.post(
        f"/api/boards/{populado['board'].id}/lists", {"title": "C"}, content_type="application/json"
    )
    assert resp.status_code == 201
    assert Lista.objects.filter(board=populado["board"]).count() == 3
