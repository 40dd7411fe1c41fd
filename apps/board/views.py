# apps/board/views.py

"""
API JSON do board

As views só traduzem HTTP <-> serviço: validação de acesso, motor de
ordenação, persistência e broadcast ficam no BoardService.
"""

from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods
from django.http import JsonResponse

from apps.core.permissions import api_login_required
from apps.core.utils import api_view, ler_json

from .serializers import (
    serializar_board,
    serializar_board_resumo,
    serializar_card,
    serializar_lista,
    serializar_usuario,
)
from .services import board_service


def _sucesso():
    return JsonResponse({'success': True})


# === BOARDS ===

@csrf_exempt
@require_http_methods(['GET', 'POST'])
@api_login_required
@api_view
def boards(request):
    """
    GET: boards do usuário (dono ou membro)
    POST: cria board {name}
    """
    if request.method == 'POST':
        dados = ler_json(request)
        board = board_service.criar_board(request.user, dados.get('name'))
        return JsonResponse(serializar_board_resumo(board), status=201)

    meus_boards = board_service.listar_boards(request.user)
    return JsonResponse([serializar_board_resumo(board) for board in meus_boards], safe=False)


@csrf_exempt
@require_http_methods(['GET', 'PUT', 'DELETE'])
@api_login_required
@api_view
def board_detalhe(request, board_id):
    if request.method == 'PUT':
        dados = ler_json(request)
        aggregate = board_service.renomear_board(request.user, board_id, dados.get('name'))
        return JsonResponse(serializar_board(aggregate))

    if request.method == 'DELETE':
        board_service.excluir_board(request.user, board_id)
        return _sucesso()

    aggregate = board_service.obter_board(request.user, board_id)
    return JsonResponse(serializar_board(aggregate))


@csrf_exempt
@require_http_methods(['GET', 'POST'])
@api_login_required
@api_view
def membros(request, board_id):
    """
    GET: dono + membros
    POST: convida usuário existente pelo email (apenas dono)
    """
    if request.method == 'POST':
        dados = ler_json(request)
        aggregate = board_service.adicionar_membro(request.user, board_id, dados.get('email'))
        return JsonResponse(serializar_board_resumo(aggregate.board))

    usuarios = board_service.listar_membros(request.user, board_id)
    return JsonResponse([serializar_usuario(usuario) for usuario in usuarios], safe=False)


# === LISTAS ===

@csrf_exempt
@require_http_methods(['POST'])
@api_login_required
@api_view
def criar_lista(request, board_id):
    dados = ler_json(request)
    lista = board_service.criar_lista(request.user, board_id, dados.get('title'))
    return JsonResponse(serializar_lista(lista), status=201)


@csrf_exempt
@require_http_methods(['PATCH'])
@api_login_required
@api_view
def reordenar_listas(request, board_id):
    """Recebe {listOrder: [ids...]} (ou orderedIds) com a permutação completa"""
    dados = ler_json(request)
    ordem = dados.get('listOrder', dados.get('orderedIds'))
    aggregate = board_service.reordenar_listas(request.user, board_id, ordem)
    return JsonResponse([serializar_lista(lista) for lista in aggregate.lists], safe=False)


@csrf_exempt
@require_http_methods(['PUT', 'DELETE'])
@api_login_required
@api_view
def lista_detalhe(request, board_id, list_id):
    if request.method == 'DELETE':
        board_service.excluir_lista(request.user, board_id, list_id)
        return _sucesso()

    dados = ler_json(request)
    aggregate, lista = board_service.renomear_lista(request.user, board_id, list_id, dados.get('title'))
    return JsonResponse(serializar_lista(lista, aggregate.cards_of(list_id)))


# === CARDS ===

@csrf_exempt
@require_http_methods(['POST'])
@api_login_required
@api_view
def criar_card(request, board_id, list_id):
    dados = ler_json(request)
    card = board_service.criar_card(
        request.user, board_id, list_id,
        dados.get('title'),
        dados.get('description', '')
    )
    return JsonResponse(serializar_card(card), status=201)


@csrf_exempt
@require_http_methods(['PATCH'])
@api_login_required
@api_view
def reordenar_cards(request, board_id, list_id):
    dados = ler_json(request)
    cards = board_service.reordenar_cards(request.user, board_id, list_id, dados.get('orderedIds'))
    return JsonResponse([serializar_card(card) for card in cards], safe=False)


@csrf_exempt
@require_http_methods(['PUT', 'DELETE'])
@api_login_required
@api_view
def card_detalhe(request, board_id, list_id, card_id):
    if request.method == 'DELETE':
        board_service.excluir_card(request.user, board_id, list_id, card_id)
        return _sucesso()

    dados = ler_json(request)
    card = board_service.atualizar_card(
        request.user, board_id, list_id, card_id,
        titulo=dados.get('title'),
        descricao=dados.get('description'),
        status=dados.get('status'),
    )
    return JsonResponse(serializar_card(card))


@csrf_exempt
@require_http_methods(['PATCH'])
@api_login_required
@api_view
def mover_card(request, board_id):
    """
    Move card entre listas (ou dentro da mesma lista)

    Corpo: {cardId, fromListId?, toListId, toIndex?}. toIndex fora do
    intervalo é ajustado ao limite mais próximo.
    """
    dados = ler_json(request)
    delta = board_service.mover_card(
        request.user, board_id,
        card_id=dados.get('cardId'),
        to_list_id=dados.get('toListId'),
        to_index=dados.get('toIndex'),
        from_list_id=dados.get('fromListId'),
    )
    return JsonResponse({
        'success': True,
        'card': serializar_card(delta.item),
        'fromListId': delta.from_parent_id,
        'toListId': delta.to_parent_id,
        'toIndex': delta.index,
    })


# === RESPONSÁVEIS ===

@csrf_exempt
@require_http_methods(['POST'])
@api_login_required
@api_view
def adicionar_responsavel(request, board_id, list_id, card_id):
    dados = ler_json(request)
    card = board_service.adicionar_responsavel(
        request.user, board_id, list_id, card_id, dados.get('userId')
    )
    return JsonResponse(serializar_card(card))


@csrf_exempt
@require_http_methods(['DELETE'])
@api_login_required
@api_view
def remover_responsavel(request, board_id, list_id, card_id, user_id):
    card = board_service.remover_responsavel(request.user, board_id, list_id, card_id, user_id)
    return JsonResponse(serializar_card(card))
