# apps/board/serializers.py

"""Representação JSON dos objetos do board (mesmo formato da API original)"""

from apps.core.utils import gerar_cor_usuario


def serializar_usuario(usuario):
    return {
        'id': str(usuario.id),
        'name': usuario.nome,
        'email': usuario.email,
        'avatar': usuario.avatar.url if usuario.avatar else None,
        'color': gerar_cor_usuario(usuario.email),
    }


def serializar_card(card):
    return {
        'id': str(card.id),
        'listId': str(card.lista_id),
        'title': card.titulo,
        'description': card.descricao,
        'position': card.posicao,
        'status': card.status,
        'creatorId': str(card.criado_por_id) if card.criado_por_id else None,
        'assignees': [str(usuario.id) for usuario in card.responsaveis.all()],
        'createdAt': card.criado_em.isoformat() if card.criado_em else None,
    }


def serializar_lista(lista, cards=()):
    return {
        'id': str(lista.id),
        'title': lista.titulo,
        'position': lista.posicao,
        'cards': [serializar_card(card) for card in cards],
    }


def serializar_board_resumo(board):
    return {
        'id': str(board.id),
        'ownerId': str(board.dono_id),
        'name': board.nome,
        'members': sorted(str(membro.id) for membro in board.membros.all()),
        'createdAt': board.criado_em.isoformat() if board.criado_em else None,
    }


def serializar_board(aggregate):
    """Board completo, com listas e cards em ordem"""
    dados = serializar_board_resumo(aggregate.board)
    dados['lists'] = [
        serializar_lista(lista, aggregate.cards_of(lista.id))
        for lista in aggregate.lists
    ]
    return dados
