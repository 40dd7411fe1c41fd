# apps/board/broadcast.py

"""
Publicação de eventos do board para os clientes conectados via WebSocket

Fire-and-forget: a mutação já está gravada quando o evento sai, então
falha ao publicar é registrada em log e nunca desfaz nada.
"""

import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.db import transaction
from django.utils import timezone

logger = logging.getLogger(__name__)


def group_name(board_id):
    return f'board_{board_id}'


def publish(board_id, event_name, payload, actor_id=None):
    """Envia o evento para o grupo do board"""
    channel_layer = get_channel_layer()
    if channel_layer is None:
        logger.warning(f"⚠️ Sem channel layer configurado, evento {event_name} descartado")
        return

    try:
        async_to_sync(channel_layer.group_send)(
            group_name(board_id),
            {
                'type': 'board.event',
                'event': event_name,
                'payload': payload,
                'actor': str(actor_id) if actor_id else None,
                'timestamp': timezone.now().isoformat(),
            }
        )
    except Exception:
        logger.exception(f"❌ Erro ao publicar {event_name} no board {board_id}")


def publish_on_commit(board_id, event_name, payload, actor_id=None):
    """Publica somente depois que a transação corrente for confirmada"""
    transaction.on_commit(lambda: publish(board_id, event_name, payload, actor_id))
