# apps/board/consumers.py

import json
import logging
from urllib.parse import parse_qs

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncWebsocketConsumer
from django.core.exceptions import ValidationError
from django.utils import timezone

from apps.core.auth_service import TokenInvalido, auth_service
from apps.core.models import Board
from apps.core.permissions import KanbanPermissions

from .broadcast import group_name
from .exceptions import NotFound
from .repository import board_repository
from .serializers import serializar_board

logger = logging.getLogger(__name__)


class BoardConsumer(AsyncWebsocketConsumer):
    """
    Consumer WebSocket para atualizações em tempo real do board Kanban

    Funcionalidades:
    - Repasse dos eventos de mutação publicados pelo BoardService
    - Indicação de usuários online
    - Indicação de quem está editando um card ou lista
    - Sincronização do estado completo sob demanda
    - Heartbeat (ping/pong)
    """

    async def connect(self):
        """
        Conecta usuário ao grupo do board
        Verifica autenticação e participação antes de aceitar conexão
        """
        self.board_id = str(self.scope['url_route']['kwargs']['board_id'])
        self.user = await self.get_user()

        if self.user is None:
            logger.warning("❌ Conexão WebSocket rejeitada - usuário não autenticado")
            await self.close()
            return

        has_access = await self.check_board_access()
        if not has_access:
            logger.warning(f"❌ Conexão WebSocket rejeitada - {self.user.email} sem acesso ao board {self.board_id}")
            await self.close()
            return

        self.board_group_name = group_name(self.board_id)
        await self.channel_layer.group_add(
            self.board_group_name,
            self.channel_name
        )

        await self.accept()

        # Notificar outros usuários que alguém entrou
        await self.channel_layer.group_send(
            self.board_group_name,
            {
                'type': 'user_joined',
                'message': self.presence_message()
            }
        )

        logger.info(f"✅ WebSocket conectado - {self.user.email} no board {self.board_id}")

    async def disconnect(self, close_code):
        if hasattr(self, 'board_group_name'):
            await self.channel_layer.group_send(
                self.board_group_name,
                {
                    'type': 'user_left',
                    'message': self.presence_message()
                }
            )

            await self.channel_layer.group_discard(
                self.board_group_name,
                self.channel_name
            )

            logger.info(f"🔌 WebSocket desconectado - {self.user.email} do board {self.board_id}")

    async def receive(self, text_data=None, bytes_data=None):
        """
        Recebe mensagens do cliente WebSocket

        Mutações não passam por aqui: o cliente usa a API HTTP e recebe o
        resultado pelo grupo do board.
        """
        try:
            data = json.loads(text_data or '')
        except json.JSONDecodeError:
            logger.error(f"❌ JSON inválido recebido via WebSocket de {self.user.email}")
            return

        message_type = data.get('type') if isinstance(data, dict) else None

        if message_type == 'ping':
            await self.send(text_data=json.dumps({
                'type': 'pong',
                'timestamp': self.get_timestamp()
            }))

        # Indicação de edição (o cliente antigo usa hífen)
        elif message_type in ('start_editing', 'stop_editing', 'start-editing', 'stop-editing'):
            await self.channel_layer.group_send(
                self.board_group_name,
                {
                    'type': 'user_editing',
                    'message': {
                        'userId': str(self.user.id),
                        'name': self.user.nome or self.user.email,
                        'itemId': data.get('itemId'),
                        'itemType': data.get('itemType'),
                        'editing': message_type.startswith('start'),
                        'timestamp': self.get_timestamp()
                    }
                }
            )

        elif message_type == 'sync_board':
            board_data = await self.get_board_state()
            if board_data is None:
                # Board excluído ou acesso revogado desde a conexão
                await self.close()
                return
            await self.send(text_data=json.dumps({
                'type': 'board_sync',
                'payload': board_data,
                'timestamp': self.get_timestamp()
            }))

    # === Handlers de eventos do grupo ===

    async def board_event(self, event):
        """Repassa uma mutação aceita para o cliente"""
        await self.send(text_data=json.dumps({
            'type': event['event'],
            'payload': event['payload'],
            'actor': event.get('actor'),
            'timestamp': event.get('timestamp') or self.get_timestamp()
        }))

    async def user_joined(self, event):
        message = event['message']
        # Não enviar para o próprio usuário
        if message['userId'] != str(self.user.id):
            await self.send(text_data=json.dumps({
                'type': 'user_joined',
                'payload': message
            }))

    async def user_left(self, event):
        message = event['message']
        if message['userId'] != str(self.user.id):
            await self.send(text_data=json.dumps({
                'type': 'user_left',
                'payload': message
            }))

    async def user_editing(self, event):
        message = event['message']
        if message['userId'] != str(self.user.id):
            await self.send(text_data=json.dumps({
                'type': 'user_editing',
                'payload': message
            }))

    # === Métodos auxiliares ===

    async def get_user(self):
        """
        Usuário da sessão (AuthMiddlewareStack) ou do token em ?token=

        Retorna None quando nenhum dos dois identifica um usuário.
        """
        user = self.scope.get('user')
        if user is not None and user.is_authenticated:
            return user

        query = parse_qs(self.scope.get('query_string', b'').decode())
        token = (query.get('token') or [None])[0]
        if not token:
            return None

        try:
            return await database_sync_to_async(auth_service.validar_token)(token)
        except TokenInvalido as exc:
            logger.info(f"🔑 Token WebSocket recusado: {exc}")
            return None

    @database_sync_to_async
    def check_board_access(self):
        try:
            board = Board.objects.select_related('dono').prefetch_related('membros').get(id=self.board_id)
        except (Board.DoesNotExist, ValidationError, ValueError):
            return False
        return KanbanPermissions.is_member(board, self.user.id)

    @database_sync_to_async
    def get_board_state(self):
        """Estado completo do board para sincronização"""
        try:
            aggregate = board_repository.load(self.board_id)
        except NotFound:
            return None
        if not KanbanPermissions.is_member(aggregate.board, self.user.id):
            return None
        return serializar_board(aggregate)

    def presence_message(self):
        return {
            'userId': str(self.user.id),
            'name': self.user.nome or self.user.email,
            'timestamp': self.get_timestamp()
        }

    def get_timestamp(self):
        return timezone.now().isoformat()
