# apps/board/routing.py

from django.urls import re_path
from . import consumers

# Rotas WebSocket para a aplicação board
websocket_urlpatterns = [
    # Atualizações em tempo real de um board específico
    re_path(r'ws/board/(?P<board_id>[0-9a-fA-F-]+)/$', consumers.BoardConsumer.as_asgi()),
]
