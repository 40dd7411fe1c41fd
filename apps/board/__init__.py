# apps/board/__init__.py

"""
Board - Aplicação Kanban colaborativa

Funcionalidades:
- Motor de ordenação de listas e cards (posições densas)
- Agregado do board com lock por board nas mutações
- API JSON de boards, membros, listas e cards
- WebSockets para atualizações em tempo real
"""
