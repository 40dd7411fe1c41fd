# apps/core/__init__.py

"""
Core - Aplicação principal do Kanban

Contém:
- Models (Usuario, Board, Lista, Card)
- Sistema de permissões dos boards
- Autenticação por token e views da API de conta
- Comando de verificação das posições
"""
