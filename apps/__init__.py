# apps/__init__.py

"""
Kanban colaborativo - Aplicações Django

Este pacote contém todas as aplicações do sistema:
- core: Models principais, autenticação e permissões
- board: Motor de ordenação, API do Kanban e WebSockets
"""

__version__ = '0.1.0'
