# apps/core/management/commands/verificar_posicoes.py

from django.core.management.base import BaseCommand, CommandError

from apps.board import ordering
from apps.board.exceptions import KanbanError, NotFound
from apps.board.repository import board_repository
from apps.core.models import Board


class Command(BaseCommand):
    help = 'Verifica se as posições de listas e cards estão densas (0..N-1) em todos os boards'

    def add_arguments(self, parser):
        parser.add_argument(
            '--corrigir',
            action='store_true',
            help='Reescreve as posições inconsistentes mantendo a ordem atual',
        )

    def handle(self, *args, **options):
        corrigir = options['corrigir']

        self.stdout.write('🔍 Verificando posições dos boards...')

        inconsistentes = 0
        corrigidos = 0

        for board_id in Board.objects.values_list('id', flat=True):
            try:
                aggregate = board_repository.load(board_id)
            except NotFound:
                # Excluído durante a verificação
                continue

            problemas = [colecao for colecao in aggregate.collections() if not colecao.is_dense()]
            if not problemas:
                continue

            inconsistentes += 1
            for colecao in problemas:
                self.stdout.write(
                    self.style.WARNING(f'  ⚠️ {self._descrever(colecao)}: {self._posicoes(colecao)}')
                )

            if corrigir:
                self._corrigir_board(board_id)
                corrigidos += 1

        if not inconsistentes:
            self.stdout.write(self.style.SUCCESS('✅ Todas as posições estão consistentes'))
            return

        if corrigir:
            self.stdout.write(self.style.SUCCESS(f'✅ {corrigidos} board(s) corrigido(s)'))
        else:
            self.stdout.write(
                self.style.ERROR(
                    f'❌ {inconsistentes} board(s) com posições inconsistentes. '
                    'Rode novamente com --corrigir para reescrevê-las.'
                )
            )

    def _corrigir_board(self, board_id):
        """
        Reindexa as coleções do board dentro do mesmo lock das mutações

        O agregado já vem ordenado por (posicao, criado_em), então
        duplicadas ficam na ordem de criação.
        """
        try:
            with board_repository.checkout(board_id) as aggregate:
                for colecao in aggregate.collections():
                    if not colecao.is_dense():
                        ordering.reindex(colecao)
        except KanbanError as exc:
            raise CommandError(f'Erro ao corrigir board {board_id}: {exc.message}') from exc

        self.stdout.write(f'  🔧 Board {board_id} reindexado')

    def _descrever(self, colecao):
        if colecao.parent_field == 'board':
            return f'Listas do board "{colecao.owner.nome}" ({colecao.owner_id})'
        return f'Cards da lista "{colecao.owner.titulo}" ({colecao.owner_id})'

    def _posicoes(self, colecao):
        return [item.posicao for item in colecao]
