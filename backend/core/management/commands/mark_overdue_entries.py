from django.core.management.base import BaseCommand

from core.services.financial import mark_overdue


class Command(BaseCommand):
    help = 'Marca como VENCIDO os lançamentos PENDENTE com vencimento no passado.'

    def add_arguments(self, parser):
        parser.add_argument('--company-id', type=int, default=None, help='Restringe a uma empresa')

    def handle(self, *args, **options):
        total = mark_overdue(company_id=options['company_id'])
        self.stdout.write(self.style.SUCCESS(f'{total} lançamento(s) marcado(s) como vencido(s).'))
