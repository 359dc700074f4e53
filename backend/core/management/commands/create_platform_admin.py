from django.core.management.base import BaseCommand, CommandError

from core.models import CustomUser, Role, PLATFORM_ROLES


class Command(BaseCommand):
    help = 'Cria um usuário da plataforma (ADMINISTRADOR ou SUB_MASTER), sem empresa.'

    def add_arguments(self, parser):
        parser.add_argument('--email', required=True)
        parser.add_argument('--password', required=True)
        parser.add_argument('--first-name', default='Administrador')
        parser.add_argument('--last-name', default='')
        parser.add_argument(
            '--role', default=Role.ADMINISTRADOR, choices=sorted(PLATFORM_ROLES),
            help='Papel do usuário (padrão: ADMINISTRADOR)'
        )

    def handle(self, *args, **options):
        email = options['email'].strip().lower()
        if len(options['password']) < 6:
            raise CommandError('A senha deve ter pelo menos 6 caracteres.')
        if CustomUser.objects.filter(email__iexact=email).exists():
            raise CommandError(f'Já existe um usuário com o email "{email}".')

        is_admin = options['role'] == Role.ADMINISTRADOR
        user = CustomUser.objects.create_user(
            email=email,
            password=options['password'],
            first_name=options['first_name'],
            last_name=options['last_name'],
            role=options['role'],
            company=None,
            is_staff=is_admin,
            is_superuser=is_admin,
        )
        self.stdout.write(self.style.SUCCESS(f'Usuário {user.email} criado com papel {user.role}.'))
