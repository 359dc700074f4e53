from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.core.validators import RegexValidator
from django.db import models


class Role(models.TextChoices):
    ADMINISTRADOR = 'ADMINISTRADOR', 'Administrador'
    SUB_MASTER = 'SUB_MASTER', 'Sub master'
    MASTER_DIST = 'MASTER_DIST', 'Master distribuidora'
    FINANCEIRO = 'FINANCEIRO', 'Financeiro'
    LEITURA = 'LEITURA', 'Leitura'


# Papéis da plataforma: não pertencem a uma empresa e enxergam todas
PLATFORM_ROLES = frozenset({Role.ADMINISTRADOR, Role.SUB_MASTER})

slug_validator = RegexValidator(
    r'^[a-z0-9-]+$',
    'Slug deve conter apenas letras minúsculas, números e hífens',
)


class Company(models.Model):
    name = models.CharField(max_length=255)
    slug = models.CharField(max_length=100, unique=True, validators=[slug_validator])

    # 🔹 Identificação legal
    cnpj_cpf = models.CharField(max_length=18, blank=True, null=True)

    # 🔹 Contato
    email = models.EmailField(blank=True, null=True)
    phone = models.CharField(max_length=20, blank=True, null=True)

    # 🔹 Endereço
    address = models.CharField(max_length=255, blank=True, null=True)
    city = models.CharField(max_length=100, blank=True, null=True)
    state = models.CharField(max_length=2, blank=True, null=True)
    zip_code = models.CharField(max_length=10, blank=True, null=True)

    # 🔹 Identidade visual (chave no storage)
    logo_url = models.CharField(max_length=500, blank=True, null=True)

    active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name


class CustomUserManager(BaseUserManager):
    use_in_migrations = True

    def _create_user(self, email, password, **extra_fields):
        if not email:
            raise ValueError('O email é obrigatório.')
        email = self.normalize_email(email).lower()
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_user(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', False)
        extra_fields.setdefault('is_superuser', False)
        extra_fields.setdefault('role', Role.LEITURA)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('role', Role.ADMINISTRADOR)
        return self._create_user(email, password, **extra_fields)


class CustomUser(AbstractUser):
    """Usuário da área administrativa. Login por email."""

    username = None
    email = models.EmailField(unique=True)
    phone = models.CharField(max_length=20, blank=True, null=True)
    role = models.CharField(max_length=20, choices=Role.choices, default=Role.LEITURA)
    company = models.ForeignKey(
        Company, on_delete=models.PROTECT, null=True, blank=True, related_name='users'
    )
    # Administrador principal não pode ser desativado por ninguém
    is_primary_admin = models.BooleanField(default=False)
    updated_at = models.DateTimeField(auto_now=True)

    groups = models.ManyToManyField(
        'auth.Group',
        verbose_name='groups',
        blank=True,
        help_text='The groups this user belongs to. A user will get all permissions granted to each of their groups.',
        related_name="customuser_set",
        related_query_name="user",
    )
    user_permissions = models.ManyToManyField(
        'auth.Permission',
        verbose_name='user permissions',
        blank=True,
        help_text='Specific permissions for this user.',
        related_name="customuser_set",
        related_query_name="user",
    )

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = []

    objects = CustomUserManager()

    class Meta:
        ordering = ['first_name', 'last_name', 'email']

    @property
    def is_platform(self):
        return self.role in PLATFORM_ROLES

    @property
    def full_name(self):
        return f'{self.first_name} {self.last_name}'.strip() or self.email

    def __str__(self):
        return self.email
