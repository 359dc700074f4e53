from contextlib import contextmanager

from django.db import IntegrityError, transaction
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError

from ..exceptions import DuplicateResource
from ..models import Company
from ..permissions import company_filter, company_id_for_create, is_platform_role


def normalize_digits(value) -> str:
    return ''.join(ch for ch in str(value or '') if ch.isdigit())


def get_scoped(queryset, session, pk, field='company_id', message='Registro não encontrado.'):
    """Busca por id dentro do escopo da sessão. Fora do escopo é NotFound, nunca Forbidden."""
    try:
        return queryset.get(pk=pk, **company_filter(session, field=field))
    except (queryset.model.DoesNotExist, ValueError, TypeError):
        raise NotFound(message)


def scoped_filters(session, filters=None, field='company_id') -> dict:
    """Filtros do chamador + filtro da empresa (que sempre prevalece)."""
    return {**(filters or {}), **company_filter(session, field=field)}


def resolve_company_for_create(session, explicit_id=None) -> Company:
    # Só papéis da plataforma escolhem a empresa; os demais gravam na própria
    if not is_platform_role(session.role):
        if explicit_id and str(explicit_id) != str(session.company_id):
            raise PermissionDenied('Sem permissão para esta empresa.')
        explicit_id = None
    company_id = company_id_for_create(session, explicit_id)
    company = Company.objects.filter(pk=company_id).first()
    if company is None:
        raise ValidationError({'company_id': 'Empresa não encontrada.'})
    return company


def ensure_unique(queryset, message, exclude_pk=None):
    if exclude_pk is not None:
        queryset = queryset.exclude(pk=exclude_pk)
    if queryset.exists():
        raise DuplicateResource(message)


@contextmanager
def unique_guard(message):
    """Converte a violação da constraint única do banco em DuplicateResource."""
    try:
        with transaction.atomic():
            yield
    except IntegrityError:
        raise DuplicateResource(message)


def apply_changes(instance, data: dict):
    for field, value in data.items():
        setattr(instance, field, value)
    return instance
