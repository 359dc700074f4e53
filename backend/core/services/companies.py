"""Empresas (tenants), usuários da equipe e cadastro inicial (signup)."""

import logging

from django.db import transaction
from django.utils.text import slugify
from rest_framework.exceptions import PermissionDenied, ValidationError

from ..models import AuditAction, Company, CustomUser, Role, PLATFORM_ROLES
from ..permissions import (
    PASSWORD_RESET_ROLES, Action, Resource, can_deactivate_user, can_manage_user_role, require,
    require_roles,
)
from .audit import record_audit, snapshot
from .common import (
    apply_changes, ensure_unique, get_scoped, resolve_company_for_create, scoped_filters, unique_guard,
)

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
DUPLICATE_SLUG = 'Já existe uma empresa com este slug.'
DUPLICATE_EMAIL = 'Email já cadastrado.'


def _validate_password(password, field='password'):
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError({field: f'Senha deve ter pelo menos {MIN_PASSWORD_LENGTH} caracteres.'})
    return password


def _ensure_email_free(email, exclude_pk=None):
    ensure_unique(CustomUser.objects.filter(email__iexact=email), DUPLICATE_EMAIL, exclude_pk)


def unique_slug(name: str) -> str:
    """Slug a partir do nome, com sufixo numérico até ficar livre."""
    base = slugify(name)[:90] or 'empresa'
    if len(base) < 3:
        base = f'{base}-loja'
    slug = base
    counter = 1
    while Company.objects.filter(slug=slug).exists():
        slug = f'{base}-{counter}'
        counter += 1
    return slug


# --- Empresas ---

def list_companies(session, filters=None):
    require(session, Resource.COMPANIES, Action.READ)
    return Company.objects.filter(**(filters or {})).order_by('name')


def get_company(session, pk) -> Company:
    require(session, Resource.COMPANIES, Action.READ)
    return get_scoped(Company.objects.all(), session, pk, field='id', message='Empresa não encontrada.')


def create_company(session, data: dict, master_user: dict = None) -> Company:
    """Cria a empresa e, opcionalmente, seu usuário MASTER_DIST principal na mesma transação."""
    require(session, Resource.COMPANIES, Action.CREATE)
    ensure_unique(Company.objects.filter(slug=data['slug']), DUPLICATE_SLUG)
    if master_user:
        _ensure_email_free(master_user['email'])
        _validate_password(master_user.get('password'), 'master_user')

    with unique_guard(DUPLICATE_SLUG):
        company = Company.objects.create(**data)
        user = None
        if master_user:
            user = _create_user_row(company, dict(master_user, role=Role.MASTER_DIST), is_primary_admin=True)

    record_audit(company.pk, 'company', company.pk, AuditAction.CREATE,
                 user_id=session.user_id, new_values=snapshot(company))
    if user is not None:
        record_audit(company.pk, 'user', user.pk, AuditAction.CREATE,
                     user_id=session.user_id, new_values=snapshot(user))
    return company


def update_company(session, pk, data: dict) -> Company:
    require(session, Resource.COMPANIES, Action.UPDATE)
    company = get_company(session, pk)
    return _update_company(session, company, data)


def _update_company(session, company, data):
    old_values = snapshot(company)
    if 'slug' in data:
        ensure_unique(Company.objects.filter(slug=data['slug']), DUPLICATE_SLUG, exclude_pk=company.pk)
    apply_changes(company, data)
    with unique_guard(DUPLICATE_SLUG):
        company.save()

    record_audit(company.pk, 'company', company.pk, AuditAction.UPDATE,
                 user_id=session.user_id, old_values=old_values, new_values=snapshot(company))
    return company


def deactivate_company(session, pk) -> Company:
    require(session, Resource.COMPANIES, Action.DELETE)
    company = get_company(session, pk)
    old_values = snapshot(company)
    company.active = False
    company.save(update_fields=['active', 'updated_at'])

    record_audit(company.pk, 'company', company.pk, AuditAction.DELETE,
                 user_id=session.user_id, old_values=old_values, new_values=snapshot(company))
    return company


def get_own_company(session) -> Company:
    if not session.company_id:
        raise ValidationError({'detail': 'Usuário não pertence a uma empresa.'})
    return Company.objects.get(pk=session.company_id)


def update_own_company(session, data: dict) -> Company:
    require_roles(session, Role.MASTER_DIST)
    company = get_own_company(session)
    # slug e status da empresa só a plataforma altera
    data = {k: v for k, v in data.items() if k not in ('slug', 'active')}
    return _update_company(session, company, data)


# --- Usuários ---

def _create_user_row(company, data, is_primary_admin=False):
    data = dict(data)
    password = data.pop('password')
    data.pop('company_id', None)
    active = data.pop('is_active', True)
    return CustomUser.objects.create_user(
        email=data.pop('email'),
        password=password,
        company=company,
        is_active=active,
        is_primary_admin=is_primary_admin,
        **data,
    )


def list_users(session, filters=None):
    require(session, Resource.USERS, Action.READ)
    return (
        CustomUser.objects.filter(**scoped_filters(session, filters))
        .select_related('company')
        .order_by('first_name', 'last_name', 'email')
    )


def get_user(session, pk) -> CustomUser:
    require(session, Resource.USERS, Action.READ)
    return get_scoped(CustomUser.objects.select_related('company'), session, pk, message='Usuário não encontrado.')


def create_user(session, data: dict, company_id=None) -> CustomUser:
    require(session, Resource.USERS, Action.CREATE)
    role = data.get('role', Role.LEITURA)
    if not can_manage_user_role(session.role, role):
        raise PermissionDenied('Sem permissão para criar usuários com este papel.')
    _validate_password(data.get('password'))
    data = dict(data, email=data['email'].strip().lower())
    _ensure_email_free(data['email'])

    # Papéis da plataforma não pertencem a empresa
    company = None if role in PLATFORM_ROLES else resolve_company_for_create(session, company_id)
    with unique_guard(DUPLICATE_EMAIL):
        user = _create_user_row(company, dict(data, role=role))

    record_audit(company.pk if company else None, 'user', user.pk, AuditAction.CREATE,
                 user_id=session.user_id, new_values=snapshot(user))
    return user


def update_user(session, pk, data: dict) -> CustomUser:
    require(session, Resource.USERS, Action.UPDATE)
    user = get_user(session, pk)
    if user.pk != session.user_id and not can_manage_user_role(session.role, user.role):
        raise PermissionDenied('Sem permissão para alterar este usuário.')
    old_values = snapshot(user)
    data = dict(data)
    data.pop('company_id', None)
    password = data.pop('password', None)

    new_role = data.get('role')
    if new_role and new_role != user.role:
        if not (can_manage_user_role(session.role, user.role) and can_manage_user_role(session.role, new_role)):
            raise PermissionDenied('Sem permissão para alterar o papel deste usuário.')
    if data.get('is_active') is False and user.is_active:
        is_self = user.pk == session.user_id
        if not can_deactivate_user(session.role, user.role, is_self, user.is_primary_admin):
            raise PermissionDenied('Sem permissão para desativar este usuário.')
    if 'email' in data:
        data['email'] = data['email'].lower()
        _ensure_email_free(data['email'], exclude_pk=user.pk)

    apply_changes(user, data)
    if password:
        user.set_password(_validate_password(password))
    with unique_guard(DUPLICATE_EMAIL):
        user.save()

    record_audit(user.company_id, 'user', user.pk, AuditAction.UPDATE,
                 user_id=session.user_id, old_values=old_values, new_values=snapshot(user))
    return user


def deactivate_user(session, pk) -> CustomUser:
    require(session, Resource.USERS, Action.DELETE)
    user = get_user(session, pk)
    is_self = user.pk == session.user_id
    if not can_deactivate_user(session.role, user.role, is_self, user.is_primary_admin):
        raise PermissionDenied('Sem permissão para desativar este usuário.')
    old_values = snapshot(user)
    user.is_active = False
    user.save(update_fields=['is_active', 'updated_at'])

    record_audit(user.company_id, 'user', user.pk, AuditAction.DELETE,
                 user_id=session.user_id, old_values=old_values, new_values=snapshot(user))
    return user


def reset_user_password(session, pk, new_password) -> CustomUser:
    require_roles(session, *PASSWORD_RESET_ROLES)
    user = get_user(session, pk)
    if not can_manage_user_role(session.role, user.role):
        raise PermissionDenied('Sem permissão para alterar este usuário.')
    _validate_password(new_password, 'new_password')
    user.set_password(new_password)
    user.save(update_fields=['password', 'updated_at'])

    record_audit(user.company_id, 'user', user.pk, AuditAction.UPDATE,
                 user_id=session.user_id, new_values={'password_reset': True})
    return user


# --- Signup ---

def signup(data: dict):
    """
    Cadastro público: cria a empresa e o primeiro usuário, dono da empresa
    (MASTER_DIST, administrador principal), numa única transação.
    """
    email = data['email'].strip().lower()
    _ensure_email_free(email)
    _validate_password(data.get('password'))

    with transaction.atomic():
        company = Company.objects.create(
            name=data['company_name'],
            slug=unique_slug(data['company_name']),
            phone=data.get('phone') or None,
            email=email,
        )
        user = CustomUser.objects.create_user(
            email=email,
            password=data['password'],
            first_name=data['first_name'],
            last_name=data['last_name'],
            phone=data.get('phone') or None,
            role=Role.MASTER_DIST,
            company=company,
            is_primary_admin=True,
        )

    logger.info(f'Nova empresa cadastrada: {company.slug} (#{company.pk})')
    record_audit(company.pk, 'company', company.pk, AuditAction.CREATE,
                 user_id=user.pk, new_values=snapshot(company))
    return company, user
