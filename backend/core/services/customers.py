"""
Clientes da loja: cadastro pela equipe e autoatendimento pela loja pública.

Cliente nunca é excluído fisicamente; pedidos antigos continuam apontando
para ele. Email e CNPJ/CPF são únicos dentro de cada empresa.
"""

from django.conf import settings
from django.core import signing
from django.db.models import Q
from rest_framework.exceptions import NotFound, ValidationError

from ..exceptions import InvalidCredentials
from ..models import AuditAction, Customer
from ..permissions import PASSWORD_RESET_ROLES, Action, Resource, require, require_roles
from .audit import record_audit, snapshot
from .common import (
    apply_changes, ensure_unique, get_scoped, normalize_digits, resolve_company_for_create,
    scoped_filters, unique_guard,
)

MIN_PASSWORD_LENGTH = 6
DUPLICATE_EMAIL = 'Já existe um cliente com este email.'
DUPLICATE_DOCUMENT = 'Já existe um cliente com este CNPJ/CPF.'
DUPLICATE_CUSTOMER = 'Cliente já cadastrado.'
CUSTOMER_TOKEN_SALT = 'core.customer-session'
CUSTOMER_TOKEN_MAX_AGE = 60 * 60 * 24 * 30


def _clean(data: dict) -> dict:
    data = dict(data)
    if 'email' in data:
        data['email'] = (data['email'] or '').strip().lower() or None
    if 'cnpj_cpf' in data:
        data['cnpj_cpf'] = normalize_digits(data['cnpj_cpf']) or None
    return data


def _ensure_unique_identity(company_id, data, exclude_pk=None):
    if data.get('email'):
        ensure_unique(
            Customer.objects.filter(company_id=company_id, email=data['email']), DUPLICATE_EMAIL, exclude_pk
        )
    if data.get('cnpj_cpf'):
        ensure_unique(
            Customer.objects.filter(company_id=company_id, cnpj_cpf=data['cnpj_cpf']), DUPLICATE_DOCUMENT, exclude_pk
        )


def validate_password(password):
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError({'password': f'Senha deve ter pelo menos {MIN_PASSWORD_LENGTH} caracteres.'})
    return password


def _create(company, data, user_id=None):
    data = _clean(data)
    password = data.pop('password', None)
    if not data.get('email') and not data.get('cnpj_cpf'):
        raise ValidationError({'email': 'Informe email ou CNPJ/CPF.'})
    _ensure_unique_identity(company.pk, data)

    customer = Customer(company=company, **data)
    if password:
        customer.set_password(validate_password(password))
    with unique_guard(DUPLICATE_CUSTOMER):
        customer.save()

    record_audit(company.pk, 'customer', customer.pk, AuditAction.CREATE,
                 user_id=user_id, new_values=snapshot(customer))
    return customer


# --- Equipe ---

def list_customers(session, filters=None, search=None):
    require(session, Resource.CUSTOMERS, Action.READ)
    queryset = Customer.objects.filter(**scoped_filters(session, filters))
    if search:
        digits = normalize_digits(search)
        condition = Q(name__icontains=search) | Q(email__icontains=search) | Q(phone__icontains=search)
        if digits:
            condition |= Q(cnpj_cpf__icontains=digits)
        queryset = queryset.filter(condition)
    return queryset.order_by('name')


def get_customer(session, pk) -> Customer:
    require(session, Resource.CUSTOMERS, Action.READ)
    return get_scoped(Customer.objects.all(), session, pk, message='Cliente não encontrado.')


def create_customer(session, data: dict, company_id=None) -> Customer:
    require(session, Resource.CUSTOMERS, Action.CREATE)
    company = resolve_company_for_create(session, company_id)
    return _create(company, data, user_id=session.user_id)


def update_customer(session, pk, data: dict) -> Customer:
    require(session, Resource.CUSTOMERS, Action.UPDATE)
    customer = get_scoped(Customer.objects.all(), session, pk, message='Cliente não encontrado.')
    old_values = snapshot(customer)
    data = _clean(data)
    password = data.pop('password', None)

    _ensure_unique_identity(customer.company_id, data, exclude_pk=customer.pk)
    apply_changes(customer, data)
    if not customer.email and not customer.cnpj_cpf:
        raise ValidationError({'email': 'Informe email ou CNPJ/CPF.'})
    if password:
        customer.set_password(validate_password(password))
    with unique_guard(DUPLICATE_CUSTOMER):
        customer.save()

    record_audit(customer.company_id, 'customer', customer.pk, AuditAction.UPDATE,
                 user_id=session.user_id, old_values=old_values, new_values=snapshot(customer))
    return customer


def deactivate_customer(session, pk) -> Customer:
    require(session, Resource.CUSTOMERS, Action.DELETE)
    customer = get_scoped(Customer.objects.all(), session, pk, message='Cliente não encontrado.')
    old_values = snapshot(customer)
    customer.active = False
    customer.save(update_fields=['active', 'updated_at'])

    record_audit(customer.company_id, 'customer', customer.pk, AuditAction.DELETE,
                 user_id=session.user_id, old_values=old_values, new_values=snapshot(customer))
    return customer


def reset_customer_password(session, pk, new_password) -> Customer:
    require_roles(session, *PASSWORD_RESET_ROLES)
    customer = get_scoped(Customer.objects.all(), session, pk, message='Cliente não encontrado.')
    if not new_password or len(new_password) < MIN_PASSWORD_LENGTH:
        raise ValidationError({'new_password': f'Senha deve ter pelo menos {MIN_PASSWORD_LENGTH} caracteres.'})
    customer.set_password(new_password)
    customer.save(update_fields=['password', 'updated_at'])

    record_audit(customer.company_id, 'customer', customer.pk, AuditAction.UPDATE,
                 user_id=session.user_id, new_values={'password_reset': True})
    return customer


# --- Loja pública ---

def register_customer(company, data: dict) -> Customer:
    if not data.get('password'):
        raise ValidationError({'password': 'Senha é obrigatória.'})
    return _create(company, data)


def _lookup(company, login):
    login = (login or '').strip()
    if '@' in login:
        condition = Q(email=login.lower())
    else:
        digits = normalize_digits(login)
        if not digits:
            return None
        condition = Q(cnpj_cpf=digits)
    return Customer.objects.filter(condition, company=company, active=True).first()


def authenticate_customer(company, login, password) -> Customer:
    """
    Login da loja. Por padrão diferencia "não cadastrado nesta loja" (404, a
    loja oferece o cadastro) de "senha incorreta" (401). Com
    CUSTOMER_LOGIN_REVEALS_UNREGISTERED desligado, os dois viram o mesmo 401.
    """
    customer = _lookup(company, login)
    reveal = getattr(settings, 'CUSTOMER_LOGIN_REVEALS_UNREGISTERED', True)
    if customer is None:
        if reveal:
            raise NotFound('Cliente não cadastrado nesta loja.')
        raise InvalidCredentials()
    if not customer.check_password(password):
        raise InvalidCredentials('Senha incorreta.' if reveal else None)
    return customer


def customer_exists(company, cnpj_cpf) -> bool:
    digits = normalize_digits(cnpj_cpf)
    if not digits:
        return False
    return Customer.objects.filter(company=company, cnpj_cpf=digits, active=True).exists()


def find_customer(company, email=None, cnpj_cpf=None):
    if email:
        return _lookup(company, email)
    if cnpj_cpf:
        return _lookup(company, cnpj_cpf)
    return None


def issue_customer_token(customer) -> str:
    """Token assinado que a loja guarda após o login do cliente."""
    return signing.dumps({'customer_id': customer.pk, 'company_id': customer.company_id}, salt=CUSTOMER_TOKEN_SALT)


def customer_from_token(company, token) -> Customer:
    try:
        payload = signing.loads(token or '', salt=CUSTOMER_TOKEN_SALT, max_age=CUSTOMER_TOKEN_MAX_AGE)
    except signing.BadSignature:
        raise InvalidCredentials('Sessão do cliente inválida ou expirada.')
    if payload.get('company_id') != company.pk:
        raise InvalidCredentials('Sessão do cliente inválida ou expirada.')
    customer = Customer.objects.filter(pk=payload.get('customer_id'), company=company, active=True).first()
    if customer is None:
        raise InvalidCredentials('Sessão do cliente inválida ou expirada.')
    return customer


def customer_orders(customer):
    return (
        customer.orders.filter(company_id=customer.company_id)
        .prefetch_related('order_items__product', 'order_items__variant')
        .order_by('-created_at', '-id')
    )
