"""
Política de autorização: quem pode fazer o quê, e em qual empresa.

Todas as funções são puras e recebem a sessão (ou o papel) explicitamente.
A tabela ROLE_PERMISSIONS é a única fonte de verdade, usada tanto pelos
serviços quanto pelo menu do painel.
"""

from django.db import models
from rest_framework.exceptions import PermissionDenied, ValidationError
from rest_framework.permissions import BasePermission

from .exceptions import CompanyRequired
from .models import Role, PLATFORM_ROLES, OrderStatus, EntryStatus


class Resource(models.TextChoices):
    COMPANIES = 'companies'
    ADMINISTRATORS = 'administrators'
    USERS = 'users'
    CATEGORIES = 'categories'
    PRODUCTS = 'products'
    CUSTOMERS = 'customers'
    ORDERS = 'orders'
    FINANCIAL = 'financial'
    AUDIT = 'audit'
    UPLOADS = 'uploads'
    REPORTS = 'reports'


class Action(models.TextChoices):
    CREATE = 'create'
    READ = 'read'
    UPDATE = 'update'
    DELETE = 'delete'
    EXPORT = 'export'


CRUD = frozenset({Action.CREATE, Action.READ, Action.UPDATE, Action.DELETE})
READ_ONLY = frozenset({Action.READ})

ROLE_PERMISSIONS = {
    # Master do sistema: gerencia empresas e administradores
    Role.ADMINISTRADOR: {
        Resource.COMPANIES: CRUD,
        Resource.ADMINISTRATORS: CRUD,
        Resource.USERS: CRUD,
        Resource.AUDIT: READ_ONLY,
        Resource.UPLOADS: frozenset({Action.CREATE, Action.DELETE}),
    },
    Role.SUB_MASTER: {
        Resource.COMPANIES: CRUD,
        Resource.USERS: CRUD,
        Resource.AUDIT: READ_ONLY,
        Resource.UPLOADS: frozenset({Action.CREATE, Action.DELETE}),
    },
    # Dono da distribuidora: controle total dentro da própria empresa
    Role.MASTER_DIST: {
        Resource.USERS: CRUD,
        Resource.CATEGORIES: CRUD,
        Resource.PRODUCTS: CRUD,
        Resource.CUSTOMERS: CRUD,
        Resource.ORDERS: CRUD,
        Resource.FINANCIAL: CRUD,
        Resource.AUDIT: READ_ONLY,
        Resource.UPLOADS: frozenset({Action.CREATE, Action.DELETE}),
        Resource.REPORTS: frozenset({Action.READ, Action.EXPORT}),
    },
    Role.FINANCEIRO: {
        Resource.ORDERS: READ_ONLY,
        Resource.FINANCIAL: CRUD,
        Resource.REPORTS: frozenset({Action.READ, Action.EXPORT}),
    },
    Role.LEITURA: {
        Resource.CATEGORIES: READ_ONLY,
        Resource.PRODUCTS: READ_ONLY,
        Resource.CUSTOMERS: READ_ONLY,
        Resource.ORDERS: READ_ONLY,
        Resource.FINANCIAL: READ_ONLY,
        Resource.REPORTS: READ_ONLY,
    },
}


def has_permission(role, allowed_roles) -> bool:
    """ADMINISTRADOR passa em qualquer checagem; os demais só se estiverem na lista."""
    if role == Role.ADMINISTRADOR:
        return True
    return role in allowed_roles


def grants(role, resource, action) -> bool:
    """Consulta estrita da tabela, sem o atalho do ADMINISTRADOR."""
    return action in ROLE_PERMISSIONS.get(role, {}).get(resource, ())


def allowed_roles(resource, action) -> tuple:
    return tuple(role for role in Role if grants(role, resource, action))


def can(role, resource, action) -> bool:
    return has_permission(role, allowed_roles(resource, action))


def require(session, resource, action):
    if not can(session.role, resource, action):
        raise PermissionDenied('Sem permissão para esta operação.')


def require_roles(session, *roles):
    if not has_permission(session.role, roles):
        raise PermissionDenied('Sem permissão para esta operação.')


# --- Escopo por empresa ---

def is_platform_role(role) -> bool:
    return role in PLATFORM_ROLES


def company_filter(session, field='company_id') -> dict:
    """Filtro a ser mesclado em toda consulta de entidades da empresa."""
    if is_platform_role(session.role):
        return {}
    return {field: session.company_id}


def company_id_for_create(session, explicit_id=None):
    if explicit_id:
        return explicit_id
    if session.company_id:
        return session.company_id
    raise CompanyRequired()


def can_access_company(user_company_id, target_company_id) -> bool:
    if not user_company_id:
        return True
    return str(user_company_id) == str(target_company_id)


# --- Gestão de usuários ---

MANAGEABLE_ROLES = {
    Role.ADMINISTRADOR: (Role.SUB_MASTER, Role.MASTER_DIST, Role.FINANCEIRO, Role.LEITURA),
    Role.SUB_MASTER: (Role.MASTER_DIST, Role.FINANCEIRO, Role.LEITURA),
    Role.MASTER_DIST: (Role.MASTER_DIST, Role.FINANCEIRO, Role.LEITURA),
}

DEACTIVATABLE_ROLES = {
    Role.ADMINISTRADOR: (Role.SUB_MASTER, Role.MASTER_DIST, Role.FINANCEIRO, Role.LEITURA),
    Role.SUB_MASTER: (Role.MASTER_DIST, Role.FINANCEIRO, Role.LEITURA),
    Role.MASTER_DIST: (Role.FINANCEIRO, Role.LEITURA),
}


def can_manage_user_role(current_role, target_role) -> bool:
    return target_role in MANAGEABLE_ROLES.get(current_role, ())


def can_deactivate_user(current_role, target_role, is_self, is_target_primary_admin=False) -> bool:
    if is_self or is_target_primary_admin:
        return False
    return target_role in DEACTIVATABLE_ROLES.get(current_role, ())


# Só o papel mais alto da empresa redefine senha de outro usuário ou cliente
PASSWORD_RESET_ROLES = (Role.MASTER_DIST,)


# --- Regras de negócio ---

ORDER_STATUS_FLOW = {
    OrderStatus.RECEBIDO: (OrderStatus.EM_SEPARACAO, OrderStatus.CANCELADO),
    OrderStatus.EM_SEPARACAO: (OrderStatus.PRONTO, OrderStatus.CANCELADO),
    OrderStatus.PRONTO: (OrderStatus.EM_ROTA, OrderStatus.CANCELADO),
    OrderStatus.EM_ROTA: (OrderStatus.ENTREGUE,),
    OrderStatus.ENTREGUE: (),
    OrderStatus.CANCELADO: (),
}

ORDER_CANCEL_ROLES = (Role.SUB_MASTER, Role.MASTER_DIST)


def validate_order_status_transition(current_status, new_status, role):
    if new_status == current_status:
        return
    if new_status not in ORDER_STATUS_FLOW.get(current_status, ()):
        raise ValidationError({'status': f'Transição de {current_status} para {new_status} não permitida.'})
    if new_status == OrderStatus.CANCELADO and not has_permission(role, ORDER_CANCEL_ROLES):
        raise PermissionDenied('Sem permissão para cancelar pedidos.')


def can_modify_financial_entry(role, entry_status, is_linked_to_order) -> bool:
    # Lançamentos de pedidos e lançamentos pagos só o ADMINISTRADOR altera
    if is_linked_to_order and role != Role.ADMINISTRADOR:
        return False
    if entry_status == EntryStatus.PAGO and role != Role.ADMINISTRADOR:
        return False
    return can(role, Resource.FINANCIAL, Action.UPDATE)


# --- Menu do painel ---

SECTIONS = (
    {'key': 'dashboard', 'label': 'Dashboard', 'href': '/admin', 'resource': Resource.REPORTS},
    {'key': 'companies', 'label': 'Empresas', 'href': '/admin/empresas', 'resource': Resource.COMPANIES},
    {'key': 'administrators', 'label': 'Administradores', 'href': '/admin/administradores', 'resource': Resource.ADMINISTRATORS},
    {'key': 'users', 'label': 'Usuários', 'href': '/admin/usuarios', 'resource': Resource.USERS},
    {'key': 'categories', 'label': 'Categorias', 'href': '/admin/categorias', 'resource': Resource.CATEGORIES},
    {'key': 'products', 'label': 'Produtos', 'href': '/admin/produtos', 'resource': Resource.PRODUCTS},
    {'key': 'customers', 'label': 'Clientes', 'href': '/admin/clientes', 'resource': Resource.CUSTOMERS},
    {'key': 'orders', 'label': 'Pedidos', 'href': '/admin/pedidos', 'resource': Resource.ORDERS},
    {'key': 'financial', 'label': 'Financeiro', 'href': '/admin/financeiro', 'resource': Resource.FINANCIAL},
    {'key': 'audit', 'label': 'Logs de Auditoria', 'href': '/admin/auditoria', 'resource': Resource.AUDIT},
    {'key': 'reports', 'label': 'Relatórios', 'href': '/admin/relatorios', 'resource': Resource.REPORTS},
)


def accessible_sections(role) -> list:
    # Usa a tabela estrita: o ADMINISTRADOR vê só as seções da plataforma
    return [
        {k: v for k, v in section.items() if k != 'resource'}
        for section in SECTIONS
        if grants(role, section['resource'], Action.READ)
    ]


def can_access_section(role, key) -> bool:
    return any(section['key'] == key for section in accessible_sections(role))


class HasResourcePermission(BasePermission):
    """
    Barreira secundária nas views: usa `resource` da view e mapeia o método HTTP
    para a ação da tabela. A checagem principal continua nos serviços.
    """
    method_actions = {
        'GET': Action.READ,
        'HEAD': Action.READ,
        'OPTIONS': Action.READ,
        'POST': Action.CREATE,
        'PUT': Action.UPDATE,
        'PATCH': Action.UPDATE,
        'DELETE': Action.DELETE,
    }

    def has_permission(self, request, view):
        resource = getattr(view, 'resource', None)
        if resource is None:
            return True
        role = getattr(request.user, 'role', None)
        if role is None:
            return False
        action = self.method_actions.get(request.method, Action.READ)
        return can(role, resource, action)
