from .identity import Company, CustomUser, Role, PLATFORM_ROLES, slug_validator
from .catalog import Category, Product, ProductVariant
from .people import Customer
from .orders import Order, OrderItem, OrderStatus, DeliveryType, PaymentMethod
from .financial import FinancialEntry, EntryType, EntryStatus
from .audit import AuditLog, AuditAction, ImmutableRecordError

__all__ = [
    'Company',
    'CustomUser',
    'Role',
    'PLATFORM_ROLES',
    'slug_validator',
    'Category',
    'Product',
    'ProductVariant',
    'Customer',
    'Order',
    'OrderItem',
    'OrderStatus',
    'DeliveryType',
    'PaymentMethod',
    'FinancialEntry',
    'EntryType',
    'EntryStatus',
    'AuditLog',
    'AuditAction',
    'ImmutableRecordError',
]
