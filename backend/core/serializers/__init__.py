from .identity import (
    CompanySerializer,
    PublicCompanySerializer,
    MasterUserSerializer,
    CompanyCreateSerializer,
    CustomUserSerializer,
    PasswordResetSerializer,
    SignupSerializer,
)
from .catalog import (
    CategorySerializer,
    CategoryWithProductsSerializer,
    ProductSerializer,
    ProductVariantSerializer,
    MenuCategorySerializer,
)
from .people import (
    CustomerSerializer,
    CustomerRegisterSerializer,
    CustomerLoginSerializer,
    PublicCustomerSerializer,
)
from .orders import (
    OrderSerializer,
    OrderItemSerializer,
    OrderCreateSerializer,
    PublicOrderCreateSerializer,
    OrderUpdateSerializer,
    ReorderOverridesSerializer,
)
from .financial import (
    FinancialEntrySerializer,
    AuditLogSerializer,
)

__all__ = [
    'CompanySerializer',
    'PublicCompanySerializer',
    'MasterUserSerializer',
    'CompanyCreateSerializer',
    'CustomUserSerializer',
    'PasswordResetSerializer',
    'SignupSerializer',
    'CategorySerializer',
    'CategoryWithProductsSerializer',
    'ProductSerializer',
    'ProductVariantSerializer',
    'MenuCategorySerializer',
    'CustomerSerializer',
    'CustomerRegisterSerializer',
    'CustomerLoginSerializer',
    'PublicCustomerSerializer',
    'OrderSerializer',
    'OrderItemSerializer',
    'OrderCreateSerializer',
    'PublicOrderCreateSerializer',
    'OrderUpdateSerializer',
    'ReorderOverridesSerializer',
    'FinancialEntrySerializer',
    'AuditLogSerializer',
]
