from .mixins import ServiceViewSetMixin, AuthThrottle, PublicThrottle
from .identity import (
    SessionTokenObtainPairView, SessionTokenRefreshView, me_view, signup_view, CompanyViewSet, UserViewSet,
)
from .catalog import CategoryViewSet, ProductViewSet, ProductVariantViewSet
from .people import CustomerViewSet
from .orders import OrderViewSet
from .financial import FinancialEntryViewSet, AuditLogViewSet
from .public import (
    public_company_view, public_menu_view, public_order_create,
    customer_register, customer_login, customer_check, customer_find, customer_orders, customer_reorder,
)
from .uploads import LogoUploadView, ProductImageUploadView, VariantImageUploadView, UploadDeleteView, serve_file
from .reports.dashboard import admin_stats_view, daily_sales_view
from .reports.sales import sales_report_view, sales_report_pdf_view, product_report_view
