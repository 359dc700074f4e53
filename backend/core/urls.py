from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import (
    CompanyViewSet, UserViewSet, CategoryViewSet, ProductViewSet, ProductVariantViewSet,
    CustomerViewSet, OrderViewSet, FinancialEntryViewSet, AuditLogViewSet,
    me_view, signup_view,
    # Loja pública
    public_company_view, public_menu_view, public_order_create,
    customer_register, customer_login, customer_check, customer_find, customer_orders, customer_reorder,
    # Uploads
    LogoUploadView, ProductImageUploadView, VariantImageUploadView, UploadDeleteView, serve_file,
    # Relatórios
    admin_stats_view, daily_sales_view, sales_report_view, sales_report_pdf_view, product_report_view,
)

router = DefaultRouter()
router.register(r'companies', CompanyViewSet, basename='company')
router.register(r'users', UserViewSet, basename='user')
router.register(r'categories', CategoryViewSet, basename='category')
router.register(r'products', ProductViewSet, basename='product')
router.register(r'variants', ProductVariantViewSet, basename='variant')
router.register(r'customers', CustomerViewSet, basename='customer')
router.register(r'orders', OrderViewSet, basename='order')
router.register(r'financial', FinancialEntryViewSet, basename='financial')
router.register(r'audit', AuditLogViewSet, basename='audit')

urlpatterns = [
    path('', include(router.urls)),
    path('me/', me_view, name='me'),
    path('signup/', signup_view, name='signup'),

    # Loja pública
    path('public/company/<slug:slug>/', public_company_view, name='public-company'),
    path('public/menu/<slug:slug>/', public_menu_view, name='public-menu'),
    path('public/orders/', public_order_create, name='public-orders'),
    path('public/customers/register/', customer_register, name='public-customer-register'),
    path('public/customers/login/', customer_login, name='public-customer-login'),
    path('public/customers/check/', customer_check, name='public-customer-check'),
    path('public/customers/find/', customer_find, name='public-customer-find'),
    path('public/customers/orders/', customer_orders, name='public-customer-orders'),
    path('public/customers/reorder/', customer_reorder, name='public-customer-reorder'),

    # Uploads e arquivos
    path('uploads/', UploadDeleteView.as_view(), name='upload-delete'),
    path('uploads/logo/', LogoUploadView.as_view(), name='upload-logo'),
    path('uploads/product/', ProductImageUploadView.as_view(), name='upload-product'),
    path('uploads/variant/', VariantImageUploadView.as_view(), name='upload-variant'),
    path('files/<path:key>', serve_file, name='files'),

    # Relatórios
    path('reports/sales/', sales_report_view, name='report-sales'),
    path('reports/sales/pdf/', sales_report_pdf_view, name='report-sales-pdf'),
    path('reports/products/', product_report_view, name='report-products'),
    path('admin/stats/', admin_stats_view, name='admin-stats'),
    path('admin/sales/daily/', daily_sales_view, name='admin-sales-daily'),
]
