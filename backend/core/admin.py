from django.contrib import admin
from django.contrib.auth.admin import UserAdmin
from .models import (
    AuditLog,
    Category,
    Company,
    Customer,
    CustomUser,
    FinancialEntry,
    Order,
    OrderItem,
    Product,
    ProductVariant,
)


# =========================
# COMPANY
# =========================
@admin.register(Company)
class CompanyAdmin(admin.ModelAdmin):
    list_display = ('name', 'slug', 'cnpj_cpf', 'city', 'state', 'active', 'created_at')
    search_fields = ('name', 'slug', 'cnpj_cpf')
    list_filter = ('active', 'state')


# =========================
# CUSTOM USER
# =========================
@admin.register(CustomUser)
class CustomUserAdmin(UserAdmin):
    ordering = ('email',)

    fieldsets = (
        (None, {'fields': ('email', 'password')}),
        ('Dados pessoais', {'fields': ('first_name', 'last_name', 'phone')}),
        ('Empresa', {'fields': ('company', 'role', 'is_primary_admin')}),
        ('Permissões', {'fields': ('is_active', 'is_staff', 'is_superuser')}),
        ('Datas', {'fields': ('last_login', 'date_joined')}),
    )

    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('email', 'password1', 'password2', 'role', 'company'),
        }),
    )

    list_display = ('email', 'first_name', 'role', 'company', 'is_active')
    list_filter = ('role', 'company', 'is_active')
    search_fields = ('email', 'first_name', 'last_name')


# =========================
# CATÁLOGO
# =========================
@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ('name', 'company', 'sort_order', 'active')
    list_filter = ('company', 'active')
    search_fields = ('name',)


class ProductVariantInline(admin.TabularInline):
    model = ProductVariant
    extra = 0


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ('name', 'company', 'category', 'sku', 'base_price', 'stock_quantity', 'active')
    list_filter = ('company', 'active')
    search_fields = ('name', 'sku')
    inlines = [ProductVariantInline]


# =========================
# CLIENTE
# =========================
@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ('name', 'company', 'email', 'cnpj_cpf', 'phone', 'active')
    list_filter = ('company', 'active')
    search_fields = ('name', 'email', 'cnpj_cpf')
    exclude = ('password',)


# =========================
# PEDIDO
# =========================
class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ('product', 'variant', 'quantity', 'unit_price', 'total_price')
    can_delete = False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ('id', 'company', 'customer_name', 'status', 'delivery_type', 'total_amount', 'created_at')
    list_filter = ('company', 'status', 'delivery_type', 'payment_method')
    search_fields = ('customer_name', 'customer_email')
    date_hierarchy = 'created_at'
    readonly_fields = ('subtotal', 'delivery_fee', 'total_amount', 'created_at', 'updated_at')
    inlines = [OrderItemInline]


# =========================
# FINANCEIRO
# =========================
@admin.register(FinancialEntry)
class FinancialEntryAdmin(admin.ModelAdmin):
    list_display = ('description', 'company', 'type', 'amount', 'status', 'due_date', 'paid_date')
    list_filter = ('company', 'type', 'status')
    search_fields = ('description', 'category')
    date_hierarchy = 'due_date'


# =========================
# AUDITORIA (somente leitura)
# =========================
@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ('created_at', 'company', 'user', 'entity_type', 'entity_id', 'action')
    list_filter = ('action', 'entity_type', 'company')
    search_fields = ('entity_type', 'entity_id')
    date_hierarchy = 'created_at'

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
