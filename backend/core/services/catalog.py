"""Categorias, produtos e variações do catálogo de cada empresa."""

from django.db.models import Q
from rest_framework.exceptions import ValidationError

from ..models import AuditAction, Category, Product, ProductVariant
from ..permissions import Action, Resource, require
from .audit import record_audit, snapshot
from .common import (
    apply_changes, ensure_unique, get_scoped, resolve_company_for_create, scoped_filters, unique_guard,
)

DUPLICATE_CATEGORY = 'Já existe uma categoria com este nome.'
DUPLICATE_SKU = 'Já existe um produto com este SKU.'


# --- Categorias ---

def list_categories(session, filters=None):
    require(session, Resource.CATEGORIES, Action.READ)
    return (
        Category.objects.filter(**scoped_filters(session, filters))
        .order_by('sort_order', 'name')
    )


def get_category(session, pk):
    require(session, Resource.CATEGORIES, Action.READ)
    return get_scoped(Category.objects.all(), session, pk, message='Categoria não encontrada.')


def create_category(session, data: dict, company_id=None) -> Category:
    require(session, Resource.CATEGORIES, Action.CREATE)
    company = resolve_company_for_create(session, company_id)

    ensure_unique(Category.objects.filter(company=company, name=data['name']), DUPLICATE_CATEGORY)
    with unique_guard(DUPLICATE_CATEGORY):
        category = Category.objects.create(company=company, **data)

    record_audit(company.pk, 'category', category.pk, AuditAction.CREATE,
                 user_id=session.user_id, new_values=snapshot(category))
    return category


def update_category(session, pk, data: dict) -> Category:
    require(session, Resource.CATEGORIES, Action.UPDATE)
    category = get_scoped(Category.objects.all(), session, pk, message='Categoria não encontrada.')
    old_values = snapshot(category)

    if 'name' in data:
        ensure_unique(
            Category.objects.filter(company_id=category.company_id, name=data['name']),
            DUPLICATE_CATEGORY,
            exclude_pk=category.pk,
        )
    apply_changes(category, data)
    with unique_guard(DUPLICATE_CATEGORY):
        category.save()

    record_audit(category.company_id, 'category', category.pk, AuditAction.UPDATE,
                 user_id=session.user_id, old_values=old_values, new_values=snapshot(category))
    return category


def deactivate_category(session, pk) -> Category:
    require(session, Resource.CATEGORIES, Action.DELETE)
    category = get_scoped(Category.objects.all(), session, pk, message='Categoria não encontrada.')
    old_values = snapshot(category)
    category.active = False
    category.save(update_fields=['active', 'updated_at'])

    record_audit(category.company_id, 'category', category.pk, AuditAction.DELETE,
                 user_id=session.user_id, old_values=old_values, new_values=snapshot(category))
    return category


# --- Produtos ---

def _clean_sku(data: dict):
    if 'sku' in data:
        data['sku'] = (data['sku'] or '').strip() or None
    return data


def _ensure_category_of_company(category_id, company_id):
    category = Category.objects.filter(pk=category_id, company_id=company_id).first()
    if category is None:
        raise ValidationError({'category_id': 'Categoria não encontrada.'})
    return category


def list_products(session, filters=None, search=None):
    require(session, Resource.PRODUCTS, Action.READ)
    queryset = (
        Product.objects.filter(**scoped_filters(session, filters))
        .select_related('category')
        .prefetch_related('variants')
    )
    if search:
        queryset = queryset.filter(
            Q(name__icontains=search) | Q(sku__icontains=search) | Q(description__icontains=search)
        )
    return queryset.order_by('sort_order', 'name')


def get_product(session, pk):
    require(session, Resource.PRODUCTS, Action.READ)
    return get_scoped(
        Product.objects.select_related('category').prefetch_related('variants'),
        session, pk, message='Produto não encontrado.',
    )


def create_product(session, data: dict, company_id=None) -> Product:
    require(session, Resource.PRODUCTS, Action.CREATE)
    company = resolve_company_for_create(session, company_id)
    data = _clean_sku(dict(data))
    variants = data.pop('variants', [])
    category = _ensure_category_of_company(data.pop('category_id'), company.pk)

    if data.get('sku'):
        ensure_unique(Product.objects.filter(company=company, sku=data['sku']), DUPLICATE_SKU)
    with unique_guard(DUPLICATE_SKU):
        product = Product.objects.create(company=company, category=category, **data)
        for variant in variants:
            ProductVariant.objects.create(product=product, **variant)

    record_audit(company.pk, 'product', product.pk, AuditAction.CREATE,
                 user_id=session.user_id, new_values=snapshot(product))
    return product


def update_product(session, pk, data: dict) -> Product:
    require(session, Resource.PRODUCTS, Action.UPDATE)
    product = get_scoped(Product.objects.all(), session, pk, message='Produto não encontrado.')
    old_values = snapshot(product)
    data = _clean_sku(dict(data))
    data.pop('variants', None)

    if 'category_id' in data:
        product.category = _ensure_category_of_company(data.pop('category_id'), product.company_id)
    if data.get('sku'):
        ensure_unique(
            Product.objects.filter(company_id=product.company_id, sku=data['sku']),
            DUPLICATE_SKU,
            exclude_pk=product.pk,
        )
    apply_changes(product, data)
    with unique_guard(DUPLICATE_SKU):
        product.save()

    record_audit(product.company_id, 'product', product.pk, AuditAction.UPDATE,
                 user_id=session.user_id, old_values=old_values, new_values=snapshot(product))
    return product


def deactivate_product(session, pk) -> Product:
    require(session, Resource.PRODUCTS, Action.DELETE)
    product = get_scoped(Product.objects.all(), session, pk, message='Produto não encontrado.')
    old_values = snapshot(product)
    product.active = False
    product.save(update_fields=['active', 'updated_at'])

    record_audit(product.company_id, 'product', product.pk, AuditAction.DELETE,
                 user_id=session.user_id, old_values=old_values, new_values=snapshot(product))
    return product


# --- Variações ---

def list_variants(session, product_id):
    product = get_product(session, product_id)
    return product.variants.order_by('name')


def create_variant(session, product_id, data: dict) -> ProductVariant:
    require(session, Resource.PRODUCTS, Action.UPDATE)
    product = get_scoped(Product.objects.all(), session, product_id, message='Produto não encontrado.')
    variant = ProductVariant.objects.create(product=product, **data)

    record_audit(product.company_id, 'product_variant', variant.pk, AuditAction.CREATE,
                 user_id=session.user_id, new_values=snapshot(variant))
    return variant


def get_variant(session, pk) -> ProductVariant:
    return get_scoped(
        ProductVariant.objects.select_related('product'),
        session, pk, field='product__company_id', message='Variação não encontrada.',
    )


def update_variant(session, pk, data: dict) -> ProductVariant:
    require(session, Resource.PRODUCTS, Action.UPDATE)
    variant = get_variant(session, pk)
    old_values = snapshot(variant)
    apply_changes(variant, data)
    variant.save()

    record_audit(variant.product.company_id, 'product_variant', variant.pk, AuditAction.UPDATE,
                 user_id=session.user_id, old_values=old_values, new_values=snapshot(variant))
    return variant


def deactivate_variant(session, pk) -> ProductVariant:
    require(session, Resource.PRODUCTS, Action.UPDATE)
    variant = get_variant(session, pk)
    old_values = snapshot(variant)
    variant.active = False
    variant.save(update_fields=['active', 'updated_at'])

    record_audit(variant.product.company_id, 'product_variant', variant.pk, AuditAction.DELETE,
                 user_id=session.user_id, old_values=old_values, new_values=snapshot(variant))
    return variant
