from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q

from .identity import Company


class Category(models.Model):
    company = models.ForeignKey(Company, on_delete=models.PROTECT, related_name='categories')
    name = models.CharField(max_length=120)
    description = models.TextField(blank=True, null=True)
    sort_order = models.IntegerField(default=0)
    active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['sort_order', 'name']
        constraints = [
            models.UniqueConstraint(fields=['company', 'name'], name='uniq_category_name_per_company'),
        ]

    def __str__(self):
        return self.name


class Product(models.Model):
    company = models.ForeignKey(Company, on_delete=models.PROTECT, related_name='products')
    category = models.ForeignKey(Category, on_delete=models.PROTECT, related_name='products')
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True, null=True)
    sku = models.CharField(max_length=60, blank=True, null=True)
    base_price = models.DecimalField(
        max_digits=10, decimal_places=2, validators=[MinValueValidator(Decimal('0.01'))]
    )
    image_url = models.CharField(max_length=500, blank=True, null=True)
    stock_quantity = models.IntegerField(default=0)
    sort_order = models.IntegerField(default=0)
    active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['sort_order', 'name']
        constraints = [
            # SKU é opcional; quando informado, único dentro da empresa
            models.UniqueConstraint(
                fields=['company', 'sku'],
                condition=Q(sku__isnull=False),
                name='uniq_product_sku_per_company',
            ),
        ]

    def __str__(self):
        return self.name


class ProductVariant(models.Model):
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name='variants')
    name = models.CharField(max_length=120)
    sku = models.CharField(max_length=60, blank=True, null=True)
    volume = models.CharField(max_length=30, blank=True, null=True)
    unit_type = models.CharField(max_length=20, blank=True, null=True)
    price_modifier = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    stock_quantity = models.IntegerField(default=0)
    image_url = models.CharField(max_length=500, blank=True, null=True)
    active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']

    @property
    def company_id(self):
        return self.product.company_id

    @property
    def price(self):
        return self.product.base_price + self.price_modifier

    def __str__(self):
        return f'{self.product.name} - {self.name}'
