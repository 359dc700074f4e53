from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from .catalog import Product, ProductVariant
from .identity import Company
from .people import Customer


class DeliveryType(models.TextChoices):
    DELIVERY = 'DELIVERY', 'Entrega'
    RETIRADA = 'RETIRADA', 'Retirada'


class PaymentMethod(models.TextChoices):
    DINHEIRO = 'DINHEIRO', 'Dinheiro'
    PIX = 'PIX', 'PIX'
    CARTAO_ENTREGA = 'CARTAO_ENTREGA', 'Cartão na entrega'
    BOLETO = 'BOLETO', 'Boleto'


class OrderStatus(models.TextChoices):
    RECEBIDO = 'RECEBIDO', 'Recebido'
    EM_SEPARACAO = 'EM_SEPARACAO', 'Em separação'
    PRONTO = 'PRONTO', 'Pronto'
    EM_ROTA = 'EM_ROTA', 'Em rota'
    ENTREGUE = 'ENTREGUE', 'Entregue'
    CANCELADO = 'CANCELADO', 'Cancelado'


class Order(models.Model):
    company = models.ForeignKey(Company, on_delete=models.PROTECT, related_name='orders')
    # Usuário da equipe que lançou o pedido (nulo para pedidos da loja)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='orders'
    )
    customer = models.ForeignKey(
        Customer, on_delete=models.SET_NULL, null=True, blank=True, related_name='orders'
    )

    # Snapshot do cliente no momento do pedido
    customer_name = models.CharField(max_length=200)
    customer_email = models.EmailField(blank=True, null=True)
    customer_phone = models.CharField(max_length=20, blank=True, default='')
    customer_cnpj_cpf = models.CharField(max_length=18, blank=True, null=True)

    delivery_type = models.CharField(max_length=10, choices=DeliveryType.choices)
    delivery_address = models.JSONField(blank=True, null=True)
    payment_method = models.CharField(max_length=20, choices=PaymentMethod.choices)
    status = models.CharField(max_length=20, choices=OrderStatus.choices, default=OrderStatus.RECEBIDO)

    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    delivery_fee = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    total_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))

    notes = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f'Pedido #{self.pk}'


class OrderItem(models.Model):
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name='order_items')
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name='order_items')
    variant = models.ForeignKey(
        ProductVariant, on_delete=models.PROTECT, null=True, blank=True, related_name='order_items'
    )
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    # Preços capturados na criação do pedido, nunca recalculados
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    total_price = models.DecimalField(max_digits=12, decimal_places=2)

    class Meta:
        ordering = ['id']

    def __str__(self):
        return f'{self.quantity}x {self.product_id}'
