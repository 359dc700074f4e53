from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models

from .identity import Company
from .orders import Order, PaymentMethod


class EntryType(models.TextChoices):
    RECEITA = 'RECEITA', 'Receita'
    DESPESA = 'DESPESA', 'Despesa'


class EntryStatus(models.TextChoices):
    PENDENTE = 'PENDENTE', 'Pendente'
    PAGO = 'PAGO', 'Pago'
    VENCIDO = 'VENCIDO', 'Vencido'
    CANCELADO = 'CANCELADO', 'Cancelado'


class FinancialEntry(models.Model):
    company = models.ForeignKey(Company, on_delete=models.PROTECT, related_name='financial_entries')
    order = models.ForeignKey(
        Order, on_delete=models.PROTECT, null=True, blank=True, related_name='financial_entries'
    )
    type = models.CharField(max_length=10, choices=EntryType.choices)
    amount = models.DecimalField(
        max_digits=12, decimal_places=2, validators=[MinValueValidator(Decimal('0.01'))]
    )
    description = models.CharField(max_length=255)
    category = models.CharField(max_length=100, blank=True, null=True)
    payment_method = models.CharField(max_length=20, choices=PaymentMethod.choices, blank=True, null=True)
    due_date = models.DateTimeField(blank=True, null=True)
    paid_date = models.DateTimeField(blank=True, null=True)
    status = models.CharField(max_length=10, choices=EntryStatus.choices, default=EntryStatus.PENDENTE)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at', '-id']
        verbose_name_plural = 'financial entries'

    def __str__(self):
        return self.description
