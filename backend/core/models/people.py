from django.contrib.auth.hashers import check_password, make_password
from django.db import models
from django.db.models import Q

from .identity import Company


class Customer(models.Model):
    """Cliente da loja pública (conta própria por empresa)."""

    company = models.ForeignKey(Company, on_delete=models.PROTECT, related_name='customers')
    name = models.CharField(max_length=200)
    email = models.EmailField(blank=True, null=True)
    cnpj_cpf = models.CharField(max_length=18, blank=True, null=True)
    phone = models.CharField(max_length=20, blank=True, null=True)
    address = models.JSONField(blank=True, null=True)
    password = models.CharField(max_length=128, blank=True, null=True)
    active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']
        constraints = [
            models.UniqueConstraint(
                fields=['company', 'email'],
                condition=Q(email__isnull=False),
                name='uniq_customer_email_per_company',
            ),
            models.UniqueConstraint(
                fields=['company', 'cnpj_cpf'],
                condition=Q(cnpj_cpf__isnull=False),
                name='uniq_customer_document_per_company',
            ),
        ]

    def set_password(self, raw_password):
        self.password = make_password(raw_password)

    def check_password(self, raw_password):
        if not self.password:
            return False
        return check_password(raw_password, self.password)

    def __str__(self):
        return self.name
