from django.conf import settings
from django.db import models

from .identity import Company


class AuditAction(models.TextChoices):
    CREATE = 'CREATE', 'Criação'
    UPDATE = 'UPDATE', 'Alteração'
    DELETE = 'DELETE', 'Exclusão'


class ImmutableRecordError(Exception):
    pass


class AuditLogQuerySet(models.QuerySet):
    def update(self, **kwargs):
        raise ImmutableRecordError('Logs de auditoria não podem ser alterados.')

    def delete(self):
        raise ImmutableRecordError('Logs de auditoria não podem ser excluídos.')


class AuditLog(models.Model):
    """Registro append-only de criações, alterações e desativações."""

    company = models.ForeignKey(
        Company, on_delete=models.PROTECT, null=True, blank=True, related_name='audit_logs'
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='audit_logs'
    )
    entity_type = models.CharField(max_length=50)
    entity_id = models.CharField(max_length=64)
    action = models.CharField(max_length=10, choices=AuditAction.choices)
    old_values = models.JSONField(blank=True, null=True)
    new_values = models.JSONField(blank=True, null=True)
    ip_address = models.CharField(max_length=64, blank=True, null=True)
    user_agent = models.CharField(max_length=255, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    objects = AuditLogQuerySet.as_manager()

    class Meta:
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['entity_type', 'entity_id'], name='core_audit_entity_idx'),
        ]

    def save(self, *args, **kwargs):
        if self.pk is not None and not self._state.adding:
            raise ImmutableRecordError('Logs de auditoria não podem ser alterados.')
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ImmutableRecordError('Logs de auditoria não podem ser excluídos.')

    def __str__(self):
        return f'{self.action} {self.entity_type}#{self.entity_id}'
