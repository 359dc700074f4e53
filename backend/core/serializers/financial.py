from rest_framework import serializers

from ..models import AuditLog, FinancialEntry


class FinancialEntrySerializer(serializers.ModelSerializer):
    description = serializers.CharField(min_length=2, max_length=255)
    type_display = serializers.CharField(source='get_type_display', read_only=True)
    status_display = serializers.CharField(source='get_status_display', read_only=True)

    class Meta:
        model = FinancialEntry
        fields = (
            'id', 'company', 'order', 'type', 'type_display', 'amount', 'description', 'category',
            'payment_method', 'due_date', 'paid_date', 'status', 'status_display', 'created_at', 'updated_at',
        )
        read_only_fields = ('id', 'company', 'order', 'created_at', 'updated_at')


class AuditLogSerializer(serializers.ModelSerializer):
    user_email = serializers.CharField(source='user.email', read_only=True)
    company_name = serializers.CharField(source='company.name', read_only=True)

    class Meta:
        model = AuditLog
        fields = (
            'id', 'company', 'company_name', 'user', 'user_email', 'entity_type', 'entity_id', 'action',
            'old_values', 'new_values', 'ip_address', 'user_agent', 'created_at',
        )
        read_only_fields = fields
