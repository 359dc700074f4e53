"""
Log de auditoria (append-only).

record_audit nunca propaga erro: a operação de negócio já foi gravada e não
pode falhar por causa do log. A falha vai para o log operacional.
"""

import json
import logging
import math

from django.core.paginator import Paginator
from django.core.serializers.json import DjangoJSONEncoder
from django.db import transaction
from django.forms.models import model_to_dict

from ..models import AuditLog

logger = logging.getLogger(__name__)

SNAPSHOT_EXCLUDE = ('password', 'groups', 'user_permissions')


def snapshot(instance) -> dict:
    """Valores do registro em formato JSON (FKs como id, decimais e datas como texto)."""
    data = model_to_dict(instance, exclude=SNAPSHOT_EXCLUDE)
    data['id'] = instance.pk
    return json.loads(json.dumps(data, cls=DjangoJSONEncoder))


def record_audit(company_id, entity_type, entity_id, action, user_id=None,
                 old_values=None, new_values=None, ip_address=None, user_agent=None):
    try:
        with transaction.atomic():
            return AuditLog.objects.create(
                company_id=company_id,
                user_id=user_id,
                entity_type=entity_type,
                entity_id=str(entity_id),
                action=action,
                old_values=old_values,
                new_values=new_values,
                ip_address=ip_address,
                user_agent=(user_agent or '')[:255] or None,
            )
    except Exception as exc:
        logger.warning(f'Falha ao registrar auditoria {action} {entity_type}#{entity_id}: {exc}')
        return None


def list_audit_logs(company_id=None, page=1, limit=50, entity_type=None, entity_id=None) -> dict:
    """
    Logs paginados, mais recentes primeiro. Sem company_id devolve todas as
    empresas; quem chama já deve ter autorizado isso.
    """
    queryset = AuditLog.objects.select_related('user', 'company').order_by('-created_at', '-id')
    if company_id:
        queryset = queryset.filter(company_id=company_id)
    if entity_type:
        queryset = queryset.filter(entity_type=entity_type)
    if entity_id:
        queryset = queryset.filter(entity_id=str(entity_id))

    limit = max(1, min(int(limit), 100))
    paginator = Paginator(queryset, limit)
    page_obj = paginator.get_page(page)
    total = paginator.count

    return {
        'logs': list(page_obj.object_list) if total else [],
        'pagination': {
            'page': page_obj.number,
            'limit': limit,
            'total': total,
            'total_pages': math.ceil(total / limit),
        },
    }
