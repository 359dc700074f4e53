"""Lançamentos financeiros (contas a receber/pagar) da empresa."""

from django.db.models import Q
from django.utils import timezone
from rest_framework.exceptions import PermissionDenied, ValidationError

from ..models import AuditAction, EntryStatus, FinancialEntry
from ..permissions import Action, Resource, can_modify_financial_entry, require
from .audit import record_audit, snapshot
from .common import apply_changes, get_scoped, resolve_company_for_create, scoped_filters


def list_entries(session, filters=None, start_date=None, end_date=None, search=None):
    require(session, Resource.FINANCIAL, Action.READ)
    queryset = FinancialEntry.objects.filter(**scoped_filters(session, filters)).select_related('order')
    if start_date:
        queryset = queryset.filter(due_date__date__gte=start_date)
    if end_date:
        queryset = queryset.filter(due_date__date__lte=end_date)
    if search:
        queryset = queryset.filter(Q(description__icontains=search) | Q(category__icontains=search))
    return queryset.order_by('-created_at', '-id')


def get_entry(session, pk) -> FinancialEntry:
    require(session, Resource.FINANCIAL, Action.READ)
    return get_scoped(FinancialEntry.objects.select_related('order'), session, pk,
                      message='Lançamento não encontrado.')


def create_entry(session, data: dict, company_id=None) -> FinancialEntry:
    require(session, Resource.FINANCIAL, Action.CREATE)
    company = resolve_company_for_create(session, company_id)
    data = dict(data)
    if data.get('status') == EntryStatus.PAGO and not data.get('paid_date'):
        data['paid_date'] = timezone.now()
    entry = FinancialEntry.objects.create(company=company, **data)

    record_audit(company.pk, 'financial_entry', entry.pk, AuditAction.CREATE,
                 user_id=session.user_id, new_values=snapshot(entry))
    return entry


def update_entry(session, pk, data: dict) -> FinancialEntry:
    require(session, Resource.FINANCIAL, Action.UPDATE)
    entry = get_entry(session, pk)
    if not can_modify_financial_entry(session.role, entry.status, entry.order_id is not None):
        raise PermissionDenied('Este lançamento não pode ser alterado.')
    old_values = snapshot(entry)
    data = dict(data)
    if data.get('status') == EntryStatus.PAGO and not (data.get('paid_date') or entry.paid_date):
        data['paid_date'] = timezone.now()
    apply_changes(entry, data)
    entry.save()

    record_audit(entry.company_id, 'financial_entry', entry.pk, AuditAction.UPDATE,
                 user_id=session.user_id, old_values=old_values, new_values=snapshot(entry))
    return entry


def delete_entry(session, pk):
    """Só lançamentos manuais são excluídos; os de pedidos acompanham o pedido."""
    require(session, Resource.FINANCIAL, Action.DELETE)
    entry = get_entry(session, pk)
    if entry.order_id is not None:
        raise ValidationError({'detail': 'Não é possível excluir lançamentos vinculados a pedidos.'})
    old_values = snapshot(entry)
    entry_id, company_id = entry.pk, entry.company_id
    entry.delete()

    record_audit(company_id, 'financial_entry', entry_id, AuditAction.DELETE,
                 user_id=session.user_id, old_values=old_values)


def mark_overdue(company_id=None) -> int:
    """PENDENTE com vencimento no passado passa a VENCIDO. Retorna quantos mudaram."""
    # Lançamentos de pedidos seguem o status do pedido
    queryset = FinancialEntry.objects.filter(
        status=EntryStatus.PENDENTE, due_date__lt=timezone.now(), order__isnull=True
    )
    if company_id:
        queryset = queryset.filter(company_id=company_id)
    return queryset.update(status=EntryStatus.VENCIDO, updated_at=timezone.now())
