from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from .mixins import ServiceViewSetMixin
from ..permissions import Action, Resource, company_filter, require
from ..serializers import AuditLogSerializer, FinancialEntrySerializer
from ..services import audit as audit_service
from ..services import financial as financial_service
from ..services.reports import summarize_entries


class FinancialEntryViewSet(ServiceViewSetMixin, viewsets.GenericViewSet):
    """Lançamentos financeiros (receitas e despesas)."""
    serializer_class = FinancialEntrySerializer
    resource = Resource.FINANCIAL

    def _filtered(self):
        filters = {}
        for param in ('type', 'status', 'payment_method'):
            if self.query_param(param):
                filters[param] = self.query_param(param)
        if self.int_param('order_id'):
            filters['order_id'] = self.int_param('order_id')
        start_date, end_date = self.date_range()
        return financial_service.list_entries(
            self.session, filters, start_date=start_date, end_date=end_date, search=self.query_param('search')
        )

    def list(self, request):
        return self.paginated(self._filtered())

    def retrieve(self, request, pk=None):
        return self.respond(financial_service.get_entry(self.session, pk))

    def create(self, request):
        data = self.validated()
        entry = financial_service.create_entry(self.session, data, company_id=self.company_id_param())
        return self.respond(entry, status=status.HTTP_201_CREATED)

    def update(self, request, pk=None):
        data = self.validated(partial=True)
        return self.respond(financial_service.update_entry(self.session, pk, data))

    def partial_update(self, request, pk=None):
        return self.update(request, pk)

    def destroy(self, request, pk=None):
        financial_service.delete_entry(self.session, pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=['get'])
    def summary(self, request):
        """GET /api/financial/summary/ - totais por tipo e status, com os mesmos filtros da listagem."""
        return Response(summarize_entries(self._filtered()))


class AuditLogViewSet(ServiceViewSetMixin, viewsets.GenericViewSet):
    """
    GET /api/audit/ - logs de auditoria, mais recentes primeiro.
    MASTER_DIST vê só a própria empresa; a plataforma pode filtrar por company_id.
    """
    serializer_class = AuditLogSerializer
    resource = Resource.AUDIT

    def list(self, request):
        session = self.session
        require(session, Resource.AUDIT, Action.READ)
        company_id = company_filter(session).get('company_id') or self.int_param('company_id')
        try:
            page = max(1, int(self.query_param('page') or 1))
            limit = int(self.query_param('limit') or 50)
        except ValueError:
            page, limit = 1, 50
        result = audit_service.list_audit_logs(
            company_id=company_id,
            page=page,
            limit=limit,
            entity_type=self.query_param('entity_type'),
            entity_id=self.query_param('entity_id'),
        )
        return Response({
            'logs': AuditLogSerializer(result['logs'], many=True).data,
            'pagination': result['pagination'],
        })
