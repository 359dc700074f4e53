from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from .mixins import ServiceViewSetMixin
from ..permissions import Resource
from ..serializers import CustomerSerializer, PasswordResetSerializer
from ..services import customers as customer_service


class CustomerViewSet(ServiceViewSetMixin, viewsets.GenericViewSet):
    """Clientes da loja, por empresa. DELETE apenas desativa."""
    serializer_class = CustomerSerializer
    resource = Resource.CUSTOMERS

    def list(self, request):
        queryset = customer_service.list_customers(
            self.session, self.active_filter(), search=self.query_param('search')
        )
        return self.paginated(queryset)

    def retrieve(self, request, pk=None):
        return self.respond(customer_service.get_customer(self.session, pk))

    def create(self, request):
        data = self.validated()
        customer = customer_service.create_customer(self.session, data, company_id=self.company_id_param())
        return self.respond(customer, status=status.HTTP_201_CREATED)

    def update(self, request, pk=None):
        data = self.validated(partial=True)
        return self.respond(customer_service.update_customer(self.session, pk, data))

    def partial_update(self, request, pk=None):
        return self.update(request, pk)

    def destroy(self, request, pk=None):
        return self.respond(customer_service.deactivate_customer(self.session, pk))

    @action(detail=True, methods=['post'], url_path='reset-password')
    def reset_password(self, request, pk=None):
        """POST /api/customers/{id}/reset-password/  Body: { "new_password": "..." }"""
        data = self.validated(PasswordResetSerializer)
        customer_service.reset_customer_password(self.session, pk, data['new_password'])
        return Response({'detail': 'Senha redefinida com sucesso.'})
