from rest_framework import status, viewsets

from .mixins import ServiceViewSetMixin
from ..permissions import Resource
from ..serializers import OrderCreateSerializer, OrderSerializer, OrderUpdateSerializer
from ..services import orders as order_service


class OrderViewSet(ServiceViewSetMixin, viewsets.GenericViewSet):
    """
    Pedidos. Não há exclusão: um pedido só muda de status (até CANCELADO).
    """
    serializer_class = OrderSerializer
    resource = Resource.ORDERS

    def list(self, request):
        filters = {}
        for param in ('status', 'delivery_type', 'payment_method'):
            if self.query_param(param):
                filters[param] = self.query_param(param)
        if self.int_param('customer_id'):
            filters['customer_id'] = self.int_param('customer_id')
        start_date, end_date = self.date_range()
        queryset = order_service.list_orders(
            self.session, filters, start_date=start_date, end_date=end_date, search=self.query_param('search')
        )
        return self.paginated(queryset)

    def retrieve(self, request, pk=None):
        return self.respond(order_service.get_order(self.session, pk))

    def create(self, request):
        data = self.validated(OrderCreateSerializer)
        order = order_service.create_order(self.session, data, company_id=self.company_id_param())
        return self.respond(order_service.get_order(self.session, order.pk), status=status.HTTP_201_CREATED)

    def update(self, request, pk=None):
        data = self.validated(OrderUpdateSerializer, partial=True)
        order = order_service.update_order(self.session, pk, data)
        return self.respond(order_service.get_order(self.session, order.pk))

    def partial_update(self, request, pk=None):
        return self.update(request, pk)
