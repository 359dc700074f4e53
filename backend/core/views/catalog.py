from django.db.models import Prefetch
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from .mixins import ServiceViewSetMixin, parse_bool
from ..models import Product
from ..permissions import Resource
from ..serializers import (
    CategorySerializer, CategoryWithProductsSerializer, ProductSerializer, ProductVariantSerializer,
)
from ..services import catalog as catalog_service


class CategoryViewSet(ServiceViewSetMixin, viewsets.GenericViewSet):
    """Categorias do catálogo, por empresa."""
    serializer_class = CategorySerializer
    resource = Resource.CATEGORIES

    def list(self, request):
        queryset = catalog_service.list_categories(self.session, self.active_filter())
        if parse_bool(request.query_params.get('include_products')):
            queryset = queryset.prefetch_related(
                Prefetch('products', queryset=Product.objects.order_by('sort_order', 'name').prefetch_related('variants'))
            )
            return self.paginated(queryset, CategoryWithProductsSerializer)
        return self.paginated(queryset)

    def retrieve(self, request, pk=None):
        return self.respond(catalog_service.get_category(self.session, pk))

    def create(self, request):
        data = self.validated()
        category = catalog_service.create_category(self.session, data, company_id=self.company_id_param())
        return self.respond(category, status=status.HTTP_201_CREATED)

    def update(self, request, pk=None):
        data = self.validated(partial=True)
        return self.respond(catalog_service.update_category(self.session, pk, data))

    def partial_update(self, request, pk=None):
        return self.update(request, pk)

    def destroy(self, request, pk=None):
        return self.respond(catalog_service.deactivate_category(self.session, pk))


class ProductViewSet(ServiceViewSetMixin, viewsets.GenericViewSet):
    """Produtos e suas variações."""
    serializer_class = ProductSerializer
    resource = Resource.PRODUCTS

    def list(self, request):
        filters = self.active_filter()
        if self.int_param('category_id'):
            filters['category_id'] = self.int_param('category_id')
        queryset = catalog_service.list_products(self.session, filters, search=self.query_param('search'))
        return self.paginated(queryset)

    def retrieve(self, request, pk=None):
        return self.respond(catalog_service.get_product(self.session, pk))

    def create(self, request):
        data = self.validated()
        product = catalog_service.create_product(self.session, data, company_id=self.company_id_param())
        return self.respond(catalog_service.get_product(self.session, product.pk), status=status.HTTP_201_CREATED)

    def update(self, request, pk=None):
        data = self.validated(partial=True)
        product = catalog_service.update_product(self.session, pk, data)
        return self.respond(catalog_service.get_product(self.session, product.pk))

    def partial_update(self, request, pk=None):
        return self.update(request, pk)

    def destroy(self, request, pk=None):
        return self.respond(catalog_service.deactivate_product(self.session, pk))

    @action(detail=True, methods=['get', 'post'])
    def variants(self, request, pk=None):
        """
        GET /api/products/{id}/variants/ - variações do produto
        POST /api/products/{id}/variants/ - nova variação
        """
        if request.method == 'GET':
            variants = catalog_service.list_variants(self.session, pk)
            return Response(ProductVariantSerializer(variants, many=True).data)
        data = self.validated(ProductVariantSerializer)
        variant = catalog_service.create_variant(self.session, pk, data)
        return self.respond(variant, status=status.HTTP_201_CREATED, serializer_class=ProductVariantSerializer)


class ProductVariantViewSet(ServiceViewSetMixin, viewsets.GenericViewSet):
    """PATCH/DELETE /api/variants/{id}/ (DELETE desativa)."""
    serializer_class = ProductVariantSerializer
    resource = Resource.PRODUCTS

    def retrieve(self, request, pk=None):
        return self.respond(catalog_service.get_variant(self.session, pk))

    def update(self, request, pk=None):
        data = self.validated(partial=True)
        return self.respond(catalog_service.update_variant(self.session, pk, data))

    def partial_update(self, request, pk=None):
        return self.update(request, pk)

    def destroy(self, request, pk=None):
        return self.respond(catalog_service.deactivate_variant(self.session, pk))
