"""
Endpoints da loja pública (sem login da equipe).

A empresa é identificada pelo slug (ou id). Empresa inativa é tratada como
inexistente. O cliente da loja se identifica pelo token devolvido no login
(header X-Customer-Token ou campo customer_token).
"""

from django.db.models import Prefetch
from rest_framework import permissions, status
from rest_framework.decorators import api_view, authentication_classes, permission_classes, throttle_classes
from rest_framework.exceptions import NotFound
from rest_framework.response import Response

from .mixins import AuthThrottle, PublicThrottle
from ..models import Category, Company, Product, ProductVariant
from ..serializers import (
    CustomerLoginSerializer, CustomerRegisterSerializer, MenuCategorySerializer, OrderSerializer,
    PublicCompanySerializer, PublicCustomerSerializer, PublicOrderCreateSerializer, ReorderOverridesSerializer,
)
from ..services import customers as customer_service
from ..services import orders as order_service


def _active_company(slug=None, company_id=None) -> Company:
    lookup = {'slug': slug} if slug else {'pk': company_id}
    if not any(lookup.values()):
        raise NotFound('Empresa não encontrada.')
    try:
        return Company.objects.get(active=True, **lookup)
    except (Company.DoesNotExist, ValueError, TypeError):
        raise NotFound('Empresa não encontrada.')


def _company_from_request(request) -> Company:
    params = request.data if request.method == 'POST' else request.query_params
    return _active_company(slug=params.get('company_slug'), company_id=params.get('company_id'))


def _customer_token(request):
    return request.headers.get('X-Customer-Token') or request.data.get('customer_token') \
        or request.query_params.get('customer_token')


def public_view(methods, throttle=PublicThrottle):
    def decorator(func):
        func = throttle_classes([throttle])(func)
        func = permission_classes([permissions.AllowAny])(func)
        func = authentication_classes([])(func)
        return api_view(methods)(func)
    return decorator


# --- Empresa e cardápio ---

@public_view(['GET'])
def public_company_view(request, slug):
    """GET /api/public/company/<slug>/"""
    return Response(PublicCompanySerializer(_active_company(slug=slug)).data)


@public_view(['GET'])
def public_menu_view(request, slug):
    """
    GET /api/public/menu/<slug>/
    Empresa + categorias ativas + produtos ativos + variações ativas.
    Categoria inativa esconde seus produtos, mesmo os ativos.
    """
    company = _active_company(slug=slug)
    categories = (
        Category.objects.filter(company=company, active=True)
        .order_by('sort_order', 'name')
        .prefetch_related(
            Prefetch(
                'products',
                queryset=Product.objects.filter(active=True).prefetch_related(
                    Prefetch('variants', queryset=ProductVariant.objects.filter(active=True).order_by('name'))
                ),
            )
        )
    )
    return Response({
        'company': PublicCompanySerializer(company).data,
        'categories': MenuCategorySerializer(categories, many=True).data,
    })


# --- Pedidos ---

@public_view(['POST'])
def public_order_create(request):
    """
    POST /api/public/orders/
    Body: company_slug|company_id, dados do cliente, entrega, pagamento e itens
    (ou reorder_from_order_id, que exige o token do cliente).
    """
    serializer = PublicOrderCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = dict(serializer.validated_data)
    company = _active_company(slug=data.pop('company_slug', None), company_id=data.pop('company_id', None))

    # O cliente vem do token, nunca do corpo da requisição
    data.pop('customer_id', None)
    token = _customer_token(request)
    customer = customer_service.customer_from_token(company, token) if token else None
    if customer is not None:
        data['customer_id'] = customer.pk

    source_id = data.pop('reorder_from_order_id', None)
    if source_id:
        if customer is None:
            raise NotFound('Pedido para recomprar não encontrado.')
        order = order_service.reorder(company, source_id, customer_id=customer.pk, overrides=data)
    else:
        order = order_service.place_order(company, data)
    return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)


# --- Clientes da loja ---

@public_view(['POST'], throttle=AuthThrottle)
def customer_register(request):
    """POST /api/public/customers/register/"""
    company = _company_from_request(request)
    serializer = CustomerRegisterSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    customer = customer_service.register_customer(company, dict(serializer.validated_data))
    return Response({
        'customer': PublicCustomerSerializer(customer).data,
        'customer_token': customer_service.issue_customer_token(customer),
    }, status=status.HTTP_201_CREATED)


@public_view(['POST'], throttle=AuthThrottle)
def customer_login(request):
    """
    POST /api/public/customers/login/
    Body: { "company_slug": "...", "login": "email ou CNPJ/CPF", "password": "..." }
    """
    company = _company_from_request(request)
    serializer = CustomerLoginSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    customer = customer_service.authenticate_customer(
        company, serializer.validated_data['login'], serializer.validated_data['password']
    )
    return Response({
        'customer': PublicCustomerSerializer(customer).data,
        'customer_token': customer_service.issue_customer_token(customer),
    })


@public_view(['GET'])
def customer_check(request):
    """GET /api/public/customers/check/?company_slug=...&cnpj_cpf=..."""
    company = _company_from_request(request)
    return Response({'exists': customer_service.customer_exists(company, request.query_params.get('cnpj_cpf'))})


@public_view(['GET'], throttle=AuthThrottle)
def customer_find(request):
    """GET /api/public/customers/find/?company_slug=...&email=...|cnpj_cpf=..."""
    company = _company_from_request(request)
    customer = customer_service.find_customer(
        company,
        email=request.query_params.get('email'),
        cnpj_cpf=request.query_params.get('cnpj_cpf'),
    )
    if customer is None:
        raise NotFound('Cliente não cadastrado nesta loja.')
    return Response({'id': customer.pk, 'name': customer.name, 'has_password': bool(customer.password)})


@public_view(['GET'])
def customer_orders(request):
    """GET /api/public/customers/orders/?company_slug=...  (X-Customer-Token)"""
    company = _company_from_request(request)
    customer = customer_service.customer_from_token(company, _customer_token(request))
    orders = customer_service.customer_orders(customer)
    return Response(OrderSerializer(orders, many=True).data)


@public_view(['POST'])
def customer_reorder(request):
    """
    POST /api/public/customers/reorder/
    Body: { "company_slug": "...", "order_id": 12, ...campos a sobrescrever }
    Repete os itens do pedido com os preços atuais do catálogo.
    """
    company = _company_from_request(request)
    customer = customer_service.customer_from_token(company, _customer_token(request))
    serializer = ReorderOverridesSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    overrides = dict(serializer.validated_data)
    source_id = overrides.pop('order_id')
    order = order_service.reorder(company, source_id, customer_id=customer.pk, overrides=overrides)
    return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)
