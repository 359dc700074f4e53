from datetime import date

from rest_framework import permissions, serializers
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle

from ..authentication import get_session
from ..pagination import DynamicPageSizePagination
from ..permissions import HasResourcePermission

TRUE_VALUES = ('1', 'true', 'sim', 'yes')


class AuthThrottle(AnonRateThrottle):
    scope = 'auth'


class PublicThrottle(AnonRateThrottle):
    scope = 'public'


def parse_bool(value):
    if value is None or value == '':
        return None
    return str(value).strip().lower() in TRUE_VALUES


def parse_date(value, field):
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise serializers.ValidationError({field: 'Data inválida, use AAAA-MM-DD.'})


def parse_int(value, field):
    if value is None or value == '':
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        raise serializers.ValidationError({field: 'Informe um número inteiro.'})


# --- Base ViewSet para os serviços da empresa ---
class ServiceViewSetMixin:
    """
    ViewSets finos sobre a camada de serviços: validam a entrada com o
    serializer e repassam a sessão para o serviço, que aplica permissão e
    escopo da empresa.
    """
    permission_classes = [permissions.IsAuthenticated, HasResourcePermission]
    pagination_class = DynamicPageSizePagination
    resource = None

    @property
    def session(self):
        return get_session(self.request)

    def query_param(self, name):
        value = self.request.query_params.get(name)
        return value.strip() if value else None

    def active_filter(self) -> dict:
        active = parse_bool(self.request.query_params.get('active'))
        return {} if active is None else {'active': active}

    def date_range(self):
        return (
            parse_date(self.query_param('start_date'), 'start_date'),
            parse_date(self.query_param('end_date'), 'end_date'),
        )

    def int_param(self, name):
        return parse_int(self.query_param(name), name)

    def company_id_param(self):
        """company_id explícito (só papéis da plataforma podem escolher a empresa)."""
        return parse_int(
            self.request.data.get('company_id') or self.request.query_params.get('company_id'), 'company_id'
        )

    def validated(self, serializer_class=None, partial=False):
        serializer_class = serializer_class or self.get_serializer_class()
        serializer = serializer_class(data=self.request.data, partial=partial, context=self.get_serializer_context())
        serializer.is_valid(raise_exception=True)
        return dict(serializer.validated_data)

    def paginated(self, queryset, serializer_class=None):
        serializer_class = serializer_class or self.get_serializer_class()
        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(serializer_class(page, many=True).data)
        return Response(serializer_class(queryset, many=True).data)

    def respond(self, instance, status=200, serializer_class=None):
        serializer_class = serializer_class or self.get_serializer_class()
        return Response(serializer_class(instance).data, status=status)
