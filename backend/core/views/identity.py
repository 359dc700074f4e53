
from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action, api_view, permission_classes, throttle_classes
from rest_framework.response import Response
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from .mixins import AuthThrottle, ServiceViewSetMixin, parse_bool
from ..authentication import (
    Session, SessionTokenObtainPairSerializer, SessionTokenRefreshSerializer, get_session,
)
from ..permissions import Resource, accessible_sections
from ..serializers import (
    CompanyCreateSerializer, CompanySerializer, CustomUserSerializer, PasswordResetSerializer, SignupSerializer,
)
from ..services import companies as company_service


# --- Autenticação ---

class SessionTokenObtainPairView(TokenObtainPairView):
    """POST /api/token/ - login por email e senha."""
    serializer_class = SessionTokenObtainPairSerializer
    throttle_classes = [AuthThrottle]


class SessionTokenRefreshView(TokenRefreshView):
    """POST /api/token/refresh/ - novo access token com papel e empresa relidos do banco."""
    serializer_class = SessionTokenRefreshSerializer
    throttle_classes = [AuthThrottle]


@api_view(['GET'])
def me_view(request):
    """GET /api/me/ - sessão atual e seções do painel liberadas para o papel."""
    session = get_session(request)
    return Response({
        **session.as_dict(),
        'sections': accessible_sections(session.role),
    })


@api_view(['POST'])
@permission_classes([permissions.AllowAny])
@throttle_classes([AuthThrottle])
def signup_view(request):
    """
    POST /api/signup/
    Cria a empresa e o primeiro usuário (dono da empresa) e já devolve os tokens.
    """
    serializer = SignupSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    company, user = company_service.signup(serializer.validated_data)

    refresh = SessionTokenObtainPairSerializer.get_token(user)
    return Response({
        'company': CompanySerializer(company).data,
        'user': Session.for_user(user).as_dict(),
        'access': str(refresh.access_token),
        'refresh': str(refresh),
    }, status=status.HTTP_201_CREATED)


# --- ViewSets ---

class CompanyViewSet(ServiceViewSetMixin, viewsets.GenericViewSet):
    """Empresas (tenants). Gestão restrita aos papéis da plataforma."""
    serializer_class = CompanySerializer
    resource = Resource.COMPANIES

    def get_serializer_class(self):
        if self.action == 'create':
            return CompanyCreateSerializer
        if self.action == 'users':
            return CustomUserSerializer
        return CompanySerializer

    def list(self, request):
        filters = self.active_filter()
        queryset = company_service.list_companies(self.session, filters)
        search = self.query_param('search')
        if search:
            queryset = queryset.filter(name__icontains=search) | queryset.filter(slug__icontains=search)
        return self.paginated(queryset)

    def retrieve(self, request, pk=None):
        return self.respond(company_service.get_company(self.session, pk))

    def create(self, request):
        data = self.validated()
        master_user = data.pop('master_user', None)
        company = company_service.create_company(self.session, data, master_user=master_user)
        return self.respond(company, status=status.HTTP_201_CREATED, serializer_class=CompanySerializer)

    def update(self, request, pk=None):
        data = self.validated(partial=True)
        return self.respond(company_service.update_company(self.session, pk, data))

    def partial_update(self, request, pk=None):
        return self.update(request, pk)

    def destroy(self, request, pk=None):
        return self.respond(company_service.deactivate_company(self.session, pk))

    @action(detail=False, methods=['get', 'patch'], permission_classes=[permissions.IsAuthenticated])
    def me(self, request):
        """
        GET /api/companies/me/ - empresa do usuário autenticado
        PATCH /api/companies/me/ - atualiza a própria empresa (MASTER_DIST)
        """
        if request.method == 'GET':
            return self.respond(company_service.get_own_company(self.session))
        data = self.validated(partial=True)
        return self.respond(company_service.update_own_company(self.session, data))

    @action(detail=True, methods=['get', 'post'])
    def users(self, request, pk=None):
        """GET/POST /api/companies/{id}/users/ - usuários de uma empresa."""
        company = company_service.get_company(self.session, pk)
        if request.method == 'GET':
            queryset = company_service.list_users(self.session, {'company_id': company.pk})
            return self.paginated(queryset)
        data = self.validated()
        user = company_service.create_user(self.session, data, company_id=company.pk)
        return self.respond(user, status=status.HTTP_201_CREATED)


class UserViewSet(ServiceViewSetMixin, viewsets.GenericViewSet):
    """Usuários do painel. MASTER_DIST enxerga e gerencia só a própria empresa."""
    serializer_class = CustomUserSerializer
    resource = Resource.USERS

    def list(self, request):
        filters = {}
        active = parse_bool(request.query_params.get('active'))
        if active is not None:
            filters['is_active'] = active
        if self.query_param('role'):
            filters['role'] = self.query_param('role')
        if self.int_param('company_id'):
            filters['company_id'] = self.int_param('company_id')
        queryset = company_service.list_users(self.session, filters)
        search = self.query_param('search')
        if search:
            queryset = (
                queryset.filter(email__icontains=search)
                | queryset.filter(first_name__icontains=search)
                | queryset.filter(last_name__icontains=search)
            )
        return self.paginated(queryset)

    def retrieve(self, request, pk=None):
        return self.respond(company_service.get_user(self.session, pk))

    def create(self, request):
        data = self.validated()
        user = company_service.create_user(self.session, data, company_id=self.company_id_param())
        return self.respond(user, status=status.HTTP_201_CREATED)

    def update(self, request, pk=None):
        data = self.validated(partial=True)
        return self.respond(company_service.update_user(self.session, pk, data))

    def partial_update(self, request, pk=None):
        return self.update(request, pk)

    def destroy(self, request, pk=None):
        return self.respond(company_service.deactivate_user(self.session, pk))

    @action(detail=True, methods=['post'], url_path='reset-password')
    def reset_password(self, request, pk=None):
        """POST /api/users/{id}/reset-password/  Body: { "new_password": "..." }"""
        data = self.validated(PasswordResetSerializer)
        company_service.reset_user_password(self.session, pk, data['new_password'])
        return Response({'detail': 'Senha redefinida com sucesso.'})
