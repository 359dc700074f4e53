"""
Sessão autenticada a partir do token JWT.

Papel e empresa são gravados no token no login. A cada request o token só é
verificado e decodificado; o papel não é consultado de novo no banco. Uma
mudança de papel passa a valer no próximo refresh do token.
"""

from dataclasses import dataclass, asdict
from typing import Optional

from rest_framework.exceptions import AuthenticationFailed, NotAuthenticated
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import InvalidToken
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer, TokenRefreshSerializer
from rest_framework_simplejwt.settings import api_settings

from .models import CustomUser, PLATFORM_ROLES


@dataclass(frozen=True)
class Session:
    user_id: int
    role: str
    company_id: Optional[int] = None
    company_name: str = ''
    company_slug: str = ''
    company_logo: Optional[str] = None
    email: str = ''
    name: str = ''

    is_authenticated = True
    is_anonymous = False

    @property
    def pk(self):
        return self.user_id

    @property
    def is_platform(self):
        return self.role in PLATFORM_ROLES

    def as_dict(self):
        return asdict(self)

    @classmethod
    def for_user(cls, user):
        company = user.company
        return cls(
            user_id=user.pk,
            role=user.role,
            company_id=company.pk if company else None,
            company_name=company.name if company else '',
            company_slug=company.slug if company else '',
            company_logo=company.logo_url if company else None,
            email=user.email,
            name=user.full_name,
        )

    @classmethod
    def from_token(cls, token):
        try:
            # simplejwt recente grava o user_id como texto
            user_id = int(token[api_settings.USER_ID_CLAIM])
            role = token['role']
        except (KeyError, TypeError, ValueError):
            raise InvalidToken('Token sem as informações da sessão.')
        return cls(
            user_id=user_id,
            role=role,
            company_id=token.get('company_id'),
            company_name=token.get('company_name', ''),
            company_slug=token.get('company_slug', ''),
            company_logo=token.get('company_logo'),
            email=token.get('email', ''),
            name=token.get('name', ''),
        )


def ensure_login_allowed(user):
    """Usuário inativo, ou de empresa inativa, não entra mesmo com a senha certa."""
    if user is None or not user.is_active:
        raise AuthenticationFailed('Usuário inativo ou inexistente.', code='user_inactive')
    if user.role in PLATFORM_ROLES:
        return
    if user.company is None or not user.company.active:
        raise AuthenticationFailed('Empresa inativa ou não encontrada.', code='company_inactive')


def get_session(request) -> Session:
    user = getattr(request, 'user', None)
    if isinstance(user, Session):
        return user
    if user is None or not user.is_authenticated:
        raise NotAuthenticated()
    # Autenticação por sessão do Django (browsable API) ou forçada nos testes
    return Session.for_user(user)


class SessionTokenObtainPairSerializer(TokenObtainPairSerializer):

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        session = Session.for_user(user)
        token['role'] = session.role
        token['company_id'] = session.company_id
        token['company_name'] = session.company_name
        token['company_slug'] = session.company_slug
        token['company_logo'] = session.company_logo
        token['email'] = session.email
        token['name'] = session.name
        return token

    def validate(self, attrs):
        # Emails são gravados em minúsculas
        attrs[self.username_field] = attrs[self.username_field].strip().lower()
        data = super().validate(attrs)
        ensure_login_allowed(self.user)
        data['user'] = Session.for_user(self.user).as_dict()
        return data


class SessionTokenRefreshSerializer(TokenRefreshSerializer):
    """Refresh relê o usuário: papel, empresa e status ativos no momento do refresh."""

    def validate(self, attrs):
        refresh = self.token_class(attrs['refresh'])
        user = (
            CustomUser.objects.select_related('company')
            .filter(pk=refresh.get(api_settings.USER_ID_CLAIM))
            .first()
        )
        ensure_login_allowed(user)
        access = SessionTokenObtainPairSerializer.get_token(user).access_token
        return {'access': str(access)}


class SessionTokenAuthentication(JWTAuthentication):

    def get_user(self, validated_token):
        return Session.from_token(validated_token)
