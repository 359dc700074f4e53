from rest_framework import serializers

from ..models import Company, CustomUser, Role, slug_validator


class CompanySerializer(serializers.ModelSerializer):
    name = serializers.CharField(min_length=2, max_length=255)

    class Meta:
        model = Company
        fields = '__all__'
        read_only_fields = ('id', 'created_at', 'updated_at')
        # Unicidade do slug é verificada no serviço (409, não 400)
        extra_kwargs = {'slug': {'validators': [slug_validator], 'min_length': 3}}


class PublicCompanySerializer(serializers.ModelSerializer):
    """Perfil exibido na loja pública."""

    class Meta:
        model = Company
        fields = ('id', 'name', 'slug', 'email', 'phone', 'address', 'city', 'state', 'zip_code', 'logo_url')


class MasterUserSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(min_length=6, write_only=True)
    first_name = serializers.CharField(max_length=150)
    last_name = serializers.CharField(max_length=150, required=False, allow_blank=True, default='')
    phone = serializers.CharField(max_length=20, required=False, allow_blank=True, allow_null=True)


class CompanyCreateSerializer(CompanySerializer):
    master_user = MasterUserSerializer(required=False, write_only=True)


class CustomUserSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, required=False, min_length=6)
    company_name = serializers.CharField(source='company.name', read_only=True)
    role = serializers.ChoiceField(choices=Role.choices, required=False)

    class Meta:
        model = CustomUser
        fields = (
            'id', 'email', 'first_name', 'last_name', 'phone', 'role', 'company', 'company_name',
            'is_active', 'is_primary_admin', 'password', 'last_login', 'date_joined', 'updated_at',
        )
        read_only_fields = ('id', 'company', 'is_primary_admin', 'last_login', 'date_joined', 'updated_at')
        extra_kwargs = {'email': {'validators': []}}


class PasswordResetSerializer(serializers.Serializer):
    new_password = serializers.CharField(min_length=6)


class SignupSerializer(serializers.Serializer):
    company_name = serializers.CharField(min_length=2, max_length=255)
    email = serializers.EmailField()
    password = serializers.CharField(min_length=6, write_only=True)
    first_name = serializers.CharField(max_length=150)
    last_name = serializers.CharField(max_length=150)
    phone = serializers.CharField(max_length=20, required=False, allow_blank=True, allow_null=True)
