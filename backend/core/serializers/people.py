from rest_framework import serializers

from ..models import Customer


class CustomerSerializer(serializers.ModelSerializer):
    name = serializers.CharField(min_length=2, max_length=200)
    email = serializers.EmailField(required=False, allow_null=True, allow_blank=True)
    cnpj_cpf = serializers.CharField(required=False, allow_null=True, allow_blank=True, max_length=18)
    phone = serializers.CharField(required=False, allow_null=True, allow_blank=True, max_length=20)
    address = serializers.JSONField(required=False, allow_null=True)
    password = serializers.CharField(write_only=True, required=False, min_length=6)

    class Meta:
        model = Customer
        fields = (
            'id', 'company', 'name', 'email', 'cnpj_cpf', 'phone', 'address', 'active', 'password',
            'created_at', 'updated_at',
        )
        read_only_fields = ('id', 'company', 'created_at', 'updated_at')
        validators = []


class CustomerRegisterSerializer(CustomerSerializer):
    password = serializers.CharField(write_only=True, min_length=6)

    class Meta(CustomerSerializer.Meta):
        fields = ('id', 'name', 'email', 'cnpj_cpf', 'phone', 'address', 'password')
        read_only_fields = ('id',)

    def validate(self, data):
        if not data.get('email') and not data.get('cnpj_cpf'):
            raise serializers.ValidationError({'email': 'Informe email ou CNPJ/CPF.'})
        return data


class CustomerLoginSerializer(serializers.Serializer):
    login = serializers.CharField()
    password = serializers.CharField()


class PublicCustomerSerializer(serializers.ModelSerializer):
    """Dados do cliente devolvidos à loja (sem senha)."""

    class Meta:
        model = Customer
        fields = ('id', 'name', 'email', 'cnpj_cpf', 'phone', 'address')
