from rest_framework import serializers

from ..models import DeliveryType, Order, OrderItem, OrderStatus, PaymentMethod


class OrderItemSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)
    variant_name = serializers.CharField(source='variant.name', read_only=True)

    class Meta:
        model = OrderItem
        fields = ('id', 'product', 'product_name', 'variant', 'variant_name', 'quantity', 'unit_price', 'total_price')
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    order_items = OrderItemSerializer(many=True, read_only=True)
    status_display = serializers.CharField(source='get_status_display', read_only=True)

    class Meta:
        model = Order
        fields = (
            'id', 'company', 'user', 'customer', 'customer_name', 'customer_email', 'customer_phone',
            'customer_cnpj_cpf', 'delivery_type', 'delivery_address', 'payment_method', 'status',
            'status_display', 'subtotal', 'delivery_fee', 'total_amount', 'notes', 'order_items',
            'created_at', 'updated_at',
        )
        read_only_fields = fields


class OrderLineSerializer(serializers.Serializer):
    product_id = serializers.IntegerField()
    variant_id = serializers.IntegerField(required=False, allow_null=True)
    quantity = serializers.IntegerField(min_value=1)


class OrderCreateSerializer(serializers.Serializer):
    """
    Entrada de um pedido novo. Preços nunca vêm do cliente: só
    (produto, variação, quantidade). Com reorder_from_order_id os itens vêm
    do pedido de origem e os demais campos, quando enviados, sobrescrevem.
    """
    reorder_from_order_id = serializers.IntegerField(required=False, allow_null=True)
    customer_id = serializers.IntegerField(required=False, allow_null=True)
    customer_name = serializers.CharField(max_length=200, required=False)
    customer_email = serializers.EmailField(required=False, allow_null=True, allow_blank=True)
    customer_phone = serializers.CharField(max_length=20, required=False, allow_blank=True)
    customer_cnpj_cpf = serializers.CharField(max_length=18, required=False, allow_null=True, allow_blank=True)
    delivery_type = serializers.ChoiceField(choices=DeliveryType.choices, required=False)
    delivery_address = serializers.JSONField(required=False, allow_null=True)
    payment_method = serializers.ChoiceField(choices=PaymentMethod.choices, required=False)
    notes = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    items = OrderLineSerializer(many=True, required=False)

    def validate(self, data):
        if data.get('reorder_from_order_id'):
            return data

        errors = {}
        for field in ('customer_name', 'delivery_type', 'payment_method'):
            if not data.get(field):
                errors[field] = 'Este campo é obrigatório.'
        if not data.get('items'):
            errors['items'] = 'Pelo menos um item é obrigatório.'
        if data.get('delivery_type') == DeliveryType.DELIVERY and not data.get('delivery_address'):
            errors['delivery_address'] = 'Endereço obrigatório para entrega.'
        if errors:
            raise serializers.ValidationError(errors)
        return data


class PublicOrderCreateSerializer(OrderCreateSerializer):
    company_id = serializers.IntegerField(required=False)
    company_slug = serializers.CharField(required=False)

    def validate(self, data):
        if not data.get('company_id') and not data.get('company_slug'):
            raise serializers.ValidationError({'company_id': 'Informe a empresa (id ou slug).'})
        return super().validate(data)


class OrderUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=OrderStatus.choices, required=False)
    notes = serializers.CharField(required=False, allow_null=True, allow_blank=True)


class ReorderOverridesSerializer(serializers.Serializer):
    order_id = serializers.IntegerField()
    delivery_type = serializers.ChoiceField(choices=DeliveryType.choices, required=False)
    delivery_address = serializers.JSONField(required=False, allow_null=True)
    payment_method = serializers.ChoiceField(choices=PaymentMethod.choices, required=False)
    notes = serializers.CharField(required=False, allow_null=True, allow_blank=True)
