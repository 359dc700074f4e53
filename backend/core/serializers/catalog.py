from rest_framework import serializers

from ..models import Category, Product, ProductVariant


class ProductVariantSerializer(serializers.ModelSerializer):
    name = serializers.CharField(min_length=1, max_length=120)
    price = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = ProductVariant
        fields = (
            'id', 'product', 'name', 'sku', 'volume', 'unit_type', 'price_modifier', 'price',
            'stock_quantity', 'image_url', 'active', 'created_at', 'updated_at',
        )
        read_only_fields = ('id', 'product', 'created_at', 'updated_at')


class ProductSerializer(serializers.ModelSerializer):
    name = serializers.CharField(min_length=2, max_length=200)
    category_id = serializers.IntegerField()
    category_name = serializers.CharField(source='category.name', read_only=True)
    variants = ProductVariantSerializer(many=True, required=False)

    class Meta:
        model = Product
        fields = (
            'id', 'company', 'category_id', 'category_name', 'name', 'description', 'sku', 'base_price',
            'image_url', 'stock_quantity', 'sort_order', 'active', 'variants', 'created_at', 'updated_at',
        )
        read_only_fields = ('id', 'company', 'created_at', 'updated_at')
        validators = []


class CategorySerializer(serializers.ModelSerializer):
    name = serializers.CharField(min_length=2, max_length=120)

    class Meta:
        model = Category
        fields = ('id', 'company', 'name', 'description', 'sort_order', 'active', 'created_at', 'updated_at')
        read_only_fields = ('id', 'company', 'created_at', 'updated_at')
        # (company, name) único: verificado no serviço
        validators = []


class CategoryWithProductsSerializer(CategorySerializer):
    products = serializers.SerializerMethodField()

    class Meta(CategorySerializer.Meta):
        fields = CategorySerializer.Meta.fields + ('products',)

    def get_products(self, obj):
        products = [p for p in obj.products.all() if p.active]
        return ProductSerializer(products, many=True).data


# --- Cardápio público ---

class MenuVariantSerializer(serializers.ModelSerializer):
    price = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = ProductVariant
        fields = ('id', 'name', 'sku', 'volume', 'unit_type', 'price_modifier', 'price', 'stock_quantity', 'image_url')


class MenuProductSerializer(serializers.ModelSerializer):
    variants = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = ('id', 'name', 'description', 'sku', 'base_price', 'image_url', 'stock_quantity', 'variants')

    def get_variants(self, obj):
        return MenuVariantSerializer([v for v in obj.variants.all() if v.active], many=True).data


class MenuCategorySerializer(serializers.ModelSerializer):
    products = serializers.SerializerMethodField()

    class Meta:
        model = Category
        fields = ('id', 'name', 'description', 'sort_order', 'products')

    def get_products(self, obj):
        products = sorted(
            (p for p in obj.products.all() if p.active),
            key=lambda p: (p.sort_order, p.name),
        )
        return MenuProductSerializer(products, many=True).data
