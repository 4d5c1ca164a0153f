from rest_framework import serializers
from retailpos.core.validators import validate_hsn_code
from retailpos.parties.models import Supplier
from .models import Category, TaxCategory, HsnCode, Product
from .barcodes import DEFAULT_FORMAT
from .utils import generate_unique_sku

RATE_FIELDS = ('cgst_rate', 'sgst_rate', 'igst_rate', 'cess_rate')


class CategorySerializer(serializers.ModelSerializer):
    product_count = serializers.SerializerMethodField()

    class Meta:
        model = Category
        fields = ['id', 'name', 'description', 'is_active', 'product_count', 'created_at', 'updated_at']

    def get_product_count(self, obj):
        annotated = getattr(obj, 'annotated_product_count', None)
        if annotated is not None:
            return annotated
        return obj.products.count()

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Category name is required")
        return value


class TaxCategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = TaxCategory
        fields = ['id', 'name', 'rate', 'description', 'is_active', 'created_at', 'updated_at']


class HsnCodeSerializer(serializers.ModelSerializer):
    tax_category_name = serializers.CharField(source='tax_category.name', read_only=True, default=None)
    total_gst_rate = serializers.DecimalField(max_digits=5, decimal_places=2, read_only=True)

    class Meta:
        model = HsnCode
        fields = ['id', 'hsn_code', 'description', 'tax_category', 'tax_category_name',
                  'cgst_rate', 'sgst_rate', 'igst_rate', 'cess_rate', 'total_gst_rate',
                  'is_active', 'created_at', 'updated_at']

    def validate_hsn_code(self, value):
        return value.strip()


class ProductSerializer(serializers.ModelSerializer):
    # For reading: return nested objects
    category = CategorySerializer(read_only=True)

    # For writing: accept integer IDs
    category_id = serializers.PrimaryKeyRelatedField(
        queryset=Category.objects.all(),
        source='category',
        write_only=True,
        required=False,
        allow_null=True
    )
    supplier_id = serializers.PrimaryKeyRelatedField(
        queryset=Supplier.objects.all(),
        source='supplier',
        write_only=True,
        required=False,
        allow_null=True
    )

    category_name = serializers.CharField(source='category.name', read_only=True, default=None)
    supplier_name = serializers.CharField(source='supplier.name', read_only=True, default=None)
    sku = serializers.CharField(max_length=100, required=False, allow_blank=True)
    hsn_code = serializers.CharField(max_length=8, required=False, allow_blank=True)
    gst_rate = serializers.DecimalField(max_digits=5, decimal_places=2, read_only=True)
    is_low_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = Product
        fields = [
            'id', 'name', 'sku', 'description', 'price', 'mrp', 'cost', 'wholesale_price',
            'stock_quantity', 'alert_threshold', 'is_low_stock', 'barcode', 'weight', 'weight_unit',
            'hsn_code', 'cgst_rate', 'sgst_rate', 'igst_rate', 'cess_rate', 'gst_rate',
            'category', 'category_id', 'category_name', 'supplier_id', 'supplier_name',
            'image', 'is_active', 'created_at', 'updated_at',
        ]
        read_only_fields = ['created_at', 'updated_at']

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Product name is required")
        return value

    def validate_sku(self, value):
        value = (value or '').strip()
        if not value:
            return value
        queryset = Product.objects.filter(sku__iexact=value)
        if self.instance is not None:
            queryset = queryset.exclude(pk=self.instance.pk)
        if queryset.exists():
            raise serializers.ValidationError("A product with this SKU already exists")
        return value

    def validate_price(self, value):
        if value < 0:
            raise serializers.ValidationError("Price cannot be negative")
        return value

    def validate_cost(self, value):
        if value is not None and value < 0:
            raise serializers.ValidationError("Cost cannot be negative")
        return value

    def validate_stock_quantity(self, value):
        if value < 0:
            raise serializers.ValidationError("Stock quantity cannot be negative")
        return value

    def validate_alert_threshold(self, value):
        if value < 0:
            raise serializers.ValidationError("Alert threshold cannot be negative")
        return value

    def validate_hsn_code(self, value):
        value = (value or '').strip()
        if value:
            validate_hsn_code(value)
        return value

    def validate(self, attrs):
        price = attrs.get('price', getattr(self.instance, 'price', None))
        mrp = attrs.get('mrp', getattr(self.instance, 'mrp', None))
        if price is not None and mrp is not None and mrp < price:
            raise serializers.ValidationError({'mrp': "MRP cannot be less than the selling price"})

        # Picking an HSN code without explicit rates copies the rates from the HSN master
        hsn_code = attrs.get('hsn_code')
        if hsn_code and not any(field in self.initial_data for field in RATE_FIELDS):
            master = HsnCode.objects.filter(hsn_code=hsn_code, is_active=True).first()
            if master is not None:
                for field in RATE_FIELDS:
                    attrs[field] = getattr(master, field)
        return attrs

    def create(self, validated_data):
        if not validated_data.get('sku'):
            validated_data['sku'] = generate_unique_sku(validated_data.get('name'))
        return super().create(validated_data)

    def update(self, instance, validated_data):
        # A blank SKU on update keeps the existing one
        if 'sku' in validated_data and not validated_data['sku']:
            validated_data.pop('sku')
        return super().update(instance, validated_data)


class ProductListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for list, search and POS lookups"""
    category_name = serializers.CharField(source='category.name', read_only=True, default=None)
    gst_rate = serializers.DecimalField(max_digits=5, decimal_places=2, read_only=True)
    is_low_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = Product
        fields = ['id', 'name', 'sku', 'barcode', 'price', 'mrp', 'stock_quantity', 'alert_threshold',
                  'is_low_stock', 'hsn_code', 'gst_rate', 'category_name', 'weight', 'weight_unit',
                  'is_active']


class StockAdjustmentSerializer(serializers.Serializer):
    quantity = serializers.IntegerField()
    reason = serializers.CharField(required=False, allow_blank=True, max_length=255)

    def validate_quantity(self, value):
        if value == 0:
            raise serializers.ValidationError("Quantity change cannot be zero")
        return value


class BarcodeGenerateSerializer(serializers.Serializer):
    value = serializers.CharField(max_length=255, trim_whitespace=False)
    format = serializers.CharField(max_length=20, required=False, default=DEFAULT_FORMAT)

    def validate_format(self, value):
        return (value or DEFAULT_FORMAT).upper()
