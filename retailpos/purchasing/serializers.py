from rest_framework import serializers
from retailpos.catalog.models import Product
from retailpos.parties.models import Supplier
from .models import Purchase, PurchaseItem


class PurchaseItemSerializer(serializers.ModelSerializer):
    product_sku = serializers.CharField(source='product.sku', read_only=True, default=None)

    class Meta:
        model = PurchaseItem
        fields = ['id', 'product', 'product_name', 'product_sku', 'quantity', 'unit_cost', 'received_quantity', 'subtotal']
        read_only_fields = fields


class PurchaseSerializer(serializers.ModelSerializer):
    items = PurchaseItemSerializer(many=True, read_only=True)
    supplier_name = serializers.CharField(source='supplier.name', read_only=True, default=None)
    created_by = serializers.CharField(source='user.username', read_only=True, default=None)

    class Meta:
        model = Purchase
        fields = [
            'id', 'order_number', 'supplier', 'supplier_name', 'user', 'created_by', 'total', 'status',
            'order_date', 'expected_date', 'received_date', 'notes', 'created_at', 'updated_at', 'items'
        ]
        read_only_fields = fields


class PurchaseItemInputSerializer(serializers.Serializer):
    product_id = serializers.PrimaryKeyRelatedField(queryset=Product.objects.all(), source='product')
    quantity = serializers.IntegerField()
    unit_cost = serializers.DecimalField(max_digits=10, decimal_places=2)

    def validate_quantity(self, value):
        if value <= 0:
            raise serializers.ValidationError("Quantity must be greater than zero")
        return value

    def validate_unit_cost(self, value):
        if value < 0:
            raise serializers.ValidationError("Unit cost cannot be negative")
        return value


class PurchaseCreateSerializer(serializers.Serializer):
    supplier_id = serializers.PrimaryKeyRelatedField(queryset=Supplier.objects.all(), source='supplier')
    items = PurchaseItemInputSerializer(many=True, allow_empty=False)
    order_date = serializers.DateField(required=False, allow_null=True)
    expected_date = serializers.DateField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, default='')

    def validate(self, attrs):
        order_date = attrs.get('order_date')
        expected_date = attrs.get('expected_date')
        if order_date and expected_date and expected_date < order_date:
            raise serializers.ValidationError({'expected_date': 'Expected date cannot be before the order date'})
        return attrs


class PurchaseStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Purchase.STATUS_CHOICES)
