from decimal import Decimal
from rest_framework import serializers
from .models import Sale, SaleItem


class SaleItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = SaleItem
        fields = [
            'id', 'product', 'product_name', 'product_sku', 'quantity', 'unit_price', 'mrp',
            'hsn_code', 'cgst_rate', 'sgst_rate', 'igst_rate', 'gst_rate', 'tax_amount', 'subtotal'
        ]
        read_only_fields = fields


class SaleSerializer(serializers.ModelSerializer):
    items = SaleItemSerializer(many=True, read_only=True)
    customer_name = serializers.CharField(source='customer.name', read_only=True, default=None)
    customer_phone = serializers.CharField(source='customer.phone', read_only=True, default=None)
    cashier_name = serializers.SerializerMethodField()

    class Meta:
        model = Sale
        fields = [
            'id', 'order_number', 'customer', 'customer_name', 'customer_phone', 'user', 'cashier_name',
            'subtotal', 'discount', 'discount_type', 'tax', 'round_off', 'total',
            'amount_paid', 'change_due', 'payment_method', 'status', 'notes', 'created_at', 'items'
        ]
        read_only_fields = fields

    def get_cashier_name(self, obj):
        if obj.user:
            return obj.user.get_full_name() or obj.user.username
        return None


class SaleListSerializer(SaleSerializer):
    """Sale without its lines, for lists and the dashboard"""
    items = None
    item_count = serializers.SerializerMethodField()

    class Meta(SaleSerializer.Meta):
        fields = [f for f in SaleSerializer.Meta.fields if f != 'items'] + ['item_count']
        read_only_fields = fields

    def get_item_count(self, obj):
        annotated = getattr(obj, 'annotated_item_count', None)
        if annotated is not None:
            return annotated
        return obj.items.count()


class SaleItemInputSerializer(serializers.Serializer):
    product_id = serializers.IntegerField()
    quantity = serializers.IntegerField()
    unit_price = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, allow_null=True)
    mrp = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, allow_null=True)


class SaleCreateSerializer(serializers.Serializer):
    """Checkout payload; business rules are checked by the sales service"""
    customer_id = serializers.IntegerField(required=False, allow_null=True)
    items = SaleItemInputSerializer(many=True)
    discount = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, default=Decimal('0.00'))
    discount_type = serializers.ChoiceField(choices=Sale.DISCOUNT_TYPE_CHOICES, required=False, default='amount')
    payment_method = serializers.ChoiceField(choices=Sale.PAYMENT_METHOD_CHOICES, required=False, default='cash')
    amount_paid = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, default='')
    status = serializers.ChoiceField(
        choices=[Sale.STATUS_COMPLETED, Sale.STATUS_PENDING], required=False, default=Sale.STATUS_COMPLETED
    )


class SaleStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Sale.STATUS_CHOICES)
