from rest_framework import serializers
from retailpos.core.validators import validate_gstin, validate_phone
from .models import Customer, Supplier


class PartyValidationMixin:
    """Shared name/phone/GSTIN checks for customers and suppliers"""

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Name is required")
        return value

    def validate_phone(self, value):
        value = (value or '').strip()
        if value:
            validate_phone(value)
        return value

    def _clean_gstin(self, value):
        value = (value or '').strip().upper()
        if value:
            validate_gstin(value)
        return value


class CustomerSerializer(PartyValidationMixin, serializers.ModelSerializer):
    class Meta:
        model = Customer
        fields = [
            'id', 'name', 'email', 'phone', 'address', 'tax_id', 'credit_limit', 'business_name',
            'is_active', 'created_at', 'updated_at'
        ]
        read_only_fields = ['created_at', 'updated_at']

    def validate_tax_id(self, value):
        return self._clean_gstin(value)

    def validate_credit_limit(self, value):
        if value < 0:
            raise serializers.ValidationError("Credit limit cannot be negative")
        return value


class SupplierSerializer(PartyValidationMixin, serializers.ModelSerializer):
    class Meta:
        model = Supplier
        fields = [
            'id', 'name', 'email', 'phone', 'address', 'contact_person', 'gstin', 'tax_id',
            'supplier_type', 'is_active', 'created_at', 'updated_at'
        ]
        read_only_fields = ['created_at', 'updated_at']

    def validate_gstin(self, value):
        return self._clean_gstin(value)
