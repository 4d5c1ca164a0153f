import django_filters
from django.db.models import Q, F
from .models import Product

TRUE_VALUES = ('true', '1', 'yes')


class ProductFilter(django_filters.FilterSet):
    """Filter for Product model using django-filter"""

    # Searches name, SKU and barcode
    search = django_filters.CharFilter(method='filter_search', label='Search')

    category = django_filters.NumberFilter(field_name='category_id', lookup_expr='exact')
    supplier = django_filters.NumberFilter(field_name='supplier_id', lookup_expr='exact')
    is_active = django_filters.BooleanFilter(field_name='is_active')
    hsn_code = django_filters.CharFilter(field_name='hsn_code', lookup_expr='exact')
    min_price = django_filters.NumberFilter(field_name='price', lookup_expr='gte')
    max_price = django_filters.NumberFilter(field_name='price', lookup_expr='lte')

    # Stock status filters
    low_stock = django_filters.CharFilter(method='filter_low_stock', label='Low Stock')
    out_of_stock = django_filters.CharFilter(method='filter_out_of_stock', label='Out of Stock')

    class Meta:
        model = Product
        fields = ['search', 'category', 'supplier', 'is_active', 'hsn_code',
                  'min_price', 'max_price', 'low_stock', 'out_of_stock']

    def filter_search(self, queryset, name, value):
        """Multi-word search: every word must match name, SKU or barcode"""
        words = [w for w in (value or '').split() if w]
        if not words:
            return queryset
        for word in words:
            queryset = queryset.filter(
                Q(name__icontains=word) | Q(sku__icontains=word) | Q(barcode__icontains=word)
            )
        return queryset

    def filter_low_stock(self, queryset, name, value):
        """Products at or below their alert threshold"""
        if value and value.lower() in TRUE_VALUES:
            return queryset.filter(stock_quantity__lte=F('alert_threshold'))
        return queryset

    def filter_out_of_stock(self, queryset, name, value):
        if value and value.lower() in TRUE_VALUES:
            return queryset.filter(stock_quantity__lte=0)
        return queryset
