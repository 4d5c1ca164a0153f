from django.urls import path
from .views import (
    category_list_create, category_detail,
    tax_category_list_create, tax_category_detail,
    hsn_code_list_create, hsn_code_detail, hsn_code_lookup,
    product_list_create, product_detail, product_search, product_low_stock,
    product_by_barcode, product_adjust_stock, product_barcode, product_label_image,
    barcode_formats, barcode_generate
)

urlpatterns = [
    # Category endpoints
    path('categories/', category_list_create, name='category-list-create'),
    path('categories/<int:pk>/', category_detail, name='category-detail'),

    # Tax category and HSN endpoints
    path('tax-categories/', tax_category_list_create, name='tax-category-list-create'),
    path('tax-categories/<int:pk>/', tax_category_detail, name='tax-category-detail'),
    path('hsn-codes/', hsn_code_list_create, name='hsn-code-list-create'),
    path('hsn-codes/<int:pk>/', hsn_code_detail, name='hsn-code-detail'),
    path('hsn-codes/lookup/<str:code>/', hsn_code_lookup, name='hsn-code-lookup'),

    # Product endpoints
    path('products/', product_list_create, name='product-list-create'),
    path('products/search/', product_search, name='product-search'),
    path('products/low-stock/', product_low_stock, name='product-low-stock'),
    path('products/barcode/<str:value>/', product_by_barcode, name='product-by-barcode'),
    path('products/<int:pk>/', product_detail, name='product-detail'),
    path('products/<int:pk>/adjust-stock/', product_adjust_stock, name='product-adjust-stock'),
    path('products/<int:pk>/barcode/', product_barcode, name='product-barcode'),
    path('products/<int:pk>/label-image/', product_label_image, name='product-label-image'),

    # Barcode endpoints
    path('barcodes/formats/', barcode_formats, name='barcode-formats'),
    path('barcodes/generate/', barcode_generate, name='barcode-generate'),
]
