from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db import transaction
from django.db.models import Q, F, Count
from django.shortcuts import get_object_or_404
import logging

from retailpos.core.permissions import IsManagerOrAdmin, IsManagerOrAdminForWrites
from retailpos.core.utils import create_audit_log
from .models import Category, TaxCategory, HsnCode, Product
from .serializers import (
    CategorySerializer, TaxCategorySerializer, HsnCodeSerializer,
    ProductSerializer, ProductListSerializer, StockAdjustmentSerializer,
    BarcodeGenerateSerializer
)
from .filters import ProductFilter
from .barcodes import (
    SUPPORTED_FORMATS, DEFAULT_FORMAT, validate_barcode_value, generate_barcode_data_url
)
from .label_generator import generate_label_image
from .utils import product_barcode_value, find_product_by_code

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 20

# Fields whose changes are recorded on product updates
AUDITED_PRODUCT_FIELDS = ('name', 'sku', 'price', 'mrp', 'stock_quantity', 'hsn_code', 'is_active')


def _product_snapshot(product):
    return {field: str(getattr(product, field)) for field in AUDITED_PRODUCT_FIELDS}


# Category views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsManagerOrAdminForWrites])
def category_list_create(request):
    """List all categories or create a new category"""
    if request.method == 'GET':
        categories = Category.objects.annotate(annotated_product_count=Count('products'))
        if request.query_params.get('active') == 'true':
            categories = categories.filter(is_active=True)
        serializer = CategorySerializer(categories, many=True)
        return Response(serializer.data)
    else:
        serializer = CategorySerializer(data=request.data)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsManagerOrAdminForWrites])
def category_detail(request, pk):
    """Retrieve, update or delete a category"""
    category = get_object_or_404(Category, pk=pk)

    if request.method == 'GET':
        serializer = CategorySerializer(category)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = CategorySerializer(category, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        category.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# Tax category views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsManagerOrAdminForWrites])
def tax_category_list_create(request):
    """List all tax categories or create a new one"""
    if request.method == 'GET':
        tax_categories = TaxCategory.objects.all()
        serializer = TaxCategorySerializer(tax_categories, many=True)
        return Response(serializer.data)
    else:
        serializer = TaxCategorySerializer(data=request.data)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsManagerOrAdminForWrites])
def tax_category_detail(request, pk):
    """Retrieve, update or delete a tax category"""
    tax_category = get_object_or_404(TaxCategory, pk=pk)

    if request.method == 'GET':
        serializer = TaxCategorySerializer(tax_category)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = TaxCategorySerializer(tax_category, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        tax_category.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# HSN code views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsManagerOrAdminForWrites])
def hsn_code_list_create(request):
    """List HSN codes (optionally filtered by ?search=) or create one"""
    if request.method == 'GET':
        hsn_codes = HsnCode.objects.select_related('tax_category')
        search = request.query_params.get('search', '').strip()
        if search:
            hsn_codes = hsn_codes.filter(Q(hsn_code__startswith=search) | Q(description__icontains=search))
        serializer = HsnCodeSerializer(hsn_codes, many=True)
        return Response(serializer.data)
    else:
        serializer = HsnCodeSerializer(data=request.data)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsManagerOrAdminForWrites])
def hsn_code_detail(request, pk):
    """Retrieve, update or delete an HSN code"""
    hsn_code = get_object_or_404(HsnCode, pk=pk)

    if request.method == 'GET':
        serializer = HsnCodeSerializer(hsn_code)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = HsnCodeSerializer(hsn_code, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        hsn_code.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def hsn_code_lookup(request, code):
    """Rates for an HSN code, used to prefill the product form"""
    hsn_code = HsnCode.objects.select_related('tax_category').filter(hsn_code=code.strip()).first()
    if hsn_code is None:
        return Response({'error': 'HSN code not found'}, status=status.HTTP_404_NOT_FOUND)
    return Response(HsnCodeSerializer(hsn_code).data)


# Product views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsManagerOrAdminForWrites])
def product_list_create(request):
    """List products (django-filter query params) or create a new product"""
    if request.method == 'GET':
        queryset = Product.objects.select_related('category').all()
        filterset = ProductFilter(request.query_params, queryset=queryset)
        if not filterset.is_valid():
            return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
        serializer = ProductListSerializer(filterset.qs.order_by('name'), many=True)
        return Response(serializer.data)
    else:
        serializer = ProductSerializer(data=request.data)
        if serializer.is_valid():
            product = serializer.save()
            create_audit_log(
                request=request,
                action='create',
                model_name='Product',
                object_id=product.id,
                object_name=product.name,
                object_reference=product.sku,
                changes={'price': str(product.price), 'stock_quantity': product.stock_quantity}
            )
            return Response(ProductSerializer(product).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsManagerOrAdminForWrites])
def product_detail(request, pk):
    """Retrieve, update or delete a product"""
    product = get_object_or_404(Product.objects.select_related('category', 'supplier'), pk=pk)

    if request.method == 'GET':
        serializer = ProductSerializer(product)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = ProductSerializer(product, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            old_data = _product_snapshot(product)
            serializer.save()
            new_data = _product_snapshot(product)
            changes = {k: {'old': old_data[k], 'new': new_data[k]} for k in old_data if old_data[k] != new_data[k]}
            if changes:
                create_audit_log(
                    request=request,
                    action='price_change' if set(changes) <= {'price', 'mrp'} else 'update',
                    model_name='Product',
                    object_id=product.id,
                    object_name=product.name,
                    object_reference=product.sku,
                    changes=changes
                )
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        product_name = product.name
        product_sku = product.sku
        product_id = product.id
        product.delete()
        create_audit_log(
            request=request,
            action='delete',
            model_name='Product',
            object_id=product_id,
            object_name=product_name,
            object_reference=product_sku,
            changes={'name': product_name, 'sku': product_sku}
        )
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def product_search(request):
    """Quick POS search by name, SKU or barcode (max 20 active products)"""
    query = request.query_params.get('q', '').strip()
    if not query:
        return Response([])

    products = Product.objects.select_related('category').filter(
        Q(name__icontains=query) | Q(sku__icontains=query) | Q(barcode__icontains=query),
        is_active=True,
    ).order_by('name')[:SEARCH_LIMIT]
    return Response(ProductListSerializer(products, many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def product_low_stock(request):
    """Active products at or below their alert threshold, lowest stock first"""
    products = Product.objects.select_related('category').filter(
        is_active=True,
        stock_quantity__lte=F('alert_threshold'),
    ).order_by('stock_quantity', 'name')
    return Response(ProductListSerializer(products, many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def product_by_barcode(request, value):
    """Scanner lookup: match barcode first, then SKU"""
    product = find_product_by_code(value)
    if product is None:
        return Response({'error': 'Product not found'}, status=status.HTTP_404_NOT_FOUND)
    return Response(ProductSerializer(product).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsManagerOrAdmin])
def product_adjust_stock(request, pk):
    """Add or remove stock by a signed quantity"""
    serializer = StockAdjustmentSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    quantity = serializer.validated_data['quantity']
    reason = serializer.validated_data.get('reason', '')

    with transaction.atomic():
        product = get_object_or_404(Product.objects.select_for_update(), pk=pk)
        old_quantity = product.stock_quantity
        new_quantity = old_quantity + quantity
        if new_quantity < 0:
            return Response(
                {'error': f'Insufficient stock for {product.name}. Available: {old_quantity}'},
                status=status.HTTP_400_BAD_REQUEST
            )
        Product.objects.filter(pk=product.pk).update(stock_quantity=F('stock_quantity') + quantity)
        product.refresh_from_db()

    logger.info(f"Stock adjusted for {product.sku}: {old_quantity} -> {product.stock_quantity} ({reason})")
    create_audit_log(
        request=request,
        action='stock_adjust',
        model_name='Product',
        object_id=product.id,
        object_name=product.name,
        object_reference=product.sku,
        changes={
            'stock_quantity': {'old': old_quantity, 'new': product.stock_quantity},
            'adjustment': quantity,
            'reason': reason,
        }
    )
    return Response(ProductSerializer(product).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def product_barcode(request, pk):
    """Barcode preview (SVG data URL) for a product's SKU"""
    product = get_object_or_404(Product, pk=pk)
    barcode_format = request.query_params.get('format', DEFAULT_FORMAT).upper()
    value = product_barcode_value(product, use_barcode=False)
    return Response({
        'value': value,
        'format': barcode_format,
        'image': generate_barcode_data_url(value),
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def product_label_image(request, pk):
    """Scannable Code128 price label as a PNG data URL"""
    product = get_object_or_404(Product, pk=pk)
    value = product_barcode_value(product)
    try:
        image = generate_label_image(
            product_name=product.name,
            barcode_value=value,
            price=product.price,
            mrp=product.mrp,
        )
    except Exception as e:
        logger.error(f"Label generation failed for product {product.id}: {str(e)}", exc_info=True)
        return Response({'error': 'Label generation failed'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
    return Response({'product_id': product.id, 'barcode': value, 'image': image})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def barcode_formats(request):
    return Response(SUPPORTED_FORMATS)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def barcode_generate(request):
    """Validate a value for a barcode format and return its preview"""
    serializer = BarcodeGenerateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    value = serializer.validated_data['value']
    barcode_format = serializer.validated_data['format']
    if not validate_barcode_value(value, barcode_format):
        return Response(
            {'error': f'Invalid value for {barcode_format} barcode'},
            status=status.HTTP_400_BAD_REQUEST
        )
    return Response({
        'value': value,
        'format': barcode_format,
        'image': generate_barcode_data_url(value),
    })
