from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Count
from django.http import HttpResponse
from datetime import datetime
import logging

from retailpos.core.permissions import IsManagerOrAdmin
from retailpos.core.utils import create_audit_log
from .models import Sale
from .serializers import SaleSerializer, SaleListSerializer, SaleCreateSerializer, SaleStatusSerializer
from .services import SaleError, create_sale, change_sale_status, delete_sale
from .receipts import render_receipt_html, render_receipt_pdf

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 500
DATE_FORMAT = '%Y-%m-%d'


def _int_param(request, name, default, minimum=0, maximum=None):
    try:
        value = int(request.query_params.get(name, default))
    except (TypeError, ValueError):
        value = default
    value = max(value, minimum)
    if maximum is not None:
        value = min(value, maximum)
    return value


def _get_sale(pk):
    return (
        Sale.objects.select_related('customer', 'user')
        .prefetch_related('items')
        .filter(pk=pk)
        .first()
    )


def _not_found():
    return Response({'error': 'Sale not found'}, status=status.HTTP_404_NOT_FOUND)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def sale_list_create(request):
    """List sales (newest first) or check out a new sale"""
    if request.method == 'GET':
        queryset = Sale.objects.select_related('customer', 'user').annotate(
            annotated_item_count=Count('items')
        )
        date_from = request.query_params.get('date_from')
        date_to = request.query_params.get('date_to')
        try:
            if date_from:
                queryset = queryset.filter(created_at__date__gte=datetime.strptime(date_from, DATE_FORMAT).date())
            if date_to:
                queryset = queryset.filter(created_at__date__lte=datetime.strptime(date_to, DATE_FORMAT).date())
        except ValueError:
            return Response(
                {'error': 'Invalid date format. Use YYYY-MM-DD'},
                status=status.HTTP_400_BAD_REQUEST
            )

        user_id = request.query_params.get('user')
        customer_id = request.query_params.get('customer')
        status_filter = request.query_params.get('status')
        payment_method = request.query_params.get('payment_method')
        if user_id:
            queryset = queryset.filter(user_id=user_id)
        if customer_id:
            queryset = queryset.filter(customer_id=customer_id)
        if status_filter:
            queryset = queryset.filter(status=status_filter)
        if payment_method:
            queryset = queryset.filter(payment_method=payment_method)

        queryset = queryset.order_by('-created_at', '-id')
        limit = _int_param(request, 'limit', DEFAULT_PAGE_SIZE, minimum=1, maximum=MAX_PAGE_SIZE)
        offset = _int_param(request, 'offset', 0)
        count = queryset.count()
        serializer = SaleListSerializer(queryset[offset:offset + limit], many=True)
        return Response({'count': count, 'results': serializer.data})

    # POST: checkout
    if not isinstance(request.data, dict):
        return Response({'error': 'Sale data must be a JSON object'}, status=status.HTTP_400_BAD_REQUEST)
    if not request.data.get('items'):
        return Response({'error': 'Sale must have at least one item'}, status=status.HTTP_400_BAD_REQUEST)

    serializer = SaleCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    try:
        sale = create_sale(
            user=request.user,
            items=data['items'],
            customer_id=data.get('customer_id'),
            discount=data['discount'],
            discount_type=data['discount_type'],
            payment_method=data['payment_method'],
            amount_paid=data.get('amount_paid'),
            notes=data['notes'],
            status=data['status'],
        )
    except SaleError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(
        request=request,
        action='sale_create',
        model_name='Sale',
        object_id=sale.id,
        object_name=f"Sale {sale.order_number}",
        object_reference=sale.order_number,
        changes={
            'total': str(sale.total),
            'payment_method': sale.payment_method,
            'items': [f"{item.product_name} x{item.quantity}" for item in sale.items.all()],
            'customer': sale.customer.name if sale.customer else None,
        }
    )
    return Response(SaleSerializer(_get_sale(sale.pk)).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def sale_recent(request):
    """Latest sales for the dashboard"""
    limit = _int_param(request, 'limit', 5, minimum=1, maximum=50)
    sales = Sale.objects.select_related('customer', 'user').annotate(
        annotated_item_count=Count('items')
    ).order_by('-created_at', '-id')[:limit]
    return Response(SaleListSerializer(sales, many=True).data)


@api_view(['GET', 'DELETE'])
@permission_classes([IsAuthenticated])
def sale_detail(request, pk):
    """Get a sale with its items, or delete it (stock is put back)"""
    sale = _get_sale(pk)
    if sale is None:
        return _not_found()

    if request.method == 'GET':
        return Response(SaleSerializer(sale).data)

    if not request.user.is_manager_or_admin:
        return Response({'error': 'Manager or admin access required.'}, status=status.HTTP_403_FORBIDDEN)

    order_number = sale.order_number
    sale_id = sale.id
    total = str(sale.total)
    try:
        restored = delete_sale(sale)
    except SaleError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(
        request=request,
        action='sale_delete',
        model_name='Sale',
        object_id=sale_id,
        object_name=f"Sale {order_number}",
        object_reference=order_number,
        changes={'total': total, 'units_restored': restored}
    )
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['PATCH'])
@permission_classes([IsAuthenticated, IsManagerOrAdmin])
def sale_status(request, pk):
    """Change a sale's status; cancelling returns its stock"""
    sale = _get_sale(pk)
    if sale is None:
        return _not_found()

    serializer = SaleStatusSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    old_status = sale.status
    new_status = serializer.validated_data['status']
    try:
        sale = change_sale_status(sale, new_status)
    except SaleError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    if old_status != new_status:
        create_audit_log(
            request=request,
            action='sale_cancel' if new_status == Sale.STATUS_CANCELLED else 'update',
            model_name='Sale',
            object_id=sale.id,
            object_name=f"Sale {sale.order_number}",
            object_reference=sale.order_number,
            changes={'status': {'old': old_status, 'new': new_status}}
        )
    return Response(SaleSerializer(_get_sale(sale.pk)).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def sale_receipt(request, pk):
    """Printable 80mm HTML receipt; ?autoprint=0 leaves out the print script"""
    sale = _get_sale(pk)
    if sale is None:
        return _not_found()
    autoprint = request.query_params.get('autoprint', '1') not in ('0', 'false', 'no')
    html = render_receipt_html(sale, autoprint=autoprint)
    return HttpResponse(html, content_type='text/html; charset=utf-8')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def sale_receipt_pdf(request, pk):
    sale = _get_sale(pk)
    if sale is None:
        return _not_found()
    try:
        pdf = render_receipt_pdf(sale)
    except Exception as e:
        logger.error(f"PDF receipt generation failed for {sale.order_number}: {str(e)}")
        return Response(
            {'error': 'Failed to generate receipt', 'message': str(e)},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )
    response = HttpResponse(pdf, content_type='application/pdf')
    response['Content-Disposition'] = f'inline; filename="receipt-{sale.order_number}.pdf"'
    return response
