from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from datetime import datetime
import logging

from retailpos.core.permissions import IsManagerOrAdmin
from retailpos.core.utils import create_audit_log
from .models import Purchase
from .serializers import PurchaseSerializer, PurchaseCreateSerializer, PurchaseStatusSerializer
from .services import PurchaseError, create_purchase, change_purchase_status

logger = logging.getLogger(__name__)

DATE_FORMAT = '%Y-%m-%d'


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsManagerOrAdmin])
def purchase_list_create(request):
    """List purchase orders or create a new one"""
    if request.method == 'GET':
        queryset = Purchase.objects.select_related('supplier', 'user').prefetch_related('items')
        supplier = request.query_params.get('supplier')
        status_filter = request.query_params.get('status')
        date_from = request.query_params.get('date_from')
        date_to = request.query_params.get('date_to')
        if supplier:
            queryset = queryset.filter(supplier_id=supplier)
        if status_filter:
            queryset = queryset.filter(status=status_filter)
        try:
            if date_from:
                queryset = queryset.filter(order_date__gte=datetime.strptime(date_from, DATE_FORMAT).date())
            if date_to:
                queryset = queryset.filter(order_date__lte=datetime.strptime(date_to, DATE_FORMAT).date())
        except ValueError:
            return Response(
                {'error': 'Invalid date format. Use YYYY-MM-DD'},
                status=status.HTTP_400_BAD_REQUEST
            )
        serializer = PurchaseSerializer(queryset, many=True)
        return Response(serializer.data)

    serializer = PurchaseCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    try:
        purchase = create_purchase(
            user=request.user,
            supplier=data['supplier'],
            items=data['items'],
            order_date=data.get('order_date'),
            expected_date=data.get('expected_date'),
            notes=data.get('notes', ''),
        )
    except PurchaseError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(
        request=request,
        action='create',
        model_name='Purchase',
        object_id=purchase.id,
        object_name=f"Purchase {purchase.order_number}",
        object_reference=purchase.order_number,
        changes={
            'supplier': purchase.supplier.name,
            'total': str(purchase.total),
            'items': [f"{item.product_name} x{item.quantity}" for item in purchase.items.all()],
        }
    )
    return Response(PurchaseSerializer(purchase).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'DELETE'])
@permission_classes([IsAuthenticated, IsManagerOrAdmin])
def purchase_detail(request, pk):
    """Get a purchase order, or delete it while it is still pending"""
    purchase = get_object_or_404(
        Purchase.objects.select_related('supplier', 'user').prefetch_related('items'), pk=pk
    )

    if request.method == 'GET':
        return Response(PurchaseSerializer(purchase).data)

    if purchase.status != Purchase.STATUS_PENDING:
        return Response(
            {'error': f'Only pending purchases can be deleted (current status: {purchase.status})'},
            status=status.HTTP_400_BAD_REQUEST
        )
    create_audit_log(
        request=request,
        action='delete',
        model_name='Purchase',
        object_id=purchase.id,
        object_name=f"Purchase {purchase.order_number}",
        object_reference=purchase.order_number,
        changes={'total': str(purchase.total)}
    )
    purchase.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['PATCH'])
@permission_classes([IsAuthenticated, IsManagerOrAdmin])
def purchase_status(request, pk):
    """Move a purchase through pending -> ordered -> received (or cancelled)"""
    purchase = get_object_or_404(Purchase, pk=pk)
    serializer = PurchaseStatusSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    old_status = purchase.status
    try:
        purchase, received = change_purchase_status(purchase, serializer.validated_data['status'])
    except PurchaseError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    if received:
        create_audit_log(
            request=request,
            action='stock_purchase',
            model_name='Purchase',
            object_id=purchase.id,
            object_name=f"Purchase {purchase.order_number}",
            object_reference=purchase.order_number,
            changes={
                'status': {'old': old_status, 'new': purchase.status},
                'received': {str(product_id): qty for product_id, qty in received.items()},
            }
        )
    else:
        create_audit_log(
            request=request,
            action='update',
            model_name='Purchase',
            object_id=purchase.id,
            object_name=f"Purchase {purchase.order_number}",
            object_reference=purchase.order_number,
            changes={'status': {'old': old_status, 'new': purchase.status}}
        )

    purchase = Purchase.objects.select_related('supplier', 'user').prefetch_related('items').get(pk=purchase.pk)
    return Response(PurchaseSerializer(purchase).data)
