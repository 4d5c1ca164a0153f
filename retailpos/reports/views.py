import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Sum, Count, Avg, Max, Q, F, DecimalField, ExpressionWrapper
from django.db.models.functions import Coalesce, TruncDate
from django.utils import timezone
from datetime import datetime, timedelta
from decimal import Decimal

from retailpos.catalog.models import Product
from retailpos.core.cache_utils import (
    cached_query,
    DASHBOARD_PREFIX,
    DASHBOARD_STATS_CACHE_TTL,
    DASHBOARD_CHART_CACHE_TTL,
    REPORTS_CACHE_TTL,
)
from retailpos.core.permissions import IsManagerOrAdmin
from retailpos.parties.models import Customer
from retailpos.sales.models import Sale, SaleItem

logger = logging.getLogger('retailpos.reports')

INVALID_DATE = {'error': 'Invalid date format. Use YYYY-MM-DD'}
ZERO = Decimal('0.00')
MAX_CHART_DAYS = 365
MAX_LIMIT = 100


def _parse_date(value, default=None):
    """YYYY-MM-DD to a date; raises ValueError for anything else"""
    if not value:
        return default
    return datetime.strptime(value, '%Y-%m-%d').date()


def _date_range(request, default_days=None):
    """
    date_from/date_to from the query string. With default_days the range
    defaults to the last N days, otherwise missing ends stay None.
    """
    today = timezone.localdate()
    default_from = today - timedelta(days=default_days) if default_days else None
    default_to = today if default_days else None
    date_from = _parse_date(request.query_params.get('date_from'), default_from)
    date_to = _parse_date(request.query_params.get('date_to'), default_to)
    return date_from, date_to


def _int_param(request, name, default, maximum):
    try:
        value = int(request.query_params.get(name, default))
    except (TypeError, ValueError):
        value = default
    return max(1, min(value, maximum))


def _counted_sales(date_from=None, date_to=None):
    """Sales that count towards revenue (everything but cancelled)"""
    sales = Sale.objects.exclude(status=Sale.STATUS_CANCELLED)
    if date_from:
        sales = sales.filter(created_at__date__gte=date_from)
    if date_to:
        sales = sales.filter(created_at__date__lte=date_to)
    return sales


def _counted_items(date_from=None, date_to=None):
    items = SaleItem.objects.exclude(sale__status=Sale.STATUS_CANCELLED)
    if date_from:
        items = items.filter(sale__created_at__date__gte=date_from)
    if date_to:
        items = items.filter(sale__created_at__date__lte=date_to)
    return items


# Dashboard
@cached_query(cache_ttl=DASHBOARD_STATS_CACHE_TTL, key_prefix=f"{DASHBOARD_PREFIX}_stats")
def get_dashboard_stats(day):
    todays_sales = _counted_sales(day, day)
    totals = todays_sales.aggregate(count=Count('id'), revenue=Sum('total'))
    active_products = Product.objects.filter(is_active=True)
    return {
        'total_products': active_products.count(),
        'todays_sales': totals['count'] or 0,
        'todays_revenue': float(totals['revenue'] or ZERO),
        'low_stock_items': active_products.filter(stock_quantity__lte=F('alert_threshold')).count(),
    }


@cached_query(cache_ttl=DASHBOARD_CHART_CACHE_TTL, key_prefix=f"{DASHBOARD_PREFIX}_sales_chart")
def get_sales_chart(days, today):
    """One entry per day for the last `days` days, oldest first, zero days included"""
    start = today - timedelta(days=days - 1)
    rows = _counted_sales(start, today).annotate(
        day=TruncDate('created_at')
    ).values('day').annotate(
        total=Sum('total'),
        count=Count('id')
    )
    by_day = {row['day']: row for row in rows}

    chart = []
    for offset in range(days):
        day = start + timedelta(days=offset)
        row = by_day.get(day)
        chart.append({
            'date': day.isoformat(),
            'total': float(row['total'] or ZERO) if row else 0.0,
            'sales': row['count'] if row else 0,
        })
    return chart


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def dashboard_stats(request):
    """Headline numbers for today; zeros if anything goes wrong"""
    try:
        return Response(get_dashboard_stats(timezone.localdate()))
    except Exception as e:
        logger.error(f"Error fetching dashboard stats: {str(e)}", exc_info=True)
        return Response({
            'total_products': 0,
            'todays_sales': 0,
            'todays_revenue': 0.0,
            'low_stock_items': 0,
        })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def dashboard_sales_chart(request):
    days = _int_param(request, 'days', 7, MAX_CHART_DAYS)
    try:
        return Response(get_sales_chart(days, timezone.localdate()))
    except Exception as e:
        logger.error(f"Error fetching sales chart data: {str(e)}", exc_info=True)
        return Response([])


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def dashboard_top_products(request):
    """Best sellers by quantity, optionally within a date range"""
    limit = _int_param(request, 'limit', 5, MAX_LIMIT)
    try:
        date_from, date_to = _date_range(request)
    except ValueError:
        return Response(INVALID_DATE, status=status.HTTP_400_BAD_REQUEST)

    rows = _counted_items(date_from, date_to).filter(
        product__isnull=False
    ).values(
        'product_id',
        'product__name',
        'product__sku',
        'product__category__name'
    ).annotate(
        sold_quantity=Sum('quantity'),
        revenue=Sum('subtotal')
    ).order_by('-sold_quantity', '-revenue')[:limit]

    return Response([
        {
            'product_id': row['product_id'],
            'name': row['product__name'],
            'sku': row['product__sku'],
            'category': row['product__category__name'] or 'Uncategorized',
            'sold_quantity': row['sold_quantity'] or 0,
            'revenue': float(row['revenue'] or ZERO),
        }
        for row in rows
    ])


# Reports
@cached_query(cache_ttl=REPORTS_CACHE_TTL, key_prefix=f"{DASHBOARD_PREFIX}_sales_summary")
def get_sales_summary(date_from, date_to):
    sales = _counted_sales(date_from, date_to)
    totals = sales.aggregate(
        total_sales=Sum('total'),
        total_tax=Sum('tax'),
        order_count=Count('id'),
        avg_order_value=Avg('total'),
    )
    items_sold = _counted_items(date_from, date_to).aggregate(total=Sum('quantity'))['total'] or 0
    discounts = sum((sale.discount_amount for sale in sales.only('subtotal', 'discount', 'discount_type')), ZERO)

    daily = sales.annotate(
        date=TruncDate('created_at')
    ).values('date').annotate(
        total=Sum('total'),
        count=Count('id')
    ).order_by('date')

    return {
        'period': {
            'from': date_from.isoformat(),
            'to': date_to.isoformat()
        },
        'summary': {
            'total_sales': float(totals['total_sales'] or ZERO),
            'total_orders': totals['order_count'] or 0,
            'total_items_sold': items_sold,
            'avg_order_value': round(float(totals['avg_order_value'] or ZERO), 2),
            'total_tax': float(totals['total_tax'] or ZERO),
            'total_discount': float(discounts),
        },
        'daily_breakdown': [
            {'date': row['date'].isoformat(), 'total': float(row['total'] or ZERO), 'count': row['count']}
            for row in daily
        ]
    }


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsManagerOrAdmin])
def sales_summary(request):
    """Sales summary report, last 30 days unless a range is given"""
    try:
        date_from, date_to = _date_range(request, default_days=30)
    except ValueError:
        return Response(INVALID_DATE, status=status.HTTP_400_BAD_REQUEST)
    if date_from > date_to:
        return Response({'error': 'date_from must be on or before date_to'}, status=status.HTTP_400_BAD_REQUEST)

    logger.info(f"User {request.user.username} requested sales summary ({date_from} to {date_to})")
    return Response(get_sales_summary(date_from, date_to))


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsManagerOrAdmin])
def payment_methods(request):
    try:
        date_from, date_to = _date_range(request, default_days=30)
    except ValueError:
        return Response(INVALID_DATE, status=status.HTTP_400_BAD_REQUEST)

    labels = dict(Sale.PAYMENT_METHOD_CHOICES)
    rows = _counted_sales(date_from, date_to).values('payment_method').annotate(
        count=Count('id'),
        total=Sum('total')
    ).order_by('-total')

    return Response({
        'period': {
            'from': date_from.isoformat(),
            'to': date_to.isoformat()
        },
        'methods': [
            {
                'payment_method': row['payment_method'],
                'label': labels.get(row['payment_method'], row['payment_method']),
                'count': row['count'],
                'total': float(row['total'] or ZERO),
            }
            for row in rows
        ]
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsManagerOrAdmin])
def gst_summary(request):
    """
    Taxable value and GST collected per HSN code and rate.

    Line tax is already scaled for bill discounts, so the taxable value is
    derived from it (tax * 100 / rate). Intra-state lines are split into
    CGST and SGST halves; lines carrying IGST are reported as IGST.
    """
    try:
        date_from, date_to = _date_range(request, default_days=30)
    except ValueError:
        return Response(INVALID_DATE, status=status.HTTP_400_BAD_REQUEST)

    rows = _counted_items(date_from, date_to).values('hsn_code', 'gst_rate').annotate(
        quantity=Sum('quantity'),
        gross=Sum('subtotal'),
        tax=Sum('tax_amount'),
        igst=Sum('tax_amount', filter=Q(igst_rate__gt=0)),
    ).order_by('hsn_code', 'gst_rate')

    entries = []
    totals = {'taxable_value': ZERO, 'cgst': ZERO, 'sgst': ZERO, 'igst': ZERO, 'total_tax': ZERO}
    for row in rows:
        rate = row['gst_rate'] or ZERO
        tax = row['tax'] or ZERO
        igst = row['igst'] or ZERO
        split = tax - igst
        cgst = (split / 2).quantize(Decimal('0.01'))
        sgst = split - cgst
        if rate > 0:
            taxable = (tax * 100 / rate).quantize(Decimal('0.01'))
        else:
            taxable = row['gross'] or ZERO

        entry = {
            'hsn_code': row['hsn_code'] or 'N/A',
            'gst_rate': float(rate),
            'quantity': row['quantity'] or 0,
            'taxable_value': taxable,
            'cgst': cgst,
            'sgst': sgst,
            'igst': igst,
            'total_tax': tax,
        }
        for key in totals:
            totals[key] += entry[key]
        entries.append(entry)

    def _floats(entry):
        return {key: float(value) if isinstance(value, Decimal) else value for key, value in entry.items()}

    return Response({
        'period': {
            'from': date_from.isoformat(),
            'to': date_to.isoformat()
        },
        'rows': [_floats(entry) for entry in entries],
        'totals': _floats(totals),
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsManagerOrAdmin])
def inventory_summary(request):
    """Stock units and value across active products"""
    products = Product.objects.filter(is_active=True)
    money_field = DecimalField(max_digits=14, decimal_places=2)
    totals = products.aggregate(
        total_products=Count('id'),
        stock_units=Sum('stock_quantity'),
        stock_value_cost=Sum(
            ExpressionWrapper(F('stock_quantity') * Coalesce('cost', ZERO), output_field=money_field),
            filter=Q(stock_quantity__gt=0)
        ),
        stock_value_mrp=Sum(
            ExpressionWrapper(F('stock_quantity') * Coalesce('mrp', 'price'), output_field=money_field),
            filter=Q(stock_quantity__gt=0)
        ),
    )

    return Response({
        'total_products': totals['total_products'] or 0,
        'total_stock_units': totals['stock_units'] or 0,
        'stock_value_cost': float(totals['stock_value_cost'] or ZERO),
        'stock_value_mrp': float(totals['stock_value_mrp'] or ZERO),
        'low_stock_count': products.filter(stock_quantity__lte=F('alert_threshold')).count(),
        'out_of_stock_count': products.filter(stock_quantity__lte=0).count(),
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsManagerOrAdmin])
def customer_summary(request):
    """Top customers by spend"""
    limit = _int_param(request, 'limit', 10, MAX_LIMIT)
    counted = ~Q(sales__status=Sale.STATUS_CANCELLED)
    customers = Customer.objects.annotate(
        total_spent=Sum('sales__total', filter=counted),
        order_count=Count('sales', filter=counted),
        last_purchase=Max('sales__created_at', filter=counted),
    ).filter(order_count__gt=0).order_by('-total_spent', 'name')[:limit]

    return Response({
        'total_customers': Customer.objects.filter(is_active=True).count(),
        'top_customers': [
            {
                'id': customer.id,
                'name': customer.name,
                'phone': customer.phone,
                'total_spent': float(customer.total_spent or ZERO),
                'order_count': customer.order_count,
                'last_purchase': customer.last_purchase,
            }
            for customer in customers
        ]
    })
