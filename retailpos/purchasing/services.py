"""Purchase order creation and the status workflow that brings stock in"""
from decimal import Decimal
import logging

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from retailpos.catalog.models import Product
from retailpos.core.utils import generate_order_number
from .models import Purchase, PurchaseItem

logger = logging.getLogger(__name__)

# status -> statuses it may move to
ALLOWED_TRANSITIONS = {
    Purchase.STATUS_PENDING: {Purchase.STATUS_ORDERED, Purchase.STATUS_RECEIVED, Purchase.STATUS_CANCELLED},
    Purchase.STATUS_ORDERED: {Purchase.STATUS_RECEIVED, Purchase.STATUS_CANCELLED},
    Purchase.STATUS_RECEIVED: set(),
    Purchase.STATUS_CANCELLED: set(),
}


class PurchaseError(Exception):
    """Invalid purchase order or status change"""


def create_purchase(user, supplier, items, order_date=None, expected_date=None, notes=''):
    """
    Create a pending purchase order.

    items: [{'product': Product, 'quantity': int, 'unit_cost': Decimal}]
    """
    if supplier is None:
        raise PurchaseError("Supplier is required")
    if not items:
        raise PurchaseError("Purchase must have at least one item")

    for item in items:
        if item['quantity'] <= 0:
            raise PurchaseError(f"Quantity for {item['product'].name} must be greater than zero")
        if item['unit_cost'] < 0:
            raise PurchaseError(f"Unit cost for {item['product'].name} cannot be negative")

    with transaction.atomic():
        purchase = Purchase.objects.create(
            order_number=generate_order_number(Purchase, 'PO'),
            supplier=supplier,
            user=user if user and user.is_authenticated else None,
            order_date=order_date or timezone.localdate(),
            expected_date=expected_date,
            notes=notes or '',
        )
        total = Decimal('0.00')
        lines = []
        for item in items:
            subtotal = item['unit_cost'] * item['quantity']
            total += subtotal
            lines.append(PurchaseItem(
                purchase=purchase,
                product=item['product'],
                product_name=item['product'].name,
                quantity=item['quantity'],
                unit_cost=item['unit_cost'],
                subtotal=subtotal,
            ))
        PurchaseItem.objects.bulk_create(lines)
        purchase.total = total
        purchase.save(update_fields=['total'])

    logger.info(f"Purchase {purchase.order_number} created with {len(lines)} items, total {total}")
    return purchase


def receive_purchase(purchase):
    """Add each item's outstanding quantity to stock; returns {product_id: qty}"""
    received = {}
    for item in purchase.items.select_for_update():
        outstanding = item.outstanding_quantity
        if outstanding <= 0:
            continue
        if item.product_id is not None:
            Product.objects.filter(pk=item.product_id).update(stock_quantity=F('stock_quantity') + outstanding)
            received[item.product_id] = received.get(item.product_id, 0) + outstanding
        PurchaseItem.objects.filter(pk=item.pk).update(received_quantity=F('quantity'))
    return received


def change_purchase_status(purchase, new_status):
    """
    Apply a status transition. Moving to received brings the stock in and
    stamps received_date. Returns (purchase, received) where received maps
    product ids to the quantity added.
    """
    valid = {choice for choice, _ in Purchase.STATUS_CHOICES}
    if new_status not in valid:
        raise PurchaseError(f"Invalid status. Must be one of: {', '.join(sorted(valid))}")

    received = {}
    with transaction.atomic():
        purchase = Purchase.objects.select_for_update().get(pk=purchase.pk)
        if new_status not in ALLOWED_TRANSITIONS[purchase.status]:
            raise PurchaseError(f"Cannot change status from {purchase.status} to {new_status}")
        if new_status == Purchase.STATUS_RECEIVED:
            received = receive_purchase(purchase)
            purchase.received_date = timezone.now()
        purchase.status = new_status
        purchase.save(update_fields=['status', 'received_date', 'updated_at'])

    logger.info(f"Purchase {purchase.order_number} moved to {new_status}")
    return purchase, received
