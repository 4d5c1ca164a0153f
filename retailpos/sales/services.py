"""
Checkout, cancellation and deletion of sales.

Prices are GST-inclusive: the tax inside a line is
subtotal * rate / (100 + rate). Stock changes run inside
transaction.atomic() with the product rows locked.
"""
from decimal import Decimal, ROUND_HALF_UP
import logging

from django.db import transaction
from django.db.models import F

from retailpos.catalog.models import Product
from retailpos.core.formatting import to_decimal
from retailpos.core.utils import generate_order_number
from retailpos.parties.models import Customer
from .models import Sale, SaleItem

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal('0.01')
WHOLE_RUPEE = Decimal('1')
HUNDRED = Decimal('100')


class SaleError(Exception):
    """Business rule violation during checkout or sale updates"""


def money(value):
    return to_decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def inclusive_tax(amount, rate):
    """Tax portion of a GST-inclusive amount"""
    rate = to_decimal(rate)
    if rate <= 0:
        return Decimal('0.00')
    return to_decimal(amount) * rate / (HUNDRED + rate)


def discount_value(subtotal, discount, discount_type):
    """Rupee value of a discount, validated against the subtotal"""
    discount = to_decimal(discount)
    if discount < 0:
        raise SaleError("Discount cannot be negative")
    if discount_type == 'percentage':
        if discount > HUNDRED:
            raise SaleError("Percentage discount cannot exceed 100")
        return money(subtotal * discount / HUNDRED)
    if discount_type != 'amount':
        raise SaleError(f"Invalid discount type: {discount_type}")
    if discount > subtotal:
        raise SaleError("Discount cannot exceed the subtotal")
    return money(discount)


def calculate_totals(lines, discount=0, discount_type='amount'):
    """
    Totals for a list of priced lines.

    Each line is a dict with 'subtotal' and 'gst_rate'. The discount is taken
    off the subtotal and each line's tax is scaled by the discounted share.
    Line tax amounts are written back as 'tax_amount'. The grand total is
    rounded to the nearest rupee and round_off records the adjustment.
    """
    subtotal = sum((money(line['subtotal']) for line in lines), Decimal('0.00'))
    discount_amount = discount_value(subtotal, discount, discount_type)
    net = subtotal - discount_amount
    share = (net / subtotal) if subtotal else Decimal('0')

    tax = Decimal('0.00')
    for line in lines:
        line['tax_amount'] = money(inclusive_tax(line['subtotal'], line['gst_rate']) * share)
        tax += line['tax_amount']

    total = net.quantize(WHOLE_RUPEE, rounding=ROUND_HALF_UP)
    return {
        'subtotal': subtotal,
        'discount_amount': discount_amount,
        'tax': money(tax),
        'round_off': money(total - net),
        'total': money(total),
    }


def _product_rate(product):
    split = (product.cgst_rate or 0) + (product.sgst_rate or 0)
    return split if split else (product.igst_rate or Decimal('0.00'))


def create_sale(user, items, customer_id=None, discount=0, discount_type='amount',
                payment_method='cash', amount_paid=None, notes='', status=Sale.STATUS_COMPLETED):
    """
    Create a sale with its items and take the quantities out of stock.

    items: [{'product_id', 'quantity', 'unit_price'?, 'mrp'?}]
    Raises SaleError when any rule is broken; nothing is written in that case.
    """
    if not items:
        raise SaleError("Sale must have at least one item")
    if status == Sale.STATUS_CANCELLED:
        raise SaleError("A new sale cannot be created as cancelled")

    customer = None
    if customer_id:
        customer = Customer.objects.filter(pk=customer_id).first()
        if customer is None:
            raise SaleError(f"Customer {customer_id} not found")

    with transaction.atomic():
        product_ids = {item['product_id'] for item in items}
        products = {
            p.id: p for p in Product.objects.select_for_update().filter(id__in=product_ids, is_active=True)
        }

        requested = {}
        lines = []
        for item in items:
            product = products.get(item['product_id'])
            if product is None:
                raise SaleError(f"Product {item['product_id']} not found or inactive")
            quantity = item.get('quantity') or 0
            if quantity <= 0:
                raise SaleError(f"Quantity for {product.name} must be greater than zero")
            requested[product.id] = requested.get(product.id, 0) + quantity

            unit_price = item.get('unit_price')
            unit_price = money(product.price if unit_price is None else unit_price)
            if unit_price < 0:
                raise SaleError(f"Price for {product.name} cannot be negative")
            mrp = item.get('mrp')
            if mrp is None:
                mrp = product.mrp

            lines.append({
                'product': product,
                'quantity': quantity,
                'unit_price': unit_price,
                'mrp': mrp,
                'gst_rate': _product_rate(product),
                'subtotal': unit_price * quantity,
            })

        for product_id, quantity in requested.items():
            product = products[product_id]
            if product.stock_quantity < quantity:
                raise SaleError(
                    f"Insufficient stock for {product.name}. Available: {product.stock_quantity}"
                )

        totals = calculate_totals(lines, discount, discount_type)
        paid = totals['total'] if amount_paid in (None, '') else money(amount_paid)
        if paid < 0:
            raise SaleError("Amount paid cannot be negative")

        sale = Sale.objects.create(
            order_number=generate_order_number(Sale, 'SALE'),
            customer=customer,
            user=user if user and user.is_authenticated else None,
            subtotal=totals['subtotal'],
            discount=money(discount),
            discount_type=discount_type,
            tax=totals['tax'],
            round_off=totals['round_off'],
            total=totals['total'],
            amount_paid=paid,
            change_due=max(paid - totals['total'], Decimal('0.00')),
            payment_method=payment_method,
            status=status,
            notes=notes or '',
        )

        SaleItem.objects.bulk_create([
            SaleItem(
                sale=sale,
                product=line['product'],
                product_name=line['product'].name,
                product_sku=line['product'].sku,
                quantity=line['quantity'],
                unit_price=line['unit_price'],
                mrp=line['mrp'],
                hsn_code=line['product'].hsn_code,
                cgst_rate=line['product'].cgst_rate,
                sgst_rate=line['product'].sgst_rate,
                igst_rate=line['product'].igst_rate,
                gst_rate=line['gst_rate'],
                tax_amount=line['tax_amount'],
                subtotal=money(line['subtotal']),
            )
            for line in lines
        ])

        for product_id, quantity in requested.items():
            Product.objects.filter(pk=product_id).update(stock_quantity=F('stock_quantity') - quantity)

    logger.info(f"Sale {sale.order_number} created: {len(lines)} lines, total {sale.total}")
    return sale


def restore_stock(sale):
    """Put every item's quantity back on its product (items whose product is gone are skipped)"""
    restored = 0
    for item in sale.items.all():
        if item.product_id is None:
            continue
        Product.objects.filter(pk=item.product_id).update(stock_quantity=F('stock_quantity') + item.quantity)
        restored += item.quantity
    return restored


def change_sale_status(sale, new_status):
    """
    Move a sale to another status. Cancelling puts the stock back once;
    a cancelled sale cannot be reopened.
    """
    valid = {choice for choice, _ in Sale.STATUS_CHOICES}
    if new_status not in valid:
        raise SaleError(f"Invalid status. Must be one of: {', '.join(sorted(valid))}")

    with transaction.atomic():
        sale = Sale.objects.select_for_update().get(pk=sale.pk)
        if sale.status == new_status:
            return sale
        if sale.status == Sale.STATUS_CANCELLED:
            raise SaleError("Cancelled sales cannot be reopened")
        if new_status == Sale.STATUS_CANCELLED:
            restore_stock(sale)
        sale.status = new_status
        sale.save(update_fields=['status'])

    logger.info(f"Sale {sale.order_number} moved to {new_status}")
    return sale


def delete_sale(sale):
    """Delete a sale, returning its stock unless it was already cancelled"""
    with transaction.atomic():
        sale = Sale.objects.select_for_update().get(pk=sale.pk)
        restored = 0
        if sale.status != Sale.STATUS_CANCELLED:
            restored = restore_stock(sale)
        order_number = sale.order_number
        sale.delete()

    logger.info(f"Sale {order_number} deleted, {restored} units returned to stock")
    return restored
