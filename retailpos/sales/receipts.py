"""
Receipt generation for sales.

Both outputs are built from one context (receipt_context):
- HTML: 80mm thermal layout rendered from sales/receipt.html, with an
  optional window.print() script for the browser
- PDF: 226pt wide (80mm) document built with reportlab; the page height
  follows the content
"""
import base64
import io
import logging
from decimal import Decimal

from django.template.loader import render_to_string
from django.utils import timezone

import qrcode
from reportlab.lib import colors
from reportlab.lib.styles import ParagraphStyle
from reportlab.lib.enums import TA_CENTER, TA_LEFT
from reportlab.lib.units import inch
from reportlab.platypus import Image, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle
from reportlab.platypus.flowables import HRFlowable
from xml.sax.saxutils import escape

from retailpos.core.formatting import amount_in_words, format_inr
from retailpos.core.utils import get_receipt_settings

logger = logging.getLogger(__name__)

PAGE_WIDTH = 226  # 80mm thermal paper in points
MARGIN = 10
CONTENT_WIDTH = PAGE_WIDTH - 2 * MARGIN


def _rate_label(rate):
    rate = Decimal(rate).normalize()
    return f"{rate:f}%"


def gst_summary(sale, items):
    """
    Tax rows for the receipt: CGST/SGST halves when the items carry a split
    rate, IGST when they carry IGST, plain GST otherwise.
    """
    tax = sale.tax or Decimal('0.00')
    if tax <= 0:
        return []
    rates = {item.gst_rate for item in items if item.gst_rate}
    single_rate = rates.pop() if len(rates) == 1 else None

    if any((item.cgst_rate or 0) > 0 or (item.sgst_rate or 0) > 0 for item in items):
        cgst = (tax / 2).quantize(Decimal('0.01'))
        sgst = tax - cgst
        half = _rate_label(single_rate / 2) if single_rate else None
        return [
            (f"CGST ({half})" if half else "CGST", cgst),
            (f"SGST ({half})" if half else "SGST", sgst),
        ]
    if any((item.igst_rate or 0) > 0 for item in items):
        return [(f"IGST ({_rate_label(single_rate)})" if single_rate else "IGST", tax)]
    return [(f"GST ({_rate_label(single_rate)})" if single_rate else "GST", tax)]


def qr_payload(sale):
    return f"BILL:{sale.order_number}|TOTAL:{sale.total}|DATE:{timezone.localtime(sale.created_at):%Y-%m-%d}"


def qr_png(data):
    """QR code PNG bytes for the given text"""
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=4,
        border=1,
    )
    qr.add_data(data)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()


def receipt_context(sale, business=None, autoprint=True):
    """Everything the HTML and PDF receipts print, precomputed"""
    business = business or get_receipt_settings()
    items = list(sale.items.all())
    total_qty = sum(item.quantity for item in items)

    qr_data_url = None
    if business.get('show_qr_code'):
        try:
            encoded = base64.b64encode(qr_png(qr_payload(sale))).decode('ascii')
            qr_data_url = f"data:image/png;base64,{encoded}"
        except Exception as e:
            logger.error(f"QR code generation failed for {sale.order_number}: {str(e)}")

    cashier = None
    if sale.user:
        cashier = sale.user.get_full_name() or sale.user.username

    return {
        'sale': sale,
        'business': business,
        'items': items,
        'item_count': len(items),
        'total_quantity': total_qty,
        'cashier': cashier or 'Sales Staff',
        'customer': sale.customer,
        'discount_amount': sale.discount_amount,
        'is_percentage_discount': sale.discount_type == 'percentage',
        'taxable_amount': sale.taxable_amount,
        'gst_rows': gst_summary(sale, items),
        'total_in_words': amount_in_words(sale.total),
        'payment_method': sale.payment_method.upper(),
        'qr_code': qr_data_url,
        'printed_at': timezone.localtime(timezone.now()),
        'created_at': timezone.localtime(sale.created_at),
        'autoprint': autoprint,
    }


def render_receipt_html(sale, business=None, autoprint=True):
    return render_to_string('sales/receipt.html', receipt_context(sale, business, autoprint))


def _rs(value):
    # Base-14 PDF fonts have no rupee glyph
    return f"Rs. {format_inr(value, symbol=False)}"


class PdfReceiptBuilder:
    """Lays out a thermal receipt as reportlab flowables"""

    def __init__(self, context):
        self.ctx = context
        self.title = ParagraphStyle('ReceiptTitle', fontName='Helvetica-Bold', fontSize=13, leading=16, alignment=TA_CENTER)
        self.center = ParagraphStyle('ReceiptCenter', fontName='Helvetica', fontSize=8, leading=10, alignment=TA_CENTER)
        self.body = ParagraphStyle('ReceiptBody', fontName='Helvetica', fontSize=8, leading=10, alignment=TA_LEFT)
        self.small = ParagraphStyle('ReceiptSmall', fontName='Helvetica', fontSize=7, leading=9, alignment=TA_LEFT)
        self.heading = ParagraphStyle('ReceiptHeading', fontName='Helvetica-Bold', fontSize=9, leading=11, alignment=TA_LEFT)
        self.thanks = ParagraphStyle('ReceiptThanks', parent=self.heading, alignment=TA_CENTER)

    def _p(self, text, style=None):
        return Paragraph(escape(str(text)), style or self.body)

    def _rule(self, dashed=False):
        return HRFlowable(
            width="100%", thickness=0.5, color=colors.black,
            dash=(2, 2) if dashed else None, spaceBefore=3, spaceAfter=3,
        )

    def _pairs(self, rows, bold_last=False, font_size=8):
        table = Table(rows, colWidths=[CONTENT_WIDTH * 0.62, CONTENT_WIDTH * 0.38])
        style = [
            ('FONTNAME', (0, 0), (-1, -1), 'Helvetica'),
            ('FONTSIZE', (0, 0), (-1, -1), font_size),
            ('ALIGN', (1, 0), (1, -1), 'RIGHT'),
            ('LEFTPADDING', (0, 0), (-1, -1), 0),
            ('RIGHTPADDING', (0, 0), (-1, -1), 0),
            ('TOPPADDING', (0, 0), (-1, -1), 1),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 1),
        ]
        if bold_last:
            style.append(('FONTNAME', (0, -1), (-1, -1), 'Helvetica-Bold'))
        table.setStyle(TableStyle(style))
        return table

    def header(self):
        business = self.ctx['business']
        story = [self._p(business.get('business_name') or '', self.title)]
        if business.get('business_address'):
            story.append(self._p(business['business_address'].replace('\n', ' '), self.center))
        if business.get('phone_number'):
            story.append(self._p(f"Phone: {business['phone_number']}", self.center))
        if business.get('email'):
            story.append(self._p(f"Email: {business['email']}", self.center))
        if business.get('tax_id'):
            story.append(self._p(f"GST No: {business['tax_id']}", self.center))
        story.append(self._rule())
        return story

    def details(self):
        sale = self.ctx['sale']
        story = [
            self._p("INVOICE DETAILS", self.heading),
            self._p(f"Bill No: {sale.order_number}"),
            self._p(f"Date: {self.ctx['created_at']:%d/%m/%Y %I:%M %p}"),
        ]
        customer = self.ctx['customer']
        if customer:
            story.append(self._p(f"Customer: {customer.name}"))
            if customer.phone:
                story.append(self._p(f"Phone: {customer.phone}"))
        story.append(self._p(f"Cashier: {self.ctx['cashier']}"))
        story.append(self._rule())
        return story

    def items(self):
        rows = [['Item', 'Qty', 'Rate', 'Amount']]
        for item in self.ctx['items']:
            rows.append([
                Paragraph(escape(item.product_name), self.body),
                str(item.quantity),
                format_inr(item.unit_price, symbol=False),
                format_inr(item.subtotal, symbol=False),
            ])
            details = []
            if item.product_sku:
                details.append(f"SKU: {item.product_sku}")
            if item.hsn_code:
                details.append(f"HSN: {item.hsn_code}")
            if item.mrp:
                details.append(f"MRP: {_rs(item.mrp)}")
            if details:
                rows.append([Paragraph(escape(' | '.join(details)), self.small), '', '', ''])

        table = Table(rows, colWidths=[CONTENT_WIDTH * 0.46, CONTENT_WIDTH * 0.1, CONTENT_WIDTH * 0.2, CONTENT_WIDTH * 0.24])
        table.setStyle(TableStyle([
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('FONTNAME', (0, 1), (-1, -1), 'Helvetica'),
            ('FONTSIZE', (0, 0), (-1, -1), 8),
            ('ALIGN', (1, 0), (1, -1), 'CENTER'),
            ('ALIGN', (2, 0), (-1, -1), 'RIGHT'),
            ('VALIGN', (0, 0), (-1, -1), 'TOP'),
            ('LINEBELOW', (0, 0), (-1, 0), 0.5, colors.black),
            ('LEFTPADDING', (0, 0), (-1, -1), 0),
            ('RIGHTPADDING', (0, 0), (-1, -1), 0),
            ('TOPPADDING', (0, 0), (-1, -1), 1),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 1),
        ]))
        return [table, self._rule(dashed=True)]

    def totals(self):
        sale = self.ctx['sale']
        rows = [['Sub Total:', _rs(sale.subtotal)]]
        if self.ctx['discount_amount'] > 0:
            label = f"Discount ({sale.discount.normalize():f}%):" if self.ctx['is_percentage_discount'] else "Discount:"
            rows.append([label, f"-{_rs(self.ctx['discount_amount'])}"])
        rows.append(['Taxable Amount:', _rs(self.ctx['taxable_amount'])])
        for label, amount in self.ctx['gst_rows']:
            rows.append([f"{label}:", _rs(amount)])
        if sale.round_off:
            rows.append(['Rounding Adjustment:', _rs(sale.round_off)])
        story = [self._pairs(rows), self._rule()]
        story.append(self._pairs([['GRAND TOTAL:', _rs(sale.total)]], bold_last=True, font_size=11))
        story.append(self._p(f"({self.ctx['total_in_words']} Only)", self.center))
        story.append(self._rule())
        return story

    def payment(self):
        sale = self.ctx['sale']
        rows = [
            ['Payment Method:', self.ctx['payment_method']],
            ['Amount Paid:', _rs(sale.amount_paid)],
        ]
        if sale.change_due > 0:
            rows.append(['Change Due:', _rs(sale.change_due)])
        story = [self._p("PAYMENT DETAILS", self.heading), self._pairs(rows, bold_last=sale.change_due > 0)]
        if sale.notes:
            story.append(self._p(f"Notes: {sale.notes}"))
        story.append(self._rule())
        return story

    def footer(self):
        business = self.ctx['business']
        sale = self.ctx['sale']
        story = [self._p("Thank You for Shopping!", self.thanks)]
        for key in ('receipt_footer', 'terms_conditions', 'return_policy'):
            if business.get(key):
                story.append(self._p(business[key], self.center))
        story.append(self._p(f"Items: {self.ctx['item_count']} | Qty: {self.ctx['total_quantity']}", self.center))

        if business.get('show_qr_code'):
            try:
                qr = Image(io.BytesIO(qr_png(qr_payload(sale))), width=0.8 * inch, height=0.8 * inch)
                qr.hAlign = 'CENTER'
                story.extend([Spacer(1, 4), qr])
            except Exception as e:
                logger.error(f"QR code generation failed for {sale.order_number}: {str(e)}")

        story.append(self._p(f"Invoice ID: {sale.order_number}", self.center))
        story.append(self._p(f"Printed: {self.ctx['printed_at']:%d/%m/%Y %I:%M %p}", self.center))
        return story

    def story(self):
        return self.header() + self.details() + self.items() + self.totals() + self.payment() + self.footer()


def _story_height(story):
    height = 0
    for flowable in story:
        _, h = flowable.wrap(CONTENT_WIDTH, 10000)
        height += h + flowable.getSpaceBefore() + flowable.getSpaceAfter()
    return height


def render_receipt_pdf(sale, business=None):
    """Receipt as PDF bytes on 80mm paper"""
    builder = PdfReceiptBuilder(receipt_context(sale, business, autoprint=False))
    # Flowables are measured on a throwaway story; wrapping mutates them
    page_height = _story_height(builder.story()) + 2 * MARGIN + 20

    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=(PAGE_WIDTH, page_height),
        leftMargin=MARGIN,
        rightMargin=MARGIN,
        topMargin=MARGIN,
        bottomMargin=MARGIN,
        title=f"Receipt {sale.order_number}",
        author=builder.ctx['business'].get('business_name') or 'RetailPOS',
    )
    doc.build(builder.story())
    pdf_bytes = buffer.getvalue()
    buffer.close()
    return pdf_bytes
