"""
Barcode previews and ESC/POS label commands

The SVG preview is a cosmetic bar pattern derived from the bits of the value,
so the same value always renders the same image. Scannable Code128 images are
produced by label_generator with python-barcode.
"""
import base64
import re

from django.utils.html import escape

SUPPORTED_FORMATS = ['CODE128', 'EAN13', 'CODE39', 'UPC', 'QR']
DEFAULT_FORMAT = 'CODE128'

FORMAT_PATTERNS = {
    'CODE128': re.compile(r'^[\x00-\x7F]+$'),
    'EAN13': re.compile(r'^\d{12,13}$'),
    'CODE39': re.compile(r'^[A-Z0-9\-.\s$/+%]+$'),
    'UPC': re.compile(r'^\d{11,12}$'),
}

SVG_WIDTH = 200
SVG_HEIGHT = 100
MAX_BARS = 50
BAR_STEP = 3
BAR_HEIGHT = 60


def validate_barcode_value(value, barcode_format=DEFAULT_FORMAT):
    """True when value can be encoded in the format; QR and unknown formats accept anything"""
    if not value:
        return False
    pattern = FORMAT_PATTERNS.get((barcode_format or '').upper())
    if pattern is None:
        return True
    return bool(pattern.match(value))


def _value_bits(value):
    return ''.join(format(byte, '08b') for byte in value.encode('utf-8'))


def barcode_pattern(value):
    """SVG rects for the bar pattern; one bar per bit, 2 or 4 units wide"""
    bits = _value_bits(value)
    bar_count = min(len(value) * 8, MAX_BARS)
    rects = []
    for i in range(bar_count):
        width = 4 if bits[i % len(bits)] == '1' else 2
        rects.append(
            f'<rect x="{i * BAR_STEP}" y="0" width="{width}" height="{BAR_HEIGHT}" fill="black"/>'
        )
    return ''.join(rects)


def generate_barcode_svg(value, display_value=True, font_size=12):
    """Raw SVG markup for the preview barcode"""
    text = ''
    if display_value:
        text = (
            f'<text x="{SVG_WIDTH // 2}" y="90" text-anchor="middle" '
            f'font-size="{font_size}">{escape(value)}</text>'
        )
    return (
        f'<svg width="{SVG_WIDTH}" height="{SVG_HEIGHT}" xmlns="http://www.w3.org/2000/svg">'
        f'<rect width="{SVG_WIDTH}" height="{SVG_HEIGHT}" fill="white"/>'
        f'<g transform="translate(10,10)">{barcode_pattern(value)}</g>'
        f'{text}</svg>'
    )


def generate_barcode_data_url(value, **kwargs):
    svg = generate_barcode_svg(value, **kwargs)
    encoded = base64.b64encode(svg.encode('utf-8')).decode('ascii')
    return f'data:image/svg+xml;base64,{encoded}'


class EscPosCommands:
    """Builds ESC/POS byte strings for thermal label printers"""
    ESC = b'\x1b'
    GS = b'\x1d'

    BARCODE_TYPES = {
        'CODE128': 73,
        'EAN13': 67,
        'CODE39': 69,
        'UPC': 65,
    }
    ALIGNMENTS = {'left': 0, 'center': 1, 'right': 2}

    # Printer code page text encoding; the rupee sign needs UTF-8
    ENCODING = 'utf-8'

    @classmethod
    def initialize(cls):
        return cls.ESC + b'@'

    @classmethod
    def text_size(cls, width=1, height=1):
        size = ((width - 1) << 4) | (height - 1)
        return cls.GS + b'!' + bytes([size])

    @classmethod
    def align(cls, alignment='center'):
        return cls.ESC + b'a' + bytes([cls.ALIGNMENTS.get(alignment, 1)])

    @classmethod
    def bold(cls, enabled):
        return cls.ESC + b'E' + bytes([1 if enabled else 0])

    @classmethod
    def underline(cls, enabled):
        return cls.ESC + b'-' + bytes([1 if enabled else 0])

    @classmethod
    def text(cls, value):
        return str(value).encode(cls.ENCODING)

    @classmethod
    def feed(cls, lines=1):
        return cls.ESC + b'd' + bytes([lines])

    @classmethod
    def cut(cls, partial=False):
        return cls.GS + b'V' + bytes([1 if partial else 0])

    @classmethod
    def barcode(cls, data, barcode_type=DEFAULT_FORMAT):
        payload = str(data).encode('ascii', errors='replace')[:255]
        type_code = cls.BARCODE_TYPES.get((barcode_type or DEFAULT_FORMAT).upper(), cls.BARCODE_TYPES['CODE128'])
        return cls.GS + b'k' + bytes([type_code, len(payload)]) + payload

    @classmethod
    def label(cls, product_name, price=None, mrp=None, description='', weight=None,
              barcode=None, barcode_type=DEFAULT_FORMAT, custom_text='', alignment='center',
              include_price=True, include_mrp=False, include_description=False,
              include_weight=False, include_barcode=True):
        """Full command sequence for one label"""
        commands = cls.initialize()
        commands += cls.align(alignment)

        commands += cls.bold(True) + cls.text_size(2, 2)
        commands += cls.text(product_name) + cls.feed(1)
        commands += cls.bold(False) + cls.text_size(1, 1)

        if include_price and price is not None:
            commands += cls.text(f'Price: ₹{price}') + cls.feed(1)
        if include_mrp and mrp:
            commands += cls.text(f'MRP: ₹{mrp}') + cls.feed(1)
        if include_description and description:
            commands += cls.text(description) + cls.feed(1)
        if include_weight and weight:
            commands += cls.text(f'Weight: {weight}g') + cls.feed(1)
        if include_barcode and barcode:
            commands += cls.barcode(barcode, barcode_type) + cls.feed(2)
        if custom_text:
            commands += cls.text(custom_text) + cls.feed(1)

        commands += cls.feed(3)
        commands += cls.cut()
        return commands
