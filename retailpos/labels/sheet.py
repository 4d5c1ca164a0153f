"""
Label sheet layout.

build_label_sheet() turns products plus a sheet configuration into the
label entries a CSS grid sheet prints: each product repeated `copies`
times, names and descriptions shortened, prices in rupees, and a preview
barcode for the product's code.
"""
from decimal import Decimal, InvalidOperation

from retailpos.catalog.barcodes import generate_barcode_svg
from retailpos.catalog.utils import product_barcode_value
from retailpos.core.formatting import format_inr

NAME_LIMIT = 25
DESCRIPTION_LIMIT = 30
MAX_COPIES = 100

SHEET_DEFAULTS = {
    'sheet_width': Decimal('160'),
    'sheet_height': Decimal('50'),
    'label_width': Decimal('80'),
    'label_height': Decimal('50'),
    'rows': 1,
    'columns': 2,
    'barcode_width': 50,
    'barcode_height': 30,
    'font_size': 11,
    'include_barcode': True,
    'include_price': True,
    'include_description': False,
    'include_mrp': False,
    'copies': 1,
    'custom_text': '',
}

DECIMAL_FIELDS = ('sheet_width', 'sheet_height', 'label_width', 'label_height')
INT_FIELDS = ('rows', 'columns', 'barcode_width', 'barcode_height', 'font_size', 'copies')
BOOL_FIELDS = ('include_barcode', 'include_price', 'include_description', 'include_mrp')


def truncate(text, limit):
    text = (text or '').strip()
    if len(text) > limit:
        return text[:limit] + '...'
    return text


def _as_bool(value):
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ('1', 'true', 'yes', 'on')


def sheet_config(data=None, template=None):
    """
    Merge request values over the template's settings over the defaults.
    Raises ValueError for non-numeric or non-positive sizes.
    """
    config = dict(SHEET_DEFAULTS)
    if template is not None:
        config.update({
            'label_width': template.width,
            'label_height': template.height,
            'font_size': template.font_size,
            'include_barcode': template.include_barcode,
            'include_price': template.include_price,
            'include_description': template.include_description,
            'include_mrp': template.include_mrp,
        })

    for key, value in (data or {}).items():
        if key not in config or value is None or value == '':
            continue
        try:
            if key in DECIMAL_FIELDS:
                value = Decimal(str(value))
            elif key in INT_FIELDS:
                value = int(value)
            elif key in BOOL_FIELDS:
                value = _as_bool(value)
            else:
                value = str(value)
        except (InvalidOperation, TypeError, ValueError):
            raise ValueError(f"Invalid value for {key}: {value!r}")
        config[key] = value

    for key in DECIMAL_FIELDS + INT_FIELDS:
        if config[key] <= 0:
            raise ValueError(f"{key} must be greater than zero")
    config['copies'] = min(config['copies'], MAX_COPIES)
    return config


def build_label(product, config):
    barcode_value = product_barcode_value(product)
    label = {
        'product_id': product.id,
        'name': truncate(product.name or 'Unnamed Product', NAME_LIMIT),
        'sku': product.sku or 'N/A',
        'description': truncate(product.description, DESCRIPTION_LIMIT) if config['include_description'] else '',
        'price': format_inr(product.price) if config['include_price'] else None,
        'mrp': format_inr(product.mrp) if config['include_mrp'] and product.mrp else None,
        'barcode_value': barcode_value,
        'barcode_svg': None,
        'custom_text': config['custom_text'],
    }
    if config['include_barcode']:
        label['barcode_svg'] = generate_barcode_svg(barcode_value, font_size=max(config['font_size'] - 4, 6))
    return label


def build_label_sheet(products, config):
    """
    Lay out labels for printing. products is any iterable of Product;
    config is the output of sheet_config().
    """
    labels = []
    for product in products:
        label = build_label(product, config)
        labels.extend(dict(label) for _ in range(config['copies']))
    return {
        'config': config,
        'labels': labels,
        'total_labels': len(labels),
        'grid_columns': f"repeat({config['columns']}, 1fr)",
        'grid_rows': f"repeat({config['rows']}, 1fr)",
    }
