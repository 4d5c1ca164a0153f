"""
Local product label generator
Uses Pillow and python-barcode to render a Code128 price label as PNG
"""
import io
import base64
import logging
from typing import Optional

from PIL import Image, ImageDraw, ImageFont
import barcode
from barcode.writer import ImageWriter

from retailpos.core.formatting import format_inr

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 30

FONT_CANDIDATES = [
    ('/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf', '/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf'),
    ('arialbd.ttf', 'arial.ttf'),
]


def _load_fonts():
    """Return (large, medium, small) fonts, falling back to Pillow's default"""
    for bold_path, regular_path in FONT_CANDIDATES:
        try:
            return (
                ImageFont.truetype(bold_path, 18),
                ImageFont.truetype(regular_path, 14),
                ImageFont.truetype(regular_path, 12),
            )
        except (OSError, IOError):
            continue
    default = ImageFont.load_default()
    return default, default, default


def _draw_centered(draw, text, y, font, width):
    bbox = draw.textbbox((0, 0), text, font=font)
    text_width = bbox[2] - bbox[0]
    draw.text(((width - text_width) // 2, y), text, fill='black', font=font)


def price_line(price=None, mrp=None):
    parts = []
    if price is not None:
        parts.append(format_inr(price))
    if mrp:
        parts.append(f"MRP {format_inr(mrp)}")
    return '  '.join(parts)


def generate_label_image(
    product_name: str,
    barcode_value: str,
    price=None,
    mrp=None,
    width: int = 400,  # 4 inches at 100 DPI
    height: int = 200,  # 2 inches at 100 DPI
) -> str:
    """
    Render a price label with a scannable Code128 barcode.

    Layout, top to bottom: product name, barcode, barcode value, price/MRP line.

    Returns:
        Base64-encoded PNG image as data URL string
    """
    if len(product_name) > MAX_NAME_LENGTH:
        product_name = product_name[:MAX_NAME_LENGTH] + '...'

    img = Image.new('RGB', (width, height), color='white')
    draw = ImageDraw.Draw(img)
    font_large, font_medium, font_small = _load_fonts()

    margin = 10
    name_y = 8
    barcode_y = name_y + 24
    bottom_text = price_line(price, mrp)
    # Room for the value text and the price line under the barcode
    barcode_available_height = height - barcode_y - 40

    _draw_centered(draw, product_name, name_y, font_large, width)

    try:
        code128 = barcode.get_barcode_class('code128')
        barcode_instance = code128(barcode_value, writer=ImageWriter())
        barcode_img = barcode_instance.render({
            'write_text': False,
            'module_width': 0.3,
            'module_height': 20.0,
            'quiet_zone': 2.0,
            'background': 'white',
            'foreground': 'black',
        })

        barcode_img_width, barcode_img_height = barcode_img.size
        barcode_width = width - (2 * margin)
        scale_factor = barcode_width / barcode_img_width
        scaled_height = int(barcode_img_height * scale_factor)
        if scaled_height > barcode_available_height:
            scale_factor = barcode_available_height / barcode_img_height
            scaled_height = barcode_available_height
            barcode_width = int(barcode_img_width * scale_factor)

        barcode_img = barcode_img.resize((barcode_width, scaled_height), Image.Resampling.BILINEAR)
        img.paste(barcode_img, ((width - barcode_width) // 2, barcode_y))

        text_y = barcode_y + scaled_height + 4
        _draw_centered(draw, barcode_value, text_y, font_small, width)
    except Exception as e:
        logger.error(f"Barcode generation failed for '{barcode_value}': {str(e)}", exc_info=True)
        text_y = barcode_y
        _draw_centered(draw, f'BARCODE: {barcode_value}', text_y, font_small, width)

    if bottom_text:
        _draw_centered(draw, bottom_text, text_y + 16, font_medium, width)

    buffer = io.BytesIO()
    img.save(buffer, format='PNG', optimize=False, compress_level=1)
    image_base64 = base64.b64encode(buffer.getvalue()).decode('utf-8')
    buffer.close()
    img.close()

    return f'data:image/png;base64,{image_base64}'
