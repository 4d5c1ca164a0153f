"""
Indian currency formatting helpers.

format_inr() follows the en-IN convention: the last three digits are grouped
together and the rest in pairs, e.g. 12345678.9 -> ₹1,23,45,678.90.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

RUPEE = '₹'
TWO_PLACES = Decimal('0.01')

ONES = [
    '', 'One', 'Two', 'Three', 'Four', 'Five', 'Six', 'Seven', 'Eight', 'Nine',
    'Ten', 'Eleven', 'Twelve', 'Thirteen', 'Fourteen', 'Fifteen', 'Sixteen',
    'Seventeen', 'Eighteen', 'Nineteen',
]
TENS = ['', '', 'Twenty', 'Thirty', 'Forty', 'Fifty', 'Sixty', 'Seventy', 'Eighty', 'Ninety']


def to_decimal(value):
    """Coerce numbers and numeric strings to a 2-place Decimal"""
    if value is None or value == '':
        return Decimal('0.00')
    if not isinstance(value, Decimal):
        try:
            value = Decimal(str(value))
        except InvalidOperation:
            raise ValueError(f"Not a number: {value!r}")
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def group_indian(digits):
    """Insert en-IN thousands separators into a string of digits"""
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return ','.join(pairs + [tail])


def format_inr(value, symbol=True):
    """Format an amount as Indian rupees with two decimals"""
    amount = to_decimal(value)
    sign = '-' if amount < 0 else ''
    whole, fraction = f"{abs(amount):.2f}".split('.')
    prefix = RUPEE if symbol else ''
    return f"{sign}{prefix}{group_indian(whole)}.{fraction}"


def parse_inr(text):
    """Inverse of format_inr(): '₹1,23,456.78' -> Decimal('123456.78')"""
    if text is None:
        raise ValueError("Cannot parse an empty amount")
    cleaned = str(text).strip().replace(RUPEE, '').replace(',', '').replace(' ', '')
    if cleaned.upper().startswith('RS.'):
        cleaned = cleaned[3:]
    if not cleaned:
        raise ValueError("Cannot parse an empty amount")
    return to_decimal(cleaned)


def _below_hundred(n):
    if n < 20:
        return ONES[n]
    return TENS[n // 10] + (f" {ONES[n % 10]}" if n % 10 else '')


def number_to_words(number):
    """Spell out a whole number using the Indian system (Thousand, Lakh, Crore)"""
    n = int(number)
    if n == 0:
        return 'Zero'
    if n < 0:
        return f"Minus {number_to_words(-n)}"

    crore, n = divmod(n, 10 ** 7)
    lakh, n = divmod(n, 10 ** 5)
    thousand, n = divmod(n, 1000)
    hundred, n = divmod(n, 100)

    parts = []
    if crore:
        parts.append(f"{number_to_words(crore)} Crore")
    if lakh:
        parts.append(f"{_below_hundred(lakh)} Lakh")
    if thousand:
        parts.append(f"{_below_hundred(thousand)} Thousand")
    if hundred:
        parts.append(f"{ONES[hundred]} Hundred")
    if n:
        parts.append(_below_hundred(n))
    return ' '.join(parts)


def amount_in_words(value):
    """
    Rupee amount in words, e.g. 1250.50 ->
    'One Thousand Two Hundred Fifty Rupees and Fifty Paise'
    """
    amount = to_decimal(value)
    if amount < 0:
        return f"Minus {amount_in_words(-amount)}"
    rupees = int(amount)
    paise = int((amount - rupees) * 100)
    words = f"{number_to_words(rupees)} Rupees"
    if paise:
        words += f" and {number_to_words(paise)} Paise"
    return words
