"""Field validators for Indian tax and contact data"""
import re

from django.core.exceptions import ValidationError

GSTIN_PATTERN = re.compile(r'^\d{2}[A-Z]{5}\d{4}[A-Z][1-9A-Z]Z[0-9A-Z]$')
HSN_PATTERN = re.compile(r'^(\d{4}|\d{6}|\d{8})$')
PHONE_ALLOWED = re.compile(r'^\+?[\d\s\-]+$')


def validate_gstin(value):
    """15-character GST registration number, e.g. 27AAPFU0939F1ZV"""
    if not GSTIN_PATTERN.match((value or '').strip().upper()):
        raise ValidationError('Enter a valid 15-character GSTIN.', code='invalid_gstin')


def validate_hsn_code(value):
    """HSN/SAC codes are 4, 6 or 8 digits"""
    if not HSN_PATTERN.match((value or '').strip()):
        raise ValidationError('HSN code must be 4, 6 or 8 digits.', code='invalid_hsn')


def validate_phone(value):
    value = (value or '').strip()
    if not PHONE_ALLOWED.match(value):
        raise ValidationError('Phone number may only contain digits, spaces, "+" and "-".', code='invalid_phone')
    digits = re.sub(r'\D', '', value)
    if not 10 <= len(digits) <= 15:
        raise ValidationError('Phone number must have 10 to 15 digits.', code='invalid_phone')


def validate_rate(value):
    """Tax percentages must be between 0 and 100"""
    if value is None:
        return
    if value < 0 or value > 100:
        raise ValidationError('Rate must be between 0 and 100.', code='invalid_rate')
