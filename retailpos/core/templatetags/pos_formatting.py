from django import template

from retailpos.core.formatting import format_inr, amount_in_words

register = template.Library()


@register.filter
def inr(value):
    """{{ sale.total|inr }} -> ₹1,180.00"""
    try:
        return format_inr(value)
    except ValueError:
        return value


@register.filter
def amount_words(value):
    try:
        return amount_in_words(value)
    except ValueError:
        return ''
