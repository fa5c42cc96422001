from django import template

from orders.services.pricing import format_amount

register = template.Library()


@register.filter
def amount(value):
    """1000 -> "1,000"; 1250.5 -> "1,250.50"."""
    return format_amount(value)


@register.filter
def join_features(value):
    return ", ".join(value or ())
