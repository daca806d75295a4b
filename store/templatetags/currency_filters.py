from django import template

from ..store_utils import format_usd

register = template.Library()


@register.filter
def usd(value):
    return format_usd(value)
