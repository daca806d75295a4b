# store/store_utils.py
import json
from decimal import Decimal, InvalidOperation

from django.conf import settings

from .cart import Cart


def get_cart_count(request):
    """
    Returns the total item count in the session cart.
    """
    return Cart(request.session).total_quantity


def format_usd(value):
    try:
        amount = Decimal(str(value)).quantize(Decimal('0.01'))
    except (InvalidOperation, TypeError, ValueError):
        return "$0.00"
    return f"${amount:,}"


def public_url(request, path):
    """
    Absolute URL for links that leave the browser (QR codes, e-mails).
    SHOP_PUBLIC_URL wins over the request host, which is often localhost in dev.
    """
    base = getattr(settings, 'SHOP_PUBLIC_URL', '')
    if base:
        return base.rstrip('/') + path
    return request.build_absolute_uri(path)


def request_data(request):
    """Form-encoded or JSON request body as a dict."""
    if request.content_type == 'application/json':
        try:
            data = json.loads(request.body or b'{}')
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}
    return request.POST
