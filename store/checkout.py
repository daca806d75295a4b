"""
Order placement.

``place_order`` turns the session cart into an Order with one OrderDetail per
cart line, decrementing variant stock in the same database transaction. A
line that asks for more than the variant holds aborts the whole order; no
partial order or stock change is ever persisted.
"""
import logging
import threading
from dataclasses import dataclass, field
from urllib.parse import quote

from anymail.message import AnymailMessage
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.db import transaction
from django.db.models import F
from django.template.loader import render_to_string
from django.utils.html import format_html
from django.utils.safestring import mark_safe

from .models import Order, OrderDetail, ProductVariant
from .payments import get_payment_store

logger = logging.getLogger(__name__)

PAID_METHODS = ('bank', 'qr', 'transfer', 'card')
VARIANT_FALLBACKS = ('any', 'strict')
UNRESOLVED_LINE_POLICIES = ('skip', 'fail')

CASH_ON_DELIVERY_HTML = mark_safe(
    '<div style="font-weight:600">Cash on delivery</div>'
    '<div>Please pay the delivery person when your order arrives.</div>'
)


# -------------------------------
# Errors
# -------------------------------
class CheckoutError(Exception):
    status_code = 400


class CartEmpty(CheckoutError):
    def __init__(self):
        super().__init__("Cart is empty")


class InsufficientStock(CheckoutError):
    status_code = 409

    def __init__(self, product_name, available, requested):
        self.product_name = product_name
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient stock for {product_name}. Available: {available}, Requested: {requested}"
        )


class VariantNotFound(CheckoutError):
    status_code = 409

    def __init__(self, item):
        self.item = item
        super().__init__(f"{item.product_name} is not available in the selected size and color")


# -------------------------------
# Results
# -------------------------------
@dataclass
class ShippingInfo:
    full_name: str = ''
    address: str = ''
    email: str = ''
    phone: str = ''


@dataclass
class CheckoutResult:
    success: bool
    order: Order = None
    order_token: str = ''
    payment_instructions: str = ''
    message: str = ''
    status_code: int = 200
    errors: dict = field(default_factory=dict)

    def as_json(self):
        if self.success:
            return {
                'success': True,
                'order_token': self.order_token,
                'payment_instructions': self.payment_instructions,
            }
        data = {'success': False, 'message': self.message}
        if self.errors:
            data['errors'] = self.errors
        return data


# -------------------------------
# Payment method
# -------------------------------
def normalize_payment_method(value):
    method = (value or '').strip().lower()
    if method == 'cod':
        return 'cash'
    if method == 'transfer':
        return 'bank'
    return method


def initial_status_for(method):
    if method == 'cash':
        return Order.STATUS_UNPAID
    if method in PAID_METHODS:
        return Order.STATUS_PAID
    return Order.STATUS_NEW


def build_payment_instructions(submitted_method, method, token, confirm_url_builder=None):
    if (submitted_method or '').strip().lower() == 'transfer' and confirm_url_builder is not None:
        confirm_url = confirm_url_builder(token)
        qr_src = getattr(settings, 'SHOP_QR_CODE_API', '') + quote(confirm_url, safe='')
        return format_html(
            '<div style="font-weight:600;margin-bottom:8px">Bank transfer (QR)</div>'
            '<div style="margin-bottom:8px">Scan this QR with your phone to confirm payment</div>'
            '<div style="margin-bottom:8px"><img alt="QR" src="{}" style="width:160px;height:160px;object-fit:contain;border:1px solid #eaeaea;"/></div>'
            '<div style="font-size:0.9rem;color:#666">Or open this link on your phone: <a href="{}" target="_blank">{}</a></div>',
            qr_src, confirm_url, confirm_url,
        )
    if method == 'cash':
        return CASH_ON_DELIVERY_HTML
    return ''


# -------------------------------
# Inventory
# -------------------------------
def _setting_choice(name, default, allowed):
    value = getattr(settings, name, default)
    if value not in allowed:
        raise ImproperlyConfigured(f"{name} must be one of {', '.join(allowed)}, not {value!r}")
    return value


def variant_fallback():
    return _setting_choice('SHOP_VARIANT_FALLBACK', 'any', VARIANT_FALLBACKS)


def unresolved_line_policy():
    return _setting_choice('SHOP_UNRESOLVED_LINE_POLICY', 'skip', UNRESOLVED_LINE_POLICIES)


def resolve_variant(item, fallback=None):
    """
    Find the variant a cart line refers to.

    Exact (product, size, color) match first. With ``SHOP_VARIANT_FALLBACK``
    set to ``"any"`` a line whose size/color has no variant takes the
    product's first variant instead; ``"strict"`` never falls back.
    """
    if fallback is None:
        fallback = variant_fallback()
    variants = ProductVariant.objects.filter(product_id=item.product_id)
    variant = variants.filter(size__iexact=item.size, color__iexact=item.color).order_by('id').first()
    if variant is None and fallback == 'any':
        variant = variants.order_by('id').first()
    return variant


def reserve_stock(variant, item):
    """Decrement stock in one conditional UPDATE so concurrent checkouts cannot oversell."""
    updated = ProductVariant.objects.filter(
        pk=variant.pk, stock_quantity__gte=item.quantity,
    ).update(stock_quantity=F('stock_quantity') - item.quantity)
    if not updated:
        available = ProductVariant.objects.filter(pk=variant.pk).values_list(
            'stock_quantity', flat=True).first() or 0
        logger.warning(
            "Insufficient stock for ProductVariantId=%s, Requested=%s, Available=%s",
            variant.pk, item.quantity, available,
        )
        raise InsufficientStock(item.product_name, available, item.quantity)


# -------------------------------
# Order placement
# -------------------------------
def _create_order(user, cart, shipping, method, status, fallback, skip_unresolved):
    order = Order.objects.create(
        user=user,
        total_amount=cart.total_price,
        payment_method=method,
        status=status,
        full_name=shipping.full_name,
        phone=shipping.phone,
        shipping_address=shipping.address,
        notification_email=shipping.email,
    )
    logger.info(
        "Order created: OrderId=%s, UserId=%s, Total=%s",
        order.id, user.pk, order.total_amount,
    )

    for item in cart:
        variant = resolve_variant(item, fallback)
        if variant is None:
            logger.warning(
                "Could not find ProductVariant for ProductId=%s, Size=%s, Color=%s",
                item.product_id, item.size, item.color,
            )
            if skip_unresolved:
                continue
            raise VariantNotFound(item)

        reserve_stock(variant, item)
        OrderDetail.objects.create(
            order=order,
            variant=variant,
            quantity=item.quantity,
            unit_price=item.price,
        )
    return order


def place_order(user, cart, shipping, payment_method, confirm_url_builder=None):
    if not cart:
        return CheckoutResult(success=False, message=str(CartEmpty()), status_code=CartEmpty.status_code)

    fallback = variant_fallback()
    skip_unresolved = unresolved_line_policy() == 'skip'
    method = normalize_payment_method(payment_method)
    status = initial_status_for(method)
    line_count = len(cart)

    try:
        with transaction.atomic():
            order = _create_order(user, cart, shipping, method, status, fallback, skip_unresolved)
    except CheckoutError as e:
        logger.warning("Checkout rolled back for UserId=%s: %s", user.pk, e)
        return CheckoutResult(success=False, message=str(e), status_code=e.status_code)
    except Exception:
        logger.exception(
            "Checkout transaction rolled back. UserId=%s, CartItems=%s, Total=%s",
            user.pk, line_count, cart.total_price,
        )
        return CheckoutResult(success=False, message="Failed to create order.", status_code=500)

    logger.info("Transaction committed successfully: OrderId=%s", order.id)

    detail_count = order.details.count()
    if detail_count != line_count:
        logger.error(
            "OrderDetails verification failed: OrderId=%s, Expected=%s, Found=%s",
            order.id, line_count, detail_count,
        )
        return CheckoutResult(
            success=False,
            order=order,
            order_token=order.payment_token,
            message="Order details were not saved properly",
            status_code=500,
        )

    get_payment_store().remember(order.payment_token, order.is_paid)
    cart.clear()
    transaction.on_commit(lambda: queue_order_confirmation(order.id))

    return CheckoutResult(
        success=True,
        order=order,
        order_token=order.payment_token,
        payment_instructions=build_payment_instructions(
            payment_method, method, order.payment_token, confirm_url_builder,
        ),
    )


# -------------------------------
# Confirmation e-mail
# -------------------------------
def send_order_confirmation(order_id):
    try:
        order = Order.objects.prefetch_related('details__variant__product').get(pk=order_id)
        if not order.notification_email:
            return

        ctx = {
            "order": order,
            "name": order.full_name or "Customer",
            "site_url": getattr(settings, 'SHOP_PUBLIC_URL', ''),
        }
        plain = render_to_string("store/emails/order_confirmation.txt", ctx)
        html = render_to_string("store/emails/order_confirmation.html", ctx)

        msg = AnymailMessage(
            subject=f"Order confirmation - SoleStore #{order.id}",
            body=plain,
            from_email=settings.DEFAULT_FROM_EMAIL,
            to=[order.notification_email],
        )
        msg.attach_alternative(html, "text/html")
        msg.send()
        logger.info("Order confirmation sent for order %s", order_id)
    except Exception:
        logger.exception("Order confirmation send failed for order %s", order_id)


def queue_order_confirmation(order_id):
    if not getattr(settings, 'SHOP_SEND_ORDER_EMAILS', True):
        return
    try:
        threading.Thread(target=send_order_confirmation, args=(order_id,), daemon=True).start()
    except Exception:
        logger.exception("Failed to start order confirmation thread for order %s", order_id)
