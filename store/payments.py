"""
Payment status for placed orders, looked up by the order's opaque token.

The ``Order.status`` column is the source of truth. The store used by the
views is picked with ``SHOP_PAYMENT_STATUS_STORE``; the default keeps a
write-through copy of the paid flag in the Django cache so status polls from
the checkout page do not hit the database every time. Only "paid" is cached;
an unpaid order is always read from the database.
"""
import logging

from django.conf import settings
from django.core.cache import cache
from django.utils.module_loading import import_string

from .models import Order

logger = logging.getLogger(__name__)


class PaymentStatusStore:
    def get(self, token):
        """Return True when the order behind ``token`` is paid."""
        raise NotImplementedError

    def set(self, token, paid):
        raise NotImplementedError

    def confirm(self, token):
        """Mark the order paid. Returns False when no order has this token."""
        raise NotImplementedError

    def remember(self, token, paid):
        """Record a status that is already persisted on the order."""


class DatabasePaymentStatusStore(PaymentStatusStore):
    def get(self, token):
        if not token:
            return False
        return Order.objects.filter(payment_token=token, status=Order.STATUS_PAID).exists()

    def set(self, token, paid):
        status = Order.STATUS_PAID if paid else Order.STATUS_UNPAID
        Order.objects.filter(payment_token=token).update(status=status)

    def confirm(self, token):
        if not token:
            return False
        updated = Order.objects.filter(payment_token=token).update(status=Order.STATUS_PAID)
        return updated > 0


class CachedPaymentStatusStore(DatabasePaymentStatusStore):
    key_prefix = 'payment-status:'

    def _key(self, token):
        return f"{self.key_prefix}{token}"

    @property
    def timeout(self):
        return getattr(settings, 'SHOP_PAYMENT_STATUS_TIMEOUT', 86400)

    def get(self, token):
        if not token:
            return False
        cached = cache.get(self._key(token))
        if cached is not None:
            return cached
        paid = super().get(token)
        if paid:
            cache.set(self._key(token), True, self.timeout)
        return paid

    def remember(self, token, paid):
        if paid:
            cache.set(self._key(token), True, self.timeout)
        else:
            cache.delete(self._key(token))

    def set(self, token, paid):
        super().set(token, paid)
        self.remember(token, paid)

    def confirm(self, token):
        found = super().confirm(token)
        if found:
            self.remember(token, True)
        return found


def get_payment_store():
    path = getattr(settings, 'SHOP_PAYMENT_STATUS_STORE', 'store.payments.CachedPaymentStatusStore')
    return import_string(path)()


def confirm_payment(token):
    found = get_payment_store().confirm(token)
    if found:
        logger.info("Payment confirmed for order token %s", token)
    else:
        logger.warning("Payment confirmation for unknown order token %s", token)
    return found


def check_payment_status(token):
    return get_payment_store().get(token)
