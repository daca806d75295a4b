# store/cart.py
"""
Session-backed shopping cart.

The cart is a list of line items stored as JSON in the session. Lines are
keyed by (product_id, size, color); size and color compare case-insensitively
and an empty string means the product has no such axis.
"""
import logging
from dataclasses import asdict, dataclass
from decimal import Decimal, InvalidOperation

from .models import calculate_total

logger = logging.getLogger(__name__)

CART_SESSION_KEY = 'ShoppingCart'


def _axis(value):
    if value is None:
        return ''
    return str(value).strip()


def _same_axis(a, b):
    return _axis(a).casefold() == _axis(b).casefold()


@dataclass
class CartItem:
    product_id: int
    product_name: str
    price: Decimal
    quantity: int
    image_url: str = ''
    size: str = ''
    color: str = ''

    @property
    def line_total(self):
        return calculate_total(self.quantity, self.price)

    def matches(self, product_id, size='', color=''):
        return (
            self.product_id == int(product_id)
            and _same_axis(self.size, size)
            and _same_axis(self.color, color)
        )

    def to_session(self):
        data = asdict(self)
        data['price'] = str(self.price)
        return data

    @classmethod
    def from_session(cls, data):
        return cls(
            product_id=int(data['product_id']),
            product_name=data.get('product_name', ''),
            price=Decimal(str(data.get('price', '0'))),
            quantity=int(data.get('quantity', 1)),
            image_url=data.get('image_url') or '',
            size=_axis(data.get('size')),
            color=_axis(data.get('color')),
        )


class Cart:
    """
    Wraps ``request.session``. Every mutation writes the whole list back.
    """

    def __init__(self, session):
        self.session = session
        self._items = self._load()

    def _load(self):
        raw = self.session.get(CART_SESSION_KEY) or []
        try:
            return [CartItem.from_session(entry) for entry in raw]
        except (KeyError, TypeError, ValueError, InvalidOperation):
            logger.warning("Discarding unreadable cart payload in session")
            return []

    def _save(self):
        self.session[CART_SESSION_KEY] = [item.to_session() for item in self._items]
        self.session.modified = True

    def __iter__(self):
        return iter(self._items)

    def __len__(self):
        return len(self._items)

    def __bool__(self):
        return bool(self._items)

    @property
    def items(self):
        return list(self._items)

    @property
    def total_quantity(self):
        return sum(item.quantity for item in self._items)

    @property
    def total_price(self):
        total = Decimal('0.00')
        for item in self._items:
            total += item.line_total
        return total.quantize(Decimal('0.01'))

    def find(self, product_id, size='', color=''):
        for item in self._items:
            if item.matches(product_id, size, color):
                return item
        return None

    def add(self, product_id, product_name, price, image_url='', quantity=1, size='', color=''):
        existing = self.find(product_id, size, color)
        if existing is not None:
            existing.quantity += int(quantity)
        else:
            self._items.append(CartItem(
                product_id=int(product_id),
                product_name=product_name,
                price=Decimal(str(price)),
                quantity=int(quantity),
                image_url=image_url or '',
                size=_axis(size),
                color=_axis(color),
            ))
        self._save()

    def remove(self, product_id, size='', color=''):
        self._items = [item for item in self._items if not item.matches(product_id, size, color)]
        self._save()

    def set_quantity(self, product_id, size='', color='', quantity=1):
        item = self.find(product_id, size, color)
        if item is not None:
            if int(quantity) > 0:
                item.quantity = int(quantity)
            else:
                self._items.remove(item)
        self._save()

    def clear(self):
        self._items = []
        self._save()
