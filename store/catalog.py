"""
Catalog reads for the storefront.

Reads go to the database. When it cannot be reached (or holds no products)
the pages are served from a read-only snapshot built once at startup, see
``StoreConfig.ready``.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal

from django.db import DatabaseError
from django.db.models import Q

from .models import Brand, Product, ProductVariant

logger = logging.getLogger(__name__)

UNISEX = 'Unisex'
AUDIENCES = {
    'men': 'Men',
    'women': 'Women',
    'kid': 'Kid',
}
SHOWCASE_SIZE = 8


@dataclass(frozen=True)
class CatalogEntry:
    id: int
    name: str
    description: str
    price: Decimal
    discount_price: Decimal = None
    image_url: str = ''
    category: str = ''
    brand: str = ''
    is_featured: bool = False
    is_special_deal: bool = False

    @property
    def effective_price(self):
        if self.discount_price is not None and self.discount_price < self.price:
            return self.discount_price
        return self.price

    def discount_percent(self):
        if self.discount_price is not None and self.discount_price < self.price:
            return int(((self.price - self.discount_price) / self.price) * 100)
        return 0


FALLBACK_PRODUCTS = (
    {"id": 1, "name": "Air Max 270", "description": "Premium running shoes with Air Max technology", "price": "150", "category": "Men", "brand": "Nike", "is_featured": True},
    {"id": 2, "name": "Air Force 1", "description": "Classic lifestyle shoes", "price": "90", "discount_price": "70", "category": "Unisex", "brand": "Nike", "is_featured": True, "is_special_deal": True},
    {"id": 3, "name": "Zoom Pegasus", "description": "High-performance running shoes", "price": "120", "category": "Men", "brand": "Nike", "is_featured": True},
    {"id": 4, "name": "Revolution 6", "description": "Everyday running for women", "price": "60", "category": "Women", "brand": "Nike", "is_featured": True},
    {"id": 5, "name": "Court Vision", "description": "Basketball lifestyle shoes", "price": "65", "discount_price": "45", "category": "Men", "brand": "Nike", "is_special_deal": True},
    {"id": 6, "name": "React Element", "description": "Futuristic design sneakers", "price": "130", "category": "Unisex", "brand": "Nike", "is_featured": True},
    {"id": 7, "name": "Free RN", "description": "Natural motion running shoes", "price": "80", "discount_price": "60", "category": "Women", "brand": "Nike", "is_special_deal": True},
    {"id": 8, "name": "Dunk Low", "description": "Skateboarding classic", "price": "100", "category": "Unisex", "brand": "Nike", "is_featured": True},
    {"id": 9, "name": "Kids Air Max", "description": "Comfortable running for kids", "price": "70", "category": "Kid", "brand": "Nike"},
    {"id": 10, "name": "Kids Basketball", "description": "Basketball shoes for young athletes", "price": "50", "discount_price": "35", "category": "Kid", "brand": "Nike", "is_special_deal": True},
)


def _entry(data):
    values = dict(data)
    values['price'] = Decimal(values['price'])
    if values.get('discount_price') is not None:
        values['discount_price'] = Decimal(values['discount_price'])
    return CatalogEntry(**values)


class FallbackCatalog:
    """Immutable in-memory catalog used while the database is unavailable."""

    def __init__(self, entries):
        self._entries = tuple(entries)

    def __len__(self):
        return len(self._entries)

    def all(self):
        return list(self._entries)

    def get(self, pk):
        for entry in self._entries:
            if entry.id == pk:
                return entry
        return None

    def for_audience(self, audience):
        return [e for e in self._entries if e.category in (audience, UNISEX)]

    def search(self, query):
        q = query.strip().lower()
        return [
            e for e in self._entries
            if q in e.name.lower() or q in (e.description or '').lower() or q in (e.brand or '').lower()
        ]

    def brands(self):
        return sorted({e.brand or 'Others' for e in self._entries})


_fallback = None


def build_fallback_catalog():
    global _fallback
    _fallback = FallbackCatalog(_entry(p) for p in FALLBACK_PRODUCTS)
    return _fallback


def get_fallback_catalog():
    if _fallback is None:
        return build_fallback_catalog()
    return _fallback


def _live_products():
    return Product.objects.select_related('brand', 'category')


def _brand_names():
    return list(Brand.objects.values_list('name', flat=True))


def all_products():
    try:
        products = list(_live_products())
        if products:
            return products
    except DatabaseError:
        logger.warning("Catalog database unavailable, serving fallback products", exc_info=True)
    return get_fallback_catalog().all()


def showcase():
    products = all_products()
    featured = [p for p in products if p.is_featured] or products[:SHOWCASE_SIZE]
    deals = [
        p for p in products if p.is_special_deal or p.discount_price is not None
    ] or products[:SHOWCASE_SIZE]
    return featured, deals


def products_for(audience):
    """Products for one audience (men/women/kid) including unisex ones, plus brand names."""
    category = AUDIENCES[audience]
    try:
        products = list(_live_products().filter(category__name__in=[category, UNISEX]))
        if products or Product.objects.exists():
            return products, _brand_names()
    except DatabaseError:
        logger.warning("Catalog database unavailable, serving fallback %s products", audience, exc_info=True)
    fallback = get_fallback_catalog()
    return fallback.for_audience(category), fallback.brands()


def search(query):
    query = (query or '').strip()
    if not query:
        return [], []
    try:
        if Product.objects.exists():
            products = list(_live_products().filter(
                Q(name__icontains=query)
                | Q(description__icontains=query)
                | Q(brand__name__icontains=query)
            ))
            return products, _brand_names()
    except DatabaseError:
        logger.warning("Catalog database unavailable, searching fallback products", exc_info=True)
    fallback = get_fallback_catalog()
    return fallback.search(query), fallback.brands()


def get_product(pk):
    try:
        return _live_products().filter(pk=pk).first()
    except DatabaseError:
        logger.warning("Catalog database unavailable, looking up fallback product %s", pk, exc_info=True)
        return get_fallback_catalog().get(pk)


def variant_options(product_id):
    variants = list(
        ProductVariant.objects
        .filter(product_id=product_id, stock_quantity__gt=0)
        .order_by('size', 'color')
        .values('id', 'size', 'color', 'stock_quantity')
    )
    sizes = sorted({v['size'] for v in variants if v['size'].strip()})
    colors = sorted({v['color'] for v in variants if v['color'].strip()})
    return {'sizes': sizes, 'colors': colors, 'variants': variants}
