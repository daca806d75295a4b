from io import StringIO

import pytest
from django.contrib.auth import get_user_model
from django.core.management import call_command

from store.catalog import FALLBACK_PRODUCTS
from store.models import Brand, Category, Product, ProductVariant

pytestmark = pytest.mark.django_db


def seed(*args):
    out = StringIO()
    call_command("seed_catalog", *args, stdout=out)
    return out.getvalue()


def test_seed_catalog_creates_products_and_admin():
    output = seed("--stock", "4", "--admin-email", "admin@example.com", "--admin-password", "Admin123")

    assert f"Seeded {len(FALLBACK_PRODUCTS)} products." in output
    assert Product.objects.count() == len(FALLBACK_PRODUCTS)
    assert set(Category.objects.values_list("name", flat=True)) == {"Men", "Women", "Kid", "Unisex"}
    assert Brand.objects.filter(name="Nike").exists()

    kids = ProductVariant.objects.filter(product__name="Kids Air Max")
    assert sorted({v.size for v in kids}) == ["30", "31", "32", "33"]
    assert {v.stock_quantity for v in ProductVariant.objects.all()} == {4}

    admin = get_user_model().objects.get(email="admin@example.com")
    assert admin.is_admin
    assert admin.check_password("Admin123")


def test_seed_catalog_is_idempotent():
    seed()
    variants = ProductVariant.objects.count()

    assert "Seeded 0 products." in seed()
    assert Product.objects.count() == len(FALLBACK_PRODUCTS)
    assert ProductVariant.objects.count() == variants
