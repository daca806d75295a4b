from decimal import Decimal

import pytest
from django.core.cache import cache
from django.urls import reverse

from store.models import Brand, Category, Product, ProductVariant


class FakeSession(dict):
    modified = False


@pytest.fixture(autouse=True)
def shop_settings(settings):
    settings.PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]
    settings.SHOP_SEND_ORDER_EMAILS = False
    settings.SHOP_PUBLIC_URL = ""
    settings.SHOP_VARIANT_FALLBACK = "any"
    settings.SHOP_UNRESOLVED_LINE_POLICY = "skip"
    settings.SHOP_PAYMENT_STATUS_STORE = "store.payments.CachedPaymentStatusStore"
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def customer(django_user_model):
    return django_user_model.objects.create_user(
        email="jane@example.com",
        password="Secret123",
        full_name="Jane Doe",
    )


@pytest.fixture
def customer_client(client, customer):
    client.force_login(customer)
    return client


@pytest.fixture
def men(db):
    return Category.objects.create(name="Men")


@pytest.fixture
def unisex(db):
    return Category.objects.create(name="Unisex")


@pytest.fixture
def nike(db):
    return Brand.objects.create(name="Nike")


@pytest.fixture
def product(men, nike):
    return Product.objects.create(
        name="Air Max 270",
        description="Premium running shoes",
        price=Decimal("50.00"),
        category=men,
        brand=nike,
        is_featured=True,
    )


@pytest.fixture
def variant(product):
    return ProductVariant.objects.create(product=product, size="M", color="Red", stock_quantity=5)


@pytest.fixture
def add_to_cart(client):
    def add(product, quantity=1, size="", color=""):
        return client.post(reverse("add_to_cart"), {
            "product_id": product.id,
            "quantity": quantity,
            "size": size,
            "color": color,
        })
    return add


@pytest.fixture
def shipping_form():
    return {
        "full_name": "Jane Doe",
        "address": "12 Shoe Lane, Hanoi",
        "email": "jane@example.com",
        "phone": "0900000000",
        "payment_method": "cash",
    }
