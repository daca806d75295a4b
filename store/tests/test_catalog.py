import dataclasses
from decimal import Decimal
from unittest import mock

import pytest
from django.db import DatabaseError
from django.urls import reverse

from store import catalog
from store.models import Brand, Product, ProductVariant

pytestmark = pytest.mark.django_db


def names(products):
    return sorted(p.name for p in products)


@pytest.fixture
def running_shoe(unisex, nike):
    return Product.objects.create(
        name="Pegasus Trail",
        description="Trail running",
        price=Decimal("120.00"),
        discount_price=Decimal("90.00"),
        category=unisex,
        brand=nike,
        is_special_deal=True,
    )


@pytest.fixture
def adidas_women(db):
    from store.models import Category
    return Product.objects.create(
        name="Ultraboost",
        description="Cushioned runner",
        price=Decimal("180.00"),
        category=Category.objects.create(name="Women"),
        brand=Brand.objects.create(name="Adidas"),
    )


def test_home_splits_featured_and_deals(client, product, running_shoe):
    response = client.get(reverse("home"))

    assert response.status_code == 200
    assert names(response.context["featured"]) == ["Air Max 270"]
    assert names(response.context["deals"]) == ["Pegasus Trail"]
    assert "$90.00" in response.content.decode()


def test_home_uses_fallback_catalog_when_database_is_empty(client):
    response = client.get(reverse("home"))

    featured = response.context["featured"]
    assert featured
    assert all(isinstance(p, catalog.CatalogEntry) for p in featured)
    assert "Air Max 270" in names(featured)


def test_products_page_falls_back_when_database_fails(client, product):
    with mock.patch("store.catalog._live_products", side_effect=DatabaseError("down")):
        response = client.get(reverse("products"))

    assert response.status_code == 200
    assert len(response.context["products"]) == len(catalog.FALLBACK_PRODUCTS)


def test_audience_page_includes_unisex(client, product, running_shoe, adidas_women):
    response = client.get(reverse("audience_products", args=["men"]))

    assert names(response.context["products"]) == ["Air Max 270", "Pegasus Trail"]
    assert response.context["section"] == "Men"
    assert sorted(response.context["brands"]) == ["Adidas", "Nike"]


def test_audience_page_with_products_elsewhere_is_empty(client, adidas_women):
    response = client.get(reverse("audience_products", args=["kid"]))
    assert list(response.context["products"]) == []


def test_audience_page_falls_back_for_empty_catalog(client):
    response = client.get(reverse("audience_products", args=["kid"]))

    products = response.context["products"]
    assert {p.category for p in products} <= {"Kid", "Unisex"}
    assert "Kids Air Max" in names(products)


def test_unknown_audience_is_not_found(client):
    assert client.get(reverse("audience_products", args=["pets"])).status_code == 404


def test_search_matches_brand_name(client, product, adidas_women):
    response = client.get(reverse("search"), {"q": "adi"})

    assert names(response.context["products"]) == ["Ultraboost"]
    assert response.context["search_query"] == "adi"


def test_search_matches_description(client, product, running_shoe):
    response = client.get(reverse("search"), {"q": "TRAIL"})
    assert names(response.context["products"]) == ["Pegasus Trail"]


def test_blank_search_returns_nothing(client, product):
    response = client.get(reverse("search"), {"q": "  "})
    assert response.context["products"] == []


def test_search_uses_fallback_when_database_is_empty(client):
    response = client.get(reverse("search"), {"q": "dunk"})
    assert names(response.context["products"]) == ["Dunk Low"]


def test_product_detail(client, product):
    response = client.get(reverse("product_detail", args=[product.id]))

    assert response.status_code == 200
    assert response.context["product"] == product


def test_missing_product_is_not_found(client, product):
    assert client.get(reverse("product_detail", args=[product.id + 100])).status_code == 404


def test_product_detail_from_fallback_when_database_fails(client):
    with mock.patch("store.catalog._live_products", side_effect=DatabaseError("down")):
        response = client.get(reverse("product_detail", args=[2]))

    assert response.status_code == 200
    assert response.context["product"].name == "Air Force 1"


def test_variants_only_list_stocked_options(client, product):
    ProductVariant.objects.create(product=product, size="42", color="Black", stock_quantity=3)
    ProductVariant.objects.create(product=product, size="41", color="White", stock_quantity=1)
    ProductVariant.objects.create(product=product, size="40", color="Red", stock_quantity=0)

    body = client.get(reverse("product_variants", args=[product.id])).json()

    assert body["success"] is True
    assert body["sizes"] == ["41", "42"]
    assert body["colors"] == ["Black", "White"]
    assert [v["stock_quantity"] for v in body["variants"]] == [1, 3]


def test_variants_report_database_failure(client, product):
    with mock.patch("store.catalog.variant_options", side_effect=DatabaseError("down")):
        body = client.get(reverse("product_variants", args=[product.id])).json()

    assert body == {"success": False, "sizes": [], "colors": [], "variants": []}


def test_fallback_catalog_is_read_only():
    snapshot = catalog.get_fallback_catalog()
    entry = snapshot.get(1)

    with pytest.raises(dataclasses.FrozenInstanceError):
        entry.price = Decimal("1")
    snapshot.all().clear()
    assert len(snapshot) == len(catalog.FALLBACK_PRODUCTS)


def test_fallback_entry_pricing():
    entry = catalog.get_fallback_catalog().get(2)

    assert entry.effective_price == Decimal("70")
    assert entry.discount_percent() == 22
    assert catalog.get_fallback_catalog().get(1).discount_percent() == 0


def test_product_discount_helpers(running_shoe, product):
    assert running_shoe.effective_price == Decimal("90.00")
    assert running_shoe.discount_percent() == 25
    assert product.effective_price == Decimal("50.00")
