import json

import pytest
from django.urls import reverse

pytestmark = pytest.mark.django_db


def test_add_to_cart_snapshots_product_price(client, product, add_to_cart):
    product.discount_price = "40.00"
    product.save()

    response = add_to_cart(product, quantity=2, size="M", color="Red")

    assert response.status_code == 200
    assert response.json() == {"success": True, "count": 1}
    line = client.session["ShoppingCart"][0]
    assert line["price"] == "40.00"
    assert line["product_name"] == "Air Max 270"
    assert line["quantity"] == 2


def test_add_to_cart_counts_lines(product, add_to_cart):
    add_to_cart(product, size="M", color="Red")
    add_to_cart(product, size="m", color="red")
    response = add_to_cart(product, size="L", color="Red")

    assert response.json()["count"] == 2


def test_add_to_cart_unknown_product(client, db):
    response = client.post(reverse("add_to_cart"), {"product_id": 999})
    assert response.status_code == 404
    assert response.json()["success"] is False


@pytest.mark.parametrize("quantity", ["abc", "0", "-2"])
def test_add_to_cart_rejects_bad_quantity(client, product, quantity):
    response = client.post(reverse("add_to_cart"), {"product_id": product.id, "quantity": quantity})
    assert response.status_code == 400


def test_add_to_cart_accepts_json(client, product):
    response = client.post(
        reverse("add_to_cart"),
        data=json.dumps({"product_id": product.id, "quantity": 3}),
        content_type="application/json",
    )
    assert response.json() == {"success": True, "count": 1}
    assert client.session["ShoppingCart"][0]["quantity"] == 3


def test_update_remove_and_clear(client, product, add_to_cart):
    add_to_cart(product, size="M", color="Red")
    add_to_cart(product, size="L", color="Red")

    response = client.post(reverse("update_cart_item"), {
        "product_id": product.id, "size": "M", "color": "Red", "quantity": 4,
    })
    assert response.json() == {"success": True, "count": 2}

    response = client.post(reverse("remove_from_cart"), {
        "product_id": product.id, "size": "L", "color": "Red",
    })
    assert response.json() == {"success": True, "count": 1}

    assert client.get(reverse("cart_count")).json() == {"count": 4}

    response = client.post(reverse("clear_cart"))
    assert response.json()["success"] is True
    assert client.get(reverse("cart_count")).json() == {"count": 0}


def test_update_to_zero_removes_line(client, product, add_to_cart):
    add_to_cart(product, size="M", color="Red")
    response = client.post(reverse("update_cart_item"), {
        "product_id": product.id, "size": "M", "color": "Red", "quantity": 0,
    })
    assert response.json()["count"] == 0


def test_cart_mutations_require_post(client, db):
    assert client.get(reverse("add_to_cart")).status_code == 405


def test_cart_page_asks_anonymous_users_to_sign_in(client, product, add_to_cart):
    add_to_cart(product)
    response = client.get(reverse("cart"))

    assert response.status_code == 200
    assert response.context["require_login"] is True
    assert response.context["cart_items"] == []


def test_cart_page_lists_lines_for_signed_in_user(customer_client, product, add_to_cart):
    add_to_cart(product, quantity=2)
    response = customer_client.get(reverse("cart"))

    assert response.context["require_login"] is False
    assert len(response.context["cart_items"]) == 1
    assert "Air Max 270" in response.content.decode()


def test_cart_endpoints_accept_numeric_json_sizes(client, product):
    def post(name, **payload):
        return client.post(reverse(name), data=json.dumps(payload), content_type="application/json")

    response = post("add_to_cart", product_id=product.id, quantity=1, size=42, color="Red")
    assert response.json() == {"success": True, "count": 1}
    assert client.session["ShoppingCart"][0]["size"] == "42"

    assert post("update_cart_item", product_id=product.id, quantity=4, size=42, color="Red").status_code == 200
    assert client.session["ShoppingCart"][0]["quantity"] == 4

    assert post("remove_from_cart", product_id=product.id, size=42, color="Red").json()["count"] == 0
