import pytest
from django.test import Client
from django.urls import reverse

pytestmark = pytest.mark.django_db


@pytest.fixture
def csrf_client():
    return Client(enforce_csrf_checks=True)


def test_cart_endpoints_skip_csrf(csrf_client, product):
    response = csrf_client.post(reverse("add_to_cart"), {"product_id": product.id, "quantity": 1})

    assert response.status_code == 200
    assert response.json()["count"] == 1


def test_payment_confirmation_skips_csrf(csrf_client):
    response = csrf_client.post(
        reverse("confirm_payment"),
        {"order_token": "unknown"},
        content_type="application/json",
    )
    assert response.status_code == 404


def test_other_forms_keep_csrf(csrf_client, customer):
    response = csrf_client.post(reverse("login"), {"email": customer.email, "password": "Secret123"})
    assert response.status_code == 403


def test_exempt_paths_follow_settings(csrf_client, settings, product):
    settings.SHOP_CSRF_EXEMPT_PATHS = ["/payment/confirm/"]

    response = csrf_client.post(reverse("add_to_cart"), {"product_id": product.id})
    assert response.status_code == 403
