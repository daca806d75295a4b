import logging

from django.db import DatabaseError
from django.http import Http404, JsonResponse
from django.shortcuts import render
from django.urls import reverse
from django.views.decorators.http import require_GET, require_POST

from . import catalog
from .cart import Cart
from .checkout import ShippingInfo, place_order
from .forms import CheckoutForm, errors_by_field
from .payments import check_payment_status, confirm_payment
from .store_utils import get_cart_count, public_url, request_data

logger = logging.getLogger(__name__)


# -------------------------------
# Catalog pages
# -------------------------------
def home(request):
    featured, deals = catalog.showcase()
    return render(request, 'store/home.html', {
        'featured': featured,
        'deals': deals,
        'cart_count': get_cart_count(request),
    })


def products_view(request):
    return render(request, 'store/products.html', {
        'products': catalog.all_products(),
        'cart_count': get_cart_count(request),
    })


def audience_products(request, audience):
    if audience not in catalog.AUDIENCES:
        raise Http404("Unknown catalog section")
    products, brands = catalog.products_for(audience)
    return render(request, 'store/products.html', {
        'products': products,
        'brands': brands,
        'section': catalog.AUDIENCES[audience],
        'cart_count': get_cart_count(request),
    })


def search(request):
    query = request.GET.get('q', '')
    products, brands = catalog.search(query)
    return render(request, 'store/products.html', {
        'products': products,
        'brands': brands,
        'search_query': query,
        'cart_count': get_cart_count(request),
    })


def product_detail(request, pk):
    product = catalog.get_product(pk)
    if product is None:
        raise Http404("Product not found")
    return render(request, 'store/product_details.html', {
        'product': product,
        'cart_count': get_cart_count(request),
    })


@require_GET
def product_variants(request, product_id):
    try:
        options = catalog.variant_options(product_id)
    except DatabaseError:
        logger.exception("Error getting product variants for ProductId=%s", product_id)
        return JsonResponse({'success': False, 'sizes': [], 'colors': [], 'variants': []})
    return JsonResponse({'success': True, **options})


# -------------------------------
# CART SYSTEM
# -------------------------------
def _int_field(data, name, default=None):
    value = data.get(name, default)
    if value in (None, ''):
        return default
    return int(value)


def cart_view(request):
    cart = Cart(request.session)
    require_login = not request.user.is_authenticated
    return render(request, 'store/cart.html', {
        'require_login': require_login,
        'cart_items': [] if require_login else cart.items,
        'total_price': cart.total_price,
        'cart_count': cart.total_quantity,
    })


@require_POST
def add_to_cart(request):
    data = request_data(request)
    try:
        product_id = _int_field(data, 'product_id')
        quantity = _int_field(data, 'quantity', 1)
    except (TypeError, ValueError):
        return JsonResponse({'success': False, 'message': 'Invalid product or quantity'}, status=400)
    if product_id is None or quantity < 1:
        return JsonResponse({'success': False, 'message': 'Invalid product or quantity'}, status=400)

    product = catalog.get_product(product_id)
    if product is None:
        return JsonResponse({'success': False, 'message': 'Product not found'}, status=404)

    cart = Cart(request.session)
    cart.add(
        product.id,
        product.name,
        product.effective_price,
        image_url=product.image_url,
        quantity=quantity,
        size=data.get('size', ''),
        color=data.get('color', ''),
    )
    return JsonResponse({'success': True, 'count': len(cart)})


@require_POST
def remove_from_cart(request):
    data = request_data(request)
    try:
        product_id = _int_field(data, 'product_id')
    except (TypeError, ValueError):
        product_id = None
    if product_id is None:
        return JsonResponse({'success': False, 'message': 'Invalid product'}, status=400)

    cart = Cart(request.session)
    cart.remove(product_id, data.get('size', ''), data.get('color', ''))
    return JsonResponse({'success': True, 'count': len(cart)})


@require_POST
def update_cart_item(request):
    data = request_data(request)
    try:
        product_id = _int_field(data, 'product_id')
        quantity = _int_field(data, 'quantity', 1)
    except (TypeError, ValueError):
        return JsonResponse({'success': False, 'message': 'Invalid product or quantity'}, status=400)
    if product_id is None:
        return JsonResponse({'success': False, 'message': 'Invalid product'}, status=400)

    cart = Cart(request.session)
    cart.set_quantity(product_id, data.get('size', ''), data.get('color', ''), quantity)
    return JsonResponse({'success': True, 'count': len(cart)})


@require_POST
def clear_cart(request):
    Cart(request.session).clear()
    return JsonResponse({'success': True, 'count': 0})


@require_GET
def cart_count(request):
    return JsonResponse({'count': get_cart_count(request)})


# -------------------------------
# CHECKOUT
# -------------------------------
@require_POST
def checkout(request):
    if not request.user.is_authenticated:
        return JsonResponse({'success': False, 'need_login': True}, status=401)

    form = CheckoutForm(request_data(request))
    if not form.is_valid():
        return JsonResponse({
            'success': False,
            'message': 'Validation failed',
            'errors': errors_by_field(form),
        }, status=400)

    shipping = ShippingInfo(
        full_name=form.cleaned_data['full_name'].strip(),
        address=form.cleaned_data['address'].strip(),
        email=form.cleaned_data['email'].strip(),
        phone=form.cleaned_data['phone'].strip(),
    )

    def confirm_url(token):
        return public_url(request, reverse('confirm_payment_page', args=[token]))

    result = place_order(
        request.user,
        Cart(request.session),
        shipping,
        form.cleaned_data['payment_method'],
        confirm_url_builder=confirm_url,
    )
    return JsonResponse(result.as_json(), status=result.status_code)


# -------------------------------
# PAYMENT CONFIRMATION
# -------------------------------
@require_GET
def confirm_payment_page(request, token):
    return render(request, 'store/confirm_payment.html', {
        'order_token': token,
    })


@require_POST
def confirm_payment_view(request):
    token = (request_data(request).get('order_token') or '').strip()
    if not token:
        return JsonResponse({'success': False, 'message': 'Missing order token'}, status=400)
    if not confirm_payment(token):
        return JsonResponse({'success': False, 'message': 'Order not found'}, status=404)
    return JsonResponse({'success': True})


@require_GET
def payment_status(request):
    token = request.GET.get('order_token', '').strip()
    return JsonResponse({'paid': check_payment_status(token)})
