"""
JSON back-office endpoints for the admin dashboard: products, inventory
(product variants) and customers. Every endpoint requires an admin account.
"""
import logging
from functools import wraps

from django.contrib.auth import get_user_model
from django.db.models import ProtectedError
from django.http import JsonResponse
from django.views.decorators.http import require_GET, require_POST

from .forms import CustomerForm, InventoryCreateForm, InventoryUpdateForm, ProductForm, errors_by_field
from .models import Brand, Category, Product, ProductVariant
from .store_utils import request_data

logger = logging.getLogger(__name__)

User = get_user_model()


def admin_required(view):
    @wraps(view)
    def wrapper(request, *args, **kwargs):
        if not (request.user.is_authenticated and request.user.is_admin):
            return JsonResponse({'success': False, 'message': 'Unauthorized'}, status=401)
        return view(request, *args, **kwargs)
    return wrapper


def _not_found(what):
    return JsonResponse({'success': False, 'message': f'{what} not found'}, status=404)


def _invalid(form):
    return JsonResponse({'success': False, 'errors': errors_by_field(form)}, status=400)


# -------------------------------
# Products
# -------------------------------
def _product_json(p):
    return {
        'id': p.id,
        'name': p.name,
        'description': p.description,
        'price': str(p.price),
        'discount_price': str(p.discount_price) if p.discount_price is not None else None,
        'category_id': p.category_id,
        'category': p.category.name if p.category else '',
        'brand_id': p.brand_id,
        'brand_name': p.brand.name if p.brand else '',
        'image_url': p.image_url,
        'is_featured': p.is_featured,
        'is_special_deal': p.is_special_deal,
    }


@require_GET
@admin_required
def products(request):
    rows = Product.objects.select_related('category', 'brand')
    return JsonResponse([_product_json(p) for p in rows], safe=False)


@require_POST
@admin_required
def product_create(request):
    form = ProductForm(request_data(request))
    if not form.is_valid():
        return _invalid(form)
    product = form.save()
    logger.info("Product %s created by admin %s", product.id, request.user.pk)
    return JsonResponse({'success': True, 'id': product.id})


@require_POST
@admin_required
def product_update(request, pk):
    product = Product.objects.filter(pk=pk).first()
    if product is None:
        return _not_found('Product')
    form = ProductForm(request_data(request), instance=product)
    if not form.is_valid():
        return _invalid(form)
    form.save()
    return JsonResponse({'success': True})


@require_POST
@admin_required
def product_delete(request, pk):
    product = Product.objects.filter(pk=pk).first()
    if product is None:
        return _not_found('Product')
    try:
        product.delete()
    except ProtectedError:
        return JsonResponse(
            {'success': False, 'message': 'Product has variants referenced by orders'}, status=409,
        )
    return JsonResponse({'success': True})


@require_GET
@admin_required
def brands(request):
    return JsonResponse(list(Brand.objects.order_by('name').values('id', 'name')), safe=False)


@require_GET
@admin_required
def categories(request):
    return JsonResponse(list(Category.objects.order_by('name').values('id', 'name')), safe=False)


# -------------------------------
# Inventory
# -------------------------------
@require_GET
@admin_required
def inventory(request):
    rows = (
        ProductVariant.objects
        .select_related('product')
        .order_by('product__name', 'size', 'color')
    )
    return JsonResponse([{
        'id': v.id,
        'product_id': v.product_id,
        'product_name': v.product.name,
        'size': v.size,
        'color': v.color,
        'stock_quantity': v.stock_quantity,
    } for v in rows], safe=False)


@require_POST
@admin_required
def inventory_create(request):
    form = InventoryCreateForm(request_data(request))
    if not form.is_valid():
        return _invalid(form)
    data = form.cleaned_data
    if not Product.objects.filter(pk=data['product_id']).exists():
        return _not_found('Product')
    variant = ProductVariant.objects.create(
        product_id=data['product_id'],
        size=data['size'],
        color=data['color'],
        stock_quantity=max(0, data['stock_quantity']),
    )
    return JsonResponse({'success': True, 'id': variant.id})


@require_POST
@admin_required
def inventory_update(request, pk):
    variant = ProductVariant.objects.filter(pk=pk).first()
    if variant is None:
        return _not_found('Variant')
    form = InventoryUpdateForm(request_data(request), instance=variant)
    if not form.is_valid():
        return _invalid(form)
    data = form.cleaned_data
    variant.stock_quantity = max(0, data['stock_quantity'])
    variant.size = data['size']
    variant.color = data['color']
    variant.save()
    return JsonResponse({'success': True})


@require_POST
@admin_required
def inventory_delete(request, pk):
    variant = ProductVariant.objects.filter(pk=pk).first()
    if variant is None:
        return _not_found('Variant')
    try:
        variant.delete()
    except ProtectedError:
        return JsonResponse(
            {'success': False, 'message': 'Variant is referenced by existing orders'}, status=409,
        )
    return JsonResponse({'success': True})


# -------------------------------
# Customers
# -------------------------------
def _customers():
    return User.objects.exclude(role=User.ROLE_ADMIN)


@require_GET
@admin_required
def customers(request):
    return JsonResponse([{
        'id': u.id,
        'full_name': u.full_name,
        'email': u.email,
        'phone_number': u.phone_number,
        'date_of_birth': u.date_of_birth.isoformat() if u.date_of_birth else None,
    } for u in _customers().order_by('id')], safe=False)


@require_POST
@admin_required
def customer_create(request):
    form = CustomerForm(request_data(request))
    if not form.is_valid():
        return _invalid(form)
    user = form.save()
    return JsonResponse({'success': True, 'id': user.id})


@require_POST
@admin_required
def customer_update(request, pk):
    user = _customers().filter(pk=pk).first()
    if user is None:
        return _not_found('Customer')
    form = CustomerForm(request_data(request), instance=user)
    if not form.is_valid():
        return _invalid(form)
    form.save()
    return JsonResponse({'success': True})


@require_POST
@admin_required
def customer_delete(request, pk):
    user = _customers().filter(pk=pk).first()
    if user is None:
        return _not_found('Customer')
    user.delete()
    return JsonResponse({'success': True})
