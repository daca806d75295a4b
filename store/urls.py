from django.urls import path
from . import accounts, admin_api, views

urlpatterns = [
    path('', views.home, name='home'),  # homepage
    path('products/', views.products_view, name='products'),  # products page
    path('products/<int:pk>/', views.product_detail, name='product_detail'),
    path('products/<int:product_id>/variants/', views.product_variants, name='product_variants'),
    path('search/', views.search, name='search'),
    path('<str:audience>/shoes/', views.audience_products, name='audience_products'),  # men / women / kid

    path('cart/', views.cart_view, name='cart'),
    path('cart/add/', views.add_to_cart, name='add_to_cart'),
    path('cart/remove/', views.remove_from_cart, name='remove_from_cart'),
    path('cart/update/', views.update_cart_item, name='update_cart_item'),
    path('cart/clear/', views.clear_cart, name='clear_cart'),
    path('cart/count/', views.cart_count, name='cart_count'),
    path('cart/checkout/', views.checkout, name='checkout'),

    path('payment/confirm/', views.confirm_payment_view, name='confirm_payment'),
    path('payment/confirm/<str:token>/', views.confirm_payment_page, name='confirm_payment_page'),
    path('payment/status/', views.payment_status, name='payment_status'),

    path('account/', accounts.account, name='account'),
    path('account/login/', accounts.login_view, name='login'),
    path('account/register/', accounts.register_view, name='register'),
    path('account/logout/', accounts.logout_view, name='logout'),
    path('account/profile/', accounts.update_profile, name='update_profile'),
    path('account/delete/', accounts.delete_account, name='delete_account'),

    # Back-office JSON API
    path('admin-api/products/', admin_api.products, name='admin_api_products'),
    path('admin-api/products/create/', admin_api.product_create, name='admin_api_product_create'),
    path('admin-api/products/<int:pk>/update/', admin_api.product_update, name='admin_api_product_update'),
    path('admin-api/products/<int:pk>/delete/', admin_api.product_delete, name='admin_api_product_delete'),
    path('admin-api/brands/', admin_api.brands, name='admin_api_brands'),
    path('admin-api/categories/', admin_api.categories, name='admin_api_categories'),
    path('admin-api/inventory/', admin_api.inventory, name='admin_api_inventory'),
    path('admin-api/inventory/create/', admin_api.inventory_create, name='admin_api_inventory_create'),
    path('admin-api/inventory/<int:pk>/update/', admin_api.inventory_update, name='admin_api_inventory_update'),
    path('admin-api/inventory/<int:pk>/delete/', admin_api.inventory_delete, name='admin_api_inventory_delete'),
    path('admin-api/customers/', admin_api.customers, name='admin_api_customers'),
    path('admin-api/customers/create/', admin_api.customer_create, name='admin_api_customer_create'),
    path('admin-api/customers/<int:pk>/update/', admin_api.customer_update, name='admin_api_customer_update'),
    path('admin-api/customers/<int:pk>/delete/', admin_api.customer_delete, name='admin_api_customer_delete'),
]
