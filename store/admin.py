from django.contrib import admin
from django.utils.html import format_html

from .models import Brand, Category, Order, OrderDetail, Product, ProductVariant, User
from .payments import get_payment_store

admin.site.register(Brand)
admin.site.register(Category)


class ProductVariantInline(admin.TabularInline):
    model = ProductVariant
    extra = 1
    fields = ('size', 'color', 'stock_quantity')


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ('name', 'brand', 'category', 'price', 'discount_price', 'total_stock', 'preview_image')
    list_filter = ('category', 'brand', 'is_featured', 'is_special_deal')
    search_fields = ('name', 'description', 'brand__name')
    inlines = [ProductVariantInline]

    def preview_image(self, obj):
        if obj.image_url:
            return format_html('<img src="{}" width="80" style="border-radius:8px;" />', obj.image_url)
        return "No Image"
    preview_image.short_description = "Image"

    def total_stock(self, obj):
        return sum(v.stock_quantity for v in obj.variants.all())
    total_stock.short_description = "Stock"

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('brand', 'category').prefetch_related('variants')


class OrderDetailInline(admin.TabularInline):
    model = OrderDetail
    extra = 0
    fields = ('variant', 'quantity', 'unit_price')
    readonly_fields = ('variant', 'quantity', 'unit_price')
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ('id', 'full_name', 'notification_email', 'total_amount', 'payment_method', 'status', 'created_at')
    list_filter = ('status', 'payment_method', 'created_at')
    search_fields = ('full_name', 'notification_email', 'id', 'payment_token')
    # status is changed through the mark_as_* actions
    readonly_fields = ('payment_token', 'total_amount', 'created_at', 'status')
    inlines = [OrderDetailInline]

    actions = ['mark_as_paid', 'mark_as_unpaid']

    def _set_paid(self, queryset, paid):
        store = get_payment_store()
        for token in queryset.values_list('payment_token', flat=True):
            store.set(token, paid)

    def mark_as_paid(self, request, queryset):
        self._set_paid(queryset, True)
    mark_as_paid.short_description = "Mark as Paid"

    def mark_as_unpaid(self, request, queryset):
        self._set_paid(queryset, False)
    mark_as_unpaid.short_description = "Mark as Unpaid"


@admin.register(User)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ('email', 'full_name', 'role', 'phone_number', 'is_active', 'date_joined')
    list_filter = ('role', 'is_active')
    search_fields = ('email', 'full_name', 'phone_number')
    fields = (
        'email', 'full_name', 'role', 'phone_number', 'address', 'gender',
        'date_of_birth', 'avatar_url', 'shopping_preference', 'is_active',
    )
