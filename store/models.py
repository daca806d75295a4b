import uuid
from decimal import Decimal

from django.contrib.auth.base_user import AbstractBaseUser, BaseUserManager
from django.db import models
from django.db.models import Q
from django.utils import timezone


def calculate_total(quantity, item_price):
    total = Decimal(quantity) * Decimal(item_price)
    return total.quantize(Decimal('0.01'))


# ------------------------------
# USER MODEL
# ------------------------------
class UserManager(BaseUserManager):
    use_in_migrations = True

    def _create_user(self, email, password, **extra_fields):
        if not email:
            raise ValueError("An email address is required")
        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save(using=self._db)
        return user

    def create_user(self, email, password=None, **extra_fields):
        extra_fields.setdefault('role', User.ROLE_CUSTOMER)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields['role'] = User.ROLE_ADMIN
        return self._create_user(email, password, **extra_fields)


class User(AbstractBaseUser):
    ROLE_ADMIN = 1
    ROLE_CUSTOMER = 2
    ROLE_CHOICES = [
        (ROLE_ADMIN, 'Admin'),
        (ROLE_CUSTOMER, 'Customer'),
    ]

    email = models.EmailField(unique=True)
    full_name = models.CharField(max_length=150, blank=True)
    role = models.PositiveSmallIntegerField(choices=ROLE_CHOICES, default=ROLE_CUSTOMER)

    phone_number = models.CharField(max_length=20, blank=True, null=True)
    address = models.TextField(blank=True, null=True)
    gender = models.CharField(max_length=20, blank=True, null=True)
    date_of_birth = models.DateField(blank=True, null=True)
    avatar_url = models.CharField(max_length=500, blank=True, null=True)
    shopping_preference = models.CharField(max_length=50, blank=True, null=True)

    is_active = models.BooleanField(default=True)
    date_joined = models.DateTimeField(default=timezone.now)

    objects = UserManager()

    EMAIL_FIELD = 'email'
    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = []

    def __str__(self):
        return self.email

    @property
    def is_admin(self):
        return self.role == self.ROLE_ADMIN

    # Django admin reads these; admins get full access, customers none.
    @property
    def is_staff(self):
        return self.is_admin

    @property
    def is_superuser(self):
        return self.is_admin

    def has_perm(self, perm, obj=None):
        return self.is_active and self.is_admin

    def has_module_perms(self, app_label):
        return self.is_active and self.is_admin

    def get_full_name(self):
        return self.full_name or self.email

    def get_short_name(self):
        return (self.full_name or self.email).split(' ')[0]


# ------------------------------
# CATALOG MODELS
# ------------------------------
class Brand(models.Model):
    name = models.CharField(max_length=100, unique=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name


class Category(models.Model):
    name = models.CharField(max_length=100, unique=True)

    class Meta:
        ordering = ['name']
        verbose_name_plural = 'categories'

    def __str__(self):
        return self.name


class Product(models.Model):
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    price = models.DecimalField(max_digits=10, decimal_places=2)
    discount_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    image_url = models.CharField(max_length=500, blank=True)

    category = models.ForeignKey(
        Category,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="products"
    )
    brand = models.ForeignKey(
        Brand,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="products"
    )

    is_featured = models.BooleanField(default=False)
    is_special_deal = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['id']

    def __str__(self):
        return self.name

    @property
    def effective_price(self):
        if self.discount_price is not None and self.discount_price < self.price:
            return self.discount_price
        return self.price

    def discount_percent(self):
        if self.discount_price is not None and self.price and self.discount_price < self.price:
            return int(((self.price - self.discount_price) / self.price) * 100)
        return 0


class ProductVariant(models.Model):
    """One size/color combination of a product; inventory is tracked here."""

    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='variants')
    size = models.CharField(max_length=20, blank=True)
    color = models.CharField(max_length=50, blank=True)
    stock_quantity = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ['product_id', 'size', 'color']
        constraints = [
            models.UniqueConstraint(
                fields=['product', 'size', 'color'],
                name='unique_variant_per_product',
            ),
            models.CheckConstraint(
                condition=Q(stock_quantity__gte=0),
                name='variant_stock_non_negative',
            ),
        ]

    def __str__(self):
        axes = " / ".join(v for v in (self.size, self.color) if v)
        return f"{self.product.name} ({axes})" if axes else self.product.name


# ------------------------------
# ORDER MODELS
# ------------------------------
def new_payment_token():
    return str(uuid.uuid4())


class Order(models.Model):
    STATUS_NEW = 'New'
    STATUS_UNPAID = 'Unpaid'
    STATUS_PAID = 'Paid'
    STATUS_CHOICES = [
        (STATUS_NEW, 'New'),
        (STATUS_UNPAID, 'Unpaid, pay on delivery'),
        (STATUS_PAID, 'Paid'),
    ]

    user = models.ForeignKey(
        'store.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='orders'
    )
    created_at = models.DateTimeField(default=timezone.now)

    total_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00')
    )
    payment_method = models.CharField(max_length=20, blank=True)
    payment_token = models.CharField(max_length=64, unique=True, default=new_payment_token, editable=False)

    status = models.CharField(
        max_length=10,
        choices=STATUS_CHOICES,
        default=STATUS_NEW
    )

    full_name = models.CharField(max_length=150, blank=True)
    phone = models.CharField(max_length=20, blank=True)
    shipping_address = models.TextField(blank=True)
    notification_email = models.EmailField(blank=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        display_name = self.full_name or (self.user.email if self.user else "Guest")
        return f"Order #{self.id or 'unsaved'} - {display_name}"

    @property
    def is_paid(self):
        return self.status == self.STATUS_PAID

    def get_total_price(self):
        total = Decimal('0.00')
        for detail in self.details.all():
            total += detail.subtotal
        return total.quantize(Decimal('0.01'))


class OrderDetail(models.Model):
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name='details')
    variant = models.ForeignKey(ProductVariant, on_delete=models.PROTECT, related_name='order_details')
    quantity = models.PositiveIntegerField(default=1)
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)

    def __str__(self):
        return f"{self.variant} × {self.quantity}"

    @property
    def subtotal(self):
        return calculate_total(self.quantity, self.unit_price)
