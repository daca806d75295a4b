import re
from datetime import date

from django import forms
from django.contrib.auth import get_user_model

from .models import Product, ProductVariant

User = get_user_model()

NAME_RE = re.compile(r"^[a-zA-Z\s'-]+$")
PASSWORD_RE = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d).*$")
MINIMUM_AGE = 13


def age_on(born, today):
    return today.year - born.year - ((today.month, today.day) < (born.month, born.day))


def errors_by_field(form):
    """Field-keyed error lists, ready for a JSON response."""
    return {name: [str(e) for e in errors] for name, errors in form.errors.items()}


# -------------------------------
# Checkout
# -------------------------------
class CheckoutForm(forms.Form):
    full_name = forms.CharField(max_length=150)
    address = forms.CharField(max_length=500)
    email = forms.EmailField()
    phone = forms.CharField(max_length=20)
    payment_method = forms.CharField(max_length=20)


# -------------------------------
# Accounts
# -------------------------------
class LoginForm(forms.Form):
    email = forms.EmailField()
    password = forms.CharField(widget=forms.PasswordInput, required=False)


class RegistrationForm(forms.Form):
    email = forms.EmailField()
    first_name = forms.CharField(required=False)
    last_name = forms.CharField(required=False)
    password = forms.CharField(widget=forms.PasswordInput, required=False, strip=False)
    preference = forms.CharField(required=False)
    accept_policy = forms.BooleanField(required=False)
    birth_day = forms.IntegerField(required=False)
    birth_month = forms.IntegerField(required=False)
    birth_year = forms.IntegerField(required=False)

    def clean_email(self):
        email = self.cleaned_data['email'].strip()
        if User.objects.filter(email__iexact=email).exists():
            raise forms.ValidationError("Email already exists")
        return email

    def _clean_name(self, field, label):
        value = (self.cleaned_data.get(field) or '').strip()
        if len(value) < 2 or len(value) > 50:
            raise forms.ValidationError(f"{label} must be between 2 and 50 characters")
        if not NAME_RE.match(value):
            raise forms.ValidationError(
                f"{label} can only contain letters, spaces, hyphens, and apostrophes"
            )
        return value

    def clean_first_name(self):
        return self._clean_name('first_name', "First name")

    def clean_last_name(self):
        return self._clean_name('last_name', "Last name")

    def clean_password(self):
        password = self.cleaned_data.get('password') or ''
        if not password:
            raise forms.ValidationError("Password is required")
        if len(password) < 6 or len(password) > 50:
            raise forms.ValidationError("Password must be between 6 and 50 characters")
        if not PASSWORD_RE.match(password):
            raise forms.ValidationError(
                "Password must contain at least one uppercase letter, one lowercase letter, and one number"
            )
        return password

    def clean_preference(self):
        preference = (self.cleaned_data.get('preference') or '').strip()
        if not preference:
            raise forms.ValidationError("Shopping preference is required")
        return preference

    def clean_accept_policy(self):
        if not self.cleaned_data.get('accept_policy'):
            raise forms.ValidationError("You must agree to continue")
        return True

    def clean(self):
        cleaned = super().clean()
        parts = [cleaned.get('birth_day'), cleaned.get('birth_month'), cleaned.get('birth_year')]
        cleaned['date_of_birth'] = None
        if any(p is not None for p in parts):
            if not all(p is not None for p in parts):
                self.add_error('birth_day', "Please complete date of birth (DD/MM/YYYY)")
                return cleaned
            try:
                born = date(parts[2], parts[1], parts[0])
            except ValueError:
                self.add_error('birth_day', "Invalid date of birth")
                return cleaned
            if age_on(born, date.today()) <= MINIMUM_AGE:
                self.add_error('birth_day', f"You must be over {MINIMUM_AGE} years old.")
                return cleaned
            cleaned['date_of_birth'] = born
        return cleaned

    def save(self):
        data = self.cleaned_data
        return User.objects.create_user(
            email=data['email'],
            password=data['password'],
            full_name=f"{data['first_name']} {data['last_name']}".strip(),
            shopping_preference=data['preference'],
            date_of_birth=data.get('date_of_birth'),
        )


class ProfileForm(forms.Form):
    full_name = forms.CharField(max_length=150)
    password = forms.CharField(required=False, strip=False, max_length=50)
    phone_number = forms.CharField(required=False, max_length=20)
    date_of_birth = forms.DateField(required=False)
    gender = forms.CharField(required=False, max_length=20)
    address = forms.CharField(required=False)

    def save(self, user):
        data = self.cleaned_data
        user.full_name = data['full_name'].strip()
        user.phone_number = data['phone_number'].strip() or None
        user.date_of_birth = data['date_of_birth']
        user.gender = data['gender'].strip() or None
        user.address = data['address'].strip() or None
        if data['password']:
            user.set_password(data['password'])
        user.save()
        return user


# -------------------------------
# Back-office
# -------------------------------
class ProductForm(forms.ModelForm):
    class Meta:
        model = Product
        fields = [
            'name', 'description', 'price', 'discount_price', 'image_url',
            'category', 'brand', 'is_featured', 'is_special_deal',
        ]

    def clean_price(self):
        price = self.cleaned_data['price']
        if price < 0:
            raise forms.ValidationError("Price cannot be negative")
        return price


class InventoryCreateForm(forms.Form):
    product_id = forms.IntegerField(min_value=1)
    size = forms.CharField(max_length=20)
    color = forms.CharField(max_length=50)
    stock_quantity = forms.IntegerField()

    def clean(self):
        cleaned = super().clean()
        if self.errors:
            return cleaned
        exists = ProductVariant.objects.filter(
            product_id=cleaned['product_id'],
            size=cleaned['size'],
            color=cleaned['color'],
        ).exists()
        if exists:
            raise forms.ValidationError("Variant with this Size and Color already exists")
        return cleaned


class InventoryUpdateForm(forms.Form):
    """Blank size or color keeps the variant's current value."""

    stock_quantity = forms.IntegerField()
    size = forms.CharField(required=False, max_length=20)
    color = forms.CharField(required=False, max_length=50)

    def __init__(self, *args, instance, **kwargs):
        self.instance = instance
        super().__init__(*args, **kwargs)

    def clean(self):
        cleaned = super().clean()
        if self.errors:
            return cleaned
        cleaned['size'] = cleaned['size'] or self.instance.size
        cleaned['color'] = cleaned['color'] or self.instance.color
        exists = (
            ProductVariant.objects
            .filter(product_id=self.instance.product_id, size=cleaned['size'], color=cleaned['color'])
            .exclude(pk=self.instance.pk)
            .exists()
        )
        if exists:
            raise forms.ValidationError("Variant with this Size and Color already exists")
        return cleaned


class CustomerForm(forms.Form):
    email = forms.EmailField()
    full_name = forms.CharField(max_length=150)
    phone_number = forms.CharField(required=False, max_length=20)
    date_of_birth = forms.DateField(required=False)

    def __init__(self, *args, instance=None, **kwargs):
        self.instance = instance
        super().__init__(*args, **kwargs)

    def clean_email(self):
        email = self.cleaned_data['email'].strip()
        others = User.objects.filter(email__iexact=email)
        if self.instance is not None:
            others = others.exclude(pk=self.instance.pk)
        if others.exists():
            raise forms.ValidationError("Email already exists")
        return email

    def save(self):
        data = self.cleaned_data
        if self.instance is None:
            return User.objects.create_user(
                email=data['email'],
                full_name=data['full_name'],
                phone_number=data['phone_number'] or None,
                date_of_birth=data['date_of_birth'],
            )
        user = self.instance
        user.email = data['email']
        user.full_name = data['full_name']
        user.phone_number = data['phone_number'] or None
        user.date_of_birth = data['date_of_birth']
        user.save()
        return user
